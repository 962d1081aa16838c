"""Adapters - I/O implementations of ports."""

from .json_snapshot import JsonSnapshotStore, SnapshotError

__all__ = [
    "JsonSnapshotStore",
    "SnapshotError",
]
