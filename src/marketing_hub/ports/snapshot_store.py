"""Snapshot store interface."""

from typing import Protocol

from marketing_hub.core.state import HubState


class SnapshotStore(Protocol):
    """Interface for loading and saving the hub snapshot from any backend."""

    def load(self) -> HubState:
        """Load the current snapshot. Returns an empty state if none exists."""
        ...

    def save(self, state: HubState) -> None:
        """Persist a snapshot, replacing the previous one."""
        ...
