"""File-based snapshot storage adapter."""

import json
import logging
from pathlib import Path

from marketing_hub.core.state import HubState

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Raised when a stored snapshot cannot be read."""

    pass


class JsonSnapshotStore:
    """
    JSON file snapshot storage.

    Implements SnapshotStore protocol. The whole hub state lives in one
    document, mirroring the shape the UI syncs.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self) -> HubState:
        """Load the snapshot. Returns an empty state if the file is missing."""
        if not self.path.exists():
            logger.info(f"No snapshot at {self.path}, starting empty")
            return HubState()

        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Invalid JSON in {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise SnapshotError(f"Snapshot {self.path} must hold a JSON object")

        try:
            return HubState.from_dict(data)
        except (KeyError, ValueError, TypeError) as e:
            raise SnapshotError(f"Malformed record in {self.path}: {e}") from e

    def save(self, state: HubState) -> None:
        """Write the snapshot, creating parent directories."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(state.to_dict(), indent=2, ensure_ascii=False))
        logger.debug(f"Saved snapshot to {self.path}")
