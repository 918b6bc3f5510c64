"""Protocol for live ride data providers. All providers return the same normalized shape."""
from typing import Protocol

from ridealert.services.types import RideSnapshotEntry


class SnapshotProvider(Protocol):
    """Interface for ThemeParks.wiki (or a fake in tests). Only the fetch differs."""

    def get_snapshot(self, park_key: str) -> dict[str, RideSnapshotEntry]:
        """
        Fetch the current state of every attraction in one park, keyed by ride id,
        in the provider's listing order. Raises on upstream failure.
        """
        ...
