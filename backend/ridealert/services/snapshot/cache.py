"""
Last-known-good snapshot per park.

A failed refresh keeps the previous snapshot; a park that has never loaded is reported as
missing so the engine can avoid treating "no data" as "not ready".
"""
import logging
import threading
from datetime import datetime

from ridealert.core.clock import ParkClock
from ridealert.services.snapshot.base import SnapshotProvider
from ridealert.services.types import LiveSnapshot, RideSnapshotEntry

logger = logging.getLogger(__name__)


class SnapshotCache:
    def __init__(self, provider: SnapshotProvider, clock: ParkClock, park_keys: list[str]) -> None:
        self._provider = provider
        self._clock = clock
        self._park_keys = list(park_keys)
        self._snapshots: dict[str, dict[str, RideSnapshotEntry]] = {}
        self._last_updated: dict[str, datetime] = {}
        self._lock = threading.Lock()

    @property
    def park_keys(self) -> list[str]:
        return list(self._park_keys)

    def refresh_park(self, park_key: str) -> bool:
        """Fetch one park. Returns False (and keeps the old snapshot) on any failure."""
        try:
            entries = self._provider.get_snapshot(park_key)
        except Exception as e:
            logger.warning("Snapshot refresh failed for %s (keeping last good): %s", park_key, e, exc_info=True)
            return False
        with self._lock:
            self._snapshots[park_key] = dict(entries)
            self._last_updated[park_key] = self._clock.now()
        logger.info("Updated %s snapshot: %s rides", park_key, len(entries))
        return True

    def refresh_all(self) -> dict[str, bool]:
        return {key: self.refresh_park(key) for key in self._park_keys}

    def park(self, park_key: str) -> dict[str, RideSnapshotEntry] | None:
        with self._lock:
            entries = self._snapshots.get(park_key)
            return dict(entries) if entries is not None else None

    def last_updated(self, park_key: str) -> datetime | None:
        with self._lock:
            return self._last_updated.get(park_key)

    def combined(self) -> LiveSnapshot:
        """All parks merged in catalog order; parks never loaded go to missing_parks."""
        merged: dict[str, RideSnapshotEntry] = {}
        missing: list[str] = []
        with self._lock:
            for key in self._park_keys:
                entries = self._snapshots.get(key)
                if entries is None:
                    missing.append(key)
                    continue
                merged.update(entries)
        return LiveSnapshot(entries=merged, missing_parks=tuple(missing))
