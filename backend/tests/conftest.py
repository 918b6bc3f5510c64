"""
Shared fixtures: a clock pinned to park time, the in-memory store, a fake live-data provider
and a recording push gateway. Env is set before anything imports ridealert.config.
"""
import os

os.environ["STATE_BACKEND"] = "memory"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["PUSH_PROVIDER"] = "expo"
os.environ["PARK_TIMEZONE"] = "America/Los_Angeles"

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from ridealert.config import Settings
from ridealert.core.clock import ParkClock
from ridealert.core.locks import UserLocks
from ridealert.deps import build_deps
from ridealert.services.push.base import DeliveryErrorKind, DeliveryResult, PushMessage
from ridealert.services.types import RideSnapshotEntry, RideStatus
from ridealert.store import MemoryStateStore

PARK_TZ = ZoneInfo("America/Los_Angeles")


def park_time(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=PARK_TZ)


def ride(ride_id: str, wait: int, status: RideStatus = RideStatus.OPERATING, park: str = "disneyland") -> RideSnapshotEntry:
    return RideSnapshotEntry(ride_id=ride_id, name=f"Ride {ride_id}", status=status, current_wait=wait, park_key=park)


def token_for(user_id: str) -> str:
    return f"ExponentPushToken[{user_id}]"


class MutableNow:
    """Callable clock source; tests move it with .set()."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value


class FakeProvider:
    """SnapshotProvider returning canned rides per park; parks in .failing raise."""

    def __init__(self):
        self.parks: dict[str, dict[str, RideSnapshotEntry]] = {"disneyland": {}, "californiaadventure": {}}
        self.failing: set[str] = set()
        self.calls: list[str] = []

    def set_rides(self, park_key: str, *entries: RideSnapshotEntry) -> None:
        self.parks[park_key] = {e.ride_id: e for e in entries}

    def get_snapshot(self, park_key: str) -> dict[str, RideSnapshotEntry]:
        self.calls.append(park_key)
        if park_key in self.failing:
            raise RuntimeError(f"{park_key} upstream down")
        return dict(self.parks.get(park_key, {}))


class RecordingGateway:
    """DeliveryGateway that records batches and answers from a per-token outcome table."""

    def __init__(self, max_batch_size: int = 100):
        self._max_batch_size = max_batch_size
        self.batches: list[list[PushMessage]] = []
        self.outcomes: dict[str, DeliveryErrorKind] = {}

    @property
    def max_batch_size(self) -> int:
        return self._max_batch_size

    @property
    def sent(self) -> list[PushMessage]:
        return [m for batch in self.batches for m in batch]

    def is_valid_address(self, token: str) -> bool:
        return bool(token) and token.startswith("ExponentPushToken[") and token.endswith("]")

    def send_batch(self, messages: list[PushMessage]) -> list[DeliveryResult]:
        self.batches.append(list(messages))
        results = []
        for m in messages:
            kind = self.outcomes.get(m.token)
            results.append(DeliveryResult.failure(m.token, kind) if kind else DeliveryResult.success(m.token))
        return results


@pytest.fixture
def now():
    return MutableNow(park_time(2025, 6, 14, 10, 0))


@pytest.fixture
def clock(now):
    return ParkClock("America/Los_Angeles", now_fn=now)


@pytest.fixture
def store():
    return MemoryStateStore()


@pytest.fixture
def locks():
    return UserLocks()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def settings():
    return Settings(state_backend="memory", push_provider="expo", scheduler_enabled=False)


@pytest.fixture
def deps(settings, store, provider, gateway, now):
    return build_deps(settings, store=store, provider=provider, gateway=gateway, now_fn=now)
