"""Domain types shared by the evaluators, the store and the API.

Dict forms use the camelCase keys the mobile app sends (maxWait, targetTime, travelTimeMinutes, ...).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, ClassVar, Mapping

from ridealert.core.constants import FINAL_WARNING_MINUTES

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Live data
# ---------------------------------------------------------------------------


class RideStatus(str, Enum):
    OPERATING = "OPERATING"
    DOWN = "DOWN"
    REFURBISHMENT = "REFURBISHMENT"
    CLOSED = "CLOSED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> "RideStatus":
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class RideSnapshotEntry:
    """One ride in one poll cycle. Display-only extras are optional."""

    ride_id: str
    name: str
    status: RideStatus
    current_wait: int = 0
    park_key: str = ""
    land: str = "Other"
    single_rider_wait: int | None = None
    return_state: str | None = None
    return_time: str | None = None
    paid_return_state: str | None = None
    paid_return_time: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.ride_id,
            "name": self.name,
            "status": self.status.value,
            "currentWait": self.current_wait,
            "park": self.park_key,
            "land": self.land,
            "singleRiderWait": self.single_rider_wait,
            "returnState": self.return_state,
            "returnTime": self.return_time,
            "paidReturnState": self.paid_return_state,
            "paidReturnTime": self.paid_return_time,
        }


@dataclass(frozen=True)
class LiveSnapshot:
    """Merged view of every park for one tick; missing_parks have no data at all yet."""

    entries: dict[str, RideSnapshotEntry] = field(default_factory=dict)
    missing_parks: tuple[str, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.missing_parks


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RidePreference:
    enabled: bool = True
    max_wait: int = 30

    def to_dict(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "maxWait": self.max_wait}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RidePreference":
        raw_wait = data["maxWait"] if "maxWait" in data else data["max_wait"]
        if isinstance(raw_wait, bool):
            raise TypeError("maxWait must be a number")
        max_wait = int(raw_wait)
        if max_wait < 0:
            raise ValueError("maxWait must be >= 0")
        return cls(enabled=bool(data.get("enabled", True)), max_wait=max_wait)

    @classmethod
    def coerce(cls, value: Any) -> "RidePreference | None":
        """Accept a RidePreference or its dict form; None when malformed."""
        if isinstance(value, RidePreference):
            return value
        if isinstance(value, Mapping):
            try:
                return cls.from_dict(value)
            except (KeyError, TypeError, ValueError):
                return None
        return None


# ---------------------------------------------------------------------------
# Scheduled personal events
# ---------------------------------------------------------------------------


class EventKind(str, Enum):
    SHOW = "show"
    DINING = "dining"
    LIGHTNING_LANE = "lightning_lane"


@dataclass
class ScheduledEvent:
    id: str
    label: str
    target_time: datetime
    travel_time_minutes: int = 0
    notified: bool = False

    kind: ClassVar[EventKind]

    @property
    def reminder_time(self) -> datetime:
        return self.target_time - timedelta(minutes=self.travel_time_minutes)

    def reset_flags(self) -> None:
        self.notified = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "targetTime": self.target_time.isoformat(),
            "travelTimeMinutes": self.travel_time_minutes,
            "notified": self.notified,
        }

    @classmethod
    def _base_kwargs(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        target = data["targetTime"]
        if isinstance(target, str):
            target = datetime.fromisoformat(target)
        if not isinstance(target, datetime):
            raise TypeError(f"targetTime must be a datetime, got {type(target).__name__}")
        return {
            "id": str(data["id"]),
            "label": str(data.get("label") or ""),
            "target_time": target,
            "travel_time_minutes": int(data.get("travelTimeMinutes") or 0),
            "notified": bool(data.get("notified", False)),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        return cls(**cls._base_kwargs(data))


@dataclass
class Show(ScheduledEvent):
    final_warning_notified: bool = False

    kind: ClassVar[EventKind] = EventKind.SHOW

    @property
    def final_warning_time(self) -> datetime:
        return self.target_time - timedelta(minutes=FINAL_WARNING_MINUTES)

    def reset_flags(self) -> None:
        self.notified = False
        self.final_warning_notified = False

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["finalWarningNotified"] = self.final_warning_notified
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Show":
        return cls(
            **cls._base_kwargs(data),
            final_warning_notified=bool(data.get("finalWarningNotified", False)),
        )


@dataclass
class Dining(ScheduledEvent):
    kind: ClassVar[EventKind] = EventKind.DINING


@dataclass
class LightningLane(ScheduledEvent):
    """id is the ride id: one return window per ride per day."""

    kind: ClassVar[EventKind] = EventKind.LIGHTNING_LANE


EVENT_TYPES: dict[EventKind, type[ScheduledEvent]] = {
    EventKind.SHOW: Show,
    EventKind.DINING: Dining,
    EventKind.LIGHTNING_LANE: LightningLane,
}


@dataclass
class DaySchedule:
    """One user's shows, dining and Lightning Lanes for one local park date."""

    shows: list[Show] = field(default_factory=list)
    dining: list[Dining] = field(default_factory=list)
    lightning_lanes: dict[str, LightningLane] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.shows or self.dining or self.lightning_lanes)

    def items(self) -> list[ScheduledEvent]:
        """Stable evaluation order: shows, dining, then Lightning Lanes in insertion order."""
        return [*self.shows, *self.dining, *self.lightning_lanes.values()]

    def find(self, kind: EventKind, item_id: str) -> ScheduledEvent | None:
        if kind is EventKind.LIGHTNING_LANE:
            return self.lightning_lanes.get(item_id)
        items = self.shows if kind is EventKind.SHOW else self.dining
        return next((i for i in items if i.id == item_id), None)

    def add(self, item: ScheduledEvent) -> None:
        if isinstance(item, Show):
            self.shows.append(item)
        elif isinstance(item, Dining):
            self.dining.append(item)
        elif isinstance(item, LightningLane):
            self.lightning_lanes[item.id] = item
        else:
            raise TypeError(f"Unsupported schedule item: {type(item).__name__}")

    def remove(self, kind: EventKind, item_id: str) -> ScheduledEvent | None:
        item = self.find(kind, item_id)
        if item is None:
            return None
        if kind is EventKind.LIGHTNING_LANE:
            del self.lightning_lanes[item_id]
        elif kind is EventKind.SHOW:
            self.shows.remove(item)
        else:
            self.dining.remove(item)
        return item

    def merged_with(self, other: "DaySchedule") -> "DaySchedule":
        merged = DaySchedule.from_dict(self.to_dict())
        for item in DaySchedule.from_dict(other.to_dict()).items():
            if merged.find(item.kind, item.id) is not None:
                continue
            merged.add(item)
        return merged

    def to_dict(self) -> dict[str, Any]:
        return {
            "shows": [s.to_dict() for s in self.shows],
            "dining": [d.to_dict() for d in self.dining],
            "lightningLanes": {rid: ll.to_dict() for rid, ll in self.lightning_lanes.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "DaySchedule":
        """Tolerant load: malformed items are logged and left out, the rest of the day survives."""
        data = data or {}
        schedule = cls()
        for key, event_type in (("shows", Show), ("dining", Dining)):
            raw_items = data.get(key) or []
            if not isinstance(raw_items, list):
                logger.warning("Skipping malformed %s list: %r", key, raw_items)
                continue
            for raw in raw_items:
                item = _parse_event(event_type, raw)
                if item is not None:
                    schedule.add(item)
        lanes = data.get("lightningLanes") or {}
        if not isinstance(lanes, Mapping):
            logger.warning("Skipping malformed lightningLanes map: %r", lanes)
            lanes = {}
        for rid, raw in lanes.items():
            item = _parse_event(LightningLane, raw)
            if item is not None:
                schedule.lightning_lanes[str(rid)] = item
        return schedule


def _parse_event(event_type: type[ScheduledEvent], raw: Any) -> ScheduledEvent | None:
    if isinstance(raw, Mapping):
        try:
            return event_type.from_dict(raw)
        except (KeyError, TypeError, ValueError):
            pass
    logger.warning("Skipping malformed %s entry: %r", event_type.kind.value, raw)
    return None


@dataclass(frozen=True)
class Archive:
    """Immutable copy of one past day's schedule."""

    date_key: str
    schedule: DaySchedule
    archived_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date_key,
            "archivedAt": self.archived_at.isoformat(),
            **self.schedule.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Archive":
        archived_at = data["archivedAt"]
        if isinstance(archived_at, str):
            archived_at = datetime.fromisoformat(archived_at)
        return cls(date_key=data["date"], schedule=DaySchedule.from_dict(data), archived_at=archived_at)
