"""
Schedule mutations: shows, dining reservations and Lightning Lane return windows.

Items live under the local park date of their target time. Editing the target time or the
travel time re-arms the item's reminders; moving the target time to another day moves the
item to that day's schedule. Every read-modify-write runs under the user's lock so the
minute tick can't flip a flag on a copy we are about to overwrite.
"""
import logging
import uuid
from datetime import datetime

from ridealert.core.clock import ParkClock, parse_date_key
from ridealert.core.errors import ConflictError, NotFoundError, ValidationError
from ridealert.core.locks import UserLocks
from ridealert.services.types import EVENT_TYPES, DaySchedule, EventKind, ScheduledEvent
from ridealert.store.base import StateStore

logger = logging.getLogger(__name__)


def _check_travel(travel_time_minutes: int | None) -> None:
    if travel_time_minutes is not None and travel_time_minutes < 0:
        raise ValidationError("travelTimeMinutes must be >= 0")


def _check_not_past(clock: ParkClock, key: str) -> None:
    if parse_date_key(key) < clock.today():
        raise ValidationError(f"Cannot schedule for {key}: date is in the past")


def _save(store: StateStore, user_id: str, key: str, schedule: DaySchedule) -> None:
    if schedule.is_empty():
        store.delete_schedule(user_id, key)
    else:
        store.put_schedule(user_id, key, schedule)


def get_schedule(store: StateStore, user_id: str, date_key: str) -> dict:
    parse_date_key(date_key)
    return {"date": date_key, **store.get_schedule(user_id, date_key).to_dict()}


def create_item(
    store: StateStore,
    locks: UserLocks,
    clock: ParkClock,
    user_id: str,
    kind: EventKind,
    *,
    label: str,
    target_time: datetime,
    travel_time_minutes: int = 0,
    item_id: str | None = None,
) -> tuple[str, ScheduledEvent]:
    """
    Add an item on the park date of target_time. Lightning Lanes are keyed by ride id
    (item_id is required and must not already exist that day); shows and dining get a new id.
    """
    _check_travel(travel_time_minutes)
    target = clock.localize(target_time)
    key = clock.date_key_for(target)
    _check_not_past(clock, key)
    if kind is EventKind.LIGHTNING_LANE:
        if not item_id:
            raise ValidationError("rideId is required for a Lightning Lane")
    else:
        item_id = uuid.uuid4().hex
    item = EVENT_TYPES[kind](
        id=str(item_id),
        label=label,
        target_time=target,
        travel_time_minutes=travel_time_minutes,
    )
    with locks.for_user(user_id):
        schedule = store.get_schedule(user_id, key)
        if schedule.find(kind, item.id) is not None:
            raise ConflictError(f"A Lightning Lane for ride {item.id} already exists on {key}")
        schedule.add(item)
        store.put_schedule(user_id, key, schedule)
    logger.info("Added %s %s for user %s on %s", kind.value, item.id, user_id, key)
    return key, item


def update_item(
    store: StateStore,
    locks: UserLocks,
    clock: ParkClock,
    user_id: str,
    kind: EventKind,
    date_key: str,
    item_id: str,
    *,
    label: str | None = None,
    target_time: datetime | None = None,
    travel_time_minutes: int | None = None,
) -> tuple[str, ScheduledEvent]:
    """Returns the (possibly new) date key and the updated item."""
    parse_date_key(date_key)
    _check_travel(travel_time_minutes)
    with locks.for_user(user_id):
        schedule = store.get_schedule(user_id, date_key)
        item = schedule.find(kind, item_id)
        if item is None:
            raise NotFoundError(f"No {kind.value} {item_id} on {date_key}")

        timing_changed = False
        if target_time is not None:
            target = clock.localize(target_time)
            timing_changed = target != item.target_time
            item.target_time = target
        if travel_time_minutes is not None and travel_time_minutes != item.travel_time_minutes:
            item.travel_time_minutes = travel_time_minutes
            timing_changed = True
        if label is not None:
            item.label = label
        if timing_changed:
            item.reset_flags()

        new_key = clock.date_key_for(item.target_time)
        if new_key == date_key:
            store.put_schedule(user_id, date_key, schedule)
            return date_key, item

        _check_not_past(clock, new_key)
        target_day = store.get_schedule(user_id, new_key)
        if target_day.find(kind, item_id) is not None:
            raise ConflictError(f"A {kind.value} {item_id} already exists on {new_key}")
        schedule.remove(kind, item_id)
        target_day.add(item)
        store.put_schedule(user_id, new_key, target_day)
        _save(store, user_id, date_key, schedule)
    logger.info("Moved %s %s for user %s from %s to %s", kind.value, item_id, user_id, date_key, new_key)
    return new_key, item


def delete_item(
    store: StateStore, locks: UserLocks, user_id: str, kind: EventKind, date_key: str, item_id: str
) -> None:
    parse_date_key(date_key)
    with locks.for_user(user_id):
        schedule = store.get_schedule(user_id, date_key)
        if schedule.remove(kind, item_id) is None:
            raise NotFoundError(f"No {kind.value} {item_id} on {date_key}")
        _save(store, user_id, date_key, schedule)
