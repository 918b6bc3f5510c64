"""Push copy for each notification category."""
from ridealert.core.clock import ParkClock
from ridealert.core.constants import (
    CATEGORY_DINING_REMINDER,
    CATEGORY_LIGHTNING_LANE_REMINDER,
    CATEGORY_RIDE_READY,
    CATEGORY_SHOW_FINAL_WARNING,
    CATEGORY_SHOW_REMINDER,
    FINAL_WARNING_MINUTES,
)
from ridealert.services.push.base import PushMessage
from ridealert.services.reminders import ReminderHit, ReminderStage
from ridealert.services.types import EventKind, RideSnapshotEntry


def ride_ready_body(rides: list[RideSnapshotEntry]) -> str:
    """One ride: name and wait. Several: the first one plus a count of the others."""
    first = rides[0]
    if len(rides) == 1:
        return f"{first.name} has a {first.current_wait} min wait"
    others = len(rides) - 1
    noun = "ride" if others == 1 else "rides"
    return f"{first.name} ({first.current_wait} min) and {others} other {noun} are ready"


def ride_ready_message(user_id: str, token: str, rides: list[RideSnapshotEntry]) -> PushMessage:
    if not rides:
        raise ValueError("ride_ready_message needs at least one ride")
    return PushMessage(
        user_id=user_id,
        token=token,
        title="Ride ready!" if len(rides) == 1 else "Rides ready!",
        body=ride_ready_body(rides),
        category=CATEGORY_RIDE_READY,
        payload={
            "type": CATEGORY_RIDE_READY,
            "rideIds": [r.ride_id for r in rides],
        },
    )


def reminder_message(user_id: str, token: str, hit: ReminderHit, date_key: str, clock: ParkClock) -> PushMessage:
    item = hit.item
    at = clock.format_time(item.target_time)
    if item.kind is EventKind.SHOW and hit.stage is ReminderStage.FINAL_WARNING:
        category = CATEGORY_SHOW_FINAL_WARNING
        title = f"{item.label} starting soon"
        body = f"{item.label} starts in about {FINAL_WARNING_MINUTES} minutes ({at})."
    elif item.kind is EventKind.SHOW:
        category = CATEGORY_SHOW_REMINDER
        title = f"Head to {item.label}"
        body = f"{item.label} starts at {at}."
        if item.travel_time_minutes:
            body += f" Leave now to get there in about {item.travel_time_minutes} min."
    elif item.kind is EventKind.DINING:
        category = CATEGORY_DINING_REMINDER
        title = "Dining reservation"
        body = f"Head to {item.label} for your {at} reservation."
    else:
        category = CATEGORY_LIGHTNING_LANE_REMINDER
        title = "Lightning Lane ready"
        body = f"Your Lightning Lane return for {item.label} starts at {at}. Head over now."
    return PushMessage(
        user_id=user_id,
        token=token,
        title=title,
        body=body,
        category=category,
        payload={
            "type": category,
            "date": date_key,
            "eventId": item.id,
            "stage": hit.stage.value,
        },
    )
