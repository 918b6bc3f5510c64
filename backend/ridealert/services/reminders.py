"""
Scheduled-event reminders for one user's day.

Shows have two stages: "head to the show" at target - travel time and "starting soon" at
target - FINAL_WARNING_MINUTES. Dining and Lightning Lanes have the first stage only.
Each stage fires once: its flag flips to True here and only an edit of the event's time or
travel time (schedule_service) sets it back to False.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ridealert.services.types import DaySchedule, ScheduledEvent, Show

logger = logging.getLogger(__name__)


class ReminderStage(str, Enum):
    REMINDER = "reminder"
    FINAL_WARNING = "final_warning"


@dataclass(frozen=True)
class ReminderHit:
    item: ScheduledEvent
    stage: ReminderStage


def _is_well_formed(item: ScheduledEvent) -> bool:
    target = getattr(item, "target_time", None)
    travel = getattr(item, "travel_time_minutes", None)
    return (
        isinstance(target, datetime)
        and target.tzinfo is not None
        and isinstance(travel, int)
        and not isinstance(travel, bool)
        and travel >= 0
    )


def evaluate_reminders(schedule: DaySchedule, now: datetime) -> list[ReminderHit]:
    """
    Flip flags in place on `schedule` and return one hit per stage that fired, in schedule order.
    Both show stages can fire in the same call when the travel time is short.
    """
    hits: list[ReminderHit] = []
    for item in schedule.items():
        if not _is_well_formed(item):
            logger.warning("Skipping malformed %s item %r", getattr(item, "kind", "schedule"), getattr(item, "id", None))
            continue
        if not item.notified and now >= item.reminder_time:
            item.notified = True
            hits.append(ReminderHit(item=item, stage=ReminderStage.REMINDER))
        if isinstance(item, Show) and not item.final_warning_notified and now >= item.final_warning_time:
            item.final_warning_notified = True
            hits.append(ReminderHit(item=item, stage=ReminderStage.FINAL_WARNING))
    return hits
