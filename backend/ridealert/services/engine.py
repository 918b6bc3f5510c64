"""
Notification engine: one tick = read the live snapshot, evaluate every user, dispatch.

Per user, under that user's lock:
  1. ride readiness against the snapshot; the notified set is replaced with what is ready now
  2. today's schedule reminders; flipped flags are written back before anything is sent
Messages from all users are collected and handed to the dispatcher once per tick.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime

from ridealert.core.clock import ParkClock
from ridealert.core.locks import UserLocks
from ridealert.services.dispatcher import DispatchReport, NotificationDispatcher
from ridealert.services.messages import reminder_message, ride_ready_message
from ridealert.services.push.base import PushMessage
from ridealert.services.readiness import evaluate_readiness
from ridealert.services.reminders import evaluate_reminders
from ridealert.services.snapshot.cache import SnapshotCache
from ridealert.services.types import LiveSnapshot
from ridealert.store.base import StateStore

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    users: int = 0
    ride_messages: int = 0
    reminder_messages: int = 0
    failed_users: list[str] = field(default_factory=list)
    dispatch: DispatchReport | None = None


class NotificationEngine:
    def __init__(
        self,
        store: StateStore,
        locks: UserLocks,
        clock: ParkClock,
        cache: SnapshotCache,
        dispatcher: NotificationDispatcher,
    ) -> None:
        self.store = store
        self.locks = locks
        self.clock = clock
        self.cache = cache
        self.dispatcher = dispatcher

    def run_tick(self, now: datetime | None = None) -> TickReport:
        now = self.clock.localize(now) if now is not None else self.clock.now()
        today_key = self.clock.date_key_for(now)
        snapshot = self.cache.combined()
        if snapshot.missing_parks:
            logger.warning("No snapshot yet for %s; their rides keep their notified state", ", ".join(snapshot.missing_parks))

        report = TickReport()
        messages: list[PushMessage] = []
        for user_id in self.store.list_user_ids():
            report.users += 1
            with self.locks.for_user(user_id):
                ride_msg, reminder_msgs, ok = self._evaluate_user(user_id, snapshot, today_key, now)
            if not ok:
                report.failed_users.append(user_id)
            if ride_msg is not None:
                messages.append(ride_msg)
                report.ride_messages += 1
            messages.extend(reminder_msgs)
            report.reminder_messages += len(reminder_msgs)

        if messages:
            report.dispatch = self.dispatcher.dispatch(messages)
        logger.info(
            "Tick %s: %s users, %s ride alerts, %s reminders, %s failed",
            now.strftime("%Y-%m-%d %H:%M"),
            report.users,
            report.ride_messages,
            report.reminder_messages,
            len(report.failed_users),
        )
        return report

    def _evaluate_user(
        self, user_id: str, snapshot: LiveSnapshot, today_key: str, now: datetime
    ) -> tuple[PushMessage | None, list[PushMessage], bool]:
        """Rides and reminders fail independently; whatever one side collected is still sent."""
        try:
            token = self.store.get_device_token(user_id)
        except Exception:
            logger.exception("Could not load push token for user %s", user_id)
            return None, [], False
        ok = True
        ride_msg = None
        reminder_msgs: list[PushMessage] = []
        try:
            ride_msg = self._evaluate_rides(user_id, token, snapshot)
        except Exception:
            logger.exception("Ride evaluation failed for user %s", user_id)
            ok = False
        try:
            reminder_msgs = self._evaluate_reminders(user_id, token, today_key, now)
        except Exception:
            logger.exception("Reminder evaluation failed for user %s", user_id)
            ok = False
        return ride_msg, reminder_msgs, ok

    def _evaluate_rides(self, user_id: str, token: str | None, snapshot: LiveSnapshot) -> PushMessage | None:
        previous = self.store.get_notified_rides(user_id)
        if not snapshot.entries and not snapshot.complete:
            # Nothing loaded at all: "no data" must not re-arm every ride
            return None
        preferences = self.store.get_preferences(user_id)
        result = evaluate_readiness(preferences, snapshot.entries, previous)
        current = set(result.currently_ready)
        if not snapshot.complete:
            current |= {ride_id for ride_id in previous if ride_id not in snapshot.entries}
        message = None
        if result.newly_ready and token:
            rides = [snapshot.entries[ride_id] for ride_id in result.newly_ready]
            message = ride_ready_message(user_id, token, rides)
        elif result.newly_ready:
            logger.debug("User %s has %s newly ready rides but no push token", user_id, len(result.newly_ready))
        # Recorded only once the message exists, so a failure above re-offers the rides next tick
        if current != previous:
            self.store.replace_notified_rides(user_id, current)
        return message

    def _evaluate_reminders(self, user_id: str, token: str | None, today_key: str, now: datetime) -> list[PushMessage]:
        schedule = self.store.get_schedule(user_id, today_key)
        if schedule.is_empty():
            return []
        hits = evaluate_reminders(schedule, now)
        if not hits:
            return []
        self.store.put_schedule(user_id, today_key, schedule)
        if not token:
            logger.debug("User %s has %s due reminders but no push token", user_id, len(hits))
            return []
        return [reminder_message(user_id, token, hit, today_key, self.clock) for hit in hits]
