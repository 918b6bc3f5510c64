"""
Daily archival sweep: move every live schedule dated before today into the archive.

Runs at park midnight, but compares against the wall-clock date rather than "yesterday" so a
missed run (server down over midnight) catches up on the next one.
"""
import logging
from dataclasses import dataclass, field
from datetime import date

from ridealert.core.clock import ParkClock, date_key, parse_date_key
from ridealert.core.errors import ValidationError
from ridealert.core.locks import UserLocks
from ridealert.services.types import Archive, DaySchedule
from ridealert.store.base import StateStore

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    archived: list[tuple[str, str]] = field(default_factory=list)  # (user_id, date_key)
    merged: list[tuple[str, str]] = field(default_factory=list)
    skipped_empty: list[tuple[str, str]] = field(default_factory=list)
    failed_dates: list[tuple[str, str]] = field(default_factory=list)
    failed_users: list[str] = field(default_factory=list)


class ArchivalSweep:
    def __init__(self, store: StateStore, locks: UserLocks, clock: ParkClock, *, skip_empty: bool = True) -> None:
        self.store = store
        self.locks = locks
        self.clock = clock
        self.skip_empty = skip_empty

    def sweep(self, today: date | None = None) -> SweepReport:
        today = today or self.clock.today()
        report = SweepReport()
        for user_id in self.store.list_user_ids():
            try:
                with self.locks.for_user(user_id):
                    ok = self._sweep_user(user_id, today, report)
                if not ok:
                    report.failed_users.append(user_id)
            except Exception:
                logger.exception("Archival sweep failed for user %s", user_id)
                report.failed_users.append(user_id)
        logger.info(
            "Archival sweep for %s: %s archived, %s merged, %s empty, %s users failed",
            date_key(today),
            len(report.archived),
            len(report.merged),
            len(report.skipped_empty),
            len(report.failed_users),
        )
        return report

    def _sweep_user(self, user_id: str, today: date, report: SweepReport) -> bool:
        """Sweep one user's past dates; a failing date is logged and the rest still move."""
        ok = True
        for key in self.store.list_schedule_dates(user_id):
            try:
                day = parse_date_key(key)
            except ValidationError:
                logger.warning("Ignoring schedule with bad date key %r for user %s", key, user_id)
                continue
            if day >= today:
                continue
            try:
                self._sweep_date(user_id, key, report)
            except Exception:
                logger.exception("Archival failed for user %s on %s", user_id, key)
                report.failed_dates.append((user_id, key))
                ok = False
        return ok

    def _sweep_date(self, user_id: str, key: str, report: SweepReport) -> None:
        schedule = self.store.get_schedule(user_id, key)
        if schedule.is_empty() and self.skip_empty:
            self.store.delete_schedule(user_id, key)
            report.skipped_empty.append((user_id, key))
            return
        existing = self.store.get_archive(user_id, key)
        if existing is not None:
            logger.warning("Archive already exists for user %s on %s; merging live entries into it", user_id, key)
            schedule = existing.schedule.merged_with(schedule)
            report.merged.append((user_id, key))
        self._archive(user_id, key, schedule)
        report.archived.append((user_id, key))

    def _archive(self, user_id: str, key: str, schedule: DaySchedule) -> None:
        # Archive first: a crash between the two writes leaves a duplicate, never a loss
        self.store.put_archive(user_id, Archive(date_key=key, schedule=schedule, archived_at=self.clock.now()))
        self.store.delete_schedule(user_id, key)
