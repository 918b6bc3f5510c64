"""
Park clock: wall-clock "now" expressed in the park's timezone.

Every date key (schedules, archives) and every reminder comparison goes through this so
that a reminder near midnight never lands on the UTC day instead of the park day.
"""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Callable
from zoneinfo import ZoneInfo

from ridealert.core.constants import DATE_KEY_FORMAT
from ridealert.core.errors import ValidationError


def parse_date_key(value: str) -> date:
    """Parse a YYYY-MM-DD key. Raises ValidationError on anything else."""
    try:
        return datetime.strptime((value or "").strip(), DATE_KEY_FORMAT).date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}. Use YYYY-MM-DD.") from None


def date_key(day: date) -> str:
    return day.strftime(DATE_KEY_FORMAT)


class ParkClock:
    """Converts wall-clock time to the park's local calendar day and local time."""

    def __init__(self, timezone_name: str, now_fn: Callable[[], datetime] | None = None) -> None:
        self.tz = ZoneInfo(timezone_name)
        self._now_fn = now_fn

    def now(self) -> datetime:
        current = self._now_fn() if self._now_fn else datetime.now(self.tz)
        return self.localize(current)

    def today(self) -> date:
        return self.now().date()

    def today_key(self) -> str:
        return date_key(self.today())

    def localize(self, dt: datetime) -> datetime:
        """Aware datetimes are converted to park time; naive ones are taken as park-local."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=self.tz)
        return dt.astimezone(self.tz)

    def date_key_for(self, dt: datetime) -> str:
        return date_key(self.localize(dt).date())

    def at(self, day: date, hour: int, minute: int = 0) -> datetime:
        return datetime.combine(day, time(hour, minute), tzinfo=self.tz)

    def format_time(self, dt: datetime) -> str:
        """12-hour local time, e.g. '2:05 PM'."""
        local = self.localize(dt)
        hour = local.hour % 12 or 12
        return f"{hour}:{local.minute:02d} {'AM' if local.hour < 12 else 'PM'}"
