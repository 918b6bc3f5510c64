"""In-process state store. Suitable for a single instance; everything is lost on restart."""
import threading

from ridealert.services.types import Archive, DaySchedule, RidePreference


class MemoryStateStore:
    """Dict-backed StateStore. Schedules and archives are copied on the way in and out."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._preferences: dict[str, dict[str, RidePreference]] = {}
        self._notified: dict[str, set[str]] = {}
        self._schedules: dict[str, dict[str, dict]] = {}
        self._archives: dict[str, dict[str, dict]] = {}
        self._tokens: dict[str, str] = {}

    def list_user_ids(self) -> list[str]:
        with self._lock:
            ids = (
                set(self._preferences)
                | set(self._schedules)
                | set(self._archives)
                | set(self._tokens)
                | set(self._notified)
            )
        return sorted(ids)

    # --- ride preferences ---

    def get_preferences(self, user_id: str) -> dict[str, RidePreference]:
        with self._lock:
            return dict(self._preferences.get(user_id, {}))

    def put_preferences(self, user_id: str, preferences: dict[str, RidePreference]) -> None:
        with self._lock:
            self._preferences[user_id] = dict(preferences)

    def put_preference(self, user_id: str, ride_id: str, preference: RidePreference) -> None:
        with self._lock:
            self._preferences.setdefault(user_id, {})[ride_id] = preference

    def delete_preference(self, user_id: str, ride_id: str) -> bool:
        with self._lock:
            return self._preferences.get(user_id, {}).pop(ride_id, None) is not None

    # --- notified set ---

    def get_notified_rides(self, user_id: str) -> set[str]:
        with self._lock:
            return set(self._notified.get(user_id, ()))

    def replace_notified_rides(self, user_id: str, ride_ids: set[str]) -> None:
        with self._lock:
            if ride_ids:
                self._notified[user_id] = set(ride_ids)
            else:
                self._notified.pop(user_id, None)

    # --- live schedules ---

    def list_schedule_dates(self, user_id: str) -> list[str]:
        with self._lock:
            return sorted(self._schedules.get(user_id, {}))

    def get_schedule(self, user_id: str, date_key: str) -> DaySchedule:
        with self._lock:
            raw = self._schedules.get(user_id, {}).get(date_key)
        return DaySchedule.from_dict(raw)

    def put_schedule(self, user_id: str, date_key: str, schedule: DaySchedule) -> None:
        raw = schedule.to_dict()
        with self._lock:
            self._schedules.setdefault(user_id, {})[date_key] = raw

    def delete_schedule(self, user_id: str, date_key: str) -> bool:
        with self._lock:
            days = self._schedules.get(user_id)
            if not days or date_key not in days:
                return False
            del days[date_key]
            if not days:
                del self._schedules[user_id]
            return True

    # --- archives ---

    def list_archive_dates(self, user_id: str) -> list[str]:
        with self._lock:
            return sorted(self._archives.get(user_id, {}))

    def get_archive(self, user_id: str, date_key: str) -> Archive | None:
        with self._lock:
            raw = self._archives.get(user_id, {}).get(date_key)
        return Archive.from_dict(raw) if raw is not None else None

    def put_archive(self, user_id: str, archive: Archive) -> None:
        raw = archive.to_dict()
        with self._lock:
            self._archives.setdefault(user_id, {})[archive.date_key] = raw

    def delete_archive(self, user_id: str, date_key: str) -> bool:
        with self._lock:
            days = self._archives.get(user_id)
            if not days or date_key not in days:
                return False
            del days[date_key]
            if not days:
                del self._archives[user_id]
            return True

    # --- device registration ---

    def get_device_token(self, user_id: str) -> str | None:
        with self._lock:
            return self._tokens.get(user_id)

    def get_device_token_owner(self, token: str) -> str | None:
        with self._lock:
            return next((uid for uid, t in self._tokens.items() if t == token), None)

    def put_device_token(self, user_id: str, token: str) -> None:
        with self._lock:
            # A device belongs to whoever registered it last
            for other, other_token in list(self._tokens.items()):
                if other != user_id and other_token == token:
                    del self._tokens[other]
            self._tokens[user_id] = token

    def delete_device_token(self, user_id: str, expected_token: str | None = None) -> bool:
        with self._lock:
            current = self._tokens.get(user_id)
            if current is None:
                return False
            if expected_token is not None and current != expected_token:
                return False
            del self._tokens[user_id]
            return True
