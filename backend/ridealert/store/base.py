"""Protocol for the state store. Memory and SQL backends satisfy the same contract.

Every getter returns a fresh copy: callers mutate what they get back and write it with the
matching put. Read-modify-write sequences must run under the user's lock (core.locks.UserLocks).
"""
from typing import Protocol

from ridealert.services.types import Archive, DaySchedule, RidePreference


class StateStore(Protocol):
    """Per-entity get/put/delete for everything the notification engine keeps."""

    def list_user_ids(self) -> list[str]:
        """Every user with preferences, schedules, archives or a device token."""
        ...

    # --- ride preferences (per user, per ride) ---

    def get_preferences(self, user_id: str) -> dict[str, RidePreference]: ...

    def put_preferences(self, user_id: str, preferences: dict[str, RidePreference]) -> None:
        """Replace the user's whole preference map."""
        ...

    def put_preference(self, user_id: str, ride_id: str, preference: RidePreference) -> None: ...

    def delete_preference(self, user_id: str, ride_id: str) -> bool: ...

    # --- notified set (replaced wholesale every tick) ---

    def get_notified_rides(self, user_id: str) -> set[str]: ...

    def replace_notified_rides(self, user_id: str, ride_ids: set[str]) -> None: ...

    # --- live schedules (per user, per local date key) ---

    def list_schedule_dates(self, user_id: str) -> list[str]:
        """Date keys with a stored schedule, ascending."""
        ...

    def get_schedule(self, user_id: str, date_key: str) -> DaySchedule:
        """Empty DaySchedule when nothing is stored for the date."""
        ...

    def put_schedule(self, user_id: str, date_key: str, schedule: DaySchedule) -> None: ...

    def delete_schedule(self, user_id: str, date_key: str) -> bool: ...

    # --- archives (per user, per date; written once by the sweep) ---

    def list_archive_dates(self, user_id: str) -> list[str]: ...

    def get_archive(self, user_id: str, date_key: str) -> Archive | None: ...

    def put_archive(self, user_id: str, archive: Archive) -> None: ...

    def delete_archive(self, user_id: str, date_key: str) -> bool: ...

    # --- device registration (at most one token per user) ---

    def get_device_token(self, user_id: str) -> str | None: ...

    def get_device_token_owner(self, token: str) -> str | None:
        """The user currently holding this token, if any."""
        ...

    def put_device_token(self, user_id: str, token: str) -> None: ...

    def delete_device_token(self, user_id: str, expected_token: str | None = None) -> bool:
        """Remove the user's token. With expected_token, only if it still matches. No-op if absent."""
        ...
