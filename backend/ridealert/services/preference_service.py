"""
Ride preferences: which rides a user watches and the longest wait they will accept.
"""
import logging
from typing import Any, Mapping

from ridealert.core.errors import NotFoundError, ValidationError
from ridealert.core.locks import UserLocks
from ridealert.services.readiness import is_ready
from ridealert.services.snapshot.cache import SnapshotCache
from ridealert.services.types import RidePreference
from ridealert.store.base import StateStore

logger = logging.getLogger(__name__)


def _parse(ride_id: str, raw: Any) -> RidePreference:
    if not isinstance(raw, Mapping):
        raise ValidationError(f"Preference for ride {ride_id} must be an object")
    try:
        return RidePreference.from_dict(raw)
    except KeyError:
        raise ValidationError(f"Preference for ride {ride_id} is missing maxWait") from None
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Preference for ride {ride_id}: {e}") from None


def get_preferences(store: StateStore, user_id: str) -> dict[str, dict]:
    return {ride_id: pref.to_dict() for ride_id, pref in store.get_preferences(user_id).items()}


def replace_preferences(
    store: StateStore, locks: UserLocks, user_id: str, raw: Mapping[str, Any]
) -> dict[str, dict]:
    """Replace the whole map. Validates everything before writing anything."""
    parsed = {str(ride_id): _parse(ride_id, value) for ride_id, value in raw.items()}
    with locks.for_user(user_id):
        store.put_preferences(user_id, parsed)
    logger.info("Saved %s ride preferences for user %s", len(parsed), user_id)
    return {ride_id: pref.to_dict() for ride_id, pref in parsed.items()}


def update_preference(
    store: StateStore,
    locks: UserLocks,
    user_id: str,
    ride_id: str,
    *,
    enabled: bool | None = None,
    max_wait: int | None = None,
) -> dict:
    """Patch one ride; unset fields keep their stored (or default) value."""
    if max_wait is not None and max_wait < 0:
        raise ValidationError("maxWait must be >= 0")
    with locks.for_user(user_id):
        current = store.get_preferences(user_id).get(ride_id) or RidePreference()
        updated = RidePreference(
            enabled=current.enabled if enabled is None else enabled,
            max_wait=current.max_wait if max_wait is None else max_wait,
        )
        store.put_preference(user_id, ride_id, updated)
    return updated.to_dict()


def delete_preference(store: StateStore, locks: UserLocks, user_id: str, ride_id: str) -> None:
    with locks.for_user(user_id):
        if not store.delete_preference(user_id, ride_id):
            raise NotFoundError(f"No preference for ride {ride_id}")


def ready_rides(store: StateStore, cache: SnapshotCache, user_id: str) -> list[dict]:
    """Rides that satisfy the user's preferences in the current snapshot, in snapshot order."""
    preferences = store.get_preferences(user_id)
    out = []
    for ride_id, entry in cache.combined().entries.items():
        pref = preferences.get(ride_id)
        if pref is not None and is_ready(pref, entry):
            out.append({**entry.to_dict(), "maxWait": pref.max_wait})
    return out
