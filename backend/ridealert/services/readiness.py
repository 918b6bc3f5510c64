"""
Ride readiness: which of a user's watched rides are worth lining up for right now.

Pure function over (preferences, snapshot, previously notified). The caller owns the
NotifiedSet and replaces it with currently_ready after every evaluation, whether or not the
push went through, so a ride that drops out of the ready set re-arms automatically.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from ridealert.core.constants import READY_STATUSES
from ridealert.services.types import RidePreference, RideSnapshotEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadinessResult:
    newly_ready: list[str] = field(default_factory=list)  # snapshot order
    currently_ready: frozenset[str] = frozenset()


def is_ready(preference: RidePreference, entry: RideSnapshotEntry) -> bool:
    return preference.enabled and entry.status.value in READY_STATUSES and entry.current_wait <= preference.max_wait


def evaluate_readiness(
    preferences: Mapping[str, Any],
    snapshot: Mapping[str, RideSnapshotEntry],
    previously_notified: set[str] | frozenset[str],
) -> ReadinessResult:
    """
    Never raises: malformed preference entries and malformed snapshot rows are skipped.
    Rides with a preference but no snapshot entry are simply not ready.
    """
    current: list[str] = []
    try:
        for ride_id, entry in snapshot.items():
            raw = preferences.get(ride_id)
            if raw is None:
                continue
            pref = RidePreference.coerce(raw)
            if pref is None:
                logger.warning("Skipping malformed preference for ride %s: %r", ride_id, raw)
                continue
            try:
                ready = is_ready(pref, entry)
            except (AttributeError, TypeError) as e:
                logger.warning("Skipping malformed snapshot entry for ride %s: %s", ride_id, e)
                continue
            if ready:
                current.append(ride_id)
    except Exception:
        logger.exception("Readiness evaluation failed; keeping previous notified set")
        return ReadinessResult(currently_ready=frozenset(previously_notified or ()))
    previous = set(previously_notified or ())
    return ReadinessResult(
        newly_ready=[rid for rid in current if rid not in previous],
        currently_ready=frozenset(current),
    )
