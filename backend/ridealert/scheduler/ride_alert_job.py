"""
Every TICK_INTERVAL_SECONDS: evaluate ride readiness and schedule reminders for every user
and dispatch the resulting pushes.
"""
import logging

from ridealert.deps import RideAlertDeps
from ridealert.scheduler.guard import SkipIfRunning

logger = logging.getLogger(__name__)

_guard = SkipIfRunning("Ride alert tick")


def _tick(deps: RideAlertDeps) -> None:
    try:
        deps.engine.run_tick()
    except Exception as e:
        logger.exception("Ride alert tick failed: %s", e)


def run_ride_alert_tick(deps: RideAlertDeps) -> bool:
    return _guard.run(_tick, deps)
