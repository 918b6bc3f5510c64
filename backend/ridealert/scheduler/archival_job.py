"""
Daily at 00:00 park time: archive every live schedule dated before today.
Also run once on startup so days missed while the server was down are caught up.
"""
import logging

from ridealert.deps import RideAlertDeps
from ridealert.scheduler.guard import SkipIfRunning

logger = logging.getLogger(__name__)

_guard = SkipIfRunning("Schedule archival")


def _sweep(deps: RideAlertDeps) -> None:
    try:
        deps.sweep.sweep(deps.clock.today())
    except Exception as e:
        logger.exception("Schedule archival failed: %s", e)


def run_schedule_archival(deps: RideAlertDeps) -> bool:
    return _guard.run(_sweep, deps)
