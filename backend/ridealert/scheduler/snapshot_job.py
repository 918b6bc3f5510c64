"""Refresh the live ride snapshot for every park. A failed park keeps its last good data."""
import logging

from ridealert.deps import RideAlertDeps
from ridealert.scheduler.guard import SkipIfRunning

logger = logging.getLogger(__name__)

_guard = SkipIfRunning("Snapshot refresh")


def _refresh(deps: RideAlertDeps, results: dict[str, bool]) -> None:
    try:
        results.update(deps.cache.refresh_all())
    except Exception as e:
        logger.exception("Snapshot refresh failed: %s", e)
    failed = [key for key, ok in results.items() if not ok]
    if failed:
        logger.warning("Snapshot refresh: %s of %s parks failed (%s)", len(failed), len(results), ", ".join(failed))


def run_snapshot_refresh(deps: RideAlertDeps) -> dict[str, bool] | None:
    """Per-park success flags, or None when a refresh was already running."""
    results: dict[str, bool] = {}
    if not _guard.run(_refresh, deps, results):
        return None
    return results
