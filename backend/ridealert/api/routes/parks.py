"""
Parks and live wait times (served from the snapshot cache, never straight from upstream).
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from ridealert.api.dependencies import get_deps
from ridealert.core.errors import STATUS_NOT_FOUND
from ridealert.core.parks import PARKS, get_park
from ridealert.deps import RideAlertDeps
from ridealert.scheduler.snapshot_job import run_snapshot_refresh

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/parks")
def list_parks() -> list[dict[str, str]]:
    return [{"key": p.key, "id": p.entity_id, "name": p.name} for p in PARKS.values()]


@router.get("/parks/{park_key}/wait-times")
def wait_times(park_key: str, deps: RideAlertDeps = Depends(get_deps)) -> dict[str, Any]:
    """Rides grouped by land (for the list view) plus the flat list; empty until the first refresh."""
    park = get_park(park_key)
    if park is None:
        raise HTTPException(status_code=STATUS_NOT_FOUND, detail=f"Unknown park: {park_key}")
    entries = deps.cache.park(park_key) or {}
    rides = [e.to_dict() for e in entries.values()]
    by_land: dict[str, list[dict]] = {}
    for ride in rides:
        by_land.setdefault(ride["land"], []).append(ride)
    last_updated = deps.cache.last_updated(park_key)
    return {
        "park": park.name,
        "lands": by_land,
        "rides": rides,
        "last_updated": last_updated.isoformat() if last_updated else None,
    }


@router.post("/refresh")
def refresh(deps: RideAlertDeps = Depends(get_deps)) -> dict[str, Any]:
    """Force a snapshot refresh now. Skipped (not queued) if one is already running."""
    results = run_snapshot_refresh(deps)
    if results is None:
        return {"refreshed": False, "reason": "refresh already running"}
    return {"refreshed": all(results.values()), "parks": results}
