"""Ride preferences and the rides that satisfy them right now."""
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from ridealert.api.dependencies import get_deps
from ridealert.core.errors import RideAlertError, domain_error_to_http
from ridealert.deps import RideAlertDeps
from ridealert.services import preference_service

router = APIRouter()
logger = logging.getLogger(__name__)


class PreferencePatch(BaseModel):
    enabled: bool | None = None
    maxWait: int | None = Field(default=None, ge=0, description="Longest acceptable wait in minutes")


@router.get("/users/{user_id}/preferences")
def get_preferences(user_id: str, deps: RideAlertDeps = Depends(get_deps)) -> dict[str, dict]:
    return preference_service.get_preferences(deps.store, user_id)


@router.put("/users/{user_id}/preferences")
def put_preferences(
    user_id: str,
    body: dict[str, Any] = Body(..., description="ride id -> {enabled, maxWait}"),
    deps: RideAlertDeps = Depends(get_deps),
) -> dict[str, dict]:
    """Replace all preferences for the user."""
    try:
        return preference_service.replace_preferences(deps.store, deps.locks, user_id, body)
    except RideAlertError as e:
        raise domain_error_to_http(e) from e


@router.patch("/users/{user_id}/preferences/{ride_id}")
def patch_preference(
    user_id: str, ride_id: str, body: PreferencePatch, deps: RideAlertDeps = Depends(get_deps)
) -> dict:
    try:
        return preference_service.update_preference(
            deps.store, deps.locks, user_id, ride_id, enabled=body.enabled, max_wait=body.maxWait
        )
    except RideAlertError as e:
        raise domain_error_to_http(e) from e


@router.get("/users/{user_id}/ready-rides")
def ready_rides(user_id: str, deps: RideAlertDeps = Depends(get_deps)) -> dict[str, Any]:
    return {"rides": preference_service.ready_rides(deps.store, deps.cache, user_id)}


@router.delete("/users/{user_id}/preferences/{ride_id}")
def delete_preference(user_id: str, ride_id: str, deps: RideAlertDeps = Depends(get_deps)):
    """Stop watching a ride."""
    try:
        preference_service.delete_preference(deps.store, deps.locks, user_id, ride_id)
    except RideAlertError as e:
        raise domain_error_to_http(e) from e
    return {"ok": True}
