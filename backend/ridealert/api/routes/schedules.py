"""
Day schedules: shows, dining reservations and Lightning Lane return windows.

Items are addressed by the park date they fall on: /users/{user_id}/schedule/{date}/{kind}/{item_id}
with kind one of shows, dining, lightning-lanes. Lightning Lanes use the ride id as item id.
A naive targetTime is read as park-local time.
"""
import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ridealert.api.dependencies import get_deps
from ridealert.core.errors import STATUS_NOT_FOUND, RideAlertError, ValidationError, domain_error_to_http
from ridealert.deps import RideAlertDeps
from ridealert.services import schedule_service
from ridealert.services.types import EventKind

router = APIRouter()
logger = logging.getLogger(__name__)

_KINDS = {
    "shows": EventKind.SHOW,
    "dining": EventKind.DINING,
    "lightning-lanes": EventKind.LIGHTNING_LANE,
}


def _kind(kind: str) -> EventKind:
    try:
        return _KINDS[kind]
    except KeyError:
        raise HTTPException(status_code=STATUS_NOT_FOUND, detail=f"Unknown schedule kind: {kind}") from None


class ScheduleItemCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=200)
    targetTime: datetime = Field(..., description="Show time, reservation time or return window start")
    travelTimeMinutes: int = Field(0, ge=0, le=24 * 60)
    rideId: str | None = Field(None, description="Required for Lightning Lanes")


class ScheduleItemPatch(BaseModel):
    label: str | None = Field(None, min_length=1, max_length=200)
    targetTime: datetime | None = None
    travelTimeMinutes: int | None = Field(None, ge=0, le=24 * 60)


@router.get("/users/{user_id}/schedule/{date}")
def get_schedule(user_id: str, date: str, deps: RideAlertDeps = Depends(get_deps)) -> dict[str, Any]:
    try:
        return schedule_service.get_schedule(deps.store, user_id, date)
    except RideAlertError as e:
        raise domain_error_to_http(e) from e


@router.post("/users/{user_id}/schedule/{date}/{kind}", status_code=201)
def create_item(
    user_id: str, date: str, kind: str, body: ScheduleItemCreate, deps: RideAlertDeps = Depends(get_deps)
) -> dict[str, Any]:
    event_kind = _kind(kind)
    try:
        if deps.clock.date_key_for(body.targetTime) != date:
            raise ValidationError(f"targetTime does not fall on {date} (park time)")
        key, item = schedule_service.create_item(
            deps.store,
            deps.locks,
            deps.clock,
            user_id,
            event_kind,
            label=body.label,
            target_time=body.targetTime,
            travel_time_minutes=body.travelTimeMinutes,
            item_id=body.rideId,
        )
    except RideAlertError as e:
        raise domain_error_to_http(e) from e
    return {"date": key, "item": item.to_dict()}


@router.patch("/users/{user_id}/schedule/{date}/{kind}/{item_id}")
def update_item(
    user_id: str,
    date: str,
    kind: str,
    item_id: str,
    body: ScheduleItemPatch,
    deps: RideAlertDeps = Depends(get_deps),
) -> dict[str, Any]:
    """Changing targetTime or travelTimeMinutes re-arms the reminders; the returned date may change."""
    event_kind = _kind(kind)
    try:
        key, item = schedule_service.update_item(
            deps.store,
            deps.locks,
            deps.clock,
            user_id,
            event_kind,
            date,
            item_id,
            label=body.label,
            target_time=body.targetTime,
            travel_time_minutes=body.travelTimeMinutes,
        )
    except RideAlertError as e:
        raise domain_error_to_http(e) from e
    return {"date": key, "item": item.to_dict()}


@router.delete("/users/{user_id}/schedule/{date}/{kind}/{item_id}")
def delete_item(user_id: str, date: str, kind: str, item_id: str, deps: RideAlertDeps = Depends(get_deps)):
    event_kind = _kind(kind)
    try:
        schedule_service.delete_item(deps.store, deps.locks, user_id, event_kind, date, item_id)
    except RideAlertError as e:
        raise domain_error_to_http(e) from e
    return {"ok": True}
