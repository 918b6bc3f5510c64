"""Archived days (read and delete only)."""
from typing import Any

from fastapi import APIRouter, Depends

from ridealert.api.dependencies import get_deps
from ridealert.core.errors import RideAlertError, domain_error_to_http
from ridealert.deps import RideAlertDeps
from ridealert.services import archive_service

router = APIRouter()


@router.get("/users/{user_id}/archives")
def list_archives(user_id: str, deps: RideAlertDeps = Depends(get_deps)) -> dict[str, Any]:
    return {"archives": archive_service.list_archives(deps.store, user_id)}


@router.get("/users/{user_id}/archives/{date}")
def get_archive(user_id: str, date: str, deps: RideAlertDeps = Depends(get_deps)) -> dict[str, Any]:
    try:
        return archive_service.get_archive(deps.store, user_id, date)
    except RideAlertError as e:
        raise domain_error_to_http(e) from e


@router.delete("/users/{user_id}/archives/{date}")
def delete_archive(user_id: str, date: str, deps: RideAlertDeps = Depends(get_deps)):
    try:
        archive_service.delete_archive(deps.store, deps.locks, user_id, date)
    except RideAlertError as e:
        raise domain_error_to_http(e) from e
    return {"ok": True}
