"""Push notification registration: one device token per user."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ridealert.api.dependencies import get_deps
from ridealert.core.errors import RideAlertError, domain_error_to_http
from ridealert.deps import RideAlertDeps
from ridealert.services import device_service

router = APIRouter()
logger = logging.getLogger(__name__)


class RegisterPushBody(BaseModel):
    token: str = Field(..., min_length=1, max_length=256, description="Expo push token or APNs device token")


@router.put("/users/{user_id}/push-token")
def register_push_token(user_id: str, body: RegisterPushBody, deps: RideAlertDeps = Depends(get_deps)):
    """
    Register the user's device. Call from the app after it gets a token from Expo/APNs.
    Idempotent; a new token replaces the user's previous one.
    """
    try:
        device_service.register_token(deps.store, deps.locks, deps.gateway, user_id, body.token)
    except RideAlertError as e:
        raise domain_error_to_http(e) from e
    return {"ok": True, "message": "Token registered"}


@router.delete("/users/{user_id}/push-token")
def unregister_push_token(user_id: str, deps: RideAlertDeps = Depends(get_deps)):
    removed = device_service.unregister_token(deps.store, deps.locks, user_id)
    return {"ok": True, "removed": removed}
