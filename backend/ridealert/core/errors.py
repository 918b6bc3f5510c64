"""
Centralized error handling for service/API failures.
Domain exceptions plus a rule table so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Domain exceptions raised by services (never by the notification engine loops)
# ---------------------------------------------------------------------------


class RideAlertError(Exception):
    """Base for errors a caller is expected to handle."""


class NotFoundError(RideAlertError):
    """Requested user item (schedule entry, archive, park) does not exist."""


class ValidationError(RideAlertError):
    """Input is well-formed JSON but not acceptable (bad date key, negative travel time, ...)."""


class ConflictError(RideAlertError):
    """Write would overwrite an existing item (e.g. duplicate Lightning Lane for a ride)."""


class UpstreamError(RideAlertError):
    """Live data provider unreachable or returned something unusable."""


# ---------------------------------------------------------------------------
# Constants: status codes
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_UNPROCESSABLE = 422
STATUS_INTERNAL_ERROR = 500
STATUS_BAD_GATEWAY = 502


# ---------------------------------------------------------------------------
# Error rules: (exception type, status_code). First match wins, so subclasses go first.
# Add new rules here instead of scattering try/except in routes.
# ---------------------------------------------------------------------------

DOMAIN_ERROR_RULES: list[tuple[type[Exception], int]] = [
    (NotFoundError, STATUS_NOT_FOUND),
    (ConflictError, STATUS_CONFLICT),
    (ValidationError, STATUS_UNPROCESSABLE),
    (UpstreamError, STATUS_BAD_GATEWAY),
    (RideAlertError, STATUS_BAD_REQUEST),
]


def domain_error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception from a service call into an HTTPException.
    Uses DOMAIN_ERROR_RULES for known error types; otherwise returns 500 with the exception message.
    """
    for exc_type, status_code in DOMAIN_ERROR_RULES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc))
