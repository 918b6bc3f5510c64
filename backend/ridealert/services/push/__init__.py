"""
Push delivery gateways: Expo, APNs.
Each gateway talks to its own service but returns the same DeliveryResult shape so the
dispatcher stays transport-agnostic.
"""
from ridealert.config import Settings
from ridealert.services.push.apns import ApnsPushGateway
from ridealert.services.push.base import (
    DeliveryErrorKind,
    DeliveryGateway,
    DeliveryResult,
    PushMessage,
)
from ridealert.services.push.expo import ExpoPushGateway

__all__ = [
    "ApnsPushGateway",
    "DeliveryErrorKind",
    "DeliveryGateway",
    "DeliveryResult",
    "ExpoPushGateway",
    "PushMessage",
    "build_gateway",
]


def build_gateway(settings: Settings) -> DeliveryGateway:
    """Gateway selected by PUSH_PROVIDER."""
    if settings.push_provider == "apns":
        return ApnsPushGateway(
            key_id=settings.apns_key_id,
            team_id=settings.apns_team_id,
            bundle_id=settings.apns_bundle_id,
            key_p8_path=settings.apns_key_p8_path,
            key_p8_base64=settings.apns_key_p8_base64,
            use_sandbox=settings.apns_use_sandbox,
            timeout=settings.push_timeout_seconds,
        )
    return ExpoPushGateway(settings.expo_access_token or None, timeout=settings.push_timeout_seconds)
