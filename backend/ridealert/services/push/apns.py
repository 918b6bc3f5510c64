"""
Send push notifications via Apple Push Notification service (APNs).
Requires APNS_KEY_ID, APNS_TEAM_ID, APNS_BUNDLE_ID, and APNS_KEY_P8_PATH or APNS_KEY_P8_BASE64.
If not configured, every message comes back as a NotConfigured (retryable) failure.
"""
import base64
import logging
import re
import time
from pathlib import Path
from typing import Callable

import httpx
import jwt

from ridealert.services.push.base import DeliveryErrorKind, DeliveryResult, PushMessage

logger = logging.getLogger(__name__)

# APNs host: sandbox for dev builds, production for release
APNS_SANDBOX = "https://api.sandbox.push.apple.com"
APNS_PRODUCTION = "https://api.push.apple.com"

_JWT_EXPIRY_SECONDS = 55 * 60  # APNs accepts tokens with iat within last hour; refresh a bit before

# APNs has no multi-message endpoint; a "batch" is sent request by request on one HTTP/2 connection
APNS_BATCH_SIZE = 50

_DEVICE_TOKEN = re.compile(r"^[0-9a-fA-F]{64,200}$")

# 400 reasons that mean the token itself is bad
_BAD_TOKEN_REASONS = {"BadDeviceToken", "Unregistered", "DeviceTokenNotForTopic"}


class ApnsPushGateway:
    """DeliveryGateway over APNs with token-based (JWT ES256) auth."""

    def __init__(
        self,
        *,
        key_id: str = "",
        team_id: str = "",
        bundle_id: str = "",
        key_p8_path: str = "",
        key_p8_base64: str = "",
        use_sandbox: bool = True,
        timeout: float = 10.0,
        token_provider: Callable[[], str | None] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._key_id = key_id
        self._team_id = team_id
        self._bundle_id = bundle_id
        self._key_p8_path = key_p8_path
        self._key_p8_base64 = key_p8_base64
        self._base_url = APNS_SANDBOX if use_sandbox else APNS_PRODUCTION
        self._timeout = timeout
        self._token_provider = token_provider or self._get_apns_jwt
        self._transport = transport
        # JWT cache: (token_string, expiry_epoch)
        self._jwt_cache: tuple[str, float] | None = None

    @property
    def max_batch_size(self) -> int:
        return APNS_BATCH_SIZE

    def is_valid_address(self, token: str) -> bool:
        return bool(token) and bool(_DEVICE_TOKEN.match(token))

    def _load_p8_key(self) -> str | None:
        """Load .p8 key from base64 content or a file path. Return None if not set."""
        if self._key_p8_base64:
            try:
                return base64.b64decode(self._key_p8_base64).decode("utf-8")
            except Exception as e:
                logger.warning("APNS_KEY_P8_BASE64 decode failed: %s", e)
                return None
        path = self._key_p8_path
        if path and Path(path).exists():
            try:
                return Path(path).read_text(encoding="utf-8")
            except OSError as e:
                logger.warning("APNS_KEY_P8_PATH read failed: %s", e)
                return None
        return None

    def _get_apns_jwt(self) -> str | None:
        """Build and cache JWT for APNs. Returns None if config missing."""
        if not self._key_id or not self._team_id:
            return None
        now = time.time()
        if self._jwt_cache and self._jwt_cache[1] > now:
            return self._jwt_cache[0]
        p8 = self._load_p8_key()
        if not p8:
            return None
        try:
            token = jwt.encode(
                {"iss": self._team_id, "iat": int(now)},
                p8,
                algorithm="ES256",
                headers={"alg": "ES256", "kid": self._key_id},
            )
            if isinstance(token, bytes):
                token = token.decode("utf-8")
            self._jwt_cache = (token, now + _JWT_EXPIRY_SECONDS)
            return token
        except Exception as e:
            logger.warning("APNs JWT build failed: %s", e, exc_info=True)
            return None

    def send_batch(self, messages: list[PushMessage]) -> list[DeliveryResult]:
        if not messages:
            return []
        jwt_token = self._token_provider() if self._bundle_id else None
        if not jwt_token:
            logger.debug("APNs not configured (key/team/bundle); skipping %s pushes", len(messages))
            return [DeliveryResult.failure(m.token, DeliveryErrorKind.NOT_CONFIGURED) for m in messages]
        headers = {
            "authorization": f"bearer {jwt_token}",
            "apns-topic": self._bundle_id,
            "apns-push-type": "alert",
            "apns-priority": "10",
        }
        results: list[DeliveryResult] = []
        with httpx.Client(http2=True, timeout=self._timeout, transport=self._transport) as client:
            for message in messages:
                results.append(self._send_one(client, message, headers))
        return results

    def _send_one(self, client: httpx.Client, message: PushMessage, headers: dict[str, str]) -> DeliveryResult:
        url = f"{self._base_url}/3/device/{message.token}"
        payload = {
            "aps": {
                "alert": {"title": message.title, "body": message.body},
                "sound": "default",
                "category": message.category,
            },
            **message.payload,
        }
        try:
            resp = client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            return DeliveryResult.failure(message.token, DeliveryErrorKind.TIMEOUT, str(e))
        except httpx.HTTPError as e:
            logger.warning("APNs request failed: %s", e, exc_info=True)
            return DeliveryResult.failure(message.token, DeliveryErrorKind.NETWORK, str(e))
        if resp.status_code == 200:
            return DeliveryResult.success(message.token)
        reason = _reason(resp)
        logger.warning("APNs returned %s for token %s...: %s", resp.status_code, message.token[:20], reason)
        return DeliveryResult.failure(message.token, _classify(resp.status_code, reason), reason)


def _reason(resp: httpx.Response) -> str:
    try:
        return str(resp.json().get("reason") or resp.status_code)
    except (ValueError, AttributeError):
        return str(resp.status_code)


def _classify(status_code: int, reason: str) -> DeliveryErrorKind:
    if status_code == 410 or (status_code == 400 and reason in _BAD_TOKEN_REASONS):
        return DeliveryErrorKind.DEVICE_NOT_REGISTERED
    if status_code == 413:
        return DeliveryErrorKind.MESSAGE_TOO_BIG
    if status_code == 429:
        return DeliveryErrorKind.RATE_LIMITED
    if status_code == 403:
        return DeliveryErrorKind.CREDENTIALS
    return DeliveryErrorKind.UNKNOWN
