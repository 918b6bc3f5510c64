"""
Expo Push Notifications gateway.

Sends batches via the Expo Push API.
https://docs.expo.dev/push-notifications/sending-notifications/
"""
import logging
import re
from typing import Any

import httpx

from ridealert.core.constants import EXPO_MAX_BATCH_SIZE
from ridealert.services.push.base import DeliveryErrorKind, DeliveryResult, PushMessage

logger = logging.getLogger(__name__)

# Expo Push API endpoint
EXPO_PUSH_API_URL = "https://exp.host/--/api/v2/push/send"

_BARE_UUID = re.compile(r"^[a-z\d]{8}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{12}$", re.IGNORECASE)

# Per-ticket error codes reported in details.error
_TICKET_ERRORS = {
    "DeviceNotRegistered": DeliveryErrorKind.DEVICE_NOT_REGISTERED,
    "MessageTooBig": DeliveryErrorKind.MESSAGE_TOO_BIG,
    "MessageRateExceeded": DeliveryErrorKind.RATE_LIMITED,
    "InvalidCredentials": DeliveryErrorKind.CREDENTIALS,
}


class ExpoPushGateway:
    """DeliveryGateway over the Expo push service."""

    def __init__(
        self,
        access_token: str | None = None,
        *,
        timeout: float = 10.0,
        url: str = EXPO_PUSH_API_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            access_token: Optional Expo access token (only needed with enhanced push security)
            timeout: Per-request timeout in seconds
            transport: httpx transport override (tests)
        """
        self.access_token = access_token
        self._url = url
        self.client = httpx.Client(timeout=timeout, transport=transport)

    @property
    def max_batch_size(self) -> int:
        return EXPO_MAX_BATCH_SIZE

    def is_valid_address(self, token: str) -> bool:
        if not token:
            return False
        if (token.startswith("ExponentPushToken[") or token.startswith("ExpoPushToken[")) and token.endswith("]"):
            return True
        return bool(_BARE_UUID.match(token))

    def send_batch(self, messages: list[PushMessage]) -> list[DeliveryResult]:
        if not messages:
            return []
        if len(messages) > self.max_batch_size:
            raise ValueError(f"Expo batch too large: {len(messages)} > {self.max_batch_size}")
        body = [self._to_expo(m) for m in messages]
        try:
            response = self.client.post(self._url, json=body, headers=self._get_headers())
        except httpx.TimeoutException as e:
            return self._fail_all(messages, DeliveryErrorKind.TIMEOUT, str(e))
        except httpx.HTTPError as e:
            return self._fail_all(messages, DeliveryErrorKind.NETWORK, str(e))

        if response.status_code == 429:
            return self._fail_all(messages, DeliveryErrorKind.RATE_LIMITED, response.text[:200])
        if response.status_code == 401:
            return self._fail_all(messages, DeliveryErrorKind.CREDENTIALS, response.text[:200])
        if response.status_code != 200:
            logger.error("Expo push API error: %s %s", response.status_code, response.text[:500])
            return self._fail_all(messages, DeliveryErrorKind.UNKNOWN, f"HTTP {response.status_code}")

        try:
            tickets = response.json().get("data")
        except (ValueError, AttributeError):
            tickets = None
        if not isinstance(tickets, list) or len(tickets) != len(messages):
            logger.error("Expo push API returned %s tickets for %s messages", _len(tickets), len(messages))
            return self._fail_all(messages, DeliveryErrorKind.UNKNOWN, "ticket count mismatch")
        return [self._to_result(m, t) for m, t in zip(messages, tickets)]

    def _to_expo(self, message: PushMessage) -> dict[str, Any]:
        return {
            "to": message.token,
            "title": message.title,
            "body": message.body,
            "sound": "default",
            "data": {**message.payload, "category": message.category},
        }

    def _to_result(self, message: PushMessage, ticket: Any) -> DeliveryResult:
        if isinstance(ticket, dict) and ticket.get("status") == "ok":
            return DeliveryResult.success(message.token)
        ticket = ticket if isinstance(ticket, dict) else {}
        code = (ticket.get("details") or {}).get("error")
        kind = _TICKET_ERRORS.get(code, DeliveryErrorKind.UNKNOWN)
        detail = ticket.get("message") or code or "unknown error"
        logger.warning("Expo push error for %s...: %s", message.token[:30], detail)
        return DeliveryResult.failure(message.token, kind, detail)

    def _fail_all(self, messages: list[PushMessage], kind: DeliveryErrorKind, detail: str) -> list[DeliveryResult]:
        logger.warning("Expo push batch of %s failed (%s): %s", len(messages), kind.value, detail)
        return [DeliveryResult.failure(m.token, kind, detail) for m in messages]

    def _get_headers(self) -> dict:
        """Get HTTP headers for Expo API."""
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def close(self):
        """Close HTTP client."""
        self.client.close()


def _len(value: Any) -> int | None:
    return len(value) if isinstance(value, list) else None
