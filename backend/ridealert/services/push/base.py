"""Delivery gateway contract and the normalized message/result types every gateway uses."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class DeliveryErrorKind(str, Enum):
    """Why one message was not delivered. Only DEVICE_NOT_REGISTERED retires a registration."""

    DEVICE_NOT_REGISTERED = "DeviceNotRegistered"
    MESSAGE_TOO_BIG = "MessageTooBig"
    RATE_LIMITED = "MessageRateExceeded"
    CREDENTIALS = "InvalidCredentials"
    NOT_CONFIGURED = "NotConfigured"
    NETWORK = "Network"
    TIMEOUT = "Timeout"
    UNKNOWN = "Unknown"

    @property
    def is_terminal(self) -> bool:
        return self is DeliveryErrorKind.DEVICE_NOT_REGISTERED


@dataclass(frozen=True)
class PushMessage:
    user_id: str
    token: str
    title: str
    body: str
    category: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeliveryResult:
    address: str
    ok: bool
    error_kind: DeliveryErrorKind | None = None
    detail: str | None = None

    @property
    def is_terminal(self) -> bool:
        return not self.ok and self.error_kind is not None and self.error_kind.is_terminal

    @classmethod
    def success(cls, address: str) -> "DeliveryResult":
        return cls(address=address, ok=True)

    @classmethod
    def failure(cls, address: str, kind: DeliveryErrorKind, detail: str | None = None) -> "DeliveryResult":
        return cls(address=address, ok=False, error_kind=kind, detail=detail)


class DeliveryGateway(Protocol):
    """Expo, APNs, ... Same contract; only the transport differs."""

    @property
    def max_batch_size(self) -> int:
        """Largest batch send_batch accepts in one call."""
        ...

    def is_valid_address(self, token: str) -> bool:
        """Cheap local format check; False means the token can never be delivered to."""
        ...

    def send_batch(self, messages: list[PushMessage]) -> list[DeliveryResult]:
        """
        Submit up to max_batch_size messages. Returns one result per message, in order.
        May raise on transport failure; the dispatcher treats that as retryable for the batch.
        """
        ...
