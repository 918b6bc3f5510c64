"""
Notification dispatcher: batch, submit, reconcile.

Batches run concurrently on a small thread pool. A batch that raises or outlives its deadline
counts as a retryable failure for all of its messages and never blocks the other batches.
Nothing is queued for retry: the next tick re-offers whatever is still true.
A terminal "device not registered" result deletes that user's push token.
"""
import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass, field

from ridealert.core.locks import UserLocks
from ridealert.services.push.base import DeliveryErrorKind, DeliveryGateway, DeliveryResult, PushMessage
from ridealert.store.base import StateStore

logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    results: list[tuple[PushMessage, DeliveryResult]] = field(default_factory=list)
    invalidated_users: list[str] = field(default_factory=list)

    @property
    def sent(self) -> int:
        return sum(1 for _, r in self.results if r.ok)

    @property
    def terminal_failures(self) -> int:
        return sum(1 for _, r in self.results if r.is_terminal)

    @property
    def retryable_failures(self) -> int:
        return sum(1 for _, r in self.results if not r.ok and not r.is_terminal)


def chunked(messages: list[PushMessage], size: int) -> list[list[PushMessage]]:
    size = max(1, size)
    return [messages[i : i + size] for i in range(0, len(messages), size)]


class NotificationDispatcher:
    def __init__(
        self,
        gateway: DeliveryGateway,
        store: StateStore,
        locks: UserLocks,
        *,
        batch_size: int = 100,
        timeout_seconds: float = 15.0,
        max_concurrent_batches: int = 4,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.locks = locks
        self.batch_size = max(1, min(batch_size, gateway.max_batch_size))
        self.timeout_seconds = timeout_seconds
        self.max_concurrent_batches = max(1, max_concurrent_batches)

    def dispatch(self, messages: list[PushMessage]) -> DispatchReport:
        """Never raises. Returns one (message, result) pair per input message that was attempted."""
        report = DispatchReport()
        if not messages:
            return report
        try:
            deliverable: list[PushMessage] = []
            for message in messages:
                if self._is_valid(message.token):
                    deliverable.append(message)
                else:
                    result = DeliveryResult.failure(
                        message.token, DeliveryErrorKind.DEVICE_NOT_REGISTERED, "invalid address format"
                    )
                    self._record(report, message, result)
            self._send_batches(report, chunked(deliverable, self.batch_size))
        except Exception:
            logger.exception("Push dispatch failed after %s results", len(report.results))
        logger.info(
            "Push dispatch: %s sent, %s retryable failures, %s terminal, %s tokens retired",
            report.sent,
            report.retryable_failures,
            report.terminal_failures,
            len(report.invalidated_users),
        )
        return report

    def _is_valid(self, token: str) -> bool:
        try:
            return self.gateway.is_valid_address(token)
        except Exception as e:
            # Can't tell; let the gateway decide at send time
            logger.warning("Address check failed for %s...: %s", (token or "")[:20], e)
            return True

    def _send_batches(self, report: DispatchReport, batches: list[list[PushMessage]]) -> None:
        if not batches:
            return
        workers = min(self.max_concurrent_batches, len(batches))
        # Batches beyond the pool size wait for a free worker; give each wave its own timeout
        waves = math.ceil(len(batches) / workers)
        deadline = time.monotonic() + self.timeout_seconds * waves
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="push_batch")
        try:
            futures = [(batch, executor.submit(self.gateway.send_batch, batch)) for batch in batches]
            for batch, future in futures:
                remaining = max(0.0, deadline - time.monotonic())
                try:
                    results = future.result(timeout=remaining)
                except FuturesTimeout:
                    future.cancel()
                    results = _fail_all(batch, DeliveryErrorKind.TIMEOUT, "batch timed out")
                except Exception as e:
                    logger.warning("Push batch of %s raised: %s", len(batch), e, exc_info=True)
                    results = _fail_all(batch, DeliveryErrorKind.NETWORK, str(e))
                if not isinstance(results, list) or len(results) != len(batch):
                    logger.warning("Push gateway returned a malformed result set for a batch of %s", len(batch))
                    results = _fail_all(batch, DeliveryErrorKind.UNKNOWN, "malformed gateway results")
                for message, result in zip(batch, results):
                    self._record(report, message, result)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _record(self, report: DispatchReport, message: PushMessage, result: DeliveryResult) -> None:
        report.results.append((message, result))
        if result.is_terminal and message.user_id not in report.invalidated_users:
            if self._retire_token(message):
                report.invalidated_users.append(message.user_id)

    def _retire_token(self, message: PushMessage) -> bool:
        """Delete the user's registration only if it is still the token that failed."""
        try:
            with self.locks.for_user(message.user_id):
                removed = self.store.delete_device_token(message.user_id, expected_token=message.token)
        except Exception as e:
            logger.warning("Could not retire push token for user %s: %s", message.user_id, e, exc_info=True)
            return False
        if removed:
            logger.info("Retired push token for user %s (device not registered)", message.user_id)
        return removed


def _fail_all(batch: list[PushMessage], kind: DeliveryErrorKind, detail: str) -> list[DeliveryResult]:
    return [DeliveryResult.failure(m.token, kind, detail) for m in batch]
