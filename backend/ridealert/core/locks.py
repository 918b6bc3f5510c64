"""
Per-user serialization.

The minute tick, the midnight archival sweep and the HTTP write endpoints all read-modify-write
the same user's schedule, notified set and device token. Each of them holds the user's lock
for the whole read-modify-write so none of them can lose another's update.
"""
import threading
from contextlib import ExitStack, contextmanager
from typing import Iterator


class UserLocks:
    """Lazily created re-entrant lock per user id."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def get(self, user_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[user_id] = lock
            return lock

    @contextmanager
    def for_user(self, user_id: str) -> Iterator[None]:
        lock = self.get(user_id)
        with lock:
            yield

    @contextmanager
    def for_users(self, *user_ids: str) -> Iterator[None]:
        """Hold several users' locks at once, always acquired in sorted order."""
        with ExitStack() as stack:
            for user_id in sorted(set(user_ids)):
                stack.enter_context(self.for_user(user_id))
            yield
