"""
Skip-if-running guard for job bodies.

APScheduler's max_instances=1 only covers runs it starts itself; POST /api/refresh and the
startup thread call the same bodies directly, so each body also takes a non-blocking lock.
"""
import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)


class SkipIfRunning:
    def __init__(self, name: str) -> None:
        self.name = name
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def run(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> bool:
        """Run fn unless a previous run is still going. Returns False when skipped."""
        if not self._lock.acquire(blocking=False):
            logger.info("%s still running; skipping this run", self.name)
            return False
        try:
            fn(*args, **kwargs)
            return True
        finally:
            self._lock.release()
