"""
Dependencies shared by the scheduler jobs and the API (built once at startup, kept on app.state).
"""
import logging
from datetime import datetime
from typing import Callable

from ridealert.config import Settings
from ridealert.core.clock import ParkClock
from ridealert.core.locks import UserLocks
from ridealert.core.parks import PARKS
from ridealert.db.session import make_engine, make_session_factory
from ridealert.services.archival import ArchivalSweep
from ridealert.services.dispatcher import NotificationDispatcher
from ridealert.services.engine import NotificationEngine
from ridealert.services.push import DeliveryGateway, build_gateway
from ridealert.services.snapshot import SnapshotCache, SnapshotProvider, ThemeParksWikiProvider
from ridealert.store import MemoryStateStore, SqlStateStore, StateStore

logger = logging.getLogger(__name__)


class RideAlertDeps:
    """Everything a job or a route needs; tests build one with fakes swapped in."""

    def __init__(
        self,
        settings: Settings,
        clock: ParkClock,
        store: StateStore,
        locks: UserLocks,
        cache: SnapshotCache,
        gateway: DeliveryGateway,
    ):
        self.settings = settings
        self.clock = clock
        self.store = store
        self.locks = locks
        self.cache = cache
        self.gateway = gateway
        self.dispatcher = NotificationDispatcher(
            gateway,
            store,
            locks,
            batch_size=settings.push_batch_size,
            timeout_seconds=settings.push_timeout_seconds,
            max_concurrent_batches=settings.push_max_concurrent_batches,
        )
        self.engine = NotificationEngine(store, locks, clock, cache, self.dispatcher)
        self.sweep = ArchivalSweep(store, locks, clock, skip_empty=settings.archive_skip_empty_dates)


def build_store(settings: Settings) -> StateStore:
    if settings.state_backend == "sql":
        logger.info("Using SQL state store")
        return SqlStateStore(make_session_factory(make_engine(settings.database_url)))
    logger.info("Using in-memory state store (state is lost on restart)")
    return MemoryStateStore()


def build_deps(
    settings: Settings,
    *,
    store: StateStore | None = None,
    provider: SnapshotProvider | None = None,
    gateway: DeliveryGateway | None = None,
    now_fn: Callable[[], datetime] | None = None,
) -> RideAlertDeps:
    clock = ParkClock(settings.park_timezone, now_fn=now_fn)
    if provider is None:
        provider = ThemeParksWikiProvider(
            clock,
            base_url=settings.themeparks_api_url,
            timeout=settings.upstream_timeout_seconds,
        )
    return RideAlertDeps(
        settings=settings,
        clock=clock,
        store=store if store is not None else build_store(settings),
        locks=UserLocks(),
        cache=SnapshotCache(provider, clock, list(PARKS)),
        gateway=gateway if gateway is not None else build_gateway(settings),
    )
