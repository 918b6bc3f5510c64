"""
FastAPI app entrypoint.

Background jobs (APScheduler): ride alert tick every minute, snapshot refresh, and the
schedule archival sweep at park midnight. Set SCHEDULER_ENABLED=false to serve the API only.
"""
import logging
import threading
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from ridealert.api.routes import archives, parks, preferences, push, schedules
from ridealert.config import settings
from ridealert.core.constants import (
    RIDE_ALERT_TICK_JOB_ID,
    SCHEDULE_ARCHIVAL_JOB_ID,
    SNAPSHOT_REFRESH_JOB_ID,
)
from ridealert.deps import build_deps
from ridealert.scheduler.archival_job import run_schedule_archival
from ridealert.scheduler.ride_alert_job import run_ride_alert_tick
from ridealert.scheduler.snapshot_job import run_snapshot_refresh

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _start_scheduler(deps) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone=settings.park_timezone)
    common = {"args": [deps], "max_instances": 1, "coalesce": True}
    scheduler.add_job(
        run_snapshot_refresh,
        "interval",
        seconds=settings.snapshot_refresh_seconds,
        id=SNAPSHOT_REFRESH_JOB_ID,
        **common,
    )
    scheduler.add_job(
        run_ride_alert_tick,
        "interval",
        seconds=settings.tick_interval_seconds,
        id=RIDE_ALERT_TICK_JOB_ID,
        **common,
    )
    scheduler.add_job(
        run_schedule_archival,
        "cron",
        hour=0,
        minute=0,
        id=SCHEDULE_ARCHIVAL_JOB_ID,
        **common,
    )
    scheduler.start()
    return scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    deps = build_deps(settings)
    app.state.deps = deps
    scheduler = None
    if settings.scheduler_enabled:
        scheduler = _start_scheduler(deps)
        app.state.scheduler = scheduler

        def startup_background():
            # Load live data right away and catch up on days missed while the server was down
            try:
                run_snapshot_refresh(deps)
                run_schedule_archival(deps)
                logger.info("Startup refresh and archival done; next tick in %ss", settings.tick_interval_seconds)
            except Exception as e:
                logger.warning("Startup background run failed: %s", e, exc_info=True)

        threading.Thread(target=startup_background, daemon=True).start()
    else:
        logger.info("SCHEDULER_ENABLED=false: background jobs are not running")
    logger.info("Ride alert backend ready (park timezone %s)", settings.park_timezone)
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    close = getattr(deps.gateway, "close", None)
    if close is not None:
        close()


app = FastAPI(title="Ride Alerts", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS (comma-separated) for a deployed web client
_cors_origins = [
    "http://localhost:8081",
    "http://127.0.0.1:8081",
    "http://localhost:19006",
    "http://127.0.0.1:19006",
]
if settings.cors_origins:
    _cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(parks.router, prefix="/api", tags=["parks"])
app.include_router(preferences.router, prefix="/api", tags=["preferences"])
app.include_router(push.router, prefix="/api", tags=["push"])
app.include_router(schedules.router, prefix="/api", tags=["schedules"])
app.include_router(archives.router, prefix="/api", tags=["archives"])


@app.get("/", include_in_schema=False)
def root():
    return {"message": "Ride Alerts API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health():
    deps = getattr(app.state, "deps", None)
    parks_updated = {}
    if deps is not None:
        for key in deps.cache.park_keys:
            updated = deps.cache.last_updated(key)
            parks_updated[key] = updated.isoformat() if updated else None
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "parks": parks_updated,
    }
