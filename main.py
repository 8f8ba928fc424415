"""Main entry point for the nightlife busy-ness server.

Startup sequence:
1. Initialize DI container
2. Inject handlers into routers
3. Seed the snapshot store (optional)
4. Start scheduled background jobs
5. Serve HTTP with FastAPI
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from app.config import Settings
from app.container import Container
from app.routers import busy_router, set_busy_handler, venue_router, set_venue_handler
from app.middleware import PrometheusMiddleware
from app.metrics import (
    BACKGROUND_JOB_RUNS_TOTAL,
    BACKGROUND_JOB_DURATION_SECONDS,
    BACKGROUND_JOB_LAST_RUN_TIMESTAMP,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global container and scheduler
container: Container = None
scheduler: AsyncIOScheduler = None


async def run_purge_expired_live_cache_job():
    """Background job: Drop expired entries from the in-memory caches."""
    job_name = "purge_expired_live_cache"
    start_time = time.perf_counter()
    try:
        purged = container.purge_expired_caches()
        duration = time.perf_counter() - start_time
        BACKGROUND_JOB_DURATION_SECONDS.labels(job_name=job_name).observe(duration)
        BACKGROUND_JOB_RUNS_TOTAL.labels(job_name=job_name, status="success").inc()
        BACKGROUND_JOB_LAST_RUN_TIMESTAMP.labels(job_name=job_name).set_to_current_time()
        logger.debug(f"[Scheduler] PurgeExpiredLiveCacheJob removed {purged} entries")
    except Exception as e:
        duration = time.perf_counter() - start_time
        BACKGROUND_JOB_DURATION_SECONDS.labels(job_name=job_name).observe(duration)
        BACKGROUND_JOB_RUNS_TOTAL.labels(job_name=job_name, status="error").inc()
        logger.error(f"[Scheduler] PurgeExpiredLiveCacheJob failed: {e}")


def start_background_jobs(settings: Settings):
    """Start all background jobs using APScheduler."""
    global scheduler
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        run_purge_expired_live_cache_job,
        trigger=IntervalTrigger(seconds=settings.cache_check_period_seconds),
        id="purge_expired_live_cache",
        name="Purge Expired Live Cache",
        replace_existing=True,
    )
    logger.info(
        f"[Scheduler] Scheduled live cache purge every "
        f"{settings.cache_check_period_seconds} seconds"
    )

    scheduler.start()
    logger.info("[Scheduler] Background jobs started")


async def startup_sequence(settings: Settings):
    """Build the container, inject handlers, seed and start jobs."""
    global container

    logger.info("[Main] Starting startup sequence")

    logger.info("[Main] Initializing DI container")
    container = Container(settings)

    # Routes are registered at app creation; handlers arrive here
    logger.info("[Main] Injecting handlers into routers")
    set_venue_handler(container.venue_handler)
    set_busy_handler(container.busy_handler)

    if settings.seed_snapshots_on_startup:
        logger.info("[Main] Seeding snapshot store")
        try:
            seeded = container.seed_snapshots()
            logger.info(f"[Main] Snapshot seeding completed ({seeded} venues)")
        except Exception as e:
            logger.error(f"[Main] Snapshot seeding failed: {e}")
    else:
        logger.info("[Main] Skipping snapshot seeding (SEED_SNAPSHOTS_ON_STARTUP=false)")

    logger.info("[Main] Starting periodic jobs")
    start_background_jobs(settings)

    logger.info("[Main] Startup sequence completed")


async def shutdown_sequence():
    """Clean up resources on shutdown."""
    global container, scheduler

    logger.info("[Main] Starting shutdown sequence")

    if scheduler:
        logger.info("[Main] Stopping scheduler")
        scheduler.shutdown(wait=False)
        logger.info("[Main] Scheduler stopped")

    if container:
        logger.info("[Main] Shutting down container")
        await container.shutdown()
        logger.info("[Main] Container shut down")

    logger.info("[Main] Shutdown sequence completed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup and shutdown."""
    settings = Settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    await startup_sequence(settings)
    yield
    await shutdown_sequence()


# Create FastAPI app
settings = Settings()
app = FastAPI(
    title="Nightlife Busy Server",
    description="Venue discovery and occupancy aggregation service",
    version="1.0.0",
    lifespan=lifespan,
)

# Add Prometheus metrics middleware
app.add_middleware(PrometheusMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers at app creation time (before uvicorn starts)
app.include_router(venue_router)
app.include_router(busy_router)


# Health check endpoint
@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "nightlife-backend"}


# Prometheus metrics endpoint
@app.get("/metrics", response_class=PlainTextResponse)
def metrics():
    """Prometheus metrics endpoint for scraping."""
    return PlainTextResponse(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


if __name__ == "__main__":
    import uvicorn

    logger.info("[Main] Starting Nightlife Busy Server")
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
