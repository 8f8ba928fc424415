"""Dependency injection container."""
import logging
import random
from typing import Optional

import redis

from app.api import SerpApiClient
from app.cache import InMemoryTTLCache, RedisTTLCache, TTLCache
from app.config import Settings
from app.dao import JsonVenueDAO, RedisSnapshotDAO
from app.db import RedisClient
from app.handlers import BusyHandler, VenueHandler
from app.metrics import CACHE_ENTRIES_PURGED_TOTAL
from app.models import LiveData, PopularTimes
from app.services import (
    LiveDataService,
    PopularTimesService,
    SnapshotSeeder,
    SyntheticCurveGenerator,
)

logger = logging.getLogger(__name__)

LIVE_CACHE_PREFIX = "live:"
POPULAR_CACHE_PREFIX = "popular:"


class Container:
    """Dependency injection container.

    Initializes and wires up all application dependencies. Redis is only
    required for the snapshot store and the "redis" cache backend; when it
    cannot be reached the static feed keeps working with in-memory caches and
    the busy endpoints answer 503.
    """

    def __init__(
        self,
        settings: Settings,
        redis_client: Optional[RedisClient] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize container with all dependencies.

        Args:
            settings: Application settings
            redis_client: Pre-built Redis client (connects from settings if None)
            rng: Random source shared by the curve generator and seeder
        """
        logger.info("[Container] Initializing container")
        self.settings = settings
        self.tz = settings.tz

        # Redis (optional)
        self.redis_client = redis_client
        needs_redis = settings.snapshot_store_enabled or settings.live_cache_backend == "redis"
        if self.redis_client is None and needs_redis:
            logger.info(f"[Container] Connecting to Redis at {settings.redis_address}")
            try:
                self.redis_client = RedisClient.from_settings(
                    host=settings.redis_host,
                    port=settings.redis_port,
                    password=settings.redis_password,
                    db=settings.redis_db,
                )
                logger.info("[Container] Redis connection successful")
            except redis.RedisError as e:
                logger.error(
                    f"[Container] Failed to connect to Redis: {e}. "
                    "Snapshot store disabled, using in-memory caches."
                )

        # Static data
        self.venue_dao = JsonVenueDAO(
            settings.get_data_path(settings.venues_data_file),
            settings.get_data_path(settings.events_data_file),
            settings.get_data_path(settings.posts_data_file),
        )

        # Caches
        self.live_cache = self._build_cache(
            LiveData, settings.cache_ttl_seconds, LIVE_CACHE_PREFIX, "live"
        )
        self.popular_times_cache = self._build_cache(
            PopularTimes, settings.popular_times_cache_ttl_seconds, POPULAR_CACHE_PREFIX, "popular"
        )

        # Curve generation
        self.rng = rng or random.Random()
        self.generator = SyntheticCurveGenerator(rng=self.rng, jitter=settings.synthetic_jitter)

        # SerpAPI (optional)
        self.serpapi_client = None
        if settings.serpapi_api_key:
            self.serpapi_client = SerpApiClient(
                api_key=settings.serpapi_api_key,
                base_url=settings.serpapi_endpoint,
                timeout=settings.serpapi_timeout_seconds,
            )
            logger.info("[Container] SerpAPI client initialized")
        else:
            logger.warning(
                "[Container] SerpAPI key not configured. "
                "Popular times will be estimated."
            )

        # Services
        self.live_data_service = LiveDataService(
            self.venue_dao, self.generator, self.live_cache, tz=self.tz
        )
        self.popular_times_service = PopularTimesService(
            self.venue_dao, self.generator, self.popular_times_cache, self.serpapi_client
        )

        # Snapshot store
        self.snapshot_dao = None
        self.snapshot_seeder = None
        self.busy_handler = None
        if settings.snapshot_store_enabled and self.redis_client is not None:
            self.snapshot_dao = RedisSnapshotDAO(self.redis_client)
            self.snapshot_seeder = SnapshotSeeder(self.snapshot_dao, tz=self.tz, rng=self.rng)
            self.busy_handler = BusyHandler(
                self.venue_dao,
                self.snapshot_dao,
                tz=self.tz,
                window_days=settings.aggregation_window_days,
                default_hours=settings.busy_default_hours,
                max_hours=settings.busy_max_hours,
                per_day_peak=settings.aggregation_per_day_peak,
            )
            logger.info("[Container] Snapshot store initialized")
        else:
            logger.warning("[Container] Snapshot store disabled; busy endpoints will return 503")

        # Handlers
        self.venue_handler = VenueHandler(
            self.venue_dao, self.live_data_service, self.popular_times_service
        )

        logger.info("[Container] Container initialized successfully")

    def _build_cache(self, model_cls, ttl_seconds: int, prefix: str, name: str) -> TTLCache:
        if self.settings.live_cache_backend == "redis":
            if self.redis_client is not None:
                logger.info(f"[Container] Using Redis cache for {name} (ttl={ttl_seconds}s)")
                return RedisTTLCache(
                    self.redis_client, model_cls, ttl_seconds, key_prefix=prefix, name=name
                )
            logger.warning(f"[Container] Redis unavailable, using in-memory cache for {name}")
        elif self.settings.live_cache_backend != "memory":
            logger.warning(
                f"[Container] Unknown cache backend '{self.settings.live_cache_backend}', "
                "using memory"
            )
        return InMemoryTTLCache(ttl_seconds, key_prefix=prefix, name=name)

    def purge_expired_caches(self) -> int:
        """Drop expired in-memory cache entries (Redis expires its own).

        Returns:
            Number of entries removed
        """
        purged = 0
        for cache in (self.live_cache, self.popular_times_cache):
            if isinstance(cache, InMemoryTTLCache):
                count = cache.purge_expired()
                if count:
                    CACHE_ENTRIES_PURGED_TOTAL.labels(cache=cache.name).inc(count)
                purged += count
        return purged

    def seed_snapshots(self) -> int:
        """Seed snapshots for venues without recent data (0 if the store is disabled)."""
        if self.snapshot_seeder is None:
            logger.warning("[Container] Snapshot store disabled, skipping seeding")
            return 0
        return self.snapshot_seeder.seed_missing(self.venue_dao.list_venues())

    async def shutdown(self):
        """Clean up resources on shutdown."""
        logger.info("[Container] Shutting down container")
        if self.serpapi_client:
            try:
                await self.serpapi_client.close()
                logger.info("[Container] SerpAPI client closed")
            except Exception as e:
                logger.error(f"[Container] Error closing SerpAPI client: {e}")
