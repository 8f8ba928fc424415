"""Weekly popular times: SerpAPI when available, synthetic estimate otherwise."""
import logging
from datetime import datetime
from typing import Optional

import pytz

from app.api import SerpApiClient
from app.cache import TTLCache
from app.dao import JsonVenueDAO
from app.exceptions import VenueNotFoundError
from app.metrics import POPULAR_TIMES_RESULTS
from app.models import PopularTimes
from app.services.synthetic_curve import SyntheticCurveGenerator

logger = logging.getLogger(__name__)


class PopularTimesService:
    """Resolves and caches popular times per venue."""

    def __init__(
        self,
        venue_dao: JsonVenueDAO,
        generator: SyntheticCurveGenerator,
        cache: TTLCache,
        serpapi_client: Optional[SerpApiClient] = None,
    ):
        """Initialize popular times service.

        Args:
            venue_dao: Static venue data access
            generator: Synthetic curve generator for estimates
            cache: TTL cache for PopularTimes, keyed by venue id
            serpapi_client: SerpAPI client; None means estimates only
        """
        self.venue_dao = venue_dao
        self.generator = generator
        self.cache = cache
        self.serpapi_client = serpapi_client

    async def get_popular_times(self, venue_id: str) -> PopularTimes:
        """Popular times for a venue.

        Raises:
            VenueNotFoundError: if the venue id is unknown
        """
        venue = self.venue_dao.get_venue(venue_id)
        if venue is None:
            raise VenueNotFoundError(venue_id)

        cached = self.cache.get(venue_id)
        if cached is not None:
            return cached

        week = None
        if self.serpapi_client is not None:
            week = await self.serpapi_client.fetch_popular_times(venue.name, venue.location)

        if week is not None:
            source = "live"
        else:
            source = "estimated"
            week = self.generator.generate_full_week(venue.category, jittered=False)

        result = PopularTimes(
            venue_id=venue_id,
            source=source,
            popular_times=week,
            last_updated=datetime.now(pytz.UTC),
        )
        self.cache.set(venue_id, result)
        POPULAR_TIMES_RESULTS.labels(source=source).inc()

        logger.info(f"[PopularTimesService] Resolved popular times for {venue_id} (source={source})")
        return result
