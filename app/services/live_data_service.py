"""Live busy-ness for the static fallback feed.

Each venue's live data is derived from its category's synthetic curve for the
current local day and cached for the cache TTL, so repeated requests inside
the TTL see the same jittered curve.
"""
import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

import pytz

from app.cache import TTLCache
from app.dao import JsonVenueDAO
from app.exceptions import VenueNotFoundError
from app.models import LiveData, Venue, classify_status
from app.services.busy_aggregator import local_hour_and_day
from app.services.synthetic_curve import SyntheticCurveGenerator

logger = logging.getLogger(__name__)

# Baseline headcount for venues without a known capacity
DEFAULT_CAPACITY_BASELINE = 200


def occupancy_from_percentage(capacity: Optional[int], percentage: int) -> tuple[int, int]:
    """Return (current_occupancy, current_percentage) for a curve percentage.

    With a known capacity the occupancy never exceeds it and the percentage
    is re-derived from the rounded headcount. Without one, a 200-person
    baseline is used and the curve percentage is kept.
    """
    if capacity is not None and capacity > 0:
        occupancy = min(capacity, round(capacity * percentage / 100))
        return occupancy, round(occupancy / capacity * 100)
    if capacity is not None:
        # Zero capacity: nobody fits
        return 0, percentage
    return round(DEFAULT_CAPACITY_BASELINE * percentage / 100), percentage


class LiveDataService:
    """Computes and caches per-venue live busy-ness."""

    def __init__(
        self,
        venue_dao: JsonVenueDAO,
        generator: SyntheticCurveGenerator,
        cache: TTLCache,
        tz=None,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize live data service.

        Args:
            venue_dao: Static venue data access
            generator: Synthetic curve generator
            cache: TTL cache for LiveData, keyed by venue id
            tz: Venue timezone (default UTC)
            now_fn: Returns the current aware datetime (for tests)
        """
        self.venue_dao = venue_dao
        self.generator = generator
        self.cache = cache
        self.tz = tz or pytz.UTC
        self.now_fn = now_fn or (lambda: datetime.now(pytz.UTC))

    def compute_live_data(self, venue: Venue, now: Optional[datetime] = None) -> LiveData:
        """Build live data for a venue from its category curve."""
        now = now or self.now_fn()
        hour, day_of_week = local_hour_and_day(now, self.tz)

        today = self.generator.generate_curve(venue.category, day_of_week)
        busy_times = self.generator.generate_busy_times(venue.category, day_of_week, today=today)

        occupancy, percentage = occupancy_from_percentage(venue.capacity, today[hour])

        return LiveData(
            current_status=classify_status(percentage, unknown_when_empty=True),
            current_occupancy=occupancy,
            busy_times=busy_times,
        )

    def get_live_data(self, venue_id: str) -> LiveData:
        """Cached live data for one venue.

        Raises:
            VenueNotFoundError: if the venue id is unknown
        """
        return self.cache.get_or_compute(venue_id, self._compute_for_id)

    def get_live_data_batch(self, venue_ids: Iterable[str]) -> dict[str, LiveData]:
        """Cached live data for several venues; unknown ids are omitted."""
        results = self.cache.get_or_compute_batch(venue_ids, self._compute_for_id)
        logger.debug(f"[LiveDataService] Batch resolved {len(results)} venues")
        return results

    def _compute_for_id(self, venue_id: str) -> LiveData:
        venue = self.venue_dao.get_venue(venue_id)
        if venue is None:
            raise VenueNotFoundError(venue_id)
        logger.debug(f"[LiveDataService] Computing live data for {venue}")
        return self.compute_live_data(venue)
