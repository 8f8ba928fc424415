"""Handler for the snapshot-backed busy-ness endpoints."""
import logging
import time
from datetime import datetime, timedelta
from typing import Callable, Optional, Union

import pytz

from app.dao import JsonVenueDAO, RedisSnapshotDAO
from app.exceptions import InvalidWindowError, VenueNotFoundError
from app.metrics import AGGREGATION_DURATION_SECONDS, AGGREGATION_SNAPSHOTS
from app.models import (
    AnalyticsOverview,
    BusyAggregates,
    BusyAggregatesResponse,
    BusySnapshotsResponse,
    OccupancySnapshot,
)
from app.services import busy_aggregator

logger = logging.getLogger(__name__)


class BusyHandler:
    """Reads snapshot windows and turns them into API responses."""

    def __init__(
        self,
        venue_dao: JsonVenueDAO,
        snapshot_dao: RedisSnapshotDAO,
        tz=None,
        window_days: int = 30,
        default_hours: int = 24,
        max_hours: int = 720,
        per_day_peak: bool = False,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize busy handler.

        Args:
            venue_dao: Venue lookup for 404s
            snapshot_dao: Snapshot store
            tz: Venue timezone for hour/day bucketing (default UTC)
            window_days: Aggregation window in days
            default_hours: Window for /busy when no hours are given
            max_hours: Largest accepted /busy window
            per_day_peak: Compute daily peak hours per day instead of globally
            now_fn: Returns the current aware datetime (for tests)
        """
        self.venue_dao = venue_dao
        self.snapshot_dao = snapshot_dao
        self.tz = tz or pytz.UTC
        self.window_days = window_days
        self.default_hours = default_hours
        self.max_hours = max_hours
        self.per_day_peak = per_day_peak
        self.now_fn = now_fn or (lambda: datetime.now(pytz.UTC))

    def get_busy_snapshots(
        self, venue_id: str, hours: Optional[Union[int, str]] = None
    ) -> BusySnapshotsResponse:
        """Snapshots from the last ``hours`` hours plus the current status.

        Raises:
            VenueNotFoundError: unknown venue
            InvalidWindowError: hours is not an integer in [1, max_hours]
            SnapshotStoreUnavailableError: store unreachable
        """
        window_hours = self.validate_hours(hours)
        self._require_venue(venue_id)

        now = self.now_fn()
        snapshots = self.snapshot_dao.fetch_snapshots(venue_id, now - timedelta(hours=window_hours))
        current = busy_aggregator.current_busyness(snapshots)

        logger.info(
            f"[BusyHandler] {venue_id}: {len(snapshots)} snapshots in last {window_hours}h, "
            f"status={current.current_status.value}"
        )
        return BusySnapshotsResponse(
            venue_id=venue_id,
            snapshots=snapshots,
            current_status=current.current_status,
            current_occupancy=current.current_occupancy,
            last_updated=now,
        )

    def get_busy_aggregates(self, venue_id: str) -> BusyAggregatesResponse:
        """Hourly and daily averages over the aggregation window."""
        self._require_venue(venue_id)
        aggregates = self._aggregate(self._fetch_window(venue_id))
        return BusyAggregatesResponse(
            venue_id=venue_id,
            hourly_averages=aggregates.hourly_aggregates,
            daily_averages=aggregates.daily_aggregates,
        )

    def get_analytics_overview(self, venue_id: str) -> AnalyticsOverview:
        """Visitor totals, average occupancy, peak hours and popular days."""
        self._require_venue(venue_id)
        snapshots = self._fetch_window(venue_id)
        aggregates = self._aggregate(snapshots)
        current = busy_aggregator.current_busyness(snapshots)

        return AnalyticsOverview(
            venue_id=venue_id,
            total_visitors=aggregates.summary.total_visitors,
            average_occupancy=round(aggregates.summary.average_occupancy),
            peak_hours=busy_aggregator.peak_hours(aggregates),
            popular_days=busy_aggregator.popular_days(aggregates),
            period=f"{self.window_days} days",
            current_status=current.current_status,
        )

    def validate_hours(self, hours: Optional[Union[int, str]]) -> int:
        """Parse and range-check the hours query value."""
        if hours is None or hours == "":
            return self.default_hours
        try:
            value = int(hours)
        except (TypeError, ValueError) as e:
            raise InvalidWindowError(f"hours must be an integer, got '{hours}'") from e
        if value < 1 or value > self.max_hours:
            raise InvalidWindowError(f"hours must be between 1 and {self.max_hours}, got {value}")
        return value

    def _require_venue(self, venue_id: str) -> None:
        if self.venue_dao.get_venue(venue_id) is None:
            raise VenueNotFoundError(venue_id)

    def _fetch_window(self, venue_id: str) -> list[OccupancySnapshot]:
        since = self.now_fn() - timedelta(days=self.window_days)
        return self.snapshot_dao.fetch_snapshots(venue_id, since)

    def _aggregate(self, snapshots: list[OccupancySnapshot]) -> BusyAggregates:
        start_time = time.perf_counter()
        aggregates = busy_aggregator.aggregate(snapshots, tz=self.tz, per_day_peak=self.per_day_peak)
        AGGREGATION_DURATION_SECONDS.observe(time.perf_counter() - start_time)
        AGGREGATION_SNAPSHOTS.observe(len(snapshots))
        return aggregates
