"""Data models package for the nightlife busy-ness server."""
from app.models.busy_status import BusyStatus, classify_status
from app.models.category import VenueCategory, classify_category
from app.models.snapshot import OccupancySnapshot
from app.models.aggregates import (
    HourlyAggregate,
    DailyAggregate,
    AggregateSummary,
    BusyAggregates,
    CurrentBusyness,
    BusySnapshotsResponse,
    BusyAggregatesResponse,
    AnalyticsOverview,
)
from app.models.live_data import (
    BusyTimePoint,
    LiveData,
    VenueLiveResponse,
    LiveBatchRequest,
    LiveBatchResult,
    LiveBatchResponse,
)
from app.models.venue import (
    Venue,
    Event,
    Location,
    VenueListMetadata,
    VenueListResponse,
    VenueDetailResponse,
    PostsResponse,
)
from app.models.popular_times import PopularTimes, WEEKDAY_NAMES

__all__ = [
    # Status and category
    "BusyStatus",
    "classify_status",
    "VenueCategory",
    "classify_category",
    # Snapshots and aggregates
    "OccupancySnapshot",
    "HourlyAggregate",
    "DailyAggregate",
    "AggregateSummary",
    "BusyAggregates",
    "CurrentBusyness",
    "BusySnapshotsResponse",
    "BusyAggregatesResponse",
    "AnalyticsOverview",
    # Live data
    "BusyTimePoint",
    "LiveData",
    "VenueLiveResponse",
    "LiveBatchRequest",
    "LiveBatchResult",
    "LiveBatchResponse",
    # Venues
    "Venue",
    "Event",
    "Location",
    "VenueListMetadata",
    "VenueListResponse",
    "VenueDetailResponse",
    "PostsResponse",
    # Popular times
    "PopularTimes",
    "WEEKDAY_NAMES",
]
