"""Derived busy-ness aggregates (never persisted)."""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.busy_status import BusyStatus
from app.models.snapshot import OccupancySnapshot


class HourlyAggregate(BaseModel):
    """Average and peak occupancy for one hour of the day (0-23)."""
    hour: int
    average_occupancy: float = Field(default=0.0, alias="averageOccupancy")
    peak_occupancy: float = Field(default=0.0, alias="peakOccupancy")
    sample_count: int = Field(default=0, alias="sampleCount", exclude=True)

    model_config = ConfigDict(populate_by_name=True)


class DailyAggregate(BaseModel):
    """Average occupancy for one day of the week (0=Sunday to 6=Saturday)."""
    day_of_week: int = Field(alias="dayOfWeek")
    average_occupancy: float = Field(default=0.0, alias="averageOccupancy")
    peak_hour: int = Field(default=0, alias="peakHour")
    sample_count: int = Field(default=0, alias="sampleCount", exclude=True)

    model_config = ConfigDict(populate_by_name=True)


class AggregateSummary(BaseModel):
    """Scalar summary over a whole window."""
    total_visitors: int = Field(default=0, alias="totalVisitors")
    average_occupancy: float = Field(default=0.0, alias="averageOccupancy")
    snapshot_count: int = Field(default=0, alias="snapshotCount")

    model_config = ConfigDict(populate_by_name=True)


class BusyAggregates(BaseModel):
    """Full aggregation result: 24 hourly, 7 daily and a summary."""
    hourly_aggregates: list[HourlyAggregate] = Field(alias="hourlyAggregates")
    daily_aggregates: list[DailyAggregate] = Field(alias="dailyAggregates")
    summary: AggregateSummary = Field(default_factory=AggregateSummary)

    model_config = ConfigDict(populate_by_name=True)


class CurrentBusyness(BaseModel):
    """Status derived from the most recent snapshot in a window."""
    current_status: BusyStatus = Field(default=BusyStatus.UNKNOWN, alias="currentStatus")
    current_occupancy: int = Field(default=0, alias="currentOccupancy")
    occupancy_percentage: float = Field(default=0.0, alias="occupancyPercentage")

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# HTTP RESPONSES
# =============================================================================


class BusySnapshotsResponse(BaseModel):
    """Response for GET /venues/{id}/busy."""
    venue_id: str = Field(alias="venueId")
    snapshots: list[OccupancySnapshot]
    current_status: BusyStatus = Field(alias="currentStatus")
    current_occupancy: int = Field(alias="currentOccupancy")
    last_updated: datetime = Field(alias="lastUpdated")

    model_config = ConfigDict(populate_by_name=True)


class BusyAggregatesResponse(BaseModel):
    """Response for GET /venues/{id}/busy/aggregates.

    Container names match the mobile client (hourlyAverages/dailyAverages).
    """
    venue_id: str = Field(alias="venueId")
    hourly_averages: list[HourlyAggregate] = Field(alias="hourlyAverages")
    daily_averages: list[DailyAggregate] = Field(alias="dailyAverages")
    weekly_averages: list[Any] = Field(default_factory=list, alias="weeklyAverages")

    model_config = ConfigDict(populate_by_name=True)


class AnalyticsOverview(BaseModel):
    """Response for GET /venues/{id}/analytics/overview."""
    venue_id: str = Field(alias="venueId")
    total_visitors: int = Field(alias="totalVisitors")
    average_occupancy: int = Field(alias="averageOccupancy")
    peak_hours: list[str] = Field(default_factory=list, alias="peakHours")
    popular_days: list[str] = Field(default_factory=list, alias="popularDays")
    period: str = "30 days"
    current_status: Optional[BusyStatus] = Field(default=None, alias="currentStatus")

    model_config = ConfigDict(populate_by_name=True)
