"""Live busy-ness data models for the static fallback feed."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.busy_status import BusyStatus


class BusyTimePoint(BaseModel):
    """One point of a busy-times curve, e.g. {"hour": "10PM", "percentage": 85}."""
    hour: str
    percentage: int = Field(ge=0, le=100)
    is_predicted: bool = Field(default=True, alias="isPredicted")

    model_config = ConfigDict(populate_by_name=True)


class LiveData(BaseModel):
    """Current status plus the busy-times curve for a venue."""
    current_status: BusyStatus = Field(alias="currentStatus")
    current_occupancy: int = Field(alias="currentOccupancy")
    busy_times: list[BusyTimePoint] = Field(default_factory=list, alias="busyTimes")

    model_config = ConfigDict(populate_by_name=True)


class VenueLiveResponse(BaseModel):
    """Response for GET /api/venues/{id}/live."""
    venue_id: str = Field(alias="venueId")
    live_data: LiveData = Field(alias="liveData")
    last_updated: datetime = Field(alias="lastUpdated")

    model_config = ConfigDict(populate_by_name=True)


class LiveBatchRequest(BaseModel):
    """Body for POST /api/venues/live-batch."""
    venue_ids: Optional[list[str]] = Field(default=None, alias="venueIds")

    model_config = ConfigDict(populate_by_name=True)


class LiveBatchResult(BaseModel):
    """One entry of a live batch response."""
    venue_id: str = Field(alias="venueId")
    live_data: LiveData = Field(alias="liveData")

    model_config = ConfigDict(populate_by_name=True)


class LiveBatchResponse(BaseModel):
    """Response for POST /api/venues/live-batch (unknown ids omitted)."""
    results: list[LiveBatchResult]
    last_updated: datetime = Field(alias="lastUpdated")

    model_config = ConfigDict(populate_by_name=True)
