"""Occupancy snapshot model using Pydantic."""
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.busy_status import BusyStatus, classify_status


class OccupancySnapshot(BaseModel):
    """One occupancy observation for a venue.

    Immutable once created. ``status`` is derived from the percentage when the
    ingestion path does not supply one. Naive timestamps are read as UTC.
    """

    venue_id: str = Field(alias="venueId")
    timestamp: datetime
    occupancy_count: int = Field(default=0, ge=0, alias="occupancyCount")
    occupancy_percentage: float = Field(ge=0, le=100, alias="occupancyPercentage")
    status: Optional[BusyStatus] = None
    source: str = "live"

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Attach UTC to naive timestamps."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode="before")
    @classmethod
    def derive_status(cls, data: Any) -> Any:
        """Fill in status from the occupancy percentage when missing."""
        if not isinstance(data, dict):
            return data
        if data.get("status") is not None:
            return data
        pct = data.get("occupancyPercentage", data.get("occupancy_percentage"))
        if pct is None:
            return data
        try:
            status = classify_status(float(pct))
        except (TypeError, ValueError):
            # Left for field validation to report
            return data
        return {**data, "status": status}
