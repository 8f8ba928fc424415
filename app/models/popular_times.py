"""Weekly popular times model (SerpAPI or synthetic estimate)."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class PopularTimes(BaseModel):
    """Hourly busy-ness (24 values, 0-100) for each weekday name."""
    venue_id: str = Field(alias="venueId")
    source: str  # "live" (SerpAPI) or "estimated" (synthetic)
    popular_times: dict[str, list[int]] = Field(alias="popularTimes")
    last_updated: datetime = Field(alias="lastUpdated")

    model_config = ConfigDict(populate_by_name=True)
