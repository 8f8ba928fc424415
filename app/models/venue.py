"""Venue, event and post models for the static JSON data files."""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Venue(BaseModel):
    """Venue as stored in data/venues.json.

    Only the fields used by the busy-ness logic are typed; everything else
    (pricing, music genres, opening hours, ...) is kept and echoed back.
    """

    id: str
    name: str = ""
    category: Optional[str] = None
    location: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    capacity: Optional[int] = None
    current_occupancy: Optional[int] = Field(default=None, alias="currentOccupancy")
    rating: Optional[float] = None
    price_range: Optional[str] = Field(default=None, alias="priceRange")
    place_id: Optional[str] = Field(default=None, alias="placeId")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def __str__(self) -> str:
        return f"Venue(id={self.id}, name={self.name}, category={self.category})"


class Event(BaseModel):
    """Event as stored in data/events.json."""

    id: str
    venue_id: str = Field(alias="venueId")
    title: str = ""
    start_time: Optional[datetime] = Field(default=None, alias="startTime")
    end_time: Optional[datetime] = Field(default=None, alias="endTime")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Location(BaseModel):
    """Location echoed back in the venue list metadata."""
    lat: float
    lng: float


class VenueListMetadata(BaseModel):
    """Paging info for a venue list; totalVenues counts matches before paging."""
    total_venues: int = Field(alias="totalVenues")
    last_updated: datetime = Field(alias="lastUpdated")
    location: Optional[Location] = None
    limit: int = 50
    offset: int = 0
    has_more: bool = Field(default=False, alias="hasMore")

    model_config = ConfigDict(populate_by_name=True)


class VenueListResponse(BaseModel):
    """Response for GET /api/venues."""
    venues: list[Venue]
    metadata: VenueListMetadata


class VenueDetailResponse(BaseModel):
    """Response for GET /api/venues/{id}."""
    venue: Venue
    last_updated: datetime = Field(alias="lastUpdated")

    model_config = ConfigDict(populate_by_name=True)


class PostsResponse(BaseModel):
    """Response for GET /api/posts."""
    posts: list[dict[str, Any]]
    last_updated: Any = Field(alias="lastUpdated")
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)
