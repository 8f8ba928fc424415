"""Venue handler for the static JSON fallback feed."""
import logging
import math
from datetime import date, datetime
from typing import Any, Callable, Optional, Union

import pytz
from pydantic import ValidationError

from app.dao import JsonVenueDAO
from app.exceptions import InvalidWindowError, VenueNotFoundError
from app.models import (
    Event,
    LiveBatchRequest,
    LiveBatchResponse,
    LiveBatchResult,
    Location,
    PopularTimes,
    PostsResponse,
    Venue,
    VenueDetailResponse,
    VenueListMetadata,
    VenueListResponse,
    VenueLiveResponse,
)
from app.services import LiveDataService, PopularTimesService

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_METERS = 10000
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500
KM_PER_DEGREE = 111

QueryValue = Union[str, int, float, None]


def parse_query_number(
    name: str,
    value: QueryValue,
    cast: Callable[[Any], Union[int, float]],
    default: Optional[Union[int, float]] = None,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> Optional[Union[int, float]]:
    """Parse and range-check a numeric query value; missing values give default.

    Raises:
        InvalidWindowError: if the value does not parse or is out of range
    """
    if value is None or value == "":
        return default
    try:
        number = cast(value)
    except (TypeError, ValueError) as e:
        raise InvalidWindowError(f"{name} must be a number, got '{value}'") from e
    if not math.isfinite(number):
        raise InvalidWindowError(f"{name} must be finite, got '{value}'")
    if minimum is not None and number < minimum:
        raise InvalidWindowError(f"{name} must be >= {minimum}, got {number}")
    if maximum is not None and number > maximum:
        raise InvalidWindowError(f"{name} must be <= {maximum}, got {number}")
    return number


def within_bounding_box(venue: Venue, lat: float, lng: float, radius_meters: float) -> bool:
    """Rough lat/lng box around a point; venues without coordinates never match."""
    if venue.latitude is None or venue.longitude is None:
        return False

    radius_km = radius_meters / 1000
    lat_range = radius_km / KM_PER_DEGREE
    cos_lat = math.cos(math.radians(lat))
    lng_range = radius_km / (KM_PER_DEGREE * cos_lat) if cos_lat > 1e-9 else 180.0

    return abs(venue.latitude - lat) <= lat_range and abs(venue.longitude - lng) <= lng_range


def parse_date_filter(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD query value; None passes through.

    Raises:
        InvalidWindowError: if the value is not an ISO date
    """
    if value is None or value == "":
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidWindowError(f"date must be YYYY-MM-DD, got '{value}'") from e


class VenueHandler:
    """Handler for the /api venue, live, events and posts requests."""

    def __init__(
        self,
        venue_dao: JsonVenueDAO,
        live_data_service: LiveDataService,
        popular_times_service: PopularTimesService,
    ):
        """Initialize venue handler.

        Args:
            venue_dao: Static JSON data access
            live_data_service: Cached live busy-ness
            popular_times_service: Popular times (SerpAPI or estimate)
        """
        self.venue_dao = venue_dao
        self.live_data_service = live_data_service
        self.popular_times_service = popular_times_service

    def list_venues(
        self,
        lat: QueryValue = None,
        lng: QueryValue = None,
        radius: QueryValue = None,
        category: Optional[str] = None,
        limit: QueryValue = None,
        offset: QueryValue = None,
    ) -> VenueListResponse:
        """Venues filtered by category and location, one page at a time.

        Args:
            lat: Latitude; with lng, keeps venues inside a box of `radius` meters
            lng: Longitude
            radius: Box half-size in meters (default 10000)
            category: Case-insensitive substring of the venue category
            limit: Page size (default 50, at most 500)
            offset: Number of matching venues to skip

        Raises:
            InvalidWindowError: if a numeric value is malformed or out of range
        """
        lat = parse_query_number("lat", lat, float, minimum=-90, maximum=90)
        lng = parse_query_number("lng", lng, float, minimum=-180, maximum=180)
        radius = parse_query_number("radius", radius, float, default=DEFAULT_RADIUS_METERS, minimum=1)
        limit = parse_query_number("limit", limit, int, default=DEFAULT_PAGE_SIZE, minimum=1, maximum=MAX_PAGE_SIZE)
        offset = parse_query_number("offset", offset, int, default=0, minimum=0)

        venues = self.venue_dao.list_venues()
        if category:
            needle = category.casefold()
            venues = [v for v in venues if v.category and needle in v.category.casefold()]

        location = None
        if lat is not None and lng is not None:
            location = Location(lat=lat, lng=lng)
            venues = [v for v in venues if within_bounding_box(v, lat, lng, radius)]

        page = venues[offset:offset + limit]

        logger.info(f"[VenueHandler] Listing {len(page)} of {len(venues)} matching venues")
        return VenueListResponse(
            venues=page,
            metadata=VenueListMetadata(
                total_venues=len(venues),
                last_updated=self._now(),
                location=location,
                limit=limit,
                offset=offset,
                has_more=offset + len(page) < len(venues),
            ),
        )

    def get_venue(self, venue_id: str) -> VenueDetailResponse:
        venue = self.venue_dao.get_venue(venue_id)
        if venue is None:
            raise VenueNotFoundError(venue_id)
        return VenueDetailResponse(venue=venue, last_updated=self._now())

    def get_live(self, venue_id: str) -> VenueLiveResponse:
        """Cached live data for one venue."""
        live_data = self.live_data_service.get_live_data(venue_id)
        return VenueLiveResponse(venue_id=venue_id, live_data=live_data, last_updated=self._now())

    def get_live_batch(self, payload: Any) -> LiveBatchResponse:
        """Live data for {"venueIds": [...]}; unknown ids are left out.

        Raises:
            InvalidWindowError: if venueIds is missing or not a list of ids
        """
        try:
            request = LiveBatchRequest.model_validate(payload if isinstance(payload, dict) else {})
        except ValidationError as e:
            raise InvalidWindowError("Body must include { venueIds: string[] }") from e
        if request.venue_ids is None:
            raise InvalidWindowError("Body must include { venueIds: string[] }")

        by_id = self.live_data_service.get_live_data_batch(request.venue_ids)
        results = [
            LiveBatchResult(venue_id=venue_id, live_data=live_data)
            for venue_id, live_data in by_id.items()
        ]

        logger.info(
            f"[VenueHandler] Live batch: {len(results)}/{len(request.venue_ids)} venues resolved"
        )
        return LiveBatchResponse(results=results, last_updated=self._now())

    def get_events(self, venue_id: str, date_filter: Optional[str] = None) -> list[dict[str, Any]]:
        """Events for a venue, optionally only those starting on a UTC date."""
        day = parse_date_filter(date_filter)
        events = self.venue_dao.list_events_for_venue(venue_id)
        if day is None:
            return events

        matching = []
        for raw in events:
            try:
                event = Event.model_validate(raw)
            except ValidationError:
                logger.debug(f"[VenueHandler] Skipping event with bad fields: {raw.get('id')}")
                continue
            if event.start_time is None:
                continue
            start = event.start_time
            if start.tzinfo is not None:
                start = start.astimezone(pytz.UTC)
            if start.date() == day:
                matching.append(raw)
        return matching

    def get_sports(self, venue_id: str) -> list[Any]:
        # No sports data source yet; clients render an empty list
        return []

    async def get_popular_times(self, venue_id: str) -> PopularTimes:
        return await self.popular_times_service.get_popular_times(venue_id)

    def get_posts(self) -> PostsResponse:
        doc = self.venue_dao.get_posts_document()
        return PostsResponse(
            posts=doc["posts"],
            last_updated=doc.get("lastUpdated") or self._now(),
            metadata=doc.get("metadata") or {},
        )

    def ping(self) -> dict[str, str]:
        """Health check endpoint.

        Returns:
            {"status": "pong"}
        """
        logger.debug("[VenueHandler] Ping")
        return {"status": "pong"}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(pytz.UTC)
