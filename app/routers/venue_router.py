"""FastAPI routes for the static venue feed (/api/...)."""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, HTTPException, Query

from app.exceptions import DataFileError, InvalidWindowError, VenueNotFoundError
from app.models import (
    LiveBatchResponse,
    PopularTimes,
    PostsResponse,
    VenueDetailResponse,
    VenueListResponse,
    VenueLiveResponse,
)

logger = logging.getLogger(__name__)

# Create router at module level
router = APIRouter()

# Global handler reference - set during startup
_venue_handler = None


def set_venue_handler(handler):
    """Set the venue handler instance (called during startup)."""
    global _venue_handler
    _venue_handler = handler
    logger.info("[VenueRouter] Handler injected successfully")


def get_handler():
    """Get the venue handler, raising error if not initialized."""
    if _venue_handler is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return _venue_handler


def _to_http_error(e: Exception, operation: str) -> HTTPException:
    if isinstance(e, VenueNotFoundError):
        return HTTPException(status_code=404, detail="Venue not found")
    if isinstance(e, InvalidWindowError):
        return HTTPException(status_code=400, detail=e.message)
    if isinstance(e, DataFileError):
        logger.error(f"[VenueRouter] Data file error in {operation}: {e}")
        return HTTPException(status_code=500, detail=e.message)
    logger.error(f"[VenueRouter] Error in {operation}: {e}")
    return HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/api/venues",
    response_model=VenueListResponse,
    response_model_by_alias=True,
    summary="List venues",
    description="Venues from the data file, filtered by category and a lat/lng box, paged",
)
def list_venues(
    lat: Optional[str] = Query(None, description="Latitude (-90 to 90)"),
    lng: Optional[str] = Query(None, description="Longitude (-180 to 180)"),
    radius: Optional[str] = Query(None, description="Search radius in meters (default 10000)"),
    category: Optional[str] = Query(None, description="Category substring, case-insensitive"),
    limit: Optional[str] = Query(None, description="Page size (default 50, max 500)"),
    offset: Optional[str] = Query(None, description="Venues to skip (default 0)"),
) -> VenueListResponse:
    # Numbers are parsed by the handler so malformed values answer 400
    try:
        handler = get_handler()
        return handler.list_venues(
            lat=lat, lng=lng, radius=radius, category=category, limit=limit, offset=offset
        )
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "list_venues")


@router.post(
    "/api/venues/live-batch",
    response_model=LiveBatchResponse,
    summary="Batch live data",
    description="Live busy-ness for {venueIds: [...]}; unknown ids are omitted",
)
def live_batch(payload: Any = Body(None)) -> LiveBatchResponse:
    try:
        handler = get_handler()
        return handler.get_live_batch(payload)
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "live_batch")


@router.get(
    "/api/venues/{venue_id}",
    response_model=VenueDetailResponse,
    summary="Get venue",
)
def get_venue(venue_id: str) -> VenueDetailResponse:
    try:
        handler = get_handler()
        return handler.get_venue(venue_id)
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "get_venue")


@router.get(
    "/api/venues/{venue_id}/live",
    response_model=VenueLiveResponse,
    summary="Live data for a venue",
    description="Current status, occupancy and busy-times curve (cached)",
)
def get_live(venue_id: str) -> VenueLiveResponse:
    try:
        handler = get_handler()
        return handler.get_live(venue_id)
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "get_live")


@router.get(
    "/api/venues/{venue_id}/events",
    summary="Events for a venue",
    description="Optionally filtered to events starting on date (YYYY-MM-DD, UTC)",
)
def get_events(
    venue_id: str,
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
) -> list[dict[str, Any]]:
    try:
        handler = get_handler()
        return handler.get_events(venue_id, date)
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "get_events")


@router.get("/api/venues/{venue_id}/sports", summary="Sports for a venue")
def get_sports(venue_id: str) -> list[Any]:
    handler = get_handler()
    return handler.get_sports(venue_id)


@router.get(
    "/api/venues/{venue_id}/popular-times",
    response_model=PopularTimes,
    summary="Weekly popular times",
    description="SerpAPI popular times when available, otherwise a category estimate",
)
async def get_popular_times(venue_id: str) -> PopularTimes:
    try:
        handler = get_handler()
        return await handler.get_popular_times(venue_id)
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "get_popular_times")


@router.get("/api/posts", response_model=PostsResponse, summary="Discovery posts")
def get_posts() -> PostsResponse:
    try:
        handler = get_handler()
        return handler.get_posts()
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "get_posts")


@router.get(
    "/ping",
    summary="Health check",
    description="Health check endpoint",
)
def ping() -> dict[str, str]:
    """Health check endpoint."""
    handler = get_handler()
    return handler.ping()
