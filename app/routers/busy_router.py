"""FastAPI routes for snapshot-backed busy-ness (/venues/{id}/busy...)."""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from app.exceptions import (
    DataFileError,
    InvalidWindowError,
    SnapshotStoreUnavailableError,
    VenueNotFoundError,
)
from app.models import AnalyticsOverview, BusyAggregatesResponse, BusySnapshotsResponse

logger = logging.getLogger(__name__)

router = APIRouter()

# Global handler reference - set during startup (None when the snapshot store is disabled)
_busy_handler = None


def set_busy_handler(handler):
    """Set the busy handler instance (called during startup)."""
    global _busy_handler
    _busy_handler = handler
    logger.info("[BusyRouter] Handler injected successfully")


def get_handler():
    """Get the busy handler; 503 while the snapshot store is not available."""
    if _busy_handler is None:
        raise HTTPException(status_code=503, detail="Snapshot store not available")
    return _busy_handler


def _to_http_error(e: Exception, operation: str) -> HTTPException:
    if isinstance(e, VenueNotFoundError):
        return HTTPException(status_code=404, detail="Venue not found")
    if isinstance(e, InvalidWindowError):
        return HTTPException(status_code=400, detail=e.message)
    if isinstance(e, SnapshotStoreUnavailableError):
        logger.error(f"[BusyRouter] Snapshot store unavailable in {operation}: {e}")
        return HTTPException(status_code=503, detail="Snapshot store unavailable")
    if isinstance(e, DataFileError):
        logger.error(f"[BusyRouter] Data file error in {operation}: {e}")
        return HTTPException(status_code=500, detail=e.message)
    logger.error(f"[BusyRouter] Error in {operation}: {e}")
    return HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/venues/{venue_id}/busy",
    response_model=BusySnapshotsResponse,
    summary="Recent busy snapshots",
    description="Snapshots from the last `hours` hours (default 24) and the current status",
)
def get_busy(
    venue_id: str,
    hours: Optional[str] = Query(None, description="Window size in hours"),
) -> BusySnapshotsResponse:
    try:
        handler = get_handler()
        return handler.get_busy_snapshots(venue_id, hours)
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "get_busy")


@router.get(
    "/venues/{venue_id}/busy/aggregates",
    response_model=BusyAggregatesResponse,
    summary="Busy aggregates",
    description="Hourly and daily average occupancy over the aggregation window",
)
def get_busy_aggregates(venue_id: str) -> BusyAggregatesResponse:
    try:
        handler = get_handler()
        return handler.get_busy_aggregates(venue_id)
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "get_busy_aggregates")


@router.get(
    "/venues/{venue_id}/analytics/overview",
    response_model=AnalyticsOverview,
    summary="Analytics overview",
    description="Total visitors, average occupancy, peak hours and popular days",
)
def get_analytics_overview(venue_id: str) -> AnalyticsOverview:
    try:
        handler = get_handler()
        return handler.get_analytics_overview(venue_id)
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "get_analytics_overview")
