"""Routers package."""
from app.routers.venue_router import router as venue_router, set_venue_handler
from app.routers.busy_router import router as busy_router, set_busy_handler

__all__ = ["venue_router", "set_venue_handler", "busy_router", "set_busy_handler"]
