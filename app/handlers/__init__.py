"""HTTP request handlers package."""
from app.handlers.venue_handler import VenueHandler
from app.handlers.busy_handler import BusyHandler

__all__ = ["VenueHandler", "BusyHandler"]
