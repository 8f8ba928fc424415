"""Static JSON file data access for venues, events and posts.

Files are read on every call so edits to the data directory show up without
a restart.
"""
import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from app.exceptions import DataFileError
from app.models import Venue

logger = logging.getLogger(__name__)


class JsonVenueDAO:
    """Reads venues.json, events.json and posts.json from a data directory."""

    def __init__(self, venues_path: Path, events_path: Path, posts_path: Path):
        """Initialize JsonVenueDAO.

        Args:
            venues_path: Path to venues.json ({"venues": [...]})
            events_path: Path to events.json ({"events": [...]})
            posts_path: Path to posts.json ({"posts": [...], ...})
        """
        self.venues_path = Path(venues_path)
        self.events_path = Path(events_path)
        self.posts_path = Path(posts_path)

    def list_venues(self) -> list[Venue]:
        """Return all venues."""
        raw_venues = self._read_list(self.venues_path, "venues")
        try:
            return [Venue.model_validate(v) for v in raw_venues]
        except ValidationError as e:
            logger.error(f"[JsonVenueDAO] Invalid venue in {self.venues_path}: {e}")
            raise DataFileError(f"{self.venues_path.name} missing or malformed") from e

    def get_venue(self, venue_id: str) -> Optional[Venue]:
        """Return a venue by id, or None if not found."""
        for venue in self.list_venues():
            if venue.id == venue_id:
                return venue
        return None

    def list_events_for_venue(self, venue_id: str) -> list[dict[str, Any]]:
        """Return raw event documents for a venue."""
        events = self._read_list(self.events_path, "events")
        return [e for e in events if isinstance(e, dict) and e.get("venueId") == venue_id]

    def get_posts_document(self) -> dict[str, Any]:
        """Return the posts document ({"posts": [...], "lastUpdated": ..., "metadata": ...})."""
        doc = self._read(self.posts_path)
        if not isinstance(doc, dict) or not isinstance(doc.get("posts"), list):
            raise DataFileError(f"{self.posts_path.name} missing or malformed")
        return doc

    def _read_list(self, path: Path, field: str) -> list[Any]:
        doc = self._read(path)
        if not isinstance(doc, dict) or not isinstance(doc.get(field), list):
            raise DataFileError(f"{path.name} missing or malformed")
        return doc[field]

    def _read(self, path: Path) -> Any:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            logger.error(f"[JsonVenueDAO] Data file not found: {path}")
            raise DataFileError(f"{path.name} missing or malformed") from e
        except json.JSONDecodeError as e:
            logger.error(f"[JsonVenueDAO] Invalid JSON in {path}: {e}")
            raise DataFileError(f"{path.name} missing or malformed") from e
