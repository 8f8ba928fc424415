"""Typed errors raised at the I/O boundary and translated by the routers.

Aggregation and curve generation never raise; everything here belongs to
venue lookup, query validation and the snapshot store.
"""


class NightlifeError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class VenueNotFoundError(NightlifeError):
    """Unknown venue id (HTTP 404)."""

    def __init__(self, venue_id: str):
        self.venue_id = venue_id
        super().__init__(f"Venue not found: {venue_id}")


class InvalidWindowError(NightlifeError):
    """Malformed time window or query filter (HTTP 400).

    Out-of-range windows are rejected, never clamped.
    """


class SnapshotStoreUnavailableError(NightlifeError):
    """The snapshot store could not be reached (HTTP 503)."""


class DataFileError(NightlifeError):
    """A static data file is missing or malformed (HTTP 500)."""
