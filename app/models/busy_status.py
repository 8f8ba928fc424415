"""Busy-ness status classification.

One canonical threshold table is used everywhere:

    < 30   QUIET
    30-59  MODERATE
    60-79  BUSY
    >= 80  VERY_BUSY

The static fallback feed also reports a "no data" tier: with
``unknown_when_empty=True`` a percentage of 0 (or less) is UNKNOWN.
"""
from enum import Enum

MODERATE_THRESHOLD = 30
BUSY_THRESHOLD = 60
VERY_BUSY_THRESHOLD = 80


class BusyStatus(str, Enum):
    """Occupancy classification sent to the mobile client."""
    UNKNOWN = "UNKNOWN"
    QUIET = "QUIET"
    MODERATE = "MODERATE"
    BUSY = "BUSY"
    VERY_BUSY = "VERY_BUSY"


def classify_status(percentage: float, unknown_when_empty: bool = False) -> BusyStatus:
    """Map an occupancy percentage to a BusyStatus.

    Args:
        percentage: Occupancy percentage (0-100)
        unknown_when_empty: If True, percentages <= 0 classify as UNKNOWN

    Returns:
        BusyStatus for the percentage
    """
    if unknown_when_empty and percentage <= 0:
        return BusyStatus.UNKNOWN
    if percentage >= VERY_BUSY_THRESHOLD:
        return BusyStatus.VERY_BUSY
    if percentage >= BUSY_THRESHOLD:
        return BusyStatus.BUSY
    if percentage >= MODERATE_THRESHOLD:
        return BusyStatus.MODERATE
    return BusyStatus.QUIET
