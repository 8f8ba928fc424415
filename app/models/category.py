"""Closed venue category vocabulary for synthetic occupancy curves.

Free-text venue categories (e.g. "Latin Bar & Nightclub") are reduced to one
of four curve families. Matching is case- and accent-insensitive substring
search in a fixed order; the first family that matches wins.
"""
import unicodedata
from enum import Enum
from typing import Optional


class VenueCategory(str, Enum):
    """Curve family used by the synthetic generator."""
    BAR_NIGHTCLUB = "bar_nightclub"
    RESTAURANT = "restaurant"
    CAFE = "cafe"
    GENERIC = "generic"


# Order matters: "Bar & Restaurant" is a bar.
CATEGORY_KEYWORDS: list[tuple[VenueCategory, tuple[str, ...]]] = [
    (VenueCategory.BAR_NIGHTCLUB, ("bar", "nightclub")),
    (VenueCategory.RESTAURANT, ("restaurant",)),
    (VenueCategory.CAFE, ("cafe",)),
]


def _normalize(label: str) -> str:
    stripped = "".join(
        c for c in unicodedata.normalize("NFD", label)
        if unicodedata.category(c) != "Mn"
    )
    return stripped.lower()


def classify_category(label: Optional[str]) -> VenueCategory:
    """Classify a free-text venue category.

    Args:
        label: Venue category as stored on the venue (may be None or empty)

    Returns:
        Matching VenueCategory, GENERIC when nothing matches
    """
    if not label:
        return VenueCategory.GENERIC

    normalized = _normalize(label)
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return category
    return VenueCategory.GENERIC
