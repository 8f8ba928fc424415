"""Synthetic occupancy curves for venues without a live data source.

Each venue category family has a hand-authored step function of
hour -> base percentage, adjusted for weekend and Friday nights. The base
curve is a pure function of (category, hour, day type); jitter comes from an
injectable ``random.Random`` so tests can pin or disable it.

Days of the week use 0=Sunday to 6=Saturday. Friday (5) has its own day type;
Saturday (6) and Sunday (0) are the weekend.
"""
import logging
import random
from enum import Enum
from typing import Optional

from app.models import BusyTimePoint, VenueCategory, WEEKDAY_NAMES, classify_category

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24

FRIDAY = 5
SATURDAY = 6
SUNDAY = 0

# Evening window shown on the venue screen: 10AM through 3AM.
BUSY_TIMES_WINDOW = [10, 11, 12, 13, 14, 15, 16, 17, 18, 19, 20, 21, 22, 23, 0, 1, 2, 3]


class DayType(str, Enum):
    WEEKDAY = "weekday"
    FRIDAY = "friday"
    WEEKEND = "weekend"


def day_type(day_of_week: int) -> DayType:
    """Day type for a day of week (0=Sunday)."""
    day = day_of_week % 7
    if day == FRIDAY:
        return DayType.FRIDAY
    if day in (SATURDAY, SUNDAY):
        return DayType.WEEKEND
    return DayType.WEEKDAY


def hour_label(hour: int) -> str:
    """Format an hour 0-23 as "12AM", "10AM", "12PM", "11PM"."""
    suffix = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{display}{suffix}"


def _bar_popularity(hour: int, is_weekend: bool, is_friday: bool) -> int:
    if 0 <= hour <= 5:
        return 30 if is_weekend or is_friday else 10
    if 6 <= hour <= 11:
        return 5
    if 12 <= hour <= 16:
        return 35 if is_weekend else 20
    if 17 <= hour <= 19:
        return 65 if is_weekend else 50
    if 20 <= hour <= 22:
        return 90 if is_weekend or is_friday else 75
    if hour == 23:
        return 95 if is_weekend or is_friday else 70
    return 15


def _restaurant_popularity(hour: int, is_weekend: bool) -> int:
    if 0 <= hour <= 6:
        return 5
    if 7 <= hour <= 9:
        return 45 if is_weekend else 35
    if 10 <= hour <= 11:
        return 20
    if 12 <= hour <= 14:
        return 85
    if 15 <= hour <= 17:
        return 30
    if 18 <= hour <= 20:
        return 95 if is_weekend else 80
    if 21 <= hour <= 22:
        return 65 if is_weekend else 45
    return 10


def _cafe_popularity(hour: int, is_weekend: bool) -> int:
    if 0 <= hour <= 6:
        return 5
    if 7 <= hour <= 9:
        return 60 if is_weekend else 80
    if 10 <= hour <= 11:
        return 50
    if 12 <= hour <= 14:
        return 65
    if 15 <= hour <= 17:
        return 45
    if 18 <= hour <= 20:
        return 30
    return 10


def _generic_popularity(hour: int, is_weekend: bool) -> int:
    if 0 <= hour <= 7:
        return 15
    if 8 <= hour <= 11:
        return 45
    if 12 <= hour <= 17:
        return 70
    if 18 <= hour <= 22:
        return 80 if is_weekend else 60
    return 25


def base_value(category: VenueCategory, hour: int, is_weekend: bool, is_friday: bool) -> int:
    """Deterministic base percentage for one hour, clamped to [0, 100]."""
    if category == VenueCategory.BAR_NIGHTCLUB:
        value = _bar_popularity(hour, is_weekend, is_friday)
    elif category == VenueCategory.RESTAURANT:
        value = _restaurant_popularity(hour, is_weekend)
    elif category == VenueCategory.CAFE:
        value = _cafe_popularity(hour, is_weekend)
    else:
        value = _generic_popularity(hour, is_weekend)
    return max(0, min(100, value))


class SyntheticCurveGenerator:
    """Generates plausible 24-hour occupancy curves per venue category."""

    def __init__(self, rng: Optional[random.Random] = None, jitter: float = 5.0):
        """Initialize the generator.

        Args:
            rng: Random source for jitter (a fresh Random() if None)
            jitter: Uniform jitter amplitude; each hour moves by [-jitter, +jitter]
        """
        self.rng = rng or random.Random()
        self.jitter = jitter

    def base_curve(self, category_label: Optional[str], day_of_week: int) -> list[int]:
        """Pre-jitter curve: 24 deterministic percentages."""
        category = classify_category(category_label)
        kind = day_type(day_of_week)
        is_weekend = kind == DayType.WEEKEND
        is_friday = kind == DayType.FRIDAY
        return [
            base_value(category, hour, is_weekend, is_friday)
            for hour in range(HOURS_PER_DAY)
        ]

    def generate_curve(self, category_label: Optional[str], day_of_week: int) -> list[int]:
        """Base curve plus per-hour uniform jitter, rounded and clamped to [0, 100]."""
        curve = []
        for base in self.base_curve(category_label, day_of_week):
            noisy = base + self.rng.uniform(-self.jitter, self.jitter) if self.jitter else base
            curve.append(max(0, min(100, round(noisy))))
        return curve

    def generate_full_week(
        self, category_label: Optional[str], jittered: bool = True
    ) -> dict[str, list[int]]:
        """Curves for every weekday, keyed "Monday" through "Sunday"."""
        week: dict[str, list[int]] = {}
        for index, name in enumerate(WEEKDAY_NAMES):
            day_of_week = (index + 1) % 7  # Monday=1 ... Sunday=0
            if jittered:
                week[name] = self.generate_curve(category_label, day_of_week)
            else:
                week[name] = self.base_curve(category_label, day_of_week)

        logger.debug(
            f"[SyntheticCurveGenerator] Generated week for category "
            f"'{category_label}' ({classify_category(category_label).value})"
        )
        return week

    def generate_busy_times(
        self,
        category_label: Optional[str],
        day_of_week: int,
        today: Optional[list[int]] = None,
    ) -> list[BusyTimePoint]:
        """Busy-times points over the 10AM-3AM evening window.

        Hours after midnight belong to the following calendar day, so they
        are read from the next day's curve. Pass ``today`` to reuse an
        already generated curve for day_of_week.
        """
        if today is None:
            today = self.generate_curve(category_label, day_of_week)
        tomorrow = self.generate_curve(category_label, (day_of_week + 1) % 7)

        points = []
        for hour in BUSY_TIMES_WINDOW:
            curve = today if hour >= BUSY_TIMES_WINDOW[0] else tomorrow
            points.append(
                BusyTimePoint(hour=hour_label(hour), percentage=curve[hour], is_predicted=True)
            )
        return points
