"""Unit tests for synthetic occupancy curves."""
import random

import pytest

from app.models import VenueCategory, WEEKDAY_NAMES
from app.services.synthetic_curve import (
    BUSY_TIMES_WINDOW,
    DayType,
    SyntheticCurveGenerator,
    base_value,
    day_type,
    hour_label,
)

SUNDAY, MONDAY, WEDNESDAY, FRIDAY, SATURDAY = 0, 1, 3, 5, 6


@pytest.fixture
def generator():
    """Generator with a seeded random source."""
    return SyntheticCurveGenerator(rng=random.Random(1234), jitter=5.0)


@pytest.fixture
def flat_generator():
    """Generator without jitter."""
    return SyntheticCurveGenerator(rng=random.Random(0), jitter=0)


class TestDayTypes:
    """Test day-of-week handling (0=Sunday)."""

    @pytest.mark.parametrize(
        "day,expected",
        [
            (0, DayType.WEEKEND),
            (1, DayType.WEEKDAY),
            (4, DayType.WEEKDAY),
            (5, DayType.FRIDAY),
            (6, DayType.WEEKEND),
        ],
    )
    def test_day_type(self, day, expected):
        assert day_type(day) == expected

    @pytest.mark.parametrize(
        "hour,label",
        [(0, "12AM"), (3, "3AM"), (10, "10AM"), (12, "12PM"), (13, "1PM"), (23, "11PM")],
    )
    def test_hour_label(self, hour, label):
        assert hour_label(hour) == label


class TestBaseCurve:
    """Test the deterministic pre-jitter curve."""

    def test_latin_bar_saturday_uses_bar_weekend_branch(self, generator):
        """Test the bar/nightclub curve with the weekend adjustment."""
        curve = generator.base_curve("Latin Bar & Nightclub", SATURDAY)

        assert curve[20] == 90
        assert curve[23] == 95
        assert curve[1] == 30
        assert curve[8] == 5
        assert curve[14] == 35
        assert curve[18] == 65

    def test_bar_weekday_vs_friday(self, generator):
        """Test that Friday lifts late night but not the afternoon."""
        wednesday = generator.base_curve("Cocktail Bar", WEDNESDAY)
        friday = generator.base_curve("Cocktail Bar", FRIDAY)

        assert (wednesday[21], wednesday[23], wednesday[2]) == (75, 70, 10)
        assert (friday[21], friday[23], friday[2]) == (90, 95, 30)
        assert wednesday[14] == friday[14] == 20

    def test_restaurant_curve(self, generator):
        curve = generator.base_curve("Thai Restaurant", MONDAY)
        assert curve[13] == 85
        assert curve[19] == 80
        assert generator.base_curve("Thai Restaurant", SUNDAY)[19] == 95

    def test_cafe_curve(self, generator):
        assert generator.base_curve("Café", MONDAY)[8] == 80
        assert generator.base_curve("Café", SATURDAY)[8] == 60

    def test_unknown_category_uses_generic(self, generator):
        """Test that unknown labels fall back to the generic curve."""
        generic = [base_value(VenueCategory.GENERIC, h, False, False) for h in range(24)]
        assert generator.base_curve("Laundromat", MONDAY) == generic
        assert generator.base_curve("", MONDAY) == generic
        assert generator.base_curve(None, MONDAY) == generic

    def test_base_curve_is_deterministic(self):
        """Test that the base curve does not depend on the random source."""
        a = SyntheticCurveGenerator(rng=random.Random(1)).base_curve("Cocktail Bar", FRIDAY)
        b = SyntheticCurveGenerator(rng=random.Random(2)).base_curve("Cocktail Bar", FRIDAY)
        assert a == b

    @pytest.mark.parametrize("category", list(VenueCategory))
    def test_base_values_in_range(self, category):
        for hour in range(24):
            for is_weekend in (False, True):
                for is_friday in (False, True):
                    assert 0 <= base_value(category, hour, is_weekend, is_friday) <= 100


class TestJitteredCurve:
    """Test the jittered curve."""

    def test_jitter_stays_within_amplitude(self, generator):
        """Test that every hour moves by at most the jitter amplitude."""
        for label in ["Latin Bar & Nightclub", "Thai Restaurant", "Café", "Laundromat"]:
            for day in range(7):
                base = generator.base_curve(label, day)
                curve = generator.generate_curve(label, day)
                assert len(curve) == 24
                for b, v in zip(base, curve):
                    assert 0 <= v <= 100
                    assert abs(v - b) <= 5

    def test_clamps_to_100(self):
        """Test clamping when jitter would push above 100."""
        rng = random.Random(7)
        gen = SyntheticCurveGenerator(rng=rng, jitter=50)
        for _ in range(20):
            curve = gen.generate_curve("Latin Bar & Nightclub", SATURDAY)
            assert all(0 <= v <= 100 for v in curve)

    def test_zero_jitter_equals_base(self, flat_generator):
        assert flat_generator.generate_curve("Cocktail Bar", SATURDAY) == flat_generator.base_curve(
            "Cocktail Bar", SATURDAY
        )

    def test_seeded_generators_agree(self):
        a = SyntheticCurveGenerator(rng=random.Random(99)).generate_curve("Cocktail Bar", FRIDAY)
        b = SyntheticCurveGenerator(rng=random.Random(99)).generate_curve("Cocktail Bar", FRIDAY)
        assert a == b


class TestFullWeekAndBusyTimes:
    """Test week and busy-times helpers."""

    def test_full_week_keys_and_days(self, flat_generator):
        """Test that weekday names map to the right day types."""
        week = flat_generator.generate_full_week("Cocktail Bar", jittered=False)

        assert list(week.keys()) == WEEKDAY_NAMES
        assert week["Friday"] == flat_generator.base_curve("Cocktail Bar", FRIDAY)
        assert week["Sunday"] == flat_generator.base_curve("Cocktail Bar", SUNDAY)
        assert week["Monday"][21] == 75
        assert week["Saturday"][21] == 90

    def test_busy_times_window(self, flat_generator):
        """Test the 10AM-3AM window and labels."""
        points = flat_generator.generate_busy_times("Cocktail Bar", FRIDAY)

        assert len(points) == len(BUSY_TIMES_WINDOW)
        assert points[0].hour == "10AM"
        assert points[-1].hour == "3AM"
        assert all(p.is_predicted for p in points)

    def test_after_midnight_reads_next_day(self, flat_generator):
        """Test that 12AM-3AM come from the following day's curve."""
        # Thursday night runs into Friday: Friday's early hours are 30, Thursday's are 10
        points = {p.hour: p.percentage for p in flat_generator.generate_busy_times("Cocktail Bar", 4)}
        assert points["11PM"] == 70
        assert points["1AM"] == 30

    def test_busy_times_reuses_given_curve(self, generator):
        """Test that a supplied curve is used for the same-day hours."""
        today = [42] * 24
        points = generator.generate_busy_times("Cocktail Bar", MONDAY, today=today)
        same_day = [p for p in points[:14]]
        assert all(p.percentage == 42 for p in same_day)
