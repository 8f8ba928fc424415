"""Unit tests for busy-ness aggregation."""
import random
from datetime import datetime, timedelta, timezone

import pytest
import pytz

from app.models import BusyStatus, OccupancySnapshot
from app.services import busy_aggregator
from app.services.busy_aggregator import (
    aggregate,
    current_busyness,
    local_hour_and_day,
    peak_hours,
    popular_days,
)

# 2025-03-08 is a Saturday
SATURDAY = datetime(2025, 3, 8, tzinfo=timezone.utc)


def make_snapshot(ts: datetime, pct: float, count: int = 0, venue_id: str = "V1") -> OccupancySnapshot:
    return OccupancySnapshot(
        venue_id=venue_id, timestamp=ts, occupancy_count=count, occupancy_percentage=pct
    )


@pytest.fixture
def sample_window():
    """Snapshots at hour 20 (70, 90) and hour 3 (10), all on a Saturday in UTC."""
    return [
        make_snapshot(SATURDAY.replace(hour=20), 70, count=161),
        make_snapshot(SATURDAY.replace(hour=20, minute=30), 90, count=207),
        make_snapshot(SATURDAY.replace(hour=3), 10, count=23),
    ]


class TestAggregate:
    """Test aggregate() shape and values."""

    def test_hourly_scenario(self, sample_window):
        """Test averages and peaks for hours 20 and 3; all others zero."""
        result = aggregate(sample_window)

        assert len(result.hourly_aggregates) == 24
        h20 = result.hourly_aggregates[20]
        h3 = result.hourly_aggregates[3]
        assert (h20.average_occupancy, h20.peak_occupancy) == (80, 90)
        assert (h3.average_occupancy, h3.peak_occupancy) == (10, 10)
        for hour, h in enumerate(result.hourly_aggregates):
            assert h.hour == hour
            if hour not in (3, 20):
                assert (h.average_occupancy, h.peak_occupancy) == (0, 0)

    def test_daily_aggregates(self, sample_window):
        """Test daily buckets with 0=Sunday."""
        result = aggregate(sample_window)

        assert len(result.daily_aggregates) == 7
        assert [d.day_of_week for d in result.daily_aggregates] == list(range(7))
        saturday = result.daily_aggregates[6]
        assert saturday.average_occupancy == pytest.approx(170 / 3)
        for d in result.daily_aggregates[:6]:
            assert d.average_occupancy == 0

    def test_peak_hour_is_global_by_default(self, sample_window):
        """Test that every day carries the global peak hour."""
        extra = make_snapshot(datetime(2025, 3, 10, 9, tzinfo=timezone.utc), 50)  # Monday 9:00
        result = aggregate(sample_window + [extra])

        assert {d.peak_hour for d in result.daily_aggregates} == {20}

    def test_per_day_peak_hour(self, sample_window):
        """Test per-day peak hours; days without data keep the global peak."""
        extra = make_snapshot(datetime(2025, 3, 10, 9, tzinfo=timezone.utc), 50)  # Monday 9:00
        result = aggregate(sample_window + [extra], per_day_peak=True)

        assert result.daily_aggregates[6].peak_hour == 20
        assert result.daily_aggregates[1].peak_hour == 9
        assert result.daily_aggregates[0].peak_hour == 20

    def test_summary(self, sample_window):
        """Test total visitors, average and count."""
        summary = aggregate(sample_window).summary
        assert summary.total_visitors == 161 + 207 + 23
        assert summary.average_occupancy == pytest.approx(170 / 3)
        assert summary.snapshot_count == 3

    def test_empty_window_is_all_zero(self):
        """Test that an empty window aggregates to zeros, not an error."""
        result = aggregate([])

        assert len(result.hourly_aggregates) == 24
        assert len(result.daily_aggregates) == 7
        assert all(h.average_occupancy == 0 and h.peak_occupancy == 0 for h in result.hourly_aggregates)
        assert all(d.average_occupancy == 0 and d.peak_hour == 0 for d in result.daily_aggregates)
        assert result.summary.total_visitors == 0
        assert result.summary.snapshot_count == 0

    def test_single_snapshot_window_still_full_shape(self):
        """Test sparse windows still produce 24 + 7 entries."""
        result = aggregate([make_snapshot(SATURDAY.replace(hour=22), 40)])
        assert len(result.hourly_aggregates) == 24
        assert len(result.daily_aggregates) == 7

    def test_ties_go_to_earliest_hour(self):
        """Test that equal hourly averages pick the lowest hour."""
        result = aggregate([
            make_snapshot(SATURDAY.replace(hour=22), 60),
            make_snapshot(SATURDAY.replace(hour=18), 60),
        ])
        assert result.daily_aggregates[0].peak_hour == 18

    def test_permutation_invariance(self):
        """Test that input order does not change the result."""
        rng = random.Random(42)
        snapshots = [
            make_snapshot(
                SATURDAY - timedelta(minutes=rng.randint(0, 60 * 24 * 30)),
                rng.uniform(0, 100),
                count=rng.randint(0, 300),
            )
            for _ in range(200)
        ]
        expected = aggregate(snapshots).model_dump()

        for _ in range(5):
            shuffled = snapshots[:]
            rng.shuffle(shuffled)
            assert aggregate(shuffled).model_dump() == expected

    def test_local_timezone_bucketing(self):
        """Test that hours and days are taken in the venue timezone."""
        brisbane = pytz.timezone("Australia/Brisbane")  # UTC+10, no DST
        # Saturday 12:00 UTC is Saturday 22:00 in Brisbane
        snapshot = make_snapshot(SATURDAY.replace(hour=12), 80)
        result = aggregate([snapshot], tz=brisbane)

        assert result.hourly_aggregates[22].average_occupancy == 80
        assert result.daily_aggregates[6].average_occupancy == 80

        # Saturday 20:00 UTC is Sunday 06:00 in Brisbane
        assert local_hour_and_day(SATURDAY.replace(hour=20), brisbane) == (6, 0)

    def test_sample_counts_not_serialized(self, sample_window):
        """Test that sample counts stay internal."""
        data = aggregate(sample_window).model_dump(by_alias=True)
        assert "sampleCount" not in data["hourlyAggregates"][20]
        assert data["hourlyAggregates"][20]["averageOccupancy"] == 80


class TestOverviewHelpers:
    """Test peak_hours, popular_days and current_busyness."""

    def test_peak_hours_only_observed(self, sample_window):
        """Test that only hours with data are ranked."""
        assert peak_hours(aggregate(sample_window)) == ["20:00", "3:00"]

    def test_peak_hours_limit_and_order(self):
        snapshots = [
            make_snapshot(SATURDAY.replace(hour=h), pct)
            for h, pct in [(18, 50), (19, 70), (20, 90), (21, 90), (22, 30)]
        ]
        assert peak_hours(aggregate(snapshots)) == ["20:00", "21:00", "19:00"]

    def test_popular_days(self):
        """Test popular days ranked from data."""
        snapshots = [
            make_snapshot(datetime(2025, 3, 7, 21, tzinfo=timezone.utc), 90),  # Friday
            make_snapshot(datetime(2025, 3, 8, 21, tzinfo=timezone.utc), 80),  # Saturday
            make_snapshot(datetime(2025, 3, 4, 21, tzinfo=timezone.utc), 20),  # Tuesday
        ]
        assert popular_days(aggregate(snapshots)) == ["Friday", "Saturday"]

    def test_popular_days_empty(self):
        assert popular_days(aggregate([])) == []

    def test_current_busyness_uses_latest(self, sample_window):
        """Test that the most recent snapshot decides the current status."""
        current = current_busyness(sample_window)
        assert current.current_status == BusyStatus.VERY_BUSY
        assert current.current_occupancy == 207
        assert current.occupancy_percentage == 90

    def test_current_busyness_empty(self):
        current = current_busyness([])
        assert current.current_status == BusyStatus.UNKNOWN
        assert current.current_occupancy == 0

    def test_current_busyness_order_independent(self):
        """Test tie-breaking on equal timestamps."""
        ts = SATURDAY.replace(hour=21)
        a = make_snapshot(ts, 40, count=90)
        b = make_snapshot(ts, 85, count=190)
        assert current_busyness([a, b]) == current_busyness([b, a])
        assert current_busyness([a, b]).current_occupancy == 190

    def test_day_names_start_on_sunday(self):
        assert busy_aggregator.DAY_NAMES[0] == "Sunday"
        assert busy_aggregator.DAY_NAMES[6] == "Saturday"
