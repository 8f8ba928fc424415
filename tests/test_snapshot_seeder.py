"""Unit tests for SnapshotSeeder."""
import math
import random
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
import pytz

from app.models import Venue
from app.services import SnapshotSeeder
from app.services.snapshot_seeder import seed_percentage

NOW = datetime(2025, 3, 8, 12, tzinfo=timezone.utc)
VENUE = Venue(id="1", name="Hey Chica", category="Latin Bar & Nightclub", capacity=230)


@pytest.fixture
def mock_snapshot_dao():
    dao = Mock()
    dao.add_snapshots.side_effect = lambda snapshots: len(list(snapshots))
    return dao


@pytest.fixture
def seeder(mock_snapshot_dao):
    return SnapshotSeeder(mock_snapshot_dao, tz=pytz.UTC, rng=random.Random(5))


class TestSeedPercentage:
    """Test hour-of-day seed ranges."""

    @pytest.mark.parametrize(
        "hour,low,high",
        [(18, 60, 89), (23, 60, 89), (12, 30, 59), (17, 30, 59), (0, 40, 79), (2, 40, 79), (3, 10, 29), (9, 10, 29)],
    )
    def test_ranges(self, hour, low, high):
        rng = random.Random(hour)
        for _ in range(50):
            assert low <= seed_percentage(hour, rng) <= high


class TestSnapshotSeeder:
    """Test seed snapshot generation."""

    def test_build_snapshots_covers_last_24_hours(self, seeder):
        snapshots = seeder.build_snapshots(VENUE, NOW)

        assert len(snapshots) == 24
        assert {s.timestamp for s in snapshots} == {NOW - timedelta(hours=i) for i in range(24)}
        for s in snapshots:
            assert s.venue_id == "1"
            assert s.source == "seed"
            assert s.occupancy_count == math.floor(s.occupancy_percentage / 100 * 230)
            assert s.status is not None

    def test_build_snapshots_uses_local_hour(self, mock_snapshot_dao):
        """Test that ranges follow the venue's local hour."""
        seeder = SnapshotSeeder(
            mock_snapshot_dao, tz=pytz.timezone("Australia/Brisbane"), rng=random.Random(1)
        )
        # 10:00 UTC is 20:00 in Brisbane: evening peak range
        snapshot = seeder.build_snapshots(VENUE, NOW.replace(hour=10))[0]
        assert 60 <= snapshot.occupancy_percentage <= 89

    def test_seed_missing_skips_venues_with_recent_data(self, seeder, mock_snapshot_dao):
        venues = [VENUE, Venue(id="2", name="The Met Brisbane", capacity=150)]
        mock_snapshot_dao.count_snapshots_since.side_effect = lambda venue_id, since: 5 if venue_id == "1" else 0

        seeded = seeder.seed_missing(venues, now=NOW)

        assert seeded == 1
        mock_snapshot_dao.add_snapshots.assert_called_once()
        written = mock_snapshot_dao.add_snapshots.call_args.args[0]
        assert {s.venue_id for s in written} == {"2"}
        since = mock_snapshot_dao.count_snapshots_since.call_args_list[0].args[1]
        assert since == NOW - timedelta(hours=24)

    def test_venue_without_capacity_has_zero_count(self, seeder):
        snapshots = seeder.build_snapshots(Venue(id="9", name="Unknown"), NOW)
        assert all(s.occupancy_count == 0 for s in snapshots)
