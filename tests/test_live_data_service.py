"""Unit tests for LiveDataService."""
import random
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import pytz

from app.cache import InMemoryTTLCache
from app.exceptions import VenueNotFoundError
from app.models import BusyStatus, Venue
from app.services import LiveDataService, SyntheticCurveGenerator
from app.services.live_data_service import occupancy_from_percentage

# Saturday 2025-03-08 22:00 UTC
SATURDAY_22 = datetime(2025, 3, 8, 22, tzinfo=timezone.utc)

VENUES = {
    "1": Venue(id="1", name="Hey Chica", category="Latin Bar & Nightclub", capacity=230),
    "2": Venue(id="2", name="The Met Brisbane", category="Cocktail Bar", capacity=150),
    "4": Venue(id="4", name="Mystery Spot", category="Cocktail Bar"),
}


@pytest.fixture
def mock_venue_dao():
    dao = Mock()
    dao.get_venue.side_effect = lambda venue_id: VENUES.get(venue_id)
    return dao


@pytest.fixture
def service(mock_venue_dao):
    """LiveDataService with no jitter, UTC, pinned clock."""
    return LiveDataService(
        mock_venue_dao,
        SyntheticCurveGenerator(rng=random.Random(0), jitter=0),
        InMemoryTTLCache(ttl_seconds=300, key_prefix="live:"),
        tz=pytz.UTC,
        now_fn=lambda: SATURDAY_22,
    )


class TestOccupancyFromPercentage:
    """Test headcount derivation."""

    def test_known_capacity(self):
        assert occupancy_from_percentage(230, 90) == (207, 90)

    def test_never_exceeds_capacity(self):
        occupancy, pct = occupancy_from_percentage(150, 100)
        assert occupancy == 150
        assert pct == 100

    def test_unknown_capacity_uses_baseline(self):
        assert occupancy_from_percentage(None, 90) == (180, 90)

    def test_zero_capacity(self):
        assert occupancy_from_percentage(0, 50) == (0, 50)


class TestLiveDataService:
    """Test live data computation and caching."""

    def test_compute_live_data_saturday_night(self, service):
        """Test status and headcount at 22:00 on a Saturday for a bar."""
        live = service.compute_live_data(VENUES["1"])

        assert live.current_status == BusyStatus.VERY_BUSY
        assert live.current_occupancy == 207
        assert len(live.busy_times) == 18
        assert {p.hour: p.percentage for p in live.busy_times}["10PM"] == 90

    def test_compute_live_data_without_capacity(self, service):
        live = service.compute_live_data(VENUES["4"])
        assert live.current_occupancy == 180

    def test_uses_venue_timezone(self, mock_venue_dao):
        """Test that the current hour is read in the venue timezone."""
        service = LiveDataService(
            mock_venue_dao,
            SyntheticCurveGenerator(rng=random.Random(0), jitter=0),
            InMemoryTTLCache(ttl_seconds=300),
            tz=pytz.timezone("Australia/Brisbane"),
            # 22:00 UTC Saturday is 08:00 Sunday in Brisbane: bar base is 5
            now_fn=lambda: SATURDAY_22,
        )
        live = service.get_live_data("2")
        assert live.current_status == BusyStatus.QUIET
        assert live.current_occupancy == round(150 * 5 / 100)

    def test_get_live_data_is_cached(self, service, mock_venue_dao):
        first = service.get_live_data("1")
        second = service.get_live_data("1")

        assert first is second
        assert mock_venue_dao.get_venue.call_count == 1

    def test_get_live_data_unknown_venue(self, service):
        with pytest.raises(VenueNotFoundError):
            service.get_live_data("99")

    def test_batch_omits_unknown_ids(self, service):
        """Test a mixed batch of valid and invalid ids."""
        results = service.get_live_data_batch(["1", "99", "2"])
        assert set(results.keys()) == {"1", "2"}

    def test_batch_shares_cache_with_single_lookup(self, service, mock_venue_dao):
        single = service.get_live_data("1")
        batch = service.get_live_data_batch(["1"])
        assert batch["1"] is single
