"""Unit tests for Pydantic data models and classifiers."""
import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from app.models import (
    BusyStatus,
    BusyTimePoint,
    LiveBatchRequest,
    LiveData,
    OccupancySnapshot,
    PopularTimes,
    Venue,
    VenueCategory,
    classify_category,
    classify_status,
)


class TestStatusClassification:
    """Test the canonical busy-ness threshold table."""

    @pytest.mark.parametrize(
        "percentage,expected",
        [
            (0, BusyStatus.QUIET),
            (29, BusyStatus.QUIET),
            (29.9, BusyStatus.QUIET),
            (30, BusyStatus.MODERATE),
            (59, BusyStatus.MODERATE),
            (60, BusyStatus.BUSY),
            (79, BusyStatus.BUSY),
            (80, BusyStatus.VERY_BUSY),
            (100, BusyStatus.VERY_BUSY),
        ],
    )
    def test_thresholds(self, percentage, expected):
        """Test each boundary of the 30/60/80 table."""
        assert classify_status(percentage) == expected

    def test_zero_is_unknown_for_fallback_feed(self):
        """Test the no-data tier used by the static feed."""
        assert classify_status(0, unknown_when_empty=True) == BusyStatus.UNKNOWN
        assert classify_status(1, unknown_when_empty=True) == BusyStatus.QUIET
        assert classify_status(85, unknown_when_empty=True) == BusyStatus.VERY_BUSY

    def test_status_serializes_as_plain_string(self):
        """Test that statuses go over the wire as their names."""
        assert json.dumps({"s": BusyStatus.VERY_BUSY}) == '{"s": "VERY_BUSY"}'


class TestCategoryClassification:
    """Test free-text category to curve family mapping."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            # Categories used by the venue data
            ("Latin Bar & Nightclub", VenueCategory.BAR_NIGHTCLUB),
            ("Cocktail Bar", VenueCategory.BAR_NIGHTCLUB),
            ("Pub & Live Music", VenueCategory.GENERIC),
            # Other families
            ("Nightclub", VenueCategory.BAR_NIGHTCLUB),
            ("Italian Restaurant", VenueCategory.RESTAURANT),
            ("Cafe", VenueCategory.CAFE),
            ("Café", VenueCategory.CAFE),
            ("CAFÉ & BAKERY", VenueCategory.CAFE),
            ("Bar & Restaurant", VenueCategory.BAR_NIGHTCLUB),
            ("Restaurant & Cafe", VenueCategory.RESTAURANT),
            # Fallbacks
            ("", VenueCategory.GENERIC),
            (None, VenueCategory.GENERIC),
            ("Laundromat", VenueCategory.GENERIC),
        ],
    )
    def test_classify_category(self, label, expected):
        """Test ordered, case- and accent-insensitive matching."""
        assert classify_category(label) == expected


class TestOccupancySnapshot:
    """Test OccupancySnapshot model."""

    def test_status_derived_from_percentage(self):
        """Test that a missing status is filled in from the percentage."""
        snapshot = OccupancySnapshot(
            venue_id="1",
            timestamp=datetime(2025, 3, 8, 10, tzinfo=timezone.utc),
            occupancy_count=150,
            occupancy_percentage=65,
        )
        assert snapshot.status == BusyStatus.BUSY

    def test_explicit_status_is_kept(self):
        """Test that an ingested status is not overwritten."""
        snapshot = OccupancySnapshot(
            venue_id="1",
            timestamp=datetime(2025, 3, 8, 10, tzinfo=timezone.utc),
            occupancy_percentage=65,
            status=BusyStatus.MODERATE,
        )
        assert snapshot.status == BusyStatus.MODERATE

    def test_naive_timestamp_is_utc(self):
        """Test that naive timestamps are read as UTC."""
        snapshot = OccupancySnapshot(
            venue_id="1", timestamp=datetime(2025, 3, 8, 10), occupancy_percentage=10
        )
        assert snapshot.timestamp.tzinfo is not None
        assert snapshot.timestamp.utcoffset().total_seconds() == 0

    def test_percentage_out_of_range_rejected(self):
        """Test that percentages outside [0, 100] fail validation."""
        with pytest.raises(ValidationError):
            OccupancySnapshot(venue_id="1", timestamp=datetime.now(timezone.utc), occupancy_percentage=101)

    def test_negative_count_rejected(self):
        """Test that negative occupancy counts fail validation."""
        with pytest.raises(ValidationError):
            OccupancySnapshot(
                venue_id="1",
                timestamp=datetime.now(timezone.utc),
                occupancy_count=-1,
                occupancy_percentage=10,
            )

    def test_snapshot_is_immutable(self):
        """Test that snapshots cannot be modified after creation."""
        snapshot = OccupancySnapshot(
            venue_id="1", timestamp=datetime.now(timezone.utc), occupancy_percentage=10
        )
        with pytest.raises(ValidationError):
            snapshot.occupancy_percentage = 50

    def test_json_round_trip_uses_camel_case(self):
        """Test the stored JSON shape."""
        snapshot = OccupancySnapshot(
            venue_id="1",
            timestamp=datetime(2025, 3, 8, 10, tzinfo=timezone.utc),
            occupancy_count=23,
            occupancy_percentage=10,
            source="seed",
        )
        data = json.loads(snapshot.model_dump_json(by_alias=True))
        assert data["venueId"] == "1"
        assert data["occupancyCount"] == 23
        assert data["status"] == "QUIET"
        assert OccupancySnapshot.model_validate_json(snapshot.model_dump_json(by_alias=True)) == snapshot


class TestVenueModels:
    """Test venue and live data models."""

    def test_venue_keeps_extra_fields(self):
        """Test that unknown venue fields are echoed back."""
        venue = Venue.model_validate(
            {
                "id": "1",
                "name": "Hey Chica",
                "category": "Latin Bar & Nightclub",
                "capacity": 230,
                "musicGenres": [{"id": "1", "name": "Salsa"}],
            }
        )
        data = venue.model_dump(by_alias=True, exclude_none=True)
        assert data["musicGenres"] == [{"id": "1", "name": "Salsa"}]
        assert data["capacity"] == 230

    def test_venue_to_string(self):
        """Test __str__ method."""
        venue = Venue(id="2", name="The Met Brisbane", category="Cocktail Bar")
        assert str(venue) == "Venue(id=2, name=The Met Brisbane, category=Cocktail Bar)"

    def test_live_data_aliases(self):
        """Test LiveData serialization for the mobile client."""
        live = LiveData(
            current_status=BusyStatus.BUSY,
            current_occupancy=120,
            busy_times=[BusyTimePoint(hour="10PM", percentage=85)],
        )
        data = live.model_dump(by_alias=True)
        assert data["currentStatus"] == BusyStatus.BUSY
        assert data["busyTimes"][0] == {"hour": "10PM", "percentage": 85, "isPredicted": True}

    def test_live_batch_request_requires_list(self):
        """Test that venueIds must be a list."""
        assert LiveBatchRequest.model_validate({"venueIds": ["1", "2"]}).venue_ids == ["1", "2"]
        assert LiveBatchRequest.model_validate({}).venue_ids is None
        with pytest.raises(ValidationError):
            LiveBatchRequest.model_validate({"venueIds": "1"})

    def test_popular_times_model(self):
        """Test PopularTimes serialization."""
        model = PopularTimes(
            venue_id="1",
            source="estimated",
            popular_times={"Monday": [0] * 24},
            last_updated=datetime(2025, 3, 8, tzinfo=timezone.utc),
        )
        data = model.model_dump(by_alias=True)
        assert data["venueId"] == "1"
        assert data["popularTimes"]["Monday"] == [0] * 24
