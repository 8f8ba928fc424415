"""Seeds the snapshot store with a plausible last-24-hours history."""
import logging
import math
import random
from datetime import datetime, timedelta
from typing import Iterable, Optional

import pytz

from app.dao import RedisSnapshotDAO
from app.models import OccupancySnapshot, Venue

logger = logging.getLogger(__name__)

SEED_HOURS = 24
SEED_SOURCE = "seed"

# (first hour, last hour, low pct, high pct), inclusive
SEED_RANGES = [
    (18, 23, 60, 89),  # evening peak
    (12, 17, 30, 59),  # afternoon
    (0, 2, 40, 79),  # late night
]
DEFAULT_SEED_RANGE = (10, 29)


def seed_percentage(hour: int, rng: random.Random) -> int:
    """Random occupancy percentage typical for a local hour of the day."""
    for first, last, low, high in SEED_RANGES:
        if first <= hour <= last:
            return rng.randint(low, high)
    low, high = DEFAULT_SEED_RANGE
    return rng.randint(low, high)


class SnapshotSeeder:
    """Writes 24 hourly seed snapshots for venues without recent data."""

    def __init__(self, snapshot_dao: RedisSnapshotDAO, tz=None, rng: Optional[random.Random] = None):
        self.snapshot_dao = snapshot_dao
        self.tz = tz or pytz.UTC
        self.rng = rng or random.Random()

    def build_snapshots(self, venue: Venue, now: datetime) -> list[OccupancySnapshot]:
        """One snapshot per hour for the 24 hours ending at now."""
        capacity = venue.capacity or 0
        snapshots = []
        for i in range(SEED_HOURS):
            timestamp = now - timedelta(hours=i)
            hour = timestamp.astimezone(self.tz).hour
            pct = seed_percentage(hour, self.rng)
            snapshots.append(
                OccupancySnapshot(
                    venue_id=venue.id,
                    timestamp=timestamp,
                    occupancy_count=math.floor(pct / 100 * capacity),
                    occupancy_percentage=pct,
                    source=SEED_SOURCE,
                )
            )
        return snapshots

    def seed_venue(self, venue: Venue, now: Optional[datetime] = None) -> int:
        """Write seed snapshots for a venue. Returns the number written."""
        now = now or datetime.now(pytz.UTC)
        return self.snapshot_dao.add_snapshots(self.build_snapshots(venue, now))

    def seed_missing(self, venues: Iterable[Venue], now: Optional[datetime] = None) -> int:
        """Seed every venue that has no snapshots in the last 24 hours.

        Returns:
            Number of venues seeded
        """
        now = now or datetime.now(pytz.UTC)
        since = now - timedelta(hours=SEED_HOURS)

        seeded = 0
        for venue in venues:
            if self.snapshot_dao.count_snapshots_since(venue.id, since) > 0:
                logger.debug(f"[SnapshotSeeder] {venue.id} already has recent snapshots")
                continue
            written = self.seed_venue(venue, now)
            logger.info(f"[SnapshotSeeder] Seeded {written} snapshots for {venue}")
            seeded += 1

        logger.info(f"[SnapshotSeeder] Seeded {seeded} venues")
        return seeded
