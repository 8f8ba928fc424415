"""Redis-based snapshot store for venue occupancy readings."""
import logging
from datetime import datetime
from typing import Iterable

import redis
from pydantic import ValidationError

from app.db import RedisClient
from app.exceptions import SnapshotStoreUnavailableError
from app.metrics import SNAPSHOT_STORE_ERRORS_TOTAL, SNAPSHOTS_WRITTEN_TOTAL
from app.models import OccupancySnapshot

logger = logging.getLogger(__name__)

# One sorted set per venue, scored by epoch seconds of the snapshot timestamp
SNAPSHOTS_KEY_FORMAT = "busy_snapshots_v1:{}"


class RedisSnapshotDAO:
    """Append-only, time-ordered snapshot store.

    Redis failures are raised as SnapshotStoreUnavailableError; they are not
    turned into empty results.
    """

    def __init__(self, client: RedisClient):
        """Initialize RedisSnapshotDAO.

        Args:
            client: RedisClient instance
        """
        self.client = client

    def add_snapshot(self, snapshot: OccupancySnapshot) -> None:
        """Persist a single snapshot."""
        self.add_snapshots([snapshot])

    def add_snapshots(self, snapshots: Iterable[OccupancySnapshot]) -> int:
        """Persist snapshots, grouped per venue.

        Returns:
            Number of snapshots written
        """
        by_venue: dict[str, dict[str, float]] = {}
        sources: dict[str, int] = {}
        for snapshot in snapshots:
            member = snapshot.model_dump_json(by_alias=True)
            by_venue.setdefault(snapshot.venue_id, {})[member] = snapshot.timestamp.timestamp()
            sources[snapshot.source] = sources.get(snapshot.source, 0) + 1

        written = 0
        for venue_id, mapping in by_venue.items():
            key = SNAPSHOTS_KEY_FORMAT.format(venue_id)
            try:
                self.client.zadd(key, mapping)
            except redis.RedisError as e:
                SNAPSHOT_STORE_ERRORS_TOTAL.labels(operation="add").inc()
                logger.error(f"[RedisSnapshotDAO] Failed to write snapshots for {venue_id}: {e}")
                raise SnapshotStoreUnavailableError(
                    f"Failed to write snapshots for venue {venue_id}"
                ) from e
            written += len(mapping)

        for source, count in sources.items():
            SNAPSHOTS_WRITTEN_TOTAL.labels(source=source).inc(count)

        logger.debug(f"[RedisSnapshotDAO] Wrote {written} snapshots")
        return written

    def fetch_snapshots(self, venue_id: str, since: datetime) -> list[OccupancySnapshot]:
        """Return all snapshots for a venue with timestamp >= since, oldest first.

        Args:
            venue_id: Venue identifier
            since: Start of the window (aware datetime)

        Returns:
            List of OccupancySnapshot in ascending timestamp order
        """
        key = SNAPSHOTS_KEY_FORMAT.format(venue_id)
        try:
            members = self.client.zrangebyscore(key, since.timestamp(), "+inf")
        except redis.RedisError as e:
            SNAPSHOT_STORE_ERRORS_TOTAL.labels(operation="fetch").inc()
            logger.error(f"[RedisSnapshotDAO] Failed to fetch snapshots for {venue_id}: {e}")
            raise SnapshotStoreUnavailableError(
                f"Failed to fetch snapshots for venue {venue_id}"
            ) from e

        snapshots = []
        for member in members:
            try:
                snapshots.append(OccupancySnapshot.model_validate_json(member))
            except ValidationError as e:
                logger.error(f"[RedisSnapshotDAO] Skipping malformed snapshot for {venue_id}: {e}")
                continue

        logger.debug(
            f"[RedisSnapshotDAO] Fetched {len(snapshots)} snapshots for {venue_id} "
            f"since {since.isoformat()}"
        )
        return snapshots

    def count_snapshots_since(self, venue_id: str, since: datetime) -> int:
        """Count snapshots for a venue with timestamp >= since."""
        key = SNAPSHOTS_KEY_FORMAT.format(venue_id)
        try:
            return self.client.zcount(key, since.timestamp(), "+inf")
        except redis.RedisError as e:
            SNAPSHOT_STORE_ERRORS_TOTAL.labels(operation="count").inc()
            logger.error(f"[RedisSnapshotDAO] Failed to count snapshots for {venue_id}: {e}")
            raise SnapshotStoreUnavailableError(
                f"Failed to count snapshots for venue {venue_id}"
            ) from e
