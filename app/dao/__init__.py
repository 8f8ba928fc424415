"""Data access objects package."""
from app.dao.redis_snapshot_dao import RedisSnapshotDAO
from app.dao.json_venue_dao import JsonVenueDAO

__all__ = ["RedisSnapshotDAO", "JsonVenueDAO"]
