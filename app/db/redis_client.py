"""Thin Redis client wrapper used by the snapshot DAO and the Redis cache."""
import logging
from typing import Optional

import redis

logger = logging.getLogger(__name__)


class RedisClient:
    """Redis client exposing the key/value and sorted-set operations we use."""

    def __init__(self, client: redis.Redis):
        """Wrap an existing redis client and check connectivity.

        Args:
            client: redis.Redis instance (created with decode_responses=True)

        Raises:
            redis.ConnectionError if Redis cannot be reached
        """
        self.client = client

        try:
            self.ping()
            logger.info("Connected to Redis")
        except redis.ConnectionError as e:
            logger.error(f"Could not connect to Redis: {e}")
            raise

    @classmethod
    def from_settings(
        cls, host: str = "redis", port: int = 6379, password: str = "", db: int = 0
    ) -> "RedisClient":
        """Create a client from connection parameters."""
        return cls(
            redis.Redis(
                host=host,
                port=port,
                password=password if password else None,
                db=db,
                decode_responses=True,
            )
        )

    def get(self, key: str) -> Optional[str]:
        """Get value for a key, None if it doesn't exist."""
        return self.client.get(key)

    def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        """Set a key-value pair with expiration.

        Args:
            key: Redis key
            ttl_seconds: Time-to-live in seconds
            value: String value to store
        """
        self.client.setex(key, ttl_seconds, value)

    def del_(self, key: str) -> None:
        """Delete a key from Redis."""
        self.client.delete(key)

    def zadd(self, name: str, mapping: dict[str, float]) -> int:
        """Add members with scores to a sorted set.

        Returns:
            Number of new members added
        """
        return self.client.zadd(name, mapping)

    def zrangebyscore(self, name: str, min_score: float, max_score: float | str = "+inf") -> list[str]:
        """Members of a sorted set with min_score <= score <= max_score, ascending."""
        return self.client.zrangebyscore(name, min_score, max_score)

    def zcount(self, name: str, min_score: float, max_score: float | str = "+inf") -> int:
        return self.client.zcount(name, min_score, max_score)

    def ping(self) -> bool:
        """Check connectivity to Redis.

        Raises:
            redis.ConnectionError if connection fails
        """
        return self.client.ping()
