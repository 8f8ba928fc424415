"""Redis-backed TTL cache for pydantic values.

Values are stored as JSON with SETEX, so Redis handles expiry. There is no
single-flight here: concurrent misses on the same key may each compute and
overwrite the entry. The computed values are idempotent and of the same
shape, so the last write simply wins.
"""
import logging
from typing import Optional

import redis
from pydantic import BaseModel, ValidationError

from app.cache.ttl_cache import TTLCache
from app.db import RedisClient

logger = logging.getLogger(__name__)


class RedisTTLCache(TTLCache):
    """TTL cache storing one pydantic model per key in Redis."""

    def __init__(
        self,
        client: RedisClient,
        model_cls: type[BaseModel],
        ttl_seconds: int,
        key_prefix: str = "",
        name: str = "redis",
    ):
        """Initialize Redis cache.

        Args:
            client: RedisClient instance
            model_cls: Pydantic model used to decode cached JSON
            ttl_seconds: Lifetime of an entry in seconds
            key_prefix: Prefix added to every key (e.g. "live:")
            name: Label used in metrics and logs
        """
        super().__init__(ttl_seconds, key_prefix=key_prefix, name=name)
        self.client = client
        self.model_cls = model_cls

    def get(self, key: str) -> Optional[BaseModel]:
        skey = self.storage_key(key)
        try:
            json_str = self.client.get(skey)
            if json_str is None:
                return None
            return self.model_cls.model_validate_json(json_str)
        except redis.RedisError as e:
            logger.error(f"[RedisTTLCache] Failed to read {skey}, treating as miss: {e}")
            return None
        except ValidationError as e:
            logger.error(
                f"[RedisTTLCache] Stale schema at {skey} for {self.model_cls.__name__}, "
                f"treating as miss: {e}"
            )
            return None

    def set(self, key: str, value: BaseModel) -> None:
        skey = self.storage_key(key)
        try:
            self.client.setex(skey, int(self.ttl_seconds), value.model_dump_json(by_alias=True))
        except redis.RedisError as e:
            logger.error(f"[RedisTTLCache] Failed to write {skey}: {e}")

    def delete(self, key: str) -> None:
        skey = self.storage_key(key)
        try:
            self.client.del_(skey)
        except redis.RedisError as e:
            logger.error(f"[RedisTTLCache] Failed to delete {skey}: {e}")
