"""TTL caches package."""
from app.cache.ttl_cache import TTLCache, InMemoryTTLCache
from app.cache.redis_ttl_cache import RedisTTLCache

__all__ = ["TTLCache", "InMemoryTTLCache", "RedisTTLCache"]
