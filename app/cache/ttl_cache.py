"""Time-to-live caches for computed busy-ness data.

``TTLCache`` is the interface the services depend on; the container picks the
in-memory or Redis implementation from settings.

Expired entries are treated as absent and recomputed. The in-memory cache
guarantees single-flight per key: concurrent callers of a missing or expired
key wait for one computation instead of each recomputing, and nobody is
served an expired value.
"""
import logging
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, Optional

from app.exceptions import VenueNotFoundError
from app.metrics import CACHE_COMPUTE_DURATION_SECONDS, CACHE_REQUESTS_TOTAL

logger = logging.getLogger(__name__)

ComputeFn = Callable[[str], Any]


class TTLCache(ABC):
    """Key -> value cache with a fixed time-to-live."""

    def __init__(self, ttl_seconds: float, key_prefix: str = "", name: str = "cache"):
        """Initialize cache.

        Args:
            ttl_seconds: Lifetime of an entry in seconds
            key_prefix: Prefix added to every key in storage (e.g. "live:")
            name: Label used in metrics and logs
        """
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self.name = name

    def storage_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a value for ttl_seconds."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a value."""

    def get_or_compute(self, key: str, compute_fn: ComputeFn) -> Any:
        """Return the cached value for key, computing and storing it on a miss.

        Exceptions from compute_fn (including VenueNotFoundError) propagate
        and nothing is cached.
        """
        value = self.get(key)
        if value is not None:
            CACHE_REQUESTS_TOTAL.labels(cache=self.name, result="hit").inc()
            return value

        CACHE_REQUESTS_TOTAL.labels(cache=self.name, result="miss").inc()
        value = self._compute(key, compute_fn)
        if value is not None:
            self.set(key, value)
        return value

    def get_or_compute_batch(self, keys: Iterable[str], compute_fn: ComputeFn) -> dict[str, Any]:
        """Cached-or-computed value for each key.

        Keys whose computation raises VenueNotFoundError are silently omitted.
        The result keeps the first-seen order of the keys.
        """
        results: dict[str, Any] = {}
        for key in keys:
            if key in results:
                continue
            try:
                value = self.get_or_compute(key, compute_fn)
            except VenueNotFoundError:
                logger.debug(f"[{self.name}] Skipping unknown key in batch: {key}")
                continue
            if value is not None:
                results[key] = value
        return results

    def _compute(self, key: str, compute_fn: ComputeFn) -> Any:
        start_time = time.perf_counter()
        try:
            return compute_fn(key)
        finally:
            duration = time.perf_counter() - start_time
            CACHE_COMPUTE_DURATION_SECONDS.labels(cache=self.name).observe(duration)


class InMemoryTTLCache(TTLCache):
    """Process-wide dict cache guarded by a lock, with per-key single-flight."""

    def __init__(
        self,
        ttl_seconds: float,
        key_prefix: str = "",
        name: str = "memory",
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(ttl_seconds, key_prefix=key_prefix, name=name)
        self.clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()
        # storage key -> [lock, number of callers holding or waiting on it]
        self._key_locks: dict[str, list] = {}

    def get(self, key: str) -> Optional[Any]:
        skey = self.storage_key(key)
        with self._lock:
            entry = self._entries.get(skey)
            if entry is None:
                return None
            expires_at, value = entry
            if self.clock() >= expires_at:
                del self._entries[skey]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        skey = self.storage_key(key)
        with self._lock:
            self._entries[skey] = (self.clock() + self.ttl_seconds, value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(self.storage_key(key), None)

    def get_or_compute(self, key: str, compute_fn: ComputeFn) -> Any:
        value = self.get(key)
        if value is not None:
            CACHE_REQUESTS_TOTAL.labels(cache=self.name, result="hit").inc()
            return value

        with self._key_lock(key):
            # Another caller may have filled the entry while we waited
            value = self.get(key)
            if value is not None:
                CACHE_REQUESTS_TOTAL.labels(cache=self.name, result="hit").inc()
                return value

            CACHE_REQUESTS_TOTAL.labels(cache=self.name, result="miss").inc()
            value = self._compute(key, compute_fn)
            if value is not None:
                self.set(key, value)
            return value

    def purge_expired(self) -> int:
        """Drop expired entries.

        Returns:
            Number of expired entries removed
        """
        now = self.clock()
        with self._lock:
            expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
            for skey in expired:
                del self._entries[skey]

        if expired:
            logger.debug(f"[{self.name}] Purged {len(expired)} expired entries")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @contextmanager
    def _key_lock(self, key: str) -> Iterator[None]:
        """Hold the per-key lock; it is dropped once no caller needs it."""
        skey = self.storage_key(key)
        with self._lock:
            entry = self._key_locks.get(skey)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._key_locks[skey] = entry
            entry[1] += 1

        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._key_locks[skey]
