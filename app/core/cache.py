"""
In-memory request cache with a fixed time-to-live.

Keyed by the normalized query (trimmed, lowercased). Only successful lookups are
stored; expired entries are dropped lazily when read.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def cache_key(raw_query: str) -> str:
    """Normalize a query so "Salmon" and "salmon " share an entry."""
    return raw_query.strip().lower()


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    inserted_at: float


class RequestCache(Generic[T]):
    """Thread-safe TTL cache. Last writer wins on identical keys."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> T | None:
        """Return the cached value, or None if absent or older than the ttl."""
        k = cache_key(key)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(k)
            if entry is None:
                logger.info("[cache:get] MISS key=%r", k)
                return None
            if now - entry.inserted_at >= self.ttl_seconds:
                del self._entries[k]
                logger.info("[cache:get] EXPIRED key=%r", k)
                return None
        logger.info("[cache:get] HIT key=%r", k)
        return entry.value

    def put(self, key: str, value: T) -> None:
        """Store value under the normalized key, resetting its age."""
        k = cache_key(key)
        with self._lock:
            self._entries[k] = CacheEntry(value=value, inserted_at=self._clock())
        logger.info("[cache:put] key=%r", k)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
