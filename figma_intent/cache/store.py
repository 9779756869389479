"""In-memory cache store (L1 cache).

Features:
- TTL-based expiration, checked lazily on read (no background sweep)
- LRU eviction when max size is reached
- Glob pattern invalidation ('*' is the only wildcard)

All operations are serialized by a single asyncio.Lock so concurrent
requests cannot corrupt the entry map or the access order.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections import OrderedDict
from typing import Any, Callable, Optional

from .types import CacheEntry, CacheStats

logger = logging.getLogger(__name__)


class CacheBackendError(RuntimeError):
    """Raised when the cache backend itself fails (distinct from a miss)."""


class MemoryCacheStore:
    """Async key → value store with per-entry TTL and LRU eviction.

    Args:
        max_size: Maximum number of live entries.
        clock: Returns the current time in seconds; injectable for tests.
    """

    def __init__(
        self,
        max_size: int = 100,
        clock: Callable[[], float] = time.time,
    ):
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._max_size = max_size
        self._clock = clock
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    def _now_ms(self) -> float:
        return self._clock() * 1000

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            if entry.is_expired(self._now_ms()):
                del self._entries[key]
                self._misses += 1
                logger.debug(f"cache expired: {key}")
                return None

            # Most recently used entries live at the end
            self._entries.move_to_end(key)
            self._hits += 1
            return entry.data

    async def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: float,
        version: Optional[str] = None,
    ) -> None:
        async with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_size:
                self._evict_lru()

            self._entries[key] = CacheEntry(
                data=value,
                timestamp=self._now_ms(),
                ttl_seconds=ttl_seconds,
                version=version,
            )
            self._entries.move_to_end(key)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def invalidate(self, pattern: str) -> int:
        """Remove every key fully matching the glob pattern. Returns the count."""
        regex = pattern_to_regex(pattern)
        async with self._lock:
            matched = [key for key in self._entries if regex.fullmatch(key)]
            for key in matched:
                del self._entries[key]
        if matched:
            logger.debug(f"cache invalidate: pattern={pattern}, removed={len(matched)}")
        return len(matched)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    async def size(self) -> int:
        return len(self._entries)

    def stats(self) -> CacheStats:
        total = self._hits + self._misses
        return CacheStats(
            hits=self._hits,
            misses=self._misses,
            size=len(self._entries),
            hit_rate=self._hits / total if total > 0 else 0.0,
        )

    def _evict_lru(self) -> None:
        if self._entries:
            lru_key, _ = self._entries.popitem(last=False)
            logger.debug(f"cache evict (LRU): {lru_key}")


def pattern_to_regex(pattern: str) -> "re.Pattern[str]":
    """Convert a glob-like pattern to an anchored regex.

    'abc123:*:file' → ^abc123:.*:file$
    """
    escaped = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.compile(f"^{escaped}$", re.DOTALL)
