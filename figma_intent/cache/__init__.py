"""Cache layer: in-memory LRU + TTL store and the key/TTL policy manager."""

from .manager import CacheManager
from .store import CacheBackendError, MemoryCacheStore
from .types import CacheConfig, CacheEntry, CacheOperation, CacheStats, CacheTTLByType

__all__ = [
    "CacheBackendError",
    "CacheConfig",
    "CacheEntry",
    "CacheManager",
    "CacheOperation",
    "CacheStats",
    "CacheTTLByType",
    "MemoryCacheStore",
]
