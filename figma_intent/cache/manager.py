"""Cache manager: key building, per-operation TTLs and the enable switch.

Usage:
    cache = CacheManager(load_cache_config())
    key = CacheManager.tokens_key("6kGd851qaAX4TiL44vpIrO", version="123")
    tokens = await cache.get(key)
    if tokens is None:
        tokens = infer_design_tokens(nodes)
        await cache.set(key, tokens, CacheOperation.TOKENS)

The manager is constructed explicitly and passed into every pipeline entry
point; there is no module-level instance.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Union

from .store import CacheBackendError, MemoryCacheStore
from .types import CacheConfig, CacheOperation, CacheProvider, CacheStats

logger = logging.getLogger(__name__)

LATEST_VERSION = "latest"


@contextmanager
def _backend_errors(action: str) -> Iterator[None]:
    """Re-raise any provider failure as CacheBackendError."""
    try:
        yield
    except CacheBackendError:
        raise
    except Exception as e:
        raise CacheBackendError(f"Cache {action} failed: {e}") from e


class CacheManager:
    """High-level cache API on top of a CacheProvider.

    Args:
        config: Validated cache configuration.
        provider: Backing store. Defaults to a MemoryCacheStore sized by config.
    """

    def __init__(self, config: CacheConfig, provider: Optional[CacheProvider] = None):
        self._config = config
        self._provider: CacheProvider = provider or MemoryCacheStore(config.max_size)

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    @property
    def provider(self) -> CacheProvider:
        return self._provider

    async def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss or when disabled."""
        if not self._config.enabled:
            return None
        with _backend_errors(f"read for {key}"):
            value = await self._provider.get(key)
        logger.debug(f"cache {'hit' if value is not None else 'miss'}: {key}")
        return value

    async def set(
        self,
        key: str,
        value: Any,
        operation: Optional[Union[CacheOperation, str]] = None,
    ) -> None:
        """Store a value with the TTL configured for its operation kind."""
        if not self._config.enabled:
            return
        ttl = self._config.ttl_for(operation)
        with _backend_errors(f"write for {key}"):
            await self._provider.set(key, value, ttl)

    async def delete(self, key: str) -> None:
        with _backend_errors(f"delete for {key}"):
            await self._provider.delete(key)

    async def invalidate(self, pattern: str) -> int:
        with _backend_errors(f"invalidate for {pattern}"):
            return await self._provider.invalidate(pattern)

    async def invalidate_file(self, file_id: str, version: Optional[str] = None) -> int:
        """Drop every cached view of one file (all versions unless one is given)."""
        return await self.invalidate(f"{file_id}:{version or '*'}:*")

    async def clear(self) -> None:
        with _backend_errors("clear"):
            await self._provider.clear()

    async def size(self) -> int:
        with _backend_errors("size"):
            return await self._provider.size()

    async def get_stats(self) -> CacheStats:
        if isinstance(self._provider, MemoryCacheStore):
            return self._provider.stats()
        size = await self.size()
        return CacheStats(hits=0, misses=0, size=size, hit_rate=0.0)

    # ------------------------------------------------------------------
    # Key building
    # ------------------------------------------------------------------

    @staticmethod
    def build_key(
        file_id: str,
        operation: Union[CacheOperation, str],
        version: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Build '{file_id}:{version|latest}:{operation}[:k=v,...]'.

        Filters are sorted by name; filters set to None are left out so an
        unset filter and an absent one share a key.
        """
        op = operation.value if isinstance(operation, CacheOperation) else str(operation)
        base = f"{file_id}:{version or LATEST_VERSION}:{op}"
        if filters:
            pairs = [
                f"{name}={value}"
                for name, value in sorted(filters.items())
                if value is not None
            ]
            if pairs:
                return f"{base}:{','.join(pairs)}"
        return base

    @staticmethod
    def file_key(
        file_id: str, version: Optional[str] = None, filters: Optional[Dict[str, Any]] = None,
    ) -> str:
        return CacheManager.build_key(file_id, CacheOperation.FILE, version, filters)

    @staticmethod
    def components_key(
        file_id: str, version: Optional[str] = None, filters: Optional[Dict[str, Any]] = None,
    ) -> str:
        return CacheManager.build_key(file_id, CacheOperation.COMPONENTS, version, filters)

    @staticmethod
    def styles_key(
        file_id: str, node_id: str, version: Optional[str] = None, include_children: bool = True,
    ) -> str:
        """Per-node style extraction; shares the components TTL."""
        return CacheManager.build_key(
            file_id, CacheOperation.COMPONENTS, version,
            {"node": node_id, "children": include_children},
        )

    @staticmethod
    def tokens_key(
        file_id: str, version: Optional[str] = None, filters: Optional[Dict[str, Any]] = None,
    ) -> str:
        return CacheManager.build_key(file_id, CacheOperation.TOKENS, version, filters)

    @staticmethod
    def plan_key(
        file_id: str, version: Optional[str] = None, filters: Optional[Dict[str, Any]] = None,
    ) -> str:
        return CacheManager.build_key(file_id, CacheOperation.PLAN, version, filters)

    @staticmethod
    def frames_key(
        file_id: str, version: Optional[str] = None, filters: Optional[Dict[str, Any]] = None,
    ) -> str:
        return CacheManager.build_key(file_id, CacheOperation.FRAMES, version, filters)

    @staticmethod
    def overview_key(
        file_id: str, version: Optional[str] = None, filters: Optional[Dict[str, Any]] = None,
    ) -> str:
        return CacheManager.build_key(file_id, CacheOperation.OVERVIEW, version, filters)
