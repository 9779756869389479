"""Cache type definitions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol, Union

from pydantic import BaseModel, Field


class CacheOperation(str, Enum):
    """Kinds of derived output the cache memoizes, each with its own TTL."""
    FILE = "file"
    COMPONENTS = "components"
    TOKENS = "tokens"
    PLAN = "plan"
    FRAMES = "frames"
    OVERVIEW = "overview"


@dataclass
class CacheEntry:
    """A stored value plus the metadata needed for lazy expiry."""
    data: Any
    timestamp: float  # epoch milliseconds
    ttl_seconds: float
    version: Optional[str] = None

    def is_expired(self, now_ms: float) -> bool:
        return now_ms - self.timestamp > self.ttl_seconds * 1000


@dataclass
class CacheStats:
    hits: int
    misses: int
    size: int
    hit_rate: float


class CacheProvider(Protocol):
    """Protocol for cache backends.

    Async so an out-of-process store can be swapped in without changing
    callers.
    """

    async def get(self, key: str) -> Optional[Any]:
        ...

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def invalidate(self, pattern: str) -> int:
        ...

    async def clear(self) -> None:
        ...

    async def size(self) -> int:
        ...


class CacheTTLByType(BaseModel):
    """Per-operation TTLs in seconds. ``None`` means use the default TTL."""
    file: Optional[int] = Field(default=None, ge=0)
    components: Optional[int] = Field(default=None, ge=0)
    tokens: Optional[int] = Field(default=None, ge=0)
    plan: Optional[int] = Field(default=None, ge=0)
    frames: Optional[int] = Field(default=None, ge=0)
    overview: Optional[int] = Field(default=None, ge=0)


class CacheConfig(BaseModel):
    """Cache configuration, validated when it is loaded."""
    enabled: bool = True
    default_ttl: int = Field(default=300, ge=0, description="Seconds")
    max_size: int = Field(default=100, gt=0, description="Maximum number of entries")
    ttl_by_type: CacheTTLByType = Field(default_factory=CacheTTLByType)

    def ttl_for(self, operation: Optional[Union[CacheOperation, str]]) -> int:
        """Resolve the TTL for an operation kind, falling back to default_ttl."""
        if operation is None:
            return self.default_ttl
        try:
            kind = CacheOperation(operation).value
        except ValueError:
            return self.default_ttl
        ttl = getattr(self.ttl_by_type, kind)
        return self.default_ttl if ttl is None else ttl
