"""Configuration constants: single source of truth for all env vars."""

from __future__ import annotations

import os
from pathlib import Path

from .cache.types import CacheConfig, CacheTTLByType

# Log directory, configurable via LOG_DIR env var for Docker
LOG_DIR = Path(os.getenv("LOG_DIR", str(Path(__file__).parent.parent / "logs")))

# Cache is enabled unless explicitly switched off
FIGMA_CACHE_ENABLED = os.getenv("FIGMA_CACHE_ENABLED", "true").lower() in ("true", "1", "yes")
FIGMA_CACHE_DEFAULT_TTL = os.getenv("FIGMA_CACHE_DEFAULT_TTL", "300")
FIGMA_CACHE_MAX_SIZE = os.getenv("FIGMA_CACHE_MAX_SIZE", "100")

# Per-operation TTLs (seconds); unset kinds fall back to the default TTL
FIGMA_CACHE_TTL_FILE = os.getenv("FIGMA_CACHE_TTL_FILE", "600")
FIGMA_CACHE_TTL_COMPONENTS = os.getenv("FIGMA_CACHE_TTL_COMPONENTS", "900")
FIGMA_CACHE_TTL_TOKENS = os.getenv("FIGMA_CACHE_TTL_TOKENS", "1800")
FIGMA_CACHE_TTL_PLAN = os.getenv("FIGMA_CACHE_TTL_PLAN", "600")
FIGMA_CACHE_TTL_FRAMES = os.getenv("FIGMA_CACHE_TTL_FRAMES", "")
FIGMA_CACHE_TTL_OVERVIEW = os.getenv("FIGMA_CACHE_TTL_OVERVIEW", "")


def load_cache_config() -> CacheConfig:
    """Build a validated CacheConfig from the environment.

    Raises:
        pydantic.ValidationError: If any value is malformed or out of range
            (e.g. a non-positive max size).
    """
    return CacheConfig(
        enabled=FIGMA_CACHE_ENABLED,
        default_ttl=FIGMA_CACHE_DEFAULT_TTL,
        max_size=FIGMA_CACHE_MAX_SIZE,
        ttl_by_type=CacheTTLByType(
            file=FIGMA_CACHE_TTL_FILE,
            components=FIGMA_CACHE_TTL_COMPONENTS,
            tokens=FIGMA_CACHE_TTL_TOKENS,
            plan=FIGMA_CACHE_TTL_PLAN,
            frames=FIGMA_CACHE_TTL_FRAMES or None,
            overview=FIGMA_CACHE_TTL_OVERVIEW or None,
        ),
    )
