"""Pipeline runtime settings: tunable heuristics for normalization and inference.

All values read from environment variables with sensible defaults. Import
from here instead of hardcoding.

Cache configuration and logging paths stay in figma_intent/config.py.
"""

from __future__ import annotations

import os


def _int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


# =====================================================================
# Tree Traversal
# =====================================================================

# Depth at which a warning is logged (traversal continues)
TRAVERSAL_WARN_DEPTH = _int("TRAVERSAL_WARN_DEPTH", 12)

# Hard ceilings; exceeding either raises TraversalLimitError
TRAVERSAL_MAX_DEPTH = _int("TRAVERSAL_MAX_DEPTH", 256)
TRAVERSAL_MAX_NODES = _int("TRAVERSAL_MAX_NODES", 250_000)


# =====================================================================
# Component Reuse
# =====================================================================

# Maximum nesting depth followed when collecting instances
REUSE_MAX_DEPTH = _int("REUSE_MAX_DEPTH", 4)

# Instance count at which a component counts as a design-system primitive
PRIMITIVE_THRESHOLD = _int("PRIMITIVE_THRESHOLD", 5)


# =====================================================================
# Token Inference
# =====================================================================

# Channel-wise distance under which two colors share a cluster
COLOR_CLUSTER_THRESHOLD = _float("COLOR_CLUSTER_THRESHOLD", 0.1)
