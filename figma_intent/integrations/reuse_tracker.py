"""Component reuse tracking.

Builds a component id → instance ids multi-map from INSTANCE nodes, and
derives a ComponentReuse context for every tracked component node so
normalize_tree() can attach it. Both walks are depth-first (pre-order),
iterative, bounded by ``max_depth`` and guarded against repeated ids; both
cut-offs are silent.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from ..settings import REUSE_MAX_DEPTH
from .normalized import ComponentReuse

logger = logging.getLogger(__name__)

COMPONENT_NODE_TYPES = frozenset({"COMPONENT", "COMPONENT_SET", "INSTANCE"})

# (node, depth, ids of enclosing component nodes)
_Frame = Tuple[Dict[str, Any], int, Tuple[str, ...]]


def _walk_depth_first(
    roots: List[Dict[str, Any]], max_depth: int,
) -> Iterator[_Frame]:
    """Pre-order walk yielding (node, depth, component ancestor path)."""
    visited: Set[str] = set()
    for root in roots:
        stack: List[_Frame] = [(root, 0, ())]
        while stack:
            node, depth, path = stack.pop()
            node_id = node.get("id", "")
            if depth > max_depth or node_id in visited:
                continue
            visited.add(node_id)
            yield node, depth, path

            if node.get("type") in COMPONENT_NODE_TYPES:
                path = path + (node_id,)
            children = node.get("children")
            if isinstance(children, list):
                for child in reversed(children):
                    if isinstance(child, dict):
                        stack.append((child, depth + 1, path))


def track_component_reuse(
    roots: List[Dict[str, Any]], max_depth: int = REUSE_MAX_DEPTH,
) -> Dict[str, List[str]]:
    """Map each referenced component id to the INSTANCE ids that use it.

    Instances deeper than ``max_depth`` (root = depth 0) are not recorded.
    """
    reuse_map: Dict[str, List[str]] = {}
    for node, _depth, _path in _walk_depth_first(roots, max_depth):
        if node.get("type") != "INSTANCE":
            continue
        component_id = node.get("componentId")
        if not component_id:
            continue
        reuse_map.setdefault(component_id, []).append(node.get("id", ""))

    logger.debug(
        f"track_component_reuse: {len(reuse_map)} components, "
        f"{sum(len(v) for v in reuse_map.values())} instances"
    )
    return reuse_map


def build_reuse_contexts(
    roots: List[Dict[str, Any]],
    reuse_map: Dict[str, List[str]],
    components_meta: Optional[Dict[str, Dict[str, Any]]] = None,
    max_depth: int = REUSE_MAX_DEPTH,
) -> Dict[str, ComponentReuse]:
    """Per-node reuse contexts for the component nodes reached by the walk.

    INSTANCE nodes are rooted at the component they reference, named from
    ``components_meta`` when available. COMPONENT / COMPONENT_SET nodes are
    their own root. ``nesting_path`` lists the enclosing component nodes
    (outermost first) followed by the node itself; ``instance_count`` is how
    many tracked instances share the root.
    """
    meta = components_meta or {}
    contexts: Dict[str, ComponentReuse] = {}

    for node, _depth, path in _walk_depth_first(roots, max_depth):
        node_type = node.get("type")
        if node_type not in COMPONENT_NODE_TYPES:
            continue
        node_id = node.get("id", "")

        if node_type == "INSTANCE" and node.get("componentId"):
            root_id = node["componentId"]
            root_name = (meta.get(root_id) or {}).get("name") or node.get("name", "")
        else:
            root_id = node_id
            root_name = node.get("name", "")

        contexts[node_id] = ComponentReuse(
            root_component_id=root_id,
            root_component_name=root_name,
            nesting_path=path + (node_id,),
            nesting_depth=len(path),
            instance_count=len(reuse_map.get(root_id, [])),
        )
    return contexts
