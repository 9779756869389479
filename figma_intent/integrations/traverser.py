"""Breadth-first traversal of raw Figma node trees.

Iterative (explicit work queue) so arbitrarily deep documents cannot exhaust
the call stack. Hidden nodes are still visited together with their subtrees;
deciding what to do with them is left to the consumer.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, Iterator, Optional

from .. import settings

logger = logging.getLogger(__name__)


class TraversalLimitError(RuntimeError):
    """Raised when a tree exceeds the configured depth or node-count ceiling."""


@dataclass(frozen=True)
class TraversalItem:
    node: Dict[str, Any]
    parent_id: Optional[str]
    depth: int


def walk_tree(
    root: Dict[str, Any],
    *,
    warn_depth: Optional[int] = None,
    max_depth: Optional[int] = None,
    max_nodes: Optional[int] = None,
) -> Iterator[TraversalItem]:
    """Yield every node under root (root included) in breadth-first order.

    Args:
        root: Raw node dict with optional ``children``.
        warn_depth: Depth at which a single warning is logged. Defaults to
            settings.TRAVERSAL_WARN_DEPTH.
        max_depth: Hard depth ceiling. Defaults to settings.TRAVERSAL_MAX_DEPTH.
        max_nodes: Hard node-count ceiling. Defaults to
            settings.TRAVERSAL_MAX_NODES.

    Pass 0 for ``max_depth``/``max_nodes`` to disable that ceiling.

    Raises:
        TraversalLimitError: When a node deeper than max_depth is reached or
            more than max_nodes nodes would be yielded.
    """
    warn_depth = settings.TRAVERSAL_WARN_DEPTH if warn_depth is None else warn_depth
    max_depth = settings.TRAVERSAL_MAX_DEPTH if max_depth is None else max_depth
    max_nodes = settings.TRAVERSAL_MAX_NODES if max_nodes is None else max_nodes

    queue: Deque[TraversalItem] = deque([TraversalItem(root, None, 0)])
    visited = 0
    max_depth_seen = 0
    warned = False

    while queue:
        item = queue.popleft()
        node = item.node

        if max_depth and item.depth > max_depth:
            raise TraversalLimitError(
                f"Tree depth exceeds {max_depth} at node "
                f"'{node.get('name', '')}' ({node.get('id', '')})"
            )
        visited += 1
        if max_nodes and visited > max_nodes:
            raise TraversalLimitError(f"Tree exceeds {max_nodes} nodes")

        if item.depth > max_depth_seen:
            max_depth_seen = item.depth

        if warn_depth and item.depth >= warn_depth and not warned:
            warned = True
            logger.warning(
                f"walk_tree: depth reached {item.depth} at node "
                f"'{node.get('name', '')}' ({node.get('id', '')}). "
                f"Continuing traversal but performance may degrade."
            )

        yield item

        children = node.get("children")
        if isinstance(children, list):
            node_id = node.get("id")
            for child in children:
                if isinstance(child, dict):
                    queue.append(TraversalItem(child, node_id, item.depth + 1))

    logger.debug(f"walk_tree: complete, {visited} nodes, max depth {max_depth_seen}")
