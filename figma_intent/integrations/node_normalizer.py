"""Node normalization: raw Figma nodes → intent-level NormalizedNode variants.

Dispatch order (first match wins):
    FRAME / CANVAS                          → layout
    TEXT                                    → text
    COMPONENT / COMPONENT_SET / INSTANCE    → component
    shape / vector-like types               → visual
    anything else with children             → empty layout (strategy none)
    anything else                           → dropped (None)

Hidden nodes (``visible: false``) normalize to None.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Set

from .normalized import (
    ComponentInstance,
    ComponentNode,
    ComponentReuse,
    GridCandidate,
    LayoutContainer,
    LayoutNode,
    LayoutStrategy,
    NormalizedNode,
    TextElement,
    TextNode,
    VisualElement,
    VisualNode,
)
from .reuse_tracker import build_reuse_contexts, track_component_reuse
from .role_classifier import identify_semantic_role
from .style_extractors import (
    extract_dimensions,
    extract_text_color,
    extract_typography,
    extract_visual_intent,
    has_auto_layout,
    round_half_up,
    translate_auto_layout_to_flexbox,
)
from .traverser import walk_tree

logger = logging.getLogger(__name__)

LAYOUT_TYPES = frozenset({"FRAME", "CANVAS"})
COMPONENT_TYPES = {
    "COMPONENT": "component",
    "COMPONENT_SET": "component-set",
    "INSTANCE": "instance",
}
VISUAL_TYPES = {
    "RECTANGLE": "rectangle",
    "ELLIPSE": "ellipse",
    "VECTOR": "vector",
    "STAR": "icon",
    "LINE": "vector",
    "REGULAR_POLYGON": "vector",
}

GRID_MIN_CHILDREN = 4
GRID_UNIFORM_TOLERANCE = 1


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


def _child_ids(node: Dict[str, Any]) -> List[str]:
    children = node.get("children")
    if not isinstance(children, list):
        return []
    return [c.get("id", "") for c in children if isinstance(c, dict)]


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _child_boxes(node: Dict[str, Any]) -> List[Dict[str, Any]]:
    boxes = []
    for child in node.get("children") or []:
        if not isinstance(child, dict):
            continue
        box = child.get("absoluteBoundingBox")
        # Boxes without a numeric origin cannot be placed on a grid
        if isinstance(box, dict) and _is_number(box.get("x")) and _is_number(box.get("y")):
            boxes.append(box)
    return boxes


def _distinct_positions(boxes: List[Dict[str, Any]], axis: str) -> List[int]:
    return sorted({round_half_up(box[axis]) for box in boxes})


def has_grid_pattern(node: Dict[str, Any]) -> bool:
    """≥4 positioned children spread over ≥2 columns and ≥2 rows."""
    boxes = _child_boxes(node)
    if len(boxes) < GRID_MIN_CHILDREN:
        return False
    return (
        len(_distinct_positions(boxes, "x")) >= 2
        and len(_distinct_positions(boxes, "y")) >= 2
    )


def _evenly_spaced(positions: List[int]) -> bool:
    steps = [b - a for a, b in zip(positions, positions[1:])]
    if len(steps) < 2:
        return True
    return max(steps) - min(steps) <= GRID_UNIFORM_TOLERANCE


def detect_grid_pattern(node: Dict[str, Any]) -> GridCandidate:
    """Grid metadata from the children's distinct rounded X/Y positions.

    Gaps are the distance between the first two columns/rows (offsets of the
    child origins, not the whitespace between them). The grid is uniform when
    every column step and every row step matches the others within 1px.
    """
    boxes = _child_boxes(node)
    xs = _distinct_positions(boxes, "x")
    ys = _distinct_positions(boxes, "y")
    return GridCandidate(
        columns=len(xs),
        rows=len(ys),
        column_gap=xs[1] - xs[0] if len(xs) > 1 else 0,
        row_gap=ys[1] - ys[0] if len(ys) > 1 else 0,
        is_uniform=_evenly_spaced(xs) and _evenly_spaced(ys),
    )


def determine_layout_strategy(node: Dict[str, Any]) -> LayoutStrategy:
    if not has_auto_layout(node):
        return LayoutStrategy.NONE
    if has_grid_pattern(node):
        return LayoutStrategy.GRID_CANDIDATE
    return LayoutStrategy.FLEXBOX


def extract_layout_container(node: Dict[str, Any]) -> LayoutContainer:
    strategy = determine_layout_strategy(node)
    container = LayoutContainer(
        strategy=strategy,
        children=_child_ids(node),
        clips_content=bool(node.get("clipsContent", False)),
        dimensions=extract_dimensions(node),
    )
    if strategy == LayoutStrategy.FLEXBOX:
        container.flexbox = translate_auto_layout_to_flexbox(node)
    elif strategy == LayoutStrategy.GRID_CANDIDATE:
        container.grid = detect_grid_pattern(node)
    return container


# ---------------------------------------------------------------------------
# Text / component / visual payloads
# ---------------------------------------------------------------------------


def extract_text_element(node: Dict[str, Any]) -> TextElement:
    return TextElement(
        content=str(node.get("characters") or ""),
        typography=extract_typography(node),
        color=extract_text_color(node),
        is_truncated=node.get("textTruncation") == "ENDING",
    )


def default_reuse(node: Dict[str, Any]) -> ComponentReuse:
    """A component with no tracked context is its own root."""
    node_id = node.get("id", "")
    return ComponentReuse(
        root_component_id=node_id,
        root_component_name=node.get("name", ""),
        nesting_path=(node_id,),
        nesting_depth=0,
        instance_count=1,
    )


def extract_component_instance(
    node: Dict[str, Any], reuse: Optional[ComponentReuse] = None,
) -> ComponentInstance:
    return ComponentInstance(
        component_type=COMPONENT_TYPES[node["type"]],
        reuse=reuse or default_reuse(node),
        children=_child_ids(node),
        dimensions=extract_dimensions(node),
        description=node.get("description") or None,
        component_id=node.get("componentId"),
    )


def extract_visual_element(node: Dict[str, Any]) -> VisualElement:
    return VisualElement(
        type=VISUAL_TYPES.get(node.get("type", ""), "rectangle"),
        visual=extract_visual_intent(node),
        dimensions=extract_dimensions(node),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_node(
    raw: Dict[str, Any],
    parent_id: Optional[str] = None,
    reuse: Optional[ComponentReuse] = None,
) -> Optional[NormalizedNode]:
    """Normalize a single raw node (children are not visited).

    Args:
        raw: Raw Figma node dict.
        parent_id: Id of the raw parent, if any.
        reuse: Reuse context for component nodes. Defaults to the node being
            its own root.

    Returns:
        The normalized variant, or None for hidden nodes and childless
        nodes of an unsupported type.
    """
    if raw.get("visible") is False:
        return None

    node_type = raw.get("type", "")
    base = dict(
        id=raw.get("id", ""),
        name=raw.get("name", ""),
        original_type=node_type,
        semantic_role=identify_semantic_role(raw),
        parent_id=parent_id,
        visible=True,
    )

    if node_type in LAYOUT_TYPES:
        return LayoutNode(data=extract_layout_container(raw), **base)
    if node_type == "TEXT":
        return TextNode(data=extract_text_element(raw), **base)
    if node_type in COMPONENT_TYPES:
        return ComponentNode(data=extract_component_instance(raw, reuse), **base)
    if node_type in VISUAL_TYPES:
        return VisualNode(data=extract_visual_element(raw), **base)

    children = raw.get("children")
    if isinstance(children, list) and children:
        # Degrade unknown containers (GROUP, SECTION, BOOLEAN_OPERATION ...)
        return LayoutNode(
            data=LayoutContainer(
                strategy=LayoutStrategy.NONE,
                children=_child_ids(raw),
                dimensions=extract_dimensions(raw),
            ),
            **base,
        )
    return None


def normalize_tree(
    root: Dict[str, Any],
    *,
    include_hidden_descendants: bool = False,
    track_reuse: bool = False,
    components_meta: Optional[Dict[str, Dict[str, Any]]] = None,
    warn_depth: Optional[int] = None,
    max_depth: Optional[int] = None,
    max_nodes: Optional[int] = None,
) -> List[NormalizedNode]:
    """Normalize every node under root, in breadth-first traversal order.

    Args:
        root: Raw root node (usually the DOCUMENT).
        include_hidden_descendants: When False (default) the whole subtree of
            a hidden node is left out. When True only the hidden node itself
            is dropped and its visible descendants are still normalized.
        track_reuse: Run the reuse tracker first and attach a ComponentReuse
            context to every tracked component node.
        components_meta: Optional ``components`` map of the file response
            (component id → {name, ...}), used to name reuse roots.
        warn_depth, max_depth, max_nodes: Traversal limits, see walk_tree().

    Raises:
        TraversalLimitError: When the tree exceeds a traversal ceiling.
    """
    contexts: Dict[str, ComponentReuse] = {}
    if track_reuse:
        reuse_map = track_component_reuse([root])
        contexts = build_reuse_contexts([root], reuse_map, components_meta)

    nodes: List[NormalizedNode] = []
    hidden: Set[str] = set()
    skipped = 0

    for item in walk_tree(
        root, warn_depth=warn_depth, max_depth=max_depth, max_nodes=max_nodes,
    ):
        raw = item.node
        node_id = raw.get("id", "")
        if not include_hidden_descendants and item.parent_id in hidden:
            hidden.add(node_id)
            skipped += 1
            continue
        if raw.get("visible") is False:
            hidden.add(node_id)

        normalized = normalize_node(raw, item.parent_id, contexts.get(node_id))
        if normalized is None:
            skipped += 1
            continue
        nodes.append(normalized)

    logger.info(f"normalize_tree: {len(nodes)} nodes normalized, {skipped} skipped")
    return nodes
