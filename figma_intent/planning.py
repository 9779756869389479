"""Implementation plan analysis over normalized nodes and inferred tokens.

The plan covers either the document's frames or, when it has none, its
components, component sets and instances. It consists of:

- one mapping per element: suggested code name and path, layout strategy,
  a 0-10 complexity score and related token names;
- layout guidance: strategy counts and the dominant strategy;
- styling guidance: token coverage per category;
- risks with severity and mitigation;
- a plain-text summary.

The analysis is framework-agnostic; ``target_framework`` only shows up in
the summary.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .integrations.normalized import (
    LayoutNode,
    LayoutStrategy,
    NormalizedNode,
    VisualNode,
    index_by_id,
)
from .integrations.style_extractors import round_half_up
from .integrations.traverser import walk_tree
from .tokens.inference import DesignToken, TokenCategory

logger = logging.getLogger(__name__)

COMPONENT_NODE_TYPES = ("COMPONENT", "COMPONENT_SET", "INSTANCE")

TYPE_COMPLEXITY = {"COMPONENT": 2, "COMPONENT_SET": 4, "INSTANCE": 1, "FRAME": 1}
LAYOUT_COMPLEXITY = {
    LayoutStrategy.FLEXBOX: 1,
    LayoutStrategy.GRID_CANDIDATE: 2,
    LayoutStrategy.ABSOLUTE: 3,
}
MAX_COMPLEXITY = 10
HIGH_COMPLEXITY = 8

# Order breaks ties when picking the primary strategy
LAYOUT_TYPES = ("flexbox", "grid", "absolute", "none")

RELATED_TOKEN_LIMIT = 10
FALLBACK_TOKEN_LIMIT = 5
LARGE_PALETTE = 20
EXCESSIVE_PALETTE = 50
MANY_VISUAL_NODES = 50
ABSOLUTE_SHARE_RISK = 0.3

_WORD_SPLIT_RE = re.compile(r"[\s\-_/]+")
_PATH_SPLIT_RE = re.compile(r"[\s_/]+")


# =====================================================================
# Element selection
# =====================================================================


def select_plan_elements(
    document: Dict[str, Any],
    page_id: Optional[str] = None,
    component_ids: Optional[Sequence[str]] = None,
) -> Tuple[str, List[Dict[str, Any]]]:
    """Frames when the document has any, else component nodes.

    Returns:
        ("frames" | "components", raw element nodes in traversal order),
        filtered to one page and/or an explicit id list when given.
    """
    frames: List[Dict[str, Any]] = []
    components: List[Dict[str, Any]] = []
    page_of: Dict[str, Optional[str]] = {}

    for item in walk_tree(document):
        node = item.node
        node_id = node.get("id", "")
        if node.get("type") == "CANVAS":
            page_of[node_id] = node_id
        else:
            page_of[node_id] = page_of.get(item.parent_id) if item.parent_id else None

        if node.get("type") == "FRAME":
            frames.append(node)
        elif node.get("type") in COMPONENT_NODE_TYPES:
            components.append(node)

    kind, elements = ("frames", frames) if frames else ("components", components)
    if page_id is not None:
        elements = [e for e in elements if page_of.get(e.get("id", "")) == page_id]
    if component_ids:
        wanted = set(component_ids)
        elements = [e for e in elements if e.get("id") in wanted]
    return kind, elements


# =====================================================================
# Per-element mapping
# =====================================================================


def to_pascal_case(name: str) -> str:
    return "".join(
        word[:1].upper() + word[1:].lower()
        for word in _WORD_SPLIT_RE.split(name) if word
    )


def suggest_file_path(name: str) -> str:
    kebab = "-".join(part for part in _PATH_SPLIT_RE.split(name) if part).lower()
    return f"components/{kebab}/{to_pascal_case(name)}"


def describe_layout_strategy(node: Optional[NormalizedNode]) -> Dict[str, Any]:
    """Layout strategy of a normalized node: {type, reasoning[, details]}."""
    if not isinstance(node, LayoutNode):
        return {"type": "none", "reasoning": "Element does not have explicit layout properties"}

    data = node.data
    if data.strategy == LayoutStrategy.FLEXBOX and data.flexbox is not None:
        flex = data.flexbox
        return {
            "type": "flexbox",
            "reasoning": (
                f"Uses Figma Auto Layout ({flex.direction} direction, "
                f"{flex.justify_content} justify, {flex.align_items} align)"
            ),
            "details": {
                "direction": flex.direction,
                "justify_content": flex.justify_content,
                "align_items": flex.align_items,
                "gap": flex.gap,
                "padding": flex.padding.values() if flex.padding else None,
            },
        }
    if data.strategy == LayoutStrategy.GRID_CANDIDATE and data.grid is not None:
        grid = data.grid
        return {
            "type": "grid",
            "reasoning": f"Detected 2D grid pattern ({grid.columns}×{grid.rows})",
            "details": {
                "columns": grid.columns,
                "rows": grid.rows,
                "column_gap": grid.column_gap,
                "row_gap": grid.row_gap,
            },
        }
    if data.strategy == LayoutStrategy.ABSOLUTE:
        return {
            "type": "absolute",
            "reasoning": "Uses absolute positioning; may require manual positioning logic",
        }
    return {"type": "none", "reasoning": "No structured layout detected"}


def calculate_complexity_score(
    element: Dict[str, Any], node: Optional[NormalizedNode] = None,
) -> int:
    """0-10: element type weight + child count band + layout strategy weight."""
    score = TYPE_COMPLEXITY.get(element.get("type", ""), 0)

    children = element.get("children")
    child_count = len(children) if isinstance(children, list) else 0
    if child_count > 10:
        score += 3
    elif child_count > 5:
        score += 2
    elif child_count > 2:
        score += 1

    if isinstance(node, LayoutNode):
        score += LAYOUT_COMPLEXITY.get(node.data.strategy, 0)

    return min(score, MAX_COMPLEXITY)


def find_related_tokens(name: str, tokens: Sequence[DesignToken]) -> List[str]:
    """Tokens whose name contains a word of the element name.

    Falls back to the first color and spacing tokens when nothing matches.
    """
    segments = [s for s in _WORD_SPLIT_RE.split(name.lower()) if s]
    related = [
        token.name for token in tokens
        if any(segment in token.name.lower() for segment in segments)
    ]
    if related:
        return related[:RELATED_TOKEN_LIMIT]
    return [
        token.name for token in tokens
        if token.category in (TokenCategory.COLOR, TokenCategory.SPACING)
    ][:FALLBACK_TOKEN_LIMIT]


def build_component_mapping(
    element: Dict[str, Any],
    node: Optional[NormalizedNode],
    tokens: Sequence[DesignToken],
) -> Dict[str, Any]:
    name = str(element.get("name", ""))
    notes = f"Element type: {element.get('type', '')}."
    if element.get("description"):
        notes += f" Description: {element['description']}"
    return {
        "component_id": element.get("id", ""),
        "component_name": name,
        "suggested_code_name": to_pascal_case(name),
        "suggested_file_path": suggest_file_path(name),
        "layout_strategy": describe_layout_strategy(node),
        "complexity_score": calculate_complexity_score(element, node),
        "related_tokens": find_related_tokens(name, tokens),
        "notes": notes,
    }


# =====================================================================
# Plan-wide analysis
# =====================================================================


def analyze_layout_patterns(mappings: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    counts = {layout_type: 0 for layout_type in LAYOUT_TYPES}
    for mapping in mappings:
        counts[mapping["layout_strategy"]["type"]] += 1

    primary = max(LAYOUT_TYPES, key=lambda t: counts[t])

    patterns = []
    if counts["flexbox"]:
        patterns.append({
            "pattern": "Flexbox layouts",
            "occurrences": counts["flexbox"],
            "recommendation": "Use flexbox layouts; most elements are single-axis with explicit spacing and alignment.",
        })
    if counts["grid"]:
        patterns.append({
            "pattern": "2D Grid layouts",
            "occurrences": counts["grid"],
            "recommendation": "Use CSS Grid for row/column structures and plan responsive breakpoints.",
        })
    if counts["absolute"]:
        patterns.append({
            "pattern": "Absolute positioning",
            "occurrences": counts["absolute"],
            "recommendation": "Check whether flexbox or grid can replace absolute positioning.",
        })

    structured = counts["flexbox"] + counts["grid"]
    notes = [
        f"Primary layout strategy: {primary}",
        f"{structured} components use structured layouts",
    ]
    if counts["absolute"] > structured:
        notes.append("Many components use absolute positioning; responsive layouts may suffer")

    return {
        "counts": counts,
        "primary_strategy": f"{primary} ({counts[primary]} components)",
        "patterns": patterns,
        "notes": notes,
    }


def _count(tokens: Sequence[DesignToken], category: TokenCategory) -> int:
    return sum(1 for token in tokens if token.category == category)


def build_styling_guidance(
    tokens: Sequence[DesignToken], nodes: Sequence[NormalizedNode],
) -> Dict[str, Any]:
    colors = _count(tokens, TokenCategory.COLOR)
    typography = _count(tokens, TokenCategory.TYPOGRAPHY)
    spacing = _count(tokens, TokenCategory.SPACING)

    recommendations = [
        "Define design tokens once and reference them instead of hard-coded values",
    ]
    considerations = []

    if colors > LARGE_PALETTE:
        considerations.append(
            f"Large color palette ({colors} tokens); consider consolidation or semantic grouping"
        )
    elif colors:
        recommendations.append(f"Apply {colors} color tokens consistently across components")
    if typography:
        recommendations.append(f"Implement {typography} typography styles with font fallbacks")
    if spacing:
        recommendations.append(f"Use {spacing} spacing tokens for padding, margin and gap values")
    else:
        considerations.append("No spacing system detected; define a consistent spacing scale")

    visual_count = sum(1 for node in nodes if isinstance(node, VisualNode))
    if visual_count > MANY_VISUAL_NODES:
        considerations.append(
            f"{visual_count} visual elements; organize styles per component"
        )

    return {
        "token_coverage": {"colors": colors, "typography": typography, "spacing": spacing},
        "recommendations": recommendations,
        "considerations": considerations,
    }


def identify_risks(
    mappings: Sequence[Dict[str, Any]], tokens: Sequence[DesignToken],
) -> List[Dict[str, str]]:
    risks = []

    complex_count = sum(1 for m in mappings if m["complexity_score"] >= HIGH_COMPLEXITY)
    if complex_count:
        risks.append({
            "severity": "medium",
            "risk": f"{complex_count} highly complex components detected",
            "mitigation": "Split complex components into smaller reusable pieces",
        })

    variant_heavy = sum(1 for m in mappings if len(m["component_name"].split("/")) > 3)
    if variant_heavy > 5:
        risks.append({
            "severity": "medium",
            "risk": f"{variant_heavy} components have excessive variant combinations",
            "mitigation": "Consolidate similar variants; prefer composition",
        })

    if len({m["layout_strategy"]["type"] for m in mappings}) > 2:
        risks.append({
            "severity": "low",
            "risk": "Multiple layout strategies used across components",
            "mitigation": "Standardize on one primary layout system and document exceptions",
        })

    colors = _count(tokens, TokenCategory.COLOR)
    if colors > EXCESSIVE_PALETTE:
        risks.append({
            "severity": "medium",
            "risk": f"Large color palette ({colors} color tokens)",
            "mitigation": "Audit color usage and define semantic color roles",
        })

    if _count(tokens, TokenCategory.SPACING) == 0:
        risks.append({
            "severity": "high",
            "risk": "No spacing system detected",
            "mitigation": "Define a spacing scale (4px, 8px, 16px, ...) and apply it everywhere",
        })

    absolute = sum(1 for m in mappings if m["layout_strategy"]["type"] == "absolute")
    if mappings and absolute > len(mappings) * ABSOLUTE_SHARE_RISK:
        share = round_half_up(absolute / len(mappings) * 100)
        risks.append({
            "severity": "high",
            "risk": f"{absolute} components use absolute positioning ({share}%)",
            "mitigation": "Move to flexbox or grid; keep absolute positioning for overlays",
        })

    return risks


def summarize_plan(
    kind: str,
    element_count: int,
    tokens: Sequence[DesignToken],
    layout: Dict[str, Any],
    styling: Dict[str, Any],
    target_framework: Optional[str] = None,
) -> str:
    framework = (
        f"Target framework: {target_framework} (adapt patterns as needed)."
        if target_framework else "Framework-agnostic plan."
    )
    coverage = styling["token_coverage"]
    return (
        f"Implementation plan generated for {element_count} {kind} "
        f"with {len(tokens)} design tokens. {framework}\n"
        f"Primary layout strategy: {layout['primary_strategy']}\n"
        f"Token coverage: {coverage['colors']} colors, "
        f"{coverage['typography']} typography, {coverage['spacing']} spacing"
    )


def build_implementation_plan(
    document: Dict[str, Any],
    nodes: Sequence[NormalizedNode],
    tokens: Sequence[DesignToken],
    target_framework: Optional[str] = None,
    page_id: Optional[str] = None,
    component_ids: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    """Implementation plan for the document (see module docstring)."""
    kind, elements = select_plan_elements(document, page_id, component_ids)
    by_id = index_by_id(nodes)

    mappings = [
        build_component_mapping(element, by_id.get(element.get("id", "")), tokens)
        for element in elements
    ]
    layout = analyze_layout_patterns(mappings)
    styling = build_styling_guidance(tokens, nodes)

    logger.info(f"build_implementation_plan: {len(mappings)} {kind}, {len(tokens)} tokens")
    return {
        "element_kind": kind,
        "component_mappings": mappings,
        "layout_guidance": layout,
        "styling_guidance": styling,
        "risks": identify_risks(mappings, tokens),
        "notes": summarize_plan(kind, len(mappings), tokens, layout, styling, target_framework),
    }
