"""Semantic role detection for raw Figma nodes.

Three pure detectors, evaluated in fixed precedence:

1. Component type: COMPONENT / COMPONENT_SET / INSTANCE (weak signal, 0.6)
2. Structure: shape of the node and its direct children
3. Naming: keyword match on the layer name (fixed 0.4)

A detector result with confidence above SHORT_CIRCUIT_CONFIDENCE ends the
evaluation. Otherwise the collected evidence goes through
combine_role_evidence(), where structure always beats naming.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from .normalized import DetectionMethod, RoleDetectionResult, SemanticRole
from .style_extractors import has_background, has_stroke

logger = logging.getLogger(__name__)

RoleDetector = Callable[[Dict[str, Any]], Optional[RoleDetectionResult]]

SHORT_CIRCUIT_CONFIDENCE = 0.7
HYBRID_BOOST = 0.2
NAMING_CONFIDENCE = 0.4

COMPONENT_TYPES = frozenset({"COMPONENT", "COMPONENT_SET", "INSTANCE"})
ICON_LIKE_TYPES = frozenset({"VECTOR", "ELLIPSE"})
CARD_VISUAL_TYPES = frozenset({"RECTANGLE", "ELLIPSE", "VECTOR"})
LIST_CONTAINER_TYPES = frozenset({"FRAME", "GROUP"})

# Keyword table, checked in order; first match wins
NAME_PATTERNS: List[Tuple[Tuple[str, ...], SemanticRole]] = [
    (("btn", "button"), SemanticRole.BUTTON),
    (("input", "field", "textbox"), SemanticRole.INPUT),
    (("card",), SemanticRole.CARD),
    (("list",), SemanticRole.LIST),
    (("nav", "navigation"), SemanticRole.NAVIGATION),
    (("header",), SemanticRole.HEADER),
    (("footer",), SemanticRole.FOOTER),
    (("modal", "dialog"), SemanticRole.MODAL),
    (("icon",), SemanticRole.ICON),
    (("avatar",), SemanticRole.AVATAR),
    (("badge",), SemanticRole.BADGE),
]


def _result(
    role: SemanticRole, confidence: float, method: DetectionMethod, reasoning: str,
) -> RoleDetectionResult:
    return RoleDetectionResult(
        role=role, confidence=confidence, method=method, reasoning=reasoning,
    )


# =====================================================================
# Detectors
# =====================================================================


def detect_from_component_type(node: Dict[str, Any]) -> Optional[RoleDetectionResult]:
    """Component-ness alone says nothing about purpose, hence the weak 0.6."""
    node_type = node.get("type", "")
    if node_type in COMPONENT_TYPES:
        return _result(
            SemanticRole.CONTAINER, 0.6, DetectionMethod.COMPONENT_TYPE,
            f"Figma component of type {node_type}",
        )
    return None


def detect_from_structure(node: Dict[str, Any]) -> Optional[RoleDetectionResult]:
    """Pattern-match on node shape.

    - leaf TEXT → text; leaf RECTANGLE/ELLIPSE → container
    - background + text child, ≤3 children → button (icon sibling boosts)
    - bordered FRAME + text child, ≤2 children → input
    - ≥3 children of one type inside a FRAME/GROUP → list
    - background + ≥2 children mixing text and visuals → card
    """
    node_type = node.get("type", "")
    children = node.get("children")

    if not isinstance(children, list) or not children:
        if node_type == "TEXT":
            return _result(SemanticRole.TEXT, 0.9, DetectionMethod.STRUCTURAL, "Text node")
        if node_type in ("RECTANGLE", "ELLIPSE"):
            return _result(SemanticRole.CONTAINER, 0.5, DetectionMethod.STRUCTURAL, "Simple shape")
        return None

    child_types = [c.get("type", "") for c in children if isinstance(c, dict)]
    has_text_child = "TEXT" in child_types
    background = has_background(node)

    # Button: background + text (+ optional icon)
    if background and has_text_child and len(children) <= 3:
        has_icon = any(t in ICON_LIKE_TYPES for t in child_types)
        return _result(
            SemanticRole.BUTTON, 0.85 if has_icon else 0.75, DetectionMethod.STRUCTURAL,
            f"Background + text{' + icon' if has_icon else ''} suggests button",
        )

    # Input: bordered frame + text
    if (
        node_type == "FRAME"
        and node.get("absoluteBoundingBox")
        and has_text_child
        and has_stroke(node)
        and len(children) <= 2
    ):
        return _result(
            SemanticRole.INPUT, 0.8, DetectionMethod.STRUCTURAL,
            "Frame with border + text suggests input field",
        )

    # List: repeated children of one type
    if (
        len(children) >= 3
        and node_type in LIST_CONTAINER_TYPES
        and len(set(child_types)) == 1
    ):
        return _result(
            SemanticRole.LIST, 0.7, DetectionMethod.STRUCTURAL,
            f"{len(children)} repeated elements suggest list",
        )

    # Card: background with mixed text + visual content
    if len(children) >= 2 and background and has_text_child:
        if any(t in CARD_VISUAL_TYPES for t in child_types):
            return _result(
                SemanticRole.CARD, 0.65, DetectionMethod.STRUCTURAL,
                "Container with background, text, and visuals suggests card",
            )

    return None


def detect_from_naming(node: Dict[str, Any]) -> Optional[RoleDetectionResult]:
    name = str(node.get("name", ""))
    lower = name.lower()
    for keywords, role in NAME_PATTERNS:
        if any(kw in lower for kw in keywords):
            return _result(
                role, NAMING_CONFIDENCE, DetectionMethod.NAMING,
                f"Name \"{name}\" matches pattern for {role.value}",
            )
    return None


# Fixed precedence: component type > structure > naming
ROLE_DETECTORS: Tuple[Tuple[DetectionMethod, RoleDetector], ...] = (
    (DetectionMethod.COMPONENT_TYPE, detect_from_component_type),
    (DetectionMethod.STRUCTURAL, detect_from_structure),
    (DetectionMethod.NAMING, detect_from_naming),
)


# =====================================================================
# Dispatcher
# =====================================================================


def combine_role_evidence(
    structural: Optional[RoleDetectionResult],
    component_type: Optional[RoleDetectionResult],
    naming: Optional[RoleDetectionResult],
) -> RoleDetectionResult:
    """Merge low-confidence evidence into one result.

    Agreement between structure and naming → hybrid with a +0.2 boost.
    Disagreement → structure wins, naming is only corroborating.
    Otherwise the first available of structure, component type, naming.
    """
    if structural and naming:
        if structural.role == naming.role:
            return _result(
                structural.role,
                min(structural.confidence + HYBRID_BOOST, 1.0),
                DetectionMethod.HYBRID,
                f"Structural analysis and naming both suggest {structural.role.value}",
            )
        return _result(
            structural.role,
            structural.confidence,
            DetectionMethod.STRUCTURAL,
            f"Structural pattern ({structural.role.value}) overrides "
            f"naming hint ({naming.role.value})",
        )

    best = structural or component_type or naming
    if best is not None:
        return best
    return _result(SemanticRole.UNKNOWN, 0.0, DetectionMethod.HYBRID, "No semantic role detected")


def identify_semantic_role(node: Dict[str, Any]) -> RoleDetectionResult:
    """Detect a node's semantic role with the fixed-precedence detectors."""
    evidence: Dict[DetectionMethod, Optional[RoleDetectionResult]] = {}
    for method, detector in ROLE_DETECTORS:
        result = detector(node)
        if result is not None and result.confidence > SHORT_CIRCUIT_CONFIDENCE:
            return result
        evidence[method] = result

    return combine_role_evidence(
        evidence.get(DetectionMethod.STRUCTURAL),
        evidence.get(DetectionMethod.COMPONENT_TYPE),
        evidence.get(DetectionMethod.NAMING),
    )
