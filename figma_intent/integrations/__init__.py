"""Figma integrations: traversal, role classification, normalization, reuse, component styles."""

from .component_styles import NodeNotFoundError, build_component_styles
from .node_normalizer import normalize_node, normalize_tree
from .normalized import (
    ComponentNode,
    LayoutNode,
    NormalizedNode,
    RoleDetectionResult,
    SemanticRole,
    TextNode,
    VisualNode,
    index_by_id,
)
from .reuse_tracker import build_reuse_contexts, track_component_reuse
from .role_classifier import identify_semantic_role
from .traverser import TraversalLimitError, walk_tree

__all__ = [
    "ComponentNode",
    "LayoutNode",
    "NodeNotFoundError",
    "NormalizedNode",
    "RoleDetectionResult",
    "SemanticRole",
    "TextNode",
    "TraversalLimitError",
    "VisualNode",
    "build_component_styles",
    "build_reuse_contexts",
    "identify_semantic_role",
    "index_by_id",
    "normalize_node",
    "normalize_tree",
    "track_component_reuse",
    "walk_tree",
]
