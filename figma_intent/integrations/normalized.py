"""Normalized node types.

Intent-level replacements for the raw Figma schema. A normalized node is one
of four variants (layout, text, visual, component) discriminated by
``node_type``; the ``data`` payload type follows from the variant.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from ..settings import PRIMITIVE_THRESHOLD


# --- Semantic roles ---

class SemanticRole(str, Enum):
    BUTTON = "button"
    INPUT = "input"
    CARD = "card"
    LIST = "list"
    NAVIGATION = "navigation"
    HEADER = "header"
    FOOTER = "footer"
    MODAL = "modal"
    ICON = "icon"
    AVATAR = "avatar"
    BADGE = "badge"
    TEXT = "text"
    CONTAINER = "container"
    UNKNOWN = "unknown"


class DetectionMethod(str, Enum):
    COMPONENT_TYPE = "component-type"
    STRUCTURAL = "structural"
    NAMING = "naming"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class RoleDetectionResult:
    """Semantic role detected for a single node."""
    role: SemanticRole
    confidence: float  # 0.0 - 1.0
    method: DetectionMethod
    reasoning: str


# --- Shared value types ---

@dataclass(frozen=True)
class Color:
    """RGBA color, every channel in 0.0 - 1.0."""
    r: float
    g: float
    b: float
    a: float = 1.0


@dataclass
class Dimensions:
    width: float = 0
    height: float = 0


# --- Layout ---

class LayoutStrategy(str, Enum):
    FLEXBOX = "flexbox"
    GRID_CANDIDATE = "grid-candidate"
    ABSOLUTE = "absolute"
    NONE = "none"


@dataclass
class Padding:
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0

    def values(self) -> List[float]:
        return [self.top, self.right, self.bottom, self.left]


@dataclass
class FlexboxRules:
    """Flexbox rules translated from Figma auto-layout."""
    direction: Literal["row", "column"]
    justify_content: str
    align_items: str
    gap: float = 0
    padding: Optional[Padding] = None
    wrap: bool = False


@dataclass
class GridCandidate:
    """2D repetition detected among a container's children."""
    columns: int
    rows: int
    column_gap: float
    row_gap: float
    is_uniform: bool


@dataclass
class LayoutContainer:
    strategy: LayoutStrategy
    children: List[str] = field(default_factory=list)
    clips_content: bool = False
    dimensions: Dimensions = field(default_factory=Dimensions)
    flexbox: Optional[FlexboxRules] = None
    grid: Optional[GridCandidate] = None


# --- Text ---

SemanticLevel = Literal["h1", "h2", "h3", "h4", "h5", "h6", "body", "caption", "label"]


@dataclass
class TypographyIntent:
    font_family: str
    font_size: float
    font_weight: int
    line_height: float
    letter_spacing: float
    text_align: str
    semantic_level: Optional[SemanticLevel] = None


@dataclass
class TextElement:
    content: str
    typography: TypographyIntent
    color: Optional[Color] = None
    is_truncated: bool = False


# --- Visual ---

@dataclass
class Border:
    color: Color
    width: float
    radius: float = 0


@dataclass
class Shadow:
    offset_x: float
    offset_y: float
    blur: float
    spread: float
    color: Color


@dataclass
class VisualIntent:
    background_color: Optional[Color] = None
    border: Optional[Border] = None
    shadow: Optional[Shadow] = None
    opacity: float = 1.0
    corner_radius: float = 0


@dataclass
class VisualElement:
    type: Literal["rectangle", "ellipse", "vector", "icon", "image"]
    visual: VisualIntent
    dimensions: Dimensions = field(default_factory=Dimensions)


# --- Components ---

@dataclass(frozen=True)
class ComponentReuse:
    """Where a component instance sits in the reuse graph.

    ``is_primitive`` is derived from ``instance_count`` and cannot be set.
    """
    root_component_id: str
    root_component_name: str
    nesting_path: Tuple[str, ...] = ()
    nesting_depth: int = 0
    instance_count: int = 1

    @property
    def is_primitive(self) -> bool:
        return self.instance_count >= PRIMITIVE_THRESHOLD

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["nesting_path"] = list(self.nesting_path)
        result["is_primitive"] = self.is_primitive
        return result


@dataclass
class ComponentInstance:
    component_type: Literal["component", "component-set", "instance"]
    reuse: ComponentReuse
    children: List[str] = field(default_factory=list)
    dimensions: Dimensions = field(default_factory=Dimensions)
    description: Optional[str] = None
    component_id: Optional[str] = None


# --- Normalized node variants ---

@dataclass(frozen=True, kw_only=True)
class _NormalizedBase:
    id: str
    name: str
    original_type: str
    semantic_role: RoleDetectionResult
    parent_id: Optional[str] = None
    visible: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict; enums collapse to their string values."""
        result = _plain(asdict(self))
        data = getattr(self, "data", None)
        if isinstance(data, ComponentInstance):
            result["data"]["reuse"] = data.reuse.to_dict()
        return result


@dataclass(frozen=True, kw_only=True)
class LayoutNode(_NormalizedBase):
    data: LayoutContainer
    node_type: Literal["layout"] = field(default="layout", init=False)


@dataclass(frozen=True, kw_only=True)
class TextNode(_NormalizedBase):
    data: TextElement
    node_type: Literal["text"] = field(default="text", init=False)


@dataclass(frozen=True, kw_only=True)
class VisualNode(_NormalizedBase):
    data: VisualElement
    node_type: Literal["visual"] = field(default="visual", init=False)


@dataclass(frozen=True, kw_only=True)
class ComponentNode(_NormalizedBase):
    data: ComponentInstance
    node_type: Literal["component"] = field(default="component", init=False)


NormalizedNode = Union[LayoutNode, TextNode, VisualNode, ComponentNode]


def index_by_id(nodes: List[NormalizedNode]) -> Dict[str, NormalizedNode]:
    """Build an id → node lookup for callers that need one."""
    return {node.id: node for node in nodes}


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value
