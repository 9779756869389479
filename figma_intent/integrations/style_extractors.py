"""Figma style extraction: colors, typography, auto-layout and visual intent.

Deterministic conversion from raw Figma node properties to the intent-level
value types in normalized.py. Missing or malformed style data never raises;
it resolves to the documented defaults instead.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, List, Optional

from .normalized import (
    Border,
    Color,
    Dimensions,
    FlexboxRules,
    Padding,
    SemanticLevel,
    Shadow,
    TypographyIntent,
    VisualIntent,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Color utilities
# ---------------------------------------------------------------------------

_HEX_COLOR_RE = re.compile(r"^#?([0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")


def figma_color(color: Optional[Dict[str, Any]]) -> Optional[Color]:
    """Convert a Figma RGBA float dict {r,g,b,a} to a Color."""
    if not isinstance(color, dict):
        return None
    return Color(
        r=float(_number(color.get("r"), 0)),
        g=float(_number(color.get("g"), 0)),
        b=float(_number(color.get("b"), 0)),
        a=float(_number(color.get("a"), 1.0)),
    )


def extract_color_intent(paint: Optional[Dict[str, Any]]) -> Optional[Color]:
    """Color of a SOLID paint, with the paint's opacity folded into alpha."""
    if not isinstance(paint, dict) or paint.get("type") != "SOLID":
        return None
    color = figma_color(paint.get("color"))
    if color is None:
        return None
    opacity = _number(paint.get("opacity"), 1.0)
    if opacity == 1.0:
        return color
    return Color(r=color.r, g=color.g, b=color.b, a=color.a * opacity)


def rgba_to_hex(color: Color) -> str:
    """Color → '#RRGGBB', or '#RRGGBBAA' when not fully opaque."""
    r = round_half_up(color.r * 255)
    g = round_half_up(color.g * 255)
    b = round_half_up(color.b * 255)
    hex_rgb = f"#{r:02X}{g:02X}{b:02X}"
    if color.a < 1.0:
        hex_rgb += f"{round_half_up(color.a * 255):02X}"
    return hex_rgb


def hex_to_rgba(hex_color: str) -> Color:
    """'#RRGGBB' or '#RRGGBBAA' (leading '#' optional) → Color.

    Raises:
        ValueError: If the string is not a 6 or 8 digit hex color.
    """
    if not _HEX_COLOR_RE.match(hex_color):
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    clean = hex_color.lstrip("#")
    r = int(clean[0:2], 16) / 255
    g = int(clean[2:4], 16) / 255
    b = int(clean[4:6], 16) / 255
    a = int(clean[6:8], 16) / 255 if len(clean) == 8 else 1.0
    return Color(r=r, g=g, b=b, a=a)


def colors_equal(color1: Color, color2: Color, threshold: float = 0.01) -> bool:
    """True when every channel (alpha included) differs by less than threshold."""
    return (
        abs(color1.r - color2.r) < threshold
        and abs(color1.g - color2.g) < threshold
        and abs(color1.b - color2.b) < threshold
        and abs(color1.a - color2.a) < threshold
    )


def _linearize(channel: float) -> float:
    if channel <= 0.03928:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def calculate_brightness(color: Color) -> float:
    """Relative luminance (0 = black, 1 = white) with sRGB linearization."""
    return (
        0.2126 * _linearize(color.r)
        + 0.7152 * _linearize(color.g)
        + 0.0722 * _linearize(color.b)
    )


def is_light_color(color: Color) -> bool:
    return calculate_brightness(color) > 0.5


# ---------------------------------------------------------------------------
# Typography
# ---------------------------------------------------------------------------

DEFAULT_FONT_FAMILY = "sans-serif"
DEFAULT_FONT_SIZE = 14
DEFAULT_FONT_WEIGHT = 400
DEFAULT_LINE_HEIGHT = 20

_TEXT_ALIGN_MAP = {
    "LEFT": "left", "CENTER": "center",
    "RIGHT": "right", "JUSTIFIED": "justify",
}

# (min size, min weight, level), evaluated top-down; first match wins
_HEADING_THRESHOLDS = [
    (32, 600, "h1"),
    (28, 600, "h2"),
    (24, 600, "h3"),
    (20, 600, "h4"),
    (18, 600, "h5"),
    (16, 600, "h6"),
]


def default_typography() -> TypographyIntent:
    return TypographyIntent(
        font_family=DEFAULT_FONT_FAMILY,
        font_size=DEFAULT_FONT_SIZE,
        font_weight=DEFAULT_FONT_WEIGHT,
        line_height=DEFAULT_LINE_HEIGHT,
        letter_spacing=0,
        text_align="left",
    )


def normalize_font_weight(weight: float) -> int:
    """Snap to the nearest multiple of 100, clamped to 100..900."""
    rounded = round_half_up(weight / 100) * 100
    return max(100, min(900, rounded))


def normalize_text_align(align: Optional[str]) -> str:
    return _TEXT_ALIGN_MAP.get(_str(align), "left")


def detect_semantic_level(font_size: float, font_weight: float) -> SemanticLevel:
    """Heading / body / caption / label level from size and weight."""
    for min_size, min_weight, level in _HEADING_THRESHOLDS:
        if font_size >= min_size and font_weight >= min_weight:
            return level
    if font_size >= 16:
        return "body"
    if font_size >= 12:
        return "caption"
    return "label"


def extract_typography(node: Dict[str, Any]) -> TypographyIntent:
    """Extract typography intent from a TEXT node's style."""
    style = node.get("style")
    # Fallback: some exports use "typeStyle" instead of "style"
    if not isinstance(style, dict) or not style:
        style = node.get("typeStyle")
    if not isinstance(style, dict) or not style:
        return default_typography()

    font_size = _number(style.get("fontSize"), DEFAULT_FONT_SIZE)
    font_weight = _number(style.get("fontWeight"), DEFAULT_FONT_WEIGHT)

    return TypographyIntent(
        font_family=style.get("fontFamily") or DEFAULT_FONT_FAMILY,
        font_size=font_size,
        font_weight=normalize_font_weight(font_weight),
        line_height=_number(style.get("lineHeightPx"), DEFAULT_LINE_HEIGHT),
        letter_spacing=_number(style.get("letterSpacing"), 0),
        text_align=normalize_text_align(style.get("textAlignHorizontal")),
        semantic_level=detect_semantic_level(font_size, font_weight),
    )


def extract_text_color(node: Dict[str, Any]) -> Optional[Color]:
    """Color of the first visible fill, if it is SOLID."""
    visible_fills = [f for f in _list(node.get("fills")) if f.get("visible", True)]
    if not visible_fills:
        return None
    return extract_color_intent(visible_fills[0])


# ---------------------------------------------------------------------------
# Auto-layout → flexbox
# ---------------------------------------------------------------------------

AUTO_LAYOUT_MODES = ("HORIZONTAL", "VERTICAL")

_JUSTIFY_MAP = {
    "MIN": "flex-start",
    "CENTER": "center",
    "MAX": "flex-end",
    "SPACE_BETWEEN": "space-between",
    "SPACE_AROUND": "space-around",
    "SPACE_EVENLY": "space-evenly",
}
_ALIGN_MAP = {
    "MIN": "flex-start",
    "CENTER": "center",
    "MAX": "flex-end",
    "BASELINE": "baseline",
}


def has_auto_layout(node: Dict[str, Any]) -> bool:
    return node.get("layoutMode") in AUTO_LAYOUT_MODES


def map_primary_axis_align(value: Optional[str]) -> str:
    return _JUSTIFY_MAP.get(_str(value), "flex-start")


def map_counter_axis_align(value: Optional[str]) -> str:
    return _ALIGN_MAP.get(_str(value), "stretch")


def extract_padding(node: Dict[str, Any]) -> Optional[Padding]:
    """Auto-layout padding, or None when all four sides are zero or absent."""
    padding = Padding(
        top=_number(node.get("paddingTop"), 0),
        right=_number(node.get("paddingRight"), 0),
        bottom=_number(node.get("paddingBottom"), 0),
        left=_number(node.get("paddingLeft"), 0),
    )
    if not any(padding.values()):
        return None
    return padding


def translate_auto_layout_to_flexbox(node: Dict[str, Any]) -> Optional[FlexboxRules]:
    """Translate Figma auto-layout to flexbox rules (None without auto-layout)."""
    if not has_auto_layout(node):
        return None

    return FlexboxRules(
        direction="row" if node["layoutMode"] == "HORIZONTAL" else "column",
        justify_content=map_primary_axis_align(node.get("primaryAxisAlignItems")),
        align_items=map_counter_axis_align(node.get("counterAxisAlignItems")),
        gap=_number(node.get("itemSpacing"), 0),
        padding=extract_padding(node),
        wrap=node.get("layoutWrap") == "WRAP",
    )


# ---------------------------------------------------------------------------
# Visual intent
# ---------------------------------------------------------------------------


def extract_background_color(node: Dict[str, Any]) -> Optional[Color]:
    fills = _list(node.get("fills"))
    if fills:
        color = extract_color_intent(fills[0])
        if color is not None:
            return color
    return figma_color(node.get("backgroundColor"))


def extract_border(node: Dict[str, Any]) -> Optional[Border]:
    strokes = _list(node.get("strokes"))
    if not strokes:
        return None
    color = extract_color_intent(strokes[0])
    if color is None:
        return None
    return Border(
        color=color,
        width=_number(node.get("strokeWeight"), 0) or 1,
        radius=_number(node.get("cornerRadius"), 0),
    )


def extract_shadow(effects: Any) -> Optional[Shadow]:
    """First visible DROP_SHADOW effect."""
    for effect in _list(effects):
        if effect.get("type") != "DROP_SHADOW" or effect.get("visible") is False:
            continue
        color = figma_color(effect.get("color"))
        if color is None:
            continue
        offset = effect.get("offset")
        if not isinstance(offset, dict):
            offset = {}
        return Shadow(
            offset_x=_number(offset.get("x"), 0),
            offset_y=_number(offset.get("y"), 0),
            blur=_number(effect.get("radius"), 0),
            spread=_number(effect.get("spread"), 0),
            color=color,
        )
    return None


def extract_visual_intent(node: Dict[str, Any]) -> VisualIntent:
    return VisualIntent(
        background_color=extract_background_color(node),
        border=extract_border(node),
        shadow=extract_shadow(node.get("effects")),
        opacity=_number(node.get("opacity"), 1.0),
        corner_radius=_number(node.get("cornerRadius"), 0),
    )


def extract_dimensions(node: Dict[str, Any]) -> Dimensions:
    bbox = node.get("absoluteBoundingBox")
    if not isinstance(bbox, dict):
        return Dimensions()
    return Dimensions(
        width=_number(bbox.get("width"), 0),
        height=_number(bbox.get("height"), 0),
    )


def has_background(node: Dict[str, Any]) -> bool:
    return bool(_list(node.get("fills"))) or bool(node.get("backgroundColor"))


def has_stroke(node: Dict[str, Any]) -> bool:
    return bool(_list(node.get("strokes")))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _number(value: Any, default: float) -> float:
    """Numeric value or default; bools and non-numbers count as missing."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return value


def round_half_up(value: float) -> int:
    """Round halves upwards (12.5 → 13), unlike the built-in round()."""
    return math.floor(value + 0.5)


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _list(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]
