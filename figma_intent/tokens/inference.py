"""Design token inference from normalized nodes.

Four independent, pure detectors run over the full node list:

- color palette: online clustering → neutral / semantic / primary naming
- typography scale: grouped by rounded font size, largest first
- spacing scale: auto-layout gap + padding, base unit = GCD
- border-radius scale: distinct corner radii of visual nodes

Tokens are recomputed in full on every run. Color values are hex strings
('#RRGGBB' / '#RRGGBBAA').
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..integrations.normalized import (
    Color,
    LayoutNode,
    NormalizedNode,
    TextNode,
    TypographyIntent,
    VisualNode,
)
from ..integrations.style_extractors import (
    calculate_brightness,
    colors_equal,
    rgba_to_hex,
    round_half_up,
)
from ..settings import COLOR_CLUSTER_THRESHOLD

logger = logging.getLogger(__name__)


class TokenCategory(str, Enum):
    COLOR = "color"
    TYPOGRAPHY = "typography"
    SPACING = "spacing"
    BORDER_RADIUS = "borderRadius"
    SHADOW = "shadow"
    OPACITY = "opacity"
    OTHER = "other"


@dataclass(frozen=True)
class DesignToken:
    name: str
    category: TokenCategory
    value: Any
    description: Optional[str] = None
    usage: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["category"] = self.category.value
        return result


SPACING_SCALE = ["xs", "sm", "md", "lg", "xl", "2xl", "3xl", "4xl"]
RADIUS_SCALE = ["sm", "md", "lg", "xl", "2xl"]
HEADING_SLOTS = 6
NEUTRAL_SPREAD = 0.05


def infer_design_tokens(nodes: Sequence[NormalizedNode]) -> List[DesignToken]:
    """Color, typography, spacing and radius tokens, in that order."""
    colors = collect_colors(nodes)
    typographies = [n.data.typography for n in nodes if isinstance(n, TextNode)]
    spacings = collect_spacings(nodes)
    radii = [
        n.data.visual.corner_radius for n in nodes if isinstance(n, VisualNode)
    ]

    tokens: List[DesignToken] = []
    tokens.extend(detect_color_palette(colors))
    tokens.extend(detect_typography_scale(typographies))
    tokens.extend(detect_spacing_system(spacings))
    tokens.extend(detect_border_radius_tokens(radii))

    logger.info(
        f"infer_design_tokens: {len(tokens)} tokens from {len(nodes)} nodes "
        f"({len(colors)} colors, {len(typographies)} text styles, "
        f"{len(spacings)} spacing values)"
    )
    return tokens


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


def collect_colors(nodes: Sequence[NormalizedNode]) -> List[Color]:
    """Text colors, visual backgrounds and visual border colors, in node order."""
    colors: List[Color] = []
    for node in nodes:
        if isinstance(node, TextNode) and node.data.color:
            colors.append(node.data.color)
        elif isinstance(node, VisualNode):
            visual = node.data.visual
            if visual.background_color:
                colors.append(visual.background_color)
            if visual.border:
                colors.append(visual.border.color)
    return colors


def collect_spacings(nodes: Sequence[NormalizedNode]) -> List[float]:
    """Gap and padding values of flexbox layout nodes."""
    spacings: List[float] = []
    for node in nodes:
        if not isinstance(node, LayoutNode) or node.data.flexbox is None:
            continue
        flexbox = node.data.flexbox
        spacings.append(flexbox.gap)
        if flexbox.padding:
            spacings.extend(flexbox.padding.values())
    return spacings


def _unique_names(names: List[str]) -> List[str]:
    """Suffix repeated names with -2, -3, ... so every token name is unique."""
    taken = set()
    result = []
    for name in names:
        candidate, n = name, 1
        while candidate in taken:
            n += 1
            candidate = f"{name}-{n}"
        taken.add(candidate)
        result.append(candidate)
    return result


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------


@dataclass
class ColorCluster:
    centroid: Color
    colors: List[Color]


def average_colors(colors: Sequence[Color]) -> Color:
    count = len(colors)
    return Color(
        r=sum(c.r for c in colors) / count,
        g=sum(c.g for c in colors) / count,
        b=sum(c.b for c in colors) / count,
        a=sum(c.a for c in colors) / count,
    )


def cluster_colors(
    colors: Sequence[Color], threshold: float = COLOR_CLUSTER_THRESHOLD,
) -> List[ColorCluster]:
    """Single-pass clustering: join the first cluster whose centroid is close.

    Order-dependent by construction; the centroid is the mean of all members.
    """
    clusters: List[ColorCluster] = []
    for color in colors:
        for cluster in clusters:
            if colors_equal(color, cluster.centroid, threshold):
                cluster.colors.append(color)
                cluster.centroid = average_colors(cluster.colors)
                break
        else:
            clusters.append(ColorCluster(centroid=color, colors=[color]))
    return clusters


def is_neutral_color(color: Color) -> bool:
    spread = max(
        abs(color.r - color.g), abs(color.g - color.b), abs(color.b - color.r),
    )
    return spread < NEUTRAL_SPREAD


def neutral_color_name(brightness: float, index: int) -> str:
    suffix = f"-{index}" if index > 0 else ""
    if brightness > 0.95:
        return f"white{suffix}"
    if brightness < 0.05:
        return f"black{suffix}"
    # 100 (lightest) .. 900 (darkest)
    return f"gray-{900 - round_half_up(brightness * 800)}"


def semantic_color_type(color: Color) -> Optional[str]:
    """error / success / warning / info zone of a color, or None."""
    r, g, b = color.r, color.g, color.b
    if r > 0.7 and g < 0.4 and b < 0.4:
        return "error"
    if g > 0.6 and r < 0.4 and b < 0.4:
        return "success"
    if r > 0.7 and g > 0.5 and b < 0.3:
        return "warning"
    if b > 0.6 and r < 0.4 and g < 0.6:
        return "info"
    return None


def detect_color_palette(colors: Sequence[Color]) -> List[DesignToken]:
    if not colors:
        return []

    # Stable sort keeps first-seen order among equally sized clusters
    clusters = sorted(cluster_colors(colors), key=lambda c: len(c.colors), reverse=True)

    primary_index = neutral_index = semantic_index = 0
    names: List[str] = []
    drafts = []
    for cluster in clusters:
        centroid = cluster.centroid
        brightness = calculate_brightness(centroid)
        semantic_type = semantic_color_type(centroid)

        if is_neutral_color(centroid):
            name = neutral_color_name(brightness, neutral_index)
            description = f"Neutral color - brightness: {brightness * 100:.0f}%"
            neutral_index += 1
        elif semantic_type:
            name = f"{semantic_type}-{semantic_index}"
            description = f"Semantic {semantic_type} color"
            semantic_index += 1
        else:
            name = "primary" if primary_index == 0 else f"primary-{primary_index}"
            description = "Primary brand color"
            primary_index += 1

        names.append(name)
        drafts.append((cluster, description))

    return [
        DesignToken(
            name=name,
            category=TokenCategory.COLOR,
            value=rgba_to_hex(cluster.centroid),
            description=description,
            usage=f"Used {len(cluster.colors)} times in design",
        )
        for name, (cluster, description) in zip(_unique_names(names), drafts)
    ]


# ---------------------------------------------------------------------------
# Typography
# ---------------------------------------------------------------------------


def detect_typography_scale(typographies: Sequence[TypographyIntent]) -> List[DesignToken]:
    """One token per rounded font size, largest first.

    The representative (first seen) style's semantic level names the token;
    without one the first six sizes become h1..h6 and the rest body-N
    (≥14px) or caption-N.
    """
    if not typographies:
        return []

    groups: Dict[int, List[TypographyIntent]] = {}
    for typo in typographies:
        groups.setdefault(round_half_up(typo.font_size), []).append(typo)

    names: List[str] = []
    drafts = []
    for index, size in enumerate(sorted(groups, reverse=True)):
        group = groups[size]
        rep = group[0]
        used = f"used {len(group)} times"

        if rep.semantic_level:
            name = rep.semantic_level
            description = f"{rep.semantic_level.upper()} text style, font size {size}px, {used}"
        elif index < HEADING_SLOTS:
            name = f"h{index + 1}"
            description = f"Heading level {index + 1}, font size {size}px, {used}"
        elif size >= 14:
            name = f"body-{index - HEADING_SLOTS + 1}"
            description = f"Body text style, font size {size}px, {used}"
        else:
            name = f"caption-{index - HEADING_SLOTS + 1}"
            description = f"Caption/small text style, font size {size}px, {used}"

        value = {
            "font_family": rep.font_family,
            "font_size": rep.font_size,
            "font_weight": rep.font_weight,
            "line_height": rep.line_height,
            "letter_spacing": rep.letter_spacing,
            "text_align": rep.text_align,
        }
        names.append(name)
        drafts.append((value, description, f"Font size: {size}px, {used}"))

    return [
        DesignToken(
            name=name,
            category=TokenCategory.TYPOGRAPHY,
            value=value,
            description=description,
            usage=usage,
        )
        for name, (value, description, usage) in zip(_unique_names(names), drafts)
    ]


# ---------------------------------------------------------------------------
# Spacing
# ---------------------------------------------------------------------------


def find_gcd(values: Sequence[float]) -> int:
    """GCD of the rounded values; 1 when nothing usable remains."""
    result = 0
    for value in values:
        result = math.gcd(result, round_half_up(value))
    return result or 1


def detect_spacing_system(spacings: Sequence[float]) -> List[DesignToken]:
    unique = sorted({s for s in spacings if s > 0})
    if not unique:
        return []

    base_unit = find_gcd(unique)
    tokens = []
    for index, spacing in enumerate(unique):
        scale_name = SPACING_SCALE[index] if index < len(SPACING_SCALE) else str(index)
        multiplier = round_half_up(spacing / base_unit)
        tokens.append(DesignToken(
            name=f"spacing-{scale_name}",
            category=TokenCategory.SPACING,
            value=spacing,
            description=f"{multiplier}x base unit ({base_unit}px)",
            usage="Used for margins, padding, and gaps",
        ))
    return tokens


# ---------------------------------------------------------------------------
# Border radius
# ---------------------------------------------------------------------------


def detect_border_radius_tokens(radii: Sequence[float]) -> List[DesignToken]:
    unique = sorted({r for r in radii if r > 0})
    tokens = []
    for index, radius in enumerate(unique):
        scale_name = RADIUS_SCALE[index] if index < len(RADIUS_SCALE) else str(index)
        tokens.append(DesignToken(
            name=f"radius-{scale_name}",
            category=TokenCategory.BORDER_RADIUS,
            value=radius,
            description=f"Border radius: {radius}px",
        ))
    return tokens
