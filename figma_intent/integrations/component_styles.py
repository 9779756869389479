"""Raw style extraction for a single component or frame subtree.

Unlike the normalizer, which reduces nodes to intent, this keeps the
as-designed values (every fill, stroke, effect, constraint and mixed text
run) for code that needs the literal styling of one element. Alongside
the style tree it collects the subtree's images, vector shapes, color
palette and fonts.

Output dicts use snake_case keys; optional properties are omitted when the
node does not carry them.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .style_extractors import _list, _number, figma_color, rgba_to_hex
from .traverser import walk_tree

logger = logging.getLogger(__name__)

VECTOR_TYPES = frozenset({"VECTOR", "STAR", "LINE", "ELLIPSE", "REGULAR_POLYGON", "RECTANGLE"})

DEFAULT_TEXT_COLOR = "#000000"


class NodeNotFoundError(LookupError):
    """Raised when a requested node id is not in the document."""


def _hex(color: Any) -> Optional[str]:
    parsed = figma_color(color)
    return rgba_to_hex(parsed) if parsed is not None else None


def find_node_by_id(root: Dict[str, Any], node_id: str) -> Optional[Dict[str, Any]]:
    for item in walk_tree(root):
        if item.node.get("id") == node_id:
            return item.node
    return None


# ---------------------------------------------------------------------------
# Per-node styles
# ---------------------------------------------------------------------------


def format_line_height(style: Dict[str, Any]) -> str:
    """'24px', '150%', 'AUTO', or '' when no usable value exists."""
    unit = style.get("lineHeightUnit")
    px = style.get("lineHeightPx")
    percent = style.get("lineHeightPercent")
    has_px = _number(px, None) is not None
    has_percent = _number(percent, None) is not None

    if unit == "PIXELS" and has_px:
        return f"{px}px"
    if unit == "PERCENT" and has_percent:
        return f"{percent}%"
    if unit == "AUTO":
        return "AUTO"
    if has_px:
        return f"{px}px"
    if has_percent:
        return f"{percent}%"
    return ""


def _paint_list(paints: Any, with_images: bool = False) -> List[Dict[str, Any]]:
    result = []
    for paint in _list(paints):
        entry = {
            "type": paint.get("type"),
            "color": _hex(paint.get("color")),
            "opacity": _number(paint.get("opacity"), 1.0),
            "visible": paint.get("visible", True) is not False,
        }
        if with_images and paint.get("type") == "IMAGE":
            image_ref = paint.get("imageRef")
            entry["image_url"] = f"IMAGE_REF:{image_ref}" if image_ref else "(IMAGE_FILL_DETECTED)"
        result.append(entry)
    return result


def extract_mixed_styles(node: Dict[str, Any], base_color: Optional[str]) -> List[Dict[str, Any]]:
    """Runs of characters whose style differs from the node's base style.

    ``characterStyleOverrides`` holds one override id per character (0 is
    the base style); consecutive equal ids form a run, looked up in
    ``styleOverrideTable``. Run colors fall back to the base fill color.
    """
    overrides = node.get("characterStyleOverrides")
    table = node.get("styleOverrideTable")
    if not isinstance(overrides, list) or not isinstance(table, dict):
        return []

    runs = []
    current = None
    start = 0
    for index in range(len(overrides) + 1):
        style_id = overrides[index] if index < len(overrides) else None
        if style_id == current:
            continue
        if current not in (None, 0):
            # JSON object keys are strings
            override = table.get(str(current))
            if isinstance(override, dict):
                fills = _list(override.get("fills"))
                color = _hex(fills[0].get("color")) if fills else None
                runs.append({
                    "start_index": start,
                    "end_index": index,
                    "font_family": override.get("fontFamily"),
                    "font_weight": override.get("fontWeight"),
                    "font_size": override.get("fontSize"),
                    "color": color or base_color,
                })
        current = style_id
        start = index
    return runs


def _text_style(node: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    style = node.get("style")
    if node.get("type") != "TEXT" or "characters" not in node or not isinstance(style, dict):
        return None

    fills = _list(node.get("fills"))
    base_color = _hex(fills[0].get("color")) if fills else None
    text = {
        "content": str(node.get("characters") or ""),
        "font_family": style.get("fontFamily"),
        "font_weight": style.get("fontWeight"),
        "font_size": style.get("fontSize"),
        "line_height": format_line_height(style),
        "letter_spacing": style.get("letterSpacing"),
        "text_align": style.get("textAlignHorizontal"),
        "text_color": base_color or DEFAULT_TEXT_COLOR,
    }
    mixed = extract_mixed_styles(node, base_color)
    if mixed:
        text["mixed_styles"] = mixed
    return text


def _effects(effects: Any) -> List[Dict[str, Any]]:
    result = []
    for effect in _list(effects):
        offset = effect.get("offset")
        result.append({
            "type": effect.get("type"),
            "radius": _number(effect.get("radius"), 0),
            "color": _hex(effect.get("color")),
            "offset": (
                {"x": _number(offset.get("x"), 0), "y": _number(offset.get("y"), 0)}
                if isinstance(offset, dict) else None
            ),
            "visible": effect.get("visible", True) is not False,
        })
    return result


def extract_node_style(node: Dict[str, Any]) -> Dict[str, Any]:
    """Literal style properties of one node (children not included)."""
    style: Dict[str, Any] = {
        "id": node.get("id", ""),
        "name": node.get("name", ""),
        "type": node.get("type", ""),
    }

    box = node.get("absoluteBoundingBox")
    if isinstance(box, dict):
        style["dimensions"] = {
            key: _number(box.get(key), 0) for key in ("width", "height", "x", "y")
        }

    background = _hex(node.get("backgroundColor"))
    if background:
        style["background_color"] = background
    if isinstance(node.get("fills"), list):
        style["fills"] = _paint_list(node["fills"], with_images=True)
    if isinstance(node.get("strokes"), list):
        style["strokes"] = _paint_list(node["strokes"])
    if node.get("strokeWeight") is not None:
        style["stroke_weight"] = node["strokeWeight"]
    if node.get("cornerRadius") is not None:
        style["corner_radius"] = node["cornerRadius"]

    text = _text_style(node)
    if text is not None:
        style["text"] = text

    if style["type"] in VECTOR_TYPES:
        style["vector"] = {
            "is_vector": True,
            "vector_type": style["type"],
            "has_export_settings": bool(node.get("exportSettings")),
        }

    if isinstance(node.get("effects"), list):
        style["effects"] = _effects(node["effects"])

    for raw_key, key in (
        ("layoutMode", "layout_mode"),
        ("itemSpacing", "item_spacing"),
        ("layoutAlign", "layout_align"),
        ("layoutGrow", "layout_grow"),
        ("opacity", "opacity"),
        ("blendMode", "blend_mode"),
        ("clipsContent", "clips_content"),
    ):
        if node.get(raw_key) is not None:
            style[key] = node[raw_key]

    if "paddingTop" in node:
        style["padding"] = {
            side: _number(node.get(f"padding{side.capitalize()}"), 0)
            for side in ("top", "right", "bottom", "left")
        }

    constraints = node.get("constraints")
    if isinstance(constraints, dict):
        style["constraints"] = {
            "horizontal": constraints.get("horizontal") or "LEFT",
            "vertical": constraints.get("vertical") or "TOP",
        }

    return style


def extract_element_styles(node: Dict[str, Any], include_children: bool = True) -> Dict[str, Any]:
    """Style tree rooted at node; children nest under 'children' when requested."""
    root_style = extract_node_style(node)
    if not include_children:
        return root_style

    by_id: Dict[str, Dict[str, Any]] = {}
    for item in walk_tree(node):
        style = root_style if item.parent_id is None else extract_node_style(item.node)
        if isinstance(item.node.get("children"), list):
            style["children"] = []
        if item.parent_id is not None and item.parent_id in by_id:
            by_id[item.parent_id].setdefault("children", []).append(style)
        by_id[style["id"]] = style
    return root_style


# ---------------------------------------------------------------------------
# Subtree resources
# ---------------------------------------------------------------------------


def extract_images(node: Dict[str, Any]) -> List[Dict[str, Any]]:
    images = []
    for item in walk_tree(node):
        for fill in _list(item.node.get("fills")):
            if fill.get("type") != "IMAGE":
                continue
            image_ref = fill.get("imageRef")
            images.append({
                "node_id": item.node.get("id", ""),
                "node_name": item.node.get("name", ""),
                "image_ref": image_ref,
                # Resolving the ref to a URL needs the Figma images endpoint
                "image_url": (
                    f"Requires Figma Images API: imageRef={image_ref}"
                    if image_ref else "(IMAGE_WITHOUT_REF)"
                ),
            })
    return images


def extract_vectors(node: Dict[str, Any]) -> List[Dict[str, Any]]:
    vectors = []
    for item in walk_tree(node):
        raw = item.node
        if raw.get("type") not in VECTOR_TYPES:
            continue
        name = str(raw.get("name", ""))
        vectors.append({
            "node_id": raw.get("id", ""),
            "node_name": name,
            "vector_type": raw["type"],
            "can_export": bool(raw.get("exportSettings")) or "icon" in name.lower(),
        })
    return vectors


def extract_color_palette(node: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Hex colors with their usages (background, fill, text, stroke, shadow), most used first."""
    palette: Dict[str, Dict[str, Any]] = {}

    def add(color: Any, usage: str) -> None:
        value = _hex(color)
        if value is None:
            return
        entry = palette.setdefault(value, {"usage": {}, "count": 0})
        entry["usage"][usage] = None
        entry["count"] += 1

    for item in walk_tree(node):
        raw = item.node
        if raw.get("backgroundColor"):
            add(raw["backgroundColor"], "background")
        for fill in _list(raw.get("fills")):
            if fill.get("type") == "SOLID":
                add(fill.get("color"), "text" if raw.get("type") == "TEXT" else "fill")
        for stroke in _list(raw.get("strokes")):
            if stroke.get("type") == "SOLID":
                add(stroke.get("color"), "stroke")
        for effect in _list(raw.get("effects")):
            add(effect.get("color"), "shadow")

    colors = [
        {"value": value, "usage": ", ".join(entry["usage"]), "count": entry["count"]}
        for value, entry in palette.items()
    ]
    colors.sort(key=lambda c: c["count"], reverse=True)
    return colors


def infer_typography_usage(size: float) -> str:
    if size >= 32:
        return "heading-1"
    if size >= 24:
        return "heading-2"
    if size >= 20:
        return "heading-3"
    if size >= 16:
        return "body"
    if size >= 14:
        return "body-small"
    return "caption"


def extract_fonts(node: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Distinct family/weight/size combinations of TEXT nodes, most used first."""
    fonts: Dict[tuple, Dict[str, Any]] = {}
    for item in walk_tree(node):
        style = item.node.get("style")
        if item.node.get("type") != "TEXT" or not isinstance(style, dict):
            continue
        family = style.get("fontFamily")
        weight = style.get("fontWeight")
        size = style.get("fontSize")
        key = (str(family), str(weight), str(size))
        if key not in fonts:
            fonts[key] = {
                "family": family,
                "weight": weight,
                "size": size,
                "usage": infer_typography_usage(_number(size, 0)),
                "count": 0,
            }
        fonts[key]["count"] += 1

    result = list(fonts.values())
    result.sort(key=lambda f: f["count"], reverse=True)
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_component_styles(
    document: Dict[str, Any], node_id: str, include_children: bool = True,
) -> Dict[str, Any]:
    """Styles and resources of the node with the given id.

    Raises:
        NodeNotFoundError: If no node in the document has that id.
    """
    target = find_node_by_id(document, node_id)
    if target is None:
        raise NodeNotFoundError(f'Component/frame with ID "{node_id}" not found in file')

    result = {
        "component_id": target.get("id", ""),
        "component_name": target.get("name", ""),
        "component_type": target.get("type", ""),
        "styles": extract_element_styles(target, include_children),
        "images": extract_images(target),
        "vectors": extract_vectors(target),
        "colors": extract_color_palette(target),
        "fonts": extract_fonts(target),
    }
    logger.info(
        f"build_component_styles: {node_id} → {len(result['colors'])} colors, "
        f"{len(result['fonts'])} fonts, {len(result['vectors'])} vectors"
    )
    return result
