"""Shared raw-node builders for figma_intent tests.

Raw nodes are plain dicts shaped like the Figma REST API response, so the
builders only fill in what a test would otherwise repeat.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest


def solid(r: float, g: float, b: float, a: float = 1.0, **extra: Any) -> Dict[str, Any]:
    """A SOLID paint."""
    return {"type": "SOLID", "color": {"r": r, "g": g, "b": b, "a": a}, **extra}


def bbox(x: float, y: float, width: float = 100, height: float = 40) -> Dict[str, Any]:
    return {"x": x, "y": y, "width": width, "height": height}


def text(
    node_id: str,
    characters: str = "Label",
    font_size: float = 14,
    font_weight: float = 400,
    **extra: Any,
) -> Dict[str, Any]:
    return {
        "id": node_id,
        "name": extra.pop("name", characters),
        "type": "TEXT",
        "characters": characters,
        "style": {
            "fontFamily": "Inter",
            "fontSize": font_size,
            "fontWeight": font_weight,
            "lineHeightPx": font_size * 1.5,
            "letterSpacing": 0,
            "textAlignHorizontal": "LEFT",
        },
        **extra,
    }


def rect(node_id: str, name: str = "Rectangle", **extra: Any) -> Dict[str, Any]:
    return {"id": node_id, "name": name, "type": "RECTANGLE", **extra}


def frame(
    node_id: str,
    name: str = "Frame",
    children: Optional[List[Dict[str, Any]]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    return {
        "id": node_id,
        "name": name,
        "type": "FRAME",
        "children": children if children is not None else [],
        **extra,
    }


def instance(node_id: str, component_id: str, name: str = "Instance", **extra: Any) -> Dict[str, Any]:
    return {
        "id": node_id,
        "name": name,
        "type": "INSTANCE",
        "componentId": component_id,
        **extra,
    }


def document(*pages: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": "0:0", "name": "Document", "type": "DOCUMENT", "children": list(pages)}


def page(node_id: str, name: str, children: List[Dict[str, Any]], **extra: Any) -> Dict[str, Any]:
    return {"id": node_id, "name": name, "type": "CANVAS", "children": children, **extra}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def two_page_document():
    """Page 1 holds a horizontal auto-layout toolbar with three 14px labels."""
    toolbar = frame(
        "1:10",
        "Toolbar",
        layoutMode="HORIZONTAL",
        itemSpacing=16,
        primaryAxisAlignItems="CENTER",
        counterAxisAlignItems="CENTER",
        absoluteBoundingBox=bbox(0, 0, 400, 48),
        children=[
            text("1:11", "Home"),
            text("1:12", "Docs"),
            text("1:13", "About"),
        ],
    )
    return document(
        page("1:1", "Page 1", [toolbar], backgroundColor={"r": 1, "g": 1, "b": 1, "a": 1}),
        page("2:1", "Page 2", [], backgroundColor={"r": 0.8, "g": 0.8, "b": 0.8, "a": 1}),
    )


class FakeClock:
    """Manually advanced clock (seconds) for TTL tests."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
