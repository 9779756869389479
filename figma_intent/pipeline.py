"""Pipeline entry points.

Each entry point takes an already-deserialized Figma document, the file id
(and optional version) used for cache keys, and an explicit CacheManager.
The full collection is computed (or read from cache) first; filters and
pagination are applied afterwards, so one cached result serves every query.

Usage:
    cache = CacheManager(load_cache_config())
    result = await get_design_tokens(
        file_json["document"], "6kGd851qaAX4TiL44vpIrO", cache,
        query={"token_type": "color", "limit": 20},
    )
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from . import settings
from .cache import CacheManager, CacheOperation
from .integrations.component_styles import build_component_styles
from .integrations.node_normalizer import determine_layout_strategy, normalize_tree
from .integrations.normalized import NormalizedNode
from .integrations.reuse_tracker import track_component_reuse
from .integrations.style_extractors import extract_dimensions, figma_color, rgba_to_hex
from .integrations.traverser import walk_tree
from .planning import build_implementation_plan
from .schemas import (
    ComponentQuery,
    FrameQuery,
    OverviewQuery,
    PageQuery,
    PlanQuery,
    StylesQuery,
    TokenQuery,
)
from .tokens.inference import DesignToken, infer_design_tokens

logger = logging.getLogger(__name__)

T = TypeVar("T")
MetaMap = Optional[Dict[str, Dict[str, Any]]]

COMPONENT_NODE_TYPES = ("COMPONENT", "COMPONENT_SET", "INSTANCE")


async def _cached(
    cache: Optional[CacheManager],
    key: str,
    operation: CacheOperation,
    compute: Callable[[], T],
) -> T:
    """Return the cached value for key, computing and storing it on a miss."""
    if cache is not None:
        value = await cache.get(key)
        if value is not None:
            logger.info(f"[Cache] {operation.value} hit: {key}")
            return value
    value = compute()
    if cache is not None:
        await cache.set(key, value, operation)
    return value


def _paginate(items: List[Any], query: PageQuery, field_name: str) -> Dict[str, Any]:
    page = items[query.offset:query.offset + query.limit]
    return {
        field_name: page,
        "total_count": len(items),
        "has_more": query.offset + len(page) < len(items),
    }


def _name_matches(name: str, needle: Optional[str]) -> bool:
    return needle is None or needle.lower() in name.lower()


def _dims(node: Dict[str, Any]) -> Dict[str, float]:
    dims = extract_dimensions(node)
    return {"width": dims.width, "height": dims.height}


def metadata_digest(*metadata: MetaMap) -> Optional[str]:
    """Short stable digest of file metadata maps, None when all are empty.

    Results that depend on component metadata carry it in their cache key,
    so a call with metadata never reads a result computed without it.
    """
    if not any(metadata):
        return None
    payload = json.dumps(metadata, sort_keys=True, default=str)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:12]


# =====================================================================
# Normalized nodes
# =====================================================================


async def get_normalized_nodes(
    document: Dict[str, Any],
    file_id: str,
    cache: Optional[CacheManager] = None,
    version: Optional[str] = None,
    components: MetaMap = None,
) -> List[NormalizedNode]:
    """Normalized nodes of the whole document, in traversal order.

    Reuse contexts are attached to component nodes; ``components`` is the
    file response's component metadata, used to name reuse roots.
    """
    def compute() -> List[NormalizedNode]:
        return normalize_tree(document, track_reuse=True, components_meta=components)

    key = CacheManager.file_key(file_id, version, {"meta": metadata_digest(components)})
    return await _cached(cache, key, CacheOperation.FILE, compute)


# =====================================================================
# Design tokens
# =====================================================================


async def _all_tokens(
    document: Dict[str, Any],
    file_id: str,
    cache: Optional[CacheManager],
    version: Optional[str],
) -> List[DesignToken]:
    """Full token list, cached under the tokens key."""
    key = CacheManager.tokens_key(file_id, version)
    tokens: Optional[List[DesignToken]] = await cache.get(key) if cache is not None else None
    if tokens is not None:
        logger.info(f"[Cache] tokens hit: {key}")
        return tokens

    nodes = await get_normalized_nodes(document, file_id, cache, version)
    tokens = infer_design_tokens(nodes)
    if cache is not None:
        await cache.set(key, tokens, CacheOperation.TOKENS)
    return tokens


async def get_design_tokens(
    document: Dict[str, Any],
    file_id: str,
    cache: Optional[CacheManager] = None,
    version: Optional[str] = None,
    query: Optional[Union[TokenQuery, Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Inferred design tokens → {"tokens", "total_count", "has_more"}.

    Raises:
        pydantic.ValidationError: If ``query`` is invalid.
    """
    query = TokenQuery.model_validate(query if query is not None else {})
    tokens = await _all_tokens(document, file_id, cache, version)

    filtered = [
        t for t in tokens
        if (query.token_type is None or t.category.value == query.token_type)
        and _name_matches(t.name, query.token_name)
    ]
    result = _paginate(filtered, query, "tokens")
    result["tokens"] = [t.to_dict() for t in result["tokens"]]
    return result


# =====================================================================
# Component map
# =====================================================================

_SIZE_RE = re.compile(r"^(xs|sm|small|md|medium|lg|large|xl|xxl)$", re.IGNORECASE)
_STATE_RE = re.compile(r"^(default|hover|active|disabled|focused|pressed)$", re.IGNORECASE)
_THEME_RE = re.compile(
    r"^(light|dark|primary|secondary|success|error|warning|info)$", re.IGNORECASE,
)


def _variant_list(properties: Dict[str, Any]) -> List[Dict[str, str]]:
    return [
        {"property_name": name, "property_value": str(value)}
        for name, value in properties.items()
    ]


def parse_variants_from_name(name: str) -> Optional[List[Dict[str, str]]]:
    """Variants from a 'Button/Primary/lg' style name (segments after the first).

    Segments are classified as size, state or theme by keyword; anything
    else is 'variant' for the first segment and 'variant{i}' after that.
    """
    segments = [s.strip() for s in name.split("/")]
    if len(segments) < 2:
        return None

    variants = []
    for i, segment in enumerate(segments[1:], start=1):
        if _SIZE_RE.match(segment):
            prop = "size"
        elif _STATE_RE.match(segment):
            prop = "state"
        elif _THEME_RE.match(segment):
            prop = "theme"
        else:
            prop = "variant" if i == 1 else f"variant{i}"
        variants.append({"property_name": prop, "property_value": segment})
    return variants


def extract_variants(
    node: Dict[str, Any],
    components: MetaMap = None,
    component_sets: MetaMap = None,
) -> Optional[List[Dict[str, str]]]:
    """Variant properties from file metadata, else parsed from the node name."""
    sets = component_sets or {}
    if node.get("type") == "COMPONENT_SET":
        props = (sets.get(node.get("id", "")) or {}).get("variantProperties")
        if props:
            return _variant_list(props)
    elif components:
        # Instances carry the variant axes of the component they reference
        meta_id = node.get("componentId") if node.get("type") == "INSTANCE" else node.get("id")
        set_id = (components.get(meta_id or "") or {}).get("componentSetId")
        props = (sets.get(set_id) or {}).get("variantProperties") if set_id else None
        if props:
            return _variant_list(props)
    return parse_variants_from_name(str(node.get("name", "")))


def build_component_map(
    document: Dict[str, Any],
    components: MetaMap = None,
    component_sets: MetaMap = None,
) -> List[Dict[str, Any]]:
    # Counts follow instances at any depth the traversal allows
    reuse_map = track_component_reuse([document], max_depth=settings.TRAVERSAL_MAX_DEPTH)

    infos = []
    for item in walk_tree(document):
        node = item.node
        node_type = node.get("type")
        if node_type not in COMPONENT_NODE_TYPES:
            continue
        node_id = node.get("id", "")
        component_id = node.get("componentId") if node_type == "INSTANCE" else node_id
        infos.append({
            "id": node_id,
            "name": node.get("name", ""),
            "type": node_type,
            "description": node.get("description") or None,
            "parent_id": item.parent_id,
            "children_ids": [
                c.get("id", "") for c in node.get("children") or []
                if isinstance(c, dict) and c.get("type") in COMPONENT_NODE_TYPES
            ],
            "component_id": component_id,
            "instance_count": len(reuse_map.get(component_id or "", [])),
            "variants": extract_variants(node, components, component_sets),
            "dimensions": _dims(node),
        })

    logger.info(f"build_component_map: {len(infos)} components")
    return infos


async def get_component_map(
    document: Dict[str, Any],
    file_id: str,
    cache: Optional[CacheManager] = None,
    version: Optional[str] = None,
    query: Optional[Union[ComponentQuery, Dict[str, Any]]] = None,
    components: MetaMap = None,
    component_sets: MetaMap = None,
) -> Dict[str, Any]:
    """Components, component sets and instances → {"components", ...}."""
    query = ComponentQuery.model_validate(query if query is not None else {})
    infos = await _cached(
        cache,
        CacheManager.components_key(
            file_id, version, {"meta": metadata_digest(components, component_sets)},
        ),
        CacheOperation.COMPONENTS,
        lambda: build_component_map(document, components, component_sets),
    )
    filtered = [
        info for info in infos
        if _name_matches(info["name"], query.component_name)
        and (query.component_type is None or info["type"] == query.component_type)
    ]
    return _paginate(filtered, query, "components")


# =====================================================================
# Frame map
# =====================================================================


def build_frame_map(document: Dict[str, Any]) -> List[Dict[str, Any]]:
    frames = []
    for item in walk_tree(document):
        node = item.node
        if node.get("type") != "FRAME":
            continue
        frames.append({
            "id": node.get("id", ""),
            "name": node.get("name", ""),
            "type": "FRAME",
            "parent_id": item.parent_id,
            "children_ids": [
                c.get("id", "") for c in node.get("children") or []
                if isinstance(c, dict) and c.get("type") == "FRAME"
            ],
            "dimensions": _dims(node),
            "layout_mode": node.get("layoutMode"),
            "layout_strategy": determine_layout_strategy(node).value,
        })

    logger.info(f"build_frame_map: {len(frames)} frames")
    return frames


async def get_frame_map(
    document: Dict[str, Any],
    file_id: str,
    cache: Optional[CacheManager] = None,
    version: Optional[str] = None,
    query: Optional[Union[FrameQuery, Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """All FRAME nodes with their frame hierarchy → {"frames", ...}."""
    query = FrameQuery.model_validate(query if query is not None else {})
    frames = await _cached(
        cache,
        CacheManager.frames_key(file_id, version),
        CacheOperation.FRAMES,
        lambda: build_frame_map(document),
    )
    filtered = [f for f in frames if _name_matches(f["name"], query.frame_name)]
    return _paginate(filtered, query, "frames")


# =====================================================================
# Page overview
# =====================================================================


def build_page_overview(document: Dict[str, Any]) -> List[Dict[str, Any]]:
    pages = []
    for page in document.get("children") or []:
        if not isinstance(page, dict) or page.get("type") != "CANVAS":
            continue
        background = figma_color(page.get("backgroundColor"))
        pages.append({
            "id": page.get("id", ""),
            "name": page.get("name", ""),
            "node_count": len(page.get("children") or []),
            "background_color": rgba_to_hex(background) if background else None,
        })
    return pages


async def get_page_overview(
    document: Dict[str, Any],
    file_id: str,
    cache: Optional[CacheManager] = None,
    version: Optional[str] = None,
    query: Optional[Union[OverviewQuery, Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """CANVAS pages with top-level node counts → {"pages", ...}."""
    query = OverviewQuery.model_validate(query if query is not None else {})
    pages = await _cached(
        cache,
        CacheManager.overview_key(file_id, version),
        CacheOperation.OVERVIEW,
        lambda: build_page_overview(document),
    )
    if query.page_id is not None:
        pages = [p for p in pages if p["id"] == query.page_id]
    return _paginate(pages, query, "pages")


# =====================================================================
# Component styles
# =====================================================================


async def get_component_styles(
    document: Dict[str, Any],
    file_id: str,
    cache: Optional[CacheManager] = None,
    version: Optional[str] = None,
    query: Optional[Union[StylesQuery, Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Literal styles, resources, palette and fonts of one component or frame.

    Raises:
        pydantic.ValidationError: If ``query`` is missing a node id.
        NodeNotFoundError: If the document has no node with that id.
    """
    query = StylesQuery.model_validate(query if query is not None else {})
    return await _cached(
        cache,
        CacheManager.styles_key(file_id, query.node_id, version, query.include_children),
        CacheOperation.COMPONENTS,
        lambda: build_component_styles(document, query.node_id, query.include_children),
    )


# =====================================================================
# Implementation plan
# =====================================================================


async def get_implementation_plan(
    document: Dict[str, Any],
    file_id: str,
    cache: Optional[CacheManager] = None,
    version: Optional[str] = None,
    query: Optional[Union[PlanQuery, Dict[str, Any]]] = None,
    components: MetaMap = None,
) -> Dict[str, Any]:
    """Component mappings, layout/styling guidance and risks for the file.

    Reuses the cached normalized nodes and tokens of the same file version.
    """
    query = PlanQuery.model_validate(query if query is not None else {})
    key = CacheManager.plan_key(file_id, version, {
        "framework": query.target_framework,
        "page": query.page_id,
        "ids": "|".join(sorted(query.component_ids)) if query.component_ids else None,
        "meta": metadata_digest(components),
    })
    if cache is not None:
        plan = await cache.get(key)
        if plan is not None:
            logger.info(f"[Cache] plan hit: {key}")
            return plan

    nodes = await get_normalized_nodes(document, file_id, cache, version, components=components)
    tokens = await _all_tokens(document, file_id, cache, version)
    plan = build_implementation_plan(
        document, nodes, tokens,
        target_framework=query.target_framework,
        page_id=query.page_id,
        component_ids=query.component_ids,
    )
    if cache is not None:
        await cache.set(key, plan, CacheOperation.PLAN)
    return plan
