"""Pydantic schemas for pipeline query parameters (filters + pagination)."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

TokenType = Literal[
    "color", "typography", "spacing", "borderRadius", "shadow", "opacity", "other",
]
ComponentType = Literal["COMPONENT", "COMPONENT_SET", "INSTANCE"]


class PageQuery(BaseModel):
    """Pagination shared by every listing entry point."""
    limit: int = Field(default=100, ge=1, le=1000, description="Maximum items returned")
    offset: int = Field(default=0, ge=0, description="Items skipped before the page starts")


class TokenQuery(PageQuery):
    token_type: Optional[TokenType] = Field(None, description="Exact token category")
    token_name: Optional[str] = Field(
        None, description="Case-insensitive substring of the token name",
    )


class ComponentQuery(PageQuery):
    component_name: Optional[str] = Field(
        None, description="Case-insensitive substring of the component name",
    )
    component_type: Optional[ComponentType] = None


class FrameQuery(PageQuery):
    frame_name: Optional[str] = Field(
        None, description="Case-insensitive substring of the frame name",
    )


class OverviewQuery(PageQuery):
    page_id: Optional[str] = Field(None, description="Only the page with this id")


class StylesQuery(BaseModel):
    """Selects the node whose literal styles are extracted."""
    node_id: str = Field(..., min_length=1, description="Component or frame node id")
    include_children: bool = Field(True, description="Nest the styles of descendants")


class PlanQuery(BaseModel):
    target_framework: Optional[str] = Field(
        None, description="Framework named in the plan summary (e.g. 'react')",
    )
    page_id: Optional[str] = Field(None, description="Only elements on this page")
    component_ids: Optional[List[str]] = Field(
        None, description="Only elements with these ids",
    )
