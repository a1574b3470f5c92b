"""
Tabledash Dashboard - Schemas.

Pydantic models for the browse surface.
"""

from typing import List, Literal

from pydantic import BaseModel, Field

from tabledash.schemas import PaginationMeta, Row

ViewMode = Literal["table", "card"]


# =============================================================================
# Tables
# =============================================================================


class TableSummary(BaseModel):
    """One configured table as listed in the sidebar."""

    name: str
    display_name: str
    views: List[ViewMode] = Field(default_factory=list)
    default_view: ViewMode = "table"
    page_size: int
    category_enabled: bool = False
    categories: List[str] = Field(default_factory=list, description="Distinct category values")


class TableListResponse(BaseModel):
    """Configured tables in declaration order."""

    items: List[TableSummary]
    total: int


# =============================================================================
# Rows
# =============================================================================


class ColumnInfo(BaseModel):
    """A visible column and how it is rendered."""

    name: str
    label: str
    thumbnail: bool = False


class Cell(BaseModel):
    """Display form of one value."""

    column: str
    text: str
    href: str | None = Field(default=None, description="Set when the value is an http(s) link")
    truncated: bool = Field(default=False, description="Rendered with ellipsis, full value in tooltip")
    tooltip: str | None = None


class CardFace(BaseModel):
    """Picture side of a flip card."""

    image_url: str | None = None
    keyword: str | None = None


class RenderedRow(BaseModel):
    cells: List[Cell]
    card: CardFace | None = None


class RowsResponse(BaseModel):
    """One browse page of a table."""

    table: str
    display_name: str
    view: ViewMode
    views: List[ViewMode] = Field(default_factory=list)
    category: str | None = None
    search: str | None = None
    columns: List[ColumnInfo]
    rows: List[Row]
    rendered: List[RenderedRow]
    pagination: PaginationMeta


# =============================================================================
# Edit form
# =============================================================================


class FormField(BaseModel):
    name: str
    label: str
    value: str = ""


class FormResponse(BaseModel):
    """Fields of the add/edit dialog in configured order."""

    table: str
    display_name: str
    fields: List[FormField]


# =============================================================================
# Site
# =============================================================================


class SiteResponse(BaseModel):
    system_name: str
    home_intro: str = ""
    home_footer: str = ""


# =============================================================================
# Articles
# =============================================================================


class ArticleResponse(BaseModel):
    """A navigation entry looked up by its slug."""

    slug: str
    article: Row
