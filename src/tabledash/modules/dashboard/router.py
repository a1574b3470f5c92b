"""Tabledash Dashboard - Router.

Read-only browse endpoints backed by the publishable key.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from tabledash.config import Settings, get_settings
from tabledash.deps import get_dashboard_service
from tabledash.modules.dashboard.schemas import (
    ArticleResponse,
    FormResponse,
    RowsResponse,
    SiteResponse,
    TableListResponse,
    ViewMode,
)
from tabledash.modules.dashboard.service import DashboardService

router = APIRouter(prefix="/api", tags=["Dashboard"])


@router.get("/site", response_model=SiteResponse)
async def get_site(settings: Annotated[Settings, Depends(get_settings)]) -> SiteResponse:
    """Home page copy."""
    return SiteResponse(
        system_name=settings.site.system_name,
        home_intro=settings.site.home_intro,
        home_footer=settings.site.home_footer,
    )


@router.get("/tables", response_model=TableListResponse)
async def list_tables(
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> TableListResponse:
    """List configured tables with their views and category values."""
    return await service.list_tables()


@router.get("/tables/{table}/rows", response_model=RowsResponse)
async def browse_rows(
    table: str,
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
    page: int = Query(default=1, ge=1),
    category: str | None = Query(default=None),
    search: str | None = Query(default=None),
    view: ViewMode | None = Query(default=None),
) -> RowsResponse:
    """One page of a table, filtered by category and search term."""
    return await service.browse(table, page=page, category=category, search=search, view=view)


@router.get("/tables/{table}/form", response_model=FormResponse)
async def get_form(
    table: str,
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
    id: str | None = Query(default=None),
) -> FormResponse:
    """Editable fields of a table in configured order, prefilled from row ``?id=``."""
    return await service.form(table, row_id=id)


@router.get("/articles/{slug}", response_model=ArticleResponse)
async def get_article(
    slug: str,
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> ArticleResponse:
    """Navigation entry by slug; ``/api/articles/foo.html`` and ``/api/articles/foo`` are the same."""
    return await service.article(slug)
