"""
Tabledash Dashboard - Service.

Read-only browse logic: table listing with categories, filtered and
paginated pages, edit-form layout and article lookup by slug.
"""

import logging
import re

from tabledash.exceptions import NotFoundException, ValidationException
from tabledash.modules.dashboard.cache import QueryResultCache
from tabledash.modules.dashboard.config_resolver import DashboardConfig
from tabledash.modules.dashboard.presentation import column_infos, display_text, render_rows
from tabledash.modules.dashboard.query import PageResult, QueryEngine, build_query_spec, total_pages
from tabledash.modules.dashboard.schemas import (
    ArticleResponse,
    FormField,
    FormResponse,
    RowsResponse,
    TableListResponse,
    TableSummary,
)
from tabledash.schemas import PaginationMeta, Row

logger = logging.getLogger(__name__)

# Browse pages start at 1, so page 0 of a table's cache space holds its
# category listing.
_CATEGORY_PAGE = 0

_HTML_SUFFIX = re.compile(r"\.html$")


class DashboardService:
    """Browse operations over the configured tables."""

    def __init__(self, config: DashboardConfig, engine: QueryEngine, cache: QueryResultCache):
        self.config = config
        self.engine = engine
        self.cache = cache

    def _require_table(self, table: str) -> None:
        if self.config.table(table) is None:
            raise NotFoundException("table", table)

    async def categories(self, table: str) -> list[str]:
        column = self.config.category_column(table)
        if not column:
            return []
        key = QueryResultCache.make_key(table, None, _CATEGORY_PAGE, None, self.config.fingerprint())
        return await self.cache.get_or_load(key, lambda: self.engine.list_categories(table, column))

    async def list_tables(self) -> TableListResponse:
        items = []
        for name in self.config.table_names():
            items.append(
                TableSummary(
                    name=name,
                    display_name=self.config.display_name(name),
                    views=list(self.config.views_for(name)),
                    default_view=self.config.default_view(name),
                    page_size=self.config.page_size_for(name),
                    category_enabled=self.config.category_column(name) is not None,
                    categories=await self.categories(name),
                )
            )
        return TableListResponse(items=items, total=len(items))

    async def browse(
        self,
        table: str,
        page: int = 1,
        category: str | None = None,
        search: str | None = None,
        view: str | None = None,
    ) -> RowsResponse:
        """
        Fetch one page of ``table`` through the query cache.

        Raises:
            NotFoundException: If the table is not configured
            ValidationException: If the page or view is invalid
            DatabaseException: If the query fails
        """
        self._require_table(table)

        views = self.config.views_for(table)
        if view is None:
            view = self.config.default_view(table)
        elif views and view not in views:
            raise ValidationException(f"View '{view}' is not available for table '{table}'")

        spec = build_query_spec(self.config, table, page=page, category=category, search=search)
        category_value = spec.category_filter[1] if spec.category_filter else None
        term = spec.search_filter[1] if spec.search_filter else None

        key = QueryResultCache.make_key(table, category_value, page, term, self.config.fingerprint())
        result: PageResult = await self.cache.get_or_load(key, lambda: self.engine.fetch_page(spec))

        page_size = spec.page_size
        return RowsResponse(
            table=table,
            display_name=self.config.display_name(table),
            view=view,
            views=list(views),
            category=category_value,
            search=term,
            columns=column_infos(self.config, table),
            rows=result.rows,
            rendered=render_rows(self.config, table, result.rows),
            pagination=PaginationMeta(
                page=page,
                page_size=page_size,
                total_count=result.total_count,
                total_pages=total_pages(result.total_count, page_size),
                range_start=spec.range_start,
                range_end=spec.range_end,
            ),
        )

    async def form(self, table: str, row_id: str | None = None) -> FormResponse:
        """
        Edit-form fields; ``show_name`` is never a field.

        With ``row_id`` the values are prefilled from that row.

        Raises:
            NotFoundException: If the table is not configured or the row does not exist
        """
        self._require_table(table)
        initial: Row = {}
        if row_id:
            row = await self.engine.fetch_one(table, "id", row_id)
            if row is None:
                raise NotFoundException(table, row_id)
            initial = row
        fields = []
        for column, label in self.config.columns(table):
            fields.append(FormField(name=column, label=label, value=display_text(initial.get(column))))
        return FormResponse(table=table, display_name=self.config.display_name(table), fields=fields)

    async def article(self, slug: str) -> ArticleResponse:
        """
        Navigation entry addressed by ``slug``; a trailing ``.html`` is ignored.

        Raises:
            NotFoundException: If no entry has that slug
        """
        clean_slug = _HTML_SUFFIX.sub("", slug.strip())
        if not clean_slug:
            raise NotFoundException("article", slug)

        row = await self.engine.fetch_one(self.config.navigation_table, "slug", clean_slug)
        if row is None:
            raise NotFoundException("article", clean_slug)
        return ArticleResponse(slug=clean_slug, article=row)
