"""
Tabledash Dashboard - Query Engine.

Builds a ``QuerySpec`` for one browse page and applies it to the Supabase
query builder. Filters compose onto the same builder, so the order is
fixed: select with exact count, category equality, OR-ed ilike search,
range last.
"""

import logging
import math
from dataclasses import dataclass, field

from supabase import Client

from tabledash.config import Settings
from tabledash.core.supabase_client import to_database_exception
from tabledash.exceptions import ValidationException
from tabledash.modules.dashboard.config_resolver import DashboardConfig
from tabledash.schemas import Row

logger = logging.getLogger(__name__)

# Characters with a meaning inside a PostgREST or=() expression.
_RESERVED = set(',()"\\')


@dataclass(frozen=True)
class QuerySpec:
    """One filtered, paginated read. Built per fetch and discarded after."""

    table: str
    range_start: int
    range_end: int
    select: str = "*"
    category_filter: tuple[str, str] | None = None
    search_filter: tuple[tuple[str, ...], str] | None = None

    @property
    def page_size(self) -> int:
        return self.range_end - self.range_start + 1


@dataclass
class PageResult:
    """Rows of one page plus the filtered (not paginated) row count."""

    rows: list[Row] = field(default_factory=list)
    total_count: int = 0


def page_range(page: int, page_size: int) -> tuple[int, int]:
    """Inclusive offsets of a one-based page."""
    if page < 1:
        raise ValidationException("page must be >= 1")
    if page_size < 1:
        raise ValidationException("page_size must be >= 1")
    start = (page - 1) * page_size
    return start, start + page_size - 1


def total_pages(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size) if page_size > 0 else 0


def _quote_term(term: str) -> str:
    if not any(ch in _RESERVED for ch in term):
        return term
    escaped = term.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def search_filter_expression(columns: tuple[str, ...] | list[str], term: str) -> str:
    """
    PostgREST ``or`` expression for a case-insensitive substring search.

    >>> search_filter_expression(["a", "b"], "abc")
    'a.ilike.%abc%,b.ilike.%abc%'
    """
    pattern = _quote_term(f"%{term}%")
    return ",".join(f"{column}.ilike.{pattern}" for column in columns)


def build_query_spec(
    config: DashboardConfig,
    table: str,
    page: int = 1,
    category: str | None = None,
    search: str | None = None,
) -> QuerySpec:
    """
    Derive the read for one page of ``table``.

    The category is ignored unless the table has category filtering enabled
    and a category column; the search term is ignored when blank or when the
    table has no search columns.
    """
    if not table or not table.strip():
        raise ValidationException("Table name cannot be empty")

    start, end = page_range(page, config.page_size_for(table))

    category_filter = None
    category_column = config.category_column(table)
    if category_column and category is not None and str(category).strip():
        category_filter = (category_column, category)

    search_filter = None
    term = (search or "").strip()
    columns = config.search_columns_for(table)
    if term and columns:
        search_filter = (columns, term)

    return QuerySpec(
        table=table,
        range_start=start,
        range_end=end,
        category_filter=category_filter,
        search_filter=search_filter,
    )


def apply_query_spec(client: Client, spec: QuerySpec):
    """Compose the Supabase request for ``spec`` in the fixed filter order."""
    query = client.table(spec.table).select(spec.select, count="exact")

    if spec.category_filter:
        column, value = spec.category_filter
        query = query.eq(column, value)

    if spec.search_filter:
        columns, term = spec.search_filter
        query = query.or_(search_filter_expression(columns, term))

    return query.range(spec.range_start, spec.range_end)


class QueryEngine:
    """Executes browse reads and category listings against one client."""

    def __init__(self, client: Client, settings: Settings):
        self._client = client
        self._settings = settings

    async def fetch_page(self, spec: QuerySpec) -> PageResult:
        """
        Execute ``spec``.

        Raises:
            DatabaseException: On any query failure; no partial result
        """
        try:
            response = apply_query_spec(self._client, spec).execute()
        except Exception as e:
            logger.error(f"Failed to fetch {spec.table} [{spec.range_start}-{spec.range_end}]: {e}")
            raise to_database_exception(e, self._settings) from e

        return PageResult(rows=list(response.data or []), total_count=response.count or 0)

    async def list_categories(self, table: str, column: str) -> list[str]:
        """
        Distinct non-empty category values of ``table``, in first-seen order.

        Values are read from the companion view ``{table}_{column}``. A
        failure is logged and yields no categories.
        """
        source = f"{table}_{column}"
        try:
            response = self._client.table(source).select(column).execute()
        except Exception as e:
            logger.error(f"Failed to fetch categories for {table} from {source}: {e}")
            return []

        values: list[str] = []
        for item in response.data or []:
            value = item.get(column)
            if value is None or value == "":
                continue
            value = str(value)
            if value not in values:
                values.append(value)
        return values

    async def fetch_one(self, table: str, column: str, value: str) -> Row | None:
        """
        First row of ``table`` whose ``column`` equals ``value``, or None.

        Raises:
            DatabaseException: On any query failure
        """
        try:
            response = self._client.table(table).select("*").eq(column, value).limit(1).execute()
        except Exception as e:
            logger.error(f"Failed to fetch {table} where {column}={value}: {e}")
            raise to_database_exception(e, self._settings) from e

        rows = response.data or []
        return rows[0] if rows else None
