"""
Tabledash Dashboard Module

Configuration-driven browsing:
- Config resolver (JSON environment blobs -> DashboardConfig)
- Query engine (category, search, pagination)
- Query result cache with single-flight loading
- Cell presentation (links, thumbnails, flip cards)
"""

from .cache import QueryResultCache, get_query_cache
from .config_resolver import CardFlip, DashboardConfig, TableConfig, parse_dashboard_config
from .query import PageResult, QueryEngine, QuerySpec, build_query_spec, page_range, total_pages
from .service import DashboardService

__all__ = [
    "CardFlip",
    "DashboardConfig",
    "DashboardService",
    "PageResult",
    "QueryEngine",
    "QueryResultCache",
    "QuerySpec",
    "TableConfig",
    "build_query_spec",
    "get_query_cache",
    "page_range",
    "parse_dashboard_config",
    "total_pages",
]
