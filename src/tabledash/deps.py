"""
Tabledash - Dependency Injection.

FastAPI dependencies for configuration, database clients, and services.
Tests replace these through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from supabase import Client

from tabledash.auth import get_admin_client
from tabledash.config import Settings, get_settings
from tabledash.core.supabase_client import get_public_client
from tabledash.modules.dashboard.cache import QueryResultCache, get_query_cache
from tabledash.modules.dashboard.config_resolver import DashboardConfig, parse_dashboard_config
from tabledash.modules.dashboard.query import QueryEngine
from tabledash.modules.dashboard.service import DashboardService
from tabledash.modules.data.service import DataService


# =============================================================================
# Configuration
# =============================================================================


@lru_cache
def get_dashboard_config() -> DashboardConfig:
    """Parse the dashboard configuration once per process."""
    return parse_dashboard_config(get_settings().dashboard)


# =============================================================================
# Clients
# =============================================================================


def get_public_db() -> Client:
    """Client bound to the publishable key."""
    return get_public_client()


# =============================================================================
# Services
# =============================================================================


def get_dashboard_service(
    config: Annotated[DashboardConfig, Depends(get_dashboard_config)],
    client: Annotated[Client, Depends(get_public_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    cache: Annotated[QueryResultCache, Depends(get_query_cache)],
) -> DashboardService:
    return DashboardService(config=config, engine=QueryEngine(client, settings), cache=cache)


def get_data_service(
    client: Annotated[Client, Depends(get_admin_client)],
    settings: Annotated[Settings, Depends(get_settings)],
    cache: Annotated[QueryResultCache, Depends(get_query_cache)],
) -> DataService:
    return DataService(client=client, settings=settings, cache=cache)
