"""
Tabledash Core - Supabase Client.

Provides configured Supabase clients for database operations.

Two kinds of client exist:
- the public client, built once from the publishable key, used for the
  read-only browse surface and the generic query endpoint;
- credential-bound clients, built per request from the secret key the
  caller supplied, used for every administrative operation.
"""

import logging
import traceback
from collections.abc import Callable
from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from tabledash.config import Settings, get_settings
from tabledash.exceptions import ConfigurationException, DatabaseException, UnauthorizedException

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], Client]


def cache_control_value(duration: int) -> str:
    """CDN cache policy shared by the public client and the query endpoint."""
    return f"s-maxage={duration}, stale-while-revalidate={duration * 2}"


def _require_url(settings: Settings) -> str:
    url = settings.supabase.url.strip()
    if not url:
        raise ConfigurationException("Missing Supabase URL", setting="SUPABASE_URL")
    return url


@lru_cache
def get_public_client() -> Client:
    """
    Get the client bound to the anonymous/publishable key.

    Cached to reuse the same client instance.
    """
    settings = get_settings()
    url = _require_url(settings)
    key = settings.supabase.publishable_key
    if not key:
        raise ConfigurationException(
            "Missing Supabase publishable key",
            setting="SUPABASE_PUBLISHABLE_DEFAULT_KEY",
        )

    cache_control = cache_control_value(settings.cache_duration)
    return create_client(
        supabase_url=url,
        supabase_key=key,
        options=ClientOptions(
            headers={
                "Cache-Control": cache_control,
                "Vercel-CDN-Cache-Control": cache_control,
            }
        ),
    )


def create_client_for_key(secret_key: str) -> Client:
    """
    Build a client that acts with the caller's secret key.

    Raises:
        ConfigurationException: If the project URL is not configured
        UnauthorizedException: If the client library refuses the key
    """
    url = _require_url(get_settings())
    try:
        return create_client(supabase_url=url, supabase_key=secret_key)
    except Exception as e:
        logger.warning(f"Supabase client rejected the supplied key: {type(e).__name__}")
        raise UnauthorizedException("Invalid Supabase Secret Key") from e


def get_client_factory() -> ClientFactory:
    """Dependency returning the factory used for credential-bound clients."""
    return create_client_for_key


def to_database_exception(exc: Exception, settings: Settings) -> DatabaseException:
    """
    Convert a client/PostgREST failure into a DatabaseException.

    The upstream message, code and hint are kept; the traceback is attached
    outside production.
    """
    details: dict = {"details": getattr(exc, "message", None) or str(exc)}
    for attr in ("code", "hint"):
        value = getattr(exc, attr, None)
        if value:
            details[attr] = value
    if not settings.is_production:
        details["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return DatabaseException("Operation failed", details=details)
