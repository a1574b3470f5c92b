"""
Tabledash Auth - Secret Key Credentials.

The credential for every administrative operation is the database secret
key itself. The publishable (anonymous) key is valid against the database
too, but is refused here for anything administrative.
"""

import logging
from typing import Annotated

from fastapi import Depends, Header

from tabledash.config import Settings, get_settings
from tabledash.core.supabase_client import ClientFactory, get_client_factory
from tabledash.exceptions import AnonymousKeyException, UnauthorizedException

logger = logging.getLogger(__name__)

SECRET_KEY_HEADER = "x-supabase-secret-key"


def extract_secret_key(header_key: str | None, authorization: str | None) -> str | None:
    """Pick the key from the dedicated header, falling back to a Bearer token."""
    if header_key and header_key.strip():
        return header_key.strip()
    if authorization:
        token = authorization.replace("Bearer ", "", 1).strip()
        return token or None
    return None


def ensure_admin_key(secret_key: str | None, settings: Settings) -> str:
    """
    Check that a key was supplied and is not the anonymous key.

    Raises:
        UnauthorizedException: If the key is missing
        AnonymousKeyException: If the key is the publishable key
    """
    if not secret_key:
        raise UnauthorizedException("Missing Secret Key")
    if secret_key in settings.supabase.anonymous_keys:
        logger.warning("Anonymous key presented for an administrative operation")
        raise AnonymousKeyException()
    return secret_key


def verify_secret_key(secret_key: str, settings: Settings, client_factory: ClientFactory) -> None:
    """
    Prove the key is accepted by the database with a one-row check query.

    Raises:
        UnauthorizedException: If the client cannot be built or the check query fails
    """
    client = client_factory(secret_key)
    try:
        client.table(settings.supabase.verify_table).select("id").limit(1).execute()
    except Exception as e:
        logger.info(f"Secret key check against '{settings.supabase.verify_table}' failed: {e}")
        raise UnauthorizedException("Invalid Supabase Secret Key") from e


async def require_secret_key(
    settings: Annotated[Settings, Depends(get_settings)],
    x_supabase_secret_key: Annotated[str | None, Header(alias=SECRET_KEY_HEADER)] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """FastAPI dependency returning a non-anonymous secret key from the request headers."""
    return ensure_admin_key(extract_secret_key(x_supabase_secret_key, authorization), settings)


async def get_admin_client(
    secret_key: Annotated[str, Depends(require_secret_key)],
    client_factory: Annotated[ClientFactory, Depends(get_client_factory)],
):
    """FastAPI dependency returning a client bound to the caller's secret key."""
    return client_factory(secret_key)
