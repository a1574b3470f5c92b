"""Tabledash Auth Module.

Administrative calls authenticate with the Supabase secret key, sent as
``x-supabase-secret-key`` or ``Authorization: Bearer <key>``. The
publishable key is always refused.
"""

from tabledash.auth.secret_key import (
    SECRET_KEY_HEADER,
    ensure_admin_key,
    extract_secret_key,
    get_admin_client,
    require_secret_key,
    verify_secret_key,
)

__all__ = [
    "SECRET_KEY_HEADER",
    "ensure_admin_key",
    "extract_secret_key",
    "get_admin_client",
    "require_secret_key",
    "verify_secret_key",
]
