"""Tabledash Auth Routes.

Secret key verification used by the admin login:
- the key must be present (400);
- the publishable key is refused (401);
- the key must pass a check query against the database (401 otherwise).

The client stores the verified key and sends it on every data request.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from tabledash.auth import ensure_admin_key, verify_secret_key
from tabledash.config import Settings, get_settings
from tabledash.core.supabase_client import ClientFactory, get_client_factory
from tabledash.exceptions import ValidationException
from tabledash.schemas import SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class VerifyIn(BaseModel):
    secretKey: str | None = Field(default=None, description="Supabase secret key to verify")


@router.post("/verify", response_model=SuccessResponse)
async def verify(
    payload: VerifyIn,
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    client_factory: Annotated[ClientFactory, Depends(get_client_factory)],
) -> SuccessResponse:
    """Check that a secret key may be used for administration."""
    request_id = getattr(request.state, "request_id", "unknown")

    secret_key = (payload.secretKey or "").strip()
    if not secret_key:
        raise ValidationException("Secret Key cannot be empty")

    ensure_admin_key(secret_key, settings)
    verify_secret_key(secret_key, settings, client_factory)

    logger.info(f"[{request_id}] AUTH_VERIFY -> ok")
    return SuccessResponse(success=True, message="Secret Key verified")
