"""
Tabledash - Common Schemas.

Shared Pydantic models used across all modules.
"""

from typing import Any, Union
from uuid import UUID

from pydantic import BaseModel, Field

# A single cell as returned by the database. Nested JSON columns come back as
# dicts/lists and are carried through untouched by the REST endpoints.
RowValue = Union[str, int, float, bool, None, dict[str, Any], list[Any]]
Row = dict[str, RowValue]


# =============================================================================
# Error Responses
# =============================================================================


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(default=None, description="Additional context")
    request_id: UUID | None = Field(default=None, description="Request ID for tracing")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: ErrorDetail


# =============================================================================
# Pagination
# =============================================================================


class PaginationMeta(BaseModel):
    """Pagination metadata for a browse page."""

    page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total_count: int = Field(ge=0)
    total_pages: int = Field(ge=0)
    range_start: int = Field(ge=0)
    range_end: int = Field(ge=0)


# =============================================================================
# Simple acknowledgements
# =============================================================================


class SuccessResponse(BaseModel):
    """Acknowledgement without a row payload."""

    success: bool = True
    message: str | None = None


# =============================================================================
# Health Check
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., pattern="^(healthy|degraded)$")
    version: str
    app_env: str | None = None
    is_production: bool | None = None
    supabase_configured: bool = False
    vod_configured: bool = False
