"""Tabledash Generic Query Route.

Query-string driven read through the publishable key, for clients that
cannot embed the Supabase SDK. Responses carry CDN cache headers.
"""

import logging
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from supabase import Client

from tabledash.config import Settings, get_settings
from tabledash.core.supabase_client import cache_control_value, to_database_exception
from tabledash.deps import get_public_db
from tabledash.exceptions import ValidationException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/supabase", tags=["query"])


@router.get("/query")
async def query_table(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    client: Annotated[Client, Depends(get_public_db)],
    table: str = Query(default=""),
    category_table: str = Query(default="", alias="categoryTable"),
    select: str = Query(default="*"),
    eq: str = Query(default=""),
    eq_value: str = Query(default="", alias="eqValue"),
    or_filter: str = Query(default="", alias="or"),
    range_start: int | None = Query(default=None, alias="rangeStart", ge=0),
    range_end: int | None = Query(default=None, alias="rangeEnd", ge=0),
    count: Literal["exact", "planned", "estimated"] | None = Query(default=None),
) -> JSONResponse:
    """
    Generic filtered read.

    ``eq``/``eqValue`` add an equality filter, ``or`` a raw PostgREST or
    expression, ``rangeStart``/``rangeEnd`` an inclusive offset range, and
    ``count`` requests a row count.
    """
    request_id = getattr(request.state, "request_id", "unknown")

    target = table or category_table
    if not target:
        raise ValidationException("Table name cannot be empty")

    query = client.table(target).select(select or "*", count=count)
    if eq and eq_value:
        query = query.eq(eq, eq_value)
    if or_filter:
        query = query.or_(or_filter)
    if range_start is not None and range_end is not None:
        query = query.range(range_start, range_end)

    try:
        response = query.execute()
    except Exception as e:
        logger.error(f"[{request_id}] SUPABASE_QUERY table={target} -> {e}")
        raise to_database_exception(e, settings) from e

    rows = response.data or []
    logger.info(f"[{request_id}] SUPABASE_QUERY table={target} rows={len(rows)} count={response.count}")

    cache_control = cache_control_value(settings.cache_duration)
    return JSONResponse(
        status_code=200,
        content={"data": rows, "count": response.count},
        headers={
            "Cache-Control": cache_control,
            "Vercel-CDN-Cache-Control": cache_control,
        },
    )
