"""Tabledash Data - Router.

REST-over-database endpoints. Every method requires a non-anonymous secret
key in ``x-supabase-secret-key`` or ``Authorization: Bearer``.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, status

from tabledash.deps import get_data_service
from tabledash.exceptions import MethodNotAllowedException
from tabledash.modules.data.service import DataService
from tabledash.schemas import Row

router = APIRouter(prefix="/api/data", tags=["Data"])


@router.get("/{table}")
async def list_rows(
    table: str,
    service: Annotated[DataService, Depends(get_data_service)],
    id: str | None = Query(default=None),
) -> list[Row]:
    """List rows, optionally only the one with ``?id=``."""
    return await service.list(table, id=id)


@router.post("/{table}", status_code=status.HTTP_201_CREATED)
async def create_row(
    table: str,
    service: Annotated[DataService, Depends(get_data_service)],
    data: Annotated[Any, Body()] = None,
) -> Row:
    """Insert a row. Empty-string and null fields are not sent."""
    return await service.create(table, data)


@router.put("/{table}")
async def update_row(
    table: str,
    service: Annotated[DataService, Depends(get_data_service)],
    data: Annotated[Any, Body()] = None,
) -> Row:
    """Update the row whose ``id`` is given in the body."""
    return await service.update(table, data)


@router.delete("/{table}")
async def delete_row(
    table: str,
    service: Annotated[DataService, Depends(get_data_service)],
    data: Annotated[Any, Body()] = None,
) -> dict[str, bool]:
    """Delete the row whose ``id`` is given in the body."""
    return await service.delete(table, data)


@router.api_route("/{table}", methods=["PATCH"], include_in_schema=False)
async def unsupported_method(table: str, request: Request):
    raise MethodNotAllowedException(request.method)
