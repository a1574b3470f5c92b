"""
Tabledash Data - Service.

Generic CRUD against any table with a client bound to the caller's secret
key. Every successful write invalidates the table's cached browse pages.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from supabase import Client

from tabledash.config import Settings
from tabledash.core.repository import TableRepository
from tabledash.core.supabase_client import to_database_exception
from tabledash.exceptions import TabledashException, ValidationException
from tabledash.modules.dashboard.cache import QueryResultCache
from tabledash.schemas import Row

logger = logging.getLogger(__name__)

T = TypeVar("T")

PRIMARY_KEY = "id"


def strip_empty_fields(data: dict[str, Any]) -> Row:
    """
    Drop fields whose value is "" or None.

    Blank form fields must not overwrite column defaults on insert.
    """
    return {key: value for key, value in data.items() if value != "" and value is not None}


def _require_object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationException("Invalid data")
    return data


def _require_id(data: dict[str, Any]) -> Any:
    value = data.get(PRIMARY_KEY)
    if value is None or value == "":
        raise ValidationException("Missing id")
    return value


class DataService:
    """CRUD over a table, acting with the caller's credential."""

    def __init__(self, client: Client, settings: Settings, cache: QueryResultCache | None = None):
        self._client = client
        self._settings = settings
        self._cache = cache

    def _repository(self, table: str) -> TableRepository:
        if not table or not table.strip():
            raise ValidationException("Table name cannot be empty")
        return TableRepository(self._client, table)

    async def _run(self, table: str, action: str, operation: Callable[[], Awaitable[T]]) -> T:
        try:
            return await operation()
        except TabledashException:
            raise
        except Exception as e:
            logger.error(f"{action} on {table} failed: {e}")
            raise to_database_exception(e, self._settings) from e

    def _invalidate(self, table: str) -> None:
        if self._cache is not None:
            self._cache.invalidate(table)

    async def list(self, table: str, id: Any | None = None) -> list[Row]:
        """All rows of ``table``, or the row with ``id``."""
        repo = self._repository(table)
        return await self._run(table, "GET", lambda: repo.list(id=id))

    async def create(self, table: str, data: Any) -> Row:
        """
        Insert a row after stripping empty fields.

        Returns:
            The inserted row, or ``{"success": True}`` if the database
            returned no representation
        """
        repo = self._repository(table)
        row = strip_empty_fields(_require_object(data))
        logger.info(f"Creating row in {table} with fields {sorted(row)}")

        created = await self._run(table, "POST", lambda: repo.create(row))
        self._invalidate(table)
        return created if created is not None else {"success": True}

    async def update(self, table: str, data: Any) -> Row:
        """
        Partially update the row identified by ``data["id"]``.

        Raises:
            ValidationException: If ``id`` is missing or no field is supplied
            NotFoundException: If no row matched
        """
        repo = self._repository(table)
        fields = dict(_require_object(data))
        row_id = _require_id(fields)
        del fields[PRIMARY_KEY]
        if not fields:
            raise ValidationException("No fields to update")
        logger.info(f"Updating {table} id={row_id} fields {sorted(fields)}")

        updated = await self._run(table, "PUT", lambda: repo.update(row_id, fields))
        self._invalidate(table)
        return updated

    async def delete(self, table: str, data: Any) -> dict[str, bool]:
        """
        Delete the row identified by ``data["id"]``.

        Raises:
            ValidationException: If ``id`` is missing
        """
        repo = self._repository(table)
        row_id = _require_id(_require_object(data))
        logger.info(f"Deleting {table} id={row_id}")

        await self._run(table, "DELETE", lambda: repo.delete(row_id))
        self._invalidate(table)
        return {"success": True}
