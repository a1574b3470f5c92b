"""
Tabledash Core - Table Repository.

Schema-agnostic repository over a single Supabase table. The table name is
chosen at runtime, rows are plain dicts.
"""

from typing import Any

from supabase import Client

from tabledash.exceptions import NotFoundException
from tabledash.schemas import Row


class TableRepository:
    """
    Database operations for one logical table.

    Client errors are not caught here; callers decide how to surface them.
    """

    primary_key = "id"

    def __init__(self, client: Client, table_name: str):
        """Initialize repository with a Supabase client and table name."""
        self._client = client
        self.table_name = table_name

    @property
    def table(self):
        """Get the Supabase table reference."""
        return self._client.table(self.table_name)

    async def list(self, id: Any | None = None) -> list[Row]:
        """
        List all rows, or only the row matching ``id``.

        Args:
            id: Optional primary key filter

        Returns:
            The matching rows
        """
        query = self.table.select("*")
        if id is not None and id != "":
            query = query.eq(self.primary_key, id)
        response = query.execute()
        return response.data or []

    async def create(self, data: Row) -> Row | None:
        """
        Insert one row.

        Returns:
            The inserted row, or None when the database returned no representation
        """
        response = self.table.insert(data).execute()
        return response.data[0] if response.data else None

    async def update(self, id: Any, data: Row) -> Row:
        """
        Apply a partial update to the row with the given primary key.

        Raises:
            NotFoundException: If no row matched
        """
        response = self.table.update(data).eq(self.primary_key, id).execute()
        if not response.data:
            raise NotFoundException(self.table_name, str(id))
        return response.data[0]

    async def delete(self, id: Any) -> bool:
        """Delete the row with the given primary key."""
        self.table.delete().eq(self.primary_key, id).execute()
        return True
