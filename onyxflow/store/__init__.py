"""Remote store protocol for the ``clients`` and ``projects`` tables.

Rows are plain dicts with snake_case column names. Project rows carry the
owning client embedded under ``client`` (the join), next to ``client_id``.
"""

from typing import Protocol, runtime_checkable

CLIENTS = "clients"
PROJECTS = "projects"


@runtime_checkable
class RemoteStore(Protocol):
    """Protocol for remote relational stores."""

    async def select(
        self, table: str, *, order_by: str = "created_at", descending: bool = True
    ) -> list[dict]:
        """All rows of a table, ordered. Project rows embed ``client``."""
        ...

    async def insert(self, table: str, row: dict) -> dict:
        """Insert a row and return it as stored (server-assigned id, joins)."""
        ...

    async def update(self, table: str, row_id: str, values: dict) -> None:
        """Update the given columns of one row by id."""
        ...

    async def delete(self, table: str, *, column: str, value: str) -> None:
        """Delete every row where ``column`` equals ``value``."""
        ...

    async def close(self) -> None:
        ...
