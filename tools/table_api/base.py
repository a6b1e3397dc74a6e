"""
Abstract base class for remote table clients.

This defines the contract the remote document store relies on, whether
the table lives behind a Supabase/PostgREST endpoint or in the in-memory
mock used by tests.

Design principles:
- Row oriented: rows are plain JSON-compatible dicts
- Async-first: All operations are coroutines
- Failures raise TableError, never return sentinel values
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class TableClient(ABC):
    """
    Abstract interface for key/value-style table access.

    Usage:
        client = PostgrestTableClient(url, service_key)

        row = await client.select_one("configs", match={"key": "cards"})
        await client.upsert(
            "configs",
            {"key": "cards", "payload": {...}},
            on_conflict="key",
        )
        await client.insert("configs_history", {"key": "cards", "payload": {...}})
    """

    @abstractmethod
    async def select_one(
        self,
        table: str,
        *,
        match: dict[str, Any],
        columns: str = "*",
    ) -> Optional[dict[str, Any]]:
        """
        Fetch at most one row whose columns equal ``match``.

        Returns:
            The row, or None if nothing matched

        Raises:
            TableError: On transport failure or if more than one row matched
        """
        pass

    @abstractmethod
    async def upsert(
        self,
        table: str,
        row: dict[str, Any],
        *,
        on_conflict: str,
    ) -> None:
        """
        Insert ``row`` or replace the row sharing its ``on_conflict`` column.

        Raises:
            TableError: If the write was rejected
        """
        pass

    @abstractmethod
    async def insert(self, table: str, row: dict[str, Any]) -> None:
        """
        Append ``row``.

        Raises:
            TableError: If the write was rejected
        """
        pass

    async def close(self) -> None:
        """Release connections."""
        pass


class TableError(Exception):
    """Base exception for table operations."""
    pass


class TableRequestError(TableError):
    """The remote endpoint was unreachable or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
