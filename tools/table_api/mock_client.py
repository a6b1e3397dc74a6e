"""
In-memory table client.

Stands in for the remote table during tests and local experiments.
Rows are deep-copied on the way in and out so callers can never mutate
stored state, and each call yields to the event loop the way a network
round trip would.

Key features:
- Configurable simulated latency
- Per-operation failure injection for testing error handling
- Call log for asserting what reached the "backend"
"""

import asyncio
import copy
from typing import Any, Optional

from tools.table_api.base import TableClient, TableError, TableRequestError


class MockTableClient(TableClient):
    """
    Mock implementation of TableClient for testing.

    Usage:
        client = MockTableClient()
        await client.upsert("configs", {"key": "cards", "payload": {}}, on_conflict="key")
        client.fail_next("insert")
    """

    def __init__(self, latency: float = 0.0):
        """
        Initialize mock client.

        Args:
            latency: Seconds each call sleeps before touching the tables
        """
        self._tables: dict[str, list[dict[str, Any]]] = {}
        self._latency = latency
        self._failures: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []

    async def select_one(
        self,
        table: str,
        *,
        match: dict[str, Any],
        columns: str = "*",
    ) -> Optional[dict[str, Any]]:
        await self._enter("select", table)

        rows = [
            row for row in self._tables.get(table, [])
            if all(row.get(k) == v for k, v in match.items())
        ]
        if len(rows) > 1:
            raise TableError(f"Multiple rows in {table} match {match}")
        if not rows:
            return None

        row = copy.deepcopy(rows[0])
        if columns != "*":
            wanted = [c.strip() for c in columns.split(",")]
            row = {c: row.get(c) for c in wanted}
        return row

    async def upsert(
        self,
        table: str,
        row: dict[str, Any],
        *,
        on_conflict: str,
    ) -> None:
        await self._enter("upsert", table)

        rows = self._tables.setdefault(table, [])
        for i, existing in enumerate(rows):
            if existing.get(on_conflict) == row.get(on_conflict):
                rows[i] = copy.deepcopy(row)
                return
        rows.append(copy.deepcopy(row))

    async def insert(self, table: str, row: dict[str, Any]) -> None:
        await self._enter("insert", table)
        self._tables.setdefault(table, []).append(copy.deepcopy(row))

    async def _enter(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        # Simulate network latency
        await asyncio.sleep(self._latency)
        error = self._failures.pop(operation, None)
        if error is not None:
            raise TableRequestError(error, status_code=500)

    # =========================================
    # Testing utilities
    # =========================================

    def fail_next(self, operation: str, error: str = "Injected failure") -> None:
        """Make the next ``operation`` ("select", "upsert", "insert") fail."""
        self._failures[operation] = error

    def rows(self, table: str) -> list[dict[str, Any]]:
        """Copy of every row in ``table``."""
        return copy.deepcopy(self._tables.get(table, []))

    def seed(self, table: str, row: dict[str, Any]) -> None:
        """Insert a row directly, bypassing latency and failure injection."""
        self._tables.setdefault(table, []).append(copy.deepcopy(row))
