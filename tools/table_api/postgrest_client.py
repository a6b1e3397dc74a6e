"""
PostgREST table client (Supabase REST API).

Talks to ``{SUPABASE_URL}/rest/v1/<table>`` with the service-role key,
which bypasses row level security. Only the three calls the remote
document store needs are implemented.
"""

from typing import Any, Optional

import httpx

from core.logging import get_logger
from tools.table_api.base import TableClient, TableError, TableRequestError


logger = get_logger(__name__)


class PostgrestTableClient(TableClient):
    """
    httpx-based client for a PostgREST endpoint.

    Usage:
        client = PostgrestTableClient("https://xyz.supabase.co", service_key)
        row = await client.select_one("configs", match={"key": "cards"})
        await client.close()
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            url: Project URL, e.g. https://xyz.supabase.co
            service_key: Service-role API key
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": service_key,
                "Authorization": f"Bearer {service_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def select_one(
        self,
        table: str,
        *,
        match: dict[str, Any],
        columns: str = "*",
    ) -> Optional[dict[str, Any]]:
        params = {"select": columns, "limit": "2"}
        for column, value in match.items():
            params[column] = f"eq.{value}"

        response = await self._request("GET", f"/{table}", params=params)

        try:
            rows = response.json()
        except ValueError as e:
            raise TableError(f"Invalid JSON from {table}: {e}") from e

        if not isinstance(rows, list):
            raise TableError(f"Unexpected response shape from {table}")
        if len(rows) > 1:
            raise TableError(f"Multiple rows in {table} match {match}")
        return rows[0] if rows else None

    async def upsert(
        self,
        table: str,
        row: dict[str, Any],
        *,
        on_conflict: str,
    ) -> None:
        await self._request(
            "POST",
            f"/{table}",
            params={"on_conflict": on_conflict},
            json=row,
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    async def insert(self, table: str, row: dict[str, Any]) -> None:
        await self._request(
            "POST",
            f"/{table}",
            json=row,
            headers={"Prefer": "return=minimal"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise TableRequestError(f"Timeout calling {method} {path}") from e
        except httpx.RequestError as e:
            raise TableRequestError(f"Failed to call {method} {path}: {e}") from e

        if response.status_code >= 400:
            logger.debug(
                "Table request rejected",
                method=method,
                path=path,
                status_code=response.status_code,
                body=response.text,
            )
            raise TableRequestError(
                f"{method} {path} returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return response
