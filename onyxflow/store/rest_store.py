"""REST store adapter for a hosted PostgREST backend (e.g. Supabase).

Maps the store protocol onto the PostgREST conventions:
- ``GET /rest/v1/{table}?select=...&order=created_at.desc``
- ``POST`` with ``Prefer: return=representation`` to get the stored row back
- ``PATCH``/``DELETE`` filtered with ``?{column}=eq.{value}``
No SDK dependency, just httpx.
"""

import logging
from typing import Optional

import httpx

from onyxflow.errors import RemoteStoreError
from onyxflow.store import PROJECTS

logger = logging.getLogger(__name__)

# Embedded join: the owning client comes back under ``client``
PROJECT_SELECT = "*,client:clients(*)"


class RestStore:
    """PostgREST adapter."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base = f"{base_url.rstrip('/')}/rest/v1"
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._client = httpx.AsyncClient(
            headers=self.headers, timeout=timeout_s, transport=transport
        )

    @staticmethod
    def _select_for(table: str) -> str:
        return PROJECT_SELECT if table == PROJECTS else "*"

    async def _request(self, method: str, table: str, **kwargs) -> httpx.Response:
        try:
            resp = await self._client.request(method, f"{self.base}/{table}", **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.HTTPStatusError as e:
            detail = e.response.text
            try:
                body = e.response.json()
                if isinstance(body, dict) and body.get("message"):
                    detail = body["message"]
            except ValueError:
                pass
            logger.error(f"{method} {table} returned {e.response.status_code}: {detail}")
            raise RemoteStoreError(
                f"{method} {table} failed ({e.response.status_code}): {detail}", table=table
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {table} failed: {e}")
            raise RemoteStoreError(f"{method} {table} failed: {e}", table=table) from e

    async def select(
        self, table: str, *, order_by: str = "created_at", descending: bool = True
    ) -> list[dict]:
        direction = "desc" if descending else "asc"
        resp = await self._request(
            "GET",
            table,
            params={"select": self._select_for(table), "order": f"{order_by}.{direction}"},
        )
        return resp.json()

    async def insert(self, table: str, row: dict) -> dict:
        resp = await self._request(
            "POST",
            table,
            params={"select": self._select_for(table)},
            json=row,
            headers={"Prefer": "return=representation"},
        )
        data = resp.json()
        if isinstance(data, list):
            if not data:
                raise RemoteStoreError(f"Insert into {table} returned no row", table=table)
            data = data[0]
        logger.info(f"Inserted into {table}: {data.get('id')}")
        return data

    async def update(self, table: str, row_id: str, values: dict) -> None:
        await self._request("PATCH", table, params={"id": f"eq.{row_id}"}, json=values)

    async def delete(self, table: str, *, column: str, value: str) -> None:
        await self._request("DELETE", table, params={column: f"eq.{value}"})
        logger.info(f"Deleted from {table} where {column}={value}")

    async def close(self) -> None:
        await self._client.aclose()
