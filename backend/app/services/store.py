"""
Supabase Store
==============

This is the only place that talks to the database.

HOW SUPABASE WORKS:
------------------
A Supabase project exposes every table over HTTP through PostgREST:

    GET    {url}/rest/v1/leituras?device_id=eq.dev1&order=created_at.desc
    POST   {url}/rest/v1/leituras                  (insert / upsert)
    PATCH  {url}/rest/v1/leituras_diarias?id=eq.5  (update)
    DELETE {url}/rest/v1/leituras?id=in.(1,2,3)    (delete)
    POST   {url}/rest/v1/rpc/compactar_leituras    (stored procedure)

Every request carries the project key twice: as `apikey` and as a Bearer
token.

THE TABLES:
----------
    leituras          id, device_id, litros, mililitros, timestamp, created_at
    leituras_diarias  id, device_id, data, litros_total, admin_id

ERRORS:
------
Any failed call (connection problem, timeout, non-2xx answer) is logged with
the details and re-raised as StoreError. Nothing is retried.
"""

import logging
from typing import Any, Optional, Union

import httpx

from app.exceptions import StoreError

logger = logging.getLogger(__name__)


READINGS_TABLE = "leituras"
DAILY_TABLE = "leituras_diarias"
COMPACTION_PROCEDURE = "compactar_leituras"

RowId = Union[int, str]


def _in_filter(ids: list[RowId]) -> str:
    """Build a PostgREST `in.(...)` filter value."""
    return "in.(" + ",".join(str(row_id) for row_id in ids) + ")"


class SupabaseStore:
    """
    Async client for the two tables and the compaction procedure.

    HOW TO USE:
    ----------
    store = SupabaseStore(url="https://xyz.supabase.co", key="service-key")

    await store.upsert_reading({"device_id": "dev1", "litros": 10, ...})
    rows = await store.recent_readings("dev1", limit=20)

    await store.close()  # on shutdown

    A ready-made httpx.AsyncClient can be passed in instead (tests use one
    backed by httpx.MockTransport).
    """

    def __init__(
        self,
        url: str,
        key: str,
        request_timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Set up the store.

        Args:
            url: Supabase project URL, without the /rest/v1 suffix
            key: Project API key
            request_timeout: How long to wait for the database (seconds)
            http_client: Optional pre-built client (its base_url is ignored)
        """
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }
        # One client for the whole process so connections get reused
        self.http_client = http_client or httpx.AsyncClient(timeout=request_timeout)

    # =========================================================================
    # LOW LEVEL
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        params: Optional[dict] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        """
        Send one request to PostgREST and return the decoded JSON body.

        Args:
            method: HTTP verb
            path: Table name or rpc/<procedure>
            action: Short description used in logs and error messages
            params: Query string (filters, order, limit, select)
            json: Request body
            prefer: Value of the PostgREST `Prefer` header

        Returns:
            Decoded JSON, or None when the body is empty

        Raises:
            StoreError: on any transport or HTTP error
        """
        headers = dict(self.headers)
        if prefer:
            headers["Prefer"] = prefer

        url = f"{self.base_url}/{path}"

        try:
            response = await self.http_client.request(
                method, url, params=params, json=json, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error_body = e.response.text[:500]
            logger.error(
                f"[store] {action} failed - HTTP {e.response.status_code}\n"
                f"Response: {error_body}"
            )
            raise StoreError(f"Erro ao {action}") from e
        except httpx.HTTPError as e:
            logger.error(f"[store] {action} failed - {type(e).__name__}: {e}")
            raise StoreError(f"Erro ao {action}") from e

        if not response.content:
            return None
        return response.json()

    # =========================================================================
    # RAW READINGS
    # =========================================================================

    async def upsert_reading(self, row: dict) -> list[dict]:
        """Insert a reading, or overwrite the device's existing one."""
        return await self._request(
            "POST",
            READINGS_TABLE,
            "registrar/atualizar leitura",
            params={"on_conflict": "device_id"},
            json=[row],
            prefer="resolution=merge-duplicates,return=representation",
        ) or []

    async def insert_reading(self, row: dict) -> list[dict]:
        """Append a new reading row."""
        return await self._request(
            "POST",
            READINGS_TABLE,
            "registrar leitura",
            json=[row],
            prefer="return=representation",
        ) or []

    async def recent_readings(self, device_id: str, limit: int) -> list[dict]:
        """Newest `limit` readings of a device, newest first."""
        return await self._request(
            "GET",
            READINGS_TABLE,
            "buscar leituras",
            params={
                "select": "*",
                "device_id": f"eq.{device_id}",
                "order": "created_at.desc",
                "limit": str(limit),
            },
        ) or []

    async def all_readings(self) -> list[dict]:
        """Every row of the readings table, in whatever order the database returns."""
        return await self._request(
            "GET", READINGS_TABLE, "buscar leituras", params={"select": "*"}
        ) or []

    async def reading_ids_page(self, device_id: str, offset: int, limit: int) -> list[RowId]:
        """
        One page of reading ids of a device, newest `created_at` first.

        PostgREST caps every response (1000 rows by default), so callers
        walk the table with `offset`/`limit` instead of asking for everything.
        """
        rows = await self._request(
            "GET",
            READINGS_TABLE,
            "buscar leituras para compactação",
            params={
                "select": "id",
                "device_id": f"eq.{device_id}",
                "order": "created_at.desc,id.desc",
                "offset": str(offset),
                "limit": str(limit),
            },
        ) or []
        return [row["id"] for row in rows]

    async def delete_readings(self, ids: list[RowId]) -> list[dict]:
        """Delete readings by id in one call; returns the deleted rows."""
        return await self._request(
            "DELETE",
            READINGS_TABLE,
            "excluir leituras antigas",
            params={"id": _in_filter(ids)},
            prefer="return=representation",
        ) or []

    async def reading_device_ids(self) -> list[str]:
        """Distinct device ids present in the readings table."""
        rows = await self._request(
            "GET",
            READINGS_TABLE,
            "listar dispositivos",
            params={"select": "device_id"},
        ) or []
        return sorted({row["device_id"] for row in rows if row.get("device_id")})

    async def call_compaction_procedure(self, device_id: str) -> Any:
        """Run the server-side `compactar_leituras(device_id)` procedure."""
        return await self._request(
            "POST",
            f"rpc/{COMPACTION_PROCEDURE}",
            "compactar leituras",
            json={"device_id": device_id},
        )

    # =========================================================================
    # DAILY AGGREGATES
    # =========================================================================

    async def find_daily(self, device_id: str, data: str) -> Optional[dict]:
        """
        Look up the aggregate for (device_id, data).

        Returns:
            The row (only `id` is selected), or None if there is none

        Raises:
            StoreError: if more than one row matches
        """
        rows = await self._request(
            "GET",
            DAILY_TABLE,
            "buscar leitura diária",
            params={
                "select": "id",
                "device_id": f"eq.{device_id}",
                "data": f"eq.{data}",
                "limit": "2",
            },
        ) or []

        if len(rows) > 1:
            logger.error(f"[{device_id}] {len(rows)}+ daily rows found for {data}")
            raise StoreError("Erro ao buscar leitura diária")
        return rows[0] if rows else None

    async def update_daily(self, aggregate_id: RowId, fields: dict) -> list[dict]:
        return await self._request(
            "PATCH",
            DAILY_TABLE,
            "atualizar leitura diária",
            params={"id": f"eq.{aggregate_id}"},
            json=fields,
            prefer="return=representation",
        ) or []

    async def insert_daily(self, row: dict) -> list[dict]:
        return await self._request(
            "POST",
            DAILY_TABLE,
            "inserir leitura diária",
            json=[row],
            prefer="return=representation",
        ) or []

    async def daily_for_device(self, device_id: str, limit: Optional[int] = None) -> list[dict]:
        """A device's aggregates, newest day first, optionally limited."""
        return await self._daily_by("device_id", device_id, limit, "buscar leituras diárias")

    async def daily_for_admin(self, admin_id: str, limit: Optional[int] = None) -> list[dict]:
        """Aggregates of every device owned by an admin, newest day first."""
        return await self._daily_by("admin_id", admin_id, limit, "buscar leituras diárias por admin")

    async def _daily_by(self, column: str, value: str, limit: Optional[int], action: str) -> list[dict]:
        params = {
            "select": "*",
            column: f"eq.{value}",
            "order": "data.desc",
        }
        if limit is not None:
            params["limit"] = str(limit)
        return await self._request("GET", DAILY_TABLE, action, params=params) or []

    async def close(self):
        """
        Clean up when we're done.

        Called when the server shuts down.
        """
        await self.http_client.aclose()
