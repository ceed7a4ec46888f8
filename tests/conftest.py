"""Shared fixtures: an in-memory stand-in for the Supabase tables."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.exceptions import StoreError
from app.main import create_app


class InMemoryStore:
    """Same async interface as SupabaseStore, backed by two lists."""

    def __init__(self) -> None:
        self.readings: list[dict[str, Any]] = []
        self.daily: list[dict[str, Any]] = []
        self.procedure_calls: list[str] = []
        self.procedure_result: Any = None
        self.delete_calls: list[list[Any]] = []
        self.fail = False
        # PostgREST max-rows: caps every page regardless of the requested limit
        self.max_rows: Optional[int] = None
        # row-level security style deletes that match nothing
        self.deletes_blocked = False
        self._ids = itertools.count(1)
        self._clock = datetime(2026, 10, 1, tzinfo=timezone.utc)

    def _check(self) -> None:
        if self.fail:
            raise StoreError("Erro simulado")

    def _next_created_at(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    # -- raw readings ---------------------------------------------------------

    async def upsert_reading(self, row: dict) -> list[dict]:
        self._check()
        for existing in self.readings:
            if existing["device_id"] == row["device_id"]:
                existing.update(row)
                return [existing]
        return await self.insert_reading(row)

    async def insert_reading(self, row: dict) -> list[dict]:
        self._check()
        stored = {"id": next(self._ids), "created_at": self._next_created_at(), **row}
        self.readings.append(stored)
        return [stored]

    async def recent_readings(self, device_id: str, limit: int) -> list[dict]:
        self._check()
        rows = [r for r in self.readings if r["device_id"] == device_id]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return rows[:limit]

    async def all_readings(self) -> list[dict]:
        self._check()
        return list(self.readings)

    async def reading_ids_page(self, device_id: str, offset: int, limit: int) -> list[Any]:
        self._check()
        rows = [r for r in self.readings if r["device_id"] == device_id]
        rows.sort(key=lambda r: (r["created_at"], r["id"]), reverse=True)
        if self.max_rows is not None:
            limit = min(limit, self.max_rows)
        return [r["id"] for r in rows[offset:offset + limit]]

    async def delete_readings(self, ids: list[Any]) -> list[dict]:
        self._check()
        self.delete_calls.append(list(ids))
        if self.deletes_blocked:
            return []
        doomed = set(ids)
        deleted = [r for r in self.readings if r["id"] in doomed]
        self.readings = [r for r in self.readings if r["id"] not in doomed]
        return deleted

    async def reading_device_ids(self) -> list[str]:
        self._check()
        return sorted({r["device_id"] for r in self.readings})

    async def call_compaction_procedure(self, device_id: str) -> Any:
        self._check()
        self.procedure_calls.append(device_id)
        return self.procedure_result

    # -- daily aggregates -----------------------------------------------------

    async def find_daily(self, device_id: str, data: str) -> Optional[dict]:
        self._check()
        for row in self.daily:
            if row["device_id"] == device_id and row["data"] == data:
                return {"id": row["id"]}
        return None

    async def update_daily(self, aggregate_id: Any, fields: dict) -> list[dict]:
        self._check()
        for row in self.daily:
            if row["id"] == aggregate_id:
                row.update(fields)
                return [row]
        return []

    async def insert_daily(self, row: dict) -> list[dict]:
        self._check()
        stored = {"id": next(self._ids), **row}
        self.daily.append(stored)
        return [stored]

    async def daily_for_device(self, device_id: str, limit: Optional[int] = None) -> list[dict]:
        self._check()
        return self._daily_by("device_id", device_id, limit)

    async def daily_for_admin(self, admin_id: str, limit: Optional[int] = None) -> list[dict]:
        self._check()
        return self._daily_by("admin_id", admin_id, limit)

    def _daily_by(self, column: str, value: str, limit: Optional[int]) -> list[dict]:
        rows = [r for r in self.daily if r.get(column) == value]
        rows.sort(key=lambda r: r["data"], reverse=True)
        return rows if limit is None else rows[:limit]


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def make_client(store):
    """Build a TestClient for the given settings, sharing the `store` fixture."""

    def _make(settings: Optional[Settings] = None) -> TestClient:
        settings = settings or Settings()
        return TestClient(create_app(settings=settings, store=store))

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
