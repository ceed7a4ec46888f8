"""
Historical Queries
==================

Read side of the API: recent raw readings and daily totals.

ORDERING (kept as the dashboards already rely on it):
    with `dias=N` - the N newest days, returned OLDEST first (chart order)
    without dias  - every day, returned NEWEST first
"""

from typing import Optional

from app.utils.validation import parse_day_count


class HistoryQuery:

    def __init__(self, store, recent_limit: int = 20):
        self.store = store
        self.recent_limit = recent_limit

    async def recent_readings(self, device_id: str) -> list[dict]:
        """Up to `recent_limit` readings, newest `created_at` first."""
        return await self.store.recent_readings(device_id, self.recent_limit)

    async def all_readings(self) -> list[dict]:
        return await self.store.all_readings()

    async def daily_for_device(self, device_id: str, dias: Optional[str] = None) -> list[dict]:
        limit = parse_day_count(dias)
        rows = await self.store.daily_for_device(device_id, limit)
        return self._chronological_if_limited(rows, limit)

    async def daily_for_admin(self, admin_id: str, dias: Optional[str] = None) -> list[dict]:
        limit = parse_day_count(dias)
        rows = await self.store.daily_for_admin(admin_id, limit)
        return self._chronological_if_limited(rows, limit)

    @staticmethod
    def _chronological_if_limited(rows: list[dict], limit: Optional[int]) -> list[dict]:
        if limit is None:
            return rows
        return list(reversed(rows))
