"""Tests for the periodic compaction sweep."""

from __future__ import annotations

import pytest

from app.exceptions import StoreError
from app.services.compaction_scheduler import CompactionScheduler
from app.services.retention import RetentionPolicy


class _FlakyPolicy(RetentionPolicy):
    """Fails for one device, compacts the others normally."""

    def __init__(self, store, broken: str):
        super().__init__(store, keep=2)
        self.broken = broken

    async def compact(self, device_id: str):
        if device_id == self.broken:
            raise StoreError("boom")
        return await super().compact(device_id)


async def _seed(store, device_id: str, count: int) -> None:
    for i in range(count):
        await store.insert_reading({"device_id": device_id, "litros": i, "mililitros": 0})


class TestCompactionSweep:

    @pytest.mark.asyncio
    async def test_compacts_every_device(self, store):
        await _seed(store, "dev1", 5)
        await _seed(store, "dev2", 4)
        sweep = CompactionScheduler(store, RetentionPolicy(store, keep=2), interval_minutes=60)

        summary = await sweep.run_sweep()

        assert summary == {"devices": 2, "deleted": 5, "failed": []}
        assert len(store.readings) == 4

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_sweep(self, store):
        await _seed(store, "dev1", 5)
        await _seed(store, "dev2", 5)
        sweep = CompactionScheduler(store, _FlakyPolicy(store, broken="dev1"), interval_minutes=60)

        summary = await sweep.run_sweep()

        assert summary["failed"] == ["dev1"]
        assert summary["deleted"] == 3
        assert len([r for r in store.readings if r["device_id"] == "dev1"]) == 5

    @pytest.mark.asyncio
    async def test_listing_failure_is_logged_not_raised(self, store):
        store.fail = True
        sweep = CompactionScheduler(store, RetentionPolicy(store), interval_minutes=60)

        summary = await sweep.run_sweep()

        assert summary == {"devices": 0, "deleted": 0, "failed": []}

    @pytest.mark.asyncio
    async def test_start_registers_interval_job(self, store):
        sweep = CompactionScheduler(store, RetentionPolicy(store), interval_minutes=15)

        sweep.start()
        try:
            job = sweep.scheduler.get_job(CompactionScheduler.JOB_ID)
            assert job is not None
            assert job.trigger.interval.total_seconds() == 15 * 60
        finally:
            sweep.shutdown()
