"""
Compaction Scheduler
====================

Runs the retention policy for every known device on a timer, so append-mode
tables stay bounded even if nobody calls POST /compactar.

WHAT IT DOES:
------------
Every COMPACTION_INTERVAL_MINUTES:
1. List the distinct device ids in `leituras`
2. Compact each one (keep the newest K readings)
3. Log what happened; one failing device does not stop the others

Disabled when the interval is 0 (the default).
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.services.retention import RetentionPolicy

logger = logging.getLogger(__name__)


class CompactionScheduler:
    """
    Periodic compaction sweep.

    HOW TO USE:
    ----------
    scheduler = CompactionScheduler(store, policy, interval_minutes=60)
    scheduler.start()      # at startup
    ...
    scheduler.shutdown()   # at shutdown
    """

    JOB_ID = "compaction_sweep"

    def __init__(self, store, policy: RetentionPolicy, interval_minutes: int):
        self.store = store
        self.policy = policy
        self.interval_minutes = interval_minutes
        self.scheduler = AsyncIOScheduler()

    def start(self):
        """Register the sweep job and start the scheduler (needs a running event loop)."""
        self.scheduler.add_job(
            self.run_sweep,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=self.JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info(f"Compaction sweep scheduled every {self.interval_minutes} minutes")

    async def run_sweep(self) -> dict:
        """
        Compact every device once.

        Returns:
            Summary: {"devices": n, "deleted": total, "failed": [device ids]}
        """
        try:
            device_ids = await self.store.reading_device_ids()
        except Exception as e:
            logger.error(f"[SWEEP] Could not list devices: {e}", exc_info=True)
            return {"devices": 0, "deleted": 0, "failed": []}

        deleted = 0
        failed = []
        for device_id in device_ids:
            try:
                result = await self.policy.compact(device_id)
                deleted += result.deleted_count or 0
            except Exception as e:
                failed.append(device_id)
                logger.error(f"[{device_id}] Error during compaction sweep: {e}", exc_info=True)

        logger.info(f"[SWEEP] {len(device_ids)} devices, {deleted} readings deleted, {len(failed)} failed")
        return {"devices": len(device_ids), "deleted": deleted, "failed": failed}

    def shutdown(self):
        try:
            self.scheduler.shutdown(wait=False)
        except Exception as e:
            logger.error(f"Error shutting down scheduler: {e}", exc_info=True)
