"""
Retention Policy (compaction)
=============================

Keeps only the newest K readings of a device and deletes the rest.

    ids, newest first:   [r40, r39, ..., r21 | r20, r19, ..., r1]
                          |-- keep K=20 ---|   |---- discard ----|

Two ways to run it, same contract:

- app: page through the ids past the first K and delete them batch by batch
- rpc: ask the database to do it with `compactar_leituras(device_id)`

A device with K readings or fewer is left alone and the run still counts as
a success with zero deletions.
"""

import logging

from app.config import CompactionMode
from app.exceptions import StoreError
from app.models import CompactionResult

logger = logging.getLogger(__name__)

# Ids per page and per DELETE; keeps the `id=in.(...)` URL short and stays
# under PostgREST's response cap.
DEFAULT_BATCH_SIZE = 200


class RetentionPolicy:
    """
    Bounds the number of raw readings per device.

    Args:
        store: Datastore client (SupabaseStore or anything with the same methods)
        keep: How many readings to keep per device
        mode: Where the compaction runs (app or rpc)
        batch_size: Ids fetched and deleted per round trip in app mode
    """

    def __init__(self, store, keep: int = 20, mode: CompactionMode = CompactionMode.APP,
                 batch_size: int = DEFAULT_BATCH_SIZE):
        self.store = store
        self.keep = max(keep, 0)
        self.mode = mode
        self.batch_size = max(batch_size, 1)

    async def compact(self, device_id: str) -> CompactionResult:
        """
        Delete every reading of `device_id` except the newest `keep`.

        Raises:
            StoreError: if reading the ids or deleting fails
        """
        if self.mode == CompactionMode.RPC:
            return await self._compact_remote(device_id)
        return await self._compact_local(device_id)

    async def _compact_local(self, device_id: str) -> CompactionResult:
        discarded = []

        # Everything past offset `keep` is surplus. Each pass deletes the page
        # it read, so the next page at the same offset holds older rows, until
        # the database has nothing left past the first `keep`.
        while True:
            page = await self.store.reading_ids_page(device_id, offset=self.keep, limit=self.batch_size)
            if not page:
                break

            deleted = await self.store.delete_readings(page)
            if not deleted:
                logger.error(f"[{device_id}] Delete removed none of {len(page)} readings, stopping")
                raise StoreError("Erro ao excluir leituras antigas")

            discarded.extend(page)

        if discarded:
            logger.info(f"[{device_id}] Compacted: kept newest {self.keep}, deleted {len(discarded)}")
        else:
            logger.debug(f"[{device_id}] Nothing to compact")

        return CompactionResult(
            device_id=device_id,
            mode=CompactionMode.APP.value,
            deleted_count=len(discarded),
            deleted_ids=discarded,
        )

    async def _compact_remote(self, device_id: str) -> CompactionResult:
        returned = await self.store.call_compaction_procedure(device_id)

        # The procedure may or may not report how many rows it removed
        deleted_count = returned if isinstance(returned, int) and not isinstance(returned, bool) else None

        logger.info(f"[{device_id}] Compacted by stored procedure (reported: {deleted_count})")

        return CompactionResult(
            device_id=device_id,
            mode=CompactionMode.RPC.value,
            deleted_count=deleted_count,
            deleted_ids=None,
        )
