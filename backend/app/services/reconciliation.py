"""
Daily Aggregate Reconciliation
==============================

Keeps exactly one `leituras_diarias` row per (device_id, data).

    lookup (device_id, data)
        |
        +-- found     -> overwrite litros_total (+ admin_id if given)  -> UPDATED
        |
        +-- not found -> insert a new row                              -> CREATED

The stored total is replaced, never added to: devices send the running
total for the day.

This is a read-then-write, not compare-and-swap. Two requests for the same
key can both miss the lookup and both insert, or overwrite each other; the
last writer wins.
"""

import logging
from typing import Optional

from app.models import ReconcileOutcome, ReconcileResult
from app.models.leitura import Quantity

logger = logging.getLogger(__name__)


class AggregateReconciler:

    def __init__(self, store):
        self.store = store

    async def reconcile(
        self,
        device_id: str,
        data: str,
        litros_total: Quantity,
        admin_id: Optional[str] = None,
    ) -> ReconcileResult:
        """
        Write the day's total for a device.

        Raises:
            StoreError: if the lookup or the write fails
        """
        existing = await self.store.find_daily(device_id, data)

        if existing:
            fields = {"litros_total": litros_total}
            if admin_id is not None:
                fields["admin_id"] = admin_id

            await self.store.update_daily(existing["id"], fields)
            logger.info(f"[{device_id}] Daily total for {data} updated to {litros_total}")

            return ReconcileResult(
                outcome=ReconcileOutcome.UPDATED,
                device_id=device_id,
                data=data,
                litros_total=litros_total,
                aggregate_id=existing["id"],
            )

        row = {
            "device_id": device_id,
            "data": data,
            "litros_total": litros_total,
            "admin_id": admin_id,
        }
        inserted = await self.store.insert_daily(row)
        logger.info(f"[{device_id}] Daily total for {data} created with {litros_total}")

        return ReconcileResult(
            outcome=ReconcileOutcome.CREATED,
            device_id=device_id,
            data=data,
            litros_total=litros_total,
            aggregate_id=inserted[0].get("id") if inserted else None,
        )
