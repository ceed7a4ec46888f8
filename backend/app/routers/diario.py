"""
Daily Totals Router
===================

Endpoints for the per-day running totals.

ALL ENDPOINTS:
-------------
POST /fluxo-diario                            - Create or update a day's total
GET  /leituras-diarias/{deviceId}?dias=N      - History of one device
GET  /leituras-diarias/admin/{adminId}?dias=N - History of every device of an admin

About `dias`: when it is given, the N newest days come back oldest first
(ready for a chart). Without it, every day comes back newest first.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from app.config import Settings
from app.models import DailyAggregate, DailyTotalRequest, ReconcileOutcome
from app.routers.dependencies import get_app_settings, get_history, get_reconciler
from app.utils.validation import require_present, require_text


router = APIRouter(tags=["leituras-diarias"])


@router.post("/fluxo-diario")
async def register_daily_total(
    body: DailyTotalRequest,
    response: Response,
    reconciler=Depends(get_reconciler),
    settings: Settings = Depends(get_app_settings),
):
    """
    Write the running total of a device for a day.

    Returns 201 when the day is new and 200 when an existing day was
    overwritten.
    """
    if settings.require_admin_id:
        message = "deviceId, litrosTotal, data e adminId são obrigatórios"
        require_text(message, body.device_id, body.data, body.admin_id)
    else:
        message = "deviceId, litrosTotal e data são obrigatórios"
        require_text(message, body.device_id, body.data)
    require_present(message, body.litros_total)

    result = await reconciler.reconcile(
        device_id=body.device_id,
        data=body.data,
        litros_total=body.litros_total,
        admin_id=body.admin_id,
    )

    if result.outcome == ReconcileOutcome.CREATED:
        response.status_code = 201
        return {"message": "Leitura diária criada"}

    response.status_code = 200
    return {"message": "Leitura diária atualizada"}


@router.get("/leituras-diarias/admin/{admin_id}", response_model=list[DailyAggregate])
async def get_daily_history_by_admin(
    admin_id: str,
    dias: Optional[str] = Query(None, description="Only the N most recent days"),
    history=Depends(get_history),
):
    """Daily totals of every device owned by an admin."""
    require_text("adminId é obrigatório", admin_id)
    return await history.daily_for_admin(admin_id, dias)


@router.get("/leituras-diarias/{device_id}", response_model=list[DailyAggregate])
async def get_daily_history(
    device_id: str,
    dias: Optional[str] = Query(None, description="Only the N most recent days"),
    history=Depends(get_history),
):
    """Daily totals of one device."""
    require_text("deviceId é obrigatório", device_id)
    return await history.daily_for_device(device_id, dias)
