"""
Flow Readings Router
====================

Endpoints for the raw readings the flow meters send.

ALL ENDPOINTS:
-------------
POST /fluxo                      - Store a reading (upsert or append, see READING_MODE)
POST /compactar                  - Keep only the newest readings of a device
GET  /fluxo/recentes/{deviceId}  - Newest readings of a device
GET  /leituras                   - Every stored reading

Errors come back as {"error": "..."}: 400 for missing fields, 500 when the
database call fails.
"""

from fastapi import APIRouter, Depends

from app.config import ReadingMode
from app.models import CompactRequest, FlowReadingRequest, Reading
from app.routers.dependencies import (
    get_history,
    get_ingestor,
    get_retention_policy,
)
from app.utils.validation import require_text


router = APIRouter(tags=["fluxo"])


@router.post("/fluxo")
async def register_reading(
    body: FlowReadingRequest,
    ingestor=Depends(get_ingestor),
):
    """
    Store a flow reading.

    Send us:
    - litros, mililitros: The measured volume
    - deviceId: Which flow meter sent it
    - timestamp: Epoch milliseconds (only when the server uses client timestamps)

    In upsert mode the device's previous reading is replaced; in append mode
    a new row is added.
    """
    await ingestor.ingest(body)

    if ingestor.reading_mode == ReadingMode.APPEND:
        return {"message": "Leitura registrada"}
    return {"message": "Leitura registrada/atualizada"}


@router.post("/compactar")
async def compact_readings(
    body: CompactRequest,
    policy=Depends(get_retention_policy),
):
    """
    Delete all but the newest readings of a device.

    A device that already has few enough readings is a no-op, not an error.
    """
    require_text("deviceId é obrigatório", body.device_id)

    result = await policy.compact(body.device_id)

    return {
        "message": "Leituras compactadas",
        "deviceId": result.device_id,
        "modo": result.mode,
        "removidas": result.deleted_count,
        "ids": result.deleted_ids,
    }


@router.get("/fluxo/recentes/{device_id}", response_model=list[Reading])
async def get_recent_readings(device_id: str, history=Depends(get_history)):
    """Newest readings of a device (up to 20), newest first."""
    require_text("deviceId é obrigatório", device_id)
    return await history.recent_readings(device_id)


@router.get("/leituras", response_model=list[Reading])
async def get_all_readings(history=Depends(get_history)):
    """Every reading in the table."""
    return await history.all_readings()
