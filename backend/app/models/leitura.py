"""
Flow Reading Models
===================
Pydantic models for flow-meter readings and daily totals.

This module defines all data structures used throughout the application:
- Request models: What the devices and dashboards send us
- Row models: What lives in the `leituras` and `leituras_diarias` tables
- Result models: What the services hand back to the routers

FIELD NAMES:
    Request bodies use the camelCase names the devices already send
    (deviceId, litrosTotal, adminId). Table rows use the snake_case column
    names (device_id, litros_total, admin_id).

Every request field is Optional on purpose: a missing field must come back
as our own 400 `{"error": ...}` body, so presence is checked in the services
instead of by pydantic.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# int stays int: PostgREST refuses 500.0 for an integer column
Quantity = Union[int, float]


# =============================================================================
# REQUEST MODELS - What clients send to the backend
# =============================================================================

class FlowReadingRequest(BaseModel):
    """
    Request body for POST /fluxo.

    Example Request:
        POST /fluxo
        {
            "litros": 10,
            "mililitros": 500,
            "deviceId": "dev1",
            "timestamp": 1760745600000
        }

    `timestamp` is only read when the server runs with TIMESTAMP_SOURCE=client,
    and is an epoch value in milliseconds.
    """
    model_config = ConfigDict(populate_by_name=True)

    litros: Optional[Quantity] = Field(None, description="Whole liters measured")
    mililitros: Optional[Quantity] = Field(None, description="Remaining milliliters")
    device_id: Optional[str] = Field(None, alias="deviceId", description="Flow meter identifier")
    timestamp: Optional[Union[float, str]] = Field(
        None,
        description="Epoch milliseconds (client timestamp mode only)",
    )


class CompactRequest(BaseModel):
    """Request body for POST /compactar."""
    model_config = ConfigDict(populate_by_name=True)

    device_id: Optional[str] = Field(None, alias="deviceId", description="Device to compact")


class DailyTotalRequest(BaseModel):
    """
    Request body for POST /fluxo-diario.

    `litrosTotal` is the running total for the day, not a delta. Sending a
    new value replaces the stored one.

    Example Request:
        POST /fluxo-diario
        {
            "deviceId": "dev1",
            "litrosTotal": 153.5,
            "data": "2026-10-18",
            "adminId": "admin-7"
        }
    """
    model_config = ConfigDict(populate_by_name=True)

    device_id: Optional[str] = Field(None, alias="deviceId")
    litros_total: Optional[Quantity] = Field(None, alias="litrosTotal")
    data: Optional[str] = Field(None, description="Calendar day, e.g. 2026-10-18")
    admin_id: Optional[str] = Field(None, alias="adminId")


# =============================================================================
# ROW MODELS - What the datastore holds
# =============================================================================

class Reading(BaseModel):
    """
    One row of the `leituras` table.

    `id` and `created_at` are assigned by the database. Unknown columns are
    passed through untouched.
    """
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    device_id: str
    litros: Optional[Quantity] = None
    mililitros: Optional[Quantity] = None
    timestamp: Optional[datetime] = None
    created_at: Optional[datetime] = None


class DailyAggregate(BaseModel):
    """One row of the `leituras_diarias` table, unique per (device_id, data)."""
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    device_id: str
    data: str
    litros_total: Optional[Quantity] = None
    admin_id: Optional[str] = None


# =============================================================================
# RESULT MODELS - What the services return
# =============================================================================

class ReconcileOutcome(str, Enum):
    """Whether a daily total was written over an existing row or a new one."""
    CREATED = "created"
    UPDATED = "updated"


class ReconcileResult(BaseModel):
    outcome: ReconcileOutcome
    device_id: str
    data: str
    litros_total: Quantity
    aggregate_id: Optional[Union[int, str]] = None


class CompactionResult(BaseModel):
    """
    What a compaction run did.

    In rpc mode the stored procedure does the deleting, so `deleted_ids` is
    None and `deleted_count` is whatever integer the procedure returned
    (None if it returned nothing).
    """
    device_id: str
    mode: str
    deleted_count: Optional[int] = None
    deleted_ids: Optional[list[Union[int, str]]] = None
