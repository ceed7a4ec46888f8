"""
Models Package
==============

This is where all our data models live.
Import from here instead of the individual files.

Example:
    from app.models import FlowReadingRequest, DailyAggregate
"""

from .leitura import (
    # What clients send us
    FlowReadingRequest,
    CompactRequest,
    DailyTotalRequest,

    # What the tables hold
    Reading,
    DailyAggregate,

    # What the services return
    ReconcileOutcome,
    ReconcileResult,
    CompactionResult,
)

__all__ = [
    "FlowReadingRequest",
    "CompactRequest",
    "DailyTotalRequest",
    "Reading",
    "DailyAggregate",
    "ReconcileOutcome",
    "ReconcileResult",
    "CompactionResult",
]
