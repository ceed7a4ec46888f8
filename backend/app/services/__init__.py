"""
Services Package
================

These are the "workers" that do the actual work.

- SupabaseStore: Talks to the database (the only thing that does)
- ReadingIngestor: Checks and stores raw flow readings
- RetentionPolicy: Keeps only the newest readings per device
- AggregateReconciler: Keeps one daily total per device and day
- HistoryQuery: Recent readings and daily history
- CompactionScheduler: Runs compaction for every device on a timer
"""

from .store import SupabaseStore
from .ingestion import ReadingIngestor
from .retention import RetentionPolicy
from .reconciliation import AggregateReconciler
from .history import HistoryQuery
from .compaction_scheduler import CompactionScheduler

__all__ = [
    "SupabaseStore",
    "ReadingIngestor",
    "RetentionPolicy",
    "AggregateReconciler",
    "HistoryQuery",
    "CompactionScheduler",
]
