"""
Raw Reading Ingestion
=====================

Checks a POST /fluxo body and writes one row to `leituras`.

TIMESTAMPS:
    server mode - the reading is stamped with the current UTC time
    client mode - the body must carry `timestamp` (epoch milliseconds)

STORAGE:
    upsert mode - one row per device; a new reading replaces the old one
    append mode - every reading is a new row; compaction keeps the table small
"""

import logging
from datetime import datetime, timezone

from app.config import ReadingMode, TimestampSource
from app.models import FlowReadingRequest
from app.utils.validation import parse_epoch_millis, require_present, require_text

logger = logging.getLogger(__name__)


MISSING_FIELDS_MESSAGE = "Dados incompletos"


class ReadingIngestor:
    """
    Validates and stores a single flow reading.

    Args:
        store: Datastore client
        reading_mode: Upsert or append
        timestamp_source: Server or client timestamps
    """

    def __init__(
        self,
        store,
        reading_mode: ReadingMode = ReadingMode.UPSERT,
        timestamp_source: TimestampSource = TimestampSource.SERVER,
    ):
        self.store = store
        self.reading_mode = reading_mode
        self.timestamp_source = timestamp_source

    def build_row(self, request: FlowReadingRequest) -> dict:
        """
        Turn a request into a `leituras` row.

        Raises:
            ValidationError: if a required field is missing
        """
        require_present(MISSING_FIELDS_MESSAGE, request.litros, request.mililitros)
        require_text(MISSING_FIELDS_MESSAGE, request.device_id)

        if self.timestamp_source == TimestampSource.CLIENT:
            require_present(MISSING_FIELDS_MESSAGE, request.timestamp)
            timestamp = parse_epoch_millis(request.timestamp)
        else:
            timestamp = datetime.now(timezone.utc)

        return {
            "device_id": request.device_id,
            "litros": request.litros,
            "mililitros": request.mililitros,
            "timestamp": timestamp.isoformat(),
        }

    async def ingest(self, request: FlowReadingRequest) -> dict:
        """
        Validate and store a reading.

        Returns:
            The row that was sent to the datastore

        Raises:
            ValidationError: nothing is written
            StoreError: the write failed
        """
        row = self.build_row(request)

        if self.reading_mode == ReadingMode.APPEND:
            await self.store.insert_reading(row)
        else:
            await self.store.upsert_reading(row)

        logger.info(f"[{row['timestamp']}] Reading saved for {row['device_id']} ({self.reading_mode.value})")
        return row
