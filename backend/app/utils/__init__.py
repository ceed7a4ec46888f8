"""
Utility modules for the flow readings backend.
"""

from app.utils.validation import (
    require_present,
    require_text,
    parse_day_count,
    parse_epoch_millis,
)

__all__ = [
    "require_present",
    "require_text",
    "parse_day_count",
    "parse_epoch_millis",
]
