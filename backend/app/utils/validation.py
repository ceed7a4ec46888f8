"""
Input Validation Utilities
===========================

Small helpers for checking and parsing request fields.

Presence checks follow what the devices already expect:
- numbers only have to be present (0 is a perfectly good reading)
- identifiers have to be present AND non-empty
"""

import re
from datetime import datetime, timezone
from typing import Any, Optional, Union

from app.exceptions import ValidationError


# Leading decimal integer, like JavaScript's parseInt minus its 0x hex prefix
_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


def require_present(message: str, *values: Any) -> None:
    """
    Reject the request if any value is None.

    Args:
        message: Error message for the 400 response
        values: The fields to check

    Raises:
        ValidationError: if one of the values is missing
    """
    if any(value is None for value in values):
        raise ValidationError(message)


def require_text(message: str, *values: Optional[str]) -> None:
    """
    Reject the request if any value is None or an empty/blank string.

    Raises:
        ValidationError: if one of the values is missing or blank
    """
    if any(value is None or not str(value).strip() for value in values):
        raise ValidationError(message)


def parse_day_count(raw: Optional[str]) -> Optional[int]:
    """
    Parse the `dias` query parameter.

    Reads the leading decimal integer of the string ("3", " 7 ", "5dias" -> 5),
    much like JavaScript's parseInt except that a "0x" prefix is not hex:
    "0x10" reads as 0, not 16.
    Anything without a leading integer means "no limit", and so does a
    negative number.

    Args:
        raw: The raw query string value (may be None)

    Returns:
        The day count, or None when no limit should be applied
    """
    if raw is None:
        return None

    match = _LEADING_INT.match(raw)
    if not match:
        return None

    value = int(match.group(1))
    if value < 0:
        return None
    return value


def parse_epoch_millis(raw: Union[int, float, str]) -> datetime:
    """
    Turn a client supplied epoch value (milliseconds) into a UTC datetime.

    Args:
        raw: Number or numeric string, e.g. 1760745600000

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ValidationError: if the value is not numeric or out of range
    """
    try:
        millis = float(raw)
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        raise ValidationError(f"timestamp inválido: {raw!r}")
