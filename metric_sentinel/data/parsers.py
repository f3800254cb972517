"""
Value parsing for raw analytics rows.

Rows come from spreadsheets, SDK exports and databases, so a single column can
mix native dates, epoch numbers and strings. Parsing here never raises:

- Timestamps that cannot be parsed return None (the row is skipped by bucketing)
- Numbers that cannot be parsed become 0.0 (the row contributes nothing)
"""

import logging
import math
import re
from datetime import date, datetime, timezone
from numbers import Number
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Epoch values above this are treated as milliseconds
EPOCH_MILLIS_CUTOFF = 1e12

# Leading float literal, e.g. "12.5", "-3e2", "42 coins"
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

_DATETIME_FORMATS = [
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
]


def _from_epoch(value: float) -> Optional[datetime]:
    """Convert epoch seconds or milliseconds to a UTC datetime."""
    seconds = value if value <= EPOCH_MILLIS_CUTOFF else value / 1000
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a raw timestamp cell to a UTC datetime.

    Supports:
    - datetime / date objects (pandas Timestamp included)
    - Epoch seconds: 1707315045
    - Epoch millis: 1707315045000
    - Numeric strings, with the same seconds/millis rule
    - ISO 8601 and common date-time strings

    Args:
        value: Raw cell value

    Returns:
        Timezone-aware datetime in UTC, or None if the value is empty or
        not recognized
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        # pandas NaT is a datetime that never equals itself
        if value != value:
            return None
        return _as_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, Number):
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        return _from_epoch(number) if number else None

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    # Try numeric (epoch seconds or millis)
    try:
        number = float(text)
    except ValueError:
        number = None
    if number is not None:
        return _from_epoch(number) if number else None

    try:
        return _as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass

    for fmt in _DATETIME_FORMATS:
        try:
            return _as_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue

    logger.debug("Unparsable timestamp %r", value)
    return None


def coerce_numeric(value: Any) -> float:
    """
    Coerce a raw metric cell to a finite float.

    Numbers pass through; strings contribute their leading float literal
    ("12.5 USD" -> 12.5). Anything else, including booleans and non-finite
    results, becomes 0.0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0

    if isinstance(value, Number):
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
        return number if math.isfinite(number) else 0.0

    if isinstance(value, str):
        match = _LEADING_FLOAT.match(value)
        if match is None:
            return 0.0
        number = float(match.group(1))
        return number if math.isfinite(number) else 0.0

    return 0.0
