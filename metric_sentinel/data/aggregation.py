"""
Time-period aggregation for metric rows.

Groups raw rows into hour, day or week buckets and reduces each bucket to one
value per metric. Produces BucketedPoint series suitable for baselines and
detectors.

Design:
- Periods aligned to UTC calendar boundaries; weeks start on Sunday
- Rows with an unparsable timestamp are dropped, not treated as errors
- Active-user metrics count distinct users per bucket
- Every other metric is averaged per bucket, so a period with more rows
  does not look larger just because it has more rows
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from metric_sentinel.core.config import Granularity
from metric_sentinel.data.parsers import coerce_numeric, parse_timestamp
from metric_sentinel.data.schema import ALL_PERIOD, BucketedPoint, TimeRange

logger = logging.getLogger(__name__)

# Column-name fragments that mark a metric as a user count
USER_COUNT_MARKERS = ("dau", "user")


def period_key(ts: datetime, granularity: Granularity) -> str:
    """
    Derive the bucket key for a UTC timestamp.

    Examples for 2024-01-17T10:32:00Z (a Wednesday):
    - hour -> "2024-01-17T10:00"
    - day  -> "2024-01-17"
    - week -> "2024-01-14" (the preceding Sunday)

    Args:
        ts: Timestamp (UTC)
        granularity: Bucket size

    Returns:
        Period key string; keys sort chronologically as strings
    """
    granularity = Granularity(granularity)

    if granularity is Granularity.HOUR:
        return ts.strftime("%Y-%m-%dT%H:00")
    if granularity is Granularity.DAY:
        return ts.date().isoformat()

    # weekday(): Monday=0 .. Sunday=6
    days_since_sunday = (ts.weekday() + 1) % 7
    return (ts.date() - timedelta(days=days_since_sunday)).isoformat()


def is_user_count_metric(column: str) -> bool:
    """True if the column name marks a distinct-user count (e.g. "dau", "active_users")."""
    name = column.lower()
    return any(marker in name for marker in USER_COUNT_MARKERS)


class _Bucket:
    """Running totals for one period."""

    __slots__ = ("total", "count", "users")

    def __init__(self) -> None:
        self.total = 0.0
        self.count = 0
        self.users: Set[str] = set()

    def value(self) -> float:
        if self.users:
            return float(len(self.users))
        if self.count:
            return self.total / self.count
        return 0.0


def aggregate_by_period(
    rows: Iterable[Mapping[str, Any]],
    value_column: str,
    timestamp_column: Optional[str] = None,
    user_id_column: Optional[str] = None,
    granularity: Granularity = Granularity.DAY,
) -> List[BucketedPoint]:
    """
    Aggregate rows into one value per period for a metric column.

    Args:
        rows: Raw row mappings
        value_column: Metric column to aggregate
        timestamp_column: Column to bucket on; None puts every row in "all"
        user_id_column: Column holding user identifiers, if any
        granularity: Bucket size

    Returns:
        BucketedPoint list sorted by period key (ascending)

    Notes:
        - With a user id column and a user-count metric name, the bucket value
          is the number of distinct non-empty user ids
        - Otherwise the bucket value is the mean of the coerced metric values
        - Empty buckets are not created
    """
    count_users = bool(user_id_column) and is_user_count_metric(value_column)
    buckets: Dict[str, _Bucket] = {}
    skipped = 0

    for row in rows:
        if timestamp_column:
            ts = parse_timestamp(row.get(timestamp_column))
            if ts is None:
                skipped += 1
                continue
            key = period_key(ts, granularity)
        else:
            key = ALL_PERIOD

        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = _Bucket()

        if count_users:
            user = row.get(user_id_column)
            user_id = "" if user is None else str(user)
            if user_id:
                bucket.users.add(user_id)
        else:
            bucket.total += coerce_numeric(row.get(value_column))
            bucket.count += 1

    if skipped:
        logger.debug(
            "Dropped %d rows with unparsable %r while bucketing %r",
            skipped,
            timestamp_column,
            value_column,
        )

    return [
        BucketedPoint(period=key, value=buckets[key].value())
        for key in sorted(buckets)
    ]


def get_time_range(
    rows: Iterable[Mapping[str, Any]],
    timestamp_column: Optional[str],
) -> Optional[TimeRange]:
    """
    Get the min and max parsed timestamp across all rows.

    Args:
        rows: Raw row mappings
        timestamp_column: Timestamp column, or None

    Returns:
        TimeRange with UTC dates, or None if there is no timestamp column or
        no row parses
    """
    if not timestamp_column:
        return None

    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None

    for row in rows:
        ts = parse_timestamp(row.get(timestamp_column))
        if ts is None:
            continue
        if earliest is None or ts < earliest:
            earliest = ts
        if latest is None or ts > latest:
            latest = ts

    if earliest is None or latest is None:
        return None

    return TimeRange(start=earliest.date().isoformat(), end=latest.date().isoformat())
