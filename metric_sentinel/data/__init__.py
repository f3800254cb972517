"""
Data module: row parsing and time-period aggregation.

Responsible for converting a raw analytics row batch into per-metric series
suitable for anomaly detection. Pipeline:

    NormalizedData (rows) + ColumnMeaning list
        ↓
    Parsing (metric_sentinel/data/parsers.py) → UTC datetimes, floats
        ↓
    Aggregation (metric_sentinel/data/aggregation.py) → BucketedPoint series
        ↓
    Ready for anomaly detection (metric_sentinel/anomaly)
"""

from metric_sentinel.data.aggregation import (
    aggregate_by_period,
    get_time_range,
    is_user_count_metric,
    period_key,
)
from metric_sentinel.data.parsers import coerce_numeric, parse_timestamp
from metric_sentinel.data.schema import (
    ALL_PERIOD,
    TIMESTAMP_TYPE,
    USER_ID_TYPE,
    BucketedPoint,
    ColumnMeaning,
    NormalizedData,
    TimeRange,
    find_column,
)

__all__ = [
    # Schema
    "NormalizedData",
    "ColumnMeaning",
    "BucketedPoint",
    "TimeRange",
    "find_column",
    "ALL_PERIOD",
    "TIMESTAMP_TYPE",
    "USER_ID_TYPE",

    # Parsing
    "parse_timestamp",
    "coerce_numeric",

    # Aggregation
    "aggregate_by_period",
    "get_time_range",
    "is_user_count_metric",
    "period_key",
]
