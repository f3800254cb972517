"""
Pytest configuration and shared fixtures.

Provides detection configurations, series builders and realistic game
analytics batches for unit and integration tests.
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Sequence

import pandas as pd

from metric_sentinel.core.config import AnomalyThresholds, DetectionConfig
from metric_sentinel.data.schema import BucketedPoint, ColumnMeaning


def make_points(values: Sequence[float], start: date = date(2024, 1, 1)) -> List[BucketedPoint]:
    """Build a daily BucketedPoint series starting at ``start``."""
    return [
        BucketedPoint(period=(start + timedelta(days=i)).isoformat(), value=float(v))
        for i, v in enumerate(values)
    ]


def make_daily_rows(
    values: Sequence[float],
    column: str = "revenue",
    start: date = date(2024, 1, 1),
) -> List[Dict[str, Any]]:
    """One row per day, timestamped at noon UTC."""
    rows = []
    for i, value in enumerate(values):
        day = start + timedelta(days=i)
        ts = datetime(day.year, day.month, day.day, 12, 0, tzinfo=timezone.utc)
        rows.append({"timestamp": ts.isoformat(), column: value})
    return rows


@pytest.fixture
def points_factory() -> Callable[..., List[BucketedPoint]]:
    return make_points


@pytest.fixture
def daily_rows_factory() -> Callable[..., List[Dict[str, Any]]]:
    return make_daily_rows


@pytest.fixture
def default_thresholds() -> AnomalyThresholds:
    return AnomalyThresholds()


@pytest.fixture
def revenue_config() -> DetectionConfig:
    """
    Fixture providing a revenue-only daily configuration.

    Built explicitly so tests do not depend on METRIC_SENTINEL_* environment
    overrides.
    """
    return DetectionConfig(metrics=["revenue"], granularity="day")


@pytest.fixture
def revenue_meanings() -> List[ColumnMeaning]:
    return [
        ColumnMeaning(column="timestamp", semantic_type="timestamp"),
        ColumnMeaning(column="revenue", semantic_type="revenue"),
    ]


@pytest.fixture
def game_events_frame() -> pd.DataFrame:
    """
    Fixture providing 30 days of per-player game events as a DataFrame.

    - 20 players active per day, except day 25 (index) with only 5
    - revenue per row oscillates 98/100/102, with a 500 spike on day 20 (index)
    - event_date holds pandas Timestamps (naive, treated as UTC)

    Returns:
        pd.DataFrame with columns event_date, player_id, dau, revenue
    """
    days = pd.date_range("2024-03-01", periods=30, freq="D")
    records = []
    for i, day in enumerate(days):
        revenue = 500.0 if i == 20 else 100.0 + ((i % 3) - 1) * 2
        players = 5 if i == 25 else 20
        for p in range(players):
            records.append({
                "event_date": day + pd.Timedelta(hours=p % 12),
                "player_id": f"player_{p:03d}",
                "dau": 1,
                "revenue": revenue,
            })
    return pd.DataFrame.from_records(records)


@pytest.fixture
def game_events_rows(game_events_frame) -> List[Dict[str, Any]]:
    """Row-mapping view of game_events_frame, as a data adapter would hand it over."""
    return game_events_frame.to_dict("records")


@pytest.fixture
def game_events_meanings() -> List[Dict[str, Any]]:
    """Column meanings in the schema analyzer's camelCase shape."""
    return [
        {"column": "event_date", "semanticType": "timestamp", "confidence": 0.95},
        {"column": "player_id", "semanticType": "user_id", "confidence": 0.9},
        {"column": "dau", "semanticType": "dau", "confidence": 0.8},
        {"column": "revenue", "semanticType": "revenue", "confidence": 0.9},
    ]


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
