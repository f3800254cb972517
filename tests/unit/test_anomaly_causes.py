"""
Unit tests for cause attribution and descriptions.
"""

import pytest

from metric_sentinel.anomaly.causes import (
    POSSIBLE_CAUSES,
    describe,
    metric_category,
    possible_causes,
)
from metric_sentinel.anomaly.schema import (
    AnomalyKind,
    AnomalySeverity,
    Detection,
    DetectorName,
)


def _detection(kind, detector=DetectorName.ZSCORE, percent_change=0.0, deviation=0.0, direction=None):
    return Detection(
        detector=detector,
        kind=kind,
        severity=AnomalySeverity.LOW,
        period="2024-01-08",
        value=1.0,
        expected_value=1.0,
        deviation=deviation,
        percent_change=percent_change,
        direction=direction,
    )


@pytest.mark.parametrize(
    "semantic_type, expected",
    [
        ("revenue", "revenue"),
        ("iap_revenue", "revenue"),
        ("price", "revenue"),
        ("arpu", "revenue"),
        ("dau", "dau"),
        ("mau", "dau"),
        ("retention_day", "retention"),
        ("session_duration", "engagement"),
        ("error_type", "error"),
        ("level", "default"),
    ],
)
def test_metric_category_from_semantic_type(semantic_type, expected):
    assert metric_category(semantic_type) == expected


def test_semantic_type_wins_over_column_name():
    assert metric_category("revenue", column="user_spend") == "revenue"


def test_column_name_used_when_type_has_no_category():
    assert metric_category("level", column="crash_level") == "error"
    assert metric_category("level", column="level") == "default"


def test_possible_causes_truncated_to_three():
    causes = possible_causes("revenue")

    assert causes == POSSIBLE_CAUSES["revenue"][:3]
    for category in POSSIBLE_CAUSES:
        assert len(possible_causes(category)) <= 3


def test_unknown_category_falls_back_to_default():
    assert possible_causes("weather") == POSSIBLE_CAUSES["default"]


def test_describe_spike_and_drop():
    spike = _detection(AnomalyKind.SPIKE, percent_change=370.59)
    drop = _detection(AnomalyKind.DROP, percent_change=-45.4)

    assert describe(spike, "revenue") == "revenue spiked 371% above baseline on 2024-01-08"
    assert describe(drop, "revenue") == "revenue dropped 45% below baseline on 2024-01-08"


def test_describe_moving_average():
    detection = _detection(
        AnomalyKind.SPIKE, detector=DetectorName.MOVING_AVERAGE, deviation=0.42, percent_change=42.0
    )

    assert (
        describe(detection, "dau", moving_average_window=7)
        == "dau deviated 42% from 7-period moving average on 2024-01-08"
    )


def test_describe_trend_change():
    detection = _detection(
        AnomalyKind.TREND_CHANGE, detector=DetectorName.CUSUM, percent_change=-30.0, direction="downward"
    )

    assert (
        describe(detection, "revenue")
        == "Significant downward trend change detected in revenue starting 2024-01-08"
    )


def test_describe_pattern_break():
    detection = _detection(AnomalyKind.PATTERN_BREAK)

    assert describe(detection, "level") == "Unusual pattern detected in level on 2024-01-08"
