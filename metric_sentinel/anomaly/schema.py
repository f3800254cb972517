"""
Schema definitions for anomaly detection output.

All anomaly outputs are deterministic and explainable. Each anomaly references
its observed value, the expected value it was compared against, and the
computed deviation. Records are frozen once created.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from metric_sentinel.data.schema import TimeRange


class AnomalySeverity(str, Enum):
    """Severity levels for anomalies."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AnomalyKind(str, Enum):
    """What the anomaly looks like on a chart."""

    SPIKE = "spike"
    DROP = "drop"
    TREND_CHANGE = "trend_change"
    PATTERN_BREAK = "pattern_break"


class DetectorName(str, Enum):
    """Detector that produced an anomaly."""

    ZSCORE = "zscore"
    MOVING_AVERAGE = "moving_average"
    CUSUM = "cusum"


class BaselineStats(BaseModel):
    """
    Baseline statistics for one metric series.

    Fields:
    - mean: arithmetic mean
    - std_dev: population standard deviation
    - median: middle value (mean of the two middle values on even counts)
    - count: number of points used
    """

    model_config = ConfigDict(frozen=True)

    mean: float = 0.0
    std_dev: float = 0.0
    median: float = 0.0
    count: int = 0

    def rounded(self, digits: int = 2) -> "BaselineStats":
        return BaselineStats(
            mean=round(self.mean, digits),
            std_dev=round(self.std_dev, digits),
            median=round(self.median, digits),
            count=self.count,
        )


class Detection(BaseModel):
    """
    Raw detector output for one period, before description and causes.

    Fields:
    - kind / severity: classification
    - period: bucket key
    - value: observed bucket value
    - expected_value: reference (global mean, local mean, or CUSUM baseline)
    - deviation: z-score, relative deviation, or CUSUM excess ratio
    - percent_change: (value - expected) / expected * 100
    - direction: "upward"/"downward" for trend changes
    """

    model_config = ConfigDict(frozen=True)

    detector: DetectorName
    kind: AnomalyKind
    severity: AnomalySeverity
    period: str
    value: float
    expected_value: float
    deviation: float
    percent_change: float
    direction: Optional[str] = None


class Anomaly(BaseModel):
    """
    A reported anomaly for one metric and period.

    Fields:
    - id: unique identifier (not part of determinism guarantees)
    - metric: column name
    - kind, severity, period: classification and location
    - value / expected_value / deviation / percent_change: rounded to 2 decimals
    - description: human-readable sentence
    - possible_causes: up to three candidate explanations
    - detector: detector that produced it
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    metric: str
    kind: AnomalyKind
    severity: AnomalySeverity
    period: str
    value: float
    expected_value: float
    deviation: float
    percent_change: float
    description: str
    possible_causes: List[str] = Field(default_factory=list, max_length=3)
    detector: DetectorName


class AnomalyStats(BaseModel):
    """Anomaly counts per severity, as shown on dashboard badges."""

    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


class DetectionResult(BaseModel):
    """
    Output of one detection run.

    Fields:
    - anomalies: sorted by severity (critical first), then most recent period
    - metrics_analyzed: columns that had a matching semantic type
    - time_range: UTC date range of the batch, None without timestamps
    - baseline_stats: rounded baseline per analyzed column with enough points
    """

    anomalies: List[Anomaly] = Field(default_factory=list)
    metrics_analyzed: List[str] = Field(default_factory=list)
    time_range: Optional[TimeRange] = None
    baseline_stats: Dict[str, BaselineStats] = Field(default_factory=dict)

    @property
    def stats(self) -> AnomalyStats:
        from .scoring import summarize_anomalies

        return summarize_anomalies(self.anomalies)
