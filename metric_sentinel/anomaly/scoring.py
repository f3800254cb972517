"""
Severity mapping, ranking and summaries for anomalies.

Maps z-scores to severity levels with configurable thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from metric_sentinel.core.config import AnomalyThresholds

from .schema import Anomaly, AnomalySeverity, AnomalyStats

# Sort rank: lower is more severe
SEVERITY_RANK = {
    AnomalySeverity.CRITICAL: 0,
    AnomalySeverity.HIGH: 1,
    AnomalySeverity.MEDIUM: 2,
    AnomalySeverity.LOW: 3,
}


@dataclass
class SeverityMapper:
    """
    Maps deviation magnitudes to severity levels.
    """

    thresholds: AnomalyThresholds

    def zscore_severity(self, zscore: float) -> Optional[AnomalySeverity]:
        """Return the tier for |zscore|, or None below the low threshold."""
        z = abs(zscore)
        if z >= self.thresholds.critical_std_dev:
            return AnomalySeverity.CRITICAL
        if z >= self.thresholds.high_std_dev:
            return AnomalySeverity.HIGH
        if z >= self.thresholds.medium_std_dev:
            return AnomalySeverity.MEDIUM
        if z >= self.thresholds.low_std_dev:
            return AnomalySeverity.LOW
        return None


def sort_anomalies(anomalies: Iterable[Anomaly]) -> List[Anomaly]:
    """
    Order anomalies by severity (critical first), then most recent period.

    Period keys are ISO dates/hours, so string order is chronological.
    """
    by_recency = sorted(anomalies, key=lambda a: a.period, reverse=True)
    return sorted(by_recency, key=lambda a: SEVERITY_RANK[a.severity])


def summarize_anomalies(anomalies: Iterable[Anomaly]) -> AnomalyStats:
    """
    Count anomalies per severity.
    """
    stats = AnomalyStats()
    for anomaly in anomalies:
        stats.total += 1
        field = anomaly.severity.value
        setattr(stats, field, getattr(stats, field) + 1)
    return stats


def filter_anomalies(
    anomalies: Iterable[Anomaly],
    severity: Optional[AnomalySeverity] = None,
    metric: Optional[str] = None,
) -> List[Anomaly]:
    """
    Keep anomalies matching a severity and/or metric, preserving order.
    """
    return [
        a
        for a in anomalies
        if (severity is None or a.severity == severity)
        and (metric is None or a.metric == metric)
    ]
