"""
Detectors for statistical deviations in a bucketed series.

Implements explainable methods:
- Z-score against the whole-series baseline
- Relative deviation from a trailing moving average
- CUSUM change-point detection against a fixed leading window

The detectors are independent: each sees the same series and none knows about
the others' findings.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import isfinite
from typing import List, NamedTuple, Sequence

from metric_sentinel.core.config import AnomalyThresholds
from metric_sentinel.data.schema import BucketedPoint

from .baselines import compute_mean
from .schema import AnomalyKind, AnomalySeverity, BaselineStats, Detection, DetectorName
from .scoring import SeverityMapper


def _percent_change(value: float, reference: float) -> float:
    return (value - reference) / reference * 100


def _all_finite(*values: float) -> bool:
    return all(isfinite(v) for v in values)


@dataclass
class ZScoreDetector:
    """
    Global z-score detector.

    A point is reported only if |z| reaches the low threshold and its percent
    change from the mean clears min_percent_change. A flat series (std 0) or a
    zero mean produces nothing.
    """

    thresholds: AnomalyThresholds

    def compute(self, observed: float, baseline: BaselineStats) -> float | None:
        if baseline.std_dev == 0:
            return None
        return (observed - baseline.mean) / baseline.std_dev

    def detect(
        self, points: Sequence[BucketedPoint], baseline: BaselineStats
    ) -> List[Detection]:
        if baseline.std_dev == 0 or baseline.mean == 0:
            return []
        if not _all_finite(baseline.mean, baseline.std_dev):
            return []

        mapper = SeverityMapper(self.thresholds)
        detections: List[Detection] = []

        for point in points:
            zscore = self.compute(point.value, baseline)
            severity = mapper.zscore_severity(zscore)
            if severity is None:
                continue

            percent_change = _percent_change(point.value, baseline.mean)
            if not _all_finite(zscore, percent_change):
                continue
            if abs(percent_change) < self.thresholds.min_percent_change:
                continue

            detections.append(
                Detection(
                    detector=DetectorName.ZSCORE,
                    kind=AnomalyKind.SPIKE if point.value > baseline.mean else AnomalyKind.DROP,
                    severity=severity,
                    period=point.period,
                    value=point.value,
                    expected_value=baseline.mean,
                    deviation=zscore,
                    percent_change=percent_change,
                )
            )

        return detections


@dataclass
class MovingAverageDetector:
    """
    Trailing moving-average detector.

    Compares each point with the mean of the window_size points before it.
    Catches local regime shifts that a widened global std dev absorbs.
    Severity is coarse: "medium" above medium_deviation, otherwise "low".
    """

    thresholds: AnomalyThresholds
    window_size: int = 7
    min_deviation: float = 0.3
    medium_deviation: float = 0.5

    def detect(self, points: Sequence[BucketedPoint]) -> List[Detection]:
        detections: List[Detection] = []

        if len(points) < self.window_size + 1:
            return detections

        for i in range(self.window_size, len(points)):
            local_mean = compute_mean([p.value for p in points[i - self.window_size:i]])
            if local_mean == 0 or not isfinite(local_mean):
                continue

            current = points[i]
            relative = abs(current.value - local_mean) / local_mean
            percent_change = _percent_change(current.value, local_mean)

            if not _all_finite(relative, percent_change):
                continue
            if relative <= self.min_deviation:
                continue
            if abs(percent_change) < self.thresholds.min_percent_change:
                continue

            detections.append(
                Detection(
                    detector=DetectorName.MOVING_AVERAGE,
                    kind=AnomalyKind.SPIKE if current.value > local_mean else AnomalyKind.DROP,
                    severity=(
                        AnomalySeverity.MEDIUM
                        if relative > self.medium_deviation
                        else AnomalySeverity.LOW
                    ),
                    period=current.period,
                    value=current.value,
                    expected_value=local_mean,
                    deviation=relative,
                    percent_change=percent_change,
                )
            )

        return detections


class CusumStep(NamedTuple):
    """CUSUM state after accumulating one point."""

    index: int
    cusum_pos: float
    cusum_neg: float
    fired: bool


@dataclass
class CusumDetector:
    """
    Two-sided CUSUM trend-shift detector.

    The first baseline_window points fix the reference mean; the control limit
    is reference_mean * threshold_fraction. When either cumulative sum crosses
    the limit a single "high" trend change is reported and both sums reset, so
    one sustained shift yields one alert while a later shift can still fire.

    A zero (or negative) reference mean gives no usable limit; the detector
    reports nothing for such a series.
    """

    min_points: int = 14
    baseline_window: int = 7
    threshold_fraction: float = 0.5

    def reference_mean(self, points: Sequence[BucketedPoint]) -> float:
        return compute_mean([p.value for p in points[: self.baseline_window]])

    def trace(self, points: Sequence[BucketedPoint]) -> List[CusumStep]:
        """
        Run the CUSUM recursion and return the state after every point.

        Empty when the series is too short or the reference mean is not a positive
        finite number.
        A step with fired=True holds the sums that crossed the limit; the next
        step starts from zero.
        """
        if len(points) < self.min_points:
            return []

        reference = self.reference_mean(points)
        threshold = reference * self.threshold_fraction
        # No usable control limit for a zero, negative or overflowed reference level
        if threshold <= 0 or not isfinite(threshold):
            return []

        steps: List[CusumStep] = []
        cusum_pos = 0.0
        cusum_neg = 0.0

        for i in range(self.baseline_window, len(points)):
            diff = points[i].value - reference
            cusum_pos = max(0.0, cusum_pos + diff)
            cusum_neg = min(0.0, cusum_neg + diff)
            fired = abs(cusum_pos) > threshold or abs(cusum_neg) > threshold
            steps.append(CusumStep(i, cusum_pos, cusum_neg, fired))
            if fired:
                cusum_pos = 0.0
                cusum_neg = 0.0

        return steps

    def detect(self, points: Sequence[BucketedPoint]) -> List[Detection]:
        steps = self.trace(points)
        if not steps:
            return []

        reference = self.reference_mean(points)
        threshold = reference * self.threshold_fraction
        detections: List[Detection] = []

        for step in steps:
            if not step.fired:
                continue
            point = points[step.index]
            excess = max(step.cusum_pos, abs(step.cusum_neg)) / threshold
            percent_change = _percent_change(point.value, reference)
            if not _all_finite(excess, percent_change):
                continue

            detections.append(
                Detection(
                    detector=DetectorName.CUSUM,
                    kind=AnomalyKind.TREND_CHANGE,
                    severity=AnomalySeverity.HIGH,
                    period=point.period,
                    value=point.value,
                    expected_value=reference,
                    deviation=excess,
                    percent_change=percent_change,
                    direction="upward" if step.cusum_pos > threshold else "downward",
                )
            )

        return detections
