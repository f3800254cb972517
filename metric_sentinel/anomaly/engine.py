"""
Anomaly detection engine.

Consumes a row batch and the schema analyzer's column meanings, buckets each
target metric by period, estimates a baseline, runs the detectors and
assembles one ranked DetectionResult.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from metric_sentinel.core.config import AnomalyThresholds, DetectionConfig, config
from metric_sentinel.core.exceptions import ConfigurationError, DataValidationError
from metric_sentinel.data.aggregation import aggregate_by_period, get_time_range
from metric_sentinel.data.schema import (
    TIMESTAMP_TYPE,
    USER_ID_TYPE,
    BucketedPoint,
    ColumnMeaning,
    NormalizedData,
    find_column,
)

from .baselines import compute_baseline
from .causes import describe, metric_category, possible_causes
from .detectors import CusumDetector, MovingAverageDetector, ZScoreDetector
from .schema import Anomaly, BaselineStats, Detection, DetectionResult
from .scoring import sort_anomalies

logger = logging.getLogger(__name__)

RowBatch = Union[NormalizedData, Sequence[Mapping[str, Any]]]
MeaningInput = Union[ColumnMeaning, Mapping[str, Any]]


def _round2(value: float) -> float:
    return round(value, 2)


def _rows_of(data: Any) -> List[Mapping[str, Any]]:
    rows = getattr(data, "rows", data)
    if rows is None:
        return []
    if isinstance(rows, (str, bytes, Mapping)):
        raise DataValidationError(f"Expected a sequence of rows, got {type(rows).__name__}")
    try:
        rows = list(rows)
    except TypeError as exc:
        raise DataValidationError(f"Expected a sequence of rows, got {type(rows).__name__}") from exc
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise DataValidationError(
                f"Row {index} is {type(row).__name__}, expected a mapping"
            )
    return rows


def _meanings_of(meanings: Iterable[MeaningInput]) -> List[ColumnMeaning]:
    parsed: List[ColumnMeaning] = []
    for meaning in meanings:
        if isinstance(meaning, ColumnMeaning):
            parsed.append(meaning)
            continue
        try:
            parsed.append(ColumnMeaning.model_validate(dict(meaning)))
        except (TypeError, ValueError) as exc:
            raise DataValidationError(f"Invalid column meaning {meaning!r}: {exc}") from exc
    return parsed


@dataclass
class AnomalyEngine:
    """
    Deterministic anomaly detection engine for one configuration.

    Notes:
    - Stateless between detect() calls; safe to reuse for many batches.
    - The detection config is read at the start of every detect() call, so
      edits to engine.detection apply to the next run.
    - Detectors run independently; overlapping findings for the same period
      are all reported (no cross-detector deduplication).
    - Metrics with zero variance keep their baseline stats but yield nothing.
    - Metrics whose values overflow the float range are skipped entirely.
    """

    detection: DetectionConfig = field(default_factory=lambda: config.detection.model_copy(deep=True))

    def _build_detectors(self) -> Tuple[ZScoreDetector, MovingAverageDetector, CusumDetector]:
        """Instantiate the detectors from the current detection config."""
        settings = self.detection.detectors
        thresholds = self.detection.thresholds
        return (
            ZScoreDetector(thresholds=thresholds),
            MovingAverageDetector(
                thresholds=thresholds,
                window_size=settings.moving_average_window,
                min_deviation=settings.moving_average_min_deviation,
                medium_deviation=settings.moving_average_medium_deviation,
            ),
            CusumDetector(
                min_points=settings.cusum_min_points,
                baseline_window=settings.cusum_baseline_window,
                threshold_fraction=settings.cusum_threshold_fraction,
            ),
        )

    def detect(
        self,
        data: RowBatch,
        column_meanings: Iterable[MeaningInput],
    ) -> DetectionResult:
        rows = _rows_of(data)
        meanings = _meanings_of(column_meanings)

        timestamp_col = find_column(meanings, TIMESTAMP_TYPE)
        user_id_col = find_column(meanings, USER_ID_TYPE)
        detectors = self._build_detectors()

        anomalies: List[Anomaly] = []
        metrics_analyzed: List[str] = []
        baseline_stats: Dict[str, BaselineStats] = {}

        for metric in self.detection.metrics:
            column = find_column(meanings, metric)
            if column is None:
                logger.debug("No column for metric %r; skipping", metric)
                continue

            metrics_analyzed.append(column)

            points = aggregate_by_period(
                rows,
                column,
                timestamp_column=timestamp_col,
                user_id_column=user_id_col,
                granularity=self.detection.granularity,
            )

            if len(points) < self.detection.thresholds.min_data_points:
                logger.debug(
                    "Metric %r has %d points (< %d); not analyzed",
                    column,
                    len(points),
                    self.detection.thresholds.min_data_points,
                )
                continue

            baseline = compute_baseline([p.value for p in points])
            if not (math.isfinite(baseline.mean) and math.isfinite(baseline.std_dev)):
                logger.warning("Metric %r overflows float range; not analyzed", column)
                continue
            baseline_stats[column] = baseline.rounded()

            if baseline.std_dev == 0:
                logger.debug("Metric %r has zero variance; no anomalies", column)
                continue

            anomalies.extend(self._analyze_metric(detectors, points, baseline, column, metric))

        result = DetectionResult(
            anomalies=sort_anomalies(anomalies),
            metrics_analyzed=metrics_analyzed,
            time_range=get_time_range(rows, timestamp_col),
            baseline_stats=baseline_stats,
        )

        logger.info(
            "Analyzed %d metric(s) over %d rows: %d anomalies",
            len(metrics_analyzed),
            len(rows),
            len(result.anomalies),
        )
        return result

    def _analyze_metric(
        self,
        detectors: Tuple[ZScoreDetector, MovingAverageDetector, CusumDetector],
        points: List[BucketedPoint],
        baseline: BaselineStats,
        column: str,
        metric: str,
    ) -> List[Anomaly]:
        z_detector, ma_detector, cusum_detector = detectors
        detections: List[Detection] = []
        detections.extend(z_detector.detect(points, baseline))
        detections.extend(ma_detector.detect(points))
        detections.extend(cusum_detector.detect(points))

        causes = possible_causes(metric_category(metric, column))
        return [self._to_anomaly(d, column, causes) for d in detections]

    def _to_anomaly(self, detection: Detection, column: str, causes: List[str]) -> Anomaly:
        return Anomaly(
            metric=column,
            kind=detection.kind,
            severity=detection.severity,
            period=detection.period,
            value=_round2(detection.value),
            expected_value=_round2(detection.expected_value),
            deviation=_round2(detection.deviation),
            percent_change=_round2(detection.percent_change),
            description=describe(
                detection,
                column,
                moving_average_window=self.detection.detectors.moving_average_window,
            ),
            possible_causes=list(causes),
            detector=detection.detector,
        )


def detect_anomalies(
    data: RowBatch,
    column_meanings: Iterable[MeaningInput],
    detection_config: Optional[DetectionConfig] = None,
) -> DetectionResult:
    """
    Detect anomalies across the configured metrics of a row batch.

    Args:
        data: NormalizedData or a sequence of row mappings
        column_meanings: Semantic column mapping from the schema analyzer
        detection_config: Metrics, thresholds and granularity; defaults to
            the environment-driven config.detection

    Returns:
        DetectionResult; data problems reduce output rather than raising
    """
    engine = AnomalyEngine(detection_config) if detection_config is not None else AnomalyEngine()
    return engine.detect(data, column_meanings)


class AnomalyDetector:
    """
    Convenience holder for "current" thresholds across runs.

    The active thresholds are only changed through set_thresholds(); detect()
    reads them and never writes them. Not synchronized: hosts that share an
    instance across threads must serialize set_thresholds() against runs.
    """

    def __init__(self, thresholds: Optional[AnomalyThresholds] = None) -> None:
        self._thresholds = (thresholds or config.detection.thresholds).model_copy()

    @property
    def thresholds(self) -> AnomalyThresholds:
        return self._thresholds

    def set_thresholds(self, **overrides: Any) -> AnomalyThresholds:
        """
        Merge overrides into the active thresholds.

        Raises:
            ConfigurationError: If the merged thresholds are invalid; the
                active thresholds are left unchanged
        """
        merged = {**self._thresholds.model_dump(), **overrides}
        try:
            self._thresholds = AnomalyThresholds.model_validate(merged)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid anomaly thresholds: {exc}") from exc
        return self._thresholds

    def detect(
        self,
        data: RowBatch,
        column_meanings: Iterable[MeaningInput],
        detection_config: Optional[DetectionConfig] = None,
    ) -> DetectionResult:
        """
        Run detection with the active thresholds.

        Other settings (metrics, granularity, detector constants) come from
        detection_config, or the global defaults when omitted.
        """
        base = detection_config if detection_config is not None else config.detection
        run_config = base.model_copy(update={"thresholds": self._thresholds})
        return detect_anomalies(data, column_meanings, run_config)


anomaly_detector = AnomalyDetector()
