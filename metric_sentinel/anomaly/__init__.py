"""
Anomaly module: Statistical anomaly detection over bucketed metric series.

Implements baselines, the z-score / moving-average / CUSUM detectors, cause
attribution, severity ranking, and the engine that assembles results.
"""

from .baselines import compute_baseline
from .causes import describe, metric_category, possible_causes
from .detectors import CusumDetector, CusumStep, MovingAverageDetector, ZScoreDetector
from .engine import AnomalyDetector, AnomalyEngine, anomaly_detector, detect_anomalies
from .schema import (
	Anomaly,
	AnomalyKind,
	AnomalySeverity,
	AnomalyStats,
	BaselineStats,
	Detection,
	DetectionResult,
	DetectorName,
)
from .scoring import SeverityMapper, filter_anomalies, sort_anomalies, summarize_anomalies

__all__ = [
	"AnomalyEngine",
	"AnomalyDetector",
	"anomaly_detector",
	"detect_anomalies",
	"Anomaly",
	"AnomalyKind",
	"AnomalySeverity",
	"AnomalyStats",
	"BaselineStats",
	"Detection",
	"DetectionResult",
	"DetectorName",
	"compute_baseline",
	"ZScoreDetector",
	"MovingAverageDetector",
	"CusumDetector",
	"CusumStep",
	"SeverityMapper",
	"sort_anomalies",
	"summarize_anomalies",
	"filter_anomalies",
	"metric_category",
	"possible_causes",
	"describe",
]
