"""
Application configuration for the metric anomaly engine.

Provides environment-aware settings with the product defaults. All detection
thresholds and detector constants are configurable to avoid hard-coded
"magic numbers".
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Granularity(str, Enum):
	"""Bucket size for time series aggregation."""

	HOUR = "hour"
	DAY = "day"
	WEEK = "week"


class AnomalyThresholds(BaseModel):
	"""
	Thresholds for the statistical detectors.

	Rationale:
	- Std-dev tiers classify z-scores; anything below low_std_dev is not reported.
	- min_percent_change suppresses statistically significant but tiny moves,
	  e.g. around a baseline close to zero.
	"""

	low_std_dev: float = Field(2.0, ge=0.0, description="Z-score for low severity")
	medium_std_dev: float = Field(2.5, ge=0.0, description="Z-score for medium severity")
	high_std_dev: float = Field(3.0, ge=0.0, description="Z-score for high severity")
	critical_std_dev: float = Field(4.0, ge=0.0, description="Z-score for critical severity")

	min_data_points: int = Field(
		7, ge=1, description="Minimum bucketed points before a metric is analyzed"
	)
	min_percent_change: float = Field(
		20.0, ge=0.0, description="Minimum absolute % change to report (20 = 20%)"
	)

	@model_validator(mode="after")
	def _check_tier_order(self) -> "AnomalyThresholds":
		tiers = [
			self.low_std_dev,
			self.medium_std_dev,
			self.high_std_dev,
			self.critical_std_dev,
		]
		if tiers != sorted(tiers):
			raise ValueError(
				"Severity thresholds must satisfy low <= medium <= high <= critical"
			)
		return self


class DetectorSettings(BaseModel):
	"""
	Constants for the local-deviation and trend-shift detectors.

	Notes:
	- moving_average_window: number of preceding periods in the local mean.
	- moving_average_min_deviation: relative deviation needed to flag (0.3 = 30%).
	- moving_average_medium_deviation: above this the flag is "medium", else "low".
	- cusum_min_points: series shorter than this are not scanned for shifts.
	- cusum_baseline_window: leading points that form the fixed CUSUM reference.
	- cusum_threshold_fraction: control limit as a fraction of the reference mean.
	"""

	moving_average_window: int = Field(7, ge=1)
	moving_average_min_deviation: float = Field(0.3, ge=0.0)
	moving_average_medium_deviation: float = Field(0.5, ge=0.0)
	cusum_min_points: int = Field(14, ge=2)
	cusum_baseline_window: int = Field(7, ge=1)
	cusum_threshold_fraction: float = Field(0.5, gt=0.0)

	@model_validator(mode="after")
	def _check_cusum_window(self) -> "DetectorSettings":
		if self.cusum_baseline_window >= self.cusum_min_points:
			raise ValueError("cusum_baseline_window must be smaller than cusum_min_points")
		return self


class DetectionConfig(BaseModel):
	"""
	Per-run detection configuration.

	lookback_days is advisory: callers pre-filter rows, the engine does not.
	"""

	metrics: List[str] = Field(
		default_factory=lambda: ["revenue", "dau", "retention_day", "level", "error_type"],
		description="Semantic types to analyze",
	)
	thresholds: AnomalyThresholds = Field(default_factory=AnomalyThresholds)
	lookback_days: int = Field(30, ge=1)
	granularity: Granularity = Granularity.DAY
	detectors: DetectorSettings = Field(default_factory=DetectorSettings)


class Settings(BaseSettings):
	"""
	Global configuration with environment overrides.

	Nested values use a double underscore, e.g.
	METRIC_SENTINEL_DETECTION__GRANULARITY=week.
	"""

	model_config = SettingsConfigDict(
		env_prefix="METRIC_SENTINEL_",
		env_nested_delimiter="__",
		env_file=".env",
		extra="ignore",
	)

	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")
	log_to_file: bool = Field(False, description="Also write rotating log files")
	detection: DetectionConfig = Field(default_factory=DetectionConfig)


config = Settings()
