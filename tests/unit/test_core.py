"""
Unit tests for configuration, exceptions and logging setup.
"""

import logging
import logging.handlers

import pytest
from pydantic import ValidationError

from metric_sentinel.core.config import (
    AnomalyThresholds,
    DetectionConfig,
    DetectorSettings,
    Granularity,
    Settings,
    config as active_settings,
)
from metric_sentinel.core.exceptions import (
    AnomalyDetectionError,
    ConfigurationError,
    DataValidationError,
)
from metric_sentinel.core.logging_config import setup_logging


def test_default_thresholds():
    thresholds = AnomalyThresholds()

    assert (
        thresholds.low_std_dev,
        thresholds.medium_std_dev,
        thresholds.high_std_dev,
        thresholds.critical_std_dev,
    ) == (2.0, 2.5, 3.0, 4.0)
    assert thresholds.min_data_points == 7
    assert thresholds.min_percent_change == 20.0


def test_thresholds_must_be_ordered():
    with pytest.raises(ValidationError):
        AnomalyThresholds(high_std_dev=5.0)


def test_detection_defaults():
    detection = DetectionConfig()

    assert detection.metrics == ["revenue", "dau", "retention_day", "level", "error_type"]
    assert detection.granularity is Granularity.DAY
    assert detection.lookback_days == 30
    assert detection.detectors.moving_average_window == 7
    assert detection.detectors.cusum_min_points == 14


def test_cusum_window_smaller_than_min_points():
    with pytest.raises(ValidationError):
        DetectorSettings(cusum_baseline_window=14, cusum_min_points=14)


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("METRIC_SENTINEL_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("METRIC_SENTINEL_DETECTION__GRANULARITY", "week")

    settings = Settings()

    assert settings.log_level == "DEBUG"
    assert settings.detection.granularity is Granularity.WEEK


def test_exception_hierarchy():
    assert issubclass(DataValidationError, AnomalyDetectionError)
    assert issubclass(ConfigurationError, AnomalyDetectionError)


def test_setup_logging_console_only():
    logger = setup_logging("metric_sentinel.test_console")

    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)
    # a second call does not stack handlers
    assert setup_logging("metric_sentinel.test_console").handlers == logger.handlers


def test_setup_logging_rotating_file(monkeypatch, tmp_path):
    monkeypatch.setattr(active_settings, "log_to_file", True)
    monkeypatch.setattr(active_settings, "logs_dir", tmp_path / "logs")

    logger = setup_logging("metric_sentinel.test_file")

    try:
        file_handlers = [
            h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert (tmp_path / "logs").is_dir()
    finally:
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
