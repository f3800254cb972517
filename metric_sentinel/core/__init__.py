"""
Core module: Configuration, logging, and exception handling.
"""

from .config import (
    AnomalyThresholds,
    DetectionConfig,
    DetectorSettings,
    Granularity,
    Settings,
    config,
)
from .exceptions import (
    AnomalyDetectionError,
    ConfigurationError,
    DataValidationError,
)
from .logging_config import setup_logging

__all__ = [
    "Settings",
    "config",
    "AnomalyThresholds",
    "DetectionConfig",
    "DetectorSettings",
    "Granularity",
    "setup_logging",
    "AnomalyDetectionError",
    "ConfigurationError",
    "DataValidationError",
]
