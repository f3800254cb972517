"""
Logging setup for the metric_sentinel package.

Module loggers (metric_sentinel.data.*, metric_sentinel.anomaly.*) propagate
to the package logger configured here. Skipped rows and unanalyzed metrics are
logged at DEBUG, metrics that overflow the float range at WARNING, one
summary per detection run at INFO.

Level and file output follow METRIC_SENTINEL_LOG_LEVEL,
METRIC_SENTINEL_LOG_TO_FILE and METRIC_SENTINEL_LOGS_DIR.
"""

import logging
import logging.handlers

from .config import config


def setup_logging(logger_name: str = "metric_sentinel") -> logging.Logger:
    """
    Configure and return a logger instance.

    Args:
        logger_name: Name of the logger (typically the package name)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Don't add handlers if logger already configured
    if logger.handlers:
        return logger

    logger.setLevel(config.log_level)

    # Formatter for consistent output
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(config.log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if not config.log_to_file:
        return logger

    # File handler (size-rotated)
    config.logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = config.logs_dir / f"{logger_name}.log"
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
    )
    file_handler.setLevel(config.log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


# Package root logger; module loggers under metric_sentinel.* propagate here
logger = setup_logging()
