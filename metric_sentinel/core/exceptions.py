"""
Errors raised by metric_sentinel.

Bad cell values (unparsable timestamps, non-numeric metrics, overflowing
series) only reduce detection output. Exceptions are reserved for a caller
handing over the wrong shape of input or an invalid threshold update.
"""


class AnomalyDetectionError(Exception):
    """Base class; catch this to handle any metric_sentinel error."""
    pass


class DataValidationError(AnomalyDetectionError):
    """Row batch is not a sequence of mappings, or a column meaning is malformed."""
    pass


class ConfigurationError(AnomalyDetectionError):
    """A threshold update would leave the detector in an invalid state."""
    pass
