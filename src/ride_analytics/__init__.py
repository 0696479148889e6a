"""Training science analytics for indoor cycling."""

__version__ = "0.1.0"

from .config import Settings, get_settings
from .exceptions import (
    ErrorCode,
    FittingFailedError,
    InsufficientDataError,
    InvalidDurationRangeError,
    RemotePredictionError,
    RemoteRateLimitError,
    RemoteUnavailableError,
    RideAnalyticsError,
    ValidationError,
)
from .logging_utils import configure_logging

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "configure_logging",
    "ErrorCode",
    "FittingFailedError",
    "InsufficientDataError",
    "InvalidDurationRangeError",
    "RemotePredictionError",
    "RemoteRateLimitError",
    "RemoteUnavailableError",
    "RideAnalyticsError",
    "ValidationError",
]
