"""
Custom exceptions for the ride analytics engine.

Failures are typed so callers can branch on them without parsing
messages. Each exception includes:
- A descriptive message
- An error code for serialized responses
- Optional details (counts, thresholds, user guidance)
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes for consistent error payloads."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Modelling errors
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    INVALID_DURATION_RANGE = "INVALID_DURATION_RANGE"
    FITTING_FAILED = "FITTING_FAILED"

    # Remote prediction errors
    REMOTE_API_ERROR = "REMOTE_API_ERROR"
    REMOTE_UNAVAILABLE = "REMOTE_UNAVAILABLE"
    REMOTE_RATE_LIMITED = "REMOTE_RATE_LIMITED"


class RideAnalyticsError(Exception):
    """
    Base exception for all ride analytics errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Validation Errors
# ============================================================================

class ValidationError(RideAnalyticsError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            details=error_details,
        )


# ============================================================================
# Modelling Errors
# ============================================================================

class InsufficientDataError(RideAnalyticsError):
    """
    Raised when fewer than the minimum required points/days are available.

    ``count`` is what was supplied; ``guidance`` tells the rider how to
    collect enough data (used by the prediction layer).
    """

    def __init__(
        self,
        count: int,
        required: Optional[int] = None,
        message: Optional[str] = None,
        guidance: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.count = count
        self.required = required
        self.guidance = guidance
        if message is None:
            if required is not None:
                message = f"Insufficient data (need at least {required}, got {count})"
            else:
                message = f"Insufficient data (got {count})"
        error_details = details or {}
        error_details["count"] = count
        if required is not None:
            error_details["required"] = required
        if guidance:
            error_details["guidance"] = guidance
        super().__init__(
            message=message,
            code=ErrorCode.INSUFFICIENT_DATA,
            details=error_details,
        )

    def __str__(self) -> str:
        if self.guidance:
            return f"{self.message}. {self.guidance}"
        return self.message


class InvalidDurationRangeError(RideAnalyticsError):
    """Raised when no PDC point falls inside the fitting window."""

    def __init__(
        self,
        min_duration: int,
        max_duration: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.min_duration = min_duration
        self.max_duration = max_duration
        error_details = details or {}
        error_details["min_duration_secs"] = min_duration
        error_details["max_duration_secs"] = max_duration
        super().__init__(
            message=(
                f"Invalid duration range (need efforts between "
                f"{min_duration}s and {max_duration}s)"
            ),
            code=ErrorCode.INVALID_DURATION_RANGE,
            details=error_details,
        )


class FittingFailedError(RideAnalyticsError):
    """Raised when a regression is numerically degenerate or non-physical."""

    def __init__(
        self,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.reason = reason
        super().__init__(
            message=f"Model fitting failed: {reason}",
            code=ErrorCode.FITTING_FAILED,
            details=details,
        )


# ============================================================================
# Remote Prediction Errors
# ============================================================================

class RemotePredictionError(RideAnalyticsError):
    """Base class for remote prediction service failures."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.REMOTE_API_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class RemoteUnavailableError(RemotePredictionError):
    """Raised when the remote service cannot be reached."""

    def __init__(
        self,
        message: str = "Remote prediction service is unavailable",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.REMOTE_UNAVAILABLE,
            details=details,
        )


class RemoteRateLimitError(RemotePredictionError):
    """Raised when the remote service rate limits the client."""

    def __init__(
        self,
        retry_after: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.retry_after = retry_after
        error_details = details or {}
        if retry_after:
            error_details["retry_after_seconds"] = retry_after
        super().__init__(
            message="Remote prediction rate limit exceeded. Please try again later.",
            code=ErrorCode.REMOTE_RATE_LIMITED,
            details=error_details,
        )
