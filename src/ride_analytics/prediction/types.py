"""Shared types for prediction results."""

from enum import Enum


class PredictionSource(str, Enum):
    """Where a prediction came from."""

    REMOTE = "remote"
    CACHED = "cached"
    LOCAL_FALLBACK = "local_fallback"

    @property
    def may_be_stale(self) -> bool:
        return self != PredictionSource.REMOTE

    @property
    def description(self) -> str:
        return _SOURCE_DESCRIPTIONS[self]


_SOURCE_DESCRIPTIONS = {
    PredictionSource.REMOTE: "Live prediction",
    PredictionSource.CACHED: "Cached prediction",
    PredictionSource.LOCAL_FALLBACK: "Offline calculation",
}


class PredictionType(str, Enum):
    FTP_PREDICTION = "ftp_prediction"
    FATIGUE_STATE = "fatigue_state"
    PERFORMANCE_FORECAST = "performance_forecast"
    DIFFICULTY_ESTIMATE = "difficulty_estimate"
    CADENCE_ANALYSIS = "cadence_analysis"
    ADAPTATION_MODEL = "adaptation_model"

    @property
    def cache_expiry_hours(self) -> int:
        """How long a cached prediction of this type stays usable."""
        return _CACHE_EXPIRY_HOURS[self]


_CACHE_EXPIRY_HOURS = {
    PredictionType.FTP_PREDICTION: 24 * 7,
    PredictionType.FATIGUE_STATE: 24,
    PredictionType.PERFORMANCE_FORECAST: 24,
    PredictionType.DIFFICULTY_ESTIMATE: 1,
    PredictionType.CADENCE_ANALYSIS: 24 * 7,
    PredictionType.ADAPTATION_MODEL: 24 * 7,
}


class Confidence(str, Enum):
    """Generic prediction confidence. Ordered INSUFFICIENT < LOW < MEDIUM < HIGH."""

    INSUFFICIENT = "insufficient"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def as_float(self) -> float:
        return _CONFIDENCE_VALUES[self]

    @classmethod
    def from_float(cls, value: float) -> "Confidence":
        if value < 0.2:
            return cls.INSUFFICIENT
        elif value < 0.5:
            return cls.LOW
        elif value < 0.75:
            return cls.MEDIUM
        return cls.HIGH

    @property
    def label(self) -> str:
        return "Insufficient Data" if self == Confidence.INSUFFICIENT else self.value.title()

    def __lt__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.as_float() < other.as_float()

    def __le__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.as_float() <= other.as_float()

    def __gt__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.as_float() > other.as_float()

    def __ge__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.as_float() >= other.as_float()


_CONFIDENCE_VALUES = {
    Confidence.INSUFFICIENT: 0.0,
    Confidence.LOW: 0.3,
    Confidence.MEDIUM: 0.6,
    Confidence.HIGH: 0.9,
}
