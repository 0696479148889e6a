"""Power curve analytics: PDC, critical power, FTP, rider type, load, VO2max and workouts."""

from .pdc import (
    MmpCalculator,
    PdcBatchProcessor,
    PdcPoint,
    PowerDurationCurve,
    interpolate_sensor_gaps,
)
from .critical_power import CpFitter, CpModel
from .ftp_detection import FtpConfidence, FtpDetector, FtpEstimate, FtpMethod
from .rider_type import PowerProfile, RiderClassifier, RiderType
from .sweet_spot import IntensityZone, SweetSpotRecommender, WorkoutRecommendation
from .training_load import Acwr, AcwrStatus, DailyLoad, LoadHistory, calculate_acwr
from .triggers import AnalyticsTriggers, TriggerResult
from .vo2max import FitnessLevel, Vo2maxCalculator, Vo2maxMethod, Vo2maxResult

__all__ = [
    # Power duration curve
    "MmpCalculator",
    "PdcBatchProcessor",
    "PdcPoint",
    "PowerDurationCurve",
    "interpolate_sensor_gaps",
    # Critical power
    "CpFitter",
    "CpModel",
    # FTP
    "FtpConfidence",
    "FtpDetector",
    "FtpEstimate",
    "FtpMethod",
    # Rider type
    "PowerProfile",
    "RiderClassifier",
    "RiderType",
    # Workout recommendation
    "IntensityZone",
    "SweetSpotRecommender",
    "WorkoutRecommendation",
    # Training load
    "Acwr",
    "AcwrStatus",
    "DailyLoad",
    "LoadHistory",
    "calculate_acwr",
    # Post-ride triggers
    "AnalyticsTriggers",
    "TriggerResult",
    # VO2max
    "FitnessLevel",
    "Vo2maxCalculator",
    "Vo2maxMethod",
    "Vo2maxResult",
]
