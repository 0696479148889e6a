"""Predictions that try the remote service first and fall back to local rules."""

from .types import Confidence, PredictionSource, PredictionType
from .client import RemotePredictionClient, request_or_none
from .adaptation import (
    AdaptationEngine,
    AdaptationModel,
    AdjustmentDirection,
    IntensityDistribution,
    LoadAdjustment,
    LoadRecommendation,
    ModelConfidence,
    WeeklyPattern,
    WeeklyStructure,
)
from .forecast import (
    DetrainingRisk,
    EventReadiness,
    PerformanceForecaster,
    PerformanceProjection,
    ProjectedCtl,
    TrendDirection,
)
from .ftp_prediction import (
    FtpPredictionResult,
    FtpPredictor,
    RideSummary,
    SupportingEffort,
)

__all__ = [
    "Confidence",
    "PredictionSource",
    "PredictionType",
    "RemotePredictionClient",
    "request_or_none",
    # Adaptation
    "AdaptationEngine",
    "AdaptationModel",
    "AdjustmentDirection",
    "IntensityDistribution",
    "LoadAdjustment",
    "LoadRecommendation",
    "ModelConfidence",
    "WeeklyPattern",
    "WeeklyStructure",
    # Forecast
    "DetrainingRisk",
    "EventReadiness",
    "PerformanceForecaster",
    "PerformanceProjection",
    "ProjectedCtl",
    "TrendDirection",
    # FTP prediction
    "FtpPredictionResult",
    "FtpPredictor",
    "RideSummary",
    "SupportingEffort",
]
