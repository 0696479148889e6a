"""
Fitness (CTL) forecasting.

Projects CTL forward with a linear trend fitted to recent history, flags
plateaus and detraining risk, and checks readiness for a dated goal.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Sequence

from ..analytics.training_load import LoadHistory
from ..exceptions import InsufficientDataError
from ..goals import TrainingGoal
from ..utils import linear_slope
from .client import RemotePredictionClient, request_or_none
from .types import PredictionSource

logger = logging.getLogger(__name__)

MIN_HISTORY_DAYS = 28
TREND_WINDOW_DAYS = 30
DETRAINING_WINDOW_DAYS = 14
PLATEAU_MIN_DAYS = 14

# Slope threshold (CTL/day) separating trends from noise
TREND_THRESHOLD = 0.5
UNCERTAINTY_PER_WEEK = 0.1
MAX_REQUIRED_INCREASE_PERCENT = 30.0


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"

    @classmethod
    def from_slope(cls, slope: float) -> "TrendDirection":
        if slope > TREND_THRESHOLD:
            return cls.IMPROVING
        elif slope < -TREND_THRESHOLD:
            return cls.DECLINING
        return cls.STABLE


class DetrainingRisk(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def description(self) -> str:
        return _RISK_DESCRIPTIONS[self]


_RISK_DESCRIPTIONS = {
    DetrainingRisk.NONE: "Training frequency is good",
    DetrainingRisk.LOW: "Minor fitness loss possible without increased training",
    DetrainingRisk.MEDIUM: "Fitness loss expected if training pattern continues",
    DetrainingRisk.HIGH: "Significant fitness loss imminent - increase training",
}


@dataclass(frozen=True)
class ProjectedCtl:
    date: date
    projected_ctl: float
    confidence_low: float
    confidence_high: float

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "projected_ctl": round(self.projected_ctl, 1),
            "confidence_low": round(self.confidence_low, 1),
            "confidence_high": round(self.confidence_high, 1),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectedCtl":
        return cls(
            date=date.fromisoformat(data["date"]),
            projected_ctl=float(data["projected_ctl"]),
            confidence_low=float(data["confidence_low"]),
            confidence_high=float(data["confidence_high"]),
        )


@dataclass(frozen=True)
class EventReadiness:
    """Projected fitness at a goal's target date versus the goal's target."""

    goal_id: str
    target_ctl: float
    projected_ctl_at_event: float
    gap: float  # negative = behind target
    on_track: bool
    recommendation: str
    # Weekly TSS increase needed to close the gap; None when on track
    required_increase_percent: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "goal_id": self.goal_id,
            "target_ctl": round(self.target_ctl, 1),
            "projected_ctl_at_event": round(self.projected_ctl_at_event, 1),
            "gap": round(self.gap, 1),
            "on_track": self.on_track,
            "recommendation": self.recommendation,
            "required_increase_percent": (
                round(self.required_increase_percent, 1)
                if self.required_increase_percent is not None
                else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EventReadiness":
        return cls(
            goal_id=str(data["goal_id"]),
            target_ctl=float(data["target_ctl"]),
            projected_ctl_at_event=float(data["projected_ctl_at_event"]),
            gap=float(data["gap"]),
            on_track=bool(data["on_track"]),
            recommendation=str(data.get("recommendation", "")),
            required_increase_percent=(
                float(data["required_increase_percent"])
                if data.get("required_increase_percent") is not None
                else None
            ),
        )


@dataclass(frozen=True)
class PerformanceProjection:
    """CTL forecast. Never mutated after construction."""

    user_id: str
    forecast_weeks: int
    data_points: List[ProjectedCtl]
    trend: TrendDirection
    slope: float  # CTL per day
    plateau_detected: bool
    detraining_risk: DetrainingRisk
    event_readiness: Optional[EventReadiness]
    source: PredictionSource
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    projected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "projected_at": self.projected_at.isoformat(),
            "forecast_weeks": self.forecast_weeks,
            "data_points": [p.to_dict() for p in self.data_points],
            "trend": self.trend.value,
            "slope": round(self.slope, 3),
            "plateau_detected": self.plateau_detected,
            "detraining_risk": self.detraining_risk.value,
            "event_readiness": self.event_readiness.to_dict() if self.event_readiness else None,
            "source": self.source.value,
        }

    @classmethod
    def from_dict(cls, data: dict, source: PredictionSource = PredictionSource.REMOTE) -> "PerformanceProjection":
        """Build from a serialized projection (e.g. a remote response)."""
        readiness = data.get("event_readiness")
        kwargs = {}
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        return cls(
            user_id=str(data["user_id"]),
            forecast_weeks=int(data["forecast_weeks"]),
            data_points=[ProjectedCtl.from_dict(p) for p in data.get("data_points", [])],
            trend=TrendDirection(data["trend"]),
            slope=float(data["slope"]),
            plateau_detected=bool(data.get("plateau_detected", False)),
            detraining_risk=DetrainingRisk(data["detraining_risk"]),
            event_readiness=EventReadiness.from_dict(readiness) if readiness else None,
            source=source,
            **kwargs,
        )


def _ctl_slope(entries: Sequence[tuple]) -> float:
    return linear_slope([load.ctl for _, load in entries])


class PerformanceForecaster:
    """
    Forecasts CTL from daily load history.

    Tries the remote prediction service first when a client is configured
    and falls back to the local trend model on any remote failure.
    """

    def __init__(self, client: Optional[RemotePredictionClient] = None):
        self.client = client

    async def forecast(
        self,
        user_id: str,
        history: LoadHistory,
        forecast_weeks: int,
        target_event: Optional[TrainingGoal] = None,
        today: Optional[date] = None,
    ) -> PerformanceProjection:
        """
        Forecast CTL for the coming weeks.

        Raises:
            InsufficientDataError: Less than four weeks of history
        """
        if len(history) < MIN_HISTORY_DAYS:
            raise InsufficientDataError(
                count=len(history),
                required=MIN_HISTORY_DAYS,
                message="At least 4 weeks of training data required",
                guidance="Continue training consistently to build enough history for forecasting.",
            )

        payload = {
            "user_id": user_id,
            "history": [{"date": d.isoformat(), **load.to_dict()} for d, load in history],
            "forecast_weeks": forecast_weeks,
            "target_event": target_event.to_dict() if target_event else None,
        }
        remote = await request_or_none(
            self.client, "/performance/forecast", payload, PerformanceProjection.from_dict
        )
        if remote is not None:
            return remote

        return self.forecast_local(user_id, history, forecast_weeks, target_event, today)

    def forecast_local(
        self,
        user_id: str,
        history: LoadHistory,
        forecast_weeks: int,
        target_event: Optional[TrainingGoal] = None,
        today: Optional[date] = None,
    ) -> PerformanceProjection:
        """Forecast using the local linear trend model only."""
        today = today or date.today()

        recent = history[-TREND_WINDOW_DAYS:]
        slope = _ctl_slope(recent)
        current_ctl = history[-1][1].ctl if history else 0.0

        data_points = []
        for week in range(1, forecast_weeks + 1):
            days_ahead = week * 7
            projected = max(current_ctl + slope * days_ahead, 0.0)
            # Band widens 10% of the projection per week of horizon
            uncertainty = UNCERTAINTY_PER_WEEK * week
            data_points.append(
                ProjectedCtl(
                    date=today + timedelta(days=days_ahead),
                    projected_ctl=projected,
                    confidence_low=max(projected * (1.0 - uncertainty), 0.0),
                    confidence_high=projected * (1.0 + uncertainty),
                )
            )

        event_readiness = None
        if target_event is not None and target_event.target_date is not None:
            event_readiness = self._event_readiness(target_event, current_ctl, slope, today)

        projection = PerformanceProjection(
            user_id=user_id,
            forecast_weeks=forecast_weeks,
            data_points=data_points,
            trend=TrendDirection.from_slope(slope),
            slope=slope,
            plateau_detected=self.detect_plateau(recent),
            detraining_risk=self.assess_detraining_risk(history, today),
            event_readiness=event_readiness,
            source=PredictionSource.LOCAL_FALLBACK,
        )
        logger.debug(
            f"Local CTL forecast for {user_id}: slope={slope:.3f}/day "
            f"trend={projection.trend.value} risk={projection.detraining_risk.value}"
        )
        return projection

    def detect_plateau(self, recent_history: LoadHistory) -> bool:
        """
        Flat CTL despite regular training.

        Needs two weeks of data; at least half the days must carry real
        training (TSS > 20).
        """
        if len(recent_history) < PLATEAU_MIN_DAYS:
            return False

        slope = _ctl_slope(recent_history)
        training_days = sum(1 for _, load in recent_history if load.tss > 20.0)
        return abs(slope) < TREND_THRESHOLD and training_days >= len(recent_history) // 2

    def assess_detraining_risk(
        self,
        history: LoadHistory,
        today: Optional[date] = None,
    ) -> DetrainingRisk:
        """Staged lookup over recent training frequency and the 14-day CTL slope."""
        if not history:
            return DetrainingRisk.HIGH

        today = today or date.today()
        training_days = sum(
            1 for d, load in history
            if abs((d - today).days) <= 7 and load.tss > 30.0
        )
        recent_trend = _ctl_slope(history[-DETRAINING_WINDOW_DAYS:])

        if training_days == 0 or recent_trend < -1.0:
            return DetrainingRisk.HIGH
        elif training_days <= 2 or recent_trend < -0.5:
            return DetrainingRisk.MEDIUM
        elif training_days <= 3 or recent_trend < 0.0:
            return DetrainingRisk.LOW
        return DetrainingRisk.NONE

    def _event_readiness(
        self,
        goal: TrainingGoal,
        current_ctl: float,
        slope: float,
        today: date,
    ) -> EventReadiness:
        days_to_event = (goal.target_date - today).days
        projected_at_event = current_ctl + slope * days_to_event

        if goal.target_metric is not None:
            target_ctl = goal.target_metric.target_value
        else:
            target_ctl = current_ctl * 1.1

        gap = projected_at_event - target_ctl
        on_track = gap >= 0

        percent: Optional[float] = None
        if on_track:
            recommendation = "You're on track to meet your target fitness!"
        else:
            weeks_to_event = days_to_event / 7.0
            if weeks_to_event > 0 and current_ctl > 0:
                weekly_increase = -gap / weeks_to_event
                percent = min(abs(weekly_increase / current_ctl * 100.0), MAX_REQUIRED_INCREASE_PERCENT)
            else:
                # No time left or no base to scale from
                percent = MAX_REQUIRED_INCREASE_PERCENT
            recommendation = f"Increase weekly TSS by {percent:.0f}% to reach your target"

        return EventReadiness(
            goal_id=goal.id,
            target_ctl=target_ctl,
            projected_ctl_at_event=projected_at_event,
            gap=gap,
            on_track=on_track,
            recommendation=recommendation,
            required_increase_percent=percent,
        )
