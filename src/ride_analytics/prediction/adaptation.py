"""
Adaptive weekly training load recommendations.

Decisions are driven by the Acute:Chronic Workload Ratio (ACWR):
- > 1.5: cut load 20% (fatigue risk)
- > 1.3: cut load 10%
- < 0.8 with a light recent week: build 15%
- otherwise: maintain
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Sequence

from ..analytics.training_load import LoadHistory, calculate_acwr
from ..exceptions import InsufficientDataError
from ..goals import GoalType, TrainingGoal
from .client import RemotePredictionClient, request_or_none
from .types import PredictionSource

logger = logging.getLogger(__name__)

MIN_HISTORY_DAYS = 14
MIN_MODEL_UPDATE_DAYS = 28

# A "training day" for consistency scoring
TRAINING_DAY_TSS = 20.0
EXPECTED_TRAINING_DAYS_PER_4_WEEKS = 20


@dataclass(frozen=True)
class IntensityDistribution:
    """Fraction of training time per intensity band."""

    low_intensity: float = 0.75  # Zone 1-2
    moderate_intensity: float = 0.10  # Zone 3
    high_intensity: float = 0.15  # Zone 4-5

    @classmethod
    def polarized(cls) -> "IntensityDistribution":
        return cls(0.80, 0.05, 0.15)

    @classmethod
    def pyramidal(cls) -> "IntensityDistribution":
        return cls(0.70, 0.20, 0.10)

    @classmethod
    def threshold_focused(cls) -> "IntensityDistribution":
        return cls(0.65, 0.25, 0.10)

    def to_dict(self) -> dict:
        return {
            "low_intensity": self.low_intensity,
            "moderate_intensity": self.moderate_intensity,
            "high_intensity": self.high_intensity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "IntensityDistribution":
        return cls(
            low_intensity=float(data["low_intensity"]),
            moderate_intensity=float(data["moderate_intensity"]),
            high_intensity=float(data["high_intensity"]),
        )


class WeeklyPattern(str, Enum):
    STANDARD = "standard"
    BLOCK = "block"
    RECOVERY = "recovery"
    BUILD = "build"

    @property
    def label(self) -> str:
        return _PATTERN_LABELS[self]

    @property
    def day_counts(self) -> tuple:
        """(training_days, hard_sessions, rest_days)"""
        return _PATTERN_DAYS[self]


_PATTERN_LABELS = {
    WeeklyPattern.STANDARD: "Standard",
    WeeklyPattern.BLOCK: "Block Training",
    WeeklyPattern.RECOVERY: "Recovery Week",
    WeeklyPattern.BUILD: "Build Week",
}

_PATTERN_DAYS = {
    WeeklyPattern.STANDARD: (5, 2, 2),
    WeeklyPattern.BLOCK: (6, 3, 1),
    WeeklyPattern.RECOVERY: (4, 1, 3),
    WeeklyPattern.BUILD: (5, 2, 2),
}


@dataclass(frozen=True)
class WeeklyStructure:
    training_days: int = 5
    hard_sessions: int = 2
    rest_days: int = 2
    long_ride_day: Optional[str] = "Saturday"
    pattern: WeeklyPattern = WeeklyPattern.STANDARD

    @classmethod
    def for_pattern(cls, pattern: WeeklyPattern) -> "WeeklyStructure":
        training_days, hard_sessions, rest_days = pattern.day_counts
        return cls(training_days, hard_sessions, rest_days, "Saturday", pattern)

    def to_dict(self) -> dict:
        return {
            "training_days": self.training_days,
            "hard_sessions": self.hard_sessions,
            "rest_days": self.rest_days,
            "long_ride_day": self.long_ride_day,
            "pattern": self.pattern.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WeeklyStructure":
        return cls(
            training_days=int(data["training_days"]),
            hard_sessions=int(data["hard_sessions"]),
            rest_days=int(data["rest_days"]),
            long_ride_day=data.get("long_ride_day"),
            pattern=WeeklyPattern(data["pattern"]),
        )


class AdjustmentDirection(str, Enum):
    INCREASE = "increase"
    MAINTAIN = "maintain"
    DECREASE = "decrease"


@dataclass(frozen=True)
class LoadAdjustment:
    direction: AdjustmentDirection
    percentage: float
    reason: str

    def to_dict(self) -> dict:
        return {
            "direction": self.direction.value,
            "percentage": self.percentage,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LoadAdjustment":
        return cls(
            direction=AdjustmentDirection(data["direction"]),
            percentage=float(data["percentage"]),
            reason=str(data.get("reason", "")),
        )


@dataclass(frozen=True)
class ModelConfidence:
    """Recommendation confidence, stored as a whole percentage (0-100)."""

    level: int = 50

    @classmethod
    def from_score(cls, score: float) -> "ModelConfidence":
        # round() strips float noise (0.61 * 100 == 60.99...) before truncating
        return cls(int(round(min(max(score * 100.0, 0.0), 100.0), 6)))

    @property
    def score(self) -> float:
        return self.level / 100.0

    @property
    def label(self) -> str:
        if self.score >= 0.8:
            return "High"
        elif self.score >= 0.5:
            return "Moderate"
        return "Low"


@dataclass
class AdaptationModel:
    """Per-athlete parameters that evolve with training response."""

    user_id: str
    recovery_rate: float = 1.5  # days to recover from 100 TSS
    optimal_weekly_tss: float = 400.0
    preferred_distribution: IntensityDistribution = field(default_factory=IntensityDistribution)
    high_intensity_tolerance: float = 0.5
    volume_tolerance: float = 0.5
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def default_for_user(cls, user_id: str) -> "AdaptationModel":
        return cls(user_id=user_id)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "user_id": self.user_id,
            "recovery_rate": self.recovery_rate,
            "optimal_weekly_tss": self.optimal_weekly_tss,
            "preferred_distribution": self.preferred_distribution.to_dict(),
            "high_intensity_tolerance": self.high_intensity_tolerance,
            "volume_tolerance": self.volume_tolerance,
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class LoadRecommendation:
    """Weekly load recommendation. Never mutated after construction."""

    user_id: str
    recommended_tss: float
    intensity_distribution: IntensityDistribution
    weekly_structure: WeeklyStructure
    adjustment: LoadAdjustment
    rationale: str
    confidence: ModelConfidence
    source: PredictionSource
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "recommended_tss": round(self.recommended_tss, 1),
            "intensity_distribution": self.intensity_distribution.to_dict(),
            "weekly_structure": self.weekly_structure.to_dict(),
            "adjustment": self.adjustment.to_dict(),
            "rationale": self.rationale,
            "confidence": self.confidence.score,
            "confidence_label": self.confidence.label,
            "source": self.source.value,
            "generated_at": self.generated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict, source: PredictionSource = PredictionSource.REMOTE) -> "LoadRecommendation":
        """Build from a serialized recommendation (e.g. a remote response)."""
        kwargs = {}
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        return cls(
            user_id=str(data["user_id"]),
            recommended_tss=float(data["recommended_tss"]),
            intensity_distribution=IntensityDistribution.from_dict(data["intensity_distribution"]),
            weekly_structure=WeeklyStructure.from_dict(data["weekly_structure"]),
            adjustment=LoadAdjustment.from_dict(data["adjustment"]),
            rationale=str(data.get("rationale", "")),
            confidence=ModelConfidence.from_score(float(data.get("confidence", 0.5))),
            source=source,
            **kwargs,
        )


def _active(goals: Sequence[TrainingGoal]) -> List[TrainingGoal]:
    return [g for g in goals if g.status.is_active]


class AdaptationEngine:
    """
    Recommends next week's training load from recent load history.

    Tries the remote prediction service first when a client is configured
    and falls back to the local rules on any remote failure.
    """

    def __init__(self, client: Optional[RemotePredictionClient] = None):
        self.client = client

    async def recommend(
        self,
        user_id: str,
        history: LoadHistory,
        model: AdaptationModel,
        goals: Sequence[TrainingGoal] = (),
        today: Optional[date] = None,
    ) -> LoadRecommendation:
        """
        Generate a load recommendation.

        Raises:
            InsufficientDataError: Less than two weeks of history
        """
        if len(history) < MIN_HISTORY_DAYS:
            raise InsufficientDataError(
                count=len(history),
                required=MIN_HISTORY_DAYS,
                message="At least 2 weeks of training data required",
                guidance=(
                    "Continue training consistently to build enough history "
                    "for adaptation recommendations."
                ),
            )

        payload = {
            "user_id": user_id,
            "history": [{"date": d.isoformat(), **load.to_dict()} for d, load in history],
            "model": model.to_dict(),
            "goals": [g.to_dict() for g in _active(goals)],
        }
        remote = await request_or_none(
            self.client, "/adaptation/recommend", payload, LoadRecommendation.from_dict
        )
        if remote is not None:
            return remote

        return self.recommend_local(user_id, history, model, goals, today)

    def recommend_local(
        self,
        user_id: str,
        history: LoadHistory,
        model: AdaptationModel,
        goals: Sequence[TrainingGoal] = (),
        today: Optional[date] = None,
    ) -> LoadRecommendation:
        """Generate a recommendation with the local rules only."""
        today = today or date.today()
        active_goals = _active(goals)

        recent_weekly_tss = self._recent_weekly_tss(history, today)
        if history:
            latest = history[-1][1]
            acwr = calculate_acwr(latest.atl, latest.ctl)
        else:
            acwr = 1.0

        adjustment = self._calculate_adjustment(acwr, recent_weekly_tss, model)

        recommendation = LoadRecommendation(
            user_id=user_id,
            recommended_tss=self._recommended_tss(adjustment, recent_weekly_tss, model),
            intensity_distribution=self._determine_distribution(active_goals, model),
            weekly_structure=self._determine_weekly_structure(acwr, adjustment),
            adjustment=adjustment,
            rationale=self._generate_rationale(adjustment, acwr, active_goals),
            confidence=self._calculate_confidence(history, today),
            source=PredictionSource.LOCAL_FALLBACK,
        )
        logger.debug(
            f"Local load recommendation for {user_id}: acwr={acwr:.2f} "
            f"{adjustment.direction.value} {adjustment.percentage:.0f}%"
        )
        return recommendation

    def update_model(
        self,
        model: AdaptationModel,
        history: LoadHistory,
        performance_change: float,
        today: Optional[date] = None,
    ) -> AdaptationModel:
        """
        Return a model adjusted to the athlete's recent response.

        Positive performance change pulls ``optimal_weekly_tss`` 10% toward
        the recent weekly load; a drop worse than -5% decays it by 5%.
        Needs four weeks of history, otherwise the model is returned as is.
        """
        if len(history) < MIN_MODEL_UPDATE_DAYS:
            return model

        recent_tss = self._recent_weekly_tss(history, today or date.today())
        optimal = model.optimal_weekly_tss

        if performance_change > 0:
            optimal = optimal * 0.9 + recent_tss * 0.1
        elif performance_change < -0.05:
            optimal *= 0.95

        return replace(
            model,
            optimal_weekly_tss=optimal,
            updated_at=datetime.now(timezone.utc),
        )

    def _recent_weekly_tss(self, history: LoadHistory, today: date) -> float:
        week_ago = today - timedelta(days=7)
        return sum(load.tss for d, load in history if week_ago < d <= today)

    def _calculate_adjustment(
        self,
        acwr: float,
        recent_weekly_tss: float,
        model: AdaptationModel,
    ) -> LoadAdjustment:
        if acwr > 1.5:
            return LoadAdjustment(
                AdjustmentDirection.DECREASE,
                20.0,
                "High acute:chronic workload ratio indicates fatigue risk",
            )
        if acwr > 1.3:
            return LoadAdjustment(
                AdjustmentDirection.DECREASE,
                10.0,
                "Elevated training load - small reduction recommended",
            )
        if acwr < 0.8 and recent_weekly_tss < model.optimal_weekly_tss * 0.7:
            return LoadAdjustment(
                AdjustmentDirection.INCREASE,
                15.0,
                "Training load is low - gradual increase recommended",
            )
        if 0.8 <= acwr <= 1.3:
            return LoadAdjustment(
                AdjustmentDirection.MAINTAIN,
                0.0,
                "Training load is in the optimal range",
            )
        return LoadAdjustment(
            AdjustmentDirection.MAINTAIN,
            0.0,
            "Current training pattern is appropriate",
        )

    def _recommended_tss(
        self,
        adjustment: LoadAdjustment,
        recent_weekly_tss: float,
        model: AdaptationModel,
    ) -> float:
        base_tss = recent_weekly_tss if recent_weekly_tss > 0 else model.optimal_weekly_tss

        if adjustment.direction == AdjustmentDirection.INCREASE:
            return base_tss * (1.0 + adjustment.percentage / 100.0)
        if adjustment.direction == AdjustmentDirection.DECREASE:
            return base_tss * (1.0 - adjustment.percentage / 100.0)
        return base_tss

    def _determine_distribution(
        self,
        goals: Sequence[TrainingGoal],
        model: AdaptationModel,
    ) -> IntensityDistribution:
        for goal in goals:
            if goal.goal_type == GoalType.IMPROVE_VO2MAX:
                return IntensityDistribution.polarized()
            if goal.goal_type == GoalType.IMPROVE_ENDURANCE:
                return IntensityDistribution.pyramidal()
            if goal.goal_type == GoalType.BUILD_THRESHOLD:
                return IntensityDistribution.threshold_focused()
        return model.preferred_distribution

    def _determine_weekly_structure(
        self,
        acwr: float,
        adjustment: LoadAdjustment,
    ) -> WeeklyStructure:
        if acwr > 1.3:
            pattern = WeeklyPattern.RECOVERY
        elif adjustment.direction == AdjustmentDirection.INCREASE:
            pattern = WeeklyPattern.BUILD
        else:
            pattern = WeeklyPattern.STANDARD
        return WeeklyStructure.for_pattern(pattern)

    def _calculate_confidence(self, history: LoadHistory, today: date) -> ModelConfidence:
        # Data volume saturates at 90 days
        data_factor = min(len(history) / 90.0, 1.0)
        consistency_factor = self._consistency_factor(history, today)
        return ModelConfidence.from_score(data_factor * 0.5 + consistency_factor * 0.5)

    def _consistency_factor(self, history: LoadHistory, today: date) -> float:
        if len(history) < 7:
            return 0.5

        four_weeks_ago = today - timedelta(days=28)
        training_days = sum(
            1 for d, load in history
            if four_weeks_ago < d <= today and load.tss > TRAINING_DAY_TSS
        )
        return min(training_days / EXPECTED_TRAINING_DAYS_PER_4_WEEKS, 1.0)

    def _generate_rationale(
        self,
        adjustment: LoadAdjustment,
        acwr: float,
        goals: Sequence[TrainingGoal],
    ) -> str:
        if acwr > 1.3:
            state = "elevated"
        elif acwr < 0.8:
            state = "low"
        else:
            state = "in the optimal range"

        parts = [f"Current ACWR is {acwr:.2f}, which is {state}.", adjustment.reason]

        if goals:
            plural = "s" if len(goals) > 1 else ""
            titles = ", ".join(g.title for g in goals)
            parts.append(f"Training aligned with goal{plural}: {titles}.")

        return " ".join(parts)
