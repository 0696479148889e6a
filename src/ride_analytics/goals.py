"""Training goal records consumed by the adaptation and forecast engines."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional


class GoalType(str, Enum):
    # General fitness
    IMPROVE_ENDURANCE = "improve_endurance"
    LOSE_WEIGHT = "lose_weight"
    GET_FASTER = "get_faster"

    # Events (see TrainingGoal.event_type for RACE)
    RACE = "race"
    CENTURY_RIDE = "century_ride"
    GRAN_FONDO = "gran_fondo"
    TIME_TRIAL = "time_trial"

    # Energy systems
    IMPROVE_VO2MAX = "improve_vo2max"
    BUILD_THRESHOLD = "build_threshold"
    DEVELOP_SPRINT = "develop_sprint"

    @property
    def display_name(self) -> str:
        return _GOAL_DISPLAY_NAMES[self]

    @property
    def is_event(self) -> bool:
        return self in (
            GoalType.RACE,
            GoalType.CENTURY_RIDE,
            GoalType.GRAN_FONDO,
            GoalType.TIME_TRIAL,
        )


_GOAL_DISPLAY_NAMES = {
    GoalType.IMPROVE_ENDURANCE: "Improve Endurance",
    GoalType.LOSE_WEIGHT: "Lose Weight",
    GoalType.GET_FASTER: "Get Faster",
    GoalType.RACE: "Race Preparation",
    GoalType.CENTURY_RIDE: "Century Ride",
    GoalType.GRAN_FONDO: "Gran Fondo",
    GoalType.TIME_TRIAL: "Time Trial",
    GoalType.IMPROVE_VO2MAX: "Improve VO2max",
    GoalType.BUILD_THRESHOLD: "Build Threshold",
    GoalType.DEVELOP_SPRINT: "Develop Sprint",
}


class EventType(str, Enum):
    ROAD_RACE = "road_race"
    CRITERIUM = "criterium"
    GRAN_FONDO = "gran_fondo"
    TIME_TRIAL = "time_trial"
    TRIATHLON = "triathlon"
    OTHER = "other"


class GoalStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    ON_HOLD = "on_hold"

    @property
    def is_active(self) -> bool:
        return self == GoalStatus.ACTIVE


class MetricType(str, Enum):
    CTL = "ctl"
    FTP = "ftp"
    VO2MAX = "vo2max"
    WEIGHT = "weight"


@dataclass
class TargetMetric:
    """Numeric target attached to a goal (e.g. CTL 80 by race day)."""

    metric_type: MetricType
    target_value: float
    current_value: Optional[float] = None

    def progress_percent(self) -> Optional[float]:
        if self.current_value is None or self.target_value == 0:
            return None
        return min(self.current_value / self.target_value * 100.0, 100.0)

    def to_dict(self) -> dict:
        return {
            "metric_type": self.metric_type.value,
            "target_value": self.target_value,
            "current_value": self.current_value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TargetMetric":
        return cls(
            metric_type=MetricType(data["metric_type"]),
            target_value=float(data["target_value"]),
            current_value=data.get("current_value"),
        )


@dataclass
class TrainingGoal:
    """A rider's training goal. Storage and CRUD live outside this package."""

    user_id: str
    goal_type: GoalType
    title: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    description: Optional[str] = None
    event_type: Optional[EventType] = None
    target_date: Optional[date] = None
    target_metric: Optional[TargetMetric] = None
    priority: int = 1
    status: GoalStatus = GoalStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def days_until_target(self, today: Optional[date] = None) -> Optional[int]:
        if self.target_date is None:
            return None
        today = today or date.today()
        return (self.target_date - today).days

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "goal_type": self.goal_type.value,
            "title": self.title,
            "description": self.description,
            "event_type": self.event_type.value if self.event_type else None,
            "target_date": self.target_date.isoformat() if self.target_date else None,
            "target_metric": self.target_metric.to_dict() if self.target_metric else None,
            "priority": self.priority,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }
