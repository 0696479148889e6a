"""VO2max estimation from cycling power."""

from dataclasses import dataclass
from enum import Enum

from ..exceptions import ValidationError


class FitnessLevel(str, Enum):
    UNTRAINED = "untrained"
    RECREATIONAL = "recreational"
    TRAINED = "trained"
    WELL_TRAINED = "well_trained"
    ELITE = "elite"
    WORLD_CLASS = "world_class"

    @classmethod
    def from_vo2max(cls, vo2max: float) -> "FitnessLevel":
        """Classify a VO2max value (ml/kg/min)."""
        if vo2max < 35.0:
            return cls.UNTRAINED
        elif vo2max < 45.0:
            return cls.RECREATIONAL
        elif vo2max < 55.0:
            return cls.TRAINED
        elif vo2max < 65.0:
            return cls.WELL_TRAINED
        elif vo2max < 75.0:
            return cls.ELITE
        return cls.WORLD_CLASS

    @property
    def description(self) -> str:
        return _LEVEL_DESCRIPTIONS[self]


_LEVEL_DESCRIPTIONS = {
    FitnessLevel.UNTRAINED: "Untrained - Consider starting with easy endurance rides",
    FitnessLevel.RECREATIONAL: "Recreational - Good base fitness for cycling",
    FitnessLevel.TRAINED: "Trained - Solid aerobic capacity",
    FitnessLevel.WELL_TRAINED: "Well-trained - Competitive amateur level",
    FitnessLevel.ELITE: "Elite - Professional or high-level amateur",
    FitnessLevel.WORLD_CLASS: "World-class - Top-tier athletic capacity",
}


class Vo2maxMethod(str, Enum):
    FIVE_MINUTE_POWER = "five_minute_power"
    FTP_BASED = "ftp_based"
    CRITICAL_POWER_BASED = "critical_power_based"


@dataclass(frozen=True)
class Vo2maxResult:
    vo2max: float  # ml/kg/min
    classification: FitnessLevel
    method: Vo2maxMethod

    def to_dict(self) -> dict:
        return {
            "vo2max": round(self.vo2max, 1),
            "classification": self.classification.value,
            "description": self.classification.description,
            "method": self.method.value,
        }


class Vo2maxCalculator:
    """
    Estimates VO2max from power-to-weight.

    - 5 minute power: 10.8 * W/kg + 7 (ACSM cycling equation)
    - FTP: 12 * W/kg + 3.5
    - CP: 12.5 * W/kg + 2
    """

    def __init__(self, weight_kg: float):
        if weight_kg <= 0:
            raise ValidationError("Weight must be positive", field="weight_kg")
        self.weight_kg = weight_kg

    def _result(self, vo2max: float, method: Vo2maxMethod) -> Vo2maxResult:
        return Vo2maxResult(
            vo2max=vo2max,
            classification=FitnessLevel.from_vo2max(vo2max),
            method=method,
        )

    def from_five_minute_power(self, power_5min: int) -> Vo2maxResult:
        return self._result(
            10.8 * power_5min / self.weight_kg + 7.0,
            Vo2maxMethod.FIVE_MINUTE_POWER,
        )

    def from_ftp(self, ftp: int) -> Vo2maxResult:
        return self._result(12.0 * ftp / self.weight_kg + 3.5, Vo2maxMethod.FTP_BASED)

    def from_critical_power(self, cp: int) -> Vo2maxResult:
        return self._result(12.5 * cp / self.weight_kg + 2.0, Vo2maxMethod.CRITICAL_POWER_BASED)
