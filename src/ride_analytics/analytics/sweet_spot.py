"""Next-workout recommendation from current training load."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from ..exceptions import ValidationError
from ..utils import round_half_away
from .training_load import Acwr, AcwrStatus, DailyLoad

logger = logging.getLogger(__name__)

# TSB bands used when load is in the optimal ACWR zone
FRESH_TSB = 10.0
FATIGUED_TSB = -10.0


class IntensityZone(str, Enum):
    RECOVERY = "recovery"
    ENDURANCE = "endurance"
    TEMPO = "tempo"
    SWEET_SPOT = "sweet_spot"
    THRESHOLD = "threshold"
    VO2MAX = "vo2max"
    ANAEROBIC = "anaerobic"

    @property
    def description(self) -> str:
        return _ZONE_DESCRIPTIONS[self]

    @property
    def ftp_range(self) -> str:
        return _FTP_RANGES[self]


_ZONE_DESCRIPTIONS: Dict[IntensityZone, str] = {
    IntensityZone.RECOVERY: "Active recovery to promote blood flow and adaptation",
    IntensityZone.ENDURANCE: "Aerobic base building, fat metabolism, long duration",
    IntensityZone.TEMPO: "Muscular endurance, sustained power improvement",
    IntensityZone.SWEET_SPOT: "High training benefit with manageable fatigue",
    IntensityZone.THRESHOLD: "FTP improvement, lactate tolerance",
    IntensityZone.VO2MAX: "Aerobic capacity improvement, VO2max development",
    IntensityZone.ANAEROBIC: "Anaerobic capacity, short maximal efforts",
}

_FTP_RANGES: Dict[IntensityZone, str] = {
    IntensityZone.RECOVERY: "< 55%",
    IntensityZone.ENDURANCE: "55-75%",
    IntensityZone.TEMPO: "75-87%",
    IntensityZone.SWEET_SPOT: "88-94%",
    IntensityZone.THRESHOLD: "95-105%",
    IntensityZone.VO2MAX: "106-120%",
    IntensityZone.ANAEROBIC: "> 120%",
}

# (low, high) as fractions of FTP; None = open ended
_ZONE_FRACTIONS: Dict[IntensityZone, Tuple[float, Optional[float]]] = {
    IntensityZone.RECOVERY: (0.0, 0.55),
    IntensityZone.ENDURANCE: (0.55, 0.75),
    IntensityZone.TEMPO: (0.75, 0.87),
    IntensityZone.SWEET_SPOT: (0.88, 0.94),
    IntensityZone.THRESHOLD: (0.95, 1.05),
    IntensityZone.VO2MAX: (1.06, 1.20),
    IntensityZone.ANAEROBIC: (1.21, None),
}


@dataclass(frozen=True)
class WorkoutRecommendation:
    zone: IntensityZone
    duration_min: int
    expected_tss: int
    rationale: str
    structure: str

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "zone": self.zone.value,
            "ftp_range": self.zone.ftp_range,
            "duration_min": self.duration_min,
            "expected_tss": self.expected_tss,
            "rationale": self.rationale,
            "structure": self.structure,
        }


class SweetSpotRecommender:
    """
    Picks the next workout from the rider's ACWR zone and form.

    - Undertrained: sweet spot intervals to build load efficiently
    - Optimal: threshold when fresh, sweet spot when balanced, tempo when tired
    - Caution: steady endurance
    - High risk: recovery spin or rest
    """

    def __init__(self, ftp: int):
        if ftp <= 0:
            raise ValidationError("FTP must be positive", field="ftp")
        self.ftp = ftp

    def _watts(self, fraction: float) -> int:
        return round_half_away(self.ftp * fraction)

    def recommend(self, current_load: DailyLoad) -> WorkoutRecommendation:
        """
        Recommend today's workout.

        Args:
            current_load: Latest daily load record

        Returns:
            WorkoutRecommendation with FTP-scaled targets
        """
        acwr = Acwr.from_load(current_load)
        logger.debug(f"Workout recommendation for ACWR {acwr.ratio:.2f} ({acwr.status.value})")

        if acwr.status == AcwrStatus.UNDERTRAINED:
            return self._build()
        if acwr.status == AcwrStatus.OPTIMAL:
            return self._maintain(current_load.tsb)
        if acwr.status == AcwrStatus.CAUTION:
            return self._moderate()
        return self._recovery()

    def _build(self) -> WorkoutRecommendation:
        return WorkoutRecommendation(
            zone=IntensityZone.SWEET_SPOT,
            duration_min=60,
            expected_tss=70,
            rationale=(
                "Training load is low. Sweet spot work builds fitness efficiently "
                "without excessive fatigue."
            ),
            structure=(
                f"Warm-up 10min, 2x20min @ {self._watts(0.91)}W (88-94% FTP) "
                "with 5min recovery, Cool-down 10min"
            ),
        )

    def _maintain(self, tsb: float) -> WorkoutRecommendation:
        if tsb > FRESH_TSB:
            return WorkoutRecommendation(
                zone=IntensityZone.THRESHOLD,
                duration_min=75,
                expected_tss=90,
                rationale="You're fresh with good fitness. Great time for a quality session.",
                structure=(
                    f"Warm-up 15min, 3x10min @ {self.ftp}W (FTP) "
                    "with 5min recovery, Cool-down 10min"
                ),
            )
        if tsb > FATIGUED_TSB:
            return WorkoutRecommendation(
                zone=IntensityZone.SWEET_SPOT,
                duration_min=90,
                expected_tss=85,
                rationale="Training load is optimal. Continue building with sweet spot work.",
                structure=(
                    f"Warm-up 10min, 3x20min @ {self._watts(0.91)}W (88-94% FTP) "
                    "with 5min recovery, Cool-down 10min"
                ),
            )
        return WorkoutRecommendation(
            zone=IntensityZone.TEMPO,
            duration_min=90,
            expected_tss=65,
            rationale="Slight fatigue detected. Tempo work maintains fitness while recovering.",
            structure=(
                f"Warm-up 15min, 60min @ {self._watts(0.80)}W (75-87% FTP), Cool-down 15min"
            ),
        )

    def _moderate(self) -> WorkoutRecommendation:
        return WorkoutRecommendation(
            zone=IntensityZone.ENDURANCE,
            duration_min=60,
            expected_tss=45,
            rationale=(
                "Training load is elevated. Easy endurance ride to maintain fitness "
                "while recovering."
            ),
            structure=f"Steady riding @ {self._watts(0.65)}W (55-75% FTP) for 60min",
        )

    def _recovery(self) -> WorkoutRecommendation:
        return WorkoutRecommendation(
            zone=IntensityZone.RECOVERY,
            duration_min=45,
            expected_tss=25,
            rationale=(
                "Training load spike detected. Recovery ride or rest day recommended "
                "to reduce injury risk."
            ),
            structure=(
                f"Very easy spinning @ {self._watts(0.50)}W (< 55% FTP) "
                "for 30-45min, or complete rest"
            ),
        )

    def zone_power_range(self, zone: IntensityZone) -> Tuple[int, Optional[int]]:
        """Watt range for a zone; the anaerobic zone has no upper bound."""
        low, high = _ZONE_FRACTIONS[zone]
        return self._watts(low), self._watts(high) if high is not None else None
