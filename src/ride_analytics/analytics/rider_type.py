"""Rider type classification from a normalized power profile."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict

from .pdc import PowerDurationCurve

# Typical %FTP values used to score profile strengths
TYPICAL_NEUROMUSCULAR = 170.0
TYPICAL_ANAEROBIC = 120.0
TYPICAL_VO2MAX = 100.0


@dataclass
class PowerProfile:
    """
    Best powers at key durations as a percentage of FTP.

    - neuromuscular: 5 second power
    - anaerobic: 1 minute power
    - vo2max: 5 minute power
    - threshold: FTP itself (always 100 when FTP is known)
    """

    neuromuscular: float = 0.0
    anaerobic: float = 0.0
    vo2max: float = 0.0
    threshold: float = 0.0

    def _scores(self) -> Dict[str, float]:
        return {
            "Neuromuscular (5s)": self.neuromuscular / TYPICAL_NEUROMUSCULAR,
            "Anaerobic (1min)": self.anaerobic / TYPICAL_ANAEROBIC,
            "VO2max (5min)": self.vo2max / TYPICAL_VO2MAX,
        }

    def strongest_area(self) -> str:
        """Area furthest above its typical ratio; Threshold if none is positive."""
        best_name, best_score = "Threshold", 0.0
        for name, score in self._scores().items():
            if score > best_score:
                best_name, best_score = name, score
        return best_name

    def weakest_area(self) -> str:
        """Area furthest below its typical ratio, ignoring missing data."""
        worst_name, worst_score = "Threshold", float("inf")
        for name, score in self._scores().items():
            if 0 < score < worst_score:
                worst_name, worst_score = name, score
        return worst_name

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "neuromuscular": round(self.neuromuscular, 1),
            "anaerobic": round(self.anaerobic, 1),
            "vo2max": round(self.vo2max, 1),
            "threshold": round(self.threshold, 1),
        }


class RiderType(str, Enum):
    SPRINTER = "sprinter"
    PURSUITER = "pursuiter"
    TIME_TRIALIST = "time_trialist"
    ALL_ROUNDER = "all_rounder"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def training_focus(self) -> str:
        return _TRAINING_FOCUS[self]

    @property
    def training_recommendations(self) -> str:
        return _TRAINING_RECOMMENDATIONS[self]

    @property
    def suited_events(self) -> str:
        return _SUITED_EVENTS[self]


_DISPLAY_NAMES: Dict[RiderType, str] = {
    RiderType.SPRINTER: "Sprinter",
    RiderType.PURSUITER: "Pursuiter",
    RiderType.TIME_TRIALIST: "Time Trialist",
    RiderType.ALL_ROUNDER: "All-Rounder",
    RiderType.UNKNOWN: "Unknown",
}

_DESCRIPTIONS: Dict[RiderType, str] = {
    RiderType.SPRINTER: "Explosive power specialist with excellent short burst ability",
    RiderType.PURSUITER: "Strong anaerobic capacity, excels at 1-5 minute efforts",
    RiderType.TIME_TRIALIST: "Outstanding sustained power for long steady efforts",
    RiderType.ALL_ROUNDER: "Balanced power profile across all durations",
    RiderType.UNKNOWN: "Insufficient data for classification",
}

_TRAINING_FOCUS: Dict[RiderType, str] = {
    RiderType.SPRINTER: "Threshold & VO2max intervals to build sustained power",
    RiderType.PURSUITER: "Sweet spot & FTP work to extend endurance",
    RiderType.TIME_TRIALIST: "Sprint & VO2max sessions for race versatility",
    RiderType.ALL_ROUNDER: "Target-specific training based on event demands",
    RiderType.UNKNOWN: "Record more varied efforts to build profile",
}

_TRAINING_RECOMMENDATIONS: Dict[RiderType, str] = {
    RiderType.SPRINTER: (
        "Focus on threshold and VO2max work to improve sustained power. "
        "Your sprint is a strength - maintain it with occasional neuromuscular work."
    ),
    RiderType.PURSUITER: (
        "Develop your threshold power with sweet spot and FTP intervals. "
        "Your anaerobic capacity is excellent for attacks and short climbs."
    ),
    RiderType.TIME_TRIALIST: (
        "Consider adding some sprint and VO2max work for versatility. "
        "Your sustained power is your strength - great for time trials and long climbs."
    ),
    RiderType.ALL_ROUNDER: (
        "Your balanced profile suits many race types. "
        "Focus training on the demands of your target events."
    ),
    RiderType.UNKNOWN: (
        "Not enough data to classify rider type. "
        "Complete more rides with varied intensity to build a power profile."
    ),
}

_SUITED_EVENTS: Dict[RiderType, str] = {
    RiderType.SPRINTER: "Criteriums, flat road races, track sprint events",
    RiderType.PURSUITER: "Track pursuit, short time trials, uphill finishes",
    RiderType.TIME_TRIALIST: "Time trials, long climbs, breakaways",
    RiderType.ALL_ROUNDER: "Stage races, hilly road races, multi-discipline events",
    RiderType.UNKNOWN: "Complete more rides to determine suited events",
}


class RiderClassifier:
    """Classifies riders by comparing short efforts against FTP."""

    def __init__(self, ftp: int):
        self.ftp = ftp

    def profile_from_pdc(self, pdc: PowerDurationCurve) -> PowerProfile:
        """Normalize 5 s, 1 min and 5 min power against FTP."""
        if self.ftp <= 0:
            return PowerProfile()

        p5s = pdc.power_at(5) or 0
        p1m = pdc.power_at(60) or 0
        p5m = pdc.power_at(300) or 0

        return PowerProfile(
            neuromuscular=p5s / self.ftp * 100.0,
            anaerobic=p1m / self.ftp * 100.0,
            vo2max=p5m / self.ftp * 100.0,
            threshold=100.0,
        )

    def classify(self, profile: PowerProfile) -> RiderType:
        """
        Ordered decision list; the first matching rule wins.

        Missing data in any component short-circuits to UNKNOWN.
        """
        if profile.neuromuscular <= 0 or profile.anaerobic <= 0 or profile.vo2max <= 0:
            return RiderType.UNKNOWN

        if profile.neuromuscular > 180.0:
            return RiderType.SPRINTER

        if profile.anaerobic > 130.0 and profile.neuromuscular > 150.0:
            return RiderType.PURSUITER

        if profile.vo2max > 85.0 and profile.neuromuscular < 160.0:
            return RiderType.TIME_TRIALIST

        return RiderType.ALL_ROUNDER

    def classify_from_pdc(self, pdc: PowerDurationCurve) -> RiderType:
        return self.classify(self.profile_from_pdc(pdc))
