"""Daily training load records and Acute:Chronic Workload Ratio (ACWR)."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Tuple


@dataclass(frozen=True)
class DailyLoad:
    """
    One day of the Fitness-Fatigue model, produced upstream.

    - tss: Training Stress Score for the day
    - atl: Acute Training Load (fatigue, ~7 day EWMA)
    - ctl: Chronic Training Load (fitness, ~42 day EWMA)
    - tsb: Training Stress Balance (form) = CTL - ATL
    """

    tss: float = 0.0
    atl: float = 0.0
    ctl: float = 0.0
    tsb: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"tss": self.tss, "atl": self.atl, "ctl": self.ctl, "tsb": self.tsb}

    @classmethod
    def from_dict(cls, data: dict) -> "DailyLoad":
        return cls(
            tss=float(data.get("tss", 0.0)),
            atl=float(data.get("atl", 0.0)),
            ctl=float(data.get("ctl", 0.0)),
            tsb=float(data.get("tsb", 0.0)),
        )


# Chronologically ordered (date, load) pairs
LoadHistory = List[Tuple[date, DailyLoad]]


class AcwrStatus(str, Enum):
    """
    Injury risk zone based on ACWR (Gabbett, 2016):
    - < 0.8: Undertrained (not enough stimulus)
    - 0.8 - 1.3: Optimal (sweet spot for adaptation)
    - 1.3 - 1.5: Caution (elevated injury risk)
    - > 1.5: High risk
    """

    UNDERTRAINED = "undertrained"
    OPTIMAL = "optimal"
    CAUTION = "caution"
    HIGH_RISK = "high_risk"

    @classmethod
    def from_ratio(cls, acwr: float) -> "AcwrStatus":
        if acwr < 0.8:
            return cls.UNDERTRAINED
        elif acwr <= 1.3:
            return cls.OPTIMAL
        elif acwr <= 1.5:
            return cls.CAUTION
        else:
            return cls.HIGH_RISK

    @property
    def recommendation(self) -> str:
        return _RECOMMENDATIONS[self]


_RECOMMENDATIONS = {
    AcwrStatus.UNDERTRAINED: "Training load is low. Consider increasing training volume gradually.",
    AcwrStatus.OPTIMAL: "Training load is in the optimal zone. Keep up the good work!",
    AcwrStatus.CAUTION: (
        "Training load is elevated. Monitor for signs of fatigue and consider recovery."
    ),
    AcwrStatus.HIGH_RISK: (
        "Training load spike detected. High injury risk. Reduce training intensity."
    ),
}


def calculate_acwr(atl: float, ctl: float) -> float:
    """
    Acute:Chronic Workload Ratio.

    Returns 1.0 (neutral) when there is no chronic load yet.
    """
    if ctl <= 0:
        return 1.0
    return atl / ctl


@dataclass(frozen=True)
class Acwr:
    ratio: float
    status: AcwrStatus

    @classmethod
    def from_load(cls, load: DailyLoad) -> "Acwr":
        ratio = calculate_acwr(load.atl, load.ctl)
        return cls(ratio=ratio, status=AcwrStatus.from_ratio(ratio))

    def to_dict(self) -> dict:
        return {
            "ratio": round(self.ratio, 2),
            "status": self.status.value,
            "recommendation": self.status.recommendation,
        }
