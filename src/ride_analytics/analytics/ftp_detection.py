"""Automatic FTP (Functional Threshold Power) detection from a power curve."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..utils import round_half_away
from .critical_power import CpModel
from .pdc import PowerDurationCurve

logger = logging.getLogger(__name__)

TWENTY_MINUTES = 1200
FORTY_FIVE_MINUTES = 2700
SIXTY_MINUTES = 3600

# Tolerances for "actual effort nearby" checks
EXTENDED_TOLERANCE_SECS = 300
SHORT_TOLERANCE_SECS = 60

TWENTY_MINUTE_FACTOR = 0.95


class FtpConfidence(str, Enum):
    """How much an estimate can be trusted. Ordered LOW < MEDIUM < HIGH."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, FtpConfidence):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, FtpConfidence):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, FtpConfidence):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, FtpConfidence):
            return NotImplemented
        return self.rank >= other.rank


_CONFIDENCE_RANK = {
    FtpConfidence.LOW: 0,
    FtpConfidence.MEDIUM: 1,
    FtpConfidence.HIGH: 2,
}


class FtpMethod(str, Enum):
    TWENTY_MINUTE = "twenty_minute"
    EXTENDED_DURATION = "extended_duration"
    CRITICAL_POWER = "critical_power"


@dataclass
class FtpEstimate:
    """A point-in-time FTP estimate and the efforts it was derived from."""

    ftp_watts: int
    method: FtpMethod
    confidence: FtpConfidence
    supporting_data: List[Tuple[int, int]] = field(default_factory=list)

    def should_notify(self, current_ftp: int, threshold: float = 0.05) -> bool:
        """Whether the rider should be told about this estimate."""
        return FtpDetector(threshold).is_significant_change(current_ftp, self)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "ftp_watts": self.ftp_watts,
            "method": self.method.value,
            "confidence": self.confidence.value,
            "supporting_data": [
                {"duration_secs": d, "power_watts": p} for d, p in self.supporting_data
            ],
        }


class FtpDetector:
    """
    Estimates FTP using the best available method.

    Methods, in priority order:
    1. Extended duration: actual 45/60 minute efforts (most direct)
    2. Twenty minute: 95% of 20 minute power
    ``detect_from_cp`` is offered separately for callers holding a CP model.
    """

    def __init__(self, significant_change_threshold: float = 0.05):
        self.significant_change_threshold = significant_change_threshold

    @classmethod
    def from_settings(cls, settings=None) -> "FtpDetector":
        if settings is None:
            from ..config import get_settings

            settings = get_settings()
        return cls(settings.ftp_change_threshold)

    def detect(self, pdc: PowerDurationCurve) -> Optional[FtpEstimate]:
        """
        Estimate FTP from a power duration curve.

        Returns:
            The estimate, or None when the curve is empty
        """
        estimate = self._detect_extended_duration(pdc)
        if estimate is None:
            estimate = self._detect_twenty_minute(pdc)
        if estimate is not None:
            logger.debug(
                f"FTP detected: {estimate.ftp_watts}W via {estimate.method.value} "
                f"({estimate.confidence.value} confidence)"
            )
        return estimate

    def _detect_extended_duration(self, pdc: PowerDurationCurve) -> Optional[FtpEstimate]:
        power_45 = pdc.power_at_actual(FORTY_FIVE_MINUTES, EXTENDED_TOLERANCE_SECS)
        if power_45 is None:
            return None

        power_60 = pdc.power_at_actual(SIXTY_MINUTES, EXTENDED_TOLERANCE_SECS)
        if power_60 is not None:
            return FtpEstimate(
                ftp_watts=round_half_away((power_45 + power_60) / 2),
                method=FtpMethod.EXTENDED_DURATION,
                confidence=FtpConfidence.HIGH,
                supporting_data=[(FORTY_FIVE_MINUTES, power_45), (SIXTY_MINUTES, power_60)],
            )

        return FtpEstimate(
            ftp_watts=power_45,
            method=FtpMethod.EXTENDED_DURATION,
            confidence=FtpConfidence.MEDIUM,
            supporting_data=[(FORTY_FIVE_MINUTES, power_45)],
        )

    def _detect_twenty_minute(self, pdc: PowerDurationCurve) -> Optional[FtpEstimate]:
        power_20 = pdc.power_at(TWENTY_MINUTES)
        if power_20 is None:
            return None

        # Real 5 and 10 minute efforts show the curve isn't purely extrapolated
        has_5min = pdc.has_data_near(300, SHORT_TOLERANCE_SECS)
        has_10min = pdc.has_data_near(600, SHORT_TOLERANCE_SECS)
        confidence = FtpConfidence.MEDIUM if has_5min and has_10min else FtpConfidence.LOW

        return FtpEstimate(
            ftp_watts=round_half_away(power_20 * TWENTY_MINUTE_FACTOR),
            method=FtpMethod.TWENTY_MINUTE,
            confidence=confidence,
            supporting_data=[(TWENTY_MINUTES, power_20)],
        )

    def detect_from_cp(self, cp_model: CpModel) -> FtpEstimate:
        """FTP approximated by CP, trusted according to the fit quality."""
        if cp_model.r_squared > 0.95:
            confidence = FtpConfidence.HIGH
        elif cp_model.r_squared > 0.85:
            confidence = FtpConfidence.MEDIUM
        else:
            confidence = FtpConfidence.LOW

        return FtpEstimate(
            ftp_watts=cp_model.cp,
            method=FtpMethod.CRITICAL_POWER,
            confidence=confidence,
        )

    def is_significant_change(self, current_ftp: int, estimate: FtpEstimate) -> bool:
        return abs(self.change_percent(current_ftp, estimate.ftp_watts)) > self.significant_change_threshold

    def change_percent(self, current: int, new: int) -> float:
        """Relative change as a fraction. A zero current FTP counts as 100%."""
        if current == 0:
            return 1.0
        return (new - current) / current
