"""
Critical Power (CP) and W' modelling.

The 2-parameter model says work done to exhaustion grows linearly with
time: ``W(t) = CP * t + W'``. Fitting best efforts as (t, P*t) with ordinary
least squares gives CP as the slope and W' (anaerobic work capacity, in
joules) as the intercept.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..exceptions import FittingFailedError, InsufficientDataError, InvalidDurationRangeError
from ..utils import linear_regression, round_half_away
from .pdc import PowerDurationCurve

logger = logging.getLogger(__name__)

MIN_POINTS = 3


@dataclass(frozen=True)
class CpModel:
    """A fitted CP/W' model. Refit to update; never mutated."""

    cp: int  # watts
    w_prime: int  # joules
    r_squared: float

    def time_to_exhaustion(self, power_watts: float) -> Optional[float]:
        """
        Seconds until W' is exhausted at a constant power.

        Returns:
            Seconds, or None when the power is at or below CP (sustainable)
        """
        if power_watts <= self.cp:
            return None
        return self.w_prime / (power_watts - self.cp)

    def power_at_duration(self, duration_secs: float) -> int:
        """Maximal power sustainable for a duration: CP + W'/t."""
        if duration_secs <= 0:
            return 0
        return round_half_away(self.cp + self.w_prime / duration_secs)

    def w_prime_remaining(self, power_watts: float, duration_secs: float) -> int:
        """
        W' left after riding at a power for a duration.

        Negative values mean the effort exceeds the rider's capacity.
        """
        if power_watts <= self.cp:
            return self.w_prime
        work_above_cp = (power_watts - self.cp) * duration_secs
        return self.w_prime - round_half_away(work_above_cp)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "cp": self.cp,
            "w_prime": self.w_prime,
            "r_squared": round(self.r_squared, 4),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CpModel":
        return cls(
            cp=int(data["cp"]),
            w_prime=int(data["w_prime"]),
            r_squared=float(data.get("r_squared", 0.0)),
        )


class CpFitter:
    """
    Fits a CpModel to best efforts inside a duration window.

    Efforts shorter than ~2 minutes are dominated by neuromuscular power and
    efforts beyond ~20 minutes by fatigue, so only the window is regressed.
    """

    def __init__(self, min_duration: int = 120, max_duration: int = 1200):
        self.min_duration = min_duration
        self.max_duration = max_duration

    @classmethod
    def from_settings(cls, settings=None) -> "CpFitter":
        if settings is None:
            from ..config import get_settings

            settings = get_settings()
        return cls(settings.cp_min_duration_secs, settings.cp_max_duration_secs)

    def fit(self, pdc: PowerDurationCurve) -> CpModel:
        """
        Fit the model to a power duration curve.

        Raises:
            InsufficientDataError: Fewer than 3 points on the curve or inside the window
            InvalidDurationRangeError: No point inside the window
            FittingFailedError: Degenerate regression or non-positive CP/W'
        """
        return self.fit_points((p.duration_secs, p.power_watts) for p in pdc.points())

    def fit_points(self, points: Iterable[Tuple[int, int]]) -> CpModel:
        """Fit the model to raw (duration_secs, power_watts) pairs."""
        points = list(points)
        if len(points) < MIN_POINTS:
            raise InsufficientDataError(count=len(points), required=MIN_POINTS)

        in_window = [
            (d, p) for d, p in points if self.min_duration <= d <= self.max_duration
        ]
        if not in_window:
            raise InvalidDurationRangeError(self.min_duration, self.max_duration)
        if len(in_window) < MIN_POINTS:
            raise InsufficientDataError(count=len(in_window), required=MIN_POINTS)

        work_time_pairs: List[Tuple[float, float]] = [
            (float(d), float(p) * d) for d, p in in_window
        ]

        try:
            slope, intercept, r_squared = linear_regression(work_time_pairs)
        except ZeroDivisionError:
            raise FittingFailedError(
                "Singular matrix in regression",
                details={"points_in_window": len(in_window)},
            )

        if slope <= 0 or intercept <= 0:
            raise FittingFailedError("Invalid CP/W' values (must be positive)")

        model = CpModel(
            cp=round_half_away(slope),
            w_prime=round_half_away(intercept),
            r_squared=r_squared,
        )
        logger.debug(
            f"CP fit on {len(in_window)} efforts: cp={model.cp}W "
            f"w_prime={model.w_prime}J r2={model.r_squared:.3f}"
        )
        return model
