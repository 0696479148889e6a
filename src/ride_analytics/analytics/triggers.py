"""Post-ride analytics: refresh the power curve and the models built on it."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..exceptions import RideAnalyticsError
from .critical_power import CpFitter, CpModel
from .pdc import CP_MAX_DURATION, CP_MIN_DURATION, MmpCalculator, PdcPoint, PowerDurationCurve
from .vo2max import Vo2maxCalculator, Vo2maxResult

logger = logging.getLogger(__name__)

VO2MAX_DURATION_SECS = 300


@dataclass
class TriggerResult:
    """What a ride changed. Empty when the ride set no new bests."""

    pdc_updated: List[PdcPoint] = field(default_factory=list)
    pdc: Optional[PowerDurationCurve] = None
    cp_recalculated: bool = False
    new_cp_model: Optional[CpModel] = None
    vo2max_recalculated: bool = False
    new_vo2max: Optional[Vo2maxResult] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "pdc_updated": [p.to_dict() for p in self.pdc_updated],
            "cp_recalculated": self.cp_recalculated,
            "new_cp_model": self.new_cp_model.to_dict() if self.new_cp_model else None,
            "vo2max_recalculated": self.vo2max_recalculated,
            "new_vo2max": self.new_vo2max.to_dict() if self.new_vo2max else None,
        }


class AnalyticsTriggers:
    """
    Runs the analytics that depend on a rider's best efforts after each ride.

    The existing curve is never mutated; the merged curve is returned on the
    result. Daily training load is produced upstream and is not updated here.
    """

    def __init__(
        self,
        weight_kg: float,
        fitter: Optional[CpFitter] = None,
        calculator: Optional[MmpCalculator] = None,
    ):
        self.vo2max_calculator = Vo2maxCalculator(weight_kg)
        self.fitter = fitter or CpFitter()
        self.calculator = calculator or MmpCalculator.standard()

    def update_pdc_from_ride(
        self,
        power_samples: Sequence[int],
        existing_pdc: PowerDurationCurve,
    ) -> List[PdcPoint]:
        """
        Ride efforts that beat the existing curve.

        A ride point counts as improved when the curve has no value at that
        duration or the ride's power is strictly higher than the curve's.
        """
        if not power_samples:
            return []

        improved = []
        for point in self.calculator.calculate(power_samples):
            existing = existing_pdc.power_at(point.duration_secs)
            if existing is None or point.power_watts > existing:
                improved.append(point)
        return improved

    def maybe_recalculate_cp(
        self,
        updated_points: Sequence[PdcPoint],
        full_pdc: PowerDurationCurve,
    ) -> Optional[CpModel]:
        """Refit CP when a 2-20 minute best improved and the curve supports a fit."""
        cp_range_updated = any(
            CP_MIN_DURATION <= p.duration_secs <= CP_MAX_DURATION for p in updated_points
        )
        if not cp_range_updated or not full_pdc.has_sufficient_data_for_cp():
            return None

        try:
            return self.fitter.fit(full_pdc)
        except RideAnalyticsError as e:
            logger.info(f"CP refit skipped: {e}")
            return None

    def maybe_recalculate_vo2max(
        self,
        updated_points: Sequence[PdcPoint],
        full_pdc: PowerDurationCurve,
    ) -> Optional[Vo2maxResult]:
        """Recompute VO2max when the 5 minute best improved."""
        if not any(p.duration_secs == VO2MAX_DURATION_SECS for p in updated_points):
            return None

        power_5min = full_pdc.power_at(VO2MAX_DURATION_SECS)
        if power_5min is None:
            return None
        return self.vo2max_calculator.from_five_minute_power(power_5min)

    def run_all_triggers(
        self,
        power_samples: Sequence[int],
        existing_pdc: PowerDurationCurve,
    ) -> TriggerResult:
        """
        Process a finished ride.

        Args:
            power_samples: 1 Hz power in watts
            existing_pdc: The rider's curve before this ride

        Returns:
            TriggerResult listing new bests and any refreshed models
        """
        result = TriggerResult()

        updated = self.update_pdc_from_ride(power_samples, existing_pdc)
        result.pdc_updated = updated
        if not updated:
            return result

        full_pdc = PowerDurationCurve.from_points(existing_pdc.points())
        full_pdc.update(updated)
        result.pdc = full_pdc

        cp_model = self.maybe_recalculate_cp(updated, full_pdc)
        if cp_model is not None:
            result.cp_recalculated = True
            result.new_cp_model = cp_model

        vo2max = self.maybe_recalculate_vo2max(updated, full_pdc)
        if vo2max is not None:
            result.vo2max_recalculated = True
            result.new_vo2max = vo2max

        logger.info(
            f"Ride set {len(updated)} new bests "
            f"(cp_refit={result.cp_recalculated}, vo2max={result.vo2max_recalculated})"
        )
        return result
