"""Real-time ride metrics aggregation."""

import logging
from dataclasses import dataclass
from typing import Optional

from .smoothing import NormalizedPowerCalculator, PowerFilter, RollingAverage
from .zones import HRZones, PowerZones

logger = logging.getLogger(__name__)


@dataclass
class SensorReading:
    """
    A single merged sensor sample.

    ``timestamp`` is a monotonic clock value in seconds; only differences
    between readings are used.
    """

    timestamp: float
    power_watts: Optional[int] = None
    cadence_rpm: Optional[int] = None
    heart_rate_bpm: Optional[int] = None
    speed_kmh: Optional[float] = None
    distance_delta_m: Optional[float] = None


@dataclass
class AggregatedMetrics:
    """Per-instant snapshot of ride metrics."""

    timestamp: Optional[float] = None
    power_instant: Optional[int] = None
    power_3s_avg: Optional[int] = None
    power_30s_avg: Optional[int] = None
    cadence: Optional[int] = None
    heart_rate: Optional[int] = None
    speed: Optional[float] = None
    distance: float = 0.0  # meters
    elapsed_seconds: float = 0.0
    calories: int = 0
    power_zone: Optional[int] = None
    hr_zone: Optional[int] = None
    normalized_power: Optional[int] = None
    tss: Optional[float] = None
    intensity_factor: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "timestamp": self.timestamp,
            "power_instant": self.power_instant,
            "power_3s_avg": self.power_3s_avg,
            "power_30s_avg": self.power_30s_avg,
            "cadence": self.cadence,
            "heart_rate": self.heart_rate,
            "speed": self.speed,
            "distance": round(self.distance, 1),
            "elapsed_seconds": round(self.elapsed_seconds, 1),
            "calories": self.calories,
            "power_zone": self.power_zone,
            "hr_zone": self.hr_zone,
            "normalized_power": self.normalized_power,
            "tss": round(self.tss, 1) if self.tss is not None else None,
            "intensity_factor": (
                round(self.intensity_factor, 2) if self.intensity_factor is not None else None
            ),
        }


@dataclass
class PowerMetrics:
    """Power-only view of the current ride."""

    instant: Optional[int] = None
    avg_3s: Optional[int] = None
    avg_30s: Optional[int] = None
    zone: Optional[int] = None
    avg: Optional[int] = None
    max: Optional[int] = None
    normalized: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "instant": self.instant,
            "avg_3s": self.avg_3s,
            "avg_30s": self.avg_30s,
            "zone": self.zone,
            "avg": self.avg,
            "max": self.max,
            "normalized": self.normalized,
        }


class MetricsCalculator:
    """
    Merges sensor readings into a live metrics snapshot for one ride.

    Power is filtered before it reaches the averages, NP, totals and the
    zone lookup. Heart rate, cadence and speed are passed through as
    received. TSS and IF are recomputed on every reading once NP is
    available and FTP is positive.

    An instance owns its filter state and must not be shared between rides
    running at the same time; call ``reset()`` before starting a new ride.
    """

    def __init__(
        self,
        ftp: int,
        power_zones: Optional[PowerZones] = None,
        hr_zones: Optional[HRZones] = None,
        power_filter: Optional[PowerFilter] = None,
    ):
        self.ftp = ftp
        self.power_zones = power_zones or PowerZones.from_ftp(ftp)
        self.hr_zones = hr_zones
        self._power_filter = power_filter or PowerFilter()
        self._power_3s = RollingAverage.three_second()
        self._power_30s = RollingAverage.thirty_second()
        self._np_calculator = NormalizedPowerCalculator()
        self._reset_totals()

    @classmethod
    def from_settings(cls, settings=None) -> "MetricsCalculator":
        """Create a calculator using the configured default FTP and filter."""
        if settings is None:
            from ..config import get_settings

            settings = get_settings()
        return cls(
            ftp=settings.default_ftp,
            power_filter=PowerFilter.from_settings(settings),
        )

    def _reset_totals(self) -> None:
        self._power_sum = 0
        self._power_count = 0
        self._max_power = 0
        self._total_distance = 0.0
        self._total_calories = 0
        self._start_time: Optional[float] = None
        self._current = AggregatedMetrics()

    def set_power_zones(self, zones: PowerZones) -> None:
        self.power_zones = zones

    def set_hr_zones(self, zones: HRZones) -> None:
        self.hr_zones = zones

    def set_ftp(self, ftp: int) -> None:
        """Update FTP and rebuild power zones. Existing totals are kept."""
        self.ftp = ftp
        self.power_zones = PowerZones.from_ftp(ftp)
        logger.debug(f"FTP set to {ftp}W, power zones recalculated")

    def process(self, reading: SensorReading) -> AggregatedMetrics:
        """
        Fold a sensor reading into the ride totals.

        Args:
            reading: Merged sample from the sensor layer

        Returns:
            The updated snapshot (owned by this calculator)
        """
        now = reading.timestamp
        metrics = self._current

        if self._start_time is None:
            self._start_time = now

        if reading.power_watts is not None:
            power = self._power_filter.filter(reading.power_watts)
            if power is not None:
                metrics.power_instant = power
                metrics.power_3s_avg = self._power_3s.add(power)
                metrics.power_30s_avg = self._power_30s.add(power)
                metrics.normalized_power = self._np_calculator.add(power)

                self._power_sum += power
                self._power_count += 1
                self._max_power = max(self._max_power, power)

                if self.power_zones is not None:
                    zone_power = metrics.power_3s_avg if metrics.power_3s_avg is not None else power
                    metrics.power_zone = self.power_zones.get_zone(zone_power)

                # 1 J/s for 1 s; kJ of work is roughly kcal burned
                self._total_calories = self._power_sum // 1000
            else:
                logger.debug(f"Rejected power sample: {reading.power_watts}W")

        if reading.heart_rate_bpm is not None:
            metrics.heart_rate = reading.heart_rate_bpm
            if self.hr_zones is not None:
                metrics.hr_zone = self.hr_zones.get_zone(reading.heart_rate_bpm)

        if reading.cadence_rpm is not None:
            metrics.cadence = reading.cadence_rpm

        if reading.speed_kmh is not None:
            metrics.speed = reading.speed_kmh

        if reading.distance_delta_m is not None:
            self._total_distance += reading.distance_delta_m

        metrics.timestamp = now
        metrics.distance = self._total_distance
        metrics.calories = self._total_calories
        metrics.elapsed_seconds = max(now - self._start_time, 0.0)

        if metrics.normalized_power is not None and self.ftp > 0:
            intensity = metrics.normalized_power / self.ftp
            metrics.intensity_factor = intensity
            hours = metrics.elapsed_seconds / 3600.0
            metrics.tss = hours * intensity * intensity * 100.0

        return metrics

    @property
    def current_metrics(self) -> AggregatedMetrics:
        return self._current

    def power_metrics(self) -> PowerMetrics:
        """Snapshot of power-related values only."""
        return PowerMetrics(
            instant=self._current.power_instant,
            avg_3s=self._current.power_3s_avg,
            avg_30s=self._current.power_30s_avg,
            zone=self._current.power_zone,
            avg=self.average_power(),
            max=self.max_power(),
            normalized=self._current.normalized_power,
        )

    def average_power(self) -> Optional[int]:
        if self._power_count == 0:
            return None
        return self._power_sum // self._power_count

    def max_power(self) -> Optional[int]:
        return self._max_power if self._max_power > 0 else None

    def reset(self) -> None:
        """Clear all ride state for a new ride."""
        self._power_filter.reset()
        self._power_3s.reset()
        self._power_30s.reset()
        self._np_calculator.reset()
        self._reset_totals()


def estimate_calories(power_watts: int, duration_seconds: int) -> int:
    """
    Estimate calories from constant power.

    Mechanical work in kJ is used as kcal (gross efficiency ~ 1 / 4.184
    cancels the kJ to kcal conversion).
    """
    return power_watts * duration_seconds // 1000
