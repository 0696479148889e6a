"""Real-time power metrics: smoothing, zones and ride aggregation."""

from .smoothing import NormalizedPowerCalculator, PowerFilter, RollingAverage
from .zones import HRZoneRange, HRZones, PowerZones, ZoneRange
from .calculator import (
    AggregatedMetrics,
    MetricsCalculator,
    PowerMetrics,
    SensorReading,
    estimate_calories,
)

__all__ = [
    # Signal conditioning
    "NormalizedPowerCalculator",
    "PowerFilter",
    "RollingAverage",
    # Zones
    "HRZoneRange",
    "HRZones",
    "PowerZones",
    "ZoneRange",
    # Aggregation
    "AggregatedMetrics",
    "MetricsCalculator",
    "PowerMetrics",
    "SensorReading",
    "estimate_calories",
]
