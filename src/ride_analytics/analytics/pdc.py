"""Power Duration Curve (PDC) and Mean Maximal Power extraction."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from ..utils import round_half_away

logger = logging.getLogger(__name__)

# Zero-power dropouts up to this many samples are treated as sensor gaps
MAX_INTERPOLATION_GAP = 10

# Fitting window used to judge whether a CP model can be built
CP_MIN_DURATION = 120
CP_MAX_DURATION = 1200

STANDARD_DURATIONS: List[int] = [
    1, 2, 3, 5, 10, 15, 20, 30,                    # seconds
    60, 120, 180, 300, 600, 900, 1200, 1800,       # 1-30 min
    2700, 3600, 5400, 7200, 10800, 14400, 18000,   # 45 min - 5 h
]


@dataclass(frozen=True)
class PdcPoint:
    """Best power held for a given duration."""

    duration_secs: int
    power_watts: int

    def to_dict(self) -> dict:
        return {"duration_secs": self.duration_secs, "power_watts": self.power_watts}

    @classmethod
    def from_dict(cls, data: dict) -> "PdcPoint":
        return cls(
            duration_secs=int(data["duration_secs"]),
            power_watts=int(data["power_watts"]),
        )


class PowerDurationCurve:
    """
    Best-effort power for each recorded duration, ordered by duration.

    Durations are unique. Power is expected, but not enforced, to be
    non-increasing with duration; ``is_monotonic()`` reports whether the
    curve meets that expectation.
    """

    def __init__(self, points: Optional[Iterable[PdcPoint]] = None):
        self._points: List[PdcPoint] = []
        if points:
            self._points = _merge_best(points)

    @classmethod
    def from_points(cls, points: Iterable[PdcPoint]) -> "PowerDurationCurve":
        """Build a curve; duplicate durations keep the highest power."""
        return cls(points)

    def points(self) -> List[PdcPoint]:
        return list(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def is_empty(self) -> bool:
        return not self._points

    def max_duration(self) -> Optional[int]:
        return self._points[-1].duration_secs if self._points else None

    def power_at(self, duration_secs: int) -> Optional[int]:
        """
        Power for a duration, interpolating where no exact point exists.

        Between two recorded points power is linearly interpolated. Outside
        the recorded range the nearest endpoint is returned.

        Returns:
            Power in watts, or None if the curve is empty
        """
        if not self._points:
            return None

        lower: Optional[PdcPoint] = None
        upper: Optional[PdcPoint] = None
        for point in self._points:
            if point.duration_secs == duration_secs:
                return point.power_watts
            if point.duration_secs < duration_secs:
                lower = point
            else:
                upper = point
                break

        if lower is not None and upper is not None:
            ratio = (duration_secs - lower.duration_secs) / (
                upper.duration_secs - lower.duration_secs
            )
            power = lower.power_watts + ratio * (upper.power_watts - lower.power_watts)
            return round_half_away(power)
        if lower is not None:
            return lower.power_watts
        return upper.power_watts if upper is not None else None

    def has_data_near(self, duration_secs: int, tolerance_secs: int) -> bool:
        """Whether a recorded point lies within ``tolerance_secs`` of a duration."""
        return any(
            abs(p.duration_secs - duration_secs) <= tolerance_secs for p in self._points
        )

    def power_at_actual(self, duration_secs: int, tolerance_secs: int) -> Optional[int]:
        """
        Power for a duration backed by a real effort nearby.

        Unlike ``power_at``, returns None when the value would be purely
        extrapolated.
        """
        if self.has_data_near(duration_secs, tolerance_secs):
            return self.power_at(duration_secs)
        return None

    def update(self, new_points: Iterable[PdcPoint]) -> List[PdcPoint]:
        """
        Merge new efforts into the curve.

        Returns:
            The points that were added or improved
        """
        by_duration: Dict[int, PdcPoint] = {p.duration_secs: p for p in self._points}
        changed: List[PdcPoint] = []

        for point in new_points:
            existing = by_duration.get(point.duration_secs)
            if existing is None or point.power_watts > existing.power_watts:
                by_duration[point.duration_secs] = point
                changed.append(point)

        self._points = sorted(by_duration.values(), key=lambda p: p.duration_secs)
        if changed:
            logger.debug(f"PDC updated with {len(changed)} new best efforts")
        return changed

    def has_sufficient_data_for_cp(self) -> bool:
        """At least three efforts inside the 2-20 minute fitting window."""
        in_range = [
            p for p in self._points
            if CP_MIN_DURATION <= p.duration_secs <= CP_MAX_DURATION
        ]
        return len(in_range) >= 3

    def is_monotonic(self) -> bool:
        """True when power never increases as duration increases."""
        return all(
            later.power_watts <= earlier.power_watts
            for earlier, later in zip(self._points, self._points[1:])
        )

    def to_dict(self) -> dict:
        return {"points": [p.to_dict() for p in self._points]}

    @classmethod
    def from_dict(cls, data: dict) -> "PowerDurationCurve":
        return cls(PdcPoint.from_dict(p) for p in data.get("points", []))


def _merge_best(points: Iterable[PdcPoint]) -> List[PdcPoint]:
    best: Dict[int, PdcPoint] = {}
    for point in points:
        existing = best.get(point.duration_secs)
        if existing is None or point.power_watts > existing.power_watts:
            best[point.duration_secs] = point
    return sorted(best.values(), key=lambda p: p.duration_secs)


def interpolate_sensor_gaps(power_samples: Sequence[int]) -> List[int]:
    """
    Fill short zero-power dropouts by linear interpolation.

    Runs of zeros up to ``MAX_INTERPOLATION_GAP`` samples long are replaced
    with values interpolated between the neighbouring non-zero samples.
    Longer runs are kept as real coasting/stops.

    Args:
        power_samples: 1 Hz power samples in watts

    Returns:
        A new list with short gaps filled
    """
    result = list(power_samples)
    n = len(result)

    i = 0
    while i < n:
        if result[i] != 0:
            i += 1
            continue

        gap_start = i
        gap_end = i
        while gap_end < n and result[gap_end] == 0:
            gap_end += 1
        gap_length = gap_end - gap_start

        if gap_length <= MAX_INTERPOLATION_GAP:
            if gap_start > 0:
                before = result[gap_start - 1]
            else:
                before = result[gap_end] if gap_end < n else 0
            after = result[gap_end] if gap_end < n else before

            if before > 0 or after > 0:
                for idx in range(gap_start, gap_end):
                    t = (idx - gap_start + 1) / (gap_length + 1)
                    result[idx] = round_half_away(before * (1.0 - t) + after * t)

        i = gap_end

    return result


def _best_average(prefix_sum: Sequence[int], window: int) -> int:
    n = len(prefix_sum) - 1
    best = 0
    for end in range(window, n + 1):
        avg = (prefix_sum[end] - prefix_sum[end - window]) // window
        if avg > best:
            best = avg
    return best


def _prefix_sums(power_samples: Sequence[int]) -> List[int]:
    prefix = [0] * (len(power_samples) + 1)
    for i, power in enumerate(power_samples):
        prefix[i + 1] = prefix[i] + power
    return prefix


class MmpCalculator:
    """
    Mean Maximal Power over a set of durations.

    Uses prefix sums so each duration is a single O(n) sliding-window pass
    over 1 Hz samples. Durations longer than the ride are skipped.
    """

    def __init__(self, durations: Iterable[int]):
        self.durations = sorted(durations)

    @classmethod
    def standard(cls) -> "MmpCalculator":
        """1 second to 5 hours."""
        return cls(STANDARD_DURATIONS)

    def calculate(self, power_samples: Sequence[int]) -> List[PdcPoint]:
        return self.calculate_selected(power_samples, self.durations)

    def calculate_selected(
        self,
        power_samples: Sequence[int],
        durations: Iterable[int],
    ) -> List[PdcPoint]:
        """MMP for an explicit list of durations."""
        n = len(power_samples)
        if n == 0:
            return []

        prefix = _prefix_sums(power_samples)
        results = []
        for duration in durations:
            if duration <= 0 or duration > n:
                continue
            results.append(PdcPoint(duration, _best_average(prefix, duration)))
        return results

    def calculate_single(self, power_samples: Sequence[int], duration_secs: int) -> Optional[int]:
        """Best average power for one duration, or None if the ride is too short."""
        if not power_samples or duration_secs <= 0 or duration_secs > len(power_samples):
            return None
        return _best_average(_prefix_sums(power_samples), duration_secs)

    def calculate_with_interpolation(self, power_samples: Sequence[int]) -> List[PdcPoint]:
        """MMP after filling short sensor dropouts."""
        return self.calculate(interpolate_sensor_gaps(power_samples))


class PdcBatchProcessor:
    """Accumulates a curve across many rides."""

    def __init__(self, pdc: Optional[PowerDurationCurve] = None):
        self.pdc = pdc or PowerDurationCurve()
        self.ride_count = 0
        self._calculator = MmpCalculator.standard()

    def process_ride(self, power_samples: Sequence[int]) -> List[PdcPoint]:
        """Extract a ride's MMP and merge it; returns the new bests."""
        changed = self.pdc.update(self._calculator.calculate(power_samples))
        self.ride_count += 1
        return changed
