"""Power stream conditioning: range/spike filtering, rolling averages and NP."""

from collections import deque
from typing import Deque, Optional

from ..utils import round_half_away


class RollingAverage:
    """
    Fixed-size rolling average over integer samples.

    Keeps a running sum so each sample is O(1). The average uses integer
    division of the sum, matching how power displays truncate watts.
    """

    def __init__(self, window_size: int):
        if window_size <= 0:
            raise ValueError("window_size must be positive")
        self.window_size = window_size
        self._buffer: Deque[int] = deque()
        self._sum = 0

    @classmethod
    def three_second(cls) -> "RollingAverage":
        """Window used for real-time power display."""
        return cls(3)

    @classmethod
    def thirty_second(cls) -> "RollingAverage":
        """Window used by the Normalized Power algorithm."""
        return cls(30)

    def add(self, value: int) -> Optional[int]:
        """Push a sample and return the updated average."""
        self._buffer.append(value)
        self._sum += value

        if len(self._buffer) > self.window_size:
            self._sum -= self._buffer.popleft()

        return self.average()

    def average(self) -> Optional[int]:
        """Current average, or None when no samples have been added."""
        if not self._buffer:
            return None
        return self._sum // len(self._buffer)

    def is_full(self) -> bool:
        return len(self._buffer) >= self.window_size

    def reset(self) -> None:
        self._buffer.clear()
        self._sum = 0

    def __len__(self) -> int:
        return len(self._buffer)


class PowerFilter:
    """
    Rejects implausible power samples.

    A sample is rejected when it falls outside [min_power, max_power] or,
    with spike detection enabled, when it differs from the last accepted
    sample by more than ``max_delta``. Rejected samples never move the
    reference point used for spike detection.
    """

    def __init__(
        self,
        max_power: int = 2000,
        min_power: int = 0,
        max_delta: Optional[int] = None,
    ):
        self.max_power = max_power
        self.min_power = min_power
        self.max_delta = max_delta
        self.last_valid: Optional[int] = None

    @classmethod
    def with_spike_detection(cls, max_power: int, max_delta: int) -> "PowerFilter":
        """Create a filter that also rejects sudden jumps."""
        return cls(max_power=max_power, max_delta=max_delta)

    @classmethod
    def from_settings(cls, settings=None) -> "PowerFilter":
        """Create a filter from ``Settings.power_filter_*`` values."""
        if settings is None:
            from ..config import get_settings

            settings = get_settings()
        return cls(
            max_power=settings.power_filter_max_watts,
            max_delta=settings.power_filter_max_delta,
        )

    def filter(self, power: int) -> Optional[int]:
        """
        Validate a power sample.

        Args:
            power: Raw power in watts

        Returns:
            The sample if accepted, None if rejected
        """
        if power > self.max_power or power < self.min_power:
            return None

        if self.max_delta is not None and self.last_valid is not None:
            if abs(power - self.last_valid) > self.max_delta:
                return None

        self.last_valid = power
        return power

    def reset(self) -> None:
        self.last_valid = None


class NormalizedPowerCalculator:
    """
    Streaming Normalized Power.

    Formula: NP = (mean(rolling_30s_power^4))^0.25

    Rolling averages only contribute once the 30-second window is full, so
    NP is undefined for the first 29 samples.
    """

    def __init__(self):
        self._rolling_avg = RollingAverage.thirty_second()
        self._sum_fourth_power = 0.0
        self._count = 0

    def add(self, power: int) -> Optional[int]:
        """Push a power sample and return the current NP, if defined."""
        avg = self._rolling_avg.add(power)
        if avg is not None and self._rolling_avg.is_full():
            self._sum_fourth_power += float(avg) ** 4
            self._count += 1

        return self.normalized_power()

    def normalized_power(self) -> Optional[int]:
        if self._count == 0:
            return None

        mean_fourth_power = self._sum_fourth_power / self._count
        return round_half_away(mean_fourth_power ** 0.25)

    def reset(self) -> None:
        self._rolling_avg.reset()
        self._sum_fourth_power = 0.0
        self._count = 0
