"""Small numeric helpers shared across the engine."""

import math
from typing import Sequence, Tuple


def round_half_away(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero.

    Python's built-in ``round`` uses banker's rounding (``round(2.5) == 2``);
    watt values are reported with the conventional rounding instead.
    """
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def linear_slope(values: Sequence[float]) -> float:
    """
    OLS slope of ``values`` against their index (0, 1, 2, ...).

    Returns 0.0 for fewer than two values or a degenerate design.
    """
    n = len(values)
    if n < 2:
        return 0.0

    sum_x = 0.0
    sum_y = 0.0
    sum_xy = 0.0
    sum_x2 = 0.0
    for i, y in enumerate(values):
        sum_x += i
        sum_y += y
        sum_xy += i * y
        sum_x2 += i * i

    denominator = n * sum_x2 - sum_x * sum_x
    if abs(denominator) < 0.001:
        return 0.0

    return (n * sum_xy - sum_x * sum_y) / denominator


def linear_regression(points: Sequence[Tuple[float, float]]) -> Tuple[float, float, float]:
    """
    Ordinary least squares on (x, y) pairs.

    Returns:
        (slope, intercept, r_squared); r_squared is 0.0 when y is constant.

    Raises:
        ZeroDivisionError: If the design is singular (all x equal).
    """
    n = float(len(points))
    sum_x = sum(x for x, _ in points)
    sum_y = sum(y for _, y in points)
    sum_xy = sum(x * y for x, y in points)
    sum_xx = sum(x * x for x, _ in points)

    denom = n * sum_xx - sum_x * sum_x
    if abs(denom) < 1e-10:
        raise ZeroDivisionError("Singular matrix in regression")

    slope = (n * sum_xy - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n

    mean_y = sum_y / n
    ss_tot = sum((y - mean_y) ** 2 for _, y in points)
    ss_res = sum((y - (slope * x + intercept)) ** 2 for x, y in points)
    r_squared = 1.0 - ss_res / ss_tot if ss_tot > 0 else 0.0

    return slope, intercept, r_squared
