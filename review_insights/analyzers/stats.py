"""
Small numeric helpers shared by the analyzers.

Pure stdlib. Every helper resolves degenerate input (empty lists, zero
variance) to a defined value instead of raising.
"""

import math
import statistics
from typing import Optional


def mean_or(values: list[float], default: Optional[float] = None) -> Optional[float]:
    """Arithmetic mean, or `default` when there are no values."""
    if not values:
        return default
    return statistics.fmean(values)


def population_std(values: list[float]) -> float:
    """
    Population standard deviation.

    This is the single std-dev estimator used across the engine (user stats,
    rating consistency, era variance). One value gives 0.0.
    """
    if len(values) < 2:
        return 0.0
    return statistics.pstdev(values)


def population_variance(values: list[float]) -> float:
    if len(values) < 2:
        return 0.0
    return statistics.pvariance(values)


def pearson(xs: list[float], ys: list[float]) -> float:
    """
    Pearson correlation coefficient over paired samples.

    r = (n*Sxy - Sx*Sy) / sqrt((n*Sxx - Sx^2) * (n*Syy - Sy^2))

    Identical vectors give 1.0, flat ones included. Otherwise a zero
    denominator (either side flat) gives 0.0, never NaN.
    """
    n = len(xs)
    if n == 0 or n != len(ys):
        return 0.0
    if list(xs) == list(ys):
        return 1.0
    # Flat on either side; checked directly so rounding can't fake a variance
    if min(xs) == max(xs) or min(ys) == max(ys):
        return 0.0

    sum_x = math.fsum(xs)
    sum_y = math.fsum(ys)
    sum_xx = math.fsum(x * x for x in xs)
    sum_yy = math.fsum(y * y for y in ys)
    sum_xy = math.fsum(x * y for x, y in zip(xs, ys))

    var_x = n * sum_xx - sum_x * sum_x
    var_y = n * sum_yy - sum_y * sum_y
    if var_x <= 0 or var_y <= 0:
        return 0.0

    r = (n * sum_xy - sum_x * sum_y) / math.sqrt(var_x * var_y)
    return max(-1.0, min(1.0, r))


def ols_slope(xs: list[float], ys: list[float]) -> float:
    """Least-squares slope of ys on xs; 0.0 with fewer than two distinct xs."""
    n = len(xs)
    if n < 2 or n != len(ys):
        return 0.0

    sum_x = math.fsum(xs)
    sum_y = math.fsum(ys)
    sum_xy = math.fsum(x * y for x, y in zip(xs, ys))
    sum_xx = math.fsum(x * x for x in xs)

    denom = n * sum_xx - sum_x * sum_x
    if denom == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denom


def lower_median(values: list[float]) -> Optional[float]:
    """Median that takes the lower middle element for even-length input."""
    if not values:
        return None
    return statistics.median_low(values)


def percentile_below(target: float, population: list[float]) -> float:
    """Share (0-100) of the population strictly below target."""
    if not population:
        return 0.0
    below = sum(1 for v in population if v < target)
    return 100.0 * below / len(population)


def percentile_at_or_below(target: float, population: list[float]) -> float:
    """Share (0-100) of the population at or below target."""
    if not population:
        return 0.0
    at_or_below = sum(1 for v in population if v <= target)
    return 100.0 * at_or_below / len(population)


def correlation_strength(correlation: float) -> str:
    """Human-readable strength label for |r|."""
    magnitude = abs(correlation)
    if magnitude >= 0.7:
        return "Very Strong"
    elif magnitude >= 0.5:
        return "Strong"
    elif magnitude >= 0.3:
        return "Moderate"
    elif magnitude >= 0.1:
        return "Weak"
    else:
        return "Very Weak"
