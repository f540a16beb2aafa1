"""
Descriptive statistics used by the insight panels.

Every function returns a neutral value on degenerate input (0.0 for an
empty mean, "Stable" for a short trend, None for an undefined correlation)
so NaN never reaches the dashboard.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

import numpy as np
from scipy import stats

from analytics.metrics import Metric, metric_value
from analytics.periods import DAY_LONG, weekday_index

# Slope per step (day, week or month) above which a series counts as moving
TREND_THRESHOLD = 0.05

INCREASING = "Increasing"
DECREASING = "Decreasing"
STABLE = "Stable"


def round_half_up(value: float, places: int = 1) -> float:
    """Round with ties going away from zero (4.25 -> 4.3), unlike round()."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def slope(values: Sequence[float]) -> float:
    """Least-squares slope of value against 0-based index."""
    if len(values) < 2:
        return 0.0
    result = stats.linregress(np.arange(len(values)), np.asarray(values, dtype=float))
    return float(result.slope)


def trend(values: Sequence[float]) -> str:
    """Classify a series as Increasing, Decreasing or Stable."""
    if len(values) < 2:
        return STABLE
    value = slope(values)
    if value > TREND_THRESHOLD:
        return INCREASING
    if value < -TREND_THRESHOLD:
        return DECREASING
    return STABLE


def correlation(a: Sequence[float], b: Sequence[float]) -> float | None:
    """
    Pearson correlation of two equal-length series.

    Returns None if the lengths differ, there are fewer than two points, or
    either series is constant.
    """
    if a is None or b is None or len(a) != len(b) or len(a) < 2:
        return None
    x = np.asarray(a, dtype=float)
    y = np.asarray(b, dtype=float)
    if np.all(x == x[0]) or np.all(y == y[0]):
        return None
    r, _ = stats.pearsonr(x, y)
    if np.isnan(r):
        return None
    return float(r)


def volatility(entries, metric) -> float:
    """Average gap between a day's highest and lowest reading."""
    metric = Metric(metric)
    if not metric.two_sided:
        raise ValueError(f"Volatility needs a two-sided metric, got {metric.value}")
    ranges = [
        abs(metric_value(e, metric, "highest") - metric_value(e, metric, "lowest"))
        for e in entries
    ]
    return mean(ranges)


def percent_change(current: float, previous: float) -> float | None:
    if previous == 0:
        return None
    return (current - previous) / previous * 100


def best_day_of_week(entries, metric, side: str = "highest") -> tuple[str, float] | None:
    """
    Weekday with the highest average reading, scanning Monday to Sunday.

    Weekdays with no entries are skipped; the first maximum wins a tie.
    """
    by_day: dict[int, list[float]] = {}
    for entry in entries:
        by_day.setdefault(weekday_index(entry.date, monday_first=True), []).append(
            metric_value(entry, metric, side)
        )

    best = None
    for day in range(7):
        values = by_day.get(day)
        if not values:
            continue
        avg = mean(values)
        if best is None or avg > best[1]:
            # DAY_LONG is Sunday-first
            best = (DAY_LONG[(day + 1) % 7], avg)
    return best
