"""
Per-panel insight summaries: metric tabs, caffeine, sleep, notes and tags.

Insights are returned as short markdown strings ("Average level: **3.2/7**")
that the pages render as a bullet list. An empty list means there was
nothing valid to summarize.
"""

import logging
import random
from collections import Counter
from typing import Any, Sequence

from analytics.metrics import Metric, metric_value, metric_values
from analytics.models import DailyEntry
from analytics.normalize import valid_entries
from analytics.periods import format_date
from analytics.sleep import (
    analyze_sleep,
    circular_bedtime_minutes,
    mean_wake_minutes,
    minutes_to_time,
)
from analytics.stats import (
    DECREASING,
    INCREASING,
    best_day_of_week,
    mean,
    round_half_up,
    trend,
    volatility,
)

logger = logging.getLogger(__name__)

TREND_ICONS = {INCREASING: "↑", DECREASING: "↓"}
# Anxiety and irritability read better as rising/declining
ONE_SIDED_TREND_LABELS = {INCREASING: "Rising", DECREASING: "Declining"}

NOTES_LIMIT = 7
TAG_FIELDS = ("activities", "people")


def _fmt(value: float) -> str:
    return f"{round_half_up(value, 1):.1f}"


def _pct(part: int, whole: int) -> int:
    return int(round_half_up(part / whole * 100, 0))


def _number(value: float) -> str:
    """Render a reading without a trailing .0 for whole numbers."""
    return f"{value:g}"


def _trend_text(label: str, direction: str) -> str:
    return f"{label} {TREND_ICONS.get(direction, '→')}"


def metric_insights(entries: Sequence[DailyEntry], metric: Metric) -> list[str]:
    """
    Summary bullets for one metric tab.

    Two-sided metrics (energy, mood) report average highest/lowest, the best
    weekday, the trend and the average daily range. One-sided metrics
    (anxiety, irritability) report the average, the lowest and highest days,
    the trend and the share of days below average.

    Args:
        entries: Series for the selected period; placeholders are ignored
        metric: Which metric

    Returns:
        Markdown bullets, empty if no entry is valid
    """
    metric = Metric(metric)
    valid = valid_entries(entries)
    if not valid:
        return []

    insights = []
    if metric.two_sided:
        highest = metric_values(valid, metric, "highest")
        lowest = metric_values(valid, metric, "lowest")
        insights.append(f"Average highest: **{_fmt(mean(highest))}/7**")
        insights.append(f"Average lowest: **{_fmt(mean(lowest))}/7**")

        best = best_day_of_week(valid, metric, "highest")
        if best is not None:
            day, avg = best
            insights.append(f"Best day: **{day}** (avg {_fmt(avg)})")

        direction = trend(highest)
        insights.append(f"Trend: **{_trend_text(direction, direction)}**")
        insights.append(f"Average range: **{_fmt(volatility(valid, metric))}** points")
        return insights

    values = metric_values(valid, metric)
    avg = mean(values)
    insights.append(f"Average level: **{_fmt(avg)}/7**")

    # min()/max() return the first extreme, so the earliest day wins ties
    lowest_entry = min(valid, key=lambda e: metric_value(e, metric))
    highest_entry = max(valid, key=lambda e: metric_value(e, metric))
    insights.append(
        f"Lowest on: **{format_date(lowest_entry.date, 'MMM DD')}** "
        f"({_number(metric_value(lowest_entry, metric))}/7)"
    )
    insights.append(
        f"Highest on: **{format_date(highest_entry.date, 'MMM DD')}** "
        f"({_number(metric_value(highest_entry, metric))}/7)"
    )

    direction = trend(values)
    label = ONE_SIDED_TREND_LABELS.get(direction, direction)
    insights.append(f"Trend: **{_trend_text(label, direction)}**")

    below = sum(1 for v in values if v < avg)
    insights.append(f"Days below average: **{_pct(below, len(values))}%**")
    return insights


def caffeine_insights(entries: Sequence[DailyEntry]) -> list[str]:
    valid = valid_entries(entries)
    if not valid:
        return []

    values = [e.caffeine_mg for e in valid]
    with_caffeine = sum(1 for v in values if v > 0)
    direction = trend(values)
    return [
        f"Average daily: **{int(round_half_up(mean(values), 0))} mg**",
        f"Peak day: **{_number(max(values))} mg**",
        f"Days with caffeine: **{_pct(with_caffeine, len(valid))}%**",
        f"Trend: **{_trend_text(direction, direction)}**",
    ]


def sleep_insights(entries: Sequence[DailyEntry]) -> list[str]:
    """
    Average duration, bedtime and wake time plus nap totals.

    Bedtimes are averaged on a clock where small hours follow the evening,
    so a 23:00 and a 01:00 bedtime average to 00:00.
    """
    nights = []
    for entry in valid_entries(entries):
        if entry.sleep is None:
            continue
        analysis = analyze_sleep(entry.sleep)
        if analysis.duration > 0:
            nights.append(analysis)

    if not nights:
        return []

    insights = [f"Average sleep: **{_fmt(mean([n.duration for n in nights]))} hours**"]

    bedtimes = [n.bedtime for n in nights if n.bedtime]
    if bedtimes:
        insights.append(f"Average bedtime: **{minutes_to_time(circular_bedtime_minutes(bedtimes))}**")

    wake_times = [n.wake_time for n in nights if n.wake_time]
    if wake_times:
        insights.append(f"Average wake time: **{minutes_to_time(mean_wake_minutes(wake_times))}**")

    nappers = [n for n in nights if n.has_naps]
    total_naps = sum(n.nap_count for n in nappers)
    if total_naps > 0:
        nap_hours = sum(n.total_nap_duration for n in nappers)
        insights.append(f"Total naps: **{total_naps}** across **{len(nappers)}** days")
        insights.append(f"Average nap duration: **{_fmt(nap_hours / total_naps)} hours**")
    return insights


def generate_summary(entries: Sequence[DailyEntry]) -> dict[str, Any]:
    """
    Headline numbers for the overview page.

    Returns:
        Dict with total_days, tracked_days, missing_days and, when anything
        was tracked, averages and trends keyed by metric value ("energy", ...)
    """
    valid = valid_entries(entries)
    if not valid:
        return {
            "total_days": 0,
            "tracked_days": 0,
            "missing_days": 0,
            "message": "No data available",
        }

    series = {metric: metric_values(valid, metric) for metric in Metric}
    return {
        "total_days": len(entries),
        "tracked_days": len(valid),
        "missing_days": len(entries) - len(valid),
        "averages": {metric.value: round_half_up(mean(values), 1) for metric, values in series.items()},
        "trends": {metric.value: trend(values) for metric, values in series.items()},
    }


def entries_with_notes(entries: Sequence[DailyEntry]) -> list[DailyEntry]:
    return [e for e in valid_entries(entries) if e.note and e.note.strip()]


def notes_for_period(
    entries: Sequence[DailyEntry],
    period: str,
    limit: int = NOTES_LIMIT,
    rng: random.Random | None = None,
) -> list[DailyEntry]:
    """
    Entries whose notes should be shown for a period.

    A week shows every note. Longer periods with more than limit notes show a
    random sample of limit, still in date order.
    """
    noted = entries_with_notes(entries)
    if period == "week" or len(noted) <= limit:
        return noted

    rng = rng or random.Random()
    sample = rng.sample(noted, limit)
    logger.debug(f"Sampled {limit} of {len(noted)} notes for {period}")
    return sorted(sample, key=lambda e: e.date)


def tag_counts(entries: Sequence[DailyEntry], field: str) -> list[tuple[str, int]]:
    """
    Frequency of each tag in a tag field, most frequent first.

    Raises:
        ValueError: If field is not "activities" or "people"
    """
    if field not in TAG_FIELDS:
        raise ValueError(f"Unknown tag field {field!r}, expected one of {TAG_FIELDS}")
    counts: Counter = Counter()
    for entry in valid_entries(entries):
        counts.update(sorted(getattr(entry, field)))
    return counts.most_common()
