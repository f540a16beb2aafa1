"""
Comparative pattern mining: how caffeine, sleep and tags relate to metrics.

Each miner compares the average of a metric on days with some factor against
days without it, and emits a markdown statement when the gap is large enough.
Statements are plain strings so the dashboard can render them as a list.
"""

import logging
from collections import Counter
from typing import Sequence

from analytics.metrics import Metric, metric_values
from analytics.models import DailyEntry
from analytics.normalize import valid_entries
from analytics.sleep import analyze_sleep
from analytics.stats import mean, round_half_up

logger = logging.getLogger(__name__)

CAFFEINE_MIN_DIFF = 0.5
SLEEP_MIN_GAP = 0.3
TAG_MIN_DIFF = 0.7
TOP_TAGS = 3

LITTLE_SLEEP = "little sleep (0-4h)"
AVERAGE_SLEEP = "average sleep (5-8h)"
LOTS_OF_SLEEP = "lots of sleep (8+h)"


def _percent(diff: float, baseline: float) -> int | None:
    if baseline == 0:
        return None
    return int(abs(round_half_up(diff / baseline * 100, 0)))


def caffeine_impact(entries: Sequence[DailyEntry]) -> list[str]:
    """Compare every metric on caffeine days against caffeine-free days."""
    with_caffeine = [e for e in entries if e.caffeine_mg > 0]
    without_caffeine = [e for e in entries if e.caffeine_mg == 0]
    if not with_caffeine or not without_caffeine:
        return []

    statements = []
    for metric in Metric:
        avg_with = mean(metric_values(with_caffeine, metric))
        avg_without = mean(metric_values(without_caffeine, metric))
        diff = avg_with - avg_without
        pct = _percent(diff, avg_without)
        if abs(diff) < CAFFEINE_MIN_DIFF or pct is None:
            continue

        if metric.lower_is_better:
            direction = "worse" if diff > 0 else "better"
        else:
            direction = "higher" if diff > 0 else "lower"
        statements.append(
            f"**Caffeine impact:** {metric.label} is {pct}% {direction} on days with caffeine"
        )
    return statements


def sleep_bucket_label(duration: float) -> str | None:
    """
    Bucket a night's total sleep: up to 4h, 5h to 8h inclusive, over 8h.

    Nights strictly between 4h and 5h fall in no bucket and return None.
    """
    if duration <= 4:
        return LITTLE_SLEEP
    if 5 <= duration <= 8:
        return AVERAGE_SLEEP
    if duration > 8:
        return LOTS_OF_SLEEP
    return None


def _sleep_groups(entries: Sequence[DailyEntry]) -> dict[str, list[DailyEntry]]:
    groups: dict[str, list[DailyEntry]] = {LITTLE_SLEEP: [], AVERAGE_SLEEP: [], LOTS_OF_SLEEP: []}
    for entry in entries:
        if entry.sleep is None:
            continue
        duration = analyze_sleep(entry.sleep).duration
        if duration <= 0:
            continue
        label = sleep_bucket_label(duration)
        if label is not None:
            groups[label].append(entry)
    return {label: members for label, members in groups.items() if members}


def sleep_impact(entries: Sequence[DailyEntry]) -> list[str]:
    """Compare every metric across the sleep-duration buckets present."""
    groups = _sleep_groups(entries)
    if not groups:
        return []

    statements = []
    for metric in Metric:
        averages = [(label, mean(metric_values(members, metric))) for label, members in groups.items()]
        # sorted() is stable, so tied buckets keep little/average/lots order
        averages.sort(key=lambda pair: pair[1], reverse=not metric.lower_is_better)
        best_label, best_avg = averages[0]

        if len(averages) == 1:
            statements.append(
                f"**Sleep pattern:** {metric.label} averages {round_half_up(best_avg):.1f} with {best_label}"
            )
            continue

        worst_label, worst_avg = averages[-1]
        if abs(best_avg - worst_avg) >= SLEEP_MIN_GAP:
            statements.append(
                f"**Sleep impact:** {metric.label} is best with {best_label} "
                f"(avg {round_half_up(best_avg):.1f} vs {round_half_up(worst_avg):.1f} with {worst_label})"
            )
    return statements


def top_tags(entries: Sequence[DailyEntry], field: str, limit: int = TOP_TAGS) -> list[str]:
    """Most frequent tags; ties keep the order in which tags were first seen."""
    counts: Counter = Counter()
    for entry in entries:
        # frozensets have no stable order, sort within a day for determinism
        counts.update(sorted(getattr(entry, field)))
    return [tag for tag, _ in counts.most_common(limit)]


def _tag_mood_diffs(entries: Sequence[DailyEntry], field: str) -> list[tuple[str, float, int]]:
    results = []
    for tag in top_tags(entries, field):
        with_tag = [e for e in entries if tag in getattr(e, field)]
        without_tag = [e for e in entries if tag not in getattr(e, field)]
        if not with_tag or not without_tag:
            continue
        avg_with = mean(metric_values(with_tag, Metric.MOOD))
        avg_without = mean(metric_values(without_tag, Metric.MOOD))
        diff = avg_with - avg_without
        pct = _percent(diff, avg_without)
        if abs(diff) >= TAG_MIN_DIFF and pct is not None:
            results.append((tag, diff, pct))
    return results


def activity_impact(entries: Sequence[DailyEntry]) -> list[str]:
    return [
        f'**Activity pattern:** "{tag}" {"boosts" if diff > 0 else "lowers"} mood by {pct}%'
        for tag, diff, pct in _tag_mood_diffs(entries, "activities")
    ]


def people_impact(entries: Sequence[DailyEntry]) -> list[str]:
    return [
        f'**People pattern:** Time with "{person}" {"improves" if diff > 0 else "lowers"} mood by {pct}%'
        for person, diff, pct in _tag_mood_diffs(entries, "people")
    ]


def analyze_patterns(entries: Sequence[DailyEntry]) -> list[str]:
    """
    Run every miner over the non-missing entries.

    Args:
        entries: A gap-filled or raw series; placeholders are ignored

    Returns:
        Markdown statements in caffeine, sleep, activity, people order;
        empty when nothing crosses its threshold
    """
    valid = valid_entries(entries)
    if not valid:
        return []

    statements = (
        caffeine_impact(valid)
        + sleep_impact(valid)
        + activity_impact(valid)
        + people_impact(valid)
    )
    logger.debug(f"Found {len(statements)} patterns across {len(valid)} entries")
    return statements
