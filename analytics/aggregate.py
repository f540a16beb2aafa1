"""
Re-aggregation of a daily series into weekly or monthly points.

Two policies coexist on purpose. The scalar aggregators always emit one
bucket per chunk (a placeholder when every member is missing) so the chart's
x-axis stays aligned with the calendar. The sleep aggregators drop chunks
with no recorded sleep, so no zero-length sleep bar is drawn.
"""

import logging
from datetime import date
from typing import Iterable, Sequence

from analytics.metrics import Metric, metric_values
from analytics.models import (
    SCALE_DEFAULT,
    AggregatedBucket,
    GapFilledEntry,
    ScaleRange,
    SleepBucket,
)
from analytics.sleep import (
    analyze_sleep,
    circular_bedtime_minutes,
    mean_wake_minutes,
    minutes_to_time,
)
from analytics.stats import mean, round_half_up

logger = logging.getLogger(__name__)

DAILY = "day"
WEEKLY = "week"
MONTHLY = "month"

# Chart granularity per analytics period
PERIOD_GRANULARITY = {
    "week": DAILY,
    "month": DAILY,
    "3months": WEEKLY,
    "year": MONTHLY,
}

WEEK_CHUNK = 7


def _chunks(entries: Sequence[GapFilledEntry], chunk_size: int) -> list[Sequence[GapFilledEntry]]:
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [entries[i:i + chunk_size] for i in range(0, len(entries), chunk_size)]


def _months(entries: Iterable[GapFilledEntry]) -> dict[date, list[GapFilledEntry]]:
    """Group by the YYYY-MM of each date, keyed by the first of the month."""
    groups: dict[date, list[GapFilledEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.date.replace(day=1), []).append(entry)
    return groups


def _avg(values: Sequence[float]) -> float:
    return round_half_up(mean(values), 1)


def bucket(members: Sequence[GapFilledEntry], bucket_date: date) -> AggregatedBucket:
    """Collapse members into one point averaging only the non-missing ones."""
    valid = [m for m in members if not m.is_missing]

    if not valid:
        return AggregatedBucket(
            date=bucket_date,
            energy=ScaleRange(SCALE_DEFAULT, SCALE_DEFAULT),
            mood=ScaleRange(SCALE_DEFAULT, SCALE_DEFAULT),
            anxiety=SCALE_DEFAULT,
            irritability=SCALE_DEFAULT,
            is_missing=True,
            days=len(members),
            tracked_days=0,
        )

    return AggregatedBucket(
        date=bucket_date,
        caffeine=_avg([m.caffeine_mg for m in valid]),
        energy=ScaleRange(
            highest=_avg(metric_values(valid, Metric.ENERGY, "highest")),
            lowest=_avg(metric_values(valid, Metric.ENERGY, "lowest")),
        ),
        mood=ScaleRange(
            highest=_avg(metric_values(valid, Metric.MOOD, "highest")),
            lowest=_avg(metric_values(valid, Metric.MOOD, "lowest")),
        ),
        anxiety=_avg(metric_values(valid, Metric.ANXIETY)),
        irritability=_avg(metric_values(valid, Metric.IRRITABILITY)),
        activities=frozenset().union(*(m.activities for m in valid)),
        people=frozenset().union(*(m.people for m in valid)),
        is_missing=False,
        days=len(members),
        tracked_days=len(valid),
    )


def aggregate_by_chunk(entries: Sequence[GapFilledEntry], chunk_size: int) -> list[AggregatedBucket]:
    """Collapse consecutive runs of chunk_size entries, dated at each run's first day."""
    buckets = [bucket(chunk, chunk[0].date) for chunk in _chunks(entries, chunk_size)]
    logger.debug(f"Aggregated {len(entries)} entries into {len(buckets)} chunks of {chunk_size}")
    return buckets


def aggregate_by_calendar_month(entries: Sequence[GapFilledEntry]) -> list[AggregatedBucket]:
    """Collapse entries by calendar month, dated at YYYY-MM-01."""
    return [bucket(members, first) for first, members in _months(entries).items()]


def sleep_bucket(members: Sequence[GapFilledEntry], bucket_date: date) -> SleepBucket | None:
    """Average the recorded nights among members, or None if there are none."""
    nights = []
    for member in members:
        if member.is_missing or member.sleep is None:
            continue
        analysis = analyze_sleep(member.sleep)
        if analysis.duration > 0:
            nights.append(analysis)

    if not nights:
        return None

    bedtime = circular_bedtime_minutes([n.bedtime for n in nights])
    wake = mean_wake_minutes([n.wake_time for n in nights])
    bedtime_minutes = int(round_half_up(bedtime, 0)) % (24 * 60)
    wake_minutes = int(round_half_up(wake, 0)) % (24 * 60)

    return SleepBucket(
        date=bucket_date,
        duration=round_half_up(mean([n.duration for n in nights]), 1),
        bedtime=minutes_to_time(bedtime_minutes),
        wake_time=minutes_to_time(wake_minutes),
        bedtime_minutes=bedtime_minutes,
        wake_time_minutes=wake_minutes,
        has_naps=any(n.has_naps for n in nights),
        nap_count=sum(n.nap_count for n in nights),
        days=len(nights),
    )


def aggregate_sleep_by_chunk(entries: Sequence[GapFilledEntry], chunk_size: int) -> list[SleepBucket]:
    """Sleep averages per chunk; chunks without any recorded sleep are dropped."""
    buckets = [sleep_bucket(chunk, chunk[0].date) for chunk in _chunks(entries, chunk_size)]
    return [b for b in buckets if b is not None]


def aggregate_sleep_by_calendar_month(entries: Sequence[GapFilledEntry]) -> list[SleepBucket]:
    buckets = [sleep_bucket(members, first) for first, members in _months(entries).items()]
    return [b for b in buckets if b is not None]


def sleep_points(entries: Sequence[GapFilledEntry]) -> list[SleepBucket]:
    """One sleep point per day that has a recorded night."""
    points = [sleep_bucket([entry], entry.date) for entry in entries]
    return [p for p in points if p is not None]


def granularity_for(period: str) -> str:
    try:
        return PERIOD_GRANULARITY[period]
    except KeyError:
        raise ValueError(f"Unknown period {period!r}") from None


def series_for_period(entries: Sequence[GapFilledEntry], period: str) -> list[GapFilledEntry]:
    """The chart series for a period: daily, weekly chunks or calendar months."""
    granularity = granularity_for(period)
    if granularity == WEEKLY:
        return aggregate_by_chunk(entries, WEEK_CHUNK)
    if granularity == MONTHLY:
        return aggregate_by_calendar_month(entries)
    return list(entries)


def sleep_series_for_period(entries: Sequence[GapFilledEntry], period: str) -> list[SleepBucket]:
    granularity = granularity_for(period)
    if granularity == WEEKLY:
        return aggregate_sleep_by_chunk(entries, WEEK_CHUNK)
    if granularity == MONTHLY:
        return aggregate_sleep_by_calendar_month(entries)
    return sleep_points(entries)
