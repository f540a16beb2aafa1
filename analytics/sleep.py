"""
Sleep interval analysis over the tracker's 48-slot day grid.

Slot i covers [i*30min, (i+1)*30min). A day's grid is scanned for maximal
runs of asleep slots; the longest run is the main sleep and every other run
of at least 30 minutes is a nap.
"""

from typing import Sequence

from analytics.models import SLOTS_PER_DAY, SleepAnalysis, SleepPeriod
from analytics.stats import mean, round_half_up

MINUTES_PER_DAY = 24 * 60
# Bedtimes before this are taken as belonging to the previous evening
LATE_NIGHT_CUTOFF_MINUTES = 6 * 60
MIN_NAP_HOURS = 0.5


def slot_to_time(slot: int) -> str:
    """Clock time at the start of a slot; slot 48 wraps to 00:00."""
    slot %= SLOTS_PER_DAY
    return f"{slot // 2:02d}:{(slot % 2) * 30:02d}"


def time_to_minutes(clock: str) -> int:
    hours, minutes = clock.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: float) -> str:
    total = int(round_half_up(minutes, 0)) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def find_periods(slots: Sequence[bool]) -> list[SleepPeriod]:
    """Maximal runs of asleep slots, in chronological order."""
    periods = []
    start = None
    for index, asleep in enumerate(slots):
        if asleep and start is None:
            start = index
        elif not asleep and start is not None:
            periods.append(SleepPeriod(start, index - 1))
            start = None
    if start is not None:
        periods.append(SleepPeriod(start, len(slots) - 1))
    return periods


def analyze_sleep(slots: Sequence[bool] | None) -> SleepAnalysis:
    """
    Reconstruct main sleep and naps from a day's 48 slots.

    A missing grid, one of the wrong length, or one with no asleep slot
    yields an empty analysis (duration 0, no bedtime or wake time).
    """
    if slots is None or len(slots) != SLOTS_PER_DAY:
        return SleepAnalysis()

    periods = find_periods(slots)
    if not periods:
        return SleepAnalysis()

    # sorted() is stable, so the earlier run wins a tie for longest
    by_length = sorted(periods, key=lambda p: p.duration, reverse=True)
    main = by_length[0]
    naps = tuple(p for p in by_length[1:] if p.duration >= MIN_NAP_HOURS)

    return SleepAnalysis(
        duration=sum(p.duration for p in periods),
        bedtime=slot_to_time(main.start),
        wake_time=slot_to_time(main.end + 1),
        periods=tuple(periods),
        main_sleep_duration=main.duration,
        naps=naps,
        has_naps=bool(naps),
        nap_count=len(naps),
        total_nap_duration=sum(n.duration for n in naps),
    )


def night_minutes(bedtime: str) -> int:
    """Bedtime in minutes on a clock that keeps small hours after the evening."""
    minutes = time_to_minutes(bedtime)
    if minutes < LATE_NIGHT_CUTOFF_MINUTES:
        minutes += MINUTES_PER_DAY
    return minutes


def circular_bedtime_minutes(bedtimes: Sequence[str]) -> float | None:
    """
    Average bedtime in minutes after midnight, wrapping past-midnight times.

    23:00 and 01:00 average to 00:00 rather than 12:00. Returns None when
    there is nothing to average.
    """
    if not bedtimes:
        return None
    return mean([night_minutes(b) for b in bedtimes]) % MINUTES_PER_DAY


def mean_wake_minutes(wake_times: Sequence[str]) -> float | None:
    if not wake_times:
        return None
    return mean([time_to_minutes(w) for w in wake_times])
