"""
Gap filling: turn a sparse list of entries into a calendar-complete series.
"""

import logging
from typing import Iterable

from analytics.models import DailyEntry, GapFilledEntry
from analytics.periods import iter_days

logger = logging.getLogger(__name__)


def normalize(entries: Iterable[DailyEntry], start, end) -> list[GapFilledEntry]:
    """
    Return one entry per calendar date from start to end inclusive.

    Dates without a stored entry get a baseline placeholder flagged
    is_missing=True. If entries repeats a date, the last one wins; callers
    that care which one should sort or deduplicate first.

    Args:
        entries: Stored entries in any order (may fall outside the range)
        start: First date of the series
        end: Last date of the series

    Returns:
        Ascending list of GapFilledEntry; empty if start is after end
    """
    by_date = {entry.date: entry for entry in entries}

    filled = []
    for day in iter_days(start, end):
        entry = by_date.get(day)
        if entry is None:
            filled.append(GapFilledEntry.baseline(day))
        else:
            filled.append(GapFilledEntry.wrap(entry))

    missing = sum(1 for entry in filled if entry.is_missing)
    logger.debug(f"Normalized {len(filled)} days ({missing} missing) from {start} to {end}")
    return filled


def valid_entries(entries: Iterable[DailyEntry]) -> list[DailyEntry]:
    """Drop gap-fill placeholders."""
    return [entry for entry in entries if not getattr(entry, "is_missing", False)]
