"""
Dashboard session: cached entry snapshots, fetch sequencing and period
navigation.

One AnalyticsSession lives per browser session (the Streamlit layer keeps it
in st.session_state). The analytics functions stay pure; everything stateful
is here.
"""

import logging
import time
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Generic, TypeVar

from analytics.aggregate import series_for_period, sleep_series_for_period
from analytics.habits import HABIT_IDS
from analytics.models import DailyEntry, GapFilledEntry, HabitEntry, SleepBucket
from analytics.normalize import normalize
from analytics.periods import PERIODS, DateRange, date_range, period_label

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 5 * 60
DEFAULT_PERIOD = "week"

Loader = Callable[[str], list[dict[str, Any]]]
T = TypeVar("T")


class FetchError(Exception):
    """The entry store could not be read."""


class Snapshot(Generic[T]):
    """
    A cached, date-sorted collection fetched through a loader.

    Every fetch takes a sequence number when it starts; a result is only
    installed if no later fetch has started since, so the last fetch wins.
    """

    def __init__(
        self,
        name: str,
        loader: Loader,
        parse: Callable[[dict[str, Any]], T],
        cache_ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.loader = loader
        self.parse = parse
        self.cache_ttl = cache_ttl
        self.clock = clock
        self.items: list[T] | None = None
        self.fetched_at: float | None = None
        self._sequence = 0

    @property
    def is_fresh(self) -> bool:
        if self.items is None or self.fetched_at is None:
            return False
        return self.clock() - self.fetched_at < self.cache_ttl

    def invalidate(self) -> None:
        self.fetched_at = None

    def begin_fetch(self) -> int:
        self._sequence += 1
        return self._sequence

    def complete_fetch(self, sequence: int, records: list[dict[str, Any]]) -> bool:
        """Install records fetched under sequence; returns False if they are stale."""
        if sequence != self._sequence:
            logger.info(f"Discarding stale {self.name} fetch #{sequence} (latest is #{self._sequence})")
            return False

        items = []
        for record in records:
            try:
                items.append(self.parse(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed {self.name} record: {e}")
        items.sort(key=lambda item: item.date)

        self.items = items
        self.fetched_at = self.clock()
        logger.info(f"Loaded {len(items)} {self.name} records")
        return True

    def fetch(self, user_id: str) -> list[T]:
        """
        Fetch from the loader and install the result.

        Raises:
            FetchError: If the loader fails; the previous snapshot is kept
        """
        sequence = self.begin_fetch()
        try:
            records = self.loader(user_id)
        except Exception as e:
            logger.error(f"Failed to fetch {self.name} for user {user_id}: {e}")
            raise FetchError(f"Could not load {self.name}: {e}") from e
        self.complete_fetch(sequence, records)
        return self.items if self.items is not None else []

    def get(self, user_id: str) -> list[T]:
        if self.is_fresh:
            return self.items
        return self.fetch(user_id)


@dataclass(frozen=True)
class AnalyticsView:
    """Everything a page needs to render the selected period."""

    period: str
    offset: int
    label: str
    range: DateRange
    # Calendar-complete daily series
    days: list[GapFilledEntry]
    # Series at the chart granularity of the period
    series: list[GapFilledEntry]
    sleep: list[SleepBucket]


class AnalyticsSession:
    """
    Selected period, navigation offset and cached snapshots for one user.

    Args:
        loader: Callable returning daily entry records for a user id
        user_id: Whose entries to load
        habit_loader: Callable returning habit records for a user id
        cache_ttl: Seconds a snapshot stays fresh
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        loader: Loader,
        user_id: str,
        habit_loader: Loader | None = None,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.user_id = user_id
        self.period = DEFAULT_PERIOD
        self.offset = 0
        self.daily = Snapshot("daily entries", loader, DailyEntry.from_record, cache_ttl, clock)
        self.habits = None
        if habit_loader is not None:
            parse_habit = partial(HabitEntry.from_record, habit_ids=HABIT_IDS)
            self.habits = Snapshot("habit entries", habit_loader, parse_habit, cache_ttl, clock)

    def entries(self) -> list[DailyEntry]:
        return self.daily.get(self.user_id)

    def habit_entries(self) -> list[HabitEntry]:
        if self.habits is None:
            return []
        return self.habits.get(self.user_id)

    def refresh(self) -> list[DailyEntry]:
        """Drop cached snapshots and refetch daily entries."""
        self.daily.invalidate()
        if self.habits is not None:
            self.habits.invalidate()
        return self.entries()

    def set_period(self, period: str) -> None:
        if period not in PERIODS:
            raise ValueError(f"Unknown period {period!r}, expected one of {PERIODS}")
        if period != self.period:
            self.period = period
            self.offset = 0

    def navigate(self, step: int) -> bool:
        """Move the offset by step; refuses to move into the future."""
        target = self.offset + step
        if target > 0:
            return False
        self.offset = target
        return True

    def current_range(self, now=None) -> DateRange:
        return date_range(self.period, self.offset, now)

    def previous_range(self, now=None) -> DateRange:
        return date_range(self.period, self.offset - 1, now)

    def label(self, now=None) -> str:
        return period_label(self.period, self.offset, now)

    def view(self, now=None) -> AnalyticsView:
        """
        Build the normalized and aggregated series for the selected period.

        Raises:
            FetchError: If the snapshot is stale and refetching fails
        """
        bounds = self.current_range(now)
        days = normalize(self.entries(), bounds.start, bounds.end)
        return AnalyticsView(
            period=self.period,
            offset=self.offset,
            label=self.label(now),
            range=bounds,
            days=days,
            series=series_for_period(days, self.period),
            sleep=sleep_series_for_period(days, self.period),
        )
