"""
Data model for tracker entries and the structures derived from them.

Entries are immutable snapshots of what the store returned. Parsing accepts
both the document shape written by the tracker and the row shape returned
by BigQuery (dates as datetime.date, repeated fields as arrays, nulls as
None/NaN/pd.NA).
"""

from dataclasses import dataclass, field
from datetime import date
from numbers import Real
from typing import Any

import numpy as np

from analytics.periods import parse_day

SLOTS_PER_DAY = 48
SCALE_MIN = 1
SCALE_MAX = 7
SCALE_DEFAULT = 4

# Minute fields recorded per day in the habit collection
HABIT_MINUTE_FIELDS = (
    "cleaning_time",
    "reading_fiction",
    "reading_nonfiction",
    "reading_fanfic",
    "reading_comic",
    "writing_nonfiction",
    "writing_poetry",
    "writing_prose",
    "writing_reflection",
    "exercise_time",
    "exercise_steps",
    "second_language_time",
)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid reading
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return value == value  # NaN check


def scale_value(value: Any) -> int | float:
    """Return a 1-7 scale reading, or the baseline 4 if absent or out of range."""
    if _is_number(value) and SCALE_MIN <= value <= SCALE_MAX:
        return value
    return SCALE_DEFAULT


def non_negative(value: Any) -> int | float:
    """Return a count (caffeine mg, minutes), or 0 if absent or negative."""
    if _is_number(value) and value >= 0:
        return value
    return 0


def _optional_scale(value: Any) -> int | float | None:
    if _is_number(value):
        return value.item() if hasattr(value, "item") else value
    return None


def _tags(value: Any) -> frozenset[str]:
    if value is None or isinstance(value, (str, bytes)):
        return frozenset()
    try:
        return frozenset(str(tag) for tag in value if tag is not None)
    except TypeError:
        return frozenset()


def _sleep_slots(value: Any) -> tuple[bool, ...] | None:
    if value is None or isinstance(value, (str, bytes)):
        return None
    try:
        slots = tuple(bool(slot) for slot in value)
    except TypeError:
        return None
    if len(slots) != SLOTS_PER_DAY:
        return None
    return slots


def _text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    return None


def _is_true(value: Any) -> bool:
    # Only a real boolean True counts; "true", 1 and NA do not
    return isinstance(value, (bool, np.bool_)) and bool(value)


def flag_column(habit_id: str) -> str:
    """Column name of a habit's completion flag in the habit table."""
    return habit_id.replace("-", "_")


@dataclass(frozen=True)
class ScaleRange:
    """Highest and lowest reading of a two-sided metric (energy, mood)."""

    highest: int | float | None = None
    lowest: int | float | None = None

    @classmethod
    def from_record(cls, value: Any) -> "ScaleRange":
        if not isinstance(value, dict):
            return cls()
        return cls(
            highest=_optional_scale(value.get("highest")),
            lowest=_optional_scale(value.get("lowest")),
        )


@dataclass(frozen=True)
class DailyEntry:
    """One tracked day."""

    date: date
    sleep: tuple[bool, ...] | None = None
    caffeine: int | float | None = None
    energy: ScaleRange = field(default_factory=ScaleRange)
    mood: ScaleRange = field(default_factory=ScaleRange)
    anxiety: int | float | None = None
    irritability: int | float | None = None
    activities: frozenset[str] = frozenset()
    people: frozenset[str] = frozenset()
    note: str | None = None

    @property
    def caffeine_mg(self) -> int | float:
        return non_negative(self.caffeine)

    @property
    def date_str(self) -> str:
        return self.date.isoformat()

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "DailyEntry":
        """Build an entry from a store document or a BigQuery row."""
        return cls(
            date=parse_day(record["date"]),
            sleep=_sleep_slots(record.get("sleep")),
            caffeine=_optional_scale(record.get("caffeine")),
            energy=ScaleRange.from_record(record.get("energy")),
            mood=ScaleRange.from_record(record.get("mood")),
            anxiety=_optional_scale(record.get("anxiety")),
            irritability=_optional_scale(record.get("irritability")),
            activities=_tags(record.get("activities")),
            people=_tags(record.get("people")),
            note=_text(record.get("note")),
        )


@dataclass(frozen=True)
class GapFilledEntry(DailyEntry):
    """A DailyEntry placed on a calendar-complete series."""

    is_missing: bool = False

    @classmethod
    def wrap(cls, entry: DailyEntry) -> "GapFilledEntry":
        return cls(
            date=entry.date,
            sleep=entry.sleep,
            caffeine=entry.caffeine,
            energy=entry.energy,
            mood=entry.mood,
            anxiety=entry.anxiety,
            irritability=entry.irritability,
            activities=entry.activities,
            people=entry.people,
            note=entry.note,
            is_missing=False,
        )

    @classmethod
    def baseline(cls, day: date) -> "GapFilledEntry":
        """Placeholder for a date with nothing recorded."""
        return cls(
            date=day,
            energy=ScaleRange(SCALE_DEFAULT, SCALE_DEFAULT),
            mood=ScaleRange(SCALE_DEFAULT, SCALE_DEFAULT),
            anxiety=SCALE_DEFAULT,
            irritability=SCALE_DEFAULT,
            is_missing=True,
        )


@dataclass(frozen=True)
class AggregatedBucket(GapFilledEntry):
    """Several GapFilledEntry collapsed into one point of a coarser series."""

    days: int = 0
    tracked_days: int = 0


@dataclass(frozen=True)
class SleepPeriod:
    """A maximal run of asleep slots; start and end are inclusive slot indices."""

    start: int
    end: int

    @property
    def duration(self) -> float:
        return (self.end - self.start + 1) * 0.5


@dataclass(frozen=True)
class SleepAnalysis:
    duration: float = 0.0
    bedtime: str | None = None
    wake_time: str | None = None
    periods: tuple[SleepPeriod, ...] = ()
    main_sleep_duration: float = 0.0
    naps: tuple[SleepPeriod, ...] = ()
    has_naps: bool = False
    nap_count: int = 0
    total_nap_duration: float = 0.0


@dataclass(frozen=True)
class SleepBucket:
    """One point of a sleep series: a single night or an aggregate of several."""

    date: date
    duration: float
    bedtime: str
    wake_time: str
    bedtime_minutes: int
    wake_time_minutes: int
    has_naps: bool
    nap_count: int
    days: int = 1


@dataclass(frozen=True)
class HabitEntry:
    """One day of the habit collection."""

    date: date
    minutes: dict[str, int | float] = field(default_factory=dict)
    exercise_types: tuple[str, ...] = ()
    flags: dict[str, bool] = field(default_factory=dict)

    def minute(self, name: str) -> int | float:
        return non_negative(self.minutes.get(name))

    @classmethod
    def from_record(cls, record: dict[str, Any], habit_ids: tuple[str, ...] = ()) -> "HabitEntry":
        """Build a habit entry; habit_ids names the boolean completion flags to read."""
        minutes = {
            name: non_negative(record.get(name))
            for name in HABIT_MINUTE_FIELDS
            if record.get(name) is not None
        }
        types = record.get("exercise_types")
        if isinstance(types, (list, tuple, np.ndarray)):
            exercise_types = tuple(str(t) for t in types if t is not None)
        else:
            exercise_types = ()

        flags = {}
        for habit_id in habit_ids:
            # Table columns cannot hold "-", so second-language is stored as second_language
            for key in (habit_id, flag_column(habit_id)):
                if key in record:
                    flags[habit_id] = _is_true(record[key])
                    break
        return cls(
            date=parse_day(record["date"]),
            minutes=minutes,
            exercise_types=exercise_types,
            flags=flags,
        )
