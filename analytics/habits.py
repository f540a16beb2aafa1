"""
Habit rollup: per-habit totals, completion, period-over-period change and
commentary for the habit collection.

Commentary is data: each (habit, period) pair owns an ordered table of
(predicate, message) bands and the first band whose predicate matches wins.
The last band of every table always matches.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Iterable, NamedTuple, Sequence

from analytics.models import HabitEntry
from analytics.periods import MONTH_SHORT, month_bounds, date_range, filter_by_range, iter_days
from analytics.stats import round_half_up

logger = logging.getLogger(__name__)

HABIT_IDS = ("cleaning", "exercise", "reading", "writing", "second-language")
HABIT_NAMES = {
    "cleaning": "Cleaning",
    "exercise": "Exercise",
    "reading": "Reading",
    "writing": "Writing",
    "second-language": "Second Language",
}

# Minute fields summed into each habit's daily total
HABIT_FIELDS = {
    "cleaning": ("cleaning_time",),
    "exercise": ("exercise_time",),
    "reading": ("reading_fiction", "reading_nonfiction", "reading_fanfic", "reading_comic"),
    "writing": ("writing_nonfiction", "writing_poetry", "writing_prose", "writing_reflection"),
    "second-language": ("second_language_time",),
}

# (label, field, short tag) per sub-category
CATEGORIES = {
    "reading": (
        ("Fiction", "reading_fiction", "fic"),
        ("Non-fiction", "reading_nonfiction", "nonfic"),
        ("Fanfic", "reading_fanfic", "fanfic"),
        ("Comic", "reading_comic", "comic"),
    ),
    "writing": (
        ("Non-fiction", "writing_nonfiction", "nonfic"),
        ("Poetry", "writing_poetry", "poetry"),
        ("Prose", "writing_prose", "prose"),
        ("Reflection", "writing_reflection", "reflect"),
    ),
}

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
NO_MINUTES = "—"


def _check_habit(habit_id: str) -> None:
    if habit_id not in HABIT_FIELDS:
        raise ValueError(f"Unknown habit {habit_id!r}, expected one of {HABIT_IDS}")


def day_minutes(entry: HabitEntry, habit_id: str) -> int | float:
    _check_habit(habit_id)
    return sum(entry.minute(name) for name in HABIT_FIELDS[habit_id])


def is_done(entry: HabitEntry, habit_id: str) -> bool:
    """A habit counts as done with any minutes logged or its flag set."""
    return day_minutes(entry, habit_id) > 0 or entry.flags.get(habit_id) is True


def total_minutes(entries: Iterable[HabitEntry], habit_id: str) -> int | float:
    return sum(day_minutes(e, habit_id) for e in entries)


def done_days(entries: Iterable[HabitEntry], habit_id: str) -> int:
    return sum(1 for e in entries if is_done(e, habit_id))


def field_total(entries: Iterable[HabitEntry], name: str) -> int | float:
    return sum(e.minute(name) for e in entries)


def format_minutes(minutes) -> str:
    """45 -> "45min", 65 -> "1h 5min", 120 -> "2h", nothing -> "—"."""
    if minutes is None or minutes <= 0:
        return NO_MINUTES
    minutes = int(minutes)
    if minutes < 60:
        return f"{minutes}min"
    hours, rest = divmod(minutes, 60)
    return f"{hours}h" + (f" {rest}min" if rest else "")


def trend_arrow(current, previous, steps: bool = False) -> str:
    """
    Arrow and signed change between two totals.

    Minutes render through format_minutes and changes under a minute count
    as flat; step counts render with thousands separators and only an exact
    tie is flat. Returns "" when both totals are zero.
    """
    current = current or 0
    previous = previous or 0
    if not current and not previous:
        return ""

    diff = current - previous
    flat = diff == 0 if steps else abs(diff) < 1
    if flat:
        return "→"

    amount = f"{int(abs(diff)):,}" if steps else format_minutes(abs(diff))
    if diff > 0:
        return f"↑ +{amount}"
    return f"↓ {amount}"


# Commentary bands

class BandInput(NamedTuple):
    total: int | float
    done: int
    # Writing prose plus poetry minutes
    creative: int | float


Predicate = Callable[[BandInput], bool]
Band = tuple[Predicate, str]


def _under(limit) -> Predicate:
    return lambda b: b.total < limit


def _upto(limit) -> Predicate:
    return lambda b: b.total <= limit


def _always(b: BandInput) -> bool:
    return True


COMMENTARY: dict[tuple[str, str], list[Band]] = {
    ("cleaning", "week"): [
        (_under(20), "Eeew... Go clean, NOW!"),
        (_upto(60), "Good job, keep it up!"),
        (_upto(100), "Wow, are you a roomba? That's impressive time spent cleaning!"),
        (_always, "Are you overcompensating or procrastinating?"),
    ],
    ("exercise", "week"): [
        (_under(20), "Get up and move! Your body will thank you!"),
        (_upto(60), "Nice work, keep it up!"),
        (_upto(120), "Wow, are you a Chloe Ting? That's impressive time spent exercising!"),
        (_always, "That's suspicious... Keep it up."),
    ],
    ("reading", "week"): [
        (_under(20), "What the fuck happened to you this week?"),
        (_upto(80), "Go read something, NOW!"),
        (_upto(210), "You should be reading more."),
        (_upto(420), "Nice, but you can do better!"),
        (_upto(840), "Good job, little bookwormie! Knowledge is power even if the knowledge is questionable."),
        (_upto(1260), "Are you studying, researching or binge-reading romance? Either way GOOD JOB!"),
        (_always, "Holy fuck you're a bookworm. That is a compliment by the way."),
    ],
    ("writing", "week"): [
        (lambda b: b.creative > 210, "Go, little writer, go!"),
        (_under(120), "You should be writing more."),
        (_always, "Words on the page. Keep them coming."),
    ],
    ("second-language", "week"): [
        (lambda b: b.total < 30 or b.done < 2, "Idiota."),
        (_upto(60), "Nice, but you can do better!"),
        (_upto(120), "Good job, keep it up!"),
        (_always, "Let's do this every week!"),
    ],
    ("cleaning", "month"): [
        (_under(80), "Your place must be a biohazard at this point."),
        (_upto(240), "Decent month — habitat remains habitable!"),
        (_upto(400), "Immaculate home, immaculate vibes."),
        (_always, "You've been cleaning more than living. Go touch grass."),
    ],
    ("exercise", "month"): [
        (_under(80), "One month of mostly sitting. Your body is sending distress signals."),
        (_upto(240), "Consistent effort this month. Your future self approves."),
        (_upto(480), "Solid month of movement. You're built different."),
        (_always, "Are you training for something or just thriving? Either way, wow."),
    ],
    ("reading", "month"): [
        (_under(80), "A whole month and barely a page. Shameful."),
        (_upto(320), "A little reading is better than none. But just a little."),
        (_upto(840), "You're keeping the habit alive. Respect."),
        (_upto(1680), "A solid reading month! Your TBR pile is shrinking."),
        (_upto(3360), "You read a lot this month. Like, a lot a lot."),
        (_upto(5040), "At this point reading is your whole personality and that's okay."),
        (_always, "You have ascended. The books have chosen you."),
    ],
    ("writing", "month"): [
        (_under(480), "The blank page awaits. It's patient. You shouldn't be."),
        (lambda b: b.creative > 840, "A creative month! Your characters are grateful."),
        (_always, "Writing is showing up. You showed up."),
    ],
    ("second-language", "month"): [
        (lambda b: b.total < 120 or b.done < 8, "¿Hablas? Apparently not enough."),
        (_upto(240), "Consistent enough to not forget everything. Barely."),
        (_upto(480), "Solid language month! Neurons are firing."),
        (_always, "You're basically fluent at this rate. Keep going."),
    ],
    ("cleaning", "3months"): [
        (_under(240), "Three months of mild chaos. Nothing wrong with that, I guess."),
        (_upto(720), "Consistent enough to avoid embarrassment. Well done."),
        (_upto(1300), "Your place must be spotless. Teach me your ways."),
        (_always, "You are the cleaning. The cleaning is you."),
    ],
    ("exercise", "3months"): [
        (_under(240), "Three months is enough time to form a habit. Start now?"),
        (_upto(780), "You're moving! Not breaking records but definitely not breaking bones either."),
        (_upto(1560), "A quarter of dedicated movement. That's genuinely impressive."),
        (_always, "You might actually be built different. Seriously."),
    ],
    ("reading", "3months"): [
        (_under(240), "Three months, minimal reading. The books are sad."),
        (_upto(1000), "A gentle reader. Could be more, could be less."),
        (_upto(2520), "Consistent reader! That's what matters."),
        (_upto(5040), "A quarter of serious reading. Goodreads would be proud."),
        (_always, "You've read more in 3 months than most read in a year. Legend."),
    ],
    ("writing", "3months"): [
        (_under(1440), "Three months is enough time to write... something."),
        (lambda b: b.creative > 2520, "Three months of creative output. That's a whole draft."),
        (_always, "Keep the pen moving."),
    ],
    ("second-language", "3months"): [
        (lambda b: b.total < 360 or b.done < 24, "Three months of half-heartedness. The language noticed."),
        (_upto(720), "Regular practice over 3 months. That's real progress."),
        (_upto(1440), "Impressive dedication. Your accent is getting better."),
        (_always, "You're fluent or getting dangerously close. Don't stop now."),
    ],
    ("cleaning", "year"): [
        (_under(1040), "A whole year of questionable hygiene choices."),
        (_upto(3120), "Steady, reliable, unglamorous. Just like cleaning itself."),
        (_upto(5200), "Clean home, clear mind. You've got this down."),
        (_always, "At this point just hire a cleaner and live a little."),
    ],
    ("exercise", "year"): [
        (_under(1040), "A year went by. Your gym membership is crying."),
        (_upto(3120), "Consistent mover. You should be proud."),
        (_upto(5200), "A whole year of real effort. Your body is a testament to it."),
        (_always, "This is not normal (compliment). An absolute unit."),
    ],
    ("reading", "year"): [
        (_under(1040), "A year passed. The library misses you."),
        (_upto(4000), "You read. Not a lot, but you read. Counts."),
        (_upto(10000), "A genuine reader with a genuine habit. Beautiful."),
        (_upto(20000), "This is what a bibliophile looks like. Magnificent."),
        (_always, "You have transcended the physical plane through books."),
    ],
    ("writing", "year"): [
        (_under(5200), "A year went by. What story didn't get written?"),
        (lambda b: b.creative > 10000, "A year of real creative work. That's a body of work."),
        (_always, "Every word you wrote this year matters."),
    ],
    ("second-language", "year"): [
        (_under(1440), "A year of sporadic language learning. Better than nothing, barely."),
        (_upto(5000), "A year of consistent practice. You've grown, linguistically."),
        (_always, "A whole year of language dedication. Stunning. Bilingual queen."),
    ],
}


def commentary(habit_id: str, period: str, entries: Sequence[HabitEntry]) -> str:
    """
    Pick the commentary band for a habit's totals over a period.

    Raises:
        ValueError: For an unknown habit or period
    """
    _check_habit(habit_id)
    bands = COMMENTARY.get((habit_id, period))
    if bands is None:
        raise ValueError(f"Unknown period {period!r}")

    band_input = BandInput(
        total=total_minutes(entries, habit_id),
        done=done_days(entries, habit_id),
        creative=field_total(entries, "writing_prose") + field_total(entries, "writing_poetry"),
    )
    for predicate, message in bands:
        if predicate(band_input):
            return message
    # Unreachable while every table ends with _always
    raise ValueError(f"No commentary band matched for {habit_id} over {period}")


def reading_extra(entries: Sequence[HabitEntry]) -> str | None:
    """Genre aside shown under the weekly reading message."""
    fiction = field_total(entries, "reading_fiction")
    nonfiction = field_total(entries, "reading_nonfiction")
    fanfic = field_total(entries, "reading_fanfic")
    comic = field_total(entries, "reading_comic")

    if fanfic > 0 and fanfic > fiction + nonfiction + comic:
        return "Mmm... yaoi"
    if fanfic > 0 and fanfic == fiction + comic:
        return "Woah, look at that equilibrium!"
    if nonfiction > 0 and nonfiction == max(fiction, nonfiction, fanfic, comic):
        return "Big brain energy this week!"
    if fiction > 0 and comic > 0 and fanfic > 0 and abs((fiction + comic + fanfic) - nonfiction) < 5:
        return "Nice balance between entertainment and knowledge."
    if fiction > 120 and fiction >= max(nonfiction, fanfic, comic):
        return "Don't forget to log them books into Goodreads."
    return None


def category_totals(entries: Sequence[HabitEntry], habit_id: str) -> list[tuple[str, int | float]]:
    """Minutes per sub-category with anything logged, for reading and writing."""
    return [
        (label, total)
        for label, name, _ in CATEGORIES.get(habit_id, ())
        if (total := field_total(entries, name)) > 0
    ]


def exercise_type_counts(entries: Sequence[HabitEntry]) -> list[tuple[str, int]]:
    counts: Counter = Counter()
    for entry in entries:
        counts.update(entry.exercise_types)
    return counts.most_common()


@dataclass
class HabitSummary:
    """Everything the habit panel shows for one habit over one period."""

    habit_id: str
    name: str
    period: str
    total: int | float
    done: int
    previous_total: int | float
    previous_done: int
    message: str
    average: int | None = None
    extra: str | None = None
    categories: list[tuple[str, int | float]] = field(default_factory=list)
    steps: int | float = 0
    previous_steps: int | float = 0
    average_steps: int | None = None
    exercise_types: list[tuple[str, int]] = field(default_factory=list)

    @property
    def delta(self) -> int | float:
        return self.total - self.previous_total

    @property
    def trend(self) -> str:
        return trend_arrow(self.total, self.previous_total)

    @property
    def steps_trend(self) -> str:
        return trend_arrow(self.steps, self.previous_steps, steps=True)


def summarize_habit(
    habit_id: str,
    entries: Sequence[HabitEntry],
    previous_entries: Sequence[HabitEntry],
    period: str,
) -> HabitSummary:
    """
    Roll up one habit over a period against the period before it.

    Args:
        habit_id: One of HABIT_IDS
        entries: Habit entries inside the selected period
        previous_entries: Habit entries inside the preceding period
        period: "week", "month", "3months" or "year"

    Returns:
        HabitSummary with totals, averages, breakdowns and commentary
    """
    total = total_minutes(entries, habit_id)
    done = done_days(entries, habit_id)

    summary = HabitSummary(
        habit_id=habit_id,
        name=HABIT_NAMES[habit_id],
        period=period,
        total=total,
        done=done,
        previous_total=total_minutes(previous_entries, habit_id),
        previous_done=done_days(previous_entries, habit_id),
        message=commentary(habit_id, period, entries),
        categories=category_totals(entries, habit_id),
    )
    if total > 0 and done > 0:
        summary.average = int(round_half_up(total / done, 0))

    if habit_id == "reading" and period == "week":
        summary.extra = reading_extra(entries)

    if habit_id == "exercise":
        summary.steps = field_total(entries, "exercise_steps")
        summary.previous_steps = field_total(previous_entries, "exercise_steps")
        if summary.steps > 0 and done > 0:
            summary.average_steps = int(round_half_up(summary.steps / done, 0))
        summary.exercise_types = exercise_type_counts(entries)

    return summary


def habit_rollup(
    entries: Sequence[HabitEntry],
    period: str,
    offset: int = 0,
    now=None,
) -> list[HabitSummary]:
    """Summaries for every habit over the selected period and the one before it."""
    current = date_range(period, offset, now)
    previous = date_range(period, min(offset, 0) - 1, now)
    in_period = filter_by_range(entries, current.start, current.end)
    in_previous = filter_by_range(entries, previous.start, previous.end)
    logger.debug(
        f"Habit rollup for {period} {current.start}..{current.end}: "
        f"{len(in_period)} entries, {len(in_previous)} in previous period"
    )
    return [summarize_habit(habit_id, in_period, in_previous, period) for habit_id in HABIT_IDS]


# Calendar visuals

@dataclass(frozen=True)
class HabitDay:
    date: date
    label: str
    minutes: int | float
    done: bool
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class HabitBlock:
    start: date
    end: date
    label: str
    total: int | float
    done: int
    # 0..1 shade relative to the busiest block
    intensity: float = 0.0


def _day_tags(entry: HabitEntry, habit_id: str, minutes) -> tuple[str, ...]:
    if habit_id == "exercise":
        return tuple(t[:5] for t in entry.exercise_types[:3])
    if habit_id in CATEGORIES and minutes > 0:
        tags = [tag for _, name, tag in CATEGORIES[habit_id] if entry.minute(name) > 0]
        return tuple(tags[:2])
    return ()


def habit_days(entries: Sequence[HabitEntry], habit_id: str, start, end) -> list[HabitDay]:
    """One row per calendar day for the week calendar and the month grid."""
    _check_habit(habit_id)
    by_date = {e.date: e for e in entries}
    days = []
    for day in iter_days(start, end):
        entry = by_date.get(day)
        label = WEEKDAY_LABELS[day.weekday()]
        if entry is None:
            days.append(HabitDay(day, label, 0, False))
            continue
        minutes = day_minutes(entry, habit_id)
        days.append(HabitDay(day, label, minutes, is_done(entry, habit_id), _day_tags(entry, habit_id, minutes)))
    return days


def _block_bounds(start: date, end: date, unit: str) -> list[tuple[date, date, str]]:
    bounds = []
    if unit == "week":
        current = start - timedelta(days=start.weekday())
        while current <= end:
            bounds.append((current, current + timedelta(days=6), f"{MONTH_SHORT[current.month - 1]} {current.day}"))
            current += timedelta(days=7)
    elif unit == "month":
        index = start.month - 1
        while True:
            month_start, month_end = month_bounds(start.year, index)
            if month_start > end:
                break
            bounds.append((month_start, month_end, f"{MONTH_SHORT[month_start.month - 1]} {month_start.year}"))
            index += 1
    else:
        raise ValueError(f"Unknown block unit {unit!r}, expected 'week' or 'month'")
    return bounds


def habit_blocks(entries: Sequence[HabitEntry], habit_id: str, start, end, unit: str = "week") -> list[HabitBlock]:
    """
    Per-week (Monday-aligned) or per-month totals across a range.

    A block with minutes is shaded by its share of the busiest block; a block
    with only flagged days gets a faint 0.2.
    """
    _check_habit(habit_id)
    raw = []
    for block_start, block_end, label in _block_bounds(start, end, unit):
        members = filter_by_range(entries, block_start, block_end)
        raw.append((block_start, block_end, label, total_minutes(members, habit_id), done_days(members, habit_id)))

    busiest = max((total for *_, total, _ in raw), default=0) or 1
    blocks = []
    for block_start, block_end, label, total, done in raw:
        if total > 0:
            intensity = total / busiest
        elif done > 0:
            intensity = 0.2
        else:
            intensity = 0.0
        blocks.append(HabitBlock(block_start, block_end, label, total, done, intensity))
    return blocks
