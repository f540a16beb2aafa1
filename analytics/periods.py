"""
Calendar arithmetic for the analytics periods.

Periods are calendar-aligned: a Monday-Sunday week, a calendar month, a
calendar quarter ("3months") or a calendar year. An offset of 0 is the period
containing today, negative offsets walk back in time. Navigation never goes
into the future, so positive offsets are clamped to 0.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, NamedTuple, TypeVar

logger = logging.getLogger(__name__)

PERIODS = ("week", "month", "3months", "year")

MONTH_SHORT = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
MONTH_LONG = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
# Sunday=0, matching the tracker's weekday numbering
DAY_SHORT = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
DAY_LONG = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

DATE_FORMATS = ("YYYY-MM-DD", "MMM DD", "M/D")

T = TypeVar("T")


class DateRange(NamedTuple):
    start: date
    end: date


def parse_day(value) -> date:
    """Coerce a YYYY-MM-DD string, date or datetime (incl. pandas Timestamp) to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Cannot interpret {value!r} as a date")


def _today(now: date | datetime | None) -> date:
    if now is None:
        return date.today()
    return parse_day(now)


def month_bounds(year: int, month_index: int) -> DateRange:
    """Bounds of a month given a possibly out-of-range 0-based month index."""
    year += month_index // 12
    month = month_index % 12 + 1
    start = date(year, month, 1)
    if month == 12:
        end = date(year, 12, 31)
    else:
        end = date(year, month + 1, 1) - timedelta(days=1)
    return DateRange(start, end)


def date_range(period: str, offset: int = 0, now: date | datetime | None = None) -> DateRange:
    """
    Return inclusive calendar bounds for a period.

    Args:
        period: One of "week", "month", "3months", "year"
        offset: 0 for the current period, -1 for the one before, etc.
        now: Reference instant (default: today)

    Returns:
        DateRange(start, end)

    Raises:
        ValueError: If the period is unknown
    """
    if period not in PERIODS:
        raise ValueError(f"Unknown period {period!r}, expected one of {PERIODS}")
    if offset > 0:
        logger.debug(f"Clamping future offset {offset} to 0")
        offset = 0

    today = _today(now)

    if period == "week":
        monday = today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
        return DateRange(monday, monday + timedelta(days=6))

    if period == "month":
        return month_bounds(today.year, today.month - 1 + offset)

    if period == "3months":
        quarter = (today.month - 1) // 3 + offset
        start = month_bounds(today.year, quarter * 3)
        end = month_bounds(today.year, quarter * 3 + 2)
        return DateRange(start.start, end.end)

    year = today.year + offset
    return DateRange(date(year, 1, 1), date(year, 12, 31))


def period_label(period: str, offset: int = 0, now: date | datetime | None = None) -> str:
    """Human-readable label for a period, e.g. "Oct 12 – 18, 2026"."""
    start, end = date_range(period, offset, now)

    if period == "week":
        if start.month == end.month and start.year == end.year:
            return f"{MONTH_SHORT[start.month - 1]} {start.day} – {end.day}, {start.year}"
        return (
            f"{MONTH_SHORT[start.month - 1]} {start.day} – "
            f"{MONTH_SHORT[end.month - 1]} {end.day}, {end.year}"
        )
    if period == "month":
        return f"{MONTH_LONG[start.month - 1]} {start.year}"
    if period == "3months":
        return f"{MONTH_SHORT[start.month - 1]} – {MONTH_SHORT[end.month - 1]} {end.year}"
    return str(start.year)


def format_date(value, fmt: str = "YYYY-MM-DD") -> str:
    """Format a date using one of DATE_FORMATS."""
    day = parse_day(value)
    if fmt == "YYYY-MM-DD":
        return day.isoformat()
    if fmt == "MMM DD":
        return f"{MONTH_SHORT[day.month - 1]} {day.day}"
    if fmt == "M/D":
        return f"{day.month}/{day.day}"
    raise ValueError(f"Unknown date format {fmt!r}, expected one of {DATE_FORMATS}")


def weekday_index(value, monday_first: bool = False) -> int:
    """Weekday number, Sunday=0 by default or Monday=0 when monday_first."""
    weekday = parse_day(value).weekday()  # proleptic Gregorian, Monday=0
    if monday_first:
        return weekday
    return (weekday + 1) % 7


def day_of_week(value, full_name: bool = False) -> str:
    names = DAY_LONG if full_name else DAY_SHORT
    return names[weekday_index(value)]


def days_between(start, end) -> int:
    return abs((parse_day(end) - parse_day(start)).days)


def iter_days(start, end) -> Iterator[date]:
    """Yield every date from start to end inclusive."""
    current = parse_day(start)
    last = parse_day(end)
    while current <= last:
        yield current
        current += timedelta(days=1)


def filter_by_range(entries: Iterable[T], start, end) -> list[T]:
    """Keep entries whose date falls within [start, end]."""
    first = parse_day(start)
    last = parse_day(end)
    return [entry for entry in entries if first <= entry.date <= last]
