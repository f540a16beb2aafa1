"""
Tests for calendar period arithmetic.

Run with: pytest tests/test_periods.py
"""

from datetime import date, datetime
from types import SimpleNamespace

import pandas as pd
import pytest

from analytics.periods import (
    DateRange,
    date_range,
    day_of_week,
    days_between,
    filter_by_range,
    format_date,
    iter_days,
    month_bounds,
    parse_day,
    period_label,
    weekday_index,
)

# A Sunday
NOW = date(2026, 10, 18)


class TestDateRange:
    """Tests for date_range across every period."""

    def test_week_is_monday_to_sunday(self):
        assert date_range("week", 0, NOW) == DateRange(date(2026, 10, 12), date(2026, 10, 18))

    def test_previous_week(self):
        assert date_range("week", -1, NOW) == DateRange(date(2026, 10, 5), date(2026, 10, 11))

    def test_week_spanning_year_end(self):
        start, end = date_range("week", 0, date(2026, 1, 1))
        assert start == date(2025, 12, 29)
        assert end == date(2026, 1, 4)

    def test_month(self):
        assert date_range("month", 0, NOW) == DateRange(date(2026, 10, 1), date(2026, 10, 31))

    def test_previous_month_crosses_year(self):
        assert date_range("month", -1, date(2026, 1, 15)) == DateRange(date(2025, 12, 1), date(2025, 12, 31))

    def test_leap_february(self):
        assert date_range("month", 0, date(2024, 2, 10)).end == date(2024, 2, 29)

    def test_quarter(self):
        assert date_range("3months", 0, NOW) == DateRange(date(2026, 10, 1), date(2026, 12, 31))

    def test_quarter_walks_back_across_years(self):
        assert date_range("3months", -4, NOW) == DateRange(date(2025, 10, 1), date(2025, 12, 31))

    def test_year(self):
        assert date_range("year", -1, NOW) == DateRange(date(2025, 1, 1), date(2025, 12, 31))

    def test_future_offset_is_clamped(self):
        assert date_range("week", 3, NOW) == date_range("week", 0, NOW)

    def test_unknown_period_raises(self):
        with pytest.raises(ValueError):
            date_range("fortnight", 0, NOW)

    def test_accepts_datetime_now(self):
        assert date_range("year", 0, datetime(2026, 10, 18, 23, 59)).start == date(2026, 1, 1)


class TestMonthBounds:
    def test_negative_month_index(self):
        assert month_bounds(2026, -1) == DateRange(date(2025, 12, 1), date(2025, 12, 31))

    def test_overflowing_month_index(self):
        assert month_bounds(2026, 13) == DateRange(date(2027, 2, 1), date(2027, 2, 28))


class TestPeriodLabel:
    def test_week_within_month(self):
        assert period_label("week", 0, NOW) == "Oct 12 – 18, 2026"

    def test_week_across_months(self):
        assert period_label("week", 0, date(2026, 1, 1)) == "Dec 29 – Jan 4, 2026"

    def test_month(self):
        assert period_label("month", -1, date(2026, 1, 15)) == "December 2025"

    def test_quarter(self):
        assert period_label("3months", 0, NOW) == "Oct – Dec 2026"

    def test_year(self):
        assert period_label("year", 0, NOW) == "2026"


class TestDateHelpers:
    def test_parse_day_variants(self):
        assert parse_day("2026-10-18") == NOW
        assert parse_day("2026-10-18T08:00:00Z") == NOW
        assert parse_day(datetime(2026, 10, 18, 8)) == NOW
        assert parse_day(pd.Timestamp("2026-10-18")) == NOW

    def test_parse_day_rejects_other_types(self):
        with pytest.raises(ValueError):
            parse_day(20261018)

    def test_format_date(self):
        assert format_date(date(2026, 10, 5)) == "2026-10-05"
        assert format_date(date(2026, 10, 5), "MMM DD") == "Oct 5"
        assert format_date(date(2026, 10, 5), "M/D") == "10/5"

    def test_format_date_unknown_format(self):
        with pytest.raises(ValueError):
            format_date(NOW, "DD.MM.YYYY")

    def test_weekday_numbering(self):
        assert weekday_index(NOW) == 0
        assert weekday_index(NOW, monday_first=True) == 6
        assert day_of_week(NOW) == "Sun"
        assert day_of_week(date(2026, 10, 12), full_name=True) == "Monday"

    def test_days_between_is_absolute(self):
        assert days_between("2026-10-18", "2026-10-12") == 6

    def test_iter_days_inclusive(self):
        days = list(iter_days(date(2026, 2, 27), date(2026, 3, 2)))
        assert days == [date(2026, 2, 27), date(2026, 2, 28), date(2026, 3, 1), date(2026, 3, 2)]

    def test_iter_days_empty_when_reversed(self):
        assert list(iter_days(NOW, date(2026, 10, 1))) == []

    def test_filter_by_range_inclusive(self):
        items = [SimpleNamespace(date=date(2026, 10, d)) for d in (11, 12, 18, 19)]
        kept = filter_by_range(items, date(2026, 10, 12), date(2026, 10, 18))
        assert [i.date.day for i in kept] == [12, 18]
