"""
Tests for the habit rollup, commentary bands and calendar blocks.
"""

from datetime import date, timedelta

import pytest

from analytics.habits import (
    HABIT_IDS,
    commentary,
    format_minutes,
    habit_blocks,
    habit_days,
    habit_rollup,
    is_done,
    reading_extra,
    summarize_habit,
    trend_arrow,
)
from analytics.models import HabitEntry

# A Sunday
NOW = date(2026, 10, 18)
MONDAY = date(2026, 10, 12)


def habit(day, **fields):
    return HabitEntry.from_record({"date": day, **fields}, habit_ids=HABIT_IDS)


class TestFormatting:
    @pytest.mark.parametrize(
        "minutes,expected",
        [(45, "45min"), (60, "1h"), (65, "1h 5min"), (120, "2h"), (0, "—"), (None, "—")],
    )
    def test_format_minutes(self, minutes, expected):
        assert format_minutes(minutes) == expected

    def test_trend_arrow_minutes(self):
        assert trend_arrow(90, 30) == "↑ +1h"
        assert trend_arrow(30, 90) == "↓ 1h"
        assert trend_arrow(30, 30.5) == "→"
        assert trend_arrow(0, 0) == ""
        assert trend_arrow(None, 20) == "↓ 20min"

    def test_trend_arrow_steps(self):
        assert trend_arrow(12000, 10000, steps=True) == "↑ +2,000"
        assert trend_arrow(5000, 5000, steps=True) == "→"


class TestCommentary:
    """Band boundaries for the commentary tables."""

    @pytest.mark.parametrize(
        "minutes,expected",
        [
            (19, "Eeew... Go clean, NOW!"),
            (20, "Good job, keep it up!"),
            (60, "Good job, keep it up!"),
            (61, "Wow, are you a roomba? That's impressive time spent cleaning!"),
            (101, "Are you overcompensating or procrastinating?"),
        ],
    )
    def test_cleaning_week(self, minutes, expected):
        assert commentary("cleaning", "week", [habit(MONDAY, cleaning_time=minutes)]) == expected

    def test_writing_creative_band_first(self):
        entries = [habit(MONDAY, writing_prose=150), habit(MONDAY + timedelta(days=1), writing_poetry=61)]
        assert commentary("writing", "week", entries) == "Go, little writer, go!"

    def test_writing_under_two_hours(self):
        assert commentary("writing", "week", [habit(MONDAY, writing_reflection=100)]) == "You should be writing more."

    def test_writing_catch_all(self):
        assert (
            commentary("writing", "week", [habit(MONDAY, writing_reflection=150)])
            == "Words on the page. Keep them coming."
        )

    def test_second_language_needs_two_days(self):
        one_day = [habit(MONDAY, second_language_time=60)]
        two_days = [habit(MONDAY, second_language_time=30), habit(NOW, second_language_time=30)]
        assert commentary("second-language", "week", one_day) == "Idiota."
        assert commentary("second-language", "week", two_days) == "Nice, but you can do better!"

    def test_every_table_has_a_catch_all(self):
        for habit_id in HABIT_IDS:
            for period in ("week", "month", "3months", "year"):
                assert commentary(habit_id, period, [habit(MONDAY, **{"cleaning_time": 10 ** 6})])

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            commentary("reading", "decade", [])

    def test_unknown_habit(self):
        with pytest.raises(ValueError):
            commentary("knitting", "week", [])


class TestCompletion:
    def test_flag_counts_as_done(self):
        assert is_done(habit(MONDAY, cleaning=True), "cleaning")

    def test_minutes_count_as_done(self):
        assert is_done(habit(MONDAY, exercise_time=10), "exercise")

    def test_nothing_logged(self):
        assert not is_done(habit(MONDAY, exercise=False), "exercise")

    def test_second_language_column_flag(self):
        assert is_done(habit(MONDAY, second_language=True), "second-language")


class TestReadingExtra:
    def test_fanfic_dominates(self):
        assert reading_extra([habit(MONDAY, reading_fanfic=100, reading_fiction=10)]) == "Mmm... yaoi"

    def test_nonfiction_leads(self):
        assert reading_extra([habit(MONDAY, reading_nonfiction=60, reading_fiction=30)]) == "Big brain energy this week!"

    def test_long_fiction(self):
        assert (
            reading_extra([habit(MONDAY, reading_fiction=150)])
            == "Don't forget to log them books into Goodreads."
        )

    def test_nothing_to_say(self):
        assert reading_extra([]) is None


class TestSummaries:
    def test_average_and_categories(self):
        entries = [
            habit(MONDAY, reading_fiction=60),
            habit(MONDAY + timedelta(days=1), reading_fiction=10, reading_comic=20),
        ]
        summary = summarize_habit("reading", entries, [], "week")
        assert summary.total == 90
        assert summary.done == 2
        assert summary.average == 45
        assert summary.categories == [("Fiction", 70), ("Comic", 20)]
        assert summary.trend == "↑ +1h 30min"

    def test_exercise_steps(self):
        entries = [
            habit(MONDAY, exercise_time=30, exercise_steps=8000, exercise_types=["run"]),
            habit(MONDAY + timedelta(days=1), exercise_time=20, exercise_steps=4001, exercise_types=["run", "yoga"]),
        ]
        previous = [habit(MONDAY - timedelta(days=7), exercise_steps=10000)]
        summary = summarize_habit("exercise", entries, previous, "month")
        assert summary.steps == 12001
        assert summary.average_steps == 6001
        assert summary.steps_trend == "↑ +2,001"
        assert summary.exercise_types == [("run", 2), ("yoga", 1)]

    def test_rollup_compares_with_previous_period(self):
        entries = [
            habit(date(2026, 10, 14), reading_fiction=60),
            habit(date(2026, 10, 7), reading_fiction=30),
        ]
        summaries = {s.habit_id: s for s in habit_rollup(entries, "week", 0, NOW)}
        assert list(summaries) == list(HABIT_IDS)
        reading = summaries["reading"]
        assert reading.total == 60
        assert reading.previous_total == 30
        assert reading.delta == 30
        assert reading.trend == "↑ +30min"
        assert summaries["cleaning"].trend == ""


class TestCalendar:
    def test_week_days(self):
        entries = [habit(MONDAY, reading_fiction=30, reading_comic=10), habit(NOW, reading=True)]
        days = habit_days(entries, "reading", MONDAY, NOW)
        assert [d.label for d in days] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert days[0].minutes == 40
        assert days[0].tags == ("fic", "comic")
        assert days[6].done and days[6].minutes == 0
        assert not days[1].done

    def test_exercise_tags_truncated(self):
        days = habit_days([habit(MONDAY, exercise_types=["swimming", "yoga"])], "exercise", MONDAY, MONDAY)
        assert days[0].tags == ("swimm", "yoga")

    def test_month_blocks(self):
        entries = [
            habit(date(2026, 1, 5), cleaning_time=100),
            habit(date(2026, 2, 5), cleaning_time=50),
            habit(date(2026, 3, 5), cleaning=True),
        ]
        blocks = habit_blocks(entries, "cleaning", date(2026, 1, 1), date(2026, 3, 31), "month")
        assert [b.label for b in blocks] == ["Jan 2026", "Feb 2026", "Mar 2026"]
        assert [b.intensity for b in blocks] == [1.0, 0.5, 0.2]
        assert blocks[1].end == date(2026, 2, 28)

    def test_week_blocks_are_monday_aligned(self):
        blocks = habit_blocks([], "writing", date(2026, 10, 1), date(2026, 10, 18), "week")
        assert blocks[0].start == date(2026, 9, 28)
        assert blocks[-1].end == NOW
        assert all(b.intensity == 0.0 for b in blocks)

    def test_unknown_block_unit(self):
        with pytest.raises(ValueError):
            habit_blocks([], "writing", MONDAY, NOW, "day")
