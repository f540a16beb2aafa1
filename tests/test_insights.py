"""
Tests for insight panels, summary and notes.
"""

import random
from datetime import date, timedelta

import pytest

from analytics.insights import (
    caffeine_insights,
    entries_with_notes,
    generate_summary,
    metric_insights,
    notes_for_period,
    sleep_insights,
    tag_counts,
)
from analytics.metrics import Metric
from analytics.models import SLOTS_PER_DAY, DailyEntry, GapFilledEntry

# A Monday
MONDAY = date(2026, 10, 12)


def make_entries(rows):
    return [
        DailyEntry.from_record({"date": MONDAY + timedelta(days=i), **row})
        for i, row in enumerate(rows)
    ]


def grid(start, end):
    slots = [False] * SLOTS_PER_DAY
    for i in range(start, end + 1):
        slots[i] = True
    return slots


class TestMetricInsights:
    """Tests for the metric tab bullets."""

    def test_two_sided(self):
        entries = make_entries([
            {"energy": {"highest": 6, "lowest": 3}},
            {"energy": {"highest": 5, "lowest": 2}},
        ])
        assert metric_insights(entries, Metric.ENERGY) == [
            "Average highest: **5.5/7**",
            "Average lowest: **2.5/7**",
            "Best day: **Monday** (avg 6.0)",
            "Trend: **Decreasing ↓**",
            "Average range: **3.0** points",
        ]

    def test_one_sided(self):
        entries = make_entries([{"anxiety": 2}, {"anxiety": 5}, {"anxiety": 2}])
        assert metric_insights(entries, Metric.ANXIETY) == [
            "Average level: **3.0/7**",
            "Lowest on: **Oct 12** (2/7)",
            "Highest on: **Oct 13** (5/7)",
            "Trend: **Stable →**",
            "Days below average: **67%**",
        ]

    def test_one_sided_rising(self):
        entries = make_entries([{"irritability": 2}, {"irritability": 4}, {"irritability": 6}])
        assert "Trend: **Rising ↑**" in metric_insights(entries, Metric.IRRITABILITY)

    def test_placeholders_only(self):
        assert metric_insights([GapFilledEntry.baseline(MONDAY)], Metric.MOOD) == []


class TestCaffeineInsights:
    def test_bullets(self):
        entries = make_entries([{"caffeine": 100}, {"caffeine": 0}, {"caffeine": 50}])
        assert caffeine_insights(entries) == [
            "Average daily: **50 mg**",
            "Peak day: **100 mg**",
            "Days with caffeine: **67%**",
            "Trend: **Decreasing ↓**",
        ]

    def test_empty(self):
        assert caffeine_insights([]) == []


class TestSleepInsights:
    def test_averages(self):
        entries = make_entries([
            {"sleep": grid(0, 15)},
            {"sleep": grid(2, 15)},
            {"sleep": None},
        ])
        assert sleep_insights(entries) == [
            "Average sleep: **7.5 hours**",
            "Average bedtime: **00:30**",
            "Average wake time: **08:00**",
        ]

    def test_naps(self):
        nap_day = grid(0, 13)
        nap_day[28] = nap_day[29] = True
        entries = make_entries([{"sleep": nap_day}, {"sleep": grid(0, 13)}])
        insights = sleep_insights(entries)
        assert "Total naps: **1** across **1** days" in insights
        assert "Average nap duration: **1.0 hours**" in insights

    def test_no_nights(self):
        assert sleep_insights(make_entries([{"sleep": [False] * SLOTS_PER_DAY}])) == []


class TestGenerateSummary:
    def test_summary(self):
        entries = make_entries([{"mood": {"highest": 5}}, {"mood": {"highest": 6}}])
        entries.append(GapFilledEntry.baseline(MONDAY + timedelta(days=2)))
        summary = generate_summary(entries)
        assert summary["total_days"] == 3
        assert summary["tracked_days"] == 2
        assert summary["missing_days"] == 1
        assert summary["averages"]["mood"] == 5.5
        assert summary["averages"]["energy"] == 4.0
        assert set(summary["trends"]) == {"energy", "mood", "anxiety", "irritability"}

    def test_no_data(self):
        summary = generate_summary([])
        assert summary["tracked_days"] == 0
        assert summary["message"] == "No data available"


class TestNotes:
    @pytest.fixture
    def noted(self):
        return make_entries([{"note": f"day {i}"} for i in range(10)] + [{"note": "   "}, {}])

    def test_blank_notes_dropped(self, noted):
        assert len(entries_with_notes(noted)) == 10

    def test_week_shows_every_note(self, noted):
        assert len(notes_for_period(noted, "week")) == 10

    def test_longer_period_samples_in_date_order(self, noted):
        sample = notes_for_period(noted, "month", rng=random.Random(7))
        assert len(sample) == 7
        assert [e.date for e in sample] == sorted(e.date for e in sample)

    def test_few_notes_all_shown(self, noted):
        assert len(notes_for_period(noted[:3], "year")) == 3


class TestTagCounts:
    def test_counts(self):
        entries = make_entries([{"people": ["sam", "alex"]}, {"people": ["sam"]}])
        assert tag_counts(entries, "people") == [("sam", 2), ("alex", 1)]

    def test_unknown_field(self):
        with pytest.raises(ValueError):
            tag_counts([], "moods")
