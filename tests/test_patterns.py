"""
Tests for pattern mining over caffeine, sleep and tags.
"""

from datetime import date, timedelta

import pytest

from analytics.models import SLOTS_PER_DAY, DailyEntry, GapFilledEntry
from analytics.patterns import (
    AVERAGE_SLEEP,
    LITTLE_SLEEP,
    LOTS_OF_SLEEP,
    activity_impact,
    analyze_patterns,
    caffeine_impact,
    people_impact,
    sleep_bucket_label,
    sleep_impact,
    top_tags,
)

START = date(2026, 10, 1)


def make_entries(rows):
    """One entry per row dict, on consecutive days from START."""
    return [
        DailyEntry.from_record({"date": START + timedelta(days=i), **row})
        for i, row in enumerate(rows)
    ]


def hours_asleep(hours):
    slots = [False] * SLOTS_PER_DAY
    for i in range(int(hours * 2)):
        slots[i] = True
    return slots


class TestCaffeineImpact:
    def test_mood_higher_with_caffeine(self):
        entries = make_entries([
            {"caffeine": 100, "mood": {"highest": 6}},
            {"caffeine": 80, "mood": {"highest": 6}},
            {"caffeine": 0, "mood": {"highest": 4}},
            {"mood": {"highest": 4}},
        ])
        assert caffeine_impact(entries) == [
            "**Caffeine impact:** Mood is 50% higher on days with caffeine",
        ]

    def test_lower_is_better_metrics_read_worse(self):
        entries = make_entries([
            {"caffeine": 100, "anxiety": 6},
            {"caffeine": 0, "anxiety": 3},
        ])
        assert caffeine_impact(entries) == [
            "**Caffeine impact:** Anxiety is 100% worse on days with caffeine",
        ]

    def test_small_difference_ignored(self):
        entries = make_entries([
            {"caffeine": 100, "energy": {"highest": 5}},
            {"caffeine": 0, "energy": {"highest": 4.6}},
        ])
        assert caffeine_impact(entries) == []

    def test_needs_both_groups(self):
        entries = make_entries([{"caffeine": 100}, {"caffeine": 50}])
        assert caffeine_impact(entries) == []


class TestSleepImpact:
    @pytest.mark.parametrize(
        "hours,label",
        [(4, LITTLE_SLEEP), (4.5, None), (5, AVERAGE_SLEEP), (8, AVERAGE_SLEEP), (8.5, LOTS_OF_SLEEP)],
    )
    def test_bucket_boundaries(self, hours, label):
        assert sleep_bucket_label(hours) == label

    def test_single_bucket_reports_pattern(self):
        entries = make_entries([
            {"sleep": hours_asleep(7), "energy": {"highest": 5}},
            {"sleep": hours_asleep(6), "energy": {"highest": 5}},
        ])
        statements = sleep_impact(entries)
        assert statements[0] == "**Sleep pattern:** Energy averages 5.0 with average sleep (5-8h)"
        assert len(statements) == 4

    def test_best_and_worst_buckets(self):
        entries = make_entries([
            {"sleep": hours_asleep(4), "mood": {"highest": 3}},
            {"sleep": hours_asleep(7), "mood": {"highest": 6}},
        ])
        assert sleep_impact(entries) == [
            "**Sleep impact:** Mood is best with average sleep (5-8h) "
            "(avg 6.0 vs 3.0 with little sleep (0-4h))",
        ]

    def test_nights_without_sleep_are_excluded(self):
        entries = make_entries([{"sleep": None}, {"sleep": [False] * SLOTS_PER_DAY}])
        assert sleep_impact(entries) == []

    def test_nights_between_four_and_five_hours_are_left_out(self):
        entries = make_entries([
            {"sleep": hours_asleep(4.5), "mood": {"highest": 2}},
            {"sleep": hours_asleep(7), "mood": {"highest": 6}},
        ])
        statements = sleep_impact(entries)
        assert "**Sleep pattern:** Mood averages 6.0 with average sleep (5-8h)" in statements
        assert not any("little sleep" in s for s in statements)


class TestTagImpact:
    def test_top_tags_ties_keep_first_seen_order(self):
        entries = make_entries([
            {"activities": ["walk", "gym"]},
            {"activities": ["read"]},
            {"activities": ["read"]},
            {"activities": ["cook"]},
        ])
        assert top_tags(entries, "activities") == ["read", "gym", "walk"]

    def test_activity_boost(self):
        entries = make_entries([
            {"activities": ["walk"], "mood": {"highest": 6}},
            {"activities": ["walk"], "mood": {"highest": 6}},
            {"mood": {"highest": 4}},
        ])
        assert activity_impact(entries) == ['**Activity pattern:** "walk" boosts mood by 50%']

    def test_people_lower_mood(self):
        entries = make_entries([
            {"people": ["boss"], "mood": {"highest": 2}},
            {"mood": {"highest": 4}},
        ])
        assert people_impact(entries) == ['**People pattern:** Time with "boss" lowers mood by 50%']

    def test_tag_on_every_day_is_skipped(self):
        entries = make_entries([
            {"activities": ["walk"], "mood": {"highest": 6}},
            {"activities": ["walk"], "mood": {"highest": 2}},
        ])
        assert activity_impact(entries) == []


class TestAnalyzePatterns:
    def test_placeholders_ignored(self):
        assert analyze_patterns([GapFilledEntry.baseline(START)]) == []

    def test_order(self):
        entries = make_entries([
            {"caffeine": 100, "mood": {"highest": 6}, "activities": ["walk"], "sleep": hours_asleep(7)},
            {"caffeine": 0, "mood": {"highest": 4}, "sleep": hours_asleep(7)},
        ])
        statements = analyze_patterns(entries)
        assert statements[0].startswith("**Caffeine impact:**")
        assert statements[-1].startswith("**Activity pattern:**")
