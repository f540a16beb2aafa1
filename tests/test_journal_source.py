"""
Tests for the journal export source and the BigQuery helpers it feeds.
"""

import json
from unittest.mock import MagicMock

import pytest

from lib import bigquery as bq
from lib.source import run_sync
from sources.journal import (
    DailyEntrySource,
    HabitEntrySource,
    flatten_collection,
    get_export_location,
    load_export,
)


@pytest.fixture
def export():
    return {
        "entries": [
            {
                "userId": "u1",
                "date": "2026-10-13",
                "sleep": [False] * 48,
                "caffeine": 90,
                "energy": {"highest": 6, "lowest": 3},
                "mood": {"highest": 5},
                "activities": ["walk", "gym"],
                "note": "fine",
            },
            {"userId": "u2", "date": "2026-10-13", "anxiety": 2},
            {"userId": "u1"},
        ],
        "entriesHabits": {
            "u1": {
                "2026-10-13": {"reading_fiction": 30, "second-language": True, "exercise_types": ["run"]},
                "2026-10-14": {"date": "2026-10-14", "cleaning_time": 15},
            },
        },
    }


class TestFlattenCollection:
    def test_list_layout(self):
        assert flatten_collection([{"date": "2026-10-13"}, "junk"]) == [{"date": "2026-10-13"}]

    def test_user_keyed_layout(self):
        docs = flatten_collection({"u1": {"2026-10-13": {"cleaning_time": 5}}})
        assert docs == [{"cleaning_time": 5, "userId": "u1", "date": "2026-10-13"}]

    def test_missing_collection(self):
        assert flatten_collection(None) == []

    def test_unsupported_layout(self):
        with pytest.raises(ValueError):
            flatten_collection("entries")


class TestDailyEntrySource:
    """Tests for shaping daily entries into table rows."""

    def test_fetch_filters_by_user(self, export):
        docs = DailyEntrySource(user_id="u1", export=export).fetch()
        assert len(docs) == 2
        assert all(doc["userId"] == "u1" for doc in docs)

    def test_transform(self, export):
        source = DailyEntrySource(export=export)
        rows = source.transform(source.fetch())
        assert len(rows) == 2

        row = rows[0]
        assert row["entry_id"] == "u1_2026-10-13"
        assert row["date"] == "2026-10-13"
        assert row["caffeine"] == 90.0
        assert row["energy_highest"] == 6.0
        assert row["mood_lowest"] is None
        assert row["activities"] == ["gym", "walk"]
        assert row["people"] == []
        assert len(row["sleep"]) == 48
        assert set(row) == {field.name for field in source.schema}

    def test_bad_date_skipped(self):
        source = DailyEntrySource(export={})
        assert source.transform([{"userId": "u1", "date": "13/10/2026"}]) == []


class TestHabitEntrySource:
    def test_transform(self, export):
        source = HabitEntrySource(user_id="u1", export=export)
        rows = source.transform(source.fetch())
        assert [row["date"] for row in rows] == ["2026-10-13", "2026-10-14"]

        first = rows[0]
        assert first["reading_fiction"] == 30
        assert first["cleaning_time"] is None
        assert first["second_language"] is True
        assert first["reading"] is None
        assert first["exercise_types"] == ["run"]
        assert set(first) == {field.name for field in source.schema}


class TestExportLocation:
    def test_env_required(self, monkeypatch):
        monkeypatch.delenv("TRACKER_EXPORT_PATH", raising=False)
        with pytest.raises(ValueError):
            get_export_location()

    def test_reads_file(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"entries": []}), encoding="utf-8")
        assert load_export(str(path)) == {"entries": []}

    def test_downloads_url(self, monkeypatch):
        response = MagicMock()
        response.json.return_value = {"entries": []}
        get = MagicMock(return_value=response)
        monkeypatch.setattr("sources.journal.requests.get", get)

        assert load_export("https://example.com/export.json") == {"entries": []}
        get.assert_called_once_with("https://example.com/export.json", timeout=30)
        response.raise_for_status.assert_called_once()


class TestBigQueryHelpers:
    def test_table_ref(self, monkeypatch):
        monkeypatch.setenv("GCP_PROJECT_ID", "proj")
        monkeypatch.delenv("TRACKER_DATASET", raising=False)
        assert bq.table_ref("daily_entries") == "proj.tracker.daily_entries"
        assert bq.table_ref("daily_entries", "other") == "proj.other.daily_entries"

    def test_project_required(self, monkeypatch):
        monkeypatch.delenv("GCP_PROJECT_ID", raising=False)
        with pytest.raises(ValueError):
            bq.get_project_id()

    def test_query_records(self):
        client = MagicMock()
        client.query.return_value.to_dataframe.return_value.to_dict.return_value = [
            {"date": "2026-10-13"},
        ]
        records = bq.query_records(client, "SELECT 1", {"user_id": "u1"})
        assert records == [{"date": "2026-10-13"}]

        job_config = client.query.call_args.kwargs["job_config"]
        assert job_config.query_parameters[0].name == "user_id"


class TestRunSync:
    def test_merges_by_default(self, export, monkeypatch):
        merge = MagicMock()
        monkeypatch.setattr("lib.source.bq.merge_table", merge)
        written = run_sync(DailyEntrySource(export=export), client=MagicMock())
        assert written == 2
        assert merge.call_args.args[4] == "entry_id"

    def test_full_refresh_loads(self, export, monkeypatch):
        load = MagicMock()
        monkeypatch.setattr("lib.source.bq.load_table", load)
        run_sync(HabitEntrySource(export=export), full_refresh=True, client=MagicMock())
        assert load.call_args.args[1] == "habit_entries"

    def test_nothing_to_sync(self):
        assert run_sync(DailyEntrySource(export={}), client=MagicMock()) == 0
