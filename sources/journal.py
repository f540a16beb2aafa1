"""
Tracker journal source.

Reads the tracker's JSON document export (a local file or an HTTPS URL) and
loads daily entries and habit entries into BigQuery.

Export layout:
    {
        "entries": [{"userId": "...", "date": "2026-01-05", "energy": {...}, ...}],
        "entriesHabits": {"<userId>": {"2026-01-05": {"reading_fiction": 30, ...}}}
    }

Either collection may be a flat list of documents carrying userId and date,
or a mapping of user id to documents keyed by date.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

import requests
from google.cloud import bigquery

from analytics.habits import HABIT_IDS
from analytics.models import HABIT_MINUTE_FIELDS, DailyEntry, HabitEntry, flag_column
from lib.source import Source

logger = logging.getLogger(__name__)

DAILY_COLLECTION = "entries"
HABIT_COLLECTION = "entriesHabits"


def get_export_location() -> str:
    """Get the export path or URL from environment."""
    location = os.environ.get("TRACKER_EXPORT_PATH")
    if not location:
        raise ValueError("TRACKER_EXPORT_PATH environment variable is not set")
    return location


def load_export(location: str) -> dict[str, Any]:
    """Read an export from a file path or an http(s) URL."""
    if location.startswith(("http://", "https://")):
        logger.info(f"Downloading export from {location}...")
        response = requests.get(location, timeout=30)
        response.raise_for_status()
        return response.json()

    logger.info(f"Reading export from {location}...")
    with Path(location).open(encoding="utf-8") as f:
        return json.load(f)


def flatten_collection(collection: Any) -> list[dict[str, Any]]:
    """Normalize either collection layout to a list of documents with userId and date."""
    if collection is None:
        return []
    if isinstance(collection, list):
        return [doc for doc in collection if isinstance(doc, dict)]
    if isinstance(collection, dict):
        docs = []
        for user_id, by_date in collection.items():
            if not isinstance(by_date, dict):
                continue
            for day, doc in by_date.items():
                if isinstance(doc, dict):
                    docs.append({**doc, "userId": user_id, "date": doc.get("date", day)})
        return docs
    raise ValueError(f"Unsupported collection layout: {type(collection).__name__}")


def _score(value: Any) -> float | None:
    if value is None:
        return None
    return float(value)


class JournalSource(Source):
    """Shared fetch for the export collections."""

    collection: str

    def __init__(self, location: str | None = None, user_id: str | None = None, export: dict | None = None):
        self.location = location
        self.user_id = user_id
        self._export = export

    def fetch(self) -> list[dict[str, Any]]:
        export = self._export
        if export is None:
            export = load_export(self.location or get_export_location())

        docs = flatten_collection(export.get(self.collection))
        if self.user_id:
            docs = [doc for doc in docs if doc.get("userId") == self.user_id]
        logger.info(f"Read {len(docs)} documents from {self.collection}")
        return docs

    def valid_docs(self, raw_data: list[dict[str, Any]]) -> list[dict[str, Any]]:
        docs = []
        for doc in raw_data:
            if not doc.get("userId") or not doc.get("date"):
                logger.warning(f"Skipping {self.collection} document without userId or date")
                continue
            docs.append(doc)
        return docs


class DailyEntrySource(JournalSource):
    """Daily entries: sleep grid, caffeine, scales, tags and note."""

    collection = DAILY_COLLECTION
    table_id = "daily_entries"
    primary_key = "entry_id"
    schema = [
        bigquery.SchemaField("entry_id", "STRING", mode="REQUIRED"),
        bigquery.SchemaField("user_id", "STRING", mode="REQUIRED"),
        bigquery.SchemaField("date", "DATE", mode="REQUIRED"),
        bigquery.SchemaField("sleep", "BOOLEAN", mode="REPEATED"),
        bigquery.SchemaField("caffeine", "FLOAT"),
        bigquery.SchemaField("energy_highest", "FLOAT"),
        bigquery.SchemaField("energy_lowest", "FLOAT"),
        bigquery.SchemaField("mood_highest", "FLOAT"),
        bigquery.SchemaField("mood_lowest", "FLOAT"),
        bigquery.SchemaField("anxiety", "FLOAT"),
        bigquery.SchemaField("irritability", "FLOAT"),
        bigquery.SchemaField("activities", "STRING", mode="REPEATED"),
        bigquery.SchemaField("people", "STRING", mode="REPEATED"),
        bigquery.SchemaField("note", "STRING"),
    ]

    def transform(self, raw_data: list[dict[str, Any]]) -> list[dict[str, Any]]:
        rows = []
        for doc in self.valid_docs(raw_data):
            try:
                entry = DailyEntry.from_record(doc)
            except ValueError as e:
                logger.warning(f"Skipping entry with bad date {doc.get('date')!r}: {e}")
                continue
            rows.append({
                "entry_id": f"{doc['userId']}_{entry.date_str}",
                "user_id": doc["userId"],
                "date": entry.date_str,
                "sleep": list(entry.sleep) if entry.sleep is not None else [],
                "caffeine": _score(entry.caffeine),
                "energy_highest": _score(entry.energy.highest),
                "energy_lowest": _score(entry.energy.lowest),
                "mood_highest": _score(entry.mood.highest),
                "mood_lowest": _score(entry.mood.lowest),
                "anxiety": _score(entry.anxiety),
                "irritability": _score(entry.irritability),
                "activities": sorted(entry.activities),
                "people": sorted(entry.people),
                "note": entry.note,
            })
        return rows


class HabitEntrySource(JournalSource):
    """Habit entries: minutes per habit field, exercise types and done flags."""

    collection = HABIT_COLLECTION
    table_id = "habit_entries"
    primary_key = "entry_id"
    schema = [
        bigquery.SchemaField("entry_id", "STRING", mode="REQUIRED"),
        bigquery.SchemaField("user_id", "STRING", mode="REQUIRED"),
        bigquery.SchemaField("date", "DATE", mode="REQUIRED"),
        *[bigquery.SchemaField(name, "INTEGER") for name in HABIT_MINUTE_FIELDS],
        bigquery.SchemaField("exercise_types", "STRING", mode="REPEATED"),
        *[bigquery.SchemaField(flag_column(habit_id), "BOOLEAN") for habit_id in HABIT_IDS],
    ]

    def transform(self, raw_data: list[dict[str, Any]]) -> list[dict[str, Any]]:
        rows = []
        for doc in self.valid_docs(raw_data):
            try:
                entry = HabitEntry.from_record(doc, habit_ids=HABIT_IDS)
            except ValueError as e:
                logger.warning(f"Skipping habit entry with bad date {doc.get('date')!r}: {e}")
                continue
            row = {
                "entry_id": f"{doc['userId']}_{entry.date.isoformat()}",
                "user_id": doc["userId"],
                "date": entry.date.isoformat(),
            }
            for name in HABIT_MINUTE_FIELDS:
                row[name] = int(entry.minutes[name]) if name in entry.minutes else None
            row["exercise_types"] = list(entry.exercise_types)
            for habit_id in HABIT_IDS:
                row[flag_column(habit_id)] = entry.flags.get(habit_id)
            rows.append(row)
        return rows
