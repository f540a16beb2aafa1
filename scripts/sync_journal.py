#!/usr/bin/env python3
"""Sync the tracker journal export to BigQuery."""

import argparse
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load .env for local development (no-op if not present)
from dotenv import load_dotenv
load_dotenv()

from lib.source import run_sync
from sources.journal import DailyEntrySource, HabitEntrySource, get_export_location, load_export

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Sync tracker journal export to BigQuery")
    parser.add_argument(
        "--export",
        help="Export file path or URL (default: TRACKER_EXPORT_PATH)",
    )
    parser.add_argument(
        "--user",
        help="Only sync entries for this user id",
    )
    parser.add_argument(
        "--full",
        action="store_true",
        help="Replace the tables instead of merging into them",
    )
    parser.add_argument(
        "--skip-habits",
        action="store_true",
        help="Only sync daily entries",
    )
    args = parser.parse_args()

    # Read the export once and hand it to both sources
    export = load_export(args.export or get_export_location())

    logger.info("Syncing tracker journal...")
    written = run_sync(DailyEntrySource(user_id=args.user, export=export), full_refresh=args.full)
    if not args.skip_habits:
        written += run_sync(HabitEntrySource(user_id=args.user, export=export), full_refresh=args.full)
    logger.info(f"Journal sync complete: {written} rows written")
