"""
Base source abstraction for the tracker ETL.

A source reads one collection of the tracker export and shapes it into rows
for a BigQuery table.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from google.cloud import bigquery

from lib import bigquery as bq

logger = logging.getLogger(__name__)


class Source(ABC):
    """
    Base class for tracker sources.

    Subclasses must define:
        - table_id: Target BigQuery table name
        - primary_key: Column used for merge/upsert matching
        - schema: List of BigQuery SchemaField definitions
        - fetch(): Read raw documents from the export
        - transform(): Convert documents to BigQuery row format

    dataset_id defaults to None, meaning TRACKER_DATASET.
    """

    dataset_id: str | None = None
    table_id: str
    primary_key: str
    schema: list[bigquery.SchemaField]

    @abstractmethod
    def fetch(self) -> list[dict[str, Any]]:
        """Read raw documents."""
        pass

    @abstractmethod
    def transform(self, raw_data: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Transform raw documents to BigQuery row format."""
        pass


def run_sync(source: Source, full_refresh: bool = False, client: bigquery.Client | None = None) -> int:
    """
    Run a sync for the given source.

    Args:
        source: Source instance to sync
        full_refresh: If True, use WRITE_TRUNCATE instead of merge
        client: BigQuery client (default: built from environment)

    Returns:
        Number of rows written
    """
    name = source.__class__.__name__
    logger.info(f"Starting sync for {name}...")

    raw_data = source.fetch()
    if not raw_data:
        logger.info("No data returned from source")
        return 0

    rows = source.transform(raw_data)
    logger.info(f"Transformed {len(rows)} rows")

    client = client or bq.get_client()
    if full_refresh:
        bq.load_table(client, source.table_id, rows, source.schema, source.dataset_id)
    else:
        bq.merge_table(client, source.table_id, rows, source.schema, source.primary_key, source.dataset_id)

    logger.info(f"Sync complete for {name}")
    return len(rows)
