"""
Shared BigQuery utilities for the tracker store.

Provides authentication, dataset/table management for the ETL side and a
parameterized query helper for the dashboard side.
"""

import base64
import json
import logging
import os
import uuid
from typing import Any

from google.cloud import bigquery
from google.cloud.exceptions import NotFound

logger = logging.getLogger(__name__)

DEFAULT_DATASET = "tracker"
DEFAULT_LOCATION = "US"


def get_dataset_id() -> str:
    """Dataset holding the tracker tables (TRACKER_DATASET, default: tracker)."""
    return os.environ.get("TRACKER_DATASET", DEFAULT_DATASET)


def get_project_id() -> str:
    project_id = os.environ.get("GCP_PROJECT_ID")
    if not project_id:
        raise ValueError("GCP_PROJECT_ID environment variable is not set")
    return project_id


def get_client() -> bigquery.Client:
    """
    Create a BigQuery client from environment variables.

    Expects:
        GCP_SA_KEY: Base64-encoded service account JSON
        GCP_PROJECT_ID: Target GCP project ID

    Returns:
        Authenticated BigQuery client

    Raises:
        ValueError: If required environment variables are not set
    """
    gcp_sa_key_b64 = os.environ.get("GCP_SA_KEY")
    if not gcp_sa_key_b64:
        raise ValueError("GCP_SA_KEY environment variable is not set")
    project_id = get_project_id()

    sa_info = json.loads(base64.b64decode(gcp_sa_key_b64).decode("utf-8"))
    return bigquery.Client.from_service_account_info(sa_info, project=project_id)


def table_ref(table_id: str, dataset_id: str | None = None) -> str:
    """Fully qualified `project.dataset.table` name."""
    return f"{get_project_id()}.{dataset_id or get_dataset_id()}.{table_id}"


def ensure_dataset_exists(
    client: bigquery.Client,
    dataset_id: str | None = None,
    location: str = DEFAULT_LOCATION,
) -> bigquery.Dataset:
    """
    Ensure a dataset exists, creating it if necessary.

    Args:
        client: Authenticated BigQuery client
        dataset_id: Dataset name (default: TRACKER_DATASET)
        location: Dataset location (default: US)

    Returns:
        The existing or newly created Dataset
    """
    dataset_id = dataset_id or get_dataset_id()
    dataset_ref = bigquery.DatasetReference(client.project, dataset_id)

    try:
        dataset = client.get_dataset(dataset_ref)
        logger.debug(f"Dataset {dataset_id} already exists")
        return dataset
    except NotFound:
        dataset = bigquery.Dataset(dataset_ref)
        dataset.location = location
        dataset = client.create_dataset(dataset)
        logger.info(f"Created dataset {dataset_id} in {location}")
        return dataset


def load_table(
    client: bigquery.Client,
    table_id: str,
    rows: list[dict[str, Any]],
    schema: list[bigquery.SchemaField],
    dataset_id: str | None = None,
    write_disposition: str = "WRITE_TRUNCATE",
) -> bigquery.LoadJob:
    """
    Load rows into a table, replacing its contents by default.

    Creates the dataset and table if they don't exist.

    Args:
        client: Authenticated BigQuery client
        table_id: Target table name
        rows: Row dictionaries matching schema
        schema: Table schema definition
        dataset_id: Dataset name (default: TRACKER_DATASET)
        write_disposition: WRITE_TRUNCATE, WRITE_APPEND, or WRITE_EMPTY

    Returns:
        Completed LoadJob
    """
    dataset_id = dataset_id or get_dataset_id()
    target = table_ref(table_id, dataset_id)
    ensure_dataset_exists(client, dataset_id)

    job_config = bigquery.LoadJobConfig(
        schema=schema,
        write_disposition=getattr(bigquery.WriteDisposition, write_disposition),
    )

    logger.info(f"Loading {len(rows)} rows to {target}...")
    job = client.load_table_from_json(rows, target, job_config=job_config)
    job.result()

    logger.info(f"Successfully loaded {len(rows)} rows to {target}")
    return job


def merge_table(
    client: bigquery.Client,
    table_id: str,
    rows: list[dict[str, Any]],
    schema: list[bigquery.SchemaField],
    primary_key: str,
    dataset_id: str | None = None,
) -> None:
    """
    Upsert rows into a table on primary_key.

    Rows land in a temporary table first and are MERGEd into the target, so
    entries edited in the tracker overwrite their previous version and
    entries no longer in the export are kept.

    Args:
        client: Authenticated BigQuery client
        table_id: Target table name
        rows: Row dictionaries matching schema
        schema: Table schema definition
        primary_key: Column to match on (e.g. "entry_id")
        dataset_id: Dataset name (default: TRACKER_DATASET)
    """
    if not rows:
        logger.info("No rows to merge")
        return

    dataset_id = dataset_id or get_dataset_id()
    target = table_ref(table_id, dataset_id)
    temp = table_ref(f"{table_id}_temp_{uuid.uuid4().hex[:8]}", dataset_id)

    ensure_dataset_exists(client, dataset_id)

    try:
        client.get_table(target)
    except NotFound:
        logger.info(f"Table {target} does not exist, creating with initial load")
        load_table(client, table_id, rows, schema, dataset_id, "WRITE_TRUNCATE")
        return

    logger.info(f"Loading {len(rows)} rows to temp table {temp}...")
    job_config = bigquery.LoadJobConfig(
        schema=schema,
        write_disposition=bigquery.WriteDisposition.WRITE_TRUNCATE,
    )
    client.load_table_from_json(rows, temp, job_config=job_config).result()

    try:
        columns = [field.name for field in schema]
        update_clause = ", ".join(f"T.{c} = S.{c}" for c in columns if c != primary_key)
        insert_cols = ", ".join(columns)
        insert_vals = ", ".join(f"S.{c}" for c in columns)

        merge_sql = f"""
        MERGE `{target}` T
        USING `{temp}` S
        ON T.{primary_key} = S.{primary_key}
        WHEN MATCHED THEN
            UPDATE SET {update_clause}
        WHEN NOT MATCHED THEN
            INSERT ({insert_cols})
            VALUES ({insert_vals})
        """

        logger.info(f"Merging into {target}...")
        client.query(merge_sql).result()
        logger.info(f"Merged {len(rows)} rows into {target}")
    finally:
        try:
            client.delete_table(temp)
            logger.debug(f"Cleaned up temp table {temp}")
        except Exception:
            logger.warning(f"Failed to clean up temp table {temp}")


def query_records(
    client: bigquery.Client,
    sql: str,
    params: dict[str, str] | None = None,
) -> list[dict[str, Any]]:
    """
    Run a query with named STRING parameters and return its rows as dicts.

    Args:
        client: Authenticated BigQuery client
        sql: Query text referencing parameters as @name
        params: Parameter values by name

    Returns:
        One dict per row; STRUCT columns come back as nested dicts
    """
    job_config = bigquery.QueryJobConfig(
        query_parameters=[
            bigquery.ScalarQueryParameter(name, "STRING", value)
            for name, value in (params or {}).items()
        ]
    )
    df = client.query(sql, job_config=job_config).to_dataframe()
    logger.debug(f"Query returned {len(df)} rows")
    return df.to_dict("records")
