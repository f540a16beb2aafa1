"""
Shared data loading functions for the Streamlit app.

This module provides the cached BigQuery client, the entry loaders and the
per-browser AnalyticsSession shared across all pages.
"""

import logging
import os
from typing import Any

import streamlit as st
from dotenv import load_dotenv
from google.cloud import bigquery

from analytics.periods import PERIODS
from analytics.session import DEFAULT_CACHE_TTL, AnalyticsSession, AnalyticsView, FetchError
from lib import bigquery as bq

load_dotenv()

logger = logging.getLogger(__name__)

SESSION_KEY = "analytics_session"

DAILY_ENTRIES_QUERY = """
SELECT
    date,
    sleep,
    caffeine,
    STRUCT(energy_highest AS highest, energy_lowest AS lowest) AS energy,
    STRUCT(mood_highest AS highest, mood_lowest AS lowest) AS mood,
    anxiety,
    irritability,
    activities,
    people,
    note
FROM `{table}`
WHERE user_id = @user_id
ORDER BY date
"""

HABIT_ENTRIES_QUERY = """
SELECT *
FROM `{table}`
WHERE user_id = @user_id
ORDER BY date
"""


@st.cache_resource
def get_client():
    """Create BigQuery client from service account file."""
    return bigquery.Client.from_service_account_json(
        os.environ["GCP_SA_KEY_FILE"],
        project=os.environ["GCP_PROJECT_ID"],
    )


def get_user_id() -> str:
    user_id = os.environ.get("TRACKER_USER_ID")
    if not user_id:
        raise ValueError("TRACKER_USER_ID environment variable is not set")
    return user_id


def get_cache_ttl() -> float:
    """Snapshot freshness window in seconds (TRACKER_CACHE_TTL_SECONDS, default 300)."""
    return float(os.environ.get("TRACKER_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL))


def fetch_daily_entries(user_id: str) -> list[dict[str, Any]]:
    """Load a user's daily entries in document shape (energy/mood as nested dicts)."""
    sql = DAILY_ENTRIES_QUERY.format(table=bq.table_ref("daily_entries"))
    return bq.query_records(get_client(), sql, {"user_id": user_id})


def fetch_habit_entries(user_id: str) -> list[dict[str, Any]]:
    """Load a user's habit entries."""
    sql = HABIT_ENTRIES_QUERY.format(table=bq.table_ref("habit_entries"))
    return bq.query_records(get_client(), sql, {"user_id": user_id})


def get_session() -> AnalyticsSession:
    """
    Return this browser session's AnalyticsSession, creating it on first use.

    The session owns the entry cache; the loaders above are not wrapped in
    st.cache_data.
    """
    if SESSION_KEY not in st.session_state:
        st.session_state[SESSION_KEY] = AnalyticsSession(
            loader=fetch_daily_entries,
            user_id=get_user_id(),
            habit_loader=fetch_habit_entries,
            cache_ttl=get_cache_ttl(),
        )
        logger.info("Created analytics session")
    return st.session_state[SESSION_KEY]


PERIOD_LABELS = {"week": "Week", "month": "Month", "3months": "3 Months", "year": "Year"}


def period_controls(session: AnalyticsSession) -> None:
    """Period picker, back/forward navigation and a refresh button."""
    col1, col2, col3, col4, col5 = st.columns([2, 1, 3, 1, 1], vertical_alignment="bottom")
    period = col1.selectbox(
        "Period",
        PERIODS,
        index=PERIODS.index(session.period),
        format_func=PERIOD_LABELS.get,
        key="period_select",
    )
    session.set_period(period)

    if col2.button("←", key="period_back", help="Previous period"):
        session.navigate(-1)
        st.rerun()
    col3.markdown(f"**{session.label()}**")
    if col4.button("→", key="period_forward", help="Next period", disabled=session.offset >= 0):
        session.navigate(1)
        st.rerun()
    if col5.button("Refresh", key="period_refresh"):
        try:
            session.refresh()
        except FetchError as e:
            st.error(f"Could not refresh tracker data: {e}")
            st.stop()
        st.rerun()


def load_view(session: AnalyticsSession) -> AnalyticsView:
    """Build the selected period's view, stopping the page if the store is unreachable."""
    try:
        return session.view()
    except FetchError as e:
        st.error(f"Could not load tracker data: {e}")
        st.stop()


def insight_list(insights: list[str], empty: str = "No valid data available.") -> None:
    if not insights:
        st.caption(empty)
        return
    st.markdown("\n".join(f"- {insight}" for insight in insights))
