"""
Tracker Dashboard - Summary

Headline numbers for the selected period across every tracked metric.

Run with: streamlit run app.py
"""

import streamlit as st

from analytics.insights import TREND_ICONS, generate_summary
from analytics.metrics import Metric
from data import get_session, load_view, period_controls

st.title("Summary")

st.markdown("Use the sidebar to navigate between pages.")

try:
    session = get_session()
except ValueError as e:
    st.error(f"Dashboard is not configured: {e}")
    st.stop()

period_controls(session)
view = load_view(session)
summary = generate_summary(view.days)

col1, col2, col3 = st.columns(3)
col1.metric("Days in period", len(view.days))
col2.metric("Tracked days", summary["tracked_days"])
col3.metric("Missing days", len(view.days) - summary["tracked_days"])

if summary["tracked_days"] == 0:
    st.info(summary["message"])
    st.stop()

st.subheader("Averages")
cols = st.columns(len(Metric))
for col, metric in zip(cols, Metric):
    trend = summary["trends"][metric.value]
    col.metric(
        metric.label,
        f"{summary['averages'][metric.value]:.1f}/7",
        f"{trend} {TREND_ICONS.get(trend, '→')}",
        delta_color="off",
    )

st.caption(f"{view.label} · {view.range.start} to {view.range.end}")
