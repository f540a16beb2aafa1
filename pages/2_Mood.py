"""
Mood, anxiety and irritability dashboard.
"""

import streamlit as st

from analytics.charts import level_chart, range_chart, series_frame
from analytics.insights import metric_insights
from analytics.metrics import Metric
from data import get_session, insight_list, load_view, period_controls

st.title("Mood")

session = get_session()
period_controls(session)
view = load_view(session)

frame = series_frame(view.series)

col1, col2 = st.columns([2, 1])
with col1:
    st.altair_chart(range_chart(frame, Metric.MOOD), use_container_width=True)
with col2:
    st.subheader("Mood Insights")
    insight_list(metric_insights(view.days, Metric.MOOD))

st.divider()

# Anxiety and irritability are single daily readings, lower is better
for metric in (Metric.ANXIETY, Metric.IRRITABILITY):
    col1, col2 = st.columns([2, 1])
    with col1:
        st.altair_chart(level_chart(frame, metric), use_container_width=True)
    with col2:
        st.subheader(f"{metric.label} Insights")
        insight_list(metric_insights(view.days, metric))
