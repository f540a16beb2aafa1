"""
Energy and caffeine dashboard.
"""

import streamlit as st

from analytics.charts import caffeine_chart, range_chart, series_frame
from analytics.insights import caffeine_insights, metric_insights
from analytics.metrics import Metric
from data import get_session, insight_list, load_view, period_controls

st.title("Energy")

st.markdown("""
Daily energy is tracked as a **highest** and a **lowest** reading on a 1-7 scale.
Bars span the day's range; grey bars are days with nothing tracked (shown at the
baseline of 4). Three-month views plot weekly averages and year views plot
monthly averages.
""")

session = get_session()
period_controls(session)
view = load_view(session)

frame = series_frame(view.series)

col1, col2 = st.columns([2, 1])
with col1:
    st.altair_chart(range_chart(frame, Metric.ENERGY), use_container_width=True)
with col2:
    st.subheader("Energy Insights")
    insight_list(metric_insights(view.days, Metric.ENERGY))

st.divider()

col1, col2 = st.columns([2, 1])
with col1:
    st.altair_chart(caffeine_chart(frame), use_container_width=True)
with col2:
    st.subheader("Caffeine Insights")
    insight_list(caffeine_insights(view.days), empty="No valid data available for this period.")
