"""
Sleep dashboard.
"""

import streamlit as st

from analytics.charts import sleep_duration_chart, sleep_frame, sleep_timeline_chart
from analytics.insights import sleep_insights
from data import get_session, insight_list, load_view, period_controls

st.title("Sleep")

st.markdown("""
Sleep is logged as 48 half-hour slots per day. The longest asleep run is the
main sleep (bedtime to wake time); other runs of 30 minutes or more count as
naps. Average bedtimes treat times before 06:00 as the same night.
""")

session = get_session()
period_controls(session)
view = load_view(session)

frame = sleep_frame(view.sleep)

if frame.empty:
    st.info("No sleep data recorded in this period.")
    st.stop()

st.subheader("Sleep Insights")
insight_list(sleep_insights(view.days), empty="No sleep data recorded in this period.")

col1, col2 = st.columns(2)
with col1:
    st.altair_chart(sleep_timeline_chart(frame), use_container_width=True)
with col2:
    st.altair_chart(sleep_duration_chart(frame), use_container_width=True)

with st.expander("Nightly data"):
    st.dataframe(
        frame[["label", "duration", "bedtime", "wake_time", "nap_count", "days"]].rename(columns={
            "label": "Date",
            "duration": "Hours",
            "bedtime": "Bedtime",
            "wake_time": "Wake",
            "nap_count": "Naps",
            "days": "Nights",
        }),
        hide_index=True,
        use_container_width=True,
    )
