"""
Patterns, notes, activities and people.
"""

import streamlit as st

from analytics.charts import tag_chart
from analytics.insights import entries_with_notes, notes_for_period, tag_counts
from analytics.patterns import analyze_patterns
from analytics.periods import format_date
from data import get_session, insight_list, load_view, period_controls

st.title("Patterns")

session = get_session()
period_controls(session)
view = load_view(session)

st.subheader("Pattern Insights")
insight_list(analyze_patterns(view.days), empty="No significant patterns found.")

st.divider()

# Notes
noted = entries_with_notes(view.days)
with st.expander(f"Notes ({len(noted)})", expanded=True):
    if not noted:
        st.caption("No notes recorded in this period.")
    else:
        shown = notes_for_period(view.days, view.period)
        for entry in shown:
            st.markdown(f"**{format_date(entry.date, 'MMM DD')}**: {entry.note}")
        if len(shown) < len(noted):
            st.caption(f"Showing {len(shown)} random notes from {len(noted)} total")

st.divider()

col1, col2 = st.columns(2)
for col, field, title in ((col1, "activities", "Activities"), (col2, "people", "People")):
    with col:
        counts = tag_counts(view.days, field)
        if counts:
            st.altair_chart(tag_chart(counts, title), use_container_width=True)
        else:
            st.caption(f"No {field} recorded in this period.")
