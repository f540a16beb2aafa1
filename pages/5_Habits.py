"""
Habits dashboard.
"""

import streamlit as st

from analytics.charts import habit_blocks_chart, habit_calendar_chart, habit_category_chart
from analytics.habits import format_minutes, habit_blocks, habit_days, habit_rollup
from analytics.session import FetchError
from data import get_session, period_controls

st.title("Habits")

st.markdown("""
Minutes logged per habit, compared with the previous period. A day counts as
done when any minutes were logged or the habit was ticked off.
""")

session = get_session()
period_controls(session)

try:
    entries = session.habit_entries()
except FetchError as e:
    st.error(f"Could not load habit data: {e}")
    st.stop()

if not entries:
    st.info("No habit data for this period.")
    st.stop()

bounds = session.current_range()
summaries = habit_rollup(entries, session.period, session.offset)

for summary in summaries:
    with st.expander(summary.name, expanded=True):
        # Visual
        if session.period == "week":
            days = habit_days(entries, summary.habit_id, bounds.start, bounds.end)
            cols = st.columns(7)
            for col, day in zip(cols, days):
                value = format_minutes(day.minutes) if day.minutes > 0 else ("✓" if day.done else "—")
                col.markdown(f"**{day.label}**  \n{value}")
                if day.tags:
                    col.caption(" ".join(day.tags))
        elif session.period == "month":
            days = habit_days(entries, summary.habit_id, bounds.start, bounds.end)
            st.altair_chart(habit_calendar_chart(days, summary.habit_id), use_container_width=True)
        else:
            unit = "week" if session.period == "3months" else "month"
            blocks = habit_blocks(entries, summary.habit_id, bounds.start, bounds.end, unit)
            st.altair_chart(habit_blocks_chart(blocks, summary.habit_id), use_container_width=True)

        # Category breakdown outside the week view
        if session.period != "week":
            if summary.categories:
                st.altair_chart(habit_category_chart(summary.categories, summary.habit_id), use_container_width=True)
            elif summary.exercise_types:
                st.altair_chart(
                    habit_category_chart(summary.exercise_types, summary.habit_id, unit="times"),
                    use_container_width=True,
                )

        # Stats
        col1, col2, col3, col4 = st.columns(4)
        col1.metric("Total", format_minutes(summary.total))
        col2.metric("Completed", f"{summary.done} days")
        if summary.average is not None:
            col3.metric("Avg/session", format_minutes(summary.average))
        if summary.total > 0 or summary.previous_total > 0:
            col4.metric("vs prev", summary.trend or "→")

        if summary.steps > 0:
            col1, col2, col3 = st.columns(3)
            col1.metric("Total steps", f"{int(summary.steps):,}")
            if summary.average_steps is not None:
                col2.metric("Avg steps", f"{summary.average_steps:,}")
            col3.metric("Steps trend", summary.steps_trend or "→")

        if summary.categories:
            st.markdown(" · ".join(f"{label}: **{format_minutes(value)}**" for label, value in summary.categories))

        st.markdown(f"*{summary.message}*")
        if summary.extra:
            st.markdown(f"*{summary.extra}*")
