"""
Altair chart specifications for the dashboard.

Builders take the analytics outputs (gap-filled series, sleep buckets, tag
counts, habit blocks) and return alt.Chart objects. Frames are built with
pandas first so the pages and tests can inspect exactly what is plotted.
"""

from typing import Sequence

import altair as alt
import pandas as pd

from analytics.habits import WEEKDAY_LABELS, HabitBlock, HabitDay, format_minutes
from analytics.metrics import Metric, metric_value
from analytics.models import SCALE_DEFAULT, SCALE_MAX, SCALE_MIN, GapFilledEntry, SleepBucket
from analytics.periods import format_date

MINUTES_PER_HOUR = 60

METRIC_COLORS = {
    Metric.ENERGY: "#B4C8FF",
    Metric.MOOD: "#EDBFE7",
    Metric.ANXIETY: "#F4E3B3",
    Metric.IRRITABILITY: "#EDB68C",
}
MISSING_COLOR = "#888888"
CAFFEINE_COLOR = "#C3A5F3"
SLEEP_COLOR = "#B4C8FF"
NAP_COLOR = "#EDBFE7"

HABIT_COLORS = {
    "cleaning": "#A8E6D9",
    "exercise": "#EDB68C",
    "reading": "#C3A5F3",
    "writing": "#f4e3b3",
    "second-language": "#EDBFE7",
}

TAG_PALETTE = ["#B4C8FF", "#EDBFE7", "#F4E3B3", "#C8B4FF", "#B4FFDC", "#FFB4C8", "#DCDCFF", "#FFDCB4"]


def series_frame(entries: Sequence[GapFilledEntry]) -> pd.DataFrame:
    """One row per point with every metric side, caffeine and a tick label."""
    rows = []
    for entry in entries:
        rows.append({
            "date": pd.Timestamp(entry.date),
            "label": format_date(entry.date, "MMM DD"),
            "energy_highest": metric_value(entry, Metric.ENERGY, "highest"),
            "energy_lowest": metric_value(entry, Metric.ENERGY, "lowest"),
            "mood_highest": metric_value(entry, Metric.MOOD, "highest"),
            "mood_lowest": metric_value(entry, Metric.MOOD, "lowest"),
            "anxiety": metric_value(entry, Metric.ANXIETY),
            "irritability": metric_value(entry, Metric.IRRITABILITY),
            "caffeine": float(entry.caffeine_mg),
            "status": "missing" if getattr(entry, "is_missing", False) else "tracked",
        })
    columns = [
        "date", "label", "energy_highest", "energy_lowest", "mood_highest", "mood_lowest",
        "anxiety", "irritability", "caffeine", "status",
    ]
    return pd.DataFrame(rows, columns=columns)


def _scale_axis(column: str, title: str) -> alt.Y:
    return alt.Y(
        f"{column}:Q",
        title=title,
        scale=alt.Scale(domain=[SCALE_MIN, SCALE_MAX]),
        axis=alt.Axis(values=list(range(SCALE_MIN, SCALE_MAX + 1))),
    )


def _status_color(metric: Metric) -> alt.Color:
    return alt.Color(
        "status:N",
        scale=alt.Scale(domain=["tracked", "missing"], range=[METRIC_COLORS[metric], MISSING_COLOR]),
        legend=None,
    )


def range_chart(frame: pd.DataFrame, metric: Metric, height: int = 260) -> alt.LayerChart:
    """Floating bars from a two-sided metric's lowest to highest reading."""
    metric = Metric(metric)
    if not metric.two_sided:
        raise ValueError(f"range_chart needs a two-sided metric, got {metric.value}")
    high = f"{metric.value}_highest"
    low = f"{metric.value}_lowest"

    bars = alt.Chart(frame).mark_bar(cornerRadius=4, opacity=0.85).encode(
        x=alt.X("date:T", title=None, axis=alt.Axis(format="%b %d")),
        y=alt.Y(f"{low}:Q", title=metric.label, scale=alt.Scale(domain=[SCALE_MIN, SCALE_MAX])),
        y2=alt.Y2(high),
        color=_status_color(metric),
        tooltip=[
            alt.Tooltip("label:N", title="Date"),
            alt.Tooltip(f"{high}:Q", title="Highest", format=".1f"),
            alt.Tooltip(f"{low}:Q", title="Lowest", format=".1f"),
            alt.Tooltip("status:N", title="Status"),
        ],
    )
    baseline = alt.Chart(pd.DataFrame({"y": [SCALE_DEFAULT]})).mark_rule(
        strokeDash=[4, 4], color="#F4E3B3", opacity=0.5,
    ).encode(y="y:Q")
    return alt.layer(bars, baseline).properties(height=height, title=f"{metric.label} range")


def level_chart(frame: pd.DataFrame, metric: Metric, height: int = 260) -> alt.Chart:
    """Line with points for a one-sided metric; missing days drawn grey."""
    metric = Metric(metric)
    column = metric.value
    return alt.Chart(frame).mark_line(
        point=True, color=METRIC_COLORS[metric], interpolate="monotone",
    ).encode(
        x=alt.X("date:T", title=None, axis=alt.Axis(format="%b %d")),
        y=_scale_axis(column, metric.label),
        tooltip=[
            alt.Tooltip("label:N", title="Date"),
            alt.Tooltip(f"{column}:Q", title=metric.label, format=".1f"),
            alt.Tooltip("status:N", title="Status"),
        ],
    ).properties(height=height, title=metric.label)


def caffeine_chart(frame: pd.DataFrame, height: int = 220) -> alt.Chart:
    return alt.Chart(frame).mark_bar(color=CAFFEINE_COLOR, cornerRadius=3).encode(
        x=alt.X("date:T", title=None, axis=alt.Axis(format="%b %d")),
        y=alt.Y("caffeine:Q", title="Caffeine (mg)"),
        tooltip=[
            alt.Tooltip("label:N", title="Date"),
            alt.Tooltip("caffeine:Q", title="mg", format=".0f"),
        ],
    ).properties(height=height, title="Caffeine")


def sleep_frame(buckets: Sequence[SleepBucket]) -> pd.DataFrame:
    rows = [
        {
            "date": pd.Timestamp(b.date),
            "label": format_date(b.date, "MMM DD"),
            "duration": b.duration,
            "bedtime": b.bedtime,
            "wake_time": b.wake_time,
            "bedtime_minutes": b.bedtime_minutes,
            "wake_time_minutes": b.wake_time_minutes,
            "has_naps": b.has_naps,
            "nap_count": b.nap_count,
            "days": b.days,
        }
        for b in buckets
    ]
    columns = [
        "date", "label", "duration", "bedtime", "wake_time", "bedtime_minutes",
        "wake_time_minutes", "has_naps", "nap_count", "days",
    ]
    return pd.DataFrame(rows, columns=columns)


def sleep_segments(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Split each night into segments on a 0-24h axis.

    A night crossing midnight (bedtime after wake time on the clock) becomes
    two segments: bedtime to 24:00 and 00:00 to wake time.
    """
    rows = []
    for row in frame.itertuples(index=False):
        start = row.bedtime_minutes / MINUTES_PER_HOUR
        end = row.wake_time_minutes / MINUTES_PER_HOUR
        base = {"label": row.label, "bedtime": row.bedtime, "wake_time": row.wake_time, "duration": row.duration}
        if end > start:
            rows.append({**base, "start": start, "end": end})
        else:
            rows.append({**base, "start": start, "end": 24.0})
            if end > 0:
                rows.append({**base, "start": 0.0, "end": end})
    return pd.DataFrame(rows, columns=["label", "bedtime", "wake_time", "duration", "start", "end"])


def sleep_timeline_chart(frame: pd.DataFrame) -> alt.Chart:
    """Horizontal bars from bedtime to wake time, one row per night or bucket."""
    segments = sleep_segments(frame)
    order = frame["label"].tolist()
    return alt.Chart(segments).mark_bar(color=SLEEP_COLOR, cornerRadius=6, opacity=0.8).encode(
        x=alt.X("start:Q", title="Hour", scale=alt.Scale(domain=[0, 24]), axis=alt.Axis(tickCount=12)),
        x2=alt.X2("end"),
        y=alt.Y("label:N", sort=order, title=None),
        tooltip=[
            alt.Tooltip("label:N", title="Date"),
            alt.Tooltip("bedtime:N", title="Bedtime"),
            alt.Tooltip("wake_time:N", title="Wake"),
            alt.Tooltip("duration:Q", title="Hours", format=".1f"),
        ],
    ).properties(height=max(120, 28 * len(order)), title="Sleep timeline")


def sleep_duration_chart(frame: pd.DataFrame, height: int = 220) -> alt.Chart:
    data = frame.copy()
    data["naps"] = data["has_naps"].map({True: "with naps", False: "no naps"})
    return alt.Chart(data).mark_bar(cornerRadius=3).encode(
        x=alt.X("date:T", title=None, axis=alt.Axis(format="%b %d")),
        y=alt.Y("duration:Q", title="Hours"),
        color=alt.Color(
            "naps:N",
            scale=alt.Scale(domain=["no naps", "with naps"], range=[SLEEP_COLOR, NAP_COLOR]),
            legend=alt.Legend(title=None),
        ),
        tooltip=[
            alt.Tooltip("label:N", title="Date"),
            alt.Tooltip("duration:Q", title="Hours", format=".1f"),
            alt.Tooltip("nap_count:Q", title="Naps"),
        ],
    ).properties(height=height, title="Sleep duration")


def tag_frame(counts: Sequence[tuple[str, int]]) -> pd.DataFrame:
    frame = pd.DataFrame(list(counts), columns=["tag", "count"])
    total = frame["count"].sum()
    frame["share"] = frame["count"] / total if total else 0.0
    return frame


def tag_chart(counts: Sequence[tuple[str, int]], title: str) -> alt.Chart:
    """Donut of tag frequencies, most frequent first."""
    frame = tag_frame(counts)
    order = frame["tag"].tolist()
    return alt.Chart(frame).mark_arc(innerRadius=50, stroke="#ffffff", strokeWidth=1).encode(
        theta=alt.Theta("count:Q"),
        color=alt.Color(
            "tag:N",
            sort=order,
            scale=alt.Scale(domain=order, range=TAG_PALETTE),
            legend=alt.Legend(title=None),
        ),
        tooltip=[
            alt.Tooltip("tag:N", title=title),
            alt.Tooltip("count:Q", title="Days"),
            alt.Tooltip("share:Q", title="Share", format=".0%"),
        ],
    ).properties(height=260, title=title)


def habit_blocks_frame(blocks: Sequence[HabitBlock]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "label": b.label,
                "start": pd.Timestamp(b.start),
                "total": b.total,
                "done": b.done,
                "intensity": b.intensity,
                "display": format_minutes(b.total),
            }
            for b in blocks
        ],
        columns=["label", "start", "total", "done", "intensity", "display"],
    )


def habit_blocks_chart(blocks: Sequence[HabitBlock], habit_id: str) -> alt.Chart:
    """Heat strip of weekly or monthly habit totals."""
    frame = habit_blocks_frame(blocks)
    order = frame["label"].tolist()
    return alt.Chart(frame).mark_rect(color=HABIT_COLORS[habit_id], cornerRadius=4).encode(
        x=alt.X("label:N", sort=order, title=None, axis=alt.Axis(labelAngle=-45)),
        opacity=alt.Opacity("intensity:Q", scale=alt.Scale(domain=[0, 1], range=[0.06, 0.61]), legend=None),
        tooltip=[
            alt.Tooltip("label:N", title="Period"),
            alt.Tooltip("display:N", title="Time"),
            alt.Tooltip("done:Q", title="Days done"),
        ],
    ).properties(height=50)


def habit_category_chart(items: Sequence[tuple[str, int | float]], habit_id: str, unit: str = "min") -> alt.Chart:
    """Horizontal bars for reading/writing categories or exercise types."""
    frame = pd.DataFrame(list(items), columns=["category", "value"])
    return alt.Chart(frame).mark_bar(color=HABIT_COLORS[habit_id], opacity=0.6, cornerRadius=3).encode(
        x=alt.X("value:Q", title=unit),
        y=alt.Y("category:N", sort="-x", title=None),
        tooltip=[alt.Tooltip("category:N", title="Category"), alt.Tooltip("value:Q", title=unit)],
    ).properties(height=max(60, 30 * len(frame)))


def habit_calendar_chart(days: Sequence[HabitDay], habit_id: str) -> alt.Chart:
    """Month grid, Monday-first, with completed days filled in."""
    first = days[0].date if days else None
    frame = pd.DataFrame(
        [
            {
                "day": d.date.day,
                "weekday": d.label,
                # Row of the Monday-aligned grid
                "week": (d.date.day - 1 + first.weekday()) // 7,
                "status": "done" if d.done else "not done",
                "display": format_minutes(d.minutes),
            }
            for d in days
        ],
        columns=["day", "weekday", "week", "status", "display"],
    )
    return alt.Chart(frame).mark_rect(cornerRadius=6).encode(
        x=alt.X("weekday:N", sort=list(WEEKDAY_LABELS), title=None, axis=alt.Axis(orient="top", labelAngle=0)),
        y=alt.Y("week:O", title=None, axis=None),
        color=alt.Color(
            "status:N",
            scale=alt.Scale(domain=["done", "not done"], range=[HABIT_COLORS[habit_id], "#2a2a35"]),
            legend=None,
        ),
        tooltip=[
            alt.Tooltip("day:Q", title="Day"),
            alt.Tooltip("display:N", title="Time"),
            alt.Tooltip("status:N", title="Status"),
        ],
    ).properties(height=180)
