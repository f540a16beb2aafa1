"""
Tracker Dashboard - Main Entry Point

Multi-page Streamlit app over the daily tracker's entries.

Set DEPLOYMENT_MODE=public to hide the free-text pages (notes and people).
Set DEPLOYMENT_MODE=local (default) to show all pages.

Run with: streamlit run app.py
"""

import logging
import os

import streamlit as st
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

# Deployment mode: "local" (all pages) or "public" (no free-text pages)
DEPLOYMENT_MODE = os.environ.get("DEPLOYMENT_MODE", "local")
IS_PUBLIC = DEPLOYMENT_MODE == "public"

SUMMARY_PAGE = st.Page("Summary.py", title="Summary", default=True)

METRIC_PAGES = [
    st.Page("pages/1_Energy.py", title="Energy", icon=":material/bolt:"),
    st.Page("pages/2_Mood.py", title="Mood", icon=":material/mood:"),
    st.Page("pages/3_Sleep.py", title="Sleep", icon=":material/bedtime:"),
]

HABIT_PAGES = [
    st.Page("pages/5_Habits.py", title="Habits", icon=":material/checklist:"),
]

if IS_PUBLIC:
    nav_config = {
        "Overview": [SUMMARY_PAGE],
        "Metrics": METRIC_PAGES,
        "Habits": HABIT_PAGES,
    }
else:
    # Patterns shows notes and people tags
    PRIVATE_PAGES = [
        st.Page("pages/4_Patterns.py", title="Patterns", icon=":material/insights:"),
    ]
    nav_config = {
        "Overview": [SUMMARY_PAGE],
        "Metrics": METRIC_PAGES + PRIVATE_PAGES,
        "Habits": HABIT_PAGES,
    }

st.set_page_config(
    page_title="Tracker Dashboard",
    page_icon=":material/analytics:",
    layout="wide",
)

pg = st.navigation(nav_config)
pg.run()
