"""Matchday Insights Dashboard."""
import streamlit as st

# Load Streamlit secrets into env vars BEFORE importing other modules
from matchday.config import load_streamlit_secrets, setup_logging
load_streamlit_secrets()

from matchday.ui.data import MATCH_DETAIL, PAGE_KEY

PAGES = [
    "Dashboard",
    "Matches",
    MATCH_DETAIL,
    "Predictions",
    "Standings",
    "Teams & Injuries",
]

# Pitch-green dark theme
CUSTOM_CSS = """
<style>
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&display=swap');

    html, body, [class*="css"] {
        font-family: 'Inter', sans-serif;
    }

    h1, h2, h3, h4, h5 {
        font-weight: 600 !important;
        letter-spacing: -0.01em;
    }

    .main h1 {
        color: #22C55E;
    }

    /* Bordered containers (match cards) */
    div[data-testid="stVerticalBlockBorderWrapper"] {
        background: #111827;
        border: 1px solid #1F2937;
        border-radius: 12px;
    }

    div[data-testid="stVerticalBlockBorderWrapper"]:hover {
        border-color: #22C55E;
    }

    div[data-testid="stMetric"] {
        background: #111827;
        border: 1px solid #1F2937;
        border-radius: 10px;
        padding: 0.75rem 1rem;
    }

    div[data-testid="stMetric"] label {
        color: #9CA3AF !important;
        font-size: 0.8rem !important;
        text-transform: uppercase;
        letter-spacing: 0.05em;
    }

    section[data-testid="stSidebar"] {
        background: #0B1120;
        border-right: 1px solid #1F2937;
    }

    section[data-testid="stSidebar"] .stRadio [data-testid="stWidgetLabel"] {
        color: #22C55E !important;
    }

    details[data-testid="stExpander"] {
        background: #111827;
        border: 1px solid #1F2937;
        border-radius: 8px;
    }

    .stButton > button {
        border-radius: 8px;
        font-weight: 600;
    }

    .stButton > button[kind="primary"] {
        background: #16A34A;
        border: none;
    }

    div[data-testid="stDataFrame"] {
        border: 1px solid #1F2937;
        border-radius: 8px;
        overflow: hidden;
    }

    hr {
        border-color: #1F2937 !important;
        margin: 1rem 0 !important;
    }

    footer {
        visibility: hidden;
    }
</style>
"""


def main():
    """Main dashboard entry."""
    setup_logging()

    st.set_page_config(
        page_title="Matchday Insights",
        page_icon="⚽",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    st.markdown(CUSTOM_CSS, unsafe_allow_html=True)

    st.title("Matchday Insights")
    st.caption("Fixtures, live scores and AI match predictions")

    # Sidebar navigation; other pages switch it through session state
    page = st.sidebar.radio("Navigation", PAGES, key=PAGE_KEY)

    if page == "Dashboard":
        from matchday.ui.pages import dashboard_page
        dashboard_page.render()
    elif page == "Matches":
        from matchday.ui.pages import matches
        matches.render()
    elif page == MATCH_DETAIL:
        from matchday.ui.pages import match_detail
        match_detail.render()
    elif page == "Predictions":
        from matchday.ui.pages import predictions
        predictions.render()
    elif page == "Standings":
        from matchday.ui.pages import standings
        standings.render()
    elif page == "Teams & Injuries":
        from matchday.ui.pages import teams
        teams.render()


if __name__ == "__main__":
    main()
