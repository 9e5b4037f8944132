"""League table page."""
import pandas as pd
import streamlit as st

from matchday.models.entities import Standing
from matchday.ui.data import fetch
from matchday.views.filters import sort_standings, venue_table

SORT_OPTIONS = {
    "Position": "rank",
    "Goal difference": "goal_diff",
}


def standings_frame(rows: list[Standing]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "#": s.rank,
                "Team": s.name,
                "P": s.played,
                "W": s.won,
                "D": s.drawn,
                "L": s.lost,
                "GF": s.goals_for,
                "GA": s.goals_against,
                "GD": s.goal_diff,
                "Pts": s.points,
                "Form": s.form or "",
            }
            for s in rows
        ],
        columns=["#", "Team", "P", "W", "D", "L", "GF", "GA", "GD", "Pts", "Form"],
    )


def venue_frame(rows: list[Standing], side: str) -> pd.DataFrame:
    """Top home or away records, ranked by points earned there."""
    return pd.DataFrame(
        [
            {
                "#": idx,
                "Team": s.name,
                "P": record.played,
                "W": record.win,
                "D": record.draw,
                "L": record.lose,
                "Pts": record.points,
            }
            for idx, (s, record) in enumerate(venue_table(rows, side), start=1)
        ],
        columns=["#", "Team", "P", "W", "D", "L", "Pts"],
    )


def render():
    """Render standings page."""
    st.header("League Table")

    standings = fetch("standings", lambda client: client.get_standings(), default=[])
    if not standings:
        st.info("No standings available")
        return

    sort_label = st.radio("Sort by", list(SORT_OPTIONS), horizontal=True, key="standings-sort")
    rows = sort_standings(standings, SORT_OPTIONS[sort_label])

    st.dataframe(
        standings_frame(rows),
        hide_index=True,
        use_container_width=True,
        height=min(38 + 35 * len(rows), 800),
    )

    zones = sorted({s.description for s in standings if s.description})
    if zones:
        st.caption(" · ".join(zones))

    _render_venue_tables(standings)


def _render_venue_tables(standings: list[Standing]):
    if not any(s.home_record or s.away_record for s in standings):
        return

    col1, col2 = st.columns(2)
    for col, side, title in ((col1, "home", "Home Form"), (col2, "away", "Away Form")):
        with col:
            st.subheader(title)
            st.dataframe(venue_frame(standings, side), hide_index=True, use_container_width=True)
