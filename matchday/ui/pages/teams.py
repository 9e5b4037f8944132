"""Teams & injuries page."""
import asyncio
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd
import streamlit as st

from matchday.config.settings import settings
from matchday.models.entities import Injury, Standing, Team
from matchday.ui.components import injury_frame, render_injury_list
from matchday.ui.data import fetch
from matchday.views.filters import find_team_standing, group_injuries_by_team


@dataclass
class TeamOverview:
    team: Team
    standing: Optional[Standing] = None
    injuries: list[Injury] = field(default_factory=list)


async def team_overview(client, team_id) -> TeamOverview:
    """Team record, its league position and its injuries, fetched together."""
    team, standings, injuries = await asyncio.gather(
        client.get_team(team_id),
        client.get_standings(),
        client.get_injuries(team_id),
    )
    return TeamOverview(team=team, standing=find_team_standing(standings, team_id), injuries=injuries)


def render():
    """Render teams and injuries page."""
    st.header("Teams & Injuries")

    tab1, tab2 = st.tabs(["Injuries", "Teams"])

    with tab1:
        _render_injuries()

    with tab2:
        _render_teams()


def _render_injuries():
    injuries = fetch(
        "injuries",
        lambda client: client.get_injuries(league_id=settings.league_id),
        default=[],
    )
    if not injuries:
        st.success("No injuries reported")
        return

    grouped = group_injuries_by_team(injuries)
    st.metric("Injured players", len(injuries), help=f"Across {len(grouped)} teams")

    team = st.selectbox("Team", ["All teams"] + sorted(grouped), key="injuries-team")
    teams = sorted(grouped) if team == "All teams" else [team]

    for name in teams:
        rows = grouped[name]
        with st.expander(f"{name} ({len(rows)})", expanded=team != "All teams"):
            st.dataframe(
                injury_frame(rows).drop(columns=["Team"]),
                hide_index=True,
                use_container_width=True,
            )


def _render_teams():
    teams = fetch(
        "teams",
        lambda client: client.get_teams(settings.league_id),
        default=[],
    )
    if not teams:
        st.info("No teams found")
        return

    df = pd.DataFrame(
        [
            {
                "Logo": t.logo,
                "Team": t.name,
                "Code": t.code or "",
                "Founded": t.founded,
                "Stadium": t.venue_name or "",
                "City": t.venue_city or "",
            }
            for t in sorted(teams, key=lambda t: t.name)
        ]
    )
    st.dataframe(
        df,
        hide_index=True,
        use_container_width=True,
        column_config={"Logo": st.column_config.ImageColumn("", width="small")},
    )

    st.divider()
    names = {t.id: t.name for t in sorted(teams, key=lambda t: t.name)}
    team_id = st.selectbox(
        "Team details",
        list(names),
        index=None,
        format_func=names.get,
        placeholder="Choose a team",
        key="team-detail",
    )
    if team_id is not None:
        _render_team_detail(team_id)


def _render_team_detail(team_id):
    overview = fetch("team", lambda client: team_overview(client, team_id))
    if overview is None:
        return

    team = overview.team
    col1, col2 = st.columns([1, 4])
    with col1:
        if team.logo:
            st.image(team.logo, width=80)
    with col2:
        st.subheader(team.name)
        details = [d for d in [team.code, team.country, f"Founded {team.founded}" if team.founded else None] if d]
        venue = ", ".join(v for v in [team.venue_name, team.venue_city] if v)
        if venue:
            details.append(venue)
        st.caption(" · ".join(details))

    standing = overview.standing
    if standing is not None:
        col1, col2, col3, col4, col5 = st.columns(5)
        col1.metric("Position", f"#{standing.rank}")
        col2.metric("Points", standing.points)
        col3.metric("Won", standing.won)
        col4.metric("Drawn", standing.drawn)
        col5.metric("Lost", standing.lost)
        if standing.form:
            st.caption(f"Form: {standing.form}")
    else:
        st.caption("Not in the current standings")

    st.markdown("**Injuries**")
    render_injury_list(overview.injuries)
