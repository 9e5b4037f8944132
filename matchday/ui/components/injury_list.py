"""Injury list component."""
import html

import pandas as pd
import streamlit as st

from matchday.models.entities import Injury
from matchday.ui.components.badges import injury_status_color
from matchday.views.filters import sort_injuries


def injury_frame(injuries: list[Injury]) -> pd.DataFrame:
    """Injuries as a table, most recently reported first."""
    rows = []
    for injury in sort_injuries(injuries):
        reported = injury.reported_date or injury.created_at
        rows.append({
            "Player": injury.player_name or "Unknown",
            "Team": injury.team.name if injury.team else "",
            "Status": injury.type_text or "",
            "Reason": injury.reason_text or "Unknown",
            "Reported": reported.strftime("%d %b %Y") if reported else "",
        })
    return pd.DataFrame(rows, columns=["Player", "Team", "Status", "Reason", "Reported"])


def render_injury_list(injuries: list[Injury], compact: bool = False) -> None:
    if not injuries:
        st.success("No injuries reported")
        return

    ordered = sort_injuries(injuries)

    if compact:
        for injury in ordered[:3]:
            st.markdown(f"- {injury.player_name} · :red[{injury.reason_text or 'Unknown'}]")
        if len(ordered) > 3:
            st.caption(f"+{len(ordered) - 3} more injured")
        return

    st.caption(f"{len(ordered)} player{'s' if len(ordered) != 1 else ''} injured")
    for injury in ordered:
        color = injury_status_color(injury.type_text)
        status = html.escape(injury.type_text or "Out")
        name = html.escape(injury.player_name or "Unknown")
        reason = html.escape(injury.reason_text or "Unknown")
        st.markdown(
            f'<div style="display:flex; justify-content:space-between; padding:0.25rem 0;">'
            f"<span><b>{name}</b> · {reason}</span>"
            f'<span style="color:{color}; font-weight:600;">{status}</span>'
            f"</div>",
            unsafe_allow_html=True,
        )
