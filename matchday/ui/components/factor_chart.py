"""Factor breakdown chart."""
from typing import Optional

import plotly.graph_objects as go
import streamlit as st

from matchday.views.factors import FactorRow, factor_breakdown

TIER_COLORS = {
    "strong_home": "#10B981",
    "home": "#34D399",
    "neutral": "#64748B",
    "away": "#FB923C",
    "strong_away": "#EF4444",
}


def factor_figure(rows: list[FactorRow]) -> go.Figure:
    """Horizontal bars of factor scores (50 = neutral)."""
    labels = [f"{r.letter} · {r.label} ({r.weight}%)" for r in rows]
    scores = [r.score or 0 for r in rows]

    fig = go.Figure(
        go.Bar(
            x=scores,
            y=labels,
            orientation="h",
            marker_color=[TIER_COLORS[r.tier] for r in rows],
            text=[f"{s:.0f}" for s in scores],
            textposition="auto",
            hovertext=[r.notes or "" for r in rows],
        )
    )
    fig.add_vline(x=50, line_dash="dash", line_color="#94A3B8")
    fig.update_layout(
        xaxis=dict(range=[0, 100], title="Score (away ← 50 → home)"),
        yaxis=dict(autorange="reversed"),
        height=60 + 40 * len(rows),
        margin=dict(l=10, r=10, t=10, b=40),
        showlegend=False,
    )
    return fig


def render_factor_breakdown(
    factors: Optional[dict],
    overall_index: Optional[float] = None,
    key: Optional[str] = None,
) -> None:
    rows = factor_breakdown(factors)
    if not rows:
        return

    if overall_index is not None:
        st.metric("Overall Index", f"{overall_index:.0f}")

    st.plotly_chart(factor_figure(rows), use_container_width=True, key=key)

    # Callers may already sit inside an expander, which cannot nest
    for row in rows:
        if not row.notes:
            continue
        weighted = f" → {row.weighted:.1f}" if row.weighted is not None else ""
        st.markdown(f"**{row.letter} {row.label}** ({row.weight}%){weighted}")
        st.caption(row.notes)
