"""Probability bar visualization."""
import html
from typing import Optional

import streamlit as st

from matchday.models.entities import Prediction


def _escape(text: str) -> str:
    """Escape HTML special characters for safe rendering."""
    return html.escape(str(text))


def probability_bar_html(
    probs: dict[str, Optional[float]],
    labels: list[str],
    keys: Optional[list[str]] = None,
) -> str:
    """Build a horizontal stacked bar.

    Args:
        probs: Percentages (0-100) keyed by lowercase label, or by ``keys``
        labels: Labels to display in order (e.g., ["Home", "Draw", "Away"])
        keys: Keys into ``probs`` matching ``labels`` position by position
    """
    keys = keys or [label.lower() for label in labels]
    colors = ["#28a745", "#6c757d", "#dc3545"]  # Green, Gray, Red

    html_out = '<div style="display: flex; width: 100%; height: 30px; border-radius: 5px; overflow: hidden;">'
    for idx, (label, key) in enumerate(zip(labels, keys)):
        pct = probs.get(key) or 0
        color = colors[idx % len(colors)]
        safe_label = _escape(label)
        html_out += f'<div style="width: {pct}%; background: {color}; display: flex; align-items: center; justify-content: center; color: white; font-size: 12px;">'
        if pct > 10:
            html_out += f"{safe_label}: {pct:.0f}%"
        html_out += "</div>"
    html_out += "</div>"
    return html_out


def probability_bar(
    probs: dict[str, Optional[float]],
    labels: list[str],
    keys: Optional[list[str]] = None,
) -> None:
    st.markdown(probability_bar_html(probs, labels, keys), unsafe_allow_html=True)


def prediction_probability_bar(prediction: Prediction, home: str = "Home", away: str = "Away") -> None:
    """1X2 bar for a prediction; nothing is drawn without percentages."""
    if prediction.home_pct is None and prediction.away_pct is None:
        return
    probability_bar(
        {"home": prediction.home_pct, "draw": prediction.draw, "away": prediction.away_pct},
        [home, "Draw", away],
        keys=["home", "draw", "away"],
    )
