"""Confidence, result and accuracy badges."""
import html
from typing import Optional

from matchday.views.fixture_view import confidence_tier, result_color

# Color palette matching the dark theme
CONFIDENCE_COLORS = {
    "high": "#10B981",    # Green - >= 70%
    "medium": "#F59E0B",  # Gold - >= 50%
    "low": "#EF4444",     # Red - below 50%
}

INJURY_STATUS_COLORS = {
    "Missing Fixture": "#EF4444",
    "Doubtful": "#F59E0B",
    "Questionable": "#FB923C",
}


def confidence_badge(confidence: Optional[float]) -> str:
    """Return markdown badge for a confidence percentage."""
    if confidence is None:
        return "⚪ **n/a**"
    tier = confidence_tier(confidence)
    if tier == "high":
        return f"🟢 **{confidence:.0f}%** (High)"
    elif tier == "medium":
        return f"🟡 **{confidence:.0f}%** (Medium)"
    return f"🔴 **{confidence:.0f}%** (Low)"


def get_confidence_color(confidence: float) -> str:
    return CONFIDENCE_COLORS[confidence_tier(confidence)]


def result_badge_html(result: Optional[str]) -> str:
    """Round badge with the predicted result (1, X, 2 or compound)."""
    color = result_color(result)
    label = html.escape(result or "?")
    return f"""
    <span style="
        display: inline-flex;
        align-items: center;
        justify-content: center;
        width: 2.5rem;
        height: 2.5rem;
        background: {color};
        color: white;
        border-radius: 50%;
        font-weight: 700;
        font-size: 1.1rem;
    ">{label}</span>
    """


def accuracy_badge(correct: bool, label: str) -> str:
    """Markdown tick/cross for one accuracy check."""
    mark = "✅" if correct else "❌"
    return f"{mark} {label}"


def injury_status_color(status: Optional[str]) -> str:
    return INJURY_STATUS_COLORS.get(status or "", "#64748B")
