"""Shared UI components."""
from .badges import accuracy_badge, confidence_badge, result_badge_html
from .factor_chart import factor_figure, render_factor_breakdown
from .injury_list import injury_frame, render_injury_list
from .odds_table import best_odds_frame, render_odds
from .prediction_card import render_prediction_card, render_result_card
from .probability_bar import probability_bar

__all__ = [
    "accuracy_badge",
    "best_odds_frame",
    "confidence_badge",
    "factor_figure",
    "injury_frame",
    "probability_bar",
    "render_factor_breakdown",
    "render_injury_list",
    "render_odds",
    "render_prediction_card",
    "render_result_card",
    "result_badge_html",
]
