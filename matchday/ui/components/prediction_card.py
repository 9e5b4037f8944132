"""Prediction and result cards."""
import html
from typing import Callable, Optional

import pandas as pd
import streamlit as st

from matchday.models.entities import Fixture, PredictionHistory
from matchday.ui.components.badges import accuracy_badge, confidence_badge, result_badge_html
from matchday.ui.components.factor_chart import render_factor_breakdown
from matchday.ui.components.probability_bar import prediction_probability_bar
from matchday.views.fixture_view import FixtureView, build_fixture_view, relative_time


def _kickoff(fixture: Fixture) -> str:
    if fixture.match_date is None:
        return "TBD"
    return fixture.match_date.strftime("%a %d %b, %H:%M")


def _header(view: FixtureView) -> None:
    fixture = view.fixture
    col1, col2 = st.columns([3, 2])
    with col1:
        st.caption(fixture.round or "League")
    with col2:
        st.caption(_kickoff(fixture))

    home, middle, away = st.columns([3, 2, 3])
    with home:
        if fixture.home_team and fixture.home_team.logo:
            st.image(fixture.home_team.logo, width=40)
        st.markdown(f"**{fixture.home_name}**")
    with middle:
        if fixture.is_completed or fixture.is_live:
            st.markdown(f"### {fixture.goals_home or 0} - {fixture.goals_away or 0}")
        elif view.prediction is not None:
            st.markdown(result_badge_html(view.prediction.prediction_result), unsafe_allow_html=True)
        else:
            st.markdown("**vs**")
    with away:
        if fixture.away_team and fixture.away_team.logo:
            st.image(fixture.away_team.logo, width=40)
        st.markdown(f"**{fixture.away_name}**")


def history_frame(history: list[PredictionHistory]) -> pd.DataFrame:
    rows = [
        {
            "When": h.created_at.strftime("%d %b %H:%M") if h.created_at else "",
            "Model": h.model_used or "",
            "Result": h.prediction_result or "",
            "Confidence": h.certainty_score if h.certainty_score is not None else h.confidence_pct,
            "Home %": h.home_win_pct,
            "Draw %": h.draw_pct,
            "Away %": h.away_win_pct,
        }
        for h in history
    ]
    return pd.DataFrame(rows, columns=["When", "Model", "Result", "Confidence", "Home %", "Draw %", "Away %"])


def render_prediction_details(view: FixtureView, key: str = "details") -> None:
    """Markets, scorelines, factors and reasoning of a prediction."""
    prediction = view.prediction
    if prediction is None:
        return

    prediction_probability_bar(prediction, view.fixture.home_name, view.fixture.away_name)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Most Likely Score", view.most_likely_score or "-")
    with col2:
        st.metric("O/U 2.5", prediction.over_under or "-")
    with col3:
        st.metric("BTTS", prediction.btts_call or "-")

    if prediction.value_bet_call:
        st.markdown(f"💰 **Value bet:** {prediction.value_bet_call}")

    if view.score_predictions:
        with st.expander("Score predictions"):
            for sp in view.score_predictions:
                st.markdown(f"- {sp.score}: {sp.probability:.0f}%")

    if prediction.key_factors or prediction.risk_factors:
        with st.expander("Key & risk factors"):
            for factor in prediction.key_factors:
                st.markdown(f"✅ {factor}")
            for risk in prediction.risk_factors:
                st.markdown(f"⚠️ {risk}")

    if view.factors:
        with st.expander("Factor breakdown"):
            render_factor_breakdown(
                prediction.factors, prediction.overall_index, key=f"factors-{key}-{view.fixture.id}"
            )

    if prediction.analysis_body:
        with st.expander("Analysis"):
            st.markdown(prediction.analysis_body)

    if prediction.model_used or prediction.timestamp:
        st.caption(
            " · ".join(
                part for part in [prediction.model_used, relative_time(prediction.timestamp)] if part
            )
        )


def render_prediction_card(
    fixture: Fixture,
    on_generate: Optional[Callable[[object], None]] = None,
    is_generating: bool = False,
    error: Optional[str] = None,
    on_load_history: Optional[Callable[[object], list[PredictionHistory]]] = None,
    key: str = "card",
) -> None:
    """Card for an upcoming fixture with its prediction and generate controls.

    Args:
        fixture: Upcoming or live fixture
        on_generate: Called with the fixture id when Generate/Regenerate/Retry is clicked
        is_generating: Whether a generation request is in flight for this fixture
        error: Last generation error for this fixture
        on_load_history: Returns prediction history for the fixture
        key: Widget key namespace (cards appear on several pages)
    """
    view = build_fixture_view(fixture)

    with st.container(border=True):
        _header(view)

        if view.prediction is not None:
            st.markdown(confidence_badge(view.confidence))
            render_prediction_details(view, key=key)
        else:
            st.caption("No prediction yet")

        if error:
            st.error(error)

        if on_generate is not None:
            label = "Regenerate" if view.prediction is not None else "Generate Prediction"
            if error:
                label = "Retry"
            if is_generating:
                st.button("Generating…", key=f"{key}-gen-{fixture.id}", disabled=True)
            elif st.button(label, key=f"{key}-gen-{fixture.id}"):
                on_generate(fixture.id)

        if on_load_history is not None and view.prediction is not None:
            if st.toggle("History", key=f"{key}-hist-{fixture.id}"):
                history = on_load_history(fixture.id)
                if history:
                    st.dataframe(history_frame(history), hide_index=True, use_container_width=True)
                else:
                    st.caption("No previous predictions")


def render_result_card(fixture: Fixture, key: str = "result") -> None:
    """Completed fixture with prediction accuracy checks."""
    view = build_fixture_view(fixture)

    with st.container(border=True):
        _header(view)

        accuracy = view.accuracy
        if accuracy is None:
            st.caption("No prediction was made")
            return

        predicted = html.escape(accuracy.predicted_result or "?")
        st.markdown(
            f"Predicted {result_badge_html(accuracy.predicted_result)} · {confidence_badge(view.confidence)}",
            unsafe_allow_html=True,
        )
        st.markdown(" · ".join([
            accuracy_badge(accuracy.result_correct, f"Result ({predicted})"),
            accuracy_badge(accuracy.score_correct, f"Score ({accuracy.predicted_score or '-'})"),
            accuracy_badge(accuracy.over_under_correct, f"O/U ({accuracy.predicted_over_under or '-'})"),
            accuracy_badge(accuracy.btts_correct, f"BTTS ({accuracy.predicted_btts or '-'})"),
        ]))

        if st.toggle("Details", key=f"{key}-details-{fixture.id}"):
            render_prediction_details(view, key=key)
