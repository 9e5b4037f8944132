"""Predictions page - AI predictions for upcoming fixtures."""
import pandas as pd
import streamlit as st

from matchday.config.settings import AI_MODELS, settings
from matchday.models.entities import Fixture
from matchday.models.webhooks import EXPECTED_ANALYSIS_SCHEMA, EXPECTED_PREDICTION_SCHEMA
from matchday.ui.components import render_prediction_card
from matchday.ui.data import fetch, generate_all, generate_prediction, get_tracker, open_fixture
from matchday.views.filters import split_by_prediction
from matchday.views.fixture_view import build_fixture_view, relative_time


def render():
    """Render predictions page."""
    st.header("AI Predictions")

    _render_settings()

    fixtures = fetch(
        "upcoming fixtures",
        lambda client: client.get_upcoming_fixtures(settings.upcoming_limit),
        default=[],
    )
    if not fixtures:
        st.info("No upcoming fixtures found")
        return

    predicted, unpredicted = split_by_prediction(fixtures)
    tracker = get_tracker()

    col1, col2, col3 = st.columns([2, 2, 1])
    with col1:
        st.metric("Predicted", f"{len(predicted)} / {len(fixtures)}")
    with col2:
        mode = st.radio("View", ["Cards", "Table"], horizontal=True, key="predictions-view")
    with col3:
        if unpredicted:
            if st.button(
                f"Generate All ({len(unpredicted)})",
                type="primary",
                disabled=tracker.generating_all,
                use_container_width=True,
            ):
                _generate_all(fixtures)

    _render_summary()

    if mode == "Cards":
        _render_cards(fixtures)
    else:
        _render_table(fixtures)

    st.divider()
    _render_schema()


def _render_settings():
    with st.expander("⚙️ Prediction settings"):
        model_ids = [m["id"] for m in AI_MODELS]
        if st.session_state.get("model") not in model_ids:
            st.session_state["model"] = settings.default_model if settings.default_model in model_ids else model_ids[0]
        names = {m["id"]: f"{m['name']} ({m['provider']})" for m in AI_MODELS}
        st.selectbox(
            "Model",
            model_ids,
            format_func=lambda mid: names[mid],
            key="model",
            help="Model used by the prediction workflow",
        )
        st.text_area(
            "Custom prompt",
            key="custom_prompt",
            placeholder="Optional extra instructions for the prediction workflow",
            help="Leave empty to use the default prompt",
        )


def _generate(fixture_id):
    # Errors stay on the tracker and render on the card after the rerun
    generate_prediction(fixture_id)
    st.rerun()


def _generate_all(fixtures: list[Fixture]):
    summary = generate_all(fixtures)
    st.session_state["generate_all_summary"] = summary
    st.rerun()


def _render_summary():
    summary = st.session_state.pop("generate_all_summary", None)
    if summary is None:
        return
    if summary.failed:
        st.warning(
            f"Generated {len(summary.succeeded)} of {summary.requested} predictions; "
            f"{len(summary.failed)} failed"
        )
    else:
        st.success(f"Generated {len(summary.succeeded)} predictions")


def _load_history(fixture_id):
    return fetch(
        f"prediction history {fixture_id}",
        lambda client: client.get_prediction_history(fixture_id),
        default=[],
    )


def _render_cards(fixtures: list[Fixture]):
    tracker = get_tracker()
    cols = st.columns(2)
    for idx, fixture in enumerate(fixtures):
        with cols[idx % 2]:
            render_prediction_card(
                fixture,
                on_generate=_generate,
                is_generating=tracker.is_generating(fixture.id),
                error=tracker.error_for(fixture.id),
                on_load_history=_load_history,
                key="pred",
            )
            st.button("Open match", key=f"pred-open-{fixture.id}", on_click=open_fixture, args=(fixture.id,))


def predictions_frame(fixtures: list[Fixture]) -> pd.DataFrame:
    rows = []
    for fixture in fixtures:
        view = build_fixture_view(fixture)
        prediction = view.prediction
        rows.append({
            "Kick-off": fixture.match_date.strftime("%d %b %H:%M") if fixture.match_date else "TBD",
            "Match": f"{fixture.home_name} vs {fixture.away_name}",
            "Call": prediction.prediction_result if prediction else None,
            "Home %": prediction.home_pct if prediction else None,
            "Draw %": prediction.draw if prediction else None,
            "Away %": prediction.away_pct if prediction else None,
            "Score": view.most_likely_score,
            "O/U 2.5": prediction.over_under if prediction else None,
            "BTTS": prediction.btts_call if prediction else None,
            "Confidence": view.confidence,
            "Model": prediction.model_used if prediction else None,
            "Updated": relative_time(prediction.timestamp) if prediction else "",
        })
    return pd.DataFrame(rows)


def _render_table(fixtures: list[Fixture]):
    st.dataframe(
        predictions_frame(fixtures),
        hide_index=True,
        use_container_width=True,
        column_config={
            "Confidence": st.column_config.ProgressColumn(
                "Confidence", min_value=0, max_value=100, format="%.0f%%"
            ),
        },
    )

    tracker = get_tracker()
    failed = [f for f in fixtures if tracker.error_for(f.id)]
    for fixture in failed:
        col1, col2 = st.columns([4, 1])
        with col1:
            st.error(f"{fixture.home_name} vs {fixture.away_name}: {tracker.error_for(fixture.id)}")
        with col2:
            if st.button("Retry", key=f"table-retry-{fixture.id}"):
                _generate(fixture.id)


def _render_schema():
    with st.expander("📐 Workflow response schema"):
        st.caption("Shape the prediction and analysis workflows are expected to return")
        col1, col2 = st.columns(2)
        with col1:
            st.markdown("##### Prediction")
            st.json(EXPECTED_PREDICTION_SCHEMA)
        with col2:
            st.markdown("##### Analysis")
            st.json(EXPECTED_ANALYSIS_SCHEMA)
