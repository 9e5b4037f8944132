"""Dashboard page - live matches, upcoming predictions, recent results, table."""
import pandas as pd
import streamlit as st

from matchday.config.settings import settings
from matchday.services.live import LivePoller
from matchday.ui.components import render_prediction_card, render_result_card
from matchday.ui.data import fetch, generate_prediction, get_runner, get_tracker, open_fixture
from matchday.views.filters import sort_standings
from matchday.views.fixture_view import build_fixture_view

UPCOMING_ON_DASHBOARD = 6


def render():
    """Render dashboard page."""
    st.header("Dashboard")
    st.caption("Live matches, AI predictions and how they turned out")

    _render_live()

    st.divider()

    col1, col2 = st.columns([2, 1])
    with col1:
        _render_upcoming()
    with col2:
        _render_mini_table()

    st.divider()
    _render_recent_results()


def _poller() -> LivePoller:
    if "live_poller" not in st.session_state:
        st.session_state["live_poller"] = LivePoller(get_runner().client, league_id=settings.league_id)
    return st.session_state["live_poller"]


@st.fragment(run_every=settings.live_poll_seconds)
def _render_live():
    """Live now; re-polled every ``live_poll_seconds``."""
    poller = _poller()
    update = fetch("live matches", lambda client: poller.poll())
    if update is None:
        return

    if update.has_finished:
        # Matches just finished; rerun the whole page so recent results reload
        st.rerun(scope="app")

    st.markdown(f"#### 🔴 Live Now ({len(update.fixtures)})")
    if not update.fixtures:
        st.caption("No live matches")
        return

    cols = st.columns(min(len(update.fixtures), 3))
    for idx, fixture in enumerate(update.fixtures):
        with cols[idx % len(cols)]:
            with st.container(border=True):
                st.markdown(
                    f"**{fixture.home_name}** {fixture.goals_home or 0} - "
                    f"{fixture.goals_away or 0} **{fixture.away_name}**"
                )
                minute = f"{fixture.elapsed}'" if fixture.elapsed else fixture.status
                st.caption(minute)


def _render_upcoming():
    st.markdown("#### Upcoming Predictions")
    fixtures = fetch(
        "upcoming fixtures",
        lambda client: client.get_upcoming_fixtures(settings.upcoming_limit),
        default=[],
    )
    if not fixtures:
        st.info("No upcoming fixtures found")
        return

    tracker = get_tracker()
    for fixture in fixtures[:UPCOMING_ON_DASHBOARD]:
        render_prediction_card(
            fixture,
            on_generate=_generate,
            is_generating=tracker.is_generating(fixture.id),
            error=tracker.error_for(fixture.id),
            key="dash",
        )
        st.button("Open match", key=f"dash-open-{fixture.id}", on_click=open_fixture, args=(fixture.id,))


def _generate(fixture_id):
    generate_prediction(fixture_id)
    st.rerun()


def _render_mini_table():
    st.markdown("#### League Table")
    standings = fetch("standings", lambda client: client.get_standings(), default=[])
    if not standings:
        st.caption("No standings available")
        return

    top = sort_standings(standings)[:5]
    df = pd.DataFrame([
        {"#": s.rank, "Team": s.name, "P": s.played, "GD": s.goal_diff, "Pts": s.points}
        for s in top
    ])
    st.dataframe(df, hide_index=True, use_container_width=True)


def _render_recent_results():
    st.markdown(f"#### Recent Results (last {settings.recent_rounds} rounds)")
    results = fetch(
        "recent results",
        lambda client: client.get_recent_results(settings.recent_rounds, settings.league_id),
        default=[],
    )
    if not results:
        st.info("No recent results")
        return

    predicted = [f for f in results if f.has_prediction]
    if predicted:
        accuracies = [build_fixture_view(f).accuracy for f in predicted]
        correct = sum(1 for a in accuracies if a is not None and a.result_correct)
        st.metric("Result accuracy", f"{correct}/{len(predicted)}", f"{correct / len(predicted) * 100:.0f}%")

    cols = st.columns(2)
    for idx, fixture in enumerate(results):
        with cols[idx % 2]:
            render_result_card(fixture, key="dash-result")
