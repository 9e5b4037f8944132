"""Match detail page - one fixture with tab-gated sections."""
import asyncio
import logging

import pandas as pd
import streamlit as st

from matchday.api.errors import get_error_message
from matchday.config.settings import settings
from matchday.models.entities import Fixture, FixtureStatistics
from matchday.ui.components import (
    accuracy_badge,
    confidence_badge,
    render_injury_list,
    render_odds,
)
from matchday.ui.components.prediction_card import render_prediction_details
from matchday.ui.data import fetch, generate_prediction, get_tracker, submit
from matchday.views.fixture_view import (
    TAB_ANALYSIS,
    TAB_EVENTS,
    TAB_H2H,
    TAB_INJURIES,
    TAB_ODDS,
    TAB_OVERVIEW,
    TAB_PREDICTION,
    TAB_STATISTICS,
    FixtureView,
    build_fixture_view,
    relative_time,
    select_tab,
)

logger = logging.getLogger(__name__)

STAT_ROWS = [
    ("Possession %", "ball_possession"),
    ("Shots", "shots_total"),
    ("Shots on target", "shots_on_goal"),
    ("Shots off target", "shots_off_goal"),
    ("Corners", "corners"),
    ("Fouls", "fouls"),
    ("Yellow cards", "yellow_cards"),
    ("Red cards", "red_cards"),
    ("Saves", "goalkeeper_saves"),
    ("Passes", "passes_total"),
    ("Pass accuracy %", "passes_pct"),
    ("xG", "expected_goals"),
]

EVENT_ICONS = {"Goal": "⚽", "Card": "🟨"}


def render():
    """Render match detail page."""
    st.header("Match Detail")

    fixture_id = _pick_fixture()
    if fixture_id is None:
        return

    fixture = fetch("match detail", lambda client: client.get_fixture(fixture_id))
    if fixture is None:
        return

    injuries = fetch("match injuries", lambda client: _both_teams_injuries(client, fixture), default=[])
    analysis = None
    if fixture.is_completed:
        analysis = fetch("match analysis", lambda client: client.get_match_analysis(fixture.id))

    view = build_fixture_view(fixture, injuries=injuries, analysis=analysis)

    _render_header(view)

    requested = st.session_state.get("match_tab")
    active = select_tab(view, requested)
    # The stored tab may not exist for this fixture
    st.session_state["match_tab"] = active
    tab = st.radio(
        "Section",
        view.available_tabs,
        horizontal=True,
        key="match_tab",
        label_visibility="collapsed",
    )

    st.divider()

    if tab == TAB_OVERVIEW:
        _render_overview(view)
    elif tab == TAB_PREDICTION:
        _render_prediction(view)
    elif tab == TAB_ODDS:
        render_odds(view)
    elif tab == TAB_H2H:
        _render_h2h(view)
    elif tab == TAB_INJURIES:
        _render_injuries(view)
    elif tab == TAB_STATISTICS:
        _render_statistics(view)
    elif tab == TAB_EVENTS:
        _render_events(view)
    elif tab == TAB_ANALYSIS:
        _render_analysis(view)


def _pick_fixture():
    """Fixture chosen from another page, or from a selector of nearby matches."""
    upcoming = fetch(
        "upcoming fixtures",
        lambda client: client.get_upcoming_fixtures(settings.upcoming_limit),
        default=[],
    )
    recent = fetch(
        "recent results",
        lambda client: client.get_recent_results(settings.recent_rounds, settings.league_id),
        default=[],
    )
    options = {f.id: f for f in upcoming + recent}

    current = st.session_state.get("fixture_id")
    if current is not None and current not in options:
        # Opened from a link to a fixture outside the lists
        st.button("Choose another match", on_click=st.session_state.pop, args=("fixture_id", None))
        return current

    if not options:
        st.info("No fixtures to show. Open a match from the Matches page.")
        return None

    ids = list(options)
    if current is None:
        st.session_state["fixture_id"] = ids[0]
    return st.selectbox(
        "Select Match",
        ids,
        format_func=lambda fid: _label(options[fid]),
        key="fixture_id",
    )


def _label(fixture: Fixture) -> str:
    when = fixture.match_date.strftime("%a %d/%m %H:%M") if fixture.match_date else "TBD"
    if fixture.is_completed:
        return f"{fixture.home_name} {fixture.score} {fixture.away_name} - {when}"
    return f"{fixture.home_name} vs {fixture.away_name} - {when}"


async def _both_teams_injuries(client, fixture: Fixture):
    team_ids = [tid for tid in (fixture.home_team_id, fixture.away_team_id) if tid is not None]
    if not team_ids:
        return []
    results = await asyncio.gather(*(client.get_injuries(tid) for tid in team_ids))
    return [injury for team_injuries in results for injury in team_injuries]


def _render_header(view: FixtureView):
    fixture = view.fixture
    col1, col2, col3 = st.columns([3, 2, 3])
    with col1:
        if fixture.home_team and fixture.home_team.logo:
            st.image(fixture.home_team.logo, width=64)
        st.subheader(fixture.home_name)
    with col2:
        if fixture.is_upcoming:
            st.markdown("### vs")
        else:
            st.markdown(f"### {fixture.goals_home or 0} - {fixture.goals_away or 0}")
        if fixture.is_live and fixture.elapsed:
            st.caption(f"🔴 {fixture.elapsed}'")
        else:
            st.caption(fixture.status)
    with col3:
        if fixture.away_team and fixture.away_team.logo:
            st.image(fixture.away_team.logo, width=64)
        st.subheader(fixture.away_name)


def _render_overview(view: FixtureView):
    fixture = view.fixture

    col1, col2, col3 = st.columns(3)
    with col1:
        kickoff = fixture.match_date.strftime("%A %d %B %Y, %H:%M") if fixture.match_date else "TBD"
        st.metric("Kick-off", kickoff)
    with col2:
        st.metric("Round", fixture.round or "-")
    with col3:
        venue = fixture.venue.name if fixture.venue and fixture.venue.name else "-"
        st.metric("Venue", venue)

    if fixture.weather:
        weather = fixture.weather
        parts = []
        if weather.get("temperature") is not None:
            parts.append(f"{weather['temperature']}°C")
        if weather.get("description"):
            parts.append(str(weather["description"]))
        if weather.get("wind_speed") is not None:
            parts.append(f"wind {weather['wind_speed']} km/h")
        if parts:
            st.caption("🌤️ " + " · ".join(parts))

    if view.prediction is not None:
        st.markdown(
            f"**AI call:** {view.prediction.prediction_result or '-'} · {confidence_badge(view.confidence)}"
        )
        if view.most_likely_score:
            st.caption(f"Most likely score {view.most_likely_score}")

    if view.accuracy is not None:
        st.markdown(f"**Accuracy:** {view.accuracy.correct_count}/4 checks correct")

    if fixture.is_upcoming:
        tracker = get_tracker()
        error = tracker.error_for(fixture.id)
        if error:
            st.error(error)
        label = "Regenerate Prediction" if view.prediction is not None else "Generate Prediction"
        if st.button(label, key=f"detail-gen-{fixture.id}", disabled=tracker.is_generating(fixture.id)):
            # Failures are kept on the tracker and shown after the rerun
            generate_prediction(fixture.id)
            st.rerun()

    if fixture.is_completed and view.prediction is not None and view.analysis is None:
        st.caption("No post-match analysis yet")
        if st.button("Generate analysis", key=f"analysis-gen-{fixture.id}"):
            _request_analysis(fixture, force=False)


def _render_prediction(view: FixtureView):
    st.markdown(confidence_badge(view.confidence))
    render_prediction_details(view, key="detail")


def _render_h2h(view: FixtureView):
    h2h = view.h2h
    fixture = view.fixture

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric(f"{fixture.home_name} wins", h2h.team1_wins)
    with col2:
        st.metric("Draws", h2h.draws)
    with col3:
        st.metric(f"{fixture.away_name} wins", h2h.team2_wins)

    st.caption(
        f"{h2h.matches_played} meetings · goals {h2h.team1_goals} - {h2h.team2_goals}"
    )

    if h2h.last_fixtures:
        st.markdown("##### Recent meetings")
        df = pd.DataFrame(h2h.last_fixtures)
        st.dataframe(df, hide_index=True, use_container_width=True)


def _render_injuries(view: FixtureView):
    fixture = view.fixture
    col1, col2 = st.columns(2)
    for column, team_id, name in (
        (col1, fixture.home_team_id, fixture.home_name),
        (col2, fixture.away_team_id, fixture.away_name),
    ):
        with column:
            st.markdown(f"##### {name}")
            render_injury_list([i for i in view.injuries if i.team_id == team_id])


def _stat_value(stats: FixtureStatistics, attr: str):
    value = getattr(stats, attr)
    return "-" if value is None else value


def _render_statistics(view: FixtureView):
    fixture = view.fixture
    by_team = {s.team_id: s for s in view.statistics}
    home = by_team.get(fixture.home_team_id)
    away = by_team.get(fixture.away_team_id)
    if home is None and away is None and len(view.statistics) >= 2:
        home, away = view.statistics[0], view.statistics[1]

    rows = []
    for label, attr in STAT_ROWS:
        rows.append({
            fixture.home_name: _stat_value(home, attr) if home else "-",
            "Stat": label,
            fixture.away_name: _stat_value(away, attr) if away else "-",
        })
    df = pd.DataFrame(rows, columns=[fixture.home_name, "Stat", fixture.away_name])
    st.dataframe(df, hide_index=True, use_container_width=True)


def _render_events(view: FixtureView):
    fixture = view.fixture
    for event in sorted(view.events, key=lambda e: (e.elapsed or 0, e.extra_time or 0)):
        minute = f"{event.elapsed}'" if event.elapsed is not None else ""
        if event.extra_time:
            minute = f"{event.elapsed}+{event.extra_time}'"
        icon = EVENT_ICONS.get(event.type, "•")
        if event.type == "Card" and event.detail and "red" in event.detail.lower():
            icon = "🟥"
        side = fixture.home_name if event.team_id == fixture.home_team_id else fixture.away_name
        detail = f" ({event.detail})" if event.detail else ""
        assist = f", assist {event.assist_name}" if event.assist_name else ""
        st.markdown(f"`{minute:>6}` {icon} **{event.player_name or 'Unknown'}**{assist}{detail} · {side}")


def _render_analysis(view: FixtureView):
    analysis = view.analysis
    fixture = view.fixture

    col1, col2, col3, col4 = st.columns(4)
    checks = [
        (col1, "Result", analysis.prediction_correct, analysis.predicted_result, analysis.actual_result),
        (col2, "Score", analysis.score_correct, analysis.predicted_score, analysis.actual_score),
        (col3, "O/U 2.5", analysis.over_under_correct, analysis.predicted_over_under, analysis.actual_over_under),
        (col4, "BTTS", analysis.btts_correct, analysis.predicted_btts, analysis.actual_btts),
    ]
    for column, label, correct, predicted, actual in checks:
        with column:
            st.markdown(accuracy_badge(bool(correct), label))
            st.caption(f"{predicted or '-'} → {actual or '-'}")

    if analysis.accuracy_score is not None:
        st.metric("Accuracy score", f"{analysis.accuracy_score:.0f}%")

    if analysis.post_match_analysis:
        st.markdown(analysis.post_match_analysis)

    for title, items in (
        ("Key insights", analysis.key_insights),
        ("Learning points", analysis.learning_points),
        ("Surprises", analysis.surprises),
    ):
        if items:
            st.markdown(f"##### {title}")
            for item in items:
                st.markdown(f"- {item}")

    if analysis.factor_accuracy:
        with st.expander("Factor accuracy"):
            st.json(analysis.factor_accuracy)

    caption = " · ".join(p for p in [analysis.model_version, relative_time(analysis.created_at)] if p)
    if caption:
        st.caption(caption)

    if st.button("Regenerate analysis", key=f"analysis-regen-{fixture.id}"):
        _request_analysis(fixture, force=True)


def _request_analysis(fixture: Fixture, force: bool):
    with st.spinner("Running post-match analysis…"):
        try:
            result = submit(lambda client: client.generate_analysis(fixture.id, force_regenerate=force))
        except Exception as e:
            logger.error(f"Analysis for fixture {fixture.id} failed: {e}")
            st.error(f"Analysis failed: {get_error_message(e)}")
            return
    if result.success:
        st.rerun()
    st.error(result.message or result.error or "Analysis failed")
