"""Matches page - upcoming fixtures and results with round filter and pagination."""
from typing import Optional

import streamlit as st

from matchday.config.settings import settings
from matchday.models.entities import Fixture
from matchday.ui.components import render_result_card
from matchday.ui.data import fetch, open_fixture
from matchday.views.filters import Page, available_rounds, filter_by_rounds, latest_rounds, paginate


def render():
    """Render matches page."""
    st.header("Matches")

    tab1, tab2 = st.tabs(["Upcoming", "Results"])

    with tab1:
        _render_upcoming()

    with tab2:
        _render_results()


def _round_filter(fixtures: list[Fixture], key: str, default: Optional[list[int]] = None) -> list[Fixture]:
    rounds = available_rounds(fixtures)
    if not rounds:
        return fixtures
    state_key = f"{key}-rounds"
    if default and state_key not in st.session_state:
        st.session_state[state_key] = default
    elif state_key in st.session_state:
        # Selection must stay within the rounds on offer
        st.session_state[state_key] = [r for r in st.session_state[state_key] if r in rounds]
    selected = st.multiselect(
        "Rounds",
        rounds,
        key=state_key,
        format_func=lambda r: f"Round {r}",
        placeholder="All rounds",
    )
    return filter_by_rounds(fixtures, selected)


def _pager(items: list, key: str) -> Page:
    page_key = f"{key}-page"
    current = st.session_state.get(page_key, 1)
    page = paginate(items, current, settings.page_size)
    # Filters can shrink the list under the stored page number
    st.session_state[page_key] = page.page
    return page


def _render_pager_controls(page: Page, key: str) -> None:
    page_key = f"{key}-page"

    def _move(delta: int):
        st.session_state[page_key] = page.page + delta

    col1, col2, col3 = st.columns([1, 2, 1])
    with col1:
        st.button("‹ Previous", key=f"{key}-prev", disabled=not page.has_previous, on_click=_move, args=(-1,))
    with col2:
        st.caption(
            f"Page {page.page} of {page.total_pages} · "
            f"showing {page.start_index}-{page.end_index} of {page.total_items}"
        )
    with col3:
        st.button("Next ›", key=f"{key}-next", disabled=not page.has_next, on_click=_move, args=(1,))


def _fixture_row(fixture: Fixture, key: str) -> None:
    kickoff = fixture.match_date.strftime("%a %d %b %H:%M") if fixture.match_date else "TBD"
    col1, col2, col3, col4 = st.columns([2, 4, 1, 1])
    with col1:
        st.caption(kickoff)
    with col2:
        score = f" {fixture.score} " if fixture.score and not fixture.is_upcoming else " vs "
        st.markdown(f"**{fixture.home_name}**{score}**{fixture.away_name}**")
    with col3:
        st.caption("🤖" if fixture.has_prediction else "")
    with col4:
        st.button("Open", key=f"{key}-open-{fixture.id}", on_click=open_fixture, args=(fixture.id,))


def _render_upcoming():
    fixtures = fetch(
        "upcoming fixtures",
        lambda client: client.get_upcoming_fixtures(settings.upcoming_limit),
        default=[],
    )
    if not fixtures:
        st.info("No upcoming fixtures found")
        return

    filtered = _round_filter(fixtures, "upcoming")
    page = _pager(filtered, "upcoming")
    for fixture in page.items:
        _fixture_row(fixture, "upcoming")
    _render_pager_controls(page, "upcoming")


def _render_results():
    scope = st.radio(
        "Show",
        ["Last rounds", "All"],
        horizontal=True,
        key="results-scope",
    )
    rounds = "all" if scope == "All" else settings.recent_rounds

    results = fetch(
        "results",
        lambda client: client.get_recent_results(rounds, settings.league_id),
        default=[],
    )
    if not results:
        st.info("No results found")
        return

    # Full-season results open on the most recent rounds
    default = latest_rounds(results, settings.recent_rounds) if rounds == "all" else None
    filtered = _round_filter(results, "results", default)
    page = _pager(filtered, "results")

    view = st.radio("View", ["Cards", "List"], horizontal=True, key="results-view")
    if view == "Cards":
        cols = st.columns(2)
        for idx, fixture in enumerate(page.items):
            with cols[idx % 2]:
                render_result_card(fixture, key="matches-result")
    else:
        for fixture in page.items:
            _fixture_row(fixture, "results")

    _render_pager_controls(page, "results")
