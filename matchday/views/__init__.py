"""View models derived from backend records."""
from .factors import detect_factor_system, factor_breakdown
from .filters import (
    Page,
    available_rounds,
    filter_by_rounds,
    find_team_standing,
    latest_rounds,
    paginate,
    sort_injuries,
    sort_standings,
    split_by_prediction,
    venue_table,
)
from .fixture_view import FixtureView, build_fixture_view, relative_time, select_tab

__all__ = [
    "FixtureView",
    "Page",
    "available_rounds",
    "build_fixture_view",
    "detect_factor_system",
    "factor_breakdown",
    "filter_by_rounds",
    "find_team_standing",
    "latest_rounds",
    "paginate",
    "relative_time",
    "select_tab",
    "sort_injuries",
    "sort_standings",
    "split_by_prediction",
    "venue_table",
]
