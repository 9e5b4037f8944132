"""Dashboard pages module."""
from . import dashboard_page
from . import matches
from . import match_detail
from . import predictions
from . import standings
from . import teams

__all__ = [
    "dashboard_page",
    "matches",
    "match_detail",
    "predictions",
    "standings",
    "teams",
]
