"""Merge a fixture and its related records into what the match views render."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from matchday.models.entities import (
    Fixture,
    FixtureEvent,
    FixtureStatistics,
    HeadToHead,
    Injury,
    MatchAnalysis,
    OddsMarket,
    OddsOutcome,
    Prediction,
    ScorePrediction,
)
from matchday.views.factors import FactorRow, factor_breakdown

logger = logging.getLogger(__name__)

TAB_OVERVIEW = "Overview"
TAB_PREDICTION = "Prediction"
TAB_ODDS = "Odds"
TAB_H2H = "Head to Head"
TAB_INJURIES = "Injuries"
TAB_STATISTICS = "Statistics"
TAB_EVENTS = "Events"
TAB_ANALYSIS = "Analysis"

TAB_ORDER = [
    TAB_OVERVIEW,
    TAB_PREDICTION,
    TAB_ODDS,
    TAB_H2H,
    TAB_INJURIES,
    TAB_STATISTICS,
    TAB_EVENTS,
    TAB_ANALYSIS,
]

KEY_EVENT_TYPES = ("Goal", "Card")

RESULT_COLORS = {
    "1": "#28a745",  # home
    "X": "#6c757d",  # draw
    "2": "#dc3545",  # away
}


@dataclass
class BestOdds:
    """Highest price for one 1X2 outcome across bookmakers."""
    price: float
    bookmaker: str


@dataclass
class AccuracyComparison:
    """Prediction vs final score for a completed fixture."""
    actual_result: Optional[str]
    predicted_result: Optional[str]
    result_correct: bool
    actual_score: Optional[str]
    predicted_score: Optional[str]
    score_correct: bool
    actual_btts: bool
    predicted_btts: Optional[str]
    btts_correct: bool
    actual_over_under: str
    predicted_over_under: Optional[str]
    over_under_correct: bool

    @property
    def correct_count(self) -> int:
        return sum([
            self.result_correct,
            self.score_correct,
            self.btts_correct,
            self.over_under_correct,
        ])


@dataclass
class FixtureView:
    fixture: Fixture
    prediction: Optional[Prediction] = None
    odds: list[OddsMarket] = field(default_factory=list)
    h2h: Optional[HeadToHead] = None
    injuries: Optional[list[Injury]] = None
    statistics: list[FixtureStatistics] = field(default_factory=list)
    events: list[FixtureEvent] = field(default_factory=list)
    analysis: Optional[MatchAnalysis] = None

    available_tabs: list[str] = field(default_factory=list)
    score_predictions: list[ScorePrediction] = field(default_factory=list)
    most_likely_score: Optional[str] = None
    best_odds: dict[str, BestOdds] = field(default_factory=dict)
    totals: list[OddsMarket] = field(default_factory=list)
    spreads: list[OddsMarket] = field(default_factory=list)
    odds_updated_at: Optional[datetime] = None
    accuracy: Optional[AccuracyComparison] = None
    factors: list[FactorRow] = field(default_factory=list)

    @property
    def confidence(self) -> Optional[float]:
        if self.prediction is None:
            return None
        value = self.prediction.confidence
        if value is None:
            value = self.prediction.overall_index
        return value

    @property
    def confidence_tier(self) -> Optional[str]:
        value = self.confidence
        return confidence_tier(value) if value is not None else None


def confidence_tier(confidence: float) -> str:
    if confidence >= 70:
        return "high"
    if confidence >= 50:
        return "medium"
    return "low"


def result_color(result: Optional[str]) -> str:
    return RESULT_COLORS.get(result or "", "#adb5bd")


def relative_time(ts: Optional[datetime], now: Optional[datetime] = None) -> str:
    """'Just now' under an hour, then whole hours, then whole days."""
    if ts is None:
        return ""
    now = now or datetime.now(timezone.utc)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    hours = int((now - ts).total_seconds() // 3600)
    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def sort_score_predictions(prediction: Optional[Prediction]) -> list[ScorePrediction]:
    if prediction is None:
        return []
    return sorted(
        prediction.score_predictions,
        key=lambda sp: sp.probability or 0,
        reverse=True,
    )


def pick_most_likely_score(prediction: Optional[Prediction]) -> Optional[str]:
    """Top scoreline that is not the catch-all "other" bucket."""
    for sp in sort_score_predictions(prediction):
        if sp.score and sp.score.lower() != "other":
            return sp.score
    return prediction.most_likely_score if prediction else None


def _first_word(name: str) -> str:
    parts = name.split(" ")
    return parts[0] if parts else ""


def _matches_team(outcome: str, team: str) -> bool:
    # Bookmakers shorten names ("Man City"), so compare leading words both ways
    return _first_word(team) in outcome or _first_word(outcome) in team


def find_outcome(
    values: list[OddsOutcome], side: str, home_name: str, away_name: str
) -> Optional[OddsOutcome]:
    """Locate the home/draw/away outcome in an h2h market's values."""
    home = home_name.lower()
    away = away_name.lower()

    if side == "draw":
        return next((v for v in values if v.name.lower() == "draw"), None)

    team, other = (home, away) if side == "home" else (away, home)
    teams = [v for v in values if v.name.lower() != "draw"]
    for v in teams:
        if _matches_team(v.name.lower(), team):
            return v
    for v in teams:
        if _first_word(other) not in v.name.lower():
            return v
    return None


def compute_best_odds(markets: list[OddsMarket], home_name: str, away_name: str) -> dict[str, BestOdds]:
    """Best price per outcome ("home", "draw", "away") across h2h markets."""
    best = {}
    for side in ("home", "draw", "away"):
        top = None
        for market in markets:
            if market.bet_type != "h2h":
                continue
            outcome = find_outcome(market.values, side, home_name, away_name)
            if outcome and (top is None or outcome.price > top.price):
                top = BestOdds(price=outcome.price, bookmaker=market.bookmaker)
        if top is not None:
            best[side] = top
    return best


def actual_result(goals_home: Optional[int], goals_away: Optional[int]) -> Optional[str]:
    if goals_home is None or goals_away is None:
        return None
    if goals_home > goals_away:
        return "1"
    if goals_home < goals_away:
        return "2"
    return "X"


def is_prediction_correct(actual: Optional[str], predicted: Optional[str]) -> bool:
    """Compound calls (1X, X2, 12) count when either side happened."""
    if not actual or not predicted:
        return False
    return actual in predicted


def compare_accuracy(fixture: Fixture, prediction: Prediction) -> AccuracyComparison:
    gh, ga = fixture.goals_home, fixture.goals_away
    actual = actual_result(gh, ga)

    actual_score = fixture.score
    predicted_score = prediction.most_likely_score

    actual_btts = bool(gh and ga)
    predicted_btts = prediction.btts_call
    btts_correct = actual_btts == (predicted_btts == "Yes")

    total_goals = (gh or 0) + (ga or 0)
    actual_ou = "Over" if total_goals > 2.5 else "Under"
    predicted_ou = prediction.over_under

    return AccuracyComparison(
        actual_result=actual,
        predicted_result=prediction.prediction_result,
        result_correct=is_prediction_correct(actual, prediction.prediction_result),
        actual_score=actual_score,
        predicted_score=predicted_score,
        score_correct=predicted_score is not None and predicted_score == actual_score,
        actual_btts=actual_btts,
        predicted_btts=predicted_btts,
        btts_correct=btts_correct,
        actual_over_under=actual_ou,
        predicted_over_under=predicted_ou,
        over_under_correct=predicted_ou == actual_ou,
    )


def compute_tabs(view: FixtureView) -> list[str]:
    fixture = view.fixture
    gates = {
        TAB_OVERVIEW: True,
        TAB_PREDICTION: view.prediction is not None,
        TAB_ODDS: len(view.odds) > 0,
        TAB_H2H: view.h2h is not None and view.h2h.matches_played > 0,
        TAB_INJURIES: bool(view.injuries),
        TAB_STATISTICS: fixture.is_completed and len(view.statistics) > 0,
        TAB_EVENTS: len(view.events) > 0,
        TAB_ANALYSIS: fixture.is_completed and view.analysis is not None,
    }
    return [tab for tab in TAB_ORDER if gates[tab]]


def build_fixture_view(
    fixture: Fixture,
    injuries: Optional[list[Injury]] = None,
    analysis: Optional[MatchAnalysis] = None,
) -> FixtureView:
    """Build the match view model.

    Args:
        fixture: Fixture as returned by ``GET /api/fixtures/:id``
        injuries: Injuries for both teams, when they were fetched
        analysis: Separately fetched analysis; the fixture's own is used otherwise

    Returns:
        FixtureView with tab gating and derived odds/accuracy data
    """
    prediction = fixture.latest_prediction
    view = FixtureView(
        fixture=fixture,
        prediction=prediction,
        odds=list(fixture.odds),
        h2h=fixture.h2h,
        injuries=injuries,
        statistics=list(fixture.statistics),
        events=[e for e in fixture.events if e.type in KEY_EVENT_TYPES],
        analysis=analysis or fixture.analysis,
    )

    view.score_predictions = sort_score_predictions(prediction)
    view.most_likely_score = pick_most_likely_score(prediction)
    view.best_odds = compute_best_odds(view.odds, fixture.home_name, fixture.away_name)
    view.totals = [m for m in view.odds if m.bet_type == "totals"]
    view.spreads = [m for m in view.odds if m.bet_type == "spreads"]

    stamps = [m.updated_at for m in view.odds if m.updated_at]
    view.odds_updated_at = max(stamps) if stamps else None

    if prediction is not None:
        view.factors = factor_breakdown(prediction.factors)
        if fixture.is_completed:
            view.accuracy = compare_accuracy(fixture, prediction)

    view.available_tabs = compute_tabs(view)
    return view


def select_tab(view: FixtureView, requested: Optional[str]) -> str:
    """Requested tab when it is available, otherwise Overview."""
    if requested in view.available_tabs:
        return requested
    return TAB_OVERVIEW
