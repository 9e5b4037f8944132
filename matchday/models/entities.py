"""Typed records returned by the dashboard backend.

Every model allows extra fields: the backend owns the schema and adds
columns over time, and they must survive a round-trip through the app.
"""
import logging
import re
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)


UPCOMING_STATUSES = frozenset({"NS", "TBD", "SUSP", "PST"})
LIVE_STATUSES = frozenset({"1H", "2H", "HT", "ET", "BT", "P", "LIVE"})
COMPLETED_STATUSES = frozenset({"FT", "AET", "PEN"})

_ROUND_NUMBER = re.compile(r"(\d+)\s*$")


class Record(BaseModel):
    """Base for backend records."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, protected_namespaces=())


class Team(Record):
    id: Union[int, str]
    name: str
    code: Optional[str] = None
    logo: Optional[str] = None
    country: Optional[str] = None
    founded: Optional[int] = None
    venue_name: Optional[str] = None
    venue_city: Optional[str] = None


class Venue(Record):
    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    city: Optional[str] = None
    capacity: Optional[int] = None


class ScorePrediction(Record):
    score: str
    probability: float = 0.0


class Prediction(Record):
    """AI prediction for a fixture.

    Older rows keep percentages and market calls inside the ``factors``
    blob instead of top-level columns; the accessors below read both.
    """

    id: Optional[Union[int, str]] = None
    fixture_id: Optional[Union[int, str]] = None
    prediction_result: Optional[str] = None
    overall_index: Optional[float] = None
    confidence_pct: Optional[float] = None
    certainty_score: Optional[float] = None
    home_win_pct: Optional[float] = None
    draw_pct: Optional[float] = None
    away_win_pct: Optional[float] = None
    over_under_2_5: Optional[str] = None
    btts: Optional[str] = None
    value_bet: Optional[str] = None
    most_likely_score: Optional[str] = None
    score_predictions: list[ScorePrediction] = []
    factors: dict[str, Any] = {}
    key_factors: list[str] = []
    risk_factors: list[str] = []
    analysis: Optional[str] = None
    analysis_text: Optional[str] = None
    model_used: Optional[str] = None
    model_version: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("factors", mode="before")
    @classmethod
    def _null_factors(cls, v):
        return v or {}

    @field_validator("score_predictions", "key_factors", "risk_factors", mode="before")
    @classmethod
    def _null_lists(cls, v):
        return v or []

    def _from_factors(self, name: str) -> Any:
        value = getattr(self, name)
        if value is None:
            value = self.factors.get(name)
        return value

    @property
    def home_pct(self) -> Optional[float]:
        return self._from_factors("home_win_pct")

    @property
    def draw(self) -> Optional[float]:
        return self._from_factors("draw_pct")

    @property
    def away_pct(self) -> Optional[float]:
        return self._from_factors("away_win_pct")

    @property
    def over_under(self) -> Optional[str]:
        value = self.over_under_2_5
        if value is None:
            value = self.factors.get("over_under")
        return value

    @property
    def btts_call(self) -> Optional[str]:
        return self._from_factors("btts")

    @property
    def value_bet_call(self) -> Optional[str]:
        return self._from_factors("value_bet")

    @property
    def confidence(self) -> Optional[float]:
        """Certainty score when present, otherwise confidence_pct."""
        if self.certainty_score is not None:
            return self.certainty_score
        return self.confidence_pct

    @property
    def analysis_body(self) -> Optional[str]:
        return self.analysis_text or self.analysis

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.updated_at or self.created_at


class PredictionHistory(Record):
    id: Optional[Union[int, str]] = None
    fixture_id: Optional[Union[int, str]] = None
    prediction_result: Optional[str] = None
    overall_index: Optional[float] = None
    confidence_pct: Optional[float] = None
    certainty_score: Optional[float] = None
    home_win_pct: Optional[float] = None
    draw_pct: Optional[float] = None
    away_win_pct: Optional[float] = None
    model_used: Optional[str] = None
    created_at: Optional[datetime] = None


class OddsOutcome(Record):
    name: str
    price: float
    point: Optional[float] = None


class OddsMarket(Record):
    """One bookmaker's prices for one market (h2h, totals, spreads)."""

    fixture_id: Optional[Union[int, str]] = None
    bookmaker: str
    bet_type: str
    values: list[OddsOutcome] = []
    updated_at: Optional[datetime] = None

    @field_validator("values", mode="before")
    @classmethod
    def _null_values(cls, v):
        return v or []


class VenueRecord(Record):
    """Home or away split of a standings row."""
    played: int = 0
    win: int = 0
    draw: int = 0
    lose: int = 0
    goals: Optional[dict] = None

    @field_validator("played", "win", "draw", "lose", mode="before")
    @classmethod
    def _null_counts(cls, v):
        return v or 0

    @property
    def points(self) -> int:
        return self.win * 3 + self.draw


class Standing(Record):
    rank: int
    team_id: Optional[Union[int, str]] = None
    team: Optional[Team] = None
    team_name: Optional[str] = None
    points: int = 0
    goal_diff: int = 0
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    form: Optional[str] = None
    description: Optional[str] = None
    home_record: Optional[VenueRecord] = None
    away_record: Optional[VenueRecord] = None

    @property
    def name(self) -> str:
        if self.team is not None:
            return self.team.name
        return self.team_name or "Unknown"


class Injury(Record):
    """Injury row; reads both current and legacy column names."""

    id: Optional[Union[int, str]] = None
    player_id: Optional[Union[int, str]] = None
    player_name: Optional[str] = None
    team_id: Optional[Union[int, str]] = None
    team: Optional[Team] = None
    injury_reason: Optional[str] = None
    injury_type: Optional[str] = None
    reason: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    reported_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    expected_return: Optional[str] = None

    @property
    def reason_text(self) -> Optional[str]:
        return self.injury_reason or self.reason

    @property
    def type_text(self) -> Optional[str]:
        return self.injury_type or self.type


class HeadToHead(Record):
    team1_id: Optional[Union[int, str]] = None
    team2_id: Optional[Union[int, str]] = None
    matches_played: int = 0
    team1_wins: int = 0
    team2_wins: int = 0
    draws: int = 0
    team1_goals: int = 0
    team2_goals: int = 0
    last_fixtures: list[dict[str, Any]] = []

    @field_validator("last_fixtures", mode="before")
    @classmethod
    def _null_fixtures(cls, v):
        return v or []


class FixtureEvent(Record):
    elapsed: Optional[int] = None
    extra_time: Optional[int] = None
    team_id: Optional[Union[int, str]] = None
    player_name: Optional[str] = None
    assist_name: Optional[str] = None
    type: str
    detail: Optional[str] = None


class FixtureStatistics(Record):
    team_id: Optional[Union[int, str]] = None
    shots_total: Optional[int] = None
    shots_on_goal: Optional[int] = None
    ball_possession: Optional[float] = None
    passes_total: Optional[int] = None
    passes_accurate: Optional[int] = None
    shots_off_goal: Optional[int] = None
    corners: Optional[int] = None
    fouls: Optional[int] = None
    yellow_cards: Optional[int] = None
    red_cards: Optional[int] = None
    goalkeeper_saves: Optional[int] = None
    passes_pct: Optional[float] = None
    expected_goals: Optional[float] = None


class MatchAnalysis(Record):
    """Post-match comparison written by the analysis workflow."""

    id: Optional[Union[int, str]] = None
    fixture_id: Optional[Union[int, str]] = None
    predicted_result: Optional[str] = None
    actual_result: Optional[str] = None
    prediction_correct: Optional[bool] = None
    predicted_score: Optional[str] = None
    actual_score: Optional[str] = None
    score_correct: Optional[bool] = None
    predicted_over_under: Optional[str] = None
    actual_over_under: Optional[str] = None
    over_under_correct: Optional[bool] = None
    predicted_btts: Optional[str] = None
    actual_btts: Optional[str] = None
    btts_correct: Optional[bool] = None
    accuracy_score: Optional[float] = None
    factor_accuracy: dict[str, Any] = {}
    home_team_performance: dict[str, Any] = {}
    away_team_performance: dict[str, Any] = {}
    post_match_analysis: Optional[str] = None
    key_insights: list[str] = []
    learning_points: list[str] = []
    surprises: list[str] = []
    model_version: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator(
        "factor_accuracy", "home_team_performance", "away_team_performance", mode="before"
    )
    @classmethod
    def _null_dicts(cls, v):
        return v or {}

    @field_validator("key_insights", "learning_points", "surprises", mode="before")
    @classmethod
    def _null_lists(cls, v):
        return v or []


def _stamp(item: Any) -> float:
    ts = getattr(item, "updated_at", None) or getattr(item, "created_at", None)
    return ts.timestamp() if ts else 0.0


def _latest(items: list) -> Optional[Any]:
    if not items:
        return None
    return max(items, key=_stamp)


class Fixture(Record):
    """A scheduled or completed match and whatever the backend joined onto it."""

    id: Union[int, str]
    match_date: Optional[datetime] = None
    status: str = "NS"
    round: Optional[str] = None
    league_id: Optional[Union[int, str]] = None
    season: Optional[int] = None
    home_team_id: Optional[Union[int, str]] = None
    away_team_id: Optional[Union[int, str]] = None
    home_team: Optional[Team] = None
    away_team: Optional[Team] = None
    venue: Optional[Venue] = None
    goals_home: Optional[int] = None
    goals_away: Optional[int] = None
    elapsed: Optional[int] = None
    weather: Optional[dict[str, Any]] = None

    prediction: Optional[Union[Prediction, list[Prediction]]] = None
    match_analysis: Optional[Union[MatchAnalysis, list[MatchAnalysis]]] = None
    head_to_head: Optional[Union[HeadToHead, list[HeadToHead]]] = None
    odds: list[OddsMarket] = []
    statistics: list[FixtureStatistics] = []
    events: list[FixtureEvent] = []

    @field_validator("odds", "statistics", "events", mode="before")
    @classmethod
    def _null_lists(cls, v):
        return v or []

    @property
    def home_name(self) -> str:
        return self.home_team.name if self.home_team else "TBD"

    @property
    def away_name(self) -> str:
        return self.away_team.name if self.away_team else "TBD"

    @property
    def is_upcoming(self) -> bool:
        return self.status in UPCOMING_STATUSES

    @property
    def is_live(self) -> bool:
        return self.status in LIVE_STATUSES

    @property
    def is_completed(self) -> bool:
        return self.status in COMPLETED_STATUSES

    @property
    def round_number(self) -> Optional[int]:
        """Matchweek parsed from the round label ("Regular Season - 19" -> 19)."""
        if not self.round:
            return None
        match = _ROUND_NUMBER.search(self.round)
        return int(match.group(1)) if match else None

    @property
    def latest_prediction(self) -> Optional[Prediction]:
        if isinstance(self.prediction, list):
            return _latest(self.prediction)
        return self.prediction

    @property
    def analysis(self) -> Optional[MatchAnalysis]:
        if isinstance(self.match_analysis, list):
            return _latest(self.match_analysis)
        return self.match_analysis

    @property
    def h2h(self) -> Optional[HeadToHead]:
        if isinstance(self.head_to_head, list):
            return self.head_to_head[0] if self.head_to_head else None
        return self.head_to_head

    @property
    def has_prediction(self) -> bool:
        return self.latest_prediction is not None

    @property
    def score(self) -> Optional[str]:
        if self.goals_home is None or self.goals_away is None:
            return None
        return f"{self.goals_home}-{self.goals_away}"
