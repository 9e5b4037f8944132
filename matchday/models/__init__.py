"""Backend records and workflow contracts."""
from .entities import (
    COMPLETED_STATUSES,
    LIVE_STATUSES,
    UPCOMING_STATUSES,
    Fixture,
    FixtureEvent,
    FixtureStatistics,
    HeadToHead,
    Injury,
    MatchAnalysis,
    OddsMarket,
    OddsOutcome,
    Prediction,
    PredictionHistory,
    ScorePrediction,
    Standing,
    Team,
    Venue,
    VenueRecord,
)

__all__ = [
    "COMPLETED_STATUSES",
    "LIVE_STATUSES",
    "UPCOMING_STATUSES",
    "Fixture",
    "FixtureEvent",
    "FixtureStatistics",
    "HeadToHead",
    "Injury",
    "MatchAnalysis",
    "OddsMarket",
    "OddsOutcome",
    "Prediction",
    "PredictionHistory",
    "ScorePrediction",
    "Standing",
    "Team",
    "Venue",
    "VenueRecord",
]
