"""Contracts exchanged with the prediction and analysis workflows."""
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Shown in the Predictions page schema viewer and by `matchday schema`
EXPECTED_PREDICTION_SCHEMA = {
    "prediction": '"1" | "X" | "2"',
    "confidence_pct": "0-100 (integer)",
    "probabilities": {
        "home_win_pct": "0-100 (integer)",
        "draw_pct": "0-100 (integer)",
        "away_win_pct": "0-100 (integer)",
    },
    "over_under_2_5": '"Over" | "Under"',
    "btts": '"Yes" | "No"',
    "value_bet": 'string | null (e.g., "Home Win @ 1.85")',
    "key_factors": "string[] (array of key factors)",
    "risk_factors": "string[] (array of risk factors)",
    "analysis": "string (detailed analysis paragraph)",
}

EXPECTED_ANALYSIS_SCHEMA = {
    "predicted_result": '"1" | "X" | "2" | "1X" | "X2" | "12"',
    "actual_result": '"1" | "X" | "2"',
    "prediction_correct": "boolean",
    "predicted_score": 'string (e.g., "2-1")',
    "actual_score": "string",
    "score_correct": "boolean",
    "predicted_over_under": '"Over" | "Under"',
    "actual_over_under": '"Over" | "Under"',
    "over_under_correct": "boolean",
    "predicted_btts": '"Yes" | "No"',
    "actual_btts": '"Yes" | "No"',
    "btts_correct": "boolean",
    "accuracy_score": "0-100 (number)",
    "factor_accuracy": "object (per-factor accuracy notes)",
    "key_insights": "string[]",
    "learning_points": "string[]",
    "surprises": "string[]",
    "post_match_analysis": "string (narrative analysis)",
}


class GenerateResult(BaseModel):
    """Outcome of a prediction or analysis generation request.

    Error codes: ``workflow_failed``, ``invalid_response``, ``timeout``,
    ``network_error`` (workflow side) or whatever the backend reports.
    """

    model_config = ConfigDict(extra="allow", protected_namespaces=())

    success: bool = False
    message: Optional[str] = None
    error: Optional[str] = None
    fixture_id: Optional[Union[int, str]] = None
    model_used: Optional[str] = None


class MemoryContext(BaseModel):
    """Recent learnings about both teams fed back into the next prediction."""

    home_team_learnings: list[dict[str, Any]] = []
    away_team_learnings: list[dict[str, Any]] = []


class PredictionWebhookPayload(BaseModel):
    fixture_id: Union[int, str]
    home_team: Optional[str] = None
    home_team_id: Optional[Union[int, str]] = None
    away_team: Optional[str] = None
    away_team_id: Optional[Union[int, str]] = None
    match_date: Optional[str] = None
    venue: Optional[str] = None
    round: Optional[str] = None
    model: str
    custom_prompt: Optional[str] = None
    memory_context: MemoryContext = Field(default_factory=MemoryContext)

    @field_validator("custom_prompt", mode="before")
    @classmethod
    def _blank_prompt(cls, v):
        # An empty prompt means "use the workflow default"
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Probabilities(BaseModel):
    home_win_pct: float
    draw_pct: float
    away_win_pct: float


class PredictionWebhookResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    prediction: Literal["1", "X", "2", "1X", "X2", "12"]
    confidence_pct: Optional[float] = None
    probabilities: Optional[Probabilities] = None
    over_under_2_5: Optional[str] = None
    btts: Optional[str] = None
    value_bet: Optional[str] = None
    key_factors: list[str] = []
    risk_factors: list[str] = []
    analysis: Optional[str] = None
    factors: dict[str, Any] = {}
    score_predictions: list[dict[str, Any]] = []
    most_likely_score: Optional[str] = None
    certainty_score: Optional[float] = None

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["PredictionWebhookResponse"]:
        """Parse a workflow reply, unwrapping the one-element list it usually sends.

        Returns None when the reply carries no ``prediction``.
        """
        if isinstance(raw, list):
            raw = raw[0] if raw else None
        if not isinstance(raw, dict) or not raw.get("prediction"):
            return None
        return cls.model_validate(raw)


class AnalysisWebhookPayload(BaseModel):
    fixture_id: Union[int, str]
    home_team: Optional[str] = None
    home_team_id: Optional[Union[int, str]] = None
    away_team: Optional[str] = None
    away_team_id: Optional[Union[int, str]] = None
    actual_score: str
    match_date: Optional[str] = None
    prediction: Optional[dict[str, Any]] = None
    statistics: list[dict[str, Any]] = []
    events: list[dict[str, Any]] = []
    odds: list[dict[str, Any]] = []
    model: str


class AnalysisWebhookResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

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
    key_insights: list[str] = []
    learning_points: list[str] = []
    surprises: list[str] = []
    post_match_analysis: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["AnalysisWebhookResponse"]:
        if isinstance(raw, list):
            raw = raw[0] if raw else None
        if not isinstance(raw, dict):
            return None
        return cls.model_validate(raw)
