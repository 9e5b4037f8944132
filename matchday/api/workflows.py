"""Trigger the prediction and analysis workflows directly by webhook."""
import logging
from typing import Optional

import httpx

from matchday.config.settings import settings
from matchday.models.entities import Fixture
from matchday.models.webhooks import (
    AnalysisWebhookPayload,
    AnalysisWebhookResponse,
    GenerateResult,
    MemoryContext,
    PredictionWebhookPayload,
    PredictionWebhookResponse,
)

logger = logging.getLogger(__name__)


def build_prediction_payload(
    fixture: Fixture,
    model: Optional[str] = None,
    custom_prompt: Optional[str] = None,
    memory_context: Optional[MemoryContext] = None,
) -> PredictionWebhookPayload:
    return PredictionWebhookPayload(
        fixture_id=fixture.id,
        home_team=fixture.home_team.name if fixture.home_team else None,
        home_team_id=fixture.home_team_id,
        away_team=fixture.away_team.name if fixture.away_team else None,
        away_team_id=fixture.away_team_id,
        match_date=fixture.match_date.isoformat() if fixture.match_date else None,
        venue=fixture.venue.name if fixture.venue else None,
        round=fixture.round,
        model=model or settings.default_model,
        custom_prompt=custom_prompt,
        memory_context=memory_context or MemoryContext(),
    )


def build_analysis_payload(fixture: Fixture, model: Optional[str] = None) -> AnalysisWebhookPayload:
    """Payload for a completed fixture; the score must be known."""
    if fixture.score is None:
        raise ValueError(f"Fixture {fixture.id} has no final score")

    prediction = fixture.latest_prediction
    return AnalysisWebhookPayload(
        fixture_id=fixture.id,
        home_team=fixture.home_team.name if fixture.home_team else None,
        home_team_id=fixture.home_team_id,
        away_team=fixture.away_team.name if fixture.away_team else None,
        away_team_id=fixture.away_team_id,
        actual_score=fixture.score,
        match_date=fixture.match_date.isoformat() if fixture.match_date else None,
        prediction=prediction.model_dump(mode="json") if prediction else None,
        statistics=[s.model_dump(mode="json") for s in fixture.statistics],
        events=[e.model_dump(mode="json") for e in fixture.events],
        odds=[o.model_dump(mode="json") for o in fixture.odds],
        model=model or settings.default_analysis_model,
    )


class WorkflowClient:
    """Post payloads to the workflow webhooks and classify the outcome."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        workflow = settings.workflow
        if not workflow.is_configured():
            logger.warning("Prediction webhook not configured - workflow triggers will fail")

        self.prediction_url = workflow.prediction_webhook_url
        self.analysis_url = workflow.analysis_webhook_url

        headers = {"Content-Type": "application/json"}
        secret = workflow.webhook_secret.get_secret_value()
        if secret:
            headers["X-Webhook-Secret"] = secret

        self.client = httpx.AsyncClient(
            timeout=workflow.timeout_seconds,
            headers=headers,
            transport=transport,
        )

    async def _post(self, url: str, payload: dict, label: str) -> tuple[Optional[object], Optional[GenerateResult]]:
        """POST and return (decoded body, None) or (None, failure result)."""
        fixture_id = payload.get("fixture_id")
        try:
            response = await self.client.post(url, json=payload)
        except httpx.TimeoutException:
            logger.error(f"{label} workflow timed out for fixture {fixture_id}")
            return None, GenerateResult(
                success=False,
                error="timeout",
                message=f"{label} generation timed out after 5 minutes. Please try again.",
                fixture_id=fixture_id,
            )
        except httpx.HTTPError as e:
            logger.error(f"{label} workflow unreachable: {e}")
            return None, GenerateResult(
                success=False,
                error="network_error",
                message=str(e) or f"Failed to connect to {label.lower()} workflow",
                fixture_id=fixture_id,
            )

        if response.is_error:
            logger.error(f"{label} workflow error {response.status_code}: {response.text[:200]}")
            return None, GenerateResult(
                success=False,
                error="workflow_failed",
                message=f"{label} workflow failed ({response.status_code})",
                fixture_id=fixture_id,
            )

        try:
            return response.json(), None
        except ValueError:
            logger.error(f"{label} workflow returned non-JSON body")
            return None, GenerateResult(
                success=False,
                error="invalid_response",
                message=f"{label} workflow returned incomplete data",
                fixture_id=fixture_id,
            )

    async def trigger_prediction(self, payload: PredictionWebhookPayload) -> GenerateResult:
        body, failure = await self._post(
            self.prediction_url, payload.model_dump(mode="json"), "Prediction"
        )
        if failure:
            return failure

        parsed = PredictionWebhookResponse.from_raw(body)
        if parsed is None:
            logger.error(f"Prediction workflow response missing prediction field: {body!r}")
            return GenerateResult(
                success=False,
                error="invalid_response",
                message="Prediction workflow returned incomplete data",
                fixture_id=payload.fixture_id,
            )

        logger.info(f"Prediction generated for fixture {payload.fixture_id} using {payload.model}")
        return GenerateResult(
            success=True,
            message="Prediction request sent to workflow. Refresh to see results.",
            fixture_id=payload.fixture_id,
            model_used=payload.model,
            prediction=parsed.model_dump(),
        )

    async def trigger_analysis(self, payload: AnalysisWebhookPayload) -> GenerateResult:
        body, failure = await self._post(
            self.analysis_url, payload.model_dump(mode="json"), "Analysis"
        )
        if failure:
            return failure

        parsed = AnalysisWebhookResponse.from_raw(body)
        if parsed is None:
            return GenerateResult(
                success=False,
                error="invalid_response",
                message="Analysis workflow returned incomplete data",
                fixture_id=payload.fixture_id,
            )

        logger.info(f"Analysis generated for fixture {payload.fixture_id} using {payload.model}")
        return GenerateResult(
            success=True,
            message="Analysis generated",
            fixture_id=payload.fixture_id,
            model_used=payload.model,
            analysis=parsed.model_dump(),
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
