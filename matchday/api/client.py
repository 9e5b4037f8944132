"""Async client for the dashboard backend API."""
import logging
from typing import Any, Optional, Union

import httpx

from matchday.api.errors import BackendError
from matchday.config.settings import settings
from matchday.models.entities import (
    Fixture,
    Injury,
    MatchAnalysis,
    PredictionHistory,
    Standing,
    Team,
)
from matchday.models.webhooks import GenerateResult

logger = logging.getLogger(__name__)

FixtureId = Union[int, str]

AUTH_COOKIE = "football_auth"


class BackendClient:
    """Read fixtures, predictions and standings; forward generation requests.

    Usage:
        async with BackendClient() as client:
            fixtures = await client.get_upcoming_fixtures(limit=10)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize client.

        Args:
            base_url: Backend root URL. Defaults to settings.backend.base_url.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        backend = settings.backend
        self.base_url = (base_url or backend.base_url).rstrip("/")

        cookies = {}
        auth = backend.auth_cookie.get_secret_value()
        if auth:
            cookies[AUTH_COOKIE] = auth

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or backend.timeout_seconds,
            cookies=cookies,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            BackendError: on any non-2xx reply
        """
        params = kwargs.pop("params", None)
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}

        response = await self.client.request(method, path, **kwargs)

        if response.is_error:
            error, message = None, None
            try:
                body = response.json()
                if isinstance(body, dict):
                    error = body.get("error")
                    message = body.get("message")
            except ValueError:
                pass
            logger.warning(f"{method} {path} failed ({response.status_code}): {message or error}")
            raise BackendError(response.status_code, error, message)

        return response.json()

    async def _get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self._request("GET", path, params=params)

    # ------------------------------------------------------------------
    # Fixtures
    # ------------------------------------------------------------------

    async def get_fixture(self, fixture_id: FixtureId) -> Fixture:
        """Fixture with h2h, odds, statistics, events, analysis and weather."""
        data = await self._get(f"/api/fixtures/{fixture_id}")
        return Fixture.model_validate(data)

    async def get_upcoming_fixtures(self, limit: Optional[int] = None) -> list[Fixture]:
        data = await self._get("/api/fixtures/upcoming", {"limit": limit})
        return [Fixture.model_validate(f) for f in data or []]

    async def get_recent_results(
        self,
        rounds: Union[int, str, None] = None,
        league_id: Optional[str] = None,
    ) -> list[Fixture]:
        """Completed fixtures from the last ``rounds`` rounds (or ``"all"``)."""
        if rounds is None:
            rounds = settings.recent_rounds
        data = await self._get(
            "/api/fixtures/recent-results",
            {"rounds": rounds, "league_id": league_id},
        )
        return [Fixture.model_validate(f) for f in data or []]

    async def get_live_fixtures(self, league_id: Optional[str] = None) -> list[Fixture]:
        data = await self._get("/api/fixtures/live", {"league_id": league_id})
        return [Fixture.model_validate(f) for f in data or []]

    # ------------------------------------------------------------------
    # Teams, injuries, standings
    # ------------------------------------------------------------------

    async def get_injuries(
        self,
        team_id: Optional[FixtureId] = None,
        league_id: Optional[str] = None,
    ) -> list[Injury]:
        data = await self._get("/api/injuries", {"team_id": team_id, "league_id": league_id})
        return [Injury.model_validate(i) for i in data or []]

    async def get_teams(self, league_id: Optional[str] = None) -> list[Team]:
        data = await self._get("/api/teams", {"league_id": league_id})
        return [Team.model_validate(t) for t in data or []]

    async def get_team(self, team_id: FixtureId) -> Team:
        data = await self._get(f"/api/teams/{team_id}")
        return Team.model_validate(data)

    async def get_standings(self) -> list[Standing]:
        data = await self._get("/api/standings")
        return [Standing.model_validate(s) for s in data or []]

    # ------------------------------------------------------------------
    # Predictions and analysis
    # ------------------------------------------------------------------

    async def get_prediction_history(self, fixture_id: FixtureId) -> list[PredictionHistory]:
        data = await self._get("/api/predictions/history", {"fixture_id": fixture_id})
        return [PredictionHistory.model_validate(h) for h in data.get("history") or []]

    async def get_match_analysis(self, fixture_id: FixtureId) -> Optional[MatchAnalysis]:
        """Post-match analysis, or None when none has been generated yet."""
        try:
            data = await self._get(f"/api/match-analysis/{fixture_id}")
        except BackendError as e:
            if e.status == 404:
                return None
            raise
        return MatchAnalysis.model_validate(data)

    async def generate_prediction(
        self,
        fixture_id: FixtureId,
        model: Optional[str] = None,
        custom_prompt: Optional[str] = None,
    ) -> GenerateResult:
        """Ask the backend to run the prediction workflow for one fixture.

        The workflow can take minutes, so the long workflow timeout applies.
        """
        body = {
            "fixture_id": fixture_id,
            "model": model or settings.default_model,
            "custom_prompt": custom_prompt or None,
        }
        logger.info(f"Requesting prediction for fixture {fixture_id} ({body['model']})")
        data = await self._request(
            "POST",
            "/api/predictions/generate",
            json=body,
            timeout=settings.workflow.timeout_seconds,
        )
        return GenerateResult.model_validate(data)

    async def generate_analysis(
        self,
        fixture_id: FixtureId,
        force_regenerate: bool = False,
        model: Optional[str] = None,
    ) -> GenerateResult:
        body = {
            "fixture_id": fixture_id,
            "force_regenerate": force_regenerate,
            "model": model or settings.default_analysis_model,
        }
        logger.info(f"Requesting analysis for fixture {fixture_id} ({body['model']})")
        data = await self._request(
            "POST",
            "/api/match-analysis/generate",
            json=body,
            timeout=settings.workflow.timeout_seconds,
        )
        return GenerateResult.model_validate(data)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
