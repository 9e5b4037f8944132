"""APScheduler service for automatic predictions, analyses and live polling."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx

from matchday.api.client import BackendClient
from matchday.api.errors import BackendError
from matchday.config.settings import settings
from matchday.models.entities import Fixture
from matchday.services.live import LivePoller

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Window:
    """Minutes relative to kickoff, inclusive on both ends."""
    start: int
    end: int


# Prediction 20-30 min before kickoff; analysis ~4h15m after kickoff
PREDICTION_WINDOW = Window(start=20, end=30)
ANALYSIS_WINDOW = Window(start=245, end=265)


def _minutes_between(earlier: datetime, later: datetime) -> float:
    if earlier.tzinfo is None:
        earlier = earlier.replace(tzinfo=timezone.utc)
    if later.tzinfo is None:
        later = later.replace(tzinfo=timezone.utc)
    return (later - earlier).total_seconds() / 60


def in_prediction_window(fixture: Fixture, now: datetime) -> bool:
    """Not started, kicking off 20-30 minutes from now, no prediction yet."""
    if fixture.status != "NS" or fixture.match_date is None or fixture.has_prediction:
        return False
    minutes_ahead = _minutes_between(now, fixture.match_date)
    return PREDICTION_WINDOW.start <= minutes_ahead <= PREDICTION_WINDOW.end


def in_analysis_window(fixture: Fixture, now: datetime) -> bool:
    """Finished, kicked off 245-265 minutes ago, predicted but not analysed."""
    if fixture.status != "FT" or fixture.match_date is None:
        return False
    if not fixture.has_prediction or fixture.analysis is not None:
        return False
    minutes_ago = _minutes_between(fixture.match_date, now)
    return ANALYSIS_WINDOW.start <= minutes_ago <= ANALYSIS_WINDOW.end


class AutomationService:
    """Manages scheduled prediction/analysis triggers and the live poll."""

    def __init__(self, client: Optional[BackendClient] = None):
        """Initialize automation service."""
        self._scheduler = None
        self._is_running = False
        self._client = client
        self._poller: Optional[LivePoller] = None

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._is_running

    @property
    def client(self) -> BackendClient:
        if self._client is None:
            self._client = BackendClient()
        return self._client

    @property
    def poller(self) -> LivePoller:
        if self._poller is None:
            self._poller = LivePoller(
                self.client,
                league_id=settings.league_id,
                on_finished=self._on_matches_finished,
            )
        return self._poller

    def _get_scheduler(self):
        """Lazy initialization of scheduler."""
        if self._scheduler is None:
            from apscheduler.schedulers.asyncio import AsyncIOScheduler

            self._scheduler = AsyncIOScheduler(timezone="UTC")
        return self._scheduler

    def start(self):
        """Start the scheduler with all jobs."""
        from apscheduler.triggers.interval import IntervalTrigger

        scheduler = self._get_scheduler()

        scheduler.add_job(
            self.check_windows,
            IntervalTrigger(minutes=settings.automation_interval_minutes),
            id="automation_windows",
            name="Prediction & Analysis Windows",
            replace_existing=True,
            max_instances=1,
        )

        scheduler.add_job(
            self.poll_live,
            IntervalTrigger(seconds=settings.live_poll_seconds),
            id="live_poll",
            name="Live Fixtures Poll",
            replace_existing=True,
            max_instances=1,
        )

        scheduler.start()
        self._is_running = True
        logger.info("Automation started with %d jobs", len(scheduler.get_jobs()))

    def stop(self):
        """Stop the scheduler."""
        if self._scheduler and self._is_running:
            self._scheduler.shutdown(wait=False)
            self._is_running = False
            logger.info("Automation stopped")

    async def close(self):
        if self._client is not None:
            await self._client.close()

    async def check_windows(self, now: Optional[datetime] = None) -> dict:
        """Trigger predictions and analyses for fixtures inside their windows.

        Returns:
            Dict with the fixture ids triggered for "predictions" and "analyses"
        """
        now = now or datetime.now(timezone.utc)
        triggered = {"predictions": [], "analyses": []}

        try:
            upcoming = await self.client.get_upcoming_fixtures(settings.upcoming_limit)
        except Exception as e:
            logger.error(f"Failed to load upcoming fixtures: {e}")
            upcoming = []

        for fixture in upcoming:
            if not in_prediction_window(fixture, now):
                continue
            if await self._trigger_prediction(fixture):
                triggered["predictions"].append(fixture.id)

        try:
            recent = await self.client.get_recent_results(rounds=1, league_id=settings.league_id)
        except Exception as e:
            logger.error(f"Failed to load recent results: {e}")
            recent = []

        for fixture in recent:
            if not in_analysis_window(fixture, now):
                continue
            if await self._trigger_analysis(fixture):
                triggered["analyses"].append(fixture.id)

        if triggered["predictions"] or triggered["analyses"]:
            logger.info(
                f"Automation triggered {len(triggered['predictions'])} prediction(s), "
                f"{len(triggered['analyses'])} analysis(es)"
            )
        return triggered

    async def _trigger_prediction(self, fixture: Fixture) -> bool:
        logger.info(f"Auto-predicting {fixture.home_name} vs {fixture.away_name}")
        try:
            result = await self.client.generate_prediction(fixture.id, settings.default_model)
        except BackendError as e:
            logger.error(f"Prediction trigger failed for {fixture.id}: {e.message}")
            return False
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Prediction trigger failed for {fixture.id}: {e!r}")
            return False
        if not result.success:
            logger.error(f"Prediction trigger failed for {fixture.id}: {result.message}")
        return result.success

    async def _trigger_analysis(self, fixture: Fixture) -> bool:
        try:
            # The results list may not join analyses; confirm before spending a workflow run
            existing = await self.client.get_match_analysis(fixture.id)
            if existing is not None:
                return False

            logger.info(f"Auto-analysing {fixture.home_name} vs {fixture.away_name}")
            result = await self.client.generate_analysis(
                fixture.id, model=settings.default_analysis_model
            )
        except BackendError as e:
            # 409 means another trigger already produced it
            logger.error(f"Analysis trigger failed for {fixture.id}: {e.message}")
            return False
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Analysis trigger failed for {fixture.id}: {e!r}")
            return False
        if not result.success:
            logger.error(f"Analysis trigger failed for {fixture.id}: {result.message}")
        return result.success

    async def poll_live(self):
        """Live job - detect finished matches."""
        try:
            await self.poller.poll()
        except Exception as e:
            logger.error(f"Live poll failed: {e}")

    async def _on_matches_finished(self, finished_ids: set) -> list:
        """Queue a post-match analysis for each finished, predicted fixture.

        The job runs when the analysis window opens, or at once if it already has.

        Returns:
            Ids of the fixtures an analysis job was scheduled for
        """
        results = await self.client.get_recent_results(rounds=1, league_id=settings.league_id)
        finished = {str(fid) for fid in finished_ids}

        scheduled = []
        for fixture in results:
            if str(fixture.id) not in finished or fixture.match_date is None:
                continue
            if not fixture.has_prediction or fixture.analysis is not None:
                continue
            self._schedule_analysis(fixture)
            scheduled.append(fixture.id)

        if scheduled:
            logger.info(f"Scheduled analysis for {len(scheduled)} finished match(es)")
        return scheduled

    def _schedule_analysis(self, fixture: Fixture):
        from apscheduler.triggers.date import DateTrigger

        kickoff = fixture.match_date
        if kickoff.tzinfo is None:
            kickoff = kickoff.replace(tzinfo=timezone.utc)
        run_at = max(kickoff + timedelta(minutes=ANALYSIS_WINDOW.start), datetime.now(timezone.utc))

        self._get_scheduler().add_job(
            self._trigger_analysis,
            DateTrigger(run_date=run_at),
            args=[fixture],
            id=f"analysis_{fixture.id}",
            name=f"Analysis {fixture.home_name} vs {fixture.away_name}",
            replace_existing=True,
            misfire_grace_time=None,
        )


# Singleton instance
_automation: Optional[AutomationService] = None


def get_automation() -> AutomationService:
    """Get automation service singleton."""
    global _automation
    if _automation is None:
        _automation = AutomationService()
    return _automation
