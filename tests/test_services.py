"""Tests for generation tracking, live polling and automation."""
import asyncio
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from matchday.api.errors import BackendError
from matchday.models.entities import Fixture, MatchAnalysis
from matchday.models.webhooks import GenerateResult
from matchday.services.automation import (
    AutomationService,
    get_automation,
    in_analysis_window,
    in_prediction_window,
)
from matchday.services.generation import GenerationTracker
from matchday.services.live import LivePoller

NOW = datetime(2026, 4, 11, 14, 0, tzinfo=timezone.utc)


def _fixture(fixture_id=1, **overrides) -> Fixture:
    data = {
        "id": fixture_id,
        "status": "NS",
        "match_date": NOW + timedelta(minutes=25),
        "home_team": {"id": 1, "name": "Fulham"},
        "away_team": {"id": 2, "name": "Brentford"},
    }
    data.update(overrides)
    return Fixture.model_validate(data)


class TestGenerationTracker:
    """Tests for GenerationTracker."""

    @pytest.mark.asyncio
    async def test_success_releases_id(self):
        """Test successful generation clears in-flight state."""
        seen_during = {}

        async def generate(fixture_id):
            seen_during["generating"] = tracker.is_generating(fixture_id)
            return GenerateResult(success=True)

        tracker = GenerationTracker(generate)
        assert await tracker.generate(7) is True

        assert seen_during["generating"] is True
        assert tracker.is_generating(7) is False
        assert tracker.error_for(7) is None

    @pytest.mark.asyncio
    async def test_failure_result_stored(self):
        """Test unsuccessful result message kept for that fixture only."""
        tracker = GenerationTracker(
            AsyncMock(return_value=GenerateResult(success=False, message="Workflow busy"))
        )

        assert await tracker.generate(7) is False
        assert tracker.error_for(7) == "Workflow busy"
        assert tracker.error_for(8) is None
        assert tracker.is_generating(7) is False

    @pytest.mark.asyncio
    async def test_failure_default_message(self):
        """Test fallback message when the result carries none."""
        tracker = GenerationTracker(AsyncMock(return_value=GenerateResult(success=False)))

        await tracker.generate(3)
        assert tracker.error_for(3) == "Failed to generate prediction"

    @pytest.mark.asyncio
    async def test_exception_stored_and_released(self):
        """Test raised errors are stored and the id is still released."""
        tracker = GenerationTracker(
            AsyncMock(side_effect=BackendError(500, "workflow_failed", "Prediction workflow failed (502)"))
        )

        assert await tracker.generate(4) is False
        assert tracker.error_for(4) == "Prediction workflow failed (502)"
        assert tracker.is_generating(4) is False

    @pytest.mark.asyncio
    async def test_retry_clears_previous_error(self):
        """Test starting again clears the fixture's old error."""
        generate = AsyncMock(side_effect=[
            GenerateResult(success=False, message="timeout"),
            GenerateResult(success=True),
        ])
        tracker = GenerationTracker(generate)

        await tracker.generate(5)
        assert tracker.error_for(5) == "timeout"

        await tracker.generate(5)
        assert tracker.error_for(5) is None

    @pytest.mark.asyncio
    async def test_generate_all_sequential(self):
        """Test Generate All runs one request at a time for unpredicted fixtures."""
        active = {"now": 0, "max": 0}
        order = []

        async def generate(fixture_id):
            active["now"] += 1
            active["max"] = max(active["max"], active["now"])
            await asyncio.sleep(0)
            order.append(fixture_id)
            active["now"] -= 1
            if fixture_id == 3:
                return GenerateResult(success=False, message="No odds yet")
            return GenerateResult(success=True)

        fixtures = [
            _fixture(1),
            _fixture(2, prediction={"prediction_result": "1"}),
            _fixture(3),
            _fixture(4),
        ]
        tracker = GenerationTracker(generate)
        summary = await tracker.generate_all(fixtures)

        assert order == [1, 3, 4]
        assert active["max"] == 1
        assert summary.requested == 3
        assert summary.succeeded == [1, 4]
        assert summary.failed == {3: "No odds yet"}
        assert tracker.generating_all is False

    @pytest.mark.asyncio
    async def test_generate_all_nothing_pending(self):
        """Test Generate All with every fixture predicted."""
        generate = AsyncMock()
        tracker = GenerationTracker(generate)

        summary = await tracker.generate_all([_fixture(1, prediction={"prediction_result": "2"})])

        assert summary.requested == 0
        generate.assert_not_called()


class TestLivePoller:
    """Tests for LivePoller."""

    def test_diff_detects_finished(self):
        """Test ids missing from the new poll are finished."""
        poller = LivePoller(MagicMock())

        first = poller.diff([_fixture(1, status="2H"), _fixture(2, status="HT")])
        assert first.finished_ids == set()

        second = poller.diff([_fixture(2, status="2H"), _fixture(3, status="1H")])
        assert second.finished_ids == {1}
        assert second.has_finished
        assert poller.live_ids == {2, 3}

    @pytest.mark.asyncio
    async def test_poll_calls_on_finished(self):
        """Test on_finished receives finished ids."""
        client = MagicMock()
        client.get_live_fixtures = AsyncMock(side_effect=[
            [_fixture(1, status="2H")],
            [],
        ])
        on_finished = AsyncMock()
        poller = LivePoller(client, league_id="39", on_finished=on_finished)

        await poller.poll()
        on_finished.assert_not_called()

        update = await poller.poll()
        on_finished.assert_awaited_once_with({1})
        assert update.fixtures == []
        client.get_live_fixtures.assert_awaited_with("39")


class TestWindows:
    """Tests for automation windows."""

    def test_prediction_window(self):
        """Test 20-30 minutes before kickoff."""
        assert in_prediction_window(_fixture(match_date=NOW + timedelta(minutes=20)), NOW)
        assert in_prediction_window(_fixture(match_date=NOW + timedelta(minutes=30)), NOW)
        assert not in_prediction_window(_fixture(match_date=NOW + timedelta(minutes=31)), NOW)
        assert not in_prediction_window(_fixture(match_date=NOW + timedelta(minutes=10)), NOW)

    def test_prediction_window_skips_predicted(self):
        """Test fixtures with a prediction are skipped."""
        fixture = _fixture(prediction={"prediction_result": "1"})
        assert not in_prediction_window(fixture, NOW)

    def test_prediction_window_naive_kickoff(self):
        """Test naive kickoff times are read as UTC."""
        fixture = _fixture(match_date=datetime(2026, 4, 11, 14, 25))
        assert in_prediction_window(fixture, NOW)

    def test_analysis_window(self):
        """Test 245-265 minutes after kickoff, predicted and not analysed."""
        base = dict(status="FT", goals_home=1, goals_away=1, prediction={"prediction_result": "X"})

        assert in_analysis_window(_fixture(match_date=NOW - timedelta(minutes=250), **base), NOW)
        assert not in_analysis_window(_fixture(match_date=NOW - timedelta(minutes=200), **base), NOW)
        assert not in_analysis_window(
            _fixture(match_date=NOW - timedelta(minutes=250), match_analysis={"prediction_correct": True}, **base),
            NOW,
        )
        assert not in_analysis_window(
            _fixture(match_date=NOW - timedelta(minutes=250), status="FT"), NOW
        )


class TestAutomationService:
    """Tests for AutomationService."""

    def test_initialization(self):
        """Test service starts idle."""
        service = AutomationService(client=MagicMock())
        assert service._scheduler is None
        assert service.is_running is False

    def test_singleton(self):
        """Test get_automation returns singleton."""
        import matchday.services.automation as automation_module
        automation_module._automation = None

        assert get_automation() is get_automation()

    def test_start_adds_jobs(self):
        """Test start registers window and live jobs."""
        with patch("apscheduler.schedulers.asyncio.AsyncIOScheduler") as mock_scheduler_class:
            mock_scheduler = MagicMock()
            mock_scheduler.get_jobs.return_value = ["windows", "live"]
            mock_scheduler_class.return_value = mock_scheduler

            service = AutomationService(client=MagicMock())
            service.start()

            assert service.is_running is True
            mock_scheduler.start.assert_called_once()
            assert mock_scheduler.add_job.call_count == 2
            job_ids = {c.kwargs["id"] for c in mock_scheduler.add_job.call_args_list}
            assert job_ids == {"automation_windows", "live_poll"}

    def test_stop(self):
        """Test stop shuts the scheduler down."""
        with patch("apscheduler.schedulers.asyncio.AsyncIOScheduler") as mock_scheduler_class:
            mock_scheduler = MagicMock()
            mock_scheduler_class.return_value = mock_scheduler

            service = AutomationService(client=MagicMock())
            service.start()
            service.stop()

            assert service.is_running is False
            mock_scheduler.shutdown.assert_called_once_with(wait=False)

    def test_stop_when_not_running(self):
        """Test stop when not running is safe."""
        service = AutomationService(client=MagicMock())
        service.stop()

        assert service.is_running is False

    @pytest.mark.asyncio
    async def test_check_windows_triggers(self):
        """Test predictions and analyses fire for fixtures in their windows."""
        client = MagicMock()
        client.get_upcoming_fixtures = AsyncMock(return_value=[
            _fixture(1, match_date=NOW + timedelta(minutes=25)),
            _fixture(2, match_date=NOW + timedelta(hours=5)),
        ])
        client.get_recent_results = AsyncMock(return_value=[
            _fixture(
                10,
                status="FT",
                goals_home=2,
                goals_away=0,
                match_date=NOW - timedelta(minutes=255),
                prediction={"prediction_result": "1"},
            ),
        ])
        client.generate_prediction = AsyncMock(return_value=GenerateResult(success=True))
        client.get_match_analysis = AsyncMock(return_value=None)
        client.generate_analysis = AsyncMock(return_value=GenerateResult(success=True))

        service = AutomationService(client=client)
        triggered = await service.check_windows(now=NOW)

        assert triggered == {"predictions": [1], "analyses": [10]}
        client.generate_prediction.assert_awaited_once()
        client.generate_analysis.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_check_windows_skips_existing_analysis(self):
        """Test no analysis is requested when one already exists."""
        client = MagicMock()
        client.get_upcoming_fixtures = AsyncMock(return_value=[])
        client.get_recent_results = AsyncMock(return_value=[
            _fixture(
                10,
                status="FT",
                goals_home=0,
                goals_away=1,
                match_date=NOW - timedelta(minutes=250),
                prediction={"prediction_result": "2"},
            ),
        ])
        client.get_match_analysis = AsyncMock(return_value=MatchAnalysis(prediction_correct=True))
        client.generate_analysis = AsyncMock()

        service = AutomationService(client=client)
        triggered = await service.check_windows(now=NOW)

        assert triggered["analyses"] == []
        client.generate_analysis.assert_not_called()

    @pytest.mark.asyncio
    async def test_check_windows_handles_errors(self):
        """Test backend failures do not abort the cycle."""
        client = MagicMock()
        client.get_upcoming_fixtures = AsyncMock(return_value=[_fixture(1)])
        client.generate_prediction = AsyncMock(side_effect=BackendError(503, message="Backend down"))
        client.get_recent_results = AsyncMock(side_effect=Exception("Network error"))

        service = AutomationService(client=client)
        triggered = await service.check_windows(now=NOW)

        assert triggered == {"predictions": [], "analyses": []}

    @pytest.mark.asyncio
    async def test_poll_live_handles_errors(self):
        """Test live poll failures are logged, not raised."""
        client = MagicMock()
        client.get_live_fixtures = AsyncMock(side_effect=Exception("timeout"))

        service = AutomationService(client=client)
        await service.poll_live()  # Should not raise

    @pytest.mark.asyncio
    async def test_check_windows_survives_network_errors(self):
        """Test a transport failure on one fixture does not end the cycle."""
        client = MagicMock()
        client.get_upcoming_fixtures = AsyncMock(return_value=[
            _fixture(1, match_date=NOW + timedelta(minutes=25)),
            _fixture(2, match_date=NOW + timedelta(minutes=25)),
        ])
        client.generate_prediction = AsyncMock(side_effect=[
            httpx.ReadTimeout("timed out"),
            GenerateResult(success=True),
        ])
        client.get_recent_results = AsyncMock(return_value=[
            _fixture(
                10,
                status="FT",
                goals_home=1,
                goals_away=0,
                match_date=NOW - timedelta(minutes=250),
                prediction={"prediction_result": "1"},
            ),
        ])
        client.get_match_analysis = AsyncMock(return_value=None)
        client.generate_analysis = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

        service = AutomationService(client=client)
        triggered = await service.check_windows(now=NOW)

        assert triggered == {"predictions": [2], "analyses": []}
        assert client.generate_prediction.await_count == 2
        client.get_recent_results.assert_awaited_once()
        client.generate_analysis.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_finished_matches_schedule_analysis(self):
        """Test finished, predicted fixtures get a one-off analysis job."""
        client = MagicMock()
        client.get_recent_results = AsyncMock(return_value=[
            _fixture(
                1,
                status="FT",
                goals_home=2,
                goals_away=2,
                match_date=NOW - timedelta(minutes=110),
                prediction={"prediction_result": "X"},
            ),
            _fixture(2, status="FT", goals_home=0, goals_away=0, match_date=NOW - timedelta(minutes=110)),
            _fixture(
                3,
                status="FT",
                goals_home=1,
                goals_away=0,
                match_date=NOW - timedelta(minutes=110),
                prediction={"prediction_result": "1"},
            ),
        ])

        with patch("apscheduler.schedulers.asyncio.AsyncIOScheduler") as mock_scheduler_class:
            mock_scheduler = MagicMock()
            mock_scheduler_class.return_value = mock_scheduler

            service = AutomationService(client=client)
            scheduled = await service._on_matches_finished({1, 2})

        assert scheduled == [1]
        mock_scheduler.add_job.assert_called_once()
        call = mock_scheduler.add_job.call_args
        assert call.kwargs["id"] == "analysis_1"
        assert call.kwargs["args"][0].id == 1
        assert call.args[0] == service._trigger_analysis

    @pytest.mark.asyncio
    async def test_live_poll_feeds_finished_matches(self):
        """Test a match leaving the live set reaches the analysis scheduler."""
        client = MagicMock()
        client.get_live_fixtures = AsyncMock(side_effect=[[_fixture(5, status="2H")], []])
        client.get_recent_results = AsyncMock(return_value=[])

        service = AutomationService(client=client)
        await service.poll_live()
        await service.poll_live()

        client.get_recent_results.assert_awaited_once()
