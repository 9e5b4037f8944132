"""CLI commands for Matchday Insights."""
import asyncio
import json
import logging
import sys
from pathlib import Path

import click
import httpx

from matchday.api.client import BackendClient
from matchday.api.errors import BackendError, get_error_message

logger = logging.getLogger(__name__)


def _fixture_id(value: str):
    """Backend ids are numeric, but accept any string the backend does."""
    return int(value) if value.isdigit() else value


def _run(coro):
    """Run a coroutine, turning backend and network errors into a clean CLI failure."""
    try:
        return asyncio.run(coro)
    except BackendError as e:
        raise click.ClickException(f"Backend error {e.status}: {e.message}")
    except httpx.HTTPError as e:
        logger.error(f"Network error: {e!r}")
        raise click.ClickException(f"Network error: {get_error_message(e)}")
    except ValueError as e:
        # Unparseable JSON or a record that fails validation
        logger.error(f"Invalid backend response: {e}")
        raise click.ClickException(f"Invalid backend response: {get_error_message(e)}")


@click.group()
def cli():
    """Matchday Insights CLI."""
    pass


@cli.command()
def run():
    """Run the automation service (prediction/analysis windows + live poll)."""
    from matchday.main import main

    click.echo("Starting Matchday Insights automation...")
    main()


@cli.command()
def dashboard():
    """Run Streamlit dashboard."""
    import subprocess

    app = Path(__file__).parent / "ui" / "dashboard.py"
    click.echo("Starting Streamlit dashboard...")
    subprocess.run([sys.executable, "-m", "streamlit", "run", str(app)])


@cli.command()
@click.option("--limit", default=None, type=int, help="Maximum fixtures to list")
def upcoming(limit: int):
    """List upcoming fixtures and their predictions."""
    from matchday.config import setup_logging

    setup_logging()

    async def _upcoming():
        async with BackendClient() as client:
            return await client.get_upcoming_fixtures(limit)

    fixtures = _run(_upcoming())
    if not fixtures:
        click.echo("No upcoming fixtures")
        return

    for fixture in fixtures:
        kickoff = fixture.match_date.strftime("%a %d %b %H:%M") if fixture.match_date else "TBD"
        prediction = fixture.latest_prediction
        call = f"[{prediction.prediction_result}]" if prediction else "[ - ]"
        click.echo(f"{fixture.id:>8}  {kickoff}  {fixture.home_name} vs {fixture.away_name}  {call}")


@cli.command()
@click.option("--rounds", default=None, help="Number of recent rounds, or 'all'")
def results(rounds: str):
    """List recent results with prediction accuracy."""
    from matchday.config import setup_logging
    from matchday.views.fixture_view import build_fixture_view

    setup_logging()

    if rounds is not None and rounds != "all":
        if not rounds.isdigit():
            raise click.BadParameter("must be a number or 'all'", param_hint="--rounds")
        rounds = int(rounds)

    async def _results():
        async with BackendClient() as client:
            return await client.get_recent_results(rounds)

    fixtures = _run(_results())
    if not fixtures:
        click.echo("No results")
        return

    correct = predicted = 0
    for fixture in fixtures:
        view = build_fixture_view(fixture)
        line = f"{fixture.id:>8}  {fixture.home_name} {fixture.score or '?'} {fixture.away_name}"
        if view.accuracy is not None:
            predicted += 1
            correct += view.accuracy.result_correct
            mark = "✓" if view.accuracy.result_correct else "✗"
            line += f"  predicted {view.accuracy.predicted_result} {mark}"
        click.echo(line)

    if predicted:
        click.echo(f"\nResult accuracy: {correct}/{predicted} ({correct / predicted:.0%})")


@cli.command()
@click.argument("fixture_id")
@click.option("--model", default=None, help="Model id (default from settings)")
@click.option("--prompt", "custom_prompt", default=None, help="Custom prompt for the workflow")
def generate(fixture_id: str, model: str, custom_prompt: str):
    """Generate a prediction for one fixture."""
    from matchday.config import setup_logging

    setup_logging()

    async def _generate():
        async with BackendClient() as client:
            return await client.generate_prediction(
                _fixture_id(fixture_id), model=model, custom_prompt=custom_prompt
            )

    click.echo(f"Generating prediction for fixture {fixture_id}...")
    result = _run(_generate())
    if not result.success:
        raise click.ClickException(result.message or result.error or "Failed to generate prediction")
    click.echo(result.message or "Prediction generated")


@cli.command(name="generate-all")
@click.option("--model", default=None, help="Model id (default from settings)")
def generate_all(model: str):
    """Generate predictions for every upcoming fixture without one, one at a time."""
    from matchday.config import setup_logging
    from matchday.config.settings import settings
    from matchday.services.generation import GenerationTracker

    setup_logging()

    async def _generate_all():
        async with BackendClient() as client:
            fixtures = await client.get_upcoming_fixtures(settings.upcoming_limit)
            tracker = GenerationTracker(
                lambda fid: client.generate_prediction(fid, model=model)
            )
            return await tracker.generate_all(fixtures)

    summary = _run(_generate_all())
    if summary.requested == 0:
        click.echo("All upcoming fixtures already have predictions")
        return

    click.echo(f"Generated {len(summary.succeeded)}/{summary.requested} predictions")
    for fid, message in summary.failed.items():
        click.echo(f"  {fid}: {message}")


@cli.command()
@click.argument("fixture_id")
@click.option("--force", is_flag=True, help="Regenerate an existing analysis")
@click.option("--model", default=None, help="Model id (default from settings)")
def analyze(fixture_id: str, force: bool, model: str):
    """Request a post-match analysis for a completed fixture."""
    from matchday.config import setup_logging

    setup_logging()

    async def _analyze():
        async with BackendClient() as client:
            return await client.generate_analysis(
                _fixture_id(fixture_id), force_regenerate=force, model=model
            )

    result = _run(_analyze())
    if not result.success:
        raise click.ClickException(result.message or result.error or "Analysis failed")
    click.echo(result.message or "Analysis generated")


@cli.command()
@click.argument("fixture_id")
@click.option("--kind", type=click.Choice(["prediction", "analysis"]), default="prediction")
@click.option("--model", default=None, help="Model id (default from settings)")
@click.option("--prompt", "custom_prompt", default=None, help="Custom prompt (predictions only)")
def trigger(fixture_id: str, kind: str, model: str, custom_prompt: str):
    """Call the workflow webhook directly, bypassing the backend."""
    from matchday.api.workflows import WorkflowClient, build_analysis_payload, build_prediction_payload
    from matchday.config import setup_logging

    setup_logging()

    async def _trigger():
        async with BackendClient() as client:
            fixture = await client.get_fixture(_fixture_id(fixture_id))
        async with WorkflowClient() as workflows:
            if kind == "analysis":
                try:
                    payload = build_analysis_payload(fixture, model)
                except ValueError as e:
                    raise click.ClickException(str(e))
                return await workflows.trigger_analysis(payload)
            payload = build_prediction_payload(fixture, model, custom_prompt)
            return await workflows.trigger_prediction(payload)

    result = _run(_trigger())
    if not result.success:
        raise click.ClickException(f"{result.error}: {result.message}")
    click.echo(json.dumps(result.model_dump(exclude_none=True), indent=2, default=str))


@cli.command(name="check-windows")
def check_windows():
    """Run a single automation cycle."""
    from matchday.config import setup_logging
    from matchday.services import get_automation

    setup_logging()

    async def _check():
        automation = get_automation()
        try:
            return await automation.check_windows()
        finally:
            await automation.close()

    triggered = _run(_check())
    click.echo(
        f"Triggered {len(triggered['predictions'])} prediction(s), "
        f"{len(triggered['analyses'])} analysis(es)"
    )


@cli.command()
@click.option("--kind", type=click.Choice(["prediction", "analysis"]), default="prediction")
def schema(kind: str):
    """Print the response shape a workflow is expected to return."""
    from matchday.models.webhooks import EXPECTED_ANALYSIS_SCHEMA, EXPECTED_PREDICTION_SCHEMA

    data = EXPECTED_ANALYSIS_SCHEMA if kind == "analysis" else EXPECTED_PREDICTION_SCHEMA
    click.echo(json.dumps(data, indent=2))


@cli.command()
def status():
    """Show configuration and backend status."""
    from matchday.config.settings import settings

    async def _counts():
        async with BackendClient() as client:
            fixtures = await client.get_upcoming_fixtures(settings.upcoming_limit)
            live = await client.get_live_fixtures(settings.league_id)
            return fixtures, live

    click.echo("Matchday Insights Status")
    click.echo("=" * 40)
    click.echo(f"Backend: {settings.backend.base_url}")

    try:
        fixtures, live = asyncio.run(_counts())
        predicted = sum(1 for f in fixtures if f.has_prediction)
        click.echo(f"Upcoming fixtures: {len(fixtures)} ({predicted} predicted)")
        click.echo(f"Live matches: {len(live)}")
    except Exception as e:
        click.echo(f"Backend unreachable: {e}")

    click.echo("")
    click.echo("Configuration:")
    click.echo(f"  Default model: {settings.default_model}")
    click.echo(f"  Analysis model: {settings.default_analysis_model}")
    click.echo(f"  Live poll: {settings.live_poll_seconds}s")
    click.echo(f"  Automation interval: {settings.automation_interval_minutes} min")
    click.echo(f"  Auth cookie set: {bool(settings.backend.auth_cookie.get_secret_value())}")
    click.echo(f"  Workflow configured: {settings.workflow.is_configured()}")


if __name__ == "__main__":
    cli()
