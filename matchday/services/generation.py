"""Track in-flight prediction generation per fixture."""
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Optional, Union

from matchday.api.errors import get_error_message
from matchday.models.entities import Fixture
from matchday.models.webhooks import GenerateResult

logger = logging.getLogger(__name__)

FixtureId = Union[int, str]
GenerateFn = Callable[[FixtureId], Awaitable[GenerateResult]]


@dataclass
class GenerateAllSummary:
    """Outcome of a sequential Generate All run."""
    requested: int = 0
    succeeded: list = field(default_factory=list)
    failed: dict = field(default_factory=dict)


class GenerationTracker:
    """Optimistic per-fixture generation state.

    ``generating_ids`` holds fixtures with a request in flight; ``errors``
    holds the last failure message per fixture. A fixture's id is always
    released when its request ends, whatever the outcome.
    """

    def __init__(self, generate: GenerateFn):
        """Initialize tracker.

        Args:
            generate: Coroutine function posting one generation request
        """
        self._generate = generate
        self.generating_ids: set = set()
        self.errors: dict = {}
        self.generating_all = False

    def is_generating(self, fixture_id: FixtureId) -> bool:
        return fixture_id in self.generating_ids

    def error_for(self, fixture_id: FixtureId) -> Optional[str]:
        return self.errors.get(fixture_id)

    def clear_error(self, fixture_id: FixtureId) -> None:
        self.errors.pop(fixture_id, None)

    async def generate(self, fixture_id: FixtureId) -> bool:
        """Run one generation request; returns True on success."""
        self.clear_error(fixture_id)
        self.generating_ids.add(fixture_id)
        try:
            result = await self._generate(fixture_id)
            if not result.success:
                message = result.message or result.error or "Failed to generate prediction"
                self.errors[fixture_id] = message
                logger.warning(f"Generation failed for fixture {fixture_id}: {message}")
                return False
            logger.info(f"Generation succeeded for fixture {fixture_id}")
            return True
        except Exception as e:
            self.errors[fixture_id] = get_error_message(e)
            logger.error(f"Generation error for fixture {fixture_id}: {e}")
            return False
        finally:
            self.generating_ids.discard(fixture_id)

    async def generate_all(self, fixtures: Iterable[Fixture]) -> GenerateAllSummary:
        """Generate for every unpredicted fixture, one after another."""
        pending = [f for f in fixtures if not f.has_prediction]
        summary = GenerateAllSummary(requested=len(pending))
        if not pending:
            return summary

        self.generating_all = True
        try:
            for fixture in pending:
                if await self.generate(fixture.id):
                    summary.succeeded.append(fixture.id)
                else:
                    summary.failed[fixture.id] = self.errors.get(fixture.id)
        finally:
            self.generating_all = False

        logger.info(
            f"Generate all: {len(summary.succeeded)}/{summary.requested} succeeded"
        )
        return summary
