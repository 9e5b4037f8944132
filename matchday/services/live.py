"""Poll live fixtures and notice when matches finish."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from matchday.api.client import BackendClient
from matchday.models.entities import Fixture

logger = logging.getLogger(__name__)


@dataclass
class LiveUpdate:
    """Result of one poll."""
    fixtures: list[Fixture]
    finished_ids: set = field(default_factory=set)
    polled_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_finished(self) -> bool:
        return bool(self.finished_ids)


class LivePoller:
    """Track the live set across polls.

    Ids present in the previous poll but missing now are matches that just
    finished; callers use them to refresh recent results.
    """

    def __init__(
        self,
        client: BackendClient,
        league_id: Optional[str] = None,
        on_finished: Optional[Callable[[set], Awaitable[None]]] = None,
    ):
        self.client = client
        self.league_id = league_id
        self.on_finished = on_finished
        self.live_ids: set = set()
        self.last_update: Optional[LiveUpdate] = None

    def diff(self, fixtures: list[Fixture]) -> LiveUpdate:
        """Record a new live set and report which fixtures dropped out."""
        current = {f.id for f in fixtures}
        finished = self.live_ids - current
        self.live_ids = current
        update = LiveUpdate(fixtures=fixtures, finished_ids=finished)
        self.last_update = update
        return update

    async def poll(self) -> LiveUpdate:
        fixtures = await self.client.get_live_fixtures(self.league_id)
        update = self.diff(fixtures)

        if update.has_finished:
            logger.info(f"{len(update.finished_ids)} live match(es) finished: {sorted(map(str, update.finished_ids))}")
            if self.on_finished:
                await self.on_finished(update.finished_ids)
        else:
            logger.debug(f"{len(fixtures)} live match(es)")
        return update
