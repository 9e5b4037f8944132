"""Keep only the newest of overlapping requests."""
import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from matchday.api.errors import RequestCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LatestRequest:
    """Runs one request at a time per view; a new run cancels the previous one.

    The superseded caller gets ``RequestCancelled`` and must leave its state
    untouched. Cancellation from outside (shutdown) is propagated as-is.
    """

    def __init__(self, name: str = "request"):
        self.name = name
        self._task: Optional[asyncio.Task] = None
        self._superseded: set = set()

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self) -> None:
        """Abort the in-flight request, if any."""
        if self.in_flight:
            self._superseded.add(self._task)
            self._task.cancel()

    async def run(self, coro: Awaitable[T]) -> T:
        self.cancel()
        task = asyncio.ensure_future(coro)
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            if task in self._superseded:
                logger.debug(f"{self.name}: superseded request discarded")
                raise RequestCancelled(self.name)
            raise
        finally:
            self._superseded.discard(task)
            if self._task is task:
                self._task = None
