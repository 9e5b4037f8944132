"""Bridge between Streamlit reruns and the async backend client.

Streamlit scripts are synchronous. Requests run on one background event
loop shared by all sessions, and each session keeps a ``LatestRequest`` per
view.

Within a session Streamlit runs one script at a time and only interrupts it
at the next ``st`` call, so a rerun never cuts short a request the script is
waiting on. ``fetch`` waits at most the backend timeout instead; a request
still running then is abandoned, and the view's next fetch cancels it.
"""
import asyncio
import concurrent.futures
import logging
import threading
from typing import Awaitable, Callable, Optional, TypeVar

import streamlit as st

from matchday.api.cancellation import LatestRequest
from matchday.api.client import BackendClient
from matchday.api.errors import BackendError, RequestCancelled, get_error_message
from matchday.config.settings import settings
from matchday.models.entities import Fixture
from matchday.services.generation import GenerateAllSummary, GenerationTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncRunner:
    """Event loop on a daemon thread, with one BackendClient bound to it."""

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self.loop.run_forever, daemon=True, name="matchday-loop")
        self._thread.start()
        self._client: Optional[BackendClient] = None

    @property
    def client(self) -> BackendClient:
        if self._client is None:
            self._client = BackendClient()
        return self._client

    def run(self, coro: Awaitable[T], timeout: Optional[float] = None) -> T:
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        return future.result(timeout)


@st.cache_resource
def get_runner() -> AsyncRunner:
    return AsyncRunner()


def _latest(view: str) -> LatestRequest:
    requests = st.session_state.setdefault("_latest_requests", {})
    if view not in requests:
        requests[view] = LatestRequest(view)
    return requests[view]


def fetch(view: str, call: Callable[[BackendClient], Awaitable[T]], default: T = None) -> T:
    """Run ``call(client)`` for a view, cancelling that view's abandoned request.

    Backend and network failures are logged and shown once; the view then
    renders ``default``. So does a request that outlives the backend timeout.
    """
    runner = get_runner()
    wait = settings.backend.timeout_seconds
    try:
        return runner.run(_latest(view).run(call(runner.client)), timeout=wait)
    except concurrent.futures.TimeoutError:
        logger.warning(f"{view}: no response after {wait}s, abandoning request")
        st.warning(f"Loading {view} is taking too long; it will be retried on the next refresh")
    except RequestCancelled:
        logger.debug(f"{view}: request superseded")
    except BackendError as e:
        logger.error(f"{view}: backend error {e.status}: {e.message}")
        st.error(f"Failed to load {view}: {e.message}")
    except Exception as e:
        logger.error(f"{view}: {e}")
        st.error(f"Failed to load {view}: {get_error_message(e)}")
    return default


def submit(call: Callable[[BackendClient], Awaitable[T]]) -> T:
    """Run a one-off action (generation) without cancellation; errors propagate."""
    runner = get_runner()
    return runner.run(call(runner.client))


def selected_model() -> str:
    return st.session_state.get("model") or settings.default_model


def custom_prompt() -> Optional[str]:
    return st.session_state.get("custom_prompt") or None


def get_tracker() -> GenerationTracker:
    """Per-session generation state.

    The loop thread cannot read session state, so the chosen model and
    prompt are copied into ``options`` before each run.
    """
    if "generation_tracker" not in st.session_state:
        runner = get_runner()
        options = {}

        async def _generate(fixture_id):
            return await runner.client.generate_prediction(
                fixture_id,
                model=options.get("model"),
                custom_prompt=options.get("custom_prompt"),
            )

        st.session_state["generation_options"] = options
        st.session_state["generation_tracker"] = GenerationTracker(_generate)
    st.session_state["generation_options"].update(
        model=selected_model(), custom_prompt=custom_prompt()
    )
    return st.session_state["generation_tracker"]


def generate_prediction(fixture_id) -> bool:
    tracker = get_tracker()
    with st.spinner("Generating prediction (this can take a few minutes)…"):
        return get_runner().run(tracker.generate(fixture_id))


def generate_all(fixtures: list[Fixture]) -> GenerateAllSummary:
    tracker = get_tracker()
    with st.spinner("Generating predictions one by one…"):
        return get_runner().run(tracker.generate_all(fixtures))


PAGE_KEY = "page"
MATCH_DETAIL = "Match Detail"


def open_fixture(fixture_id) -> None:
    """Button callback: jump to the match detail page for a fixture."""
    st.session_state["fixture_id"] = fixture_id
    st.session_state[PAGE_KEY] = MATCH_DETAIL
