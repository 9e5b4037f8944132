"""Main entry point for the Matchday Insights automation service."""
import asyncio
import logging
import signal
from typing import Optional

logger = logging.getLogger(__name__)

# Global event loop reference for signal handlers
_loop: Optional[asyncio.AbstractEventLoop] = None
_shutdown_event: Optional[asyncio.Event] = None


async def startup():
    """Startup routine."""
    from matchday.config import setup_logging
    from matchday.config.settings import settings
    from matchday.services import get_automation

    setup_logging()
    logger.info("Starting Matchday Insights automation")

    if not settings.backend.is_configured():
        logger.warning("Backend URL not configured, triggers will fail")

    automation = get_automation()
    automation.start()

    # Catch fixtures already inside a window
    logger.info("Running initial window check...")
    await automation.check_windows()

    logger.info("Startup complete")


async def shutdown():
    """Shutdown routine."""
    from matchday.services import get_automation

    logger.info("Shutting down...")

    automation = get_automation()
    automation.stop()
    await automation.close()

    logger.info("Shutdown complete")


def _signal_handler(signum, frame):
    """Handle termination signals."""
    logger.info(f"Received signal {signum}")
    if _shutdown_event and _loop:
        _loop.call_soon_threadsafe(_shutdown_event.set)


async def run_service():
    """Run the main service loop."""
    global _shutdown_event

    _shutdown_event = asyncio.Event()

    for sig in (signal.SIGTERM, signal.SIGINT):
        signal.signal(sig, _signal_handler)

    try:
        await startup()

        # Wait for shutdown signal
        await _shutdown_event.wait()

    except asyncio.CancelledError:
        logger.info("Service cancelled")
    finally:
        await shutdown()


def main():
    """Main function - entry point for service."""
    global _loop

    try:
        _loop = asyncio.new_event_loop()
        asyncio.set_event_loop(_loop)
        _loop.run_until_complete(run_service())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    finally:
        if _loop:
            _loop.close()


if __name__ == "__main__":
    main()
