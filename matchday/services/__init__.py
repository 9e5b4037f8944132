"""Background services."""
from .automation import AutomationService, get_automation
from .generation import GenerationTracker
from .live import LivePoller

__all__ = ["AutomationService", "GenerationTracker", "LivePoller", "get_automation"]
