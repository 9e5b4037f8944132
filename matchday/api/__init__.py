"""Backend and workflow clients."""
from .cancellation import LatestRequest
from .client import BackendClient
from .errors import BackendError, RequestCancelled, get_error_message
from .workflows import WorkflowClient

__all__ = [
    "BackendClient",
    "BackendError",
    "LatestRequest",
    "RequestCancelled",
    "WorkflowClient",
    "get_error_message",
]
