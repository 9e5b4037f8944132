"""Errors raised by the backend and workflow clients."""
from typing import Any, Optional


class BackendError(Exception):
    """Non-2xx reply from the dashboard backend.

    The backend answers failures with ``{"error": ..., "message": ...}``;
    both fields are kept when present.
    """

    def __init__(self, status: int, error: Optional[str] = None, message: Optional[str] = None):
        self.status = status
        self.error = error
        self.message = message or error or f"Request failed with status {status}"
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"BackendError(status={self.status}, error={self.error!r}, message={self.message!r})"


class RequestCancelled(Exception):
    """A request was superseded by a newer one and its result discarded."""


UNKNOWN_ERROR = "Unknown error occurred"


def get_error_message(error: Any) -> str:
    """Turn anything raised or returned as an error into display text."""
    if isinstance(error, BaseException):
        return str(error) or error.__class__.__name__
    if isinstance(error, str):
        return error
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    message = getattr(error, "message", None)
    if message:
        return str(message)
    return UNKNOWN_ERROR
