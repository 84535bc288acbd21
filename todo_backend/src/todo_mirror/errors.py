"""
Error taxonomy for the todo mirror service.

Every error carries the HTTP status it maps to and a generic, client-safe
message. The FastAPI app renders them as ``{"message": ...}``.
"""
from __future__ import annotations

from typing import Optional


class TodoMirrorError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class Unauthorized(TodoMirrorError):
    """Missing, invalid or expired session token."""

    status_code = 401
    default_message = "Unauthorized"


class NotFound(TodoMirrorError):
    status_code = 404
    default_message = "Not found"


class InvalidInput(TodoMirrorError):
    status_code = 400
    default_message = "Invalid input"


class UpstreamFailure(TodoMirrorError):
    """The upstream API was unreachable or answered with a non-2xx status."""

    status_code = 502
    default_message = "Upstream request failed"


class StorageFailure(TodoMirrorError):
    """Reading or persisting the store failed."""

    status_code = 500
    default_message = "Storage failure"
