"""Typed failures raised by the snippet services and mirrored by the client."""
from __future__ import annotations


class SnippetServiceError(Exception):
    """Base class; ``status_code`` is the HTTP status the API maps it to."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class SnippetValidationError(SnippetServiceError):
    """A required field is missing or malformed."""

    status_code = 400
    default_message = "Invalid snippet data"


class PinLimitExceededError(SnippetServiceError):
    """Pinning would push the pinned count past the configured maximum."""

    status_code = 400

    def __init__(self, limit: int = 10, message: str | None = None) -> None:
        self.limit = limit
        super().__init__(message or f"Maximum of {limit} pinned snippets allowed")


class NotFoundError(SnippetServiceError):
    status_code = 404
    default_message = "Snippet not found"


class UnexpectedError(SnippetServiceError):
    """Storage or transport failure."""

    status_code = 500


def error_for_status(status_code: int, message: str) -> SnippetServiceError:
    """Rebuild a typed error from an HTTP status and ``detail`` message."""
    if status_code == 404:
        return NotFoundError(message)
    if status_code == 400:
        if message.startswith("Maximum of") and "pinned" in message:
            return PinLimitExceededError(message=message)
        return SnippetValidationError(message)
    return UnexpectedError(message)
