"""Wrapper-specific exceptions."""

from __future__ import annotations

from typing import Any


class EssWrapperError(Exception):
    """Base exception for wrapper errors."""


class ConnectionError(EssWrapperError):
    """Raised when the search server cannot be reached or the wrapper is closed."""


class ResponseError(EssWrapperError):
    """Raised when the server answers with an error status or an unexpected body."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class IndexNotFoundError(ResponseError):
    """Raised when an index-level call returns 404."""


class WriteNotAcknowledgedError(EssWrapperError):
    """Raised when the server accepts a write but does not report it as created."""


class InvalidMappingError(EssWrapperError):
    """Raised when a mapping file is not a JSON object with exactly one key."""


class InvalidFilterError(EssWrapperError, ValueError):
    """Raised when a filter value is neither a string nor a sequence of strings."""
