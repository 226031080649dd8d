"""
grove.errors - Error taxonomy shared by the graph core, storage and CLI.

Every failure a user can see is one of these. Storage-engine errors are
reclassified into this taxonomy at the database boundary so that callers
never handle raw sqlite3 exceptions.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Broad failure categories."""

    NOT_FOUND = "not-found"
    INVALID_NAME = "invalid-name"
    INVALID_SELECTOR = "invalid-selector"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    STORAGE_FAILURE = "storage-failure"


class GroveError(Exception):
    """Base class for all grove errors.

    Attributes:
        code: The failure category.
        message: Single-line, user-facing description.
    """

    code: ErrorCode = ErrorCode.STORAGE_FAILURE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def retryable(self) -> bool:
        """True if repeating the whole operation may succeed."""
        return self.code == ErrorCode.CONFLICT


class NotFound(GroveError):
    """The selector resolved to nothing."""

    code = ErrorCode.NOT_FOUND


class InvalidName(GroveError):
    """A node name or alias failed structural validation."""

    code = ErrorCode.INVALID_NAME


class InvalidSelector(GroveError):
    """A selector is neither an id, a date nor a valid alias."""

    code = ErrorCode.INVALID_SELECTOR


class Forbidden(GroveError):
    """The operation would violate a multitree invariant."""

    code = ErrorCode.FORBIDDEN


class Conflict(GroveError):
    """A concurrent transaction got in the way; retry the operation."""

    code = ErrorCode.CONFLICT


class StorageFailure(GroveError):
    """I/O-level failure of the underlying store."""

    code = ErrorCode.STORAGE_FAILURE


__all__ = [
    "ErrorCode",
    "GroveError",
    "NotFound",
    "InvalidName",
    "InvalidSelector",
    "Forbidden",
    "Conflict",
    "StorageFailure",
]
