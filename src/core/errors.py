# src/core/errors.py — v1
"""Structured error types shared by the cache, index and discovery layers.

Every error carries a machine-readable ``code`` and a ``context`` dict so
callers can report failures without parsing messages. Not-found conditions
are never errors: lookups return ``None`` instead.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    IO_ERROR = "IO_ERROR"
    INVALID_SECTION_CONTENT = "INVALID_SECTION_CONTENT"
    INVALID_SLUG = "INVALID_SLUG"
    INVALID_TITLE = "INVALID_TITLE"
    INVALID_OPERATION = "INVALID_OPERATION"
    DOCUMENT_ANALYSIS_ERROR = "DOCUMENT_ANALYSIS_ERROR"


class DocIndexError(Exception):
    """Base class for all docindex errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Serializable form used by the CLI and discovery results."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context,
        }


class MalformedInputError(DocIndexError):
    """Invalid slug, title, heading structure or section content."""


class DocumentIOError(DocIndexError):
    """Filesystem failure other than a missing file."""

    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(
            f"I/O error on {path}: {cause}",
            ErrorCode.IO_ERROR,
            {"path": path, "errno": cause.errno},
        )
        self.path = path
        self.__cause__ = cause


class ConflictError(DocIndexError):
    """File changed on disk since it was last read."""

    def __init__(self, path: str, expected_mtime: float, actual_mtime: float) -> None:
        super().__init__(
            f"{path} was modified externally "
            f"(expected mtime {expected_mtime}, found {actual_mtime})",
            ErrorCode.PRECONDITION_FAILED,
            {
                "path": path,
                "expected_mtime": expected_mtime,
                "actual_mtime": actual_mtime,
            },
        )
        self.path = path


class DocumentAnalysisError(DocIndexError):
    """Discovery or analysis could not run with the given inputs."""

    def __init__(
        self,
        message: str,
        operation: str,
        context: dict[str, Any] | None = None,
        recovery_suggestions: list[str] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.DOCUMENT_ANALYSIS_ERROR, context)
        self.operation = operation
        self.recovery_suggestions = recovery_suggestions or []

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["operation"] = self.operation
        data["recovery_suggestions"] = self.recovery_suggestions
        return data
