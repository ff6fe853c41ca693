# src/logging/context.py — v1
"""Contextual logging support: attach document path and operation to records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_docs_root: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "docs_root", default=None
)
_document_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "document_path", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Snapshot of the current logging context."""

    docs_root: str | None = None
    document_path: str | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        docs_root=_docs_root.get(),
        document_path=_document_path.get(),
        operation=_operation.get(),
    )


def set_session_context(docs_root: str) -> None:
    """Set the docs root for the current manager session."""
    _docs_root.set(docs_root)


def set_operation_context(operation: str, document_path: str | None = None) -> None:
    """Set the operation (and optionally the document) being processed."""
    _operation.set(operation)
    _document_path.set(document_path)


def clear_context() -> None:
    """Reset all context variables."""
    _docs_root.set(None)
    _document_path.set(None)
    _operation.set(None)
