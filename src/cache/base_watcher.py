# src/cache/base_watcher.py — v1
"""Abstract file watcher interface.

A watcher reports ``add``/``change``/``unlink`` events for markdown files
below a root and reports its own failures through error listeners. It never
raises watcher failures to callers.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class WatchEventKind(str, Enum):
    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"


@dataclass(frozen=True)
class WatchEvent:
    kind: WatchEventKind
    path: Path


WatchListener = Callable[[WatchEvent], Awaitable[None]]
ErrorListener = Callable[[BaseException], None]


class BaseFileWatcher(ABC):
    """Unified interface for file watching backends."""

    def __init__(self) -> None:
        self._listeners: list[WatchListener] = []
        self._error_listeners: list[ErrorListener] = []

    def on_change(self, listener: WatchListener) -> None:
        """Register a listener for add/change/unlink events."""
        self._listeners.append(listener)

    def on_error(self, listener: ErrorListener) -> None:
        """Register a listener for watcher failures."""
        self._error_listeners.append(listener)

    async def _emit(self, event: WatchEvent) -> None:
        for listener in list(self._listeners):
            await listener(event)

    def _emit_error(self, exc: BaseException) -> None:
        if not self._error_listeners:
            logger.warning("Unhandled watcher error: %s", exc)
        for listener in list(self._error_listeners):
            listener(exc)

    @abstractmethod
    async def start(self) -> None:
        """Begin delivering events."""

    @abstractmethod
    async def close(self) -> None:
        """Stop delivering events and release resources."""
