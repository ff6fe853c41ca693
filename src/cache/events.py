# src/cache/events.py — v1
"""Document change notifications.

The cache publishes a DocumentEvent whenever it learns that a file was
added, changed or deleted. Consumers such as the fingerprint index register
with ``subscribe`` and are awaited in subscription order.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class DocumentEventKind(str, Enum):
    ADDED = "added"
    CHANGED = "changed"
    DELETED = "deleted"


@dataclass(frozen=True)
class DocumentEvent:
    kind: DocumentEventKind
    path: str


DocumentListener = Callable[[DocumentEvent], Awaitable[None]]


class CacheEventBus:
    """Explicit publish/subscribe channel for document events."""

    def __init__(self) -> None:
        self._listeners: list[DocumentListener] = []

    def subscribe(self, listener: DocumentListener) -> Callable[[], None]:
        """Register ``listener``. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def publish(self, event: DocumentEvent) -> None:
        """Deliver ``event`` to every listener.

        A failing listener is logged and does not stop delivery to the rest.
        """
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception:
                logger.exception(
                    "Listener failed for %s event on %s", event.kind.value, event.path
                )
