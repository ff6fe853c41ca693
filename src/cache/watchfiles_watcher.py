# src/cache/watchfiles_watcher.py — v1
"""File watcher backed by watchfiles.awatch (Rust notify backend)."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

from watchfiles import Change, DefaultFilter, awatch

from docindex.cache.base_watcher import BaseFileWatcher, WatchEvent, WatchEventKind

logger = logging.getLogger(__name__)

_CHANGE_KINDS: dict[Change, WatchEventKind] = {
    Change.added: WatchEventKind.ADD,
    Change.modified: WatchEventKind.CHANGE,
    Change.deleted: WatchEventKind.UNLINK,
}


class MarkdownFilter(DefaultFilter):
    """DefaultFilter restricted to ``*.md`` files, with extra ignored dirs."""

    def __init__(self, ignore_dirs: tuple[str, ...] = ()) -> None:
        super().__init__(
            ignore_dirs=tuple(DefaultFilter.ignore_dirs) + tuple(ignore_dirs)
        )

    def __call__(self, change: Change, path: str) -> bool:
        return path.endswith(".md") and super().__call__(change, path)


class WatchfilesWatcher(BaseFileWatcher):
    """Watch a docs root recursively in a background asyncio task."""

    def __init__(
        self,
        root: str | Path,
        ignore_dirs: tuple[str, ...] = (),
        debounce_ms: int = 300,
    ) -> None:
        super().__init__()
        self._root = Path(root)
        self._filter = MarkdownFilter(ignore_dirs)
        self._debounce_ms = debounce_ms
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        if self._task is not None:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="docindex-watcher")
        logger.debug("Watching %s", self._root)

    async def _run(self) -> None:
        assert self._stop_event is not None
        try:
            async for changes in awatch(
                self._root,
                watch_filter=self._filter,
                stop_event=self._stop_event,
                debounce=self._debounce_ms,
                recursive=True,
            ):
                for change, raw_path in sorted(changes, key=lambda c: c[1]):
                    await self._emit(WatchEvent(_CHANGE_KINDS[change], Path(raw_path)))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Watcher on %s failed: %s", self._root, exc)
            self._emit_error(exc)

    async def close(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            if not self._task.done():
                self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        self._stop_event = None
