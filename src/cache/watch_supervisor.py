# src/cache/watch_supervisor.py — v1
"""Watcher lifecycle: Watching -> BackingOff(attempt n) -> Polling.

Every watcher error increments a counter. Below ``max_errors`` the watcher
is torn down and rebuilt after an exponential backoff delay. At
``max_errors`` the supervisor gives up on watching and runs the poll
callback every ``polling_interval_s`` seconds instead. Errors never reach
the code that owns the supervisor.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from docindex.cache.base_watcher import BaseFileWatcher, WatchListener

logger = logging.getLogger(__name__)


class WatchMode(str, Enum):
    DISABLED = "disabled"
    IDLE = "idle"
    WATCHING = "watching"
    BACKING_OFF = "backing_off"
    POLLING = "polling"
    STOPPED = "stopped"


@dataclass(frozen=True)
class WatchState:
    mode: WatchMode
    attempt: int = 0
    delay_s: float = 0.0


def backoff_delay(attempt: int, base_s: float) -> float:
    """Exponential delay: base, 2*base, 4*base, ..."""
    return base_s * (2 ** max(attempt - 1, 0))


def state_after_error(
    error_count: int, max_errors: int, backoff_base_s: float
) -> WatchState:
    """Next state once the watcher has failed ``error_count`` times in total."""
    if error_count >= max_errors:
        return WatchState(WatchMode.POLLING, attempt=error_count)
    return WatchState(
        WatchMode.BACKING_OFF,
        attempt=error_count,
        delay_s=backoff_delay(error_count, backoff_base_s),
    )


class WatchSupervisor:
    """Own a file watcher and fall back to polling when it keeps failing."""

    def __init__(
        self,
        watcher_factory: Callable[[], BaseFileWatcher],
        on_event: WatchListener,
        poll: Callable[[], Awaitable[None]],
        *,
        max_errors: int = 3,
        backoff_base_s: float = 5.0,
        polling_interval_s: float = 30.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._watcher_factory = watcher_factory
        self._on_event = on_event
        self._poll = poll
        self._max_errors = max_errors
        self._backoff_base_s = backoff_base_s
        self._polling_interval_s = polling_interval_s
        self._sleep = sleep

        self._state = WatchState(WatchMode.IDLE)
        self._error_count = 0
        self._watcher: BaseFileWatcher | None = None
        self._restart_task: asyncio.Task[None] | None = None
        self._poll_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def error_count(self) -> int:
        return self._error_count

    async def start(self) -> None:
        """Start watching. A start failure counts as a watcher error."""
        if self._state.mode != WatchMode.IDLE:
            return
        await self._start_watcher()

    async def _start_watcher(self) -> None:
        try:
            watcher = self._watcher_factory()
            watcher.on_change(self._on_event)
            watcher.on_error(self.handle_error)
            self._watcher = watcher
            await watcher.start()
        except Exception as exc:
            logger.warning("Failed to start file watcher: %s", exc)
            self.handle_error(exc)
            return
        self._state = WatchState(WatchMode.WATCHING)
        logger.info("File watcher active")

    def handle_error(self, exc: BaseException) -> None:
        """Record a watcher failure and schedule recovery."""
        if self._state.mode in (WatchMode.POLLING, WatchMode.STOPPED):
            return
        self._error_count += 1
        self._state = state_after_error(
            self._error_count, self._max_errors, self._backoff_base_s
        )
        if self._state.mode == WatchMode.POLLING:
            logger.warning(
                "File watcher failed %d times (%s), switching to polling every %.0fs",
                self._error_count, exc, self._polling_interval_s,
            )
            self._restart_task = asyncio.get_running_loop().create_task(
                self._enter_polling()
            )
        else:
            logger.warning(
                "File watcher error %d/%d (%s), restarting in %.1fs",
                self._error_count, self._max_errors, exc, self._state.delay_s,
            )
            self._restart_task = asyncio.get_running_loop().create_task(
                self._restart(self._state.delay_s)
            )

    async def _restart(self, delay_s: float) -> None:
        await self._close_watcher()
        await self._sleep(delay_s)
        if self._state.mode == WatchMode.BACKING_OFF:
            await self._start_watcher()

    async def _enter_polling(self) -> None:
        await self._close_watcher()
        self._poll_task = asyncio.get_running_loop().create_task(self._poll_loop())

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self._polling_interval_s)
            try:
                await self._poll()
            except Exception:
                logger.exception("Polling consistency check failed")

    async def _close_watcher(self) -> None:
        watcher, self._watcher = self._watcher, None
        if watcher is None:
            return
        try:
            await watcher.close()
        except Exception as exc:
            logger.debug("Error closing file watcher: %s", exc)

    async def settle(self) -> None:
        """Wait for a pending restart or polling switch to finish."""
        while self._restart_task is not None and not self._restart_task.done():
            await self._restart_task

    async def close(self) -> None:
        """Stop watching and polling. Safe to call more than once."""
        self._state = WatchState(WatchMode.STOPPED)
        for task in (self._restart_task, self._poll_task):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._restart_task = None
        self._poll_task = None
        await self._close_watcher()
