# src/cache/watcher_factory.py — v1
"""Factory for file watcher instantiation."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from docindex.cache.base_watcher import BaseFileWatcher

WatcherFactory = Callable[[], BaseFileWatcher]


def create_watcher(
    root: str | Path,
    ignore_dirs: tuple[str, ...] = (),
    backend: str = "watchfiles",
) -> BaseFileWatcher:
    """Instantiate a file watcher for ``root``.

    Raises:
        ValueError: Unknown backend name.
    """
    if backend == "watchfiles":
        from docindex.cache.watchfiles_watcher import WatchfilesWatcher

        return WatchfilesWatcher(root, ignore_dirs=ignore_dirs)

    raise ValueError(f"Unsupported watcher backend: {backend!r}")


def default_watcher_factory(
    root: str | Path, ignore_dirs: tuple[str, ...] = ()
) -> WatcherFactory:
    """Zero-argument factory so a fresh watcher can be built on every restart."""
    return lambda: create_watcher(root, ignore_dirs)
