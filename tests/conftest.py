# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides a small on-disk documentation tree, settings bound to it and a
scriptable in-memory file watcher. No network access.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from docindex.cache.base_watcher import BaseFileWatcher, WatchEvent, WatchEventKind
from docindex.config.settings import Settings
from docindex.storage.local_io import LocalDocumentStore


# === FAKES ===


class FakeWatcher(BaseFileWatcher):
    """In-memory watcher driven by the test."""

    def __init__(self, fail_on_start: bool = False) -> None:
        super().__init__()
        self.fail_on_start = fail_on_start
        self.started = False
        self.closed = False

    async def start(self) -> None:
        if self.fail_on_start:
            raise OSError("inotify watch limit reached")
        self.started = True

    async def close(self) -> None:
        self.closed = True

    async def emit(self, kind: WatchEventKind, path: Path) -> None:
        await self._emit(WatchEvent(kind, Path(path)))

    def fail(self, exc: BaseException | None = None) -> None:
        self._emit_error(exc or OSError("watcher crashed"))


class FakeWatcherFactory:
    """Zero-argument watcher factory that remembers every watcher it built."""

    def __init__(self) -> None:
        self.watchers: list[FakeWatcher] = []
        self.fail_on_start = False

    def __call__(self) -> FakeWatcher:
        watcher = FakeWatcher(fail_on_start=self.fail_on_start)
        self.watchers.append(watcher)
        return watcher

    @property
    def current(self) -> FakeWatcher:
        return self.watchers[-1]


class RecordingSleep:
    """Stand-in for asyncio.sleep that returns immediately and records delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


# === FIXTURES: documentation tree ===


AUTH_DOC = """# Authentication Guide

JWT token authentication for the REST API gateway.

## Access Tokens

Access tokens expire after fifteen minutes. See [refresh](#refresh-tokens).

### Token Claims

Claims carry the **subject** and _scopes_.

## Refresh Tokens

Refresh tokens rotate on every use.

```python
# not a heading
refresh(token)
```
"""

ENDPOINTS_DOC = """# Endpoint Reference

REST endpoints for authentication tokens and user sessions.

## Login

POST /login returns a JWT token.
"""

SETUP_DOC = """# Local Setup

Install dependencies and run the development server.

## Database

Create a Postgres database before starting.
"""

INDEX_DOC = """Welcome to the project documentation.

Start with the setup guide.
"""


def write_doc(root: Path, rel: str, content: str) -> Path:
    path = root / rel.lstrip("/")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def docs_root(tmp_path: Path) -> Path:
    """Documentation tree with three namespaces and a hidden directory."""
    root = tmp_path / "docs"
    write_doc(root, "api/auth.md", AUTH_DOC)
    write_doc(root, "api/specs/endpoints.md", ENDPOINTS_DOC)
    write_doc(root, "guides/setup.md", SETUP_DOC)
    write_doc(root, "index.md", INDEX_DOC)
    write_doc(root, ".drafts/secret.md", "# Secret draft\n\nclassified roadmap\n")
    write_doc(root, "api/notes.txt", "not markdown")
    return root


@pytest.fixture
def store(docs_root: Path) -> LocalDocumentStore:
    return LocalDocumentStore(docs_root)


@pytest.fixture
def settings(docs_root: Path) -> Settings:
    return Settings(_env_file=None, docs_root=docs_root, cache_enable_watching=False)


@pytest.fixture
def watcher_factory() -> FakeWatcherFactory:
    return FakeWatcherFactory()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def doc_writer():
    """Callable ``(root, rel, content) -> Path`` for writing test documents."""
    return write_doc
