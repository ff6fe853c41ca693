# src/cache/fingerprint_index.py — v1
"""Inverted keyword index over document fingerprints.

Built once at startup from the first ``preview_bytes`` of every markdown
file, then kept current from DocumentEvents. Invariant: a path appears in
the posting set of keyword ``k`` exactly when ``k`` is one of the keywords
of that path's stored fingerprint.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from pathlib import Path

from docindex.cache.events import CacheEventBus, DocumentEvent, DocumentEventKind
from docindex.cache.fingerprint import (
    MAX_FINGERPRINT_KEYWORDS,
    compute_fingerprint,
    extract_title,
    tokenize,
)
from docindex.cache.models import FingerprintEntry, IndexStats
from docindex.core.errors import DocIndexError
from docindex.core.paths import is_under_namespace, normalize_doc_path, path_to_namespace
from docindex.storage.local_io import LocalDocumentStore

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_BYTES = 1500


class FingerprintIndex:
    """Keyword -> paths index with per-path fingerprints."""

    def __init__(
        self,
        store: LocalDocumentStore,
        preview_bytes: int = DEFAULT_PREVIEW_BYTES,
        max_keywords: int = MAX_FINGERPRINT_KEYWORDS,
    ) -> None:
        self._store = store
        self._preview_bytes = preview_bytes
        self._max_keywords = max_keywords
        self._fingerprints: dict[str, FingerprintEntry] = {}
        self._postings: dict[str, set[str]] = {}
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Index every markdown file below the docs root. Runs once."""
        if self._initialized:
            logger.warning("Fingerprint index already initialized")
            return

        start = time.monotonic()
        for file_path in self._store.iter_markdown_files():
            try:
                await self.index_document(self._store.to_doc_path(file_path))
            except (OSError, ValueError, DocIndexError) as exc:
                logger.warning("Failed to index %s: %s", file_path, exc)

        self._initialized = True
        logger.info(
            "Fingerprint index built: %d documents, %d keywords in %.0fms",
            len(self._fingerprints),
            len(self._postings),
            (time.monotonic() - start) * 1000,
        )

    async def index_document(self, path: str) -> FingerprintEntry:
        """Fingerprint one document from its preview and add its postings.

        Raises:
            OSError: The file cannot be read (including FileNotFoundError).
        """
        key = normalize_doc_path(path)
        raw, stat = await self._store.read_preview(key, self._preview_bytes)
        text = raw.decode("utf-8", errors="replace")
        title = extract_title(text, Path(key).stem)
        fingerprint = compute_fingerprint(title, text, raw=raw, max_keywords=self._max_keywords)

        if key in self._fingerprints:
            self.invalidate_document(key)

        entry = FingerprintEntry(
            path=key,
            title=title,
            keywords=fingerprint.keywords,
            last_modified=datetime.fromtimestamp(stat.st_mtime, timezone.utc),
            mtime=stat.st_mtime,
            content_hash=fingerprint.content_hash,
            namespace=path_to_namespace(key),
        )
        self._fingerprints[key] = entry
        for keyword in entry.keywords:
            self._postings.setdefault(keyword, set()).add(key)
        return entry

    def invalidate_document(self, path: str) -> bool:
        """Remove ``path`` from every posting set and drop its fingerprint."""
        key = normalize_doc_path(path)
        entry = self._fingerprints.pop(key, None)
        if entry is None:
            return False
        for keyword in entry.keywords:
            paths = self._postings.get(keyword)
            if paths is None:
                continue
            paths.discard(key)
            if not paths:
                del self._postings[keyword]
        return True

    async def refresh_document(self, path: str) -> FingerprintEntry | None:
        """Invalidate then re-index ``path``; None if it no longer exists."""
        self.invalidate_document(path)
        try:
            return await self.index_document(path)
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Failed to re-index %s: %s", path, exc)
            return None

    def find_candidates(self, query: str) -> set[str]:
        """Union of the posting sets of every meaningful query token.

        Uninitialized index or a query without meaningful tokens yields every
        known path.
        """
        if not self._initialized:
            logger.warning("Fingerprint index queried before initialization")
            return set(self._fingerprints)

        tokens = tokenize(query)
        if not tokens:
            return set(self._fingerprints)

        candidates: set[str] = set()
        for token in tokens:
            candidates.update(self._postings.get(token, ()))
        return candidates

    async def handle_event(self, event: DocumentEvent) -> None:
        """Keep the index in step with a filesystem change."""
        if not event.path.endswith(".md"):
            return
        if event.kind == DocumentEventKind.DELETED:
            self.invalidate_document(event.path)
            return
        await self.refresh_document(event.path)

    def attach(self, bus: CacheEventBus) -> None:
        """Subscribe to a cache's document events."""
        bus.subscribe(self.handle_event)

    def get_fingerprint(self, path: str) -> FingerprintEntry | None:
        entry = self._fingerprints.get(normalize_doc_path(path))
        return entry.model_copy(deep=True) if entry is not None else None

    def list_fingerprints(self, namespace: str | None = None) -> list[FingerprintEntry]:
        """Copies of all fingerprints, optionally limited to a namespace subtree."""
        return [
            entry.model_copy(deep=True)
            for entry in self._fingerprints.values()
            if namespace is None or is_under_namespace(entry.namespace, namespace)
        ]

    def posting(self, keyword: str) -> frozenset[str]:
        return frozenset(self._postings.get(keyword, ()))

    def indexed_keywords(self) -> list[str]:
        return sorted(self._postings)

    def clear(self) -> None:
        self._fingerprints.clear()
        self._postings.clear()
        self._initialized = False

    def get_stats(self) -> IndexStats:
        documents = len(self._fingerprints)
        total_keywords = sum(len(e.keywords) for e in self._fingerprints.values())
        return IndexStats(
            documents=documents,
            keywords=len(self._postings),
            avg_keywords_per_doc=round(total_keywords / documents, 1) if documents else 0.0,
            initialized=self._initialized,
        )
