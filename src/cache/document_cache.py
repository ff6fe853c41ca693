# src/cache/document_cache.py — v1
"""In-memory cache of parsed markdown documents.

Entries hold headings, TOC, slug index and metadata; section bodies are
always re-read from disk. Size is bounded with a boost-aware LRU/MRU
policy: each access records the value of a global access counter together
with the boost factor of its AccessContext, and the eviction score is
``(entry counter / global counter) * boost``.

Freshness comes from a file watcher supervised by WatchSupervisor; when the
watcher keeps failing the cache polls every cached file for mtime/size
changes instead. Every invalidation learned from the filesystem is
published on ``events`` so the fingerprint index can follow along.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from pathlib import Path

from docindex.cache.base_watcher import WatchEvent, WatchEventKind
from docindex.cache.events import CacheEventBus, DocumentEvent, DocumentEventKind
from docindex.cache.fingerprint import compute_fingerprint, hash_content
from docindex.cache.models import (
    AccessContext,
    AccessMetadata,
    CachedDocument,
    CacheOptions,
    CacheStats,
    DocumentMetadata,
    FingerprintEntry,
)
from docindex.cache.watch_supervisor import WatchMode, WatchState, WatchSupervisor
from docindex.cache.watcher_factory import WatcherFactory, default_watcher_factory
from docindex.core.errors import DocumentIOError
from docindex.core.models import FileSnapshot
from docindex.core.paths import normalize_doc_path, path_to_namespace
from docindex.extraction.md_extractor import document_title, extract_stats
from docindex.extraction.section_reader import read_section
from docindex.extraction.slug import validate_slug
from docindex.extraction.structure_detector import (
    build_slug_index,
    build_toc,
    list_headings,
)
from docindex.storage.local_io import LocalDocumentStore

logger = logging.getLogger(__name__)

_WATCH_EVENT_KINDS: dict[WatchEventKind, DocumentEventKind] = {
    WatchEventKind.ADD: DocumentEventKind.ADDED,
    WatchEventKind.CHANGE: DocumentEventKind.CHANGED,
    WatchEventKind.UNLINK: DocumentEventKind.DELETED,
}


class DocumentCache:
    """Parsed-document cache for one documentation root."""

    def __init__(
        self,
        store: LocalDocumentStore,
        options: CacheOptions | None = None,
        *,
        event_bus: CacheEventBus | None = None,
        watcher_factory: WatcherFactory | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._options = options or CacheOptions()
        self.events = event_bus or CacheEventBus()

        self._entries: dict[str, CachedDocument] = {}
        self._access: dict[str, AccessMetadata] = {}
        self._access_counter = 0
        self._generation = 0
        self._hits = 0
        self._misses = 0

        self._supervisor: WatchSupervisor | None = None
        if self._options.enable_watching:
            factory = watcher_factory or default_watcher_factory(
                store.root, self._options.watch_ignore_dirs
            )
            self._supervisor = WatchSupervisor(
                factory,
                self._on_watch_event,
                self.validate_cache_consistency,
                max_errors=self._options.max_watcher_errors,
                backoff_base_s=self._options.watcher_backoff_base_s,
                polling_interval_s=self._options.polling_interval_s,
                sleep=sleep,
            )

    # --- Lifecycle ---

    async def start(self) -> None:
        """Start file watching when enabled."""
        if self._supervisor is not None:
            await self._supervisor.start()

    async def close(self) -> None:
        """Stop watching/polling and drop every entry."""
        if self._supervisor is not None:
            await self._supervisor.close()
        self.clear()

    @property
    def supervisor(self) -> WatchSupervisor | None:
        return self._supervisor

    @property
    def watch_state(self) -> WatchState:
        if self._supervisor is None:
            return WatchState(WatchMode.DISABLED)
        return self._supervisor.state

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize_doc_path(path) in self._entries

    # --- Reads ---

    async def get_document(
        self, path: str, context: AccessContext = AccessContext.DIRECT
    ) -> CachedDocument | None:
        """Return a copy of the parsed document, loading it on a miss.

        Returns:
            The cached document, or None when the file does not exist.

        Raises:
            DocumentIOError: Any filesystem failure other than not-found.
            MalformedInputError: The document exceeds heading limits.
        """
        entry = await self._load(normalize_doc_path(path), context)
        return entry.model_copy(deep=True) if entry is not None else None

    async def _load(
        self, key: str, context: AccessContext
    ) -> CachedDocument | None:
        entry = self._entries.get(key)
        if entry is not None:
            self._hits += 1
            self._update_access(key, context)
            entry.metadata.last_accessed = datetime.now(timezone.utc)
            return entry

        self._misses += 1
        snapshot = await self._read(key)
        if snapshot is None:
            return None

        entry = self._build_entry(key, snapshot)
        self._entries[key] = entry
        self._update_access(key, context)
        self._enforce_cache_size()
        logger.debug("Loaded %s (%d headings)", key, len(entry.headings))
        return entry

    async def _read(self, key: str) -> FileSnapshot | None:
        try:
            return await self._store.read_snapshot(key)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise DocumentIOError(key, exc) from exc

    def _build_entry(self, key: str, snapshot: FileSnapshot) -> CachedDocument:
        content = snapshot.content
        headings = list_headings(content)
        title = document_title(headings, Path(key).stem)
        stats = extract_stats(content)
        fingerprint = compute_fingerprint(title, content)
        now = datetime.now(timezone.utc)
        self._generation += 1

        metadata = DocumentMetadata(
            path=key,
            title=title,
            last_modified=datetime.fromtimestamp(snapshot.mtime, timezone.utc),
            mtime=snapshot.mtime,
            size_bytes=snapshot.size,
            content_hash=fingerprint.content_hash,
            word_count=stats.word_count,
            link_count=stats.link_count,
            code_block_count=stats.code_block_count,
            last_accessed=now,
            cache_generation=self._generation,
            namespace=path_to_namespace(key),
            keywords=fingerprint.keywords,
            fingerprint_generated=fingerprint.generated_at,
        )
        return CachedDocument(
            metadata=metadata,
            headings=headings,
            toc=build_toc(headings),
            slug_index=build_slug_index(headings),
        )

    async def get_section_content(
        self,
        path: str,
        slug: str,
        context: AccessContext = AccessContext.DIRECT,
    ) -> str | None:
        """Return one section's markdown, re-read from disk.

        Returns None when the document or the slug does not exist.

        Raises:
            MalformedInputError: ``slug`` fails validation.
        """
        slug = validate_slug(slug)
        key = normalize_doc_path(path)
        entry = await self._load(key, context)
        if entry is None:
            return None
        if slug not in entry.slug_index and slug.rsplit("/", 1)[-1] not in entry.slug_index:
            return None

        snapshot = await self._read(key)
        if snapshot is None:
            return None
        return read_section(snapshot.content, slug)

    async def read_document_content(self, path: str) -> str | None:
        """Full file content, or None when the file does not exist."""
        snapshot = await self._read(normalize_doc_path(path))
        return snapshot.content if snapshot is not None else None

    def get_cached_paths(self) -> list[str]:
        return list(self._entries)

    # --- Fingerprints ---

    @staticmethod
    def create_fingerprint_entry(metadata: DocumentMetadata) -> FingerprintEntry:
        """Project document metadata onto a FingerprintEntry."""
        return FingerprintEntry(
            path=metadata.path,
            title=metadata.title,
            keywords=list(metadata.keywords),
            last_modified=metadata.last_modified,
            mtime=metadata.mtime,
            content_hash=metadata.content_hash,
            namespace=metadata.namespace,
        )

    def get_fingerprint_entry(self, path: str) -> FingerprintEntry | None:
        entry = self._entries.get(normalize_doc_path(path))
        if entry is None:
            return None
        return self.create_fingerprint_entry(entry.metadata)

    async def is_fingerprint_stale(self, path: str) -> bool:
        """Whether the cached fingerprint no longer matches the file.

        Uncached paths are never stale. Equal mtimes are trusted; otherwise
        the content hash decides. A vanished or unreadable file is stale.
        """
        key = normalize_doc_path(path)
        entry = self._entries.get(key)
        if entry is None:
            return False

        try:
            stat = await self._store.stat(key)
            if stat.st_mtime == entry.metadata.mtime:
                return False
            snapshot = await self._store.read_snapshot(key)
        except FileNotFoundError:
            return True
        except OSError as exc:
            logger.warning("Could not check fingerprint of %s: %s", key, exc)
            return True
        return hash_content(snapshot.content) != entry.metadata.content_hash

    # --- Invalidation ---

    def invalidate_document(self, path: str) -> bool:
        """Drop ``path`` and its access metadata. Returns True if it was cached."""
        key = normalize_doc_path(path)
        removed = self._remove(key)
        if removed:
            self._generation += 1
            logger.debug("Invalidated %s", key)
        return removed

    def invalidate_documents_by_prefix(self, prefix: str) -> int:
        """Drop every cached path inside folder ``prefix``. Returns the count."""
        folder = normalize_doc_path(prefix).rstrip("/")
        doomed = [
            key for key in self._entries
            if not folder or key == folder or key.startswith(folder + "/")
        ]
        for key in doomed:
            self._remove(key)
        if doomed:
            self._generation += 1
            logger.debug("Invalidated %d documents under %s", len(doomed), prefix)
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()
        self._access.clear()
        self._generation += 1

    def _remove(self, key: str) -> bool:
        self._access.pop(key, None)
        return self._entries.pop(key, None) is not None

    async def _on_watch_event(self, event: WatchEvent) -> None:
        try:
            key = self._store.to_doc_path(event.path)
        except ValueError:
            return
        if not key.endswith(".md"):
            return
        self.invalidate_document(key)
        await self.events.publish(DocumentEvent(_WATCH_EVENT_KINDS[event.kind], key))

    async def validate_cache_consistency(self) -> None:
        """Re-stat every cached file and invalidate the ones that moved on.

        Used as the polling fallback when the file watcher has given up.
        """
        for key in list(self._entries):
            entry = self._entries.get(key)
            if entry is None:
                continue
            try:
                stat = await self._store.stat(key)
            except FileNotFoundError:
                self.invalidate_document(key)
                await self.events.publish(DocumentEvent(DocumentEventKind.DELETED, key))
                continue
            except OSError as exc:
                logger.warning("Polling could not stat %s: %s", key, exc)
                continue
            if (
                stat.st_mtime != entry.metadata.mtime
                or stat.st_size != entry.metadata.size_bytes
            ):
                self.invalidate_document(key)
                await self.events.publish(DocumentEvent(DocumentEventKind.CHANGED, key))

    # --- Eviction ---

    def _update_access(self, key: str, context: AccessContext) -> None:
        self._access_counter += 1
        self._access[key] = AccessMetadata(
            timestamp=self._access_counter,
            context=context,
            boost_factor=self._options.boost_factors.get(context, 1.0),
        )

    def eviction_score(self, path: str) -> float | None:
        """Boosted recency score of a cached path (higher = more valuable under LRU)."""
        meta = self._access.get(normalize_doc_path(path))
        if meta is None or self._access_counter == 0:
            return None
        return (meta.timestamp / self._access_counter) * meta.boost_factor

    def _enforce_cache_size(self) -> None:
        while len(self._entries) > self._options.max_cache_size:
            scored = [
                (self.eviction_score(key) or 0.0, self._access[key].timestamp, key)
                for key in self._entries
                if key in self._access
            ]
            if not scored:
                break
            if self._options.eviction_policy == "mru":
                victim = max(scored)[2]
            else:
                victim = min(scored)[2]
            self._remove(victim)
            logger.debug("Evicted %s (%s policy)", victim, self._options.eviction_policy)

    # --- Stats ---

    def get_stats(self) -> CacheStats:
        timestamps = [meta.timestamp for meta in self._access.values()]
        boosted = {ctx.value: 0 for ctx in AccessContext}
        for meta in self._access.values():
            boosted[meta.context.value] += 1
        lookups = self._hits + self._misses
        return CacheStats(
            size=len(self._entries),
            max_size=self._options.max_cache_size,
            eviction_policy=self._options.eviction_policy,
            hits=self._hits,
            misses=self._misses,
            hit_rate=round(self._hits / lookups, 3) if lookups else 0.0,
            oldest_access=min(timestamps) if timestamps else None,
            newest_access=max(timestamps) if timestamps else None,
            boosted_documents=boosted,
            total_headings=sum(len(e.headings) for e in self._entries.values()),
            watch_mode=self.watch_state.mode.value,
        )
