# src/api/manager.py — v1
"""Document manager: one cache, one fingerprint index, one event bus per session.

Usage:
    from docindex.api.manager import create_document_manager
    manager = create_document_manager(settings)
    await manager.start()
    doc = await manager.get_document("/api/auth.md")
    await manager.close()

Nothing here is a process-wide singleton. Tests and embedders build as many
managers as they like, each with its own collaborators.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from docindex.api.models import DocumentInfo, DocumentListing, ManagerStats
from docindex.cache.document_cache import DocumentCache
from docindex.cache.events import CacheEventBus
from docindex.cache.fingerprint_index import FingerprintIndex
from docindex.cache.models import AccessContext, CacheOptions, CachedDocument, FingerprintEntry
from docindex.cache.watcher_factory import WatcherFactory
from docindex.config.settings import Settings
from docindex.core.errors import DocIndexError
from docindex.core.models import FileSnapshot
from docindex.core.paths import is_under_namespace, normalize_doc_path
from docindex.logging.context import set_operation_context, set_session_context
from docindex.storage.local_io import LocalDocumentStore

logger = logging.getLogger(__name__)


class DocumentManager:
    """Facade over the cache, the fingerprint index and the filesystem."""

    def __init__(
        self,
        store: LocalDocumentStore,
        cache: DocumentCache,
        index: FingerprintIndex,
    ) -> None:
        self._store = store
        self._cache = cache
        self._index = index
        index.attach(cache.events)

    @property
    def store(self) -> LocalDocumentStore:
        return self._store

    @property
    def cache(self) -> DocumentCache:
        return self._cache

    @property
    def index(self) -> FingerprintIndex:
        return self._index

    async def start(self) -> None:
        """Build the fingerprint index and start watching the docs root."""
        set_session_context(str(self._store.root))
        await self._index.initialize()
        await self._cache.start()

    async def close(self) -> None:
        await self._cache.close()
        self._index.clear()

    async def __aenter__(self) -> DocumentManager:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # --- Reads ---

    async def get_document(
        self, path: str, context: AccessContext = AccessContext.DIRECT
    ) -> CachedDocument | None:
        set_operation_context("get_document", normalize_doc_path(path))
        return await self._cache.get_document(path, context)

    async def get_section_content(self, path: str, slug: str) -> str | None:
        set_operation_context("get_section_content", normalize_doc_path(path))
        return await self._cache.get_section_content(path, slug)

    async def get_document_content(self, path: str) -> str | None:
        return await self._cache.read_document_content(path)

    async def list_document_paths(self) -> list[str]:
        return self._store.list_document_paths()

    async def list_documents(self) -> DocumentListing:
        """Load every markdown document, newest first.

        Documents that fail to load are reported in ``errors`` instead of
        aborting the listing.
        """
        set_operation_context("list_documents")
        listing = DocumentListing()
        for path in self._store.list_document_paths():
            try:
                document = await self._cache.get_document(path, AccessContext.SEARCH)
            except DocIndexError as exc:
                logger.warning("Could not load %s: %s", path, exc)
                listing.errors.append({"path": path, "code": exc.code.value, "message": exc.message})
                continue
            if document is None:
                continue
            meta = document.metadata
            listing.documents.append(
                DocumentInfo(
                    path=meta.path,
                    title=meta.title,
                    namespace=meta.namespace,
                    last_modified=meta.last_modified,
                    word_count=meta.word_count,
                    heading_count=len(document.headings),
                )
            )
        listing.documents.sort(key=lambda d: d.last_modified, reverse=True)
        return listing

    async def list_document_fingerprints(
        self, refresh_stale: bool = False, namespace: str | None = None
    ) -> list[FingerprintEntry]:
        """Fingerprints for Stage-1 discovery.

        Served from the fingerprint index once it is initialized, otherwise
        from documents currently held by the cache. With ``refresh_stale``
        every entry whose file changed since it was fingerprinted is
        recomputed first, and entries for vanished files are dropped.
        """
        set_operation_context("list_document_fingerprints")
        if self._index.is_initialized:
            entries = self._index.list_fingerprints(namespace)
            if refresh_stale:
                entries = await self._refresh_index_entries(entries)
            return entries

        entries = []
        for path in self._cache.get_cached_paths():
            if refresh_stale and await self._cache.is_fingerprint_stale(path):
                self._cache.invalidate_document(path)
                try:
                    await self._cache.get_document(path, AccessContext.SEARCH)
                except DocIndexError as exc:
                    logger.warning("Could not refresh %s: %s", path, exc)
                    continue
            entry = self._cache.get_fingerprint_entry(path)
            if entry is not None and (
                namespace is None or is_under_namespace(entry.namespace, namespace)
            ):
                entries.append(entry)
        return entries

    async def _refresh_index_entries(
        self, entries: list[FingerprintEntry]
    ) -> list[FingerprintEntry]:
        fresh: list[FingerprintEntry] = []
        for entry in entries:
            try:
                stat = await self._store.stat(entry.path)
            except FileNotFoundError:
                self._index.invalidate_document(entry.path)
                continue
            except OSError as exc:
                logger.warning("Cannot stat %s, leaving it out: %s", entry.path, exc)
                continue
            if stat.st_mtime == entry.mtime:
                fresh.append(entry)
                continue
            refreshed = await self._index.refresh_document(entry.path)
            self._cache.invalidate_document(entry.path)
            if refreshed is not None:
                fresh.append(refreshed)
        return fresh

    # --- Writes ---

    async def write_document(
        self, path: str, content: str, expected_mtime: float | None = None
    ) -> FileSnapshot:
        """Write a document and bring the cache and index up to date.

        Raises:
            ConflictError: The file changed since ``expected_mtime``.
        """
        key = normalize_doc_path(path)
        set_operation_context("write_document", key)
        snapshot = await self._store.write_with_precondition(key, content, expected_mtime)
        await self._after_change(key)
        return snapshot

    async def delete_document(self, path: str) -> bool:
        key = normalize_doc_path(path)
        set_operation_context("delete_document", key)
        removed = await self._store.delete(key)
        await self._after_change(key)
        return removed

    async def invalidate_folder(self, prefix: str) -> int:
        """Drop cache entries under ``prefix`` and re-index its documents."""
        count = self._cache.invalidate_documents_by_prefix(prefix)
        folder = normalize_doc_path(prefix).strip("/")
        for entry in self._index.list_fingerprints(folder or None):
            await self._index.refresh_document(entry.path)
        return count

    async def _after_change(self, key: str) -> None:
        self._cache.invalidate_document(key)
        await self._index.refresh_document(key)

    def get_stats(self) -> ManagerStats:
        return ManagerStats(
            docs_root=str(self._store.root),
            cache=self._cache.get_stats(),
            index=self._index.get_stats(),
        )


def create_document_manager(
    settings: Settings | None = None,
    *,
    watcher_factory: WatcherFactory | None = None,
    sleep: Callable[[float], Awaitable[None]] | None = None,
) -> DocumentManager:
    """Wire a manager from settings.

    Args:
        settings: Application settings. Loaded from .env if None.
        watcher_factory: Override the file watcher (tests inject fakes).
        sleep: Override the watcher backoff sleep.
    """
    if settings is None:
        settings = Settings()
    store = LocalDocumentStore(settings.docs_root)
    options = CacheOptions.from_settings(settings)
    extra = {"sleep": sleep} if sleep is not None else {}
    cache = DocumentCache(
        store,
        options,
        event_bus=CacheEventBus(),
        watcher_factory=watcher_factory,
        **extra,
    )
    index = FingerprintIndex(
        store,
        preview_bytes=settings.fingerprint_preview_bytes,
        max_keywords=settings.fingerprint_max_keywords,
    )
    logger.debug("Document manager created for %s", store.root)
    return DocumentManager(store, cache, index)
