# src/cache/models.py — v1
"""Cache domain models: cached documents, fingerprints, access metadata, stats."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from docindex.core.models import Heading, TocNode


class AccessContext(str, Enum):
    """How a document was reached. Each context carries its own boost factor."""

    SEARCH = "search"
    DIRECT = "direct"
    REFERENCE = "reference"


DEFAULT_BOOST_FACTORS: dict[AccessContext, float] = {
    AccessContext.SEARCH: 1.0,
    AccessContext.DIRECT: 1.0,
    AccessContext.REFERENCE: 2.0,
}


@dataclass
class AccessMetadata:
    """Eviction bookkeeping for one cached path.

    ``timestamp`` is the value of the cache's access counter at the last
    access, not wall-clock time.
    """

    timestamp: int
    context: AccessContext
    boost_factor: float


@dataclass(frozen=True)
class CacheOptions:
    max_cache_size: int = 100
    eviction_policy: Literal["lru", "mru"] = "lru"
    boost_factors: dict[AccessContext, float] = field(
        default_factory=lambda: dict(DEFAULT_BOOST_FACTORS)
    )
    enable_watching: bool = True
    watch_ignore_dirs: tuple[str, ...] = ("node_modules", ".git", "dist")
    max_watcher_errors: int = 3
    watcher_backoff_base_s: float = 5.0
    polling_interval_s: float = 30.0

    @classmethod
    def from_settings(cls, settings: Any) -> CacheOptions:
        """Build options from a Settings instance."""
        return cls(
            max_cache_size=settings.cache_max_size,
            eviction_policy=settings.cache_eviction_policy,
            boost_factors={
                AccessContext.SEARCH: settings.cache_boost_search,
                AccessContext.DIRECT: settings.cache_boost_direct,
                AccessContext.REFERENCE: settings.cache_boost_reference,
            },
            enable_watching=settings.cache_enable_watching,
            watch_ignore_dirs=tuple(settings.watch_ignore_dirs_list),
            max_watcher_errors=settings.watcher_max_errors,
            watcher_backoff_base_s=settings.watcher_backoff_base_s,
            polling_interval_s=settings.polling_interval_s,
        )


class ContentFingerprint(BaseModel):
    """Keywords and content hash, always produced together."""

    keywords: list[str] = Field(max_length=20)
    content_hash: str
    generated_at: datetime


class DocumentMetadata(BaseModel):
    """Per-document metadata computed at load time."""

    path: str
    title: str
    last_modified: datetime
    mtime: float
    size_bytes: int
    content_hash: str
    word_count: int
    link_count: int
    code_block_count: int
    last_accessed: datetime
    cache_generation: int
    namespace: str
    keywords: list[str] = Field(default_factory=list, max_length=20)
    fingerprint_generated: datetime


class CachedDocument(BaseModel):
    """Everything the cache holds for one path. Section bodies are not stored."""

    metadata: DocumentMetadata
    headings: list[Heading]
    toc: list[TocNode]
    slug_index: dict[str, int]


class FingerprintEntry(BaseModel):
    """Lightweight per-document record used for Stage-1 candidate filtering."""

    path: str
    title: str
    keywords: list[str] = Field(max_length=20)
    last_modified: datetime
    mtime: float = 0.0
    content_hash: str
    namespace: str


class CacheStats(BaseModel):
    size: int
    max_size: int
    eviction_policy: str
    hits: int
    misses: int
    hit_rate: float
    oldest_access: int | None = None
    newest_access: int | None = None
    boosted_documents: dict[str, int]
    total_headings: int
    watch_mode: str


class IndexStats(BaseModel):
    documents: int
    keywords: int
    avg_keywords_per_doc: float
    initialized: bool
