# src/api/models.py — v1
"""API-level models: DocumentInfo, DocumentListing, ManagerStats."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from docindex.cache.models import CacheStats, IndexStats


class DocumentInfo(BaseModel):
    """Summary row for one document in a listing."""

    path: str
    title: str
    namespace: str
    last_modified: datetime
    word_count: int
    heading_count: int


class DocumentListing(BaseModel):
    """Documents sorted by last modification (newest first) plus per-file errors."""

    documents: list[DocumentInfo] = Field(default_factory=list)
    errors: list[dict[str, str]] = Field(default_factory=list)


class ManagerStats(BaseModel):
    docs_root: str
    cache: CacheStats
    index: IndexStats
