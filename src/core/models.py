# src/core/models.py — v1
"""Shared Pydantic models for markdown structure and file snapshots.

Modules import these from core.models rather than redefining them.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


# === MARKDOWN STRUCTURE ===


class Heading(BaseModel):
    """A single ATX heading in document order."""

    index: int
    depth: int = Field(ge=1, le=6)
    title: str
    slug: str
    parent_index: int | None = None
    line: int = 0


class TocNode(BaseModel):
    """Table-of-contents node; children are deeper headings nested under it."""

    title: str
    slug: str
    depth: int
    children: list[TocNode] = Field(default_factory=list)


# === FILESYSTEM ===


class FileSnapshot(BaseModel):
    """File content together with the stat data it was read under."""

    content: str
    mtime: float
    size: int
