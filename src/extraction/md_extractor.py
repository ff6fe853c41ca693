# src/extraction/md_extractor.py — v1
"""Markdown statistics: title, word, link and code block counts."""

from __future__ import annotations

import re
from dataclasses import dataclass

from docindex.core.models import Heading

_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_CODE_BLOCK_RE = re.compile(r"```[\s\S]*?```")


@dataclass(frozen=True)
class DocumentStats:
    word_count: int
    link_count: int
    code_block_count: int


def extract_stats(text: str) -> DocumentStats:
    """Count whitespace-separated words, inline links and fenced code blocks."""
    return DocumentStats(
        word_count=len(text.split()),
        link_count=len(_LINK_RE.findall(text)),
        code_block_count=len(_CODE_BLOCK_RE.findall(text)),
    )


def document_title(headings: list[Heading], fallback: str) -> str:
    """First level-1 heading, else the first heading, else ``fallback``."""
    for heading in headings:
        if heading.depth == 1:
            return heading.title
    if headings:
        return headings[0].title
    return fallback
