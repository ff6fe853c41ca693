# src/cache/fingerprint.py — v3
"""Keyword fingerprints for markdown documents.

A fingerprint is a short ordered keyword list (at most 20 entries) plus a
truncated SHA-256 of the content. Both are always computed in the same call
so a stale hash can never sit next to fresh keywords.
"""

from __future__ import annotations

import hashlib
import re
from datetime import datetime, timezone

from docindex.cache.models import ContentFingerprint

MAX_FINGERPRINT_KEYWORDS = 20
HASH_LENGTH = 16

STOP_WORDS: frozenset[str] = frozenset(
    {
        "the", "and", "for", "with", "this", "that", "will", "can", "are",
        "you", "how", "what", "when", "where", "why", "who", "which", "was",
        "were", "been", "have", "has", "had", "should", "would", "could",
        "may", "might", "must", "shall", "not", "but", "however", "therefore",
        "thus", "also", "such", "very", "more", "most", "much", "many",
        "some", "any", "all",
    }
)

_TRAILING_PUNCT_RE = re.compile(r"[.,;:!?]+$")
_NON_WORD_RE = re.compile(r"^[\d\W]+$")


def is_meaningful_token(token: str) -> bool:
    """Length > 2, not a stop word, not purely digits/punctuation."""
    return (
        len(token) > 2
        and token not in STOP_WORDS
        and not _NON_WORD_RE.match(token)
    )


def tokenize(text: str) -> list[str]:
    """Lowercase, whitespace-split, strip trailing punctuation, filter."""
    tokens: list[str] = []
    for raw in text.lower().split():
        token = _TRAILING_PUNCT_RE.sub("", raw)
        if is_meaningful_token(token):
            tokens.append(token)
    return tokens


def extract_fingerprint_keywords(
    title: str,
    content: str,
    max_keywords: int = MAX_FINGERPRINT_KEYWORDS,
) -> list[str]:
    """Distinct tokens of ``title + content`` in first-seen order.

    Title tokens come first, so they survive truncation.
    """
    limit = min(max_keywords, MAX_FINGERPRINT_KEYWORDS)
    unique = dict.fromkeys(tokenize(f"{title} {content}"))
    return list(unique)[:limit]


def hash_content(data: bytes | str) -> str:
    """SHA-256 hex digest truncated to 16 characters."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()[:HASH_LENGTH]


def extract_title(text: str, fallback: str) -> str:
    """First line starting with ``#`` stripped of its hashes, else ``fallback``."""
    for line in text.split("\n"):
        stripped = line.strip()
        if stripped.startswith("#"):
            title = stripped.lstrip("#").strip()
            if title:
                return title
    return fallback


def compute_fingerprint(
    title: str,
    content: str,
    raw: bytes | None = None,
    max_keywords: int = MAX_FINGERPRINT_KEYWORDS,
) -> ContentFingerprint:
    """Compute keywords and content hash in one step.

    Args:
        title: Document title.
        content: Decoded text to extract keywords from.
        raw: Bytes to hash; defaults to ``content`` encoded as UTF-8.
        max_keywords: Keyword cap, never above 20.
    """
    return ContentFingerprint(
        keywords=extract_fingerprint_keywords(title, content, max_keywords),
        content_hash=hash_content(raw if raw is not None else content),
        generated_at=datetime.now(timezone.utc),
    )
