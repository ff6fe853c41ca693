# src/discovery/keywords.py — v1
"""Weighted keyword extraction from markdown.

Sources, strongest first: YAML frontmatter ``keywords`` (exclusive when
present), title, headings, bold/italic emphasis, body text. A keyword found
in several sources keeps its highest weight and lists every source.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

import yaml

from docindex.cache.fingerprint import STOP_WORDS
from docindex.discovery.models import (
    KeywordExtractionResult,
    KeywordWeights,
    WeightedKeyword,
)

logger = logging.getLogger(__name__)

MAX_WEIGHTED_KEYWORDS = 50
DEFAULT_WEIGHTS = KeywordWeights()

_FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n([\s\S]*?)\r?\n---[ \t]*(?:\r?\n|$)")
_HEADING_RE = re.compile(r"^#{1,6}\s+(.+)$", re.MULTILINE)
_BOLD_RE = re.compile(r"(?:\*\*|__)([^*_\n]+)(?:\*\*|__)")
_ITALIC_RE = re.compile(r"(?<!\*)\*([^*\n]+)\*(?!\*)|(?<!_)_([^_\n]+)_(?!_)")
_NON_WORD_CHARS_RE = re.compile(r"[^\w]")
_ONLY_DIGITS_PUNCT_RE = re.compile(r"^[\d\W]+$")


def parse_frontmatter(content: str) -> dict | None:
    """Parse a leading ``---`` YAML block. Invalid or non-mapping YAML gives None."""
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return None
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        logger.warning("Ignoring malformed frontmatter: %s", exc)
        return None
    return data if isinstance(data, dict) else None


def remove_frontmatter(content: str) -> str:
    return _FRONTMATTER_RE.sub("", content, count=1)


def extract_explicit_keywords(content: str) -> list[str]:
    """Frontmatter ``keywords`` as a list or comma-separated string, lowercased."""
    frontmatter = parse_frontmatter(content)
    if not frontmatter:
        return []
    raw = frontmatter.get("keywords")
    if isinstance(raw, str):
        items: Iterable[object] = raw.split(",")
    elif isinstance(raw, list):
        items = raw
    else:
        return []
    cleaned = (str(item).strip().lower() for item in items if item is not None)
    return list(dict.fromkeys(k for k in cleaned if k))


def extract_words(text: str) -> list[str]:
    """Meaningful lowercase words: punctuation stripped, stop words removed."""
    words: list[str] = []
    for raw in text.lower().split():
        word = _NON_WORD_CHARS_RE.sub("", raw)
        if (
            len(word) > 2
            and word not in STOP_WORDS
            and not _ONLY_DIGITS_PUNCT_RE.match(word)
        ):
            words.append(word)
    return words


def extract_headings(content: str) -> list[str]:
    return [m.group(1).strip() for m in _HEADING_RE.finditer(content)]


def extract_emphasis(content: str) -> list[str]:
    """Text inside ``**bold**``, ``__bold__``, ``*italic*`` and ``_italic_``."""
    found = [m.group(1).strip() for m in _BOLD_RE.finditer(content)]
    for match in _ITALIC_RE.finditer(content):
        found.append((match.group(1) or match.group(2)).strip())
    return found


def _result(weighted: list[WeightedKeyword], explicit: bool) -> KeywordExtractionResult:
    return KeywordExtractionResult(
        weighted_keywords=weighted,
        keywords=[k.keyword for k in weighted],
        has_explicit_keywords=explicit,
        total_weight=sum(k.weight for k in weighted),
    )


def extract_weighted_keywords(
    title: str,
    content: str,
    weights: KeywordWeights = DEFAULT_WEIGHTS,
) -> KeywordExtractionResult:
    """Extract up to 50 keywords ranked by source weight."""
    explicit = extract_explicit_keywords(content)
    if explicit:
        return _result(
            [
                WeightedKeyword(keyword=k, weight=weights.frontmatter, sources=["frontmatter"])
                for k in explicit
            ],
            explicit=True,
        )

    merged: dict[str, WeightedKeyword] = {}

    def _add(words: Iterable[str], weight: float, source: str) -> None:
        for word in words:
            existing = merged.get(word)
            if existing is None:
                merged[word] = WeightedKeyword(keyword=word, weight=weight, sources=[source])
                continue
            existing.weight = max(existing.weight, weight)
            if source not in existing.sources:
                existing.sources.append(source)

    body = remove_frontmatter(content)
    _add(extract_words(title), weights.title, "title")
    _add(extract_words(" ".join(extract_headings(body))), weights.headings, "headings")
    _add(extract_words(" ".join(extract_emphasis(body))), weights.emphasis, "emphasis")
    _add(extract_words(body), weights.content, "content")

    ranked = sorted(merged.values(), key=lambda k: k.weight, reverse=True)
    return _result(ranked[:MAX_WEIGHTED_KEYWORDS], explicit=False)


def extract_keywords_with_fingerprint(
    title: str,
    content: str | None,
    fingerprint_keywords: list[str] | None = None,
    weights: KeywordWeights = DEFAULT_WEIGHTS,
) -> KeywordExtractionResult:
    """Use content when available, else fingerprint keywords, else the title."""
    if content:
        return extract_weighted_keywords(title, content, weights)
    if fingerprint_keywords:
        return _result(
            [
                WeightedKeyword(keyword=k, weight=weights.content, sources=["fingerprint"])
                for k in fingerprint_keywords
            ],
            explicit=False,
        )
    return extract_weighted_keywords(title, "", weights)
