# src/discovery/relevance.py — v1
"""Five-factor relevance scoring between a source and a target document.

Factor ranges: keyword overlap 0-1, title similarity 0-0.3, namespace
affinity 0-0.2, recency 0-0.1, link-graph boost 0 or 0.3 (feature flag,
off by default). The final score is the sum capped at 1.0. A factor that
fails to compute counts as 0 and the others are still scored.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

from docindex.discovery.explanation import determine_primary_factors, generate_explanation
from docindex.discovery.keywords import extract_keywords_with_fingerprint
from docindex.discovery.models import (
    KeywordExtractionResult,
    RelevanceFactors,
    RelevanceResult,
    ScoringFeatures,
    WeightedKeyword,
)

logger = logging.getLogger(__name__)

MAX_TITLE_SIMILARITY = 0.3
LINK_GRAPH_BOOST = 0.3

NAMESPACE_SAME = 0.2
NAMESPACE_NESTED = 0.15
NAMESPACE_SIBLING = 0.1

# (max age in days, boost), checked in order.
RECENCY_TIERS: tuple[tuple[float, float], ...] = ((7, 0.1), (30, 0.05), (90, 0.02))

TITLE_STOP_WORDS: frozenset[str] = frozenset(
    {
        "the", "and", "for", "with", "this", "that", "guide", "documentation",
        "doc", "docs", "reference", "manual", "tutorial", "overview",
        "introduction", "getting", "started", "start", "how", "what", "when",
        "where", "why", "who", "which",
    }
)

_TITLE_WORD_RE = re.compile(r"\w+")


def calculate_keyword_overlap(
    source_keywords: Sequence[WeightedKeyword],
    target: KeywordExtractionResult,
) -> float:
    """Share of the source's keyword weight that the target also contains."""
    total = sum(k.weight for k in source_keywords)
    if total <= 0:
        return 0.0
    target_set = set(target.keywords)
    matched = sum(k.weight for k in source_keywords if k.keyword in target_set)
    return matched / total


def _title_words(title: str) -> list[str]:
    return [
        w for w in _TITLE_WORD_RE.findall(title.lower())
        if len(w) > 2 and w not in TITLE_STOP_WORDS
    ]


def calculate_title_similarity(source_title: str, target_title: str) -> float:
    source = source_title.strip().lower()
    target = target_title.strip().lower()
    if not source or not target:
        return 0.0
    if source == target:
        return MAX_TITLE_SIMILARITY

    source_words = set(_title_words(source))
    target_words = set(_title_words(target))
    if not source_words or not target_words:
        return 0.0
    matches = len(source_words & target_words)
    score = matches / max(len(source_words), len(target_words)) * MAX_TITLE_SIMILARITY
    return min(MAX_TITLE_SIMILARITY, score)


def calculate_namespace_affinity(source_namespace: str, target_namespace: str) -> float:
    """0.2 same, 0.15 nested either way, 0.1 siblings under one root, else 0."""
    source = source_namespace.strip("/")
    target = target_namespace.strip("/")
    if not source or not target:
        return 0.0
    if source == target:
        return NAMESPACE_SAME
    if source.startswith(target + "/") or target.startswith(source + "/"):
        return NAMESPACE_NESTED

    source_parts = source.split("/")
    target_parts = target.split("/")
    if (
        len(source_parts) >= 2
        and len(target_parts) >= 2
        and source_parts[0] == target_parts[0]
        and source_parts[1] != target_parts[1]
    ):
        return NAMESPACE_SIBLING
    return 0.0


def calculate_recency_boost(
    last_modified: datetime | str, now: datetime | None = None
) -> float:
    if isinstance(last_modified, str):
        last_modified = datetime.fromisoformat(last_modified)
    if last_modified.tzinfo is None:
        last_modified = last_modified.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    days = (now - last_modified).total_seconds() / 86400
    for max_days, boost in RECENCY_TIERS:
        if days <= max_days:
            return boost
    return 0.0


def calculate_link_graph_boost(
    source_content: str,
    target_path: str,
    features: ScoringFeatures,
) -> float:
    """0.3 when the source content references ``@...<target_path>``."""
    if not features.enable_link_graph_boost or not target_path:
        return 0.0
    pattern = re.compile(rf"@[^\s]*{re.escape(target_path)}", re.IGNORECASE)
    return LINK_GRAPH_BOOST if pattern.search(source_content) else 0.0


def _safe_factor(name: str, fn: Callable[..., float], *args: Any) -> float:
    try:
        return float(fn(*args))
    except Exception as exc:
        logger.warning("Relevance factor %s failed, scoring 0: %s", name, exc)
        return 0.0


def calculate_relevance(
    *,
    source_keywords: KeywordExtractionResult,
    source_title: str,
    source_namespace: str,
    source_content: str,
    target_title: str,
    target_content: str | None,
    target_namespace: str,
    target_path: str,
    target_last_modified: datetime | str,
    target_fingerprint_keywords: list[str] | None = None,
    features: ScoringFeatures | None = None,
    now: datetime | None = None,
) -> RelevanceResult:
    """Score a target document against a source with a factor breakdown."""
    features = features or ScoringFeatures()

    def _overlap() -> float:
        target_keywords = extract_keywords_with_fingerprint(
            target_title, target_content, target_fingerprint_keywords
        )
        return calculate_keyword_overlap(source_keywords.weighted_keywords, target_keywords)

    factors = RelevanceFactors(
        keyword_overlap=_safe_factor("keyword_overlap", _overlap),
        title_similarity=_safe_factor(
            "title_similarity", calculate_title_similarity, source_title, target_title
        ),
        namespace_affinity=_safe_factor(
            "namespace_affinity",
            calculate_namespace_affinity,
            source_namespace,
            target_namespace,
        ),
        recency_boost=_safe_factor(
            "recency_boost", calculate_recency_boost, target_last_modified, now
        ),
        link_graph_boost=_safe_factor(
            "link_graph_boost",
            calculate_link_graph_boost,
            source_content,
            target_path,
            features,
        ),
    )
    primary = determine_primary_factors(factors)
    return RelevanceResult(
        relevance=min(1.0, factors.total()),
        factors=factors,
        primary_factors=primary,
        explanation=generate_explanation(
            primary, target_namespace, source_keywords.has_explicit_keywords
        ),
    )
