# src/discovery/related_docs.py — v1
"""Two-stage related-document discovery.

Stage 1 filters fingerprints cheaply by keyword overlap with the new
document's title and overview. Stage 2 loads the surviving candidates and
scores them with the full relevance engine. Manager failures never escape:
they turn into a ``success=False`` result that echoes the caller's inputs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from docindex.cache.models import AccessContext, CachedDocument, FingerprintEntry
from docindex.core.errors import DocIndexError, DocumentAnalysisError
from docindex.core.paths import normalize_doc_path, path_to_namespace
from docindex.discovery.keywords import extract_weighted_keywords
from docindex.discovery.models import (
    DiscoveryConfig,
    DiscoveryParams,
    DiscoveryResult,
    KeywordExtractionResult,
    RelatedDocumentSuggestion,
)
from docindex.discovery.relevance import calculate_relevance

logger = logging.getLogger(__name__)

OPERATION = "find_related_documents"


class DocumentSource(Protocol):
    """What discovery needs from a document manager."""

    async def list_document_fingerprints(
        self, refresh_stale: bool = False, namespace: str | None = None
    ) -> list[FingerprintEntry]: ...

    async def list_document_paths(self) -> list[str]: ...

    async def get_document(
        self, path: str, context: AccessContext = AccessContext.DIRECT
    ) -> CachedDocument | None: ...

    async def get_document_content(self, path: str) -> str | None: ...


@dataclass(frozen=True)
class _Candidate:
    path: str
    fingerprint_keywords: list[str] | None
    stage1_score: float


def fingerprint_overlap(source_keywords: list[str], fingerprint_keywords: list[str]) -> float:
    """Fraction of source keywords present in a fingerprint."""
    if not source_keywords:
        return 0.0
    fingerprint_set = set(fingerprint_keywords)
    matches = sum(1 for k in source_keywords if k in fingerprint_set)
    return matches / len(source_keywords)


async def find_related_documents(
    manager: DocumentSource | None,
    title: str,
    overview: str,
    exclude_path: str | None = None,
    *,
    namespace: str | None = None,
    limit: int | None = None,
    config: DiscoveryConfig | None = None,
    now: datetime | None = None,
) -> DiscoveryResult:
    """Suggest existing documents related to a new document.

    Args:
        manager: Source of fingerprints and documents.
        title: Title of the new document.
        overview: Overview text of the new document.
        exclude_path: Document path to leave out (usually the new document).
        namespace: Namespace of the new document; derived from
            ``exclude_path`` when omitted.
        limit: Maximum suggestions; defaults to ``config.max_suggestions``.
        config: Discovery thresholds and scoring flags.
        now: Reference time for recency scoring.

    Raises:
        DocumentAnalysisError: No manager or an empty title.
    """
    config = config or DiscoveryConfig()
    params = DiscoveryParams(
        title=title,
        overview=overview,
        exclude_path=exclude_path,
        namespace=namespace,
        limit=limit,
    )
    if manager is None:
        raise DocumentAnalysisError(
            "Document manager is required for related-document discovery",
            operation=OPERATION,
            recovery_suggestions=["Create a DocumentManager before running discovery"],
        )
    if not title or not title.strip():
        raise DocumentAnalysisError(
            "Title is required for related-document discovery",
            operation=OPERATION,
            context={"title": title},
            recovery_suggestions=["Provide a non-empty document title"],
        )

    exclude = normalize_doc_path(exclude_path) if exclude_path else None
    if namespace is None:
        namespace = path_to_namespace(exclude) if exclude else ""
    source_keywords = extract_weighted_keywords(title, overview, config.weights)

    try:
        candidates, used_fingerprints = await _select_candidates(
            manager, source_keywords, title, exclude, config
        )
        suggestions = await _score_candidates(
            manager, candidates, source_keywords, title, overview, namespace, config, now
        )
    except Exception as exc:
        logger.warning("Related-document discovery unavailable: %s", exc, exc_info=True)
        return DiscoveryResult(success=False, params=params, error=_error_info(exc))

    suggestions.sort(key=lambda s: (-s.relevance, s.path))
    cap = limit if limit is not None else config.max_suggestions
    return DiscoveryResult(
        success=True,
        suggestions=suggestions[: max(cap, 0)],
        params=params,
        used_fingerprints=used_fingerprints,
        candidates_considered=len(candidates),
    )


async def _select_candidates(
    manager: DocumentSource,
    source_keywords: KeywordExtractionResult,
    title: str,
    exclude: str | None,
    config: DiscoveryConfig,
) -> tuple[list[_Candidate], bool]:
    """Stage 1. Without any fingerprints every listed document is a candidate."""
    keywords = source_keywords.keywords or [
        w for w in title.lower().split() if len(w) > 2
    ]
    fingerprints = await manager.list_document_fingerprints(
        refresh_stale=config.refresh_stale
    )
    if not fingerprints:
        paths = await manager.list_document_paths()
        logger.debug("No fingerprints available, scoring all %d documents", len(paths))
        return [_Candidate(p, None, 0.0) for p in paths if p != exclude], False

    scored: list[_Candidate] = []
    for entry in fingerprints:
        if entry.path == exclude:
            continue
        score = fingerprint_overlap(keywords, entry.keywords)
        if score > config.fingerprint_threshold:
            scored.append(_Candidate(entry.path, entry.keywords, score))
    scored.sort(key=lambda c: (-c.stage1_score, c.path))
    logger.debug(
        "Stage 1 kept %d of %d fingerprints", min(len(scored), config.max_candidates),
        len(fingerprints),
    )
    return scored[: config.max_candidates], True


async def _score_candidates(
    manager: DocumentSource,
    candidates: list[_Candidate],
    source_keywords: KeywordExtractionResult,
    title: str,
    overview: str,
    namespace: str,
    config: DiscoveryConfig,
    now: datetime | None,
) -> list[RelatedDocumentSuggestion]:
    """Stage 2. A candidate that cannot be loaded or parsed is skipped."""
    suggestions: list[RelatedDocumentSuggestion] = []
    for candidate in candidates:
        try:
            document = await manager.get_document(candidate.path, AccessContext.SEARCH)
            if document is None:
                continue
            content = await manager.get_document_content(candidate.path)
        except DocIndexError as exc:
            logger.warning(
                "Skipping candidate %s (%s): %s", candidate.path, exc.code.value, exc
            )
            continue
        meta = document.metadata

        result = calculate_relevance(
            source_keywords=source_keywords,
            source_title=title,
            source_namespace=namespace,
            source_content=overview,
            target_title=meta.title,
            target_content=content,
            target_namespace=meta.namespace,
            target_path=candidate.path,
            target_last_modified=meta.last_modified,
            target_fingerprint_keywords=candidate.fingerprint_keywords or meta.keywords,
            features=config.features,
            now=now,
        )
        if result.relevance < config.min_relevance:
            continue
        suggestions.append(
            RelatedDocumentSuggestion(
                path=candidate.path,
                title=meta.title,
                namespace=meta.namespace,
                reason=result.explanation,
                relevance=round(result.relevance, 2),
                factors=result.factors,
            )
        )
    return suggestions


def _error_info(exc: Exception) -> dict:
    if isinstance(exc, DocIndexError):
        return exc.to_dict()
    return {"code": "SUGGESTIONS_UNAVAILABLE", "message": str(exc), "type": type(exc).__name__}
