# src/discovery/models.py — v1
"""Discovery domain models: weighted keywords, relevance factors, suggestions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, Field

FactorName = Literal[
    "keyword_overlap",
    "title_similarity",
    "namespace_affinity",
    "recency_boost",
    "link_graph_boost",
]


@dataclass(frozen=True)
class KeywordWeights:
    """Weight per keyword source. Frontmatter keywords override all others."""

    frontmatter: float = 5.0
    title: float = 3.0
    headings: float = 2.0
    emphasis: float = 1.5
    content: float = 1.0


class WeightedKeyword(BaseModel):
    keyword: str
    weight: float
    sources: list[str] = Field(default_factory=list)


class KeywordExtractionResult(BaseModel):
    weighted_keywords: list[WeightedKeyword]
    keywords: list[str]
    has_explicit_keywords: bool = False
    total_weight: float = 0.0


class ScoringFeatures(BaseModel):
    """Feature flags for optional relevance factors."""

    enable_link_graph_boost: bool = False


class RelevanceFactors(BaseModel):
    keyword_overlap: float = 0.0
    title_similarity: float = 0.0
    namespace_affinity: float = 0.0
    recency_boost: float = 0.0
    link_graph_boost: float = 0.0

    def total(self) -> float:
        return (
            self.keyword_overlap
            + self.title_similarity
            + self.namespace_affinity
            + self.recency_boost
            + self.link_graph_boost
        )


class PrimaryFactor(BaseModel):
    factor: FactorName
    score: float
    description: str


class RelevanceResult(BaseModel):
    relevance: float
    factors: RelevanceFactors
    primary_factors: list[PrimaryFactor]
    explanation: str


@dataclass(frozen=True)
class DiscoveryConfig:
    """Tunables for two-stage related-document discovery."""

    fingerprint_threshold: float = 0.3
    max_candidates: int = 10
    max_suggestions: int = 5
    min_relevance: float = 0.2
    refresh_stale: bool = True
    features: ScoringFeatures = field(default_factory=ScoringFeatures)
    weights: KeywordWeights = field(default_factory=KeywordWeights)

    @classmethod
    def from_settings(cls, settings: Any) -> DiscoveryConfig:
        return cls(
            fingerprint_threshold=settings.discovery_fingerprint_threshold,
            max_candidates=settings.discovery_max_candidates,
            max_suggestions=settings.discovery_max_suggestions,
            min_relevance=settings.discovery_min_relevance,
            refresh_stale=settings.discovery_refresh_stale,
            features=ScoringFeatures(
                enable_link_graph_boost=settings.scoring_enable_link_graph_boost
            ),
        )


class RelatedDocumentSuggestion(BaseModel):
    path: str
    title: str
    namespace: str
    reason: str
    relevance: float
    factors: RelevanceFactors


class DiscoveryParams(BaseModel):
    """The caller's original inputs, echoed back on every result."""

    title: str
    overview: str
    exclude_path: str | None = None
    namespace: str | None = None
    limit: int | None = None


class DiscoveryResult(BaseModel):
    success: bool
    suggestions: list[RelatedDocumentSuggestion] = Field(default_factory=list)
    params: DiscoveryParams
    used_fingerprints: bool = False
    candidates_considered: int = 0
    error: dict[str, Any] | None = None
