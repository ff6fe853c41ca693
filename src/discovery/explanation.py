# src/discovery/explanation.py — v1
"""Turn relevance factors into a short human-readable reason."""

from __future__ import annotations

import re

from docindex.core.paths import namespace_label
from docindex.discovery.models import FactorName, PrimaryFactor, RelevanceFactors

MAX_PRIMARY_FACTORS = 3

PRIMARY_THRESHOLDS: dict[FactorName, float] = {
    "keyword_overlap": 0.1,
    "title_similarity": 0.05,
    "namespace_affinity": 0.05,
    "recency_boost": 0.02,
    "link_graph_boost": 0.1,
}

_KEYWORD_PHRASE_RE = re.compile(r"keyword overlap|shared keywords")


def _describe(factor: FactorName, score: float) -> str:
    if factor == "keyword_overlap":
        if score >= 0.7:
            return "strong keyword overlap"
        if score >= 0.4:
            return "good keyword overlap"
        return "shared keywords"
    if factor == "title_similarity":
        if score >= 0.2:
            return "very similar titles"
        if score >= 0.1:
            return "similar titles"
        return "related title words"
    if factor == "namespace_affinity":
        if score >= 0.2:
            return "same namespace"
        if score >= 0.15:
            return "related namespace structure"
        return "similar namespace"
    if factor == "recency_boost":
        if score >= 0.08:
            return "recently updated"
        if score >= 0.04:
            return "recent updates"
        return "updated recently"
    return "cross-referenced documentation"


def determine_primary_factors(factors: RelevanceFactors) -> list[PrimaryFactor]:
    """Factors above their threshold, strongest first, at most three."""
    primary: list[PrimaryFactor] = []
    for name, threshold in PRIMARY_THRESHOLDS.items():
        score = getattr(factors, name)
        if score >= threshold:
            primary.append(
                PrimaryFactor(factor=name, score=score, description=_describe(name, score))
            )
    primary.sort(key=lambda f: f.score, reverse=True)
    return primary[:MAX_PRIMARY_FACTORS]


def generate_explanation(
    primary: list[PrimaryFactor],
    namespace: str,
    has_explicit_keywords: bool = False,
) -> str:
    """Compose "X", "X with Y" or "X with Y and Z", plus a namespace suffix.

    The suffix is added only when no factor already talks about namespace
    or structure.
    """
    label = namespace_label(namespace)
    if not primary:
        return f"Related documentation in {label}"

    descriptions = [f.description for f in primary]
    if has_explicit_keywords:
        descriptions = [
            _KEYWORD_PHRASE_RE.sub("explicit keyword matches", d) for d in descriptions
        ]

    first = descriptions[0][0].upper() + descriptions[0][1:]
    if len(descriptions) == 1:
        text = first
    elif len(descriptions) == 2:
        text = f"{first} with {descriptions[1]}"
    else:
        text = f"{first} with {descriptions[1]} and {descriptions[2]}"

    if not any("namespace" in d or "structure" in d for d in descriptions):
        text += f" in {label}"
    return text
