# tests/unit/discovery/test_explanation.py — v1
"""Tests for discovery/explanation.py."""

from __future__ import annotations

from docindex.discovery.explanation import determine_primary_factors, generate_explanation
from docindex.discovery.models import RelevanceFactors


def explain(namespace: str = "api", explicit: bool = False, **scores: float) -> str:
    primary = determine_primary_factors(RelevanceFactors(**scores))
    return generate_explanation(primary, namespace, explicit)


class TestPrimaryFactors:
    def test_thresholds(self):
        primary = determine_primary_factors(
            RelevanceFactors(keyword_overlap=0.09, title_similarity=0.05, recency_boost=0.01)
        )
        assert [f.factor for f in primary] == ["title_similarity"]

    def test_top_three_by_score(self):
        primary = determine_primary_factors(
            RelevanceFactors(
                keyword_overlap=0.5,
                title_similarity=0.3,
                namespace_affinity=0.2,
                recency_boost=0.1,
                link_graph_boost=0.3,
            )
        )
        assert [f.factor for f in primary] == [
            "keyword_overlap",
            "title_similarity",
            "link_graph_boost",
        ]
        assert primary[2].description == "cross-referenced documentation"


class TestExplanation:
    def test_no_factors(self):
        assert explain() == "Related documentation in api"

    def test_root_namespace_label(self):
        assert explain(namespace="") == "Related documentation in root"

    def test_single_factor_gets_namespace_suffix(self):
        assert explain(recency_boost=0.1) == "Recently updated in api"

    def test_two_factors(self):
        assert (
            explain(keyword_overlap=0.8, namespace_affinity=0.2)
            == "Strong keyword overlap with same namespace"
        )

    def test_three_factors(self):
        text = explain(keyword_overlap=0.5, title_similarity=0.15, recency_boost=0.1)
        assert text == "Good keyword overlap with similar titles and recently updated in api"

    def test_structure_mention_suppresses_suffix(self):
        assert explain(namespace_affinity=0.15) == "Related namespace structure"

    def test_explicit_keywords_wording(self):
        assert explain(namespace="guides", explicit=True, keyword_overlap=0.3) == (
            "Explicit keyword matches in guides"
        )
        assert explain(explicit=True, keyword_overlap=0.9) == (
            "Strong explicit keyword matches in api"
        )
