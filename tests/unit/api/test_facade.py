# tests/unit/api/test_facade.py — v1
"""Tests for api/facade.py."""

from __future__ import annotations

import pytest

from docindex.api.facade import suggest_related_documents


class TestSuggestRelatedDocuments:
    @pytest.mark.asyncio
    async def test_returns_ranked_suggestions(self, settings):
        result = await suggest_related_documents(
            "Token Refresh",
            "JWT access tokens refresh rotation for the REST API",
            "/api/token-refresh.md",
            settings=settings,
        )
        assert result.success
        assert result.used_fingerprints
        assert result.suggestions[0].path == "/api/auth.md"

    @pytest.mark.asyncio
    async def test_watching_is_disabled(self, settings):
        watched = settings.model_copy(update={"cache_enable_watching": True})
        result = await suggest_related_documents("Local Setup", "postgres", settings=watched)
        assert result.success
        assert result.suggestions[0].path == "/guides/setup.md"
        assert watched.cache_enable_watching is True

    @pytest.mark.asyncio
    async def test_limit_and_namespace(self, settings):
        result = await suggest_related_documents(
            "Token Refresh",
            "JWT access tokens refresh rotation for the REST API",
            namespace="api",
            limit=1,
            settings=settings,
        )
        assert [s.path for s in result.suggestions] == ["/api/auth.md"]
        assert result.params.namespace == "api"
