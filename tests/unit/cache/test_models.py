# tests/unit/cache/test_models.py — v1
"""Tests for cache/models.py."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from docindex.cache.models import AccessContext, CacheOptions, FingerprintEntry
from docindex.config.settings import Settings


class TestCacheOptions:
    def test_defaults(self):
        options = CacheOptions()
        assert options.max_cache_size == 100
        assert options.eviction_policy == "lru"
        assert options.boost_factors[AccessContext.REFERENCE] == 2.0

    def test_from_settings(self, tmp_path):
        settings = Settings(
            _env_file=None,
            docs_root=tmp_path,
            cache_max_size=7,
            cache_eviction_policy="mru",
            cache_boost_search=0.5,
            watch_ignore_dirs="build, vendor",
            watcher_max_errors=5,
        )
        options = CacheOptions.from_settings(settings)
        assert options.max_cache_size == 7
        assert options.eviction_policy == "mru"
        assert options.boost_factors[AccessContext.SEARCH] == 0.5
        assert options.watch_ignore_dirs == ("build", "vendor")
        assert options.max_watcher_errors == 5


class TestFingerprintEntry:
    def test_keyword_cap(self):
        with pytest.raises(ValidationError):
            FingerprintEntry(
                path="/a.md",
                title="A",
                keywords=[f"word{i}" for i in range(21)],
                last_modified=datetime.now(timezone.utc),
                content_hash="0" * 16,
                namespace="",
            )
