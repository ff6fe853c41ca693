# tests/unit/extraction/test_slug.py — v1
"""Tests for extraction/slug.py."""

from __future__ import annotations

import pytest

from docindex.core.errors import ErrorCode, MalformedInputError
from docindex.extraction.slug import MAX_SLUG_LENGTH, title_to_slug, validate_slug


class TestTitleToSlug:
    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Access Tokens", "access-tokens"),
            ("  Padded Title  ", "padded-title"),
            ("What's New?", "whats-new"),
            ("API v2.0 (beta)", "api-v20-beta"),
            ("snake_case and-dash", "snake_case-and-dash"),
            ("Übersicht", "übersicht"),
        ],
    )
    def test_github_style(self, title, expected):
        assert title_to_slug(title) == expected

    def test_duplicates_are_not_disambiguated(self):
        assert title_to_slug("Example") == title_to_slug("Example")

    def test_empty_title(self):
        with pytest.raises(MalformedInputError) as exc_info:
            title_to_slug("   ")
        assert exc_info.value.code == ErrorCode.INVALID_TITLE


class TestValidateSlug:
    def test_accepts_plain_and_hierarchical(self):
        assert validate_slug("access-tokens") == "access-tokens"
        assert validate_slug("guide/access-tokens") == "guide/access-tokens"

    def test_normalizes_to_nfc(self):
        assert validate_slug("cafe\u0301") == "caf\u00e9"

    @pytest.mark.parametrize(
        "slug",
        [
            "",
            "bad\x00slug",
            "tab\tslug",
            "back\\slash",
            "percent%20encoded",
            "bad\ufffeslug",
            " leading",
            "trailing ",
            "double  space",
            "guide//tokens",
            "/tokens",
            "x" * (MAX_SLUG_LENGTH + 1),
        ],
    )
    def test_rejects(self, slug):
        with pytest.raises(MalformedInputError) as exc_info:
            validate_slug(slug)
        assert exc_info.value.code == ErrorCode.INVALID_SLUG

    def test_max_length_is_allowed(self):
        assert validate_slug("x" * MAX_SLUG_LENGTH)
