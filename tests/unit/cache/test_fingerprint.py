# tests/unit/cache/test_fingerprint.py — v1
"""Tests for cache/fingerprint.py — keyword fingerprints and content hashes."""

from __future__ import annotations

import re

from docindex.cache.fingerprint import (
    MAX_FINGERPRINT_KEYWORDS,
    STOP_WORDS,
    compute_fingerprint,
    extract_fingerprint_keywords,
    extract_title,
    hash_content,
    tokenize,
)


class TestTokenize:
    def test_filters_short_stop_and_numeric_tokens(self):
        tokens = tokenize("The API is v2 and 2024 has 100% uptime")
        assert tokens == ["api", "uptime"]

    def test_strips_trailing_punctuation(self):
        assert tokenize("Tokens, sessions; cookies!?") == ["tokens", "sessions", "cookies"]

    def test_keeps_inner_punctuation(self):
        assert tokenize("use snake_case and e-mail") == ["use", "snake_case", "e-mail"]

    def test_lowercases(self):
        assert tokenize("JWT Gateway") == ["jwt", "gateway"]

    def test_stop_words_never_survive(self):
        assert tokenize(" ".join(sorted(STOP_WORDS))) == []


class TestExtractFingerprintKeywords:
    def test_first_seen_order_and_dedup(self):
        keywords = extract_fingerprint_keywords("Auth Tokens", "tokens rotate auth daily")
        assert keywords == ["auth", "tokens", "rotate", "daily"]

    def test_never_more_than_twenty(self):
        content = " ".join(f"word{i}x" for i in range(500))
        keywords = extract_fingerprint_keywords("Title", content)
        assert len(keywords) == MAX_FINGERPRINT_KEYWORDS
        assert keywords[0] == "title"

    def test_larger_cap_is_clamped(self):
        content = " ".join(f"term{i}x" for i in range(100))
        assert len(extract_fingerprint_keywords("", content, max_keywords=50)) == 20

    def test_smaller_cap_respected(self):
        assert len(extract_fingerprint_keywords("", "alpha beta gamma delta", 2)) == 2

    def test_empty_input(self):
        assert extract_fingerprint_keywords("", "") == []


class TestHashContent:
    def test_sixteen_hex_chars(self):
        digest = hash_content("hello")
        assert re.fullmatch(r"[0-9a-f]{16}", digest)

    def test_str_and_bytes_agree(self):
        assert hash_content("héllo") == hash_content("héllo".encode("utf-8"))

    def test_changes_with_content(self):
        assert hash_content("a") != hash_content("b")


class TestExtractTitle:
    def test_first_hash_line(self):
        assert extract_title("intro\n## Setup Guide\n# Later", "fallback") == "Setup Guide"

    def test_fallback_without_heading(self):
        assert extract_title("no headings here", "readme") == "readme"

    def test_empty_heading_skipped(self):
        assert extract_title("#\n# Real", "x") == "Real"


class TestComputeFingerprint:
    def test_keywords_and_hash_together(self):
        fp = compute_fingerprint("Auth", "token rotation")
        assert fp.keywords == ["auth", "token", "rotation"]
        assert fp.content_hash == hash_content("token rotation")
        assert fp.generated_at.tzinfo is not None

    def test_raw_bytes_are_hashed_when_given(self):
        fp = compute_fingerprint("Auth", "text", raw=b"raw bytes")
        assert fp.content_hash == hash_content(b"raw bytes")
