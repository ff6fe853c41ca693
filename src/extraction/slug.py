# src/extraction/slug.py — v1
"""GitHub-style heading slugs and slug validation.

Slugs are generated statelessly: duplicate titles produce the same slug and
no ``-1`` disambiguation suffix is appended.
"""

from __future__ import annotations

import re
import unicodedata

from docindex.core.errors import ErrorCode, MalformedInputError

MAX_SLUG_LENGTH = 1000

# Everything that is not a word character, hyphen or space is dropped.
_STRIP_RE = re.compile(r"[^\w\- ]", re.UNICODE)
_DANGEROUS_RE = re.compile(r"[\x00-\x1f\x7f\ufffe\uffff\\%]")
_MULTI_SPACE_RE = re.compile(r"\s{2,}")


def title_to_slug(title: str) -> str:
    """Convert a heading title to its GitHub anchor slug.

    Raises:
        MalformedInputError: ``title`` is empty after trimming.
    """
    trimmed = title.strip()
    if not trimmed:
        raise MalformedInputError(
            "Title cannot be empty", ErrorCode.INVALID_TITLE, {"title": title}
        )
    return _STRIP_RE.sub("", trimmed.lower()).replace(" ", "-")


def validate_slug(slug: str) -> str:
    """Normalize ``slug`` to NFC and reject unsafe or malformed values.

    Hierarchical slugs (``parent/child``) must not contain empty segments.

    Returns:
        The normalized slug.

    Raises:
        MalformedInputError: code INVALID_SLUG.
    """
    normalized = unicodedata.normalize("NFC", slug)

    def _reject(reason: str) -> MalformedInputError:
        return MalformedInputError(
            f"Invalid slug: {reason}", ErrorCode.INVALID_SLUG, {"slug": normalized}
        )

    if not normalized:
        raise _reject("slug is empty")
    if _DANGEROUS_RE.search(normalized):
        raise _reject("control characters, backslashes or percent encoding")
    if len(normalized) > MAX_SLUG_LENGTH:
        raise _reject(f"longer than {MAX_SLUG_LENGTH} characters")
    if normalized.strip() != normalized or _MULTI_SPACE_RE.search(normalized):
        raise _reject("leading/trailing or repeated whitespace")
    if "/" in normalized and any(not part for part in normalized.split("/")):
        raise _reject("empty hierarchical segment")
    return normalized
