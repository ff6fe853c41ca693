# src/extraction/structure_detector.py — v1
"""Detect markdown structure: ATX headings, table of contents, slug index.

Headings inside fenced code blocks are ignored. Parent links point at the
nearest preceding heading of smaller depth.
"""

from __future__ import annotations

import re

from docindex.core.errors import ErrorCode, MalformedInputError
from docindex.core.models import Heading, TocNode
from docindex.extraction.slug import title_to_slug

MAX_HEADINGS_PER_DOCUMENT = 1000
MAX_HEADING_TITLE_LENGTH = 200

_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
_CLOSING_HASHES_RE = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")


def iter_heading_lines(text: str) -> list[tuple[int, int, str]]:
    """Return ``(line_number, depth, title)`` for every ATX heading.

    Lines inside fenced code blocks are skipped.
    """
    found: list[tuple[int, int, str]] = []
    fence: str | None = None
    for line_no, line in enumerate(text.split("\n")):
        fence_match = _FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker[0] * len(marker)
            elif marker.startswith(fence):
                fence = None
            continue
        if fence is not None:
            continue
        match = _HEADING_RE.match(line.rstrip("\r"))
        if not match:
            continue
        title = _CLOSING_HASHES_RE.sub("", match.group(2) or "").strip()
        found.append((line_no, len(match.group(1)), title))
    return found


def list_headings(text: str) -> list[Heading]:
    """Parse every heading of a markdown document in order.

    Raises:
        MalformedInputError: Too many headings, an empty title or a title
            longer than MAX_HEADING_TITLE_LENGTH.
    """
    raw = iter_heading_lines(text)
    if len(raw) > MAX_HEADINGS_PER_DOCUMENT:
        raise MalformedInputError(
            f"Document has too many headings (max {MAX_HEADINGS_PER_DOCUMENT})",
            ErrorCode.INVALID_SECTION_CONTENT,
            {"heading_count": len(raw)},
        )

    headings: list[Heading] = []
    # Stack of indexes of open ancestors, shallowest first.
    stack: list[int] = []
    for line_no, depth, title in raw:
        if len(title) > MAX_HEADING_TITLE_LENGTH:
            raise MalformedInputError(
                f"Heading title too long (max {MAX_HEADING_TITLE_LENGTH} characters)",
                ErrorCode.INVALID_TITLE,
                {"title": title[:50], "line": line_no + 1},
            )
        slug = title_to_slug(title)

        while stack and headings[stack[-1]].depth >= depth:
            stack.pop()
        index = len(headings)
        headings.append(
            Heading(
                index=index,
                depth=depth,
                title=title,
                slug=slug,
                parent_index=stack[-1] if stack else None,
                line=line_no,
            )
        )
        stack.append(index)
    return headings


def build_toc(headings: list[Heading]) -> list[TocNode]:
    """Nest headings into a table-of-contents tree."""
    roots: list[TocNode] = []
    nodes: dict[int, TocNode] = {}
    for heading in headings:
        node = TocNode(title=heading.title, slug=heading.slug, depth=heading.depth)
        nodes[heading.index] = node
        if heading.parent_index is None:
            roots.append(node)
        else:
            nodes[heading.parent_index].children.append(node)
    return roots


def hierarchical_slug(headings: list[Heading], heading: Heading) -> str:
    """Slug path from the outermost ancestor down to ``heading``."""
    parts = [heading.slug]
    parent = heading.parent_index
    while parent is not None:
        parts.append(headings[parent].slug)
        parent = headings[parent].parent_index
    return "/".join(reversed(parts))


def build_slug_index(headings: list[Heading]) -> dict[str, int]:
    """Map flat and hierarchical slugs to heading positions.

    The first heading wins when two share a slug.
    """
    index: dict[str, int] = {}
    for heading in headings:
        index.setdefault(heading.slug, heading.index)
        if heading.parent_index is not None:
            index.setdefault(hierarchical_slug(headings, heading), heading.index)
    return index
