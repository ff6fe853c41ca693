# src/extraction/section_reader.py — v1
"""Slice a single section out of a markdown document.

A section is its heading line plus everything up to (not including) the
next heading of the same or shallower depth.
"""

from __future__ import annotations

from docindex.core.models import Heading
from docindex.extraction.slug import validate_slug
from docindex.extraction.structure_detector import hierarchical_slug, list_headings


def find_heading(headings: list[Heading], slug: str) -> Heading | None:
    """Locate a heading by flat slug or by hierarchical ``parent/child`` path.

    A hierarchical path matches when it equals the heading's full ancestor
    path or a trailing part of it.
    """
    if "/" not in slug:
        return next((h for h in headings if h.slug == slug), None)
    for heading in headings:
        full = hierarchical_slug(headings, heading)
        if full == slug or full.endswith("/" + slug):
            return heading
    return None


def read_section(text: str, slug: str) -> str | None:
    """Return the markdown of the section addressed by ``slug``.

    Returns None when no heading matches.

    Raises:
        MalformedInputError: ``slug`` fails validation.
    """
    slug = validate_slug(slug)
    headings = list_headings(text)
    target = find_heading(headings, slug)
    if target is None:
        return None

    lines = text.split("\n")
    end = len(lines)
    for heading in headings[target.index + 1 :]:
        if heading.depth <= target.depth:
            end = heading.line
            break
    return "\n".join(lines[target.line : end]).rstrip() + "\n"
