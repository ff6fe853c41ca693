# tests/unit/extraction/test_section_reader.py — v1
"""Tests for extraction/section_reader.py."""

from __future__ import annotations

import pytest

from docindex.core.errors import MalformedInputError
from docindex.extraction.section_reader import find_heading, read_section
from docindex.extraction.structure_detector import list_headings

DOC = """# Guide

Intro.

## Install

Run the installer.

### Linux

apt install it

## Usage

Call it.
"""


class TestFindHeading:
    def test_flat(self):
        assert find_heading(list_headings(DOC), "usage").title == "Usage"

    def test_full_path_and_suffix(self):
        headings = list_headings(DOC)
        assert find_heading(headings, "guide/install/linux").title == "Linux"
        assert find_heading(headings, "install/linux").title == "Linux"

    def test_wrong_parent(self):
        assert find_heading(list_headings(DOC), "usage/linux") is None


class TestReadSection:
    def test_includes_subsections(self):
        section = read_section(DOC, "install")
        assert section == "## Install\n\nRun the installer.\n\n### Linux\n\napt install it\n"

    def test_last_section_runs_to_end(self):
        assert read_section(DOC, "usage") == "## Usage\n\nCall it.\n"

    def test_top_level_spans_document(self):
        assert read_section(DOC, "guide").endswith("Call it.\n")

    def test_missing(self):
        assert read_section(DOC, "nowhere") is None

    def test_invalid_slug(self):
        with pytest.raises(MalformedInputError):
            read_section(DOC, "bad\\slug")
