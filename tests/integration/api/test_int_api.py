# tests/integration/api/test_int_api.py — v1
"""Integration tests for a full DocumentManager session.

Edits go through the manager, are read back through the cache and show up
in listings, fingerprints and statistics. Real files in a temp directory.
"""

from __future__ import annotations

import pytest

from docindex.api.manager import create_document_manager
from docindex.cache.models import AccessContext
from docindex.core.errors import ConflictError, ErrorCode


class TestManagerSession:
    @pytest.mark.asyncio
    async def test_edit_cycle(self, settings):
        async with create_document_manager(settings) as manager:
            created = await manager.write_document(
                "/guides/release.md",
                "# Release Process\n\n## Tagging\n\nTag from main.\n\n## Publishing\n\nUpload wheels.\n",
            )
            section = await manager.get_section_content("/guides/release.md", "tagging")
            assert section == "## Tagging\n\nTag from main.\n"

            await manager.write_document(
                "/guides/release.md",
                "# Release Process\n\n## Tagging\n\nTag from a release branch.\n",
                expected_mtime=created.mtime,
            )
            section = await manager.get_section_content("/guides/release.md", "tagging")
            assert "release branch" in section
            assert await manager.get_section_content("/guides/release.md", "publishing") is None

            with pytest.raises(ConflictError) as exc_info:
                await manager.write_document(
                    "/guides/release.md", "# Stale\n", expected_mtime=created.mtime - 100
                )
            assert exc_info.value.to_dict()["code"] == ErrorCode.PRECONDITION_FAILED.value

            listing = await manager.list_documents()
            assert "/guides/release.md" in [d.path for d in listing.documents]
            fingerprints = await manager.list_document_fingerprints(namespace="guides")
            assert sorted(f.path for f in fingerprints) == [
                "/guides/release.md",
                "/guides/setup.md",
            ]

    @pytest.mark.asyncio
    async def test_bounded_cache_during_listing(self, settings):
        small = settings.model_copy(update={"cache_max_size": 2})
        async with create_document_manager(small) as manager:
            await manager.get_document("/api/auth.md", AccessContext.REFERENCE)
            listing = await manager.list_documents()
            stats = manager.get_stats()
        assert len(listing.documents) == 4
        assert stats.cache.size == 2
        assert sum(stats.cache.boosted_documents.values()) == 2
        assert stats.cache.misses >= 4
