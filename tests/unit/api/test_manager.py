# tests/unit/api/test_manager.py — v1
"""Tests for api/manager.py — wiring, listings, fingerprints, writes."""

from __future__ import annotations

import os

import pytest
import pytest_asyncio

from docindex.api.manager import DocumentManager, create_document_manager
from docindex.cache.watch_supervisor import WatchMode
from docindex.core.errors import ConflictError


def set_mtime(path, mtime: float) -> None:
    os.utime(path, (mtime, mtime))


@pytest_asyncio.fixture
async def manager(settings):
    manager = create_document_manager(settings)
    async with manager:
        yield manager


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_builds_index(self, settings):
        manager = create_document_manager(settings)
        assert isinstance(manager, DocumentManager)
        await manager.start()
        stats = manager.get_stats()
        assert stats.index.initialized
        assert stats.index.documents == 4
        assert stats.cache.watch_mode == "disabled"
        assert stats.docs_root == str(settings.docs_root.resolve())
        await manager.close()
        assert not manager.index.is_initialized
        assert len(manager.cache) == 0

    @pytest.mark.asyncio
    async def test_managers_are_independent(self, settings):
        first = create_document_manager(settings)
        second = create_document_manager(settings)
        async with first:
            await first.get_document("/api/auth.md")
            assert len(second.cache) == 0
            assert not second.index.is_initialized

    @pytest.mark.asyncio
    async def test_watching_enabled(self, settings, watcher_factory):
        watched = settings.model_copy(update={"cache_enable_watching": True})
        manager = create_document_manager(watched, watcher_factory=watcher_factory)
        async with manager:
            assert manager.cache.watch_state.mode == WatchMode.WATCHING
        assert watcher_factory.current.closed

    @pytest.mark.asyncio
    async def test_start_with_symlink_outside_root(self, settings, docs_root, tmp_path):
        outside = tmp_path / "shared" / "glossary.md"
        outside.parent.mkdir()
        outside.write_text("# Glossary\n\nshared terms\n")
        (docs_root / "glossary.md").symlink_to(outside)

        async with create_document_manager(settings) as manager:
            assert manager.get_stats().index.documents == 4
            listing = await manager.list_documents()
        assert "/glossary.md" not in {d.path for d in listing.documents}
        assert listing.errors == []


class TestReads:
    @pytest.mark.asyncio
    async def test_get_document(self, manager):
        doc = await manager.get_document("api/auth.md")
        assert doc.metadata.title == "Authentication Guide"

    @pytest.mark.asyncio
    async def test_section_and_content(self, manager):
        section = await manager.get_section_content("/guides/setup.md", "database")
        assert section == "## Database\n\nCreate a Postgres database before starting.\n"
        content = await manager.get_document_content("/guides/setup.md")
        assert content.startswith("# Local Setup")

    @pytest.mark.asyncio
    async def test_list_document_paths(self, manager):
        assert len(await manager.list_document_paths()) == 4

    @pytest.mark.asyncio
    async def test_list_documents_newest_first(self, docs_root, settings):
        set_mtime(docs_root / "index.md", 1_000_000)
        set_mtime(docs_root / "guides" / "setup.md", 2_000_000)
        set_mtime(docs_root / "api" / "specs" / "endpoints.md", 3_000_000)
        set_mtime(docs_root / "api" / "auth.md", 4_000_000)
        async with create_document_manager(settings) as manager:
            listing = await manager.list_documents()
        assert [d.path for d in listing.documents] == [
            "/api/auth.md",
            "/api/specs/endpoints.md",
            "/guides/setup.md",
            "/index.md",
        ]
        assert listing.documents[0].heading_count == 4
        assert listing.errors == []

    @pytest.mark.asyncio
    async def test_list_documents_reports_errors(self, docs_root, settings, doc_writer):
        doc_writer(docs_root, "broken.md", "# Title\n\n##\n")
        async with create_document_manager(settings) as manager:
            listing = await manager.list_documents()
        assert len(listing.documents) == 4
        assert listing.errors == [
            {"path": "/broken.md", "code": "INVALID_TITLE", "message": "Title cannot be empty"}
        ]


class TestFingerprints:
    @pytest.mark.asyncio
    async def test_from_index(self, manager):
        entries = await manager.list_document_fingerprints()
        assert len(entries) == 4

    @pytest.mark.asyncio
    async def test_namespace_filter(self, manager):
        entries = await manager.list_document_fingerprints(namespace="api")
        assert sorted(e.path for e in entries) == ["/api/auth.md", "/api/specs/endpoints.md"]

    @pytest.mark.asyncio
    async def test_refresh_stale_entries(self, manager, docs_root):
        await manager.get_document("/guides/setup.md")
        path = docs_root / "guides" / "setup.md"
        path.write_text("# Local Setup\n\nUse kubernetes instead.\n")
        set_mtime(path, path.stat().st_mtime + 10)
        (docs_root / "index.md").unlink()

        entries = {e.path: e for e in await manager.list_document_fingerprints(refresh_stale=True)}
        assert "/index.md" not in entries
        assert "kubernetes" in entries["/guides/setup.md"].keywords
        assert "/guides/setup.md" not in manager.cache
        assert manager.index.get_fingerprint("/index.md") is None

    @pytest.mark.asyncio
    async def test_refresh_skips_unstattable_entry(self, manager, monkeypatch):
        real_stat = manager.store.stat

        async def stat(path):
            if path == "/guides/setup.md":
                raise PermissionError(13, "Permission denied")
            return await real_stat(path)

        monkeypatch.setattr(manager.store, "stat", stat)
        entries = await manager.list_document_fingerprints(refresh_stale=True)
        assert sorted(e.path for e in entries) == [
            "/api/auth.md",
            "/api/specs/endpoints.md",
            "/index.md",
        ]
        assert manager.index.get_fingerprint("/guides/setup.md") is not None

    @pytest.mark.asyncio
    async def test_without_index_uses_cache(self, settings, docs_root):
        manager = create_document_manager(settings)
        assert await manager.list_document_fingerprints() == []
        await manager.get_document("/guides/setup.md")
        path = docs_root / "guides" / "setup.md"
        path.write_text("# Local Setup\n\nUse kubernetes instead.\n")
        set_mtime(path, path.stat().st_mtime + 10)

        entries = await manager.list_document_fingerprints(refresh_stale=True)
        assert [e.path for e in entries] == ["/guides/setup.md"]
        assert "kubernetes" in entries[0].keywords


class TestWrites:
    @pytest.mark.asyncio
    async def test_write_new_document(self, manager, docs_root):
        await manager.write_document("/guides/deploy.md", "# Deploy\n\nShip with kubernetes.\n")
        assert (docs_root / "guides" / "deploy.md").exists()
        assert manager.index.find_candidates("kubernetes") == {"/guides/deploy.md"}
        doc = await manager.get_document("/guides/deploy.md")
        assert doc.metadata.title == "Deploy"

    @pytest.mark.asyncio
    async def test_write_refreshes_cache(self, manager):
        before = await manager.get_document("/guides/setup.md")
        await manager.write_document(
            "/guides/setup.md", "# Setup v2\n", expected_mtime=before.metadata.mtime
        )
        after = await manager.get_document("/guides/setup.md")
        assert after.metadata.title == "Setup v2"
        assert manager.index.get_fingerprint("/guides/setup.md").title == "Setup v2"

    @pytest.mark.asyncio
    async def test_write_conflict(self, manager):
        with pytest.raises(ConflictError):
            await manager.write_document("/guides/setup.md", "# Lost\n", expected_mtime=1.0)
        doc = await manager.get_document("/guides/setup.md")
        assert doc.metadata.title == "Local Setup"

    @pytest.mark.asyncio
    async def test_delete(self, manager):
        await manager.get_document("/guides/setup.md")
        assert await manager.delete_document("/guides/setup.md") is True
        assert "/guides/setup.md" not in manager.cache
        assert manager.index.get_fingerprint("/guides/setup.md") is None
        assert await manager.get_document("/guides/setup.md") is None

    @pytest.mark.asyncio
    async def test_invalidate_folder(self, manager):
        await manager.get_document("/api/auth.md")
        await manager.get_document("/api/specs/endpoints.md")
        await manager.get_document("/guides/setup.md")
        assert await manager.invalidate_folder("/api") == 2
        assert manager.cache.get_cached_paths() == ["/guides/setup.md"]
        assert manager.index.get_stats().documents == 4
