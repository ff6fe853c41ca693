# src/storage/local_io.py — v1
"""Local filesystem access for the documentation tree.

All paths handed to this module are document paths (``/api/auth.md``)
resolved against the docs root. A missing file surfaces as
``FileNotFoundError`` so callers can map it to ``None``; every other
``OSError`` propagates unchanged.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from docindex.core.errors import ConflictError, ErrorCode, MalformedInputError
from docindex.core.models import FileSnapshot
from docindex.core.paths import file_to_doc_path, normalize_doc_path

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


class LocalDocumentStore:
    """Read and write markdown files below a docs root."""

    def __init__(self, docs_root: str | Path) -> None:
        self._root = Path(docs_root).expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, path: str) -> Path:
        """Map a document path to an absolute file path inside the root."""
        target = (self._root / normalize_doc_path(path).lstrip("/")).resolve()
        if target != self._root and self._root not in target.parents:
            raise MalformedInputError(
                f"Path escapes the documentation root: {path}",
                ErrorCode.INVALID_OPERATION,
                {"path": path},
            )
        return target

    def to_doc_path(self, file_path: Path) -> str:
        return file_to_doc_path(self._root, file_path)

    async def read_snapshot(self, path: str) -> FileSnapshot:
        """Read full content together with the mtime and size it was read at."""
        p = self.resolve(path)
        stat = p.stat()
        content = p.read_text(encoding="utf-8", errors="replace")
        return FileSnapshot(content=content, mtime=stat.st_mtime, size=stat.st_size)

    async def read_preview(self, path: str, n_bytes: int) -> tuple[bytes, os.stat_result]:
        """Read at most ``n_bytes`` from the start of the file."""
        p = self.resolve(path)
        with p.open("rb") as fh:
            stat = os.fstat(fh.fileno())
            return fh.read(n_bytes), stat

    async def stat(self, path: str) -> os.stat_result:
        return self.resolve(path).stat()

    async def exists(self, path: str) -> bool:
        return self.resolve(path).is_file()

    async def write_with_precondition(
        self,
        path: str,
        content: str,
        expected_mtime: float | None = None,
    ) -> FileSnapshot:
        """Write ``content``, refusing if the file changed since ``expected_mtime``.

        ``expected_mtime=None`` writes unconditionally (file creation).

        Raises:
            ConflictError: The on-disk mtime differs from ``expected_mtime``.
        """
        p = self.resolve(path)
        if expected_mtime is not None:
            try:
                actual = p.stat().st_mtime
            except FileNotFoundError:
                actual = 0.0
            if actual != expected_mtime:
                raise ConflictError(normalize_doc_path(path), expected_mtime, actual)

        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")
        stat = p.stat()
        logger.debug("Wrote %s (%d bytes)", path, stat.st_size)
        return FileSnapshot(content=content, mtime=stat.st_mtime, size=stat.st_size)

    async def delete(self, path: str) -> bool:
        """Remove a document. Returns False when it did not exist."""
        try:
            self.resolve(path).unlink()
        except FileNotFoundError:
            return False
        return True

    async def ensure_directory(self, path: str) -> Path:
        p = self.resolve(path)
        p.mkdir(parents=True, exist_ok=True)
        return p

    def iter_markdown_files(self) -> Iterator[Path]:
        """Yield every ``*.md`` file below the root, skipping dot-directories.

        Files are yielded in sorted order per directory. Symlinks that resolve
        outside the root are skipped.
        """
        if not self._root.is_dir():
            logger.warning("Documentation root does not exist: %s", self._root)
            return
        for dirpath, dirnames, filenames in os.walk(self._root):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for name in sorted(filenames):
                if not name.endswith(MARKDOWN_SUFFIX):
                    continue
                file_path = Path(dirpath) / name
                if not self._is_inside_root(file_path):
                    logger.warning("Skipping %s: resolves outside the docs root", file_path)
                    continue
                yield file_path

    def _is_inside_root(self, file_path: Path) -> bool:
        try:
            file_path.resolve().relative_to(self._root)
        except (OSError, ValueError):
            return False
        return True

    def list_document_paths(self) -> list[str]:
        """Document paths of every markdown file below the root."""
        return [self.to_doc_path(p) for p in self.iter_markdown_files()]
