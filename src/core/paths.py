# src/core/paths.py — v1
"""Document path helpers.

Document paths are relative to the docs root, use forward slashes and carry
a leading ``/`` (``/api/specs/auth.md``). Namespaces are the directory part
without leading or trailing slashes (``api/specs``); root documents have the
empty namespace.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

ROOT_NAMESPACE_LABEL = "root"


def normalize_doc_path(path: str) -> str:
    """Return ``path`` with forward slashes and exactly one leading slash."""
    cleaned = path.replace("\\", "/").strip()
    parts = [p for p in cleaned.split("/") if p and p != "."]
    return "/" + "/".join(parts)


def path_to_namespace(path: str) -> str:
    """Directory portion of a document path (``/api/specs/auth.md`` -> ``api/specs``)."""
    parts = [p for p in path.replace("\\", "/").split("/") if p and p != "."]
    if parts and parts[-1].endswith(".md"):
        parts.pop()
    return "/".join(parts)


def namespace_label(namespace: str) -> str:
    """Display form of a namespace; the empty namespace reads as ``root``."""
    return namespace or ROOT_NAMESPACE_LABEL


def doc_path_to_file(docs_root: Path, path: str) -> Path:
    """Resolve a document path against the docs root."""
    return docs_root / normalize_doc_path(path).lstrip("/")


def file_to_doc_path(docs_root: Path, file_path: Path) -> str:
    """Inverse of :func:`doc_path_to_file`."""
    relative = Path(file_path).resolve().relative_to(Path(docs_root).resolve())
    return "/" + PurePosixPath(*relative.parts).as_posix()


def is_under_namespace(namespace: str, prefix: str) -> bool:
    """True when ``namespace`` equals ``prefix`` or is nested below it."""
    prefix = prefix.strip("/")
    if not prefix:
        return True
    return namespace == prefix or namespace.startswith(prefix + "/")
