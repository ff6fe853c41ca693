# src/main.py — v1
"""CLI entry point: related, show, stats commands.

Usage:
    docindex related <docs_root> --title TITLE [--overview TEXT] [options]
    docindex show <docs_root> <path> [--section SLUG]
    docindex stats <docs_root>

Results are printed as JSON on stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from docindex.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="docindex",
        description=f"docindex v{__version__} — Markdown documentation index",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- related ---
    p_related = subparsers.add_parser(
        "related", help="Suggest documents related to a new document",
    )
    p_related.add_argument("docs_root", type=Path, help="Documentation root")
    p_related.add_argument("--title", required=True, help="Title of the new document")
    p_related.add_argument("--overview", default="", help="Overview text")
    p_related.add_argument(
        "--exclude", default=None,
        help="Document path to leave out (e.g. /api/new-doc.md)",
    )
    p_related.add_argument(
        "--namespace", default=None,
        help="Namespace of the new document (default: derived from --exclude)",
    )
    p_related.add_argument(
        "--limit", type=int, default=None,
        help="Maximum number of suggestions",
    )
    p_related.add_argument(
        "--link-graph", action="store_true",
        help="Enable the @reference link-graph boost",
    )
    p_related.set_defaults(func=_cmd_related)

    # --- show ---
    p_show = subparsers.add_parser(
        "show", help="Show a document's outline or one section",
    )
    p_show.add_argument("docs_root", type=Path, help="Documentation root")
    p_show.add_argument("path", help="Document path (e.g. /api/auth.md)")
    p_show.add_argument("--section", default=None, help="Section slug")
    p_show.set_defaults(func=_cmd_show)

    # --- stats ---
    p_stats = subparsers.add_parser(
        "stats", help="Index a documentation root and print statistics",
    )
    p_stats.add_argument("docs_root", type=Path, help="Documentation root")
    p_stats.set_defaults(func=_cmd_stats)

    return parser


def _load_settings(args: argparse.Namespace, **overrides: object):
    """Settings for one CLI run: .env values, the given docs root, no watching.

    Also re-applies logging so LOG_FILE and rotation from .env take effect.
    """
    from docindex.config.settings import load_settings
    from docindex.logging.logger import setup_logging_from_settings

    settings = load_settings(
        docs_root=args.docs_root, cache_enable_watching=False, **overrides
    )
    setup_logging_from_settings(
        settings, level="DEBUG" if args.verbose else "WARNING", log_format="text"
    )
    return settings


async def _cmd_related(args: argparse.Namespace) -> int:
    """Run related-document discovery."""
    from docindex.api.facade import suggest_related_documents

    if not args.docs_root.is_dir():
        logger.error("Not a directory: %s", args.docs_root)
        return 1

    settings = _load_settings(
        args, scoring_enable_link_graph_boost=args.link_graph,
    )
    result = await suggest_related_documents(
        args.title,
        args.overview,
        args.exclude,
        namespace=args.namespace,
        limit=args.limit,
        settings=settings,
    )
    _print_json(result.model_dump(mode="json"))
    return 0 if result.success else 2


async def _cmd_show(args: argparse.Namespace) -> int:
    """Print a document's metadata and TOC, or a single section."""
    from docindex.api.manager import create_document_manager

    if not args.docs_root.is_dir():
        logger.error("Not a directory: %s", args.docs_root)
        return 1

    manager = create_document_manager(_load_settings(args))
    async with manager:
        if args.section:
            section = await manager.get_section_content(args.path, args.section)
            if section is None:
                logger.error("Section not found: %s#%s", args.path, args.section)
                return 1
            print(section, end="")
            return 0

        document = await manager.get_document(args.path)
        if document is None:
            logger.error("Document not found: %s", args.path)
            return 1
        _print_json(
            {
                "metadata": document.metadata.model_dump(mode="json"),
                "toc": [node.model_dump(mode="json") for node in document.toc],
            }
        )
    return 0


async def _cmd_stats(args: argparse.Namespace) -> int:
    """Build the index for a docs root and print cache/index statistics."""
    from docindex.api.manager import create_document_manager

    if not args.docs_root.is_dir():
        logger.error("Not a directory: %s", args.docs_root)
        return 1

    manager = create_document_manager(_load_settings(args))
    async with manager:
        listing = await manager.list_documents()
        stats = manager.get_stats()
    payload = stats.model_dump(mode="json")
    payload["documents"] = len(listing.documents)
    payload["errors"] = listing.errors
    _print_json(payload)
    return 0


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from docindex.logging.logger import setup_logging

    setup_logging(level="DEBUG" if verbose else "WARNING", log_format="text")


if __name__ == "__main__":
    sys.exit(main())
