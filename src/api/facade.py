# src/api/facade.py — v1
"""Public API facade: one-shot related-document suggestions.

Usage:
    from docindex.api.facade import suggest_related_documents
    result = await suggest_related_documents("Auth Guide", "Token flows", settings=settings)

Long-running hosts should keep a DocumentManager alive instead and call
``find_related_documents`` directly.
"""

from __future__ import annotations

import logging

from docindex.api.manager import create_document_manager
from docindex.config.settings import Settings
from docindex.discovery.models import DiscoveryConfig, DiscoveryResult
from docindex.discovery.related_docs import find_related_documents

logger = logging.getLogger(__name__)


async def suggest_related_documents(
    title: str,
    overview: str,
    exclude_path: str | None = None,
    *,
    namespace: str | None = None,
    limit: int | None = None,
    settings: Settings | None = None,
) -> DiscoveryResult:
    """Index the docs root, run discovery once and tear everything down.

    Watching is disabled for the lifetime of this call.
    """
    settings = settings or Settings()
    settings = settings.model_copy(update={"cache_enable_watching": False})
    manager = create_document_manager(settings)
    async with manager:
        result = await find_related_documents(
            manager,
            title,
            overview,
            exclude_path,
            namespace=namespace,
            limit=limit,
            config=DiscoveryConfig.from_settings(settings),
        )
    logger.info(
        "Discovery for %r: %d suggestions (success=%s)",
        title, len(result.suggestions), result.success,
    )
    return result
