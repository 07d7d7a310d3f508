"""
Version tree manager.

Rewrites create a new article in the lineage of an existing one. The root
article has version 1 and no parent; every other version points at the
root. Existing rows are never modified.
"""

import asyncio
import logging
from typing import List

from .models.article import ArticleRecord, VersionStamp
from .models.errors import RewriteError
from .models.workflow import ContentRequest, RewriteResult
from .orchestrator import PipelineOrchestrator
from ..integrations.storage.repository import ArticleRepository


logger = logging.getLogger(__name__)


class VersionTreeManager:
    """Creates and lists article versions."""

    def __init__(self, orchestrator: PipelineOrchestrator, repository: ArticleRepository):
        self.orchestrator = orchestrator
        self.repository = repository

    async def rewrite(self, article_id: str, version_notes: str, tenant_id: str) -> RewriteResult:
        """
        Produce a new version of an article.

        The full pipeline is re-run with the original topic, audience,
        keywords and sources, plus ``version_notes`` as writing context. The
        version number is allocated when the new article is stored, so
        concurrent rewrites of one lineage never share a number.

        Args:
            article_id: Any version of the lineage
            version_notes: Rewrite instructions
            tenant_id: Requesting tenant

        Returns:
            RewriteResult for the new version

        Raises:
            ArticleNotFoundError: If the article does not exist for the tenant
            RewriteError: If the pipeline run did not succeed
        """
        existing = await asyncio.to_thread(self.repository.get_article, article_id, tenant_id)
        root_id = existing.lineage_root_id

        logger.info(f"Rewriting article {article_id} in lineage {root_id}")

        request = ContentRequest(
            topic=existing.topic,
            target_audience=existing.target_audience or "general",
            keywords=existing.keywords,
            sources=existing.sources,
            briefing=existing.metadata.get("briefing"),
            version_notes=version_notes,
            tenant_id=tenant_id,
            created_by=existing.created_by,
            lineage=VersionStamp(
                parent_article_id=root_id,
                version_notes=version_notes
            )
        )

        result = await self.orchestrator.run(request)

        if not result.success:
            logger.warning(f"Rewrite of {article_id} failed: {result.error_type} - {result.error}")
            raise RewriteError(
                f"Rewrite failed: {result.error}",
                article_id=article_id,
                result=result
            )

        stored = await asyncio.to_thread(self.repository.get_article, result.article_id, tenant_id)

        return RewriteResult(
            article_id=stored.id,
            version=stored.version,
            parent_article_id=root_id
        )

    def get_lineage(self, article_id: str, tenant_id: str) -> List[ArticleRecord]:
        """
        All versions of the lineage ``article_id`` belongs to, ordered by version.

        Raises:
            ArticleNotFoundError: If the article does not exist for the tenant
        """
        existing = self.repository.get_article(article_id, tenant_id)
        return self.repository.get_lineage(existing.lineage_root_id, tenant_id)
