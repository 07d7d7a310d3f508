"""
Article repository.

Maps pipeline models onto store rows. An article, its compliance result and
its metadata are written in one insert; the approved facts and the
compliance log follow, and are undone together with the article row if any
of them fails.

Version numbers of rewrites are allocated at insert time from the current
lineage. The store rejects a second row with the same parent and version, in
which case the number is recomputed.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .base import DataStore
from ...core.brand import BrandSettings
from ...core.models.article import Article, ArticleRecord, ArticleStatus
from ...core.models.compliance import ComplianceResult
from ...core.models.errors import ArticleNotFoundError, StorageError, UniqueViolationError
from ...core.models.facts import ApprovedFact
from ...core.models.workflow import ContentRequest


logger = logging.getLogger(__name__)

ARTICLES = "articles"
FACTS = "facts"
COMPLIANCE_LOGS = "compliance_logs"
CLIENTS = "clients"

MAX_VERSION_ATTEMPTS = 5


class ArticleRepository:
    """Tenant-scoped persistence for articles, facts and brand settings."""

    def __init__(self, store: DataStore):
        self.store = store

    def save_article(
        self,
        request: ContentRequest,
        article: Article,
        compliance: ComplianceResult,
        approved_facts: Sequence[ApprovedFact],
        quality_warnings: Optional[List[str]] = None
    ) -> str:
        """
        Persist a compliant article as one logical unit.

        Args:
            request: Request the article was produced for; carries lineage for rewrites
            article: Approved article
            compliance: Compliance result stored with the row
            approved_facts: Facts backing the article
            quality_warnings: Advisory warnings stored in the metadata

        Returns:
            ID of the new article row

        Raises:
            StorageError: If the article could not be stored completely
        """
        tenant_id = request.tenant_id
        lineage = request.lineage

        row = {
            "id": str(uuid.uuid4()),
            "title": article.title,
            "content": article.content,
            "topic": request.topic,
            "target_audience": request.target_audience,
            "status": ArticleStatus.APPROVED.value,
            "word_count": article.word_count,
            "created_by": request.created_by,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "parent_article_id": lineage.parent_article_id if lineage else None,
            "version_notes": lineage.version_notes if lineage else None,
            "compliance": compliance.model_dump(mode="json"),
            "metadata": {
                "meta_description": article.meta_description,
                "keywords": request.keywords,
                "sources": request.sources,
                "briefing": request.briefing,
                "facts_used": article.facts_used,
                "internal_link_suggestions": article.internal_link_suggestions,
                "quality_warnings": list(quality_warnings or []),
            },
        }

        article_id = self._insert_article(row, tenant_id)
        written = []

        try:
            for fact in approved_facts:
                fact_id = self.store.insert(FACTS, {
                    "article_id": article_id,
                    "claim": fact.claim,
                    "source": fact.source,
                    "source_url": fact.source_url,
                    "confidence": fact.confidence,
                    "category": fact.category.value,
                    "approval_reason": fact.approval_reason,
                }, tenant_id)
                written.append((FACTS, fact_id))

            log_id = self.store.insert(COMPLIANCE_LOGS, {
                "article_id": article_id,
                "approved": compliance.approved,
                "overall_score": compliance.overall_score,
                "checks": compliance.checks.model_dump(mode="json"),
                "issues": [issue.model_dump(mode="json") for issue in compliance.issues],
            }, tenant_id)
            written.append((COMPLIANCE_LOGS, log_id))

        except Exception as e:
            logger.error(f"Follow-up writes for article {article_id} failed, rolling back: {str(e)}")
            self._compensate(tenant_id, [(ARTICLES, article_id)] + written)
            raise StorageError(
                f"Article could not be stored completely: {str(e)}",
                table=getattr(e, "table", None),
                operation="save_article"
            ) from e

        logger.info(f"Stored article {article_id} (version {row['version']}) for tenant {tenant_id}")
        return article_id

    def _insert_article(self, row: dict, tenant_id: str) -> str:
        root_id = row["parent_article_id"]
        if root_id is None:
            row["version"] = 1
            return self.store.insert(ARTICLES, row, tenant_id)

        for attempt in range(1, MAX_VERSION_ATTEMPTS + 1):
            row["version"] = self.next_version(self.get_lineage(root_id, tenant_id))
            try:
                return self.store.insert(ARTICLES, row, tenant_id)
            except UniqueViolationError:
                logger.warning(
                    f"Version {row['version']} of lineage {root_id} was taken concurrently "
                    f"(attempt {attempt}/{MAX_VERSION_ATTEMPTS})"
                )

        raise StorageError(
            f"Could not allocate a version in lineage {root_id} after {MAX_VERSION_ATTEMPTS} attempts",
            table=ARTICLES,
            operation="save_article"
        )

    @staticmethod
    def next_version(lineage: Sequence[ArticleRecord]) -> int:
        """One past the highest version in ``lineage``."""
        return max((record.version for record in lineage), default=0) + 1

    def get_article(self, article_id: str, tenant_id: str) -> ArticleRecord:
        """
        Load one article.

        Raises:
            ArticleNotFoundError: If the article does not exist for the tenant
        """
        rows = self.store.query(ARTICLES, tenant_id, filters={"id": article_id}, limit=1)
        if not rows:
            raise ArticleNotFoundError(article_id, tenant_id)
        return ArticleRecord.model_validate(rows[0])

    def get_lineage(self, root_id: str, tenant_id: str) -> List[ArticleRecord]:
        """All versions of a lineage, ordered by version."""
        rows = self.store.query(ARTICLES, tenant_id, filters={"id": root_id})
        rows += self.store.query(ARTICLES, tenant_id, filters={"parent_article_id": root_id})

        records = [ArticleRecord.model_validate(row) for row in rows]
        return sorted(records, key=lambda record: record.version)

    def load_brand_settings(self, tenant_id: str) -> BrandSettings:
        """Brand settings of the tenant, or empty settings if none are stored."""
        rows = self.store.query(CLIENTS, tenant_id, limit=1)
        if not rows:
            logger.warning(f"No client row for tenant {tenant_id}, using default brand settings")
            return BrandSettings()

        settings = BrandSettings.from_client_row(rows[0].get("brand_settings") or {})
        if not settings.name:
            settings.name = rows[0].get("name", "")
        return settings

    def _compensate(self, tenant_id: str, rows):
        for table, row_id in reversed(rows):
            try:
                self.store.delete(table, row_id, tenant_id)
            except Exception as e:
                logger.error(f"Compensating delete of {table}/{row_id} failed: {str(e)}")
