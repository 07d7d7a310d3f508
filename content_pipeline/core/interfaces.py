"""
Stage interfaces.

The orchestrator depends only on these contracts. Production
implementations live in ``content_pipeline.agents``; tests supply
deterministic stand-ins.
"""

from typing import List, Optional, Protocol, Sequence

from .brand import BrandSettings
from .models.article import Article
from .models.compliance import DeepComplianceVerdict
from .models.facts import ApprovedFact, ClassificationVerdict, Fact, ResearchResult


class Researcher(Protocol):
    async def research(self, topic: str, keywords: List[str], sources: List[str]) -> ResearchResult:
        ...


class FactClassifier(Protocol):
    async def classify(self, facts: Sequence[Fact]) -> ClassificationVerdict:
        ...


class ArticleWriter(Protocol):
    async def write(
        self,
        approved_facts: Sequence[ApprovedFact],
        topic: str,
        target_audience: str,
        keywords: List[str],
        desired_word_count: int,
        brand: BrandSettings,
        briefing: Optional[str] = None,
        version_notes: Optional[str] = None
    ) -> Article:
        ...


class DeepComplianceChecker(Protocol):
    async def score_deep(self, article: Article, approved_facts: Sequence[Fact]) -> DeepComplianceVerdict:
        ...
