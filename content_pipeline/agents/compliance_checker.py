"""
Deep compliance checker agent.

Model-assisted half of the compliance scorer: verifies every claim against
the approved facts and grades tone, technical accuracy, completeness and SEO.
"""

import logging
from typing import Sequence

from ..core.models.article import Article
from ..core.models.compliance import DeepComplianceVerdict
from ..core.models.facts import Fact
from ..integrations.llm.client import LLMClient


COMPLIANCE_PROMPT = """You are the final compliance checker before publication.

Score each check from 0 to 100 and report issues with severity critical, warning or info:
1. fact_verification: every concrete claim traces to an approved fact and numbers match
   exactly. Any hallucinated specification is critical.
2. tone_of_voice: B2B appropriate, no hyperbole or marketing fluff.
3. technical: correct terminology, no outdated or conflicting specifications.
4. completeness: all sections present, no placeholders, sufficient length.
5. seo: title under 60 characters, meta description under 155, keywords integrated,
   proper heading structure.

Set approved to false when any critical issue exists. Add concrete recommendations."""


class ComplianceCheckerAgent:
    """Generator-backed deep compliance check."""

    def __init__(self, llm_client: LLMClient, temperature: float = 0.1):
        self.llm_client = llm_client
        self.temperature = temperature
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def score_deep(self, article: Article, approved_facts: Sequence[Fact]) -> DeepComplianceVerdict:
        verdict = await self.llm_client.generate(
            COMPLIANCE_PROMPT,
            {
                "article": article.model_dump(mode="json"),
                "approved_facts": [fact.model_dump(mode="json") for fact in approved_facts],
            },
            DeepComplianceVerdict,
            temperature=self.temperature
        )

        self.logger.info(
            f"Deep check: {'approved' if verdict.approved else 'rejected'}, "
            f"{len(verdict.issues)} issues"
        )

        return verdict
