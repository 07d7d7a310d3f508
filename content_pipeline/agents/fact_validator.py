"""
Fact validator agent.

Partitions research facts into approved and rejected sets with a reason for
every decision. The gate policy applied to the partition lives in
``core.fact_gate``.
"""

import logging
from typing import Sequence

from ..core.models.facts import ClassificationVerdict, Fact
from ..integrations.llm.client import LLMClient


VALIDATOR_PROMPT = """You are a strict fact validator.

Approve a fact only when:
- the source is official documentation or reputable media;
- the confidence matches the source credibility (technical facts above 0.85,
  general facts above 0.75);
- the claim is specific and verifiable and nothing contradicts it.

Reject vague claims ("approximately", "possibly", "could"), claims without a concrete
source, speculation, and anything you have the slightest doubt about.

Return every input fact exactly once, either in approved (with approval_reason) or in
rejected (with rejection_reason). Do not alter claims."""


class FactValidatorAgent:
    """Generator-backed fact classifier."""

    def __init__(self, llm_client: LLMClient, temperature: float = 0.1):
        self.llm_client = llm_client
        self.temperature = temperature
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def classify(self, facts: Sequence[Fact]) -> ClassificationVerdict:
        """
        Classify facts.

        Args:
            facts: Deduplicated research facts

        Returns:
            ClassificationVerdict partitioning the facts
        """
        self.logger.info(f"Validating {len(facts)} facts")

        verdict = await self.llm_client.generate(
            VALIDATOR_PROMPT,
            {"facts": [fact.model_dump(mode="json") for fact in facts]},
            ClassificationVerdict,
            temperature=self.temperature
        )

        self.logger.info(
            f"Validation complete: {len(verdict.approved)} approved, {len(verdict.rejected)} rejected"
        )

        return verdict
