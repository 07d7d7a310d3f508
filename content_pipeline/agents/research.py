"""
Research agent.

Gathers raw facts about a topic. Custom source URLs supplied with the
request are read first; a general web search tops up the fact set only when
the sources alone yield fewer than ``min_source_facts`` facts.
"""

import logging
import time
from typing import List, Optional

from ..core.models.facts import Fact, FactCategory, ResearchResult
from ..integrations.llm.client import LLMClient
from ..integrations.llm.retry_handler import is_rate_limit_error


SOURCE_CONFIDENCE_BOOST = 0.1
SOURCE_CONFIDENCE_CAP = 0.98
MIN_SOURCE_FACTS = 8

RESEARCH_PROMPT = """You are a fact-gathering researcher.

Rules:
- Collect only verifiable facts; every claim needs a concrete source and URL.
- Never invent specifications, figures or claims. When in doubt, leave it out.
- Put interesting but unverified claims in needs_verification, not in facts.
- Confidence: 0.95-1.0 direct quote from official documentation, 0.85-0.94 official
  website, 0.75-0.84 reputable media citing an official source, 0.70-0.74 reputable
  media without an official source.
- Categories: technical, specification, marketing, general.
- Return between 3 and 15 facts, preferring recent information."""

SOURCE_PROMPT = """You extract facts from one web page.

Fetch the given URL and return only verifiable facts stated on that page that are
relevant to the topic. Never add facts from elsewhere."""


class ResearchAgent:
    """Generator-backed researcher."""

    def __init__(
        self,
        llm_client: LLMClient,
        min_source_facts: int = MIN_SOURCE_FACTS,
        web_search_options: Optional[dict] = None
    ):
        """
        Initialize the research agent.

        Args:
            llm_client: Structured generator client
            min_source_facts: Source fact count below which a web search runs
            web_search_options: LiteLLM ``web_search_options`` for models that support it
        """
        self.llm_client = llm_client
        self.min_source_facts = min_source_facts
        self.web_search_options = web_search_options or {"search_context_size": "medium"}
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def research(self, topic: str, keywords: List[str], sources: List[str]) -> ResearchResult:
        """
        Research a topic.

        Args:
            topic: Main topic
            keywords: Keywords refining the search
            sources: Custom source URLs

        Returns:
            ResearchResult with raw facts in discovery order
        """
        start_time = time.time()
        self.logger.info(f"Research starting: '{topic}' ({len(sources)} custom sources)")

        facts: List[Fact] = []
        needs_verification: List[str] = []

        if sources:
            facts.extend(await self.extract_from_sources(sources, topic))
            self.logger.info(f"Extracted {len(facts)} facts from custom sources")

        searched = False
        if len(facts) < self.min_source_facts:
            searched = True
            web = await self.llm_client.generate(
                RESEARCH_PROMPT,
                {
                    "topic": topic,
                    "keywords": keywords,
                    "search_query": " ".join([topic] + list(keywords)),
                    "note": (
                        f"{len(sources)} custom sources were already read; search only for missing information."
                        if sources else "Perform a comprehensive web search."
                    ),
                },
                ResearchResult,
                web_search_options=self.web_search_options
            )
            facts.extend(web.facts)
            needs_verification.extend(web.needs_verification)

        origin = "custom sources and web research" if sources and searched else (
            "custom sources" if sources else "web research"
        )

        return ResearchResult(
            facts=facts,
            summary=f"Found {len(facts)} facts from {origin}",
            needs_verification=needs_verification,
            duration_seconds=round(time.time() - start_time, 3)
        )

    async def extract_from_sources(self, urls: List[str], topic: str) -> List[Fact]:
        """
        Extract facts from each custom URL.

        A failing URL is skipped; rate-limit errors propagate so the caller's
        retry policy sees them.
        """
        facts: List[Fact] = []

        for url in urls:
            try:
                extracted = await self.llm_client.generate(
                    SOURCE_PROMPT,
                    {"url": url, "topic": topic},
                    ResearchResult,
                    web_search_options=self.web_search_options
                )
            except Exception as e:
                if is_rate_limit_error(e):
                    raise
                self.logger.warning(f"Could not extract facts from {url}: {str(e)}")
                continue

            facts.extend(self.boost_source_fact(fact, url) for fact in extracted.facts)
            self.logger.info(f"Extracted {len(extracted.facts)} facts from {url}")

        return facts

    @staticmethod
    def boost_source_fact(fact: Fact, url: str) -> Fact:
        """Raise confidence by the source boost (capped) and pin the source URL."""
        return fact.model_copy(update={
            "confidence": min(fact.confidence + SOURCE_CONFIDENCE_BOOST, SOURCE_CONFIDENCE_CAP),
            "source_url": url,
            "category": fact.category or FactCategory.GENERAL,
        })
