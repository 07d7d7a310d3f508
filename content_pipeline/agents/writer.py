"""
Writer agent.

Turns approved facts into an article following the tenant's tone of voice.
A section outline is derived from the fact categories and the target
audience profile before the generator is called.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..core.brand import BrandSettings
from ..core.models.article import Article
from ..core.models.facts import ApprovedFact, FactCategory
from ..integrations.llm.client import LLMClient


WRITER_PROMPT = """You are a B2B content writer working to client brand guidelines.

Constraints:
- Use only the approved facts. No creative liberty with specifications, figures or claims.
- Where information is missing write [PLACEHOLDER: description].
- Follow the brand tone of voice strictly; no superlatives without evidence.
- Structure: SEO title (max 60 chars), meta description (max 155 chars), introduction,
  body in 3-4 H2 sections backed by facts, conclusion with an actionable takeaway.
- Integrate keywords naturally; suggest related topics for internal links.
- The content field is Markdown. List the claims you used in facts_used."""


def build_outline(topic: str, audience: Dict[str, Any], facts: Sequence[ApprovedFact]) -> str:
    """
    Build a section outline.

    Args:
        topic: Article topic
        audience: Audience profile with ``interests``, ``pain_points`` and ``language``
        facts: Approved facts

    Returns:
        Markdown outline
    """
    interests = audience.get("interests") or ["the reader's goals"]
    pain_points = audience.get("pain_points") or audience.get("painPoints") or ["day-to-day operations"]
    language = audience.get("language", "professional")
    categories = {fact.category for fact in facts}

    sections = [f"## Introduction\n- Context: {topic}\n- Relevance for {', '.join(interests)}"]

    if FactCategory.TECHNICAL in categories:
        sections.append(f"## Technical details\n- Use the technical facts\n- Focus on {interests[0]}")

    if FactCategory.SPECIFICATION in categories:
        sections.append(f"## Practical details\n- Concrete specifications\n- Impact on {pain_points[0]}")

    sections.append(f"## Practical application\n- Focus on {', '.join(pain_points)}\n- Real-world relevance")
    sections.append(f"## Conclusion\n- Key takeaways\n- Actionable next steps for {language} decision making")

    return "\n\n".join(sections)


class WriterAgent:
    """Generator-backed article writer."""

    def __init__(self, llm_client: LLMClient, temperature: float = 0.3):
        self.llm_client = llm_client
        self.temperature = temperature
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

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
        """
        Write an article from approved facts.

        Args:
            approved_facts: The only facts the article may use
            topic: Article topic
            target_audience: Audience key in the brand settings
            keywords: SEO keywords
            desired_word_count: Target length
            brand: Tenant brand settings
            briefing: Client briefing, primary guidance when present
            version_notes: Rewrite instructions for a new version

        Returns:
            Article with a word count computed from its content
        """
        self.logger.info(
            f"Writing '{topic}' for {target_audience} from {len(approved_facts)} facts"
        )

        audience = brand.audience_profile(target_audience)
        if not audience:
            self.logger.warning(f"No profile for audience '{target_audience}', using a generic outline")

        payload = {
            "topic": topic,
            "target_audience": target_audience,
            "audience_profile": audience,
            "brand": {
                "name": brand.name,
                "style": brand.style,
                "characteristics": brand.characteristics,
                "avoid_words": brand.avoid_words,
            },
            "approved_facts": [fact.model_dump(mode="json") for fact in approved_facts],
            "keywords": keywords,
            "desired_word_count": desired_word_count,
            "outline": build_outline(topic, audience, approved_facts),
        }

        if briefing:
            payload["briefing"] = briefing
            payload["briefing_instructions"] = (
                "Use the briefing as primary guidance: follow its angle, include any quotes "
                "and address its goals."
            )

        if version_notes:
            payload["version_notes"] = version_notes
            payload["version_instructions"] = "This is a new version of an existing article; apply these notes."

        article = await self.llm_client.generate(
            WRITER_PROMPT,
            payload,
            Article,
            temperature=self.temperature
        )

        article = article.model_copy(update={"word_count": article.count_words()})

        self.logger.info(
            f"Article written: '{article.title}' ({article.word_count} words, "
            f"{len(article.facts_used)} facts used)"
        )

        return article
