"""
Tenant brand knowledge.

Tone-of-voice and terminology rules configured per tenant, plus the
lexical checks the compliance scorer runs against them.
"""

import re
from typing import Dict, List, Any
from pydantic import BaseModel, Field


TONE_PENALTY_PER_ISSUE = 15
TONE_PASS_SCORE = 70

HEDGING_PATTERNS = [
    ("approximately", 'Contains "approximately" - be specific'),
    ("possibly", 'Contains "possibly" - too vague'),
    ("might", 'Contains "might" - state facts'),
    ("probably", 'Contains "probably" - too speculative'),
    ("could potentially", 'Contains "could potentially" - state facts'),
]


class BrandSettings(BaseModel):
    """Brand guidelines stored with a tenant."""

    name: str = Field("", description="Brand name")
    style: str = Field("", description="Tone-of-voice style description")
    characteristics: List[str] = Field(default_factory=list)
    avoid_words: List[str] = Field(default_factory=list, description="Words the brand never uses")
    terminology: Dict[str, str] = Field(
        default_factory=dict,
        description="Discouraged term -> preferred usage"
    )
    audiences: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Audience key -> profile (interests, pain points)"
    )

    @classmethod
    def from_client_row(cls, brand_settings: Dict[str, Any]) -> 'BrandSettings':
        """Build settings from a ``clients.brand_settings`` JSON document."""
        brand_settings = brand_settings or {}
        tone = brand_settings.get("toneOfVoice", {}) or {}

        return cls(
            name=brand_settings.get("name", ""),
            style=tone.get("style", ""),
            characteristics=tone.get("characteristics", []),
            avoid_words=tone.get("avoidWords", []),
            terminology=(brand_settings.get("technicalTerminology") or {}).get("avoid", {}),
            audiences=brand_settings.get("targetAudiences", {}),
        )

    def audience_profile(self, audience: str) -> Dict[str, Any]:
        return self.audiences.get(audience, {})


class ToneCheck(BaseModel):
    """Outcome of the lexical tone-of-voice scan."""

    valid: bool
    score: int
    issues: List[str] = Field(default_factory=list)


def _contains_term(text: str, term: str) -> bool:
    return re.search(rf"\b{re.escape(term)}\b", text, re.IGNORECASE) is not None


def validate_tone_of_voice(text: str, settings: BrandSettings) -> ToneCheck:
    """
    Scan text for avoid words and hedging language.

    Each matched term counts as one issue, whatever its number of
    occurrences.

    Args:
        text: Content to scan
        settings: Tenant brand settings

    Returns:
        ToneCheck with ``score = max(0, 100 - 15 * issues)``
    """
    issues: List[str] = []

    for word in settings.avoid_words:
        if word and _contains_term(text, word):
            issues.append(f'Avoid word: "{word}"')

    for pattern, message in HEDGING_PATTERNS:
        if _contains_term(text, pattern):
            issues.append(message)

    score = max(0, 100 - TONE_PENALTY_PER_ISSUE * len(issues))

    return ToneCheck(valid=score >= TONE_PASS_SCORE, score=score, issues=issues)


def validate_terminology(text: str, settings: BrandSettings) -> List[str]:
    """Return one issue per discouraged term found in ``text``."""
    issues = []

    for term, correction in settings.terminology.items():
        # exact-case match
        if re.search(rf"\b{re.escape(term)}\b", text) and correction:
            issues.append(f'Do not use "{term}" - {correction}')

    return issues
