"""
Fact deduplication.

Facts gathered from several research calls frequently repeat each other.
Two facts are duplicates when their claim text, trimmed and lower-cased, is
identical. Reworded claims are kept as distinct facts.
"""

import logging
from typing import Iterable, List

from .models.facts import Fact


logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_FLOOR = 0.7


def dedupe_facts(facts: Iterable[Fact]) -> List[Fact]:
    """
    Remove duplicate facts, keeping the first occurrence.

    Args:
        facts: Facts in discovery order

    Returns:
        Unique facts in their original relative order
    """
    seen = set()
    unique: List[Fact] = []

    for fact in facts:
        key = fact.claim_key()
        if key in seen:
            continue
        seen.add(key)
        unique.append(fact)

    return unique


def apply_confidence_floor(facts: Iterable[Fact], floor: float = DEFAULT_CONFIDENCE_FLOOR) -> List[Fact]:
    """Drop facts whose confidence is below ``floor``."""
    facts = list(facts)
    kept = [fact for fact in facts if fact.confidence >= floor]

    dropped = len(facts) - len(kept)
    if dropped:
        logger.info(f"Dropped {dropped} facts below confidence {floor}")

    return kept
