"""
Fact-related data models and schemas.

This module defines the canonical unit of verified information and the
results produced by the research and validation stages.
"""

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator


class FactCategory(str, Enum):
    """Fact categories."""
    TECHNICAL = "technical"
    MARKETING = "marketing"
    GENERAL = "general"
    SPECIFICATION = "specification"


class Fact(BaseModel):
    """A single claim with its source and confidence."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    claim: str = Field(..., min_length=1, description="Concrete, verifiable claim")
    source: str = Field(..., min_length=1, description="Source name")
    source_url: Optional[str] = Field(None, alias="sourceUrl", description="Source URL")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence score")
    category: FactCategory = Field(FactCategory.GENERAL, description="Fact category")

    @field_validator('category', mode='before')
    @classmethod
    def default_category(cls, v):
        """Missing categories fall back to general."""
        return v or FactCategory.GENERAL

    def claim_key(self) -> str:
        """Normalized claim text used for duplicate detection."""
        return self.claim.strip().lower()


class ApprovedFact(Fact):
    """Fact accepted by the classifier."""

    approval_reason: str = Field("", alias="approvalReason", description="Why the fact was approved")


class RejectedFact(Fact):
    """Fact refused by the classifier."""

    rejection_reason: str = Field(..., alias="rejectionReason", description="Why the fact was rejected")


class ResearchResult(BaseModel):
    """Output of the research stage."""

    facts: List[Fact] = Field(default_factory=list, description="Facts in discovery order")
    summary: str = Field("", description="Free-text research summary")
    needs_verification: List[str] = Field(
        default_factory=list,
        alias="needsVerification",
        description="Interesting but unverified claims"
    )
    duration_seconds: float = Field(0.0, ge=0.0, description="Research duration")

    model_config = ConfigDict(populate_by_name=True)


class ClassificationVerdict(BaseModel):
    """Approved/rejected partition returned by the fact classifier."""

    model_config = ConfigDict(populate_by_name=True)

    approved: List[ApprovedFact] = Field(default_factory=list)
    rejected: List[RejectedFact] = Field(default_factory=list)
    summary: str = Field("")


class ValidationResult(BaseModel):
    """Gate-approved partition of a fact set. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    approved: List[ApprovedFact] = Field(default_factory=list)
    rejected: List[RejectedFact] = Field(default_factory=list)
    approval_rate: float = Field(0.0, ge=0.0, le=1.0, description="approved / total")
    summary: str = Field("")
