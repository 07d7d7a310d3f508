"""
Article-related data models and schemas.

This module defines the draft article produced by the writing stage and the
persisted, versioned record stored per tenant.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator


PLACEHOLDER_MARKER = "[PLACEHOLDER"


class ArticleStatus(str, Enum):
    """Article lifecycle status."""
    DRAFT = "draft"
    COMPLIANCE_CHECK = "compliance_check"
    APPROVED = "approved"
    PUBLISHED = "published"


class Article(BaseModel):
    """Draft article returned by the writer."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, description="Article title")
    meta_description: str = Field("", alias="metaDescription", description="SEO meta description")
    content: str = Field(..., description="Markdown body")
    keywords: List[str] = Field(default_factory=list, description="SEO keywords")
    word_count: int = Field(0, alias="wordCount", description="Word count")
    facts_used: List[str] = Field(default_factory=list, alias="factsUsed", description="Claims referenced")
    internal_link_suggestions: List[str] = Field(
        default_factory=list,
        alias="internalLinkSuggestions",
        description="Related topics to link"
    )

    @field_validator('word_count')
    @classmethod
    def validate_word_count(cls, v):
        """Validate word count is non-negative."""
        if v < 0:
            raise ValueError('Word count must be non-negative')
        return v

    def count_words(self) -> int:
        """Count words in the body."""
        return len(self.content.split())

    def has_placeholders(self) -> bool:
        """Whether unresolved placeholder markers remain."""
        return PLACEHOLDER_MARKER in self.content


class VersionStamp(BaseModel):
    """Lineage fields applied to a rewritten article; the version number is assigned on insert."""

    model_config = ConfigDict(frozen=True)

    parent_article_id: str = Field(...)
    version_notes: str = Field(...)


class ArticleRecord(BaseModel):
    """Persisted article row."""

    id: str = Field(..., description="Article ID")
    tenant_id: str = Field(..., description="Owning tenant")
    title: str = Field(...)
    content: str = Field(...)
    topic: str = Field(...)
    target_audience: Optional[str] = Field(None)
    status: ArticleStatus = Field(ArticleStatus.DRAFT)
    word_count: int = Field(0)
    created_by: Optional[str] = Field(None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Lineage
    version: int = Field(1, ge=1)
    parent_article_id: Optional[str] = Field(None)
    version_notes: Optional[str] = Field(None)

    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(use_enum_values=True)

    @property
    def lineage_root_id(self) -> str:
        """ID of the version-1 article of this lineage."""
        return self.parent_article_id or self.id

    @property
    def keywords(self) -> List[str]:
        return list(self.metadata.get("keywords", []))

    @property
    def sources(self) -> List[str]:
        return list(self.metadata.get("sources", []))
