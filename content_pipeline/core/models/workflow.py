"""
Workflow-related data models and schemas.

This module defines the pipeline request/result envelopes, the per-step
ledger entries and the gate outcome types.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .article import Article, VersionStamp
from .compliance import ComplianceResult


class StepStatus(str, Enum):
    """Workflow step status."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ErrorType(str, Enum):
    """Failure classes reported in the result envelope."""
    INSUFFICIENT_FACTS = "insufficient_facts"
    COMPLIANCE_FAILED = "compliance_failed"
    STORAGE_FAILED = "storage_failed"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class WorkflowStep(BaseModel):
    """Ledger entry for one pipeline stage."""

    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(...)
    status: StepStatus = Field(StepStatus.PENDING)
    start_time: Optional[datetime] = Field(None)
    end_time: Optional[datetime] = Field(None)
    duration_ms: Optional[int] = Field(None)
    data: Optional[Dict[str, Any]] = Field(None)
    error: Optional[str] = Field(None)


class ContentRequest(BaseModel):
    """Pipeline invocation input."""

    model_config = ConfigDict(populate_by_name=True)

    topic: str = Field(..., min_length=1, max_length=500, description="Article topic")
    target_audience: str = Field("general", alias="targetAudience", description="Target audience key")
    keywords: List[str] = Field(default_factory=list, description="SEO keywords")
    desired_word_count: int = Field(700, alias="desiredWordCount", ge=100, le=5000)
    sources: List[str] = Field(default_factory=list, description="Custom source URLs")
    briefing: Optional[str] = Field(None, description="Client briefing for the writer")
    version_notes: Optional[str] = Field(None, alias="versionNotes", description="Rewrite instructions")
    tenant_id: str = Field(..., min_length=1, alias="tenantId", description="Resolved tenant")
    created_by: Optional[str] = Field(None, alias="createdBy")

    # Set by the version tree manager only
    lineage: Optional[VersionStamp] = Field(None)

    @field_validator('keywords', 'sources', mode='before')
    @classmethod
    def split_comma_separated(cls, v):
        """Accept comma-separated strings as well as lists."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(',') if item.strip()]
        return v or []


class ContentResult(BaseModel):
    """Result envelope returned by every pipeline run."""

    model_config = ConfigDict(use_enum_values=True)

    success: bool = Field(...)
    article_id: Optional[str] = Field(None)
    article: Optional[Article] = Field(None)
    compliance: Optional[ComplianceResult] = Field(None)
    quality_warnings: List[str] = Field(default_factory=list)
    error: Optional[str] = Field(None)
    error_type: Optional[ErrorType] = Field(None)
    error_details: Optional[Dict[str, Any]] = Field(None)
    steps: List[WorkflowStep] = Field(default_factory=list)
    total_duration_ms: int = Field(0)
    completed_at: Optional[datetime] = Field(None)


class RewriteRequest(BaseModel):
    """Rewrite invocation input."""

    model_config = ConfigDict(populate_by_name=True)

    article_id: str = Field(..., min_length=1, alias="articleId")
    version_notes: str = Field(..., min_length=1, alias="versionNotes")
    tenant_id: str = Field(..., min_length=1, alias="tenantId")


class RewriteResult(BaseModel):
    """Rewrite invocation output."""

    article_id: str = Field(...)
    version: int = Field(..., ge=2)
    parent_article_id: str = Field(...)


@dataclass(frozen=True)
class Continue:
    """Gate passed; warnings are advisory."""

    warnings: List[str] = field(default_factory=list)

    @property
    def proceed(self) -> bool:
        return True


@dataclass(frozen=True)
class Abort:
    """Gate failed; the run stops with this error."""

    error: Exception
    warnings: List[str] = field(default_factory=list)

    @property
    def proceed(self) -> bool:
        return False


StageOutcome = Union[Continue, Abort]
