"""
Compliance-related data models and schemas.
"""

from enum import Enum
from typing import Optional, List, Dict
from pydantic import BaseModel, ConfigDict, Field


class IssueSeverity(str, Enum):
    """Issue severity levels. Only critical issues block publication."""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class CheckName(str, Enum):
    """The five compliance checks."""
    FACT_VERIFICATION = "fact_verification"
    TONE_OF_VOICE = "tone_of_voice"
    TECHNICAL = "technical"
    COMPLETENESS = "completeness"
    SEO = "seo"


class ComplianceCheck(BaseModel):
    """Result of one compliance check."""

    passed: bool = Field(True)
    score: int = Field(100, ge=0, le=100)
    issues: List[str] = Field(default_factory=list)


class ComplianceIssue(BaseModel):
    """A single finding."""

    model_config = ConfigDict(use_enum_values=True)

    severity: IssueSeverity = Field(...)
    check: CheckName = Field(...)
    description: str = Field(...)
    location: str = Field("content")
    suggestion: Optional[str] = Field(None)

    @property
    def is_critical(self) -> bool:
        return self.severity == IssueSeverity.CRITICAL.value


class ComplianceChecks(BaseModel):
    """Per-check results keyed by check name."""

    fact_verification: ComplianceCheck = Field(default_factory=ComplianceCheck)
    tone_of_voice: ComplianceCheck = Field(default_factory=ComplianceCheck)
    technical: ComplianceCheck = Field(default_factory=ComplianceCheck)
    completeness: ComplianceCheck = Field(default_factory=ComplianceCheck)
    seo: ComplianceCheck = Field(default_factory=ComplianceCheck)

    def as_dict(self) -> Dict[str, ComplianceCheck]:
        return {name.value: getattr(self, name.value) for name in CheckName}


class DeepComplianceVerdict(BaseModel):
    """Structured verdict returned by the model-assisted check."""

    approved: bool = Field(...)
    checks: ComplianceChecks = Field(default_factory=ComplianceChecks)
    issues: List[ComplianceIssue] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class ComplianceResult(BaseModel):
    """Final compliance decision for one article."""

    approved: bool = Field(...)
    overall_score: int = Field(..., ge=0, le=100)
    checks: ComplianceChecks = Field(default_factory=ComplianceChecks)
    issues: List[ComplianceIssue] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    deep_check_ran: bool = Field(False, description="Whether the model-assisted phase ran")

    def critical_issues(self) -> List[ComplianceIssue]:
        return [issue for issue in self.issues if issue.is_critical]

    def advisory_issues(self) -> List[ComplianceIssue]:
        return [issue for issue in self.issues if not issue.is_critical]
