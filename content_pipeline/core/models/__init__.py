"""
Data models and schemas for the content pipeline.

This module contains all the data models, validation schemas, and
type definitions used throughout the system.
"""

from .facts import (
    Fact,
    FactCategory,
    ApprovedFact,
    RejectedFact,
    ResearchResult,
    ClassificationVerdict,
    ValidationResult
)

from .article import (
    Article,
    ArticleRecord,
    ArticleStatus,
    VersionStamp,
    PLACEHOLDER_MARKER
)

from .compliance import (
    CheckName,
    ComplianceCheck,
    ComplianceChecks,
    ComplianceIssue,
    ComplianceResult,
    DeepComplianceVerdict,
    IssueSeverity
)

from .workflow import (
    Abort,
    Continue,
    ContentRequest,
    ContentResult,
    ErrorType,
    RewriteRequest,
    RewriteResult,
    StageOutcome,
    StepStatus,
    WorkflowStep
)

from .errors import (
    ContentPipelineError,
    ValidationError,
    GeneratorError,
    RateLimitError,
    MaxRetriesExceededError,
    ParseError,
    InsufficientFactsError,
    ComplianceError,
    StorageError,
    UniqueViolationError,
    PipelineTimeoutError,
    ArticleNotFoundError,
    RewriteError
)

__all__ = [
    # Fact models
    'Fact',
    'FactCategory',
    'ApprovedFact',
    'RejectedFact',
    'ResearchResult',
    'ClassificationVerdict',
    'ValidationResult',

    # Article models
    'Article',
    'ArticleRecord',
    'ArticleStatus',
    'VersionStamp',
    'PLACEHOLDER_MARKER',

    # Compliance models
    'CheckName',
    'ComplianceCheck',
    'ComplianceChecks',
    'ComplianceIssue',
    'ComplianceResult',
    'DeepComplianceVerdict',
    'IssueSeverity',

    # Workflow models
    'Abort',
    'Continue',
    'ContentRequest',
    'ContentResult',
    'ErrorType',
    'RewriteRequest',
    'RewriteResult',
    'StageOutcome',
    'StepStatus',
    'WorkflowStep',

    # Error models
    'ContentPipelineError',
    'ValidationError',
    'GeneratorError',
    'RateLimitError',
    'MaxRetriesExceededError',
    'ParseError',
    'InsufficientFactsError',
    'ComplianceError',
    'StorageError',
    'UniqueViolationError',
    'PipelineTimeoutError',
    'ArticleNotFoundError',
    'RewriteError'
]
