"""
Error models and exception classes.

This module defines the exception taxonomy of the content pipeline and the
error response models used by the HTTP layer.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class ContentPipelineError(Exception):
    """Base exception for the content pipeline."""

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ContentPipelineError):
    """Invalid input."""

    def __init__(self, message: str, field: str = None, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message, "VALIDATION_ERROR", {"field": field, "value": value})


class GeneratorError(ContentPipelineError):
    """Generator (language model) call failed."""

    def __init__(self, message: str, model: str = None, retryable: bool = False, status_code: int = None):
        self.model = model
        self.retryable = retryable
        self.status_code = status_code
        super().__init__(
            message,
            "GENERATOR_ERROR",
            {"model": model, "retryable": retryable, "status_code": status_code}
        )


class RateLimitError(GeneratorError):
    """The external service signalled too many requests."""

    def __init__(self, message: str, model: str = None, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        super().__init__(message, model=model, retryable=True, status_code=429)
        self.error_code = "RATE_LIMIT_ERROR"
        self.details["retry_after"] = retry_after


class MaxRetriesExceededError(ContentPipelineError):
    """Rate-limited call still failing after every allowed attempt."""

    def __init__(self, message: str, attempts: int = 0):
        self.attempts = attempts
        super().__init__(message, "MAX_RETRIES_EXCEEDED", {"attempts": attempts})


class ParseError(ContentPipelineError):
    """Generator output did not match the expected schema."""

    def __init__(self, message: str, schema: str = None, raw_excerpt: str = None):
        self.schema = schema
        self.raw_excerpt = raw_excerpt
        super().__init__(
            message,
            "PARSE_ERROR",
            {"schema": schema, "raw_excerpt": raw_excerpt}
        )


class InsufficientFactsError(ContentPipelineError):
    """Too few approved facts to write reliable content."""

    def __init__(self, message: str, rejected_facts: List[Any] = None, approved_count: int = 0):
        self.rejected_facts = list(rejected_facts or [])
        self.approved_count = approved_count
        super().__init__(
            message,
            "INSUFFICIENT_FACTS",
            {"approved_count": approved_count, "rejected_count": len(self.rejected_facts)}
        )


class ComplianceError(ContentPipelineError):
    """Article failed the compliance gate. Carries critical issues only."""

    def __init__(self, message: str, critical_issues: List[Any] = None, overall_score: int = None):
        self.critical_issues = list(critical_issues or [])
        self.overall_score = overall_score
        super().__init__(
            message,
            "COMPLIANCE_FAILED",
            {"critical_count": len(self.critical_issues), "overall_score": overall_score}
        )


class StorageError(ContentPipelineError):
    """Persistent store operation failed."""

    def __init__(self, message: str, table: str = None, operation: str = None):
        self.table = table
        self.operation = operation
        super().__init__(
            message,
            "STORAGE_ERROR",
            {"table": table, "operation": operation}
        )


class UniqueViolationError(StorageError):
    """Insert collided with an existing row on a unique key."""

    def __init__(self, message: str, table: str = None, columns=None):
        self.columns = tuple(columns or ())
        super().__init__(message, table=table, operation="insert")


class PipelineTimeoutError(ContentPipelineError):
    """Pipeline run exceeded its wall-clock budget."""

    def __init__(self, stage: str = None, timeout: float = None):
        self.stage = stage
        self.timeout = timeout
        super().__init__(
            f"Operation timed out during {stage or 'pipeline'} (max: {timeout}s)",
            "TIMEOUT",
            {"stage": stage, "timeout": timeout}
        )


class ArticleNotFoundError(ContentPipelineError):
    """Article does not exist for the requesting tenant."""

    def __init__(self, article_id: str, tenant_id: str = None):
        self.article_id = article_id
        self.tenant_id = tenant_id
        super().__init__(
            f"Article not found: {article_id}",
            "ARTICLE_NOT_FOUND",
            {"article_id": article_id}
        )


class RewriteError(ContentPipelineError):
    """The pipeline run behind a rewrite did not succeed."""

    def __init__(self, message: str, article_id: str = None, result: Any = None):
        self.article_id = article_id
        self.result = result
        super().__init__(
            message,
            "REWRITE_FAILED",
            {
                "article_id": article_id,
                "error_type": getattr(result, "error_type", None),
            }
        )


class ConfigurationError(ContentPipelineError):
    """Configuration error."""

    def __init__(self, message: str, config_key: str = None):
        self.config_key = config_key
        super().__init__(
            message,
            "CONFIGURATION_ERROR",
            {"config_key": config_key}
        )


class AuthenticationError(ContentPipelineError):
    """Authentication error."""

    def __init__(self, message: str):
        super().__init__(message, "AUTHENTICATION_ERROR")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    error_code: str = Field("UNKNOWN_ERROR", description="Error code")
    status: int = Field(..., description="HTTP status code")

    # Optional Details
    details: Optional[Dict[str, Any]] = Field(None, description="Error details")
    field: Optional[str] = Field(None, description="Field that caused error")

    # Request Information
    request_id: Optional[str] = Field(None, description="Request ID")

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Error timestamp"
    )

    @classmethod
    def from_exception(cls, exc: ContentPipelineError, status: int = 500) -> 'ErrorResponse':
        """Create error response from exception."""
        return cls(
            error=exc.__class__.__name__,
            message=exc.message,
            error_code=exc.error_code or "UNKNOWN_ERROR",
            status=status,
            details=exc.details
        )

    def to_json(self) -> Dict[str, Any]:
        """Serialize for a JSON response body."""
        return self.model_dump(mode="json", exclude_none=True)


class ValidationErrorResponse(BaseModel):
    """Validation error response model."""

    error: str = Field(default="validation_error", description="Error type")
    message: str = Field(default="Validation failed", description="Error message")
    status: int = Field(default=400, description="HTTP status code")

    validation_errors: List[Dict[str, Any]] = Field(default_factory=list, description="Validation errors")

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Error timestamp"
    )

    def add_validation_error(self, field: str, message: str, value: Any = None):
        """Add a validation error."""
        error = {
            "field": field,
            "message": message
        }
        if value is not None:
            error["value"] = value

        self.validation_errors.append(error)

    def to_json(self) -> Dict[str, Any]:
        """Serialize for a JSON response body."""
        return self.model_dump(mode="json")
