"""
Pipeline orchestrator.

Runs one content request through research, validation, writing, compliance
and storage as a single workflow:

    Idle -> Research -> Validation -> Writing -> Compliance -> Storage -> Done
    any stage -> Failed(reason)

Every run returns a ``ContentResult`` envelope. Failures are classified into
insufficient facts, compliance rejection, storage failure, timeout and
unknown; the step ledger is returned in every case.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .compliance import ComplianceScorer
from .dedup import DEFAULT_CONFIDENCE_FLOOR, apply_confidence_floor, dedupe_facts
from .fact_gate import FactGate
from .interfaces import ArticleWriter, DeepComplianceChecker, FactClassifier, Researcher
from .models.article import Article
from .models.compliance import ComplianceResult
from .models.errors import (
    ComplianceError,
    InsufficientFactsError,
    PipelineTimeoutError,
    StorageError
)
from .models.facts import ClassificationVerdict
from .models.workflow import ContentRequest, ContentResult, ErrorType
from .workflow import WorkflowLedger
from ..integrations.llm.retry_handler import RetryHandler
from ..integrations.storage.repository import ArticleRepository
from ..utils.logging import StageLogger


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 180.0
GENERIC_ERROR_MESSAGE = "An unexpected error occurred while creating content"


class _RunState:
    """Partial results of a run, kept for the failure envelope."""

    def __init__(self):
        self.article: Optional[Article] = None
        self.compliance: Optional[ComplianceResult] = None
        self.warnings: List[str] = []


class PipelineOrchestrator:
    """
    Sequences the pipeline stages and enforces the gates between them.

    Args:
        researcher: Research stage
        classifier: Fact classification stage
        writer: Writing stage
        deep_checker: Model-assisted compliance check
        repository: Article persistence
        retry_handler: Retry policy around every external call
        fact_gate: Approved-fact gate
        confidence_floor: Minimum research confidence kept for classification
        timeout_seconds: Wall-clock budget of one run
        compliance_options: Keyword arguments for ``ComplianceScorer``
    """

    def __init__(
        self,
        researcher: Researcher,
        classifier: FactClassifier,
        writer: ArticleWriter,
        deep_checker: DeepComplianceChecker,
        repository: ArticleRepository,
        retry_handler: Optional[RetryHandler] = None,
        fact_gate: Optional[FactGate] = None,
        confidence_floor: float = DEFAULT_CONFIDENCE_FLOOR,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        compliance_options: Optional[Dict[str, Any]] = None
    ):
        self.researcher = researcher
        self.classifier = classifier
        self.writer = writer
        self.deep_checker = deep_checker
        self.repository = repository
        self.retry_handler = retry_handler
        self.fact_gate = fact_gate or FactGate()
        self.confidence_floor = confidence_floor
        self.timeout_seconds = timeout_seconds
        self.compliance_options = compliance_options or {}

    async def run(self, request: ContentRequest) -> ContentResult:
        """
        Run the pipeline for one request.

        Args:
            request: Content request with a resolved tenant

        Returns:
            ContentResult; failures are reported in the envelope, not raised
        """
        ledger = WorkflowLedger()
        state = _RunState()
        stage_logger = StageLogger(request.tenant_id, request.topic)
        stage_logger.log_run_start()

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_seconds

        try:
            result = await asyncio.wait_for(
                self._execute(request, ledger, state, stage_logger),
                timeout=self.timeout_seconds
            )

        except asyncio.TimeoutError as e:
            if loop.time() < deadline:
                # Raised inside a stage, not by the run budget
                result = self._failure(e, ledger, state, stage_logger)
            else:
                result = self._timeout(ledger, state, stage_logger)

        except Exception as e:
            result = self._failure(e, ledger, state, stage_logger)

        stage_logger.log_run_complete(result.success, result.total_duration_ms, result.article_id)
        return result

    def _timeout(self, ledger: WorkflowLedger, state: _RunState, stage_logger: StageLogger) -> ContentResult:
        error = PipelineTimeoutError(stage=ledger.current, timeout=self.timeout_seconds)
        logger.warning(f"Pipeline timed out after {self.timeout_seconds}s in stage {error.stage}")
        return self._failure(error, ledger, state, stage_logger)

    async def _execute(
        self,
        request: ContentRequest,
        ledger: WorkflowLedger,
        state: _RunState,
        stage_logger: StageLogger
    ) -> ContentResult:
        # Research
        self._start(ledger, stage_logger, "research")
        research = await self._call(
            self.researcher.research, request.topic, request.keywords, request.sources
        )
        unique = dedupe_facts(research.facts)
        facts = apply_confidence_floor(unique, self.confidence_floor)
        self._complete(ledger, stage_logger, "research", {
            "raw_facts": len(research.facts),
            "unique_facts": len(unique),
            "facts": len(facts),
            "duration_seconds": research.duration_seconds,
        })

        # Validation
        self._start(ledger, stage_logger, "validation")
        if facts:
            verdict = await self._call(self.classifier.classify, facts)
        else:
            verdict = ClassificationVerdict(summary="No facts to validate")

        self._check(self.fact_gate.evaluate(facts, verdict), state, stage_logger)
        validation = self.fact_gate.build_result(facts, verdict)
        self._collect(self.fact_gate.assess(validation), state, stage_logger)
        self._complete(ledger, stage_logger, "validation", {
            "approved": len(validation.approved),
            "rejected": len(validation.rejected),
            "approval_rate": round(validation.approval_rate, 3),
        })

        # Writing
        self._start(ledger, stage_logger, "writing")
        brand = await asyncio.to_thread(self.repository.load_brand_settings, request.tenant_id)
        article = await self._call(
            self.writer.write,
            validation.approved,
            request.topic,
            request.target_audience,
            request.keywords,
            request.desired_word_count,
            brand,
            briefing=request.briefing,
            version_notes=request.version_notes
        )
        state.article = article
        self._complete(ledger, stage_logger, "writing", {
            "title": article.title,
            "word_count": article.word_count,
        })

        # Compliance
        self._start(ledger, stage_logger, "compliance")
        scorer = ComplianceScorer(
            self.deep_checker,
            brand,
            retry_handler=self.retry_handler,
            **self.compliance_options
        )
        compliance = await scorer.score(article, validation.approved)
        state.compliance = compliance
        self._check(scorer.assess(compliance), state, stage_logger)
        self._complete(ledger, stage_logger, "compliance", {
            "approved": compliance.approved,
            "overall_score": compliance.overall_score,
            "deep_check_ran": compliance.deep_check_ran,
        })

        # Storage
        self._start(ledger, stage_logger, "storage")
        article_id = await asyncio.to_thread(
            self.repository.save_article,
            request, article, compliance, validation.approved, state.warnings
        )
        self._complete(ledger, stage_logger, "storage", {"article_id": article_id})

        return ContentResult(
            success=True,
            article_id=article_id,
            article=article,
            compliance=compliance,
            quality_warnings=list(state.warnings),
            steps=ledger.snapshot(),
            total_duration_ms=ledger.total_duration_ms,
            completed_at=datetime.now(timezone.utc)
        )

    async def _call(self, func: Callable, *args, **kwargs):
        if self.retry_handler is None:
            return await func(*args, **kwargs)
        return await self.retry_handler.execute_with_retry(func, *args, **kwargs)

    def _check(self, outcome, state: _RunState, stage_logger: StageLogger):
        """Collect warnings of an outcome and raise its error on abort."""
        self._collect(outcome, state, stage_logger)
        if not outcome.proceed:
            raise outcome.error

    @staticmethod
    def _collect(outcome, state: _RunState, stage_logger: StageLogger):
        for warning in outcome.warnings:
            stage_logger.log_warning(warning)
            state.warnings.append(warning)

    @staticmethod
    def _start(ledger: WorkflowLedger, stage_logger: StageLogger, name: str):
        ledger.start(name)
        stage_logger.log_stage_start(name)

    @staticmethod
    def _complete(ledger: WorkflowLedger, stage_logger: StageLogger, name: str, data: Dict[str, Any]):
        step = ledger.complete(name, data)
        stage_logger.log_stage_complete(name, step.duration_ms)

    def _failure(
        self,
        error: Exception,
        ledger: WorkflowLedger,
        state: _RunState,
        stage_logger: StageLogger
    ) -> ContentResult:
        stage = ledger.current
        error_type, message, details = self.classify_error(error)

        stage_logger.log_stage_error(stage, message, exc_info=error_type == ErrorType.UNKNOWN)
        ledger.fail_running(message)

        return ContentResult(
            success=False,
            article=state.article,
            compliance=state.compliance,
            quality_warnings=list(state.warnings),
            error=message,
            error_type=error_type,
            error_details=details,
            steps=ledger.snapshot(),
            total_duration_ms=ledger.total_duration_ms,
            completed_at=datetime.now(timezone.utc)
        )

    @staticmethod
    def classify_error(error: Exception):
        """
        Map an exception onto the result envelope.

        Returns:
            Tuple of (error type, tenant-facing message, details)
        """
        if isinstance(error, InsufficientFactsError):
            return ErrorType.INSUFFICIENT_FACTS, error.message, {
                "approved_count": error.approved_count,
                "rejected_facts": [
                    {
                        "claim": fact.claim,
                        "reason": getattr(fact, "rejection_reason", ""),
                    }
                    for fact in error.rejected_facts
                ],
            }

        if isinstance(error, ComplianceError):
            return ErrorType.COMPLIANCE_FAILED, error.message, {
                "overall_score": error.overall_score,
                "critical_issues": [issue.model_dump(mode="json") for issue in error.critical_issues],
            }

        if isinstance(error, StorageError):
            return ErrorType.STORAGE_FAILED, error.message, {
                "table": error.table,
                "operation": error.operation,
            }

        if isinstance(error, PipelineTimeoutError):
            return ErrorType.TIMEOUT, error.message, {
                "stage": error.stage,
                "timeout_seconds": error.timeout,
            }

        return ErrorType.UNKNOWN, GENERIC_ERROR_MESSAGE, {"exception": type(error).__name__}
