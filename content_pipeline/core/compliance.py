"""
Compliance scorer.

Final quality gate before an article is stored. Scoring runs in two phases:

1. Deterministic pre-checks (placeholders, length, SEO metadata, tone and
   terminology). A critical pre-check finding short-circuits the scorer and
   the model-assisted phase is never called.
2. A model-assisted deep check across five weighted checks: fact
   verification, tone of voice, technical accuracy, completeness and SEO.
"""

import logging
from typing import Dict, List, Optional, Sequence

from .brand import BrandSettings, validate_terminology, validate_tone_of_voice
from .interfaces import DeepComplianceChecker
from .models.article import Article
from .models.compliance import (
    CheckName,
    ComplianceCheck,
    ComplianceChecks,
    ComplianceIssue,
    ComplianceResult,
    IssueSeverity
)
from .models.errors import ComplianceError
from .models.facts import Fact
from .models.workflow import Abort, Continue, StageOutcome
from ..integrations.llm.retry_handler import RetryHandler


logger = logging.getLogger(__name__)

MIN_WORD_COUNT = 650
MAX_TITLE_LENGTH = 60
MAX_META_DESCRIPTION_LENGTH = 155

CHECK_WEIGHTS: Dict[str, float] = {
    CheckName.FACT_VERIFICATION.value: 0.35,
    CheckName.TECHNICAL.value: 0.20,
    CheckName.TONE_OF_VOICE.value: 0.15,
    CheckName.COMPLETENESS.value: 0.15,
    CheckName.SEO.value: 0.15,
}

SHORT_CONTENT_PENALTY = 20
SEO_PENALTY_PER_ISSUE = 10
TERMINOLOGY_PENALTY_PER_ISSUE = 10


class PreCheckResult:
    """Findings of the deterministic phase."""

    def __init__(self, issues: List[ComplianceIssue], checks: ComplianceChecks):
        self.issues = issues
        self.checks = checks

    @property
    def critical(self) -> bool:
        return any(issue.is_critical for issue in self.issues)


class ComplianceScorer:
    """
    Two-phase compliance scorer.

    Args:
        deep_checker: Model-assisted checker
        brand: Tenant brand settings used by the lexical checks
        retry_handler: Optional retry policy wrapped around the deep check
        min_word_count: Minimum acceptable word count
        max_title_length: Maximum SEO title length
        max_meta_description_length: Maximum SEO meta description length
    """

    def __init__(
        self,
        deep_checker: DeepComplianceChecker,
        brand: Optional[BrandSettings] = None,
        retry_handler: Optional[RetryHandler] = None,
        min_word_count: int = MIN_WORD_COUNT,
        max_title_length: int = MAX_TITLE_LENGTH,
        max_meta_description_length: int = MAX_META_DESCRIPTION_LENGTH
    ):
        self.deep_checker = deep_checker
        self.brand = brand or BrandSettings()
        self.retry_handler = retry_handler
        self.min_word_count = min_word_count
        self.max_title_length = max_title_length
        self.max_meta_description_length = max_meta_description_length

    async def score(self, article: Article, approved_facts: Sequence[Fact]) -> ComplianceResult:
        """
        Score an article against the approved facts.

        Args:
            article: Draft article
            approved_facts: Facts the article may use

        Returns:
            ComplianceResult; never raises for a failed article
        """
        logger.info(
            f"Compliance check starting: '{article.title}' "
            f"({article.word_count} words, {len(approved_facts)} facts)"
        )

        pre = self.run_pre_checks(article)

        if pre.critical:
            logger.warning("Pre-checks failed critically, skipping deep check")
            return ComplianceResult(
                approved=False,
                overall_score=0,
                checks=pre.checks,
                issues=pre.issues,
                recommendations=[],
                deep_check_ran=False
            )

        if self.retry_handler is not None:
            verdict = await self.retry_handler.execute_with_retry(
                self.deep_checker.score_deep, article, list(approved_facts)
            )
        else:
            verdict = await self.deep_checker.score_deep(article, list(approved_facts))

        checks = self._merge_checks(pre.checks, verdict.checks)
        issues = pre.issues + list(verdict.issues)
        has_critical = any(issue.is_critical for issue in issues)

        result = ComplianceResult(
            approved=verdict.approved and not has_critical,
            overall_score=self.weighted_score(checks),
            checks=checks,
            issues=issues,
            recommendations=list(verdict.recommendations),
            deep_check_ran=True
        )

        logger.info(
            f"Compliance check {'PASSED' if result.approved else 'FAILED'}: "
            f"score {result.overall_score}/100, "
            f"{len(result.critical_issues())} critical, {len(result.advisory_issues())} advisory"
        )

        return result

    def run_pre_checks(self, article: Article) -> PreCheckResult:
        """Run the cheap deterministic checks."""
        issues: List[ComplianceIssue] = []

        placeholder = article.has_placeholders()
        if placeholder:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.CRITICAL,
                check=CheckName.COMPLETENESS,
                description="Article contains [PLACEHOLDER] tags",
                location="content",
                suggestion="Research missing information or remove placeholder"
            ))

        too_short = article.word_count < self.min_word_count
        if too_short:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.WARNING,
                check=CheckName.COMPLETENESS,
                description=f"Article too short: {article.word_count} words (min {self.min_word_count})",
                location="content"
            ))

        seo_issues = []
        if len(article.title) > self.max_title_length:
            seo_issues.append(ComplianceIssue(
                severity=IssueSeverity.WARNING,
                check=CheckName.SEO,
                description=f"Title too long: {len(article.title)} chars (max {self.max_title_length})",
                location="meta.title"
            ))

        if len(article.meta_description) > self.max_meta_description_length:
            seo_issues.append(ComplianceIssue(
                severity=IssueSeverity.WARNING,
                check=CheckName.SEO,
                description=(
                    f"Meta description too long: {len(article.meta_description)} chars "
                    f"(max {self.max_meta_description_length})"
                ),
                location="meta.description"
            ))
        issues.extend(seo_issues)

        tone = validate_tone_of_voice(article.content, self.brand)
        for description in tone.issues:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.WARNING,
                check=CheckName.TONE_OF_VOICE,
                description=description,
                location="content"
            ))

        terminology = validate_terminology(article.content, self.brand)
        for description in terminology:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.WARNING,
                check=CheckName.TECHNICAL,
                description=description,
                location="content"
            ))

        if placeholder:
            completeness_score = 0
        elif too_short:
            completeness_score = 100 - SHORT_CONTENT_PENALTY
        else:
            completeness_score = 100

        checks = ComplianceChecks(
            fact_verification=ComplianceCheck(),
            tone_of_voice=ComplianceCheck(passed=tone.valid, score=tone.score, issues=tone.issues),
            technical=ComplianceCheck(
                passed=True,
                score=max(0, 100 - TERMINOLOGY_PENALTY_PER_ISSUE * len(terminology)),
                issues=terminology
            ),
            completeness=ComplianceCheck(
                passed=not placeholder,
                score=completeness_score,
                issues=[i.description for i in issues if i.check == CheckName.COMPLETENESS.value]
            ),
            seo=ComplianceCheck(
                passed=True,
                score=max(0, 100 - SEO_PENALTY_PER_ISSUE * len(seo_issues)),
                issues=[i.description for i in seo_issues]
            )
        )

        return PreCheckResult(issues, checks)

    def assess(self, result: ComplianceResult) -> StageOutcome:
        """
        Gate policy for a scored article.

        Returns:
            Abort with a ComplianceError carrying critical issues only, or
            Continue with the advisory findings as warnings
        """
        warnings = [f"[{issue.check}] {issue.description}" for issue in result.advisory_issues()]

        if not result.approved:
            return Abort(
                ComplianceError(
                    "Article failed compliance check",
                    critical_issues=result.critical_issues(),
                    overall_score=result.overall_score
                ),
                warnings=warnings
            )

        return Continue(warnings=warnings)

    @staticmethod
    def weighted_score(checks: ComplianceChecks) -> int:
        """Combine per-check scores into a 0-100 overall score."""
        by_name = checks.as_dict()
        total = sum(CHECK_WEIGHTS[name] * by_name[name].score for name in CHECK_WEIGHTS)
        return max(0, min(100, int(round(total))))

    @staticmethod
    def _merge_checks(pre: ComplianceChecks, deep: ComplianceChecks) -> ComplianceChecks:
        merged = {}
        pre_checks = pre.as_dict()

        for name, deep_check in deep.as_dict().items():
            pre_check = pre_checks[name]
            issues = list(pre_check.issues)
            issues.extend(issue for issue in deep_check.issues if issue not in issues)

            merged[name] = ComplianceCheck(
                passed=pre_check.passed and deep_check.passed,
                score=min(pre_check.score, deep_check.score),
                issues=issues
            )

        return ComplianceChecks(**merged)
