"""
Fact gate.

Decides whether a classified fact set is good enough to write from. The
gate has two tiers:

- a hard gate: fewer than ``min_approved_facts`` approved facts aborts the
  run with ``InsufficientFactsError``;
- a soft gate: a low approval rate is reported as a quality warning but the
  run continues.
"""

import logging
from typing import List, Sequence

from .models.errors import InsufficientFactsError
from .models.facts import Fact, ClassificationVerdict, ValidationResult
from .models.workflow import Abort, Continue, StageOutcome


logger = logging.getLogger(__name__)

MIN_APPROVED_FACTS = 5
MIN_APPROVAL_RATE = 0.6


class FactGate:
    """Minimum-count and approval-rate policy for validated facts."""

    def __init__(self, min_approved_facts: int = MIN_APPROVED_FACTS, min_approval_rate: float = MIN_APPROVAL_RATE):
        self.min_approved_facts = min_approved_facts
        self.min_approval_rate = min_approval_rate

    def gate(self, facts: Sequence[Fact], verdict: ClassificationVerdict) -> ValidationResult:
        """
        Build the validation result and apply the hard gate.

        Args:
            facts: Facts that were sent to the classifier
            verdict: Classifier partition of those facts

        Returns:
            ValidationResult with the approval rate

        Raises:
            InsufficientFactsError: If too few facts were approved
        """
        outcome = self.evaluate(facts, verdict)
        if isinstance(outcome, Abort):
            raise outcome.error
        return self.build_result(facts, verdict)

    def evaluate(self, facts: Sequence[Fact], verdict: ClassificationVerdict) -> StageOutcome:
        """Hard gate as an outcome value instead of an exception."""
        approved_count = len(verdict.approved)

        if approved_count < self.min_approved_facts:
            logger.warning(
                f"Only {approved_count} facts approved (minimum: {self.min_approved_facts})"
            )
            return Abort(InsufficientFactsError(
                f"Only {approved_count} facts approved. "
                f"Need minimum {self.min_approved_facts} for content creation.",
                rejected_facts=verdict.rejected,
                approved_count=approved_count
            ))

        return Continue()

    def assess(self, validation: ValidationResult) -> StageOutcome:
        """
        Soft gate: annotate weak-but-sufficient fact sets.

        Args:
            validation: Result that already passed the hard gate

        Returns:
            Continue carrying zero or more quality warnings
        """
        warnings: List[str] = []

        if validation.approval_rate < self.min_approval_rate:
            warnings.append(
                f"Low fact approval rate: {validation.approval_rate:.0%} "
                f"(below {self.min_approval_rate:.0%}); "
                f"{len(validation.rejected)} facts were rejected"
            )

        return Continue(warnings=warnings)

    @staticmethod
    def build_result(facts: Sequence[Fact], verdict: ClassificationVerdict) -> ValidationResult:
        total = len(facts)
        approval_rate = len(verdict.approved) / total if total else 0.0

        return ValidationResult(
            approved=verdict.approved,
            rejected=verdict.rejected,
            approval_rate=min(1.0, approval_rate),
            summary=verdict.summary
        )
