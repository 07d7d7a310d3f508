"""
Workflow step ledger.

Records the start, end, duration and outcome of every pipeline stage. The
ledger is returned with every result envelope, successful or not.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .models.workflow import StepStatus, WorkflowStep


class WorkflowLedger:
    """Ordered list of workflow steps for one run."""

    def __init__(self):
        self.steps: List[WorkflowStep] = []
        self._started: Dict[str, float] = {}
        self._created = time.monotonic()

    def start(self, name: str) -> WorkflowStep:
        step = WorkflowStep(
            name=name,
            status=StepStatus.RUNNING,
            start_time=datetime.now(timezone.utc)
        )
        self.steps.append(step)
        self._started[name] = time.monotonic()
        return step

    def complete(self, name: str, data: Optional[Dict[str, Any]] = None) -> WorkflowStep:
        return self._finish(name, StepStatus.COMPLETED, data=data)

    def fail(self, name: str, error: str) -> WorkflowStep:
        return self._finish(name, StepStatus.FAILED, error=error)

    def fail_running(self, error: str):
        """Mark every step still running as failed."""
        for step in self.steps:
            if step.status == StepStatus.RUNNING.value:
                self.fail(step.name, error)

    @property
    def current(self) -> Optional[str]:
        """Name of the running step, if any."""
        for step in reversed(self.steps):
            if step.status == StepStatus.RUNNING.value:
                return step.name
        return None

    @property
    def total_duration_ms(self) -> int:
        return int((time.monotonic() - self._created) * 1000)

    def snapshot(self) -> List[WorkflowStep]:
        return [step.model_copy() for step in self.steps]

    def _finish(self, name: str, status: StepStatus, data=None, error=None) -> WorkflowStep:
        step = self._find(name)
        step.status = status.value
        step.end_time = datetime.now(timezone.utc)
        step.duration_ms = int((time.monotonic() - self._started.pop(name, time.monotonic())) * 1000)
        step.data = data
        step.error = error
        return step

    def _find(self, name: str) -> WorkflowStep:
        for step in reversed(self.steps):
            if step.name == name:
                return step
        raise KeyError(f"Unknown workflow step: {name}")
