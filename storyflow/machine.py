"""Step progression rules for a workflow."""

from __future__ import annotations

import logging
from typing import List

from .constants import (
    FOUNDATIONAL_STEPS,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STEP_NUMBERS,
    TOTAL_STEPS,
)
from .errors import InvalidStepError, NotActiveError
from .persistence.models import WorkflowRecord

logger = logging.getLogger(__name__)


class WorkflowStateMachine:
    """Gate which steps may be written and which must be invalidated."""

    total_steps = TOTAL_STEPS

    def check_step(self, step: object) -> int:
        if isinstance(step, bool) or not isinstance(step, int) or step not in STEP_NUMBERS:
            raise InvalidStepError(step)
        return step

    def ensure_editable(self, workflow: WorkflowRecord) -> None:
        if workflow.status != STATUS_ACTIVE:
            raise NotActiveError(workflow.id, workflow.status)

    def can_edit(self, workflow: WorkflowRecord, step: int) -> bool:
        return workflow.status == STATUS_ACTIVE and workflow.current_step >= step

    def invalidated_by(self, step: int) -> List[int]:
        """Steps cleared when ``step`` is submitted."""
        if step not in FOUNDATIONAL_STEPS:
            return []
        return list(range(step + 1, self.total_steps + 1))

    def invalidate(self, workflow: WorkflowRecord, step: int) -> List[int]:
        """Clear every step downstream of a foundational ``step``.

        The compiled script is dropped along with the cleared slots. Returns
        the cleared step numbers.
        """
        cleared = self.invalidated_by(step)
        if not cleared:
            return cleared
        for number in cleared:
            workflow.slot(number).clear()
        workflow.script = None
        logger.info(f"Workflow {workflow.id}: step {step} invalidated steps {cleared}")
        return cleared

    def advance(self, workflow: WorkflowRecord, step: int) -> int:
        workflow.current_step = max(workflow.current_step, step)
        return workflow.current_step

    def complete(self, workflow: WorkflowRecord) -> None:
        workflow.status = STATUS_COMPLETED
        logger.info(f"Workflow {workflow.id} completed")

    def completed_steps(self, workflow: WorkflowRecord) -> List[int]:
        return [n for n in STEP_NUMBERS if workflow.slot(n).output]

    def progress(self, workflow: WorkflowRecord) -> int:
        return round(len(self.completed_steps(workflow)) / self.total_steps * 100)
