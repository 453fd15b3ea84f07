"""In-memory implementation of the workflow repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from ..contracts import RunStatus
from ..models import Storyboard
from .models import WorkflowRecord
from .repository import WorkflowRepository


class InMemoryWorkflowRepository(WorkflowRepository):
    """Store workflow state in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts. Records are copied on the way in
    and out so callers never share mutable state with the store.
    """

    def __init__(self) -> None:
        self._workflows: Dict[str, WorkflowRecord] = {}
        self._storyboards: Dict[str, Storyboard] = {}
        self._runs: Dict[str, RunStatus] = {}

    # ------------------------------------------------------------------
    async def create_workflow(self, workflow: WorkflowRecord) -> None:
        self._workflows[workflow.id] = workflow.model_copy(deep=True)

    async def get_workflow(
        self, workflow_id: str, owner_id: str | None = None
    ) -> WorkflowRecord | None:
        wf = self._workflows.get(workflow_id)
        if wf is None or (owner_id is not None and wf.owner_id != owner_id):
            return None
        return wf.model_copy(deep=True)

    async def save_workflow(self, workflow: WorkflowRecord) -> None:
        workflow.updated_at = datetime.now(timezone.utc)
        self._workflows[workflow.id] = workflow.model_copy(deep=True)

    async def list_workflows(self, owner_id: str | None = None) -> list[WorkflowRecord]:
        return [
            wf.model_copy(deep=True)
            for wf in self._workflows.values()
            if owner_id is None or wf.owner_id == owner_id
        ]

    async def get_storyboard(self, storyboard_id: str) -> Storyboard | None:
        storyboard = self._storyboards.get(storyboard_id)
        return storyboard.model_copy(deep=True) if storyboard else None

    async def save_storyboard(self, storyboard: Storyboard) -> None:
        self._storyboards[storyboard.id] = storyboard.model_copy(deep=True)

    async def save_run_status(self, status: RunStatus) -> None:
        self._runs[status.run_id] = status.model_copy(deep=True)

    async def get_run_status(self, run_id: str) -> RunStatus | None:
        status = self._runs.get(run_id)
        return status.model_copy(deep=True) if status else None
