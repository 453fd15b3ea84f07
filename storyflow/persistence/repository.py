"""Repository abstraction for workflow state persistence."""

from __future__ import annotations

from typing import Protocol

from ..contracts import RunStatus
from ..models import Storyboard
from .models import WorkflowRecord


class WorkflowRepository(Protocol):
    """Protocol for workflow state persistence backends."""

    async def create_workflow(self, workflow: WorkflowRecord) -> None:
        """Persist a new workflow."""

    async def get_workflow(
        self, workflow_id: str, owner_id: str | None = None
    ) -> WorkflowRecord | None:
        """Retrieve a workflow by id, optionally scoped to its owner."""

    async def save_workflow(self, workflow: WorkflowRecord) -> None:
        """Overwrite the stored workflow record."""

    async def list_workflows(self, owner_id: str | None = None) -> list[WorkflowRecord]:
        """Return persisted workflows, optionally for a single owner."""

    async def get_storyboard(self, storyboard_id: str) -> Storyboard | None:
        """Retrieve a storyboard by id."""

    async def save_storyboard(self, storyboard: Storyboard) -> None:
        """Insert or overwrite a storyboard."""

    async def save_run_status(self, status: RunStatus) -> None:
        """Insert or overwrite the status of a headless run."""

    async def get_run_status(self, run_id: str) -> RunStatus | None:
        """Retrieve the status of a headless run."""
