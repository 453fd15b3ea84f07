"""Headless runs: the whole pipeline driven without user interaction."""

from __future__ import annotations

import asyncio
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

from .constants import RUN_STEP_LABELS, STATUS_COMPLETED, TOTAL_STEPS
from .contracts import RunStatus
from .errors import StoryflowError
from .persistence import WorkflowRepository
from .service import WorkflowService

logger = logging.getLogger(__name__)


def step_progress(index: int) -> int:
    """Progress reported while the step at zero-based ``index`` runs."""
    return math.floor((index + 1) / TOTAL_STEPS * 90)


class HeadlessRunner:
    """Submit every step in turn, feeding each one the input seeded for it.

    Progress is published as a ``RunStatus`` record that clients poll.
    A failed run is terminal and cannot be resumed.
    """

    def __init__(self, service: WorkflowService, repository: Optional[WorkflowRepository] = None):
        self.service = service
        self.repository = repository or service.repository
        self._tasks: Set[asyncio.Task] = set()

    async def _publish(self, status: RunStatus, /, **changes: Any) -> RunStatus:
        changes["updated_at"] = datetime.now(timezone.utc)
        status = status.model_copy(update=changes)
        await self.repository.save_run_status(status)
        return status

    async def prepare(self, run_id: Optional[str] = None) -> RunStatus:
        status = RunStatus(run_id=run_id or str(uuid.uuid4()), message="queued")
        await self.repository.save_run_status(status)
        return status

    async def run(
        self, owner_id: str, story_input: Dict[str, Any], run_id: Optional[str] = None
    ) -> RunStatus:
        """Drive a new workflow from ``story_input`` through all seven steps."""
        status = await self.repository.get_run_status(run_id) if run_id else None
        if status is None:
            status = await self.prepare(run_id)
        try:
            workflow = await self.service.create_workflow(owner_id)
            status = await self._publish(status, workflow_id=workflow.id)
            result = None
            for index, label in enumerate(RUN_STEP_LABELS):
                step = index + 1
                status = await self._publish(
                    status,
                    status="processing",
                    current_step=label,
                    progress=step_progress(index),
                    message=f"step {step}/{TOTAL_STEPS}: {label}",
                )
                if step == 1:
                    payload = story_input
                else:
                    view = await self.service.read_step(workflow.id, step, owner_id)
                    if not view.input:
                        raise StoryflowError(f"No input was prepared for step {step}")
                    payload = dict(view.input)
                if step == TOTAL_STEPS:
                    payload["confirmed"] = True
                result = await self.service.submit_step(workflow.id, step, payload, owner_id)

            if result is None or result.status != STATUS_COMPLETED:
                raise StoryflowError("The story produced nothing to render")
            status = await self._publish(
                status,
                status="completed",
                current_step=None,
                progress=100,
                message="completed",
                video_id=result.render_ref or workflow.id,
            )
        except Exception as exc:
            logger.error(f"Headless run {status.run_id} failed: {exc}")
            status = await self._publish(status, status="failed", error=str(exc), message="failed")
        return status

    async def start(self, owner_id: str, story_input: Dict[str, Any]) -> str:
        """Start a run in the background and return its id."""
        status = await self.prepare()
        task = asyncio.create_task(self.run(owner_id, story_input, status.run_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return status.run_id

    async def wait(self) -> None:
        """Wait for every launched run to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def get_status(self, run_id: str) -> Optional[RunStatus]:
        return await self.repository.get_run_status(run_id)
