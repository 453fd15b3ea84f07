"""Data models for persisted workflow state."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..constants import STATUS_ACTIVE, TOTAL_STEPS


def _now() -> datetime:
    return datetime.now(timezone.utc)


class StepSlot(BaseModel):
    """Stored input and output documents of one step."""

    input: Optional[Dict[str, Any]] = None
    output: Optional[Dict[str, Any]] = None

    def clear(self) -> None:
        self.input = None
        self.output = None


class WorkflowRecord(BaseModel):
    """Persisted workflow instance data."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str
    storyboard_id: str
    current_step: int = 1
    status: str = STATUS_ACTIVE
    steps: List[StepSlot] = Field(
        default_factory=lambda: [StepSlot() for _ in range(TOTAL_STEPS)]
    )
    script: Optional[Dict[str, Any]] = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    def slot(self, step: int) -> StepSlot:
        """Return the slot of ``step`` (1-based)."""
        return self.steps[step - 1]
