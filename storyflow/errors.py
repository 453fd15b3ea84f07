"""Exception types raised by the storyflow pipeline."""

from __future__ import annotations

from typing import Optional


class StoryflowError(Exception):
    """Base class for all storyflow errors."""


class StepValidationError(StoryflowError):
    """A step payload is malformed or missing."""

    def __init__(self, message: str, step: Optional[int] = None):
        super().__init__(message)
        self.step = step


class InvalidStepError(StepValidationError):
    """The step number lies outside the pipeline."""

    def __init__(self, step: object):
        super().__init__(f"Invalid step number: {step!r}")
        self.step = step


class NotFoundError(StoryflowError):
    """The workflow does not exist or belongs to another owner."""

    def __init__(self, workflow_id: str):
        super().__init__(f"Workflow not found: {workflow_id}")
        self.workflow_id = workflow_id


class NotActiveError(StoryflowError):
    """A write was attempted on a workflow that is no longer active."""

    def __init__(self, workflow_id: str, status: str):
        super().__init__(f"Workflow {workflow_id} is {status} and cannot be edited")
        self.workflow_id = workflow_id
        self.status = status


class GenerationAdapterError(StoryflowError):
    """The content generation backend failed to produce a suggestion."""

    def __init__(self, step: int, message: str):
        super().__init__(f"Generation failed for step {step}: {message}")
        self.step = step
