"""Storage for workflows, their storyboards and headless run status.

Every backend keeps three collections: ``workflows`` (one row per
authoring session with its seven input/output slots and compiled script),
``storyboards`` (the accumulated story document a workflow points at) and
``run_status`` (the progress record a headless run publishes). Slot and
storyboard payloads are stored as JSON in their camelCase wire form.
"""

from __future__ import annotations

import os
from typing import Optional

from ..config import StoryflowConfig, load_config
from .inmemory import InMemoryWorkflowRepository
from .models import StepSlot, WorkflowRecord
from .repository import WorkflowRepository
from .sqlite import SQLiteWorkflowRepository

_repository_instance: WorkflowRepository | None = None


def get_repository(
    database_url: Optional[str] = None, config: Optional[StoryflowConfig] = None
) -> WorkflowRepository:
    """Return the process-wide repository, building it on first use.

    ``sqlite://<path>`` and ``postgres(ql)://`` urls pick the matching backend;
    the url comes from the argument, ``STORYFLOW_DATABASE_URL``, ``DATABASE_URL``
    or ``config.database_url`` in that order. Without one, workflows live in
    memory for the life of the process.
    """

    global _repository_instance
    if _repository_instance is not None and database_url is None and config is None:
        return _repository_instance

    config = config or load_config()
    database_url = (
        database_url
        or os.getenv("STORYFLOW_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or config.database_url
    )

    if not database_url:
        _repository_instance = InMemoryWorkflowRepository()
        return _repository_instance

    if database_url.startswith("sqlite://"):
        path = database_url.replace("sqlite://", "", 1)
        _repository_instance = SQLiteWorkflowRepository(path)
    elif database_url.startswith("postgres://") or database_url.startswith(
        "postgresql://"
    ):
        from .postgres import PostgresWorkflowRepository

        _repository_instance = PostgresWorkflowRepository(database_url)
    else:
        raise ValueError(f"Unsupported database backend: {database_url}")

    return _repository_instance


__all__ = [
    "StepSlot",
    "WorkflowRecord",
    "WorkflowRepository",
    "SQLiteWorkflowRepository",
    "InMemoryWorkflowRepository",
    "get_repository",
]
