"""PostgreSQL implementation of the workflow repository."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

import asyncpg

from ..contracts import RunStatus
from ..models import Storyboard
from .models import StepSlot, WorkflowRecord
from .repository import WorkflowRepository

_WORKFLOW_COLUMNS = (
    "id, owner_id, storyboard_id, current_step, status, steps, script, created_at, updated_at"
)


def _load(value: Any) -> Any:
    if value is None:
        return None
    return json.loads(value) if isinstance(value, str) else value


class PostgresWorkflowRepository(WorkflowRepository):
    """Persist workflow state using PostgreSQL."""

    def __init__(self, dsn: str):
        self._dsn = dsn
        self._initialized = False

    async def _connect(self) -> asyncpg.Connection:
        conn = await asyncpg.connect(self._dsn)
        if not self._initialized:
            await self._ensure_schema(conn)
            self._initialized = True
        return conn

    async def _ensure_schema(self, conn: asyncpg.Connection) -> None:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS workflows (
                id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                storyboard_id TEXT NOT NULL,
                current_step INTEGER NOT NULL,
                status TEXT NOT NULL,
                steps JSONB NOT NULL,
                script JSONB,
                created_at TIMESTAMPTZ NOT NULL,
                updated_at TIMESTAMPTZ NOT NULL
            )
            """
        )
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS storyboards (
                id TEXT PRIMARY KEY,
                data JSONB NOT NULL
            )
            """
        )
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS run_status (
                run_id TEXT PRIMARY KEY,
                data JSONB NOT NULL
            )
            """
        )

    @staticmethod
    def _row_to_workflow(row: Any) -> WorkflowRecord:
        return WorkflowRecord(
            id=row["id"],
            owner_id=row["owner_id"],
            storyboard_id=row["storyboard_id"],
            current_step=row["current_step"],
            status=row["status"],
            steps=[StepSlot(**slot) for slot in _load(row["steps"])],
            script=_load(row["script"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    # ------------------------------------------------------------------
    async def create_workflow(self, workflow: WorkflowRecord) -> None:
        conn = await self._connect()
        try:
            await conn.execute(
                f"INSERT INTO workflows ({_WORKFLOW_COLUMNS}) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)",
                workflow.id,
                workflow.owner_id,
                workflow.storyboard_id,
                workflow.current_step,
                workflow.status,
                json.dumps([slot.model_dump() for slot in workflow.steps]),
                json.dumps(workflow.script) if workflow.script is not None else None,
                workflow.created_at,
                workflow.updated_at,
            )
        finally:
            await conn.close()

    async def get_workflow(
        self, workflow_id: str, owner_id: str | None = None
    ) -> WorkflowRecord | None:
        conn = await self._connect()
        try:
            row = await conn.fetchrow(
                f"SELECT {_WORKFLOW_COLUMNS} FROM workflows WHERE id = $1",
                workflow_id,
            )
        finally:
            await conn.close()
        if not row:
            return None
        if owner_id is not None and row["owner_id"] != owner_id:
            return None
        return self._row_to_workflow(row)

    async def save_workflow(self, workflow: WorkflowRecord) -> None:
        workflow.updated_at = datetime.now(timezone.utc)
        conn = await self._connect()
        try:
            await conn.execute(
                """
                UPDATE workflows
                SET current_step = $1, status = $2, steps = $3, script = $4, updated_at = $5
                WHERE id = $6
                """,
                workflow.current_step,
                workflow.status,
                json.dumps([slot.model_dump() for slot in workflow.steps]),
                json.dumps(workflow.script) if workflow.script is not None else None,
                workflow.updated_at,
                workflow.id,
            )
        finally:
            await conn.close()

    async def list_workflows(self, owner_id: str | None = None) -> list[WorkflowRecord]:
        conn = await self._connect()
        try:
            if owner_id is None:
                rows = await conn.fetch(
                    f"SELECT {_WORKFLOW_COLUMNS} FROM workflows ORDER BY created_at"
                )
            else:
                rows = await conn.fetch(
                    f"SELECT {_WORKFLOW_COLUMNS} FROM workflows WHERE owner_id = $1 ORDER BY created_at",
                    owner_id,
                )
        finally:
            await conn.close()
        return [self._row_to_workflow(r) for r in rows]

    async def get_storyboard(self, storyboard_id: str) -> Storyboard | None:
        conn = await self._connect()
        try:
            row = await conn.fetchrow(
                "SELECT data FROM storyboards WHERE id = $1", storyboard_id
            )
        finally:
            await conn.close()
        if not row:
            return None
        return Storyboard.model_validate(_load(row["data"]))

    async def save_storyboard(self, storyboard: Storyboard) -> None:
        conn = await self._connect()
        try:
            await conn.execute(
                """
                INSERT INTO storyboards (id, data) VALUES ($1, $2)
                ON CONFLICT (id) DO UPDATE SET data = EXCLUDED.data
                """,
                storyboard.id,
                json.dumps(storyboard.to_wire()),
            )
        finally:
            await conn.close()

    async def save_run_status(self, status: RunStatus) -> None:
        conn = await self._connect()
        try:
            await conn.execute(
                """
                INSERT INTO run_status (run_id, data) VALUES ($1, $2)
                ON CONFLICT (run_id) DO UPDATE SET data = EXCLUDED.data
                """,
                status.run_id,
                json.dumps(status.to_wire()),
            )
        finally:
            await conn.close()

    async def get_run_status(self, run_id: str) -> RunStatus | None:
        conn = await self._connect()
        try:
            row = await conn.fetchrow(
                "SELECT data FROM run_status WHERE run_id = $1", run_id
            )
        finally:
            await conn.close()
        if not row:
            return None
        return RunStatus.model_validate(_load(row["data"]))
