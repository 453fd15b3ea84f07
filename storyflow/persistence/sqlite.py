"""SQLite implementation of the workflow repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..contracts import RunStatus
from ..models import Storyboard
from .models import StepSlot, WorkflowRecord
from .repository import WorkflowRepository

_WORKFLOW_COLUMNS = (
    "id, owner_id, storyboard_id, current_step, status, steps, script, created_at, updated_at"
)


class SQLiteWorkflowRepository(WorkflowRepository):
    """Persist workflow state using SQLite."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS workflows (
                id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                storyboard_id TEXT NOT NULL,
                current_step INTEGER NOT NULL,
                status TEXT NOT NULL,
                steps TEXT NOT NULL,
                script TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS storyboards (
                id TEXT PRIMARY KEY,
                data TEXT NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS run_status (
                run_id TEXT PRIMARY KEY,
                data TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        self._conn.commit()

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchone()

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchall()

    @staticmethod
    def _row_to_workflow(row: sqlite3.Row) -> WorkflowRecord:
        return WorkflowRecord(
            id=row["id"],
            owner_id=row["owner_id"],
            storyboard_id=row["storyboard_id"],
            current_step=row["current_step"],
            status=row["status"],
            steps=[StepSlot(**slot) for slot in json.loads(row["steps"])],
            script=json.loads(row["script"]) if row["script"] else None,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    @staticmethod
    def _steps_json(workflow: WorkflowRecord) -> str:
        return json.dumps([slot.model_dump() for slot in workflow.steps])

    # ------------------------------------------------------------------
    # Repository API
    async def create_workflow(self, workflow: WorkflowRecord) -> None:
        await asyncio.to_thread(
            self._execute,
            f"INSERT INTO workflows ({_WORKFLOW_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            workflow.id,
            workflow.owner_id,
            workflow.storyboard_id,
            workflow.current_step,
            workflow.status,
            self._steps_json(workflow),
            json.dumps(workflow.script) if workflow.script is not None else None,
            workflow.created_at.isoformat(),
            workflow.updated_at.isoformat(),
        )

    async def get_workflow(
        self, workflow_id: str, owner_id: str | None = None
    ) -> WorkflowRecord | None:
        row = await asyncio.to_thread(
            self._fetchone,
            f"SELECT {_WORKFLOW_COLUMNS} FROM workflows WHERE id = ?",
            workflow_id,
        )
        if not row:
            return None
        if owner_id is not None and row["owner_id"] != owner_id:
            return None
        return self._row_to_workflow(row)

    async def save_workflow(self, workflow: WorkflowRecord) -> None:
        workflow.updated_at = datetime.now(timezone.utc)
        await asyncio.to_thread(
            self._execute,
            """
            UPDATE workflows
            SET current_step = ?, status = ?, steps = ?, script = ?, updated_at = ?
            WHERE id = ?
            """,
            workflow.current_step,
            workflow.status,
            self._steps_json(workflow),
            json.dumps(workflow.script) if workflow.script is not None else None,
            workflow.updated_at.isoformat(),
            workflow.id,
        )

    async def list_workflows(self, owner_id: str | None = None) -> list[WorkflowRecord]:
        if owner_id is None:
            rows = await asyncio.to_thread(
                self._fetchall,
                f"SELECT {_WORKFLOW_COLUMNS} FROM workflows ORDER BY created_at",
            )
        else:
            rows = await asyncio.to_thread(
                self._fetchall,
                f"SELECT {_WORKFLOW_COLUMNS} FROM workflows WHERE owner_id = ? ORDER BY created_at",
                owner_id,
            )
        return [self._row_to_workflow(row) for row in rows]

    async def get_storyboard(self, storyboard_id: str) -> Storyboard | None:
        row = await asyncio.to_thread(
            self._fetchone, "SELECT data FROM storyboards WHERE id = ?", storyboard_id
        )
        if not row:
            return None
        return Storyboard.model_validate_json(row["data"])

    async def save_storyboard(self, storyboard: Storyboard) -> None:
        await asyncio.to_thread(
            self._execute,
            "INSERT OR REPLACE INTO storyboards (id, data) VALUES (?, ?)",
            storyboard.id,
            json.dumps(storyboard.to_wire()),
        )

    async def save_run_status(self, status: RunStatus) -> None:
        await asyncio.to_thread(
            self._execute,
            "INSERT OR REPLACE INTO run_status (run_id, data) VALUES (?, ?)",
            status.run_id,
            json.dumps(status.to_wire()),
        )

    async def get_run_status(self, run_id: str) -> RunStatus | None:
        row = await asyncio.to_thread(
            self._fetchone, "SELECT data FROM run_status WHERE run_id = ?", run_id
        )
        if not row:
            return None
        return RunStatus.model_validate_json(row["data"])
