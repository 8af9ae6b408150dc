"""SQLite implementation of the step reporter."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from ..contracts import StepMessage, StepUpdate
from .base import BaseStepReporter
from .models import StepRecord


class SQLiteStepReporter(BaseStepReporter):
    """Persist step updates using SQLite.

    Updates are written as they are reported and committed on ``flush``,
    which the reporting channel calls on every exit path.
    """

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
            CREATE TABLE IF NOT EXISTS step_updates (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                execution_id TEXT NOT NULL,
                step_id TEXT NOT NULL,
                platform TEXT,
                status TEXT,
                messages TEXT NOT NULL,
                started_at TEXT,
                finished_at TEXT,
                recorded_at TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> None:
        cur = self._conn.cursor()
        cur.execute(query, params)

    def _commit(self) -> None:
        self._conn.commit()

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchall()

    # ------------------------------------------------------------------
    # Reporter API
    async def report(
        self, execution_id: str, update: StepUpdate, platform: Optional[str] = None
    ) -> None:
        record = StepRecord(platform=platform, **update.model_dump())
        await asyncio.to_thread(
            self._execute,
            """
            INSERT INTO step_updates
                (execution_id, step_id, platform, status, messages, started_at, finished_at, recorded_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            execution_id,
            record.step_id,
            platform,
            record.status.value if record.status else None,
            json.dumps([m.model_dump() for m in record.messages]),
            record.started_at.isoformat() if record.started_at else None,
            record.finished_at.isoformat() if record.finished_at else None,
            record.recorded_at.isoformat(),
        )

    async def flush(self, execution_id: str) -> None:
        await asyncio.to_thread(self._commit)

    async def disconnect(self) -> None:
        await asyncio.to_thread(self._conn.close)

    async def history(self, execution_id: str) -> List[StepRecord]:
        rows = await asyncio.to_thread(
            self._fetchall,
            "SELECT id, execution_id, step_id, platform, status, messages, started_at, finished_at, recorded_at "
            "FROM step_updates WHERE execution_id = ? ORDER BY id",
            execution_id,
        )
        return [
            StepRecord(
                id=r["id"],
                execution_id=r["execution_id"],
                step_id=r["step_id"],
                platform=r["platform"],
                status=r["status"],
                messages=[StepMessage(**m) for m in json.loads(r["messages"])],
                started_at=datetime.fromisoformat(r["started_at"]) if r["started_at"] else None,
                finished_at=datetime.fromisoformat(r["finished_at"]) if r["finished_at"] else None,
                recorded_at=datetime.fromisoformat(r["recorded_at"]),
            )
            for r in rows
        ]
