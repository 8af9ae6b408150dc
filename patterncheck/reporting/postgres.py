"""PostgreSQL implementation of the step reporter."""

from __future__ import annotations

import json
from typing import List, Optional

import asyncpg

from ..contracts import StepMessage, StepUpdate
from .base import BaseStepReporter
from .models import StepRecord


class PostgresStepReporter(BaseStepReporter):
    """Persist step updates using PostgreSQL."""

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
            CREATE TABLE IF NOT EXISTS step_updates (
                id SERIAL PRIMARY KEY,
                execution_id TEXT NOT NULL,
                step_id TEXT NOT NULL,
                platform TEXT,
                status TEXT,
                messages JSONB NOT NULL,
                started_at TIMESTAMPTZ,
                finished_at TIMESTAMPTZ,
                recorded_at TIMESTAMPTZ NOT NULL
            )
            """
        )

    # ------------------------------------------------------------------
    async def report(
        self, execution_id: str, update: StepUpdate, platform: Optional[str] = None
    ) -> None:
        record = StepRecord(platform=platform, **update.model_dump())
        conn = await self._connect()
        try:
            await conn.execute(
                """
                INSERT INTO step_updates
                    (execution_id, step_id, platform, status, messages, started_at, finished_at, recorded_at)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                """,
                execution_id,
                record.step_id,
                platform,
                record.status.value if record.status else None,
                json.dumps([m.model_dump() for m in record.messages]),
                record.started_at,
                record.finished_at,
                record.recorded_at,
            )
        finally:
            await conn.close()

    async def history(self, execution_id: str) -> List[StepRecord]:
        conn = await self._connect()
        try:
            rows = await conn.fetch(
                "SELECT id, execution_id, step_id, platform, status, messages, started_at, finished_at, recorded_at "
                "FROM step_updates WHERE execution_id = $1 ORDER BY id",
                execution_id,
            )
        finally:
            await conn.close()
        return [
            StepRecord(
                id=r["id"],
                execution_id=r["execution_id"],
                step_id=r["step_id"],
                platform=r["platform"],
                status=r["status"],
                messages=[StepMessage(**m) for m in json.loads(r["messages"])],
                started_at=r["started_at"],
                finished_at=r["finished_at"],
                recorded_at=r["recorded_at"],
            )
            for r in rows
        ]
