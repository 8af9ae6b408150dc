"""In-memory step reporter."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Dict, List, Optional

from ..contracts import StepUpdate
from .base import BaseStepReporter
from .models import StepRecord


class InMemoryStepReporter(BaseStepReporter):
    """Keep step updates in local memory.

    Useful for tests or when no backend is configured. Data is not
    persisted across process restarts.
    """

    def __init__(self) -> None:
        self._records: Dict[str, List[StepRecord]] = defaultdict(list)
        self._record_id = 0
        self._lock = asyncio.Lock()

    async def report(
        self, execution_id: str, update: StepUpdate, platform: Optional[str] = None
    ) -> None:
        async with self._lock:
            self._record_id += 1
            self._records[execution_id].append(
                StepRecord(
                    id=self._record_id,
                    platform=platform,
                    **update.model_dump(),
                )
            )

    async def history(self, execution_id: str) -> List[StepRecord]:
        return list(self._records.get(execution_id, []))
