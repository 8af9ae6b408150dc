"""Data models for recorded step updates."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field

from ..contracts import StepUpdate


class StepRecord(StepUpdate):
    """A step update as stored by a reporter backend."""

    id: Optional[int] = None
    platform: Optional[str] = None
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
