"""Base step reporter interface and the scoped reporting channel."""

from __future__ import annotations

import abc
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, List, Optional, Sequence

from ..contracts import StepMessage, StepStatus, StepUpdate
from ..errors import StepReportError
from .models import StepRecord

logger = logging.getLogger(__name__)


class BaseStepReporter(metaclass=abc.ABCMeta):
    """Abstract sink for execution step updates."""

    async def connect(self) -> None:
        """Open backend resources (no-op by default)."""
        pass

    async def disconnect(self) -> None:
        """Release backend resources (no-op by default)."""
        pass

    async def __aenter__(self) -> "BaseStepReporter":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.disconnect()

    @abc.abstractmethod
    async def report(
        self, execution_id: str, update: StepUpdate, platform: Optional[str] = None
    ) -> None:
        """Forward or persist ``update``. Raises on failure."""
        raise NotImplementedError

    async def flush(self, execution_id: str) -> None:
        """Make every update reported for ``execution_id`` durable."""
        pass

    async def history(self, execution_id: str) -> List[StepRecord]:
        """Return recorded updates for ``execution_id`` in emission order."""
        raise NotImplementedError(
            f"{type(self).__name__} does not keep step history"
        )

    @asynccontextmanager
    async def channel(
        self, execution_id: str, step_id: str, platform: Optional[str] = None
    ) -> AsyncIterator["StepChannel"]:
        """Yield a channel bound to one execution step.

        The reporter is flushed and the channel closed on every exit path.
        """
        channel = StepChannel(self, execution_id, step_id, platform)
        try:
            yield channel
        except BaseException:
            channel.closed = True
            try:
                await self.flush(execution_id)
            except Exception as e:
                logger.error(
                    f"Failed to flush step {step_id} for execution_id={execution_id}: {e}"
                )
            raise

        channel.closed = True
        try:
            await self.flush(execution_id)
        except Exception as e:
            logger.error(
                f"Failed to flush step {step_id} for execution_id={execution_id}: {e}"
            )
            raise StepReportError(
                f"Failed to flush step updates: {e}",
                details={"execution_id": execution_id, "step_id": step_id},
            ) from e


class StepChannel:
    """Sends updates for a single execution step through a reporter."""

    def __init__(
        self,
        reporter: BaseStepReporter,
        execution_id: str,
        step_id: str,
        platform: Optional[str] = None,
    ) -> None:
        self._reporter = reporter
        self.execution_id = execution_id
        self.step_id = step_id
        self.platform = platform
        self.sent: List[StepUpdate] = []
        self.closed = False

    async def send(
        self,
        lines: Sequence[str],
        status: Optional[StepStatus] = None,
        started_at: Optional[datetime] = None,
        finished_at: Optional[datetime] = None,
    ) -> StepUpdate:
        """Report one update; wraps backend failures in ``StepReportError``."""
        if self.closed:
            raise StepReportError(
                f"Channel for step {self.step_id} of execution {self.execution_id} is closed"
            )

        update = StepUpdate(
            execution_id=self.execution_id,
            step_id=self.step_id,
            messages=[StepMessage(lines=list(lines))],
            status=status,
            started_at=started_at,
            finished_at=finished_at,
        )
        try:
            await self._reporter.report(self.execution_id, update, self.platform)
        except StepReportError:
            self.closed = True
            raise
        except Exception as e:
            self.closed = True
            logger.error(
                f"Failed to report step {self.step_id} for execution_id={self.execution_id}: {e}"
            )
            raise StepReportError(
                f"Failed to report step update: {e}",
                details={"execution_id": self.execution_id, "step_id": self.step_id},
            ) from e

        self.sent.append(update)
        return update
