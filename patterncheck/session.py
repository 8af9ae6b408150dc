"""Evaluation session: runs a flow's patterns and reports every step."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from .contracts import EvaluationOutcome, Pattern, Result, StepStatus
from .errors import PayloadSerializationError
from .evaluator import check
from .reporting import BaseStepReporter, StepChannel
from .resolver import JmesPathResolver, PathResolver

logger = logging.getLogger(__name__)

RUNNING_MESSAGE = "Checking for patterns"
NO_PATTERNS_MESSAGE = "No patterns are defined. Continue to next step"
ALL_MATCHED_MESSAGE = "All patterns matched. Continue to next step"
SOME_MISMATCHED_MESSAGE = "Some patterns did not match. Cancel execution"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def serialize_payload(payload: Any) -> str:
    """Render ``payload`` as compact JSON or raise ``PayloadSerializationError``."""
    try:
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise PayloadSerializationError(
            f"Payload cannot be serialized to JSON: {e}"
        ) from e


class EvaluationSession:
    """Evaluates one set of patterns against one payload for one step.

    Every pattern is evaluated and reported, even after a mismatch, so the
    step log shows the verdict of each rule. A reporter failure aborts the
    session immediately with ``StepReportError``.
    """

    def __init__(
        self,
        execution_id: str,
        step_id: str,
        patterns: Sequence[Pattern],
        payload: Any,
        reporter: BaseStepReporter,
        resolver: Optional[PathResolver] = None,
        platform: Optional[str] = None,
        missing_as_empty: bool = True,
    ) -> None:
        self.execution_id = execution_id
        self.step_id = step_id
        self.patterns = list(patterns)
        self.payload = payload
        self.platform = platform
        self.missing_as_empty = missing_as_empty
        self._reporter = reporter
        self._resolver = resolver or JmesPathResolver()
        if not missing_as_empty and not hasattr(self._resolver, "lookup"):
            raise TypeError(
                f"{type(self._resolver).__name__} cannot report absent values; "
                "explicit absence needs a resolver with lookup()"
            )
        self.mismatch_count = 0
        self.outcomes: List[EvaluationOutcome] = []

    async def run(self) -> Result:
        """Evaluate all patterns and return the aggregate result."""
        async with self._reporter.channel(
            self.execution_id, self.step_id, self.platform
        ) as channel:
            if not self.patterns:
                logger.info(
                    f"No patterns defined for execution_id={self.execution_id}, continuing"
                )
                await channel.send(
                    [NO_PATTERNS_MESSAGE],
                    status=StepStatus.SUCCESS,
                    finished_at=_now(),
                )
                return Result(success=True)

            await channel.send(
                [RUNNING_MESSAGE], status=StepStatus.RUNNING, started_at=_now()
            )
            payload_json = serialize_payload(self.payload)
            logger.info(
                f"Checking {len(self.patterns)} patterns for execution_id={self.execution_id}"
            )

            for pattern in self.patterns:
                outcome = self._evaluate(payload_json, pattern)
                self.outcomes.append(outcome)
                await self._report_outcome(channel, outcome)

            return await self._finish(channel)

    def _evaluate(self, payload_json: str, pattern: Pattern) -> EvaluationOutcome:
        if self.missing_as_empty:
            return self._check(pattern, self._resolver.resolve(payload_json, pattern.key))

        value = self._resolver.lookup(payload_json, pattern.key)
        if value is None:
            return EvaluationOutcome(
                pattern=pattern,
                resolved_value="",
                matched=False,
                description=f"{pattern.key} is not present",
            )
        return self._check(pattern, value)

    def _check(self, pattern: Pattern, value: str) -> EvaluationOutcome:
        outcome = check(pattern, value)
        logger.debug(
            f"Pattern {outcome.description} for execution_id={self.execution_id}"
        )
        return outcome

    async def _report_outcome(
        self, channel: StepChannel, outcome: EvaluationOutcome
    ) -> None:
        if outcome.matched:
            await channel.send(
                [f"Pattern: {outcome.description}. Continue to next step"]
            )
            return

        await channel.send(
            [f"Pattern: {outcome.description}."],
            status=StepStatus.CANCELED,
            finished_at=_now(),
        )
        self.mismatch_count += 1

    async def _finish(self, channel: StepChannel) -> Result:
        if self.mismatch_count > 0:
            await channel.send(
                [SOME_MISMATCHED_MESSAGE],
                status=StepStatus.NO_PATTERN_MATCH,
                finished_at=_now(),
            )
            logger.info(
                f"{self.mismatch_count} of {len(self.patterns)} patterns did not match "
                f"for execution_id={self.execution_id}"
            )
            return Result.no_pattern_match()

        await channel.send(
            [ALL_MATCHED_MESSAGE], status=StepStatus.SUCCESS, finished_at=_now()
        )
        logger.info(f"All patterns matched for execution_id={self.execution_id}")
        return Result(success=True)
