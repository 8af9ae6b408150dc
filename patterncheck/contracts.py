"""Core contracts exchanged between the runner and the pattern check engine."""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import UnknownMatchKindError

PLUGIN_NAME = "Pattern Check"
PLUGIN_VERSION = "1.1.0"
MESSAGE_TITLE = "Pattern Check"


class MatchKind(str, Enum):
    """Supported comparisons between a resolved value and a pattern value."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"

    @classmethod
    def parse(cls, value: Any) -> "MatchKind":
        """Return the kind named by ``value`` or raise ``UnknownMatchKindError``."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise UnknownMatchKindError(
            f"Unknown pattern type: {value!r}",
            details={"type": value, "supported": [k.value for k in cls]},
        )


class StepStatus(str, Enum):
    """Status tags understood by the runner backend."""

    RUNNING = "running"
    SUCCESS = "success"
    CANCELED = "canceled"
    NO_PATTERN_MATCH = "noPatternMatch"

    @property
    def is_terminal(self) -> bool:
        return self is not StepStatus.RUNNING


class Pattern(BaseModel):
    """A single field-match rule from the flow definition."""

    model_config = ConfigDict(frozen=True)

    key: str
    type: MatchKind
    value: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, v: Any) -> MatchKind:
        return MatchKind.parse(v)

    @field_validator("value", mode="before")
    @classmethod
    def _stringify_value(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, str):
            return v
        return json.dumps(v)


class FlowDefinition(BaseModel):
    """The part of a workflow definition the engine reads."""

    id: Optional[str] = None
    name: Optional[str] = None
    patterns: List[Pattern] = Field(default_factory=list)


class EvaluationOutcome(BaseModel):
    """Verdict for one pattern against one resolved value."""

    pattern: Pattern
    resolved_value: str
    matched: bool
    description: str


class StepMessage(BaseModel):
    """A titled block of human readable lines."""

    title: str = MESSAGE_TITLE
    lines: List[str] = Field(default_factory=list)


class StepUpdate(BaseModel):
    """One progress update for an execution step.

    ``status`` is ``None`` when the update only appends messages and leaves the
    step status unchanged.
    """

    execution_id: str
    step_id: str
    messages: List[StepMessage] = Field(default_factory=list)
    status: Optional[StepStatus] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def lines(self) -> List[str]:
        """All message lines in order, ignoring titles."""
        return [line for message in self.messages for line in message.lines]

    @property
    def is_terminal(self) -> bool:
        return self.status is not None and self.status.is_terminal


class ExecuteTaskRequest(BaseModel):
    """Invocation of the pattern check for one execution step."""

    platform: Optional[str] = None
    execution_id: str
    step_id: str
    flow: FlowDefinition = Field(default_factory=FlowDefinition)
    payload: Any = None


class PayloadHandlerRequest(BaseModel):
    """Inbound payload/endpoint request. Not handled by this plugin."""

    platform: Optional[str] = None
    endpoint: Optional[str] = None
    payload: Any = None


class Result(BaseModel):
    """Final answer returned to the runner."""

    success: bool
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def no_pattern_match(cls) -> "Result":
        return cls(success=False, data={"status": StepStatus.NO_PATTERN_MATCH.value})


class ActionDescriptor(BaseModel):
    """Action entry shown in the workflow editor."""

    name: str = PLUGIN_NAME
    description: str = "Check flow patterns"
    plugin: str = "pattern_check"
    icon: str = "solar:list-check-minimalistic-bold"
    category: str = "Utility"
    params: List[Dict[str, Any]] = Field(default_factory=list)


class PluginMetadata(BaseModel):
    """Static description of the plugin."""

    name: str = PLUGIN_NAME
    type: str = "action"
    version: str = PLUGIN_VERSION
    author: str = "JustNZ"
    action: ActionDescriptor = Field(default_factory=ActionDescriptor)
    endpoints: List[Dict[str, Any]] = Field(default_factory=list)
