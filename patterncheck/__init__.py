"""patterncheck: flow pattern gate for workflow runners."""

from .config import PatternCheckConfig, load_config
from .contracts import (
    ExecuteTaskRequest,
    FlowDefinition,
    MatchKind,
    Pattern,
    PayloadHandlerRequest,
    PluginMetadata,
    Result,
    StepStatus,
    StepUpdate,
)
from .errors import (
    PatternCheckError,
    PayloadSerializationError,
    StepReportError,
    UnimplementedCapabilityError,
    UnknownMatchKindError,
    UnsupportedPlatformError,
)
from .evaluator import evaluate
from .plugin import PatternCheckPlugin
from .reporting import get_reporter
from .session import EvaluationSession

__version__ = "1.1.0"
__all__ = [
    "EvaluationSession",
    "ExecuteTaskRequest",
    "FlowDefinition",
    "MatchKind",
    "Pattern",
    "PatternCheckConfig",
    "PatternCheckError",
    "PatternCheckPlugin",
    "PayloadHandlerRequest",
    "PayloadSerializationError",
    "PluginMetadata",
    "Result",
    "StepReportError",
    "StepStatus",
    "StepUpdate",
    "UnimplementedCapabilityError",
    "UnknownMatchKindError",
    "UnsupportedPlatformError",
    "evaluate",
    "get_reporter",
    "load_config",
]
