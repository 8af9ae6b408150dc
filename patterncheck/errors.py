"""Error types raised by the pattern check engine."""

from __future__ import annotations

from typing import Any, Dict, Optional


class PatternCheckError(Exception):
    """Base exception for pattern check failures."""

    code = "PATTERN_CHECK_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class UnsupportedPlatformError(PatternCheckError):
    """The request targets a platform this plugin does not implement."""

    code = "UNSUPPORTED_PLATFORM"


class PayloadSerializationError(PatternCheckError):
    """The payload could not be rendered as JSON."""

    code = "PAYLOAD_SERIALIZATION_ERROR"


class StepReportError(PatternCheckError):
    """The step reporter rejected an update."""

    code = "STEP_REPORT_ERROR"


class UnimplementedCapabilityError(PatternCheckError):
    """An entry point the plugin does not provide was invoked."""

    code = "NOT_IMPLEMENTED"


class UnknownMatchKindError(PatternCheckError):
    """A pattern uses a match type outside the supported set."""

    code = "UNKNOWN_MATCH_KIND"
