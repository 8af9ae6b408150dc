"""Path resolution against serialized JSON payloads."""

from __future__ import annotations

import json
import logging
import re
from functools import lru_cache
from typing import Any, Optional, Protocol

import jmespath
from jmespath.exceptions import JMESPathError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_INDEX = re.compile(r"^\d+$")
# Characters that only appear in real JMESPath expressions, never in a plain
# dotted path.
_QUERY_CHARS = set('[]|*?()@&!=<>{}`"\',')


class PathResolver(Protocol):
    """Resolve a path expression against a JSON document."""

    def resolve(self, payload_json: str, path: str) -> str:
        """Return the string form of the located value, ``""`` when absent."""


class AbsenceAwareResolver(PathResolver, Protocol):
    """PathResolver that can also tell an absent value from an empty one."""

    def lookup(self, payload_json: str, path: str) -> Optional[str]:
        """Return the string form of the located value, ``None`` when absent."""


def to_expression(path: str) -> str:
    """Translate a dotted runner path into a JMESPath expression.

    ``alerts.0.labels.alert-name`` becomes ``alerts[0].labels."alert-name"``.
    Paths that already use query syntax are returned untouched.
    """
    path = path.strip()
    if not path or any(ch in _QUERY_CHARS for ch in path):
        return path

    expression = ""
    for segment in path.split("."):
        if _INDEX.match(segment):
            expression += f"[{segment}]"
            continue
        if not _IDENTIFIER.match(segment):
            segment = json.dumps(segment)
        expression += f".{segment}" if expression else segment
    return expression


def render_value(value: Any) -> Optional[str]:
    """Render a located JSON value the way the runner compares it."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


@lru_cache(maxsize=256)
def _compile(expression: str):
    return jmespath.compile(expression)


class JmesPathResolver:
    """PathResolver backed by ``jmespath``.

    Holds no parsed payloads; each call parses the document it is given.
    """

    def lookup(self, payload_json: str, path: str) -> Optional[str]:
        expression = to_expression(path)
        if not expression:
            return None
        try:
            compiled = _compile(expression)
        except JMESPathError as exc:
            logger.warning(f"Invalid path expression {path!r}: {exc}")
            return None
        return render_value(compiled.search(json.loads(payload_json)))

    def resolve(self, payload_json: str, path: str) -> str:
        value = self.lookup(payload_json, path)
        return "" if value is None else value
