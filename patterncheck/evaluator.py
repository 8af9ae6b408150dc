"""Pure evaluation of a single pattern against a resolved value."""

from __future__ import annotations

from typing import Callable, Dict, Tuple

from .contracts import EvaluationOutcome, MatchKind, Pattern
from .errors import UnknownMatchKindError

# kind -> (operator label, predicate, label when the predicate holds,
#          label when it does not)
_RULES: Dict[MatchKind, Tuple[str, Callable[[str, str], bool], str, str]] = {
    MatchKind.EQUALS: ("==", lambda actual, expected: actual == expected, "matched", "not found"),
    MatchKind.NOT_EQUALS: ("!=", lambda actual, expected: actual != expected, "not found", "matched"),
    MatchKind.CONTAINS: ("contains", lambda actual, expected: expected in actual, "matched", "not found"),
    MatchKind.NOT_CONTAINS: (
        "not contains",
        lambda actual, expected: expected not in actual,
        "not found",
        "matched",
    ),
}


def evaluate(resolved_value: str, pattern: Pattern) -> Tuple[bool, str]:
    """Return ``(matched, description)`` for ``pattern`` against ``resolved_value``.

    For the negative kinds the wording follows the comparison rather than the
    verdict: a successful ``not_equals`` reads "not found", a failed one reads
    "matched".
    """
    try:
        operator, predicate, on_match, on_mismatch = _RULES[pattern.type]
    except KeyError:
        raise UnknownMatchKindError(
            f"Unknown pattern type: {pattern.type!r}",
            details={"key": pattern.key, "type": str(pattern.type)},
        ) from None

    matched = predicate(resolved_value, pattern.value)
    label = on_match if matched else on_mismatch
    return matched, f"{pattern.key} {operator} {pattern.value} {label}"


def check(pattern: Pattern, resolved_value: str) -> EvaluationOutcome:
    """Evaluate ``pattern`` and wrap the verdict in an ``EvaluationOutcome``."""
    matched, description = evaluate(resolved_value, pattern)
    return EvaluationOutcome(
        pattern=pattern,
        resolved_value=resolved_value,
        matched=matched,
        description=description,
    )
