"""Tests for single pattern evaluation."""

import pytest

from patterncheck import Pattern, UnknownMatchKindError, evaluate
from patterncheck.evaluator import check


@pytest.mark.parametrize(
    "kind, actual, expected, matched, description",
    [
        ("equals", "critical", "critical", True, "severity == critical matched"),
        ("equals", "warning", "critical", False, "severity == critical not found"),
        ("not_equals", "warning", "critical", True, "severity != critical not found"),
        ("not_equals", "critical", "critical", False, "severity != critical matched"),
        ("contains", "very critical", "critical", True, "severity contains critical matched"),
        ("contains", "warning", "critical", False, "severity contains critical not found"),
        ("not_contains", "warning", "critical", True, "severity not contains critical not found"),
        ("not_contains", "critical!", "critical", False, "severity not contains critical matched"),
    ],
)
def test_match_kinds_and_descriptions(kind, actual, expected, matched, description) -> None:
    pattern = Pattern(key="severity", type=kind, value=expected)
    assert evaluate(actual, pattern) == (matched, description)


@pytest.mark.parametrize("actual", ["", "prod", "staging"])
def test_equals_and_not_equals_are_complements(actual) -> None:
    equals, _ = evaluate(actual, Pattern(key="env", type="equals", value="prod"))
    not_equals, _ = evaluate(actual, Pattern(key="env", type="not_equals", value="prod"))
    assert equals is not not_equals


def test_contains_empty_value_always_matches() -> None:
    pattern = Pattern(key="msg", type="contains", value="")
    assert evaluate("", pattern)[0] is True
    assert evaluate("anything", pattern)[0] is True


def test_contains_non_empty_value_against_absent_field() -> None:
    assert evaluate("", Pattern(key="msg", type="contains", value="x"))[0] is False


def test_equals_empty_value_matches_absent_field() -> None:
    assert evaluate("", Pattern(key="msg", type="equals", value=""))[0] is True


def test_comparison_is_plain_string() -> None:
    pattern = Pattern(key="count", type="equals", value=1)
    assert pattern.value == "1"
    assert evaluate("1", pattern)[0] is True
    assert evaluate("1.0", pattern)[0] is False
    assert evaluate("Critical", Pattern(key="s", type="equals", value="critical"))[0] is False


def test_check_builds_outcome() -> None:
    pattern = Pattern(key="env", type="equals", value="prod")
    outcome = check(pattern, "prod")
    assert outcome.pattern == pattern
    assert outcome.resolved_value == "prod"
    assert outcome.matched is True
    assert outcome.description == "env == prod matched"


def test_unvalidated_unknown_kind_raises() -> None:
    pattern = Pattern.model_construct(key="env", type="regex", value="p.*")
    with pytest.raises(UnknownMatchKindError):
        evaluate("prod", pattern)
