"""Unit tests for itembind.constraints — evaluation of constraint expressions."""
from __future__ import annotations

from typing import Any

import pytest

from itembind.ast.nodes import BinOp
from itembind.constraints.evaluator import (
    ConstraintEvaluator,
    ConstraintResult,
    compare,
    compile_expression,
    evaluate,
    is_truthy,
    to_number,
    to_text,
)
from itembind.diagnostics import DiagnosticSeverity, DiagnosticSink
from itembind.references.resolver import ReferenceResolver

TASK: dict[str, Any] = {
    "@id": "t1",
    "title": "Write docs",
    "status": "open",
    "priority": 3,
    "estimate": "2.5",
    "archived": False,
    "assignee": "#johndoe",
}

BATCH: list[dict[str, Any]] = [
    {"@id": "johndoe", "name": "John Doe"},
    TASK,
]


@pytest.fixture()
def evaluator() -> ConstraintEvaluator:
    return ConstraintEvaluator()


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------


class TestToNumber:
    @pytest.mark.parametrize("value, expected", [
        (3, 3.0),
        (2.5, 2.5),
        ("4", 4.0),
        (" 1.5 ", 1.5),
        ("-2", -2.0),
    ])
    def test_numeric_values(self, value: Any, expected: float) -> None:
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", [True, False, "", "abc", "nan", "inf", None, [1]])
    def test_non_numeric_values(self, value: Any) -> None:
        assert to_number(value) is None


class TestToText:
    @pytest.mark.parametrize("value, expected", [
        (None, ""),
        (True, "true"),
        (False, "false"),
        (3.0, "3"),
        (2.5, "2.5"),
        (7, "7"),
        ("x", "x"),
        (["a", 1, True], "a,1,true"),
        ({"a": "b"}, '{"a": "b"}'),
    ])
    def test_to_text(self, value: Any, expected: str) -> None:
        assert to_text(value) == expected


class TestIsTruthy:
    @pytest.mark.parametrize("value", [True, 1, -2.5, "yes", "0", [0]])
    def test_truthy(self, value: Any) -> None:
        assert is_truthy(value)

    @pytest.mark.parametrize("value", [False, 0, 0.0, "", "false", None, []])
    def test_falsy(self, value: Any) -> None:
        assert not is_truthy(value)


class TestCompare:
    def test_numeric_when_both_numeric(self) -> None:
        assert compare(BinOp.LT, "9", "10")

    def test_string_when_either_is_not_numeric(self) -> None:
        assert compare(BinOp.LT, "10", "9a")

    def test_numeric_equality_across_types(self) -> None:
        assert compare(BinOp.EQ, 3, "3.0")

    def test_bool_compares_as_text(self) -> None:
        assert compare(BinOp.EQ, True, "true")
        assert compare(BinOp.NEQ, False, "true")

    @pytest.mark.parametrize("op, expected", [
        (BinOp.LT, False),
        (BinOp.LTE, True),
        (BinOp.GT, False),
        (BinOp.GTE, True),
        (BinOp.EQ, True),
        (BinOp.NEQ, False),
    ])
    def test_all_operators_on_equal_values(self, op: BinOp, expected: bool) -> None:
        assert compare(op, 2, 2) is expected


# ---------------------------------------------------------------------------
# Expression evaluation
# ---------------------------------------------------------------------------


class TestEvaluate:
    @pytest.mark.parametrize("expression, expected", [
        ('status == "open"', True),
        ("status == 'closed'", False),
        ("status != 'closed'", True),
        ("priority > 2", True),
        ("priority >= 4", False),
        ("estimate < 3", True),
        ("estimate == 2.5", True),
        ('status == "open" && priority > 2', True),
        ('status == "done" || priority > 2', True),
        ('status == "done" || priority > 5', False),
        ("!archived", True),
        ("archived", False),
        ("archived == false", True),
        ("missing", False),
        ("missing == ''", True),
        ("!(priority > 2)", False),
        ("title", True),
        ("@id == 't1'", True),
        ("true", True),
        ("0", False),
    ])
    def test_expressions(self, evaluator: ConstraintEvaluator, expression: str, expected: bool) -> None:
        assert evaluator.evaluate(expression, TASK).passed is expected

    def test_result_is_truthy_like_passed(self, evaluator: ConstraintEvaluator) -> None:
        assert evaluator.evaluate("priority > 2", TASK)
        assert not evaluator.evaluate("priority > 5", TASK)

    def test_record_id_of_record_without_id_is_empty(self, evaluator: ConstraintEvaluator) -> None:
        assert evaluator.evaluate("@id == ''", {"name": "x"}).passed

    def test_non_dict_record_is_treated_as_empty(self, evaluator: ConstraintEvaluator) -> None:
        assert evaluator.evaluate("name == ''", None).passed  # type: ignore[arg-type]

    def test_module_level_evaluate(self) -> None:
        assert evaluate("priority > 2", TASK) is True

    def test_compile_is_cached(self) -> None:
        assert compile_expression("a == b") is compile_expression("a == b")

    def test_not_applies_before_comparison(self, evaluator: ConstraintEvaluator) -> None:
        assert evaluator.evaluate("!title == true", TASK).passed is False
        assert evaluator.evaluate("!title == false", TASK).passed is True
        assert evaluator.evaluate("!(title == true)", TASK).passed is True


# ---------------------------------------------------------------------------
# Malformed expressions
# ---------------------------------------------------------------------------


class TestMalformed:
    @pytest.mark.parametrize("expression", ["", "a ==", "a = b", "(a", "a b"])
    def test_malformed_fails(self, evaluator: ConstraintEvaluator, expression: str) -> None:
        assert evaluator.evaluate(expression, TASK).passed is False

    def test_malformed_reports_bind004(self, evaluator: ConstraintEvaluator) -> None:
        sink = DiagnosticSink()
        evaluator.evaluate("a ==", TASK, diagnostics=sink, path="article/p[1]")
        assert len(sink) == 1
        diagnostic = sink.diagnostics[0]
        assert diagnostic.code == "BIND004"
        assert diagnostic.path == "article/p[1]"
        assert diagnostic.severity is DiagnosticSeverity.WARNING

    def test_malformed_without_sink_does_not_raise(self, evaluator: ConstraintEvaluator) -> None:
        assert not evaluator.evaluate("$$", TASK)

    @pytest.mark.parametrize("expression", [
        "(" * 3000 + "archived" + ")" * 3000,
        "!" * 5000 + "archived",
        "title" + " && title" * 5000,
    ])
    def test_deeply_nested_reports_bind004(self, evaluator: ConstraintEvaluator, expression: str) -> None:
        sink = DiagnosticSink()
        assert evaluator.evaluate(expression, TASK, diagnostics=sink).passed is False
        assert [d.code for d in sink.diagnostics] == ["BIND004"]


# ---------------------------------------------------------------------------
# Reference-resolution requests
# ---------------------------------------------------------------------------


class TestReferenceRequests:
    def test_resolves_reference(self, evaluator: ConstraintEvaluator) -> None:
        result = evaluator.evaluate("@id == assignee", TASK, BATCH)
        assert result.passed
        assert result.resolved == {"@id": "johndoe", "name": "John Doe"}

    def test_operand_order_does_not_matter(self, evaluator: ConstraintEvaluator) -> None:
        result = evaluator.evaluate("assignee == @id", TASK, BATCH)
        assert result.resolved is not None
        assert result.resolved["@id"] == "johndoe"

    def test_dangling_reference_fails_and_reports_bind005(self, evaluator: ConstraintEvaluator) -> None:
        sink = DiagnosticSink()
        record = dict(TASK, assignee="#nobody")
        result = evaluator.evaluate("@id == assignee", record, BATCH, diagnostics=sink)
        assert result == ConstraintResult(passed=False)
        assert [d.code for d in sink.diagnostics] == ["BIND005"]
        assert sink.diagnostics[0].severity is DiagnosticSeverity.INFORMATION

    def test_non_reference_value_falls_back_to_comparison(self, evaluator: ConstraintEvaluator) -> None:
        record = {"@id": "x", "other": "x"}
        result = evaluator.evaluate("@id == other", record, BATCH)
        assert result.passed
        assert result.resolved is None

    def test_custom_marker(self) -> None:
        evaluator = ConstraintEvaluator(ReferenceResolver(marker="~"))
        record = {"owner": "~johndoe"}
        assert evaluator.evaluate("@id == owner", record, BATCH).resolved == BATCH[0]

    def test_plain_comparisons_never_resolve(self, evaluator: ConstraintEvaluator) -> None:
        result = evaluator.evaluate("assignee == '#johndoe'", TASK, BATCH)
        assert result.passed
        assert result.resolved is None


class TestMatchesScope:
    @pytest.mark.parametrize("value", ["#johndoe", "johndoe"])
    def test_matches_marker_and_bare_id(self, evaluator: ConstraintEvaluator, value: str) -> None:
        assert evaluator.matches_scope({"assignee": value}, "assignee", "johndoe")

    def test_no_enclosing_id_never_matches(self, evaluator: ConstraintEvaluator) -> None:
        assert not evaluator.matches_scope({"assignee": ""}, "assignee", None)

    def test_other_id_does_not_match(self, evaluator: ConstraintEvaluator) -> None:
        assert not evaluator.matches_scope({"assignee": "#janedoe"}, "assignee", "johndoe")

    def test_non_record_does_not_match(self, evaluator: ConstraintEvaluator) -> None:
        assert not evaluator.matches_scope("johndoe", "assignee", "johndoe")  # type: ignore[arg-type]
