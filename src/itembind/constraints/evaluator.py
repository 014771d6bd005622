"""Evaluation of constraint expressions against records.

Expressions are parsed once (cached) by the constraint parser and walked
here; no host-language code is ever compiled or executed.

Operand values:

* ``@id`` is the identifier of the record in scope, or ``""``.
* A bare identifier is the property of that name on the record in
  scope, or ``""`` when absent.
* Literals stand for themselves.

Comparisons are numeric when both operands parse as numbers and string
comparisons otherwise.  A bare operand used as a condition is true when
it is ``true``, a non-zero number, or a non-empty string other than
``"false"``.

An expression of the exact shape ``@id == prop`` (either operand order)
is also a reference-resolution request: when ``prop`` holds a reference,
the constraint passes only if the reference resolves, and the resolved
record is handed back so rendering continues with it.
"""
from __future__ import annotations

import functools
import json
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Callable

from itembind.ast.nodes import (
    BinOp,
    BinaryOpExpr,
    BoolLit,
    Expression,
    Identifier,
    NumberLit,
    RecordId,
    StringLit,
    UnaryOpExpr,
    UnaryOpKind,
)
from itembind.diagnostics import DiagnosticSeverity, DiagnosticSink
from itembind.lexer.lexer import LexError
from itembind.parser.errors import ParseErrorCollection
from itembind.parser.parser import parse_expression
from itembind.references.resolver import ID_KEY, Record, ReferenceResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConstraintResult:
    """Outcome of a constraint evaluation.

    Parameters
    ----------
    passed:
        Whether the gated node is included.
    resolved:
        Record that replaces the record in scope, set only when the
        expression was a successful reference-resolution request.
    """

    passed: bool
    resolved: Record | None = None

    def __bool__(self) -> bool:
        return self.passed


FAILED = ConstraintResult(passed=False)
PASSED = ConstraintResult(passed=True)


@functools.lru_cache(maxsize=512)
def compile_expression(source: str) -> Expression:
    """Parse ``source`` once; later calls with the same text hit the cache.

    Raises
    ------
    LexError, ParseErrorCollection
        If the expression is malformed.
    """
    return parse_expression(source)


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------


def to_number(value: Any) -> float | None:
    """Return ``value`` as a float if it is numeric or a numeric string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def to_text(value: Any) -> str:
    """Stringify a scalar the way it appears in markup."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def is_truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value != "" and value != "false"
    return bool(value)


_ORDERINGS: dict[BinOp, Callable[[Any, Any], bool]] = {
    BinOp.LT: lambda a, b: a < b,
    BinOp.GT: lambda a, b: a > b,
    BinOp.LTE: lambda a, b: a <= b,
    BinOp.GTE: lambda a, b: a >= b,
}


def compare(op: BinOp, left: Any, right: Any) -> bool:
    """Apply a comparison operator with numeric-or-string semantics."""
    left_num, right_num = to_number(left), to_number(right)
    if left_num is not None and right_num is not None:
        a: Any = left_num
        b: Any = right_num
    else:
        a, b = to_text(left), to_text(right)
    if op is BinOp.EQ:
        return a == b
    if op is BinOp.NEQ:
        return a != b
    return _ORDERINGS[op](a, b)


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


class ConstraintEvaluator:
    """Evaluates constraint expressions and scope filters.

    Parameters
    ----------
    resolver:
        Reference resolver used for ``@id == prop`` requests.
    """

    def __init__(self, resolver: ReferenceResolver | None = None) -> None:
        self._resolver = resolver or ReferenceResolver()

    @property
    def resolver(self) -> ReferenceResolver:
        return self._resolver

    def evaluate(
        self,
        expression: str,
        record: Record,
        all_records: Sequence[Record] = (),
        diagnostics: DiagnosticSink | None = None,
        path: str = "",
    ) -> ConstraintResult:
        """Evaluate ``expression`` against ``record``.

        Malformed expressions evaluate to a failed result and are reported
        as ``BIND004``; dangling references are reported as ``BIND005``.
        """
        try:
            expr = compile_expression(expression)
        except (LexError, ParseErrorCollection) as exc:
            return self._malformed(expression, str(exc), diagnostics, path)
        except RecursionError:
            return self._malformed(expression, "nested too deeply", diagnostics, path)

        record = record if isinstance(record, dict) else {}
        reference_prop = self._reference_request(expr)
        if reference_prop is not None:
            value = record.get(reference_prop)
            if self._resolver.is_reference(value):
                resolved = self._resolver.resolve(value, all_records)
                if resolved is None:
                    if diagnostics is not None:
                        diagnostics.report(
                            "BIND005",
                            f"Reference {value!r} in property {reference_prop!r} matches no record",
                            path=path,
                            severity=DiagnosticSeverity.INFORMATION,
                            rule="constraint",
                        )
                    return FAILED
                return ConstraintResult(passed=True, resolved=resolved)

        try:
            value = self._eval(expr, record)
        except RecursionError:
            return self._malformed(expression, "nested too deeply", diagnostics, path)
        return PASSED if is_truthy(value) else FAILED

    def matches_scope(self, record: Record, prop: str, enclosing_id: Any) -> bool:
        """Scope-filter sugar: ``record[prop] == @id`` of the *enclosing* record."""
        if not isinstance(record, dict):
            return False
        return self._resolver.refers_to(record.get(prop), enclosing_id)

    # ------------------------------------------------------------------
    # Internal walk
    # ------------------------------------------------------------------

    @staticmethod
    def _malformed(
        expression: str,
        reason: str,
        diagnostics: DiagnosticSink | None,
        path: str,
    ) -> ConstraintResult:
        if diagnostics is not None:
            diagnostics.report(
                "BIND004",
                f"Malformed constraint {expression!r}: {reason}",
                path=path,
                suggestion="Check the expression with 'itembind check'",
                rule="constraint",
            )
        else:
            logger.warning("Malformed constraint %r: %s", expression, reason)
        return FAILED

    @staticmethod
    def _reference_request(expr: Expression) -> str | None:
        """Return the property name if ``expr`` is ``@id == prop`` or ``prop == @id``."""
        if not isinstance(expr, BinaryOpExpr) or expr.op is not BinOp.EQ:
            return None
        if isinstance(expr.left, RecordId) and isinstance(expr.right, Identifier):
            return expr.right.name
        if isinstance(expr.right, RecordId) and isinstance(expr.left, Identifier):
            return expr.left.name
        return None

    def _eval(self, expr: Expression, record: Record) -> Any:
        if isinstance(expr, StringLit):
            return expr.value
        if isinstance(expr, NumberLit):
            return expr.value
        if isinstance(expr, BoolLit):
            return expr.value
        if isinstance(expr, RecordId):
            return record.get(ID_KEY) or ""
        if isinstance(expr, Identifier):
            value = record.get(expr.name)
            return "" if value is None else value
        if isinstance(expr, UnaryOpExpr):
            if expr.op is UnaryOpKind.NOT:
                return not is_truthy(self._eval(expr.operand, record))
            raise TypeError(f"Unknown unary operator: {expr.op}")
        if isinstance(expr, BinaryOpExpr):
            if expr.op is BinOp.AND:
                return is_truthy(self._eval(expr.left, record)) and is_truthy(self._eval(expr.right, record))
            if expr.op is BinOp.OR:
                return is_truthy(self._eval(expr.left, record)) or is_truthy(self._eval(expr.right, record))
            return compare(expr.op, self._eval(expr.left, record), self._eval(expr.right, record))
        raise TypeError(f"Unknown expression type: {type(expr)}")


def evaluate(expression: str, record: Record, all_records: Sequence[Record] = ()) -> bool:
    """Convenience function: evaluate ``expression`` with a default evaluator."""
    return ConstraintEvaluator().evaluate(expression, record, all_records).passed
