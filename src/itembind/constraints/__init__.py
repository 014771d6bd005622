"""Constraint evaluation module.

Exports the ``ConstraintEvaluator``, its result type, and the value
helpers shared with the renderer.
"""
from __future__ import annotations

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

__all__ = [
    "ConstraintEvaluator",
    "ConstraintResult",
    "compile_expression",
    "evaluate",
    "compare",
    "is_truthy",
    "to_number",
    "to_text",
]
