"""Constraint AST module.

Exports all expression node types and the serializer.
"""
from __future__ import annotations

from itembind.ast.nodes import (
    BinOp,
    BinaryOpExpr,
    BoolLit,
    Expression,
    Identifier,
    Literal,
    NumberLit,
    RecordId,
    Span,
    StringLit,
    UnaryOpExpr,
    UnaryOpKind,
)
from itembind.ast.serializer import AstSerializer

__all__ = [
    "Span",
    "BinOp",
    "UnaryOpKind",
    "StringLit",
    "NumberLit",
    "BoolLit",
    "Identifier",
    "RecordId",
    "BinaryOpExpr",
    "UnaryOpExpr",
    "Literal",
    "Expression",
    "AstSerializer",
]
