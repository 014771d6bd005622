"""AST node definitions for constraint expressions.

Every node produced by the constraint parser is a frozen dataclass, so
parsed expressions are immutable, hashable and safe to cache and share
between render calls.  The ``Expression`` union covers all variants;
the evaluator dispatches with ``isinstance`` checks.

All nodes carry a ``Span`` recording their position in the expression
text, so diagnostics can point at the offending part.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Union


# ---------------------------------------------------------------------------
# Source location
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open character range ``[start, end)`` within the expression.

    Parameters
    ----------
    start:
        0-based offset of the first character.
    end:
        0-based offset *past* the last character.
    """

    start: int
    end: int

    def __repr__(self) -> str:
        return f"Span({self.start}:{self.end})"

    @classmethod
    def unknown(cls) -> "Span":
        """Return a sentinel span used when position info is unavailable."""
        return cls(start=0, end=0)

    def merge(self, other: "Span") -> "Span":
        """Return a span that covers both ``self`` and ``other``."""
        return Span(start=min(self.start, other.start), end=max(self.end, other.end))


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class BinOp(Enum):
    """Binary operator kinds."""

    AND = auto()
    OR = auto()
    EQ = auto()
    NEQ = auto()
    LT = auto()
    GT = auto()
    LTE = auto()
    GTE = auto()

    @property
    def symbol(self) -> str:
        return _BINOP_SYMBOLS[self]


_BINOP_SYMBOLS: dict[BinOp, str] = {
    BinOp.AND: "&&",
    BinOp.OR: "||",
    BinOp.EQ: "==",
    BinOp.NEQ: "!=",
    BinOp.LT: "<",
    BinOp.GT: ">",
    BinOp.LTE: "<=",
    BinOp.GTE: ">=",
}


class UnaryOpKind(Enum):
    """Unary operator kinds."""

    NOT = auto()


# ---------------------------------------------------------------------------
# Literals and references
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StringLit:
    """A quoted string literal."""

    value: str
    span: Span


@dataclass(frozen=True, slots=True)
class NumberLit:
    """An integer or decimal literal."""

    value: float
    span: Span


@dataclass(frozen=True, slots=True)
class BoolLit:
    """A boolean literal (``true`` or ``false``)."""

    value: bool
    span: Span


@dataclass(frozen=True, slots=True)
class Identifier:
    """A property lookup on the record in scope."""

    name: str
    span: Span


@dataclass(frozen=True, slots=True)
class RecordId:
    """The ``@id`` operand: the identifier of the record in scope."""

    span: Span


# ---------------------------------------------------------------------------
# Compound expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BinaryOpExpr:
    """A binary operation: comparison or logical connective."""

    op: BinOp
    left: "Expression"
    right: "Expression"
    span: Span


@dataclass(frozen=True, slots=True)
class UnaryOpExpr:
    """A unary operation (only ``!`` exists)."""

    op: UnaryOpKind
    operand: "Expression"
    span: Span


Literal = Union[StringLit, NumberLit, BoolLit]

Expression = Union[
    StringLit,
    NumberLit,
    BoolLit,
    Identifier,
    RecordId,
    BinaryOpExpr,
    UnaryOpExpr,
]
