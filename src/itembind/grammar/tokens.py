"""Token definitions for the constraint expression language.

Constraint expressions are the small boolean language used in
``data-constraint`` attributes, e.g. ``status == "open" && priority >= 2``.
Every operator, literal kind and punctuation mark is a member of the
``TokenType`` enum; every scanned token is a ``Token`` dataclass carrying
its type, raw text and offset within the expression.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Exhaustive enumeration of constraint token types."""

    # -----------------------------------------------------------------
    # Logical operators
    # -----------------------------------------------------------------
    AND = auto()      # &&
    OR = auto()       # ||
    NOT = auto()      # !

    # -----------------------------------------------------------------
    # Comparison operators
    # -----------------------------------------------------------------
    EQ = auto()       # ==
    NEQ = auto()      # !=
    LT = auto()       # <
    GT = auto()       # >
    LTE = auto()      # <=
    GTE = auto()      # >=

    # -----------------------------------------------------------------
    # Punctuation
    # -----------------------------------------------------------------
    LPAREN = auto()
    RPAREN = auto()

    # -----------------------------------------------------------------
    # Literals
    # -----------------------------------------------------------------
    STRING = auto()
    NUMBER = auto()
    BOOL = auto()

    # -----------------------------------------------------------------
    # Identifiers
    # -----------------------------------------------------------------
    IDENT = auto()
    AT_ID = auto()    # @id

    EOF = auto()


KEYWORDS: dict[str, TokenType] = {
    "true": TokenType.BOOL,
    "false": TokenType.BOOL,
}

COMPARISON_TYPES: frozenset[TokenType] = frozenset({
    TokenType.EQ,
    TokenType.NEQ,
    TokenType.LT,
    TokenType.GT,
    TokenType.LTE,
    TokenType.GTE,
})


@dataclass(frozen=True, slots=True)
class Token:
    """A single scanned token.

    Parameters
    ----------
    type:
        The ``TokenType`` variant for this token.
    value:
        The token text.  For string literals this is the unescaped
        content without the surrounding quotes.
    offset:
        0-based offset of the first character within the expression.
    """

    type: TokenType
    value: str
    offset: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, @{self.offset})"

    @property
    def is_operand(self) -> bool:
        """Return True if this token can stand on its own as an operand."""
        return self.type in (
            TokenType.STRING,
            TokenType.NUMBER,
            TokenType.BOOL,
            TokenType.IDENT,
            TokenType.AT_ID,
        )
