"""Constraint grammar module.

Exports token definitions and formal grammar constants.
"""
from __future__ import annotations

from itembind.grammar.grammar import (
    FULL_GRAMMAR,
    GRAMMAR_EXPRESSION,
    GRAMMAR_SEMANTICS,
    PRECEDENCE,
)
from itembind.grammar.tokens import COMPARISON_TYPES, KEYWORDS, Token, TokenType

__all__ = [
    "TokenType",
    "Token",
    "KEYWORDS",
    "COMPARISON_TYPES",
    "FULL_GRAMMAR",
    "GRAMMAR_EXPRESSION",
    "GRAMMAR_SEMANTICS",
    "PRECEDENCE",
]
