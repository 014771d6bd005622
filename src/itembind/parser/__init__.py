"""Constraint parser module.

Exports the ``Parser`` class, the ``parse_expression`` convenience
function, and parse error types.
"""
from __future__ import annotations

from itembind.parser.errors import ParseError, ParseErrorCollection, RecoveryStrategy
from itembind.parser.parser import Parser, parse_expression

__all__ = [
    "Parser",
    "parse_expression",
    "ParseError",
    "ParseErrorCollection",
    "RecoveryStrategy",
]
