"""Formal grammar of the constraint expression language.

The grammar is implemented by the hand-written recursive-descent parser
in ``itembind.parser``; the constants below are the reference
documentation for it and are printed by ``itembind check --grammar``.

Notation:
    ``::=``     production rule
    ``|``       alternation
    ``( )``     grouping
    ``*``       zero or more repetitions
    ``STRING``  terminal: single- or double-quoted string literal
    ``NUMBER``  terminal: integer or decimal literal, optional leading ``-``
    ``BOOL``    terminal: ``true`` or ``false``
    ``IDENT``   terminal: property name (letter/underscore, then word chars
                or ``-``), or a reserved key such as ``@type``
"""
from __future__ import annotations

GRAMMAR_EXPRESSION = """
expression ::= or_expr EOF

or_expr    ::= and_expr ( '||' and_expr )*
and_expr   ::= comparison ( '&&' comparison )*
comparison ::= unary_expr ( comp_op unary_expr )*
unary_expr ::= '!' unary_expr
             | primary
comp_op    ::= '==' | '!=' | '<' | '<=' | '>' | '>='
primary    ::= '@id'
             | IDENT
             | STRING
             | NUMBER
             | BOOL
             | '(' or_expr ')'
"""

GRAMMAR_SEMANTICS = """
'@id'      the identifier of the record in scope, or "" when it has none
IDENT      the property of that name on the record in scope, or "" when absent
comp_op    numeric comparison when both sides parse as numbers,
           string comparison otherwise
'@id == IDENT'
           when the property holds a reference ("#other"), resolve it
           against the render batch; the constraint passes only if it
           resolves, and rendering continues with the resolved record
"""

# Operator precedence, tightest first.
PRECEDENCE: tuple[str, ...] = ("!", "== != < <= > >=", "&&", "||")

FULL_GRAMMAR = GRAMMAR_EXPRESSION + GRAMMAR_SEMANTICS
