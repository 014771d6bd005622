"""Constraint recursive-descent parser.

Converts the token list of a ``data-constraint`` expression into an
``Expression`` AST.

Error recovery
--------------
Unexpected tokens are recorded as ``ParseError`` and skipped; a missing
``)`` is assumed present.  Parsing always runs to the end so a single
run surfaces every problem, after which ``ParseErrorCollection`` is
raised if anything was recorded.

Precedence, loosest first:

    '||' > '&&' > comparison > '!' > primary

Operators of equal precedence associate left to right.
"""
from __future__ import annotations

from itembind.ast.nodes import (
    BinOp,
    BinaryOpExpr,
    BoolLit,
    Expression,
    Identifier,
    NumberLit,
    RecordId,
    Span,
    StringLit,
    UnaryOpExpr,
    UnaryOpKind,
)
from itembind.grammar.tokens import Token, TokenType
from itembind.lexer.lexer import tokenize
from itembind.parser.errors import ParseError, ParseErrorCollection, RecoveryStrategy

_BINOP_MAP: dict[TokenType, BinOp] = {
    TokenType.EQ: BinOp.EQ,
    TokenType.NEQ: BinOp.NEQ,
    TokenType.LT: BinOp.LT,
    TokenType.GT: BinOp.GT,
    TokenType.LTE: BinOp.LTE,
    TokenType.GTE: BinOp.GTE,
}

_PRIMARY_START = (
    TokenType.STRING,
    TokenType.NUMBER,
    TokenType.BOOL,
    TokenType.IDENT,
    TokenType.AT_ID,
    TokenType.LPAREN,
)


class Parser:
    """Recursive descent parser producing an ``Expression`` from tokens.

    Parameters
    ----------
    tokens:
        The token list produced by the lexer, terminated by ``EOF``.
    source:
        The original expression text, kept for error messages.
    """

    def __init__(self, tokens: list[Token], source: str = "") -> None:
        self._tokens: list[Token] = tokens
        self._pos: int = 0
        self._errors: ParseErrorCollection = ParseErrorCollection(source=source)

    # ------------------------------------------------------------------
    # Navigation helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return self._tokens[-1]  # EOF

    def _advance(self) -> Token:
        tok = self._current()
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _span_from(self, tok: Token) -> Span:
        # String tokens hold unquoted text, so their raw width is two wider.
        width = len(tok.value) + (2 if tok.type == TokenType.STRING else 0)
        return Span(start=tok.offset, end=tok.offset + width)

    def _record_error(
        self,
        message: str,
        expected: tuple[TokenType, ...],
        recovery: RecoveryStrategy,
    ) -> None:
        tok = self._current()
        self._errors.add(
            ParseError(
                message=message,
                span=self._span_from(tok),
                expected=expected,
                found=tok,
                recovery=recovery,
            )
        )

    # ------------------------------------------------------------------
    # Top-level parse
    # ------------------------------------------------------------------

    def parse(self) -> Expression:
        """Parse the whole token stream as one expression.

        Raises
        ------
        ParseErrorCollection
            If any errors were recorded during parsing.
        """
        if self._check(TokenType.EOF):
            self._record_error("Empty constraint expression", _PRIMARY_START, RecoveryStrategy.INSERT_MISSING)
            raise self._errors
        expr = self._parse_or()
        while not self._check(TokenType.EOF):
            self._record_error(
                "Unexpected token after end of expression",
                (TokenType.EOF,),
                RecoveryStrategy.SKIP_TOKEN,
            )
            self._advance()
        if self._errors.has_errors:
            raise self._errors
        return expr

    # ------------------------------------------------------------------
    # Expression parsing (precedence climbing)
    # ------------------------------------------------------------------

    def _parse_or(self) -> Expression:
        """Parse: ``and_expr ('||' and_expr)*``"""
        left = self._parse_and()
        while self._check(TokenType.OR):
            self._advance()
            right = self._parse_and()
            left = BinaryOpExpr(op=BinOp.OR, left=left, right=right, span=left.span.merge(right.span))
        return left

    def _parse_and(self) -> Expression:
        """Parse: ``comparison ('&&' comparison)*``"""
        left = self._parse_comparison()
        while self._check(TokenType.AND):
            self._advance()
            right = self._parse_comparison()
            left = BinaryOpExpr(op=BinOp.AND, left=left, right=right, span=left.span.merge(right.span))
        return left

    def _parse_unary(self) -> Expression:
        """Parse: ``'!' unary_expr | primary``"""
        if self._check(TokenType.NOT):
            op_tok = self._advance()
            operand = self._parse_unary()
            span = Span(start=op_tok.offset, end=operand.span.end)
            return UnaryOpExpr(op=UnaryOpKind.NOT, operand=operand, span=span)
        return self._parse_primary()

    def _parse_comparison(self) -> Expression:
        """Parse: ``unary_expr (comp_op unary_expr)*``"""
        left = self._parse_unary()
        while self._current().type in _BINOP_MAP:
            op = _BINOP_MAP[self._advance().type]
            right = self._parse_unary()
            left = BinaryOpExpr(op=op, left=left, right=right, span=left.span.merge(right.span))
        return left

    def _parse_primary(self) -> Expression:
        """Parse a literal, ``@id``, an identifier or a grouped expression."""
        tok = self._current()

        if tok.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_or()
            if self._check(TokenType.RPAREN):
                self._advance()
            else:
                self._record_error(
                    "Expected ')' to close grouped expression",
                    (TokenType.RPAREN,),
                    RecoveryStrategy.INSERT_MISSING,
                )
            return expr

        if tok.type == TokenType.STRING:
            self._advance()
            return StringLit(value=tok.value, span=self._span_from(tok))

        if tok.type == TokenType.NUMBER:
            self._advance()
            return NumberLit(value=float(tok.value), span=self._span_from(tok))

        if tok.type == TokenType.BOOL:
            self._advance()
            return BoolLit(value=tok.value == "true", span=self._span_from(tok))

        if tok.type == TokenType.AT_ID:
            self._advance()
            return RecordId(span=self._span_from(tok))

        if tok.type == TokenType.IDENT:
            self._advance()
            return Identifier(name=tok.value, span=self._span_from(tok))

        # Fallback: emit error and return a synthetic identifier
        self._record_error(
            f"Expected operand, got {tok.type.name} {tok.value!r}",
            _PRIMARY_START,
            RecoveryStrategy.SKIP_TOKEN,
        )
        self._advance()
        return Identifier(name="<error>", span=self._span_from(tok))


# ---------------------------------------------------------------------------
# Module-level convenience function
# ---------------------------------------------------------------------------


def parse_expression(source: str) -> Expression:
    """Parse a constraint expression and return its AST.

    Raises
    ------
    LexError
        If the expression contains invalid characters or unterminated
        string literals.
    ParseErrorCollection
        If the expression is syntactically malformed.

    Example
    -------
    ::

        from itembind.parser import parse_expression
        expr = parse_expression('@id == assignee')
    """
    return Parser(tokenize(source), source=source).parse()
