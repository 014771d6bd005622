"""Constraint lexer: converts an expression string into a flat token list.

The lexer is a single-pass character scanner.  It records the offset of
every token so the parser can point at the offending position when an
expression is malformed.

String literals may be double- or single-quoted and support the usual
backslash escapes: ``\\n``, ``\\t``, ``\\\\``, ``\\"``, ``\\'``.

Numbers are integers or decimals.  A ``-`` immediately followed by a digit
is scanned as part of the number, since the language has no subtraction.

Identifiers follow ``[A-Za-z_][A-Za-z0-9_-]*``.  ``@id`` is scanned as its
own token; any other ``@name`` (``@type``, ``@context``) is an identifier
naming that reserved key.
"""
from __future__ import annotations

import re
from typing import Final

from itembind.grammar.tokens import KEYWORDS, Token, TokenType

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_IDENT_START: Final[re.Pattern[str]] = re.compile(r"[A-Za-z_]")
_IDENT_CONT: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9_\-]")
_DIGIT: Final[re.Pattern[str]] = re.compile(r"[0-9]")

_ESCAPE_MAP: Final[dict[str, str]] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
    "'": "'",
}

_TWO_CHAR: Final[dict[str, TokenType]] = {
    "==": TokenType.EQ,
    "!=": TokenType.NEQ,
    "<=": TokenType.LTE,
    ">=": TokenType.GTE,
    "&&": TokenType.AND,
    "||": TokenType.OR,
}

_SINGLE_CHAR: Final[dict[str, TokenType]] = {
    "<": TokenType.LT,
    ">": TokenType.GT,
    "!": TokenType.NOT,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
}


class LexError(Exception):
    """Raised when the lexer encounters invalid input.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    offset:
        0-based offset in the expression where the error occurred.
    """

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"LexError at {offset}: {message}")
        self.lex_message = message
        self.offset = offset


class Lexer:
    """Single-pass constraint lexer.

    Parameters
    ----------
    source:
        The complete expression text to tokenize.
    """

    __slots__ = ("_source", "_pos", "_tokens")

    def __init__(self, source: str) -> None:
        self._source: str = source
        self._pos: int = 0
        self._tokens: list[Token] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def tokenize(self) -> list[Token]:
        """Scan the entire expression and return the token list.

        The list always ends with an ``EOF`` token.

        Raises
        ------
        LexError
            On any character that cannot begin a valid token.
        """
        while self._pos < len(self._source):
            self._scan_one()
        self._tokens.append(Token(TokenType.EOF, "", self._pos))
        return self._tokens

    # ------------------------------------------------------------------
    # Internal scanner
    # ------------------------------------------------------------------

    def _current(self) -> str:
        return self._source[self._pos] if self._pos < len(self._source) else ""

    def _peek(self, offset: int = 1) -> str:
        idx = self._pos + offset
        return self._source[idx] if idx < len(self._source) else ""

    def _emit(self, token_type: TokenType, value: str, start: int) -> None:
        self._tokens.append(Token(type=token_type, value=value, offset=start))

    def _scan_one(self) -> None:
        """Scan exactly one token (or skip whitespace)."""
        start = self._pos
        ch = self._current()

        if ch.isspace():
            self._pos += 1
            return

        if ch in ('"', "'"):
            self._scan_string(start, ch)
            return

        if _DIGIT.match(ch) or (ch == "-" and _DIGIT.match(self._peek())):
            self._scan_number(start)
            return

        if _IDENT_START.match(ch):
            self._scan_ident_or_keyword(start)
            return

        if ch == "@":
            self._scan_reserved(start)
            return

        pair = ch + self._peek()
        if pair in _TWO_CHAR:
            self._pos += 2
            self._emit(_TWO_CHAR[pair], pair, start)
            return

        if ch in _SINGLE_CHAR:
            self._pos += 1
            self._emit(_SINGLE_CHAR[ch], ch, start)
            return

        raise LexError(f"Unexpected character {ch!r}", start)

    # ------------------------------------------------------------------
    # Token-specific scanners
    # ------------------------------------------------------------------

    def _scan_string(self, start: int, quote: str) -> None:
        """Consume a quoted string literal with backslash escape support."""
        self._pos += 1  # opening quote
        buf: list[str] = []
        while self._pos < len(self._source):
            ch = self._current()
            if ch == quote:
                self._pos += 1
                self._emit(TokenType.STRING, "".join(buf), start)
                return
            if ch == "\\":
                esc = self._peek()
                buf.append(_ESCAPE_MAP.get(esc, "\\" + esc))
                self._pos += 2
                continue
            buf.append(ch)
            self._pos += 1
        raise LexError("Unterminated string literal", start)

    def _scan_number(self, start: int) -> None:
        """Consume an integer or decimal literal."""
        if self._current() == "-":
            self._pos += 1
        while _DIGIT.match(self._current()):
            self._pos += 1
        if self._current() == "." and _DIGIT.match(self._peek()):
            self._pos += 1
            while _DIGIT.match(self._current()):
                self._pos += 1
        self._emit(TokenType.NUMBER, self._source[start : self._pos], start)

    def _scan_word(self) -> str:
        begin = self._pos
        while self._pos < len(self._source) and _IDENT_CONT.match(self._current()):
            self._pos += 1
        return self._source[begin : self._pos]

    def _scan_ident_or_keyword(self, start: int) -> None:
        word = self._scan_word()
        self._emit(KEYWORDS.get(word, TokenType.IDENT), word, start)

    def _scan_reserved(self, start: int) -> None:
        """Consume ``@id`` or another ``@``-prefixed reserved key."""
        self._pos += 1  # @
        if not _IDENT_START.match(self._current()):
            raise LexError("Expected a name after '@'", start)
        word = self._scan_word()
        if word == "id":
            self._emit(TokenType.AT_ID, "@id", start)
        else:
            self._emit(TokenType.IDENT, "@" + word, start)


# ---------------------------------------------------------------------------
# Module-level convenience function
# ---------------------------------------------------------------------------


def tokenize(source: str) -> list[Token]:
    """Tokenize a constraint expression and return the token list.

    Raises
    ------
    LexError
        If the expression contains invalid characters or unterminated
        string literals.

    Example
    -------
    ::

        from itembind.lexer import tokenize
        tokens = tokenize('status == "open" && !archived')
    """
    return Lexer(source).tokenize()
