"""Parse error types for the constraint parser.

Parse errors carry the offset of the offending token so the CLI can
point at the exact position in a ``data-constraint`` value.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from itembind.ast.nodes import Span
from itembind.errors import ItembindError
from itembind.grammar.tokens import Token, TokenType


class RecoveryStrategy(Enum):
    """How the parser continued after an error.

    SKIP_TOKEN
        The unexpected token was consumed and parsing continued.
    INSERT_MISSING
        A missing token (usually ``)``) was assumed present.
    """

    SKIP_TOKEN = auto()
    INSERT_MISSING = auto()


@dataclass(frozen=True)
class ParseError(Exception):
    """A single parse error with location and recovery hint.

    Parameters
    ----------
    message:
        Human-readable description of the error.
    span:
        Location of the offending token.
    expected:
        What token types were expected at this position.
    found:
        The token that was actually encountered.
    recovery:
        How the parser continued past the error.
    """

    message: str
    span: Span
    expected: tuple[TokenType, ...]
    found: Token | None
    recovery: RecoveryStrategy

    def __str__(self) -> str:
        if self.found is not None and self.found.type is not TokenType.EOF:
            return (
                f"ParseError at {self.span.start}: {self.message} "
                f"(found {self.found.type.name} {self.found.value!r})"
            )
        return f"ParseError at {self.span.start}: {self.message}"

    # dataclass(frozen=True) doesn't call Exception.__init__ automatically
    def __post_init__(self) -> None:
        object.__setattr__(self, "args", (str(self),))


@dataclass
class ParseErrorCollection(ItembindError):
    """Aggregates every ``ParseError`` from a single parse run.

    Parameters
    ----------
    source:
        The expression text that failed to parse.
    errors:
        Ordered list of errors encountered during parsing.
    """

    source: str = ""
    errors: list[ParseError] = field(default_factory=list)

    def add(self, error: ParseError) -> None:
        """Append a new error to the collection."""
        self.errors.append(error)

    @property
    def has_errors(self) -> bool:
        """Return True if any errors were recorded."""
        return bool(self.errors)

    def __str__(self) -> str:
        if not self.errors:
            return "ParseErrorCollection (no errors)"
        lines = [f"{len(self.errors)} error(s) in constraint {self.source!r}:"]
        for err in self.errors:
            lines.append(f"  {err}")
        return "\n".join(lines)
