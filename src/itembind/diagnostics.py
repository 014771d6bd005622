"""Diagnostic types for soft render errors.

A ``Diagnostic`` describes a per-record or per-node problem that was
absorbed during rendering: the affected node is skipped or left unfilled
and the rest of the batch is still rendered.  Diagnostics are logged and
appended to a ``DiagnosticSink`` owned by a single render call.

Codes:

    BIND001  No structural root matches a record
    BIND002  Array binding received a non-list value
    BIND003  Scope binding received a non-object value
    BIND004  Malformed constraint expression
    BIND005  Reference could not be resolved
    BIND006  Recursion depth limit exceeded
    BIND007  Cyclic reference
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum, auto

logger = logging.getLogger(__name__)


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostics, aligned with LSP conventions."""

    ERROR = auto()
    WARNING = auto()
    INFORMATION = auto()
    HINT = auto()


_LOG_LEVELS: dict[DiagnosticSeverity, int] = {
    DiagnosticSeverity.ERROR: logging.ERROR,
    DiagnosticSeverity.WARNING: logging.WARNING,
    DiagnosticSeverity.INFORMATION: logging.INFO,
    DiagnosticSeverity.HINT: logging.DEBUG,
}


@dataclass(frozen=True)
class Diagnostic:
    """A single soft render finding.

    Parameters
    ----------
    severity:
        How serious this finding is.
    code:
        A short machine-readable identifier, e.g. ``"BIND002"``.
    message:
        Human-readable description of the problem.
    path:
        Location of the template node involved, e.g. ``"article/ul/li[1]"``.
    suggestion:
        Optional human-readable fix suggestion.
    rule:
        The render step that produced this diagnostic.
    """

    severity: DiagnosticSeverity
    code: str
    message: str
    path: str = ""
    suggestion: str | None = field(default=None)
    rule: str = field(default="")

    def __str__(self) -> str:
        prefix = f"[{self.code}] {self.severity.name}"
        location = f" at {self.path}" if self.path else ""
        suggestion_part = f" (hint: {self.suggestion})" if self.suggestion else ""
        return f"{prefix}{location}: {self.message}{suggestion_part}"

    @property
    def is_error(self) -> bool:
        """Return True if this diagnostic should fail a strict render."""
        return self.severity == DiagnosticSeverity.ERROR


class DiagnosticSink:
    """Collects the diagnostics of one render call.

    Parameters
    ----------
    strict:
        When ``True``, WARNING-level diagnostics are promoted to ERROR.
    target:
        Optional caller-owned list that receives every diagnostic as it
        is reported.
    """

    def __init__(self, strict: bool = False, target: list[Diagnostic] | None = None) -> None:
        self._strict = strict
        self._items: list[Diagnostic] = target if target is not None else []

    def report(
        self,
        code: str,
        message: str,
        *,
        path: str = "",
        severity: DiagnosticSeverity = DiagnosticSeverity.WARNING,
        suggestion: str | None = None,
        rule: str = "",
    ) -> Diagnostic:
        """Record a diagnostic and log it; return the stored instance."""
        diagnostic = Diagnostic(
            severity=severity,
            code=code,
            message=message,
            path=path,
            suggestion=suggestion,
            rule=rule,
        )
        if self._strict and diagnostic.severity == DiagnosticSeverity.WARNING:
            diagnostic = replace(diagnostic, severity=DiagnosticSeverity.ERROR)
        logger.log(_LOG_LEVELS[diagnostic.severity], "%s", diagnostic)
        self._items.append(diagnostic)
        return diagnostic

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return list(self._items)

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self._items)

    def __len__(self) -> int:
        return len(self._items)
