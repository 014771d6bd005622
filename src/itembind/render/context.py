"""Per-render state threaded through the renderer."""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from itembind.diagnostics import DiagnosticSink
from itembind.references.resolver import ID_KEY, Record


@dataclass(frozen=True)
class RenderContext:
    """Immutable render state; each descent derives a new context.

    Parameters
    ----------
    root_record:
        Record the current structural root was selected for.
    current_record:
        Record whose properties bind at the current node.
    all_records:
        Every record of the render batch, in batch order.  References
        and scope filters look records up here.
    source_base:
        Base location for ``itemid`` values.
    depth:
        Number of record descents above the current node.
    ancestors:
        ``@id`` values of the records entered through references or
        scope filters on the way to the current node.
    diagnostics:
        Sink receiving the diagnostics of this render call.
    """

    root_record: Record
    current_record: Record
    all_records: tuple[Record, ...] = ()
    source_base: str = ""
    depth: int = 0
    ancestors: frozenset[str] = frozenset()
    diagnostics: DiagnosticSink = field(default_factory=DiagnosticSink)

    @classmethod
    def for_root(
        cls,
        record: Record,
        all_records: Sequence[Record],
        source_base: str = "",
        diagnostics: DiagnosticSink | None = None,
    ) -> "RenderContext":
        """Return the context for rendering ``record`` from a structural root."""
        identifier = record.get(ID_KEY) if isinstance(record, dict) else None
        return cls(
            root_record=record,
            current_record=record,
            all_records=tuple(all_records),
            source_base=source_base,
            ancestors=frozenset({str(identifier)}) if identifier else frozenset(),
            diagnostics=diagnostics if diagnostics is not None else DiagnosticSink(),
        )

    def descend(self, record: Any, linked: bool = False) -> "RenderContext":
        """Return a context one level deeper with ``record`` in scope.

        ``linked`` marks records reached through a reference or scope
        filter; their ``@id`` joins the ancestor chain.
        """
        ancestors = self.ancestors
        if linked and isinstance(record, dict) and record.get(ID_KEY):
            ancestors = ancestors | {str(record[ID_KEY])}
        return replace(self, current_record=record, depth=self.depth + 1, ancestors=ancestors)

    def is_cycle(self, record: Any) -> bool:
        """Return True if entering ``record`` by link would revisit the chain."""
        if not isinstance(record, dict):
            return False
        identifier = record.get(ID_KEY)
        return bool(identifier) and str(identifier) in self.ancestors
