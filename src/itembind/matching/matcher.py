"""Selection of the structural root that renders a record.

Rules, applied in order:

1. A record carrying both ``@type`` and ``@context`` is matched against
   the candidate roots by exact qualified type (``@context`` +
   separator + ``@type``); the first root in document order wins.
2. A record without usable type information takes the first root that
   declares no type.
3. A typed record that matches nothing, while typed roots exist, is
   unmatched; the caller skips it.
4. When no root is typed, the first untyped root applies to every
   record regardless of its type fields.

``@type`` without ``@context`` (or the reverse) counts as no type.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from itembind.analysis.structure import StructuralNode

TYPE_KEY = "@type"
CONTEXT_KEY = "@context"


class TypeMatcher:
    """Picks the candidate root for a record by declared type.

    Parameters
    ----------
    separator:
        Joins ``@context`` and ``@type`` into a qualified type.
    """

    def __init__(self, separator: str = "/") -> None:
        self._separator = separator

    def qualified_type(self, record: Any) -> str | None:
        """Return ``context + separator + type``, or ``None`` if either is missing."""
        if not isinstance(record, dict):
            return None
        type_name = record.get(TYPE_KEY)
        context = record.get(CONTEXT_KEY)
        if not type_name or not context:
            return None
        return f"{str(context).rstrip(self._separator)}{self._separator}{type_name}"

    def select_root(
        self,
        record: Any,
        candidates: Sequence[StructuralNode],
    ) -> StructuralNode | None:
        """Return the root that renders ``record``, or ``None`` if unmatched."""
        has_typed = any(root.declared_type for root in candidates)
        qualified = self.qualified_type(record)

        if qualified is not None:
            for root in candidates:
                if root.declared_type == qualified:
                    return root
            if has_typed:
                return None

        return self._first_untyped(candidates)

    @staticmethod
    def _first_untyped(candidates: Sequence[StructuralNode]) -> StructuralNode | None:
        for root in candidates:
            if not root.declared_type:
                return root
        return None


def select_root(
    record: Any,
    candidates: Sequence[StructuralNode],
    separator: str = "/",
) -> StructuralNode | None:
    """Convenience function: select a root with a default matcher."""
    return TypeMatcher(separator).select_root(record, candidates)
