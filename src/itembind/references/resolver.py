"""Identifier references between records of one render batch.

A reference is a string made of a marker (``#`` by default) followed by
the ``@id`` of another record in the same batch, e.g. ``"#johndoe"``.
Resolving references turns a flat batch of records into a linked graph:
a task can point at its assignee, and a person template can list every
task pointing at that person.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

ID_KEY = "@id"

Record = dict[str, Any]


class ReferenceResolver:
    """Resolves ``#id`` references against a batch of records.

    Parameters
    ----------
    marker:
        Leading character that makes a string a reference.
    """

    def __init__(self, marker: str = "#") -> None:
        if not marker:
            raise ValueError("reference marker must not be empty")
        self._marker = marker

    @property
    def marker(self) -> str:
        return self._marker

    def is_reference(self, value: Any) -> bool:
        """Return True if ``value`` is a marker-prefixed identifier."""
        return isinstance(value, str) and len(value) > len(self._marker) and value.startswith(self._marker)

    def target_id(self, reference: str) -> str:
        """Strip the marker from a reference."""
        return reference[len(self._marker):]

    def resolve(self, reference: Any, all_records: Sequence[Record]) -> Record | None:
        """Return the first record whose ``@id`` equals the referenced identifier.

        Non-reference values and dangling references yield ``None``.
        """
        if not self.is_reference(reference):
            return None
        wanted = self.target_id(reference)
        for record in all_records:
            if isinstance(record, dict) and record.get(ID_KEY) == wanted:
                return record
        return None

    def refers_to(self, value: Any, identifier: Any) -> bool:
        """Return True if ``value`` points at ``identifier``.

        Both the marker form (``"#johndoe"``) and the bare identifier
        (``"johndoe"``) count as pointing at ``"johndoe"``.
        """
        if not identifier or not isinstance(value, str):
            return False
        identifier = str(identifier)
        return value == identifier or value == self._marker + identifier

    def referencing(self, prop: str, identifier: Any, all_records: Sequence[Record]) -> list[Record]:
        """Return every record whose ``prop`` points at ``identifier``, in batch order."""
        if not identifier:
            return []
        return [
            record
            for record in all_records
            if isinstance(record, dict) and self.refers_to(record.get(prop), identifier)
        ]


def resolve(reference: Any, all_records: Sequence[Record], marker: str = "#") -> Record | None:
    """Convenience function: resolve ``reference`` with a default resolver."""
    return ReferenceResolver(marker).resolve(reference, all_records)
