"""Reference resolution module."""
from __future__ import annotations

from itembind.references.resolver import ID_KEY, Record, ReferenceResolver, resolve

__all__ = ["ReferenceResolver", "resolve", "Record", "ID_KEY"]
