"""Parsed HTML documents.

A ``Document`` pairs a parsed tree with the base location it was loaded
from.  The base location matters when records are extracted from the
document: rendered ``itemid`` values then point back at the originating
page rather than at the page being rendered into.
"""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from xml.etree.ElementTree import Element

# Tag of the synthetic container holding a document's top-level nodes.
FRAGMENT_TAG = "#fragment"


@dataclass(frozen=True)
class Document:
    """A parsed HTML page or fragment.

    Parameters
    ----------
    root:
        Synthetic container element whose children are the top-level nodes.
    base_url:
        Location the document was loaded from (possibly adjusted by a
        ``<base href>`` element).
    """

    root: Element
    base_url: str = ""

    @property
    def elements(self) -> list[Element]:
        """Top-level elements, in document order."""
        return list(self.root)

    def find_template(self, template_id: str | None = None) -> Element | None:
        """Return the first ``<template>`` element, or the one with ``id=template_id``."""
        for element in self.root.iter("template"):
            if template_id is None or element.get("id") == template_id:
                return element
        return None

    def items(self, binding: str = "itemprop", scope: str = "itemscope") -> Iterator[Element]:
        """Yield top-level microdata items: scoped elements that are not properties."""
        for element in self.root.iter():
            if scope in element.attrib and binding not in element.attrib:
                yield element
