"""Conversion of heterogeneous inputs into canonical records.

A record is a plain ``dict``: string keys, with the reserved keys
``@id``, ``@type`` and ``@context`` carrying identity and type.  Values
are scalars, nested records, or lists of either.

Accepted inputs:

* ``None``                      -> ``{}``
* ``Mapping``                   -> ``dict``, nested values normalized
* ``list`` / ``tuple``          -> element-wise, order preserved
* ``FormData``                  -> path notation (see ``normalize.forms``)
* ``Element`` ``<form>``        -> its successful controls, then path notation
* ``Element`` ``<ul>``/``<ol>`` -> one record per direct ``<li itemscope>``
* other ``Element``             -> microdata extraction
* ``Document``                  -> one record per top-level item

Anything else normalizes to ``{}``.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from xml.etree.ElementTree import Element

from itembind.config import Vocabulary
from itembind.dom.document import Document
from itembind.dom.tree import tag_name
from itembind.normalize.forms import FormData
from itembind.normalize.microdata import MicrodataExtractor

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class RecordNormalizer:
    """Normalizes render input into records.

    Parameters
    ----------
    vocabulary:
        Annotation attribute names read from data trees.
    type_separator:
        Separator between ``@context`` and ``@type`` in type annotations.
    """

    def __init__(self, vocabulary: Vocabulary | None = None, type_separator: str = "/") -> None:
        self._vocab = vocabulary or Vocabulary()
        self._extractor = MicrodataExtractor(self._vocab, type_separator)

    def normalize(self, source: Any) -> Record | list[Record]:
        """Return the canonical record (or list of records) for ``source``."""
        if source is None:
            return {}
        if isinstance(source, Document):
            items = list(source.items(self._vocab.binding, self._vocab.scope))
            logger.debug("Extracting %d item(s) from document %r", len(items), source.base_url)
            return [self._extractor.extract(item) for item in items]
        if isinstance(source, FormData):
            return source.to_record()
        if isinstance(source, Element):
            return self._normalize_element(source)
        if isinstance(source, Mapping):
            return {str(key): self._normalize_value(value) for key, value in source.items()}
        if isinstance(source, (list, tuple)):
            return [self._normalize_value(item) for item in source]
        logger.debug("Cannot normalize %s; using an empty record", type(source).__name__)
        return {}

    @staticmethod
    def origin_base(source: Any) -> str:
        """Return the base location ``source`` was loaded from, or ``""``."""
        if isinstance(source, Document):
            return source.base_url
        return ""

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _normalize_value(self, value: Any) -> Any:
        if isinstance(value, (Mapping, Element, Document, FormData, list, tuple)):
            return self.normalize(value)
        return value

    def _normalize_element(self, element: Element) -> Record | list[Record]:
        tag = tag_name(element)
        if tag == "form":
            return FormData.from_form(element).to_record()
        if tag in ("ul", "ol"):
            return [
                self._extractor.extract(item)
                for item in element
                if tag_name(item) == "li" and self._vocab.scope in item.attrib
            ]
        names = (element.get(self._vocab.binding) or "").split()
        if names and self._vocab.scope not in element.attrib:
            value = self._extractor.property_value(element)
            return {self._extractor.clean_name(name): value for name in names}
        return self._extractor.extract(element)


def normalize(source: Any, vocabulary: Vocabulary | None = None) -> Record | list[Record]:
    """Convenience function: normalize ``source`` with a default normalizer."""
    return RecordNormalizer(vocabulary).normalize(source)
