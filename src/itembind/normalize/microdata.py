"""Extraction of records from microdata-annotated trees.

An element carrying the scope attribute is an item.  Its type attribute
splits into ``@type`` (the final ``/`` segment) and ``@context`` (the
rest); its ``id`` becomes ``@id``.  Every descendant carrying the binding
attribute that is not inside a nested item contributes one property:
the first occurrence assigns a value, later occurrences of the same name
turn the property into a list.  A property element that is itself an
item contributes a nested record.

Property values come from the element's value-carrying attribute where
it has one (``meta@content``, ``img@src``, ``time@datetime`` ...) and
from its whitespace-trimmed text otherwise.
"""
from __future__ import annotations

from typing import Any
from xml.etree.ElementTree import Element

from itembind.config import Vocabulary
from itembind.dom.tree import tag_name, text_content
from itembind.matching.matcher import CONTEXT_KEY, TYPE_KEY
from itembind.references.resolver import ID_KEY

# tag -> attribute holding the property value
VALUE_ATTRIBUTES: dict[str, str] = {
    "meta": "content",
    "img": "src",
    "audio": "src",
    "video": "src",
    "source": "src",
    "embed": "src",
    "iframe": "src",
    "a": "href",
    "area": "href",
    "link": "href",
    "object": "data",
    "time": "datetime",
    "data": "value",
    "meter": "value",
    "progress": "value",
    "input": "value",
}


class MicrodataExtractor:
    """Converts annotated elements into records.

    Parameters
    ----------
    vocabulary:
        Annotation attribute names.
    type_separator:
        Separator between the context and the bare type name.
    """

    def __init__(self, vocabulary: Vocabulary | None = None, type_separator: str = "/") -> None:
        self._vocab = vocabulary or Vocabulary()
        self._separator = type_separator

    def extract(self, element: Element) -> dict[str, Any]:
        """Return the record described by ``element``.

        An element without the scope attribute still yields a record built
        from the properties beneath it.
        """
        record: dict[str, Any] = {}
        self._add_identity(element, record)
        self._collect_properties(element, record)
        return record

    def property_value(self, element: Element) -> Any:
        """Return the value a property element contributes."""
        if self._vocab.scope in element.attrib:
            return self.extract(element)
        attribute = VALUE_ATTRIBUTES.get(tag_name(element))
        if attribute is not None and attribute in element.attrib:
            return element.get(attribute, "")
        return text_content(element).strip()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _add_identity(self, element: Element, record: dict[str, Any]) -> None:
        item_type = (element.get(self._vocab.type) or "").split()
        if item_type:
            context, _, type_name = item_type[0].rpartition(self._separator)
            record[TYPE_KEY] = type_name
            record[CONTEXT_KEY] = context
        identifier = element.get(self._vocab.identifier)
        if identifier:
            record[ID_KEY] = identifier

    def _collect_properties(self, item: Element, record: dict[str, Any]) -> None:
        for child in item:
            if not isinstance(child.tag, str):
                continue
            names = (child.get(self._vocab.binding) or "").split()
            if names:
                value = self.property_value(child)
                for name in names:
                    _add_value(record, self.clean_name(name), value)
            if self._vocab.scope not in child.attrib:
                self._collect_properties(child, record)

    def clean_name(self, name: str) -> str:
        suffix = self._vocab.array_suffix
        if name.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
        return name


def _add_value(record: dict[str, Any], name: str, value: Any) -> None:
    if name not in record:
        record[name] = value
    elif isinstance(record[name], list):
        record[name].append(value)
    else:
        record[name] = [record[name], value]
