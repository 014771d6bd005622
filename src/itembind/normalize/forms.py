"""Flat key/value encodings (form submissions, query strings).

``FormData`` is an ordered list of ``(path, value)`` pairs, as produced by
submitting an HTML form.  ``to_record`` folds the pairs into a nested
record using path notation:

* ``a.b``          builds nested records: ``{"a": {"b": value}}``
* ``items[]``      appends to a list at ``items``
* ``a[0]``, ``a.0``  numeric segments build lists
* a repeated key accumulates its values into a list, in encounter order
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from typing import Any
from urllib.parse import parse_qsl
from xml.etree.ElementTree import Element

from itembind.dom.tree import tag_name, text_content

logger = logging.getLogger(__name__)

ARRAY_MARKER = "[]"

_SEGMENT_SPLIT = re.compile(r"[.\[\]]+")
_SKIPPED_INPUT_TYPES = frozenset({"submit", "button", "reset", "image", "file"})
_MISSING = object()


class FormData:
    """Ordered ``(path, value)`` pairs.

    Parameters
    ----------
    pairs:
        Initial pairs, in submission order.
    """

    def __init__(self, pairs: Iterable[tuple[str, Any]] = ()) -> None:
        self._pairs: list[tuple[str, Any]] = [(str(key), value) for key, value in pairs]

    @classmethod
    def from_query_string(cls, query: str) -> "FormData":
        """Build from ``a=1&b.c=2`` style text (a leading ``?`` is ignored)."""
        return cls(parse_qsl(query.lstrip("?"), keep_blank_values=True))

    @classmethod
    def from_form(cls, form: Element) -> "FormData":
        """Collect the successful controls of a ``<form>`` element, in document order."""
        data = cls()
        for control in form.iter():
            name = control.get("name")
            if not name or "disabled" in control.attrib:
                continue
            tag = tag_name(control)
            if tag == "input":
                input_type = (control.get("type") or "text").lower()
                if input_type in _SKIPPED_INPUT_TYPES:
                    continue
                if input_type in ("checkbox", "radio"):
                    if "checked" in control.attrib:
                        data.append(name, control.get("value", "on"))
                    continue
                data.append(name, control.get("value", ""))
            elif tag == "textarea":
                data.append(name, text_content(control))
            elif tag == "select":
                for value in _selected_options(control):
                    data.append(name, value)
        return data

    def append(self, path: str, value: Any) -> None:
        self._pairs.append((path, value))

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        return f"FormData({self._pairs!r})"

    def to_record(self) -> dict[str, Any]:
        """Fold the pairs into a nested record."""
        record: dict[str, Any] = {}
        for path, value in self._pairs:
            set_path(record, path, value)
        return record


def _selected_options(select: Element) -> list[str]:
    options = list(select.iter("option"))
    chosen = [option for option in options if "selected" in option.attrib]
    if not chosen and options and "multiple" not in select.attrib:
        chosen = options[:1]
    if "multiple" not in select.attrib:
        chosen = chosen[-1:]
    return [option.get("value", text_content(option).strip()) for option in chosen]


# ---------------------------------------------------------------------------
# Path notation
# ---------------------------------------------------------------------------


def split_path(path: str) -> tuple[list[str], bool]:
    """Split a path into segments and report whether it carried the array marker."""
    explicit_array = ARRAY_MARKER in path
    cleaned = path.replace(ARRAY_MARKER, "", 1)
    return [part for part in _SEGMENT_SPLIT.split(cleaned) if part], explicit_array


def set_path(target: dict[str, Any], path: str, value: Any) -> None:
    """Store ``value`` into ``target`` at ``path`` (see module docstring)."""
    parts, explicit_array = split_path(path)
    if not parts:
        logger.debug("Ignoring form field with empty path %r", path)
        return

    container: Any = target
    for part, following in zip(parts, parts[1:]):
        container = _descend(container, part, following.isdigit())
        if container is None:
            logger.debug("Ignoring form field %r: %r is already a scalar", path, part)
            return

    last = parts[-1]
    existing = _get(container, last)
    if existing is _MISSING or existing is None:
        if not _put(container, last, [value] if explicit_array else value):
            logger.debug("Ignoring form field %r: cannot index a list with %r", path, last)
    elif isinstance(existing, list):
        existing.append(value)
    else:
        _put(container, last, [existing, value])


def _get(container: Any, key: str) -> Any:
    if isinstance(container, dict):
        return container.get(key, _MISSING)
    if key.isdigit() and int(key) < len(container):
        return container[int(key)]
    return _MISSING


def _put(container: Any, key: str, value: Any) -> bool:
    if isinstance(container, dict):
        container[key] = value
        return True
    if not key.isdigit():
        return False
    index = int(key)
    while len(container) <= index:
        container.append(None)
    container[index] = value
    return True


def _descend(container: Any, key: str, next_is_index: bool) -> Any:
    """Return the child container at ``key``, creating it when absent."""
    child = _get(container, key)
    if child is _MISSING or child is None:
        child = [] if next_is_index else {}
        if not _put(container, key, child):
            return None
        return child
    if isinstance(child, (dict, list)):
        return child
    return None
