"""Tree-node helpers over ``xml.etree.ElementTree`` elements.

Templates, data trees and rendered output are all plain ``Element``
objects.  ElementTree splits text between ``text`` (before the first
child) and ``tail`` (after an element, inside its parent); the helpers
here hide that split where the binding engine needs DOM-like behaviour.
"""
from __future__ import annotations

import copy
from xml.etree.ElementTree import Element


def clone(element: Element) -> Element:
    """Return a deep copy of ``element`` and its subtree."""
    return copy.deepcopy(element)


def shallow_clone(element: Element) -> Element:
    """Return a copy of ``element`` with its attributes and text but no children or tail."""
    copied = Element(element.tag, dict(element.attrib))
    copied.text = element.text
    return copied


def append_text(element: Element, text: str | None) -> None:
    """Append ``text`` after the last child of ``element``, or to its text when it has none."""
    if not text:
        return
    if len(element):
        last = element[-1]
        last.tail = (last.tail or "") + text
    else:
        element.text = (element.text or "") + text


def text_content(element: Element) -> str:
    """Concatenate all text inside ``element`` (its own tail excluded)."""
    return "".join(element.itertext())


def set_text_content(element: Element, value: str) -> None:
    """Replace the children of ``element`` with a single text value."""
    for child in list(element):
        element.remove(child)
    element.text = value


def has_attribute(element: Element, name: str) -> bool:
    return name in element.attrib


def tag_name(element: Element) -> str:
    """Lower-cased tag name; non-string tags (comments) yield ``""``."""
    return element.tag.lower() if isinstance(element.tag, str) else ""
