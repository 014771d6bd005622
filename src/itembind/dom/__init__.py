"""Host tree module.

Trees are ``xml.etree.ElementTree`` elements; this package parses HTML
into them, serializes them back, and provides DOM-like helpers.
"""
from __future__ import annotations

from itembind.dom.document import FRAGMENT_TAG, Document
from itembind.dom.html import VOID_ELEMENTS, HtmlTreeBuilder, parse_fragment, parse_html, to_html
from itembind.dom.tree import (
    clone,
    has_attribute,
    set_text_content,
    shallow_clone,
    tag_name,
    text_content,
)

__all__ = [
    "Document",
    "FRAGMENT_TAG",
    "HtmlTreeBuilder",
    "VOID_ELEMENTS",
    "parse_html",
    "parse_fragment",
    "to_html",
    "clone",
    "shallow_clone",
    "text_content",
    "set_text_content",
    "has_attribute",
    "tag_name",
]
