"""HTML parsing into ElementTree, and serialization back to HTML.

``HtmlTreeBuilder`` is an ``html.parser.HTMLParser`` that feeds an
``xml.etree.ElementTree.TreeBuilder``.  It is forgiving in the ways
templates and scraped pages need: void elements never wait for an end
tag, stray end tags are ignored, and the common implicitly-closed
elements (``li``, ``p``, ``option``, table cells ...) close themselves.
Boolean attributes such as ``itemscope`` are stored with an empty value.

Everything parsed is wrapped in a ``Document`` whose ``root`` is a
synthetic container element holding the top-level nodes.
"""
from __future__ import annotations

import copy
from html.parser import HTMLParser
from urllib.parse import urljoin
from xml.etree import ElementTree as ET

from itembind.dom.document import FRAGMENT_TAG, Document

VOID_ELEMENTS: frozenset[str] = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

# tag -> open tags it implicitly closes when it starts
_IMPLICIT_CLOSE: dict[str, frozenset[str]] = {
    "li": frozenset({"li"}),
    "p": frozenset({"p"}),
    "option": frozenset({"option"}),
    "dt": frozenset({"dt", "dd"}),
    "dd": frozenset({"dt", "dd"}),
    "tr": frozenset({"tr", "td", "th"}),
    "td": frozenset({"td", "th"}),
    "th": frozenset({"td", "th"}),
}


class HtmlTreeBuilder(HTMLParser):
    """Build an ElementTree from HTML text.

    Usage::

        builder = HtmlTreeBuilder()
        builder.feed(text)
        root = builder.close()
    """

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._builder = ET.TreeBuilder()
        self._open: list[str] = []
        self._builder.start(FRAGMENT_TAG, {})

    # ─── HTMLParser callbacks ───

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        closes = _IMPLICIT_CLOSE.get(tag)
        if closes and self._open and self._open[-1] in closes:
            self._close_top()
        attrib = {name: (value if value is not None else "") for name, value in attrs}
        self._builder.start(tag, attrib)
        if tag in VOID_ELEMENTS:
            self._builder.end(tag)
        else:
            self._open.append(tag)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        attrib = {name: (value if value is not None else "") for name, value in attrs}
        self._builder.start(tag, attrib)
        self._builder.end(tag)

    def handle_endtag(self, tag: str) -> None:
        if tag in VOID_ELEMENTS or tag not in self._open:
            return
        while self._open:
            if self._close_top() == tag:
                break

    def handle_data(self, data: str) -> None:
        self._builder.data(data)

    # ─── public API ───

    def close(self) -> ET.Element:  # type: ignore[override]
        """Finish parsing and return the fragment container."""
        super().close()
        while self._open:
            self._close_top()
        self._builder.end(FRAGMENT_TAG)
        return self._builder.close()

    def _close_top(self) -> str:
        tag = self._open.pop()
        self._builder.end(tag)
        return tag


def parse_html(text: str, base_url: str = "") -> Document:
    """Parse an HTML page or fragment into a ``Document``.

    ``base_url`` is the location the text was loaded from.  A ``<base
    href>`` element in the page is resolved against it, as browsers do.
    """
    builder = HtmlTreeBuilder()
    builder.feed(text)
    root = builder.close()
    base = root.find(".//base[@href]")
    if base is not None:
        base_url = urljoin(base_url, base.get("href", ""))
    return Document(root=root, base_url=base_url)


def parse_fragment(text: str) -> ET.Element:
    """Parse HTML text that holds exactly one top-level element and return it.

    Raises
    ------
    ValueError
        If the text holds no element or more than one.
    """
    children = list(parse_html(text).root)
    if len(children) != 1:
        raise ValueError(f"expected exactly one top-level element, found {len(children)}")
    element = children[0]
    element.tail = None
    return element


def to_html(node: ET.Element | Document) -> str:
    """Serialize an element (without its tail) or a whole document to HTML."""
    if isinstance(node, Document):
        parts = [node.root.text or ""]
        parts.extend(ET.tostring(child, encoding="unicode", method="html") for child in node.root)
        return "".join(parts)
    detached = copy.copy(node)
    detached.tail = None
    return ET.tostring(detached, encoding="unicode", method="html")
