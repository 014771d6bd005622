"""itembind — declarative binding of records onto annotated HTML templates.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import itembind

    template = itembind.Template.from_html('''
        <template>
          <article itemscope itemtype="https://schema.org/Person">
            <h1 itemprop="name"></h1>
          </article>
        </template>
    ''')

    # Render a record into a new element
    article = template.render({
        "@context": "https://schema.org",
        "@type": "Person",
        "@id": "johndoe",
        "name": "John Doe",
    })
    itembind.to_html(article)

    # Extract records back out of a page
    records = itembind.normalize_records(itembind.parse_html(page))

    # Evaluate a constraint against a record
    itembind.evaluate('status == "open" && priority > 2', {"status": "open", "priority": 3})

    itembind.__version__
    '0.1.0'
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from itembind.template import RenderResult, Template

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from itembind.analysis.structure import StructuralNode
    from itembind.ast.nodes import Expression
    from itembind.config import EngineConfig
    from itembind.dom.document import Document


def render_template(
    template: "Element | Document",
    data: Any,
    config: "EngineConfig | None" = None,
) -> "Element | list[Element] | None":
    """Render ``data`` with a one-off ``Template``.

    Parameters
    ----------
    template:
        A ``<template>`` element or a document containing one.
    data:
        A record, a list of records, or any source ``normalize`` accepts.
    config:
        Engine configuration.

    Returns
    -------
    Element | list[Element] | None
        The output element for a single record, a list for a batch.

    Raises
    ------
    itembind.errors.TemplateError
        If the template cannot be used.
    """
    return Template(template, config).render(data)


def analyze(element: "Element") -> "StructuralNode":
    """Analyze a template root element into a ``StructuralNode`` tree."""
    from itembind.analysis.structure import analyze as _analyze

    return _analyze(element)


def normalize_records(source: Any) -> "dict[str, Any] | list[dict[str, Any]]":
    """Normalize records, element trees, documents or form data into records."""
    from itembind.normalize.normalizer import normalize as _normalize

    return _normalize(source)


def evaluate(expression: str, record: dict[str, Any], all_records: list[dict[str, Any]] | None = None) -> bool:
    """Evaluate a constraint expression against ``record``.

    Malformed expressions evaluate to ``False``.
    """
    from itembind.constraints.evaluator import evaluate as _evaluate

    return _evaluate(expression, record, all_records or ())


def parse_expression(source: str) -> "Expression":
    """Parse a constraint expression into its AST.

    Raises
    ------
    itembind.lexer.LexError
        If the expression contains invalid characters.
    itembind.parser.ParseErrorCollection
        If the expression is syntactically invalid.
    """
    from itembind.parser.parser import parse_expression as _parse_expression

    return _parse_expression(source)


def parse_html(text: str, base_url: str = "") -> "Document":
    """Parse HTML text into a ``Document``."""
    from itembind.dom.html import parse_html as _parse_html

    return _parse_html(text, base_url)


def to_html(node: "Element | Document") -> str:
    """Serialize an element or document to HTML text."""
    from itembind.dom.html import to_html as _to_html

    return _to_html(node)


__all__ = [
    "__version__",
    "Template",
    "RenderResult",
    "render_template",
    "analyze",
    "normalize_records",
    "evaluate",
    "parse_expression",
    "parse_html",
    "to_html",
]
