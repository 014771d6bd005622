"""The engine facade: a ``<template>`` element bound to a configuration.

Example
-------
::

    from itembind import Template

    template = Template.from_html('''
        <template>
          <article itemscope>
            <h1 itemprop="name"></h1>
            <ul><li itemprop="tags[]"></li></ul>
          </article>
        </template>
    ''')
    article = template.render({"name": "Hello", "tags": ["a", "b"]})

A ``Template`` analyzes its roots once, on first use, and is safe to
render from several threads at once: every render call carries its own
record batch and diagnostics.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from xml.etree.ElementTree import Element

from itembind.analysis.structure import StructuralNode, analyze, select_root_elements
from itembind.config import EngineConfig
from itembind.constraints.evaluator import ConstraintEvaluator
from itembind.diagnostics import Diagnostic, DiagnosticSink
from itembind.dom.document import Document
from itembind.dom.html import parse_html
from itembind.dom.tree import tag_name
from itembind.errors import TemplateError
from itembind.matching.matcher import TypeMatcher
from itembind.normalize.normalizer import RecordNormalizer
from itembind.references.resolver import Record, ReferenceResolver
from itembind.render.context import RenderContext
from itembind.render.renderer import Renderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """Output of a render call together with its diagnostics.

    Parameters
    ----------
    output:
        ``Element | None`` for a single record, ``list[Element]`` for a batch.
    diagnostics:
        Every diagnostic reported during the call, in report order.
    """

    output: Element | list[Element] | None
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)


class Template:
    """A renderable template.

    Parameters
    ----------
    source:
        A ``<template>`` element, or a parsed ``Document`` containing one.
    config:
        Engine configuration.  Defaults to ``EngineConfig()``.
    selector:
        Overrides ``config.selector``.
    base_url:
        Overrides ``config.base_url``.
    template_id:
        With a ``Document`` source, the ``id`` of the template to use.

    Raises
    ------
    TemplateError
        If no ``<template>`` element is found.  Problems with the
        template content (no elements, a selector matching nothing) are
        raised on first use.
    """

    def __init__(
        self,
        source: Element | Document,
        config: EngineConfig | None = None,
        *,
        selector: str | None = None,
        base_url: str | None = None,
        template_id: str | None = None,
    ) -> None:
        config = config or EngineConfig()
        if isinstance(source, Document):
            element = source.find_template(template_id)
            if element is None:
                wanted = f" with id {template_id!r}" if template_id else ""
                raise TemplateError(f"document contains no <template> element{wanted}")
            if base_url is None and not config.base_url:
                base_url = source.base_url
        else:
            element = source
        if not isinstance(element, Element) or tag_name(element) != "template":
            raise TemplateError(f"expected a <template> element, got {_describe(element)}")

        self._element = element
        self._config = config.replace(selector=selector, base_url=base_url)
        self._normalizer = RecordNormalizer(self._config.vocabulary, self._config.type_separator)
        self._matcher = TypeMatcher(self._config.type_separator)
        self._renderer = Renderer(
            self._config,
            ConstraintEvaluator(ReferenceResolver(self._config.reference_marker)),
        )
        self._roots: tuple[StructuralNode, ...] | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_html(
        cls,
        text: str,
        template_id: str | None = None,
        config: EngineConfig | None = None,
        *,
        selector: str | None = None,
        base_url: str = "",
    ) -> "Template":
        """Parse ``text`` and build a ``Template`` from its first (or named) ``<template>``."""
        return cls(
            parse_html(text, base_url),
            config,
            selector=selector,
            template_id=template_id,
        )

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def element(self) -> Element:
        return self._element

    @property
    def roots(self) -> tuple[StructuralNode, ...]:
        """Analyzed root candidates, computed once on first access.

        Raises
        ------
        TemplateError
            If the template has no usable root.
        """
        if self._roots is None:
            with self._lock:
                if self._roots is None:
                    elements = select_root_elements(
                        self._element, self._config.selector, self._config.vocabulary
                    )
                    self._roots = tuple(
                        analyze(element, self._config.vocabulary) for element in elements
                    )
                    logger.debug("Analyzed %d template root(s)", len(self._roots))
        return self._roots

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(
        self,
        data: Any,
        diagnostics: list[Diagnostic] | None = None,
    ) -> Element | list[Element] | None:
        """Render ``data`` (a record, a batch, or any normalizable source).

        Returns the output element (or ``None``) for a single record and a
        list of output elements for a batch, with unmatched records left
        out.  Diagnostics are appended to ``diagnostics`` when given.
        """
        records = self._normalizer.normalize(data)
        origin = self._normalizer.origin_base(data) or self._config.base_url
        sink = DiagnosticSink(strict=self._config.strict, target=diagnostics)

        if isinstance(records, list):
            batch = [record if isinstance(record, dict) else {} for record in records]
            outputs: list[Element] = []
            for record in batch:
                outputs.extend(self._render_record(record, batch, origin, sink))
            return outputs

        rendered = self._render_record(records, [records], origin, sink)
        return rendered[0] if rendered else None

    def render_with_diagnostics(self, data: Any) -> RenderResult:
        """Render ``data`` and return the output together with its diagnostics."""
        collected: list[Diagnostic] = []
        output = self.render(data, diagnostics=collected)
        return RenderResult(output=output, diagnostics=tuple(collected))

    def _render_record(
        self,
        record: Record,
        batch: Sequence[Record],
        origin: str,
        sink: DiagnosticSink,
    ) -> list[Element]:
        root = self._matcher.select_root(record, self.roots)
        if root is None:
            sink.report(
                "BIND001",
                f"No template root matches record of type {self._matcher.qualified_type(record)!r}",
                suggestion=f"Add a root with a matching {self._config.vocabulary.type} or an untyped root",
                rule="match",
            )
            return []
        context = RenderContext.for_root(record, batch, origin, sink)
        return self._renderer.render(root, record, context)

    def __repr__(self) -> str:
        return f"Template(selector={self._config.selector!r}, base_url={self._config.base_url!r})"


def _describe(value: Any) -> str:
    if isinstance(value, Element):
        return f"<{tag_name(value) or value.tag}>"
    return type(value).__name__
