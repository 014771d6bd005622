"""The recursive binding core.

``Renderer.render`` walks a structural tree in lock-step with a record and
builds the output tree by clone-then-bind: every output element starts as
a shallow copy of its template element, and its children are appended as
they are rendered.  Template elements are never mutated, so the same
structural tree serves any number of concurrent renders.

Per node, in order:

1. A failed constraint omits the node.
2. A scope filter repeats the node once per batch record whose filtered
   property references the active record's ``@id``.
3. A record resolved by a ``@id == prop`` constraint becomes active.
4. An array binding repeats the node once per list element.
5. Attribute placeholders (``${name}``) are filled from the active record.
6. A scalar binding either descends into a nested record (scope nodes)
   or writes the value through the per-tag value setter.
7. A node without a binding renders its children against the same record.
8. A scope node rendering a record with an ``@id`` gets an ``itemid``.

Per-node problems are reported to the context's ``DiagnosticSink`` and
the node is skipped or left unfilled; nothing here raises for bad data.
"""
from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any
from urllib.parse import urldefrag
from xml.etree.ElementTree import Element

from itembind.analysis.structure import StructuralNode
from itembind.config import EngineConfig
from itembind.constraints.evaluator import ConstraintEvaluator, to_text
from itembind.diagnostics import DiagnosticSeverity
from itembind.dom.tree import append_text, clone, shallow_clone
from itembind.references.resolver import ID_KEY, Record, ReferenceResolver
from itembind.render.context import RenderContext
from itembind.render.values import ValueSetterRegistry, value_setters

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\$\{(\w+)\}")


def substitute(template: str, record: Any) -> str:
    """Fill ``${name}`` placeholders from ``record``; unresolved ones stay verbatim."""
    if not isinstance(record, dict):
        return template

    def _replace(match: re.Match[str]) -> str:
        value = record.get(match.group(1))
        if value is None or isinstance(value, dict):
            return match.group(0)
        return to_text(value)

    return PLACEHOLDER.sub(_replace, template)


class Renderer:
    """Binds records onto structural trees.

    Parameters
    ----------
    config:
        Engine configuration; supplies the vocabulary, the recursion
        limit and the default ``itemid`` base.
    evaluator:
        Constraint evaluator.  Built from ``config`` when omitted.
    setters:
        Leaf-value setter registry.  The shared registry when omitted.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        evaluator: ConstraintEvaluator | None = None,
        setters: ValueSetterRegistry | None = None,
    ) -> None:
        self._config = config or EngineConfig()
        self._vocab = self._config.vocabulary
        self._evaluator = evaluator or ConstraintEvaluator(ReferenceResolver(self._config.reference_marker))
        self._resolver = self._evaluator.resolver
        self._setters = setters or value_setters

    def render(
        self,
        structure: StructuralNode,
        record: Record,
        context: RenderContext | None = None,
    ) -> list[Element]:
        """Render ``record`` from ``structure``; return the output elements.

        An omitted root yields an empty list; a root carrying an array
        binding or scope filter can yield several elements.
        """
        if context is None:
            context = RenderContext.for_root(record, (record,), self._config.base_url)
        elif context.current_record is not record:
            context = replace(context, current_record=record)
        return self._render_node(structure, context)

    # ------------------------------------------------------------------
    # Node dispatch
    # ------------------------------------------------------------------

    def _render_node(self, node: StructuralNode, ctx: RenderContext) -> list[Element]:
        if node.scope_filter_property is not None:
            return self._render_scope_filter(node, ctx)

        if node.constraint_expression is not None:
            result = self._evaluator.evaluate(
                node.constraint_expression,
                ctx.current_record,
                ctx.all_records,
                ctx.diagnostics,
                node.path,
            )
            if not result:
                logger.debug("Constraint %r failed at %s", node.constraint_expression, node.path)
                return []
            if result.resolved is not None:
                entered = self._enter(node, ctx, result.resolved, linked=True)
                if entered is None:
                    return []
                ctx = entered

        if node.is_array_binding:
            return self._render_array(node, ctx)

        element = self._start(node, ctx.current_record)
        self._bind(element, node, ctx)
        return [element]

    def _render_children(self, element: Element, node: StructuralNode, ctx: RenderContext) -> None:
        # The text following a template child appears once, after its last copy.
        for child in node.children:
            outputs = self._render_node(child, ctx)
            if outputs:
                outputs[-1].tail = child.element.tail
                element.extend(outputs)
            else:
                append_text(element, child.element.tail)

    @staticmethod
    def _copy_children(element: Element, node: StructuralNode) -> None:
        for child in node.children:
            element.append(clone(child.element))

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _render_scope_filter(self, node: StructuralNode, ctx: RenderContext) -> list[Element]:
        prop = node.scope_filter_property
        enclosing_id = ctx.current_record.get(ID_KEY) if isinstance(ctx.current_record, dict) else None
        matches = [
            record
            for record in ctx.all_records
            if self._evaluator.matches_scope(record, prop, enclosing_id)
        ]
        if not matches:
            logger.debug("Scope filter %r at %s matched no record", prop, node.path)
            return []

        outputs: list[Element] = []
        for match in matches:
            record = match
            if node.constraint_expression is not None:
                result = self._evaluator.evaluate(
                    node.constraint_expression, match, ctx.all_records, ctx.diagnostics, node.path
                )
                if not result:
                    continue
                record = result.resolved if result.resolved is not None else match
            match_ctx = self._enter(node, ctx, record, linked=True)
            if match_ctx is None:
                continue

            element = self._start(node, record)
            self._render_children(element, node, match_ctx)
            if node.binding_property is not None and not node.children:
                value = record.get(node.binding_property)
                if value is not None and not isinstance(value, dict):
                    self._setters.apply(element, value)
            self._mark_identity(element, node, record, ctx)
            outputs.append(element)
        return outputs

    def _render_array(self, node: StructuralNode, ctx: RenderContext) -> list[Element]:
        record = ctx.current_record
        prop = node.binding_property
        value = record.get(prop) if isinstance(record, dict) else None

        if value is None:
            element = self._start(node, record)
            self._copy_children(element, node)
            return [element]

        if not isinstance(value, (list, tuple)):
            ctx.diagnostics.report(
                "BIND002",
                f"Property {prop!r} is bound as an array but holds {type(value).__name__}",
                path=node.path,
                suggestion=f"Provide a list for {prop!r} or drop the {self._vocab.array_suffix!r} marker",
                rule="array",
            )
            return []

        outputs: list[Element] = []
        for item in value:
            if isinstance(item, dict) and node.children:
                item_ctx = self._enter(node, ctx, item)
                if item_ctx is None:
                    continue
                element = self._start(node, item)
                self._render_children(element, node, item_ctx)
                self._mark_identity(element, node, item, ctx)
            else:
                # Scalars, and records on a childless node, are written as leaf values.
                element = self._start(node, item if isinstance(item, dict) else record)
                self._copy_children(element, node)
                if item is not None:
                    self._setters.apply(element, item)
                self._mark_identity(element, node, item, ctx)
            outputs.append(element)
        return outputs

    def _bind(self, element: Element, node: StructuralNode, ctx: RenderContext) -> None:
        record = ctx.current_record
        prop = node.binding_property
        if prop is None:
            self._render_children(element, node, ctx)
            self._mark_identity(element, node, record, ctx)
            return

        value = record.get(prop) if isinstance(record, dict) else None
        if value is None:
            self._copy_children(element, node)
            return

        if not node.is_scope_boundary:
            self._copy_children(element, node)
            if isinstance(value, dict):
                logger.debug("Record value for %r at %s needs a scope node; left unset", prop, node.path)
            else:
                self._setters.apply(element, value)
            return

        nested = value
        linked = False
        if self._resolver.is_reference(value):
            nested = self._resolver.resolve(value, ctx.all_records)
            linked = True
            if nested is None:
                ctx.diagnostics.report(
                    "BIND005",
                    f"Reference {value!r} in property {prop!r} matches no record",
                    path=node.path,
                    severity=DiagnosticSeverity.INFORMATION,
                    rule="scope",
                )
                self._copy_children(element, node)
                return

        if not isinstance(nested, dict):
            ctx.diagnostics.report(
                "BIND003",
                f"Property {prop!r} opens a scope but holds {type(value).__name__}",
                path=node.path,
                suggestion=f"Provide a record for {prop!r} or remove {self._vocab.scope!r}",
                rule="scope",
            )
            self._copy_children(element, node)
            return

        nested_ctx = self._enter(node, ctx, nested, linked=linked)
        if nested_ctx is None:
            self._copy_children(element, node)
            return
        self._render_children(element, node, nested_ctx)
        self._mark_identity(element, node, nested, ctx)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _start(self, node: StructuralNode, record: Any) -> Element:
        """Shallow-copy the template element, strip the array marker, fill placeholders."""
        element = shallow_clone(node.element)
        if node.is_array_binding:
            element.set(self._vocab.binding, node.binding_property)
        for name, template in node.attribute_templates.items():
            element.set(name, substitute(template, record))
        return element

    def _enter(
        self,
        node: StructuralNode,
        ctx: RenderContext,
        record: Record,
        linked: bool = False,
    ) -> RenderContext | None:
        """Return the context for descending into ``record``, or ``None`` if guarded."""
        if linked and ctx.is_cycle(record):
            ctx.diagnostics.report(
                "BIND007",
                f"Record {record.get(ID_KEY)!r} is already being rendered",
                path=node.path,
                rule="cycle",
            )
            return None
        if ctx.depth >= self._config.max_depth:
            ctx.diagnostics.report(
                "BIND006",
                f"Nesting depth exceeds the limit of {self._config.max_depth}",
                path=node.path,
                suggestion="Raise max_depth or flatten the data",
                rule="depth",
            )
            return None
        return ctx.descend(record, linked=linked)

    def _mark_identity(self, element: Element, node: StructuralNode, record: Any, ctx: RenderContext) -> None:
        if not node.is_scope_boundary or not isinstance(record, dict):
            return
        identifier = record.get(ID_KEY)
        if identifier:
            base = urldefrag(ctx.source_base).url
            element.set(self._vocab.item_id, f"{base}#{identifier}")
