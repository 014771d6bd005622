"""Structural analysis of template trees.

``analyze`` walks a template element once and produces an immutable tree
of ``StructuralNode`` objects describing every binding point: the bound
property (with the array marker stripped), whether the node opens a
scope, its declared type, its scope filter and constraint, and every
attribute holding ``${name}`` placeholders.  Children are analyzed in
document order and stay positionally aligned with the template element's
children; the renderer relies on that alignment to build output by
clone-then-bind.

The analysis is a pure function of the input tree.  ``Template`` calls it
once per root and caches the result for the lifetime of the engine.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping
from xml.etree.ElementTree import Element

from itembind.config import Vocabulary
from itembind.dom.tree import tag_name
from itembind.errors import TemplateError

logger = logging.getLogger(__name__)

PLACEHOLDER_START = "${"


@dataclass(frozen=True, eq=False)
class StructuralNode:
    """Cached description of one template node's binding behaviour.

    Parameters
    ----------
    element:
        The template element described.  Never mutated; the renderer
        copies it.
    path:
        Human-readable location of the element, used in diagnostics.
    binding_property:
        Property the node binds to, array marker stripped.
    is_array_binding:
        True when the binding carried the array marker; the node is then
        the repeatable pattern for each element of the bound list.
    is_scope_boundary:
        True when the node opens a nested record context.
    declared_type:
        Qualified type declared on the node.
    scope_filter_property:
        Shorthand filter: the node repeats once per batch record whose
        named property references the enclosing record's ``@id``.
    constraint_expression:
        General boolean expression gating the node.
    attribute_templates:
        Attribute name to raw value, for every attribute containing a
        ``${name}`` placeholder.
    children:
        Analyzed children, aligned with the element's children.
    """

    element: Element
    path: str
    binding_property: str | None = None
    is_array_binding: bool = False
    is_scope_boundary: bool = False
    declared_type: str | None = None
    scope_filter_property: str | None = None
    constraint_expression: str | None = None
    attribute_templates: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    children: tuple["StructuralNode", ...] = ()

    @property
    def tag(self) -> str:
        return tag_name(self.element)

    @property
    def is_gated(self) -> bool:
        """Return True if a scope filter or constraint decides inclusion."""
        return self.scope_filter_property is not None or self.constraint_expression is not None

    def walk(self):
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


def analyze(element: Element, vocabulary: Vocabulary | None = None, path: str | None = None) -> StructuralNode:
    """Analyze ``element`` and its subtree into a ``StructuralNode`` tree."""
    vocab = vocabulary or Vocabulary()
    node_path = path if path is not None else (tag_name(element) or "#node")

    raw_binding = element.get(vocab.binding)
    binding: str | None = raw_binding or None
    is_array = False
    if binding and binding.endswith(vocab.array_suffix) and len(binding) > len(vocab.array_suffix):
        binding = binding[: -len(vocab.array_suffix)]
        is_array = True

    templates = {
        name: value
        for name, value in element.attrib.items()
        if PLACEHOLDER_START in value
    }

    children: list[StructuralNode] = []
    seen: dict[str, int] = {}
    for child in element:
        child_tag = tag_name(child) or "#node"
        seen[child_tag] = seen.get(child_tag, 0) + 1
        children.append(analyze(child, vocab, f"{node_path}/{child_tag}[{seen[child_tag]}]"))

    return StructuralNode(
        element=element,
        path=node_path,
        binding_property=binding,
        is_array_binding=is_array,
        is_scope_boundary=vocab.scope in element.attrib,
        declared_type=element.get(vocab.type) or None,
        scope_filter_property=element.get(vocab.scope_filter) or None,
        constraint_expression=element.get(vocab.constraint) or None,
        attribute_templates=MappingProxyType(templates),
        children=tuple(children),
    )


def select_root_elements(
    template: Element,
    selector: str | None = None,
    vocabulary: Vocabulary | None = None,
) -> list[Element]:
    """Return the candidate root elements of a template, in document order.

    With a ``selector`` (ElementTree path syntax, relative to the template)
    the matching elements are used.  Otherwise the direct children that
    declare a type are used, falling back to all direct children.

    Raises
    ------
    TemplateError
        If the template has no element content, the selector is invalid,
        or the selector matches nothing.
    """
    vocab = vocabulary or Vocabulary()
    if selector:
        try:
            roots = template.findall(selector)
        except (SyntaxError, KeyError, TypeError) as exc:
            raise TemplateError(f"invalid root selector {selector!r}: {exc}") from exc
        if not roots:
            raise TemplateError(f"root selector {selector!r} matched no element in the template")
        return roots

    children = [child for child in template if isinstance(child.tag, str)]
    if not children:
        raise TemplateError("template has no element content")
    typed = [child for child in children if child.get(vocab.type)]
    logger.debug(
        "Template has %d root candidate(s), %d typed",
        len(typed or children),
        len(typed),
    )
    return typed or children


def to_dict(node: StructuralNode) -> dict[str, Any]:
    """Export a structural tree as a JSON/YAML-compatible dict."""
    data: dict[str, Any] = {"path": node.path, "tag": node.tag}
    if node.binding_property is not None:
        data["binding"] = node.binding_property
    if node.is_array_binding:
        data["array"] = True
    if node.is_scope_boundary:
        data["scope"] = True
    if node.declared_type is not None:
        data["type"] = node.declared_type
    if node.scope_filter_property is not None:
        data["scope_filter"] = node.scope_filter_property
    if node.constraint_expression is not None:
        data["constraint"] = node.constraint_expression
    if node.attribute_templates:
        data["attributes"] = dict(node.attribute_templates)
    if node.children:
        data["children"] = [to_dict(child) for child in node.children]
    return data
