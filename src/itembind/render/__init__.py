"""Rendering module.

Exports the ``Renderer``, its per-render ``RenderContext``, and the
leaf-value setter registry.
"""
from __future__ import annotations

from itembind.render.context import RenderContext
from itembind.render.renderer import Renderer, substitute
from itembind.render.values import (
    ENTRYPOINT_GROUP,
    SetterAlreadyRegisteredError,
    SetterNotFoundError,
    ValueSetter,
    ValueSetterRegistry,
    register_value_setter,
    set_value,
    value_setters,
)

__all__ = [
    "Renderer",
    "RenderContext",
    "substitute",
    "ValueSetter",
    "ValueSetterRegistry",
    "SetterAlreadyRegisteredError",
    "SetterNotFoundError",
    "ENTRYPOINT_GROUP",
    "register_value_setter",
    "set_value",
    "value_setters",
]
