"""Structural analysis module.

Exports ``StructuralNode``, the ``analyze`` function, root selection and
dict export of analyzed trees.
"""
from __future__ import annotations

from itembind.analysis.structure import (
    StructuralNode,
    analyze,
    select_root_elements,
    to_dict,
)

__all__ = ["StructuralNode", "analyze", "select_root_elements", "to_dict"]
