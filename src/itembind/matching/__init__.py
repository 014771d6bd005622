"""Type-based root selection module."""
from __future__ import annotations

from itembind.matching.matcher import CONTEXT_KEY, TYPE_KEY, TypeMatcher, select_root

__all__ = ["TypeMatcher", "select_root", "TYPE_KEY", "CONTEXT_KEY"]
