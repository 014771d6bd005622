"""Engine configuration.

``EngineConfig`` gathers every knob of a ``Template``: the base location
used for ``itemid`` values, the optional root selector, the recursion
limit, strict mode, and the annotation ``Vocabulary`` read from template
and data trees.

Configuration files are YAML::

    base_url: https://example.com/people
    selector: ./article
    max_depth: 16
    strict: true
    vocabulary:
      constraint: data-when

and are loaded with ``load_config(path)``.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from itembind.errors import ConfigError


@dataclass(frozen=True)
class Vocabulary:
    """Attribute names and markers that make up the template annotations.

    Parameters
    ----------
    binding:
        Attribute naming the property a node binds to.
    array_suffix:
        Suffix on the binding value marking an array-expansion point.
    scope:
        Boolean attribute opening a nested record context.
    type:
        Attribute declaring the item type (``context/Type``).
    item_id:
        Attribute written with ``<base>#<@id>`` on rendered scope nodes.
    identifier:
        Attribute read as ``@id`` when extracting records from a tree.
    scope_filter:
        Shorthand filter attribute: ``<prop> == enclosing @id``.
    constraint:
        Attribute holding a general constraint expression.
    """

    binding: str = "itemprop"
    array_suffix: str = "[]"
    scope: str = "itemscope"
    type: str = "itemtype"
    item_id: str = "itemid"
    identifier: str = "id"
    scope_filter: str = "data-scope"
    constraint: str = "data-constraint"


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for :class:`itembind.template.Template`.

    Parameters
    ----------
    base_url:
        Base location of the rendering document, used for ``itemid``
        when records did not come from another document.
    selector:
        ElementTree path selecting the root elements inside the template.
        When ``None``, direct children carrying a type are used, falling
        back to all direct children.
    max_depth:
        Maximum nesting depth of a single render before the remaining
        subtree is dropped with a ``BIND006`` diagnostic.
    strict:
        Promote WARNING diagnostics to ERROR.
    type_separator:
        Joins ``@context`` and ``@type`` into a qualified type.
    reference_marker:
        Leading character that turns a string into an identifier reference.
    vocabulary:
        Annotation attribute names.
    """

    base_url: str = ""
    selector: str | None = None
    max_depth: int = 32
    strict: bool = False
    type_separator: str = "/"
    reference_marker: str = "#"
    vocabulary: Vocabulary = field(default_factory=Vocabulary)

    def replace(self, **overrides: Any) -> "EngineConfig":
        """Return a copy with ``overrides`` applied; ``None`` values are ignored."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineConfig":
        """Build a config from a plain mapping, validating keys and types.

        Raises
        ------
        ConfigError
            On unknown keys or values of the wrong type.
        """
        if not isinstance(data, dict):
            raise ConfigError(f"expected a mapping, got {type(data).__name__}")

        known = {f.name: f for f in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                raise ConfigError("unknown configuration key", key=key)
            if key == "vocabulary":
                kwargs[key] = _vocabulary_from_dict(value)
                continue
            kwargs[key] = _check_type(key, value)

        if kwargs.get("max_depth", 1) < 1:
            raise ConfigError("must be a positive integer", key="max_depth")
        if kwargs.get("reference_marker", "#") == "":
            raise ConfigError("must not be empty", key="reference_marker")
        return cls(**kwargs)


_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "base_url": (str,),
    "selector": (str, type(None)),
    "max_depth": (int,),
    "strict": (bool,),
    "type_separator": (str,),
    "reference_marker": (str,),
}


def _check_type(key: str, value: Any) -> Any:
    expected = _FIELD_TYPES[key]
    # bool is an int subclass; reject it for numeric settings
    if isinstance(value, bool) and bool not in expected:
        raise ConfigError("expected an integer, got a boolean", key=key)
    if not isinstance(value, expected):
        names = " or ".join(t.__name__ for t in expected)
        raise ConfigError(f"expected {names}, got {type(value).__name__}", key=key)
    return value


def _vocabulary_from_dict(data: Any) -> Vocabulary:
    if not isinstance(data, dict):
        raise ConfigError("expected a mapping", key="vocabulary")
    known = {f.name for f in dataclasses.fields(Vocabulary)}
    for key, value in data.items():
        if key not in known:
            raise ConfigError("unknown vocabulary key", key=f"vocabulary.{key}")
        if not isinstance(value, str) or not value:
            raise ConfigError("expected a non-empty string", key=f"vocabulary.{key}")
    return Vocabulary(**data)


def load_config(path: str | Path) -> EngineConfig:
    """Load an ``EngineConfig`` from a YAML file.

    An empty file yields the default configuration.

    Raises
    ------
    ConfigError
        If the file cannot be read, is not valid YAML, or contains invalid
        settings.
    """
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read {config_path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {config_path}: {exc}") from exc
    if data is None:
        return EngineConfig()
    return EngineConfig.from_dict(data)
