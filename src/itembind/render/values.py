"""Per-tag leaf-value setters.

A leaf value lands on an element through the setter registered for the
element's tag: form controls get their state attribute, media elements
their ``src``, ``meta`` its ``content``, and anything unregistered gets
its text content replaced.

Third-party setters register with the ``@value_setters.register`` decorator,
or are declared as entry-points in the ``itembind.value_setters`` group::

    [project.entry-points."itembind.value_setters"]
    x-rating = "my_package.setters:RatingSetter"

and loaded with ``value_setters.load_entrypoints()``.

Example
-------
::

    from itembind.constraints import to_text
    from itembind.render.values import ValueSetter, value_setters

    @value_setters.register("x-rating")
    class RatingSetter(ValueSetter):
        def apply(self, element, value):
            element.set("stars", to_text(value))
"""
from __future__ import annotations

import importlib.metadata
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any
from xml.etree.ElementTree import Element

from itembind.constraints.evaluator import is_truthy, to_text
from itembind.dom.tree import set_text_content, tag_name, text_content

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP = "itembind.value_setters"


class SetterNotFoundError(KeyError):
    """Raised when no setter is registered for a tag."""

    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"No value setter is registered for tag {tag!r}.")


class SetterAlreadyRegisteredError(ValueError):
    """Raised when attempting to register a tag that already has a setter."""

    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(
            f"A value setter is already registered for tag {tag!r}. "
            "Deregister the existing setter first."
        )


class ValueSetter(ABC):
    """Writes a leaf value onto an element."""

    @abstractmethod
    def apply(self, element: Element, value: Any) -> None:
        """Write ``value`` onto ``element`` in place."""


class ValueSetterRegistry:
    """Tag-keyed registry of ``ValueSetter`` classes.

    Parameters
    ----------
    default:
        Setter class used for tags with no registration.
    """

    def __init__(self, default: type[ValueSetter]) -> None:
        self._default = default
        self._setters: dict[str, type[ValueSetter]] = {}
        self._instances: dict[type[ValueSetter], ValueSetter] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, *tags: str) -> Callable[[type[ValueSetter]], type[ValueSetter]]:
        """Return a class decorator registering the class for every tag in ``tags``.

        Raises
        ------
        SetterAlreadyRegisteredError
            If one of the tags already has a setter.
        TypeError
            If the decorated class does not subclass ``ValueSetter``.
        """

        def decorator(cls: type[ValueSetter]) -> type[ValueSetter]:
            for tag in tags:
                self.register_class(tag, cls)
            return cls

        return decorator

    def register_class(self, tag: str, cls: type[ValueSetter]) -> None:
        """Register ``cls`` for ``tag`` without the decorator syntax."""
        tag = tag.lower()
        if tag in self._setters:
            raise SetterAlreadyRegisteredError(tag)
        if not (isinstance(cls, type) and issubclass(cls, ValueSetter)):
            raise TypeError(
                f"Cannot register {cls!r} for {tag!r}: it must be a subclass of ValueSetter."
            )
        self._setters[tag] = cls
        logger.debug("Registered value setter %r -> %s", tag, cls.__qualname__)

    def deregister(self, tag: str) -> None:
        """Remove the setter registered for ``tag``.

        Raises
        ------
        SetterNotFoundError
            If ``tag`` has no setter.
        """
        tag = tag.lower()
        if tag not in self._setters:
            raise SetterNotFoundError(tag)
        del self._setters[tag]
        logger.debug("Deregistered value setter %r", tag)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, tag: str) -> type[ValueSetter]:
        """Return the class registered for ``tag``.

        Raises
        ------
        SetterNotFoundError
            If ``tag`` has no setter.
        """
        try:
            return self._setters[tag.lower()]
        except KeyError:
            raise SetterNotFoundError(tag) from None

    def setter_for(self, element: Element) -> ValueSetter:
        """Return the setter instance for ``element``, falling back to the default."""
        cls = self._setters.get(tag_name(element), self._default)
        instance = self._instances.get(cls)
        if instance is None:
            instance = self._instances[cls] = cls()
        return instance

    def apply(self, element: Element, value: Any) -> None:
        """Write ``value`` onto ``element`` with its tag's setter."""
        self.setter_for(element).apply(element, value)

    def list_tags(self) -> list[str]:
        return sorted(self._setters)

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and tag.lower() in self._setters

    def __len__(self) -> int:
        return len(self._setters)

    def __repr__(self) -> str:
        return f"ValueSetterRegistry(default={self._default.__name__}, tags={self.list_tags()})"

    # ------------------------------------------------------------------
    # Entry-point loading
    # ------------------------------------------------------------------

    def load_entrypoints(self, group: str = ENTRYPOINT_GROUP) -> None:
        """Register setters declared as entry-points; the entry-point name is the tag.

        Tags that already have a setter are skipped, so repeated calls are
        idempotent.
        """
        for ep in importlib.metadata.entry_points(group=group):
            if ep.name.lower() in self._setters:
                logger.debug("Value setter for %r already registered; skipping.", ep.name)
                continue
            try:
                cls = ep.load()
            except Exception:
                logger.exception("Failed to load entry-point %r from group %r; skipping.", ep.name, group)
                continue
            try:
                self.register_class(ep.name, cls)
            except (SetterAlreadyRegisteredError, TypeError):
                logger.warning("Entry-point %r loaded but could not be registered; skipping.", ep.name)


# ---------------------------------------------------------------------------
# Built-in setters
# ---------------------------------------------------------------------------


class TextContentSetter(ValueSetter):
    """Replaces the element's children with the value as text."""

    def apply(self, element: Element, value: Any) -> None:
        set_text_content(element, to_text(value))


class AttributeSetter(ValueSetter):
    """Writes the value into one attribute."""

    attribute = "value"

    def apply(self, element: Element, value: Any) -> None:
        element.set(self.attribute, to_text(value))


value_setters = ValueSetterRegistry(default=TextContentSetter)


@value_setters.register("input")
class InputSetter(ValueSetter):
    """Checkboxes and radios toggle ``checked``; other inputs take ``value``."""

    def apply(self, element: Element, value: Any) -> None:
        input_type = (element.get("type") or "text").lower()
        if input_type in ("checkbox", "radio"):
            _toggle(element, "checked", is_truthy(value))
        else:
            element.set("value", to_text(value))


@value_setters.register("textarea", "output")
class FormTextSetter(TextContentSetter):
    pass


@value_setters.register("select")
class SelectSetter(ValueSetter):
    """Marks the option whose value equals the bound value as selected."""

    def apply(self, element: Element, value: Any) -> None:
        wanted = to_text(value)
        for option in element.iter("option"):
            option_value = option.get("value", text_content(option).strip())
            _toggle(option, "selected", option_value == wanted)


@value_setters.register("option")
class OptionSetter(ValueSetter):
    def apply(self, element: Element, value: Any) -> None:
        _toggle(element, "selected", is_truthy(value))


@value_setters.register("meta")
class ContentSetter(AttributeSetter):
    attribute = "content"


@value_setters.register("img", "audio", "video", "source", "embed", "iframe")
class SourceSetter(AttributeSetter):
    attribute = "src"


@value_setters.register("link")
class HrefSetter(AttributeSetter):
    attribute = "href"


@value_setters.register("object")
class DataSetter(AttributeSetter):
    attribute = "data"


@value_setters.register("time")
class DateTimeSetter(AttributeSetter):
    attribute = "datetime"


@value_setters.register("data", "meter", "progress")
class ValueAttributeSetter(AttributeSetter):
    attribute = "value"


def _toggle(element: Element, attribute: str, on: bool) -> None:
    if on:
        element.set(attribute, attribute)
    else:
        element.attrib.pop(attribute, None)


def register_value_setter(*tags: str) -> Callable[[type[ValueSetter]], type[ValueSetter]]:
    """Decorator registering a setter class on the shared registry."""
    return value_setters.register(*tags)


def set_value(element: Element, value: Any) -> None:
    """Write ``value`` onto ``element`` with the shared registry."""
    value_setters.apply(element, value)
