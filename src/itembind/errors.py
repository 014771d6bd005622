"""Exception hierarchy for itembind.

Only configuration problems are raised out of a render call; every
per-record or per-node problem is reported as a ``Diagnostic`` instead
(see ``itembind.diagnostics``).
"""
from __future__ import annotations


class ItembindError(Exception):
    """Base class for all errors raised by itembind."""


class TemplateError(ItembindError):
    """Raised when a template cannot be used at all.

    Typical causes: the template source is not a ``<template>`` element,
    the template has no element content, or the configured root selector
    matches nothing.
    """


class ConfigError(ItembindError):
    """Raised when an engine configuration file is unreadable or invalid.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    key:
        The offending configuration key, if the problem is key-specific.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        prefix = f"{key}: " if key else ""
        super().__init__(f"{prefix}{message}")
        self.key = key
