"""Shared test fixtures for itembind.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

from typing import Any

import pytest

from itembind.template import Template

PERSON_TASK_TEMPLATE = """
<template>
  <article itemscope itemtype="https://schema.org/Person">
    <h1 itemprop="name"></h1>
    <ul>
      <li itemprop="assignee" itemscope data-scope="assignee"><span itemprop="title"></span></li>
    </ul>
  </article>
  <section itemscope itemtype="https://schema.org/Task">
    <h2 itemprop="title"></h2>
  </section>
</template>
"""


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "itembind"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def person_task_template() -> Template:
    """A template with a Person root listing linked tasks, and a Task root."""
    return Template.from_html(PERSON_TASK_TEMPLATE)


@pytest.fixture()
def person_task_batch() -> list[dict[str, Any]]:
    """John has two tasks; Jane has none."""
    return [
        {"@context": "https://schema.org", "@type": "Person", "@id": "johndoe", "name": "John Doe"},
        {"@context": "https://schema.org", "@type": "Person", "@id": "janedoe", "name": "Jane Doe"},
        {"@context": "https://schema.org", "@type": "Task", "@id": "t1", "title": "Write docs", "assignee": "#johndoe"},
        {"@context": "https://schema.org", "@type": "Task", "@id": "t2", "title": "Fix bug", "assignee": "#johndoe"},
    ]
