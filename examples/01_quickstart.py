#!/usr/bin/env python3
"""Example: Quickstart — itembind

Minimal working example: render a batch of linked records through an
annotated template, inspect the diagnostics, and extract the records
back out of the rendered HTML.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install itembind
"""
from __future__ import annotations

import itembind

TEMPLATE_HTML = '''
<template>
  <article itemscope itemtype="https://schema.org/Person">
    <h1 itemprop="name"></h1>
    <ul>
      <li itemprop="assignee" itemscope data-scope="assignee">
        <span itemprop="title"></span>
      </li>
    </ul>
  </article>
  <section itemscope itemtype="https://schema.org/Task">
    <h2 itemprop="title"></h2>
    <p data-constraint="priority > 2">High priority</p>
    <p itemprop="tags[]"></p>
  </section>
</template>
'''

RECORDS = [
    {"@context": "https://schema.org", "@type": "Person", "@id": "johndoe", "name": "John Doe"},
    {
        "@context": "https://schema.org",
        "@type": "Task",
        "@id": "t1",
        "title": "Write docs",
        "priority": 3,
        "tags": ["docs", "release"],
        "assignee": "#johndoe",
    },
    {
        "@context": "https://schema.org",
        "@type": "Task",
        "@id": "t2",
        "title": "Fix bug",
        "priority": 1,
        "tags": "not-a-list",
        "assignee": "#johndoe",
    },
]


def main() -> None:
    print(f"itembind version: {itembind.__version__}")

    # Step 1: Build a template; roots are analyzed once, on first use
    template = itembind.Template.from_html(TEMPLATE_HTML, base_url="https://example.com/board")
    print(f"Template roots: {[root.declared_type for root in template.roots]}")

    # Step 2: Render the batch; per-record problems become diagnostics
    result = template.render_with_diagnostics(RECORDS)
    for element in result.output:
        print(itembind.to_html(element))
    print(f"\nDiagnostics: {len(result.diagnostics)}")
    for diag in result.diagnostics:
        print(f"  {diag}")

    # Step 3: Extract the records back out of the rendered page
    page = itembind.parse_html("".join(itembind.to_html(e) for e in result.output))
    for record in itembind.normalize_records(page):
        print(f"Extracted {record.get('@type')}: {record.get('name') or record.get('title')}")


if __name__ == "__main__":
    main()
