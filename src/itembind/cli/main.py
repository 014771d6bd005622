"""CLI entry point for itembind.

Invoked as::

    itembind [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m itembind.cli.main

Commands
--------
render      Render data through an HTML template
analyze     Dump the structural tree of a template
extract     Extract records from an HTML page or form
check       Parse (and optionally evaluate) a constraint expression
setters     List the registered leaf-value setters
version     Show version information
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from itembind.config import EngineConfig
    from itembind.diagnostics import Diagnostic
    from itembind.template import Template

console = Console()
err_console = Console(stderr=True)

_DATA_FORMATS = ("auto", "json", "yaml", "html", "query")


def _read_source(path: str) -> str:
    """Read a text file (``-`` for stdin), exiting on error."""
    if path == "-":
        return sys.stdin.read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {exc}")
        sys.exit(1)


def _load_config_or_exit(path: str | None) -> "EngineConfig":
    from itembind.config import EngineConfig, load_config
    from itembind.errors import ConfigError

    if path is None:
        return EngineConfig()
    try:
        return load_config(path)
    except ConfigError as exc:
        err_console.print(f"[red]Config error[/red] in {path}: {exc}")
        sys.exit(1)


def _template_or_exit(
    path: str,
    config: "EngineConfig",
    template_id: str | None,
    selector: str | None,
    base_url: str | None,
) -> "Template":
    """Build a ``Template`` from an HTML file and analyze it, exiting on error."""
    from itembind.dom.html import parse_html
    from itembind.errors import TemplateError
    from itembind.template import Template

    document = parse_html(_read_source(path), base_url or "")
    try:
        template = Template(
            document,
            config,
            selector=selector,
            base_url=base_url,
            template_id=template_id,
        )
        template.roots  # noqa: B018
    except TemplateError as exc:
        err_console.print(f"[red]Template error[/red] in {path}: {exc}")
        sys.exit(1)
    return template


def _detect_format(path: str, text: str) -> str:
    suffix = Path(path).suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    if suffix in (".html", ".htm"):
        return "html"
    stripped = text.lstrip()
    if stripped.startswith(("{", "[")):
        return "json"
    if stripped.startswith("<"):
        return "html"
    if "=" in stripped and "\n" not in stripped.strip() and ": " not in stripped:
        return "query"
    return "yaml"


def _load_data_or_exit(path: str, data_format: str, source_url: str) -> Any:
    """Load render input in the requested format, exiting on error."""
    from itembind.dom.html import parse_html
    from itembind.normalize.forms import FormData

    text = _read_source(path)
    if data_format == "auto":
        data_format = _detect_format(path, text)
    try:
        if data_format == "json":
            return json.loads(text)
        if data_format == "yaml":
            return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        err_console.print(f"[red]Data error[/red] in {path}: {exc}")
        sys.exit(1)
    if data_format == "html":
        return parse_html(text, source_url)
    return FormData.from_query_string(text.strip())


def _dump(data: Any, output_format: str) -> str:
    if output_format == "yaml":
        return yaml.dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False)


def _emit(text: str, lang: str, output: str | None, what: str) -> None:
    """Write ``text`` to ``output`` or print it highlighted."""
    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]{what} written to[/green] {output}")
    else:
        console.print(Syntax(text, lang, word_wrap=True))


def _severity_color(severity_name: str) -> str:
    """Map a DiagnosticSeverity name to a Rich color string."""
    colors = {
        "ERROR": "red",
        "WARNING": "yellow",
        "INFORMATION": "blue",
        "HINT": "dim",
    }
    return colors.get(severity_name, "white")


def _print_diagnostics(diagnostics: "list[Diagnostic]", title: str) -> None:
    table = Table(title=title, show_lines=True)
    table.add_column("Severity", style="bold", min_width=10)
    table.add_column("Code", min_width=8)
    table.add_column("Location", min_width=10)
    table.add_column("Message")

    for d in diagnostics:
        color = _severity_color(d.severity.name)
        table.add_row(
            f"[{color}]{d.severity.name}[/{color}]",
            d.code,
            escape(d.path or "-"),
            escape(d.message) + (f"\n[dim]hint: {escape(d.suggestion)}[/dim]" if d.suggestion else ""),
        )
    err_console.print(table)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="itembind")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug output to stderr")
def cli(verbose: bool) -> None:
    """Declarative binding of records onto annotated HTML templates."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from itembind import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]itembind[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# setters command
# ---------------------------------------------------------------------------


@cli.command(name="setters")
@click.option("--load-entrypoints", is_flag=True, default=False, help="Also load setters from installed packages")
def setters_command(load_entrypoints: bool) -> None:
    """List the leaf-value setter registered for each tag."""
    from itembind.render.values import value_setters

    if load_entrypoints:
        value_setters.load_entrypoints()

    table = Table(title="Value setters")
    table.add_column("Tag", style="bold")
    table.add_column("Setter")
    for tag in value_setters.list_tags():
        table.add_row(tag, value_setters.get(tag).__name__)
    console.print(table)
    console.print("[dim]Any other tag: text content[/dim]")


# ---------------------------------------------------------------------------
# render command
# ---------------------------------------------------------------------------


@cli.command(name="render")
@click.argument("template_file", type=click.Path(exists=False))
@click.argument("data_file", type=click.Path(exists=False))
@click.option("--template-id", default=None, help="id of the <template> element to use")
@click.option("--selector", default=None, help="ElementTree path selecting the template roots")
@click.option("--base-url", default=None, help="Base location used for itemid values")
@click.option("--source-url", default="", help="Location HTML data was loaded from")
@click.option("--config", "config_file", default=None, help="YAML engine configuration file")
@click.option("--strict", is_flag=True, default=False, help="Treat warnings as errors")
@click.option(
    "--data-format",
    type=click.Choice(_DATA_FORMATS, case_sensitive=False),
    default="auto",
    help="Format of DATA_FILE (default: detect)",
)
@click.option("--output", "-o", default=None, help="Output file path (defaults to stdout)")
def render_command(
    template_file: str,
    data_file: str,
    template_id: str | None,
    selector: str | None,
    base_url: str | None,
    source_url: str,
    config_file: str | None,
    strict: bool,
    data_format: str,
    output: str | None,
) -> None:
    """Render data through an HTML template.

    TEMPLATE_FILE is an HTML file containing a <template> element.
    DATA_FILE holds the records (JSON, YAML, HTML microdata or a query
    string); use - to read from stdin.
    """
    from itembind.dom.html import to_html

    config = _load_config_or_exit(config_file)
    if strict:
        config = config.replace(strict=True)
    template = _template_or_exit(template_file, config, template_id, selector, base_url)
    data = _load_data_or_exit(data_file, data_format.lower(), source_url)

    result = template.render_with_diagnostics(data)
    if result.output is None:
        elements = []
    elif isinstance(result.output, list):
        elements = result.output
    else:
        elements = [result.output]
    html = "\n".join(to_html(element) for element in elements)

    if output:
        Path(output).write_text(html + "\n", encoding="utf-8")
        console.print(f"[green]Rendered[/green] {len(elements)} element(s) to {output}")
    else:
        console.print(html, markup=False, highlight=False, soft_wrap=True)

    if result.diagnostics:
        diagnostics = list(result.diagnostics)
        _print_diagnostics(diagnostics, f"Render: {template_file}")
        errors = [d for d in diagnostics if d.is_error]
        err_console.print(
            f"\n[bold]Summary:[/bold] {len(errors)} error(s), {len(diagnostics) - len(errors)} other finding(s)"
        )
        if errors:
            sys.exit(1)


# ---------------------------------------------------------------------------
# analyze command
# ---------------------------------------------------------------------------


@cli.command(name="analyze")
@click.argument("template_file", type=click.Path(exists=False))
@click.option("--template-id", default=None, help="id of the <template> element to use")
@click.option("--selector", default=None, help="ElementTree path selecting the template roots")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    help="Output format",
)
@click.option("--output", "-o", default=None, help="Output file path (defaults to stdout)")
def analyze_command(
    template_file: str,
    template_id: str | None,
    selector: str | None,
    output_format: str,
    output: str | None,
) -> None:
    """Dump the structural tree of each template root.

    TEMPLATE_FILE is an HTML file containing a <template> element.
    """
    from itembind.analysis.structure import to_dict
    from itembind.config import EngineConfig

    template = _template_or_exit(template_file, EngineConfig(), template_id, selector, None)
    roots = [to_dict(root) for root in template.roots]
    output_format = output_format.lower()
    _emit(_dump(roots, output_format), output_format, output, "Structure")


# ---------------------------------------------------------------------------
# extract command
# ---------------------------------------------------------------------------


@cli.command(name="extract")
@click.argument("file", type=click.Path(exists=False))
@click.option("--base-url", default="", help="Location the page was loaded from")
@click.option("--form", "form_id", default=None, help="Extract the <form> with this id instead of microdata")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    help="Output format",
)
@click.option("--output", "-o", default=None, help="Output file path (defaults to stdout)")
def extract_command(
    file: str,
    base_url: str,
    form_id: str | None,
    output_format: str,
    output: str | None,
) -> None:
    """Extract records from an HTML page.

    FILE is an HTML file carrying microdata annotations (or a form, with
    --form).
    """
    from itembind.dom.html import parse_html
    from itembind.normalize.normalizer import RecordNormalizer

    document = parse_html(_read_source(file), base_url)
    normalizer = RecordNormalizer()
    if form_id is not None:
        form = next((f for f in document.root.iter("form") if f.get("id") == form_id), None)
        if form is None:
            err_console.print(f"[red]Error:[/red] No <form id={form_id!r}> in {file}")
            sys.exit(1)
        records: Any = normalizer.normalize(form)
    else:
        records = normalizer.normalize(document)
    output_format = output_format.lower()
    _emit(_dump(records, output_format), output_format, output, "Records")


# ---------------------------------------------------------------------------
# check command
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.argument("expression", required=False)
@click.option("--record", "record_json", default=None, help="JSON record to evaluate the expression against")
@click.option("--grammar", "show_grammar", is_flag=True, default=False, help="Print the expression grammar")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["source", "json", "yaml"], case_sensitive=False),
    default="source",
    help="How to print the parsed expression",
)
def check_command(
    expression: str | None,
    record_json: str | None,
    show_grammar: bool,
    output_format: str,
) -> None:
    """Parse a constraint expression and print its canonical form.

    With --record, the expression is also evaluated against the record.
    """
    from itembind.ast import AstSerializer
    from itembind.constraints import ConstraintEvaluator
    from itembind.grammar import FULL_GRAMMAR
    from itembind.lexer import LexError
    from itembind.parser import ParseErrorCollection, parse_expression

    if show_grammar:
        console.print(FULL_GRAMMAR, markup=False, highlight=False)
        return
    if expression is None:
        err_console.print("[red]Error:[/red] Missing EXPRESSION (or pass --grammar)")
        sys.exit(2)

    try:
        expr = parse_expression(expression)
    except LexError as exc:
        err_console.print(f"[red]Lex error:[/red] {exc}")
        sys.exit(1)
    except ParseErrorCollection as exc:
        err_console.print("[red]Parse errors:[/red]")
        for error in exc.errors:
            err_console.print(f"  {error}", markup=False)
        sys.exit(1)

    serializer = AstSerializer()
    output_format = output_format.lower()
    if output_format == "json":
        console.print(Syntax(serializer.to_json(expr), "json", word_wrap=True))
    elif output_format == "yaml":
        console.print(Syntax(serializer.to_yaml(expr), "yaml", word_wrap=True))
    else:
        console.print(f"[green]OK[/green] {escape(serializer.to_source(expr))}", highlight=False)

    if record_json is not None:
        try:
            record = json.loads(record_json)
        except json.JSONDecodeError as exc:
            err_console.print(f"[red]Invalid --record JSON:[/red] {exc}")
            sys.exit(1)
        if not isinstance(record, dict):
            err_console.print("[red]Invalid --record JSON:[/red] expected an object")
            sys.exit(1)
        result = ConstraintEvaluator().evaluate(expression, record)
        verdict = "[green]true[/green]" if result.passed else "[red]false[/red]"
        console.print(f"Result: {verdict}")


if __name__ == "__main__":
    cli()
