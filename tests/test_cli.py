"""Tests for the itembind command-line interface."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from itembind.cli.main import cli

TEMPLATE_HTML = """
<html><body>
<template id="people">
  <article itemscope itemtype="https://schema.org/Person">
    <h1 itemprop="name"></h1>
    <ul><li itemprop="tags[]"></li></ul>
  </article>
</template>
</body></html>
"""

PEOPLE = [
    {"@context": "https://schema.org", "@type": "Person", "@id": "ann", "name": "Ann", "tags": ["a", "b"]},
    {"@context": "https://schema.org", "@type": "Person", "@id": "bob", "name": "Bob"},
]

PAGE_HTML = """
<div itemscope itemtype="https://schema.org/Person" id="ann">
  <span itemprop="name">Ann</span>
</div>
<form id="signup">
  <input name="name" value="Cleo">
  <input name="address.city" value="Oslo">
</form>
"""


def _make_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def template_file(tmp_path: Path) -> Path:
    path = tmp_path / "people.html"
    path.write_text(TEMPLATE_HTML, encoding="utf-8")
    return path


@pytest.fixture()
def data_file(tmp_path: Path) -> Path:
    path = tmp_path / "people.json"
    path.write_text(json.dumps(PEOPLE), encoding="utf-8")
    return path


@pytest.fixture()
def page_file(tmp_path: Path) -> Path:
    path = tmp_path / "page.html"
    path.write_text(PAGE_HTML, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# version / setters
# ---------------------------------------------------------------------------


class TestInfoCommands:
    def setup_method(self) -> None:
        self.runner = _make_runner()

    def test_version(self, expected_version: str) -> None:
        result = self.runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "itembind" in result.output
        assert expected_version in result.output

    def test_setters(self) -> None:
        result = self.runner.invoke(cli, ["setters"])
        assert result.exit_code == 0
        assert "SelectSetter" in result.output
        assert "Any other tag: text content" in result.output

    def test_verbose_flag(self) -> None:
        result = self.runner.invoke(cli, ["--verbose", "check", "a"])
        assert result.exit_code == 0

    def test_help_lists_commands(self) -> None:
        result = self.runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("render", "analyze", "extract", "check", "setters"):
            assert command in result.output


# ---------------------------------------------------------------------------
# render
# ---------------------------------------------------------------------------


class TestRenderCommand:
    def setup_method(self) -> None:
        self.runner = _make_runner()

    def test_render_to_file(self, template_file: Path, data_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "out.html"
        result = self.runner.invoke(cli, ["render", str(template_file), str(data_file), "-o", str(out)])
        assert result.exit_code == 0
        html = out.read_text(encoding="utf-8")
        assert '<h1 itemprop="name">Ann</h1>' in html
        assert '<li itemprop="tags">a</li><li itemprop="tags">b</li>' in html
        assert '<h1 itemprop="name">Bob</h1>' in html
        assert "Rendered" in result.output

    def test_render_to_stdout(self, template_file: Path, tmp_path: Path) -> None:
        data = tmp_path / "one.yaml"
        data.write_text(yaml.safe_dump(PEOPLE[1]), encoding="utf-8")
        result = self.runner.invoke(cli, ["render", str(template_file), str(data)])
        assert result.exit_code == 0
        assert '<h1 itemprop="name">Bob</h1>' in result.output

    def test_base_url_sets_itemid(self, template_file: Path, data_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "out.html"
        result = self.runner.invoke(cli, [
            "render", str(template_file), str(data_file),
            "--base-url", "https://example.com/people",
            "-o", str(out),
        ])
        assert result.exit_code == 0
        assert 'itemid="https://example.com/people#ann"' in out.read_text(encoding="utf-8")

    def test_query_string_data(self, tmp_path: Path) -> None:
        template = tmp_path / "t.html"
        template.write_text('<template><p itemprop="name"></p></template>', encoding="utf-8")
        data = tmp_path / "data.txt"
        data.write_text("name=Ann", encoding="utf-8")
        result = self.runner.invoke(cli, ["render", str(template), str(data)])
        assert result.exit_code == 0
        assert '<p itemprop="name">Ann</p>' in result.output

    def test_html_data(self, template_file: Path, page_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "out.html"
        result = self.runner.invoke(cli, [
            "render", str(template_file), str(page_file),
            "--source-url", "https://example.com/source",
            "-o", str(out),
        ])
        assert result.exit_code == 0
        html = out.read_text(encoding="utf-8")
        assert 'itemid="https://example.com/source#ann"' in html

    def test_diagnostics_are_reported(self, template_file: Path, tmp_path: Path) -> None:
        data = tmp_path / "bad.json"
        data.write_text(json.dumps({**PEOPLE[0], "tags": "oops"}), encoding="utf-8")
        result = self.runner.invoke(cli, ["render", str(template_file), str(data)])
        assert result.exit_code == 0
        assert "BIND002" in result.output
        assert "0 error(s)" in result.output

    def test_strict_fails_on_warnings(self, template_file: Path, tmp_path: Path) -> None:
        data = tmp_path / "bad.json"
        data.write_text(json.dumps({**PEOPLE[0], "tags": "oops"}), encoding="utf-8")
        result = self.runner.invoke(cli, ["render", str(template_file), str(data), "--strict"])
        assert result.exit_code == 1

    def test_config_file(self, template_file: Path, data_file: Path, tmp_path: Path) -> None:
        config = tmp_path / "itembind.yaml"
        config.write_text("base_url: https://example.com/cfg\n", encoding="utf-8")
        out = tmp_path / "out.html"
        result = self.runner.invoke(cli, [
            "render", str(template_file), str(data_file), "--config", str(config), "-o", str(out),
        ])
        assert result.exit_code == 0
        assert 'itemid="https://example.com/cfg#ann"' in out.read_text(encoding="utf-8")

    def test_invalid_config(self, template_file: Path, data_file: Path, tmp_path: Path) -> None:
        config = tmp_path / "itembind.yaml"
        config.write_text("colour: red\n", encoding="utf-8")
        result = self.runner.invoke(cli, ["render", str(template_file), str(data_file), "--config", str(config)])
        assert result.exit_code == 1
        assert "Config error" in result.output

    def test_missing_template_file(self, data_file: Path, tmp_path: Path) -> None:
        result = self.runner.invoke(cli, ["render", str(tmp_path / "nope.html"), str(data_file)])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_file_without_template(self, data_file: Path, tmp_path: Path) -> None:
        template = tmp_path / "plain.html"
        template.write_text("<p>no template here</p>", encoding="utf-8")
        result = self.runner.invoke(cli, ["render", str(template), str(data_file)])
        assert result.exit_code == 1
        assert "Template error" in result.output

    def test_invalid_json_data(self, template_file: Path, tmp_path: Path) -> None:
        data = tmp_path / "bad.json"
        data.write_text("{not json", encoding="utf-8")
        result = self.runner.invoke(cli, ["render", str(template_file), str(data)])
        assert result.exit_code == 1
        assert "Data error" in result.output


# ---------------------------------------------------------------------------
# analyze / extract
# ---------------------------------------------------------------------------


class TestAnalyzeCommand:
    def setup_method(self) -> None:
        self.runner = _make_runner()

    def test_json(self, template_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "structure.json"
        result = self.runner.invoke(cli, ["analyze", str(template_file), "-o", str(out)])
        assert result.exit_code == 0
        roots = json.loads(out.read_text(encoding="utf-8"))
        assert roots[0]["tag"] == "article"
        assert roots[0]["type"] == "https://schema.org/Person"
        li = roots[0]["children"][1]["children"][0]
        assert li["binding"] == "tags"
        assert li["array"] is True

    def test_yaml(self, template_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "structure.yaml"
        result = self.runner.invoke(cli, ["analyze", str(template_file), "--format", "yaml", "-o", str(out)])
        assert result.exit_code == 0
        assert yaml.safe_load(out.read_text(encoding="utf-8"))[0]["scope"] is True

    def test_unknown_template_id(self, template_file: Path) -> None:
        result = self.runner.invoke(cli, ["analyze", str(template_file), "--template-id", "nope"])
        assert result.exit_code == 1


class TestExtractCommand:
    def setup_method(self) -> None:
        self.runner = _make_runner()

    def test_microdata(self, page_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "records.json"
        result = self.runner.invoke(cli, ["extract", str(page_file), "-o", str(out)])
        assert result.exit_code == 0
        assert json.loads(out.read_text(encoding="utf-8")) == [
            {"@type": "Person", "@context": "https://schema.org", "@id": "ann", "name": "Ann"}
        ]

    def test_form(self, page_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "records.json"
        result = self.runner.invoke(cli, ["extract", str(page_file), "--form", "signup", "-o", str(out)])
        assert result.exit_code == 0
        assert json.loads(out.read_text(encoding="utf-8")) == {"name": "Cleo", "address": {"city": "Oslo"}}

    def test_missing_form(self, page_file: Path) -> None:
        result = self.runner.invoke(cli, ["extract", str(page_file), "--form", "nope"])
        assert result.exit_code == 1


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


class TestCheckCommand:
    def setup_method(self) -> None:
        self.runner = _make_runner()

    def test_canonical_form(self) -> None:
        result = self.runner.invoke(cli, ["check", "priority>2"])
        assert result.exit_code == 0
        assert "OK priority > 2" in result.output

    def test_evaluate_against_record(self) -> None:
        result = self.runner.invoke(cli, ["check", "priority > 2", "--record", '{"priority": 3}'])
        assert result.exit_code == 0
        assert "Result: true" in result.output

    def test_evaluate_false(self) -> None:
        result = self.runner.invoke(cli, ["check", "priority > 2", "--record", '{"priority": 1}'])
        assert "Result: false" in result.output

    def test_json_format(self) -> None:
        result = self.runner.invoke(cli, ["check", "!done", "--format", "json"])
        assert result.exit_code == 0
        assert "UnaryOpExpr" in result.output

    def test_parse_error(self) -> None:
        result = self.runner.invoke(cli, ["check", "a =="])
        assert result.exit_code == 1
        assert "Parse errors" in result.output

    def test_lex_error(self) -> None:
        result = self.runner.invoke(cli, ["check", "a = b"])
        assert result.exit_code == 1
        assert "Lex error" in result.output

    def test_invalid_record(self) -> None:
        result = self.runner.invoke(cli, ["check", "a", "--record", "[1]"])
        assert result.exit_code == 1

    def test_missing_expression(self) -> None:
        result = self.runner.invoke(cli, ["check"])
        assert result.exit_code == 2

    def test_grammar(self) -> None:
        result = self.runner.invoke(cli, ["check", "--grammar"])
        assert result.exit_code == 0
        assert "or_expr" in result.output
