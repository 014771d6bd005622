"""Unit tests for itembind.ast.serializer — dict, JSON, YAML and source output."""
from __future__ import annotations

import json

import pytest
import yaml

from itembind.ast.nodes import Identifier, Span
from itembind.ast.serializer import AstSerializer
from itembind.parser.parser import parse_expression


@pytest.fixture()
def serializer() -> AstSerializer:
    return AstSerializer()


# ---------------------------------------------------------------------------
# to_dict
# ---------------------------------------------------------------------------


class TestToDict:
    def test_identifier(self, serializer: AstSerializer) -> None:
        data = serializer.to_dict(parse_expression("status"))
        assert data == {"kind": "Identifier", "name": "status", "span": {"start": 0, "end": 6}}

    def test_record_id(self, serializer: AstSerializer) -> None:
        assert serializer.to_dict(parse_expression("@id"))["kind"] == "RecordId"

    def test_binary_has_op_name_and_operands(self, serializer: AstSerializer) -> None:
        data = serializer.to_dict(parse_expression("priority >= 2"))
        assert data["kind"] == "BinaryOpExpr"
        assert data["op"] == "GTE"
        assert data["left"]["name"] == "priority"  # type: ignore[index]
        assert data["right"]["value"] == 2.0  # type: ignore[index]

    def test_unary(self, serializer: AstSerializer) -> None:
        data = serializer.to_dict(parse_expression("!done"))
        assert data["kind"] == "UnaryOpExpr"
        assert data["op"] == "NOT"
        assert data["operand"]["kind"] == "Identifier"  # type: ignore[index]

    def test_unknown_node_raises(self, serializer: AstSerializer) -> None:
        with pytest.raises(TypeError):
            serializer.to_dict(Span(0, 0))  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# to_source
# ---------------------------------------------------------------------------


class TestToSource:
    @pytest.mark.parametrize("source, expected", [
        ("status", "status"),
        ("@id", "@id"),
        ("'open'", '"open"'),
        ("2", "2"),
        ("2.50", "2.5"),
        ("-3", "-3"),
        ("true", "true"),
        ("!done", "!done"),
        ("a==b", "a == b"),
        ('status == "open" && priority > 2', '(status == "open") && (priority > 2)'),
        ("!(a || b)", "!(a || b)"),
    ])
    def test_canonical_source(self, serializer: AstSerializer, source: str, expected: str) -> None:
        assert serializer.to_source(parse_expression(source)) == expected

    def test_string_escapes(self, serializer: AstSerializer) -> None:
        expr = parse_expression(r"'say \"hi\"'")
        assert serializer.to_source(expr) == r'"say \"hi\""'

    def test_source_round_trips_to_same_structure(self, serializer: AstSerializer) -> None:
        original = parse_expression("a || b && !c")
        reparsed = parse_expression(serializer.to_source(original))
        assert serializer.to_source(reparsed) == serializer.to_source(original)

    def test_hand_built_identifier(self, serializer: AstSerializer) -> None:
        assert serializer.to_source(Identifier(name="x", span=Span.unknown())) == "x"


# ---------------------------------------------------------------------------
# JSON / YAML
# ---------------------------------------------------------------------------


class TestTextFormats:
    def test_json_parses_back_to_dict(self, serializer: AstSerializer) -> None:
        expr = parse_expression("@id == assignee")
        assert json.loads(serializer.to_json(expr)) == serializer.to_dict(expr)

    def test_yaml_parses_back_to_dict(self, serializer: AstSerializer) -> None:
        expr = parse_expression("a != 'b'")
        assert yaml.safe_load(serializer.to_yaml(expr)) == serializer.to_dict(expr)

    def test_yaml_keeps_kind_first(self, serializer: AstSerializer) -> None:
        text = serializer.to_yaml(parse_expression("x"))
        assert text.startswith("kind: Identifier")
