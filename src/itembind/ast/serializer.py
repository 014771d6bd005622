"""Serialization of constraint expression ASTs.

Converts parsed expressions to plain dict/list structures (for JSON and
YAML output in the CLI) and back to canonical expression text.

Usage
-----
::

    from itembind.parser import parse_expression
    from itembind.ast.serializer import AstSerializer

    expr = parse_expression('status == "open" && priority > 2')
    serializer = AstSerializer()
    serializer.to_source(expr)   # '(status == "open") && (priority > 2)'
    serializer.to_yaml(expr)
"""
from __future__ import annotations

import json

import yaml

from itembind.ast.nodes import (
    BinaryOpExpr,
    BoolLit,
    Expression,
    Identifier,
    NumberLit,
    RecordId,
    Span,
    StringLit,
    UnaryOpExpr,
)


class AstSerializer:
    """Converts constraint ASTs to dicts, JSON, YAML and source text.

    The dict representation uses a ``"kind"`` discriminator on every node.
    """

    # ------------------------------------------------------------------
    # AST → dict
    # ------------------------------------------------------------------

    def to_dict(self, expr: Expression) -> dict[str, object]:
        """Serialize an expression to a JSON-compatible dict."""
        if isinstance(expr, Identifier):
            return {"kind": "Identifier", "name": expr.name, "span": self._span_to_dict(expr.span)}
        if isinstance(expr, RecordId):
            return {"kind": "RecordId", "span": self._span_to_dict(expr.span)}
        if isinstance(expr, StringLit):
            return {"kind": "StringLit", "value": expr.value, "span": self._span_to_dict(expr.span)}
        if isinstance(expr, NumberLit):
            return {"kind": "NumberLit", "value": expr.value, "span": self._span_to_dict(expr.span)}
        if isinstance(expr, BoolLit):
            return {"kind": "BoolLit", "value": expr.value, "span": self._span_to_dict(expr.span)}
        if isinstance(expr, BinaryOpExpr):
            return {
                "kind": "BinaryOpExpr",
                "op": expr.op.name,
                "left": self.to_dict(expr.left),
                "right": self.to_dict(expr.right),
                "span": self._span_to_dict(expr.span),
            }
        if isinstance(expr, UnaryOpExpr):
            return {
                "kind": "UnaryOpExpr",
                "op": expr.op.name,
                "operand": self.to_dict(expr.operand),
                "span": self._span_to_dict(expr.span),
            }
        raise TypeError(f"Unknown expression type: {type(expr)}")

    def _span_to_dict(self, span: Span) -> dict[str, int]:
        return {"start": span.start, "end": span.end}

    # ------------------------------------------------------------------
    # AST → canonical source
    # ------------------------------------------------------------------

    def to_source(self, expr: Expression) -> str:
        """Render an expression as canonical, fully parenthesized text."""
        if isinstance(expr, Identifier):
            return expr.name
        if isinstance(expr, RecordId):
            return "@id"
        if isinstance(expr, StringLit):
            escaped = expr.value.replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        if isinstance(expr, NumberLit):
            value = expr.value
            return str(int(value)) if value.is_integer() else str(value)
        if isinstance(expr, BoolLit):
            return "true" if expr.value else "false"
        if isinstance(expr, BinaryOpExpr):
            return f"{self._operand_source(expr.left)} {expr.op.symbol} {self._operand_source(expr.right)}"
        if isinstance(expr, UnaryOpExpr):
            return f"!{self._operand_source(expr.operand)}"
        raise TypeError(f"Unknown expression type: {type(expr)}")

    def _operand_source(self, expr: Expression) -> str:
        text = self.to_source(expr)
        if isinstance(expr, BinaryOpExpr):
            return f"({text})"
        return text

    # ------------------------------------------------------------------
    # JSON / YAML helpers
    # ------------------------------------------------------------------

    def to_json(self, expr: Expression, indent: int = 2) -> str:
        """Serialize an expression to a JSON string."""
        return json.dumps(self.to_dict(expr), indent=indent, ensure_ascii=False)

    def to_yaml(self, expr: Expression) -> str:
        """Serialize an expression to a YAML string."""
        return yaml.dump(self.to_dict(expr), default_flow_style=False, allow_unicode=True, sort_keys=False)
