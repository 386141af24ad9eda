"""Unit tests for stencil.ast.serializer: AstSerializer dict, JSON and YAML forms."""
from __future__ import annotations

import json

import pytest
import yaml

from stencil.ast.nodes import (
    BinOp,
    BinOpKind,
    Const,
    Span,
    UnaryOp,
    UnaryOpKind,
    Var,
    WithBlock,
)
from stencil.ast.serializer import AstSerializer
from stencil.parser.parser import parse, parse_expr

_S = Span.start()


@pytest.fixture()
def serializer() -> AstSerializer:
    return AstSerializer()


# ---------------------------------------------------------------------------
# to_dict
# ---------------------------------------------------------------------------


class TestToDict:
    def test_const(self, serializer: AstSerializer) -> None:
        data = serializer.to_dict(Const(value=1, span=Span(1, 3, 1, 4)))
        assert data == {
            "kind": "Const",
            "value": 1,
            "span": {"start_line": 1, "start_col": 3, "end_line": 1, "end_col": 4},
        }

    def test_enum_fields_use_member_names(self, serializer: AstSerializer) -> None:
        node = BinOp(op=BinOpKind.FLOOR_DIV, left=Var(id="a", span=_S), right=Var(id="b", span=_S), span=_S)
        assert serializer.to_dict(node)["op"] == "FLOOR_DIV"

    def test_children_become_lists(self, serializer: AstSerializer) -> None:
        data = serializer.to_dict(parse("a{{ b }}"))
        children = data["children"]
        assert isinstance(children, list)
        assert [child["kind"] for child in children] == ["EmitRaw", "EmitExpr"]

    def test_with_assignments_are_pairs(self, serializer: AstSerializer) -> None:
        node = WithBlock(assignments=(("a", Const(value=2, span=_S)),), body=(), span=_S)
        data = AstSerializer(include_spans=False).to_dict(node)
        assert data == {
            "kind": "WithBlock",
            "assignments": [["a", {"kind": "Const", "value": 2}]],
            "body": [],
        }

    def test_without_spans(self) -> None:
        data = AstSerializer(include_spans=False).to_dict(parse_expr("-x"))
        assert data == {"kind": "UnaryOp", "op": "NEG", "expr": {"kind": "Var", "id": "x"}}


# ---------------------------------------------------------------------------
# from_dict
# ---------------------------------------------------------------------------


class TestFromDict:
    def test_unary(self, serializer: AstSerializer) -> None:
        node = serializer.from_dict({"kind": "UnaryOp", "op": "NOT", "expr": {"kind": "Var", "id": "x"}})
        assert node == UnaryOp(op=UnaryOpKind.NOT, expr=Var(id="x", span=_S), span=_S)

    def test_missing_span_defaults_to_start(self, serializer: AstSerializer) -> None:
        node = serializer.from_dict({"kind": "Var", "id": "x"})
        assert node.span == Span.start()

    def test_span_restored(self, serializer: AstSerializer) -> None:
        span = {"start_line": 2, "start_col": 1, "end_line": 2, "end_col": 4}
        node = serializer.from_dict({"kind": "Var", "id": "abc", "span": span})
        assert node.span == Span(2, 1, 2, 4)

    def test_const_none_value(self, serializer: AstSerializer) -> None:
        node = serializer.from_dict({"kind": "Const", "value": None})
        assert node == Const(value=None, span=_S)

    def test_unknown_kind_raises(self, serializer: AstSerializer) -> None:
        with pytest.raises(ValueError, match="Unknown AST node kind"):
            serializer.from_dict({"kind": "Macro"})

    def test_missing_kind_raises(self, serializer: AstSerializer) -> None:
        with pytest.raises(ValueError):
            serializer.from_dict({"id": "x"})


# ---------------------------------------------------------------------------
# JSON and YAML
# ---------------------------------------------------------------------------


class TestRoundTrip:
    def test_json_round_trip(self, serializer: AstSerializer, page_source: str) -> None:
        template = parse(page_source)
        assert serializer.from_json(serializer.to_json(template)) == template

    def test_yaml_round_trip(self, serializer: AstSerializer, page_source: str) -> None:
        template = parse(page_source)
        assert serializer.from_yaml(serializer.to_yaml(template)) == template

    def test_spans_survive_json(self, serializer: AstSerializer) -> None:
        template = parse("{% for x in xs %}\n{{ x }}\n{% endfor %}")
        restored = serializer.from_json(serializer.to_json(template))
        assert restored.span == template.span
        assert restored.children[0].span == template.children[0].span  # type: ignore[attr-defined]

    def test_json_is_valid_and_indented(self, serializer: AstSerializer) -> None:
        text = serializer.to_json(parse_expr("a"), indent=4)
        assert json.loads(text)["kind"] == "Var"
        assert '\n    "kind"' in text

    def test_json_keeps_unicode(self, serializer: AstSerializer) -> None:
        assert "héllo" in serializer.to_json(parse("héllo"))

    def test_yaml_is_plain_mapping(self, serializer: AstSerializer) -> None:
        data = yaml.safe_load(serializer.to_yaml(parse_expr("1 + 2.5")))
        assert data["kind"] == "BinOp"
        assert data["op"] == "ADD"
        assert data["right"]["value"] == 2.5

    def test_yaml_preserves_field_order(self, serializer: AstSerializer) -> None:
        text = serializer.to_yaml(parse_expr("x"))
        assert text.index("kind") < text.index("id") < text.index("span")

    def test_round_trip_without_spans(self, page_source: str) -> None:
        serializer = AstSerializer(include_spans=False)
        template = parse(page_source)
        restored = serializer.from_json(serializer.to_json(template))
        assert restored == template
        assert restored.span == Span.start()
