"""AST serialization and deserialization for stencil.

Provides round-trip serialization of template AST trees to and from
JSON and YAML.  The serialized form is a plain dict/list structure that
maps naturally to both formats.

Usage
-----
::

    from stencil.ast.serializer import AstSerializer

    serializer = AstSerializer()
    data = serializer.to_dict(template)
    json_text = serializer.to_json(template)
    template2 = serializer.from_json(json_text)
    assert template == template2
"""
from __future__ import annotations

import json
from dataclasses import fields
from enum import Enum

import yaml

from stencil.ast.nodes import (
    BinOp,
    BinOpKind,
    Const,
    Node,
    Span,
    UnaryOpKind,
)
from stencil.ast.visitor import NODE_TYPES, is_node

_NODE_CLASSES: dict[str, type] = {cls.__name__: cls for cls in NODE_TYPES}


class AstSerializer:
    """Converts between stencil AST nodes and plain Python dicts.

    Every node is serialized with a ``"kind"`` discriminator naming its
    node type so that deserialization is unambiguous.

    Parameters
    ----------
    include_spans:
        Emit a ``"span"`` entry for every node (default True).  Nodes
        deserialized without one get an empty span at the start of the
        source.
    """

    def __init__(self, include_spans: bool = True) -> None:
        self.include_spans = include_spans

    # ------------------------------------------------------------------
    # Serialization (AST → dict)
    # ------------------------------------------------------------------

    def to_dict(self, node: Node) -> dict[str, object]:
        """Serialize any AST node to a JSON-compatible dict."""
        data: dict[str, object] = {"kind": type(node).__name__}
        for f in fields(node):
            if f.name == "span":
                continue
            data[f.name] = self._value_to_data(getattr(node, f.name))
        if self.include_spans:
            data["span"] = self._span_to_dict(node.span)
        return data

    def _value_to_data(self, value: object) -> object:
        if is_node(value):
            return self.to_dict(value)  # type: ignore[arg-type]
        if isinstance(value, Enum):
            return value.name
        if isinstance(value, tuple):
            return [self._value_to_data(item) for item in value]
        return value

    def _span_to_dict(self, span: Span) -> dict[str, int]:
        return {
            "start_line": span.start_line,
            "start_col": span.start_col,
            "end_line": span.end_line,
            "end_col": span.end_col,
        }

    # ------------------------------------------------------------------
    # Deserialization (dict → AST)
    # ------------------------------------------------------------------

    def from_dict(self, data: dict[str, object]) -> Node:
        """Deserialize an AST node from a plain dict.

        Raises
        ------
        ValueError
            If the dict has no known ``"kind"``.
        """
        kind = data.get("kind")
        cls = _NODE_CLASSES.get(str(kind))
        if cls is None:
            raise ValueError(f"Unknown AST node kind: {kind!r}")

        kwargs: dict[str, object] = {}
        for f in fields(cls):
            if f.name == "span":
                continue
            kwargs[f.name] = self._field_from_data(cls, f.name, data[f.name])
        span_data = data.get("span")
        kwargs["span"] = (
            self._span_from_dict(span_data) if isinstance(span_data, dict) else Span.start()
        )
        return cls(**kwargs)  # type: ignore[no-any-return]

    def _field_from_data(self, cls: type, name: str, value: object) -> object:
        if name == "op":
            enum_type = BinOpKind if cls is BinOp else UnaryOpKind
            return enum_type[str(value)]
        if name == "assignments":
            return tuple(
                (str(target), self.from_dict(expr))  # type: ignore[arg-type]
                for target, expr in value  # type: ignore[union-attr]
            )
        if cls is Const:
            return value
        if isinstance(value, dict):
            return self.from_dict(value)
        if isinstance(value, list):
            return tuple(self.from_dict(item) for item in value)
        return value

    def _span_from_dict(self, data: dict[str, object]) -> Span:
        return Span(
            start_line=int(data["start_line"]),  # type: ignore[arg-type]
            start_col=int(data["start_col"]),  # type: ignore[arg-type]
            end_line=int(data["end_line"]),  # type: ignore[arg-type]
            end_col=int(data["end_col"]),  # type: ignore[arg-type]
        )

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def to_json(self, node: Node, indent: int = 2) -> str:
        """Serialize an AST node to a JSON string."""
        return json.dumps(self.to_dict(node), indent=indent, ensure_ascii=False)

    def from_json(self, text: str) -> Node:
        """Deserialize an AST node from a JSON string."""
        data: dict[str, object] = json.loads(text)
        return self.from_dict(data)

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------

    def to_yaml(self, node: Node) -> str:
        """Serialize an AST node to a YAML string."""
        return yaml.dump(
            self.to_dict(node),
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )

    def from_yaml(self, text: str) -> Node:
        """Deserialize an AST node from a YAML string."""
        data: dict[str, object] = yaml.safe_load(text)
        return self.from_dict(data)
