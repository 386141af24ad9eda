"""Generic traversal helpers for stencil AST trees."""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import fields

from stencil.ast.nodes import (
    AutoEscape,
    BinOp,
    Block,
    Call,
    Const,
    EmitExpr,
    EmitRaw,
    Extends,
    Filter,
    ForLoop,
    GetAttr,
    GetItem,
    IfCond,
    List,
    Map,
    Node,
    Template,
    Test,
    UnaryOp,
    Var,
    WithBlock,
)

NODE_TYPES = (
    Template,
    EmitRaw,
    EmitExpr,
    ForLoop,
    IfCond,
    WithBlock,
    Block,
    Extends,
    AutoEscape,
    Const,
    Var,
    GetAttr,
    GetItem,
    Call,
    Filter,
    Test,
    BinOp,
    UnaryOp,
    List,
    Map,
)


def is_node(value: object) -> bool:
    """Return True if ``value`` is a stencil AST node."""
    return isinstance(value, NODE_TYPES)


def _iter_nodes_in(value: object) -> Iterator[Node]:
    if is_node(value):
        yield value  # type: ignore[misc]
    elif isinstance(value, tuple):
        for item in value:
            yield from _iter_nodes_in(item)


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct children of ``node`` in source order.

    ``Map`` children are yielded key, value, key, value, … and
    ``WithBlock`` assignment values precede the body.
    """
    if isinstance(node, Map):
        for key, value in zip(node.keys, node.values):
            yield key
            yield value
        return
    for f in fields(node):
        if f.name == "span":
            continue
        yield from _iter_nodes_in(getattr(node, f.name))


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and every descendant in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_child_nodes(current))))
