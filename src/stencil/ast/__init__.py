"""stencil AST module.

Exports all AST node types, tree traversal helpers, and the serializer
for converting AST trees to and from JSON/YAML.
"""
from __future__ import annotations

from stencil.ast.nodes import (
    AutoEscape,
    BinOp,
    BinOpKind,
    Block,
    Call,
    Const,
    ConstValue,
    EmitExpr,
    EmitRaw,
    Expr,
    Extends,
    Filter,
    ForLoop,
    GetAttr,
    GetItem,
    IfCond,
    List,
    Map,
    Node,
    Span,
    Stmt,
    Template,
    Test,
    UnaryOp,
    UnaryOpKind,
    Var,
    WithBlock,
)
from stencil.ast.serializer import AstSerializer
from stencil.ast.visitor import NODE_TYPES, is_node, iter_child_nodes, walk

__all__ = [
    # Source location
    "Span",
    # Statement types
    "Stmt",
    "Template",
    "EmitRaw",
    "EmitExpr",
    "ForLoop",
    "IfCond",
    "WithBlock",
    "Block",
    "Extends",
    "AutoEscape",
    # Expression types
    "Expr",
    "ConstValue",
    "Const",
    "Var",
    "GetAttr",
    "GetItem",
    "Call",
    "Filter",
    "Test",
    "BinOp",
    "UnaryOp",
    "List",
    "Map",
    "Node",
    # Enums
    "BinOpKind",
    "UnaryOpKind",
    # Traversal
    "NODE_TYPES",
    "is_node",
    "iter_child_nodes",
    "walk",
    # Serializer
    "AstSerializer",
]
