"""AST node definitions for stencil templates.

Every node produced by the parser is a frozen dataclass, and child
sequences are stored as tuples, so trees are immutable and hashable.
The node set is closed: ``Stmt`` covers the template-level nodes and
``Expr`` covers expressions.  Downstream code dispatches with
``isinstance`` checks.

All nodes carry a ``Span``.  Spans are excluded from equality, so two
trees compare equal when their structure and payloads match, whatever
source positions they were read from.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Union


# ---------------------------------------------------------------------------
# Source location
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Span:
    """A ``(line, column)`` range within the template source.

    Parameters
    ----------
    start_line:
        1-based line of the first character.
    start_col:
        0-based column of the first character.
    end_line:
        1-based line of the last character.
    end_col:
        0-based column *past* the last character.
    """

    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __repr__(self) -> str:
        return (
            f"Span({self.start_line}:{self.start_col}-"
            f"{self.end_line}:{self.end_col})"
        )

    @classmethod
    def start(cls) -> "Span":
        """Return the empty span at the very beginning of a source."""
        return cls(start_line=1, start_col=0, end_line=1, end_col=0)

    def expand_to(self, other: "Span") -> "Span":
        """Return a span starting where ``self`` starts and ending where ``other`` ends."""
        return Span(
            start_line=self.start_line,
            start_col=self.start_col,
            end_line=other.end_line,
            end_col=other.end_col,
        )

    def contains(self, other: "Span") -> bool:
        """Return True if ``other`` lies entirely within ``self``."""
        return (self.start_line, self.start_col) <= (
            other.start_line,
            other.start_col,
        ) and (other.end_line, other.end_col) <= (self.end_line, self.end_col)


# ---------------------------------------------------------------------------
# Operator kinds
# ---------------------------------------------------------------------------


class BinOpKind(Enum):
    """Binary operator kinds.

    ``SC_AND`` and ``SC_OR`` are the short-circuiting boolean operators;
    lazy evaluation of the right operand is up to the evaluator.
    """

    SC_OR = auto()
    SC_AND = auto()
    EQ = auto()
    NE = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()
    ADD = auto()
    SUB = auto()
    CONCAT = auto()
    MUL = auto()
    DIV = auto()
    FLOOR_DIV = auto()
    REM = auto()
    POW = auto()


class UnaryOpKind(Enum):
    """Unary operator kinds."""

    NOT = auto()
    NEG = auto()


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

ConstValue = Union[str, int, float, bool, None]


@dataclass(frozen=True, slots=True, eq=False)
class Const:
    """A literal value: string, number, boolean or none.

    Values compare by type as well as value, so ``1``, ``1.0`` and
    ``true`` are distinct constants.
    """

    value: ConstValue
    span: Span = field(compare=False)

    def _key(self) -> tuple[type, ConstValue]:
        return (type(self.value), self.value)

    def __eq__(self, other: object) -> bool:
        if other.__class__ is not self.__class__:
            return NotImplemented
        return self._key() == other._key()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash(self._key())


@dataclass(frozen=True, slots=True)
class Var:
    """A variable reference, e.g. ``user``."""

    id: str
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class GetAttr:
    """Attribute access, e.g. ``user.name``."""

    expr: "Expr"
    name: str
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class GetItem:
    """Subscript access, e.g. ``items[0]``."""

    expr: "Expr"
    subscript_expr: "Expr"
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class Call:
    """A call, e.g. ``range(10)`` or ``user.greet("hi")``."""

    expr: "Expr"
    args: tuple["Expr", ...]
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class Filter:
    """A filter application, e.g. ``name|upper`` or ``items|join(", ")``."""

    name: str
    expr: "Expr"
    args: tuple["Expr", ...]
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class Test:
    """A test application, e.g. ``n is odd`` or ``n is divisibleby(3)``."""

    __test__ = False  # keep pytest from collecting this class

    name: str
    expr: "Expr"
    args: tuple["Expr", ...]
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class BinOp:
    """A binary operator expression, e.g. ``a + b`` or ``x and y``."""

    op: BinOpKind
    left: "Expr"
    right: "Expr"
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class UnaryOp:
    """A unary operator expression, e.g. ``not flag`` or ``-x``."""

    op: UnaryOpKind
    expr: "Expr"
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class List:
    """A list literal, e.g. ``[1, 2, 3]``."""

    items: tuple["Expr", ...]
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class Map:
    """A map literal, e.g. ``{"a": 1}``.

    ``keys`` and ``values`` are parallel tuples.  Keys are arbitrary
    expressions and duplicates are not rejected.
    """

    keys: tuple["Expr", ...]
    values: tuple["Expr", ...]
    span: Span = field(compare=False)


Expr = Union[
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
]


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Template:
    """The root of a parsed template."""

    children: tuple["Stmt", ...]
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class EmitRaw:
    """A run of literal template text."""

    raw: str
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class EmitExpr:
    """An output expression, ``{{ expr }}``."""

    expr: Expr
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class ForLoop:
    """``{% for target in iter %}…{% endfor %}``."""

    target: str
    iter: Expr
    body: tuple["Stmt", ...]
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class IfCond:
    """``{% if expr %}…{% elif … %}…{% else %}…{% endif %}``.

    Parameters
    ----------
    expr:
        The condition.
    true_body:
        Statements rendered when the condition holds.
    false_body:
        Empty when there is neither ``else`` nor ``elif``; the ``else``
        body; or a one-element tuple holding the nested ``IfCond`` that
        an ``elif`` introduces.
    """

    expr: Expr
    true_body: tuple["Stmt", ...]
    false_body: tuple["Stmt", ...]
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class WithBlock:
    """``{% with a = x, b = y %}…{% endwith %}``."""

    assignments: tuple[tuple[str, Expr], ...]
    body: tuple["Stmt", ...]
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class Block:
    """A named, overridable template-inheritance block."""

    name: str
    body: tuple["Stmt", ...]
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class Extends:
    """``{% extends "base.html" %}``."""

    name: Expr
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class AutoEscape:
    """``{% autoescape enabled %}…{% endautoescape %}``."""

    enabled: Expr
    body: tuple["Stmt", ...]
    span: Span = field(compare=False)


Stmt = Union[
    Template,
    EmitRaw,
    EmitExpr,
    ForLoop,
    IfCond,
    WithBlock,
    Block,
    Extends,
    AutoEscape,
]

Node = Union[Stmt, Expr]
