"""stencil canonical formatter: AST → template source text.

The ``TemplateFormatter`` takes a ``Template`` AST and renders it back
as template source with:

- a single space inside every ``{{ }}`` and ``{% %}`` delimiter
- single spaces around binary operators and after commas
- double-quoted string literals
- the fewest parentheses that keep the tree unchanged
- ``elif`` chains written as ``{% elif %}`` rather than nested ``if`` tags

Raw template text is emitted verbatim; text that would itself read as a
tag is wrapped in a ``{% raw %}`` block, and consecutive text runs are
separated by an empty comment.  Comments and whitespace-control markers
are not preserved (the formatter works from the AST).

Parsing the formatter's output yields a tree equal to the one it was
given.

Usage
-----
::

    from stencil.formatter import TemplateFormatter
    from stencil.parser import parse

    template = parse(source)
    formatter = TemplateFormatter()
    canonical = formatter.format(template)
"""
from __future__ import annotations

from stencil.ast.nodes import (
    AutoEscape,
    BinOp,
    Block,
    Call,
    Const,
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
    Stmt,
    Template,
    Test,
    UnaryOp,
    Var,
    WithBlock,
)
from stencil.core.config import SyntaxConfig
from stencil.grammar.grammar import (
    BINOP_PRECEDENCE,
    BINOP_SYMBOLS,
    FILTER_PRECEDENCE,
    POSTFIX_PRECEDENCE,
    PRIMARY_PRECEDENCE,
    UNARY_PRECEDENCE,
    UNARY_SYMBOLS,
)

_STRING_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


def _precedence(expr: Expr) -> int:
    """Return how tightly ``expr`` binds on the formatter's precedence scale."""
    if isinstance(expr, BinOp):
        return BINOP_PRECEDENCE[expr.op]
    if isinstance(expr, UnaryOp):
        return UNARY_PRECEDENCE[expr.op]
    if isinstance(expr, (Filter, Test)):
        return FILTER_PRECEDENCE
    if isinstance(expr, (GetAttr, GetItem, Call)):
        return POSTFIX_PRECEDENCE
    return PRIMARY_PRECEDENCE


class TemplateFormatter:
    """Produces canonical template source from a ``Template`` AST.

    Parameters
    ----------
    config:
        Delimiters to write tags with; defaults to Jinja syntax.
    """

    def __init__(self, config: SyntaxConfig | None = None) -> None:
        self.config = config or SyntaxConfig()

    def format(self, template: Template) -> str:
        """Render ``template`` as canonical template source.

        Parameters
        ----------
        template:
            The template to format.

        Returns
        -------
        str
            Template source text.  Unlike source files the output gains
            no trailing newline; every character of raw text is kept as is.
        """
        return self._format_body(template.children)

    # ------------------------------------------------------------------
    # Statement formatting
    # ------------------------------------------------------------------

    def _tag(self, content: str) -> str:
        return f"{self.config.block_start} {content} {self.config.block_end}"

    def _format_body(self, body: tuple[Stmt, ...]) -> str:
        cfg = self.config
        parts: list[str] = []
        previous: Stmt | None = None
        for stmt in body:
            # Adjacent text runs would merge on re-parse; keep them apart
            # with an empty comment.
            if isinstance(stmt, EmitRaw) and isinstance(previous, EmitRaw):
                parts.append(cfg.comment_start + cfg.comment_end)
            parts.append(self._format_stmt(stmt))
            previous = stmt
        return "".join(parts)

    def _format_stmt(self, stmt: Stmt) -> str:
        if isinstance(stmt, EmitRaw):
            return self._format_raw(stmt.raw)
        if isinstance(stmt, EmitExpr):
            cfg = self.config
            return f"{cfg.variable_start} {self.format_expr(stmt.expr)} {cfg.variable_end}"
        if isinstance(stmt, ForLoop):
            return (
                self._tag(f"for {stmt.target} in {self.format_expr(stmt.iter)}")
                + self._format_body(stmt.body)
                + self._tag("endfor")
            )
        if isinstance(stmt, IfCond):
            return self._format_if(stmt)
        if isinstance(stmt, WithBlock):
            bindings = ", ".join(
                f"{target} = {self.format_expr(value)}"
                for target, value in stmt.assignments
            )
            opening = f"with {bindings}" if bindings else "with"
            return self._tag(opening) + self._format_body(stmt.body) + self._tag("endwith")
        if isinstance(stmt, Block):
            return (
                self._tag(f"block {stmt.name}")
                + self._format_body(stmt.body)
                + self._tag("endblock")
            )
        if isinstance(stmt, Extends):
            return self._tag(f"extends {self.format_expr(stmt.name)}")
        if isinstance(stmt, AutoEscape):
            return (
                self._tag(f"autoescape {self.format_expr(stmt.enabled)}")
                + self._format_body(stmt.body)
                + self._tag("endautoescape")
            )
        if isinstance(stmt, Template):
            return self._format_body(stmt.children)
        raise TypeError(f"Cannot format {type(stmt).__name__}")

    def _format_if(self, stmt: IfCond) -> str:
        parts = [self._tag(f"if {self.format_expr(stmt.expr)}"), self._format_body(stmt.true_body)]
        current = stmt
        # A lone IfCond in the false branch is exactly what ``elif`` parses to.
        while len(current.false_body) == 1 and isinstance(current.false_body[0], IfCond):
            current = current.false_body[0]
            parts.append(self._tag(f"elif {self.format_expr(current.expr)}"))
            parts.append(self._format_body(current.true_body))
        if current.false_body:
            parts.append(self._tag("else"))
            parts.append(self._format_body(current.false_body))
        parts.append(self._tag("endif"))
        return "".join(parts)

    def _format_raw(self, raw: str) -> str:
        """Emit text verbatim, inside a raw block if it could read as a tag.

        Text ending in the beginning of a start delimiter is wrapped too,
        since whatever tag follows would complete that delimiter.
        """
        cfg = self.config
        starts = (cfg.variable_start, cfg.block_start, cfg.comment_start)
        if any(start in raw for start in starts) or any(
            raw.endswith(start[:size]) for start in starts for size in range(1, len(start))
        ):
            return self._tag("raw") + raw + self._tag("endraw")
        return raw

    # ------------------------------------------------------------------
    # Expression formatting
    # ------------------------------------------------------------------

    def format_expr(self, expr: Expr) -> str:
        """Render an expression node to a compact string."""
        if isinstance(expr, Const):
            return self._format_const(expr.value)
        if isinstance(expr, Var):
            return expr.id
        if isinstance(expr, BinOp):
            level = BINOP_PRECEDENCE[expr.op]
            left = self._operand(expr.left, level)
            # Every level is left-associative: an equal-precedence right
            # operand must keep its parentheses.
            right = self._operand(expr.right, level + 1)
            return f"{left} {BINOP_SYMBOLS[expr.op]} {right}"
        if isinstance(expr, UnaryOp):
            operand = self._operand(expr.expr, UNARY_PRECEDENCE[expr.op])
            return f"{UNARY_SYMBOLS[expr.op]}{operand}"
        if isinstance(expr, GetAttr):
            return f"{self._operand(expr.expr, POSTFIX_PRECEDENCE)}.{expr.name}"
        if isinstance(expr, GetItem):
            subject = self._operand(expr.expr, POSTFIX_PRECEDENCE)
            return f"{subject}[{self.format_expr(expr.subscript_expr)}]"
        if isinstance(expr, Call):
            return f"{self._operand(expr.expr, POSTFIX_PRECEDENCE)}{self._format_args(expr.args)}"
        if isinstance(expr, Filter):
            subject = self._operand(expr.expr, FILTER_PRECEDENCE)
            args = self._format_args(expr.args) if expr.args else ""
            return f"{subject}|{expr.name}{args}"
        if isinstance(expr, Test):
            subject = self._operand(expr.expr, FILTER_PRECEDENCE)
            args = self._format_args(expr.args) if expr.args else ""
            return f"{subject} is {expr.name}{args}"
        if isinstance(expr, List):
            return "[" + ", ".join(self.format_expr(item) for item in expr.items) + "]"
        if isinstance(expr, Map):
            pairs = ", ".join(
                f"{self.format_expr(key)}: {self.format_expr(value)}"
                for key, value in zip(expr.keys, expr.values)
            )
            return "{" + pairs + "}"
        raise TypeError(f"Cannot format {type(expr).__name__}")

    def _operand(self, expr: Expr, min_precedence: int) -> str:
        text = self.format_expr(expr)
        if _precedence(expr) < min_precedence:
            return f"({text})"
        return text

    def _format_args(self, args: tuple[Expr, ...]) -> str:
        return "(" + ", ".join(self.format_expr(arg) for arg in args) + ")"

    @staticmethod
    def _format_const(value: object) -> str:
        if value is None:
            return "none"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return TemplateFormatter._format_float(value)
        return TemplateFormatter._format_string(str(value))

    @staticmethod
    def _format_float(value: float) -> str:
        """Render a float in the ``digits.digits`` form the lexer reads back."""
        text = repr(value)
        if "e" in text or "E" in text:
            text = f"{value:.17f}".rstrip("0")
            if text.endswith("."):
                text += "0"
        return text

    @staticmethod
    def _format_string(value: str) -> str:
        """Render a Python string as a double-quoted string literal."""
        out: list[str] = []
        for ch in value:
            if ch in _STRING_ESCAPES:
                out.append(_STRING_ESCAPES[ch])
            elif ord(ch) < 0x20:
                out.append(f"\\u{ord(ch):04x}")
            else:
                out.append(ch)
        return '"' + "".join(out) + '"'


def format_template(template: Template, config: SyntaxConfig | None = None) -> str:
    """Convenience function: format a ``Template`` to canonical source.

    Parameters
    ----------
    template:
        The template to format.
    config:
        Optional delimiters to write tags with.

    Returns
    -------
    str
        Canonical template source text.
    """
    return TemplateFormatter(config).format(template)


def format_expr(expr: Expr) -> str:
    """Convenience function: render a single expression."""
    return TemplateFormatter().format_expr(expr)
