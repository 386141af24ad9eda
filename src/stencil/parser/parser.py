"""stencil recursive-descent parser.

Pulls tokens from a ``TokenStream`` and produces a ``Template`` AST (or a
single expression in expression-only mode).

Parsing is fail-fast: the first problem raises ``TemplateSyntaxError``
and no partial tree is returned.  The module-level ``parse`` and
``parse_expr`` functions are the only places errors are enriched; they
attach the template name and the line of the last consumed token when
the error does not carry a location yet.

Expression parsing is a precedence ladder, loosest binding first:

    or > and > not > comparison > + - > ~ > * / // % > ** >
    filters and tests (| is) > unary - > postfix (. [] ()) on a primary

Every binary level folds left-associatively, ``**`` included, and
comparisons nest as ordinary binary operators (``a < b < c`` is
``(a < b) < c``).
"""
from __future__ import annotations

import logging
from collections.abc import Callable

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
    Span,
    Stmt,
    Template,
    Test,
    UnaryOp,
    UnaryOpKind,
    Var,
    WithBlock,
)
from stencil.core.config import SyntaxConfig
from stencil.core.errors import TemplateError, TemplateSyntaxError
from stencil.grammar.grammar import (
    ADD_OPERATORS,
    AND_OPERATORS,
    COMPARE_OPERATORS,
    CONCAT_OPERATORS,
    LITERAL_KEYWORDS,
    MUL_OPERATORS,
    OR_OPERATORS,
    POW_OPERATORS,
    RESERVED_NAMES,
    STATEMENT_KEYWORDS,
    OperatorTable,
)
from stencil.grammar.tokens import Token, TokenType
from stencil.parser.stream import TokenStream

logger = logging.getLogger(__name__)

EndCheck = Callable[[Token], bool]


def _unexpected(token: Token | None, expectation: str) -> TemplateSyntaxError:
    if token is None:
        return TemplateSyntaxError(f"unexpected end of input, expected {expectation}")
    return TemplateSyntaxError(f"unexpected {token}, expected {expectation}")


def _ends_with(*keywords: str) -> EndCheck:
    return lambda token: token.is_ident(*keywords)


class Parser:
    """Recursive descent parser over a lazily tokenized template.

    Parameters
    ----------
    source:
        Template source text, or a bare expression when ``in_expr`` is set.
    filename:
        Template name used for error locations.
    in_expr:
        Tokenize ``source`` as a bare expression without delimiters.
    config:
        Optional lexer syntax configuration.
    """

    def __init__(
        self,
        source: str,
        filename: str = "<string>",
        in_expr: bool = False,
        config: SyntaxConfig | None = None,
    ) -> None:
        self.filename = filename
        self._stream = TokenStream(source, in_expr=in_expr, config=config)

    # ------------------------------------------------------------------
    # Navigation helpers
    # ------------------------------------------------------------------

    def _check(self, token_type: TokenType) -> bool:
        """Return True if the lookahead token has the given type."""
        token = self._stream.current()
        return token is not None and token.type is token_type

    def _expect(self, token_type: TokenType, expectation: str) -> Token:
        """Consume the next token, failing unless it has ``token_type``."""
        token = self._stream.next()
        if token is None or token.type is not token_type:
            raise _unexpected(token, expectation)
        return token

    def _expect_keyword(self, keyword: str) -> Token:
        """Consume the next token, failing unless it is the identifier ``keyword``."""
        token = self._stream.next()
        if token is None or not token.is_ident(keyword):
            raise _unexpected(token, f"`{keyword}`")
        return token

    def _start_span(self) -> Span:
        """Return the span of the lookahead token, where a production begins."""
        token = self._stream.current()
        return token.span if token is not None else self._stream.current_span()

    def locate_error(self, exc: TemplateError) -> None:
        """Attach this template's name and the current line to ``exc`` if missing."""
        if exc.lineno is None:
            exc.set_location(self.filename, self._stream.current_span().start_line)
        elif exc.filename is None:
            exc.filename = self.filename

    # ------------------------------------------------------------------
    # Top-level parse
    # ------------------------------------------------------------------

    def parse(self) -> Template:
        """Parse the whole source into a ``Template``.

        Raises
        ------
        TemplateSyntaxError
            On the first lexing or parsing error.
        """
        children = self._subparse(lambda token: False)
        return Template(children=children, span=self._stream.expand_span(Span.start()))

    def parse_standalone_expr(self) -> Expr:
        """Parse a bare expression that must span the entire source."""
        expr = self.parse_expr()
        trailing = self._stream.current()
        if trailing is not None:
            raise _unexpected(trailing, "end of expression")
        return expr

    # ------------------------------------------------------------------
    # Statement lists
    # ------------------------------------------------------------------

    def _subparse(self, end_check: EndCheck) -> tuple[Stmt, ...]:
        """Parse raw text, output expressions and statements.

        Stops at end of input, or right after the ``{%`` of a tag whose
        keyword satisfies ``end_check``; that keyword is left unconsumed
        for the caller.
        """
        body: list[Stmt] = []
        while True:
            token = self._stream.next()
            if token is None:
                break
            if token.type is TokenType.TEMPLATE_DATA:
                body.append(EmitRaw(raw=str(token.value), span=token.span))
            elif token.type is TokenType.VARIABLE_START:
                expr = self.parse_expr()
                self._expect(TokenType.VARIABLE_END, "end of variable block")
                body.append(EmitExpr(expr=expr, span=self._stream.expand_span(token.span)))
            elif token.type is TokenType.BLOCK_START:
                keyword = self._stream.current()
                if keyword is None:
                    raise _unexpected(None, "keyword")
                if end_check(keyword):
                    break
                body.append(self._parse_stmt(token.span))
            else:
                raise TemplateSyntaxError(f"unexpected {token}")
        return tuple(body)

    def _parse_stmt(self, start: Span) -> Stmt:
        """Dispatch on the keyword following ``{%``."""
        token = self._stream.next()
        if token is None:
            raise _unexpected(None, "block keyword")
        if token.is_ident("for"):
            return self._parse_for_stmt(start)
        if token.is_ident("if"):
            return self._parse_if_cond(start)
        if token.is_ident("with"):
            return self._parse_with_block(start)
        if token.is_ident("block"):
            return self._parse_block(start)
        if token.is_ident("extends"):
            return self._parse_extends(start)
        if token.is_ident("autoescape"):
            return self._parse_auto_escape(start)
        raise TemplateSyntaxError("unknown block")

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_assign_target(self) -> str:
        token = self._expect(TokenType.IDENT, "identifier")
        target = str(token.value)
        if target in RESERVED_NAMES:
            raise TemplateSyntaxError(
                f"cannot assign to reserved variable name {target}"
            )
        return target

    def _parse_for_stmt(self, start: Span) -> ForLoop:
        """Parse: ``for target in expr %} body {% endfor``."""
        target = self._parse_assign_target()
        self._expect_keyword("in")
        iter_expr = self.parse_expr()
        self._expect(TokenType.BLOCK_END, "end of block")
        body = self._subparse(_ends_with(*STATEMENT_KEYWORDS["for"]))
        self._expect_keyword("endfor")
        self._expect(TokenType.BLOCK_END, "end of block")
        return ForLoop(
            target=target,
            iter=iter_expr,
            body=body,
            span=self._stream.expand_span(start),
        )

    def _parse_if_cond(self, start: Span) -> IfCond:
        """Parse an ``if`` (or ``elif``) condition through its ``endif``.

        An ``elif`` is parsed by recursing into this method without a new
        ``{%``; the resulting ``IfCond`` becomes the sole statement of the
        false branch.
        """
        expr = self.parse_expr()
        self._expect(TokenType.BLOCK_END, "end of block")
        true_body = self._subparse(_ends_with(*STATEMENT_KEYWORDS["if"]))

        token = self._stream.next()
        if token is None:
            raise _unexpected(None, "`endif`, `elif` or `else`")
        false_body: tuple[Stmt, ...]
        if token.is_ident("else"):
            self._expect(TokenType.BLOCK_END, "end of block")
            false_body = self._subparse(_ends_with("endif"))
            self._expect_keyword("endif")
            self._expect(TokenType.BLOCK_END, "end of block")
        elif token.is_ident("elif"):
            false_body = (self._parse_if_cond(token.span),)
        else:
            self._expect(TokenType.BLOCK_END, "end of block")
            false_body = ()

        return IfCond(
            expr=expr,
            true_body=true_body,
            false_body=false_body,
            span=self._stream.expand_span(start),
        )

    def _parse_with_block(self, start: Span) -> WithBlock:
        """Parse: ``with [target = expr {, target = expr}] %} body {% endwith``."""
        assignments: list[tuple[str, Expr]] = []
        while not self._check(TokenType.BLOCK_END):
            if assignments:
                self._expect(TokenType.COMMA, "`,`")
            target = self._parse_assign_target()
            self._expect(TokenType.ASSIGN, "assignment operator")
            assignments.append((target, self.parse_expr()))
        self._expect(TokenType.BLOCK_END, "end of block")
        body = self._subparse(_ends_with(*STATEMENT_KEYWORDS["with"]))
        self._expect_keyword("endwith")
        self._expect(TokenType.BLOCK_END, "end of block")
        return WithBlock(
            assignments=tuple(assignments),
            body=body,
            span=self._stream.expand_span(start),
        )

    def _parse_block(self, start: Span) -> Block:
        """Parse: ``block name %} body {% endblock [name]``."""
        name = str(self._expect(TokenType.IDENT, "identifier").value)
        self._expect(TokenType.BLOCK_END, "end of block")
        body = self._subparse(_ends_with(*STATEMENT_KEYWORDS["block"]))
        self._expect_keyword("endblock")

        trailing = self._stream.current()
        if trailing is not None and trailing.type is TokenType.IDENT:
            if trailing.value != name:
                raise TemplateSyntaxError(
                    f"mismatching name on block. Got `{trailing.value}`, expected `{name}`"
                )
            self._stream.next()
        self._expect(TokenType.BLOCK_END, "end of block")
        return Block(name=name, body=body, span=self._stream.expand_span(start))

    def _parse_extends(self, start: Span) -> Extends:
        """Parse: ``extends expr``."""
        name = self.parse_expr()
        self._expect(TokenType.BLOCK_END, "end of block")
        return Extends(name=name, span=self._stream.expand_span(start))

    def _parse_auto_escape(self, start: Span) -> AutoEscape:
        """Parse: ``autoescape expr %} body {% endautoescape``."""
        enabled = self.parse_expr()
        self._expect(TokenType.BLOCK_END, "end of block")
        body = self._subparse(_ends_with(*STATEMENT_KEYWORDS["autoescape"]))
        self._expect_keyword("endautoescape")
        self._expect(TokenType.BLOCK_END, "end of block")
        return AutoEscape(enabled=enabled, body=body, span=self._stream.expand_span(start))

    # ------------------------------------------------------------------
    # Expression parsing (precedence climbing)
    # ------------------------------------------------------------------

    def parse_expr(self) -> Expr:
        """Entry point for expression parsing (lowest precedence)."""
        return self._parse_or()

    def _fold_binary(self, operators: OperatorTable, parse_operand: Callable[[], Expr]) -> Expr:
        """Parse ``operand {op operand}`` folding to the left."""
        span = self._start_span()
        left = parse_operand()
        while True:
            token = self._stream.current()
            if token is None:
                break
            key = token.value if token.type is TokenType.IDENT else token.type
            op = operators.get(key)  # type: ignore[arg-type]
            if op is None:
                break
            self._stream.next()
            right = parse_operand()
            left = BinOp(op=op, left=left, right=right, span=self._stream.expand_span(span))
        return left

    def _parse_or(self) -> Expr:
        return self._fold_binary(OR_OPERATORS, self._parse_and)

    def _parse_and(self) -> Expr:
        return self._fold_binary(AND_OPERATORS, self._parse_not)

    def _parse_not(self) -> Expr:
        token = self._stream.current()
        if token is None or not token.is_ident("not"):
            return self._parse_compare()
        self._stream.next()
        operand = self._parse_not()
        return UnaryOp(op=UnaryOpKind.NOT, expr=operand, span=self._stream.expand_span(token.span))

    def _parse_compare(self) -> Expr:
        return self._fold_binary(COMPARE_OPERATORS, self._parse_add)

    def _parse_add(self) -> Expr:
        return self._fold_binary(ADD_OPERATORS, self._parse_concat)

    def _parse_concat(self) -> Expr:
        return self._fold_binary(CONCAT_OPERATORS, self._parse_mul)

    def _parse_mul(self) -> Expr:
        return self._fold_binary(MUL_OPERATORS, self._parse_pow)

    def _parse_pow(self) -> Expr:
        return self._fold_binary(POW_OPERATORS, self._parse_unary)

    def _parse_unary(self) -> Expr:
        """Parse a negation/postfix chain, then any filters and tests on it."""
        span = self._start_span()
        expr = self._parse_neg()
        return self._parse_filter_expr(expr, span)

    def _parse_neg(self) -> Expr:
        token = self._stream.current()
        if token is None or token.type is not TokenType.MINUS:
            return self._parse_postfix()
        self._stream.next()
        operand = self._parse_neg()
        return UnaryOp(op=UnaryOpKind.NEG, expr=operand, span=self._stream.expand_span(token.span))

    def _parse_postfix(self) -> Expr:
        """Parse a primary followed by any ``.name``, ``[expr]`` and ``(args)``."""
        span = self._start_span()
        expr = self._parse_primary()
        while True:
            token = self._stream.current()
            if token is None:
                break
            if token.type is TokenType.DOT:
                self._stream.next()
                name = self._expect(TokenType.IDENT, "identifier")
                expr = GetAttr(
                    expr=expr,
                    name=str(name.value),
                    span=self._stream.expand_span(span),
                )
            elif token.type is TokenType.BRACKET_OPEN:
                self._stream.next()
                subscript = self.parse_expr()
                self._expect(TokenType.BRACKET_CLOSE, "`]`")
                expr = GetItem(
                    expr=expr,
                    subscript_expr=subscript,
                    span=self._stream.expand_span(span),
                )
            elif token.type is TokenType.PAREN_OPEN:
                args = self._parse_args()
                expr = Call(expr=expr, args=args, span=self._stream.expand_span(span))
            else:
                break
        return expr

    def _parse_filter_expr(self, expr: Expr, span: Span) -> Expr:
        """Apply ``|name[(args)]`` filters and ``is name[(args)]`` tests left to right."""
        while True:
            token = self._stream.current()
            if token is None:
                break
            if token.type is TokenType.PIPE:
                node_type: type[Filter] | type[Test] = Filter
            elif token.is_ident("is"):
                node_type = Test
            else:
                break
            self._stream.next()
            name = str(self._expect(TokenType.IDENT, "identifier").value)
            args = self._parse_args() if self._check(TokenType.PAREN_OPEN) else ()
            expr = node_type(name=name, expr=expr, args=args, span=self._stream.expand_span(span))
        return expr

    def _parse_args(self) -> tuple[Expr, ...]:
        """Parse ``( [expr {, expr}] )``."""
        args: list[Expr] = []
        self._expect(TokenType.PAREN_OPEN, "`(`")
        while not self._check(TokenType.PAREN_CLOSE):
            if args:
                self._expect(TokenType.COMMA, "`,`")
            args.append(self.parse_expr())
        self._expect(TokenType.PAREN_CLOSE, "`)`")
        return tuple(args)

    def _parse_primary(self) -> Expr:
        """Parse a literal, variable, parenthesized expression, list or map."""
        token = self._stream.next()
        if token is None:
            raise _unexpected(None, "expression")
        span = token.span

        if token.type is TokenType.IDENT:
            name = str(token.value)
            if name in LITERAL_KEYWORDS:
                return Const(value=LITERAL_KEYWORDS[name], span=span)
            return Var(id=name, span=span)
        if token.type in (TokenType.STRING, TokenType.INTEGER, TokenType.FLOAT):
            return Const(value=token.value, span=span)

        if token.type is TokenType.PAREN_OPEN:
            expr = self.parse_expr()
            self._expect(TokenType.PAREN_CLOSE, "`)`")
            return expr

        if token.type is TokenType.BRACKET_OPEN:
            items: list[Expr] = []
            while not self._check(TokenType.BRACKET_CLOSE):
                if items:
                    self._expect(TokenType.COMMA, "`,`")
                items.append(self.parse_expr())
            self._expect(TokenType.BRACKET_CLOSE, "`]`")
            return List(items=tuple(items), span=self._stream.expand_span(span))

        if token.type is TokenType.BRACE_OPEN:
            keys: list[Expr] = []
            values: list[Expr] = []
            while not self._check(TokenType.BRACE_CLOSE):
                if keys:
                    self._expect(TokenType.COMMA, "`,`")
                keys.append(self.parse_expr())
                self._expect(TokenType.COLON, "`:`")
                values.append(self.parse_expr())
            self._expect(TokenType.BRACE_CLOSE, "`}`")
            return Map(keys=tuple(keys), values=tuple(values), span=self._stream.expand_span(span))

        raise _unexpected(token, "expression")


# ---------------------------------------------------------------------------
# Module-level convenience functions
# ---------------------------------------------------------------------------


def parse(
    source: str,
    filename: str = "<string>",
    config: SyntaxConfig | None = None,
) -> Template:
    """Parse template source and return the root ``Template`` node.

    Parameters
    ----------
    source:
        Complete template source text.
    filename:
        Template name reported in error locations.
    config:
        Optional lexer syntax configuration.

    Returns
    -------
    Template
        The parsed template.

    Raises
    ------
    TemplateSyntaxError
        If the source cannot be tokenized or parsed.  The error always
        carries a filename and line number.

    Example
    -------
    ::

        from stencil.parser import parse
        template = parse("{% for user in users %}{{ user.name }}{% endfor %}")
    """
    parser = Parser(source, filename, config=config)
    logger.debug("parsing template %r (%d chars)", filename, len(source))
    try:
        template = parser.parse()
    except TemplateError as exc:
        parser.locate_error(exc)
        logger.debug("failed to parse %r: %s", filename, exc)
        raise
    logger.debug("parsed template %r into %d top-level nodes", filename, len(template.children))
    return template


def parse_expr(source: str) -> Expr:
    """Parse a bare expression such as ``user.name|upper``.

    Raises
    ------
    TemplateSyntaxError
        If the source is not exactly one valid expression.
    """
    parser = Parser(source, "<expression>", in_expr=True)
    try:
        return parser.parse_standalone_expr()
    except TemplateError as exc:
        parser.locate_error(exc)
        raise
