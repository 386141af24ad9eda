"""One-token-lookahead adapter over the lazy lexer output."""
from __future__ import annotations

from collections.abc import Iterator

from stencil.ast.nodes import Span
from stencil.core.config import SyntaxConfig
from stencil.grammar.tokens import Token
from stencil.lexer.lexer import tokenize


class TokenStream:
    """Wraps ``tokenize`` with a single cached lookahead slot.

    The underlying lexer is only pulled when the lookahead is first
    needed; repeated ``current()`` calls reuse the cached token until
    ``next()`` consumes it.  Lexer errors propagate unchanged.

    Parameters
    ----------
    source:
        Template source, or a bare expression when ``in_expr`` is set.
    in_expr:
        Tokenize in expression-only mode.
    config:
        Optional lexer syntax configuration.
    """

    __slots__ = ("_iter", "_pending", "_peeked", "_last_span")

    def __init__(
        self,
        source: str,
        in_expr: bool = False,
        config: SyntaxConfig | None = None,
    ) -> None:
        self._iter: Iterator[Token] = tokenize(source, in_expr=in_expr, config=config)
        self._pending: Token | None = None
        self._peeked: bool = False
        self._last_span: Span = Span.start()

    def current(self) -> Token | None:
        """Return the lookahead token without consuming it, or None at end of input."""
        if not self._peeked:
            self._pending = next(self._iter, None)
            self._peeked = True
        return self._pending

    def next(self) -> Token | None:
        """Consume and return the lookahead token, or None at end of input."""
        token = self.current()
        self._pending = None
        self._peeked = False
        if token is not None:
            self._last_span = token.span
        return token

    def expand_span(self, span: Span) -> Span:
        """Extend ``span`` to the end of the most recently consumed token."""
        return span.expand_to(self._last_span)

    def current_span(self) -> Span:
        """Return the span of the most recently consumed token."""
        return self._last_span
