"""stencil lexer: converts template source text into a lazy token stream.

The lexer is a single-pass scanner.  It alternates between two modes:

- *data mode*, where everything up to the next start delimiter is
  emitted as one ``TEMPLATE_DATA`` token, and
- *tag mode*, entered after ``{{`` or ``{%``, where identifiers,
  literals and operators are scanned until the matching end delimiter.

Comments (``{# … #}``) are dropped.  ``{% raw %}…{% endraw %}`` emits its
body verbatim as template data.  A ``-`` directly inside a delimiter
(``{{-``, ``-%}`` …) strips the whitespace on that side of the tag.

In expression-only mode the whole source is scanned in tag mode without
any delimiters.

Tokens are produced on demand by ``tokenize``; a lexing failure raises
``LexError`` at the point the offending token is pulled.
"""
from __future__ import annotations

import re
from collections.abc import Generator, Iterator
from typing import Final

from stencil.ast.nodes import Span
from stencil.core.config import SyntaxConfig
from stencil.core.errors import ErrorKind, TemplateSyntaxError
from stencil.grammar.tokens import OPERATORS, Token, TokenType, TokenValue

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_IDENT: Final[re.Pattern[str]] = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER: Final[re.Pattern[str]] = re.compile(r"[0-9]+(\.[0-9]+)?")
_WHITESPACE: Final[re.Pattern[str]] = re.compile(r"\s+")
_OPERATOR: Final[re.Pattern[str]] = re.compile(
    "|".join(re.escape(op) for op in sorted(OPERATORS, key=len, reverse=True))
)

_ESCAPE_MAP: Final[dict[str, str]] = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "'": "'",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

_DEFAULT_CONFIG: Final[SyntaxConfig] = SyntaxConfig()


class LexError(TemplateSyntaxError):
    """Raised when the lexer encounters invalid input.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    line:
        1-based line number where the error occurred.
    col:
        0-based column where the error occurred.
    kind:
        ``SYNTAX_ERROR``, or ``BAD_ESCAPE`` for invalid string escapes.
    """

    def __init__(
        self,
        message: str,
        line: int,
        col: int,
        kind: ErrorKind = ErrorKind.SYNTAX_ERROR,
    ) -> None:
        super().__init__(message, lineno=line, kind=kind)
        self.col = col


class Lexer:
    """Single-pass template lexer.

    Parameters
    ----------
    source:
        The complete template (or expression) source text.
    in_expr:
        Scan the whole source as a bare expression, without delimiters.
    config:
        Delimiters and whitespace handling; defaults to Jinja syntax.
    """

    __slots__ = (
        "_source",
        "_in_expr",
        "_config",
        "_pos",
        "_line",
        "_col",
        "_start_re",
        "_raw_re",
        "_endraw_re",
    )

    def __init__(
        self,
        source: str,
        in_expr: bool = False,
        config: SyntaxConfig | None = None,
    ) -> None:
        self._source: str = source
        self._in_expr: bool = in_expr
        self._config: SyntaxConfig = config or _DEFAULT_CONFIG
        self._pos: int = 0
        self._line: int = 1
        self._col: int = 0

        cfg = self._config
        starts = sorted(
            (cfg.variable_start, cfg.block_start, cfg.comment_start),
            key=len,
            reverse=True,
        )
        self._start_re = re.compile("|".join(re.escape(s) for s in starts))
        self._raw_re = re.compile(
            r"\s*raw\s*(-?)" + re.escape(cfg.block_end)
        )
        self._endraw_re = re.compile(
            re.escape(cfg.block_start)
            + r"(-?)\s*endraw\s*(-?)"
            + re.escape(cfg.block_end)
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def tokenize(self) -> Iterator[Token]:
        """Scan the source, yielding tokens one at a time.

        Raises
        ------
        LexError
            On any character that cannot begin a valid token, on
            unterminated strings, comments and raw blocks, and on invalid
            string escapes.
        """
        if self._in_expr:
            yield from self._scan_tag(None)
        else:
            yield from self._scan_template()

    # ------------------------------------------------------------------
    # Position tracking
    # ------------------------------------------------------------------

    def _advance(self, count: int) -> None:
        """Move ``count`` characters forward, updating line/col."""
        text = self._source[self._pos : self._pos + count]
        newlines = text.count("\n")
        if newlines:
            self._line += newlines
            self._col = len(text) - text.rfind("\n") - 1
        else:
            self._col += len(text)
        self._pos += len(text)

    def _token(self, token_type: TokenType, value: TokenValue, length: int) -> Token:
        """Consume ``length`` characters and return them as a token."""
        start_line, start_col = self._line, self._col
        self._advance(length)
        return Token(
            type=token_type,
            value=value,
            span=Span(start_line, start_col, self._line, self._col),
        )

    def _error(self, message: str, kind: ErrorKind = ErrorKind.SYNTAX_ERROR) -> LexError:
        return LexError(message, self._line, self._col, kind=kind)

    # ------------------------------------------------------------------
    # Data mode
    # ------------------------------------------------------------------

    def _scan_template(self) -> Iterator[Token]:
        cfg = self._config
        source = self._source
        lstrip_next = False

        while self._pos < len(source):
            match = self._start_re.search(source, self._pos)
            stop = match.start() if match is not None else len(source)
            rstrip = (
                match is not None
                and source.startswith("-", match.end())
            )
            data_token = self._data(stop, lstrip_next, rstrip)
            if data_token is not None:
                yield data_token
            lstrip_next = False
            if match is None:
                return

            delimiter = match.group()
            trim = len(delimiter) + (1 if rstrip else 0)
            if delimiter == cfg.comment_start:
                lstrip_next = self._skip_comment(trim)
            elif delimiter == cfg.variable_start:
                yield self._token(TokenType.VARIABLE_START, rstrip, trim)
                end = yield from self._scan_tag(TokenType.VARIABLE_END)
                lstrip_next = end is not None and bool(end.value)
            else:
                raw = self._raw_re.match(source, self._pos + trim)
                if raw is not None:
                    lstrip_next = yield from self._scan_raw(raw)
                    continue
                yield self._token(TokenType.BLOCK_START, rstrip, trim)
                end = yield from self._scan_tag(TokenType.BLOCK_END)
                lstrip_next = end is not None and bool(end.value)
                if end is not None and not lstrip_next:
                    self._trim_block_newline()

    def _data(self, stop: int, lstrip: bool, rstrip: bool) -> Token | None:
        """Consume text up to ``stop``; return it as a token if non-empty."""
        text = self._source[self._pos : stop]
        if lstrip:
            stripped = text.lstrip()
            self._advance(len(text) - len(stripped))
            text = stripped
        body = text.rstrip() if rstrip else text
        token = self._token(TokenType.TEMPLATE_DATA, body, len(body)) if body else None
        self._advance(len(text) - len(body))
        return token

    def _trim_block_newline(self) -> None:
        if not self._config.trim_blocks:
            return
        if self._source.startswith("\r\n", self._pos):
            self._advance(2)
        elif self._source.startswith("\n", self._pos):
            self._advance(1)

    def _skip_comment(self, opening: int) -> bool:
        """Skip a comment; return True if it requested trimming after it."""
        cfg = self._config
        content_start = self._pos + opening
        end = self._source.find(cfg.comment_end, content_start)
        if end < 0:
            raise self._error("unexpected end of comment")
        trim = end > content_start and self._source[end - 1] == "-"
        self._advance(end + len(cfg.comment_end) - self._pos)
        return trim

    def _scan_raw(self, raw: re.Match[str]) -> Generator[Token, None, bool]:
        """Emit the body of a raw block as template data.

        Returns True if the closing tag requested trimming after it.
        """
        endraw = self._endraw_re.search(self._source, raw.end())
        if endraw is None:
            raise self._error("unexpected end of raw block")
        self._advance(raw.end() - self._pos)
        token = self._data(endraw.start(), bool(raw.group(1)), bool(endraw.group(1)))
        if token is not None:
            yield token
        self._advance(endraw.end() - self._pos)
        if endraw.group(2):
            return True
        self._trim_block_newline()
        return False

    # ------------------------------------------------------------------
    # Tag mode
    # ------------------------------------------------------------------

    def _scan_tag(
        self, end_type: TokenType | None
    ) -> Generator[Token, None, Token | None]:
        """Scan tag contents up to and including the end delimiter.

        ``end_type`` is ``None`` in expression-only mode, where the tag
        runs to the end of the source.  Returns the end token, or None if
        the source ended first.
        """
        source = self._source
        if end_type is TokenType.VARIABLE_END:
            end_delim = self._config.variable_end
        elif end_type is TokenType.BLOCK_END:
            end_delim = self._config.block_end
        else:
            end_delim = None
        brace_depth = 0

        while True:
            ws = _WHITESPACE.match(source, self._pos)
            if ws is not None:
                self._advance(ws.end() - self._pos)
            if self._pos >= len(source):
                return None

            if end_delim is not None and end_type is not None:
                if source.startswith("-" + end_delim, self._pos):
                    token = self._token(end_type, True, len(end_delim) + 1)
                    yield token
                    return token
                if source.startswith(end_delim, self._pos) and not (
                    brace_depth > 0 and end_delim.startswith("}")
                ):
                    token = self._token(end_type, False, len(end_delim))
                    yield token
                    return token

            ch = source[self._pos]
            if ch in ('"', "'"):
                yield self._scan_string(ch)
                continue

            match = _IDENT.match(source, self._pos)
            if match is not None:
                yield self._token(TokenType.IDENT, match.group(), match.end() - self._pos)
                continue

            match = _NUMBER.match(source, self._pos)
            if match is not None:
                text = match.group()
                if match.group(1):
                    yield self._token(TokenType.FLOAT, float(text), len(text))
                else:
                    yield self._token(TokenType.INTEGER, int(text), len(text))
                continue

            match = _OPERATOR.match(source, self._pos)
            if match is not None:
                token_type = OPERATORS[match.group()]
                if token_type is TokenType.BRACE_OPEN:
                    brace_depth += 1
                elif token_type is TokenType.BRACE_CLOSE and brace_depth > 0:
                    brace_depth -= 1
                yield self._token(token_type, match.group(), len(match.group()))
                continue

            raise self._error(f"unexpected character {ch!r}")

    def _scan_string(self, quote: str) -> Token:
        """Scan a quoted string literal, resolving backslash escapes."""
        source = self._source
        idx = self._pos + 1
        buf: list[str] = []
        while idx < len(source):
            ch = source[idx]
            if ch == quote:
                return self._token(TokenType.STRING, "".join(buf), idx + 1 - self._pos)
            if ch != "\\":
                buf.append(ch)
                idx += 1
                continue
            esc = source[idx + 1 : idx + 2]
            if esc in _ESCAPE_MAP:
                buf.append(_ESCAPE_MAP[esc])
                idx += 2
            elif esc == "u":
                digits = source[idx + 2 : idx + 6]
                if len(digits) != 4 or not all(c in "0123456789abcdefABCDEF" for c in digits):
                    raise self._error(
                        f"invalid unicode escape {source[idx : idx + 6]!r}",
                        ErrorKind.BAD_ESCAPE,
                    )
                buf.append(chr(int(digits, 16)))
                idx += 6
            else:
                raise self._error(
                    f"invalid string escape {source[idx : idx + 2]!r}",
                    ErrorKind.BAD_ESCAPE,
                )
        raise self._error("unexpected end of string")


# ---------------------------------------------------------------------------
# Module-level convenience function
# ---------------------------------------------------------------------------


def tokenize(
    source: str,
    in_expr: bool = False,
    config: SyntaxConfig | None = None,
) -> Iterator[Token]:
    """Tokenize template source lazily.

    Parameters
    ----------
    source:
        Template source text, or a bare expression when ``in_expr`` is set.
    in_expr:
        Scan ``source`` as an expression without template delimiters.
    config:
        Optional delimiter and whitespace configuration.

    Returns
    -------
    Iterator[Token]
        Tokens in source order.  The iterator is exhausted at end of input.

    Raises
    ------
    LexError
        When a token cannot be scanned; raised as the token is pulled.

    Example
    -------
    ::

        from stencil.lexer import tokenize
        tokens = list(tokenize("Hello {{ name }}!"))
    """
    return Lexer(source, in_expr=in_expr, config=config).tokenize()
