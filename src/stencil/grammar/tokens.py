"""Token definitions for stencil templates.

Defines the complete token vocabulary produced by the stencil lexer.
Every literal kind, operator, punctuation mark and template delimiter
is a member of the ``TokenType`` enum, and every scanned token is a
``Token`` dataclass carrying its type, value and source span.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Union

from stencil.ast.nodes import Span


class TokenType(Enum):
    """Exhaustive enumeration of all stencil token types."""

    # -----------------------------------------------------------------
    # Template structure
    # -----------------------------------------------------------------
    TEMPLATE_DATA = auto()
    VARIABLE_START = auto()
    VARIABLE_END = auto()
    BLOCK_START = auto()
    BLOCK_END = auto()

    # -----------------------------------------------------------------
    # Identifiers and literals
    # -----------------------------------------------------------------
    IDENT = auto()
    STRING = auto()
    INTEGER = auto()
    FLOAT = auto()

    # -----------------------------------------------------------------
    # Arithmetic and string operators
    # -----------------------------------------------------------------
    PLUS = auto()        # +
    MINUS = auto()       # -
    MUL = auto()         # *
    DIV = auto()         # /
    FLOOR_DIV = auto()   # //
    POW = auto()         # **
    MOD = auto()         # %
    TILDE = auto()       # ~

    # -----------------------------------------------------------------
    # Comparison operators
    # -----------------------------------------------------------------
    EQ = auto()          # ==
    NE = auto()          # !=
    GT = auto()          # >
    GTE = auto()         # >=
    LT = auto()          # <
    LTE = auto()         # <=

    # -----------------------------------------------------------------
    # Punctuation
    # -----------------------------------------------------------------
    PIPE = auto()
    DOT = auto()
    COMMA = auto()
    COLON = auto()
    ASSIGN = auto()
    BRACKET_OPEN = auto()
    BRACKET_CLOSE = auto()
    PAREN_OPEN = auto()
    PAREN_CLOSE = auto()
    BRACE_OPEN = auto()
    BRACE_CLOSE = auto()

    @property
    def description(self) -> str:
        """Human-readable name used in syntax error messages."""
        return _DESCRIPTIONS[self]


# Operator and punctuation text, longest first so the lexer can match
# greedily.
OPERATORS: dict[str, TokenType] = {
    "//": TokenType.FLOOR_DIV,
    "**": TokenType.POW,
    "==": TokenType.EQ,
    "!=": TokenType.NE,
    ">=": TokenType.GTE,
    "<=": TokenType.LTE,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.MUL,
    "/": TokenType.DIV,
    "%": TokenType.MOD,
    "~": TokenType.TILDE,
    ">": TokenType.GT,
    "<": TokenType.LT,
    "|": TokenType.PIPE,
    ".": TokenType.DOT,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    "=": TokenType.ASSIGN,
    "[": TokenType.BRACKET_OPEN,
    "]": TokenType.BRACKET_CLOSE,
    "(": TokenType.PAREN_OPEN,
    ")": TokenType.PAREN_CLOSE,
    "{": TokenType.BRACE_OPEN,
    "}": TokenType.BRACE_CLOSE,
}

_DESCRIPTIONS: dict[TokenType, str] = {
    TokenType.TEMPLATE_DATA: "template data",
    TokenType.VARIABLE_START: "start of variable block",
    TokenType.VARIABLE_END: "end of variable block",
    TokenType.BLOCK_START: "start of block",
    TokenType.BLOCK_END: "end of block",
    TokenType.IDENT: "identifier",
    TokenType.STRING: "string",
    TokenType.INTEGER: "integer",
    TokenType.FLOAT: "float",
    **{token_type: f"`{text}`" for text, token_type in OPERATORS.items()},
}

TokenValue = Union[str, int, float, bool]


@dataclass(frozen=True, slots=True)
class Token:
    """A single scanned token with its source span.

    Parameters
    ----------
    type:
        The ``TokenType`` variant for this token.
    value:
        Identifier or string text, the numeric value of a number, the
        raw text of template data, or for the four delimiter tokens
        whether whitespace trimming (``-``) was requested.
    span:
        Where the token appears in the source.
    """

    type: TokenType
    value: TokenValue
    span: Span

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.span!r})"

    def __str__(self) -> str:
        return self.type.description

    def is_ident(self, *names: str) -> bool:
        """Return True if this is an identifier, optionally one of ``names``."""
        if self.type is not TokenType.IDENT:
            return False
        return not names or self.value in names
