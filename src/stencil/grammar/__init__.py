"""stencil grammar module.

Exports token definitions, operator tables and formal grammar constants.
"""
from __future__ import annotations

from stencil.grammar.grammar import (
    ADD_OPERATORS,
    AND_OPERATORS,
    BINARY_PRECEDENCE,
    BINOP_PRECEDENCE,
    BINOP_SYMBOLS,
    COMPARE_OPERATORS,
    CONCAT_OPERATORS,
    FULL_GRAMMAR,
    GRAMMAR_EXPRESSION,
    GRAMMAR_STATEMENTS,
    GRAMMAR_TEMPLATE,
    LITERAL_KEYWORDS,
    MUL_OPERATORS,
    FILTER_PRECEDENCE,
    NEG_PRECEDENCE,
    NOT_PRECEDENCE,
    OR_OPERATORS,
    POSTFIX_PRECEDENCE,
    PRIMARY_PRECEDENCE,
    POW_OPERATORS,
    RESERVED_NAMES,
    STATEMENT_KEYWORDS,
    UNARY_PRECEDENCE,
    UNARY_SYMBOLS,
)
from stencil.grammar.tokens import OPERATORS, Token, TokenType

__all__ = [
    # Token types
    "TokenType",
    "Token",
    "OPERATORS",
    # Grammar constants
    "FULL_GRAMMAR",
    "GRAMMAR_TEMPLATE",
    "GRAMMAR_STATEMENTS",
    "GRAMMAR_EXPRESSION",
    # Operator tables
    "OR_OPERATORS",
    "AND_OPERATORS",
    "COMPARE_OPERATORS",
    "ADD_OPERATORS",
    "CONCAT_OPERATORS",
    "MUL_OPERATORS",
    "POW_OPERATORS",
    "BINARY_PRECEDENCE",
    "BINOP_PRECEDENCE",
    "UNARY_PRECEDENCE",
    "NOT_PRECEDENCE",
    "FILTER_PRECEDENCE",
    "NEG_PRECEDENCE",
    "POSTFIX_PRECEDENCE",
    "PRIMARY_PRECEDENCE",
    "BINOP_SYMBOLS",
    "UNARY_SYMBOLS",
    # Names
    "LITERAL_KEYWORDS",
    "RESERVED_NAMES",
    "STATEMENT_KEYWORDS",
]
