"""Formal grammar rules for stencil templates.

This module documents the template grammar as EBNF-style string
constants and holds the tables the hand-written recursive-descent
parser (see ``stencil.parser``) and the formatter are driven by: the
binary operator precedence ladder, the statement keywords and their
terminators, and the reserved names.

Grammar notation used here:
    ``::=``     production rule
    ``|``       alternation
    ``( )``     grouping
    ``[ ]``     optional (zero or one)
    ``{ }``     zero or more repetitions
    ``DATA``    terminal: a run of literal template text
    ``STRING``  terminal: single- or double-quoted string literal
    ``INTEGER`` terminal: integer literal
    ``FLOAT``   terminal: float literal
    ``IDENT``   terminal: identifier (letter/underscore followed by word chars)
"""
from __future__ import annotations

from stencil.ast.nodes import BinOpKind, UnaryOpKind
from stencil.grammar.tokens import TokenType

# ---------------------------------------------------------------------------
# Template structure
# ---------------------------------------------------------------------------

GRAMMAR_TEMPLATE = """
template ::= body EOF

body ::= { DATA | emit | statement }

emit ::= '{{' expression '}}'

statement ::= '{%' ( for_stmt | if_stmt | with_stmt | block_stmt
                   | extends_stmt | autoescape_stmt ) '%}'
"""

# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------

GRAMMAR_STATEMENTS = """
for_stmt        ::= 'for' target 'in' expression '%}' body '{%' 'endfor'

if_stmt         ::= 'if' if_rest
if_rest         ::= expression '%}' body '{%'
                    ( 'endif'
                    | 'else' '%}' body '{%' 'endif'
                    | 'elif' if_rest )

with_stmt       ::= 'with' [ binding { ',' binding } ] '%}' body '{%' 'endwith'
binding         ::= target '=' expression

block_stmt      ::= 'block' IDENT '%}' body '{%' 'endblock' [ IDENT ]

extends_stmt    ::= 'extends' expression

autoescape_stmt ::= 'autoescape' expression '%}' body '{%' 'endautoescape'

target          ::= IDENT   (* not one of the reserved names *)
"""

# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

GRAMMAR_EXPRESSION = """
expression ::= or_expr

or_expr      ::= and_expr { 'or' and_expr }
and_expr     ::= not_expr { 'and' not_expr }
not_expr     ::= 'not' not_expr | compare_expr
compare_expr ::= add_expr { ( '==' | '!=' | '<' | '<=' | '>' | '>=' ) add_expr }
add_expr     ::= concat_expr { ( '+' | '-' ) concat_expr }
concat_expr  ::= mul_expr { '~' mul_expr }
mul_expr     ::= pow_expr { ( '*' | '/' | '//' | '%' ) pow_expr }
pow_expr     ::= unary_expr { '**' unary_expr }
unary_expr   ::= neg_expr { filter | test }
neg_expr     ::= '-' neg_expr | primary { postfix }

postfix ::= '.' IDENT | '[' expression ']' | args
filter  ::= '|' IDENT [ args ]
test    ::= 'is' IDENT [ args ]
args    ::= '(' [ expression { ',' expression } ] ')'

primary ::= IDENT | STRING | INTEGER | FLOAT
          | '(' expression ')'
          | '[' [ expression { ',' expression } ] ']'
          | '{' [ pair { ',' pair } ] '}'
pair    ::= expression ':' expression
"""

# ---------------------------------------------------------------------------
# Aggregated grammar
# ---------------------------------------------------------------------------

FULL_GRAMMAR: str = "\n".join([
    GRAMMAR_TEMPLATE,
    GRAMMAR_STATEMENTS,
    GRAMMAR_EXPRESSION,
])

# ---------------------------------------------------------------------------
# Operator tables
#
# Keys are token types for symbolic operators and identifier text for
# word operators.  Every binary level folds left-associatively,
# including ``**``.
# ---------------------------------------------------------------------------

OperatorTable = dict[TokenType | str, BinOpKind]

OR_OPERATORS: OperatorTable = {"or": BinOpKind.SC_OR}
AND_OPERATORS: OperatorTable = {"and": BinOpKind.SC_AND}
COMPARE_OPERATORS: OperatorTable = {
    TokenType.EQ: BinOpKind.EQ,
    TokenType.NE: BinOpKind.NE,
    TokenType.LT: BinOpKind.LT,
    TokenType.LTE: BinOpKind.LTE,
    TokenType.GT: BinOpKind.GT,
    TokenType.GTE: BinOpKind.GTE,
}
ADD_OPERATORS: OperatorTable = {
    TokenType.PLUS: BinOpKind.ADD,
    TokenType.MINUS: BinOpKind.SUB,
}
CONCAT_OPERATORS: OperatorTable = {TokenType.TILDE: BinOpKind.CONCAT}
MUL_OPERATORS: OperatorTable = {
    TokenType.MUL: BinOpKind.MUL,
    TokenType.DIV: BinOpKind.DIV,
    TokenType.FLOOR_DIV: BinOpKind.FLOOR_DIV,
    TokenType.MOD: BinOpKind.REM,
}
POW_OPERATORS: OperatorTable = {TokenType.POW: BinOpKind.POW}

# Loosest to tightest.
BINARY_PRECEDENCE: tuple[OperatorTable, ...] = (
    OR_OPERATORS,
    AND_OPERATORS,
    COMPARE_OPERATORS,
    ADD_OPERATORS,
    CONCAT_OPERATORS,
    MUL_OPERATORS,
    POW_OPERATORS,
)

# Binding strength on a single scale shared with the unary operators:
# ``not`` sits between ``and`` and the comparisons.  Above ``**`` come
# filters and tests, then unary minus, then postfix access.
NOT_PRECEDENCE = 2
FILTER_PRECEDENCE = 8
NEG_PRECEDENCE = 9
POSTFIX_PRECEDENCE = 10
PRIMARY_PRECEDENCE = 11

BINOP_PRECEDENCE: dict[BinOpKind, int] = {
    kind: level + (1 if level >= NOT_PRECEDENCE else 0)
    for level, table in enumerate(BINARY_PRECEDENCE)
    for kind in table.values()
}

UNARY_PRECEDENCE: dict[UnaryOpKind, int] = {
    UnaryOpKind.NOT: NOT_PRECEDENCE,
    UnaryOpKind.NEG: NEG_PRECEDENCE,
}

BINOP_SYMBOLS: dict[BinOpKind, str] = {
    BinOpKind.SC_OR: "or",
    BinOpKind.SC_AND: "and",
    BinOpKind.EQ: "==",
    BinOpKind.NE: "!=",
    BinOpKind.LT: "<",
    BinOpKind.LTE: "<=",
    BinOpKind.GT: ">",
    BinOpKind.GTE: ">=",
    BinOpKind.ADD: "+",
    BinOpKind.SUB: "-",
    BinOpKind.CONCAT: "~",
    BinOpKind.MUL: "*",
    BinOpKind.DIV: "/",
    BinOpKind.FLOOR_DIV: "//",
    BinOpKind.REM: "%",
    BinOpKind.POW: "**",
}

UNARY_SYMBOLS: dict[UnaryOpKind, str] = {
    UnaryOpKind.NOT: "not ",
    UnaryOpKind.NEG: "-",
}

# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------

# Identifiers that read as constants.  Only these two spellings of each
# word are recognized; ``TRUE`` is an ordinary variable.
LITERAL_KEYWORDS: dict[str, bool | None] = {
    "true": True,
    "True": True,
    "false": False,
    "False": False,
    "none": None,
    "None": None,
}

RESERVED_NAMES: frozenset[str] = frozenset(
    {"true", "True", "false", "False", "none", "None", "loop"}
)

# Statement keyword -> keywords that end its body.
STATEMENT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "for": ("endfor",),
    "if": ("elif", "else", "endif"),
    "with": ("endwith",),
    "block": ("endblock",),
    "extends": (),
    "autoescape": ("endautoescape",),
}
