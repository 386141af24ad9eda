"""stencil parser module.

Exports the ``Parser`` class, the ``parse`` and ``parse_expr``
convenience functions, the ``TokenStream`` adapter and the syntax
error type.
"""
from __future__ import annotations

from stencil.core.errors import TemplateSyntaxError
from stencil.parser.parser import Parser, parse, parse_expr
from stencil.parser.stream import TokenStream

__all__ = [
    "Parser",
    "parse",
    "parse_expr",
    "TokenStream",
    "TemplateSyntaxError",
]
