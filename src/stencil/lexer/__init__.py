"""stencil lexer module.

Exports the ``Lexer`` class, the ``tokenize`` convenience function and
``LexError``.
"""
from __future__ import annotations

from stencil.lexer.lexer import LexError, Lexer, tokenize

__all__ = ["Lexer", "tokenize", "LexError"]
