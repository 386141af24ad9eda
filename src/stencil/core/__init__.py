"""Core domain types.

Holds the error contract and the lexer syntax configuration.  Submodules
in core/ must not import from parser/, formatter/ or cli/.
"""
from __future__ import annotations

from stencil.core.config import SyntaxConfig
from stencil.core.errors import ErrorKind, TemplateError, TemplateSyntaxError

__all__ = ["ErrorKind", "TemplateError", "TemplateSyntaxError", "SyntaxConfig"]
