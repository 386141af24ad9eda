"""stencil formatter module.

Exports the ``TemplateFormatter`` class and the ``format_template`` and
``format_expr`` convenience functions.
"""
from __future__ import annotations

from stencil.formatter.formatter import TemplateFormatter, format_expr, format_template

__all__ = ["TemplateFormatter", "format_template", "format_expr"]
