"""stencil-lang: parser front-end for Jinja-style templates.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import stencil

    # Parse a template into an AST
    template = stencil.parse('''
        {% extends "base.html" %}
        {% block content %}
          {% for user in users %}{{ user.name|title }}{% endfor %}
        {% endblock %}
    ''')

    # Parse a single expression
    expr = stencil.parse_expr("user.name|upper ~ '!'")

    # Render the AST back to canonical source
    canonical = stencil.format(template)

    stencil.__version__
    '0.1.0'
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from stencil.core.errors import TemplateError, TemplateSyntaxError

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from stencil.ast.nodes import Expr, Template
    from stencil.core.config import SyntaxConfig


def parse(
    source: str,
    filename: str = "<string>",
    config: "SyntaxConfig | None" = None,
) -> "Template":
    """Parse template source into a ``Template`` AST.

    Parameters
    ----------
    source:
        Complete template source text.
    filename:
        Template name reported in error locations.
    config:
        Optional delimiter and whitespace configuration.

    Returns
    -------
    Template
        The parsed template.

    Raises
    ------
    stencil.TemplateSyntaxError
        If the source cannot be tokenized or parsed.
    """
    from stencil.parser.parser import parse as _parse

    return _parse(source, filename, config=config)


def parse_expr(source: str) -> "Expr":
    """Parse a bare expression such as ``user.name|upper``.

    Raises
    ------
    stencil.TemplateSyntaxError
        If the source is not exactly one valid expression.
    """
    from stencil.parser.parser import parse_expr as _parse_expr

    return _parse_expr(source)


def format(template: "Template") -> str:  # noqa: A001
    """Render a ``Template`` as canonical template source.

    Parameters
    ----------
    template:
        The template to format.

    Returns
    -------
    str
        Template source that parses back to an equal tree.
    """
    from stencil.formatter.formatter import format_template

    return format_template(template)


__all__ = [
    "__version__",
    "parse",
    "parse_expr",
    "format",
    "TemplateError",
    "TemplateSyntaxError",
]
