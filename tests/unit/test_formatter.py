"""Unit tests for stencil.formatter.formatter: TemplateFormatter and helpers."""
from __future__ import annotations

import pytest

from stencil.ast.nodes import (
    BinOp,
    BinOpKind,
    Const,
    EmitRaw,
    Span,
    Template,
    UnaryOp,
    UnaryOpKind,
    Var,
    WithBlock,
)
from stencil.core.config import SyntaxConfig
from stencil.formatter.formatter import TemplateFormatter, format_expr, format_template
from stencil.parser.parser import parse, parse_expr

_S = Span.start()


def _fmt(source: str) -> str:
    return format_expr(parse_expr(source))


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


class TestExpressionFormatting:
    @pytest.mark.parametrize("source, expected", [
        ("a+b*c", "a + b * c"),
        ("(a+b)*c", "(a + b) * c"),
        ("(a - b) - c", "a - b - c"),
        ("a - (b - c)", "a - (b - c)"),
        ("2 ** 3 ** 2", "2 ** 3 ** 2"),
        ("2 ** (3 ** 2)", "2 ** (3 ** 2)"),
        ("(a < b) < c", "a < b < c"),
        ("a < (b < c)", "a < (b < c)"),
        ("a or b and c", "a or b and c"),
        ("(a or b) and c", "(a or b) and c"),
        ("not (a and b)", "not (a and b)"),
        ("not a == b", "not a == b"),
        ("(not a) == b", "(not a) == b"),
        ("a and not b", "a and not b"),
        ("a ~ b + c", "a ~ b + c"),
        ("a ~ (b + c)", "a ~ (b + c)"),
        ("-x.y", "-x.y"),
        ("(-x).y", "(-x).y"),
        ("-x|abs", "-x|abs"),
        ("-(x|abs)", "-(x|abs)"),
        ("--x", "--x"),
        ("1 + 2|f", "1 + 2|f"),
        ("(1 + 2)|f", "(1 + 2)|f"),
        ("(a|f).b", "(a|f).b"),
        ("a|f ** 2", "a|f ** 2"),
        ("(a ** 2)|f", "(a ** 2)|f"),
        ("x|join(', ',  1)|upper()", 'x|join(", ", 1)|upper'),
        ("n is divisibleby( 3 )", "n is divisibleby(3)"),
        ("(n is odd).x", "(n is odd).x"),
        ("a.b[c+1](d, e)", "a.b[c + 1](d, e)"),
        ("[1,2,[]]", "[1, 2, []]"),
        ("{'a':1, b : {}}", '{"a": 1, b: {}}'),
        ("True", "true"),
        ("None", "none"),
        ("1.5", "1.5"),
    ])
    def test_canonical_form(self, source: str, expected: str) -> None:
        assert _fmt(source) == expected

    def test_string_escapes(self) -> None:
        node = Const(value='say "hi"\n\\ \x01', span=_S)
        assert format_expr(node) == '"say \\"hi\\"\\n\\\\ \\u0001"'

    def test_single_quotes_become_double(self) -> None:
        assert _fmt("'it\\'s'") == '"it\'s"'

    def test_large_float_has_no_exponent(self) -> None:
        assert format_expr(Const(value=1e20, span=_S)) == "100000000000000000000.0"

    def test_small_float_round_trips(self) -> None:
        text = format_expr(Const(value=1e-7, span=_S))
        assert "e" not in text
        assert parse_expr(text) == Const(value=1e-7, span=_S)

    def test_right_operand_at_same_level_is_parenthesized(self) -> None:
        node = BinOp(
            op=BinOpKind.ADD,
            left=Var(id="a", span=_S),
            right=BinOp(op=BinOpKind.SUB, left=Var(id="b", span=_S), right=Var(id="c", span=_S), span=_S),
            span=_S,
        )
        assert format_expr(node) == "a + (b - c)"

    def test_negated_binary(self) -> None:
        node = UnaryOp(
            op=UnaryOpKind.NEG,
            expr=BinOp(op=BinOpKind.POW, left=Var(id="a", span=_S), right=Const(value=2, span=_S), span=_S),
            span=_S,
        )
        assert format_expr(node) == "-(a ** 2)"


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class TestTemplateFormatting:
    @pytest.mark.parametrize("source, expected", [
        ("Hello {{name}}!", "Hello {{ name }}!"),
        ("{%for x in xs%}{{x}}{%endfor%}", "{% for x in xs %}{{ x }}{% endfor %}"),
        ("{%if a%}1{%endif%}", "{% if a %}1{% endif %}"),
        ("{%if a%}1{%else%}2{%endif%}", "{% if a %}1{% else %}2{% endif %}"),
        (
            "{%if a%}1{%elif b%}2{%elif c%}3{%else%}4{%endif%}",
            "{% if a %}1{% elif b %}2{% elif c %}3{% else %}4{% endif %}",
        ),
        ("{%with a=1,b=2%}{%endwith%}", "{% with a = 1, b = 2 %}{% endwith %}"),
        ("{%with%}x{%endwith%}", "{% with %}x{% endwith %}"),
        ("{%block a%}x{%endblock a%}", "{% block a %}x{% endblock %}"),
        ("{%extends 'base.html'%}", '{% extends "base.html" %}'),
        ("{%autoescape false%}x{%endautoescape%}", "{% autoescape false %}x{% endautoescape %}"),
        ("a{# comment #}b", "a{##}b"),
        ("a  {{- x -}}  b", "a{{ x }}b"),
    ])
    def test_canonical_form(self, source: str, expected: str) -> None:
        assert format_template(parse(source)) == expected

    def test_else_holding_if_becomes_elif(self) -> None:
        source = "{% if a %}x{% else %}{% if b %}y{% endif %}{% endif %}"
        assert format_template(parse(source)) == "{% if a %}x{% elif b %}y{% endif %}"

    def test_else_with_more_than_an_if_stays_else(self) -> None:
        source = "{% if a %}x{% else %}{% if b %}y{% endif %}z{% endif %}"
        assert format_template(parse(source)) == source

    def test_text_that_looks_like_a_tag_is_wrapped_in_raw(self) -> None:
        source = "{% raw %}{{ not a tag }}{% endraw %}"
        assert format_template(parse(source)) == source

    def test_text_ending_in_open_brace_is_wrapped_in_raw(self) -> None:
        source = "{% raw %}{{% endraw %}{{ x }}"
        output = format_template(parse(source))
        assert output == source
        assert parse(output) == parse(source)

    def test_adjacent_text_runs_stay_separate(self) -> None:
        template = Template(children=(EmitRaw(raw="a", span=_S), EmitRaw(raw="b", span=_S)), span=_S)
        output = format_template(template)
        assert output == "a{##}b"
        assert parse(output) == template

    def test_text_separator_uses_configured_comment_delimiters(self) -> None:
        config = SyntaxConfig(comment_start="<#", comment_end="#>")
        template = parse("a<# c #>b", config=config)
        assert format_template(template, config) == "a<##>b"

    def test_empty_template(self) -> None:
        assert format_template(Template(children=(), span=_S)) == ""

    def test_with_block_built_by_hand(self) -> None:
        node = WithBlock(assignments=(("n", Const(value=None, span=_S)),), body=(EmitRaw(raw="-", span=_S),), span=_S)
        template = Template(children=(node,), span=_S)
        assert TemplateFormatter().format(template) == "{% with n = none %}-{% endwith %}"

    def test_custom_delimiters(self) -> None:
        config = SyntaxConfig(block_start="<%", block_end="%>", variable_start="<<", variable_end=">>")
        template = parse("<<x>><%if y%>z<%endif%>", config=config)
        output = format_template(template, config)
        assert output == "<< x >><% if y %>z<% endif %>"
        assert parse(output, config=config) == template

    def test_package_level_format(self) -> None:
        import stencil

        assert stencil.format(stencil.parse("{{a}}")) == "{{ a }}"


# ---------------------------------------------------------------------------
# Re-parse equality
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("source", [
    "{{ a + b * c - (d - e) }}",
    "{{ not (a or b) and c is odd }}",
    "{{ (x|f(1)).y[0](2, [3], {'k': v}) }}",
    "{{ -(a|abs) ** -b ~ 'x\\ty' }}",
    "{{ 'quote \" and \\\\ backslash' }}",
    "{% for i in range(10) %}{% if i % 2 == 0 %}{{ i }}{% endif %}{% endfor %}",
    "{% if a %}{% elif b %}{% else %}{% if c %}{% endif %}{% endif %}",
    "{% raw %}{% if %}{% endraw %} after",
    "{% with a = 1 < 2 < 3, b = none %}{{ a }}{% endwith %}",
    "a{# note #}b",
    "{% raw %}{{ x }}{% endraw %}tail",
    "{% for x in xs %}a{#-#} b{% endfor %}",
    "{% raw %}{{% endraw %}{{ x }}",
    "{% raw %}{{% endraw %}{# c #}{% if y %}{% endif %}",
    "{{ 1 }}{{ 1.0 }}{{ true }}",
])
def test_formatted_output_parses_to_equal_tree(source: str) -> None:
    template = parse(source)
    assert parse(format_template(template)) == template


def test_realistic_template_round_trips(page_source: str) -> None:
    template = parse(page_source)
    formatted = format_template(template)
    assert parse(formatted) == template
    assert format_template(parse(formatted)) == formatted
