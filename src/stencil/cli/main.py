"""CLI entry point for stencil-lang.

Invoked as::

    stencil [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m stencil.cli.main

Commands
--------
parse       Dump the parsed AST of a template to JSON or YAML
check       Parse one or more templates and report syntax errors
fmt         Format a template to canonical style
expr        Parse a single expression and dump its AST
version     Show version information
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from stencil.ast.nodes import Node, Template
    from stencil.core.errors import TemplateError

console = Console()
err_console = Console(stderr=True)


def _read_source(path: str) -> str:
    """Read a template file, exiting on error."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {exc}")
        sys.exit(1)


def _report_error(exc: "TemplateError", source: str) -> None:
    """Print ``exc`` followed by the source line it points at."""
    err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
    lines = source.splitlines()
    if exc.lineno is not None and 0 < exc.lineno <= len(lines):
        err_console.print(f"  [dim]{exc.lineno:>4} |[/dim] {escape(lines[exc.lineno - 1])}", highlight=False)


def _parse_or_exit(source: str, path: str) -> "Template":
    """Parse template source, printing the error and exiting on failure."""
    from stencil.core.errors import TemplateError
    from stencil.parser import parse

    try:
        return parse(source, filename=path)
    except TemplateError as exc:
        _report_error(exc, source)
        sys.exit(1)


def _dump(node: "Node", output_format: str, include_spans: bool) -> tuple[str, str]:
    """Serialize ``node``; return the text and its syntax-highlighting lexer."""
    from stencil.ast import AstSerializer

    serializer = AstSerializer(include_spans=include_spans)
    if output_format == "json":
        return serializer.to_json(node, indent=2), "json"
    return serializer.to_yaml(node), "yaml"


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="stencil-lang")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log parser activity to stderr")
def cli(verbose: bool) -> None:
    """Template parser toolkit: parse, check and format Jinja-style templates."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from stencil import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]stencil-lang[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# parse command
# ---------------------------------------------------------------------------


@cli.command(name="parse")
@click.argument("file", type=click.Path(exists=False))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    help="AST output format",
)
@click.option("--no-spans", is_flag=True, default=False, help="Omit source spans from the output")
@click.option("--output", "-o", default=None, help="Output file path (defaults to stdout)")
def parse_command(file: str, output_format: str, no_spans: bool, output: str | None) -> None:
    """Parse a template and dump the AST.

    FILE is the path to the template to parse.
    """
    source = _read_source(file)
    template = _parse_or_exit(source, file)
    text, lang = _dump(template, output_format.lower(), include_spans=not no_spans)

    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]AST written to[/green] {output}")
    else:
        syntax = Syntax(text, lang, line_numbers=True)
        console.print(syntax)


# ---------------------------------------------------------------------------
# check command
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=False))
def check_command(files: tuple[str, ...]) -> None:
    """Check that templates parse without syntax errors.

    FILES are the paths of the templates to check.  Exits with status 1
    if any of them fails.
    """
    from stencil.core.errors import TemplateError
    from stencil.parser import parse

    failures = 0
    for file in files:
        source = _read_source(file)
        try:
            parse(source, filename=file)
        except TemplateError as exc:
            failures += 1
            _report_error(exc, source)
        else:
            console.print(f"[green]OK[/green] {file}")

    if failures:
        console.print(f"\n[bold]Summary:[/bold] {failures} of {len(files)} template(s) failed")
        sys.exit(1)


# ---------------------------------------------------------------------------
# fmt command
# ---------------------------------------------------------------------------


@cli.command(name="fmt")
@click.argument("file", type=click.Path(exists=False))
@click.option("--check", is_flag=True, default=False, help="Check if file is already formatted")
@click.option("--in-place", is_flag=True, default=False, help="Rewrite the file in place")
def fmt_command(file: str, check: bool, in_place: bool) -> None:
    """Format a template to canonical style.

    FILE is the path to the template to format.

    Without --check or --in-place, prints the formatted output to stdout.
    """
    from stencil.formatter import format_template

    source = _read_source(file)
    template = _parse_or_exit(source, file)
    formatted = format_template(template)

    if check:
        if formatted == source:
            console.print(f"[green]OK[/green] {file} already formatted")
            sys.exit(0)
        else:
            console.print(f"[yellow]NEEDS FORMATTING[/yellow] {file}")
            sys.exit(1)
    elif in_place:
        Path(file).write_text(formatted, encoding="utf-8")
        console.print(f"[green]Formatted[/green] {file}")
    else:
        click.echo(formatted, nl=False)


# ---------------------------------------------------------------------------
# expr command
# ---------------------------------------------------------------------------


@cli.command(name="expr")
@click.argument("source")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    help="AST output format",
)
@click.option("--no-spans", is_flag=True, default=False, help="Omit source spans from the output")
def expr_command(source: str, output_format: str, no_spans: bool) -> None:
    """Parse a single expression and dump its AST.

    SOURCE is the expression text, for example 'user.name|upper'.
    """
    from stencil.core.errors import TemplateError
    from stencil.parser import parse_expr

    try:
        expr = parse_expr(source)
    except TemplateError as exc:
        _report_error(exc, source)
        sys.exit(1)

    text, _ = _dump(expr, output_format.lower(), include_spans=not no_spans)
    click.echo(text)


if __name__ == "__main__":
    cli()
