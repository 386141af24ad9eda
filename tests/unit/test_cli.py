"""Unit tests for stencil.cli.main: the ``stencil`` command line tool."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from stencil.cli.main import cli


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_runner() -> CliRunner:
    return CliRunner()


def _write(tmp_path: Path, name: str, text: str) -> str:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


GOOD = "{% for user in users %}{{ user.name|title }}{% endfor %}"
BAD = "line one\n{% for x in %}{% endfor %}"


# ---------------------------------------------------------------------------
# Group options
# ---------------------------------------------------------------------------


class TestGroup:
    def test_help_lists_commands(self) -> None:
        result = _make_runner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("parse", "check", "fmt", "expr", "version"):
            assert command in result.output

    def test_version_command(self) -> None:
        result = _make_runner().invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "stencil-lang" in result.output
        assert "0.1.0" in result.output

    def test_verbose_flag_accepted(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "good.html", GOOD)
        result = _make_runner().invoke(cli, ["-v", "check", path])
        assert result.exit_code == 0


# ---------------------------------------------------------------------------
# parse
# ---------------------------------------------------------------------------


class TestParseCommand:
    def test_parse_to_stdout(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "good.html", GOOD)
        result = _make_runner().invoke(cli, ["parse", path])
        assert result.exit_code == 0
        assert "ForLoop" in result.output

    def test_parse_json_to_file(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "good.html", GOOD)
        out = tmp_path / "ast.json"
        result = _make_runner().invoke(cli, ["parse", path, "-o", str(out)])
        assert result.exit_code == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["kind"] == "Template"
        assert data["children"][0]["kind"] == "ForLoop"
        assert "span" in data

    def test_parse_yaml_without_spans(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "good.html", GOOD)
        out = tmp_path / "ast.yaml"
        result = _make_runner().invoke(
            cli, ["parse", path, "--format", "yaml", "--no-spans", "-o", str(out)]
        )
        assert result.exit_code == 0
        data = yaml.safe_load(out.read_text(encoding="utf-8"))
        assert data["children"][0]["target"] == "user"
        assert "span" not in data

    def test_parse_error_exits_1(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "bad.html", BAD)
        result = _make_runner().invoke(cli, ["parse", path])
        assert result.exit_code == 1
        assert "unexpected" in result.output

    def test_missing_file(self, tmp_path: Path) -> None:
        result = _make_runner().invoke(cli, ["parse", str(tmp_path / "nope.html")])
        assert result.exit_code == 1
        assert "not found" in result.output


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


class TestCheckCommand:
    def test_all_good(self, tmp_path: Path) -> None:
        paths = [_write(tmp_path, f"t{i}.html", GOOD) for i in range(3)]
        result = _make_runner().invoke(cli, ["check", *paths])
        assert result.exit_code == 0
        assert result.output.count("OK") == 3

    def test_one_bad_file_fails_the_run(self, tmp_path: Path) -> None:
        good = _write(tmp_path, "good.html", GOOD)
        bad = _write(tmp_path, "bad.html", BAD)
        result = _make_runner().invoke(cli, ["check", good, bad])
        assert result.exit_code == 1
        assert "OK" in result.output
        assert "Summary" in result.output

    def test_error_shows_offending_line(self, tmp_path: Path) -> None:
        bad = _write(tmp_path, "bad.html", BAD)
        result = _make_runner().invoke(cli, ["check", bad])
        assert result.exit_code == 1
        assert "for x in" in result.output

    def test_requires_a_file(self) -> None:
        result = _make_runner().invoke(cli, ["check"])
        assert result.exit_code != 0


# ---------------------------------------------------------------------------
# fmt
# ---------------------------------------------------------------------------


class TestFmtCommand:
    def test_prints_canonical_source(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "t.html", "{%if a%}{{b|upper}}{%endif%}")
        result = _make_runner().invoke(cli, ["fmt", path])
        assert result.exit_code == 0
        assert result.output == "{% if a %}{{ b|upper }}{% endif %}"

    def test_check_passes_on_canonical_file(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "t.html", "{% if a %}{{ b|upper }}{% endif %}")
        result = _make_runner().invoke(cli, ["fmt", path, "--check"])
        assert result.exit_code == 0

    def test_check_fails_on_unformatted_file(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "t.html", "{{a}}")
        result = _make_runner().invoke(cli, ["fmt", path, "--check"])
        assert result.exit_code == 1
        assert "NEEDS FORMATTING" in result.output

    def test_in_place(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "t.html", "{{a}}")
        result = _make_runner().invoke(cli, ["fmt", path, "--in-place"])
        assert result.exit_code == 0
        assert Path(path).read_text(encoding="utf-8") == "{{ a }}"

    def test_fmt_parse_error(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "bad.html", BAD)
        result = _make_runner().invoke(cli, ["fmt", path])
        assert result.exit_code == 1


# ---------------------------------------------------------------------------
# expr
# ---------------------------------------------------------------------------


class TestExprCommand:
    def test_json_output(self) -> None:
        result = _make_runner().invoke(cli, ["expr", "a + 1", "--no-spans"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "kind": "BinOp",
            "op": "ADD",
            "left": {"kind": "Var", "id": "a"},
            "right": {"kind": "Const", "value": 1},
        }

    def test_yaml_output(self) -> None:
        result = _make_runner().invoke(cli, ["expr", "x|upper", "--format", "yaml"])
        assert result.exit_code == 0
        data = yaml.safe_load(result.output)
        assert data["kind"] == "Filter"
        assert data["span"]["end_col"] == 7

    @pytest.mark.parametrize("source", ["a b", "1 +", "'open"])
    def test_invalid_expression(self, source: str) -> None:
        result = _make_runner().invoke(cli, ["expr", source])
        assert result.exit_code == 1
        assert "Error" in result.output
