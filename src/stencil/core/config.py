"""Lexer syntax configuration."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SyntaxConfig:
    """Delimiters and whitespace handling used by the lexer.

    Parameters
    ----------
    block_start, block_end:
        Delimiters around statement tags (default ``{%`` / ``%}``).
    variable_start, variable_end:
        Delimiters around output expressions (default ``{{`` / ``}}``).
    comment_start, comment_end:
        Delimiters around comments (default ``{#`` / ``#}``).
    trim_blocks:
        Drop the first newline directly after a statement tag
        (default False).
    """

    block_start: str = "{%"
    block_end: str = "%}"
    variable_start: str = "{{"
    variable_end: str = "}}"
    comment_start: str = "{#"
    comment_end: str = "#}"
    trim_blocks: bool = False

    def __post_init__(self) -> None:
        delimiters = (
            self.block_start,
            self.block_end,
            self.variable_start,
            self.variable_end,
            self.comment_start,
            self.comment_end,
        )
        if not all(delimiters):
            raise ValueError("template delimiters must be non-empty strings")
        starts = {self.block_start, self.variable_start, self.comment_start}
        if len(starts) != 3:
            raise ValueError(
                "block, variable and comment start delimiters must be distinct"
            )
