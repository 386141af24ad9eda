"""Error types shared by the stencil lexer and parser.

Every error raised while reading a template carries a ``kind``, a
human-readable message and, once the top-level driver has seen it, a
``(filename, lineno)`` location.  The lexer may attach a line number
itself; the driver fills in whatever is still missing so that no error
ever reaches a caller without a location.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """The category of a template error."""

    SYNTAX_ERROR = "syntax error"
    BAD_ESCAPE = "bad string escape"

    @property
    def description(self) -> str:
        """Human-readable name used as the prefix of error messages."""
        return self.value


class TemplateError(Exception):
    """Base class for all errors raised while reading a template.

    Parameters
    ----------
    kind:
        The ``ErrorKind`` of this error.
    message:
        Human-readable description of the problem.
    filename:
        Name of the template the error occurred in, if known.
    lineno:
        1-based line number of the error, if known.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        filename: str | None = None,
        lineno: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.filename = filename
        self.lineno = lineno

    def __str__(self) -> str:
        text = f"{self.kind.description}: {self.message}"
        if self.lineno is not None:
            text += f" (in {self.filename or '<unknown>'}:{self.lineno})"
        return text

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.kind.name}, {self.message!r}, "
            f"filename={self.filename!r}, lineno={self.lineno!r})"
        )

    @property
    def has_location(self) -> bool:
        """Return True if a line number has been attached."""
        return self.lineno is not None

    def set_location(self, filename: str, lineno: int) -> None:
        """Attach the template name and line this error belongs to."""
        self.filename = filename
        self.lineno = lineno


class TemplateSyntaxError(TemplateError):
    """Raised when template source cannot be tokenized or parsed."""

    def __init__(
        self,
        message: str,
        filename: str | None = None,
        lineno: int | None = None,
        kind: ErrorKind = ErrorKind.SYNTAX_ERROR,
    ) -> None:
        super().__init__(kind, message, filename=filename, lineno=lineno)
