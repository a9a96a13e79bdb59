"""
Lexer Diagnostics
=================

Diagnostics are the lexer's error objects. They are collected, never
raised: the lexer keeps scanning and the caller decides whether any
diagnostic is fatal.

Positions and ranges are zero-based (line, character) pairs, the same
convention editors use, so diagnostics can be forwarded to an editor
without conversion. ``Diagnostic.to_error`` converts one into a located
TemplateSyntaxError (one-based) for command-line reporting.

Codes
-----
1000  unexpected character
1001  unterminated string at end of line
1002  unterminated string at end of file
1003  unterminated data binding
1004  empty data binding
1005  unterminated script block
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from haiku_sdk.errors import SourceLocation
from haiku_sdk.compiler.errors import TemplateSyntaxError


class DiagnosticSeverity(IntEnum):
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


@dataclass(frozen=True)
class Position:
    """Zero-based line and character offset."""
    line: int
    character: int


@dataclass(frozen=True)
class Range:
    """Half-open span between two positions."""
    start: Position
    end: Position

    def __str__(self) -> str:
        return (
            f"{self.start.line}:{self.start.character}-"
            f"{self.end.line}:{self.end.character}"
        )


@dataclass(frozen=True)
class Diagnostic:
    """
    A problem found while scanning.

    Attributes:
        code: Stable numeric code (see module docstring)
        message: Human-readable description
        severity: DiagnosticSeverity
        range: Where the problem is
    """
    code: int
    message: str
    severity: DiagnosticSeverity
    range: Range

    @property
    def is_error(self) -> bool:
        return self.severity == DiagnosticSeverity.ERROR

    def to_error(self, filename: str, source_lines: Optional[list[str]] = None) -> TemplateSyntaxError:
        """Convert to a located TemplateSyntaxError."""
        line = self.range.start.line
        source_line = None
        if source_lines is not None and 0 <= line < len(source_lines):
            source_line = source_lines[line]
        return TemplateSyntaxError(
            f"{self.message} [{self.code}]",
            SourceLocation(filename, line + 1, self.range.start.character + 1),
            source_line=source_line,
        )


class DiagnosticMessages:
    """Factories for every diagnostic the lexer can produce."""

    @staticmethod
    def unexpected_character(char: str, range: Range) -> Diagnostic:
        return Diagnostic(
            1000,
            f"Unexpected character '{char}' (char code {ord(char)})",
            DiagnosticSeverity.ERROR,
            range,
        )

    @staticmethod
    def unterminated_string_at_end_of_line(range: Range) -> Diagnostic:
        return Diagnostic(1001, "Unterminated string at end of line", DiagnosticSeverity.ERROR, range)

    @staticmethod
    def unterminated_string_at_end_of_file(range: Range) -> Diagnostic:
        return Diagnostic(1002, "Unterminated string at end of file", DiagnosticSeverity.ERROR, range)

    @staticmethod
    def unterminated_data_binding(range: Range) -> Diagnostic:
        return Diagnostic(1003, "Unterminated data binding", DiagnosticSeverity.ERROR, range)

    @staticmethod
    def empty_data_binding(range: Range) -> Diagnostic:
        return Diagnostic(1004, "Empty data binding", DiagnosticSeverity.ERROR, range)

    @staticmethod
    def unterminated_script(range: Range) -> Diagnostic:
        return Diagnostic(1005, "Unterminated <script> block", DiagnosticSeverity.ERROR, range)
