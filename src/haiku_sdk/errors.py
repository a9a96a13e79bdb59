"""
Haiku SDK Error Hierarchy
=========================

This module defines the exception hierarchy shared by the whole SDK.
All exceptions inherit from HaikuError, allowing callers to catch every
SDK-related failure with a single except clause if desired.

Exception Hierarchy
-------------------
HaikuError (base)
├── ScriptError (BrightScript host-script service)
│   └── ScriptSyntaxError - malformed <script> or binding source
├── DeployError - writing artifacts or removing sources failed
└── TemplateError (see haiku_sdk.compiler.errors)

Design Philosophy
-----------------
Each exception captures source location information (filename, line, column)
when applicable, so the CLI can point at the offending text.

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class HaikuError(Exception):
    """
    Base exception for all Haiku SDK errors.

        try:
            compile_haiku(source)
        except HaikuError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


class LocatedError(HaikuError):
    """
    Base for errors that point at a place in the source.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            App.haiku:3:12: error: unexpected token ')'
                print foo)
                         ^
            hint: expected end of statement
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Host Script Exceptions
# =============================================================================

class ScriptError(LocatedError):
    """Base exception for BrightScript host-script failures."""
    pass


class ScriptSyntaxError(ScriptError):
    """
    Syntax error in BrightScript source.

    Raised by the host-script lexer or parser, either for the contents of
    the <script> block or for an expression inside a data binding.

    Examples:
        - Unterminated string literal
        - Missing 'end sub'
        - Operator with no right-hand operand
    """
    pass


# =============================================================================
# Deployment Exceptions
# =============================================================================

class DeployError(HaikuError):
    """
    Error while writing generated artifacts or removing a source file.

    Attributes:
        path: The file that could not be written or removed
        reason: Underlying OS error text
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot deploy '{path}': {reason}")
