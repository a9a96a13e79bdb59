"""
Haiku Template Compiler Error Hierarchy
=======================================

Exceptions raised by the template compiler. All inherit from TemplateError,
which itself inherits from the SDK-wide HaikuError.

Exception Hierarchy
-------------------
TemplateError (base for all template compiler errors)
├── TemplateSyntaxError - lexical and grammar errors
│   ├── UnexpectedTokenError - wrong token kind at a decision point
│   ├── MissingTokenError - required token absent
│   └── MismatchedTagError - closing tag does not match opening tag
├── TemplateSemanticError - well-formed input that cannot be compiled
├── CodeGenError - code generation errors
│   └── InternalCompilerError - generator invariant violated
└── TemplateCompilationError - aggregate report of collected errors

Error Message Format
--------------------
    App.haiku:4:5: error: unexpected token '/>'
        <Label text="x" />>
                        ^
    hint: expected node name
"""

from typing import Optional

from haiku_sdk.errors import LocatedError, SourceLocation


# =============================================================================
# Base Template Exception
# =============================================================================

class TemplateError(LocatedError):
    """Base exception for all template compiler errors."""
    pass


class TemplateCompilationError(TemplateError):
    """
    Aggregate compilation error containing multiple errors.

    The message is already a formatted report from ErrorCollector and is
    passed through unchanged.
    """

    def _format_message(self) -> str:
        return self.message


# =============================================================================
# Syntax Errors (Lexer and Parser)
# =============================================================================

class TemplateSyntaxError(TemplateError):
    """
    Syntax error in template source.

    Raised (or collected) for lexical diagnostics and grammar violations.

    Examples:
        - Unterminated attribute string
        - Attribute without a name
        - Missing '>' after a closing tag name
    """
    pass


class UnexpectedTokenError(TemplateSyntaxError):
    """Token kind does not match any alternative of the grammar rule."""

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected
        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=f"expected {expected}" if expected else None,
            source_line=source_line,
        )


class MissingTokenError(TemplateSyntaxError):
    """Required token is missing, typically at end of input."""

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected {expected}",
            location=location,
            source_line=source_line,
        )


class MismatchedTagError(TemplateSyntaxError):
    """
    Closing tag name differs from the opening tag name.

    Example:
        <Group>
        </Label>
    """

    def __init__(
        self,
        opened: str,
        closed: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        opened_at: Optional[SourceLocation] = None,
    ):
        self.opened = opened
        self.closed = closed
        hint = f"'<{opened}>' was opened at {opened_at}" if opened_at else None
        super().__init__(
            f"closing tag '</{closed}>' does not match '<{opened}>'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# Semantic Errors
# =============================================================================

class TemplateSemanticError(TemplateError):
    """
    Template is well-formed but cannot be compiled.

    Examples:
        - The <script> block declares 'init' while nodes also need one
    """
    pass


# =============================================================================
# Code Generation Errors
# =============================================================================

class CodeGenError(TemplateError):
    """Error during code generation."""
    pass


class InternalCompilerError(CodeGenError):
    """
    A generator invariant was violated.

    This signals a defect in the compiler, not in the input; compilation of
    the unit is aborted instead of producing wrong output.
    """

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(
            f"internal compiler error: {message}",
            location=location,
            hint="please report this with the input that triggered it",
        )


# =============================================================================
# Error Collection (for multi-error reporting)
# =============================================================================

class ErrorCollector:
    """
    Collects errors and warnings for batch reporting.

    Example:
        collector = ErrorCollector()
        for diagnostic in lexer_diagnostics:
            collector.add(diagnostic.to_error(filename))
        collector.raise_if_errors()
    """

    def __init__(self, max_errors: int = 100):
        self.errors: list[TemplateError] = []
        self.warnings: list[str] = []
        self.max_errors = max_errors

    def add(self, error: TemplateError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        if location:
            self.warnings.append(f"{location}: warning: {message}")
        else:
            self.warnings.append(f"warning: {message}")

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def should_stop(self) -> bool:
        return len(self.errors) >= self.max_errors

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []
        for error in self.errors:
            lines.append(str(error))
            lines.append("")
        lines.extend(self.warnings)

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}")
        return "\n".join(lines)

    def raise_if_errors(self) -> None:
        """Raise a TemplateCompilationError if any errors were collected."""
        if self.has_errors():
            raise TemplateCompilationError(self.report())
