"""
String Interpolation
====================

Splits a string-literal attribute value such as ``"Hi {m.name}!"`` into
literal and expression segments and builds the assignments that set the
field.

Rules
-----
- ``{expr}`` spans are expressions; ``\\{`` and ``\\}`` are literal braces
- empty spans ``{}`` and empty literal text disappear
- every expression is wrapped in ``bslib_toString()``
- one segment: assigned directly
- several: accumulated in a fresh Init-scope variable named after the
  field, then assigned

    label.text = "hello"

    text = bslib_toString(m.a)
    text += " letters"
    label.text = text
"""

import re
from dataclasses import dataclass

from haiku_sdk.brs import parse_expression
from haiku_sdk.brs.ast import (
    AssignmentStatement,
    DottedSetStatement,
    Expression,
    LiteralExpression,
    Statement,
    VariableExpression,
    call,
    string_literal,
)
from haiku_sdk.compiler.scopes import ScopeKind, ScopeTable

EXPRESSION_PATTERN = re.compile(r"(?<!\\)\{([^{}]*)(?<!\\)\}")
TO_STRING_HELPER = "bslib_toString"


@dataclass(frozen=True)
class Segment:
    """
    One piece of an interpolated string.

    Attributes:
        text: Literal text (BrightScript-escaped) or expression source
        is_expression: True for ``{...}`` spans
    """
    text: str
    is_expression: bool = False


def unescape_braces(text: str) -> str:
    return text.replace("\\{", "{").replace("\\}", "}")


def split_segments(image: str) -> list[Segment]:
    """
    Split a quoted string image into its non-empty segments, in order.

    >>> split_segments('"{a} letters"')
    [Segment(text='a', is_expression=True), Segment(text=' letters', is_expression=False)]
    """
    inner = image[1:-1] if len(image) >= 2 and image[0] == image[-1] == '"' else image.strip('"')
    segments = []
    pos = 0
    for match in EXPRESSION_PATTERN.finditer(inner):
        literal = inner[pos:match.start()]
        if literal:
            segments.append(Segment(unescape_braces(literal)))
        expression = match.group(1).strip()
        if expression:
            segments.append(Segment(expression, is_expression=True))
        pos = match.end()
    tail = inner[pos:]
    if tail:
        segments.append(Segment(unescape_braces(tail)))
    return segments


def segment_expression(segment: Segment, filename: str = "<binding>", line: int = 1) -> Expression:
    if segment.is_expression:
        inner = parse_expression(segment.text, filename, line)
        return call(VariableExpression(name=TO_STRING_HELPER), inner)
    return LiteralExpression(text=f'"{segment.text}"')


def interpolate(
    target: Expression,
    field: str,
    image: str,
    scopes: ScopeTable,
    filename: str = "<binding>",
    line: int = 1,
) -> list[Statement]:
    """
    Build the statements assigning an interpolated string to ``target.field``.

    Args:
        target: Expression for the node the field belongs to
        field: Field name
        image: The string literal image, quotes included
        scopes: Scope table used to allocate the accumulator variable
        filename, line: Where the attribute is, for error messages

    Raises:
        ScriptSyntaxError: If an embedded expression does not parse
    """
    values = [segment_expression(segment, filename, line) for segment in split_segments(image)]

    if not values:
        return [DottedSetStatement(obj=target, name=field, value=string_literal(""))]

    if len(values) == 1:
        return [DottedSetStatement(obj=target, name=field, value=values[0])]

    accumulator = scopes.next_identifier(ScopeKind.INIT, field)
    statements: list[Statement] = []
    for index, value in enumerate(values):
        statements.append(
            AssignmentStatement(
                target=VariableExpression(name=accumulator),
                operator="=" if index == 0 else "+=",
                value=value,
            )
        )
    statements.append(DottedSetStatement(obj=target, name=field, value=VariableExpression(name=accumulator)))
    return statements
