"""
BrightScript Abstract Syntax Tree (AST) Definitions
===================================================

Node types produced by the BrightScript parser and consumed by the Haiku
code generator. The generator also builds these nodes directly for the
statements it synthesizes, so the whole init routine is a single tree
until it is rendered to text by BrsPrinter.

Node Hierarchy
--------------
BrsNode (base)
├── Expressions
│   ├── LiteralExpression - number, string, true/false/invalid (verbatim text)
│   ├── VariableExpression - plain name
│   ├── ScopedVariableExpression - generator-owned name that may move to m.
│   ├── DottedGetExpression - obj.name
│   ├── IndexedGetExpression - obj[index]
│   ├── CallExpression - callee(args)
│   ├── BinaryExpression / UnaryExpression / GroupingExpression
│   ├── TernaryExpression - cond ? a : b
│   ├── ArrayLiteralExpression / AALiteralExpression
│   └── FunctionExpression - sub/function literal
└── Statements
    ├── Block
    ├── AssignmentStatement / DottedSetStatement / IndexedSetStatement
    ├── IncrementStatement - x++ / x--
    ├── DimStatement - dim a[n]
    ├── ExpressionStatement / PrintStatement
    ├── IfStatement / ForStatement / ForEachStatement / WhileStatement
    ├── TryCatchStatement / ThrowStatement
    ├── ExitStatement / ReturnStatement / EndStatement / StopStatement
    ├── GotoStatement / LabelStatement
    └── FunctionStatement - named sub/function declaration

Design Notes
------------
- All nodes are dataclasses; the location is excluded from comparisons so
  parsed and hand-built trees compare equal.
- Nodes are mutable: the reactivity pass inserts statements into Blocks.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from haiku_sdk.errors import SourceLocation


# =============================================================================
# Base Classes
# =============================================================================

@dataclass
class BrsNode:
    """
    Base class for all BrightScript AST nodes.

    Attributes:
        location: Source location, or None for generated nodes
    """
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


@dataclass
class Expression(BrsNode):
    """Base class for nodes that evaluate to a value."""
    pass


@dataclass
class Statement(BrsNode):
    """Base class for nodes that perform an action."""
    pass


# =============================================================================
# Scoped Variables
# =============================================================================

INSTANCE_ROOT = "m"


@dataclass(eq=False)
class ScopedVariable:
    """
    A generator-owned variable that may be promoted to instance scope.

    Every ScopedVariableExpression that refers to the same ScopedVariable
    shares this object, so flipping ``instance`` rewrites the declaration
    and every use site at once.
    """
    name: str
    instance: bool = False

    @property
    def qualified(self) -> str:
        """The name as it appears in source: ``label`` or ``m.label``."""
        return f"{INSTANCE_ROOT}.{self.name}" if self.instance else self.name


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class LiteralExpression(Expression):
    """Number, string, boolean or invalid literal, kept as source text."""
    text: str = ""


@dataclass
class VariableExpression(Expression):
    name: str = ""


@dataclass
class ScopedVariableExpression(Expression):
    variable: ScopedVariable = None


@dataclass
class DottedGetExpression(Expression):
    obj: Expression = None
    name: str = ""


@dataclass
class IndexedGetExpression(Expression):
    obj: Expression = None
    index: Expression = None


@dataclass
class CallExpression(Expression):
    callee: Expression = None
    args: list[Expression] = field(default_factory=list)


@dataclass
class BinaryExpression(Expression):
    """
    Binary operation.

    Attributes:
        operator: Operator text, lowercase for keyword operators (and, or, mod)
    """
    left: Expression = None
    operator: str = ""
    right: Expression = None


@dataclass
class UnaryExpression(Expression):
    operator: str = ""
    operand: Expression = None


@dataclass
class GroupingExpression(Expression):
    """Parenthesized expression; kept so rendering preserves the author's grouping."""
    expression: Expression = None


@dataclass
class TernaryExpression(Expression):
    condition: Expression = None
    consequent: Expression = None
    alternate: Expression = None


@dataclass
class ArrayLiteralExpression(Expression):
    elements: list[Expression] = field(default_factory=list)


@dataclass
class AAMember(BrsNode):
    """
    One key/value pair of an associative array literal.

    Attributes:
        key: Key as written (identifier text or quoted string)
    """
    key: str = ""
    value: Expression = None


@dataclass
class AALiteralExpression(Expression):
    members: list[AAMember] = field(default_factory=list)


@dataclass
class Parameter(BrsNode):
    name: str = ""
    default: Optional[Expression] = None
    type_name: Optional[str] = None


@dataclass
class FunctionExpression(Expression):
    """
    Anonymous sub/function literal, also the payload of FunctionStatement.

    Attributes:
        kind: "sub" or "function"
        parameters: Declared parameters
        return_type: Text after ``as``, if any
        body: Statements of the routine
    """
    kind: str = "sub"
    parameters: list[Parameter] = field(default_factory=list)
    return_type: Optional[str] = None
    body: "Block" = None


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class Block(Statement):
    statements: list[Statement] = field(default_factory=list)


@dataclass
class AssignmentStatement(Statement):
    """
    ``name = value`` or a compound form such as ``name += value``.

    Attributes:
        target: A VariableExpression or ScopedVariableExpression
        operator: "=", "+=", "-=", ...
    """
    target: Expression = None
    operator: str = "="
    value: Expression = None


@dataclass
class DottedSetStatement(Statement):
    obj: Expression = None
    name: str = ""
    operator: str = "="
    value: Expression = None


@dataclass
class IndexedSetStatement(Statement):
    obj: Expression = None
    index: Expression = None
    operator: str = "="
    value: Expression = None


@dataclass
class IncrementStatement(Statement):
    """
    ``value++`` or ``value--``.

    Attributes:
        value: A variable, dotted or indexed expression
        operator: "++" or "--"
    """
    value: Expression = None
    operator: str = "++"


@dataclass
class DimStatement(Statement):
    """``dim name[d1, d2, ...]``"""
    name: str = ""
    dimensions: list[Expression] = field(default_factory=list)


@dataclass
class ExpressionStatement(Statement):
    expression: Expression = None


@dataclass
class PrintStatement(Statement):
    """
    ``print`` statement.

    Attributes:
        items: Expressions interleaved with the separators ";" and ","
    """
    items: list[Union[Expression, str]] = field(default_factory=list)


@dataclass
class ElseIfClause(BrsNode):
    condition: Expression = None
    body: Block = None


@dataclass
class IfStatement(Statement):
    condition: Expression = None
    then_branch: Block = None
    else_ifs: list[ElseIfClause] = field(default_factory=list)
    else_branch: Optional[Block] = None


@dataclass
class ForStatement(Statement):
    counter: str = ""
    start: Expression = None
    end: Expression = None
    step: Optional[Expression] = None
    body: Block = None


@dataclass
class ForEachStatement(Statement):
    item: str = ""
    target: Expression = None
    body: Block = None


@dataclass
class WhileStatement(Statement):
    condition: Expression = None
    body: Block = None


@dataclass
class ExitStatement(Statement):
    """``exit for`` or ``exit while``."""
    loop: str = "for"


@dataclass
class TryCatchStatement(Statement):
    """
    ``try ... catch name ... end try``.

    Attributes:
        try_block: Statements guarded by the handler
        exception: Name bound to the caught exception
        catch_block: Handler statements
    """
    try_block: Block = None
    exception: str = ""
    catch_block: Block = None


@dataclass
class ThrowStatement(Statement):
    value: Expression = None


@dataclass
class ReturnStatement(Statement):
    value: Optional[Expression] = None


@dataclass
class EndStatement(Statement):
    pass


@dataclass
class StopStatement(Statement):
    pass


@dataclass
class GotoStatement(Statement):
    label: str = ""


@dataclass
class LabelStatement(Statement):
    name: str = ""


@dataclass
class FunctionStatement(Statement):
    """Named routine declaration: ``sub name(...) ... end sub``."""
    name: str = ""
    func: FunctionExpression = None


# =============================================================================
# Visitor Base Class
# =============================================================================

class BrsVisitor:
    """
    Base class for BrightScript AST visitors.

    Dispatches ``visit(node)`` to ``visit_<ClassName>``; unhandled node
    types fall back to ``generic_visit``, which visits every child node.
    """

    def visit(self, node: BrsNode) -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: BrsNode) -> None:
        from haiku_sdk.brs.walker import iter_child_nodes

        for child in iter_child_nodes(node):
            self.visit(child)


# =============================================================================
# Construction Helpers
# =============================================================================

def dotted(root: str, *names: str) -> Expression:
    """Build ``root.a.b`` from a root variable name and member names."""
    expr: Expression = VariableExpression(name=root)
    for name in names:
        expr = DottedGetExpression(obj=expr, name=name)
    return expr


def call(callee: Expression, *args: Expression) -> CallExpression:
    return CallExpression(callee=callee, args=list(args))


def string_literal(value: str) -> LiteralExpression:
    """A BrightScript string literal for ``value`` (quotes doubled)."""
    escaped = value.replace('"', '""')
    return LiteralExpression(text=f'"{escaped}"')
