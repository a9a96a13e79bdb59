"""
Haiku Template Abstract Syntax Tree
===================================

The simplified tree the code generator works from: the raw script text
plus the tree of node declarations.

Node Hierarchy
--------------
ProgramAst
├── script: raw BrightScript from the <script> block ("" if absent)
└── nodes: NodeAst[]
    ├── name: node type as written (e.g. "Label")
    ├── attributes: AttributeAst[]
    │   ├── name: full attribute name ("text", "on:buttonSelected", ":focus")
    │   ├── kind: PLAIN | OBSERVABLE | FLAG
    │   └── value: AttributeValue (kind, image) or None
    └── children: NodeAst[]

Attribute classification happens once, when the AST is built:
- ``on:<field>`` with a value is OBSERVABLE
- any attribute without a value, or with the ``:`` prefix, is a FLAG
- everything else is PLAIN
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

OBSERVER_PREFIX = "on:"
FLAG_PREFIX = ":"


# =============================================================================
# Node Definitions
# =============================================================================

class ValueKind(Enum):
    STRING_LITERAL = "StringLiteral"
    DATA_BINDING = "DataBinding"


class AttributeKind(Enum):
    PLAIN = "plain"
    OBSERVABLE = "observable"
    FLAG = "flag"


@dataclass
class AstNode:
    pass


@dataclass
class AttributeValue(AstNode):
    """
    An attribute value.

    Attributes:
        kind: STRING_LITERAL or DATA_BINDING
        image: Source text including the quotes or braces
    """
    kind: ValueKind
    image: str

    @property
    def inner(self) -> str:
        """The image without its delimiters."""
        return self.image[1:-1]


@dataclass
class AttributeAst(AstNode):
    """
    One attribute of a node.

    Attributes:
        name: Full name as written, prefix included
        value: The value, or None for a bare flag
        kind: Classification computed from name and value
        line: Line (1-indexed) of the value, or of the name for flags
    """
    name: str
    value: Optional[AttributeValue] = None
    kind: AttributeKind = AttributeKind.PLAIN
    line: int = field(default=1, compare=False)

    @property
    def field_name(self) -> str:
        """The SceneGraph field the attribute refers to, without prefix."""
        if self.name.startswith(OBSERVER_PREFIX):
            return self.name[len(OBSERVER_PREFIX):]
        if self.name.startswith(FLAG_PREFIX):
            return self.name[len(FLAG_PREFIX):]
        return self.name

    @property
    def enabled(self) -> bool:
        """For flags: a bare flag, ``="true"`` and ``={true}`` are on."""
        if self.value is None:
            return True
        return self.value.inner.strip().lower() == "true"

    @classmethod
    def classify(cls, name: str, value: Optional[AttributeValue], line: int = 1) -> "AttributeAst":
        if value is None or name.startswith(FLAG_PREFIX):
            kind = AttributeKind.FLAG
        elif name.startswith(OBSERVER_PREFIX):
            kind = AttributeKind.OBSERVABLE
        else:
            kind = AttributeKind.PLAIN
        return cls(name=name, value=value, kind=kind, line=line)


@dataclass
class NodeAst(AstNode):
    name: str
    attributes: list[AttributeAst] = field(default_factory=list)
    children: list["NodeAst"] = field(default_factory=list)

    def attributes_of(self, kind: AttributeKind) -> list[AttributeAst]:
        return [attribute for attribute in self.attributes if attribute.kind == kind]


@dataclass
class ProgramAst(AstNode):
    """
    A whole template.

    Attributes:
        script: Raw <script> contents, exactly as authored
        nodes: Top-level node declarations in document order
        script_line: Line (1-indexed) on which the script text starts
    """
    script: str = ""
    nodes: list[NodeAst] = field(default_factory=list)
    script_line: int = 1


# =============================================================================
# Visitor Base Class
# =============================================================================

class AstVisitor:
    """
    Base class for template AST visitors.

    Dispatches ``visit(node)`` to ``visit_<ClassName>``, falling back to
    ``generic_visit`` which visits child nodes.
    """

    def visit(self, node: AstNode) -> Any:
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: AstNode) -> None:
        for field_value in node.__dict__.values():
            if isinstance(field_value, AstNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, AstNode):
                        self.visit(item)


class AstPrinter(AstVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        print(AstPrinter().print(program))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: AstNode) -> str:
        """Print the AST and return it as a string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        self.output.append(f"{'  ' * self.indent_level}{text}")

    def visit_ProgramAst(self, node: ProgramAst):
        self._emit("Program")
        self.indent_level += 1
        if node.script.strip():
            lines = node.script.strip("\n").splitlines()
            self._emit(f"Script (line {node.script_line}, {len(lines)} lines)")
            self.indent_level += 1
            for line in lines:
                self._emit(f"| {line.strip()}")
            self.indent_level -= 1
        for child in node.nodes:
            self.visit(child)
        self.indent_level -= 1

    def visit_NodeAst(self, node: NodeAst):
        self._emit(f"Node: {node.name}")
        self.indent_level += 1
        for attribute in node.attributes:
            self.visit(attribute)
        for child in node.children:
            self.visit(child)
        self.indent_level -= 1

    def visit_AttributeAst(self, node: AttributeAst):
        if node.value is None:
            self._emit(f"Attribute ({node.kind.value}): {node.name}")
        else:
            self._emit(f"Attribute ({node.kind.value}): {node.name} = {node.value.image}")
