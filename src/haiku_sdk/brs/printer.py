"""
BrightScript Printer
====================

Renders BrightScript AST nodes back to source text. Used once, at the end
of code generation, to turn the generated init routine and callables into
the ``.brs`` artifact.

Output conventions:
- one statement per line, blocks indented with the configured indent
- keyword operators in lowercase (``and``, ``or``, ``not``, ``mod``)
- the ternary ``c ? a : b`` becomes ``bslib_ternary(c, a, b)``

The printer records every ``bslib_`` runtime helper the output calls in
``helpers_used``, so the caller can decide whether to import the runtime.
"""

from typing import Union

from haiku_sdk.brs.ast import (
    AALiteralExpression,
    ArrayLiteralExpression,
    AssignmentStatement,
    BinaryExpression,
    Block,
    BrsNode,
    BrsVisitor,
    CallExpression,
    DimStatement,
    DottedGetExpression,
    DottedSetStatement,
    EndStatement,
    ExitStatement,
    Expression,
    ExpressionStatement,
    ForEachStatement,
    ForStatement,
    FunctionExpression,
    FunctionStatement,
    GotoStatement,
    GroupingExpression,
    IfStatement,
    IncrementStatement,
    IndexedGetExpression,
    IndexedSetStatement,
    LabelStatement,
    LiteralExpression,
    Parameter,
    PrintStatement,
    ReturnStatement,
    ScopedVariableExpression,
    Statement,
    StopStatement,
    TernaryExpression,
    ThrowStatement,
    TryCatchStatement,
    UnaryExpression,
    VariableExpression,
    WhileStatement,
)

RUNTIME_HELPER_PREFIX = "bslib_"
TERNARY_HELPER = "bslib_ternary"


class BrsPrinter(BrsVisitor):
    """
    Renders statements and expressions to BrightScript source.

    Expression visitors return a string; statement visitors return a list
    of already-indented lines.
    """

    def __init__(self, indent: str = "\t"):
        self.indent = indent
        self.helpers_used: set[str] = set()
        self._level = 0

    def render(self, node: Union[BrsNode, list[Statement]]) -> str:
        """Render a node, or a list of statements, to source text."""
        if isinstance(node, list):
            return "\n".join(line for statement in node for line in self.visit(statement))
        if isinstance(node, Expression):
            return self.visit(node)
        return "\n".join(self.visit(node))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _line(self, text: str) -> list[str]:
        return [f"{self.indent * self._level}{text}"]

    def _body(self, block: Block) -> list[str]:
        if block is None:
            return []
        self._level += 1
        try:
            return self.visit(block)
        finally:
            self._level -= 1

    def _parameters(self, parameters: list[Parameter]) -> str:
        rendered = []
        for param in parameters:
            text = param.name
            if param.default is not None:
                text += f" = {self.visit(param.default)}"
            if param.type_name:
                text += f" as {param.type_name}"
            rendered.append(text)
        return ", ".join(rendered)

    def _routine(self, header: str, func: FunctionExpression) -> list[str]:
        signature = f"{header}({self._parameters(func.parameters)})"
        if func.return_type:
            signature += f" as {func.return_type}"
        lines = self._line(signature)
        lines.extend(self._body(func.body))
        lines.extend(self._line(f"end {func.kind}"))
        return lines

    # =========================================================================
    # Expressions
    # =========================================================================

    def visit_LiteralExpression(self, node: LiteralExpression) -> str:
        return node.text

    def visit_VariableExpression(self, node: VariableExpression) -> str:
        return node.name

    def visit_ScopedVariableExpression(self, node: ScopedVariableExpression) -> str:
        return node.variable.qualified

    def visit_DottedGetExpression(self, node: DottedGetExpression) -> str:
        return f"{self.visit(node.obj)}.{node.name}"

    def visit_IndexedGetExpression(self, node: IndexedGetExpression) -> str:
        return f"{self.visit(node.obj)}[{self.visit(node.index)}]"

    def visit_CallExpression(self, node: CallExpression) -> str:
        if isinstance(node.callee, VariableExpression) and node.callee.name.lower().startswith(RUNTIME_HELPER_PREFIX):
            self.helpers_used.add(node.callee.name.lower())
        args = ", ".join(self.visit(arg) for arg in node.args)
        return f"{self.visit(node.callee)}({args})"

    def visit_BinaryExpression(self, node: BinaryExpression) -> str:
        return f"{self.visit(node.left)} {node.operator} {self.visit(node.right)}"

    def visit_UnaryExpression(self, node: UnaryExpression) -> str:
        if node.operator.lower() == "not":
            return f"not {self.visit(node.operand)}"
        return f"{node.operator}{self.visit(node.operand)}"

    def visit_GroupingExpression(self, node: GroupingExpression) -> str:
        return f"({self.visit(node.expression)})"

    def visit_TernaryExpression(self, node: TernaryExpression) -> str:
        self.helpers_used.add(TERNARY_HELPER)
        condition = self.visit(node.condition)
        consequent = self.visit(node.consequent)
        alternate = self.visit(node.alternate)
        return f"{TERNARY_HELPER}({condition}, {consequent}, {alternate})"

    def visit_ArrayLiteralExpression(self, node: ArrayLiteralExpression) -> str:
        return "[" + ", ".join(self.visit(element) for element in node.elements) + "]"

    def visit_AALiteralExpression(self, node: AALiteralExpression) -> str:
        if not node.members:
            return "{}"
        members = ", ".join(f"{member.key}: {self.visit(member.value)}" for member in node.members)
        return "{ " + members + " }"

    def visit_FunctionExpression(self, node: FunctionExpression) -> str:
        # The first line is placed by the enclosing statement.
        lines = self._routine(f"{node.kind} ", node)
        lines[0] = lines[0].lstrip()
        return "\n".join(lines)

    # =========================================================================
    # Statements
    # =========================================================================

    def visit_Block(self, node: Block) -> list[str]:
        lines = []
        for statement in node.statements:
            lines.extend(self.visit(statement))
        return lines

    def visit_AssignmentStatement(self, node: AssignmentStatement) -> list[str]:
        return self._line(f"{self.visit(node.target)} {node.operator} {self.visit(node.value)}")

    def visit_DottedSetStatement(self, node: DottedSetStatement) -> list[str]:
        return self._line(f"{self.visit(node.obj)}.{node.name} {node.operator} {self.visit(node.value)}")

    def visit_IndexedSetStatement(self, node: IndexedSetStatement) -> list[str]:
        target = f"{self.visit(node.obj)}[{self.visit(node.index)}]"
        return self._line(f"{target} {node.operator} {self.visit(node.value)}")

    def visit_IncrementStatement(self, node: IncrementStatement) -> list[str]:
        return self._line(f"{self.visit(node.value)}{node.operator}")

    def visit_DimStatement(self, node: DimStatement) -> list[str]:
        dimensions = ", ".join(self.visit(dimension) for dimension in node.dimensions)
        return self._line(f"dim {node.name}[{dimensions}]")

    def visit_ExpressionStatement(self, node: ExpressionStatement) -> list[str]:
        return self._line(self.visit(node.expression))

    def visit_PrintStatement(self, node: PrintStatement) -> list[str]:
        text = "print"
        for item in node.items:
            if isinstance(item, str):
                text += item
            else:
                text += f" {self.visit(item)}"
        return self._line(text)

    def visit_IfStatement(self, node: IfStatement) -> list[str]:
        lines = self._line(f"if {self.visit(node.condition)} then")
        lines.extend(self._body(node.then_branch))
        for clause in node.else_ifs:
            lines.extend(self._line(f"else if {self.visit(clause.condition)} then"))
            lines.extend(self._body(clause.body))
        if node.else_branch is not None:
            lines.extend(self._line("else"))
            lines.extend(self._body(node.else_branch))
        lines.extend(self._line("end if"))
        return lines

    def visit_ForStatement(self, node: ForStatement) -> list[str]:
        header = f"for {node.counter} = {self.visit(node.start)} to {self.visit(node.end)}"
        if node.step is not None:
            header += f" step {self.visit(node.step)}"
        lines = self._line(header)
        lines.extend(self._body(node.body))
        lines.extend(self._line("end for"))
        return lines

    def visit_ForEachStatement(self, node: ForEachStatement) -> list[str]:
        lines = self._line(f"for each {node.item} in {self.visit(node.target)}")
        lines.extend(self._body(node.body))
        lines.extend(self._line("end for"))
        return lines

    def visit_WhileStatement(self, node: WhileStatement) -> list[str]:
        lines = self._line(f"while {self.visit(node.condition)}")
        lines.extend(self._body(node.body))
        lines.extend(self._line("end while"))
        return lines

    def visit_TryCatchStatement(self, node: TryCatchStatement) -> list[str]:
        lines = self._line("try")
        lines.extend(self._body(node.try_block))
        lines.extend(self._line(f"catch {node.exception}"))
        lines.extend(self._body(node.catch_block))
        lines.extend(self._line("end try"))
        return lines

    def visit_ThrowStatement(self, node: ThrowStatement) -> list[str]:
        return self._line(f"throw {self.visit(node.value)}")

    def visit_ExitStatement(self, node: ExitStatement) -> list[str]:
        return self._line(f"exit {node.loop}")

    def visit_ReturnStatement(self, node: ReturnStatement) -> list[str]:
        if node.value is None:
            return self._line("return")
        return self._line(f"return {self.visit(node.value)}")

    def visit_EndStatement(self, node: EndStatement) -> list[str]:
        return self._line("end")

    def visit_StopStatement(self, node: StopStatement) -> list[str]:
        return self._line("stop")

    def visit_GotoStatement(self, node: GotoStatement) -> list[str]:
        return self._line(f"goto {node.label}")

    def visit_LabelStatement(self, node: LabelStatement) -> list[str]:
        return self._line(f"{node.name}:")

    def visit_FunctionStatement(self, node: FunctionStatement) -> list[str]:
        return self._routine(f"{node.func.kind} {node.name}", node.func)

    def generic_visit(self, node: BrsNode):
        raise TypeError(f"cannot render {type(node).__name__}")


def render(node: Union[BrsNode, list[Statement]], indent: str = "\t") -> str:
    """Render ``node`` with a fresh printer."""
    return BrsPrinter(indent).render(node)
