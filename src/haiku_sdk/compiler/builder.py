"""
CST to AST Builder
==================

Walks the concrete syntax tree and produces the ProgramAst used by the
code generator. Pure transformation: no side effects, no validation.
"""

from haiku_sdk.compiler.lexer import SCRIPT_CLOSE, SCRIPT_OPEN, TokenKind
from haiku_sdk.compiler.cst import (
    CstNode,
    NodeAttributeStatement,
    NodeStatement,
    ProgramStatement,
    ScriptStatement,
)
from haiku_sdk.compiler.ast import (
    AttributeAst,
    AttributeValue,
    NodeAst,
    ProgramAst,
    ValueKind,
)

VALUE_KINDS = {
    TokenKind.STRING_LITERAL: ValueKind.STRING_LITERAL,
    TokenKind.DATA_BINDING: ValueKind.DATA_BINDING,
}


class AstBuilder:
    """Visitor over CST nodes; ``visit(cst)`` returns the matching AST node."""

    def visit(self, node: CstNode):
        method = getattr(self, f"visit_{node.__class__.__name__}")
        return method(node)

    def visit_ProgramStatement(self, node: ProgramStatement) -> ProgramAst:
        program = ProgramAst(nodes=[self.visit(child) for child in node.nodes])
        if node.script is not None:
            program.script = self.visit(node.script)
            program.script_line = node.script.script.range.start.line + 1
        return program

    def visit_ScriptStatement(self, node: ScriptStatement) -> str:
        return node.script.text.replace(SCRIPT_OPEN, "").replace(SCRIPT_CLOSE, "")

    def visit_NodeStatement(self, node: NodeStatement) -> NodeAst:
        return NodeAst(
            name=node.name.text,
            attributes=[self.visit(attribute) for attribute in node.attributes],
            children=[self.visit(child) for child in node.children],
        )

    def visit_NodeAttributeStatement(self, node: NodeAttributeStatement) -> AttributeAst:
        value = None
        line_token = node.attribute
        if node.value is not None:
            value = AttributeValue(kind=VALUE_KINDS[node.value.kind], image=node.value.text)
            line_token = node.value
        return AttributeAst.classify(node.attribute.text, value, line_token.range.start.line + 1)


def to_ast(cst: ProgramStatement) -> ProgramAst:
    """Convert a parsed program to its AST."""
    return AstBuilder().visit(cst)
