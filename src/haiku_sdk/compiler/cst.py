"""
Haiku Concrete Syntax Tree
==========================

One node per grammar rule invocation, holding the tokens it consumed.
The tree only lives between the parser and the AST builder.

    ProgramStatement        := ScriptStatement? NodeStatement*
    ScriptStatement         := SCRIPT
    NodeStatement           := '<' NodeName NodeAttributeStatement*
                               ( '/>' | '>' NodeStatement* '</' NodeName '>' )
    NodeAttributeStatement  := NodeAttribute ( '=' (StringLiteral | DataBinding) )?
"""

from dataclasses import dataclass, field
from typing import Optional

from haiku_sdk.compiler.lexer import Token


@dataclass
class CstNode:
    pass


@dataclass
class ScriptStatement(CstNode):
    script: Token = None


@dataclass
class NodeAttributeStatement(CstNode):
    attribute: Token = None
    equal: Optional[Token] = None
    value: Optional[Token] = None


@dataclass
class NodeStatement(CstNode):
    """
    A node declaration.

    Self-closing nodes set ``slash_greater``; the open/close form sets
    ``greater`` and the three closing-tag tokens.
    """
    less: Token = None
    name: Token = None
    attributes: list[NodeAttributeStatement] = field(default_factory=list)
    slash_greater: Optional[Token] = None
    greater: Optional[Token] = None
    children: list["NodeStatement"] = field(default_factory=list)
    less_slash: Optional[Token] = None
    closing_name: Optional[Token] = None
    closing_greater: Optional[Token] = None

    @property
    def self_closing(self) -> bool:
        return self.slash_greater is not None


@dataclass
class ProgramStatement(CstNode):
    script: Optional[ScriptStatement] = None
    nodes: list[NodeStatement] = field(default_factory=list)
