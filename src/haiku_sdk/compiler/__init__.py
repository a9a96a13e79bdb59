"""
Haiku Template Compiler
=======================

Compiles Haiku templates (``.haiku``) into Roku SceneGraph components:
a BrightScript file with the component's ``init`` routine and handlers,
and the component XML that declares it.

Pipeline
--------
    Template → Lexer → Parser → CST → AST Builder → AST
             → Code Generator (+ reactivity pass) → Emitter → .brs + .xml

Usage
-----
>>> from haiku_sdk.compiler import compile_haiku
>>> result = compile_haiku('''
... <script>
...     m.count = 0
...     sub increment()
...         m.count += 1
...     end sub
... </script>
... <Label text="Count: {m.count}" />
... ''', component_name="Counter")
>>> "sub __update__()" in result.brs
True

Template Language
-----------------
- ``<Node attr="text {expr}" other={expr} />`` creates and configures nodes
- ``on:<field>="handler"`` or ``on:<field>={sub () ... end sub}`` observes
  a field
- ``:focus`` marks the node that takes the initial focus
- an optional leading ``<script>`` block holds BrightScript
"""

from haiku_sdk.compiler.compiler import (
    CompilerOptions,
    CompilerResult,
    HaikuCompiler,
    compile_file,
    compile_haiku,
)
from haiku_sdk.compiler.lexer import HaikuLexer, LexResult, Token, TokenKind
from haiku_sdk.compiler.parser import HaikuParser
from haiku_sdk.compiler.builder import to_ast
from haiku_sdk.compiler.ast import AstPrinter, AttributeAst, AttributeKind, NodeAst, ProgramAst
from haiku_sdk.compiler.generator import CodeGenerator, GeneratedComponent
from haiku_sdk.compiler.diagnostics import Diagnostic, DiagnosticSeverity
from haiku_sdk.compiler.errors import (
    TemplateError,
    TemplateSyntaxError,
    TemplateSemanticError,
    TemplateCompilationError,
    UnexpectedTokenError,
    MissingTokenError,
    MismatchedTagError,
    CodeGenError,
    InternalCompilerError,
)

__all__ = [
    "HaikuCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_haiku",
    "compile_file",
    "HaikuLexer",
    "LexResult",
    "Token",
    "TokenKind",
    "HaikuParser",
    "to_ast",
    "AstPrinter",
    "ProgramAst",
    "NodeAst",
    "AttributeAst",
    "AttributeKind",
    "CodeGenerator",
    "GeneratedComponent",
    "Diagnostic",
    "DiagnosticSeverity",
    "TemplateError",
    "TemplateSyntaxError",
    "TemplateSemanticError",
    "TemplateCompilationError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "MismatchedTagError",
    "CodeGenError",
    "InternalCompilerError",
]
