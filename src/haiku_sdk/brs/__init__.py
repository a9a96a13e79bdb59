"""
BrightScript Host-Script Service
================================

Parses, walks and re-renders the BrightScript found in Haiku ``<script>``
blocks and data bindings.

Components
----------
- BrsLexer: Tokenizes BrightScript source
- BrsParser: Builds the statement/expression AST
- BrsPrinter: Renders any node back to source text
- walk / instance_references / instance_target: tree queries

Example Usage
-------------
>>> from haiku_sdk.brs import parse_script, render
>>> statements = parse_script("m.count = 0")
>>> render(statements)
'm.count = 0'
"""

from haiku_sdk.brs.lexer import BrsLexer, BrsToken, BrsTokenType
from haiku_sdk.brs.parser import BrsParser, parse_expression, parse_script
from haiku_sdk.brs.printer import BrsPrinter, render
from haiku_sdk.brs.walker import (
    RESERVED_INSTANCE_FIELDS,
    assigned_name,
    instance_references,
    instance_target,
    iter_child_nodes,
    walk,
)

__all__ = [
    "BrsLexer",
    "BrsToken",
    "BrsTokenType",
    "BrsParser",
    "BrsPrinter",
    "parse_script",
    "parse_expression",
    "render",
    "walk",
    "iter_child_nodes",
    "instance_references",
    "instance_target",
    "assigned_name",
    "RESERVED_INSTANCE_FIELDS",
]
