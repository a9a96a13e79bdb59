"""
Haiku SDK - Template Compiler for Roku SceneGraph Components
============================================================

Haiku is a compact markup + script language for SceneGraph components.
A ``.haiku`` file holds an optional BrightScript ``<script>`` block and a
tree of nodes; the compiler turns it into the ``.brs`` and ``.xml`` files
the Roku runtime loads.

Main Components
---------------
- **compiler**: the template compiler (haikuc)
    Lexer, parser, AST builder, code generator and emitter

- **brs**: BrightScript service
    Parses <script> blocks and bindings, walks and re-renders the AST

- **cli**: command-line tools
    ``haikuc`` compiles one template; ``haiku-deploy`` compiles a whole
    directory in place

Quick Start
-----------
    >>> from haiku_sdk import compile_haiku
    >>> result = compile_haiku('<Label text="hello"/>', component_name="Hello")
    >>> print(result.xml)

Or from the shell:
    $ haikuc components/Hello.haiku
    $ haiku-deploy build/components
"""

__version__ = "0.1.0"

from haiku_sdk.errors import (
    HaikuError,
    SourceLocation,
    ScriptError,
    ScriptSyntaxError,
    DeployError,
)
from haiku_sdk.compiler import (
    HaikuCompiler,
    CompilerOptions,
    CompilerResult,
    compile_haiku,
    compile_file,
)

__all__ = [
    "__version__",
    "HaikuError",
    "SourceLocation",
    "ScriptError",
    "ScriptSyntaxError",
    "DeployError",
    "HaikuCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_haiku",
    "compile_file",
]
