"""
Haiku Compiler Main Module
==========================

Main entry point of the template compiler. It runs the whole pipeline
for one template:

    Source → Lex → Parse → Build AST → Generate → Emit (.brs + .xml)

Usage
-----
Command line:
    $ haikuc components/App.haiku

Programmatic:
    >>> from haiku_sdk.compiler import compile_haiku
    >>> result = compile_haiku('<Label text="hello"/>', component_name="App")
    >>> print(result.brs)
    sub init()
        label = CreateObject("roSGNode", "Label")
        label.text = "hello"
        m.top.appendChild(label)
    end sub

Error Handling
--------------
Lexer diagnostics and parser errors are collected together and reported
at once. Errors from script parsing and code generation stop compilation
of the unit immediately.

Each call builds its own lexer, parser, scopes and dependency graph, so
independent templates can be compiled in parallel.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from haiku_sdk.errors import HaikuError
from haiku_sdk.compiler.lexer import HaikuLexer, LexResult, Token
from haiku_sdk.compiler.parser import HaikuParser
from haiku_sdk.compiler.cst import ProgramStatement
from haiku_sdk.compiler.builder import to_ast
from haiku_sdk.compiler.ast import ProgramAst
from haiku_sdk.compiler.diagnostics import Diagnostic
from haiku_sdk.compiler.generator import CodeGenerator, GeneratedComponent
from haiku_sdk.compiler.emitter import render_init_script, render_interface_descriptor
from haiku_sdk.compiler.errors import ErrorCollector

logger = logging.getLogger(__name__)

DEFAULT_COMPONENT_NAME = "HaikuComponent"
DEFAULT_RUNTIME_URI = "pkg:/source/bslib.brs"


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        component_name: Name of the generated component
        extends: SceneGraph node type the component extends
        runtime_uri: Import for the ``bslib_`` runtime helpers
        script_uri: Import for the generated script; None means
                    ``<component_name>.brs``
        indent: Indentation used in both artifacts
        fail_on_error: Raise TemplateCompilationError on lexer/parser errors
                       instead of returning an unsuccessful result
        source_extension: Extension of template files
    """
    component_name: str = DEFAULT_COMPONENT_NAME
    extends: str = "Group"
    runtime_uri: str = DEFAULT_RUNTIME_URI
    script_uri: Optional[str] = None
    indent: str = "\t"
    fail_on_error: bool = True
    source_extension: str = ".haiku"

    def __post_init__(self):
        if not self.source_extension.startswith("."):
            self.source_extension = f".{self.source_extension}"

    @property
    def resolved_script_uri(self) -> str:
        return self.script_uri or f"{self.component_name}.brs"

    @classmethod
    def from_env(cls, **overrides) -> "CompilerOptions":
        """
        Create options from environment variables, then apply ``overrides``.

        Environment variables (all optional):
            HAIKU_EXTENDS: Base node type (e.g. "Group", "Scene")
            HAIKU_RUNTIME_URI: Runtime helper import
            HAIKU_SOURCE_EXTENSION: Template file extension
        """
        values = {}
        if extends := os.environ.get("HAIKU_EXTENDS"):
            values["extends"] = extends
        if runtime_uri := os.environ.get("HAIKU_RUNTIME_URI"):
            values["runtime_uri"] = runtime_uri
        if extension := os.environ.get("HAIKU_SOURCE_EXTENSION"):
            values["source_extension"] = extension
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        component_name: Name of the generated component
        success: True if compilation succeeded
        brs: Generated BrightScript ("" when there is nothing to run)
        xml: Generated component XML
        tokens: Lexer output
        diagnostics: Lexer diagnostics
        ast: Template AST (if parsing succeeded)
        component: Generated routines before rendering
        errors: Collected errors
    """
    filename: str = ""
    component_name: str = ""
    success: bool = False
    brs: str = ""
    xml: str = ""
    tokens: list[Token] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    ast: Optional[ProgramAst] = None
    component: Optional[GeneratedComponent] = None
    errors: list[HaikuError] = field(default_factory=list)


class HaikuCompiler:
    """
    Compiler for Haiku templates.

    Example:
        compiler = HaikuCompiler(CompilerOptions(component_name="App"))
        result = compiler.compile_file("App.haiku")
        print(result.xml)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(
        self,
        source: str,
        filename: str = "<input>",
        component_name: Optional[str] = None,
    ) -> CompilerResult:
        """
        Compile template source.

        Args:
            source: Template text
            filename: Source filename for error messages
            component_name: Name for this compilation only; defaults to
                the configured name

        Returns:
            CompilerResult with both artifacts

        Raises:
            TemplateCompilationError: On lexer/parser errors when
                ``fail_on_error`` is set
            ScriptSyntaxError: If the script or a binding is malformed
            TemplateError: If code generation fails
        """
        options = self.options
        if component_name is not None:
            options = replace(options, component_name=component_name)

        errors = ErrorCollector()
        result = CompilerResult(filename=filename, component_name=options.component_name)
        source_lines = source.splitlines()

        lexed = self._lex(source)
        result.tokens = lexed.tokens
        result.diagnostics = lexed.diagnostics
        for diagnostic in lexed.diagnostics:
            if diagnostic.is_error:
                errors.add(diagnostic.to_error(filename, source_lines))
            else:
                errors.add_warning(
                    diagnostic.message,
                    diagnostic.to_error(filename).location,
                )

        cst, parse_errors = self._parse(lexed.tokens, filename, source_lines)
        for error in parse_errors:
            if errors.should_stop():
                break
            errors.add(error)

        if errors.has_errors():
            result.errors = list(errors.errors)
            if options.fail_on_error:
                errors.raise_if_errors()
            return result

        result.ast = to_ast(cst)
        result.component = self._generate(result.ast, filename)
        result.brs, result.xml = self._emit(result.component, options)
        result.success = True
        return result

    def compile_file(self, filepath: str) -> CompilerResult:
        """
        Compile a template file. The component is named after the file
        unless a name was configured explicitly.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        component_name = self.options.component_name
        if component_name == DEFAULT_COMPONENT_NAME:
            component_name = path.stem

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath), component_name)

    def generate(self, source: str, component_name: Optional[str] = None) -> tuple[str, str]:
        """
        Compile ``source`` and return ``(xml, brs)``.

        Args:
            source: Template text
            component_name: Name for this compilation; defaults to the
                configured name
        """
        result = self.compile_source(source, component_name=component_name)
        return result.xml, result.brs

    # =========================================================================
    # Pipeline Stages
    # =========================================================================

    def _lex(self, source: str) -> LexResult:
        return HaikuLexer().scan(source)

    def _parse(
        self, tokens: list[Token], filename: str, source_lines: list[str]
    ) -> tuple[ProgramStatement, list]:
        parser = HaikuParser(tokens, filename, source_lines)
        cst = parser.program_statement()
        return cst, parser.errors

    def _generate(self, ast: ProgramAst, filename: str) -> GeneratedComponent:
        return CodeGenerator(filename).generate(ast)

    def _emit(self, component: GeneratedComponent, options: CompilerOptions) -> tuple[str, str]:
        script = render_init_script(component, options.indent)

        imports = [options.resolved_script_uri]
        if script.helpers_used:
            imports.append(options.runtime_uri)

        xml = render_interface_descriptor(
            options.component_name,
            component.public_functions,
            imports,
            extends=options.extends,
            indent=options.indent,
        )
        logger.debug(
            f"{options.component_name}: {len(component.routines)} routines, "
            f"helpers {sorted(script.helpers_used) or 'none'}"
        )
        return script.text, xml


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_haiku(
    source: str,
    component_name: str = DEFAULT_COMPONENT_NAME,
    filename: str = "<input>",
    **options,
) -> CompilerResult:
    """
    Compile template source with the given options.

    Example:
        >>> result = compile_haiku('<Label text="hello"/>', "App")
        >>> result.xml.splitlines()[1]
        '<component name="App" extends="Group">'
    """
    compiler = HaikuCompiler(CompilerOptions(component_name=component_name, **options))
    return compiler.compile_source(source, filename)


def compile_file(filepath: str, output_dir: Optional[str] = None, **options) -> CompilerResult:
    """
    Compile a template file and write ``NAME.brs`` and ``NAME.xml``.

    Nothing is written when compilation fails.

    Args:
        filepath: Path to the template
        output_dir: Directory for the artifacts (default: next to the template)
    """
    compiler = HaikuCompiler(CompilerOptions(**options))
    result = compiler.compile_file(filepath)
    if not result.success:
        return result

    target = Path(output_dir) if output_dir else Path(filepath).parent
    target.mkdir(parents=True, exist_ok=True)
    (target / f"{result.component_name}.brs").write_text(result.brs, encoding="utf-8")
    (target / f"{result.component_name}.xml").write_text(result.xml, encoding="utf-8")
    return result
