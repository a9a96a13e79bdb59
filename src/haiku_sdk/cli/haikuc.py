"""
haikuc - Haiku Template Compiler Command-Line Interface
=======================================================

Compiles one Haiku template into a SceneGraph component: ``NAME.brs``
with the component's routines and ``NAME.xml`` declaring it.

Usage Examples
--------------
Basic compilation (writes App.brs and App.xml next to App.haiku):
    $ haikuc components/App.haiku

Into another directory:
    $ haikuc components/App.haiku -o build/components

Inspect the pipeline:
    $ haikuc --tokens App.haiku
    $ haikuc --ast App.haiku

Verbose mode:
    $ haikuc -v App.haiku
"""

import logging
from pathlib import Path
from typing import Optional

import click

from haiku_sdk import __version__
from haiku_sdk.cli.errors import handle_cli_exception
from haiku_sdk.compiler import AstPrinter, CompilerOptions, HaikuCompiler, HaikuLexer

logger = logging.getLogger(__name__)


def format_tokens(source: str) -> str:
    """One line per token: ``line:col Kind 'text'`` (one-based positions)."""
    lines = []
    for token in HaikuLexer(source).scan().tokens:
        start = token.range.start
        lines.append(f"{start.line + 1}:{start.character + 1} {token.kind.value} {token.text!r}")
    return "\n".join(lines)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for NAME.brs and NAME.xml (default: next to the input)",
)
@click.option(
    "--name",
    help="Component name (default: input file name without extension)",
)
@click.option(
    "--extends",
    help="SceneGraph node type the component extends (default: Group)",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the template AST and exit (for debugging)",
)
@click.option(
    "--stdout",
    "to_stdout",
    is_flag=True,
    help="Print both artifacts instead of writing them",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="haikuc")
def main(
    input_file: Path,
    output_dir: Optional[Path],
    name: Optional[str],
    extends: Optional[str],
    tokens: bool,
    ast: bool,
    to_stdout: bool,
    verbose: bool,
) -> None:
    """
    Compile a Haiku template into a SceneGraph component.

    INPUT_FILE is the template (.haiku) to compile.

    \b
    Examples:
        haikuc App.haiku                 # Writes App.brs and App.xml
        haikuc App.haiku -o out/         # Into out/
        haikuc App.haiku --name Main     # Component "Main"
        haikuc --ast App.haiku           # Dump the AST

    \b
    Environment:
        HAIKU_EXTENDS, HAIKU_RUNTIME_URI, HAIKU_SOURCE_EXTENSION
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        source = input_file.read_text(encoding="utf-8")

        if tokens:
            click.echo(format_tokens(source))
            return

        options = CompilerOptions.from_env(
            component_name=name or input_file.stem,
            extends=extends,
        )
        logger.debug(f"compiling {input_file} as {options.component_name} extends {options.extends}")

        result = HaikuCompiler(options).compile_source(source, str(input_file))

        if ast:
            click.echo(AstPrinter().print(result.ast))
            return

        if to_stdout:
            click.echo(result.brs)
            click.echo(result.xml)
            return

        target = output_dir or input_file.parent
        target.mkdir(parents=True, exist_ok=True)
        brs_path = target / f"{result.component_name}.brs"
        xml_path = target / f"{result.component_name}.xml"
        brs_path.write_text(result.brs, encoding="utf-8")
        xml_path.write_text(result.xml, encoding="utf-8")

        if verbose:
            click.echo(f"Tokenized: {len(result.tokens)} tokens")
            click.echo(f"Routines: {len(result.component.routines)}")
        click.echo(f"Compiled {input_file} -> {brs_path}, {xml_path}")

    except Exception as e:
        handle_cli_exception(e, verbose, "Compilation")


if __name__ == "__main__":
    main()
