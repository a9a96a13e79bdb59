"""
haiku-deploy - Compile a Directory of Templates in Place
========================================================

Finds every template under a directory (recursively), writes ``NAME.brs``
and ``NAME.xml`` next to each one and removes the template, leaving a
tree the SceneGraph runtime can load as is.

Usage Examples
--------------
    $ haiku-deploy build/components
    $ haiku-deploy --keep-source build/components
    $ haiku-deploy --dry-run -v build/components
"""

import logging
from pathlib import Path

import click

from haiku_sdk import __version__
from haiku_sdk.cli.errors import handle_cli_exception
from haiku_sdk.compiler import CompilerOptions, HaikuCompiler
from haiku_sdk.compiler.emitter import deploy_directory

logger = logging.getLogger(__name__)


def make_compile_text(options: CompilerOptions):
    """Build the ``(text, name, filename) -> (brs, xml)`` callable deployment uses."""

    def compile_text(text: str, component_name: str, filename: str) -> tuple[str, str]:
        compiler = HaikuCompiler(CompilerOptions(
            component_name=component_name,
            extends=options.extends,
            runtime_uri=options.runtime_uri,
            indent=options.indent,
            source_extension=options.source_extension,
        ))
        result = compiler.compile_source(text, filename)
        return result.brs, result.xml

    return compile_text


@click.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--keep-source",
    is_flag=True,
    help="Do not delete the templates after compiling them",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Compile everything but write and delete nothing",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="haiku-deploy")
def main(directory: Path, keep_source: bool, dry_run: bool, verbose: bool) -> None:
    """
    Compile every template under DIRECTORY in place.

    \b
    Examples:
        haiku-deploy build/components
        haiku-deploy --keep-source build/components
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = CompilerOptions.from_env()
        deployed = deploy_directory(
            directory,
            make_compile_text(options),
            extension=options.source_extension,
            keep_source=keep_source,
            dry_run=dry_run,
        )

        for component in deployed:
            if verbose or dry_run:
                click.echo(f"{component.source} -> {component.brs_path.name}, {component.xml_path.name}")

        verb = "Would deploy" if dry_run else "Deployed"
        click.echo(f"{verb} {len(deployed)} component(s) in {directory}")

    except Exception as e:
        handle_cli_exception(e, verbose, "Deploy")


if __name__ == "__main__":
    main()
