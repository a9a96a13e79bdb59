"""
Output Emitter
==============

Renders a GeneratedComponent to its two artifacts and, for deployment,
writes them to disk.

- ``NAME.brs``: init, script routines, node routines and ``__update__``,
  separated by blank lines
- ``NAME.xml``: the SceneGraph component descriptor

    <?xml version="1.0" encoding="UTF-8"?>
    <component name="NAME" extends="Group">
        <script type="text/brightscript" uri="NAME.brs"/>
        <script type="text/brightscript" uri="pkg:/source/bslib.brs"/>
        <interface>
            <function name="__set_initial_focus__" />
        </interface>
    </component>

The runtime import is only present when the script calls a ``bslib_``
helper; the interface block only when there are public functions.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable
from xml.sax.saxutils import quoteattr

from haiku_sdk.errors import DeployError
from haiku_sdk.brs import BrsPrinter
from haiku_sdk.compiler.generator import GeneratedComponent

logger = logging.getLogger(__name__)

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>'
SCRIPT_TYPE = "text/brightscript"


@dataclass
class RenderedScript:
    """
    Attributes:
        text: The ``.brs`` source ("" when nothing was generated)
        helpers_used: ``bslib_`` helpers the source calls
    """
    text: str
    helpers_used: set[str]


def render_init_script(component: GeneratedComponent, indent: str = "\t") -> RenderedScript:
    """Render every routine of ``component``, separated by blank lines."""
    printer = BrsPrinter(indent)
    text = "\n\n".join(printer.render(routine) for routine in component.routines)
    return RenderedScript(text=text, helpers_used=set(printer.helpers_used))


def render_interface_descriptor(
    component_name: str,
    public_functions: Iterable[str],
    import_uris: Iterable[str],
    extends: str = "Group",
    indent: str = "\t",
) -> str:
    """Render the component XML."""
    lines = [
        XML_HEADER,
        f"<component name={quoteattr(component_name)} extends={quoteattr(extends)}>",
    ]
    for uri in import_uris:
        lines.append(f'{indent}<script type="{SCRIPT_TYPE}" uri={quoteattr(uri)}/>')

    functions = list(public_functions)
    if functions:
        lines.append(f"{indent}<interface>")
        for name in functions:
            lines.append(f"{indent * 2}<function name={quoteattr(name)} />")
        lines.append(f"{indent}</interface>")

    lines.append("</component>")
    return "\n".join(lines)


# =============================================================================
# Deployment
# =============================================================================

@dataclass
class DeployedComponent:
    source: Path
    brs_path: Path
    xml_path: Path
    removed_source: bool = False


def find_sources(directory: Path, extension: str = ".haiku") -> list[Path]:
    """All template files under ``directory``, sorted."""
    return sorted(path for path in directory.rglob(f"*{extension}") if path.is_file())


def _write(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise DeployError(str(path), e.strerror or str(e)) from e


def deploy_file(
    source: Path,
    compile_text: Callable[[str, str, str], tuple[str, str]],
    keep_source: bool = False,
    dry_run: bool = False,
) -> DeployedComponent:
    """
    Compile one template and write its artifacts next to it.

    Args:
        source: The template file
        compile_text: ``(text, component_name, filename) -> (brs, xml)``
        keep_source: Leave the template in place
        dry_run: Compile but write and remove nothing

    Raises:
        DeployError: If reading, writing or removing fails
        HaikuError: If the template does not compile
    """
    name = source.stem
    deployed = DeployedComponent(
        source=source,
        brs_path=source.with_name(f"{name}.brs"),
        xml_path=source.with_name(f"{name}.xml"),
    )

    try:
        text = source.read_text(encoding="utf-8")
    except OSError as e:
        raise DeployError(str(source), e.strerror or str(e)) from e

    brs, xml = compile_text(text, name, str(source))
    if dry_run:
        logger.debug(f"dry run: would write {deployed.brs_path} and {deployed.xml_path}")
        return deployed

    _write(deployed.brs_path, brs)
    _write(deployed.xml_path, xml)

    if not keep_source:
        try:
            source.unlink()
        except OSError as e:
            raise DeployError(str(source), e.strerror or str(e)) from e
        deployed.removed_source = True

    logger.debug(f"deployed {source} -> {deployed.brs_path.name}, {deployed.xml_path.name}")
    return deployed


def deploy_directory(
    directory: Path,
    compile_text: Callable[[str, str, str], tuple[str, str]],
    extension: str = ".haiku",
    keep_source: bool = False,
    dry_run: bool = False,
) -> list[DeployedComponent]:
    """
    Deploy every template under ``directory``.

    Each file is compiled on its own; the first failure stops the run.
    """
    if not directory.is_dir():
        raise DeployError(str(directory), "not a directory")

    sources = find_sources(directory, extension)
    logger.debug(f"found {len(sources)} template(s) under {directory}")
    return [deploy_file(source, compile_text, keep_source, dry_run) for source in sources]
