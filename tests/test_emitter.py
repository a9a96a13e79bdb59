"""
Output Emitter Test Suite
=========================

Tests for rendering the two artifacts and for in-place deployment.
"""

import pytest

from haiku_sdk.compiler import compile_haiku
from haiku_sdk.compiler.emitter import (
    deploy_directory,
    deploy_file,
    find_sources,
    render_init_script,
    render_interface_descriptor,
)
from haiku_sdk.compiler.errors import TemplateCompilationError
from haiku_sdk.errors import DeployError


def compile_text(text: str, name: str, filename: str) -> tuple[str, str]:
    result = compile_haiku(text, name, filename)
    return result.brs, result.xml


# =============================================================================
# Interface Descriptor Tests
# =============================================================================

class TestInterfaceDescriptor:
    """Tests for the component XML."""

    def test_minimal(self):
        assert render_interface_descriptor("App", [], ["App.brs"]) == "\n".join([
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<component name="App" extends="Group">',
            '\t<script type="text/brightscript" uri="App.brs"/>',
            "</component>",
        ])

    def test_with_functions_and_runtime(self):
        xml = render_interface_descriptor(
            "App",
            ["__set_initial_focus__"],
            ["App.brs", "pkg:/source/bslib.brs"],
            extends="Scene",
        )
        assert xml == "\n".join([
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<component name="App" extends="Scene">',
            '\t<script type="text/brightscript" uri="App.brs"/>',
            '\t<script type="text/brightscript" uri="pkg:/source/bslib.brs"/>',
            "\t<interface>",
            '\t\t<function name="__set_initial_focus__" />',
            "\t</interface>",
            "</component>",
        ])

    def test_attribute_escaping(self):
        xml = render_interface_descriptor("A&B", [], ["A&B.brs"])
        assert 'name="A&amp;B"' in xml


# =============================================================================
# Init Script Tests
# =============================================================================

class TestInitScript:
    """Tests for render_init_script()."""

    def test_routines_separated_by_blank_line(self):
        component = compile_haiku("<script>\nsub a()\nend sub\nsub b()\nend sub\n</script>", "App").component
        rendered = render_init_script(component)
        assert rendered.text == "sub a()\nend sub\n\nsub b()\nend sub"
        assert rendered.helpers_used == set()

    def test_helpers_reported(self):
        component = compile_haiku('<Label text="{m.a}"/>', "App").component
        assert render_init_script(component).helpers_used == {"bslib_tostring"}

    def test_custom_indent(self):
        component = compile_haiku("<Label/>", "App").component
        text = render_init_script(component, indent="  ").text
        assert '  label = CreateObject("roSGNode", "Label")' in text.splitlines()


# =============================================================================
# Runtime Import Tests
# =============================================================================

class TestRuntimeImport:
    """The runtime is imported only when a helper is called."""

    def test_no_helpers(self):
        assert "bslib.brs" not in compile_haiku('<Label text="hi"/>', "App").xml

    def test_interpolation_needs_runtime(self):
        xml = compile_haiku('<Label text="{m.a}"/>', "App").xml
        assert '\t<script type="text/brightscript" uri="pkg:/source/bslib.brs"/>' in xml.splitlines()

    def test_ternary_needs_runtime(self):
        result = compile_haiku('<Label text={m.a ? "x" : "y"}/>', "App")
        assert '\tlabel.text = bslib_ternary(m.a, "x", "y")' in result.brs.splitlines()
        assert "bslib.brs" in result.xml

    def test_custom_runtime_uri(self):
        xml = compile_haiku('<Label text="{m.a}"/>', "App", runtime_uri="pkg:/lib/rt.brs").xml
        assert 'uri="pkg:/lib/rt.brs"' in xml


# =============================================================================
# Deployment Tests
# =============================================================================

class TestDeploy:
    """Tests for in-place deployment."""

    def test_deploy_file(self, tmp_path):
        source = tmp_path / "Hello.haiku"
        source.write_text('<Label text="hello"/>')

        deployed = deploy_file(source, compile_text)

        assert deployed.removed_source
        assert not source.exists()
        assert (tmp_path / "Hello.brs").read_text().startswith("sub init()")
        assert '<component name="Hello"' in (tmp_path / "Hello.xml").read_text()

    def test_keep_source(self, tmp_path):
        source = tmp_path / "Hello.haiku"
        source.write_text("<Label/>")
        deployed = deploy_file(source, compile_text, keep_source=True)
        assert not deployed.removed_source
        assert source.exists()
        assert (tmp_path / "Hello.brs").exists()

    def test_dry_run(self, tmp_path):
        source = tmp_path / "Hello.haiku"
        source.write_text("<Label/>")
        deployed = deploy_file(source, compile_text, dry_run=True)
        assert deployed.brs_path == tmp_path / "Hello.brs"
        assert source.exists()
        assert not (tmp_path / "Hello.brs").exists()

    def test_directory_is_recursive(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "One.haiku").write_text("<Label/>")
        (tmp_path / "Two.haiku").write_text("<Label/>")
        (tmp_path / "notes.txt").write_text("not a template")

        deployed = deploy_directory(tmp_path, compile_text)

        assert sorted(d.source.name for d in deployed) == ["One.haiku", "Two.haiku"]
        assert (tmp_path / "a" / "One.xml").exists()
        assert (tmp_path / "Two.brs").exists()
        assert (tmp_path / "notes.txt").exists()

    def test_find_sources_extension(self, tmp_path):
        (tmp_path / "A.hk").write_text("")
        (tmp_path / "B.haiku").write_text("")
        assert [p.name for p in find_sources(tmp_path, ".hk")] == ["A.hk"]

    def test_not_a_directory(self, tmp_path):
        with pytest.raises(DeployError, match="not a directory"):
            deploy_directory(tmp_path / "missing", compile_text)

    def test_compile_error_keeps_source(self, tmp_path):
        source = tmp_path / "Broken.haiku"
        source.write_text('<Label text="oops/>')
        with pytest.raises(TemplateCompilationError):
            deploy_directory(tmp_path, compile_text)
        assert source.exists()
        assert not (tmp_path / "Broken.brs").exists()
