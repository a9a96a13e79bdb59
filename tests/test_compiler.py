"""
Compiler Driver Test Suite
==========================

Tests for CompilerOptions, HaikuCompiler and the convenience functions.
"""

import pytest

from haiku_sdk import HaikuError, __version__
from haiku_sdk.compiler import (
    CompilerOptions,
    HaikuCompiler,
    TemplateCompilationError,
    TokenKind,
    compile_file,
    compile_haiku,
)
from haiku_sdk.compiler.errors import MismatchedTagError, TemplateSyntaxError


# =============================================================================
# Options Tests
# =============================================================================

class TestCompilerOptions:
    """Tests for configuration."""

    def test_defaults(self):
        options = CompilerOptions()
        assert options.component_name == "HaikuComponent"
        assert options.extends == "Group"
        assert options.runtime_uri == "pkg:/source/bslib.brs"
        assert options.indent == "\t"
        assert options.fail_on_error
        assert options.source_extension == ".haiku"

    def test_extension_gets_dot(self):
        assert CompilerOptions(source_extension="hk").source_extension == ".hk"

    def test_script_uri(self):
        assert CompilerOptions(component_name="App").resolved_script_uri == "App.brs"
        assert CompilerOptions(script_uri="pkg:/components/App.brs").resolved_script_uri == "pkg:/components/App.brs"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("HAIKU_EXTENDS", "Scene")
        monkeypatch.setenv("HAIKU_RUNTIME_URI", "pkg:/rt.brs")
        monkeypatch.setenv("HAIKU_SOURCE_EXTENSION", "hk")
        options = CompilerOptions.from_env()
        assert options.extends == "Scene"
        assert options.runtime_uri == "pkg:/rt.brs"
        assert options.source_extension == ".hk"

    def test_overrides_beat_env(self, monkeypatch):
        monkeypatch.setenv("HAIKU_EXTENDS", "Scene")
        assert CompilerOptions.from_env(extends="Group").extends == "Group"

    def test_none_overrides_ignored(self, monkeypatch):
        monkeypatch.setenv("HAIKU_EXTENDS", "Scene")
        options = CompilerOptions.from_env(extends=None, component_name="App")
        assert options.extends == "Scene"
        assert options.component_name == "App"

    def test_empty_env(self, monkeypatch):
        monkeypatch.delenv("HAIKU_EXTENDS", raising=False)
        monkeypatch.delenv("HAIKU_RUNTIME_URI", raising=False)
        monkeypatch.delenv("HAIKU_SOURCE_EXTENSION", raising=False)
        assert CompilerOptions.from_env() == CompilerOptions()


# =============================================================================
# Compiler Tests
# =============================================================================

class TestHaikuCompiler:
    """Tests for the compiler driver."""

    def test_result_fields(self):
        result = compile_haiku('<Label text="hi"/>', "App", "App.haiku")
        assert result.success
        assert result.filename == "App.haiku"
        assert result.component_name == "App"
        assert result.tokens[-1].kind == TokenKind.EOF
        assert result.diagnostics == []
        assert result.ast.nodes[0].name == "Label"
        assert result.errors == []

    def test_extends(self):
        xml = compile_haiku("<Label/>", "App", extends="Scene").xml
        assert '<component name="App" extends="Scene">' in xml

    def test_lexer_errors_raise(self):
        with pytest.raises(TemplateCompilationError) as exc_info:
            compile_haiku('<Label text="hi/>', "App", "App.haiku")
        report = str(exc_info.value)
        assert "App.haiku:1:13: error: Unterminated string at end of file [1002]" in report
        # the parser then misses the closing '>'
        assert "App.haiku:1:18: error: expected '>' or '/>'" in report
        assert "2 errors, 0 warnings" in report

    def test_all_errors_reported(self):
        with pytest.raises(TemplateCompilationError) as exc_info:
            compile_haiku("<Group>\n</Label>\n<Label text=/>", "App")
        assert "2 errors" in str(exc_info.value)

    def test_errors_collected_without_raising(self):
        result = compile_haiku("<Group></Label>", "App", fail_on_error=False)
        assert not result.success
        assert result.brs == ""
        assert result.xml == ""
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], MismatchedTagError)

    def test_lexer_error_collected(self):
        result = compile_haiku("<Label @/>", "App", fail_on_error=False)
        assert not result.success
        assert isinstance(result.errors[0], TemplateSyntaxError)
        assert result.diagnostics[0].code == 1000

    def test_errors_are_haiku_errors(self):
        with pytest.raises(HaikuError):
            compile_haiku("<Group>", "App")

    def test_generate(self):
        compiler = HaikuCompiler()
        xml, brs = compiler.generate("<Label/>", "Main")
        assert '<component name="Main"' in xml
        assert brs.startswith("sub init()")

    def test_independent_compilations(self):
        """Scopes do not leak between compilations."""
        compiler = HaikuCompiler(CompilerOptions(component_name="App"))
        first = compiler.compile_source("<Label/>")
        second = compiler.compile_source("<Label/>")
        assert first.brs == second.brs

    def test_generate_keeps_configured_name(self):
        compiler = HaikuCompiler()
        compiler.generate("<Label/>", "Main")
        xml, _ = compiler.generate("<Label/>")
        assert compiler.options.component_name == "HaikuComponent"
        assert '<component name="HaikuComponent"' in xml


# =============================================================================
# File Tests
# =============================================================================

class TestFiles:
    """Tests for file compilation."""

    def test_compile_file_names_component(self, tmp_path):
        path = tmp_path / "Hello.haiku"
        path.write_text('<Label text="hello"/>')
        result = HaikuCompiler().compile_file(str(path))
        assert result.component_name == "Hello"
        assert '<component name="Hello"' in result.xml
        assert 'uri="Hello.brs"' in result.xml

    def test_explicit_name_kept(self, tmp_path):
        path = tmp_path / "Hello.haiku"
        path.write_text("<Label/>")
        result = HaikuCompiler(CompilerOptions(component_name="Main")).compile_file(str(path))
        assert result.component_name == "Main"

    def test_one_compiler_many_files(self, tmp_path):
        """Each file is named after itself, not after the previous one."""
        compiler = HaikuCompiler()
        for name in ("One", "Two"):
            (tmp_path / f"{name}.haiku").write_text("<Label/>")
        first = compiler.compile_file(str(tmp_path / "One.haiku"))
        second = compiler.compile_file(str(tmp_path / "Two.haiku"))
        assert first.component_name == "One"
        assert second.component_name == "Two"
        assert '<component name="Two"' in second.xml
        assert 'uri="Two.brs"' in second.xml

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            HaikuCompiler().compile_file(str(tmp_path / "Missing.haiku"))

    def test_compile_file_writes_artifacts(self, tmp_path):
        path = tmp_path / "Hello.haiku"
        path.write_text("<Label/>")
        out = tmp_path / "out"
        compile_file(str(path), str(out))
        assert (out / "Hello.brs").read_text().startswith("sub init()")
        assert (out / "Hello.xml").exists()
        assert path.exists()

    def test_failed_compile_writes_nothing(self, tmp_path):
        path = tmp_path / "Broken.haiku"
        path.write_text("<Group></Label>")
        out = tmp_path / "out"
        result = compile_file(str(path), str(out), fail_on_error=False)
        assert not result.success
        assert result.errors
        assert not (out / "Broken.brs").exists()
        assert not (out / "Broken.xml").exists()


def test_version():
    assert __version__
