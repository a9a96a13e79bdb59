"""
Command-Line Interface Tests
============================

Tests for haikuc and haiku-deploy, driven through click's CliRunner.
"""

import pytest
from click.testing import CliRunner

from haiku_sdk.cli.haikuc import format_tokens, main as haikuc
from haiku_sdk.cli.haikudeploy import main as haikudeploy


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def template(tmp_path):
    path = tmp_path / "Hello.haiku"
    path.write_text('<Label text="hello"/>')
    return path


# =============================================================================
# haikuc Tests
# =============================================================================

class TestHaikuc:
    """Tests for the single-file compiler."""

    def test_writes_artifacts(self, runner, template, tmp_path):
        result = runner.invoke(haikuc, [str(template)])
        assert result.exit_code == 0
        assert "Compiled" in result.output
        assert (tmp_path / "Hello.brs").read_text().startswith("sub init()")
        assert '<component name="Hello" extends="Group">' in (tmp_path / "Hello.xml").read_text()
        assert template.exists()

    def test_output_dir(self, runner, template, tmp_path):
        out = tmp_path / "build"
        result = runner.invoke(haikuc, [str(template), "-o", str(out)])
        assert result.exit_code == 0
        assert (out / "Hello.brs").exists()
        assert (out / "Hello.xml").exists()

    def test_name_and_extends(self, runner, template, tmp_path):
        result = runner.invoke(haikuc, [str(template), "--name", "Main", "--extends", "Scene"])
        assert result.exit_code == 0
        assert '<component name="Main" extends="Scene">' in (tmp_path / "Main.xml").read_text()

    def test_stdout(self, runner, template, tmp_path):
        result = runner.invoke(haikuc, [str(template), "--stdout"])
        assert result.exit_code == 0
        assert '\tlabel.text = "hello"' in result.output
        assert '<component name="Hello"' in result.output
        assert not (tmp_path / "Hello.brs").exists()

    def test_tokens(self, runner, template):
        result = runner.invoke(haikuc, [str(template), "--tokens"])
        assert result.exit_code == 0
        assert result.output.splitlines()[0] == "1:1 Less '<'"
        assert "1:2 NodeName 'Label'" in result.output

    def test_ast(self, runner, template):
        result = runner.invoke(haikuc, [str(template), "--ast"])
        assert result.exit_code == 0
        assert "Node: Label" in result.output

    def test_verbose(self, runner, template):
        result = runner.invoke(haikuc, [str(template), "-v"])
        assert result.exit_code == 0
        assert "Routines: 1" in result.output

    def test_compile_error(self, runner, tmp_path):
        broken = tmp_path / "Broken.haiku"
        broken.write_text("<Group></Label>")
        result = runner.invoke(haikuc, [str(broken)])
        assert result.exit_code == 1
        assert "closing tag '</Label>' does not match '<Group>'" in result.output
        assert not (tmp_path / "Broken.brs").exists()

    def test_missing_input(self, runner, tmp_path):
        result = runner.invoke(haikuc, [str(tmp_path / "Missing.haiku")])
        assert result.exit_code == 2

    def test_version(self, runner):
        result = runner.invoke(haikuc, ["--version"])
        assert result.exit_code == 0
        assert "haikuc" in result.output


def test_format_tokens():
    assert format_tokens("<A/>").splitlines() == [
        "1:1 Less '<'",
        "1:2 NodeName 'A'",
        "1:3 SlashGreater '/>'",
        "1:5 Eof ''",
    ]


# =============================================================================
# haiku-deploy Tests
# =============================================================================

class TestHaikuDeploy:
    """Tests for in-place directory deployment."""

    def test_deploy(self, runner, template, tmp_path):
        result = runner.invoke(haikudeploy, [str(tmp_path)])
        assert result.exit_code == 0
        assert "Deployed 1 component(s)" in result.output
        assert not template.exists()
        assert (tmp_path / "Hello.brs").exists()
        assert (tmp_path / "Hello.xml").exists()

    def test_keep_source(self, runner, template, tmp_path):
        result = runner.invoke(haikudeploy, [str(tmp_path), "--keep-source"])
        assert result.exit_code == 0
        assert template.exists()
        assert (tmp_path / "Hello.xml").exists()

    def test_dry_run(self, runner, template, tmp_path):
        result = runner.invoke(haikudeploy, [str(tmp_path), "--dry-run"])
        assert result.exit_code == 0
        assert "Would deploy 1 component(s)" in result.output
        assert "Hello.brs, Hello.xml" in result.output
        assert template.exists()
        assert not (tmp_path / "Hello.brs").exists()

    def test_source_extension_from_env(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("HAIKU_SOURCE_EXTENSION", "hk")
        (tmp_path / "Other.hk").write_text("<Label/>")
        (tmp_path / "Skipped.haiku").write_text("<Label/>")
        result = runner.invoke(haikudeploy, [str(tmp_path)])
        assert result.exit_code == 0
        assert (tmp_path / "Other.brs").exists()
        assert (tmp_path / "Skipped.haiku").exists()

    def test_compile_error(self, runner, tmp_path):
        (tmp_path / "Broken.haiku").write_text("<Group>")
        result = runner.invoke(haikudeploy, [str(tmp_path)])
        assert result.exit_code == 1
        assert "expected '</Group>'" in result.output
        assert (tmp_path / "Broken.haiku").exists()
