"""Integration tests for CLI commands."""

from pathlib import Path

from typer.testing import CliRunner

from jspnav import __version__
from jspnav.cli import app


runner = CliRunner()


def _orders_jsp(sample_webapp: Path) -> Path:
    return sample_webapp / "src" / "main" / "webapp" / "orders.jsp"


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"jspnav v{__version__}" in result.stdout


class TestDefinitionCommand:
    """Tests for 'jspnav definition'."""

    def test_overloaded_method(self, sample_webapp: Path):
        result = runner.invoke(app, [
            "definition", str(_orders_jsp(sample_webapp)),
            "--line", "8", "--column", "15",
            "--workspace", str(sample_webapp),
        ])

        assert result.exit_code == 0
        assert result.stdout.strip().endswith("OrderService.java:13:25")

    def test_imported_type(self, sample_webapp: Path):
        result = runner.invoke(app, [
            "definition", str(_orders_jsp(sample_webapp)),
            "--line", "7", "--column", "6",
            "--workspace", str(sample_webapp),
        ])

        assert result.exit_code == 0
        assert result.stdout.strip().endswith("Customer.java:6:14")

    def test_no_definition(self, sample_webapp: Path):
        result = runner.invoke(app, [
            "definition", str(_orders_jsp(sample_webapp)),
            "--line", "3", "--column", "2",
            "--workspace", str(sample_webapp),
        ])

        assert result.exit_code == 1
        assert "No definition found." in result.stdout

    def test_missing_file(self):
        result = runner.invoke(app, ["definition", "/nonexistent/page.jsp", "--line", "1", "--column", "1"])
        assert result.exit_code != 0


class TestCompleteCommand:
    def test_page_directive(self, temp_dir: Path):
        page = temp_dir / "page.jsp"
        page.write_text("<%@ page \n")

        result = runner.invoke(app, ["complete", str(page), "--line", "1", "--column", "10"])

        assert result.exit_code == 0
        assert 'pageEncoding="UTF-8"' in result.stdout
        assert "taglib" in result.stdout

    def test_nothing_to_offer(self, temp_dir: Path):
        page = temp_dir / "page.jsp"
        page.write_text("<p>hello</p>\n")

        result = runner.invoke(app, ["complete", str(page), "--line", "1", "--column", "5"])

        assert result.exit_code == 0
        assert "No completions." in result.stdout


def test_roots_lists_modules_and_dependencies(sample_webapp: Path):
    result = runner.invoke(app, ["roots", str(sample_webapp)])

    assert result.exit_code == 0
    assert "Source roots" in result.stdout
    assert "commons-lang3" in result.stdout
    assert "shop-api" in result.stdout
    assert "managed-only" not in result.stdout


def test_roots_empty_workspace(temp_dir: Path):
    (temp_dir / "pom.xml").write_text("<project></project>")
    result = runner.invoke(app, ["roots", str(temp_dir)])

    assert result.exit_code == 0
    assert "No source roots found." in result.stdout


class TestConfigCommands:
    def test_set_then_show(self):
        result = runner.invoke(app, ["config", "set", "max_depth", "3"])
        assert result.exit_code == 0
        assert "Set max_depth = 3" in result.stdout

        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "max_depth" in result.stdout

    def test_set_unknown_key(self):
        result = runner.invoke(app, ["config", "set", "colour", "blue"])
        assert result.exit_code != 0

    def test_set_bad_value(self):
        result = runner.invoke(app, ["config", "set", "max_depth", "deep"])
        assert result.exit_code != 0
