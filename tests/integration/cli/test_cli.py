"""Integration tests for the mdcite CLI"""

import json

import pytest
from typer.testing import CliRunner

from mdcite.cli.cli import app


runner = CliRunner()


@pytest.fixture(autouse=True)
def in_root(root, monkeypatch):
    """Run commands from the corpus directory with no MDCITE_* overrides."""
    monkeypatch.chdir(root)
    for name in ("FULL_FILES", "SCOPE_DIR", "LOG_LEVEL"):
        monkeypatch.delenv(f"MDCITE_{name}", raising=False)


@pytest.fixture(name="good")
def good_fixture(write):
    write("target.md", "# Intro\n\nHello world.\n")
    return write("good.md", "[a](target.md#Intro) [b](target.md#Intro)\n")


@pytest.fixture(name="bad")
def bad_fixture(write):
    write("target.md", "# Intro\n\nHello world.\n")
    return write("bad.md", "ok [a](target.md#Intro)\nbroken [b](target.md#Intr)\n")


def test_validate_text_ok(good):
    result = runner.invoke(app, ["validate", str(good)])
    assert result.exit_code == 0, result.output
    assert "[OK] line 1: [a](target.md#Intro)" in result.output
    assert "Summary: 2 total, 2 valid, 0 warnings, 0 errors" in result.output


def test_validate_errors_exit_1(bad):
    """A broken anchor exits 1 and prints the suggestion."""
    result = runner.invoke(app, ["validate", str(bad)])
    assert result.exit_code == 1
    assert "Anchor not found: #Intr" in result.output
    assert "Suggestion: Did you mean #Intro?" in result.output


def test_validate_json(bad):
    result = runner.invoke(app, ["validate", str(bad), "--format", "json"])
    data = json.loads(result.stdout)
    assert data["summary"] == {"total": 2, "valid": 1, "warning": 0, "error": 1}
    assert data["links"][1]["validation"]["status"] == "error"


def test_validate_lines_filter(bad):
    """--lines limits the report and re-derives the summary."""
    result = runner.invoke(app, ["validate", str(bad), "--lines", "1", "--format", "json"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["summary"]["total"] == 1


def test_validate_bad_lines_exit_2(good):
    result = runner.invoke(app, ["validate", str(good), "--lines", "x"])
    assert result.exit_code == 2


def test_validate_missing_file_exit_2(root):
    result = runner.invoke(app, ["validate", str(root / "nope.md")])
    assert result.exit_code == 2


def test_validate_warning_with_scope(write, root):
    write("docs/sub/target.md", "# A\n")
    source = write("docs/source.md", "[t](target.md#A)\n")
    result = runner.invoke(app, ["validate", str(source), "--scope", str(root / "docs")])
    assert result.exit_code == 0
    assert "[WARN]" in result.output
    assert "Use: sub/target.md#A" in result.output


def test_extract_links(good):
    result = runner.invoke(app, ["extract", "links", str(good)])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["stats"]["unique_content"] == 1
    assert data["stats"]["duplicate_content_detected"] == 1
    assert len(data["link_reports"]) == 2


def test_extract_links_nothing_extracted_exit_1(write):
    source = write("plain.md", "[f](target.md)\n")
    write("target.md", "# T\n")
    result = runner.invoke(app, ["extract", "links", str(source)])
    assert result.exit_code == 1


def test_extract_header(good, root):
    result = runner.invoke(app, ["extract", "header", str(root / "target.md"), "Intro"])
    assert result.exit_code == 0, result.output
    (block,) = json.loads(result.stdout)["content_index"].values()
    assert block["content"] == "# Intro\n\nHello world."


def test_extract_file(good, root):
    result = runner.invoke(app, ["extract", "file", "target.md"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["stats"]["unique_content"] == 1


def test_ast(good):
    result = runner.invoke(app, ["ast", str(good)])
    assert result.exit_code == 0
    assert len(json.loads(result.stdout)["links"]) == 2


def test_invalid_config_exit_2(good, root):
    (root / "config.yaml").write_text("key: [unclosed\n")
    result = runner.invoke(app, ["validate", str(good)])
    assert result.exit_code == 2
