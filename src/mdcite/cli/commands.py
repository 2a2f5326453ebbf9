"""CLI command implementations"""

import asyncio
import json
from typing import Annotated, Optional

import typer

from mdcite.config import Settings, load_config
from mdcite.core.models import ExtractionResult, ValidationResult
from mdcite.core.pipeline import (
    filter_lines,
    parse_line_range,
    run_ast,
    run_extract_file,
    run_extract_header,
    run_extract_links,
    run_validate,
)
from mdcite.errors import DocumentReadError
from mdcite.logging_config import configure_logging


STATUS_MARKS = {"valid": "OK", "warning": "WARN", "error": "ERROR"}


def _fail(msg: str, cause: Exception = None, code: int = 1) -> None:
    """Print a user-friendly error to stderr and exit with code."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(code)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then set up logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e), code=2)
    configure_logging(settings.log_level)
    return settings


def _run(coro):
    """Drive a pipeline coroutine; unreadable documents exit 2."""
    try:
        return asyncio.run(coro)
    except DocumentReadError as e:
        _fail(str(e), e.__cause__, code=2)


def _echo_validation(path: str, result: ValidationResult) -> None:
    """Print one line per link, with error, suggestion, and path conversion underneath."""
    typer.echo(f"Citation validation: {path}")
    for link in result.links:
        validation = link.validation
        typer.echo(f"  [{STATUS_MARKS[validation.status]}] line {link.line}: {link.full_match}")
        if validation.status == "valid":
            continue
        typer.echo(f"      {validation.error}")
        if validation.suggestion:
            typer.echo(f"      Suggestion: {validation.suggestion}")
        if validation.status == "warning":
            typer.echo(f"      Use: {validation.path_conversion.recommended}")
    s = result.summary
    typer.echo(f"Summary: {s.total} total, {s.valid} valid, {s.warning} warnings, {s.error} errors")


def _echo_extraction(result: ExtractionResult) -> None:
    typer.echo(result.model_dump_json(indent=2))
    if not result.content_index:
        raise typer.Exit(1)


def validate_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to validate")],
    scope: Annotated[Optional[str], typer.Option("--scope", help="Directory indexed for filename-only resolution")] = None,
    fmt: Annotated[str, typer.Option("--format", help="Output format: text or json")] = "text",
    lines: Annotated[Optional[str], typer.Option("--lines", help="Only report links on lines N or A-B")] = None,
    ):
    """Validate every citation in a markdown file."""
    if fmt not in ("text", "json"):
        _fail(f"Unknown format: {fmt} (expected text or json)", code=2)
    settings = _settings(overrides={"scope_dir": scope})
    line_range = None
    if lines:
        try:
            line_range = parse_line_range(lines)
        except ValueError as e:
            _fail(str(e), code=2)

    result = _run(run_validate(path, settings))
    if line_range:
        result = filter_lines(result, *line_range)

    if fmt == "json":
        typer.echo(result.model_dump_json(indent=2))
    else:
        _echo_validation(path, result)
    if result.summary.error:
        raise typer.Exit(1)


def extract_links_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file whose citations are extracted")],
    scope: Annotated[Optional[str], typer.Option("--scope", help="Directory indexed for filename-only resolution")] = None,
    full_files: Annotated[bool, typer.Option("--full-files", help="Also extract links that target whole files")] = False,
    ):
    """Extract and deduplicate the content cited by a file's links."""
    settings = _settings(overrides={"scope_dir": scope, "full_files": full_files or None})
    _echo_extraction(_run(run_extract_links(path, settings)))


def extract_header_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file containing the heading")],
    heading: Annotated[str, typer.Argument(help="Heading text or encoded header id")],
    scope: Annotated[Optional[str], typer.Option("--scope", help="Directory indexed for filename-only resolution")] = None,
    ):
    """Extract one section of a markdown file."""
    settings = _settings(overrides={"scope_dir": scope})
    try:
        result = _run(run_extract_header(path, heading, settings))
    except ValueError as e:
        _fail(str(e))
    _echo_extraction(result)


def extract_file_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to extract")],
    scope: Annotated[Optional[str], typer.Option("--scope", help="Directory indexed for filename-only resolution")] = None,
    ):
    """Extract the full content of a markdown file."""
    settings = _settings(overrides={"scope_dir": scope})
    try:
        result = _run(run_extract_file(path, settings))
    except ValueError as e:
        _fail(str(e))
    _echo_extraction(result)


def ast_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to parse")],
    ):
    """Print the parsed headings, anchors, and links of a markdown file as JSON."""
    settings = _settings()
    try:
        data = run_ast(path, settings)
    except DocumentReadError as e:
        _fail(str(e), e.__cause__, code=2)
    typer.echo(json.dumps(data, indent=2))
