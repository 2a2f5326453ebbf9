"""Pipeline step functions: validate, extract, and inspect orchestration"""

import re
from typing import Optional

from mdcite.config import Settings
from mdcite.core.factory import LinkFactory, build_components
from mdcite.core.models import ExtractionOptions, ExtractionResult, ValidationResult
from mdcite.core.parse import MarkdownParser


LINE_RANGE_RE = re.compile(r'^(\d+)(?:-(\d+))?$')


def parse_line_range(value: str) -> tuple[int, int]:
    """Parse '12' or '10-20' into an inclusive (start, end) pair."""
    m = LINE_RANGE_RE.match(value.strip())
    if not m:
        raise ValueError(f"Invalid line range: {value!r} (expected N or A-B)")
    start = int(m.group(1))
    end = int(m.group(2)) if m.group(2) else start
    if end < start:
        raise ValueError(f"Invalid line range: {value!r} (end before start)")
    return start, end


def filter_lines(result: ValidationResult, start: int, end: int) -> ValidationResult:
    """Keep links on source lines start..end; the summary is re-derived from what is kept."""
    return ValidationResult(links=[link for link in result.links if start <= link.line <= end])


async def run_validate(path: str, settings: Settings, scope: Optional[str] = None) -> ValidationResult:
    components = build_components(settings, scope)
    return await components.validator.validate(path)


async def run_extract_links(path: str, settings: Settings, scope: Optional[str] = None) -> ExtractionResult:
    """Validate every link in path, then extract and deduplicate the eligible ones."""
    components = build_components(settings, scope)
    validated = await components.validator.validate(path)
    return await components.extractor.extract(validated.links, ExtractionOptions(full_files=settings.full_files))


async def run_extract_header(
    path: str, heading: str, settings: Settings, scope: Optional[str] = None,
    ) -> ExtractionResult:
    """Extract one section of path, as if cited by a link to path#heading."""
    components = build_components(settings, scope)
    link = LinkFactory().header_link(path, heading)
    await components.validator.validate_link(link)
    return await components.extractor.extract([link], ExtractionOptions(full_files=settings.full_files))


async def run_extract_file(path: str, settings: Settings, scope: Optional[str] = None) -> ExtractionResult:
    """Extract the whole of path; an explicit file target is always full-file eligible."""
    components = build_components(settings, scope)
    link = LinkFactory().file_link(path)
    await components.validator.validate_link(link)
    return await components.extractor.extract([link], ExtractionOptions(full_files=True))


def run_ast(path: str, settings: Settings) -> dict:
    """Parser output for path as plain data (markdown-it tokens omitted)."""
    data = MarkdownParser(settings.parser_config).parse(path)
    return {
        "path": data.path,
        "headings": [h.model_dump(mode="json") for h in data.headings],
        "anchors": [a.model_dump(mode="json") for a in data.anchors],
        "links": [link.model_dump(mode="json") for link in data.links],
    }
