"""Document parser: markdown-it tokenization plus citation, heading, and anchor extraction"""

import logging
import re
from pathlib import Path

from markdown_it import MarkdownIt

from mdcite.core.extract.anchors import extract_anchors, extract_headings
from mdcite.core.extract.links import extract_links
from mdcite.core.models import ParserOutput
from mdcite.core.utils.tokens import code_block_lines
from mdcite.errors import DocumentReadError


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*\n', re.DOTALL)


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def _frontmatter_lines(text: str) -> int:
    """Number of lines taken by a leading YAML frontmatter block (0 if none)."""
    m = FRONTMATTER_RE.match(text)
    return m.group(0).count('\n') if m else 0


class MarkdownParser:
    """Parse markdown files into headings, anchors, and citation links.

    Frontmatter lines are blanked before tokenizing so markdown-it line maps
    stay aligned with the source, and neither frontmatter nor code blocks
    contribute links or block anchors.
    """

    def __init__(self, preset: str = 'gfm-like'):
        self._md = _make_parser(preset)

    def parse(self, path: str) -> ParserOutput:
        """Read and parse the file at path; I/O and decode failures raise DocumentReadError."""
        logger.debug("parsing %s", path)
        try:
            content = Path(path).read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(str(path), f"Cannot read {path}: {e}", cause=e) from e
        return self.parse_text(content, str(path))

    def parse_text(self, content: str, path: str) -> ParserOutput:
        """Parse already-loaded content; path is used to resolve relative link targets."""
        lines = content.splitlines(keepends=True)
        fm_count = _frontmatter_lines(content)
        body = '\n' * fm_count + ''.join(lines[fm_count:])
        tokens = self._md.parse(body)

        excluded = code_block_lines(tokens) | set(range(fm_count))
        headings = extract_headings(tokens)
        return ParserOutput(
            path=path,
            content=content,
            lines=lines,
            tokens=tokens,
            headings=headings,
            anchors=extract_anchors(lines, headings, excluded),
            links=extract_links(lines, path, excluded),
        )
