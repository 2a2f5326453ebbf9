"""Line-based link extraction: markdown, wiki, cite, and caret citation syntaxes"""

import re
from typing import NamedTuple, Optional

from mdcite.core.models import (
    AnchorType,
    ExtractionMarker,
    Link,
    LinkScope,
    LinkTarget,
    LinkType,
    TargetPath,
)
from mdcite.core.utils.paths import decode, relative_to_source, resolve_relative


MARKDOWN_LINK_RE = re.compile(r'(?<![!\[])\[([^\[\]]*)\]\(')
WIKI_LINK_RE     = re.compile(r'\[\[([^\[\]|#]*?\.md)?(?:#([^\[\]|]+))?(?:\|([^\[\]]+))?\]\]')
CITE_LINK_RE     = re.compile(r'\[cite:\s*([^\]]+)\]')
CARET_RE         = re.compile(r'(?<![\w#^\[/])\^([A-Za-z0-9][A-Za-z0-9_-]*)')
MARKER_RE        = re.compile(r'\s*(%%(.+?)%%|<!--\s*(.+?)\s*-->)')
EXTERNAL_RE      = re.compile(r'^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|//)')
TITLE_RE         = re.compile(r'^(.*?)\s+(?:"[^"]*"|\'[^\']*\')$')
SEMVER_TAIL_RE   = re.compile(r'^\.\d')


class RawLink(NamedTuple):
    """A matched citation before path resolution; `end` is exclusive."""
    link_type: LinkType
    raw_path: Optional[str]
    anchor: Optional[str]
    text: Optional[str]
    start: int
    end: int


def code_spans(line: str) -> list[tuple[int, int]]:
    """Return [start, end) ranges of inline code spans (matching backtick runs)."""
    spans = []
    i = 0
    while i < len(line):
        if line[i] != '`' or (i > 0 and line[i - 1] == '\\'):
            i += 1
            continue
        run = len(line[i:]) - len(line[i:].lstrip('`'))
        close = line.find('`' * run, i + run)
        while close != -1 and close + run < len(line) and line[close + run] == '`':
            close = line.find('`' * run, close + run + 1)
        if close == -1:
            i += run
            continue
        spans.append((i, close + run))
        i = close + run
    return spans


def _inside(pos: int, spans: list[tuple[int, int]]) -> bool:
    return any(start <= pos < end for start, end in spans)


def balanced_end(line: str, open_paren: int) -> int:
    """Index of the ')' closing the '(' at open_paren, honoring nested parens; -1 if unbalanced."""
    depth = 0
    i = open_paren
    while i < len(line):
        char = line[i]
        if char == '\\':
            i += 2
            continue
        if char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def split_destination(destination: str) -> tuple[Optional[str], Optional[str]]:
    """Split a link destination into (path, anchor); path is None for '#anchor'."""
    destination = destination.strip()
    if destination.startswith('<') and destination.endswith('>'):
        destination = destination[1:-1]
    elif m := TITLE_RE.match(destination):
        destination = m.group(1)
    if destination.startswith('#'):
        return None, destination[1:]
    path, sep, anchor = destination.partition('#')
    return path, (anchor if sep else None)


def is_false_caret(line: str, match: re.Match) -> bool:
    """Semantic versions (^14.0.1, ^v1.2.3) and purely numeric tokens (^2) are not citations."""
    return match.group(1).isdigit() or bool(SEMVER_TAIL_RE.match(line[match.end():]))


def _markdown_links(line: str, skip: list[tuple[int, int]]) -> list[RawLink]:
    found = []
    for m in MARKDOWN_LINK_RE.finditer(line):
        if _inside(m.start(), skip):
            continue
        open_paren = m.end() - 1
        close = balanced_end(line, open_paren)
        if close == -1:
            continue
        path, anchor = split_destination(line[open_paren + 1:close])
        if path is not None and (not path or EXTERNAL_RE.match(path)):
            continue
        found.append(RawLink(LinkType.markdown, path, anchor, m.group(1), m.start(), close + 1))
    return found


def _wiki_links(line: str, skip: list[tuple[int, int]]) -> list[RawLink]:
    found = []
    for m in WIKI_LINK_RE.finditer(line):
        path, anchor, text = m.group(1), m.group(2), m.group(3)
        if _inside(m.start(), skip) or (path is None and anchor is None):
            continue
        found.append(RawLink(LinkType.wiki, path, anchor, text, m.start(), m.end()))
    return found


def _cite_links(line: str, skip: list[tuple[int, int]]) -> list[RawLink]:
    found = []
    for m in CITE_LINK_RE.finditer(line):
        if _inside(m.start(), skip):
            continue
        target = m.group(1).strip()
        path, sep, anchor = target.partition('#')
        found.append(RawLink(
            LinkType.cite, path.strip(), anchor if sep else None, f"cite: {target}", m.start(), m.end(),
        ))
    return found


def _caret_links(line: str, skip: list[tuple[int, int]]) -> list[RawLink]:
    found = []
    for m in CARET_RE.finditer(line):
        if _inside(m.start(), skip) or is_false_caret(line, m):
            continue
        found.append(RawLink(LinkType.caret, None, m.group(1), None, m.start(), m.end()))
    return found


def detect_extraction_marker(line: str, start: int, end: Optional[int] = None) -> Optional[ExtractionMarker]:
    """Find a %%marker%% or <!-- marker --> in line[start:end] (the trivia after a link)."""
    m = MARKER_RE.search(line[start:end])
    if not m:
        return None
    inner = m.group(2) if m.group(2) is not None else m.group(3)
    return ExtractionMarker(full_match=m.group(1), inner_text=inner.strip())


def anchor_type_of(anchor: Optional[str]) -> Optional[AnchorType]:
    if not anchor:
        return None
    return AnchorType.block if anchor.startswith('^') else AnchorType.header


def build_link(raw: RawLink, line: str, line_no: int, source_path: str, marker_end: Optional[int]) -> Link:
    """Turn a RawLink into a Link with resolved target paths and marker."""
    if raw.raw_path:
        absolute = resolve_relative(decode(raw.raw_path), source_path)
        relative = relative_to_source(absolute, source_path)
        scope = LinkScope.cross_document
    else:
        absolute = relative = None
        scope = LinkScope.internal
    anchor_type = AnchorType.block if raw.link_type == LinkType.caret else anchor_type_of(raw.anchor)
    return Link(
        link_type=raw.link_type,
        scope=scope,
        anchor_type=anchor_type,
        source_path=source_path,
        target=LinkTarget(
            path=TargetPath(raw=raw.raw_path or None, absolute=absolute, relative=relative),
            anchor=raw.anchor,
        ),
        text=raw.text,
        full_match=line[raw.start:raw.end],
        line=line_no,
        column=raw.start,
        extraction_marker=detect_extraction_marker(line, raw.end, marker_end),
    )


def extract_line_links(line: str, line_no: int, source_path: str) -> list[Link]:
    """Extract all citations on one source line, in column order.

    Syntaxes are matched in precedence order (markdown, wiki, cite, caret); a
    later syntax never matches inside the span of an earlier one or inside
    inline code.
    """
    skip = code_spans(line)
    raws: list[RawLink] = []
    for finder in (_markdown_links, _wiki_links, _cite_links, _caret_links):
        matched = finder(line, skip)
        raws.extend(matched)
        skip = skip + [(r.start, r.end) for r in matched]

    raws.sort(key=lambda r: r.start)
    links = []
    for i, raw in enumerate(raws):
        next_start = raws[i + 1].start if i + 1 < len(raws) else None
        links.append(build_link(raw, line, line_no, source_path, next_start))
    return links


def extract_links(lines: list[str], source_path: str, excluded_lines: set[int]) -> list[Link]:
    """Extract citations from every line not in excluded_lines (0-based: code blocks, frontmatter)."""
    links: list[Link] = []
    for index, line in enumerate(lines):
        if index in excluded_lines:
            continue
        links.extend(extract_line_links(line.rstrip('\r\n'), index + 1, source_path))
    return links
