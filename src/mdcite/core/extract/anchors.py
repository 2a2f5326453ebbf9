"""Heading and anchor derivation from markdown-it tokens and source lines"""

import re

from mdcite.core.extract.links import CARET_RE, code_spans, is_false_caret
from mdcite.core.models import Anchor, AnchorType, Heading
from mdcite.core.utils.tokens import heading_level


EXPLICIT_ID_RE = re.compile(r'^(.+?)\s*\{#([^}]+)\}$')
BLOCK_ID_EOL_RE = re.compile(r'(?<![\w#^\[/])\^([A-Za-z0-9_-]+)\s*$')
EMPHASIS_RE = re.compile(r'==\*\*([^*]+)\*\*==')


def extract_headings(tokens: list) -> list[Heading]:
    """Collect headings in document order from heading_open/inline token pairs."""
    headings = []
    for i, tok in enumerate(tokens):
        level = heading_level(tok)
        if level is None or i + 1 >= len(tokens):
            continue
        headings.append(Heading(level=level, text=tokens[i + 1].content.strip(), line=tok.map[0] + 1))
    return headings


def encode_heading_id(text: str) -> str:
    """Encoded header id: colons dropped, whitespace runs percent-encoded as %20."""
    return re.sub(r'\s+', '%20', text.replace(':', ''))


def header_anchor(heading: Heading) -> Anchor:
    """Exactly one anchor per heading, carrying both id variants."""
    if m := EXPLICIT_ID_RE.match(heading.text):
        title, explicit = m.group(1).strip(), m.group(2)
        return Anchor(
            anchor_type=AnchorType.header, id=explicit, url_encoded_id=explicit,
            raw_text=title, line=heading.line,
        )
    return Anchor(
        anchor_type=AnchorType.header,
        id=heading.text,
        url_encoded_id=encode_heading_id(heading.text),
        raw_text=heading.text,
        line=heading.line,
    )


def block_anchors(line: str, line_no: int) -> list[Anchor]:
    """Block anchors declared on one line: trailing ^id, inline caret ids, and ==**text**==."""
    anchors = []
    skip = code_spans(line)
    seen_columns = set()

    m = BLOCK_ID_EOL_RE.search(line)
    if m and not m.group(1).isdigit() and not any(s <= m.start() < e for s, e in skip):
        anchors.append(Anchor(anchor_type=AnchorType.block, id=m.group(1), line=line_no, column=m.start()))
        seen_columns.add(m.start())

    for m in CARET_RE.finditer(line):
        if m.start() in seen_columns or any(s <= m.start() < e for s, e in skip) or is_false_caret(line, m):
            continue
        anchors.append(Anchor(anchor_type=AnchorType.block, id=m.group(1), line=line_no, column=m.start()))

    for m in EMPHASIS_RE.finditer(line):
        anchors.append(Anchor(
            anchor_type=AnchorType.block, id=m.group(1), raw_text=m.group(0), line=line_no, column=m.start(),
        ))
    return anchors


def extract_anchors(lines: list[str], headings: list[Heading], excluded_lines: set[int]) -> list[Anchor]:
    """Block anchors scanned line by line, then header anchors derived from the heading list."""
    anchors: list[Anchor] = []
    for index, line in enumerate(lines):
        if index not in excluded_lines:
            anchors.extend(block_anchors(line.rstrip('\r\n'), index + 1))
    anchors.extend(header_anchor(h) for h in headings)
    return anchors
