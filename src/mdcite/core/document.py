"""ParsedDocument: stable query facade over one parsed markdown file"""

import re
from typing import Optional

from mdcite.core.models import Anchor, AnchorType, Heading, Link, ParserOutput
from mdcite.core.utils.paths import decode
from mdcite.core.utils.similarity import rank_similar
from mdcite.core.utils.tokens import innermost_block


MARKDOWN_NOISE = (
    (re.compile(r'\[([^\]]+)\]\([^)]*\)'), r'\1'),     # inline links keep their text
    (re.compile(r'==([^=]+)=='), r'\1'),                # highlights
    (re.compile(r'\*\*|\*|`'), ''),                     # bold, italic, code
)


def strip_markdown(text: str) -> str:
    """Remove inline markdown decoration so '`init()` **setup**' compares as 'init() setup'."""
    for pattern, replacement in MARKDOWN_NOISE:
        text = pattern.sub(replacement, text)
    return text.strip()


class ParsedDocument:
    """Query surface over a ParserOutput; the raw parse data stays private.

    Consumers (validator, extractor) only ever see links, anchor ids and
    extracted text, never the token stream or anchor records themselves.
    """

    def __init__(self, data: ParserOutput, similarity_threshold: float = 0.5, max_suggestions: int = 5):
        self._data = data
        self._threshold = similarity_threshold
        self._limit = max_suggestions
        self._anchor_ids: Optional[list[str]] = None

    # --- anchors ---

    def has_anchor(self, anchor_id: str) -> bool:
        """True if anchor_id addresses a heading or block in this document.

        Accepts the raw heading text, the encoded header id, a URL-decoded
        form of either, a '^'-prefixed block id, and text that only differs
        from a heading by inline markdown decoration.
        """
        if not anchor_id:
            return False
        decoded = decode(anchor_id)
        block_id = anchor_id[1:] if anchor_id.startswith('^') else None
        cleaned = strip_markdown(decoded)

        for anchor in self._data.anchors:
            if anchor.id in (anchor_id, decoded):
                return True
            if anchor.anchor_type == AnchorType.header:
                encoded = anchor.url_encoded_id or ''
                if anchor_id == encoded or decoded == decode(encoded):
                    return True
            elif block_id is not None and anchor.id == block_id:
                return True
            if cleaned and cleaned == strip_markdown(anchor.raw_text or anchor.id):
                return True
        return False

    def get_anchor_ids(self) -> list[str]:
        """All unique anchor ids, header anchors contributing both id variants."""
        if self._anchor_ids is None:
            ids = []
            for anchor in self._data.anchors:
                ids.append(anchor.id)
                if anchor.anchor_type == AnchorType.header and anchor.url_encoded_id:
                    ids.append(anchor.url_encoded_id)
            self._anchor_ids = list(dict.fromkeys(ids))
        return self._anchor_ids

    def find_similar_anchors(self, anchor_id: str) -> list[str]:
        """Known anchor ids ranked by similarity to anchor_id, best first, above the cutoff."""
        return rank_similar(anchor_id, self.get_anchor_ids(), self._threshold, self._limit)

    # --- links ---

    def get_links(self) -> list[Link]:
        return self._data.links

    # --- content ---

    def extract_full_content(self) -> str:
        return self._data.content

    def extract_section(self, heading_text: str, heading_level: Optional[int] = None) -> Optional[str]:
        """Text from the heading line up to the next heading of equal or higher level.

        heading_text may also be an encoded header id; returns None when no
        heading matches.
        """
        heading = self._find_heading(heading_text, heading_level)
        if heading is None:
            return None
        headings = self._data.headings
        end = len(self._data.lines)
        for other in headings[headings.index(heading) + 1:]:
            if other.level <= heading.level:
                end = other.line - 1
                break
        return ''.join(self._data.lines[heading.line - 1:end]).rstrip()

    def extract_block(self, anchor_id: str) -> Optional[str]:
        """The paragraph (innermost markdown block) carrying the block anchor, or None."""
        block_id = anchor_id[1:] if anchor_id.startswith('^') else anchor_id
        anchor = next(
            (a for a in self._data.anchors if a.anchor_type == AnchorType.block and a.id == block_id),
            None,
        )
        if anchor is None or not 0 < anchor.line <= len(self._data.lines):
            return None
        start, end = innermost_block(self._data.tokens, anchor.line - 1) or (anchor.line - 1, anchor.line)
        return ''.join(self._data.lines[start:end]).rstrip()

    def _find_heading(self, text: str, level: Optional[int]) -> Optional[Heading]:
        candidates = [h for h in self._data.headings if level is None or h.level == level]
        for heading in candidates:
            if heading.text == text:
                return heading
        decoded = decode(text)
        by_line = {h.line: h for h in candidates}
        for anchor in self._header_anchors():
            ids = (anchor.id, anchor.url_encoded_id, decode(anchor.url_encoded_id or ''), anchor.raw_text)
            if (text in ids or decoded in ids) and anchor.line in by_line:
                return by_line[anchor.line]
        cleaned = strip_markdown(decoded)
        return next((h for h in candidates if cleaned and strip_markdown(h.text) == cleaned), None)

    def _header_anchors(self) -> list[Anchor]:
        return [a for a in self._data.anchors if a.anchor_type == AnchorType.header]
