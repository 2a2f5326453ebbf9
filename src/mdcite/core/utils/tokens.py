"""Shared markdown-it token utilities"""


def heading_level(token) -> int | None:
    """Return the heading level (1-6) for a heading_open token, else None."""
    if token.type == 'heading_open' and token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def code_block_lines(tokens: list) -> set[int]:
    """Return 0-based line numbers covered by fenced or indented code blocks."""
    lines: set[int] = set()
    for tok in tokens:
        if tok.type in ('fence', 'code_block') and tok.map:
            start, end = tok.map
            lines.update(range(start, end))
    return lines


def innermost_block(tokens: list, line: int) -> tuple[int, int] | None:
    """Return the smallest [start, end) block map containing the 0-based line, if any."""
    best = None
    for tok in tokens:
        if not tok.block or not tok.map or tok.nesting < 0:
            continue
        start, end = tok.map
        if start <= line < end and (best is None or end - start < best[1] - best[0]):
            best = (start, end)
    return best
