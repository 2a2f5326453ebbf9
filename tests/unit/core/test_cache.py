"""Unit tests for core/cache.py (ParsedFileCache)"""

import asyncio

import pytest

from mdcite.core.cache import ParsedFileCache
from mdcite.core.parse import MarkdownParser
from mdcite.errors import DocumentReadError


class CountingParser(MarkdownParser):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def parse(self, path):
        self.calls += 1
        return super().parse(path)


def test_concurrent_resolves_parse_once(write):
    """N concurrent resolve() calls for one path share a single parse."""
    path = write("doc.md", "# Intro\n\nHello world.\n")
    parser = CountingParser()
    cache = ParsedFileCache(parser)

    async def main():
        return await asyncio.gather(*(cache.resolve(str(path)) for _ in range(10)))

    docs = asyncio.run(main())
    assert parser.calls == 1
    assert all(doc is docs[0] for doc in docs)
    assert docs[0].has_anchor("Intro")


def test_equivalent_paths_share_entry(write, root):
    """Paths that normalize to the same absolute path hit the same entry."""
    path = write("sub/doc.md", "# A\n")
    parser = CountingParser()
    cache = ParsedFileCache(parser)

    async def main():
        first = await cache.resolve(str(path))
        second = await cache.resolve(str(root / "sub" / ".." / "sub" / "doc.md"))
        return first, second

    first, second = asyncio.run(main())
    assert first is second
    assert parser.calls == 1
    assert len(cache) == 1


def test_failed_parse_evicted_then_retried(root):
    """A path that fails once is parsed afresh once fixed, without manual eviction."""
    path = root / "later.md"
    cache = ParsedFileCache()

    async def main():
        with pytest.raises(DocumentReadError):
            await cache.resolve(str(path))
        assert str(path) not in cache
        path.write_text("# Later\n", encoding="utf-8")
        return await cache.resolve(str(path))

    doc = asyncio.run(main())
    assert doc.has_anchor("Later")


def test_concurrent_waiters_see_failure_after_eviction(root):
    """Every waiter on a failing parse gets the error, and none finds a poisoned entry."""
    path = root / "missing.md"
    parser = CountingParser()
    cache = ParsedFileCache(parser)
    observed = []

    async def waiter():
        try:
            await cache.resolve(str(path))
        except DocumentReadError:
            observed.append(str(path) in cache)

    async def main():
        await asyncio.gather(*(waiter() for _ in range(5)))

    asyncio.run(main())
    assert parser.calls == 1
    assert observed == [False] * 5
    assert len(cache) == 0


def test_cache_passes_suggestion_settings(write):
    path = write("doc.md", "# Alpha\n\n## Alphabet\n\n## Beta\n")
    cache = ParsedFileCache(similarity_threshold=0.1, max_suggestions=1)
    doc = asyncio.run(cache.resolve(str(path)))
    assert len(doc.find_similar_anchors("Alpha")) == 1
