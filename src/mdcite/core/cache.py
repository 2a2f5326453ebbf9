"""ParsedFileCache: one parse per path per run, shared by every concurrent caller"""

import asyncio
import logging
from typing import Optional

from mdcite.core.document import ParsedDocument
from mdcite.core.parse import MarkdownParser
from mdcite.core.utils.paths import cache_key


logger = logging.getLogger(__name__)


class ParsedFileCache:
    """Memoize ParsedDocument per normalized path.

    The in-flight task itself is stored, so callers arriving while a parse is
    running await the same task instead of starting a second parse. A task
    that fails removes its own entry before the exception reaches any waiter,
    so a later resolve() parses afresh.
    """

    def __init__(
        self,
        parser: Optional[MarkdownParser] = None,
        *,
        similarity_threshold: float = 0.5,
        max_suggestions: int = 5,
    ):
        self._parser = parser or MarkdownParser()
        self._threshold = similarity_threshold
        self._limit = max_suggestions
        self._entries: dict[str, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: str) -> bool:
        return cache_key(path) in self._entries

    async def resolve(self, path: str) -> ParsedDocument:
        """Return the parsed document for path, parsing it at most once."""
        key = cache_key(path)
        task = self._entries.get(key)
        if task is None:
            logger.debug("cache miss: %s", key)
            task = asyncio.create_task(self._load(key))
            self._entries[key] = task
        else:
            logger.debug("cache hit: %s", key)
        return await task

    async def _load(self, key: str) -> ParsedDocument:
        try:
            data = await asyncio.to_thread(self._parser.parse, key)
        except Exception:
            if self._entries.get(key) is asyncio.current_task():
                del self._entries[key]
                logger.warning("evicted failed parse: %s", key)
            raise
        return ParsedDocument(data, similarity_threshold=self._threshold, max_suggestions=self._limit)
