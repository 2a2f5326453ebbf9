"""Component wiring and synthetic link construction"""

import os
from typing import NamedTuple, Optional

from mdcite.config import Settings
from mdcite.core.cache import ParsedFileCache
from mdcite.core.content import ContentExtractor
from mdcite.core.file_index import FilenameIndex
from mdcite.core.models import AnchorType, Link, LinkScope, LinkTarget, LinkType, TargetPath
from mdcite.core.parse import MarkdownParser
from mdcite.core.validate import CitationValidator


class Components(NamedTuple):
    cache: ParsedFileCache
    file_index: Optional[FilenameIndex]
    validator: CitationValidator
    extractor: ContentExtractor


def build_components(settings: Settings, scope: Optional[str] = None) -> Components:
    """Wire one run's cache, filename index, validator, and extractor from settings.

    The filename index is only built when a scope directory is given
    (argument first, then settings.scope_dir); the cache is shared by the
    validator and the extractor so each file is parsed once per run.
    """
    cache = ParsedFileCache(
        MarkdownParser(settings.parser_config),
        similarity_threshold=settings.similarity_threshold,
        max_suggestions=settings.max_suggestions,
    )
    scope = scope or settings.scope_dir
    file_index = FilenameIndex(scope) if scope else None
    validator = CitationValidator(cache, file_index, scope)
    return Components(cache, file_index, validator, ContentExtractor(cache))


class LinkFactory:
    """Build cross-document links that have no source document (CLI targets)."""

    def __init__(self, cwd: Optional[str] = None):
        self._cwd = cwd or os.getcwd()

    def _target(self, target_path: str, anchor: Optional[str]) -> tuple[str, LinkTarget]:
        if not target_path or not target_path.strip():
            raise ValueError("target path cannot be empty")
        absolute = os.path.normpath(os.path.join(self._cwd, target_path))
        relative = os.path.relpath(absolute, self._cwd).replace(os.sep, "/")
        return absolute, LinkTarget(path=TargetPath(raw=absolute, absolute=absolute, relative=relative), anchor=anchor)

    def header_link(self, target_path: str, heading: str) -> Link:
        if not heading or not heading.strip():
            raise ValueError("heading cannot be empty")
        absolute, target = self._target(target_path, heading)
        return Link(
            link_type=LinkType.markdown,
            scope=LinkScope.cross_document,
            anchor_type=AnchorType.header,
            source_path=os.path.join(self._cwd, os.path.basename(absolute)),
            target=target,
            text=heading,
            full_match=f"[{heading}]({target_path}#{heading})",
            line=0,
            column=0,
        )

    def file_link(self, target_path: str) -> Link:
        absolute, target = self._target(target_path, None)
        name = os.path.basename(absolute)
        return Link(
            link_type=LinkType.markdown,
            scope=LinkScope.cross_document,
            anchor_type=None,
            source_path=os.path.join(self._cwd, name),
            target=target,
            text=name,
            full_match=f"[{name}]({target_path})",
            line=0,
            column=0,
        )
