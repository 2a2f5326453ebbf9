"""Citation validation: target resolution chain, anchor checks, and link enrichment"""

import asyncio
import logging
import os
import re
from typing import Optional

from mdcite.core.cache import ParsedFileCache
from mdcite.core.document import ParsedDocument
from mdcite.core.file_index import FileResolution, FilenameResolver
from mdcite.core.models import (
    ErrorValidation,
    Link,
    LinkScope,
    LinkType,
    PathConversion,
    ValidValidation,
    ValidationResult,
    WarningValidation,
)
from mdcite.core.utils.paths import decode, is_file, relative_to_source
from mdcite.errors import DocumentReadError, SourceNotFoundError


logger = logging.getLogger(__name__)

CARET_PATTERN = re.compile(
    r'^\^([A-Za-z]{2,3}\d+(?:-\d+[a-z]?(?:AC\d+|T\d+(?:-\d+)?)?)?|[A-Za-z]+\d+|MVP-P\d+|[a-z][a-z0-9-]+[a-z0-9])$'
)
CARET_EXAMPLES = ("^FR1", "^US1-1AC1", "^US1-4bT1-1", "^NFR2", "^MVP-P1", "^black-box-interfaces")
VAULT_PATH_RE = re.compile(r'^[A-Za-z0-9_-]+/')


# --- resolution strategies: (raw link path, source file) -> existing file or None ---

def _candidates(raw: str) -> list[str]:
    """Decoded form first; the raw form too when decoding changed it."""
    return list(dict.fromkeys((decode(raw), raw)))


def literal_path(raw: str, source: str) -> Optional[str]:
    """The path as written, relative to the source document's directory."""
    source_dir = os.path.dirname(source)
    for candidate in _candidates(raw):
        path = os.path.normpath(os.path.join(source_dir, candidate))
        if is_file(path):
            return path
    return None


def symlink_path(raw: str, source: str) -> Optional[str]:
    """The path as written, relative to the directory the source symlink points into."""
    real_source = os.path.realpath(source)
    if real_source == source:
        return None
    return literal_path(raw, real_source)


def is_vault_absolute(raw: str) -> bool:
    return bool(VAULT_PATH_RE.match(raw)) and not os.path.isabs(raw)


def vault_absolute_path(raw: str, source: str) -> Optional[str]:
    """'folder/note.md' rooted at some ancestor of the source document (vault root)."""
    decoded = decode(raw)
    if not is_vault_absolute(decoded):
        return None
    current = os.path.dirname(source)
    while current != os.path.dirname(current):
        path = os.path.join(current, decoded)
        if is_file(path):
            return os.path.normpath(path)
        current = os.path.dirname(current)
    return None


RESOLUTION_STRATEGIES = (literal_path, symlink_path, vault_absolute_path)


def resolution_debug_info(raw: str, source: str) -> str:
    """Describe the paths tried for a link whose target could not be found."""
    source_dir = os.path.dirname(source)
    parts = []
    real_source = os.path.realpath(source)
    if real_source != source:
        parts.append(f"Source via symlink: {source} -> {real_source}")
    parts.append(f"Tried: {os.path.normpath(os.path.join(source_dir, decode(raw)))}")
    if real_source != source:
        parts.append(f"Symlink-resolved: {os.path.normpath(os.path.join(os.path.dirname(real_source), decode(raw)))}")
    if is_vault_absolute(decode(raw)):
        parts.append("Detected vault-absolute path format")
    return "; ".join(parts)


def anchor_suggestion(doc: ParsedDocument, anchor: str) -> str:
    """Best fuzzy matches for a missing anchor, plus a hint for kebab-cased heading ids."""
    for anchor_id in doc.get_anchor_ids():
        if ' ' in anchor_id and re.sub(r'\s+', '-', anchor_id.lower()) == anchor:
            return f"Use raw header format: #{anchor_id}"

    similar = doc.find_similar_anchors(anchor)
    if similar:
        others = f" Available anchors: {', '.join(similar[1:])}" if len(similar) > 1 else ""
        return f"Did you mean #{similar[0]}?{others}"
    return "No similar anchors found"


def path_conversion(link: Link, source: str, resolved: str) -> PathConversion:
    """Suggest the source-relative path to where the target actually lives, anchor kept."""
    raw = link.target.path.raw
    anchor = f"#{link.target.anchor}" if link.target.anchor else ""
    # Symlinked directories are resolved on both sides; the source file itself is not.
    real_source = os.path.join(os.path.realpath(os.path.dirname(source)), os.path.basename(source))
    recommended = relative_to_source(os.path.realpath(resolved), real_source)
    return PathConversion(original=f"{raw}{anchor}", recommended=f"{recommended}{anchor}")


class CitationValidator:
    """Validate every citation in a document and enrich each link with its status.

    Cross-document targets are resolved by RESOLUTION_STRATEGIES in order,
    then by the optional filename resolver. A target found only by the
    filename resolver, in a different directory than the link implies, is a
    warning carrying a path conversion.
    """

    def __init__(
        self,
        cache: ParsedFileCache,
        filename_resolver: Optional[FilenameResolver] = None,
        scope: Optional[str] = None,
    ):
        self._cache = cache
        self._resolver = filename_resolver
        self._scope = scope

    async def validate(self, path: str) -> ValidationResult:
        """Validate all links of the document at path; links are validated concurrently."""
        if not is_file(path):
            raise SourceNotFoundError(str(path), f"File not found: {path}")
        doc = await self._cache.resolve(path)
        links = doc.get_links()
        await asyncio.gather(*(self.validate_link(link, source_doc=doc) for link in links))
        return ValidationResult(links=links)

    async def validate_link(
        self,
        link: Link,
        source_path: Optional[str] = None,
        source_doc: Optional[ParsedDocument] = None,
    ) -> Link:
        """Validate one link and set link.validation in place; returns the same link."""
        source = source_path or link.source_path
        if link.scope == LinkScope.internal:
            link.validation = await self._validate_internal(link, source, source_doc)
        else:
            link.validation = await self._validate_cross_document(link, source)
        return link

    # --- internal links ---

    async def _validate_internal(self, link: Link, source: str, source_doc: Optional[ParsedDocument]):
        anchor = link.target.anchor or ""
        if link.link_type == LinkType.caret:
            caret = anchor if anchor.startswith('^') else f"^{anchor}"
            if CARET_PATTERN.match(caret):
                return ValidValidation()
            return ErrorValidation(
                error=f"Invalid caret pattern: {caret}",
                suggestion=f"Use format: {', '.join(CARET_EXAMPLES)}",
            )

        doc = source_doc or await self._cache.resolve(source)
        if doc.has_anchor(anchor):
            return ValidValidation()
        return ErrorValidation(error=f"Anchor not found: #{anchor}", suggestion=anchor_suggestion(doc, anchor))

    # --- cross-document links ---

    async def _validate_cross_document(self, link: Link, source: str):
        raw = link.target.path.raw
        resolved = self._resolve_direct(raw, source)
        if resolved is not None:
            return await self._check_anchor(link, resolved, ValidValidation(resolved_path=resolved))

        resolution = self._resolve_by_filename(raw)
        if resolution is None or not resolution.found:
            debug = resolution_debug_info(raw, source)
            hint = resolution.message if resolution is not None else "Check if file exists or fix path."
            return ErrorValidation(error=f"File not found: {raw}", suggestion=f"{hint} {debug}")

        resolved = resolution.path
        expected_dir = os.path.dirname(os.path.join(os.path.dirname(source), decode(raw)))
        if os.path.realpath(os.path.dirname(resolved)) == os.path.realpath(expected_dir):
            return await self._check_anchor(link, resolved, ValidValidation(resolved_path=resolved))

        message = f"Found via file index in different directory: {resolved}"
        outcome = WarningValidation(
            error=message,
            path_conversion=path_conversion(link, source, resolved),
            resolved_path=resolved,
            suggestion=resolution.message,
        )
        return await self._check_anchor(link, resolved, outcome, note=message)

    def _resolve_direct(self, raw: str, source: str) -> Optional[str]:
        for strategy in RESOLUTION_STRATEGIES:
            path = strategy(raw, source)
            if path is not None:
                logger.debug("%s resolved %s -> %s", strategy.__name__, raw, path)
                return path
        return None

    def _resolve_by_filename(self, raw: str) -> Optional[FileResolution]:
        if self._resolver is None:
            return None
        resolution = self._resolver.resolve(os.path.basename(decode(raw)), self._scope)
        if resolution.found:
            logger.debug("filename index resolved %s -> %s (%s)", raw, resolution.path, resolution.reason)
        return resolution

    async def _check_anchor(self, link: Link, target: str, outcome, note: Optional[str] = None):
        """Return outcome if the link's anchor exists in target, else an anchor error."""
        anchor = link.target.anchor
        if not anchor:
            return outcome
        try:
            doc = await self._cache.resolve(target)
        except DocumentReadError as e:
            return ErrorValidation(error=f"Cannot read target file: {target}", suggestion=str(e))
        if doc.has_anchor(anchor):
            return outcome
        error = f"Anchor not found: #{anchor}"
        return ErrorValidation(
            error=f"{note}. {error}" if note else error,
            suggestion=anchor_suggestion(doc, anchor),
        )
