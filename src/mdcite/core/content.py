"""Content extraction: eligibility chain, granular retrieval, and hash deduplication"""

import logging
from typing import Callable, Optional, Sequence

from mdcite.core.cache import ParsedFileCache
from mdcite.core.models import (
    AnchorType,
    ContentBlock,
    EligibilityDecision,
    ExtractionOptions,
    ExtractionResult,
    Link,
    LinkOutcome,
    LinkReport,
    LinkScope,
)
from mdcite.core.utils.hashing import content_id
from mdcite.core.utils.paths import decode
from mdcite.errors import ContentNotFoundError, DocumentReadError


logger = logging.getLogger(__name__)

STOP_MARKER = "stop-extract-link"
FORCE_MARKER = "force-extract"

EligibilityStrategy = Callable[[Link, ExtractionOptions], Optional[EligibilityDecision]]


# --- eligibility strategies: a decision, or None to defer to the next one ---

def _marker(link: Link) -> Optional[str]:
    return link.extraction_marker.inner_text if link.extraction_marker else None


def stop_marker(link: Link, options: ExtractionOptions) -> Optional[EligibilityDecision]:
    if _marker(link) == STOP_MARKER:
        return EligibilityDecision(False, "stop-extract-link marker prevents extraction")
    return None


def force_marker(link: Link, options: ExtractionOptions) -> Optional[EligibilityDecision]:
    if _marker(link) == FORCE_MARKER:
        return EligibilityDecision(True, "force-extract overrides defaults")
    return None


def section_link(link: Link, options: ExtractionOptions) -> Optional[EligibilityDecision]:
    if link.anchor_type is not None:
        return EligibilityDecision(True, "Markdown anchor links eligible by default")
    return None


def full_file_flag(link: Link, options: ExtractionOptions) -> Optional[EligibilityDecision]:
    if options.full_files:
        return EligibilityDecision(True, "CLI flag --full-files forces extraction")
    return EligibilityDecision(False, "Full-file link ineligible without --full-files flag")


DEFAULT_STRATEGIES: tuple[EligibilityStrategy, ...] = (stop_marker, force_marker, section_link, full_file_flag)


def analyze_eligibility(
    link: Link,
    options: ExtractionOptions,
    strategies: Sequence[EligibilityStrategy] = DEFAULT_STRATEGIES,
) -> EligibilityDecision:
    """First decisive strategy wins; order is part of the contract."""
    for strategy in strategies:
        decision = strategy(link, options)
        if decision is not None:
            return decision
    return EligibilityDecision(False, "No strategy matched")


class ContentExtractor:
    """Extract the content cited by validated links into a deduplicated index.

    Identical text from any number of links (or target files) is stored once
    under its content id; every report for that text references the one block.
    """

    def __init__(self, cache: ParsedFileCache, strategies: Sequence[EligibilityStrategy] = DEFAULT_STRATEGIES):
        self._cache = cache
        self._strategies = tuple(strategies)

    async def extract(self, links: Sequence[Link], options: Optional[ExtractionOptions] = None) -> ExtractionResult:
        options = options or ExtractionOptions()
        result = ExtractionResult()

        for link in links:
            if link.scope == LinkScope.internal:
                continue
            result.link_reports.append(await self._process(link, options, result.content_index))
        return result

    async def _process(self, link: Link, options: ExtractionOptions, index: dict[str, ContentBlock]) -> LinkReport:
        if link.validation is None:
            return LinkReport(source_link=link, status=LinkOutcome.skipped, reason="Link was not validated")
        if link.validation.status == "error":
            return LinkReport(
                source_link=link, status=LinkOutcome.skipped,
                reason=f"Link failed validation: {link.validation.error}",
            )

        decision = analyze_eligibility(link, options, self._strategies)
        if not decision.eligible:
            return LinkReport(source_link=link, status=LinkOutcome.skipped, reason=f"Link not eligible: {decision.reason}")

        try:
            text = await self.retrieve(link)
        except (DocumentReadError, ContentNotFoundError) as e:
            logger.warning("extraction failed for %s line %d: %s", link.source_path, link.line, e)
            return LinkReport(source_link=link, status=LinkOutcome.error, reason=f"Extraction failed: {e}")

        cid = content_id(text)
        if cid not in index:
            index[cid] = ContentBlock(content_id=cid, content=text, content_length=len(text))
        else:
            logger.debug("duplicate content %s from %s", cid, link.full_match)
        return LinkReport(source_link=link, status=LinkOutcome.success, content_id=cid, reason=decision.reason)

    async def retrieve(self, link: Link) -> str:
        """Text the link points at: its section, its block, or the whole target file."""
        target = _target_path(link)
        doc = await self._cache.resolve(target)
        anchor = link.target.anchor

        if link.anchor_type == AnchorType.header:
            text = doc.extract_section(decode(anchor or ""))
        elif link.anchor_type == AnchorType.block:
            text = doc.extract_block(anchor or "")
        else:
            return doc.extract_full_content()
        if text is None:
            raise ContentNotFoundError(target, anchor or "")
        return text


def _target_path(link: Link) -> str:
    """Prefer the path validation actually resolved to over the literal target."""
    resolved = getattr(link.validation, "resolved_path", None)
    return resolved or link.target.path.absolute
