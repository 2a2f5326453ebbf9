"""Data models for the parse, validate, and extract pipeline"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field


class LinkType(str, Enum):
    """Surface syntax a link was written in"""
    markdown = "markdown"
    wiki = "wiki"
    cite = "cite"
    caret = "caret"


class LinkScope(str, Enum):
    internal = "internal"
    cross_document = "cross-document"


class AnchorType(str, Enum):
    header = "header"
    block = "block"


class Heading(BaseModel):
    level: int
    text: str
    line: int                       # 1-based source line of the heading


class Anchor(BaseModel):
    """An addressable point in a document.

    Header anchors carry a second id variant (colons stripped, whitespace
    percent-encoded) so a heading can be cited by its raw text or by the
    encoded form used by note-linking tools.
    """
    anchor_type: AnchorType
    id: str
    url_encoded_id: Optional[str] = None
    raw_text: Optional[str] = None
    line: int
    column: int = 0


class ExtractionMarker(BaseModel):
    full_match: str                 # marker including delimiters, e.g. "%%force-extract%%"
    inner_text: str


class TargetPath(BaseModel):
    raw: Optional[str] = None
    absolute: Optional[str] = None
    relative: Optional[str] = None


class LinkTarget(BaseModel):
    path: TargetPath = Field(default_factory=TargetPath)
    anchor: Optional[str] = None


class PathConversion(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["path-conversion"] = "path-conversion"
    original: str
    recommended: str


class ValidValidation(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    status: Literal["valid"] = "valid"
    resolved_path: Optional[str] = None


class WarningValidation(BaseModel):
    """Target found only through the filename index, outside the expected directory."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    status: Literal["warning"] = "warning"
    error: str = Field(min_length=1)
    path_conversion: PathConversion
    resolved_path: str
    suggestion: Optional[str] = None


class ErrorValidation(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    status: Literal["error"] = "error"
    error: str = Field(min_length=1)
    suggestion: Optional[str] = None


Validation = Annotated[
    Union[ValidValidation, WarningValidation, ErrorValidation],
    Field(discriminator="status"),
]


class Link(BaseModel):
    """A citation found in a source document, enriched in place with `validation`."""
    link_type: LinkType
    scope: LinkScope
    anchor_type: Optional[AnchorType] = None
    source_path: str
    target: LinkTarget = Field(default_factory=LinkTarget)
    text: Optional[str] = None
    full_match: str
    line: int                       # 1-based
    column: int                     # 0-based
    extraction_marker: Optional[ExtractionMarker] = None
    validation: Optional[Validation] = None


class ValidationSummary(BaseModel):
    total: int = 0
    valid: int = 0
    warning: int = 0
    error: int = 0

    @classmethod
    def from_links(cls, links: list[Link]) -> "ValidationSummary":
        """Fold link statuses into counts; unvalidated links count toward total only."""
        statuses = [link.validation.status for link in links if link.validation is not None]
        return cls(
            total=len(links),
            valid=statuses.count("valid"),
            warning=statuses.count("warning"),
            error=statuses.count("error"),
        )


class ValidationResult(BaseModel):
    links: list[Link]

    @computed_field
    @property
    def summary(self) -> ValidationSummary:
        return ValidationSummary.from_links(self.links)


class ExtractionOptions(BaseModel):
    full_files: bool = False


class EligibilityDecision(NamedTuple):
    eligible: bool
    reason: str


class ContentBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    content_id: str
    content: str
    content_length: int


class LinkOutcome(str, Enum):
    success = "success"
    skipped = "skipped"
    error = "error"


class LinkReport(BaseModel):
    source_link: Link
    status: LinkOutcome
    content_id: Optional[str] = None
    reason: str


class ExtractionStats(BaseModel):
    total_links: int = 0
    unique_content: int = 0
    duplicate_content_detected: int = 0
    tokens_saved: int = 0
    compression_ratio: float = 0.0


class ExtractionResult(BaseModel):
    """Deduplicated content index plus one report per processed link.

    Stats are recomputed from the index and the reports on every access.
    """
    content_index: dict[str, ContentBlock] = Field(default_factory=dict)
    link_reports: list[LinkReport] = Field(default_factory=list)

    @computed_field
    @property
    def stats(self) -> ExtractionStats:
        extracted = [r for r in self.link_reports if r.status == LinkOutcome.success]
        kept = sum(block.content_length for block in self.content_index.values())
        seen = sum(self.content_index[r.content_id].content_length for r in extracted)
        saved = seen - kept
        return ExtractionStats(
            total_links=len(self.link_reports),
            unique_content=len(self.content_index),
            duplicate_content_detected=len(extracted) - len(self.content_index),
            tokens_saved=saved,
            compression_ratio=saved / (kept + saved) if kept + saved else 0.0,
        )

    @computed_field
    @property
    def total_content_length(self) -> int:
        return sum(block.content_length for block in self.content_index.values())


@dataclass
class ParserOutput:
    """Internal parse result carrying markdown-it tokens; owned by ParsedDocument."""
    path:     str
    content:  str
    lines:    list[str]             # content split with line endings kept
    tokens:   list                  # markdown-it Token objects
    headings: list[Heading] = field(default_factory=list)
    anchors:  list[Anchor] = field(default_factory=list)
    links:    list[Link] = field(default_factory=list)
