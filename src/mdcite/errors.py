"""Typed infrastructure errors raised by the parse/cache/validate pipeline"""

from __future__ import annotations


class DocumentReadError(RuntimeError):
    """Raised when a markdown document cannot be read or decoded."""

    def __init__(self, path: str, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.__cause__ = cause


class SourceNotFoundError(DocumentReadError):
    """Raised when the document being validated does not exist."""


class ContentNotFoundError(LookupError):
    """Raised when a heading or block anchor is missing from a document at extraction time."""

    def __init__(self, path: str, anchor: str) -> None:
        super().__init__(f"Anchor not found in {path}: #{anchor}")
        self.path = path
        self.anchor = anchor
