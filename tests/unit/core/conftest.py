"""Shared fixtures for core unit tests"""

import pytest

from mdcite.core.document import ParsedDocument
from mdcite.core.parse import MarkdownParser


SAMPLE_MD = """\
# Guide
Intro text.
## Setup
Install it.
### Details
More.
## Usage
Run it.
"""

ANCHORS_MD = """\
# Story 1.5: Cache

A paragraph with a block id. ^para-one

## Title {#custom}

==**Component**== is defined here.

## `init()` **setup**
"""


@pytest.fixture(name="parser")
def parser_fixture():
    return MarkdownParser()


@pytest.fixture(name="make_doc")
def make_doc_fixture(parser):
    """Build a ParsedDocument from text without touching the filesystem."""
    def _make(text: str, path: str = "/virtual/doc.md") -> ParsedDocument:
        return ParsedDocument(parser.parse_text(text, path))
    return _make


@pytest.fixture(name="sample_doc")
def sample_doc_fixture(make_doc):
    return make_doc(SAMPLE_MD)


@pytest.fixture(name="anchors_doc")
def anchors_doc_fixture(make_doc):
    return make_doc(ANCHORS_MD)
