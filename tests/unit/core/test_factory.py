"""Unit tests for core/factory.py"""

import pytest

from mdcite.config import Settings
from mdcite.core.factory import LinkFactory, build_components
from mdcite.core.models import AnchorType, LinkScope


def test_header_link_is_cross_document(root):
    link = LinkFactory(str(root)).header_link("docs/guide.md", "Setup")
    assert link.scope == LinkScope.cross_document
    assert link.anchor_type == AnchorType.header
    assert link.target.anchor == "Setup"
    assert link.target.path.absolute == str(root / "docs" / "guide.md")
    assert link.target.path.relative == "docs/guide.md"
    assert link.full_match == "[Setup](docs/guide.md#Setup)"
    assert (link.line, link.column) == (0, 0)


def test_file_link_has_no_anchor(root):
    link = LinkFactory(str(root)).file_link("guide.md")
    assert link.anchor_type is None
    assert link.target.anchor is None
    assert link.text == "guide.md"


def test_empty_inputs_rejected(root):
    factory = LinkFactory(str(root))
    with pytest.raises(ValueError):
        factory.file_link("  ")
    with pytest.raises(ValueError):
        factory.header_link("guide.md", "")


def test_build_components_share_one_cache(write, root):
    write("a.md", "# A\n")
    components = build_components(Settings(), scope=str(root))
    assert components.file_index is not None
    assert len(components.file_index) == 1


def test_build_components_without_scope():
    assert build_components(Settings()).file_index is None
