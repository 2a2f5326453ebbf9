"""Unit tests for core/utils (hashing, similarity, paths)"""

import hashlib

from mdcite.core.utils.hashing import content_id, sha256
from mdcite.core.utils.paths import cache_key, relative_to_source, resolve_relative
from mdcite.core.utils.similarity import rank_similar, similarity


def test_sha256_matches_hashlib():
    assert sha256("hello") == hashlib.sha256(b"hello").hexdigest()


def test_content_id_fixed_width_prefix():
    assert content_id("Hello world.") == sha256("Hello world.")[:16]
    assert content_id("a") != content_id("b")


def test_similarity_bounds():
    assert similarity("Setup", "Setup") == 1.0
    assert similarity("", "Setup") == 0.0
    assert 0.0 < similarity("Setpu", "Setup") < 1.0


def test_similarity_case_insensitive():
    assert similarity("INTRO", "intro") == 1.0


def test_rank_similar_orders_and_limits():
    candidates = ["Sample Header", "Sample%20Header", "Unrelated", "Sample Header"]
    assert rank_similar("Sample-Header", candidates, 0.5, 5) == ["Sample Header", "Sample%20Header"]
    assert rank_similar("Sample-Header", candidates, 0.5, 1) == ["Sample Header"]
    assert rank_similar("Sample-Header", candidates, 0.99, 5) == []


def test_cache_key_normalizes_without_resolving_symlinks(root):
    link = root / "alias"
    link.symlink_to(root)
    key = cache_key(str(link / "x" / ".." / "doc.md"))
    assert key == str(root / "alias" / "doc.md")


def test_resolve_relative_and_back():
    absolute = resolve_relative("../b/c.md", "/docs/a/source.md")
    assert absolute == "/docs/b/c.md"
    assert relative_to_source(absolute, "/docs/a/source.md") == "../b/c.md"
    assert resolve_relative("/abs/x.md", "/docs/source.md") == "/abs/x.md"
