"""Root test configuration: markdown corpus fixtures written into tmp_path"""

from pathlib import Path

import pytest


@pytest.fixture(name="root")
def root_fixture(tmp_path) -> Path:
    """Symlink-free tmp directory, so resolved paths compare equal to written ones."""
    return tmp_path.resolve()


@pytest.fixture(name="write")
def write_fixture(root):
    """Write a markdown file relative to root and return its path."""
    def _write(rel: str, text: str) -> Path:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path
    return _write
