"""Path helpers shared by the parser and the validator"""

import os
from urllib.parse import unquote


def cache_key(path: str) -> str:
    """Absolute, normalized path; symlinks are deliberately left unresolved."""
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def resolve_relative(raw_path: str, source_path: str) -> str:
    """Resolve a link path against the directory of the source document."""
    if os.path.isabs(raw_path):
        return os.path.normpath(raw_path)
    return os.path.normpath(os.path.join(os.path.dirname(source_path), raw_path))


def relative_to_source(target_path: str, source_path: str) -> str:
    """Forward-slash relative path from the source document's directory to target."""
    return os.path.relpath(target_path, os.path.dirname(source_path)).replace(os.sep, "/")


def decode(text: str) -> str:
    """Percent-decode text; malformed escapes are left as written."""
    return unquote(text)


def is_file(path: str) -> bool:
    try:
        return os.path.isfile(path)
    except (OSError, ValueError):
        return False
