"""Filename-only resolution: index a scope directory's markdown files by bare name"""

import difflib
import logging
import os
from pathlib import Path
from typing import Literal, Optional, Protocol

from pydantic import BaseModel


logger = logging.getLogger(__name__)

FUZZY_CUTOFF = 0.85


class FileResolution(BaseModel):
    found: bool
    path: Optional[str] = None
    reason: Literal["direct", "duplicate", "not_found", "fuzzy"]
    message: Optional[str] = None


class FilenameResolver(Protocol):
    def resolve(self, filename: str, scope: Optional[str] = None) -> FileResolution: ...


class FilenameIndex:
    """Map of markdown filename -> absolute path within one scope directory.

    Filenames seen more than once are tracked as duplicates and never
    resolve; the caller has to disambiguate them with a relative path.
    """

    def __init__(self, scope: Optional[str] = None):
        self._files: dict[str, str] = {}
        self._duplicates: set[str] = set()
        self.scope: Optional[str] = None
        if scope is not None:
            self.build(scope)

    @property
    def duplicates(self) -> set[str]:
        return set(self._duplicates)

    def __len__(self) -> int:
        return len(self._files)

    def build(self, scope: str) -> dict:
        """Scan the symlink-resolved scope for .md files; returns build stats.

        Indexed paths are reported under scope as given, so they share a path
        space with sources reached through a symlinked scope.
        """
        self._files.clear()
        self._duplicates.clear()
        given = Path(os.path.normpath(os.path.abspath(scope)))
        root = os.path.realpath(given)
        self.scope = root

        for path in sorted(Path(root).rglob('*.md')):
            if not path.is_file():
                continue
            if path.name in self._files:
                self._duplicates.add(path.name)
            else:
                self._files[path.name] = str(given / path.relative_to(root))

        logger.info("indexed %d markdown files under %s", len(self._files), root)
        if self._duplicates:
            logger.warning("duplicate filenames in scope: %s", ", ".join(sorted(self._duplicates)))
        return {"total_files": len(self._files), "duplicates": len(self._duplicates), "scope": root}

    def resolve(self, filename: str, scope: Optional[str] = None) -> FileResolution:
        """Resolve a bare filename (extension optional) to its unique path in scope."""
        if scope is not None and os.path.realpath(os.path.abspath(scope)) != self.scope:
            self.build(scope)

        name = os.path.basename(filename)
        for candidate in dict.fromkeys((name, f"{name.removesuffix('.md')}.md")):
            if candidate in self._files:
                return self._lookup(candidate, "direct")

        return self._fuzzy(name) or FileResolution(
            found=False, reason="not_found", message=f'File "{name}" not found in scope folder.',
        )

    def _lookup(self, name: str, reason: str, message: Optional[str] = None) -> FileResolution:
        if name in self._duplicates:
            return FileResolution(
                found=False, reason="duplicate",
                message=f'Multiple files named "{name}" found in scope. Use relative path for disambiguation.',
            )
        return FileResolution(found=True, path=self._files[name], reason=reason, message=message)

    def _fuzzy(self, name: str) -> Optional[FileResolution]:
        """Doubled .md extensions first, then close spellings of an indexed name."""
        if name.endswith('.md.md'):
            fixed = name[:-3]
            if fixed in self._files:
                return self._lookup(fixed, "fuzzy", f'Found "{fixed}" (fixed double .md extension)')

        target = name if name.endswith('.md') else f"{name}.md"
        matches = difflib.get_close_matches(target, list(self._files), n=1, cutoff=FUZZY_CUTOFF)
        if matches:
            return self._lookup(matches[0], "fuzzy", f'Found similar file "{matches[0]}" for "{name}"')
        return None
