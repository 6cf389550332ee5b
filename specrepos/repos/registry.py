"""
Repository Registry — Enumerate and locate mirrors under the repos dir.

The filesystem listing is the registry: every immediate subdirectory of
the root is a mirror, named after the directory. There is no index file.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List


@dataclass(frozen=True)
class Mirror:
    """A local working copy of a spec repo."""

    name: str
    path: Path


class RepositoryRegistry:
    """Lists and resolves mirrors under a single root directory."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def list(self) -> List[Mirror]:
        """
        Return every mirror under the root.

        Order is whatever the filesystem enumerates; sort if you need it
        stable. A missing root means an empty registry.
        """
        if not self.root.is_dir():
            return []
        return [
            Mirror(name=entry.name, path=entry)
            for entry in self.root.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        ]

    def resolve(self, name: str) -> Mirror:
        """Build the mirror for name. The directory need not exist."""
        return Mirror(name=name, path=self.root / name)

    def exists(self, name: str) -> bool:
        return self.resolve(name).path.is_dir()
