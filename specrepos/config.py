"""
Repo Configuration — Parse SPEC_REPOS_* environment variables.

Minimal config (everything has a default):
    SPEC_REPOS_DIR=~/.specrepos/repos
    SPEC_REPOS_GIT=git

The CLI loads a `.env` file before reading these, and `--repos-dir`
overrides SPEC_REPOS_DIR for a single invocation.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import __version__

logger = logging.getLogger(__name__)

DEFAULT_REPOS_DIR = "~/.specrepos/repos"


@dataclass
class RepoSettings:
    """Settings shared by every repo command."""

    repos_dir: Path
    git_executable: str = "git"
    tool_version: str = __version__

    @classmethod
    def from_env(cls, repos_dir: Optional[str] = None) -> "RepoSettings":
        """Build settings from environment variables."""
        raw_dir = repos_dir or os.environ.get("SPEC_REPOS_DIR") or DEFAULT_REPOS_DIR
        git = os.environ.get("SPEC_REPOS_GIT", "").strip() or "git"

        settings = cls(
            repos_dir=Path(raw_dir).expanduser(),
            git_executable=git,
        )
        logger.debug(f"Repos dir: {settings.repos_dir} (git: {settings.git_executable})")
        return settings
