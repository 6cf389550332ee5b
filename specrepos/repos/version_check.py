"""
Version Check — Compare a mirror's declared tool requirements to ours.

A spec repo may ship `repo-version.yml` at its root:

    min: 1.0.0     # oldest tool release that can read this repo
    last: 1.4.2    # newest tool release (used for upgrade notices)
    max: 2.0.0     # newest tool release that can read this repo

Every key is optional, and so is the file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from ..errors import IncompatibleRepoError

logger = logging.getLogger(__name__)

VERSION_FILE = "repo-version.yml"

_VERSION_RE = re.compile(r"^\d+(\.\d+)*")


def parse_version(value: str) -> Optional[Tuple[int, ...]]:
    """Parse the numeric dotted prefix of a version ("1.4.0.beta.2" -> (1, 4))."""
    match = _VERSION_RE.match(value.strip())
    if not match:
        return None
    parts = tuple(int(p) for p in match.group(0).split("."))
    # 1.4 == 1.4.0
    while len(parts) > 1 and parts[-1] == 0:
        parts = parts[:-1]
    return parts


class VersionInfo(BaseModel):
    """Contents of repo-version.yml."""

    min: Optional[str] = None
    last: Optional[str] = None
    max: Optional[str] = None

    @field_validator("min", "last", "max", mode="before")
    @classmethod
    def _coerce_to_str(cls, value: Any) -> Any:
        # YAML reads `1.0` as a float
        if isinstance(value, (int, float)):
            return str(value)
        return value


@dataclass
class VersionCheck:
    """Outcome of comparing one mirror against the running tool version."""

    compatible: bool = True
    notices: List[str] = field(default_factory=list)
    problem: Optional[str] = None


def load_version_info(repo_path: Path) -> Optional[VersionInfo]:
    """Read repo-version.yml, or None when the mirror has none."""
    path = repo_path / VERSION_FILE
    if not path.is_file():
        return None
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.warning(f"[repo-version] Ignoring malformed {path}: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"[repo-version] Ignoring malformed {path}")
        return None
    try:
        return VersionInfo(**data)
    except ValidationError as e:
        logger.warning(f"[repo-version] Ignoring invalid {path}: {e}")
        return None


class VersionChecker:
    """Checks mirrors against the running tool version."""

    def __init__(self, tool_version: str):
        self.tool_version = tool_version

    def check(self, repo_path: Path) -> VersionCheck:
        """Compare without raising."""
        info = load_version_info(repo_path)
        result = VersionCheck()
        if info is None:
            return result

        current = parse_version(self.tool_version)
        if current is None:
            logger.warning(f"[repo-version] Unparseable tool version {self.tool_version!r}")
            return result

        name = repo_path.name
        min_version = parse_version(info.min) if info.min else None
        max_version = parse_version(info.max) if info.max else None
        last_version = parse_version(info.last) if info.last else None

        if min_version and current < min_version:
            result.compatible = False
            result.problem = (
                f"The `{name}` repo requires version {info.min} or later "
                f"(running {self.tool_version}). Please update."
            )
        elif max_version and current > max_version:
            result.compatible = False
            result.problem = (
                f"The `{name}` repo is not compatible with version {self.tool_version} "
                f"(supports up to {info.max})."
            )

        if last_version and current < last_version:
            result.notices.append(
                f"A newer version ({info.last}) is available for the `{name}` repo "
                f"(running {self.tool_version})."
            )

        return result

    def verify(self, repo_path: Path) -> VersionCheck:
        """Compare and raise IncompatibleRepoError when the mirror can't be used."""
        result = self.check(repo_path)
        if not result.compatible:
            raise IncompatibleRepoError(result.problem or "Incompatible repo", {"path": str(repo_path)})
        return result
