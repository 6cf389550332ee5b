"""
Mirror Lifecycle — Add, update and remove spec-repo mirrors.

## Usage

    from specrepos.repos.lifecycle import MirrorLifecycle

    lifecycle = MirrorLifecycle.from_settings(settings)
    lifecycle.add("master", "https://github.com/CocoaPods/Specs.git")
    results = lifecycle.update()        # every mirror, best effort
    lifecycle.remove("master")

Add and remove fail fast. Update is best effort: a mirror that fails to
pull is recorded and the rest are still attempted.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Dict, Optional

from ..config import RepoSettings
from ..errors import AlreadyExistsError, NotFoundError, RepoError, UsageError
from .git import GitExecutable
from .registry import Mirror, RepositoryRegistry
from .remote_info import RemoteInfoInspector
from .version_check import VersionChecker

logger = logging.getLogger(__name__)

# {mirror_name: {"ok": bool, "error": str|None, "detail": str|None, "notices": [str]}}
UpdateResult = Dict[str, dict]


def _validate_name(name: Optional[str], usage: str) -> str:
    if not name:
        raise UsageError(usage)
    if name in (".", "..") or "/" in name or "\\" in name:
        raise UsageError(f"`{name}` is not a valid repo name.")
    return name


class MirrorLifecycle:
    """Mutating operations on the registry."""

    def __init__(
        self,
        registry: RepositoryRegistry,
        git: GitExecutable,
        version_checker: VersionChecker,
        inspector: Optional[RemoteInfoInspector] = None,
    ):
        self.registry = registry
        self.git = git
        self.version_checker = version_checker
        self.inspector = inspector or RemoteInfoInspector(git)

    @classmethod
    def from_settings(cls, settings: RepoSettings, git: Optional[GitExecutable] = None) -> "MirrorLifecycle":
        git = git or GitExecutable(settings.git_executable)
        return cls(
            RepositoryRegistry(settings.repos_dir),
            git,
            VersionChecker(settings.tool_version),
        )

    # ─── Add ────────────────────────────────────────────────

    def add(self, name: Optional[str], url: Optional[str], branch: Optional[str] = None) -> Mirror:
        """
        Clone url into the registry as name.

        Raises UsageError, AlreadyExistsError, SubprocessFailure or
        IncompatibleRepoError. A failed clone or checkout is not rolled
        back; remove the mirror and add it again.
        """
        if not url:
            raise UsageError("Adding a repo needs a `NAME` and a `URL`.")
        _validate_name(name, "Adding a repo needs a `NAME` and a `URL`.")

        mirror = self.registry.resolve(name)
        if mirror.path.exists():
            raise AlreadyExistsError(name, mirror.path)

        self.registry.root.mkdir(parents=True, exist_ok=True)

        logger.info(f"[repo-add] Cloning {url} into {mirror.path}", extra={"repo": name})
        self.git.run_checked(["clone", "--", url, name], cwd=self.registry.root)

        if branch:
            logger.info(f"[repo-add] Checking out branch {branch} in {name}", extra={"repo": name})
            self.git.run_checked(["checkout", branch], cwd=mirror.path)

        check = self.version_checker.verify(mirror.path)
        for notice in check.notices:
            logger.warning(f"[repo-add] {notice}", extra={"repo": name})
        return mirror

    # ─── Update ─────────────────────────────────────────────

    def update(self, name: Optional[str] = None) -> UpdateResult:
        """
        Pull the named mirror, or every mirror when name is omitted.

        Returns per-mirror results; only an invalid or missing named mirror
        raises.
        """
        if name is not None:
            _validate_name(name, "Updating a repo needs a `NAME`.")
            if not self.registry.exists(name):
                raise NotFoundError(name, self.registry.resolve(name).path)
            mirrors = [self.registry.resolve(name)]
        else:
            mirrors = sorted(self.registry.list(), key=lambda m: m.name)

        results: UpdateResult = {}
        for mirror in mirrors:
            results[mirror.name] = self._update_one(mirror)

        ok_count = sum(1 for r in results.values() if r["ok"])
        logger.info(f"[repo-update] {ok_count}/{len(results)} repos updated")
        return results

    def _update_one(self, mirror: Mirror) -> dict:
        if not self.inspector.has_vcs_metadata(mirror.path):
            logger.info(f"[repo-update] {mirror.name}: local copy, skipping", extra={"repo": mirror.name})
            return {"ok": True, "error": None, "detail": "local copy", "notices": []}

        try:
            result = self.git.run_checked(["pull", "--ff-only"], cwd=mirror.path)
        except RepoError as e:
            logger.error(f"[repo-update] {mirror.name}: {e}", extra={"repo": mirror.name})
            return {"ok": False, "error": str(e), "detail": None, "notices": []}

        output = result.stdout.strip()
        detail = "up to date" if "Already up" in output else "updated"
        check = self.version_checker.check(mirror.path)
        notices = list(check.notices)
        if not check.compatible and check.problem:
            notices.append(check.problem)
        return {"ok": True, "error": None, "detail": detail, "notices": notices}

    # ─── Remove ─────────────────────────────────────────────

    def remove(self, name: Optional[str]) -> Path:
        """Delete the mirror directory and everything in it."""
        _validate_name(name, "Deleting a repo needs a `NAME`.")

        mirror = self.registry.resolve(name)
        if not mirror.path.is_dir():
            raise NotFoundError(name, mirror.path)

        logger.info(f"[repo-remove] Removing {mirror.path}", extra={"repo": name})
        if mirror.path.is_symlink():
            mirror.path.unlink()
        else:
            shutil.rmtree(mirror.path)
        return mirror.path
