"""
Remote Info — What, if anything, is a mirror tracking?

Derives the current branch, the remote that branch tracks, and the
remote's fetch URL by running read-only git queries inside the mirror.

Each stage needs the previous one and stops quietly when its input is
missing:

    has VCS metadata -> branch -> remote name -> fetch URL

Missing information is a valid answer ("local copy", "no remote
information available"). Only an unexpected git failure raises.

Two ways of finding the branch are supported:

- ``head``: ask git for the branch HEAD points at, then read the branch's
  ``remote`` config key.
- ``branch-list``: scan ``git branch -vv`` for the ``*`` line and take the
  remote from its ``[remote/branch]`` upstream token.

The text parsing lives in pure functions so it can be tested against
captured git output.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple

from ..errors import SubprocessFailure
from .git import GitExecutable
from .registry import Mirror

logger = logging.getLogger(__name__)

STRATEGY_HEAD = "head"
STRATEGY_BRANCH_LIST = "branch-list"
STRATEGIES = (STRATEGY_HEAD, STRATEGY_BRANCH_LIST)

# git config --get: 1 means the key is not set
_CONFIG_KEY_MISSING = 1
# git symbolic-ref --quiet: 1 means HEAD is detached
_NOT_A_SYMBOLIC_REF = 1


@dataclass(frozen=True)
class RemoteTrackingInfo:
    """Tracking state of one mirror. Recomputed on every call, never stored."""

    has_vcs_metadata: bool = False
    branch: Optional[str] = None
    remote_name: Optional[str] = None
    remote_url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.remote_url is not None and self.remote_name is None:
            raise ValueError("remote_url requires remote_name")
        if self.remote_name is not None and self.branch is None:
            raise ValueError("remote_name requires branch")
        if self.branch is not None and not self.has_vcs_metadata:
            raise ValueError("branch requires VCS metadata")

    def describe(self) -> str:
        """The `type:` line shown by `repo list`."""
        if not self.has_vcs_metadata:
            return "local copy"
        if self.remote_name is None:
            return "git (no remote information available)"
        return f"git ({self.remote_name})"


@dataclass(frozen=True)
class TrackingLine:
    """One parsed line of `git branch -vv`."""

    current: bool
    branch: Optional[str]
    upstream: Optional[str] = None
    remote_name: Optional[str] = None


# "* master  1a2b3c4 [origin/master: behind 2] Subject"
# "  (HEAD detached at 1a2b3c4) 1a2b3c4 Subject"
_BRANCH_LINE_RE = re.compile(
    r"^(?P<marker>[*+ ]) (?P<name>\(.*?\)|\S+)\s+(?P<sha>[0-9a-f]{4,64})(?:\s+(?P<rest>.*))?$"
)


def parse_tracking_line(raw: str) -> Optional[TrackingLine]:
    """
    Parse one line of `git branch -vv --no-color` output.

    Returns None for lines that are not branch entries. A detached HEAD
    yields ``branch=None``. The upstream token is only recognised when it
    directly follows the commit hash and names a remote branch
    (``[origin/master]``); an upstream without a ``/`` is a local branch
    and carries no remote.
    """
    match = _BRANCH_LINE_RE.match(raw.rstrip("\r\n"))
    if not match:
        return None

    current = match.group("marker") == "*"
    name = match.group("name")
    branch = None if name.startswith("(") else name

    upstream = None
    remote_name = None
    rest = match.group("rest") or ""
    if rest.startswith("["):
        end = rest.find("]")
        if end > 0:
            token = rest[1:end].split(":", 1)[0].strip()
            if token and " " not in token:
                upstream = token
                if "/" in token:
                    remote_name = token.split("/", 1)[0]

    return TrackingLine(current=current, branch=branch, upstream=upstream, remote_name=remote_name)


def find_current_branch(lines: Iterable[str]) -> Optional[TrackingLine]:
    """Return the parsed `*` line of a `git branch -vv` listing, if any."""
    for raw in lines:
        parsed = parse_tracking_line(raw)
        if parsed is not None and parsed.current:
            return parsed
    return None


def parse_current_branch(output: str) -> Optional[str]:
    """
    Parse the branch name printed by `git symbolic-ref --short HEAD`.

    Also accepts `git name-rev --name-only HEAD` output, which describes
    HEAD relative to a ref: ``undefined``, ``remotes/…``, ``tags/…`` and
    ``master~2`` style answers mean HEAD is not on a local branch tip.
    """
    name = output.strip()
    if not name or name in ("HEAD", "undefined"):
        return None
    if name.startswith(("remotes/", "tags/")):
        return None
    if "~" in name or "^" in name:
        return None
    return name


def parse_fetch_url(output: str) -> Optional[str]:
    """Pull the fetch URL out of `git remote show -n <remote>` output."""
    for line in output.splitlines():
        stripped = line.strip()
        if stripped.startswith("Fetch URL:"):
            url = stripped[len("Fetch URL:"):].strip()
            return url or None
    return None


class RemoteInfoInspector:
    """Read-only inspection of a mirror's tracking state."""

    def __init__(self, git: GitExecutable, strategy: str = STRATEGY_HEAD):
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown branch strategy: {strategy}")
        self.git = git
        self.strategy = strategy

    def inspect(self, mirror: Mirror) -> RemoteTrackingInfo:
        path = mirror.path
        if not self.has_vcs_metadata(path):
            logger.debug(f"[repo-info] {mirror.name}: no VCS metadata")
            return RemoteTrackingInfo(has_vcs_metadata=False)

        if self.strategy == STRATEGY_BRANCH_LIST:
            branch, remote_name = self._branch_and_remote_from_listing(path)
        else:
            branch = self.current_branch(path)
            remote_name = self.branch_remote_name(path, branch) if branch else None

        if branch is None:
            logger.debug(f"[repo-info] {mirror.name}: HEAD is not on a branch")
            return RemoteTrackingInfo(has_vcs_metadata=True)
        if remote_name is None:
            return RemoteTrackingInfo(has_vcs_metadata=True, branch=branch)

        return RemoteTrackingInfo(
            has_vcs_metadata=True,
            branch=branch,
            remote_name=remote_name,
            remote_url=self.remote_url(path, remote_name),
        )

    def has_vcs_metadata(self, path: Path) -> bool:
        """True when path is the top of its own git work tree."""
        if not path.is_dir():
            return False
        result = self.git.run(["rev-parse", "--show-toplevel"], cwd=path)
        if not result.ok:
            return False
        toplevel = result.stdout.strip()
        if not toplevel:
            return False
        # A plain directory inside someone else's checkout is still a local copy
        return Path(toplevel).resolve() == path.resolve()

    def current_branch(self, path: Path) -> Optional[str]:
        result = self.git.run(["symbolic-ref", "--quiet", "--short", "HEAD"], cwd=path)
        if result.status == _NOT_A_SYMBOLIC_REF and not result.stdout.strip():
            return None
        if not result.ok:
            raise SubprocessFailure(
                [self.git.executable, "symbolic-ref", "--quiet", "--short", "HEAD"],
                result.status,
                result.stderr.strip(),
            )
        return parse_current_branch(result.stdout)

    def branch_remote_name(self, path: Path, branch: str) -> Optional[str]:
        key = f"branch.{branch}.remote"
        result = self.git.run(["config", "--get", key], cwd=path)
        if result.status == _CONFIG_KEY_MISSING:
            return None
        if not result.ok:
            raise SubprocessFailure(
                [self.git.executable, "config", "--get", key],
                result.status,
                result.stderr.strip(),
            )
        # "." means the upstream is another local branch
        remote = result.stdout.strip()
        return remote if remote and remote != "." else None

    def remote_url(self, path: Path, remote_name: str) -> Optional[str]:
        result = self.git.run_checked(["remote", "show", "-n", remote_name], cwd=path)
        return parse_fetch_url(result.stdout)

    def _branch_and_remote_from_listing(self, path: Path) -> Tuple[Optional[str], Optional[str]]:
        result = self.git.run_checked(["branch", "-vv", "--no-color"], cwd=path)
        line = find_current_branch(result.stdout.splitlines())
        if line is None or line.branch is None:
            return None, None
        return line.branch, line.remote_name
