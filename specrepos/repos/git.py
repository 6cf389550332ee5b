"""
Git — Thin binding over the git executable.

Every call takes an explicit working directory; the process cwd is never
changed. Calls block until git exits (clones of large spec repos can take
minutes, so there is no timeout).
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..errors import SubprocessFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitResult:
    """Captured output of one git invocation."""

    stdout: str
    status: int
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.status == 0


class GitExecutable:
    """Runs git subcommands."""

    def __init__(self, executable: str = "git"):
        self.executable = executable

    def run(self, args: Sequence[str], cwd: Path) -> GitResult:
        """Run `git <args>` inside cwd and capture its output."""
        cmd = [self.executable] + list(args)
        logger.debug(f"[repo-git] {' '.join(cmd)} (cwd={cwd})", extra={"command": cmd})
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd),
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            # Missing executable or missing cwd
            raise SubprocessFailure(cmd, 127, str(e)) from e
        return GitResult(stdout=result.stdout, status=result.returncode, stderr=result.stderr)

    def run_checked(self, args: Sequence[str], cwd: Path) -> GitResult:
        """Run git and raise SubprocessFailure on a non-zero status."""
        result = self.run(args, cwd)
        if not result.ok:
            output = result.stderr.strip() or result.stdout.strip()
            logger.error(
                f"[repo-git] git {' '.join(args)} failed ({result.status}): {output}",
                extra={"command": [self.executable] + list(args)},
            )
            raise SubprocessFailure([self.executable] + list(args), result.status, output)
        return result
