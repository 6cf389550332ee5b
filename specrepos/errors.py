"""
Errors — Failure taxonomy for repo operations.

Absence that is expected (no tracking branch, no remote, no VCS metadata)
is never an error; it is reported as a status line instead.

## Usage

    from specrepos.errors import NotFoundError, RepoError

    try:
        lifecycle.remove(name)
    except RepoError as e:
        print(f"Failed: {e}")
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


class RepoError(Exception):
    """Base class for all repo operation failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class UsageError(RepoError):
    """A required argument is missing or malformed. Nothing was changed."""


class NotFoundError(RepoError):
    """The target mirror does not exist."""

    def __init__(self, name: str, path: Optional[Any] = None):
        self.name = name
        self.path = path
        super().__init__(f"repo {name} does not exist", {"path": str(path) if path else None})


class AlreadyExistsError(RepoError):
    """A mirror with that name is already present in the registry."""

    def __init__(self, name: str, path: Optional[Any] = None):
        self.name = name
        self.path = path
        super().__init__(f"repo {name} already exists", {"path": str(path) if path else None})


class SubprocessFailure(RepoError):
    """The VCS executable returned a non-zero status where success was required."""

    def __init__(self, command: Sequence[str], status: int, output: str = ""):
        self.command: List[str] = list(command)
        self.status = status
        self.output = output
        message = f"`{' '.join(self.command)}` failed with exit status {status}"
        if output.strip():
            message += f": {output.strip()}"
        super().__init__(message, {"command": self.command, "status": status})


class IncompatibleRepoError(RepoError):
    """The mirror declares it needs a different version of this tool."""
