"""
Shared fixtures for repo tests.

Provides a temporary repos dir and a scripted stand-in for the git
executable, so registry, lifecycle and inspection code can run without
spawning git or touching the network.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from specrepos.repos.git import GitExecutable, GitResult

Effect = Callable[[Path], None]


class FakeGit(GitExecutable):
    """
    Scripted git.

    Responses are keyed by the argument tuple, optionally narrowed to a
    working directory. Unscripted calls fail the test.
    """

    def __init__(self) -> None:
        super().__init__("git")
        self._responses: Dict[Tuple[Tuple[str, ...], Optional[Path]], Tuple[GitResult, Optional[Effect]]] = {}
        self.calls: List[Tuple[List[str], Path]] = []

    def on(
        self,
        *args: str,
        stdout: str = "",
        status: int = 0,
        stderr: str = "",
        cwd: Optional[Path] = None,
        effect: Optional[Effect] = None,
    ) -> "FakeGit":
        key = (tuple(args), Path(cwd) if cwd is not None else None)
        self._responses[key] = (GitResult(stdout=stdout, status=status, stderr=stderr), effect)
        return self

    def run(self, args, cwd):
        cwd = Path(cwd)
        self.calls.append((list(args), cwd))
        entry = self._responses.get((tuple(args), cwd)) or self._responses.get((tuple(args), None))
        if entry is None:
            raise AssertionError(f"unexpected git call: {list(args)} in {cwd}")
        result, effect = entry
        if effect is not None:
            effect(cwd)
        return result

    def commands(self) -> List[List[str]]:
        return [args for args, _ in self.calls]

    def ran(self, *args: str) -> bool:
        return list(args) in self.commands()


def script_git_mirror(
    git: FakeGit,
    path: Path,
    branch: Optional[str] = "master",
    remote: Optional[str] = "origin",
    url: Optional[str] = "https://example.com/Specs.git",
) -> None:
    """Script the queries RemoteInfoInspector makes for one git mirror."""
    git.on("rev-parse", "--show-toplevel", stdout=f"{path}\n", cwd=path)
    if branch is None:
        git.on("symbolic-ref", "--quiet", "--short", "HEAD", status=1, cwd=path)
        return
    git.on("symbolic-ref", "--quiet", "--short", "HEAD", stdout=f"{branch}\n", cwd=path)
    if remote is None:
        git.on("config", "--get", f"branch.{branch}.remote", status=1, cwd=path)
        return
    git.on("config", "--get", f"branch.{branch}.remote", stdout=f"{remote}\n", cwd=path)
    show = f"* remote {remote}\n"
    if url is not None:
        show += f"  Fetch URL: {url}\n  Push  URL: {url}\n"
    show += "  HEAD branch: (not queried)\n"
    git.on("remote", "show", "-n", remote, stdout=show, cwd=path)


def script_local_copy(git: FakeGit, path: Path) -> None:
    """Script a mirror that is not under version control."""
    git.on(
        "rev-parse", "--show-toplevel",
        status=128,
        stderr="fatal: not a git repository (or any of the parent directories): .git",
        cwd=path,
    )


def write_spec(repo: Path, pod: str, version: str, /, **overrides) -> Path:
    """Write a valid JSON podspec at <repo>/<pod>/<version>/<pod>.podspec.json."""
    spec = {
        "name": pod,
        "version": version,
        "summary": f"{pod} does useful things.",
        "description": f"{pod} does useful things, and does them well.",
        "homepage": f"https://example.com/{pod}",
        "license": "MIT",
        "authors": {"Jane": "jane@example.com"},
        "source": {"git": f"https://example.com/{pod}.git", "tag": version},
    }
    spec.update(overrides)
    spec = {k: v for k, v in spec.items() if v is not None}
    path = repo / pod / version / f"{pod}.podspec.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(spec, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def repos_dir(tmp_path: Path) -> Path:
    """An existing, empty repos dir."""
    path = tmp_path / "repos"
    path.mkdir()
    return path


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()
