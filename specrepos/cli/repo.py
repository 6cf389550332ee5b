"""
CLI repo commands — manage and lint the local spec-repo mirrors.

Usage:
    specrepos repo add NAME URL [BRANCH]
    specrepos repo update [NAME]
    specrepos repo remove NAME
    specrepos repo list [--count]
    specrepos repo lint [NAME | DIRECTORY] [--only-errors]

`specrepos repo` on its own runs `repo list`.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import click

from ..config import RepoSettings
from ..errors import RepoError, UsageError
from ..health import HealthReporter
from ..repos.git import GitExecutable
from ..repos.lifecycle import MirrorLifecycle
from ..repos.lint import ValidationAggregator, resolve_targets
from ..repos.registry import RepositoryRegistry
from ..repos.remote_info import STRATEGIES, STRATEGY_HEAD, RemoteInfoInspector
from ..repos.version_check import VersionChecker


@contextmanager
def _repo_errors() -> Iterator[None]:
    """Turn RepoError into the matching click exception (exit 2 or 1)."""
    try:
        yield
    except UsageError as e:
        raise click.UsageError(e.message, ctx=click.get_current_context(silent=True))
    except RepoError as e:
        raise click.ClickException(e.message)


def _settings(ctx: click.Context) -> RepoSettings:
    return ctx.obj["settings"]


def _git(ctx: click.Context) -> GitExecutable:
    # Tests inject a fake through ctx.obj["git"]
    git = ctx.obj.get("git")
    if git is None:
        git = GitExecutable(_settings(ctx).git_executable)
        ctx.obj["git"] = git
    return git


def _lifecycle(ctx: click.Context) -> MirrorLifecycle:
    return MirrorLifecycle.from_settings(_settings(ctx), _git(ctx))


@click.group("repo", invoke_without_command=True)
@click.pass_context
def repo(ctx: click.Context) -> None:
    """Manage spec-repositories."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(repo_list)


@repo.command("add")
@click.argument("name", required=False)
@click.argument("url", required=False)
@click.argument("branch", required=False)
@click.pass_context
def repo_add(ctx: click.Context, name: Optional[str], url: Optional[str], branch: Optional[str]) -> None:
    """Clone URL into the repos dir as NAME (optionally checking out BRANCH)."""
    branch_note = f" (branch `{branch}`)" if branch else ""
    with _repo_errors():
        if not name or not url:
            raise UsageError("Adding a repo needs a `NAME` and a `URL`.")

        click.echo(f"Cloning spec repo `{name}` from `{url}`{branch_note}")
        lifecycle = _lifecycle(ctx)
        mirror = lifecycle.add(name, url, branch)

    click.secho(f"✓ Added `{name}` at {mirror.path}", fg="green")


@repo.command("update")
@click.argument("name", required=False)
@click.pass_context
def repo_update(ctx: click.Context, name: Optional[str]) -> None:
    """Update the spec repo NAME, or every spec repo when NAME is omitted."""
    with _repo_errors():
        results = _lifecycle(ctx).update(name)

    if not results:
        click.echo("No spec repos to update.")
        return

    failed = 0
    for repo_name, result in results.items():
        if result["ok"]:
            click.secho(f"  ✓ {repo_name}: {result['detail']}", fg="green")
            for notice in result.get("notices", []):
                click.secho(f"    {notice}", fg="yellow")
        else:
            failed += 1
            click.secho(f"  ✗ {repo_name}: {result['error']}", fg="red")

    if failed:
        noun = "repo" if failed == 1 else "repos"
        raise click.ClickException(f"{failed} {noun} failed to update.")


@repo.command("remove")
@click.argument("name", required=False)
@click.pass_context
def repo_remove(ctx: click.Context, name: Optional[str]) -> None:
    """Delete the spec repo NAME from the repos dir."""
    with _repo_errors():
        if not name:
            raise UsageError("Deleting a repo needs a `NAME`.")
        click.echo(f"Removing spec repo `{name}`")
        _lifecycle(ctx).remove(name)

    click.secho(f"✓ Removed `{name}`", fg="green")


@repo.command("list")
@click.option("--count", is_flag=True, help="Show the total number of spec repos")
@click.option(
    "--branch-strategy",
    type=click.Choice(STRATEGIES),
    default=STRATEGY_HEAD,
    show_default=True,
    help="How to find each mirror's current branch",
)
@click.pass_context
def repo_list(ctx: click.Context, count: bool, branch_strategy: str = STRATEGY_HEAD) -> None:
    """List the spec repos and what they track."""
    settings = _settings(ctx)
    registry = RepositoryRegistry(settings.repos_dir)
    inspector = RemoteInfoInspector(_git(ctx), strategy=branch_strategy)

    mirrors = sorted(registry.list(), key=lambda m: m.name)
    with _repo_errors():
        for mirror in mirrors:
            info = inspector.inspect(mirror)
            click.secho(mirror.name, bold=True)
            click.echo(f"- type: {info.describe()}")
            if info.remote_url is not None:
                click.echo(f"- URL:  {info.remote_url}")
            click.echo(f"- path: {mirror.path}")
            click.echo()

    if count:
        noun = "repo" if len(mirrors) == 1 else "repos"
        click.echo(f"\n{len(mirrors)} {noun}")


@repo.command("lint")
@click.argument("target", required=False, metavar="[NAME | DIRECTORY]")
@click.option("--only-errors", is_flag=True, help="Lint presents only the errors")
@click.pass_context
def repo_lint(ctx: click.Context, target: Optional[str], only_errors: bool) -> None:
    """Validate all specs in a repo.

    Lints the spec repo NAME. If a directory is given it is taken as the
    root of a repo. Without an argument every spec repo is linted.
    """
    settings = _settings(ctx)
    registry = RepositoryRegistry(settings.repos_dir)
    aggregator = ValidationAggregator(
        VersionChecker(settings.tool_version),
        reporter_factory=ctx.obj.get("reporter_factory") or HealthReporter,
        only_errors=only_errors,
    )

    with _repo_errors():
        targets = resolve_targets(registry, target)
        result = aggregator.lint(targets)

    if result.failure:
        raise click.ClickException(result.failure.message)
