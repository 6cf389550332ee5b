"""
Spec Repos — CLI Entry Point

Usage:
    specrepos repo add master https://github.com/CocoaPods/Specs.git
    specrepos repo list --count
    specrepos repo lint --only-errors
    python -m specrepos repo update
"""

from __future__ import annotations

from typing import Optional

import click
from dotenv import find_dotenv, load_dotenv

from . import __version__
from .cli.repo import repo
from .config import RepoSettings
from .logging_config import setup_logging

# Load .env before any settings are read
load_dotenv(find_dotenv(usecwd=True))

setup_logging()


@click.group()
@click.version_option(__version__, prog_name="specrepos")
@click.option(
    "--repos-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding the spec repos (default: $SPEC_REPOS_DIR or ~/.specrepos/repos)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Diagnostic log level (default: $LOG_LEVEL or WARNING)",
)
@click.pass_context
def cli(ctx: click.Context, repos_dir: Optional[str], log_level: Optional[str]) -> None:
    """Spec Repos — manage local mirrors of specification repositories."""
    if log_level:
        setup_logging(level=log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = RepoSettings.from_env(repos_dir)


cli.add_command(repo)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
