"""
Lint — Validate one or more spec repos and decide pass/fail.

Every target is analysed and rendered in full, one after the other. The
verdict is decided only after the last target: the run fails when any
error message was found in any repo. Warnings never fail a run.

## Usage

    from specrepos.repos.lint import ValidationAggregator

    aggregator = ValidationAggregator(VersionChecker(__version__))
    result = aggregator.lint(resolve_targets(registry, name))
    if result.failure:
        raise SystemExit(1)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

import click

from ..errors import NotFoundError
from ..health import HealthReport, HealthReporter
from ..health.models import PodsByMessage
from .registry import Mirror, RepositoryRegistry
from .version_check import VersionChecker, parse_version

logger = logging.getLogger(__name__)

Echo = Callable[..., None]
ReporterFactory = Callable[[Path], HealthReporter]


@dataclass(frozen=True)
class ValidationFailure:
    """Lint found errors. Carries the number of distinct error messages."""

    error_count: int
    target_count: int = 1

    @property
    def message(self) -> str:
        repos = "repo" if self.target_count == 1 else "repos"
        return (
            f"{self.error_count} podspecs failed validation "
            f"across {self.target_count} {repos}."
        )


@dataclass
class LintResult:
    """Outcome of a whole lint run."""

    reports: Dict[str, HealthReport] = field(default_factory=dict)
    totals: HealthReport = field(default_factory=HealthReport)

    @property
    def error_count(self) -> int:
        return self.totals.error_count

    @property
    def failure(self) -> Optional[ValidationFailure]:
        if self.error_count == 0:
            return None
        return ValidationFailure(self.error_count, len(self.reports))

    @property
    def success(self) -> bool:
        return self.failure is None


def resolve_targets(registry: RepositoryRegistry, name: Optional[str] = None) -> List[Mirror]:
    """
    Turn the lint argument into targets.

    An existing directory wins, then a registered mirror of that name.
    Without an argument every registered mirror is linted, by name.
    """
    if name:
        candidate = Path(name)
        if candidate.is_dir():
            return [Mirror(name=candidate.resolve().name, path=candidate)]
        mirror = registry.resolve(name)
        if not mirror.path.is_dir():
            raise NotFoundError(name, mirror.path)
        return [mirror]
    return sorted(registry.list(), key=lambda m: m.name)


class ValidationAggregator:
    """Runs the health reporter over targets and renders the findings."""

    def __init__(
        self,
        version_checker: VersionChecker,
        reporter_factory: ReporterFactory = HealthReporter,
        echo: Echo = click.secho,
        only_errors: bool = False,
    ):
        self.version_checker = version_checker
        self.reporter_factory = reporter_factory
        self.echo = echo
        self.only_errors = only_errors

    def lint(self, targets: List[Mirror]) -> LintResult:
        result = LintResult()
        for target in targets:
            report = self.lint_one(target)
            result.reports[target.name] = report
            result.totals.merge(report)

        logger.info(
            f"[repo-lint] {len(targets)} repo(s), "
            f"{result.totals.analyzed_count} specs, {result.error_count} error message(s)"
        )
        return result

    def lint_one(self, target: Mirror) -> HealthReport:
        """Analyse and render one target. Never decides the verdict."""
        check = self.version_checker.check(target.path)
        for notice in check.notices:
            self.echo(notice, fg="yellow")
        if check.problem:
            self.echo(check.problem, fg="yellow")

        self.echo(f"\nLinting spec repo `{target.name}`\n", fg="yellow")

        reporter = self.reporter_factory(target.path)
        reporter.pre_check(lambda pod, version: self.echo(".", nl=False))
        report = reporter.analyze()
        self.echo("")
        self.echo("")

        if not self.only_errors:
            self._render(report.pods_by_warning, "yellow")
        self._render(report.pods_by_error, "red")

        self.echo(f"Analyzed {report.analyzed_count} podspecs files.\n")
        if report.has_errors:
            self.echo(f"{report.error_count} podspecs failed validation.\n", fg="red")
        else:
            self.echo("All the specs passed validation.\n", fg="green")
        return report

    def _render(self, pods_by_message: PodsByMessage, color: str) -> None:
        for message, versions_by_pod in pods_by_message.items():
            self.echo(f"-> {message}", fg=color)
            for pod, versions in versions_by_pod.items():
                ordered = sorted(versions, key=lambda v: (parse_version(v) or (), v))
                self.echo(f"  - {pod} ({', '.join(ordered)})")
            self.echo("")
