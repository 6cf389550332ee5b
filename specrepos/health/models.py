"""
Health Models — Result of analysing a spec repo.

Findings are grouped by message first, then by pod, so that many pods
failing the same check collapse under one header:

    {"Missing required attribute `license`": {"Alamofire": {"1.0.0", "1.1.0"}}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Set

# message -> pod name -> versions
PodsByMessage = Dict[str, Dict[str, Set[str]]]


def _add(bucket: PodsByMessage, message: str, pod: str, version: str) -> None:
    bucket.setdefault(message, {}).setdefault(pod, set()).add(version)


def _merge(into: PodsByMessage, other: PodsByMessage) -> None:
    for message, versions_by_pod in other.items():
        target = into.setdefault(message, {})
        for pod, versions in versions_by_pod.items():
            target.setdefault(pod, set()).update(versions)


@dataclass
class HealthReport:
    """Warnings and errors found in one (or several merged) repos."""

    analyzed_paths: List[Path] = field(default_factory=list)
    pods_by_warning: PodsByMessage = field(default_factory=dict)
    pods_by_error: PodsByMessage = field(default_factory=dict)

    @property
    def analyzed_count(self) -> int:
        return len(self.analyzed_paths)

    @property
    def error_count(self) -> int:
        """Number of distinct error messages."""
        return len(self.pods_by_error)

    @property
    def has_errors(self) -> bool:
        return bool(self.pods_by_error)

    def add_warning(self, message: str, pod: str, version: str) -> None:
        _add(self.pods_by_warning, message, pod, version)

    def add_error(self, message: str, pod: str, version: str) -> None:
        _add(self.pods_by_error, message, pod, version)

    def merge(self, other: "HealthReport") -> None:
        """Fold another report into this one, keeping message order."""
        self.analyzed_paths.extend(other.analyzed_paths)
        _merge(self.pods_by_warning, other.pods_by_warning)
        _merge(self.pods_by_error, other.pods_by_error)
