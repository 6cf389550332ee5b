"""
Health — Podspec checks for spec repos.

`HealthReporter` walks a repo and returns a `HealthReport` of warnings
and errors grouped by message.
"""

from .models import HealthReport
from .reporter import HealthReporter

__all__ = ["HealthReport", "HealthReporter"]
