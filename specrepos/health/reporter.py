"""
Health Reporter — Check the podspecs of a spec repo.

Expected layout (an optional top-level `Specs/` directory is honoured):

    <repo>/<Pod>/<version>/<Pod>.podspec.json

The reporter works in two passes, matching what the lint command needs:

    reporter = HealthReporter(repo_path)
    reporter.pre_check(lambda pod, version: print(".", end=""))
    report = reporter.analyze()

`pre_check` walks the tree and flags layout problems; `analyze` loads
every spec and checks its contents. Ruby DSL `.podspec` files cannot be
evaluated here and are only counted.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .models import HealthReport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]

JSON_SPEC_SUFFIX = ".podspec.json"
RUBY_SPEC_SUFFIX = ".podspec"

REQUIRED_ATTRIBUTES = ("name", "version", "summary", "homepage", "license", "authors", "source")
SUMMARY_MAX_LENGTH = 140

_VERSION_DIR_RE = re.compile(r"^\d+(\.\d+)*([-+.][0-9A-Za-z.-]+)?$")

# Messages
MSG_INVALID_VERSION = "Invalid version directory"
MSG_MISSING_SPEC = "Missing specification"
MSG_STRAY_FILE = "Stray file in pod directory"
MSG_WRONG_FILE_NAME = "Incorrect path: the spec file is not named after the pod"
MSG_UNLOADABLE = "Unable to load the specification"
MSG_NAME_MISMATCH = "Incorrect path: the name of the spec does not match the directory"
MSG_VERSION_MISMATCH = "Incorrect path: the version of the spec does not match the directory"
MSG_RUBY_SKIPPED = "Unable to evaluate Ruby specification; skipped"
MSG_SUMMARY_TOO_LONG = f"The summary should be short ({SUMMARY_MAX_LENGTH} characters max)"
MSG_SUMMARY_PLACEHOLDER = "The summary is not meaningful"
MSG_DESCRIPTION_SHORT = "The description is shorter than the summary"
MSG_DESCRIPTION_MISSING = "Missing recommended attribute `description`"


def _is_spec_file(path: Path) -> bool:
    return path.is_file() and (path.name.endswith(JSON_SPEC_SUFFIX) or path.name.endswith(RUBY_SPEC_SUFFIX))


class HealthReporter:
    """Analyses every podspec of one repo."""

    def __init__(self, repo_path: Path):
        self.repo_path = Path(repo_path)
        self.report = HealthReport()
        self._specs: List[Tuple[str, str, Path]] = []
        self._pre_checked = False

    @property
    def specs_root(self) -> Path:
        nested = self.repo_path / "Specs"
        return nested if nested.is_dir() else self.repo_path

    def pre_check(self, on_progress: Optional[ProgressCallback] = None) -> None:
        """Walk pods and versions, recording layout problems."""
        self._specs = []
        for pod_dir in sorted(self.specs_root.iterdir()):
            if pod_dir.name.startswith(".") or not pod_dir.is_dir():
                continue
            pod = pod_dir.name

            for entry in sorted(pod_dir.iterdir()):
                if entry.name.startswith("."):
                    continue
                if not entry.is_dir():
                    self.report.add_warning(MSG_STRAY_FILE, pod, entry.name)
                    continue

                version = entry.name
                if on_progress:
                    on_progress(pod, version)

                if not _VERSION_DIR_RE.match(version):
                    self.report.add_error(MSG_INVALID_VERSION, pod, version)
                    continue

                spec_path = self._find_spec(entry, pod, version)
                if spec_path is not None:
                    self._specs.append((pod, version, spec_path))

        self._pre_checked = True
        logger.debug(f"[repo-health] {self.repo_path.name}: {len(self._specs)} specs found")

    def analyze(self) -> HealthReport:
        """Load and check every spec found by pre_check."""
        if not self._pre_checked:
            self.pre_check()

        for pod, version, spec_path in self._specs:
            self.report.analyzed_paths.append(spec_path)
            if spec_path.name.endswith(JSON_SPEC_SUFFIX):
                self._check_json_spec(pod, version, spec_path)
            else:
                self.report.add_warning(MSG_RUBY_SKIPPED, pod, version)

        return self.report

    def _find_spec(self, version_dir: Path, pod: str, version: str) -> Optional[Path]:
        for candidate in (version_dir / f"{pod}{JSON_SPEC_SUFFIX}", version_dir / f"{pod}{RUBY_SPEC_SUFFIX}"):
            if candidate.is_file():
                return candidate

        others = sorted(p for p in version_dir.iterdir() if _is_spec_file(p))
        if others:
            self.report.add_error(MSG_WRONG_FILE_NAME, pod, version)
        else:
            self.report.add_error(MSG_MISSING_SPEC, pod, version)
        return None

    def _check_json_spec(self, pod: str, version: str, path: Path) -> None:
        try:
            with path.open("r", encoding="utf-8") as f:
                spec = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.debug(f"[repo-health] {path}: {e}")
            self.report.add_error(MSG_UNLOADABLE, pod, version)
            return
        if not isinstance(spec, dict):
            self.report.add_error(MSG_UNLOADABLE, pod, version)
            return

        for attr in REQUIRED_ATTRIBUTES:
            if not spec.get(attr):
                self.report.add_error(f"Missing required attribute `{attr}`", pod, version)

        if spec.get("name") and spec["name"] != pod:
            self.report.add_error(MSG_NAME_MISMATCH, pod, version)
        if spec.get("version") and str(spec["version"]) != version:
            self.report.add_error(MSG_VERSION_MISMATCH, pod, version)

        summary = str(spec.get("summary") or "")
        description = str(spec.get("description") or "")
        if len(summary) > SUMMARY_MAX_LENGTH:
            self.report.add_warning(MSG_SUMMARY_TOO_LONG, pod, version)
        if summary.lower().startswith("a short description of"):
            self.report.add_warning(MSG_SUMMARY_PLACEHOLDER, pod, version)
        if not description:
            self.report.add_warning(MSG_DESCRIPTION_MISSING, pod, version)
        elif summary and len(description) < len(summary):
            self.report.add_warning(MSG_DESCRIPTION_SHORT, pod, version)
