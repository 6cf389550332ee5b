"""
Tests for specrepos.repos.git — the git executable binding.

subprocess.run is mocked; no git binary is needed.
"""

from __future__ import annotations

import logging
import subprocess
from unittest import mock

import pytest

from specrepos.errors import SubprocessFailure
from specrepos.repos.git import GitExecutable, GitResult


def _completed(returncode: int = 0, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess(args=["git"], returncode=returncode, stdout=stdout, stderr=stderr)


class TestRun:
    """Running git in an explicit directory."""

    @mock.patch("specrepos.repos.git.subprocess.run")
    def test_passes_cwd_and_captures(self, mock_run, tmp_path):
        mock_run.return_value = _completed(stdout="master\n")

        result = GitExecutable().run(["symbolic-ref", "--short", "HEAD"], cwd=tmp_path)

        assert result == GitResult(stdout="master\n", status=0, stderr="")
        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "symbolic-ref", "--short", "HEAD"]
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["capture_output"] is True
        assert "timeout" not in kwargs

    @mock.patch("specrepos.repos.git.subprocess.run")
    def test_custom_executable(self, mock_run, tmp_path):
        mock_run.return_value = _completed()

        GitExecutable("/opt/git/bin/git").run(["status"], cwd=tmp_path)

        assert mock_run.call_args[0][0][0] == "/opt/git/bin/git"

    @mock.patch("specrepos.repos.git.subprocess.run")
    def test_non_zero_is_returned_not_raised(self, mock_run, tmp_path):
        mock_run.return_value = _completed(returncode=1)

        result = GitExecutable().run(["config", "--get", "branch.master.remote"], cwd=tmp_path)

        assert result.ok is False
        assert result.status == 1

    @mock.patch("specrepos.repos.git.subprocess.run", side_effect=FileNotFoundError("git"))
    def test_missing_executable(self, mock_run, tmp_path):
        with pytest.raises(SubprocessFailure) as exc_info:
            GitExecutable().run(["status"], cwd=tmp_path)
        assert exc_info.value.status == 127


class TestRunChecked:
    """Failing hard on non-zero status."""

    @mock.patch("specrepos.repos.git.subprocess.run")
    def test_success(self, mock_run, tmp_path):
        mock_run.return_value = _completed(stdout="ok")
        assert GitExecutable().run_checked(["status"], cwd=tmp_path).stdout == "ok"

    @mock.patch("specrepos.repos.git.subprocess.run")
    def test_failure_carries_command_and_output(self, mock_run, tmp_path):
        mock_run.return_value = _completed(returncode=128, stderr="fatal: not a git repository\n")

        with pytest.raises(SubprocessFailure) as exc_info:
            GitExecutable().run_checked(["pull", "--ff-only"], cwd=tmp_path)

        error = exc_info.value
        assert error.command == ["git", "pull", "--ff-only"]
        assert error.status == 128
        assert error.output == "fatal: not a git repository"
        assert "`git pull --ff-only` failed with exit status 128" in str(error)

    @mock.patch("specrepos.repos.git.subprocess.run")
    def test_failure_log_carries_command(self, mock_run, tmp_path, caplog):
        mock_run.return_value = _completed(returncode=1, stderr="fatal: no upstream")

        with caplog.at_level(logging.ERROR, logger="specrepos.repos.git"):
            with pytest.raises(SubprocessFailure):
                GitExecutable().run_checked(["pull", "--ff-only"], cwd=tmp_path)

        [record] = caplog.records
        assert record.command == ["git", "pull", "--ff-only"]
