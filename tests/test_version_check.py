"""
Tests for specrepos.repos.version_check.
"""

from __future__ import annotations

import pytest

from specrepos.errors import IncompatibleRepoError
from specrepos.repos.version_check import (
    VERSION_FILE,
    VersionChecker,
    VersionInfo,
    load_version_info,
    parse_version,
)


class TestParseVersion:
    """Dotted numeric version parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1.4.0", (1, 4)),
            ("1.4", (1, 4)),
            ("0.0.1", (0, 0, 1)),
            ("2", (2,)),
            ("1.0.0.beta.2", (1,)),
            ("  3.1 ", (3, 1)),
            ("beta", None),
            ("", None),
        ],
    )
    def test_parse(self, value, expected):
        assert parse_version(value) == expected

    def test_ordering(self):
        assert parse_version("1.10.0") > parse_version("1.9.3")
        assert parse_version("1.4.0") == parse_version("1.4")


class TestLoadVersionInfo:
    """Reading repo-version.yml."""

    def test_missing_file(self, tmp_path):
        assert load_version_info(tmp_path) is None

    def test_numbers_are_coerced(self, tmp_path):
        (tmp_path / VERSION_FILE).write_text("min: 1.0\nlast: 1.4.2\nmax: 2\n")

        info = load_version_info(tmp_path)

        assert info == VersionInfo(min="1.0", last="1.4.2", max="2")

    def test_empty_file(self, tmp_path):
        (tmp_path / VERSION_FILE).write_text("")
        assert load_version_info(tmp_path) == VersionInfo()

    def test_malformed_yaml_is_ignored(self, tmp_path):
        (tmp_path / VERSION_FILE).write_text("min: [1.0\n")
        assert load_version_info(tmp_path) is None

    def test_non_mapping_is_ignored(self, tmp_path):
        (tmp_path / VERSION_FILE).write_text("- 1.0\n- 2.0\n")
        assert load_version_info(tmp_path) is None


class TestVersionChecker:
    """Compatibility decisions."""

    def _write(self, path, text):
        (path / VERSION_FILE).write_text(text)

    def test_no_file_is_compatible(self, tmp_path):
        result = VersionChecker("1.4.0").check(tmp_path)
        assert result.compatible is True
        assert result.notices == []

    def test_too_old_for_repo(self, tmp_path):
        self._write(tmp_path, "min: 1.5.0\n")

        result = VersionChecker("1.4.0").check(tmp_path)

        assert result.compatible is False
        assert "requires version 1.5.0" in result.problem

    def test_too_new_for_repo(self, tmp_path):
        self._write(tmp_path, "max: 1.2.0\n")

        result = VersionChecker("1.4.0").check(tmp_path)

        assert result.compatible is False
        assert "up to 1.2.0" in result.problem

    def test_newer_release_notice(self, tmp_path):
        self._write(tmp_path, "min: 1.0.0\nlast: 1.5.0\n")

        result = VersionChecker("1.4.0").check(tmp_path)

        assert result.compatible is True
        assert len(result.notices) == 1
        assert "1.5.0" in result.notices[0]

    def test_verify_raises_when_incompatible(self, tmp_path):
        self._write(tmp_path, "min: 3.0\n")

        with pytest.raises(IncompatibleRepoError):
            VersionChecker("1.4.0").verify(tmp_path)

    def test_verify_returns_check_when_compatible(self, tmp_path):
        self._write(tmp_path, "min: 1.0\nmax: 2.0\n")
        assert VersionChecker("1.4.0").verify(tmp_path).compatible is True
