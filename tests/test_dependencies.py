"""
Tests for lazyinstaller.dependencies module.
"""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from lazyinstaller.dependencies import (
    ensure_dependencies,
    find_missing_dependencies,
    read_linker_cache,
)
from lazyinstaller.exceptions import DependencyError, InstallError

LDCONFIG = """\
1234 libs found in cache `/etc/ld.so.cache'
\tlibnss3.so (libc6,x86-64) => /usr/lib/libnss3.so
\tlibfuse.so.2 (libc6,x86-64) => /usr/lib/libfuse.so.2
"""


def fake_which(present):
    return lambda name: f"/usr/bin/{name}" if name in present else None


class TestFindMissing:
    """Tests for find_missing_dependencies."""

    def test_all_present(self):
        with patch("lazyinstaller.dependencies.shutil.which", fake_which({"bash"})):
            missing = find_missing_dependencies(
                ["bash"], ["libfuse.so.2"], ldconfig_output=LDCONFIG
            )
        assert missing == []

    def test_reports_in_order(self):
        with patch("lazyinstaller.dependencies.shutil.which", fake_which({"bash"})):
            missing = find_missing_dependencies(
                ["curl", "bash", "python3"],
                ["libgtk-3.so", "libnss3.so", "libnotify.so"],
                ldconfig_output=LDCONFIG,
            )
        assert missing == ["curl", "python3", "libgtk-3.so", "libnotify.so"]

    def test_ldconfig_unavailable(self, recording_logger):
        with patch(
            "lazyinstaller.dependencies.subprocess.run",
            side_effect=FileNotFoundError("ldconfig"),
        ):
            missing = find_missing_dependencies([], ["libnss3.so"])
        assert missing == ["libnss3.so"]
        assert recording_logger.warnings

    def test_no_libraries_skips_ldconfig(self):
        with patch("lazyinstaller.dependencies.subprocess.run") as run:
            assert find_missing_dependencies([], []) == []
        run.assert_not_called()


def test_read_linker_cache():
    completed = subprocess.CompletedProcess(["ldconfig", "-p"], 0, stdout=LDCONFIG)
    with patch("lazyinstaller.dependencies.subprocess.run", return_value=completed):
        assert read_linker_cache() == LDCONFIG


def test_ensure_dependencies_raises():
    with patch("lazyinstaller.dependencies.shutil.which", fake_which(set())):
        with pytest.raises(DependencyError) as exc_info:
            ensure_dependencies(["ldd"], ["libfuse.so.2"], ldconfig_output="")
    assert exc_info.value.missing == ["ldd", "libfuse.so.2"]
    assert isinstance(exc_info.value, InstallError)
    assert "ldd, libfuse.so.2" in str(exc_info.value)


def test_ensure_dependencies_ok():
    with patch("lazyinstaller.dependencies.shutil.which", fake_which({"ldd"})):
        ensure_dependencies(["ldd"], ["libnss3.so"], ldconfig_output=LDCONFIG)
