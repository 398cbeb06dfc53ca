"""
Pytest configuration and shared fixtures for lazyinstaller tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from lazyinstaller.logging import SilentLogger, get_global_logger, set_global_logger


class RecordingLogger:
    """Logger that keeps every message for assertions."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str, str]] = []

    def step(self, step: int, total: int, message: str) -> None:
        self.messages.append(("step", f"{step}/{total}", message))

    def verbose(self, prefix: str, message: str) -> None:
        self.messages.append(("verbose", prefix, message))

    def debug(self, prefix: str, message: str) -> None:
        self.messages.append(("debug", prefix, message))

    def warning(self, prefix: str, message: str) -> None:
        self.messages.append(("warning", prefix, message))

    @property
    def warnings(self) -> list[str]:
        return [m for kind, _, m in self.messages if kind == "warning"]


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def recording_logger():
    """Install a RecordingLogger as the global logger for one test."""
    previous = get_global_logger()
    logger = RecordingLogger()
    set_global_logger(logger)
    yield logger
    set_global_logger(previous)


@pytest.fixture(autouse=True)
def _silent_global_logger():
    """Reset the global logger so CLI tests do not leak verbosity."""
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("recipes/app.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(data, f)
        return path

    return _create


@pytest.fixture
def github_recipe_data(tmp_test_dir: Path) -> dict[str, Any]:
    """AppImage recipe using the api_github strategy, rooted in tmp_test_dir."""
    return {
        "apiVersion": "lazyinstaller/v1",
        "defaults": {
            "install_root": str(tmp_test_dir / "opt"),
            "bin_dir": str(tmp_test_dir / "bin"),
            "system_config_dir": str(tmp_test_dir / "etc"),
        },
        "app": {
            "name": "Helium Browser",
            "id": "helium-browser",
            "source": {
                "strategy": "api_github",
                "repo": "imputnet/helium-linux",
                "asset_pattern": r".*x86_64\.AppImage$",
            },
            "install": {
                "format": "appimage",
                "binary": "helium-browser.AppImage",
            },
            "installed": {"probe": "version_file", "path": "version.txt"},
            "launcher": {
                "system_flags": "helium-browser-flags.conf",
                "user_flags": "helium-browser-flags.conf",
                "env_var": "HELIUM_USER_FLAGS",
            },
        },
    }


@pytest.fixture
def json_recipe_data(tmp_test_dir: Path) -> dict[str, Any]:
    """Tarball recipe using the http_json strategy, rooted in tmp_test_dir."""
    return {
        "apiVersion": "lazyinstaller/v1",
        "defaults": {
            "install_root": str(tmp_test_dir / "opt"),
            "bin_dir": str(tmp_test_dir / "bin"),
            "system_config_dir": str(tmp_test_dir / "etc"),
        },
        "app": {
            "name": "Windsurf",
            "id": "windsurf",
            "source": {
                "strategy": "http_json",
                "api_url": "https://updates.example.com/linux-x64/stable/latest",
                "version_path": "windsurfVersion",
                "download_url_path": "url",
            },
            "install": {
                "format": "tarball",
                "binary": "bin/windsurf",
                "strip_components": 1,
            },
            "installed": {
                "probe": "json_field",
                "path": "resources/app/product.json",
                "field": "windsurfVersion",
            },
            "launcher": {
                "system_flags": "windsurf-flags.conf",
                "user_flags": "windsurf-flags.conf",
                "env_var": "WINDSURF_USER_FLAGS",
            },
        },
    }
