# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Core orchestration for lazyinstaller.

This module implements the update workflow for one application recipe.
It wires together configuration, installed-version detection, discovery,
the update policy, dependency checks, download and installation.

Workflow Steps:
    1. Load the recipe (merged with defaults/org.yaml) and resolve paths
    2. Read the installed version ("0.0.0" if not installed)
    3. Ask the vendor for the latest version and download URL
    4. Decide: install, update, up to date, or downgrade skipped
    5. Optionally ask the caller to confirm
    6. Check host dependencies
    7. Download into a temporary directory, install, record the version
       and write the launcher

Nothing on disk changes before step 7, and step 7 only replaces the
previous installation once the new one is fully staged.

Example:
    ```python
    from pathlib import Path
    from lazyinstaller.core import update_app

    result = update_app(Path("recipes/helium-browser.yaml"))
    print(f"{result.app_name}: {result.status}")
    ```

"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
import tempfile

from lazyinstaller.config import AppSettings, load_effective_config, resolve_app
from lazyinstaller.dependencies import ensure_dependencies
from lazyinstaller.detection import detect_installed_version
from lazyinstaller.discovery import get_strategy
from lazyinstaller.install import (
    install_appimage,
    install_tarball,
    write_launcher,
    write_version_marker,
)
from lazyinstaller.io import download_file
from lazyinstaller.logging import get_global_logger
from lazyinstaller.policy import UpdateDecision, decide_update
from lazyinstaller.results import UpdateResult

__all__ = ["install_payload", "update_app"]

TOTAL_STEPS = 5

_DONE_STATUS = {"install": "installed", "update": "updated"}
_NO_ACTION_STATUS = {"up_to_date": "up_to_date", "downgrade_skipped": "skipped"}


def install_payload(payload: Path, settings: AppSettings) -> None:
    """Install a downloaded payload according to the recipe's format."""
    if settings.install_format == "appimage":
        install_appimage(payload, settings.install_dir, settings.binary)
    else:
        install_tarball(
            payload, settings.install_dir, strip_components=settings.strip_components
        )


def _result(
    settings: AppSettings, decision: UpdateDecision, status: str
) -> UpdateResult:
    return UpdateResult(
        app_name=settings.name,
        app_id=settings.app_id,
        action=decision.action,
        installed_version=decision.installed,
        available_version=decision.candidate,
        install_dir=settings.install_dir,
        launcher_path=settings.launcher_path,
        status=status,
    )


def update_app(
    recipe_path: Path,
    *,
    check_only: bool = False,
    confirm: Callable[[UpdateDecision], bool] | None = None,
) -> UpdateResult:
    """Install or update the application described by a recipe.

    Args:
        recipe_path: Path to the recipe YAML file.
        check_only: If True, stop after the decision; nothing is downloaded
            or written.
        confirm: Called with the decision before anything is downloaded.
            Returning False aborts with status "aborted".

    Returns:
        Outcome of the run. ``status`` is "installed", "updated",
            "up_to_date", "skipped", "available" or "aborted".

    Raises:
        ConfigError: On recipe problems.
        VersionFetchError: If the vendor cannot be queried.
        DependencyError: If host dependencies are missing.
        DownloadError: If the payload cannot be downloaded.
        InstallError: If installation fails (previous install is kept).

    """
    logger = get_global_logger()

    logger.step(1, TOTAL_STEPS, "Loading configuration...")
    config = load_effective_config(recipe_path)
    settings = resolve_app(config)
    logger.verbose("CONFIG", f"App: {settings.name} ({settings.app_id})")
    logger.verbose("CONFIG", f"Install dir: {settings.install_dir}")

    logger.step(2, TOTAL_STEPS, "Detecting installed version...")
    installed = detect_installed_version(settings.probe, settings.install_dir)

    logger.step(3, TOTAL_STEPS, "Discovering latest version...")
    strategy = get_strategy(settings.strategy)
    version_info = strategy.get_version_info(config["app"])
    logger.verbose("DISCOVERY", f"Version discovered: {version_info.version}")

    decision = decide_update(version_info.version, installed)
    if decision.action == "downgrade_skipped":
        logger.warning(
            "POLICY",
            f"Installed {installed} is newer than available "
            f"{version_info.version}; skipping",
        )

    if not decision.proceed:
        return _result(settings, decision, _NO_ACTION_STATUS[decision.action])
    if check_only:
        return _result(settings, decision, "available")
    if confirm is not None and not confirm(decision):
        return _result(settings, decision, "aborted")

    logger.step(4, TOTAL_STEPS, "Checking dependencies...")
    ensure_dependencies(settings.commands, settings.libraries)

    logger.step(5, TOTAL_STEPS, "Downloading and installing...")
    with tempfile.TemporaryDirectory(prefix="lazyinstaller-") as work:
        payload, sha256, _headers = download_file(
            version_info.download_url,
            Path(work),
            timeout=settings.download_timeout,
            expected_sha256=version_info.sha256,
        )
        logger.verbose("FILE", f"SHA-256: {sha256}")
        install_payload(payload, settings)

    if settings.version_marker is not None:
        write_version_marker(settings.version_marker, version_info.version)
    write_launcher(settings.launcher_path, settings.launch_config())

    return _result(settings, decision, _DONE_STATUS[decision.action])
