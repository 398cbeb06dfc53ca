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

"""Recipe validation module.

Checks recipe syntax and configuration without making network calls,
touching the install directory or downloading files. Useful for quick
feedback while writing a recipe.

Validation Checks:

- YAML syntax is valid (including defaults/org.yaml, if found)
- apiVersion is supported
- The app has required fields (name, id, source, install.binary)
- Discovery strategy exists and its configuration is valid
- Install format and installed-version probe are known
- Launcher settings have the right types

Example:
    ```python
    from pathlib import Path
    from lazyinstaller.validation import validate_recipe

    result = validate_recipe(Path("recipes/windsurf.yaml"))
    if result.status == "invalid":
        for error in result.errors:
            print(f"Error: {error}")
    ```

"""

from __future__ import annotations

from pathlib import Path

from lazyinstaller.config import (
    API_VERSION,
    INSTALL_FORMATS,
    load_effective_config,
    resolve_app,
)
from lazyinstaller.detection import PROBES
from lazyinstaller.discovery import get_strategy
from lazyinstaller.exceptions import ConfigError
from lazyinstaller.logging import get_global_logger
from lazyinstaller.results import ValidationResult

__all__ = ["validate_recipe"]


def validate_recipe(recipe_path: Path) -> ValidationResult:
    """Validate a recipe file without downloading anything.

    Args:
        recipe_path: Path to the recipe YAML file to validate.

    Returns:
        Validation status with the collected errors and warnings.

    """
    logger = get_global_logger()
    errors: list[str] = []
    warnings: list[str] = []

    def result() -> ValidationResult:
        return ValidationResult(
            status="invalid" if errors else "valid",
            errors=errors,
            warnings=warnings,
            recipe_path=str(recipe_path),
        )

    logger.verbose("VALIDATION", f"Validating recipe: {recipe_path}")

    try:
        config = load_effective_config(recipe_path)
    except ConfigError as err:
        errors.append(str(err))
        return result()
    logger.verbose("VALIDATION", "[OK] YAML syntax is valid")

    api_version = config.get("apiVersion")
    if not api_version:
        errors.append("Missing required field: apiVersion")
    elif api_version != API_VERSION:
        warnings.append(
            f"apiVersion {api_version!r} may not be supported (expected {API_VERSION!r})"
        )

    app = config.get("app")
    if not isinstance(app, dict):
        errors.append("Missing required field: app (must be a mapping)")
        return result()

    for field in ("name", "id", "source"):
        if not app.get(field):
            errors.append(f"Missing required field: app.{field}")

    source = app.get("source")
    if isinstance(source, dict):
        strategy_name = source.get("strategy")
        if not strategy_name:
            errors.append("Missing required field: app.source.strategy")
        else:
            try:
                strategy = get_strategy(strategy_name)
            except ConfigError as err:
                errors.append(str(err))
            else:
                logger.verbose("VALIDATION", f"[OK] Strategy {strategy_name!r} exists")
                if hasattr(strategy, "validate_config"):
                    errors.extend(
                        f"app.source: {msg}" for msg in strategy.validate_config(app)
                    )
    elif source is not None:
        errors.append("app.source must be a mapping")

    install = app.get("install") or {}
    if isinstance(install, dict):
        fmt = install.get("format", "tarball")
        if fmt not in INSTALL_FORMATS:
            errors.append(
                f"Unknown install format: {fmt!r}. Available: {', '.join(INSTALL_FORMATS)}"
            )
        if not install.get("binary"):
            errors.append("Missing required field: app.install.binary")
        if fmt == "appimage" and "strip_components" in install:
            warnings.append("app.install.strip_components is ignored for appimage")
    else:
        errors.append("app.install must be a mapping")

    installed = app.get("installed")
    if installed is None:
        warnings.append("No app.installed probe; using version.txt in install_dir")
    elif isinstance(installed, dict):
        probe = installed.get("probe", "version_file")
        if probe not in PROBES:
            errors.append(
                f"Unknown installed-version probe: {probe!r}. "
                f"Available: {', '.join(PROBES)}"
            )
        if probe == "json_field" and not installed.get("field"):
            errors.append("json_field probe requires app.installed.field")
        if probe == "json_field" and not installed.get("path"):
            errors.append("json_field probe requires app.installed.path")
    else:
        errors.append("app.installed must be a mapping")

    launcher = app.get("launcher")
    if launcher is not None and not isinstance(launcher, dict):
        errors.append("app.launcher must be a mapping")
    elif launcher and not (launcher.get("system_flags") or launcher.get("user_flags")):
        warnings.append("Launcher reads no flag files (system_flags/user_flags unset)")

    if not errors:
        # Surfaces type errors the field checks above do not cover.
        try:
            resolve_app(config)
        except ConfigError as err:
            errors.append(str(err))

    if errors:
        logger.verbose("VALIDATION", f"[FAILED] {len(errors)} error(s)")
    else:
        logger.verbose("VALIDATION", "[OK] Recipe is valid")
    return result()
