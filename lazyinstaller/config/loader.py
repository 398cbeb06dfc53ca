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

"""Configuration loading and merging for lazyinstaller.

Recipes describe one application each: where to ask for the latest version,
how to install the payload, how to read the installed version back, and how
the launcher finds its flag files. Host-wide settings (install root, bin
directory, /etc) live in an optional defaults file shared by every recipe.

Configuration Layers:
    1. **Host defaults** (defaults/org.yaml)
       - Found by walking upward from the recipe directory
       - Optional; built-in defaults apply when absent

    2. **Recipe configuration** (recipes/<app>.yaml)
       - Always required; defines the app itself
       - Overrides host defaults

Merge Behavior:
    - **Dicts**: Recursively merged (keys from overlay override base)
    - **Lists**: Completely replaced (NOT appended/extended)
    - **Scalars**: Overwritten (strings, numbers, booleans)

Error Handling:
    - ConfigError: Recipe file doesn't exist, YAML parse errors, empty files,
        non-mapping top level, or settings that cannot be resolved
    - All errors are chained with "from err" for better debugging

Example:
    ```python
    from pathlib import Path
    from lazyinstaller.config import load_effective_config, resolve_app

    cfg = load_effective_config(Path("recipes/windsurf.yaml"))
    settings = resolve_app(cfg)
    print(settings.install_dir)  # /opt/windsurf
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from lazyinstaller.exceptions import ConfigError
from lazyinstaller.launch import LaunchConfig
from lazyinstaller.logging import get_global_logger

API_VERSION = "lazyinstaller/v1"

BUILTIN_DEFAULTS: dict[str, Any] = {
    "install_root": "/opt",
    "bin_dir": "/usr/bin",
    "system_config_dir": "/etc",
    "download_timeout": 60,
}

INSTALL_FORMATS = ("appimage", "tarball")

# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class AppSettings:
    """Resolved, path-complete settings for one application.

    Attributes:
        name: Display name.
        app_id: Identifier, also the default directory and launcher name.
        strategy: Discovery strategy name.
        install_format: "appimage" or "tarball".
        install_dir: Directory that holds the installed payload.
        binary: Absolute path of the executable the launcher runs.
        strip_components: Leading path components dropped from tarball
            members.
        probe: The recipe's ``installed`` section (probe, path, field).
        version_marker: File written after install for version_file probes,
            else None.
        launcher_path: Where the generated launcher is written.
        system_flags: System-wide flags file, or None.
        user_flags: Per-user flags file name under $XDG_CONFIG_HOME, or None.
        env_var: Environment variable with extra flags, or None.
        commands: Executables that must be on PATH.
        libraries: Shared library names that must be in the linker cache.
        download_timeout: Per-request download timeout in seconds.
    """

    name: str
    app_id: str
    strategy: str
    install_format: str
    install_dir: Path
    binary: Path
    strip_components: int
    probe: dict[str, Any]
    version_marker: Path | None
    launcher_path: Path
    system_flags: Path | None
    user_flags: str | None
    env_var: str | None
    commands: tuple[str, ...]
    libraries: tuple[str, ...]
    download_timeout: int

    def launch_config(self) -> LaunchConfig:
        """Launcher settings for this application."""
        return LaunchConfig(
            binary=str(self.binary),
            system_flags=str(self.system_flags) if self.system_flags else None,
            user_flags=self.user_flags,
            env_var=self.env_var,
        )


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """Loads a YAML file and returns the parsed Python object.

    Raises:
        ConfigError: When file does not exist, invalid YAML (parse error),
            or empty files.
    """
    if not p.exists():
        raise ConfigError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    except OSError as err:
        raise ConfigError(f"Cannot read {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    return data


def _print_yaml_content(data: dict[str, Any]) -> None:
    logger = get_global_logger()
    yaml_str = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    for line in yaml_str.splitlines():
        if line.strip():
            logger.debug("CONFIG", line)


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep-merges two dicts with "overlay wins" semantics.

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


def _find_defaults_root(start_dir: Path) -> Path | None:
    """Walks upward from start_dir looking for a defaults/org.yaml file."""
    for parent in [start_dir] + list(start_dir.parents):
        candidate = parent / "defaults" / "org.yaml"
        if candidate.exists():
            return parent / "defaults"
    return None


# -------------------------------
# Public API
# -------------------------------


def load_effective_config(recipe_path: Path) -> dict[str, Any]:
    """Loads and merges the effective configuration for a recipe.

    Performs the following operations:

    1. Read recipe YAML
    2. Find defaults root by scanning upwards for defaults/org.yaml
    3. Merge: built-in defaults -> org.yaml -> recipe

    Args:
        recipe_path: Path to the recipe YAML file.

    Returns:
        The merged configuration dict. ``defaults`` always carries the
            built-in keys.

    Raises:
        ConfigError: On YAML parse errors, empty files, invalid structure,
            or if the recipe file is missing.

    """
    logger = get_global_logger()
    recipe_path = Path(recipe_path).resolve()

    logger.verbose("CONFIG", f"Loading recipe: {recipe_path}")

    recipe_obj = _load_yaml_file(recipe_path)
    if not isinstance(recipe_obj, dict):
        raise ConfigError(f"top-level YAML must be a mapping (dict): {recipe_path}")

    merged: dict[str, Any] = {"defaults": dict(BUILTIN_DEFAULTS)}
    layers_merged = 1

    defaults_root = _find_defaults_root(recipe_path.parent)
    if defaults_root:
        org_path = defaults_root / "org.yaml"
        logger.verbose("CONFIG", f"Loading: {org_path}")
        org_defaults = _load_yaml_file(org_path)
        if not isinstance(org_defaults, dict):
            raise ConfigError(f"top-level YAML must be a mapping (dict): {org_path}")
        logger.debug("CONFIG", "--- Content from org.yaml ---")
        _print_yaml_content(org_defaults)
        merged = _deep_merge_dicts(merged, org_defaults)
        layers_merged += 1

    logger.debug("CONFIG", f"--- Content from {recipe_path.name} ---")
    _print_yaml_content(recipe_obj)
    merged = _deep_merge_dicts(merged, recipe_obj)
    layers_merged += 1

    logger.verbose("CONFIG", f"Deep merging {layers_merged} layer(s)")
    return merged


def _section(app: dict[str, Any], key: str) -> dict[str, Any]:
    value = app.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'app.{key}' must be a mapping")
    return value


def _str_list(section: dict[str, Any], key: str, where: str) -> tuple[str, ...]:
    value = section.get(key) or []
    if not isinstance(value, list):
        raise ConfigError(f"'{where}.{key}' must be a list")
    return tuple(str(v) for v in value)


def _abs(raw: Any, parent: Path) -> Path:
    p = Path(str(raw)).expanduser()
    return p if p.is_absolute() else parent / p


def resolve_app(config: dict[str, Any]) -> AppSettings:
    """Resolve the merged config into AppSettings with absolute paths.

    Args:
        config: Merged configuration from load_effective_config().

    Returns:
        Frozen settings for the recipe's application.

    Raises:
        ConfigError: If required keys are missing or have the wrong type.

    """
    defaults = {**BUILTIN_DEFAULTS, **(config.get("defaults") or {})}
    app = config.get("app")
    if not isinstance(app, dict):
        raise ConfigError("recipe is missing the 'app' mapping")

    name = app.get("name")
    app_id = app.get("id")
    if not name or not app_id:
        raise ConfigError("'app.name' and 'app.id' are required")
    app_id = str(app_id)

    source = _section(app, "source")
    strategy = source.get("strategy")
    if not strategy:
        raise ConfigError("'app.source.strategy' is required")

    install = _section(app, "install")
    install_format = install.get("format", "tarball")
    if install_format not in INSTALL_FORMATS:
        raise ConfigError(
            f"Unknown install format: {install_format!r}. "
            f"Available: {', '.join(INSTALL_FORMATS)}"
        )
    install_dir = _abs(
        install.get("install_dir") or app_id, Path(str(defaults["install_root"]))
    )
    binary_raw = install.get("binary")
    if not binary_raw:
        raise ConfigError("'app.install.binary' is required")
    binary = _abs(binary_raw, install_dir)

    try:
        strip_components = int(install.get("strip_components", 1))
    except (TypeError, ValueError) as err:
        raise ConfigError("'app.install.strip_components' must be an integer") from err
    if strip_components < 0:
        raise ConfigError("'app.install.strip_components' must not be negative")

    probe = dict(_section(app, "installed")) or {
        "probe": "version_file",
        "path": "version.txt",
    }
    probe.setdefault("probe", "version_file")
    version_marker = None
    if probe["probe"] == "version_file":
        version_marker = _abs(probe.get("path") or "version.txt", install_dir)
        probe.setdefault("path", str(version_marker))

    launcher = _section(app, "launcher")
    launcher_path = _abs(launcher.get("path") or app_id, Path(str(defaults["bin_dir"])))
    system_flags = launcher.get("system_flags")
    user_flags = launcher.get("user_flags")

    requires = _section(app, "requires")

    try:
        download_timeout = int(defaults["download_timeout"])
    except (TypeError, ValueError) as err:
        raise ConfigError("'defaults.download_timeout' must be an integer") from err

    return AppSettings(
        name=str(name),
        app_id=app_id,
        strategy=str(strategy),
        install_format=install_format,
        install_dir=install_dir,
        binary=binary,
        strip_components=strip_components,
        probe=probe,
        version_marker=version_marker,
        launcher_path=launcher_path,
        system_flags=(
            _abs(system_flags, Path(str(defaults["system_config_dir"])))
            if system_flags
            else None
        ),
        user_flags=str(user_flags) if user_flags else None,
        env_var=str(launcher["env_var"]) if launcher.get("env_var") else None,
        commands=_str_list(requires, "commands", "app.requires"),
        libraries=_str_list(requires, "libraries", "app.requires"),
        download_timeout=download_timeout,
    )
