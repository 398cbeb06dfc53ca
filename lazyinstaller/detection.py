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

"""Installed-version detection for lazyinstaller.

Reads the version of an existing installation from local metadata so the
update workflow can compare it with what the vendor offers. Detection never
fails for a missing or damaged installation; it reports the sentinel
"0.0.0" instead, which any real version compares greater than.

Probe Types:

- **version_file**: First line of a plain text file written at install
    time (e.g. /opt/helium-browser/version.txt).
- **json_field**: A field of a JSON file shipped by the vendor, selected
    with a JSONPath expression (e.g. windsurfVersion in
    /opt/windsurf/resources/app/product.json).

Recipe Configuration:
    ```yaml
    installed:
      probe: json_field
      path: resources/app/product.json   # relative to install_dir
      field: windsurfVersion             # JSONPath
    ```

Example:
    ```python
    from pathlib import Path
    from lazyinstaller.detection import detect_installed_version

    version = detect_installed_version(
        {"probe": "version_file", "path": "version.txt"},
        Path("/opt/helium-browser"),
    )
    ```

"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jsonpath_ng import parse as jsonpath_parse

from lazyinstaller.exceptions import ConfigError
from lazyinstaller.logging import get_global_logger

__all__ = ["NOT_INSTALLED", "PROBES", "detect_installed_version", "probe_path"]

# Reported when no installation (or no readable version) is found.
NOT_INSTALLED = "0.0.0"

PROBES = ("version_file", "json_field")


def probe_path(probe: dict[str, Any], install_dir: Path) -> Path:
    """Resolve the probe's metadata file (relative paths join install_dir)."""
    raw = probe.get("path")
    if not raw:
        raise ConfigError("installed-version probe requires 'installed.path'")
    p = Path(str(raw)).expanduser()
    return p if p.is_absolute() else install_dir / p


def _read_version_file(path: Path) -> str | None:
    with open(path, encoding="utf-8", errors="replace") as f:
        first = f.readline().strip()
    return first or None


def _read_json_field(path: Path, field: str) -> str | None:
    try:
        expr = jsonpath_parse(field)
    except Exception as err:
        raise ConfigError(f"Invalid JSONPath in 'installed.field': {field!r}") from err

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    matches = expr.find(data)
    if not matches or matches[0].value is None:
        return None
    value = str(matches[0].value).strip()
    return value or None


def detect_installed_version(probe: dict[str, Any], install_dir: Path) -> str:
    """Return the installed version, or NOT_INSTALLED.

    Args:
        probe: The recipe's ``installed`` section.
        install_dir: Installation directory of the application.

    Returns:
        Version string, or "0.0.0" if the file is missing, unreadable,
        empty, not valid JSON, or lacks the field.

    Raises:
        ConfigError: If the probe type is unknown or misconfigured.

    """
    logger = get_global_logger()

    kind = probe.get("probe", "version_file")
    if kind not in PROBES:
        raise ConfigError(
            f"Unknown installed-version probe: {kind!r}. "
            f"Available: {', '.join(PROBES)}"
        )

    path = probe_path(probe, install_dir)
    logger.verbose("DETECT", f"Probe: {kind} ({path})")

    if not path.is_file():
        logger.verbose("DETECT", "Metadata file not found, treating as not installed")
        return NOT_INSTALLED

    try:
        if kind == "version_file":
            version = _read_version_file(path)
        else:
            field = probe.get("field")
            if not field:
                raise ConfigError("json_field probe requires 'installed.field'")
            version = _read_json_field(path, str(field))
    except (OSError, ValueError) as err:
        # ValueError covers JSONDecodeError and undecodable bytes
        logger.warning("DETECT", f"Could not read {path}: {err}")
        return NOT_INSTALLED

    if not version:
        logger.verbose("DETECT", "No version recorded, treating as not installed")
        return NOT_INSTALLED

    logger.verbose("DETECT", f"Installed version: {version}")
    return version
