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

"""Runtime dependency checks for lazyinstaller.

Recipes list what an application needs on the host before it can run:

- **commands**: executables that must be on PATH (e.g. curl)
- **libraries**: shared libraries that must be in the dynamic linker cache,
    matched as substrings of ``ldconfig -p`` output (e.g. libfuse.so.2 for
    AppImages, libnss3.so for Electron apps)

Nothing is installed; missing dependencies are reported so the user can
install them with the distribution's package manager.
"""

from __future__ import annotations

from collections.abc import Iterable
import shutil
import subprocess

from lazyinstaller.exceptions import DependencyError
from lazyinstaller.logging import get_global_logger

__all__ = ["ensure_dependencies", "find_missing_dependencies", "read_linker_cache"]


def read_linker_cache() -> str | None:
    """Return ``ldconfig -p`` output, or None if ldconfig cannot run."""
    logger = get_global_logger()
    ldconfig = shutil.which("ldconfig") or "/sbin/ldconfig"
    try:
        proc = subprocess.run(
            [ldconfig, "-p"],
            capture_output=True,
            text=True,
            check=True,
            timeout=30,
        )
    except (OSError, subprocess.SubprocessError) as err:
        logger.warning("DEPS", f"Cannot read linker cache with ldconfig: {err}")
        return None
    return proc.stdout


def find_missing_dependencies(
    commands: Iterable[str],
    libraries: Iterable[str],
    *,
    ldconfig_output: str | None = None,
) -> list[str]:
    """Return the names of missing commands and libraries, in input order.

    Args:
        commands: Executables that must resolve via PATH.
        libraries: Library name fragments to look for in the linker cache.
        ldconfig_output: Pre-captured ``ldconfig -p`` output. Read from the
            system when None and libraries are requested.

    Returns:
        Missing commands first, then missing libraries. Empty if all found.

    """
    logger = get_global_logger()
    missing: list[str] = []

    for command in commands:
        found = shutil.which(command)
        logger.debug("DEPS", f"command {command}: {found or 'missing'}")
        if not found:
            missing.append(command)

    libraries = list(libraries)
    if libraries and ldconfig_output is None:
        ldconfig_output = read_linker_cache()

    for library in libraries:
        present = ldconfig_output is not None and library in ldconfig_output
        logger.debug("DEPS", f"library {library}: {'found' if present else 'missing'}")
        if not present:
            missing.append(library)

    return missing


def ensure_dependencies(
    commands: Iterable[str],
    libraries: Iterable[str],
    *,
    ldconfig_output: str | None = None,
) -> None:
    """Raise DependencyError unless every command and library is present."""
    missing = find_missing_dependencies(
        commands, libraries, ldconfig_output=ldconfig_output
    )
    if missing:
        raise DependencyError(
            f"missing dependencies: {', '.join(missing)}", missing
        )
    get_global_logger().verbose("DEPS", "All dependencies present")
