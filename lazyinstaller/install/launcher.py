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

"""Launcher installation for lazyinstaller."""

from __future__ import annotations

from pathlib import Path

from lazyinstaller.launch import LaunchConfig, render_launcher_script
from lazyinstaller.logging import get_global_logger

from .payload import EXECUTABLE_MODE, atomic_write_text


def write_launcher(
    path: Path, config: LaunchConfig, *, python: str | None = None
) -> Path:
    """Render the launcher for config and write it to path (mode 0755).

    Raises:
        InstallError: On filesystem errors.
    """
    path = Path(path)
    get_global_logger().verbose("INSTALL", f"Writing launcher: {path}")
    atomic_write_text(path, render_launcher_script(config, python=python), EXECUTABLE_MODE)
    return path
