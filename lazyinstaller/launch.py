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

"""Application launcher for lazyinstaller.

Every installed application gets a small launcher on PATH (for example
/usr/bin/helium-browser). The launcher is a generated Python script that
imports this module, assembles the argument list from the flag files, the
flags environment variable and its own arguments, then replaces itself with
the real binary via os.execv().

The generated script embeds its settings as Python literals, so no shell
ever parses configuration or flag-file content.

Example:
    Generated launcher (abridged):
        ```python
        #!/usr/bin/python3
        import sys
        from lazyinstaller.launch import LaunchConfig, main

        CONFIG = LaunchConfig(
            binary='/opt/helium-browser/helium-browser.AppImage',
            system_flags='/etc/helium-browser-flags.conf',
            user_flags='helium-browser-flags.conf',
            env_var='HELIUM_USER_FLAGS',
        )

        if __name__ == "__main__":
            sys.exit(main(CONFIG))
        ```

"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
import os
import sys

from lazyinstaller.exceptions import InstallError
from lazyinstaller.flags import flag_file_paths, load_flags
from lazyinstaller.logging import Logger, get_global_logger, get_logger, set_global_logger

__all__ = [
    "EXIT_NOT_FOUND",
    "LaunchConfig",
    "build_launch_args",
    "exec_app",
    "main",
    "render_launcher_script",
]

# Shell convention for "command not found".
EXIT_NOT_FOUND = 127


@dataclass(frozen=True)
class LaunchConfig:
    """Settings embedded in a generated launcher.

    Attributes:
        binary: Absolute path of the application executable.
        system_flags: Absolute path of the system flags file, or None.
        user_flags: User flags file name under $XDG_CONFIG_HOME (or an
            absolute path), or None.
        env_var: Environment variable holding extra flags, or None.
    """

    binary: str
    system_flags: str | None = None
    user_flags: str | None = None
    env_var: str | None = None


def build_launch_args(
    config: LaunchConfig,
    argv: Sequence[str],
    *,
    environ: Mapping[str, str] | None = None,
    logger: Logger | None = None,
) -> list[str]:
    """Return the full argv for the application, binary first.

    Flag files are re-read on every call.
    """
    env = os.environ if environ is None else environ
    paths = flag_file_paths(config.system_flags, config.user_flags, environ=env)
    env_value = env.get(config.env_var) if config.env_var else None
    return [config.binary] + load_flags(paths, env_value, argv, logger=logger)


def exec_app(
    config: LaunchConfig,
    argv: Sequence[str],
    *,
    logger: Logger | None = None,
) -> None:
    """Replace the current process with the application.

    Raises:
        InstallError: If the binary is missing, not executable, or exec fails.
    """
    if logger is None:
        logger = get_global_logger()

    binary = config.binary
    if not os.path.isfile(binary) or not os.access(binary, os.X_OK):
        raise InstallError(f"{binary} is not installed or not executable")

    args = build_launch_args(config, argv, logger=logger)
    logger.debug("LAUNCH", f"exec {args!r}")
    try:
        os.execv(binary, args)
    except OSError as err:
        raise InstallError(f"cannot execute {binary}: {err}") from err


def main(config: LaunchConfig, argv: Sequence[str] | None = None) -> int:
    """Entry point of generated launchers.

    Only returns on failure; on success the process becomes the application.
    """
    if argv is None:
        argv = sys.argv[1:]

    logger = get_logger()
    set_global_logger(logger)

    try:
        exec_app(config, argv, logger=logger)
    except InstallError as err:
        print(f"Error: {err}", file=sys.stderr)
        return EXIT_NOT_FOUND
    return 0


_SCRIPT_TEMPLATE = '''#!{python}
# Launcher generated by lazyinstaller {version}. Rewritten on every update.
import sys

from lazyinstaller.launch import LaunchConfig, main

CONFIG = LaunchConfig(
    binary={binary!r},
    system_flags={system_flags!r},
    user_flags={user_flags!r},
    env_var={env_var!r},
)

if __name__ == "__main__":
    sys.exit(main(CONFIG))
'''


def render_launcher_script(config: LaunchConfig, python: str | None = None) -> str:
    """Render the launcher script for config.

    Args:
        config: Launcher settings to embed.
        python: Interpreter for the shebang. Defaults to sys.executable.

    Returns:
        The script source.

    """
    from lazyinstaller import __version__

    return _SCRIPT_TEMPLATE.format(
        python=python or sys.executable,
        version=__version__,
        binary=config.binary,
        system_flags=config.system_flags,
        user_flags=config.user_flags,
        env_var=config.env_var,
    )
