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

"""Flag-file loading for application launchers.

Launchers read extra command-line flags from plain text files every time the
application starts, so edits take effect on the next run without
reinstalling. Sources are combined in a fixed order, later entries winning
for applications that treat the last occurrence of a flag as authoritative:

1. System flags file (e.g. /etc/helium-browser-flags.conf)
2. User flags file (e.g. ~/.config/helium-browser-flags.conf)
3. Environment variable (e.g. HELIUM_USER_FLAGS)
4. Arguments given to the launcher itself

File Format:

- UTF-8 text, one or more shell-style arguments per line
- Blank lines and lines starting with "#" (after optional whitespace) are
    skipped; "#" elsewhere in a line is literal
- Single quotes, double quotes and backslash escapes group text into one
    argument, exactly as a POSIX shell would split words

Nothing is ever evaluated. Lines are split with shlex, which understands
quoting but performs no variable expansion, globbing or command
substitution. Lines containing "$(" or a backtick are additionally rejected
as a whole, with a warning, so a config written for a shell-sourcing
launcher cannot smuggle half-parsed arguments through.

Example:
    Assemble the argument list for a launch:
        ```python
        from pathlib import Path
        from lazyinstaller.flags import load_flags

        args = load_flags(
            [Path("/etc/app-flags.conf"), Path.home() / ".config/app-flags.conf"],
            os.environ.get("APP_USER_FLAGS"),
            sys.argv[1:],
        )
        ```

"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
import os
from pathlib import Path
import shlex

from lazyinstaller.exceptions import UnsafeFlagLineError
from lazyinstaller.logging import Logger, get_global_logger

__all__ = [
    "flag_file_paths",
    "is_comment_line",
    "load_flags",
    "read_flag_file",
    "split_flag_line",
]

# Constructs that would make a shell execute part of the line.
_UNSAFE_MARKERS = ("$(", "`")


def is_comment_line(line: str) -> bool:
    """Return True for blank lines and lines whose first non-space char is '#'."""
    stripped = line.lstrip()
    return not stripped or stripped.startswith("#")


def split_flag_line(line: str) -> list[str]:
    """Split one line into arguments using POSIX quoting rules.

    Args:
        line: A single non-comment line (trailing newline allowed).

    Returns:
        The arguments in order. Quoted whitespace stays inside its argument.

    Raises:
        UnsafeFlagLineError: If the line contains command substitution, a
            backtick, or quoting that cannot be closed.

    Example:
        ```python
        split_flag_line('--foo "bar baz" --flag')
        # ['--foo', 'bar baz', '--flag']
        ```

    """
    line = line.rstrip("\r\n")
    for marker in _UNSAFE_MARKERS:
        if marker in line:
            raise UnsafeFlagLineError(
                f"command substitution ({marker!r}) is not allowed", line
            )
    try:
        return shlex.split(line, comments=False, posix=True)
    except ValueError as err:
        raise UnsafeFlagLineError(f"cannot split line: {err}", line) from err


def _decode_line(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as err:
        raise UnsafeFlagLineError(
            "line is not valid UTF-8",
            raw.rstrip(b"\r\n").decode("utf-8", errors="backslashreplace"),
        ) from err


def read_flag_file(path: Path, *, logger: Logger | None = None) -> list[str]:
    """Read one flag file and return its arguments.

    A missing, unreadable or non-regular file contributes nothing and is not
    an error; optional config files are expected to be absent most of the
    time. Rejected lines are dropped whole and reported through
    logger.warning().

    Args:
        path: Flag file to read.
        logger: Logger for warnings. Defaults to the global logger.

    Returns:
        Arguments from every accepted line, in file order.

    """
    if logger is None:
        logger = get_global_logger()

    tokens: list[str] = []
    try:
        with open(path, "rb") as f:
            for lineno, raw in enumerate(f, start=1):
                try:
                    line = _decode_line(raw)
                    if is_comment_line(line):
                        continue
                    tokens.extend(split_flag_line(line))
                except UnsafeFlagLineError as err:
                    logger.warning(
                        "FLAGS",
                        f"ignoring unsafe line {lineno} in {path}: {err} "
                        f"({err.line!r})",
                    )
    except OSError as err:
        logger.debug("FLAGS", f"Skipping {path}: {err.strerror or err}")
        return []

    logger.debug("FLAGS", f"{path}: {len(tokens)} argument(s)")
    return tokens


def load_flags(
    paths: Iterable[Path],
    env_value: str | None,
    cli_args: Sequence[str],
    *,
    logger: Logger | None = None,
) -> list[str]:
    """Build the launch argument list from flag files, env and CLI args.

    Args:
        paths: Flag files in precedence order (system first, then user).
            Files are read fresh on every call.
        env_value: Value of the flags environment variable, or None. Split
            with the same quoting rules as a file line.
        cli_args: Arguments given to the launcher. Appended last, verbatim.
        logger: Logger for warnings. Defaults to the global logger.

    Returns:
        file tokens (in path order) ++ env tokens ++ cli_args.

    """
    if logger is None:
        logger = get_global_logger()

    args: list[str] = []
    for path in paths:
        args.extend(read_flag_file(Path(path), logger=logger))

    if env_value:
        try:
            args.extend(split_flag_line(env_value))
        except UnsafeFlagLineError as err:
            logger.warning(
                "FLAGS", f"ignoring flags from environment: {err} ({err.line!r})"
            )

    args.extend(cli_args)
    return args


def flag_file_paths(
    system_flags: str | Path | None,
    user_flags: str | Path | None,
    *,
    environ: Mapping[str, str] | None = None,
) -> list[Path]:
    """Resolve the system and user flag files for a launch.

    Args:
        system_flags: Absolute path of the system-wide file, or None.
        user_flags: File name (or relative path) under $XDG_CONFIG_HOME, an
            absolute path, or None.
        environ: Environment to read XDG_CONFIG_HOME/HOME from. Defaults to
            os.environ.

    Returns:
        Paths in precedence order (system first).

    """
    env = os.environ if environ is None else environ
    paths: list[Path] = []

    if system_flags:
        paths.append(Path(system_flags))

    if user_flags:
        user_path = Path(user_flags)
        if not user_path.is_absolute():
            config_home = env.get("XDG_CONFIG_HOME")
            if not config_home:
                home = env.get("HOME") or str(Path.home())
                config_home = str(Path(home) / ".config")
            user_path = Path(config_home) / user_path
        paths.append(user_path)

    return paths
