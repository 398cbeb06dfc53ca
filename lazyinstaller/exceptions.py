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

"""Exception hierarchy for lazyinstaller.

This module defines a custom exception hierarchy that allows library users
to distinguish between different types of errors:

- ConfigError: Recipe problems (YAML parse, missing fields, unknown strategy)
- UnsafeFlagLineError: A flag-file line was rejected by the tokenizer
- NetworkError: Metadata lookups and downloads
- InstallError: Filesystem installation and launcher failures

All exceptions inherit from LazyInstallerError, allowing users to catch all
lazyinstaller errors with a single except clause if needed.

Example:
    Catching specific error types:
        ```python
        from lazyinstaller.core import update_app
        from lazyinstaller.exceptions import ConfigError, NetworkError

        try:
            result = update_app(Path("recipes/helium-browser.yaml"))
        except ConfigError as e:
            print(f"Configuration error: {e}")
        except NetworkError as e:
            print(f"Network error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "LazyInstallerError",
    "ConfigError",
    "UnsafeFlagLineError",
    "NetworkError",
    "VersionFetchError",
    "DownloadError",
    "InstallError",
    "DependencyError",
]


class LazyInstallerError(Exception):
    """Base exception for all lazyinstaller errors."""

    pass


class ConfigError(LazyInstallerError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, empty files, non-mapping documents)
    - Missing or invalid recipe fields (app.id, install.format, ...)
    - Unknown discovery strategies or installed-version probes
    """

    pass


class UnsafeFlagLineError(ConfigError):
    """Raised when a flag-file line cannot be tokenized safely.

    The line contains command substitution (``$(...)``), a backtick or
    quoting the splitter cannot close, or it is not valid UTF-8. The loader
    catches this, warns and drops the whole line.

    Attributes:
        line: The offending line, without its trailing newline.
    """

    def __init__(self, message: str, line: str) -> None:
        super().__init__(message)
        self.line = line


class NetworkError(LazyInstallerError):
    """Raised for network-related errors (metadata lookups and downloads)."""

    pass


class VersionFetchError(NetworkError):
    """Raised when the package metadata source yields no usable version.

    Covers unreachable endpoints, HTTP errors, unparsable responses and
    responses without a version string or download location.
    """

    pass


class DownloadError(NetworkError):
    """Raised when downloading the application payload fails.

    Partial files are removed before this is raised.
    """

    pass


class InstallError(LazyInstallerError):
    """Raised for filesystem installation failures.

    This exception is raised when there are problems with:

    - Extracting or copying the payload into the install directory
    - Writing the version marker or the launcher script
    - Executing the installed application from the launcher
    """

    pass


class DependencyError(InstallError):
    """Raised when required host commands or libraries are missing.

    Attributes:
        missing: Names of the missing dependencies, in recipe order.
    """

    def __init__(self, message: str, missing: list[str]) -> None:
        super().__init__(message)
        self.missing = missing
