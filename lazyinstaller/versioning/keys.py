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

"""Core version comparison utilities for lazyinstaller.

This module is format-agnostic: it does NOT download or read files.
It only parses and compares dotted version strings the same way for every
vendor, so install/update/skip decisions are reproducible.

Comparison model:

- Split on "." into segments.
- Remove every non-digit character from each segment.
- Empty or missing segments count as 0.
- Compare position by position as integers (10 > 9).

Known limitation: suffixes are not understood. "2.0.0-beta" strips to
"2.0.0" and compares equal to the release. Vendor feeds we track publish
release builds only, and the update decision depends on this exact
behavior, so it is kept as is.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import zip_longest
import re
from typing import Literal

# ----------------------------
# Shared DTOs
# ----------------------------


@dataclass(frozen=True)
class VersionInfo:
    """Container for version information discovered without downloading.

    Attributes:
        version: Raw version string (e.g., "1.12.41").
        download_url: URL to download the application payload.
        source: Strategy name for logging (e.g., "api_github", "http_json").
        sha256: Expected SHA-256 of the payload when the vendor publishes
            one, else None.

    """

    version: str
    download_url: str
    source: str
    sha256: str | None = None


# ----------------------------
# Comparison core
# ----------------------------

ComparisonResult = Literal["greater", "less", "equal"]

GREATER: ComparisonResult = "greater"
LESS: ComparisonResult = "less"
EQUAL: ComparisonResult = "equal"

_NON_DIGIT = re.compile(r"\D")


def _segment_value(segment: str | None) -> int:
    """Numeric value of one dotted segment (non-digits stripped, empty -> 0)."""
    digits = _NON_DIGIT.sub("", segment or "")
    return int(digits) if digits else 0


def version_key(version: str) -> tuple[int, ...]:
    """Compute the normalized integer tuple for a version string.

    Trailing zero segments are kept, so the key is only suitable for sorting
    when combined with zero-padding; use compare_versions() to compare.

    Example:
        ```python
        version_key("1.10.0-rc2")  # (1, 10, 2)
        version_key("")            # (0,)
        ```
    """
    return tuple(_segment_value(s) for s in version.split("."))


def compare_versions(candidate: str, installed: str) -> ComparisonResult:
    """Compare a candidate version against the installed version.

    Args:
        candidate: Version offered by the vendor.
        installed: Version currently installed ("0.0.0" if none).

    Returns:
        GREATER if candidate is newer, LESS if older, EQUAL otherwise.

    Example:
        ```python
        compare_versions("1.10.0", "1.9.9")      # "greater"
        compare_versions("1.2", "1.2.0")         # "equal"
        compare_versions("2.0.0-beta", "2.0.0")  # "equal" (suffix stripped)
        ```

    """
    if candidate == installed:
        return EQUAL

    for a, b in zip_longest(candidate.split("."), installed.split(".")):
        left = _segment_value(a)
        right = _segment_value(b)
        if left > right:
            return GREATER
        if left < right:
            return LESS
    return EQUAL


def is_newer(
    candidate: str,
    installed: str | None,
    *,
    verbose: bool = False,
) -> bool:
    """Decide if 'candidate' should be considered newer than 'installed'.

    Returns True iff candidate > installed. A missing installed version
    (None) always makes the candidate newer.
    """
    if installed is None:
        if verbose:
            print(f"[is_newer] No installed version. Treat {candidate!r} as newer")
        return True

    result = compare_versions(candidate, installed)
    if verbose:
        print(f"[is_newer] {candidate!r} vs installed {installed!r}: {result}")
    return result == GREATER
