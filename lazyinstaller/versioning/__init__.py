"""
Version comparison utilities for lazyinstaller.

This package compares the dotted version strings published by vendors with
the version recorded by an existing installation.

Modules
-------
keys : module
    Segment-wise numeric comparison with zero padding.

Public API
----------
VersionInfo : dataclass
    Version and download URL discovered from a metadata source.
ComparisonResult : Literal type
    "greater", "less" or "equal" (GREATER, LESS, EQUAL constants).
compare_versions : function
    Compare candidate against installed version.
is_newer : function
    True if the candidate should replace the installed version.
version_key : function
    Normalized integer tuple for a version string.

Examples
--------
    >>> from lazyinstaller.versioning import compare_versions
    >>> compare_versions("1.10.0", "1.9.9")
    'greater'
    >>> compare_versions("1.2", "1.2.0")
    'equal'

Notes
-----
- Non-digit characters inside a segment are discarded, so pre-release
  suffixes do not order ("2.0.0-beta" equals "2.0.0").
- No network or file I/O happens here.
"""

from .keys import (
    EQUAL,
    GREATER,
    LESS,
    ComparisonResult,
    VersionInfo,
    compare_versions,
    is_newer,
    version_key,
)

__all__ = [
    "EQUAL",
    "GREATER",
    "LESS",
    "ComparisonResult",
    "VersionInfo",
    "compare_versions",
    "is_newer",
    "version_key",
]
