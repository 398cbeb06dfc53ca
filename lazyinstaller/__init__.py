"""
lazyinstaller - install and update Linux desktop apps from vendor releases.

Some applications ship for Linux only as a tarball or an AppImage, with no
distribution package. lazyinstaller keeps such applications current: it asks
the vendor for the latest version, compares it with what is installed,
downloads and installs the new release, and writes a launcher that reads
user-editable flag files on every start.

Features
--------
  - Version discovery from GitHub releases or vendor JSON update APIs
  - Installed-version probes (version file or JSON field)
  - Never downgrades; equal versions are left alone
  - Staged installs swapped into place (previous install kept on failure)
  - Flag files split with shell quoting rules, never executed
  - Recipe validation without network access

Quick Start
-----------
Check for an update:

    $ lazyinstaller update --check recipes/windsurf.yaml

Install or update:

    $ sudo lazyinstaller update recipes/helium-browser.yaml

Show what the launcher would run:

    $ lazyinstaller flags recipes/helium-browser.yaml --incognito

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Update workflow orchestration.
config : package
    YAML recipe loading, merging and path resolution.
discovery : package
    Strategy pattern for discovering the latest version.
detection : module
    Installed-version probes.
versioning : package
    Dotted version comparison.
policy : package
    Install/update/skip decision.
io : package
    Payload download.
install : package
    Payload installation and launcher writing.
flags, launch : modules
    Flag-file loading and the launcher runtime.

Project Information
-------------------
License: Apache-2.0
"""

__version__ = "0.3.0"
__license__ = "Apache-2.0"
__description__ = "Install and update Linux desktop apps from vendor releases"

import importlib

# Re-exported on first access. Generated launchers import lazyinstaller.launch
# on every app start and must not pull in requests, yaml or jsonpath_ng.
_LAZY_EXPORTS = {
    "load_effective_config": "lazyinstaller.config",
    "resolve_app": "lazyinstaller.config",
    "update_app": "lazyinstaller.core",
    "load_flags": "lazyinstaller.flags",
    "download_file": "lazyinstaller.io",
    "validate_recipe": "lazyinstaller.validation",
    "VersionInfo": "lazyinstaller.versioning",
    "compare_versions": "lazyinstaller.versioning",
    "is_newer": "lazyinstaller.versioning",
}


def __getattr__(name: str):
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    value = getattr(importlib.import_module(module_name), name)
    globals()[name] = value
    return value


__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "update_app",
    "validate_recipe",
    "load_effective_config",
    "resolve_app",
    "load_flags",
    "download_file",
    "compare_versions",
    "is_newer",
    "VersionInfo",
]
