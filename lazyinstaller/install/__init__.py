"""Filesystem installation for lazyinstaller.

Public API:

install_tarball : function
    Extract an archive as the new install directory (staged, then swapped).
install_appimage : function
    Copy a single-file executable into place with mode 0755.
write_version_marker : function
    Record the installed version for the version_file probe.
write_launcher : function
    Write the generated launcher script.
"""

from .launcher import write_launcher
from .payload import install_appimage, install_tarball, write_version_marker

__all__ = [
    "install_appimage",
    "install_tarball",
    "write_launcher",
    "write_version_marker",
]
