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

"""Payload installation for lazyinstaller.

Places a downloaded payload under the application's install directory.
Every operation builds the new state next to the old one and switches over
with a rename, so an interrupted or failed install leaves the previous
installation runnable.

Private Helpers:
    - _strip_member: Apply strip_components and safety checks to a member
    - _swap_into_place: Replace install_dir with a staged directory

Example:
    ```python
    from pathlib import Path
    from lazyinstaller.install import install_tarball

    install_tarball(Path("/tmp/work/Windsurf-linux-x64.tar.gz"), Path("/opt/windsurf"))
    ```

"""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
import shutil
import tarfile
import tempfile

from lazyinstaller.exceptions import InstallError
from lazyinstaller.logging import get_global_logger

EXECUTABLE_MODE = 0o755


def _strip_member(
    member: tarfile.TarInfo, strip_components: int
) -> tarfile.TarInfo | None:
    """Rename member for strip_components; None if nothing is left.

    Raises:
        InstallError: If the member would land outside the target directory.
    """
    name = PurePosixPath(member.name)
    if name.is_absolute() or ".." in name.parts:
        raise InstallError(f"unsafe path in archive: {member.name!r}")

    parts = [p for p in name.parts if p != "."][strip_components:]
    if not parts:
        return None
    member.name = "/".join(parts)

    if member.islnk():
        # Hard link targets are archive paths and are stripped the same way.
        target = PurePosixPath(member.linkname)
        if target.is_absolute() or ".." in target.parts:
            raise InstallError(f"unsafe hard link in archive: {member.linkname!r}")
        target_parts = [p for p in target.parts if p != "."][strip_components:]
        if not target_parts:
            raise InstallError(f"unsafe hard link in archive: {member.linkname!r}")
        member.linkname = "/".join(target_parts)
    elif member.issym():
        target = PurePosixPath(member.linkname)
        if target.is_absolute():
            raise InstallError(
                f"symlink {member.name!r} points outside the install: {member.linkname!r}"
            )
        depth = len(parts) - 1
        for part in target.parts:
            depth += -1 if part == ".." else (0 if part == "." else 1)
            if depth < 0:
                raise InstallError(
                    f"symlink {member.name!r} points outside the install: "
                    f"{member.linkname!r}"
                )
    return member


def _swap_into_place(staging: Path, install_dir: Path) -> None:
    """Move staging to install_dir, removing the old install afterwards."""
    logger = get_global_logger()
    backup: Path | None = None

    if install_dir.exists():
        backup = install_dir.with_name(f".{install_dir.name}.old-{os.getpid()}")
        if backup.exists():
            shutil.rmtree(backup)
        install_dir.rename(backup)
        logger.verbose("INSTALL", f"Moved previous install aside: {backup}")

    try:
        staging.rename(install_dir)
    except BaseException:
        if backup is not None:
            backup.rename(install_dir)
        raise

    if backup is not None:
        shutil.rmtree(backup, ignore_errors=True)


def install_tarball(
    archive: Path, install_dir: Path, *, strip_components: int = 1
) -> Path:
    """Extract a tar archive (any compression) as the new install_dir.

    Members are checked before anything is written: absolute paths, ".."
    components and links escaping the target fail the whole install.

    Args:
        archive: Downloaded .tar/.tar.gz/.tar.xz file.
        install_dir: Final installation directory. Replaced as a whole.
        strip_components: Leading path components to drop from each member.

    Returns:
        install_dir.

    Raises:
        InstallError: On unsafe members, a corrupt archive, or filesystem
            errors. The previous installation is left untouched.

    """
    logger = get_global_logger()
    install_dir = Path(install_dir)

    logger.verbose("INSTALL", f"Extracting {archive.name} -> {install_dir}")

    try:
        install_dir.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(
            tempfile.mkdtemp(prefix=f".{install_dir.name}.staging-", dir=install_dir.parent)
        )
    except OSError as err:
        raise InstallError(f"cannot prepare {install_dir.parent}: {err}") from err

    try:
        with tarfile.open(archive, "r:*") as tar:
            members = []
            for member in tar.getmembers():
                stripped = _strip_member(member, strip_components)
                if stripped is not None:
                    members.append(stripped)
            if not members:
                raise InstallError(f"{archive.name} contains no files to install")
            tar.extractall(staging, members=members, filter="data")

        staging.chmod(EXECUTABLE_MODE)
        _swap_into_place(staging, install_dir)
    except InstallError:
        shutil.rmtree(staging, ignore_errors=True)
        raise
    except (OSError, tarfile.TarError) as err:
        shutil.rmtree(staging, ignore_errors=True)
        raise InstallError(f"failed to install {archive.name}: {err}") from err
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    logger.verbose("INSTALL", f"Installed {len(members)} archive member(s)")
    return install_dir


def install_appimage(image: Path, install_dir: Path, binary: Path) -> Path:
    """Copy a single-file executable into place with mode 0755.

    Args:
        image: Downloaded AppImage.
        install_dir: Installation directory (created if missing).
        binary: Final path of the executable, usually inside install_dir.

    Returns:
        binary.

    Raises:
        InstallError: On filesystem errors.

    """
    logger = get_global_logger()
    binary = Path(binary)
    tmp = binary.with_name(f".{binary.name}.tmp")

    logger.verbose("INSTALL", f"Copying {image.name} -> {binary}")
    try:
        Path(install_dir).mkdir(parents=True, exist_ok=True)
        binary.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(image, tmp)
        tmp.chmod(EXECUTABLE_MODE)
        tmp.replace(binary)
    except OSError as err:
        tmp.unlink(missing_ok=True)
        raise InstallError(f"failed to install {binary}: {err}") from err
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return binary


def atomic_write_text(path: Path, text: str, mode: int) -> None:
    """Write text to path via a temp file and rename, with the given mode."""
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(text, encoding="utf-8")
        tmp.chmod(mode)
        tmp.replace(path)
    except OSError as err:
        tmp.unlink(missing_ok=True)
        raise InstallError(f"failed to write {path}: {err}") from err
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def write_version_marker(path: Path, version: str) -> Path:
    """Record the installed version for the version_file probe."""
    get_global_logger().verbose("INSTALL", f"Writing version marker: {path}")
    atomic_write_text(Path(path), f"{version}\n", 0o644)
    return Path(path)
