"""
Tests for lazyinstaller.install module.

Tests payload installation including:
- Tarball extraction with strip_components
- Rejection of unsafe archive members
- Replacement of a previous installation
- AppImage installation and permissions
- Version marker and launcher files
"""

from __future__ import annotations

import io
import os
from pathlib import Path
import stat
import tarfile
from unittest.mock import patch

import pytest

from lazyinstaller.exceptions import InstallError
from lazyinstaller.install import (
    install_appimage,
    install_tarball,
    write_launcher,
    write_version_marker,
)
from lazyinstaller.launch import LaunchConfig


def make_tarball(path: Path, files: dict[str, bytes], *, symlinks=None, mode=0o755):
    """Create a .tar.gz with the given regular files and symlinks."""
    with tarfile.open(path, "w:gz") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            tar.addfile(info, io.BytesIO(data))
        for name, target in (symlinks or {}).items():
            info = tarfile.TarInfo(name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            tar.addfile(info)
    return path


class TestInstallTarball:
    """Tests for install_tarball."""

    def test_strip_components(self, tmp_test_dir):
        archive = make_tarball(
            tmp_test_dir / "app.tar.gz",
            {
                "Windsurf/bin/windsurf": b"#!/bin/sh\n",
                "Windsurf/resources/app/product.json": b'{"windsurfVersion": "1.0"}',
            },
        )
        target = tmp_test_dir / "opt" / "windsurf"

        install_tarball(archive, target, strip_components=1)

        assert (target / "bin" / "windsurf").read_bytes() == b"#!/bin/sh\n"
        assert (target / "resources" / "app" / "product.json").exists()
        assert os.access(target / "bin" / "windsurf", os.X_OK)

    def test_no_strip(self, tmp_test_dir):
        archive = make_tarball(tmp_test_dir / "app.tar.gz", {"bin/app": b"x"})
        target = tmp_test_dir / "opt" / "app"

        install_tarball(archive, target, strip_components=0)

        assert (target / "bin" / "app").exists()

    def test_replaces_previous_install(self, tmp_test_dir):
        target = tmp_test_dir / "opt" / "windsurf"
        (target / "old").mkdir(parents=True)
        (target / "old" / "stale.txt").write_text("old")
        archive = make_tarball(tmp_test_dir / "app.tar.gz", {"W/new.txt": b"new"})

        install_tarball(archive, target)

        assert (target / "new.txt").read_text() == "new"
        assert not (target / "old").exists()
        # No staging or backup directories left next to the install
        assert [p.name for p in target.parent.iterdir()] == ["windsurf"]

    def test_relative_symlink_inside_allowed(self, tmp_test_dir):
        archive = make_tarball(
            tmp_test_dir / "app.tar.gz",
            {"W/lib/real.so": b"elf"},
            symlinks={"W/lib/link.so": "real.so"},
        )
        target = tmp_test_dir / "opt" / "app"

        install_tarball(archive, target)

        assert (target / "lib" / "link.so").is_symlink()

    @pytest.mark.parametrize(
        "files,symlinks",
        [
            ({"W/../../escape.txt": b"x"}, None),
            ({"/etc/passwd": b"x"}, None),
            ({"W/ok": b"x"}, {"W/link": "/etc/passwd"}),
            ({"W/ok": b"x"}, {"W/link": "../../outside"}),
        ],
    )
    def test_unsafe_members_rejected(self, tmp_test_dir, files, symlinks):
        archive = make_tarball(tmp_test_dir / "bad.tar.gz", files, symlinks=symlinks)
        target = tmp_test_dir / "opt" / "app"
        target.mkdir(parents=True)
        (target / "keep.txt").write_text("previous")

        with pytest.raises(InstallError):
            install_tarball(archive, target)

        assert (target / "keep.txt").read_text() == "previous"
        assert [p.name for p in target.parent.iterdir()] == ["app"]

    def test_corrupt_archive(self, tmp_test_dir):
        archive = tmp_test_dir / "bad.tar.gz"
        archive.write_bytes(b"not a tarball")

        with pytest.raises(InstallError, match="failed to install"):
            install_tarball(archive, tmp_test_dir / "opt" / "app")

    def test_empty_after_strip(self, tmp_test_dir):
        archive = make_tarball(tmp_test_dir / "app.tar.gz", {"only-top": b"x"})

        with pytest.raises(InstallError, match="no files"):
            install_tarball(archive, tmp_test_dir / "opt" / "app")


    def test_interrupt_removes_staging(self, tmp_test_dir):
        target = tmp_test_dir / "opt" / "app"
        target.mkdir(parents=True)
        (target / "keep.txt").write_text("old")
        archive = make_tarball(tmp_test_dir / "app.tar.gz", {"A/new.txt": b"new"})

        def interrupted_extract(self, path, members=None, **kwargs):
            (Path(path) / "partial.txt").write_text("x")
            raise KeyboardInterrupt

        with patch.object(tarfile.TarFile, "extractall", interrupted_extract):
            with pytest.raises(KeyboardInterrupt):
                install_tarball(archive, target)

        assert [p.name for p in target.parent.iterdir()] == ["app"]
        assert (target / "keep.txt").read_text() == "old"


class TestInstallAppImage:
    """Tests for install_appimage."""

    def test_copies_with_exec_mode(self, tmp_test_dir):
        image = tmp_test_dir / "download" / "helium-x86_64.AppImage"
        image.parent.mkdir()
        image.write_bytes(b"\x7fELF")
        install_dir = tmp_test_dir / "opt" / "helium-browser"
        binary = install_dir / "helium-browser.AppImage"

        result = install_appimage(image, install_dir, binary)

        assert result == binary
        assert binary.read_bytes() == b"\x7fELF"
        assert stat.S_IMODE(binary.stat().st_mode) == 0o755
        assert [p.name for p in install_dir.iterdir()] == ["helium-browser.AppImage"]

    def test_overwrites_previous(self, tmp_test_dir):
        install_dir = tmp_test_dir / "opt"
        install_dir.mkdir()
        binary = install_dir / "app.AppImage"
        binary.write_bytes(b"old")
        image = tmp_test_dir / "new.AppImage"
        image.write_bytes(b"new")

        install_appimage(image, install_dir, binary)

        assert binary.read_bytes() == b"new"

    def test_interrupt_removes_temp_copy(self, tmp_test_dir):
        install_dir = tmp_test_dir / "opt"
        install_dir.mkdir()
        binary = install_dir / "h.AppImage"
        binary.write_bytes(b"old")
        image = tmp_test_dir / "new.AppImage"
        image.write_bytes(b"new")

        def interrupted_copy(src, dst):
            Path(dst).write_bytes(b"ne")
            raise KeyboardInterrupt

        with patch("lazyinstaller.install.payload.shutil.copyfile", interrupted_copy):
            with pytest.raises(KeyboardInterrupt):
                install_appimage(image, install_dir, binary)

        assert [p.name for p in install_dir.iterdir()] == ["h.AppImage"]
        assert binary.read_bytes() == b"old"

    def test_missing_source(self, tmp_test_dir):
        with pytest.raises(InstallError):
            install_appimage(
                tmp_test_dir / "missing", tmp_test_dir / "opt", tmp_test_dir / "opt/x"
            )


class TestMarkers:
    """Tests for version marker and launcher writing."""

    def test_write_version_marker(self, tmp_test_dir):
        path = tmp_test_dir / "opt" / "version.txt"
        write_version_marker(path, "0.4.7.1")
        assert path.read_text() == "0.4.7.1\n"

    def test_write_launcher(self, tmp_test_dir):
        config = LaunchConfig(
            binary="/opt/helium-browser/helium-browser.AppImage",
            system_flags="/etc/helium-browser-flags.conf",
            user_flags="helium-browser-flags.conf",
            env_var="HELIUM_USER_FLAGS",
        )
        path = tmp_test_dir / "bin" / "helium-browser"

        write_launcher(path, config, python="/usr/bin/python3")

        text = path.read_text()
        assert text.startswith("#!/usr/bin/python3\n")
        assert "'/opt/helium-browser/helium-browser.AppImage'" in text
        assert stat.S_IMODE(path.stat().st_mode) == 0o755
