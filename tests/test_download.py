"""
Tests for lazyinstaller.io.download module.

Tests download functionality including:
- Basic downloads
- Redirects
- Content-Disposition headers
- Checksum validation
- Atomic writes and cleanup on failure
"""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest
import requests
import requests_mock

from lazyinstaller.exceptions import DownloadError, NetworkError
from lazyinstaller.io.download import download_file, make_session


def _sha256(data: bytes) -> str:
    """Helper to compute SHA-256 hash."""
    return hashlib.sha256(data).hexdigest()


def test_download_success(tmp_test_dir: Path) -> None:
    """Test basic successful download."""
    url = "https://example.com/Windsurf-linux-x64-1.12.4.tar.gz"
    data = b"hello world"

    with requests_mock.Mocker() as m:
        m.get(url, content=data, headers={"Content-Length": str(len(data))})
        path, digest, headers = download_file(url, tmp_test_dir)

    assert path == tmp_test_dir / "Windsurf-linux-x64-1.12.4.tar.gz"
    assert path.read_bytes() == data
    assert digest == _sha256(data)
    assert "Content-Length" in headers


def test_creates_destination(tmp_test_dir: Path) -> None:
    url = "https://example.com/a.bin"
    dest = tmp_test_dir / "nested" / "work"

    with requests_mock.Mocker() as m:
        m.get(url, content=b"x")
        path, _, _ = download_file(url, dest)

    assert path.parent == dest


def test_follows_redirect_and_uses_final_url_name(tmp_test_dir: Path) -> None:
    """Test that redirects are followed and final URL name is used."""
    start = "https://github.com/dl/latest"
    final = "https://objects.example.com/helium-0.4.7.1-x86_64.AppImage"

    with requests_mock.Mocker() as m:
        m.get(start, status_code=302, headers={"Location": final})
        m.get(final, content=b"abc", headers={"Content-Length": "3"})
        path, _, _ = download_file(start, tmp_test_dir)

    assert path.name == "helium-0.4.7.1-x86_64.AppImage"
    assert path.read_bytes() == b"abc"


def test_content_disposition_filename(tmp_test_dir: Path) -> None:
    """Test that Content-Disposition header overrides URL filename."""
    url = "https://example.com/dl"

    with requests_mock.Mocker() as m:
        m.get(
            url,
            content=b"abc",
            headers={"Content-Disposition": 'attachment; filename="app.tar.gz"'},
        )
        path, _, _ = download_file(url, tmp_test_dir)

    assert path.name == "app.tar.gz"


def test_content_disposition_cannot_escape(tmp_test_dir: Path) -> None:
    url = "https://example.com/dl"

    with requests_mock.Mocker() as m:
        m.get(
            url,
            content=b"abc",
            headers={"Content-Disposition": 'attachment; filename="../../evil"'},
        )
        path, _, _ = download_file(url, tmp_test_dir / "work")

    assert path == tmp_test_dir / "work" / "evil"


def test_explicit_filename(tmp_test_dir: Path) -> None:
    url = "https://example.com/dl"

    with requests_mock.Mocker() as m:
        m.get(url, content=b"abc")
        path, _, _ = download_file(url, tmp_test_dir, filename="payload.AppImage")

    assert path.name == "payload.AppImage"


def test_checksum_match(tmp_test_dir: Path) -> None:
    url = "https://example.com/a.bin"
    data = b"payload"

    with requests_mock.Mocker() as m:
        m.get(url, content=data)
        path, digest, _ = download_file(
            url, tmp_test_dir, expected_sha256=_sha256(data).upper()
        )

    assert path.exists()
    assert digest == _sha256(data)


def test_checksum_mismatch_raises_and_cleans_file(tmp_test_dir: Path) -> None:
    """Test that checksum mismatches raise error and leave no file behind."""
    url = "https://example.com/a.bin"

    with requests_mock.Mocker() as m:
        m.get(url, content=b"payload")
        with pytest.raises(DownloadError, match="sha256 mismatch"):
            download_file(url, tmp_test_dir, expected_sha256="0" * 64)

    assert list(tmp_test_dir.iterdir()) == []


def test_http_error_raises_download_error(tmp_test_dir: Path) -> None:
    url = "https://example.com/missing.tar.gz"

    with requests_mock.Mocker() as m:
        m.get(url, status_code=404)
        with pytest.raises(DownloadError, match="download failed"):
            download_file(url, tmp_test_dir)

    assert list(tmp_test_dir.iterdir()) == []


def test_connection_error_is_network_error(tmp_test_dir: Path) -> None:
    url = "https://example.com/a.bin"

    with requests_mock.Mocker() as m:
        m.get(url, exc=requests.exceptions.ConnectTimeout("slow"))
        with pytest.raises(NetworkError):
            download_file(url, tmp_test_dir)


def test_no_part_file_left_on_success(tmp_test_dir: Path) -> None:
    url = "https://example.com/a.bin"

    with requests_mock.Mocker() as m:
        m.get(url, content=b"abc")
        download_file(url, tmp_test_dir)

    assert [p.name for p in tmp_test_dir.iterdir()] == ["a.bin"]


def test_make_session_user_agent() -> None:
    with make_session() as session:
        assert session.headers["User-Agent"].startswith("lazyinstaller/")
        adapter = session.get_adapter("https://example.com")
        assert adapter.max_retries.total == 5
