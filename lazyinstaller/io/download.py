"""
HTTP(S) payload download for lazyinstaller.

Downloads release archives and AppImages into a scratch directory before
installation. The destination is always a fresh temporary directory owned
by the update workflow, so no conditional-request caching is attempted.

Key Features:

- **Retry Logic with Exponential Backoff** - Retries transient failures
  (429, 500, 502, 503, 504) via urllib3.util.Retry.
- **Atomic Writes** - Streams into <filename>.part and renames on success.
  A failed or interrupted transfer never leaves a file under the final name.
- **Integrity Verification** - SHA-256 computed while streaming, with an
  optional expected digest.
- **Filename Detection** - Content-Disposition first, then the final URL
  path after redirects.

Constants:

- DEFAULT_CHUNK (int): Stream chunk size (1 MiB).

Example:
    >>> from pathlib import Path
    >>> from lazyinstaller.io import download_file
    >>> path, sha256, headers = download_file(
    ...     "https://example.com/Windsurf-linux-x64-1.12.4.tar.gz",
    ...     Path("/tmp/work"),
    ... )

Notes:
- Progress is reported through the global logger at verbose level
- Timeouts are per-request, not total download time
- All failures are raised as DownloadError, chained to the cause
"""

from __future__ import annotations

import hashlib
from pathlib import Path
import time
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from lazyinstaller import __version__
from lazyinstaller.exceptions import DownloadError
from lazyinstaller.logging import get_global_logger

# Stream size per chunk (1 MiB).
DEFAULT_CHUNK = 1024 * 1024


def _filename_from_cd(content_disposition: str) -> str | None:
    """
    Extract a filename from a Content-Disposition header if present.

    Example header:
      'attachment; filename="helium.AppImage"'
    """
    if not content_disposition:
        return None
    for part in (s.strip() for s in content_disposition.split(";")):
        if part.lower().startswith("filename="):
            value = part.split("=", 1)[1].strip().strip('"')
            # Never let a server pick a path outside the destination.
            return Path(value).name or None
    return None


def _filename_from_url(url: str) -> str:
    name = Path(urlparse(url).path).name
    return name or "download.bin"


def make_session() -> requests.Session:
    """
    Create a requests.Session with retry/backoff defaults.

    - Retries on common transient status codes.
    - Applies exponential backoff.
    - Sets a User-Agent identifying lazyinstaller.
    """
    s = requests.Session()
    retries = Retry(
        total=5,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update({"User-Agent": f"lazyinstaller/{__version__}"})
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def download_file(
    url: str,
    destination_folder: Path,
    *,
    filename: str | None = None,
    timeout: int = 60,
    expected_sha256: str | None = None,
) -> tuple[Path, str, dict]:
    """Download a URL into destination_folder.

    Follows redirects and retries transient failures. Writes to
    <filename>.part, then renames to <filename> on success.

    Args:
        url: Source URL.
        destination_folder: Folder to save into (created if missing).
        filename: Force the saved file name instead of deriving it from the
            response.
        timeout: Per-request timeout (seconds).
        expected_sha256: Optional known SHA-256 (hex). A mismatch removes the
            file and raises DownloadError.

    Returns:
        A tuple (file_path, sha256_hex, headers_dict).

    Raises:
        DownloadError: For connection failures, non-2xx responses (after
            retries), write failures or checksum mismatch.

    """
    logger = get_global_logger()

    destination_folder = Path(destination_folder)
    destination_folder.mkdir(parents=True, exist_ok=True)

    logger.verbose("HTTP", f"GET {url}")

    with make_session() as session:
        try:
            resp = session.get(url, stream=True, allow_redirects=True, timeout=timeout)
        except requests.exceptions.RequestException as err:
            raise DownloadError(f"download failed for {url}: {err}") from err

        with resp:
            for hist in resp.history:
                logger.debug(
                    "HTTP",
                    f"Redirect {hist.status_code} -> "
                    f"{hist.headers.get('Location', 'unknown')}",
                )

            try:
                resp.raise_for_status()
            except requests.HTTPError as err:
                raise DownloadError(f"download failed for {url}: {err}") from err

            logger.verbose("HTTP", f"Response: {resp.status_code} {resp.reason}")

            name = (
                filename
                or _filename_from_cd(resp.headers.get("Content-Disposition", ""))
                or _filename_from_url(resp.url)
            )
            target = destination_folder / name
            tmp = target.with_name(target.name + ".part")

            total_size = int(resp.headers.get("Content-Length", "0") or 0)
            if total_size:
                logger.verbose(
                    "HTTP",
                    f"Content-Length: {total_size} ({total_size / (1024 * 1024):.1f} MB)",
                )
            logger.verbose("FILE", f"Downloading to: {tmp}")

            sha = hashlib.sha256()
            downloaded = 0
            last_decile = -1
            started_at = time.time()

            try:
                with tmp.open("wb") as f:
                    for chunk in resp.iter_content(chunk_size=DEFAULT_CHUNK):
                        if not chunk:
                            continue
                        f.write(chunk)
                        sha.update(chunk)
                        downloaded += len(chunk)

                        if total_size:
                            decile = downloaded * 10 // total_size
                            if decile != last_decile:
                                logger.verbose(
                                    "HTTP", f"download progress: {decile * 10}%"
                                )
                                last_decile = decile
            except (OSError, requests.exceptions.RequestException) as err:
                _remove_quietly(tmp)
                raise DownloadError(f"download failed for {url}: {err}") from err
            except BaseException:
                _remove_quietly(tmp)
                raise

    digest = sha.hexdigest()
    logger.verbose("FILE", f"SHA-256: {digest} (computed during download)")

    if expected_sha256 and digest.lower() != expected_sha256.lower():
        _remove_quietly(tmp)
        raise DownloadError(
            f"sha256 mismatch for {name}: got {digest}, expected {expected_sha256}"
        )

    tmp.replace(target)

    elapsed = time.time() - started_at
    logger.verbose("FILE", f"Download complete: {target} in {elapsed:.1f}s")

    return target, digest, dict(resp.headers)
