"""Input/Output operations for lazyinstaller.

Public API:

download_file : function
    Stream a URL to disk with retries, SHA-256 and an atomic rename.
make_session : function
    requests.Session preconfigured with retry/backoff.

Example:
    ```python
    from pathlib import Path
    from lazyinstaller.io import download_file

    path, sha256, headers = download_file(
        "https://example.com/app.tar.gz", Path("/tmp/work")
    )
    ```

"""

from .download import download_file, make_session

__all__ = ["download_file", "make_session"]
