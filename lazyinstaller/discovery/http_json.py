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

"""HTTP JSON API discovery strategy for lazyinstaller.

Queries a vendor update endpoint that answers with JSON and extracts the
version and download URL using JSONPath expressions. The Windsurf update
API is the canonical example:

    GET https://windsurf-stable.codeium.com/api/update/linux-x64/stable/latest
    {"windsurfVersion": "1.12.4", "url": "https://.../Windsurf-linux-x64-1.12.4.tar.gz", ...}

Recipe Configuration:
    ```yaml
    source:
      strategy: http_json
      api_url: "https://vendor.example/api/latest"
      version_path: "windsurfVersion"              # JSONPath to version
      download_url_path: "url"                     # JSONPath to URL
      sha256_path: "sha256hash"                    # Optional: JSONPath to checksum
      method: "GET"                                # Optional: GET or POST
      headers:                                     # Optional: custom headers
        Authorization: "${API_TOKEN}"
      body:                                        # Optional: POST body (JSON)
        platform: "linux-x64"
      timeout: 30                                  # Optional: seconds
    ```

Configuration Fields:

- **api_url** (str, required): Endpoint returning JSON.
- **version_path** (str, required): JSONPath of the version string.
- **download_url_path** (str, required): JSONPath of the download URL.
    Surrounding whitespace in the value is stripped.
- **sha256_path** (str, optional): JSONPath of the payload's SHA-256. When
    set, the download is verified against it.
- **method** (str, optional): "GET" (default) or "POST".
- **headers** (dict, optional): Extra request headers. A value written as
    "${VAR}" is replaced by the environment variable; unset variables drop
    the header with a warning.
- **body** (dict, optional): JSON body for POST requests.
- **timeout** (int, optional): Request timeout in seconds. Default 30.

Error Handling:

- ConfigError: Missing fields, bad method, unparsable JSONPath
- VersionFetchError: HTTP failures, invalid JSON, paths that match nothing
"""

from __future__ import annotations

from typing import Any

from jsonpath_ng import parse as jsonpath_parse
import requests

from lazyinstaller.exceptions import ConfigError, VersionFetchError
from lazyinstaller.logging import get_global_logger
from lazyinstaller.versioning import VersionInfo

from .base import expand_env_placeholder, register_strategy

_METHODS = ("GET", "POST")


def _compile_path(expr: str, field: str):
    try:
        return jsonpath_parse(expr)
    except Exception as err:
        raise ConfigError(f"Invalid JSONPath in 'source.{field}': {expr!r}") from err


def _extract(data: Any, expr: str, field: str) -> str:
    matches = _compile_path(expr, field).find(data)
    if not matches:
        raise VersionFetchError(f"JSONPath {expr!r} ({field}) not found in response")
    value = matches[0].value
    if value is None or isinstance(value, (dict, list)):
        raise VersionFetchError(
            f"JSONPath {expr!r} ({field}) did not select a scalar value"
        )
    return str(value).strip()


class HttpJsonStrategy:
    """Discovery strategy for JSON API endpoints.

    Configuration example:
        source:
          strategy: http_json
          api_url: "https://api.vendor.com/latest"
          version_path: "version"
          download_url_path: "download_url"
    """

    def get_version_info(self, app_config: dict[str, Any]) -> VersionInfo:
        """Query the JSON API for version and download URL.

        Args:
            app_config: App configuration containing source.api_url,
                source.version_path, and source.download_url_path.

        Returns:
            Version info with version string, download URL, and source name.

        Raises:
            ConfigError: If required config fields are missing or invalid.
            VersionFetchError: If the API call fails or the response does not
                contain both values.

        """
        logger = get_global_logger()

        errors = self.validate_config(app_config)
        if errors:
            raise ConfigError(errors[0])

        source = app_config["source"]
        api_url = source["api_url"]
        version_path = source["version_path"]
        download_url_path = source["download_url_path"]
        method = str(source.get("method", "GET")).upper()
        body = source.get("body") or {}
        timeout = source.get("timeout", 30)

        headers: dict[str, str] = {}
        for key, value in (source.get("headers") or {}).items():
            expanded = expand_env_placeholder(value)
            if expanded is None:
                logger.warning(
                    "DISCOVERY", f"Environment variable for header {key} not set"
                )
                continue
            headers[key] = str(expanded)

        logger.verbose("DISCOVERY", "Strategy: http_json")
        logger.verbose("DISCOVERY", f"Calling API: {method} {api_url}")

        try:
            if method == "GET":
                response = requests.get(api_url, headers=headers, timeout=timeout)
            else:
                response = requests.post(
                    api_url, headers=headers, json=body, timeout=timeout
                )
            response.raise_for_status()
        except requests.exceptions.HTTPError as err:
            raise VersionFetchError(
                f"API request failed: {response.status_code} {response.reason}"
            ) from err
        except requests.exceptions.RequestException as err:
            raise VersionFetchError(f"Failed to call API: {err}") from err

        logger.verbose("DISCOVERY", f"API response: {response.status_code} OK")

        try:
            data = response.json()
        except ValueError as err:
            raise VersionFetchError(
                f"Invalid JSON response from API: {response.text[:200]}"
            ) from err

        if isinstance(data, dict):
            logger.debug("DISCOVERY", f"Response keys: {list(data)[:20]}")

        version = _extract(data, version_path, "version_path")
        download_url = _extract(data, download_url_path, "download_url_path")
        if not version:
            raise VersionFetchError(f"Empty version at {version_path!r}")
        if not download_url:
            raise VersionFetchError(f"Empty download URL at {download_url_path!r}")

        logger.verbose("DISCOVERY", f"Extracted version: {version}")
        logger.verbose("DISCOVERY", f"Download URL: {download_url}")

        sha256 = None
        sha256_path = source.get("sha256_path")
        if sha256_path:
            sha256 = _extract(data, sha256_path, "sha256_path")
            if not sha256:
                raise VersionFetchError(f"Empty checksum at {sha256_path!r}")

        return VersionInfo(
            version=version,
            download_url=download_url,
            source="http_json",
            sha256=sha256,
        )

    def validate_config(self, app_config: dict[str, Any]) -> list[str]:
        """Validate http_json configuration without network calls."""
        errors: list[str] = []
        source = app_config.get("source", {})

        api_url = source.get("api_url")
        if not api_url:
            errors.append("http_json strategy requires 'source.api_url'")
        elif not str(api_url).startswith(("http://", "https://")):
            errors.append(f"'source.api_url' must be an http(s) URL: {api_url!r}")

        for field in ("version_path", "download_url_path"):
            expr = source.get(field)
            if not expr:
                errors.append(f"http_json strategy requires 'source.{field}'")
                continue
            try:
                _compile_path(str(expr), field)
            except ConfigError as err:
                errors.append(str(err))

        sha256_path = source.get("sha256_path")
        if sha256_path:
            try:
                _compile_path(str(sha256_path), "sha256_path")
            except ConfigError as err:
                errors.append(str(err))

        method = str(source.get("method", "GET")).upper()
        if method not in _METHODS:
            errors.append(f"Invalid method: {method!r}. Must be 'GET' or 'POST'")

        headers = source.get("headers")
        if headers is not None and not isinstance(headers, dict):
            errors.append("'source.headers' must be a mapping")

        return errors


register_strategy("http_json", HttpJsonStrategy)
