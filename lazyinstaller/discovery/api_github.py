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

"""GitHub releases discovery strategy for lazyinstaller.

Queries the GitHub API for the latest release of a repository and returns
the version (from the release tag) and the download URL of the first asset
whose name matches a pattern. Used for applications published as GitHub
release assets, such as the Helium browser AppImage.

Recipe Configuration:
    ```yaml
    source:
      strategy: api_github
      repo: "imputnet/helium-linux"              # Required: owner/repo
      asset_pattern: ".*x86_64\\.AppImage$"      # Required: regex for asset
      version_pattern: "v?(.+)"                  # Optional: version extraction
      prerelease: false                          # Optional: accept prereleases
      token: "${GITHUB_TOKEN}"                   # Optional: auth token
    ```

Configuration Fields:

- **repo** (str, required): GitHub repository in "owner/name" format.
- **asset_pattern** (str, required): Regular expression searched in each
    asset name. The first match wins.
- **version_pattern** (str, optional): Regular expression applied to the tag
    name. Uses the named group ``version``, else group 1, else the whole
    match. Default: "v?(.+)" (strips an optional "v" prefix).
- **prerelease** (bool, optional): If False (default), a latest release
    flagged as pre-release is rejected.
- **token** (str, optional): Personal access token, typically
    "${GITHUB_TOKEN}". Raises the rate limit from 60 to 5000 requests/hour.

Error Handling:

- ConfigError: Missing or invalid configuration fields
- VersionFetchError: API failures, no tag, no assets, no matching asset

When the matched asset carries a "sha256:" digest, the download is verified
against it.
"""

from __future__ import annotations

import re
from typing import Any

import requests

from lazyinstaller.exceptions import ConfigError, VersionFetchError
from lazyinstaller.logging import get_global_logger
from lazyinstaller.versioning import VersionInfo

from .base import expand_env_placeholder, register_strategy

DEFAULT_VERSION_PATTERN = r"v?(.+)"
GITHUB_API = "https://api.github.com"


def _extract_version(tag_name: str, version_pattern: str) -> str:
    try:
        pattern = re.compile(version_pattern)
    except re.error as err:
        raise ConfigError(f"Invalid version_pattern regex: {version_pattern!r}") from err

    match = pattern.search(tag_name)
    if not match:
        raise VersionFetchError(
            f"Version pattern {version_pattern!r} did not match tag {tag_name!r}"
        )

    # Named group 'version' first, else group 1, else full match
    if "version" in pattern.groupindex:
        return match.group("version") or ""
    if pattern.groups > 0:
        return match.group(1) or ""
    return match.group(0)


def _asset_sha256(asset: dict[str, Any]) -> str | None:
    # GitHub publishes "sha256:<hex>" digests for release assets.
    digest = str(asset.get("digest") or "")
    if digest.startswith("sha256:"):
        return digest.removeprefix("sha256:").strip() or None
    return None


class ApiGithubStrategy:
    """Discovery strategy for GitHub releases.

    Configuration example:
        source:
          strategy: api_github
          repo: "owner/repository"
          asset_pattern: ".*\\.AppImage$"
    """

    def get_version_info(self, app_config: dict[str, Any]) -> VersionInfo:
        """Fetch the latest release from the GitHub API.

        Args:
            app_config: App configuration containing source.repo and
                source.asset_pattern.

        Returns:
            Version info with version string, download URL, and source name.

        Raises:
            ConfigError: If required config fields are missing or invalid.
            VersionFetchError: If the API call fails, the release is a
                pre-release that is not allowed, or no asset matches.

        """
        logger = get_global_logger()

        source = app_config.get("source", {})
        errors = self.validate_config(app_config)
        if errors:
            raise ConfigError(errors[0])

        repo = source["repo"]
        asset_pattern = source["asset_pattern"]
        version_pattern = source.get("version_pattern", DEFAULT_VERSION_PATTERN)
        prerelease = bool(source.get("prerelease", False))
        timeout = source.get("timeout", 30)

        token = expand_env_placeholder(source.get("token"))
        if source.get("token") and not token:
            logger.warning(
                "DISCOVERY", f"Token placeholder {source.get('token')} is not set"
            )

        logger.verbose("DISCOVERY", "Strategy: api_github")
        logger.verbose("DISCOVERY", f"Repository: {repo}")
        logger.verbose("DISCOVERY", f"Asset pattern: {asset_pattern}")

        api_url = f"{GITHUB_API}/repos/{repo}/releases/latest"
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"token {token}"
            logger.verbose("DISCOVERY", "Using authenticated API request")

        logger.verbose("DISCOVERY", f"Fetching release from: {api_url}")

        try:
            response = requests.get(api_url, headers=headers, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as err:
            status = response.status_code
            if status == 404:
                raise VersionFetchError(
                    f"Repository {repo!r} not found or has no releases"
                ) from err
            if status == 403:
                raise VersionFetchError(
                    "GitHub API rate limit exceeded. Consider using a token. "
                    f"Status: {status}"
                ) from err
            raise VersionFetchError(
                f"GitHub API request failed: {status} {response.reason}"
            ) from err
        except requests.exceptions.RequestException as err:
            raise VersionFetchError(f"Failed to fetch GitHub release: {err}") from err

        try:
            release = response.json()
        except ValueError as err:
            raise VersionFetchError("GitHub API returned invalid JSON") from err

        if release.get("prerelease", False) and not prerelease:
            raise VersionFetchError(
                "Latest release is a pre-release and prerelease=false. "
                f"Tag: {release.get('tag_name')}"
            )

        tag_name = (release.get("tag_name") or "").strip()
        if not tag_name:
            raise VersionFetchError("Release has no tag_name field")
        logger.verbose("DISCOVERY", f"Release tag: {tag_name}")

        version = _extract_version(tag_name, version_pattern).strip()
        if not version:
            raise VersionFetchError(f"Empty version extracted from tag {tag_name!r}")
        logger.verbose("DISCOVERY", f"Extracted version: {version}")

        assets = release.get("assets") or []
        if not assets:
            raise VersionFetchError(f"Release {tag_name} has no assets")

        pattern = re.compile(asset_pattern)
        for asset in assets:
            name = asset.get("name", "")
            url = (asset.get("browser_download_url") or "").strip()
            if pattern.search(name) and url:
                logger.verbose("DISCOVERY", f"Matched asset: {name}")
                return VersionInfo(
                    version=version,
                    download_url=url,
                    source="api_github",
                    sha256=_asset_sha256(asset),
                )

        available = ", ".join(a.get("name", "(unnamed)") for a in assets)
        raise VersionFetchError(
            f"No asset matched pattern {asset_pattern!r} in release {tag_name}. "
            f"Available: {available}"
        )

    def validate_config(self, app_config: dict[str, Any]) -> list[str]:
        """Validate api_github configuration without network calls."""
        errors: list[str] = []
        source = app_config.get("source", {})

        repo = source.get("repo")
        if not repo:
            errors.append("api_github strategy requires 'source.repo'")
        elif not isinstance(repo, str) or repo.count("/") != 1:
            errors.append(f"Invalid repo format: {repo!r}. Expected 'owner/repository'")

        asset_pattern = source.get("asset_pattern")
        if not asset_pattern:
            errors.append("api_github strategy requires 'source.asset_pattern'")
        else:
            try:
                re.compile(asset_pattern)
            except re.error as err:
                errors.append(f"Invalid asset_pattern regex {asset_pattern!r}: {err}")

        version_pattern = source.get("version_pattern")
        if version_pattern:
            try:
                re.compile(version_pattern)
            except re.error as err:
                errors.append(
                    f"Invalid version_pattern regex {version_pattern!r}: {err}"
                )

        return errors


register_strategy("api_github", ApiGithubStrategy)
