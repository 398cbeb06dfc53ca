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

"""Discovery strategies for lazyinstaller.

A discovery strategy asks a vendor what the latest version is and where to
download it, without downloading the payload. The update workflow compares
that answer with the installed version before fetching anything.

Available Strategies:
    api_github : ApiGithubStrategy
        Latest GitHub release; version from the tag, URL from a matching
        asset (e.g. the Helium AppImage).
    http_json : HttpJsonStrategy
        Vendor JSON update endpoint; version and URL selected with
        JSONPath (e.g. the Windsurf update API).

Example:
    ```python
    from lazyinstaller.discovery import get_strategy

    strategy = get_strategy("api_github")
    info = strategy.get_version_info(config["app"])
    print(info.version, info.download_url)
    ```

"""

from .base import (
    DiscoveryStrategy,
    get_strategy,
    register_strategy,
    registered_strategies,
)

# Import strategy modules so they self-register.
from . import api_github  # noqa: F401,E402
from . import http_json  # noqa: F401,E402

__all__ = [
    "DiscoveryStrategy",
    "get_strategy",
    "register_strategy",
    "registered_strategies",
]
