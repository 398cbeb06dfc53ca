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

"""Configuration loading for lazyinstaller.

Public API:

- load_effective_config: Merge defaults/org.yaml and a recipe
- resolve_app: Turn the merged dict into AppSettings
- AppSettings: Frozen, path-complete per-app settings
"""

from .loader import (
    API_VERSION,
    INSTALL_FORMATS,
    AppSettings,
    load_effective_config,
    resolve_app,
)

__all__ = [
    "API_VERSION",
    "INSTALL_FORMATS",
    "AppSettings",
    "load_effective_config",
    "resolve_app",
]
