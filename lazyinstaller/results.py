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

"""Public API return types for lazyinstaller.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    ```python
    from pathlib import Path
    from lazyinstaller.core import update_app

    result = update_app(Path("recipes/windsurf.yaml"), check_only=True)
    print(result.action, result.available_version)
    ```

Note:
    Only public API return types belong in this module. Domain types
    (like VersionInfo or UpdateDecision) stay with their related logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class UpdateResult:
    """Result from checking or applying an application update.

    Attributes:
        app_name: Application display name.
        app_id: Unique application identifier.
        action: Decision taken ("install", "update", "up_to_date",
            "downgrade_skipped").
        installed_version: Version found on disk ("0.0.0" if none).
        available_version: Version offered by the vendor.
        install_dir: Installation directory.
        launcher_path: Path of the launcher on PATH.
        status: "installed", "updated", "up_to_date", "skipped",
            "available" (check only) or "aborted".
    """

    app_name: str
    app_id: str
    action: str
    installed_version: str
    available_version: str
    install_dir: Path
    launcher_path: Path
    status: str


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating a recipe.

    Attributes:
        status: Validation status ("valid" or "invalid").
        errors: List of validation error messages.
        warnings: List of validation warning messages.
        recipe_path: String path to the validated recipe file.
    """

    status: str
    errors: list[str]
    warnings: list[str]
    recipe_path: str
