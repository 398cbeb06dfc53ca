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

"""Update decision policy for lazyinstaller.

Determines whether a newly discovered vendor version should be installed,
based on the version of the existing installation.

Example:
    Decide what to do with a discovered version:

        from lazyinstaller.policy.updates import decide_update

        decision = decide_update("0.4.7.1", "0.4.5.1")
        if decision.proceed:
            print(f"{decision.action}: {decision.installed} -> {decision.candidate}")

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from lazyinstaller.detection import NOT_INSTALLED
from lazyinstaller.versioning import (
    EQUAL,
    GREATER,
    ComparisonResult,
    compare_versions,
)

UpdateAction = Literal["install", "update", "up_to_date", "downgrade_skipped"]


@dataclass(frozen=True)
class UpdateDecision:
    """Outcome of comparing a candidate version with the installed one.

    Attributes:
        action: What the workflow should do.
        candidate: Version offered by the vendor.
        installed: Installed version ("0.0.0" when nothing is installed).
        comparison: Raw comparator result for (candidate, installed).
    """

    action: UpdateAction
    candidate: str
    installed: str
    comparison: ComparisonResult

    @property
    def proceed(self) -> bool:
        """True if the payload should be fetched and installed."""
        return self.action in ("install", "update")


def decide_update(candidate: str, installed: str) -> UpdateDecision:
    """Decide whether to install, update or leave an application alone.

    Args:
        candidate: Version found during discovery.
        installed: Version reported by the installed-version probe.

    Returns:
        UpdateDecision whose action is "install" (nothing installed yet),
        "update" (candidate newer), "up_to_date" (equal) or
        "downgrade_skipped" (candidate older; never downgrade).

    """
    comparison = compare_versions(candidate, installed)

    if comparison == EQUAL:
        action: UpdateAction = "up_to_date"
    elif comparison == GREATER:
        action = "install" if installed == NOT_INSTALLED else "update"
    else:
        action = "downgrade_skipped"

    return UpdateDecision(
        action=action,
        candidate=candidate,
        installed=installed,
        comparison=comparison,
    )
