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

"""Update policy for lazyinstaller.

Public API:

- decide_update: Turn (candidate, installed) into an install/update/skip action
- UpdateDecision: Result dataclass with a ``proceed`` convenience property
"""

from .updates import UpdateAction, UpdateDecision, decide_update

__all__ = ["UpdateAction", "UpdateDecision", "decide_update"]
