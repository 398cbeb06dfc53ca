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

"""Discovery strategy base protocol and registry for lazyinstaller.

This module defines the foundational components for the discovery system:

- DiscoveryStrategy protocol: Interface that all strategies must implement
- Strategy registry: Global dict mapping strategy names to implementations
- Registration and lookup functions: register_strategy() and get_strategy()

A strategy answers one question for the update workflow: "what is the
latest version, and where can it be downloaded?" It never downloads the
payload itself.

Design Philosophy:
    - Strategies are Protocol classes (structural subtyping, not inheritance)
    - Registration happens at module import time (strategies self-register)
    - Registry is a simple dict (no complex dependency injection needed)
    - Each strategy is stateless and can be instantiated on-demand

Example:
    Implementing a custom strategy:
        ```python
        from typing import Any
        from lazyinstaller.discovery.base import register_strategy
        from lazyinstaller.versioning import VersionInfo

        class StaticStrategy:
            def get_version_info(self, app_config: dict[str, Any]) -> VersionInfo:
                source = app_config["source"]
                return VersionInfo(source["version"], source["url"], "static")

        register_strategy("static", StaticStrategy)
        ```

"""

from __future__ import annotations

import os
from typing import Any, Protocol

from lazyinstaller.exceptions import ConfigError
from lazyinstaller.versioning import VersionInfo

# -------------------------------
# Strategy Protocol
# -------------------------------


class DiscoveryStrategy(Protocol):
    """Protocol for version discovery strategies.

    Each strategy must implement get_version_info(). Strategies may
    optionally implement validate_config() to provide strategy-specific
    configuration validation without network calls.
    """

    def get_version_info(self, app_config: dict[str, Any]) -> VersionInfo:
        """Look up the latest version and its download URL.

        Args:
            app_config: The app configuration from the recipe
                (`config["app"]`).

        Returns:
            Version info with version string, download URL and source name.

        Raises:
            ConfigError: On missing or invalid source configuration.
            VersionFetchError: If the source cannot be reached or does not
                yield a version and download URL.

        """
        ...

    def validate_config(self, app_config: dict[str, Any]) -> list[str]:
        """Validate strategy-specific configuration (optional).

        Args:
            app_config: The app configuration from the recipe.

        Returns:
            List of error messages. Empty list if configuration is valid.

        Note:
            Should NOT make network calls. Used by 'lazyinstaller validate'.

        """
        ...


# -------------------------------
# Shared helpers
# -------------------------------


def expand_env_placeholder(value: Any) -> Any:
    """Expand a whole-value ``${VAR}`` placeholder from the environment.

    Returns None when the variable is unset or empty. Non-placeholder values
    are returned unchanged.
    """
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        return os.environ.get(value[2:-1]) or None
    return value


# -------------------------------
# Strategy Registry
# -------------------------------

_STRATEGY_REGISTRY: dict[str, type[DiscoveryStrategy]] = {}


def register_strategy(name: str, strategy_class: type[DiscoveryStrategy]) -> None:
    """Register a discovery strategy by name in the global registry.

    Registering the same name twice overwrites the previous registration
    (allows monkey-patching for tests).

    Args:
        name: Strategy name (e.g., "api_github"). This is the value used in
            recipe YAML files under source.strategy.
        strategy_class: The strategy class to register.

    """
    _STRATEGY_REGISTRY[name] = strategy_class


def registered_strategies() -> list[str]:
    """Names of all registered strategies, in registration order."""
    return list(_STRATEGY_REGISTRY)


def get_strategy(name: str) -> DiscoveryStrategy:
    """Get a discovery strategy instance by name from the global registry.

    Args:
        name: Strategy name (e.g., "http_json"). Case-sensitive.

    Returns:
        A new instance of the requested strategy.

    Raises:
        ConfigError: If the strategy name is not registered. The error message
            includes a list of available strategies for troubleshooting.

    """
    if name not in _STRATEGY_REGISTRY:
        available = ", ".join(registered_strategies())
        raise ConfigError(
            f"Unknown discovery strategy: {name!r}. Available: {available or '(none)'}"
        )
    return _STRATEGY_REGISTRY[name]()
