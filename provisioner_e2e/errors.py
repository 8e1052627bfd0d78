# /*
# Copyright 2026 The Provisioner E2E Authors.
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
# */

"""Exception hierarchy shared by the scope controller and its collaborators."""

from __future__ import annotations


class FrameworkError(Exception):
    """Base class for every error raised by the e2e framework."""


# ============================================================================
# Configuration
# ============================================================================

class ConfigError(FrameworkError):
    """Raised when the provisioner config file cannot be read or parsed."""


class ConfigValidationError(ConfigError):
    """Raised when a parsed provisioner config is missing required fields.

    Attributes:
        problems: One message per invalid field.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class ProviderError(FrameworkError):
    """Raised when no OCI configuration provider can be selected."""


class MissingVariableError(FrameworkError):
    """Raised when a variable is absent from every resolver in the chain."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name!r} not found")


# ============================================================================
# Cluster API
# ============================================================================

class ClusterAPIError(FrameworkError):
    """Raised when a call against the cluster API fails."""


class NamespaceNotFound(ClusterAPIError):
    """Raised when the cluster reports that a namespace does not exist."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"namespace {name!r} not found")


class NamespaceTimeoutError(FrameworkError):
    """Raised when a namespace create or delete poll does not finish within its bound."""


# ============================================================================
# Scope lifecycle
# ============================================================================

class SetupError(FrameworkError):
    """Base class for failures that abort a test before its body runs."""


class ClientConfigError(SetupError):
    """Raised when the cluster client cannot be built."""


class NamespaceLookupError(SetupError):
    """Raised when a pre-existing namespace cannot be fetched."""


class StorageClientError(SetupError):
    """Raised when the OCI block storage client cannot be configured."""


class InstallError(SetupError):
    """Raised when a provisioner cannot be installed into a namespace."""
