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

"""Ordered lookup of named variables: process environment first, then the test context."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from typing import Protocol

from provisioner_e2e.config import TestContext
from provisioner_e2e.constants import AD, KUBECONFIG_VAR, MNT_TARGET_OCID, OCI_CONFIG_VAR, SUBNET_OCID
from provisioner_e2e.errors import MissingVariableError


class Resolver(Protocol):
    """A single source of named values."""

    def resolve(self, name: str) -> str | None:
        """Return the value for *name*, or None if this source does not have it."""


class EnvironmentResolver:
    """Reads variables from the process environment."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def resolve(self, name: str) -> str | None:
        return self._environ.get(name)


class ContextResolver:
    """Reads variables from the matching TestContext fields."""

    FIELDS = {
        AD: "ad",
        MNT_TARGET_OCID: "mnt_target_ocid",
        OCI_CONFIG_VAR: "oci_config",
        SUBNET_OCID: "subnet_ocid",
        KUBECONFIG_VAR: "kubeconfig",
    }

    def __init__(self, context: TestContext) -> None:
        self._context = context

    def resolve(self, name: str) -> str | None:
        field = self.FIELDS.get(name)
        if field is None:
            return None
        return getattr(self._context, field) or None


class ResolverChain:
    """Tries each resolver in order and returns the first value found."""

    def __init__(self, resolvers: Sequence[Resolver]) -> None:
        self.resolvers = list(resolvers)

    @classmethod
    def for_context(cls, context: TestContext) -> ResolverChain:
        """Build the standard environment-then-context chain."""
        return cls([EnvironmentResolver(), ContextResolver(context)])

    def lookup(self, name: str) -> str:
        """Resolve *name*, skipping resolvers that have no value or an empty one.

        Raises:
            MissingVariableError: If no resolver yields a non-empty value.
        """
        for resolver in self.resolvers:
            value = resolver.resolve(name)
            if value:
                return value
        raise MissingVariableError(name)
