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

"""Tests for environment-then-context variable lookup."""

from __future__ import annotations

import pytest

from provisioner_e2e.config import TestContext
from provisioner_e2e.constants import AD, KUBECONFIG_VAR, OCI_CONFIG_VAR, SUBNET_OCID
from provisioner_e2e.env import ContextResolver, EnvironmentResolver, ResolverChain
from provisioner_e2e.errors import MissingVariableError


def _chain(environ, **context_fields):
    context = TestContext(**context_fields)
    return ResolverChain([EnvironmentResolver(environ), ContextResolver(context)])


def test_environment_wins_over_context():
    chain = _chain({AD: "PHX-AD-1"}, ad="PHX-AD-2")
    assert chain.lookup(AD) == "PHX-AD-1"


def test_falls_back_to_context():
    chain = _chain({}, oci_config="/etc/oci/config.yaml")
    assert chain.lookup(OCI_CONFIG_VAR) == "/etc/oci/config.yaml"


def test_empty_environment_value_falls_through():
    chain = _chain({SUBNET_OCID: ""}, subnet_ocid="ocid1.subnet.oc1..x")
    assert chain.lookup(SUBNET_OCID) == "ocid1.subnet.oc1..x"


def test_missing_everywhere_raises():
    chain = _chain({})
    with pytest.raises(MissingVariableError, match="'KUBECONFIG_VAR' not found") as exc_info:
        chain.lookup(KUBECONFIG_VAR)
    assert exc_info.value.name == KUBECONFIG_VAR


def test_context_resolver_ignores_unknown_names():
    assert ContextResolver(TestContext(ad="x")).resolve("HOME") is None


def test_environment_resolver_defaults_to_process_env(monkeypatch):
    monkeypatch.setenv(AD, "from-process")
    assert EnvironmentResolver().resolve(AD) == "from-process"


def test_for_context_chain_order(monkeypatch):
    monkeypatch.delenv(AD, raising=False)
    chain = ResolverChain.for_context(TestContext(ad="ctx-ad"))

    assert [type(r) for r in chain.resolvers] == [EnvironmentResolver, ContextResolver]
    assert chain.lookup(AD) == "ctx-ad"
