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

"""Shared fakes for the cluster, storage, and installer collaborators."""

from __future__ import annotations

import itertools
import time

import pytest
from kubernetes import client

from provisioner_e2e.cleanup import CleanupRegistry
from provisioner_e2e.config import TestContext
from provisioner_e2e.errors import ClusterAPIError, InstallError, NamespaceNotFound
from provisioner_e2e.scope import TestScope


class FakeClock:
    """Monotonic clock that only moves when something sleeps."""

    def __init__(self) -> None:
        self.now = 1000.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeClusterClient:
    """In-memory namespace API.

    Attributes:
        create_failures: Number of upcoming create calls that fail.
        delete_errors: Namespace name to the error its delete call raises.
        get_errors: Number of upcoming get calls that fail with a transient error.
        stuck: Namespaces that stay Terminating forever once deleted.
        gets_until_gone: Get calls a deleted namespace survives before disappearing.
    """

    def __init__(self) -> None:
        self.namespaces: dict[str, client.V1Namespace] = {}
        self.terminating: dict[str, int] = {}
        self.create_failures = 0
        self.delete_errors: dict[str, Exception] = {}
        self.get_errors = 0
        self.stuck: set[str] = set()
        self.gets_until_gone = 0
        self.create_calls = 0
        self.delete_calls: list[str] = []
        self.get_calls: list[str] = []
        self._suffix = itertools.count(1)

    def add(self, name: str) -> client.V1Namespace:
        ns = client.V1Namespace(metadata=client.V1ObjectMeta(name=name))
        self.namespaces[name] = ns
        return ns

    def create_namespace(self, body: client.V1Namespace) -> client.V1Namespace:
        self.create_calls += 1
        if self.create_failures > 0:
            self.create_failures -= 1
            raise ClusterAPIError("create namespace: 500 Internal Server Error")
        name = f"{body.metadata.generate_name}{next(self._suffix):05d}"
        ns = client.V1Namespace(
            metadata=client.V1ObjectMeta(name=name, labels=dict(body.metadata.labels or {})),
        )
        self.namespaces[name] = ns
        return ns

    def get_namespace(self, name: str) -> client.V1Namespace:
        self.get_calls.append(name)
        if self.get_errors > 0:
            self.get_errors -= 1
            raise ClusterAPIError(f"get namespace {name}: 503 Service Unavailable")
        if name not in self.namespaces:
            raise NamespaceNotFound(name)
        if name in self.terminating and name not in self.stuck:
            if self.terminating[name] == 0:
                del self.namespaces[name]
                del self.terminating[name]
                raise NamespaceNotFound(name)
            self.terminating[name] -= 1
        return self.namespaces[name]

    def delete_namespace(self, name: str) -> None:
        self.delete_calls.append(name)
        if name in self.delete_errors:
            raise self.delete_errors[name]
        if name not in self.namespaces:
            raise NamespaceNotFound(name)
        self.terminating.setdefault(name, self.gets_until_gone)


class FakeInstaller:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.fail: set[str] = set()

    def install_fss_provisioner(self, namespace: str) -> None:
        self._install("fss", namespace)

    def install_block_provisioner(self, namespace: str) -> None:
        self._install("block", namespace)

    def _install(self, kind: str, namespace: str) -> None:
        self.calls.append((kind, namespace))
        if kind in self.fail:
            raise InstallError(f"Failed to install {kind} provisioner into {namespace}")


class FakeStorageClient:
    def __init__(self, fail: set[str] | None = None) -> None:
        self.deleted: list[str] = []
        self.fail = fail or set()

    def delete_volume_backup(self, volume_backup_id: str) -> None:
        self.deleted.append(volume_backup_id)
        if volume_backup_id in self.fail:
            raise RuntimeError(f"backup {volume_backup_id} is busy")


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr(time, "monotonic", fake.monotonic)
    return fake


@pytest.fixture
def cluster() -> FakeClusterClient:
    return FakeClusterClient()


@pytest.fixture
def installer() -> FakeInstaller:
    return FakeInstaller()


@pytest.fixture
def registry() -> CleanupRegistry:
    return CleanupRegistry()


@pytest.fixture
def context() -> TestContext:
    return TestContext(delete_namespace=True, delete_namespace_on_failure=False)


@pytest.fixture
def make_scope(cluster, installer, registry, context, clock):
    """Build a TestScope wired to the fakes; keyword arguments override the defaults."""

    def _make(base_name: str = "fss", **kwargs) -> TestScope:
        kwargs.setdefault("context", context)
        kwargs.setdefault("registry", registry)
        kwargs.setdefault("installer", installer)
        kwargs.setdefault("sleep", clock.sleep)
        cluster_client = kwargs.pop("cluster_client", cluster)
        return TestScope(base_name, cluster_client, **kwargs)

    return _make


@pytest.fixture
def storage() -> FakeStorageClient:
    return FakeStorageClient()
