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

"""Per-test scope controller: namespace sandbox, provisioner installs, and teardown.

A ``TestScope`` is built once per suite and cycles through ``setup`` and
``teardown`` around every test. Setup registers the scope's teardown with the
cleanup registry before touching the cluster, so an aborted session still
removes what the scope created.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from kubernetes import client
from tenacity import RetryError

from provisioner_e2e import console, logger
from provisioner_e2e.cleanup import CleanupHandle, CleanupRegistry, default_registry
from provisioner_e2e.cluster import ClusterClient, build_cluster_client
from provisioner_e2e.config import TestContext
from provisioner_e2e.constants import (
    LABEL_E2E_FRAMEWORK,
    NAMESPACE_CREATE_TIMEOUT_SECONDS,
    NAMESPACE_DELETE_TIMEOUT_SECONDS,
    NAMESPACE_NAME_PREFIX,
    POLL_INTERVAL_SECONDS,
)
from provisioner_e2e.env import ResolverChain
from provisioner_e2e.errors import (
    ClusterAPIError,
    NamespaceLookupError,
    NamespaceNotFound,
    NamespaceTimeoutError,
    StorageClientError,
)
from provisioner_e2e.installers import KubectlInstaller, ProvisionerInstaller
from provisioner_e2e.polling import poll_until
from provisioner_e2e.storage import build_storage_client


@dataclass
class TeardownReport:
    """Outcome of one teardown.

    Attributes:
        namespaces_deleted: Whether the deletion policy allowed namespace deletion.
        namespace_errors: Namespace name to the error that prevented its deletion.
        backup_errors: Backup OCID to the error its deletion raised.
    """

    namespaces_deleted: bool = False
    namespace_errors: dict[str, Exception] = field(default_factory=dict)
    backup_errors: dict[str, Exception] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        """True if any namespace could not be deleted.

        Backup errors are logged and recorded but do not fail the teardown.
        """
        return bool(self.namespace_errors)

    @property
    def failure_message(self) -> str:
        return ",".join(
            f'Couldn\'t delete ns: "{name}": {err} ({err!r})'
            for name, err in self.namespace_errors.items()
        )


class TestScope:
    """Owns the namespace(s) and cloud resources of one test suite.

    Attributes:
        base_name: Suite name used for generated namespace names and labels.
        cluster_client: Cluster API client, built lazily when not injected.
        is_backup: Whether setup builds a block storage client.
        storage_client: OCI block storage client, only set for backup scopes.
        namespace: Namespace the current test runs in.
        namespaces_to_delete: Namespaces created by this scope, in creation order.
        fss_provisioner_installed: Whether the file system provisioner is installed.
        block_provisioner_installed: Whether the block volume provisioner is installed.
        backup_ids: Volume backup OCIDs to delete at teardown.
        cleanup_handle: Registry handle of the pending teardown, if any.
    """

    __test__ = False

    def __init__(
        self,
        base_name: str,
        cluster_client: ClusterClient | None = None,
        is_backup: bool = False,
        *,
        context: TestContext | None = None,
        registry: CleanupRegistry | None = None,
        installer: ProvisionerInstaller | None = None,
        resolver: ResolverChain | None = None,
        cluster_client_factory: Callable[[str], ClusterClient] = build_cluster_client,
        storage_client_factory: Callable[[ResolverChain], object] = build_storage_client,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        create_timeout: float = NAMESPACE_CREATE_TIMEOUT_SECONDS,
        delete_timeout: float = NAMESPACE_DELETE_TIMEOUT_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_name = base_name
        self.cluster_client = cluster_client
        self.is_backup = is_backup
        self.storage_client = None

        self.namespace: client.V1Namespace | None = None
        self.namespaces_to_delete: list[client.V1Namespace] = []
        self.fss_provisioner_installed = False
        self.block_provisioner_installed = False
        self.backup_ids: list[str] = []
        self.cleanup_handle: CleanupHandle | None = None

        self.context = context if context is not None else TestContext()
        self.registry = registry if registry is not None else default_registry
        self.installer = installer if installer is not None else KubectlInstaller.from_context(self.context)
        self.resolver = resolver if resolver is not None else ResolverChain.for_context(self.context)
        self.cluster_client_factory = cluster_client_factory
        self.storage_client_factory = storage_client_factory
        self.poll_interval = poll_interval
        self.create_timeout = create_timeout
        self.delete_timeout = delete_timeout
        self.sleep = sleep

    @classmethod
    def default(cls, base_name: str, **kwargs) -> TestScope:
        """Scope without an injected cluster client or storage client."""
        return cls(base_name, None, False, **kwargs)

    @classmethod
    def backup(cls, base_name: str, **kwargs) -> TestScope:
        """Scope that also builds a block storage client for backup tests."""
        return cls(base_name, None, True, **kwargs)

    # ------------------------------------------------------------------
    # Namespaces
    # ------------------------------------------------------------------

    def create_namespace(self, base_name: str, labels: dict[str, str] | None = None) -> client.V1Namespace:
        """Create a namespace with a generated name and track it for deletion.

        Every failed create call is logged and retried until the create
        timeout elapses.

        Raises:
            NamespaceTimeoutError: If no create call succeeded in time.
        """
        body = client.V1Namespace(
            metadata=client.V1ObjectMeta(
                generate_name=f"{NAMESPACE_NAME_PREFIX}-{base_name}-",
                labels=dict(labels or {}),
            ),
        )
        created: list[client.V1Namespace] = []

        def _attempt() -> bool:
            try:
                created.append(self.cluster_client.create_namespace(body))
            except ClusterAPIError as err:
                logger.warning("Unexpected error while creating namespace: %s", err)
                return False
            return True

        try:
            poll_until(_attempt, interval=self.poll_interval, timeout=self.create_timeout, sleep=self.sleep)
        except RetryError as err:
            raise NamespaceTimeoutError(
                f"namespace for {base_name!r} was not created within {self.create_timeout}s"
            ) from err

        namespace = created[-1]
        self.namespaces_to_delete.append(namespace)
        return namespace

    def delete_namespace(self, name: str, timeout: float) -> None:
        """Delete *name* and wait until the cluster no longer returns it.

        A namespace that is already gone counts as deleted.

        Raises:
            ClusterAPIError: If the delete call itself fails.
            NamespaceTimeoutError: If the namespace still exists after *timeout* seconds.
        """
        start = time.monotonic()
        try:
            self.cluster_client.delete_namespace(name)
        except NamespaceNotFound:
            logger.info("Namespace %s was already deleted", name)
            return

        def _gone() -> bool:
            try:
                self.cluster_client.get_namespace(name)
            except NamespaceNotFound:
                return True
            except ClusterAPIError as err:
                logger.warning("Error while waiting for namespace to be terminated: %s", err)
            return False

        try:
            poll_until(_gone, interval=self.poll_interval, timeout=timeout, sleep=self.sleep)
        except RetryError as err:
            elapsed = time.monotonic() - start
            raise NamespaceTimeoutError(
                f"namespace {name} was not deleted within {timeout}s (waited {elapsed:.1f}s)"
            ) from err

        logger.info("namespace %s deletion completed in %.1fs", name, time.monotonic() - start)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def setup(self) -> None:
        """Prepare the scope for one test.

        Raises:
            FrameworkError: On the first step that fails; later steps do not run.
        """
        self.registry.remove(self.cleanup_handle)
        self.cleanup_handle = self.registry.add(self._abort_teardown, label=f"scope {self.base_name}")

        if self.cluster_client is None:
            console.print("[yellow]\u2139\ufe0f  Creating a kubernetes client[/yellow]")
            self.cluster_client = self.cluster_client_factory(self.context.kubeconfig)

        if not self.context.namespace:
            console.print("[yellow]\u2139\ufe0f  Building a namespace api object[/yellow]")
            self.namespace = self.create_namespace(self.base_name, {LABEL_E2E_FRAMEWORK: self.base_name})
        else:
            console.print(f"[yellow]\u2139\ufe0f  Getting existing namespace {self.context.namespace!r}[/yellow]")
            try:
                self.namespace = self.cluster_client.get_namespace(self.context.namespace)
            except ClusterAPIError as err:
                raise NamespaceLookupError(
                    f"unable to get namespace {self.context.namespace!r}: {err}"
                ) from err

        if self.is_backup:
            self.storage_client = self.storage_client_factory(self.resolver)

        namespace_name = self.namespace.metadata.name
        if not self.fss_provisioner_installed:
            self.installer.install_fss_provisioner(namespace_name)
            self.fss_provisioner_installed = True

        if not self.block_provisioner_installed:
            self.installer.install_block_provisioner(namespace_name)
            self.block_provisioner_installed = True

    def teardown(self, test_failed: bool) -> TeardownReport:
        """Release what the last setup created.

        Resource failures never raise: namespace failures are collected into
        the report, backup failures are logged and recorded. Both installed
        flags are reset even when namespaces are kept, so the next setup
        installs the provisioners again.

        Args:
            test_failed: Whether the test that just ran failed.

        Returns:
            The teardown report.
        """
        self.registry.remove(self.cleanup_handle)
        self.cleanup_handle = None

        report = TeardownReport(namespaces_deleted=self.context.should_delete_namespaces(test_failed))
        if report.namespaces_deleted:
            self._delete_tracked_namespaces(report)
        elif self.namespaces_to_delete:
            logger.info(
                "Preserving namespaces %s",
                ", ".join(ns.metadata.name for ns in self.namespaces_to_delete),
            )

        self._delete_tracked_backups(report)

        if report.failed:
            logger.error(report.failure_message)

        self.block_provisioner_installed = False
        self.fss_provisioner_installed = False
        return report

    def _delete_tracked_namespaces(self, report: TeardownReport) -> None:
        remaining: list[client.V1Namespace] = []
        for ns in self.namespaces_to_delete:
            name = ns.metadata.name
            console.print(f"[yellow]\u2139\ufe0f  Destroying namespace {name!r} for this suite.[/yellow]")
            try:
                self.delete_namespace(name, self.delete_timeout)
            except Exception as err:
                report.namespace_errors[name] = err
                remaining.append(ns)

        deleted = {ns.metadata.name for ns in self.namespaces_to_delete} - set(report.namespace_errors)
        self.namespaces_to_delete = remaining
        if self.namespace is not None and self.namespace.metadata.name in deleted:
            self.namespace = None

    def _delete_tracked_backups(self, report: TeardownReport) -> None:
        for backup_id in self.backup_ids:
            console.print(f"[yellow]\u2139\ufe0f  Deleting backup {backup_id!r}[/yellow]")
            if self.storage_client is None:
                err = StorageClientError("no block storage client available")
                logger.error("Unable to delete backup %s: %s", backup_id, err)
                report.backup_errors[backup_id] = err
                continue
            try:
                self.storage_client.delete_volume_backup(backup_id)
            except Exception as err:
                logger.error("Failed to delete backup %s: %s", backup_id, err)
                report.backup_errors[backup_id] = err
        self.backup_ids.clear()

    def _abort_teardown(self) -> TeardownReport:
        logger.warning("Running pending teardown of scope %s", self.base_name)
        return self.teardown(test_failed=True)

    # ------------------------------------------------------------------
    # Helpers for test bodies
    # ------------------------------------------------------------------

    def track_backup(self, backup_id: str) -> None:
        """Record a volume backup so teardown deletes it."""
        self.backup_ids.append(backup_id)

    def check_env_var(self, name: str) -> str:
        """Look *name* up in the environment, then the test context.

        Raises:
            MissingVariableError: If neither has a value.
        """
        return self.resolver.lookup(name)
