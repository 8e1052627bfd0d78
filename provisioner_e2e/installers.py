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

"""Installation of the file system and block volume provisioners into a namespace."""

from __future__ import annotations

from typing import Protocol

import sh
from rich.panel import Panel

from provisioner_e2e import console
from provisioner_e2e.config import TestContext
from provisioner_e2e.constants import (
    BLOCK_PROVISIONER_DEPLOYMENT,
    DEFAULT_ROLLOUT_TIMEOUT_SECONDS,
    FSS_PROVISIONER_DEPLOYMENT,
)
from provisioner_e2e.errors import InstallError


class ProvisionerInstaller(Protocol):
    """Installs provisioner components into a namespace."""

    def install_fss_provisioner(self, namespace: str) -> None: ...

    def install_block_provisioner(self, namespace: str) -> None: ...


class KubectlInstaller:
    """Applies provisioner manifests with kubectl and waits for their rollout.

    Attributes:
        fss_manifest: Path or URL of the file system provisioner manifest.
        block_manifest: Path or URL of the block volume provisioner manifest.
        kubeconfig: Kubeconfig passed to kubectl, or empty for its default.
        rollout_timeout: Seconds to wait for each deployment rollout.
    """

    def __init__(
        self,
        fss_manifest: str,
        block_manifest: str,
        kubeconfig: str = "",
        rollout_timeout: int = DEFAULT_ROLLOUT_TIMEOUT_SECONDS,
    ) -> None:
        self.fss_manifest = fss_manifest
        self.block_manifest = block_manifest
        self.kubeconfig = kubeconfig
        self.rollout_timeout = rollout_timeout

    @classmethod
    def from_context(cls, context: TestContext) -> KubectlInstaller:
        return cls(
            fss_manifest=context.fss_manifest,
            block_manifest=context.block_manifest,
            kubeconfig=context.kubeconfig,
            rollout_timeout=context.provisioner_rollout_timeout,
        )

    def install_fss_provisioner(self, namespace: str) -> None:
        self._install("file system", self.fss_manifest, FSS_PROVISIONER_DEPLOYMENT, namespace)

    def install_block_provisioner(self, namespace: str) -> None:
        self._install("block volume", self.block_manifest, BLOCK_PROVISIONER_DEPLOYMENT, namespace)

    def _kubectl(self, *args: str) -> str:
        if self.kubeconfig:
            args = ("--kubeconfig", self.kubeconfig, *args)
        return sh.kubectl(*args)

    def _install(self, kind: str, manifest: str, deployment: str, namespace: str) -> None:
        """Apply *manifest* into *namespace* and wait for *deployment* to roll out.

        Raises:
            InstallError: If no manifest is configured, kubectl is missing, or a step fails.
        """
        if not manifest:
            raise InstallError(f"No manifest configured for the {kind} provisioner")

        console.print(Panel.fit(f"Installing {kind} provisioner into {namespace}", style="bold blue"))
        try:
            self._kubectl("apply", "-f", manifest, "-n", namespace)
            console.print(f"[yellow]\u2139\ufe0f  Waiting for deployment/{deployment} rollout...[/yellow]")
            self._kubectl(
                "rollout", "status", f"deployment/{deployment}",
                "-n", namespace,
                f"--timeout={self.rollout_timeout}s",
            )
        except sh.CommandNotFound as err:
            raise InstallError("Required command 'kubectl' not found. Please install it first.") from err
        except sh.ErrorReturnCode as err:
            stderr = err.stderr.decode(errors="replace").strip()
            raise InstallError(f"Failed to install {kind} provisioner into {namespace}: {stderr[:200]}") from err
        console.print(f"[green]\u2705 {kind.capitalize()} provisioner installed[/green]")
