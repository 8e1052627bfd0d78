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

"""Tests for the kubectl based provisioner installer."""

from __future__ import annotations

from unittest.mock import MagicMock, call, patch

import pytest
import sh

from provisioner_e2e.config import TestContext
from provisioner_e2e.errors import InstallError
from provisioner_e2e.installers import KubectlInstaller


@pytest.fixture
def kubectl():
    fake_sh = MagicMock()
    fake_sh.CommandNotFound = sh.CommandNotFound
    fake_sh.ErrorReturnCode = sh.ErrorReturnCode
    with patch("provisioner_e2e.installers.sh", fake_sh):
        yield fake_sh.kubectl


def test_install_fss_applies_and_waits_for_rollout(kubectl):
    installer = KubectlInstaller("fss.yaml", "block.yaml", rollout_timeout=120)

    installer.install_fss_provisioner("ns-1")

    assert kubectl.call_args_list == [
        call("apply", "-f", "fss.yaml", "-n", "ns-1"),
        call("rollout", "status", "deployment/oci-file-system-provisioner", "-n", "ns-1", "--timeout=120s"),
    ]


def test_install_block_with_kubeconfig(kubectl):
    installer = KubectlInstaller("fss.yaml", "block.yaml", kubeconfig="/kc")

    installer.install_block_provisioner("ns-2")

    first = kubectl.call_args_list[0]
    assert first == call("--kubeconfig", "/kc", "apply", "-f", "block.yaml", "-n", "ns-2")
    assert "deployment/oci-block-volume-provisioner" in kubectl.call_args_list[1].args


def test_missing_manifest(kubectl):
    installer = KubectlInstaller("", "block.yaml")

    with pytest.raises(InstallError, match="No manifest configured for the file system provisioner"):
        installer.install_fss_provisioner("ns")
    kubectl.assert_not_called()


def test_kubectl_not_installed(kubectl):
    kubectl.side_effect = sh.CommandNotFound("kubectl")

    with pytest.raises(InstallError, match="'kubectl' not found"):
        KubectlInstaller("fss.yaml", "block.yaml").install_fss_provisioner("ns")


def test_failed_apply_reports_stderr(kubectl):
    kubectl.side_effect = sh.ErrorReturnCode_1(
        "kubectl apply", b"", b"error: the server could not find the requested resource",
    )

    with pytest.raises(InstallError, match="could not find the requested resource"):
        KubectlInstaller("fss.yaml", "block.yaml").install_block_provisioner("ns")
    assert kubectl.call_count == 1


def test_rollout_failure_truncates_stderr(kubectl):
    stderr = b"error: timed out waiting for the condition " + b"x" * 400
    kubectl.side_effect = [None, sh.ErrorReturnCode_1("kubectl rollout status", b"", stderr)]

    with pytest.raises(InstallError) as exc_info:
        KubectlInstaller("fss.yaml", "block.yaml").install_fss_provisioner("ns")

    detail = str(exc_info.value).split(": ", 1)[1]
    assert detail == stderr.decode()[:200]
    assert kubectl.call_count == 2


def test_from_context():
    context = TestContext(
        fss_manifest="f.yaml",
        block_manifest="b.yaml",
        kubeconfig="/kc",
        provisioner_rollout_timeout=60,
    )

    installer = KubectlInstaller.from_context(context)

    assert (installer.fss_manifest, installer.block_manifest) == ("f.yaml", "b.yaml")
    assert installer.kubeconfig == "/kc"
    assert installer.rollout_timeout == 60
