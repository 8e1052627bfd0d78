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

"""Environment variable names, storage classes, timeouts and labels."""

from __future__ import annotations

# -- Variables resolved from the environment, then the test context --
OCI_CONFIG_VAR = "OCICONFIG_VAR"
KUBECONFIG_VAR = "KUBECONFIG_VAR"
SUBNET_OCID = "SUBNET_OCID"
MNT_TARGET_OCID = "MNT_TARGET_OCID"
AD = "AD"

# -- Namespaces --
NS_KUBE_SYSTEM = "kube-system"
NAMESPACE_NAME_PREFIX = "volume-provisioner-e2e-tests"
LABEL_E2E_FRAMEWORK = "e2e-framework"

# -- Storage classes --
CLASS_OCI = "oci"
CLASS_OCI_EXT3 = "oci-ext3"
CLASS_OCI_NO_PARAM_FSS = "oci-fss-noparam"
CLASS_OCI_MNT_FSS = "oci-fss-mnt"
CLASS_OCI_SUBNET_FSS = "oci-fss-subnet"

# -- Volume sizes --
MIN_VOLUME_BLOCK = "50Gi"
VOLUME_FSS = "1Gi"

# -- Polling --
POLL_INTERVAL_SECONDS = 2
NAMESPACE_CREATE_TIMEOUT_SECONDS = 30
NAMESPACE_DELETE_TIMEOUT_SECONDS = 300

# -- Provisioner deployments --
FSS_PROVISIONER_DEPLOYMENT = "oci-file-system-provisioner"
BLOCK_PROVISIONER_DEPLOYMENT = "oci-block-volume-provisioner"
DEFAULT_ROLLOUT_TIMEOUT_SECONDS = 300

# -- Canary metrics --
CANARY_METRIC_PATTERN = r"\[(.*?)\]"
