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

"""Namespace calls against the Kubernetes API with not-found kept distinct."""

from __future__ import annotations

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from provisioner_e2e.errors import ClientConfigError, ClusterAPIError, NamespaceNotFound


class ClusterClient:
    """Thin wrapper over CoreV1Api namespace calls.

    A 404 from the API server is raised as NamespaceNotFound; any other API
    or transport failure is raised as ClusterAPIError.
    """

    def __init__(self, core_v1: client.CoreV1Api) -> None:
        self.core_v1 = core_v1

    def create_namespace(self, body: client.V1Namespace) -> client.V1Namespace:
        try:
            return self.core_v1.create_namespace(body=body)
        except (ApiException, HTTPError) as err:
            raise ClusterAPIError(f"create namespace: {_describe(err)}") from err

    def get_namespace(self, name: str) -> client.V1Namespace:
        try:
            return self.core_v1.read_namespace(name=name)
        except ApiException as err:
            if err.status == 404:
                raise NamespaceNotFound(name) from err
            raise ClusterAPIError(f"get namespace {name}: {_describe(err)}") from err
        except HTTPError as err:
            raise ClusterAPIError(f"get namespace {name}: {err}") from err

    def delete_namespace(self, name: str) -> None:
        try:
            self.core_v1.delete_namespace(name=name)
        except ApiException as err:
            if err.status == 404:
                raise NamespaceNotFound(name) from err
            raise ClusterAPIError(f"delete namespace {name}: {_describe(err)}") from err
        except HTTPError as err:
            raise ClusterAPIError(f"delete namespace {name}: {err}") from err


def _describe(err: Exception) -> str:
    if isinstance(err, ApiException):
        return f"{err.status} {err.reason}"
    return str(err)


def build_cluster_client(kubeconfig: str | None = None) -> ClusterClient:
    """Build a ClusterClient from a kubeconfig file.

    Args:
        kubeconfig: Path to the kubeconfig, or None/empty for the default location.

    Raises:
        ClientConfigError: If the kubeconfig cannot be loaded.
    """
    try:
        api_client = config.new_client_from_config(config_file=kubeconfig or None)
    except (config.ConfigException, OSError) as err:
        raise ClientConfigError(f"unable to load kubeconfig {kubeconfig or '(default)'}: {err}") from err
    return ClusterClient(client.CoreV1Api(api_client))
