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

"""Factory for the OCI block storage client used to clean up volume backups."""

from __future__ import annotations

import oci
from oci.core import BlockstorageClient

from provisioner_e2e import console, logger
from provisioner_e2e.auth import select_provider
from provisioner_e2e.config import load_config
from provisioner_e2e.constants import OCI_CONFIG_VAR
from provisioner_e2e.env import ResolverChain
from provisioner_e2e.errors import ConfigError, MissingVariableError, ProviderError, StorageClientError


def build_storage_client(resolver: ResolverChain) -> BlockstorageClient | None:
    """Build a block storage client from the volume provisioner config.

    The config path comes from ``OCICONFIG_VAR`` (environment, then test
    context). A missing path, an unreadable or malformed file, or a provider
    that cannot be selected is fatal. A client that the SDK refuses to build
    from a valid provider is only logged, and None is returned.

    Args:
        resolver: Chain used to find the config file path.

    Returns:
        The client, or None if the SDK rejected the provider.

    Raises:
        StorageClientError: If the config cannot be located, loaded, or turned into a provider.
    """
    console.print("[yellow]\u2139\ufe0f  Creating an OCI block storage client[/yellow]")
    try:
        config_path = resolver.lookup(OCI_CONFIG_VAR)
    except MissingVariableError as err:
        raise StorageClientError(str(err)) from err

    try:
        with open(config_path) as f:
            cfg = load_config(f)
    except OSError as err:
        raise StorageClientError(
            f"Unable to load volume provisioner configuration file: {config_path}: {err}"
        ) from err
    except ConfigError as err:
        raise StorageClientError(
            f"Unable to load volume provisioner configuration file {config_path!r}: {err}"
        ) from err

    try:
        provider = select_provider(cfg)
    except ProviderError as err:
        raise StorageClientError(
            f"Unable to load volume provisioner configuration file {config_path!r}: {err}"
        ) from err

    try:
        return BlockstorageClient(provider.config, **provider.client_kwargs())
    except (oci.exceptions.ClientError, ValueError) as err:
        logger.error("Unable to load volume provisioner client (%s provider): %s", provider.kind.value, err)
        return None
