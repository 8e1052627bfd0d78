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

"""Selection of the OCI configuration provider for the block storage client."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

import oci
from oci.auth.signers import InstancePrincipalsSecurityTokenSigner

from provisioner_e2e import logger
from provisioner_e2e.config import ProvisionerConfig, validate_config
from provisioner_e2e.errors import ConfigValidationError, ProviderError


class ProviderKind(str, enum.Enum):
    """Authentication strategy behind a ConfigurationProvider."""

    DEFAULT = "default"
    INSTANCE_PRINCIPAL = "instance_principal"
    RAW = "raw"


@dataclass(frozen=True)
class ConfigurationProvider:
    """Everything an OCI SDK client needs to authenticate.

    Attributes:
        kind: Which authentication strategy produced this provider.
        config: SDK config dictionary passed as the client's first argument.
        signer: Request signer, set only for instance principals.
    """

    kind: ProviderKind
    config: dict[str, Any] = field(default_factory=dict)
    signer: Any = None

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for an OCI SDK client constructor."""
        if self.signer is None:
            return {}
        return {"signer": self.signer}


def select_provider(cfg: ProvisionerConfig | None) -> ConfigurationProvider:
    """Pick the authentication strategy described by *cfg*.

    With no config the SDK's own default (``~/.oci/config``) is used. A config
    is validated first; it then selects instance principals or a raw provider
    built from its static credentials. Exactly one strategy is tried and a
    failure is not followed by any fallback.

    Args:
        cfg: Parsed volume provisioner config, or None.

    Returns:
        The selected provider.

    Raises:
        ProviderError: If the config is invalid or the chosen provider cannot be built.
    """
    if cfg is None:
        try:
            return ConfigurationProvider(ProviderKind.DEFAULT, oci.config.from_file())
        except (oci.exceptions.ConfigFileNotFound, oci.exceptions.InvalidConfig) as err:
            raise ProviderError(f"default OCI config: {err}") from err

    try:
        validate_config(cfg)
    except ConfigValidationError as err:
        raise ProviderError(f"invalid client config: {err}") from err

    if cfg.use_instance_principals:
        logger.info("Using instance principals configuration provider")
        try:
            signer = InstancePrincipalsSecurityTokenSigner()
        except Exception as err:
            raise ProviderError(f"InstancePrincipalConfigurationProvider: {err}") from err
        return ConfigurationProvider(
            ProviderKind.INSTANCE_PRINCIPAL,
            {"region": signer.region},
            signer,
        )

    logger.info("Using raw configuration provider")
    auth = cfg.auth
    raw = {
        "tenancy": auth.tenancy_ocid,
        "user": auth.user_ocid,
        "region": auth.region,
        "fingerprint": auth.fingerprint,
        "key_content": auth.private_key,
    }
    if auth.private_key_passphrase:
        raw["pass_phrase"] = auth.private_key_passphrase
    return ConfigurationProvider(ProviderKind.RAW, raw)
