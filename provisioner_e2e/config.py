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

"""Test context settings, the provisioner config file model, and its validation."""

from __future__ import annotations

from typing import IO, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from provisioner_e2e import console
from provisioner_e2e.constants import DEFAULT_ROLLOUT_TIMEOUT_SECONDS
from provisioner_e2e.errors import ConfigError, ConfigValidationError


# ============================================================================
# Test context
# ============================================================================

class TestContext(BaseSettings):
    """Suite-wide settings, auto-loaded from E2E_* env vars.

    Attributes:
        kubeconfig: Path to the kubeconfig used to build the cluster client.
        namespace: Existing namespace to run in, or empty to create one per test.
        delete_namespace: Whether namespaces are deleted at teardown at all.
        delete_namespace_on_failure: Whether namespaces of failed tests are deleted too.
        oci_config: Path to the volume provisioner config file.
        subnet_ocid: Subnet OCID used by FSS tests.
        mnt_target_ocid: Mount target OCID used by FSS tests.
        ad: Availability domain used by block volume tests.
        fss_manifest: Manifest that installs the file system provisioner.
        block_manifest: Manifest that installs the block volume provisioner.
        provisioner_rollout_timeout: Seconds to wait for a provisioner rollout.
    """

    __test__ = False

    model_config = SettingsConfigDict(env_prefix="E2E_", extra="ignore")

    kubeconfig: str = ""
    namespace: str = ""
    delete_namespace: bool = True
    delete_namespace_on_failure: bool = True
    oci_config: str = ""
    subnet_ocid: str = ""
    mnt_target_ocid: str = ""
    ad: str = ""
    fss_manifest: str = ""
    block_manifest: str = ""
    provisioner_rollout_timeout: int = Field(default=DEFAULT_ROLLOUT_TIMEOUT_SECONDS, ge=1)

    def should_delete_namespaces(self, test_failed: bool) -> bool:
        """Apply the namespace preservation policy to a test outcome.

        Namespaces are kept when ``delete_namespace`` is off, and kept for
        failed tests when ``delete_namespace_on_failure`` is off.
        """
        return self.delete_namespace and (self.delete_namespace_on_failure or not test_failed)


def resolve_context(**overrides: Any) -> TestContext:
    """Merge explicit overrides, E2E_* environment variables, and defaults.

    Resolution priority: overrides > E2E_* environment variables > defaults.
    Overrides whose value is None are ignored.

    Returns:
        The resolved TestContext.
    """
    context = TestContext()
    update = {key: value for key, value in overrides.items() if value is not None}
    if update:
        context = context.model_copy(update=update)
    return context


def display_context(context: TestContext) -> None:
    """Print the resolved test context."""
    console.print(Panel.fit("Test context", style="bold blue"))
    console.print(f"  kubeconfig                 : {context.kubeconfig or '(default)'}")
    console.print(f"  namespace                  : {context.namespace or '(generated per test)'}")
    console.print(f"  delete_namespace           : {context.delete_namespace}")
    console.print(f"  delete_namespace_on_failure: {context.delete_namespace_on_failure}")
    console.print(f"  oci_config                 : {context.oci_config or '(unset)'}")
    console.print(f"  subnet_ocid                : {context.subnet_ocid or '(unset)'}")
    console.print(f"  mnt_target_ocid            : {context.mnt_target_ocid or '(unset)'}")
    console.print(f"  ad                         : {context.ad or '(unset)'}")


# ============================================================================
# Provisioner config file
# ============================================================================

class AuthConfig(BaseModel):
    """Credentials section of the volume provisioner config.

    Attributes:
        region: OCI region identifier (e.g. ``us-phoenix-1``).
        region_key: Short region key (e.g. ``phx``).
        tenancy_ocid: Tenancy OCID.
        compartment_ocid: Compartment OCID.
        user_ocid: API user OCID.
        private_key: PEM encoded API signing key.
        fingerprint: Fingerprint of the API signing key.
        private_key_passphrase: Passphrase of the signing key, if any.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    region: str = ""
    region_key: str = Field(default="", alias="regionKey")
    tenancy_ocid: str = Field(default="", alias="tenancy")
    compartment_ocid: str = Field(default="", alias="compartment")
    user_ocid: str = Field(default="", alias="user")
    private_key: str = Field(default="", alias="key")
    fingerprint: str = ""
    private_key_passphrase: str = Field(default="", alias="passphrase")

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ProvisionerConfig(BaseModel):
    """Volume provisioner config file.

    Attributes:
        auth: Static API key credentials.
        use_instance_principals: Authenticate as the compute instance instead.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    auth: AuthConfig = Field(default_factory=AuthConfig)
    use_instance_principals: bool = Field(default=False, alias="useInstancePrincipals")


def load_config(stream: IO[str] | str) -> ProvisionerConfig:
    """Parse a volume provisioner config from YAML.

    Args:
        stream: Open file or YAML text.

    Returns:
        The parsed config. It is not validated; see validate_config.

    Raises:
        ConfigError: If the document is empty, not YAML, or has the wrong shape.
    """
    try:
        data = yaml.safe_load(stream)
    except yaml.YAMLError as err:
        raise ConfigError(f"invalid YAML: {err}") from err
    if data is None:
        raise ConfigError("config file is empty")
    if not isinstance(data, dict):
        raise ConfigError(f"expected a mapping at the top level, got {type(data).__name__}")
    if data.get("auth") is None:
        data = {**data, "auth": {}}
    try:
        return ProvisionerConfig.model_validate(data)
    except ValidationError as err:
        raise ConfigError(f"invalid config: {err}") from err


_REQUIRED_AUTH_FIELDS = (
    ("region", "region"),
    ("tenancy_ocid", "tenancy"),
    ("user_ocid", "user"),
    ("private_key", "key"),
    ("fingerprint", "fingerprint"),
)


def validate_config(cfg: ProvisionerConfig | None) -> None:
    """Check that a config carries every field its auth mode needs.

    Instance principal configs need no static credentials.

    Raises:
        ConfigValidationError: Listing every missing field.
    """
    if cfg is None:
        raise ConfigValidationError(["no configuration provided"])
    if cfg.use_instance_principals:
        return
    problems = [
        f"auth.{key}: Required value"
        for attr, key in _REQUIRED_AUTH_FIELDS
        if not getattr(cfg.auth, attr).strip()
    ]
    if problems:
        raise ConfigValidationError(problems)
