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

"""Config subcommands (validate, show)."""

from __future__ import annotations

from pathlib import Path

import typer

from provisioner_e2e import console
from provisioner_e2e.auth import ProviderKind, select_provider
from provisioner_e2e.config import display_context, load_config, resolve_context, validate_config

app = typer.Typer(help="Inspect e2e configuration.")


@app.command()
def validate(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Volume provisioner config file"),
    resolve_provider: bool = typer.Option(
        False, "--resolve-provider",
        help="Also build the provider (contacts the metadata service for instance principals)"),
) -> None:
    """Validate a volume provisioner config and report its auth mode."""
    with open(path) as f:
        cfg = load_config(f)
    validate_config(cfg)

    if resolve_provider:
        kind = select_provider(cfg).kind
    elif cfg.use_instance_principals:
        kind = ProviderKind.INSTANCE_PRINCIPAL
    else:
        kind = ProviderKind.RAW
    console.print(f"[green]\u2705 {path} is valid ({kind.value} provider)[/green]")


@app.command()
def show(
    kubeconfig: str | None = typer.Option(None, "--kubeconfig", help="Kubeconfig path"),
    namespace: str | None = typer.Option(None, "--namespace", help="Existing namespace to run in"),
    oci_config: str | None = typer.Option(None, "--oci-config", help="Volume provisioner config file"),
) -> None:
    """Print the test context resolved from E2E_* env vars and these options."""
    display_context(resolve_context(kubeconfig=kubeconfig, namespace=namespace, oci_config=oci_config))
