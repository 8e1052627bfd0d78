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

"""Namespace subcommands (delete)."""

from __future__ import annotations

import typer

from provisioner_e2e import console
from provisioner_e2e.cleanup import CleanupRegistry
from provisioner_e2e.cluster import build_cluster_client
from provisioner_e2e.config import resolve_context
from provisioner_e2e.constants import NAMESPACE_DELETE_TIMEOUT_SECONDS
from provisioner_e2e.scope import TestScope

app = typer.Typer(help="Manage e2e namespaces.")


@app.command()
def delete(
    name: str = typer.Argument(..., help="Namespace to delete"),
    timeout: int = typer.Option(
        NAMESPACE_DELETE_TIMEOUT_SECONDS, "--timeout", min=1, help="Seconds to wait for the namespace to go away"),
    kubeconfig: str | None = typer.Option(None, "--kubeconfig", help="Kubeconfig path (overrides E2E_KUBECONFIG)"),
) -> None:
    """Delete a namespace left behind by a preserved test and wait for it to terminate."""
    context = resolve_context(kubeconfig=kubeconfig)
    scope = TestScope(
        "cli",
        build_cluster_client(context.kubeconfig),
        context=context,
        registry=CleanupRegistry(),
    )
    console.print(f"[yellow]\u2139\ufe0f  Deleting namespace {name!r}...[/yellow]")
    scope.delete_namespace(name, timeout)
    console.print(f"[green]\u2705 Namespace {name!r} deleted[/green]")
