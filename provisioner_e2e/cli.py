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

"""
cli.py - Developer CLI for the volume provisioner e2e framework.

Subcommands:
    config     Inspect configuration (validate, show)
    namespace  Manage e2e namespaces (delete)

Examples:
    # Check a provisioner config before a backup suite run
    provisioner-e2e config validate ./oci-config.yaml

    # Show what the suite will use
    provisioner-e2e config show --kubeconfig ~/.kube/config

    # Remove a namespace preserved by a failed test
    provisioner-e2e namespace delete volume-provisioner-e2e-tests-fss-x7k2p
"""

from __future__ import annotations

import logging
import sys

import typer

from provisioner_e2e import console
from provisioner_e2e.commands import config_cmd, namespace_cmd

app = typer.Typer(
    help="Developer CLI for the volume provisioner e2e framework.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.add_typer(config_cmd.app, name="config")
app.add_typer(namespace_cmd.app, name="namespace")


def main() -> None:
    try:
        app()
    except Exception as e:
        console.print(f"[red]\u274c {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
