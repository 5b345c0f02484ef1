"""CLI command listing the Flux resources a migration would pick up."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import closing
from typing import TYPE_CHECKING

import typer

from flux2argo.cli.commands.base import (
    ContextOption,
    KubeconfigOption,
    OutputOption,
    console,
    handle_k8s_error,
    load_config,
)
from flux2argo.cli.formatters import OutputFormat, get_formatter
from flux2argo.integrations.kubernetes.exceptions import KubernetesError

if TYPE_CHECKING:
    from flux2argo.cli.factory import Services
    from flux2argo.integrations.kubernetes.config import MigrationConfig

CANDIDATE_COLUMNS = [
    ("kind", "Kind"),
    ("name", "Name"),
    ("namespace", "Namespace"),
    ("source", "Source"),
    ("suspended", "Suspended"),
    ("ready", "Ready"),
    ("age", "Age"),
    ("migratable", "Migratable"),
    ("reason", "Reason"),
]


def register_scan_commands(
    app: typer.Typer,
    get_services: Callable[[MigrationConfig], Services],
) -> None:
    """Register the scan command."""

    @app.command("scan")
    def scan(
        namespace: str | None = typer.Option(
            None, "--namespace", "-n", help="Only scan this namespace (default: all)"
        ),
        kubeconfig: KubeconfigOption = None,
        context: ContextOption = None,
        output: OutputOption = OutputFormat.TABLE,
    ) -> None:
        """List Kustomizations and HelmReleases and whether each can be migrated.

        Examples:
            flux2argo scan
            flux2argo scan -n flux-system -o yaml
        """
        config = load_config(kubeconfig=kubeconfig, context=context)
        try:
            with closing(get_services(config)) as services:
                candidates = services.migration.scan(namespace)
            formatter = get_formatter(output, console)
            formatter.format_list(candidates, CANDIDATE_COLUMNS, title="Flux resources")
        except KubernetesError as e:
            handle_k8s_error(e)
