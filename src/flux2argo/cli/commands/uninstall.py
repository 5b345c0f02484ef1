"""CLI command removing Flux from the cluster."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import closing
from typing import TYPE_CHECKING

import typer

from flux2argo.cli.commands.base import (
    ContextOption,
    DryRunOption,
    FluxNamespaceOption,
    ForceOption,
    KubeconfigOption,
    OutputOption,
    confirm_action,
    console,
    handle_k8s_error,
    load_config,
)
from flux2argo.cli.formatters import OutputFormat, get_formatter
from flux2argo.integrations.kubernetes.exceptions import KubernetesError

if TYPE_CHECKING:
    from flux2argo.cli.factory import Services
    from flux2argo.integrations.kubernetes.config import MigrationConfig
    from flux2argo.services.kubernetes import FluxUninstaller


def run_uninstall(
    uninstaller: FluxUninstaller,
    namespace: str,
    *,
    dry_run: bool = False,
    output: OutputFormat = OutputFormat.TABLE,
) -> None:
    """Run the teardown and print its report."""
    report = uninstaller.uninstall(namespace, dry_run=dry_run)
    title = "Flux uninstall (dry run)" if dry_run else "Flux uninstall"
    get_formatter(output, console).format_dict(report.to_dict(), title=title)


def register_uninstall_commands(
    app: typer.Typer,
    get_services: Callable[[MigrationConfig], Services],
) -> None:
    """Register the uninstall command."""

    @app.command("uninstall")
    def uninstall(
        flux_namespace: FluxNamespaceOption = None,
        kubeconfig: KubeconfigOption = None,
        context: ContextOption = None,
        dry_run: DryRunOption = False,
        force: ForceOption = False,
        output: OutputOption = OutputFormat.TABLE,
    ) -> None:
        """Remove Flux controllers, finalizers, CRDs and namespace.

        Flux custom resources lose their finalizers so that deleting the
        CRDs does not hang; the workloads Flux deployed are left running.

        Examples:
            flux2argo uninstall --dry-run
            flux2argo uninstall --flux-namespace flux-system --force
        """
        config = load_config(
            kubeconfig=kubeconfig, context=context, flux_namespace=flux_namespace
        )
        if (
            not dry_run
            and not force
            and not confirm_action(
                f"Uninstall Flux from namespace '{config.flux_namespace}'? "
                "Flux will stop reconciling every resource"
            )
        ):
            raise typer.Exit(0)
        try:
            with closing(get_services(config)) as services:
                run_uninstall(
                    services.uninstaller, config.flux_namespace, dry_run=dry_run, output=output
                )
        except KubernetesError as e:
            handle_k8s_error(e)
