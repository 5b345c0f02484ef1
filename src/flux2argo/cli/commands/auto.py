"""CLI command migrating every Flux resource on the cluster, then removing Flux."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import closing
from typing import TYPE_CHECKING

import typer

from flux2argo.cli.commands.base import (
    ArgoCDNamespaceOption,
    ContextOption,
    FluxNamespaceOption,
    KubeconfigOption,
    err_console,
    handle_k8s_error,
    load_config,
)
from flux2argo.cli.commands.migrate import apply_plan
from flux2argo.cli.commands.uninstall import run_uninstall
from flux2argo.integrations.kubernetes.exceptions import KubernetesError
from flux2argo.services.migration import check_secret_conflicts, render_plans

if TYPE_CHECKING:
    from flux2argo.cli.factory import Services
    from flux2argo.integrations.kubernetes.config import MigrationConfig


def register_auto_commands(
    app: typer.Typer,
    get_services: Callable[[MigrationConfig], Services],
) -> None:
    """Register the auto command."""

    @app.command("auto")
    def auto(
        confirm_migrate: bool = typer.Option(
            False,
            "--confirm-migrate",
            help="Apply the migration; without it the generated objects are only printed",
        ),
        skip_uninstall: bool = typer.Option(
            False, "--skip-uninstall", help="Leave Flux installed after migrating"
        ),
        flux_namespace: FluxNamespaceOption = None,
        argocd_namespace: ArgoCDNamespaceOption = None,
        kubeconfig: KubeconfigOption = None,
        context: ContextOption = None,
    ) -> None:
        """Migrate every Kustomization and HelmRelease, then uninstall Flux.

        Every resource is read and translated before the first write, and
        plans needing conflicting credential Secrets abort the run. Flux is
        only uninstalled when nothing had to be skipped.

        Examples:
            flux2argo auto > plan.yaml
            flux2argo auto --confirm-migrate
            flux2argo auto --confirm-migrate --skip-uninstall
        """
        config = load_config(
            kubeconfig=kubeconfig,
            context=context,
            argocd_namespace=argocd_namespace,
            flux_namespace=flux_namespace,
        )
        try:
            with closing(get_services(config)) as services:
                migration = services.migration
                candidates = migration.scan()
                skipped = [c for c in candidates if not c.migratable]
                for candidate in skipped:
                    err_console.print(
                        f"[yellow]Skipping {candidate.kind} "
                        f"{candidate.namespace}/{candidate.name}: {candidate.reason}[/yellow]"
                    )
                plans = [migration.plan_candidate(c) for c in candidates if c.migratable]
                check_secret_conflicts(plans)

                if not confirm_migrate:
                    typer.echo(render_plans(plans), nl=False)
                    err_console.print(
                        f"\n[dim]{len(plans)} resource(s) planned. "
                        "Re-run with --confirm-migrate to apply.[/dim]"
                    )
                    return

                for plan in plans:
                    apply_plan(migration, plan)

                if skip_uninstall:
                    return
                if skipped:
                    err_console.print(
                        f"[yellow]Flux left installed: {len(skipped)} resource(s) "
                        "still depend on it.[/yellow]"
                    )
                    return
                run_uninstall(services.uninstaller, config.flux_namespace)
        except KubernetesError as e:
            handle_k8s_error(e)
