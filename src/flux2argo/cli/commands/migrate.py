"""CLI commands migrating a single Flux resource.

``kustomization`` turns a Flux Kustomization into an Argo CD
ApplicationSet (plus a repository secret for private sources), and
``helmrelease`` turns a HelmRelease into an Application. Without
``--migrate`` the generated objects are printed as YAML and the cluster
is left untouched.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import closing
from typing import TYPE_CHECKING

import typer

from flux2argo.cli.commands.base import (
    ArgoCDNamespaceOption,
    ContextOption,
    KubeconfigOption,
    MigrateOption,
    NameOption,
    NamespaceOption,
    console,
    handle_k8s_error,
    load_config,
)
from flux2argo.integrations.kubernetes.exceptions import KubernetesError

if TYPE_CHECKING:
    from flux2argo.cli.factory import Services
    from flux2argo.integrations.kubernetes.config import MigrationConfig
    from flux2argo.services.migration import MigrationPlan, MigrationService


def emit_plan(plan: MigrationPlan) -> None:
    """Write a plan's objects to stdout as a YAML stream."""
    typer.echo(plan.render(), nl=False)


def apply_plan(migration: MigrationService, plan: MigrationPlan) -> None:
    """Apply a plan and report each write."""
    result = migration.apply(plan)
    for line in result.journal.describe():
        console.print(f"[green]{line}[/green]")


def register_migrate_commands(
    app: typer.Typer,
    get_services: Callable[[MigrationConfig], Services],
) -> None:
    """Register the single-resource migration commands."""

    @app.command("kustomization")
    def kustomization(
        name: NameOption,
        namespace: NamespaceOption,
        kubeconfig: KubeconfigOption = None,
        argocd_namespace: ArgoCDNamespaceOption = None,
        context: ContextOption = None,
        migrate: MigrateOption = False,
    ) -> None:
        """Migrate a Flux Kustomization to an Argo CD ApplicationSet.

        Examples:
            flux2argo kustomization --name apps --namespace flux-system
            flux2argo kustomization --name apps --namespace flux-system > apps.yaml
            flux2argo kustomization --name apps --namespace flux-system --migrate
        """
        config = load_config(
            kubeconfig=kubeconfig, context=context, argocd_namespace=argocd_namespace
        )
        try:
            with closing(get_services(config)) as services:
                plan = services.migration.plan_kustomization(name, namespace)
                if migrate:
                    apply_plan(services.migration, plan)
                else:
                    emit_plan(plan)
        except KubernetesError as e:
            handle_k8s_error(e)

    @app.command("helmrelease")
    def helmrelease(
        name: NameOption,
        namespace: NamespaceOption,
        kubeconfig: KubeconfigOption = None,
        argocd_namespace: ArgoCDNamespaceOption = None,
        context: ContextOption = None,
        migrate: MigrateOption = False,
    ) -> None:
        """Migrate a Flux HelmRelease to an Argo CD Application.

        Examples:
            flux2argo helmrelease --name podinfo --namespace default
            flux2argo helmrelease --name podinfo --namespace default --migrate
        """
        config = load_config(
            kubeconfig=kubeconfig, context=context, argocd_namespace=argocd_namespace
        )
        try:
            with closing(get_services(config)) as services:
                plan = services.migration.plan_helm_release(name, namespace)
                if migrate:
                    apply_plan(services.migration, plan)
                else:
                    emit_plan(plan)
        except KubernetesError as e:
            handle_k8s_error(e)
