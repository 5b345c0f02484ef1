"""Base utilities for CLI commands.

Provides common Typer options, configuration loading, error handling
and confirmation prompts shared by every command.
"""

from __future__ import annotations

from typing import Annotated

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console

from flux2argo.cli.formatters import OutputFormat
from flux2argo.integrations.kubernetes.config import (
    DEFAULT_ARGOCD_NAMESPACE,
    DEFAULT_FLUX_NAMESPACE,
    DEFAULT_KUBECONFIG,
    MigrationConfig,
)
from flux2argo.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesTimeoutError,
    KubernetesValidationError,
    MigrationError,
    PathDerivationError,
    UninstallError,
    UnsupportedSourceError,
)

logger = structlog.get_logger()

# Results go to stdout; messages and errors go to stderr
console = Console()
err_console = Console(stderr=True)


# =============================================================================
# Common Typer Option Annotations
# =============================================================================

KubeconfigOption = Annotated[
    str | None,
    typer.Option(
        "--kubeconfig",
        help=f"Path to the kubeconfig file [default: {DEFAULT_KUBECONFIG}]",
        show_default=False,
    ),
]

ContextOption = Annotated[
    str | None,
    typer.Option(
        "--context",
        help="Kubeconfig context to use (defaults to the current context)",
    ),
]

NameOption = Annotated[
    str,
    typer.Option(
        "--name",
        help="Name of the Flux resource",
    ),
]

NamespaceOption = Annotated[
    str,
    typer.Option(
        "--namespace",
        "-n",
        help="Namespace of the Flux resource",
    ),
]

ArgoCDNamespaceOption = Annotated[
    str | None,
    typer.Option(
        "--argocd-namespace",
        help=f"Namespace Argo CD runs in [default: {DEFAULT_ARGOCD_NAMESPACE}]",
        show_default=False,
    ),
]

FluxNamespaceOption = Annotated[
    str | None,
    typer.Option(
        "--flux-namespace",
        help=f"Namespace Flux is installed in [default: {DEFAULT_FLUX_NAMESPACE}]",
        show_default=False,
    ),
]

MigrateOption = Annotated[
    bool,
    typer.Option(
        "--migrate",
        help="Suspend the Flux resource and create the Argo CD objects instead of printing them",
    ),
]

OutputOption = Annotated[
    OutputFormat,
    typer.Option(
        "--output",
        "-o",
        help="Output format: table, json, or yaml",
        case_sensitive=False,
    ),
]

ForceOption = Annotated[
    bool,
    typer.Option(
        "--force",
        "-f",
        help="Skip confirmation prompts",
    ),
]

DryRunOption = Annotated[
    bool,
    typer.Option(
        "--dry-run",
        help="Send every change as a server-side dry run",
    ),
]


# =============================================================================
# Configuration
# =============================================================================


def load_config(**overrides: str | None) -> MigrationConfig:
    """Build the migration config from the environment and CLI flags.

    Flags left unset (None) fall back to ``FLUX2ARGO_*`` variables, then
    to the built-in defaults.

    Raises:
        typer.Exit: If the resulting configuration is invalid.
    """
    try:
        return MigrationConfig.from_env().with_overrides(**overrides)
    except ValidationError as e:
        err_console.print("[red]Error:[/red] Invalid configuration")
        for err in e.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            err_console.print(f"  - {field}: {err['msg']}")
        raise typer.Exit(1) from e


# =============================================================================
# Error Handling
# =============================================================================


def _print_journal(error: MigrationError) -> None:
    journal = error.journal
    if journal is None or not journal.entries:
        err_console.print("\n[dim]No changes were made to the cluster.[/dim]")
        return
    err_console.print("\n  Changes already applied:")
    for line in journal.describe():
        err_console.print(f"    - {line}")
    if journal.suspended:
        err_console.print(
            f"\n[dim]Hint: {journal.source_kind} '{journal.source_name}' is suspended. "
            "Create the remaining objects, or set spec.suspend=false to hand it back to Flux.[/dim]"
        )


def handle_k8s_error(error: KubernetesError) -> None:
    """Handle errors with user-friendly output on stderr.

    Args:
        error: The error to handle.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    logger.error("command_failed", error_type=type(error).__name__, error=str(error))

    if isinstance(error, KubernetesConnectionError):
        err_console.print("[red]Error:[/red] Cannot connect to Kubernetes cluster")
        err_console.print(f"  {error.message}")
        if error.original_error:
            err_console.print(f"  Cause: {error.original_error}")
        err_console.print(
            "\n[dim]Hint: Check --kubeconfig/--context and that the cluster is reachable.[/dim]"
        )

    elif isinstance(error, KubernetesAuthError):
        err_console.print("[red]Error:[/red] Authentication/authorization failed")
        err_console.print(f"  {error.message}")
        err_console.print(
            "\n[dim]Hint: The migration needs read access to Flux resources and secrets, "
            "and write access to Argo CD resources.[/dim]"
        )

    elif isinstance(error, KubernetesNotFoundError):
        err_console.print("[red]Error:[/red] Resource not found")
        err_console.print(f"  {error.message}")

    elif isinstance(error, KubernetesValidationError):
        err_console.print("[red]Error:[/red] Validation failed")
        err_console.print(f"  {error.message}")
        if error.validation_errors:
            err_console.print("\n  Field errors:")
            for field, err in error.validation_errors.items():
                err_console.print(f"    - {field}: {err}")

    elif isinstance(error, KubernetesConflictError):
        err_console.print("[red]Error:[/red] Resource conflict")
        err_console.print(f"  {error.message}")
        err_console.print(
            "\n[dim]Hint: The object changed or already exists. Re-run once it has settled.[/dim]"
        )

    elif isinstance(error, KubernetesTimeoutError):
        err_console.print("[red]Error:[/red] Operation timed out")
        err_console.print(f"  {error.message}")

    elif isinstance(error, PathDerivationError):
        err_console.print("[red]Error:[/red] Unsupported Kustomization path")
        err_console.print(f"  {error.message}")
        if error.resource_name:
            err_console.print(
                f"  Kustomization: {error.namespace or '-'}/{error.resource_name}"
            )
        err_console.print(
            "\n[dim]Hint: Paths must look like './' or './dir/subdir'; "
            "migrate this Kustomization by hand.[/dim]"
        )

    elif isinstance(error, UnsupportedSourceError):
        err_console.print("[red]Error:[/red] Unsupported source")
        err_console.print(f"  {error.message}")
        err_console.print(
            "\n[dim]Hint: Only GitRepository (Kustomization) and HelmRepository "
            "(HelmRelease) sources can be migrated.[/dim]"
        )

    elif isinstance(error, MigrationError):
        err_console.print("[red]Error:[/red] Migration failed")
        err_console.print(f"  {error.message}")
        _print_journal(error)

    elif isinstance(error, UninstallError):
        err_console.print(f"[red]Error:[/red] Flux uninstall stopped in phase '{error.phase}'")
        err_console.print(f"  {error.original_error}")
        err_console.print(
            "\n[dim]Hint: Earlier phases are complete; fix the cause and re-run uninstall.[/dim]"
        )

    else:
        err_console.print(f"[red]Error:[/red] {error.message}")
        if error.status_code:
            err_console.print(f"  HTTP Status: {error.status_code}")

    raise typer.Exit(1)


# =============================================================================
# Confirmation Utilities
# =============================================================================


def confirm_action(message: str, default: bool = False) -> bool:
    """Prompt user to confirm an action."""
    return typer.confirm(message, default=default, err=True)
