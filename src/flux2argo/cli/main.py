"""Main CLI entry point using Typer."""

from __future__ import annotations

import typer
from rich.console import Console

from flux2argo import __version__
from flux2argo.cli.commands.auto import register_auto_commands
from flux2argo.cli.commands.migrate import register_migrate_commands
from flux2argo.cli.commands.scan import register_scan_commands
from flux2argo.cli.commands.uninstall import register_uninstall_commands
from flux2argo.cli.factory import build_services
from flux2argo.logging.config import configure_logging

app = typer.Typer(
    name="flux2argo",
    help="Migrate Flux CD Kustomizations and HelmReleases to Argo CD.",
    add_completion=True,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"flux2argo version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
) -> None:
    """flux2argo - Hand Flux-managed workloads over to Argo CD."""
    configure_logging(verbose=verbose, debug=debug)


# Register subcommands
register_migrate_commands(app, build_services)
register_scan_commands(app, build_services)
register_auto_commands(app, build_services)
register_uninstall_commands(app, build_services)


if __name__ == "__main__":
    app()
