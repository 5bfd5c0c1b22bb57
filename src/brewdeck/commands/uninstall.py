"""Uninstall command implementation."""

import click
from rich.console import Console
from rich.prompt import Confirm

from brewdeck.commands.update import find_installed, run_operation
from brewdeck.core.brew import BrewClient, OperationKind
from brewdeck.core.config import get_config

console = Console()


@click.command()
@click.argument("package_name")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def uninstall(package_name: str, yes: bool):
    """Uninstall a package.

    PACKAGE_NAME is a formula name or cask token.
    """
    client = BrewClient(get_config().brew_executable)
    package = find_installed(client, package_name)

    if not yes and not Confirm.ask(
        f"Uninstall [bold]{package_name}[/bold] {package.installed_version}?", default=False
    ):
        console.print("Uninstall cancelled")
        raise SystemExit(0)

    console.print(f"[blue]Uninstalling[/blue] {package_name}...")
    outcome = run_operation(client, OperationKind.UNINSTALL, package_name)

    if not outcome.succeeded:
        console.print(f"[red]Error:[/red] {outcome.error}")
        raise SystemExit(1)

    console.print(f"\n[green]✓[/green] Successfully uninstalled [bold]{package_name}[/bold]")
