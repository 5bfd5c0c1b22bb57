"""Outdated command implementation."""

import click
from rich.console import Console
from rich.table import Table

from brewdeck.commands.list_cmd import load_installed

console = Console()


@click.command()
def outdated():
    """List packages with available updates."""
    packages = load_installed()

    if not packages:
        console.print("No packages installed")
        raise SystemExit(0)

    outdated_packages = [pkg for pkg in packages if pkg.has_update_available]

    if not outdated_packages:
        console.print("[green]All packages are up to date![/green]")
        raise SystemExit(0)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Package")
    table.add_column("Current")
    table.add_column("Latest")
    table.add_column("Kind")

    for pkg in sorted(outdated_packages, key=lambda p: p.identifier):
        table.add_row(
            pkg.identifier,
            pkg.installed_version,
            f"[green]{pkg.current_version}[/green]",
            pkg.kind.value,
        )

    console.print(table)
    console.print(f"\n{len(outdated_packages)} package(s) can be updated")
    console.print("[dim]Run 'brewdeck update <package>' to update one[/dim]")
