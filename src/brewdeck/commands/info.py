"""Info command implementation."""

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from brewdeck.core.brew import BrewClient, BrewError
from brewdeck.core.config import get_config

console = Console()


@click.command()
@click.argument("package_name")
def info(package_name: str):
    """Show detailed information about a package.

    PACKAGE_NAME is a formula name or cask token.
    """
    client = BrewClient(get_config().brew_executable)
    try:
        records = client.single_query(package_name)
    except BrewError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    package = next((r for r in records if r.identifier == package_name), None)
    if package is None:
        console.print(f"[red]Error:[/red] Package '{package_name}' not found")
        raise SystemExit(1)

    lines = [
        f"[bold]Name:[/bold] {package.name}",
        f"[bold]Kind:[/bold] {package.kind.value}",
        f"[bold]Description:[/bold] {escape(package.description)}",
        f"[bold]Homepage:[/bold] {escape(package.homepage)}",
        f"[bold]Latest:[/bold] {package.current_version}",
        f"[bold]Installed:[/bold] {package.installation_status}",
    ]
    installed_ago = package.installed_ago()
    if installed_ago:
        lines.append(f"[bold]Installed on:[/bold] {installed_ago}")
    if package.tap:
        lines.append(f"[bold]Tap:[/bold] {package.tap}")

    title = f"[green]{package.identifier}[/green]"
    if package.is_installed:
        title += " (installed)"
    console.print(Panel("\n".join(lines), title=title))

    if package.caveats:
        console.print("\n[bold]Caveats:[/bold]")
        console.print(package.caveats.strip(), markup=False)
