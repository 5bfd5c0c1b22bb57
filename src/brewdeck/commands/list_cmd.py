"""List command implementation."""

import click
from rich.console import Console
from rich.table import Table

from brewdeck.core.brew import BrewClient, BrewError
from brewdeck.core.config import get_config
from brewdeck.models.package import PackageRecord

console = Console()


def load_installed() -> list[PackageRecord]:
    """Query brew for installed packages, exiting on failure."""
    client = BrewClient(get_config().brew_executable)
    try:
        return client.bulk_query()
    except BrewError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


def package_table(packages: list[PackageRecord]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Package")
    table.add_column("Kind")
    table.add_column("Installed")
    table.add_column("Latest")
    table.add_column("Tap")

    for pkg in sorted(packages, key=lambda p: p.identifier):
        latest = pkg.current_version
        if pkg.has_update_available:
            latest = f"[green]{latest}[/green]"
        table.add_row(
            pkg.identifier,
            pkg.kind.value,
            pkg.installed_version or "-",
            latest,
            pkg.tap or "",
        )
    return table


@click.command("list")
@click.option("--outdated", "only_outdated", is_flag=True, help="Only show packages with updates")
def list_packages(only_outdated: bool):
    """List installed packages."""
    packages = load_installed()

    if not packages:
        console.print("No packages installed")
        console.print("\nInstall packages with: brew install <package>")
        raise SystemExit(0)

    if only_outdated:
        packages = [pkg for pkg in packages if pkg.has_update_available]
        if not packages:
            console.print("[green]All packages are up to date![/green]")
            raise SystemExit(0)

    console.print(package_table(packages))
