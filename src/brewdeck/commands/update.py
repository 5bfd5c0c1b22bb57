"""Update command implementation."""

from time import monotonic, sleep

import click
from rich.console import Console

from brewdeck.core.brew import BrewClient, BrewError, OperationKind
from brewdeck.core.config import get_config
from brewdeck.core.operations import OperationMachine, OperationOutcome
from brewdeck.core.status import StatusLog
from brewdeck.models.package import PackageRecord

console = Console()


def find_installed(client: BrewClient, package_name: str) -> PackageRecord:
    """Look up an installed package, exiting if it is unknown or not installed."""
    try:
        records = client.single_query(package_name)
    except BrewError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    package = next((r for r in records if r.identifier == package_name), None)
    if package is None or not package.is_installed:
        console.print(f"[red]Error:[/red] Package '{package_name}' is not installed")
        raise SystemExit(1)
    return package


def run_operation(client: BrewClient, kind: OperationKind, package_name: str) -> OperationOutcome:
    """Drive one operation to completion on the tick interval."""
    config = get_config()
    status = StatusLog(config.status_capacity, config.status_ttl, clock=monotonic)
    outcomes: list[OperationOutcome] = []
    machine = OperationMachine(client.mutate, status, clock=monotonic, on_finished=outcomes.append)

    if not machine.start(kind, package_name):
        raise click.ClickException(status.current() or "Could not start operation")
    console.print(f"[blue]{status.current()}[/blue]")

    with console.status(machine.progress_text() or "") as spinner:
        stage = machine.session.stage
        while machine.is_busy:
            new_stage = machine.tick()
            if new_stage is not None and new_stage != stage:
                stage = new_stage
                message = status.current()
                if message:
                    console.print(f"  {message}")
            text = machine.progress_text()
            if text:
                spinner.update(text)
            sleep(config.tick_interval)

    return outcomes[0]


@click.command()
@click.argument("package_name")
@click.option("--force", "-f", is_flag=True, help="Upgrade even if no newer version is known")
def update(package_name: str, force: bool):
    """Update a package to the latest version.

    PACKAGE_NAME is a formula name or cask token.
    """
    client = BrewClient(get_config().brew_executable)
    package = find_installed(client, package_name)

    if not package.has_update_available and not force:
        console.print(
            f"[green]{package_name}[/green] is already up to date ({package.installed_version})"
        )
        raise SystemExit(0)

    console.print(
        f"[blue]Updating[/blue] {package_name}: "
        f"{package.installed_version} → {package.current_version}"
    )
    outcome = run_operation(client, OperationKind.UPDATE, package_name)

    if not outcome.succeeded:
        console.print(f"[red]Error:[/red] {outcome.error}")
        raise SystemExit(1)

    console.print(f"\n[green]✓[/green] Successfully updated [bold]{package_name}[/bold]")
