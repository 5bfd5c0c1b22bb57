"""Rich renderables for the interactive browser."""

from rich.align import Align
from rich.console import Group
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from brewdeck.core.app import BrewdeckApp
from brewdeck.models.package import PackageRecord


def visible_window(count: int, selected: int | None, rows: int) -> tuple[int, int]:
    """Slice [start, end) of a list of `count` rows that keeps `selected` on screen."""
    if count <= rows or rows <= 0:
        return 0, count
    index = selected or 0
    start = max(0, min(index - rows // 2, count - rows))
    return start, start + rows


def render_package_list(app: BrewdeckApp, rows: int) -> Panel:
    view = app.view
    items = view.display_items()
    start, end = visible_window(len(items), view.selected, rows)

    lines = Text()
    for index in range(start, end):
        pkg = items[index]
        style = "green" if pkg.is_installed else "white"
        if pkg.has_update_available:
            style = "yellow"
        if index == view.selected:
            lines.append(f">> {pkg.display_label}", style=f"bold {style} on blue")
        else:
            lines.append(f"   {pkg.display_label}", style=style)
        if index < end - 1:
            lines.append("\n")

    if view.is_searching:
        title = f"Packages (Search: {view.search_query})"
    else:
        title = f"Packages ({len(items)})"
    return Panel(lines, title=title, border_style="blue")


def render_details(package: PackageRecord | None) -> Panel:
    if package is None:
        return Panel(Align.center("No package selected", vertical="middle"), title="Details")

    table = Table.grid(padding=(0, 1))
    table.add_column(style="bold", no_wrap=True)
    table.add_column()
    table.add_row("Name:", package.name)
    table.add_row("Version:", package.current_version)
    table.add_row("Installed:", package.installation_status)
    installed_ago = package.installed_ago()
    if installed_ago:
        table.add_row("Installed on:", installed_ago)
    if package.tap:
        table.add_row("Tap:", package.tap)
    table.add_row("Homepage:", package.homepage)

    parts = [table, Text(""), Text(package.description)]
    if package.caveats:
        parts.extend([Text(""), Text("Caveats:", style="bold yellow"), Text(package.caveats.strip())])

    return Panel(Group(*parts), title=f"[green]{package.identifier}[/green]")


def render_status_bar(app: BrewdeckApp) -> Text:
    message = app.operations.progress_text() or app.status.current() or app.scheduler.status
    if message:
        return Text(message, style="bold")
    return Text(
        "q quit  ↑/↓ move  / search  u update  x uninstall  r refresh",
        style="dim",
    )


def render_confirmation(identifier: str) -> Panel:
    body = Text.assemble(
        "Uninstall ",
        (identifier, "bold"),
        "?\n\n",
        ("y", "bold green"),
        "/Enter confirm   ",
        ("n", "bold red"),
        "/Esc cancel",
    )
    return Panel(Align.center(body), title="Confirm uninstall", border_style="red")


def render_screen(app: BrewdeckApp, height: int, pending_uninstall: str | None = None) -> Layout:
    rows = max(height - 3, 1)  # borders + status bar

    layout = Layout()
    layout.split_column(Layout(name="body"), Layout(name="status", size=1))
    layout["body"].split_row(Layout(name="list", ratio=2), Layout(name="details", ratio=3))

    layout["list"].update(render_package_list(app, rows))
    if pending_uninstall is not None:
        layout["details"].update(render_confirmation(pending_uninstall))
    else:
        layout["details"].update(render_details(app.view.selected_details()))
    layout["status"].update(render_status_bar(app))
    return layout
