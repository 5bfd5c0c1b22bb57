"""CLI entry point for brewdeck."""

import click
from rich.console import Console

from brewdeck import __version__
from brewdeck.commands import browse, info, list_cmd, outdated, uninstall, update
from brewdeck.core.config import ConfigError, get_config
from brewdeck.log import setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="brewdeck")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """brewdeck - an inventory manager for Homebrew packages.

    Browse installed formulae and casks, inspect them, and update or
    uninstall them.

    Examples:

        brewdeck browse

        brewdeck list --outdated

        brewdeck info wget

        brewdeck update wget
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)

    try:
        get_config()
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


# Register commands
main.add_command(browse.browse)
main.add_command(list_cmd.list_packages)
main.add_command(info.info)
main.add_command(outdated.outdated)
main.add_command(update.update)
main.add_command(uninstall.uninstall)


if __name__ == "__main__":
    main()
