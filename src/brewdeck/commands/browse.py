"""Interactive package browser."""

import logging
import queue
import threading
import time

import click
from rich.console import Console
from rich.live import Live

from brewdeck.core.app import BrewdeckApp
from brewdeck.core.brew import BrewError, OperationKind
from brewdeck.core.config import get_config
from brewdeck.log import setup_logging
from brewdeck.ui.render import render_screen, visible_window

console = Console()
logger = logging.getLogger(__name__)

KEY_UP = "\x1b[A"
KEY_DOWN = "\x1b[B"
KEY_PAGE_UP = "\x1b[5~"
KEY_PAGE_DOWN = "\x1b[6~"
KEY_HOME = ("\x1b[H", "\x1b[1~")
KEY_END = ("\x1b[F", "\x1b[4~")
KEY_ENTER = ("\r", "\n")
KEY_ESCAPE = "\x1b"
KEY_BACKSPACE = ("\x7f", "\x08")


class Browser:
    """Key handling and modal state on top of BrewdeckApp."""

    def __init__(self, app: BrewdeckApp):
        self.app = app
        self.pending_uninstall: str | None = None
        self.should_quit = False

    def handle_key(self, key: str) -> None:
        if self.pending_uninstall is not None:
            self._confirmation_key(key)
        elif self.app.view.is_searching:
            self._search_key(key)
        else:
            self._normal_key(key)

    def _navigation_key(self, key: str) -> bool:
        view = self.app.view
        if key == KEY_DOWN:
            view.next()
        elif key == KEY_UP:
            view.previous()
        elif key == KEY_PAGE_DOWN:
            view.page_down()
        elif key == KEY_PAGE_UP:
            view.page_up()
        elif key in KEY_HOME:
            view.first()
        elif key in KEY_END:
            view.last()
        else:
            return False
        return True

    def _normal_key(self, key: str) -> None:
        if self._navigation_key(key):
            return

        view = self.app.view
        if key == "q":
            self.should_quit = True
        elif key == "j":
            view.next()
        elif key == "k":
            view.previous()
        elif key == "/":
            view.start_search()
        elif key == "u":
            self.app.start_operation(OperationKind.UPDATE)
        elif key == "x":
            self._ask_uninstall()
        elif key == "r":
            self.app.directory.force_refresh()
            view.reload(preserve_selection=view.selected)
            self.app.status.push("Package list refreshed")

    def _search_key(self, key: str) -> None:
        view = self.app.view
        if self._navigation_key(key):
            return
        if key == KEY_ESCAPE or key in KEY_ENTER:
            view.end_search()
        elif key in KEY_BACKSPACE:
            view.remove_search_char()
        elif len(key) == 1 and key.isprintable():
            view.add_search_char(key)

    def _ask_uninstall(self) -> None:
        package = self.app.view.selected_package()
        if package is None or not package.is_installed:
            return
        if self.app.operations.is_busy:
            self.app.status.push("Another operation is in progress")
            return
        self.pending_uninstall = package.identifier

    def _confirmation_key(self, key: str) -> None:
        if key in ("y", "Y") or key in KEY_ENTER:
            identifier = self.pending_uninstall
            self.pending_uninstall = None
            self.app.operations.start(OperationKind.UNINSTALL, identifier)
        elif key in ("n", "N", KEY_ESCAPE):
            self.pending_uninstall = None
            self.app.status.push("Uninstall cancelled")
        elif key == "q":
            self.should_quit = True

    def prefetch_visible(self, rows: int) -> None:
        items = self.app.view.display_items()
        start, end = visible_window(len(items), self.app.view.selected, rows)
        self.app.view.prefetch([pkg.identifier for pkg in items[start:end]])


def _read_keys(keys: "queue.Queue[str]", stop: threading.Event) -> None:
    while not stop.is_set():
        try:
            keys.put(click.getchar())
        except (KeyboardInterrupt, EOFError):
            keys.put("q")
            return


@click.command()
@click.option("--update-index", is_flag=True, help="Run 'brew update' before loading")
@click.pass_context
def browse(ctx: click.Context, update_index: bool):
    """Browse installed packages interactively."""
    config = get_config()
    config.ensure_dirs()
    setup_logging(verbose=(ctx.obj or {}).get("verbose", False), log_path=config.log_path)

    app = BrewdeckApp.create(config)

    with console.status("Loading packages from Homebrew..."):
        if update_index:
            try:
                app.client.update_index()
            except BrewError as e:
                logger.warning("brew update failed: %s", e)
                app.status.push(f"⚠️  brew update failed: {e}")
        app.view.reload()

    browser = Browser(app)
    keys: queue.Queue[str] = queue.Queue()
    stop = threading.Event()
    threading.Thread(target=_read_keys, args=(keys, stop), daemon=True).start()
    app.scheduler.start()

    try:
        with Live(console=console, screen=True, auto_refresh=False) as live:
            last_tick = time.monotonic()
            while not browser.should_quit:
                height = console.size.height
                live.update(render_screen(app, height, browser.pending_uninstall), refresh=True)

                timeout = max(config.tick_interval - (time.monotonic() - last_tick), 0)
                try:
                    browser.handle_key(keys.get(timeout=timeout))
                except queue.Empty:
                    pass

                if time.monotonic() - last_tick >= config.tick_interval:
                    app.tick()
                    browser.prefetch_visible(max(height - 3, 1))
                    last_tick = time.monotonic()
    finally:
        stop.set()
        app.scheduler.stop()
