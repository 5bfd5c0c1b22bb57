"""Tests for the interactive browser's key handling and rendering."""

import io

import pytest
from rich.console import Console

from brewdeck.commands.browse import KEY_DOWN, KEY_ESCAPE, KEY_UP, Browser
from brewdeck.core.app import BrewdeckApp
from brewdeck.core.brew import OperationKind
from brewdeck.ui.render import render_screen, render_status_bar, visible_window

from conftest import make_record


@pytest.fixture
def app(config, brew, clock):
    app = BrewdeckApp.create(config, client=brew, clock=clock)
    app.view.reload()
    return app


@pytest.fixture
def browser(app):
    return Browser(app)


def press(browser, *keys):
    for key in keys:
        browser.handle_key(key)


def render_text(renderable, height=20) -> str:
    console = Console(file=io.StringIO(), width=100, height=height, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestKeys:
    def test_arrows_and_vim_keys(self, browser):
        press(browser, KEY_DOWN, "j")
        assert browser.app.view.selected == 2
        press(browser, KEY_UP, "k", "k")
        assert browser.app.view.selected == 4

    def test_quit(self, browser):
        press(browser, "q")
        assert browser.should_quit

    def test_search_mode_captures_letters(self, browser):
        press(browser, "/", "q", "x")
        assert not browser.should_quit
        assert browser.pending_uninstall is None
        assert browser.app.view.search_query == "qx"
        press(browser, KEY_ESCAPE)
        assert not browser.app.view.is_searching

    def test_uninstall_needs_confirmation(self, browser, brew, clock):
        press(browser, "j", "x")
        assert browser.pending_uninstall == "bravo"
        assert not browser.app.operations.is_busy

        press(browser, "y")
        assert browser.pending_uninstall is None
        assert browser.app.operations.session.identifier == "bravo"
        assert browser.app.operations.session.kind is OperationKind.UNINSTALL

    def test_uninstall_cancelled(self, browser):
        press(browser, "x", "n")
        assert browser.pending_uninstall is None
        assert not browser.app.operations.is_busy
        assert browser.app.status.current() == "Uninstall cancelled"

    def test_no_uninstall_prompt_while_busy(self, browser):
        press(browser, "x", "y", "j", "x")
        assert browser.pending_uninstall is None
        assert browser.app.status.current() == "Another operation is in progress"

    def test_update_key(self, browser, brew):
        brew.packages[0] = make_record("alpha", installed="1.0", current="2.0")
        press(browser, "r", "u")
        assert browser.app.operations.session.kind is OperationKind.UPDATE

    def test_refresh_key(self, browser, brew):
        calls = brew.bulk_calls
        press(browser, "r")
        assert brew.bulk_calls == calls + 1
        assert browser.app.status.current() == "Package list refreshed"

    def test_prefetch_visible(self, browser):
        browser.prefetch_visible(rows=3)
        scheduler = browser.app.scheduler
        assert [scheduler.is_pending(n) for n in ("alpha", "bravo", "charlie", "delta")] == [
            True,
            True,
            True,
            False,
        ]


class TestRender:
    @pytest.mark.parametrize(
        "count, selected, rows, expected",
        [
            (5, 0, 10, (0, 5)),
            (20, 0, 5, (0, 5)),
            (20, 10, 5, (8, 13)),
            (20, 19, 5, (15, 20)),
            (20, None, 5, (0, 5)),
        ],
    )
    def test_visible_window(self, count, selected, rows, expected):
        assert visible_window(count, selected, rows) == expected

    def test_screen_shows_list_and_details(self, app):
        app.details.put_many([make_record("alpha", description="Full alpha details")])
        text = render_text(render_screen(app, 20))
        assert ">> " in text
        assert "alpha" in text
        assert "Full alpha details" in text
        assert "Packages (5)" in text

    def test_screen_shows_confirmation(self, app):
        text = render_text(render_screen(app, 20, pending_uninstall="alpha"))
        assert "Uninstall alpha?" in text

    def test_status_bar_prefers_operation_progress(self, app):
        app.status.push("hello")
        assert render_status_bar(app).plain == "hello"
        app.operations.start(OperationKind.UNINSTALL, "alpha")
        assert render_status_bar(app).plain == "🗑️  Preparing to uninstall alpha..."

    def test_status_bar_key_help(self, app, clock):
        clock.advance(60)
        assert "q quit" in render_status_bar(app).plain
