"""Textual dashboard for live USB device monitoring."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.logging import TextualHandler
from textual.widgets import Static

from usbwatch.core.poller import Poller
from usbwatch.core.session import SessionState
from usbwatch.ui import render

UI_TICK_S = 1 / 60
INITIAL_WAIT_S = 1.0


class DeviceDashboard(App[None]):
    """Header, device list, details/stats panel, and footer.

    The app never blocks on the poller: each tick drains whatever snapshot
    is waiting and redraws.
    """

    CSS = """
    Screen {
        layout: vertical;
    }
    #header, #footer {
        height: 3;
        border: solid $primary;
        padding: 0 1;
    }
    #footer {
        border: solid $panel;
    }
    #content {
        height: 1fr;
    }
    #devices {
        width: 55%;
        border: solid $primary;
        border-title-align: left;
        padding: 0 1;
    }
    #side {
        width: 45%;
        border: solid $primary;
        padding: 0 1;
    }
    #details {
        height: 1fr;
    }
    #stats {
        height: 8;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("escape", "quit", "Quit", show=False),
        Binding("r", "refresh", "Refresh"),
        Binding("down", "next", "Next", show=False),
        Binding("j", "next", "Next", show=False),
        Binding("up", "previous", "Previous", show=False),
        Binding("k", "previous", "Previous", show=False),
    ]

    def __init__(self, session: SessionState, poller: Poller) -> None:
        super().__init__()
        self.session = session
        self.poller = poller

    def compose(self) -> ComposeResult:
        yield Static(id="header")
        with Horizontal(id="content"):
            yield Static(id="devices")
            with Vertical(id="side"):
                yield Static(id="details")
                yield Static(id="stats")
        yield Static(id="footer")

    def on_mount(self) -> None:
        self.query_one("#devices", Static).border_title = " Devices "
        self.query_one("#side", Vertical).border_title = " Details "
        self._redraw()
        self.set_interval(UI_TICK_S, self._tick)

    def on_unmount(self) -> None:
        self.poller.close()

    def _tick(self) -> None:
        snapshot = self.poller.drain_latest()
        if snapshot is not None:
            self.session.apply(snapshot)
        self._redraw()

    def _redraw(self) -> None:
        self.query_one("#header", Static).update(render.header_text(self.session))
        self.query_one("#devices", Static).update(render.device_list_text(self.session))
        self.query_one("#details", Static).update(render.details_text(self.session.selected_device))
        self.query_one("#stats", Static).update(render.stats_text(self.session.stats))
        self.query_one("#footer", Static).update(render.footer_text(self.session.stats))

    def action_refresh(self) -> None:
        self.poller.request_refresh()

    def action_next(self) -> None:
        self.session.select_next()
        self._redraw()

    def action_previous(self) -> None:
        self.session.select_previous()
        self._redraw()


@contextlib.contextmanager
def log_to_textual() -> Iterator[None]:
    """Detach root stream handlers while the app owns the terminal.

    Textual draws to the real stderr, so a stream handler would write over the
    screen. Records raised inside the app go to the Textual log instead;
    records from other threads are dropped until the handlers come back.
    """
    root = logging.getLogger()
    detached = [
        h for h in root.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]
    for handler in detached:
        root.removeHandler(handler)
    textual_handler = TextualHandler(stderr=False, stdout=False)
    root.addHandler(textual_handler)
    try:
        yield
    finally:
        root.removeHandler(textual_handler)
        for handler in detached:
            root.addHandler(handler)


def run_dashboard(session: SessionState, poller: Poller) -> None:
    """Start polling, wait briefly for the first snapshot, then run the app."""
    poller.start()
    try:
        first = poller.wait_for_snapshot(INITIAL_WAIT_S)
        if first is not None:
            session.apply(first)
        with log_to_textual():
            DeviceDashboard(session, poller).run()
    finally:
        poller.close()
