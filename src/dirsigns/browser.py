"""Interactive curses browser for listing buffers with git signs."""

from __future__ import annotations

import asyncio
import curses
from pathlib import Path
from typing import Mapping, Optional

from .colors import init_colors
from .config import Options
from .controller import StatusController
from .listing import DEFAULT_SIGNCOLUMN, ListingError, ListingHost
from .render import render_listing

# How long getch waits before the event loop gets a turn
POLL_MILLISECONDS = 50
PAGE_SCROLL_LINES = 10


class BrowserError(Exception):
    """Raised when the browser cannot start."""


class ListingBrowser:
    """Show one directory at a time with its git signs.

    The browser owns an asyncio event loop but never runs it in the
    background: between two key presses it lets the loop process whatever
    callbacks are ready, so git queries finish while the user is idle and
    all callbacks run on the UI thread.
    """

    def __init__(
        self,
        root: Path,
        *,
        options: Optional[Options] = None,
        signcolumn: str = DEFAULT_SIGNCOLUMN,
        marker_colors: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.root = root.expanduser().resolve()
        self.loop = asyncio.new_event_loop()
        self.host = ListingHost(signcolumn=signcolumn)
        self.controller = StatusController(self.host, loop=self.loop, options=options)
        self.marker_colors = dict(marker_colors or {})
        self.buffer = 0
        self.show_hidden = False
        self.status_message: Optional[str] = None

    def browse(self) -> Path:
        """Launch the UI and return the final directory."""
        try:
            return curses.wrapper(self._run)
        except curses.error as err:
            raise BrowserError("Failed to initialise curses UI.") from err
        finally:
            self._shutdown()

    def open(self, directory: Path) -> bool:
        """Replace the current buffer with a listing of ``directory``."""
        previous = self.buffer
        try:
            self.buffer = self.host.open_directory(directory, show_hidden=self.show_hidden)
        except ListingError as err:
            self.status_message = str(err)
            return False
        if previous:
            self.host.close(previous)
        self.status_message = None
        return True

    def handle_key(self, key_code: int) -> bool:
        """Handle navigation keys; return ``False`` for unknown keys."""
        listing = self.host.get(self.buffer)
        if key_code in (curses.KEY_UP, ord("k")):
            listing.move_cursor(-1)
            return True
        if key_code in (curses.KEY_DOWN, ord("j")):
            listing.move_cursor(1)
            return True
        if key_code == curses.KEY_PPAGE:
            listing.move_cursor(-PAGE_SCROLL_LINES)
            return True
        if key_code == curses.KEY_NPAGE:
            listing.move_cursor(PAGE_SCROLL_LINES)
            return True
        if key_code in (curses.KEY_ENTER, ord("\n"), ord("\r"), curses.KEY_RIGHT):
            entry = listing.selected_entry()
            if entry is not None and entry.is_dir:
                self.open(entry.path)
            return True
        if key_code in (curses.KEY_BACKSPACE, 127, 8, curses.KEY_LEFT):
            if listing.directory != listing.directory.parent:
                self.open(listing.directory.parent)
            return True
        if key_code == ord("r"):
            try:
                self.host.reread(self.buffer)
                self.status_message = None
            except ListingError as err:
                self.status_message = str(err)
            return True
        if key_code == ord("."):
            self.show_hidden = not self.show_hidden
            self.host.set_show_hidden(self.buffer, self.show_hidden)
            self.status_message = "Showing hidden files." if self.show_hidden else "Hiding hidden files."
            return True
        if key_code == curses.KEY_RESIZE:
            return True
        return False

    def pump(self) -> None:
        """Let the event loop run the callbacks that are ready."""
        self.loop.run_until_complete(asyncio.sleep(0))

    def _run(self, stdscr: "curses._CursesWindow") -> Path:  # type: ignore[name-defined]
        """Main curses event loop."""
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        init_colors(self.marker_colors)
        stdscr.keypad(True)
        stdscr.timeout(POLL_MILLISECONDS)

        self.controller.setup()
        if not self.open(self.root):
            raise BrowserError(self.status_message or f"Cannot list {self.root}")
        if self.host.notifications:
            self.status_message = self.host.notifications[-1][0]

        while True:
            render_listing(self, stdscr)
            key = stdscr.getch()
            if key in (ord("q"), ord("Q")):
                break
            if key != -1 and not self.handle_key(key):
                self.status_message = "Unhandled keypress."
            self.pump()

        return self.host.get(self.buffer).directory

    def _shutdown(self) -> None:
        if self.loop.is_closed():
            return
        self.loop.run_until_complete(self.loop.shutdown_default_executor())
        pending = asyncio.all_tasks(self.loop)
        for task in pending:
            task.cancel()
        if pending:
            self.loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        self.loop.close()


__all__ = ["BrowserError", "ListingBrowser"]
