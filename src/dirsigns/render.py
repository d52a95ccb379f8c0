"""Turn a listing buffer and its signs into characters on the screen.

``format_listing`` produces the plain text used by ``--print``;
``render_listing`` paints the same rows into a curses window with a frame,
coloured signs and a one-line status strip.
"""

from __future__ import annotations

import curses
from typing import TYPE_CHECKING, List

from .colors import get_entry_color, get_sign_color
from .listing import ListingHost, signcolumn_width

if TYPE_CHECKING:
    from .browser import ListingBrowser

MIN_TERMINAL_HEIGHT = 5
MIN_TERMINAL_WIDTH = 20

# Box drawing characters
BOX_TOP_LEFT = "┌"
BOX_TOP_RIGHT = "┐"
BOX_BOTTOM_LEFT = "└"
BOX_BOTTOM_RIGHT = "┘"
BOX_HORIZONTAL = "─"
BOX_VERTICAL = "│"

HELP_HINT = "j/k move  Enter open  Backspace up  r reload  . hidden  q quit"


def sign_text(host: ListingHost, buffer: int, line: int) -> str:
    """Sign cells for 0-based ``line``, padded to the sign column width."""
    width = signcolumn_width(host.signcolumn)
    text = "".join(marker.text[:1] or " " for marker in host.signs_for_line(buffer, line))
    return text.ljust(width)


def format_listing(host: ListingHost, buffer: int) -> List[str]:
    """Rows of ``buffer`` as ``<signs> <name>`` without colour."""
    rows: List[str] = []
    for line, entry in enumerate(host.get(buffer).entries):
        signs = sign_text(host, buffer, line)
        rows.append(f"{signs} {entry.display_name}" if signs else entry.display_name)
    return rows


def truncate(text: str, max_width: int) -> str:
    """Truncate text to fit within max_width, appending ellipsis if needed."""
    if max_width <= 0:
        return ""
    if len(text) <= max_width:
        return text
    if max_width <= 3:
        return text[:max_width]
    return text[: max_width - 3] + "..."


def truncate_end(text: str, max_width: int) -> str:
    """Truncate text from the end to fit within max_width."""
    if max_width <= 0:
        return ""
    if len(text) <= max_width:
        return text
    return text[-max_width:]


def draw_frame(
    stdscr: "curses._CursesWindow",  # type: ignore[name-defined]
    origin_y: int,
    origin_x: int,
    height: int,
    width: int,
    title: str,
) -> None:
    """Draw a rectangular frame with ``title`` along the top border."""
    if height < 2 or width < 2:
        return

    top = origin_y
    bottom = origin_y + height - 1
    left = origin_x
    right = origin_x + width - 1

    try:
        stdscr.addstr(top, left, BOX_TOP_LEFT)
        stdscr.addstr(top, right, BOX_TOP_RIGHT)
        stdscr.addstr(bottom, left, BOX_BOTTOM_LEFT)
        # Writing the bottom-right cell moves the cursor past the screen
        stdscr.insstr(bottom, right, BOX_BOTTOM_RIGHT)
        for x_axis in range(left + 1, right):
            stdscr.addstr(top, x_axis, BOX_HORIZONTAL)
            stdscr.addstr(bottom, x_axis, BOX_HORIZONTAL)
        for y_axis in range(top + 1, bottom):
            stdscr.addstr(y_axis, left, BOX_VERTICAL)
            stdscr.addstr(y_axis, right, BOX_VERTICAL)
    except curses.error:
        pass

    available = max(width - 2, 0)
    if available <= 0:
        return
    try:
        stdscr.addnstr(top, left + 1, truncate_end(title, available), available, curses.A_BOLD)
    except curses.error:
        pass


def render_listing(browser: "ListingBrowser", stdscr: "curses._CursesWindow") -> None:  # type: ignore[name-defined]
    """Render the current listing buffer and the status strip."""
    height, width = stdscr.getmaxyx()
    stdscr.erase()

    if height < MIN_TERMINAL_HEIGHT or width < MIN_TERMINAL_WIDTH:
        stdscr.addstr(0, 0, "Terminal too small.")
        stdscr.refresh()
        return

    host = browser.host
    buffer = browser.buffer
    listing = host.get(buffer)
    frame_height = height - 1
    draw_frame(stdscr, 0, 0, frame_height, width, str(listing.directory))

    viewport_height = max(frame_height - 2, 0)
    interior_width = max(width - 2, 0)
    listing.ensure_cursor_visible(viewport_height)
    sign_width = signcolumn_width(host.signcolumn)
    name_x = 1 + sign_width + (1 if sign_width else 0)
    name_width = max(interior_width - (name_x - 1), 0)

    visible = listing.entries[listing.scroll_offset : listing.scroll_offset + viewport_height]
    for offset, entry in enumerate(visible):
        y = 1 + offset
        line = listing.scroll_offset + offset
        x = 1
        for marker in host.signs_for_line(buffer, line):
            link = host.styles.get(marker.style, "")
            _addnstr(stdscr, y, x, marker.text[:1] or " ", 1, get_sign_color(link))
            x += 1
        attrs = get_entry_color(entry.is_dir)
        if line == listing.cursor_index:
            attrs |= curses.A_REVERSE
        _addnstr(stdscr, y, name_x, truncate(entry.display_name, name_width).ljust(name_width), name_width, attrs)

    status = browser.status_message or HELP_HINT
    _addnstr(stdscr, height - 1, 0, truncate(status, width - 1), width - 1, curses.A_DIM)
    stdscr.refresh()


def _addnstr(
    stdscr: "curses._CursesWindow",  # type: ignore[name-defined]
    y: int,
    x: int,
    text: str,
    limit: int,
    attrs: int,
) -> None:
    if limit <= 0:
        return
    try:
        stdscr.addnstr(y, x, text, limit, attrs)
    except curses.error:
        pass


__all__ = ["draw_frame", "format_listing", "render_listing", "sign_text", "truncate", "truncate_end"]
