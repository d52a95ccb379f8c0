"""Directory listing buffers held in memory.

:class:`ListingHost` implements the :class:`dirsigns.host.Host` protocol for
plain filesystem directories. Each opened directory becomes a buffer whose
lines are the directory entries (a ``..`` line first, then directories, then
files). The curses browser and the ``--print`` mode both draw from it, and
the tests use it in place of a real editor.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, DefaultDict, Dict, Iterable, List, Optional, Tuple

from .host import BufferEvent, Marker
from .loader import LISTING_SCHEME

logger = logging.getLogger(__name__)

DEFAULT_SIGNCOLUMN = "yes:2"


class ListingError(Exception):
    """Raised when a directory cannot be listed."""


def buffer_name_for_path(path: Path, scheme: str = LISTING_SCHEME) -> str:
    """Return the buffer name for ``path``, e.g. ``listing:///tmp/a%20b/``."""
    uri = path.resolve().as_uri()
    if not uri.endswith("/"):
        uri += "/"
    return scheme + uri[len("file"):]


def signcolumn_width(signcolumn: str) -> int:
    """Number of sign cells a ``yes:N``/``auto:N`` style setting reserves."""
    kind, _, count = signcolumn.partition(":")
    if kind not in ("yes", "auto"):
        return 0
    if not count:
        return 1
    # "auto:1-3" reserves up to the upper bound
    upper = count.rpartition("-")[2]
    try:
        return max(int(upper), 0)
    except ValueError:
        return 1


@dataclass
class ListingEntry:
    path: Path
    is_dir: bool
    is_parent: bool = False

    @property
    def name(self) -> str:
        """Name as it appears in git status output."""
        if self.is_parent:
            return ".."
        return self.path.name or str(self.path)

    @property
    def display_name(self) -> str:
        """Return the text shown for the entry."""
        suffix = "/" if self.is_dir and not self.is_parent else ""
        return f"{self.name}{suffix}"


@dataclass
class ListingBuffer:
    number: int
    directory: Path
    show_hidden: bool = False
    cursor_index: int = 0
    scroll_offset: int = 0
    entries: List[ListingEntry] = field(default_factory=list)
    markers: DefaultDict[str, List[Tuple[int, Marker]]] = field(
        default_factory=lambda: defaultdict(list)
    )
    handlers: DefaultDict[BufferEvent, List[Callable[[], None]]] = field(
        default_factory=lambda: defaultdict(list)
    )

    def refresh_entries(self) -> None:
        """Populate `entries` with directory contents."""
        items: List[ListingEntry] = []

        if self.directory != self.directory.parent:
            items.append(ListingEntry(self.directory.parent, is_dir=True, is_parent=True))

        try:
            candidates = sorted(self.directory.iterdir(), key=self._sort_key)
        except PermissionError as err:
            raise ListingError(f"Permission denied reading directory: {self.directory}") from err
        except FileNotFoundError as err:
            raise ListingError(f"Directory not found: {self.directory}") from err
        except NotADirectoryError as err:
            raise ListingError(f"Not a directory: {self.directory}") from err

        for path in candidates:
            if not self.show_hidden and path.name.startswith("."):
                continue
            items.append(ListingEntry(path, is_dir=self._is_dir(path)))

        self.entries = items
        self.cursor_index = min(self.cursor_index, max(len(self.entries) - 1, 0))
        self.scroll_offset = min(self.scroll_offset, max(len(self.entries) - 1, 0))

    @staticmethod
    def _is_dir(path: Path) -> bool:
        try:
            return path.is_dir()
        except OSError:
            return False

    @classmethod
    def _sort_key(cls, path: Path) -> Tuple[int, str]:
        """Directories come first, then files alphabetically."""
        return (0 if cls._is_dir(path) else 1, path.name.lower())

    def move_cursor(self, delta: int) -> None:
        """Move cursor by `delta` steps."""
        if not self.entries:
            self.cursor_index = 0
            self.scroll_offset = 0
            return
        self.cursor_index = max(0, min(self.cursor_index + delta, len(self.entries) - 1))

    def ensure_cursor_visible(self, viewport_height: int) -> None:
        """Adjust scroll offset so cursor is visible."""
        if viewport_height <= 0:
            self.scroll_offset = 0
            return
        if self.cursor_index < self.scroll_offset:
            self.scroll_offset = self.cursor_index
        elif self.cursor_index >= self.scroll_offset + viewport_height:
            self.scroll_offset = self.cursor_index - viewport_height + 1
        max_offset = max(len(self.entries) - viewport_height, 0)
        self.scroll_offset = max(0, min(self.scroll_offset, max_offset))

    def selected_entry(self) -> Optional[ListingEntry]:
        """Return currently highlighted entry."""
        if not self.entries:
            return None
        return self.entries[self.cursor_index]


class ListingHost:
    """In-memory host for directory listing buffers."""

    def __init__(
        self, signcolumn: str = DEFAULT_SIGNCOLUMN, scheme: str = LISTING_SCHEME
    ) -> None:
        self._signcolumn = signcolumn
        self.scheme = scheme
        self.buffers: Dict[int, ListingBuffer] = {}
        self.styles: Dict[str, str] = {}
        self.notifications: List[Tuple[str, int]] = []
        self._listing_callbacks: List[Callable[[int], None]] = []
        self._next_number = 1

    # Host protocol

    @property
    def signcolumn(self) -> str:
        return self._signcolumn

    def buffer_name(self, buffer: int) -> str:
        return buffer_name_for_path(self._buffer(buffer).directory, self.scheme)

    def line_count(self, buffer: int) -> int:
        return len(self._buffer(buffer).entries)

    def entry_on_line(self, buffer: int, lnum: int) -> Optional[ListingEntry]:
        entries = self._buffer(buffer).entries
        if 1 <= lnum <= len(entries):
            return entries[lnum - 1]
        return None

    def clear_markers(self, buffer: int, namespace: str) -> None:
        self._buffer(buffer).markers.pop(namespace, None)

    def set_marker(self, buffer: int, namespace: str, line: int, marker: Marker) -> None:
        self._buffer(buffer).markers[namespace].append((line, marker))

    def subscribe(
        self, buffer: int, events: Iterable[BufferEvent], callback: Callable[[], None]
    ) -> None:
        handlers = self._buffer(buffer).handlers
        for event in events:
            handlers[event].append(callback)

    def on_listing_buffer(self, callback: Callable[[int], None]) -> None:
        self._listing_callbacks.append(callback)

    def define_style(self, name: str, link: str) -> None:
        # Existing definitions win, like a default highlight link.
        self.styles.setdefault(name, link)

    def notify(self, message: str, level: int) -> None:
        logger.log(level, message)
        self.notifications.append((message, level))

    # Buffer management

    def open_directory(self, directory: Path, *, show_hidden: bool = False) -> int:
        """List ``directory`` in a new buffer and enter it."""
        listing = ListingBuffer(
            number=self._next_number,
            directory=directory.expanduser().resolve(),
            show_hidden=show_hidden,
        )
        listing.refresh_entries()
        self._next_number += 1
        self.buffers[listing.number] = listing

        for callback in list(self._listing_callbacks):
            callback(listing.number)
        self.emit(listing.number, BufferEvent.ENTER)
        return listing.number

    def close(self, buffer: int) -> None:
        self.emit(buffer, BufferEvent.CLOSE)
        del self.buffers[buffer]

    def reread(self, buffer: int) -> None:
        """List the directory again, as after reading the buffer from disk.

        Markers are placed by line, so they go away with the old text.
        """
        listing = self._buffer(buffer)
        listing.refresh_entries()
        listing.markers.clear()
        self.emit(buffer, BufferEvent.READ)

    def set_show_hidden(self, buffer: int, show_hidden: bool) -> None:
        """Show or hide dotfiles; only the buffer text changes."""
        listing = self._buffer(buffer)
        listing.show_hidden = show_hidden
        listing.refresh_entries()
        self.emit(buffer, BufferEvent.TEXT_CHANGED)

    def emit(self, buffer: int, event: BufferEvent) -> None:
        for callback in list(self._buffer(buffer).handlers[event]):
            callback()

    def get(self, buffer: int) -> ListingBuffer:
        return self._buffer(buffer)

    def markers_on_line(self, buffer: int, line: int) -> List[Marker]:
        """Markers drawn on 0-based ``line``, lowest priority first."""
        found = [
            marker
            for placed in self._buffer(buffer).markers.values()
            for marker_line, marker in placed
            if marker_line == line
        ]
        return sorted(found, key=lambda marker: marker.priority)

    def signs_for_line(self, buffer: int, line: int) -> List[Marker]:
        """The markers that fit into the sign column, highest priorities kept."""
        width = signcolumn_width(self._signcolumn)
        if width <= 0:
            return []
        return self.markers_on_line(buffer, line)[-width:]

    def _buffer(self, buffer: int) -> ListingBuffer:
        try:
            return self.buffers[buffer]
        except KeyError as err:
            raise ListingError(f"Unknown buffer: {buffer}") from err


__all__ = [
    "DEFAULT_SIGNCOLUMN",
    "ListingBuffer",
    "ListingEntry",
    "ListingError",
    "ListingHost",
    "buffer_name_for_path",
    "signcolumn_width",
]
