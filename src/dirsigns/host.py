"""The narrow surface dirsigns needs from the editor hosting the listing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, Protocol


class BufferEvent(Enum):
    READ = "read"
    WRITE = "write"
    ENTER = "enter"
    INSERT_LEAVE = "insert_leave"
    TEXT_CHANGED = "text_changed"
    CLOSE = "close"


# Events after which the filesystem may differ from the cached status.
RELOAD_EVENTS = (BufferEvent.READ, BufferEvent.WRITE, BufferEvent.ENTER)
# Events that only move text around inside the buffer.
REDRAW_EVENTS = (BufferEvent.INSERT_LEAVE, BufferEvent.TEXT_CHANGED)


@dataclass(frozen=True)
class Marker:
    text: str
    style: str
    priority: int


class Entry(Protocol):
    name: str


class Host(Protocol):
    """Editor operations used by the loader, renderer and controller.

    Buffers are identified by integers. Line numbers passed to
    ``entry_on_line`` are 1-based, the ``line`` given to ``set_marker`` is
    0-based.
    """

    @property
    def signcolumn(self) -> str: ...

    def buffer_name(self, buffer: int) -> str: ...

    def line_count(self, buffer: int) -> int: ...

    def entry_on_line(self, buffer: int, lnum: int) -> Optional[Entry]: ...

    def clear_markers(self, buffer: int, namespace: str) -> None: ...

    def set_marker(self, buffer: int, namespace: str, line: int, marker: Marker) -> None: ...

    def subscribe(
        self, buffer: int, events: Iterable[BufferEvent], callback: Callable[[], None]
    ) -> None: ...

    def on_listing_buffer(self, callback: Callable[[int], None]) -> None: ...

    def define_style(self, name: str, link: str) -> None: ...

    def notify(self, message: str, level: int) -> None: ...


__all__ = [
    "BufferEvent",
    "Entry",
    "Host",
    "Marker",
    "REDRAW_EVENTS",
    "RELOAD_EVENTS",
]
