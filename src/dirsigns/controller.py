"""Keep the signs of every listing buffer in step with git."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .config import Options
from .git_status import StatusMap
from .host import BufferEvent, Host, REDRAW_EVENTS, RELOAD_EVENTS
from .loader import LISTING_SCHEME, load_git_status, resolve_buffer_path
from .markers import add_status_markers
from .status_codes import STYLE_GROUPS

logger = logging.getLogger(__name__)

SIGNCOLUMN_WARNING = (
    "dirsigns requires the sign column to be set to at least 'yes:2' or 'auto:2'"
)


@dataclass
class _BufferState:
    started: bool = False
    status: Optional[StatusMap] = None
    # Number of reloads requested, and the newest one whose result was kept.
    requested: int = 0
    applied: int = 0


class StatusController:
    """Wire listing buffer events to the status loader and the sign renderer.

    Reload events (read, write, enter) query git again and replace the cached
    status of the buffer once the query has finished. Edit events (insert
    leave, text changed) only redraw from the cache. A failed query removes
    the signs but keeps the previous cache, and a query that finishes after a newer one has already
    been applied is dropped.
    """

    def __init__(
        self,
        host: Host,
        *,
        loop: asyncio.AbstractEventLoop,
        options: Optional[Options] = None,
        scheme: str = LISTING_SCHEME,
    ) -> None:
        self.host = host
        self.loop = loop
        self.options = options or Options()
        self.scheme = scheme
        self._states: Dict[int, _BufferState] = {}

    def setup(self) -> None:
        """Define the sign styles, check the host and watch for listing buffers."""
        for group in STYLE_GROUPS:
            self.host.define_style(group.name, group.link)
        self.validate_host()
        self.host.on_listing_buffer(self.attach)

    def validate_host(self) -> bool:
        signcolumn = self.host.signcolumn
        if signcolumn.startswith("yes") or signcolumn.startswith("auto"):
            return True
        self.host.notify(SIGNCOLUMN_WARNING, logging.WARNING)
        return False

    def attach(self, buffer: int) -> None:
        state = self._states.setdefault(buffer, _BufferState())
        if state.started:
            return
        state.started = True

        self.host.subscribe(buffer, RELOAD_EVENTS, lambda: self.reload(buffer))
        self.host.subscribe(buffer, REDRAW_EVENTS, lambda: self.redraw(buffer))
        self.host.subscribe(buffer, (BufferEvent.CLOSE,), lambda: self.detach(buffer))

    def detach(self, buffer: int) -> None:
        self._states.pop(buffer, None)

    def is_attached(self, buffer: int) -> bool:
        state = self._states.get(buffer)
        return state is not None and state.started

    def status_for(self, buffer: int) -> Optional[StatusMap]:
        """Return the cached status of ``buffer`` (``None`` before the first load)."""
        state = self._states.get(buffer)
        return state.status if state else None

    def reload(self, buffer: int) -> None:
        state = self._states.get(buffer)
        if state is None:
            return
        state.requested += 1
        generation = state.requested
        path = resolve_buffer_path(self.host.buffer_name(buffer), self.scheme)

        load_git_status(
            path,
            lambda status: self._apply(buffer, generation, status),
            show_ignored=self.options.show_ignored,
            loop=self.loop,
        )

    def redraw(self, buffer: int) -> None:
        status = self.status_for(buffer)
        if status is not None:
            add_status_markers(self.host, buffer, status)

    def _apply(self, buffer: int, generation: int, status: Optional[StatusMap]) -> None:
        state = self._states.get(buffer)
        if state is None:
            logger.debug("Dropping git status for closed buffer %d", buffer)
            return
        if generation < state.applied:
            logger.debug(
                "Dropping stale git status for buffer %d (%d < %d)",
                buffer,
                generation,
                state.applied,
            )
            return
        if status is None:
            # The cache survives so that the next edit redraws it
            add_status_markers(self.host, buffer, None)
            return
        state.applied = generation
        state.status = status
        add_status_markers(self.host, buffer, status)


__all__ = ["SIGNCOLUMN_WARNING", "StatusController"]
