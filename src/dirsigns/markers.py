"""Draw the index and working tree signs next to every listed entry."""

from __future__ import annotations

from typing import Optional

from .git_status import StatusMap
from .host import Host, Marker
from .status_codes import style_group

NAMESPACE = "dirsigns"
INDEX_PRIORITY = 1
WORKING_TREE_PRIORITY = 2


def add_status_markers(host: Host, buffer: int, status: Optional[StatusMap]) -> None:
    """Replace the signs drawn in ``buffer`` with ones built from ``status``.

    Always clears first, so calling it again with the same map redraws the
    same signs. ``None`` leaves the buffer without signs.
    """
    host.clear_markers(buffer, NAMESPACE)
    if not status:
        return

    for lnum in range(1, host.line_count(buffer) + 1):
        entry = host.entry_on_line(buffer, lnum)
        if entry is None:
            continue
        codes = status.get(entry.name)
        if codes is None:
            continue
        host.set_marker(
            buffer,
            NAMESPACE,
            lnum - 1,
            Marker(codes.index, style_group(codes.index, index=True), INDEX_PRIORITY),
        )
        host.set_marker(
            buffer,
            NAMESPACE,
            lnum - 1,
            Marker(
                codes.working_tree,
                style_group(codes.working_tree, index=False),
                WORKING_TREE_PRIORITY,
            ),
        )


__all__ = ["INDEX_PRIORITY", "NAMESPACE", "WORKING_TREE_PRIORITY", "add_status_markers"]
