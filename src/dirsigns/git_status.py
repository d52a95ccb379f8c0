"""Parse ``git status --short`` output into one status per listed entry.

Git reports every changed file with its full path relative to the queried
directory, while a directory listing only shows the first path segment.
``parse_git_status`` folds the per-file lines into a single
:class:`StatusEntry` per top-level name:

* a line naming a top-level entry directly is authoritative for that name;
* lines for files nested inside a directory are merged, and any
  non-blank code escalates the directory's column to ``M`` because no single
  specific code can summarise mixed children;
* ignored files that sit directly inside a directory are skipped, so the
  contents of an ignored directory do not add noise on top of the
  directory's own line.
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

# Git prints ``/`` regardless of the platform separator.
PATH_SEPARATOR = "/"
RENAME_ARROW = " -> "
BLANK = " "
ESCALATED = "M"
IGNORED = "!"


@dataclass
class StatusEntry:
    index: str = BLANK
    working_tree: str = BLANK


StatusMap = Dict[str, StatusEntry]


def git_status_command(show_ignored: bool = True) -> List[str]:
    """Return the argv used to query status relative to the working directory."""
    args = [
        "git",
        "-c",
        "status.relativePaths=true",
        "-c",
        "core.quotePath=false",
        "status",
        ".",
        "--short",
    ]
    if show_ignored:
        args.append("--ignored")
    return args


def first_path_component(path: str) -> Tuple[str, Optional[str]]:
    """Split ``path`` into its first segment and the remainder (``None`` if flat)."""
    head, separator, rest = path.partition(PATH_SEPARATOR)
    if not separator:
        return head, None
    return head, rest


def _unquote(path: str) -> str:
    """Undo git's C-style quoting of unusual file names."""
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    raw = path[1:-1].encode("utf-8", errors="surrogateescape")
    decoded, _ = codecs.escape_decode(raw)
    return decoded.decode("utf-8", errors="surrogateescape")


def _split_line(line: str) -> Tuple[str, str, str]:
    index_code = line[0] if len(line) > 0 else BLANK
    working_code = line[1] if len(line) > 1 else BLANK
    path = line[3:]

    if RENAME_ARROW in path and (index_code in "RC" or working_code in "RC"):
        path = path.split(RENAME_ARROW, 1)[1]
    path = _unquote(path)

    if path.endswith(PATH_SEPARATOR):
        path = path[:-1]
    return index_code, working_code, path


def _merge_nested(status: StatusMap, name: str, index_code: str, working_code: str) -> None:
    existing = status.get(name)
    if existing is None:
        status[name] = StatusEntry(index=index_code, working_tree=working_code)
        return
    if index_code != BLANK:
        existing.index = ESCALATED
    if working_code != BLANK:
        existing.working_tree = ESCALATED


def parse_git_status(stdout: str) -> StatusMap:
    """Convert ``git status --short`` text into a map of top-level entry names."""
    status: StatusMap = {}
    authoritative: Set[str] = set()

    for line in stdout.splitlines():
        if not line:
            continue
        index_code, working_code, path = _split_line(line)
        if not path:
            logger.debug("Skipping status line without a path: %r", line[:100])
            continue

        name, rest = first_path_component(path)
        if rest is None:
            status[name] = StatusEntry(index=index_code, working_tree=working_code)
            authoritative.add(name)
            continue

        if PATH_SEPARATOR not in rest and working_code == IGNORED:
            continue
        if name in authoritative:
            continue
        _merge_nested(status, name, index_code, working_code)

    return status


__all__ = [
    "PATH_SEPARATOR",
    "StatusEntry",
    "StatusMap",
    "first_path_component",
    "git_status_command",
    "parse_git_status",
]
