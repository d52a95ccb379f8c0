"""Git status codes and the style groups used to draw them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

STYLE_PREFIX = "DirSigns"

# ' ' unmodified, '!' ignored, '?' untracked, then the porcelain letters.
STATUS_CODES = frozenset(" !?ACDMRTU")

INDEX_LINK = "info"
WORKING_TREE_LINK = "warn"


class StatusStyle(Enum):
    IGNORED = "Ignored"
    UNTRACKED = "Untracked"
    ADDED = "Added"
    COPIED = "Copied"
    DELETED = "Deleted"
    MODIFIED = "Modified"
    RENAMED = "Renamed"
    TYPE_CHANGED = "TypeChanged"
    UNMERGED = "Unmerged"
    UNMODIFIED = "Unmodified"

_STYLE_FOR_CODE = {
    "!": StatusStyle.IGNORED,
    "?": StatusStyle.UNTRACKED,
    "A": StatusStyle.ADDED,
    "C": StatusStyle.COPIED,
    "D": StatusStyle.DELETED,
    "M": StatusStyle.MODIFIED,
    "R": StatusStyle.RENAMED,
    "T": StatusStyle.TYPE_CHANGED,
    "U": StatusStyle.UNMERGED,
    " ": StatusStyle.UNMODIFIED,
}


@dataclass(frozen=True)
class StyleGroup:
    name: str
    index: bool
    status_code: str

    @property
    def link(self) -> str:
        return INDEX_LINK if self.index else WORKING_TREE_LINK


def style_for_code(code: str) -> StatusStyle:
    """Return the style category for ``code``; unknown codes read as unmodified."""
    return _STYLE_FOR_CODE.get(code, StatusStyle.UNMODIFIED)


def style_group(code: str, *, index: bool) -> str:
    """Name of the style group for ``code`` in the index or working tree column."""
    location = "Index" if index else "WorkingTree"
    return f"{STYLE_PREFIX}{location}{style_for_code(code).value}"


def _generate_style_groups() -> List[StyleGroup]:
    groups: List[StyleGroup] = []
    for code in sorted(_STYLE_FOR_CODE):
        groups.append(StyleGroup(style_group(code, index=True), True, code))
        groups.append(StyleGroup(style_group(code, index=False), False, code))
    return groups


STYLE_GROUPS = _generate_style_groups()


__all__ = [
    "INDEX_LINK",
    "STATUS_CODES",
    "STYLE_GROUPS",
    "StatusStyle",
    "StyleGroup",
    "WORKING_TREE_LINK",
    "style_for_code",
    "style_group",
]
