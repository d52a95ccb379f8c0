"""Color management for the listing browser."""

from __future__ import annotations

import curses
from enum import IntEnum
from typing import Dict, Mapping

from .status_codes import INDEX_LINK, WORKING_TREE_LINK


class ColorPair(IntEnum):
    """Color pair constants for curses."""
    DEFAULT = 0
    DIRECTORY = 1
    INDEX_SIGN = 2
    WORKING_TREE_SIGN = 3


COLOR_NAME_TO_CURSES = {
    "black": curses.COLOR_BLACK,
    "red": curses.COLOR_RED,
    "green": curses.COLOR_GREEN,
    "yellow": curses.COLOR_YELLOW,
    "blue": curses.COLOR_BLUE,
    "magenta": curses.COLOR_MAGENTA,
    "cyan": curses.COLOR_CYAN,
    "white": curses.COLOR_WHITE,
    "default": -1,
}

_LINK_TO_PAIR: Dict[str, ColorPair] = {
    INDEX_LINK: ColorPair.INDEX_SIGN,
    WORKING_TREE_LINK: ColorPair.WORKING_TREE_SIGN,
}


def init_colors(marker_colors: Mapping[str, str]) -> None:
    """Initialize curses color pairs.

    Call this after curses initialization and before rendering.
    """
    if not curses.has_colors():
        return

    curses.start_color()
    curses.use_default_colors()

    index = COLOR_NAME_TO_CURSES.get(marker_colors.get("index", "cyan").lower(), curses.COLOR_CYAN)
    working_tree = COLOR_NAME_TO_CURSES.get(
        marker_colors.get("working_tree", "yellow").lower(), curses.COLOR_YELLOW
    )
    curses.init_pair(ColorPair.DIRECTORY, curses.COLOR_BLUE, -1)
    curses.init_pair(ColorPair.INDEX_SIGN, index, -1)
    curses.init_pair(ColorPair.WORKING_TREE_SIGN, working_tree, -1)


def get_entry_color(is_dir: bool) -> int:
    """Attributes for an entry name."""
    if not curses.has_colors():
        return curses.A_NORMAL
    if is_dir:
        return curses.color_pair(ColorPair.DIRECTORY) | curses.A_BOLD
    return curses.A_NORMAL


def get_sign_color(link: str) -> int:
    """Attributes for a sign whose style links to ``link``."""
    if not curses.has_colors():
        return curses.A_NORMAL
    pair = _LINK_TO_PAIR.get(link)
    if pair is None:
        return curses.A_NORMAL
    return curses.color_pair(pair) | curses.A_BOLD


__all__ = ["COLOR_NAME_TO_CURSES", "ColorPair", "get_entry_color", "get_sign_color", "init_colors"]
