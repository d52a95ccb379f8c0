"""Configuration file management for dirsigns."""

from __future__ import annotations

import copy
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping

import tomli_w

# Default configuration file location
CONFIG_FILE = Path.home() / ".dirsigns.toml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "show_ignored": True,
    # Same syntax as an editor's sign column option: "yes:2", "auto:1", "no".
    "signcolumn": "yes:2",
    "colors": {
        "index": "cyan",
        "working_tree": "yellow",
    },
}


@dataclass(frozen=True)
class Options:
    """Options recognised by the status controller."""

    show_ignored: bool = True

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "Options":
        """Pick known keys out of ``mapping``; anything else is ignored."""
        if not mapping:
            return cls()
        show_ignored = mapping.get("show_ignored", cls.show_ignored)
        if not isinstance(show_ignored, bool):
            show_ignored = cls.show_ignored
        return cls(show_ignored=show_ignored)


def load_config() -> Dict[str, Any]:
    """Load configuration from file or return defaults."""
    if not CONFIG_FILE.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(CONFIG_FILE, "rb") as f:
            config = tomllib.load(f)
        return _merge_config(DEFAULT_CONFIG, config)
    except (OSError, tomllib.TOMLDecodeError):
        # A corrupted file falls back to defaults
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any]) -> None:
    """Save configuration to file."""
    try:
        CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "wb") as f:
            tomli_w.dump(config, f)
    except (OSError, TypeError) as err:
        print(f"Warning: Failed to save configuration to {CONFIG_FILE}: {err}", file=sys.stderr)


def _merge_config(default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
    """Merge user config with defaults, preserving user values."""
    result = copy.deepcopy(default)
    for key, value in user.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_config(result[key], value)
        else:
            result[key] = value
    return result


def create_default_config() -> bool:
    """Create the default configuration file; return ``False`` if it already existed."""
    if CONFIG_FILE.exists():
        return False
    save_config(DEFAULT_CONFIG)
    return True


def get_options() -> Options:
    """Controller options from the configuration file."""
    return Options.from_mapping(load_config())


def get_signcolumn() -> str:
    """Sign column setting used by the listing host."""
    value = load_config().get("signcolumn", DEFAULT_CONFIG["signcolumn"])
    return value if isinstance(value, str) else DEFAULT_CONFIG["signcolumn"]


def get_marker_colors() -> Dict[str, str]:
    """Colour names for the index and working tree signs."""
    colors = load_config().get("colors", {})
    if not isinstance(colors, dict):
        return dict(DEFAULT_CONFIG["colors"])
    result: Dict[str, str] = {}
    for key, default in DEFAULT_CONFIG["colors"].items():
        value = colors.get(key, default)
        result[key] = value if isinstance(value, str) else default
    return result


__all__ = [
    "CONFIG_FILE",
    "DEFAULT_CONFIG",
    "Options",
    "create_default_config",
    "get_marker_colors",
    "get_options",
    "get_signcolumn",
    "load_config",
    "save_config",
]
