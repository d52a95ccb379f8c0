"""Command-line entry point for dirsigns.

1. Read command line arguments and the configuration file.
2. Either print the listing of one directory with its git signs, or
3. launch the interactive browser.
4. Log any crash information.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from . import __version__
from .browser import BrowserError, ListingBrowser
from .config import (
    CONFIG_FILE,
    Options,
    create_default_config,
    get_marker_colors,
    get_options,
    get_signcolumn,
)
from .listing import ListingError, ListingHost
from .loader import fetch_git_status, resolve_buffer_path
from .markers import add_status_markers
from .render import format_listing

# Crash dump file location
CRASH_LOG_FILE = Path.home() / "dirsigns.crash.txt"


def print_listing(directory: Path, options: Options, signcolumn: str) -> List[str]:
    """Load git status for ``directory`` once and return the annotated rows."""
    host = ListingHost(signcolumn=signcolumn)
    buffer = host.open_directory(directory)
    path = resolve_buffer_path(host.buffer_name(buffer), host.scheme)
    status = asyncio.run(fetch_git_status(path, show_ignored=options.show_ignored))
    add_status_markers(host, buffer, status)
    return format_listing(host, buffer)


def write_crash_log(exception: BaseException) -> None:
    """Append a crash report to :data:`CRASH_LOG_FILE`."""
    try:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        crash_info = f"""
================================================================================
dirsigns Crash Report
================================================================================
Timestamp: {timestamp}
Version: {__version__}
Python: {sys.version}
Platform: {sys.platform}

Exception Type: {type(exception).__name__}
Exception Message: {exception}

Traceback:
{traceback.format_exc()}
================================================================================
"""
        with open(CRASH_LOG_FILE, "a", encoding="utf-8") as f:
            f.write(crash_info)

        print("\ndirsigns crashed unexpectedly!", file=sys.stderr)
        print(f"   Crash details saved to: {CRASH_LOG_FILE}", file=sys.stderr)
    except OSError:
        print("\ndirsigns crashed and could not write crash log!", file=sys.stderr)
        traceback.print_exc()


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Turn the command-line text into structured information."""
    parser = argparse.ArgumentParser(
        description="Browse a directory with git status signs next to every entry."
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version number and exit.",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to list (default: current directory).",
    )
    parser.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print the listing with its signs and exit.",
    )
    parser.add_argument(
        "--no-ignored",
        action="store_true",
        help="Leave ignored entries unmarked.",
    )
    parser.add_argument(
        "--create-config",
        action="store_true",
        help=f"Write the default configuration to {CONFIG_FILE} and exit.",
    )
    parser.add_argument(
        "--log",
        metavar="FILE",
        default=None,
        help="Write debug logging to FILE.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run dirsigns and return the process exit code."""
    try:
        args = parse_args(argv)

        if args.log:
            logging.basicConfig(
                filename=args.log,
                level=logging.DEBUG,
                format="%(asctime)s %(name)s %(levelname)s %(message)s",
            )

        if args.create_config:
            if create_default_config():
                print(f"Created {CONFIG_FILE}")
            else:
                print(f"{CONFIG_FILE} already exists")
            return 0

        options = get_options()
        if args.no_ignored:
            options = Options(show_ignored=False)

        directory = Path(args.directory).expanduser()
        if not directory.is_dir():
            print(f"Not a directory: {directory}", file=sys.stderr)
            return 1

        if args.print_only:
            for row in print_listing(directory, options, get_signcolumn()):
                print(row)
            return 0

        # curses needs a real terminal
        if not sys.stdout.isatty():
            print("The listing browser requires an interactive terminal.")
            return 1

        browser = ListingBrowser(
            directory,
            options=options,
            signcolumn=get_signcolumn(),
            marker_colors=get_marker_colors(),
        )
        final_directory = browser.browse()
        print(f"Final directory: {final_directory}")
        return 0

    except (BrowserError, ListingError) as err:
        print(f"Could not start browser: {err}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        write_crash_log(e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
