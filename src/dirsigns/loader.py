"""Load git status for a listing buffer without blocking the event loop."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlparse
from urllib.request import url2pathname

from .fan_in import CompletionHandle, Task, run_concurrently
from .git_status import StatusMap, git_status_command, parse_git_status

logger = logging.getLogger(__name__)

LISTING_SCHEME = "listing"
# Exit status reported when the command could not be started at all.
COMMAND_NOT_FOUND = 127

StatusCallback = Callable[[Optional[StatusMap]], None]


@dataclass(frozen=True)
class CommandResult:
    code: int
    stdout: str


def resolve_buffer_path(name: str, scheme: str = LISTING_SCHEME) -> str:
    """Turn a listing buffer name such as ``listing:///tmp/a%20b/`` into a path."""
    prefix = f"{scheme}:"
    if not name.startswith(prefix):
        return name
    parsed = urlparse("file:" + name[len(prefix):])
    return url2pathname(parsed.path)


async def run_command(args: List[str], cwd: str) -> CommandResult:
    """Run ``args`` in ``cwd`` and capture the exit code and stdout as text."""
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=cwd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as err:
        logger.debug("Could not start %s in %s: %s", args[0], cwd, err)
        return CommandResult(code=COMMAND_NOT_FOUND, stdout="")
    stdout, _ = await process.communicate()
    return CommandResult(
        code=process.returncode if process.returncode is not None else 0,
        stdout=stdout.decode("utf-8", errors="replace"),
    )


def _status_task(
    path: str, show_ignored: bool, loop: asyncio.AbstractEventLoop
) -> Task:
    def task(done: CompletionHandle) -> None:
        command = loop.create_task(run_command(git_status_command(show_ignored), path))

        def on_finished(finished: "asyncio.Task[CommandResult]") -> None:
            # Cancelled only when the loop shuts down
            if not finished.cancelled():
                done(finished.result())

        command.add_done_callback(on_finished)

    return task


def load_git_status(
    path: str,
    callback: StatusCallback,
    *,
    show_ignored: bool = True,
    loop: asyncio.AbstractEventLoop,
) -> None:
    """Query git for ``path`` and hand the parsed :data:`StatusMap` to ``callback``.

    ``callback`` receives ``None`` when ``path`` no longer exists or git exits
    with a non-zero status (for example outside a repository). All callbacks
    run on ``loop``.
    """

    def on_results(results: Tuple[Optional[CommandResult], ...]) -> None:
        result = results[0]
        if result is None or result.code != 0:
            logger.debug(
                "git status failed in %s (exit %s)", path, None if result is None else result.code
            )
            callback(None)
            return
        callback(parse_git_status(result.stdout))

    def on_stat(future: "asyncio.Future[os.stat_result]") -> None:
        if future.cancelled():
            callback(None)
            return
        error = future.exception()
        if error is not None:
            logger.debug("Skipping git status for %s: %s", path, error)
            callback(None)
            return
        run_concurrently([_status_task(path, show_ignored, loop)], on_results)

    stat_future = loop.run_in_executor(None, os.stat, path)
    stat_future.add_done_callback(on_stat)


async def fetch_git_status(path: str, *, show_ignored: bool = True) -> Optional[StatusMap]:
    """Coroutine form of :func:`load_git_status`."""
    loop = asyncio.get_running_loop()
    future: "asyncio.Future[Optional[StatusMap]]" = loop.create_future()
    load_git_status(path, future.set_result, show_ignored=show_ignored, loop=loop)
    return await future


__all__ = [
    "COMMAND_NOT_FOUND",
    "CommandResult",
    "LISTING_SCHEME",
    "fetch_git_status",
    "load_git_status",
    "resolve_buffer_path",
    "run_command",
]
