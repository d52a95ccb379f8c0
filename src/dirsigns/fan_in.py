"""Run several callback-style operations and continue once all have finished."""

from __future__ import annotations

from typing import Any, Callable, List, Sequence, Set

CompletionHandle = Callable[..., None]
Task = Callable[[CompletionHandle], None]


class FanInError(RuntimeError):
    """Raised when a task reports completion more than once."""


def run_concurrently(tasks: Sequence[Task], callback: Callable[..., None]) -> None:
    """Launch every task and call ``callback`` once the last one completes.

    Each task receives a one-shot completion handle ``done(result=None, *extra)``.
    ``result`` lands in the slot matching the task's launch position, so the
    tuple handed to ``callback`` is in launch order whatever order the tasks
    finish in. The trailing ``extra`` arguments of the task that completes
    last are passed through to ``callback`` after the results.

    Completions must be delivered on the thread that owns the event loop;
    the shared slots are not locked. A task that never calls its handle
    stalls the continuation forever.
    """
    tasks = list(tasks)
    if not tasks:
        callback(())
        return

    results: List[Any] = [None] * len(tasks)
    pending: Set[int] = set(range(len(tasks)))

    def handle_for(position: int) -> CompletionHandle:
        def done(result: Any = None, *extra: Any) -> None:
            if position not in pending:
                raise FanInError(f"Task {position} completed more than once.")
            pending.discard(position)
            results[position] = result
            if not pending:
                callback(tuple(results), *extra)

        return done

    for position, task in enumerate(tasks):
        task(handle_for(position))


__all__ = ["CompletionHandle", "FanInError", "Task", "run_concurrently"]
