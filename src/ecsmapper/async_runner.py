"""Drive the async mapping client from synchronous callers."""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Any, TypeVar

from ecsmapper.exceptions import AsyncExecutionError

if TYPE_CHECKING:
    from collections.abc import Coroutine

T = TypeVar("T")


def _run_in_background_thread(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion on a fresh event loop in a worker thread.

    Args:
        coro: The coroutine to run.

    Raises:
        AsyncExecutionError: If the coroutine raises an exception.

    Returns:
        The result of the coroutine.
    """
    outcome: dict[str, Any] = {}

    def _worker() -> None:
        try:
            outcome["value"] = asyncio.run(coro)
        except BaseException as exc:  # noqa: BLE001
            outcome["error"] = exc

    worker = threading.Thread(target=_worker, name="ecsmapper-async", daemon=True)
    worker.start()
    worker.join()

    if "error" in outcome:
        error = outcome["error"]
        raise AsyncExecutionError(result=error) from error
    return outcome["value"]


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine from sync code, even when an event loop is already running.

    Without a running loop the coroutine runs on `asyncio.run`. Inside a running loop it
    runs on a dedicated thread, and failures are wrapped in `AsyncExecutionError`.

    Args:
        coro: The coroutine to run.

    Returns:
        The result of the coroutine.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    return _run_in_background_thread(coro)
