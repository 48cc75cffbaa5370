"""Helpers to drive the async core from sync or async contexts."""

from __future__ import annotations

import asyncio
import threading
from queue import Queue
from typing import TYPE_CHECKING, Any

from pdfreshape.exceptions import AsyncExecutionError, PackageError

if TYPE_CHECKING:
    from collections.abc import Coroutine


def _unwrap[T](result: T | BaseException) -> T:
    """Return a coroutine result or raise its failure.

    Package errors are re-raised unchanged so callers can tell them apart; any
    other failure is wrapped in `AsyncExecutionError`.

    Args:
        result: Value or exception produced by the coroutine.

    Raises:
        PackageError: If the coroutine raised a package error.
        AsyncExecutionError: If the coroutine raised any other exception.

    Returns:
        The coroutine result.
    """
    if isinstance(result, PackageError):
        raise result
    if isinstance(result, Exception):
        raise AsyncExecutionError(result=result) from result
    if isinstance(result, BaseException):
        raise result
    return result


def _run_in_background_thread[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine in a dedicated thread with its own event loop.

    Args:
        coro: The coroutine to run.

    Returns:
        The result of the coroutine.
    """
    output: Queue[T | BaseException] = Queue(maxsize=1)

    def _runner() -> None:
        try:
            output.put(asyncio.run(coro))
        except BaseException as exc:
            output.put(exc)

    thread = threading.Thread(target=_runner, daemon=True)
    thread.start()
    thread.join()
    return _unwrap(output.get())


def run_async[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine from both sync and async contexts.

    From a sync context the coroutine runs on a fresh event loop. From inside a
    running loop it runs to completion on a dedicated thread with its own loop.

    Args:
        coro: The coroutine to run.

    Returns:
        The result of the coroutine.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        try:
            return asyncio.run(coro)
        except Exception as exc:  # noqa: BLE001
            return _unwrap(exc)

    return _run_in_background_thread(coro)
