"""Supervision of asynchronous cache transfers.

A transfer may leave work behind that fails after its awaiting call has
already returned or raised. Such failures reach the event loop's
exception handler instead of the caller; ``TransferSupervisor`` routes
them to the warning log for as long as it is active.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

ExceptionHandler = Callable[[asyncio.AbstractEventLoop, dict], Any]


class TransferSupervisor:
    """Async context manager that downgrades unhandled loop errors to warnings."""

    def __init__(self, warn: Callable[[str], None]) -> None:
        self._warn = warn
        self._loop: asyncio.AbstractEventLoop | None = None
        self._previous: Optional[ExceptionHandler] = None

    @property
    def active(self) -> bool:
        return self._loop is not None

    async def __aenter__(self) -> "TransferSupervisor":
        self._loop = asyncio.get_running_loop()
        self._previous = self._loop.get_exception_handler()
        self._loop.set_exception_handler(self._handle)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._loop is not None:
            self._loop.set_exception_handler(self._previous)
        self._loop = None

    async def run(self, operation: Awaitable[T]) -> T:
        """Await ``operation`` as a task scheduled on the supervised loop."""
        task = asyncio.ensure_future(operation)
        return await task

    def _handle(self, loop: asyncio.AbstractEventLoop, context: dict) -> None:
        exception = context.get("exception")
        message = str(exception) if exception is not None else str(context.get("message", ""))
        logger.debug("Unhandled error during cache transfer: %s", context.get("message"))
        self._warn(message)


__all__ = ["TransferSupervisor"]
