"""Detached execution of feedback generation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Set

logger = logging.getLogger(__name__)


class FeedbackDispatcher:
    """Run feedback coroutines as independent tasks.

    Callers get nothing back from ``dispatch``; the dispatcher alone holds the
    task until it finishes.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, job: Awaitable[Any], *, name: str | None = None) -> None:
        task = asyncio.ensure_future(job)
        if name:
            task.set_name(name)
        self._tasks.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background feedback task %s failed", task.get_name(), exc_info=exc)

    async def drain(self) -> None:
        """Wait for every outstanding task; used at shutdown and in tests."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


__all__ = ["FeedbackDispatcher"]
