"""Fire-and-forget task scheduling for the dispatch pipeline."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Optional

LOGGER = logging.getLogger(__name__)


class TaskSpawner:
    """Schedule independent tasks on the running loop.

    `spawn` returns nothing: no caller ever waits on a single task. The
    spawner keeps strong references until each task finishes (the loop only
    holds weak ones) and logs anything a task raised.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> None:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error(
                "Task %s failed", task.get_name(), exc_info=(type(exc), exc, exc.__traceback__)
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait until every task, including ones spawned meanwhile, is done."""

        while self._tasks:
            await asyncio.wait(list(self._tasks))
