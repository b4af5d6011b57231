# Rev 0.2.0
# cyfrboard – ViewScope: asyncio tasks bound to one view's lifetime
from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Dict, Hashable, Set

log = logging.getLogger(__name__)


class ViewScope:
    """
    Tracks the coroutines a view model starts so they can all be cancelled when
    its view goes away. A response arriving after close() is never applied.
    """

    def __init__(self, name: str = "view") -> None:
        self._name = name
        self._tasks: Set[asyncio.Task] = set()
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        if self._closed:
            coro.close()
            raise RuntimeError(f"{self._name}: scope is closed")
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def serial(self, key: Hashable) -> asyncio.Lock:
        """Lock that orders remote writes sharing the same key (e.g. one task's assignees)."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def pending(self) -> int:
        return len(self._tasks)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            log.debug("%s: cancelled %d pending task(s)", self._name, len(self._tasks))

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("%s: background task failed", self._name, exc_info=exc)
