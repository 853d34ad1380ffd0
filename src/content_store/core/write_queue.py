"""Single-consumer FIFO queue that runs store mutations one at a time."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from content_store.errors import WriteQueueClosedError
from content_store.utils.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")

Job = Callable[[], Awaitable[Any]]


class WriteQueue:
    """
    Serializes mutations through one worker task.

    Jobs run in submission order and never overlap. A failing job only
    fails its own caller; the worker moves on to the next job.
    """

    def __init__(self, name: str = "store"):
        self.name = name
        self._queue: asyncio.Queue[tuple[str, Job, asyncio.Future]] | None = None
        self._worker: asyncio.Task | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of jobs waiting to run."""
        return self._queue.qsize() if self._queue is not None else 0

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_worker(self) -> asyncio.Queue:
        loop = asyncio.get_running_loop()
        if self._worker is None or self._worker.done() or self._loop is not loop:
            self._loop = loop
            self._queue = asyncio.Queue()
            self._worker = loop.create_task(self._drain(self._queue))
        return self._queue

    async def submit(self, job: Callable[[], Awaitable[T]], *, label: str = "write") -> T:
        """Queue ``job`` and wait for its result."""
        if self._closed:
            raise WriteQueueClosedError(f"Write queue '{self.name}' is closed")
        queue = self._ensure_worker()
        future = asyncio.get_running_loop().create_future()
        queue.put_nowait((label, job, future))
        return await future

    async def _drain(self, queue: asyncio.Queue) -> None:
        while True:
            label, job, future = await queue.get()
            try:
                if future.cancelled():
                    logger.debug("Skipping cancelled %s on %s", label, self.name)
                    continue
                result = await job()
            except Exception as exc:
                logger.error("Queued %s on %s failed: %s", label, self.name, exc)
                if not future.done():
                    future.set_exception(exc)
            else:
                if not future.done():
                    future.set_result(result)
            finally:
                queue.task_done()

    async def join(self) -> None:
        """Wait until every queued job has finished."""
        if self._queue is not None and self._loop is asyncio.get_running_loop():
            await self._queue.join()

    async def aclose(self) -> None:
        """Finish queued jobs, then stop the worker. Further submits fail."""
        self._closed = True
        await self.join()
        worker = self._worker
        if worker is not None and not worker.done() and self._loop is asyncio.get_running_loop():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass
        self._worker = None
