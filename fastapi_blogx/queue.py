"""FIFO request queue that spaces out calls to the remote API."""

import asyncio
from collections import deque
from collections.abc import Awaitable
from collections.abc import Callable
from logging import getLogger
from typing import Any

from fastapi_blogx.cache import get_response
from fastapi_blogx.exceptions import RequestQueueError

logger = getLogger(__name__)

DEFAULT_MIN_INTERVAL = 0.2


class RequestQueue:
    """Run submitted operations one at a time, in submission order.

    A single drain loop pops operations and waits ``min_interval`` seconds
    after each one, whether it succeeded or failed. The ``processing`` flag is
    checked and set without an await in between, so at most one drain loop
    exists per queue.
    """

    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.min_interval = min_interval
        self.sleep = sleep
        self._queue: deque[tuple[Callable[[], Any], asyncio.Future]] = deque()
        self._processing = False
        self._drain_task: asyncio.Task | None = None

    @property
    def processing(self) -> bool:
        return self._processing

    @property
    def pending(self) -> int:
        return len(self._queue)

    async def submit(self, operation: Callable[[], Any]) -> Any:
        """Queue ``operation`` and wait for its result."""
        future = asyncio.get_running_loop().create_future()
        self._queue.append((operation, future))
        if not self._processing:
            self._processing = True
            self._drain_task = asyncio.create_task(self._drain())
        return await future

    async def _drain(self) -> None:
        try:
            while self._queue:
                operation, future = self._queue.popleft()
                if future.cancelled():
                    continue
                try:
                    result = await get_response(operation)
                except asyncio.CancelledError:
                    future.cancel()
                    raise
                except Exception as exc:
                    if not future.done():
                        future.set_exception(exc)
                else:
                    if not future.done():
                        future.set_result(result)
                await self.sleep(self.min_interval)
        finally:
            self._processing = False
            while self._queue:
                _, future = self._queue.popleft()
                if not future.done():
                    future.set_exception(
                        RequestQueueError("Request queue stopped before running operation")
                    )
            logger.debug("Request queue drained")
