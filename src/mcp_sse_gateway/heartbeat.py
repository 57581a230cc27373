"""Periodic keep-alive writer for an open push stream."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time

from .errors import StreamClosedError
from .stream import HEARTBEAT_EVENT, PushStream

logger = logging.getLogger(__name__)

DEFAULT_HEARTBEAT_INTERVAL = 10.0


class Heartbeat:
    """Writes a ``heartbeat`` event carrying the current time in milliseconds.

    The task ends on its own once the stream closes; ``stop()`` cancels it
    and may be called any number of times.
    """

    def __init__(self, stream: PushStream, interval: float = DEFAULT_HEARTBEAT_INTERVAL) -> None:
        self._stream = stream
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the heartbeat task."""
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel the heartbeat task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while not self._stream.closed:
            await asyncio.sleep(self._interval)
            try:
                await self._stream.send(HEARTBEAT_EVENT, str(int(time.time() * 1000)))
            except StreamClosedError:
                break
        logger.debug("Heartbeat stopped: stream closed")
