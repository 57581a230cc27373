"""Server-push stream for a single session.

Frames are queued in the order they are sent and drained by the SSE
response generator. One consumer per stream.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from .errors import StreamClosedError

logger = logging.getLogger(__name__)

# Event names
ENDPOINT_EVENT = "endpoint"
MESSAGE_EVENT = "message"
HEARTBEAT_EVENT = "heartbeat"


def format_sse(event: str, data: str) -> str:
    """Frame one server-sent event.

    Multi-line data is split across several ``data:`` lines.
    """
    lines = [f"event: {event}"]
    lines.extend(f"data: {line}" for line in data.split("\n"))
    return "\n".join(lines) + "\n\n"


class PushStream:
    """Ordered, append-only, write-only channel to one client."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, event: str, data: str) -> None:
        """Append a raw event.

        Raises:
            StreamClosedError: If the stream has been closed
        """
        if self._closed:
            raise StreamClosedError(f"Cannot write '{event}' event to a closed stream")
        await self._queue.put(format_sse(event, data))

    async def send_json(self, payload: dict[str, Any], event: str = MESSAGE_EVENT) -> None:
        """Append a JSON-encoded protocol event."""
        await self.send(event, json.dumps(payload, separators=(",", ":")))

    def close(self) -> None:
        """Close the stream and wake the consumer. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def get(self, timeout: float | None = None) -> str | None:
        """Wait for the next frame.

        Returns None once the stream is closed and drained.

        Raises:
            TimeoutError: If no frame arrives within ``timeout`` seconds
        """
        if timeout is None:
            return await self._queue.get()
        return await asyncio.wait_for(self._queue.get(), timeout=timeout)

    async def frames(self) -> AsyncIterator[str]:
        """Yield frames until the stream is closed."""
        while True:
            frame = await self.get()
            if frame is None:
                break
            yield frame
