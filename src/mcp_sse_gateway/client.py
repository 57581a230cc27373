"""Client for the gateway.

Opens the push stream, waits for the endpoint announcement, then posts
calls and matches push-stream responses to them by id.

Usage:
    async with GatewayClient("http://localhost:4000") as client:
        await client.request("initialize")
        tools = await client.request("tools/list")
"""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import json
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import GatewayError, RpcError
from .stream import ENDPOINT_EVENT, HEARTBEAT_EVENT, MESSAGE_EVENT
from .types import JSONRPC_VERSION

logger = logging.getLogger(__name__)


@dataclass
class SseEvent:
    """One parsed server-sent event."""

    event: str
    data: str


async def iter_sse(lines: AsyncIterator[str]) -> AsyncIterator[SseEvent]:
    """Parse server-sent event framing.

    Handles:
    - ``event:`` names (default ``message``)
    - Multi-line ``data:``
    - Comment lines starting with ``:``

    An event without a terminating blank line is discarded.
    """
    event: str | None = None
    data: list[str] = []

    async for line in lines:
        if not line:
            if event is not None or data:
                yield SseEvent(event=event or MESSAGE_EVENT, data="\n".join(data))
            event = None
            data = []
            continue
        if line.startswith(":"):
            continue

        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "event":
            event = value
        elif name == "data":
            data.append(value)


class GatewayClient:
    """Async client correlating push-stream responses to posted calls."""

    def __init__(
        self,
        base_url: str,
        sse_path: str = "/sse-cursor",
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url
        self.sse_path = sse_path
        self.timeout = timeout
        self.endpoint: str | None = None

        self._client: httpx.AsyncClient | None = None
        self._response: httpx.Response | None = None
        self._reader: asyncio.Task[None] | None = None
        self._endpoint_future: asyncio.Future[str] | None = None
        self._pending: dict[int, asyncio.Future[dict[str, Any]]] = {}
        self._ids = itertools.count(1)

    async def __aenter__(self) -> GatewayClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def connect(self) -> str:
        """Open the push stream and wait for the endpoint event.

        Returns:
            The endpoint path calls are posted to
        """
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, read=None),  # No read timeout for SSE
        )
        self._response = await self._client.send(
            self._client.build_request("GET", self.sse_path),
            stream=True,
        )
        self._response.raise_for_status()

        self._endpoint_future = asyncio.get_running_loop().create_future()
        self._reader = asyncio.create_task(self._read_loop(self._response))
        self.endpoint = await asyncio.wait_for(self._endpoint_future, timeout=self.timeout)
        logger.info(f"Connected to {self.base_url}, endpoint {self.endpoint}")
        return self.endpoint

    async def request(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Post a call and wait for its response on the push stream.

        Raises:
            RpcError: If the call is rejected or answered with an error
        """
        request_id = next(self._ids)
        future: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future

        try:
            await self._post(
                {
                    "jsonrpc": JSONRPC_VERSION,
                    "id": request_id,
                    "method": method,
                    "params": params or {},
                }
            )
            payload = await asyncio.wait_for(future, timeout=self.timeout)
        finally:
            self._pending.pop(request_id, None)

        if "error" in payload:
            error = payload["error"]
            raise RpcError(error.get("code", 0), error.get("message", ""), error.get("data"))
        return payload.get("result")

    async def notify(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Post a call that expects no push-stream response.

        Returns:
            The synchronous acknowledgment
        """
        message: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
        if params is not None:
            message["params"] = params
        return await self._post(message)

    async def close(self) -> None:
        """Close the push stream and the HTTP client."""
        if self._reader is not None:
            self._reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader
            self._reader = None
        if self._response is not None:
            await self._response.aclose()
            self._response = None
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post(self, message: dict[str, Any]) -> dict[str, Any]:
        if self._client is None or self.endpoint is None:
            raise GatewayError("Not connected. Call 'connect' first.")

        response = await self._client.post(self.endpoint, json=message)
        if response.status_code != 200:
            raise GatewayError(f"Call rejected with HTTP {response.status_code}: {response.text}")

        ack = response.json()
        if "error" in ack:
            error = ack["error"]
            raise RpcError(error.get("code", 0), error.get("message", ""), error.get("data"))
        return ack

    async def _read_loop(self, response: httpx.Response) -> None:
        try:
            async for event in iter_sse(response.aiter_lines()):
                self._handle_event(event)
        except httpx.HTTPError as e:
            logger.warning(f"SSE connection lost: {e}")
        finally:
            error = ConnectionError("SSE stream closed")
            if self._endpoint_future is not None and not self._endpoint_future.done():
                self._endpoint_future.set_exception(error)
            for future in self._pending.values():
                if not future.done():
                    future.set_exception(error)

    def _handle_event(self, event: SseEvent) -> None:
        """Route one push event."""
        if event.event == ENDPOINT_EVENT:
            if self._endpoint_future is not None and not self._endpoint_future.done():
                self._endpoint_future.set_result(event.data)
            return

        if event.event == HEARTBEAT_EVENT:
            logger.debug(f"Heartbeat {event.data}")
            return

        if event.event != MESSAGE_EVENT:
            logger.debug(f"Ignoring SSE event {event.event}")
            return

        try:
            payload = json.loads(event.data)
        except json.JSONDecodeError:
            logger.warning(f"Failed to parse SSE data: {event.data}")
            return

        request_id = payload.get("id")
        future = self._pending.get(request_id) if isinstance(request_id, int) else None
        if future is None:
            logger.warning(f"Received response for unknown request: {request_id!r}")
            return
        if not future.done():
            future.set_result(payload)
