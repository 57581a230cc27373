"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from mcp_sse_gateway.app import create_gateway
from mcp_sse_gateway.config import GatewayConfig
from mcp_sse_gateway.gateway import SessionGateway
from mcp_sse_gateway.stream import PushStream


@pytest.fixture
def config() -> GatewayConfig:
    """Config with a heartbeat slow enough to stay out of the way."""
    return GatewayConfig(heartbeat_interval=60.0)


@pytest.fixture
def gateway(config: GatewayConfig) -> SessionGateway:
    return create_gateway(config)


def parse_frame(frame: str) -> tuple[str, str]:
    """Split one SSE frame into (event, data)."""
    assert frame.endswith("\n\n")
    event = ""
    data: list[str] = []
    for line in frame.strip("\n").split("\n"):
        name, _, value = line.partition(": ")
        if name == "event":
            event = value
        elif name == "data":
            data.append(value)
    return event, "\n".join(data)


async def drain(stream: PushStream, timeout: float = 0.05) -> list[tuple[str, str]]:
    """Read every frame currently queued on a stream."""
    frames = []
    while True:
        try:
            frame = await stream.get(timeout=timeout)
        except asyncio.TimeoutError:
            return frames
        if frame is None:
            return frames
        frames.append(parse_frame(frame))


async def drain_messages(stream: PushStream) -> list[dict[str, Any]]:
    """Read queued frames and decode the ``message`` events."""
    return [json.loads(data) for event, data in await drain(stream) if event == "message"]
