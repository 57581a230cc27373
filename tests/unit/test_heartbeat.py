"""Unit tests for the heartbeat emitter."""

from __future__ import annotations

import asyncio
import time

import pytest

from mcp_sse_gateway.heartbeat import Heartbeat
from mcp_sse_gateway.stream import PushStream

from conftest import drain


class TestHeartbeat:
    """Tests for Heartbeat start/stop and output."""

    @pytest.mark.asyncio
    async def test_writes_heartbeat_with_millisecond_timestamp(self) -> None:
        stream = PushStream()
        heartbeat = Heartbeat(stream, interval=0.01)
        before = int(time.time() * 1000)

        heartbeat.start()
        await asyncio.sleep(0.05)
        await heartbeat.stop()

        frames = await drain(stream)
        assert frames
        assert all(event == "heartbeat" for event, _ in frames)
        assert int(frames[0][1]) >= before

    @pytest.mark.asyncio
    async def test_stop_releases_task(self) -> None:
        heartbeat = Heartbeat(PushStream(), interval=60)
        heartbeat.start()
        assert heartbeat.running is True

        await heartbeat.stop()

        assert heartbeat.running is False

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self) -> None:
        heartbeat = Heartbeat(PushStream(), interval=60)
        heartbeat.start()

        await heartbeat.stop()
        await heartbeat.stop()

        assert heartbeat.running is False

    @pytest.mark.asyncio
    async def test_stop_without_start(self) -> None:
        heartbeat = Heartbeat(PushStream(), interval=60)
        await heartbeat.stop()
        assert heartbeat.running is False

    @pytest.mark.asyncio
    async def test_exits_when_stream_closes(self) -> None:
        stream = PushStream()
        heartbeat = Heartbeat(stream, interval=0.01)
        heartbeat.start()

        stream.close()
        await asyncio.sleep(0.05)

        assert heartbeat.running is False
        await heartbeat.stop()
