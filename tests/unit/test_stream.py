"""Unit tests for the push stream and SSE framing."""

from __future__ import annotations

import json

import pytest

from mcp_sse_gateway.errors import StreamClosedError
from mcp_sse_gateway.stream import PushStream, format_sse

from conftest import drain


class TestFormatSse:
    """Tests for format_sse()."""

    def test_single_line(self) -> None:
        assert format_sse("endpoint", "/message?sessionId=abc") == (
            "event: endpoint\ndata: /message?sessionId=abc\n\n"
        )

    def test_multi_line_data(self) -> None:
        """Each data line gets its own prefix."""
        assert format_sse("message", "a\nb") == "event: message\ndata: a\ndata: b\n\n"


class TestPushStream:
    """Tests for PushStream ordering and closing."""

    @pytest.mark.asyncio
    async def test_frames_keep_send_order(self) -> None:
        stream = PushStream()
        await stream.send("endpoint", "/message?sessionId=x")
        await stream.send_json({"id": 1})
        await stream.send("heartbeat", "123")

        frames = await drain(stream)

        assert [event for event, _ in frames] == ["endpoint", "message", "heartbeat"]
        assert json.loads(frames[1][1]) == {"id": 1}

    @pytest.mark.asyncio
    async def test_send_json_is_compact(self) -> None:
        stream = PushStream()
        await stream.send_json({"jsonrpc": "2.0", "id": 7})

        frame = await stream.get(timeout=0.1)

        assert frame == 'event: message\ndata: {"jsonrpc":"2.0","id":7}\n\n'

    @pytest.mark.asyncio
    async def test_send_after_close_raises(self) -> None:
        stream = PushStream()
        stream.close()

        with pytest.raises(StreamClosedError):
            await stream.send("message", "{}")

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        stream = PushStream()
        stream.close()
        stream.close()

        assert stream.closed is True
        assert await stream.get(timeout=0.1) is None

    @pytest.mark.asyncio
    async def test_frames_iterator_ends_on_close(self) -> None:
        """Frames queued before close are still delivered."""
        stream = PushStream()
        await stream.send("message", "1")
        await stream.send("message", "2")
        stream.close()

        frames = [frame async for frame in stream.frames()]

        assert len(frames) == 2
