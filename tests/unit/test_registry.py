"""Unit tests for the stream registry."""

from __future__ import annotations

import asyncio

import pytest

from mcp_sse_gateway.registry import StreamRegistry
from mcp_sse_gateway.stream import PushStream


class TestStreamRegistry:
    """Tests for open/lookup/close/mark_initialized."""

    @pytest.mark.asyncio
    async def test_open_assigns_distinct_ids(self) -> None:
        registry = StreamRegistry()

        first = await registry.open(PushStream())
        second = await registry.open(PushStream())

        assert first.session_id != second.session_id
        assert await registry.lookup(first.session_id) is first
        assert await registry.lookup(second.session_id) is second
        assert len(registry) == 2

    @pytest.mark.asyncio
    async def test_new_session_is_not_initialized(self) -> None:
        registry = StreamRegistry()
        session = await registry.open(PushStream())
        assert session.initialized is False

    @pytest.mark.asyncio
    async def test_lookup_unknown_returns_none(self) -> None:
        registry = StreamRegistry()
        assert await registry.lookup("missing") is None

    @pytest.mark.asyncio
    async def test_close_removes_and_clears_stream(self) -> None:
        registry = StreamRegistry()
        stream = PushStream()
        session = await registry.open(stream)

        closed = await registry.close(session.session_id)

        assert closed is session
        assert session.stream is None
        assert stream.closed is True
        assert session.session_id not in registry
        assert await registry.lookup(session.session_id) is None

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        registry = StreamRegistry()
        session = await registry.open(PushStream())

        await registry.close(session.session_id)

        assert await registry.close(session.session_id) is None
        assert await registry.close("never-existed") is None

    @pytest.mark.asyncio
    async def test_mark_initialized(self) -> None:
        registry = StreamRegistry()
        session = await registry.open(PushStream())

        await registry.mark_initialized(session.session_id)
        await registry.mark_initialized(session.session_id)

        assert session.initialized is True

    @pytest.mark.asyncio
    async def test_mark_initialized_absent_is_noop(self) -> None:
        registry = StreamRegistry()
        await registry.mark_initialized("missing")
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_concurrent_open_and_close(self) -> None:
        registry = StreamRegistry()

        sessions = await asyncio.gather(*(registry.open(PushStream()) for _ in range(50)))
        assert len({s.session_id for s in sessions}) == 50

        await asyncio.gather(*(registry.close(s.session_id) for s in sessions[:25]))

        assert len(registry) == 25
        assert set(await registry.session_ids()) == {s.session_id for s in sessions[25:]}
