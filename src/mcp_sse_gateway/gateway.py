"""Session gateway - the public boundary of the transport.

Opens push streams, accepts call envelopes, and tears streams down on
disconnect. A call produces two separate outputs:

1. A CallReceipt, returned synchronously to the submitting exchange
2. Zero or more responses written later to the session's push stream by
   ``dispatch()``

The HTTP layer must deliver (1) before running (2).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .dispatcher import MethodDispatcher
from .errors import EnvelopeRejected
from .heartbeat import DEFAULT_HEARTBEAT_INTERVAL, Heartbeat
from .registry import Session, StreamRegistry
from .stream import ENDPOINT_EVENT, PushStream
from .types import CallEnvelope, JsonRpcError, JsonRpcErrorCode, JsonRpcResponse
from .validation import validate_envelope

logger = logging.getLogger(__name__)

MISSING_SESSION_ID = "Missing sessionId in ?sessionId=..."
UNKNOWN_SESSION = "No SSE session with that sessionId"


@dataclass
class CallReceipt:
    """Synchronous outcome of submitting a call."""

    status_code: int
    body: dict[str, Any]
    envelope: CallEnvelope | None = None

    @property
    def accepted(self) -> bool:
        """True when the call passed validation and awaits dispatch."""
        return self.envelope is not None


class SessionGateway:
    """Coordinates the registry, heartbeats, validation and dispatch."""

    def __init__(
        self,
        registry: StreamRegistry,
        dispatcher: MethodDispatcher,
        message_path: str = "/message",
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
    ) -> None:
        self._registry = registry
        self._dispatcher = dispatcher
        self._message_path = message_path
        self._heartbeat_interval = heartbeat_interval

    @property
    def registry(self) -> StreamRegistry:
        return self._registry

    def endpoint_for(self, session_id: str) -> str:
        """The path+query a client posts calls to for this session."""
        return f"{self._message_path}?sessionId={session_id}"

    # =========================================================================
    # Stream lifecycle
    # =========================================================================

    async def open_stream(self) -> Session:
        """Register a new push stream, announce its endpoint, start the heartbeat."""
        stream = PushStream()
        session = await self._registry.open(stream)

        # The endpoint event must be the first frame on the stream
        await stream.send(ENDPOINT_EVENT, self.endpoint_for(session.session_id))

        session.heartbeat = Heartbeat(stream, self._heartbeat_interval)
        session.heartbeat.start()
        return session

    async def disconnect(self, session_id: str) -> None:
        """Stop the heartbeat and remove the session. Idempotent."""
        session = await self._registry.close(session_id)
        if session is None:
            return
        if session.heartbeat is not None:
            await session.heartbeat.stop()
            session.heartbeat = None
        logger.info(f"SSE closed for session {session_id}")

    async def shutdown(self) -> None:
        """Disconnect every open session."""
        session_ids = await self._registry.session_ids()
        for session_id in session_ids:
            await self.disconnect(session_id)
        if session_ids:
            logger.info(f"Closed {len(session_ids)} session(s) on shutdown")

    # =========================================================================
    # Calls
    # =========================================================================

    async def receive_call(self, session_id: str | None, raw: Any) -> CallReceipt:
        """Validate a call and build its synchronous acknowledgment.

        Args:
            session_id: Session addressed by the call, None if not given
            raw: Decoded request body, None if absent or unparseable

        Returns:
            400 receipt if ``session_id`` is missing, 404 if unknown,
            otherwise 200 with either an ack or a -32600 error body. Only an
            ack carries an envelope for ``dispatch()``.
        """
        if not session_id:
            return CallReceipt(status_code=400, body={"error": MISSING_SESSION_ID})

        session = await self._registry.lookup(session_id)
        if session is None:
            logger.warning(f"Call for unknown session {session_id}")
            return CallReceipt(status_code=404, body={"error": UNKNOWN_SESSION})

        try:
            envelope = validate_envelope(raw)
        except EnvelopeRejected as e:
            logger.warning(f"Rejected call for session {session_id}: {e.reason}")
            response = JsonRpcResponse(
                id=e.request_id,
                error=JsonRpcError(code=JsonRpcErrorCode.INVALID_REQUEST, message=e.reason),
            )
            return CallReceipt(status_code=200, body=response.to_wire())

        ack = JsonRpcResponse(id=envelope.id, result={"ack": f"Received {envelope.method}"})
        return CallReceipt(status_code=200, body=ack.to_wire(), envelope=envelope)

    async def dispatch(self, session_id: str, envelope: CallEnvelope) -> int:
        """Run the asynchronous follow-up for an acknowledged call."""
        return await self._dispatcher.dispatch(session_id, envelope)
