"""HTTP routes.

- GET  <sse_path>            - Open a push stream (SSE)
- GET  /sse                  - Alias for the push stream
- POST <message_path>        - Submit a JSON-RPC call (?sessionId=...)
- GET  /health               - Health check

The gateway is read from ``request.app.state.gateway``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from starlette.background import BackgroundTask
from starlette.requests import Request
from starlette.responses import JSONResponse, StreamingResponse
from starlette.routing import Route

from .config import GatewayConfig
from .gateway import SessionGateway

logger = logging.getLogger(__name__)

# Seconds between client-disconnect checks while the stream is idle
DISCONNECT_POLL_INTERVAL = 1.0


def _gateway(request: Request) -> SessionGateway:
    return request.app.state.gateway


async def sse_endpoint(request: Request) -> StreamingResponse:
    """Open a push stream.

    The first event names the endpoint to post calls to. The session is
    removed as soon as the client goes away.
    """
    gateway = _gateway(request)
    session = await gateway.open_stream()
    session_id = session.session_id
    stream = session.stream
    logger.info(f"SSE connected: session {session_id}")

    async def event_stream():
        try:
            while stream is not None:
                if await request.is_disconnected():
                    break
                try:
                    frame = await stream.get(timeout=DISCONNECT_POLL_INTERVAL)
                except TimeoutError:
                    continue
                if frame is None:
                    break
                yield frame
        finally:
            await gateway.disconnect(session_id)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )


async def message_endpoint(request: Request) -> JSONResponse:
    """Accept one call envelope and acknowledge it.

    The asynchronous follow-up runs as a background task, after the
    acknowledgment has been sent.
    """
    gateway = _gateway(request)
    session_id = request.query_params.get("sessionId")

    raw: Any = None
    body = await request.body()
    if body:
        try:
            raw = json.loads(body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Unparseable call body for session {session_id}: {e}")

    logger.debug(f"POST message: session={session_id} body={raw!r}")
    receipt = await gateway.receive_call(session_id, raw)

    background = None
    if receipt.envelope is not None:
        background = BackgroundTask(gateway.dispatch, session_id, receipt.envelope)

    return JSONResponse(receipt.body, status_code=receipt.status_code, background=background)


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint."""
    gateway = _gateway(request)
    return JSONResponse({"status": "ok", "sessions": len(gateway.registry)})


def build_routes(config: GatewayConfig) -> list[Route]:
    """Routes for the configured paths."""
    routes = [
        Route("/health", health_check, methods=["GET"]),
        Route(config.sse_path, sse_endpoint, methods=["GET"]),
        Route(config.message_path, message_endpoint, methods=["POST"]),
    ]
    if config.sse_path != "/sse":
        routes.append(Route("/sse", sse_endpoint, methods=["GET"]))
    return routes
