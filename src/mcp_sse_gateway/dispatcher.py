"""Method dispatcher - protocol logic for validated calls.

Resolves a call into zero or more responses and writes them to the
caller's push stream.

Correlation:
    Every response carries the envelope's ``id`` exactly as received.
    Clients drop any response whose id they did not issue.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from enum import Enum
from typing import Any

from .errors import StreamClosedError, ToolNotFoundError
from .registry import StreamRegistry
from .tools import ToolRegistry
from .types import (
    CallEnvelope,
    CallToolResult,
    InitializeResult,
    JsonRpcError,
    JsonRpcErrorCode,
    JsonRpcResponse,
    ListToolsResult,
    ServerInfo,
    TextContent,
)

logger = logging.getLogger(__name__)


class Method(str, Enum):
    """Methods handled by the dispatcher."""

    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    NOTIFICATIONS_INITIALIZED = "notifications/initialized"


class MethodDispatcher:
    """Routes validated calls to protocol handlers.

    Usage:
        dispatcher = MethodDispatcher(registry, tools, server_info)

        # Resolve and write every response to the session's stream
        await dispatcher.dispatch(session_id, envelope)

    ``initialize`` may be called any number of times and no method is
    gated on it.
    """

    def __init__(
        self,
        registry: StreamRegistry,
        tools: ToolRegistry,
        server_info: ServerInfo,
    ) -> None:
        self._registry = registry
        self._tools = tools
        self._server_info = server_info

    async def dispatch(self, session_id: str, envelope: CallEnvelope) -> int:
        """Resolve a call and write its responses to the session's stream.

        A session or stream that has gone away is logged and the response
        dropped; nothing is retried or buffered.

        Returns:
            Number of responses written
        """
        written = 0
        async for response in self.handle(session_id, envelope):
            session = await self._registry.lookup(session_id)
            stream = session.stream if session is not None else None
            if stream is None:
                logger.warning(
                    f"No SSE stream for session {session_id}; "
                    f"dropping {envelope.method} response (id={envelope.id!r})"
                )
                continue
            try:
                await stream.send_json(response.to_wire())
            except StreamClosedError:
                logger.warning(
                    f"SSE stream closed for session {session_id}; "
                    f"dropping {envelope.method} response (id={envelope.id!r})"
                )
                continue
            written += 1
        return written

    async def handle(self, session_id: str, envelope: CallEnvelope) -> AsyncIterator[JsonRpcResponse]:
        """Resolve a call into the responses it produces.

        Yields:
            Responses correlated to the envelope's id
        """
        logger.info(f"Dispatching {envelope.method} (id={envelope.id!r}) for session {session_id}")

        match envelope.method:
            case Method.INITIALIZE.value:
                await self._registry.mark_initialized(session_id)
                yield self._result(envelope, self._initialize())

            case Method.TOOLS_LIST.value:
                descriptors = self._tools.list()
                result = ListToolsResult(tools=descriptors, count=len(descriptors))
                yield self._result(envelope, result.model_dump())

            case Method.TOOLS_CALL.value:
                yield self._tools_call(envelope)

            case Method.NOTIFICATIONS_INITIALIZED.value:
                logger.info(f"Client reported initialized for session {session_id}")

            case _:
                logger.warning(f"Unknown method: {envelope.method}")
                yield self._error(
                    envelope,
                    JsonRpcErrorCode.METHOD_NOT_FOUND,
                    f"Method '{envelope.method}' not recognized",
                )

    # =========================================================================
    # Handlers
    # =========================================================================

    def _initialize(self) -> dict[str, Any]:
        return InitializeResult(serverInfo=self._server_info).model_dump()

    def _tools_call(self, envelope: CallEnvelope) -> JsonRpcResponse:
        """Invoke a tool named in ``params.name`` with ``params.arguments``."""
        params = envelope.params if isinstance(envelope.params, dict) else {}
        name = params.get("name")
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            arguments = {}
        logger.info(f"tools/call name={name!r} arguments={arguments!r}")

        try:
            output = self._tools.invoke(name, arguments)
        except ToolNotFoundError as e:
            return self._error(envelope, JsonRpcErrorCode.METHOD_NOT_FOUND, str(e))
        except Exception as e:
            # Tool failures are results, not protocol errors
            logger.exception(f"Tool {name} failed: {e}")
            result = CallToolResult(content=[TextContent(text=str(e))], isError=True)
            return self._result(envelope, result.model_dump(exclude_none=True))

        text = output if isinstance(output, str) else _to_text(output)
        result = CallToolResult(content=[TextContent(text=text)])
        return self._result(envelope, result.model_dump(exclude_none=True))

    # =========================================================================
    # Response builders
    # =========================================================================

    @staticmethod
    def _result(envelope: CallEnvelope, result: Any) -> JsonRpcResponse:
        return JsonRpcResponse(id=envelope.id, result=result)

    @staticmethod
    def _error(envelope: CallEnvelope, code: int, message: str) -> JsonRpcResponse:
        return JsonRpcResponse(id=envelope.id, error=JsonRpcError(code=code, message=message))


def _to_text(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
