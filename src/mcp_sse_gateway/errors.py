"""Gateway exception types."""

from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """Base class for gateway errors."""


class EnvelopeRejected(GatewayError):
    """An inbound call failed envelope validation.

    Carries the caller's correlation id (None when it had none) so the
    synchronous error can still echo it.
    """

    def __init__(self, request_id: Any = None, reason: str = "Invalid JSON-RPC request") -> None:
        super().__init__(reason)
        self.request_id = request_id
        self.reason = reason


class StreamClosedError(GatewayError):
    """A write was attempted on a push stream that has already closed."""


class ToolNotFoundError(GatewayError):
    """No tool is registered under the requested name."""

    def __init__(self, name: Any) -> None:
        super().__init__(f"No such tool '{name}'")
        self.name = name


class RpcError(GatewayError):
    """A JSON-RPC error returned to a client, synchronously or on the stream."""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.message = message
        self.data = data
