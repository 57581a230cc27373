"""MCP SSE Gateway.

JSON-RPC calls arrive as short HTTP POSTs; their results are pushed over a
long-lived Server-Sent Events stream, matched by session id and request id.
"""

from .app import create_app, create_gateway
from .client import GatewayClient
from .config import GatewayConfig
from .dispatcher import MethodDispatcher
from .errors import (
    EnvelopeRejected,
    GatewayError,
    RpcError,
    StreamClosedError,
    ToolNotFoundError,
)
from .gateway import CallReceipt, SessionGateway
from .registry import Session, StreamRegistry
from .tools import Tool, ToolRegistry, default_registry

__all__ = [
    "CallReceipt",
    "EnvelopeRejected",
    "GatewayClient",
    "GatewayConfig",
    "GatewayError",
    "MethodDispatcher",
    "RpcError",
    "Session",
    "SessionGateway",
    "StreamClosedError",
    "StreamRegistry",
    "Tool",
    "ToolNotFoundError",
    "ToolRegistry",
    "create_app",
    "create_gateway",
    "default_registry",
]
