"""Wire type definitions.

JSON-RPC 2.0 envelopes and the MCP result shapes emitted on the push stream.

Note: Field names use camelCase to match the MCP wire format.
This is required for protocol compatibility - do not change to snake_case.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

# Protocol constants
JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"


# =============================================================================
# JSON-RPC 2.0 Base Types
# =============================================================================


class CallEnvelope(BaseModel):
    """One validated inbound call.

    ``id`` is opaque: it is echoed back untouched and may be absent (None)
    for notifications.
    """

    jsonrpc: Literal["2.0"] = "2.0"
    id: Any = None
    method: str
    params: Any = None


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any | None = None


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: Any = None
    result: Any | None = None
    error: JsonRpcError | None = None

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the wire.

        Unset ``result``/``error`` members are dropped, ``id`` never is.
        """
        data = self.model_dump(exclude_none=True)
        data["id"] = self.id
        return data


class JsonRpcErrorCode:
    """JSON-RPC 2.0 error codes used by the gateway."""

    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601


# =============================================================================
# Capability Types
# =============================================================================


class ToolsCapability(BaseModel):
    listChanged: bool = True


class ResourcesCapability(BaseModel):
    subscribe: bool = True
    listChanged: bool = True


class PromptsCapability(BaseModel):
    listChanged: bool = True


class ServerCapabilities(BaseModel):
    """Capabilities advertised in the ``initialize`` result."""

    tools: ToolsCapability = Field(default_factory=ToolsCapability)
    resources: ResourcesCapability = Field(default_factory=ResourcesCapability)
    prompts: PromptsCapability = Field(default_factory=PromptsCapability)
    logging: dict[str, Any] = Field(default_factory=dict)


class ServerInfo(BaseModel):
    """Information about the server."""

    name: str
    version: str


class InitializeResult(BaseModel):
    """Result of the initialize method."""

    protocolVersion: str = PROTOCOL_VERSION
    capabilities: ServerCapabilities = Field(default_factory=ServerCapabilities)
    serverInfo: ServerInfo


# =============================================================================
# Tools
# =============================================================================


class ToolDescriptor(BaseModel):
    """Describes one invocable tool."""

    name: str
    description: str
    inputSchema: dict[str, Any] = Field(default_factory=lambda: {"type": "object"})


class ListToolsResult(BaseModel):
    """Result of tools/list."""

    tools: list[ToolDescriptor]
    count: int


class TextContent(BaseModel):
    """Text content block."""

    type: Literal["text"] = "text"
    text: str


class CallToolResult(BaseModel):
    """Result of tools/call."""

    content: list[TextContent]
    isError: bool | None = None
