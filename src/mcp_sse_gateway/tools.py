"""Tool registry - the operations callers can invoke through tools/call.

Architecture:
- A Tool pairs a descriptor (name, description, input schema) with a
  synchronous handler taking the call's ``arguments`` dict
- The registry is injected into the dispatcher; nothing here knows about
  sessions or streams

Usage:
    registry = ToolRegistry()

    @registry.register_function(
        "echo",
        "Echo the given text.",
        {"type": "object", "properties": {"text": {"type": "string"}}},
    )
    def echo(arguments):
        return arguments.get("text", "")
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .errors import ToolNotFoundError
from .types import ToolDescriptor

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], Any]


@dataclass
class Tool:
    """A named, invocable operation."""

    name: str
    description: str
    handler: ToolHandler
    input_schema: dict[str, Any] = field(default_factory=lambda: {"type": "object"})

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema,
        )


class ToolRegistry:
    """Name-keyed collection of tools, kept in registration order."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> Tool:
        """Register a tool.

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool {tool.name}")
        return tool

    def register_function(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any] | None = None,
    ) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator form of register()."""

        def decorator(handler: ToolHandler) -> ToolHandler:
            self.register(
                Tool(
                    name=name,
                    description=description,
                    handler=handler,
                    input_schema=input_schema or {"type": "object"},
                )
            )
            return handler

        return decorator

    def list(self) -> list[ToolDescriptor]:
        """Descriptors for every registered tool."""
        return [tool.descriptor() for tool in self._tools.values()]

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def invoke(self, name: Any, arguments: dict[str, Any]) -> Any:
        """Run a tool synchronously and return its raw result.

        Raises:
            ToolNotFoundError: If no tool is registered under ``name``
        """
        tool = self._tools.get(name) if isinstance(name, str) else None
        if tool is None:
            raise ToolNotFoundError(name)
        return tool.handler(arguments)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


# =============================================================================
# Built-in tools
# =============================================================================


ADD_NUMBERS_TOOL = "addNumbersTool"


def add_numbers(arguments: dict[str, Any]) -> str:
    """Sum ``a`` and ``b``; a missing or falsy operand counts as 0."""
    a = arguments.get("a") or 0
    b = arguments.get("b") or 0
    return f"Sum of {a} + {b} = {a + b}"


def default_registry() -> ToolRegistry:
    """Create a registry holding the built-in tools."""
    registry = ToolRegistry()
    registry.register(
        Tool(
            name=ADD_NUMBERS_TOOL,
            description="Adds two numbers 'a' and 'b' and returns their sum.",
            handler=add_numbers,
            input_schema={
                "type": "object",
                "properties": {
                    "a": {"type": "number"},
                    "b": {"type": "number"},
                },
                "required": ["a", "b"],
            },
        )
    )
    return registry
